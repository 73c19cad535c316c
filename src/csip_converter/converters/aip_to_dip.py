"""AIP to DIP converter.

The DIP copies the AIP's descriptive and preservation metadata unchanged,
carries the whole AIP as its submission, and declares the E-ARK DIP profile.
It is built while its type is still AIP; the written manifest is then patched
to declare DIP before archiving.
"""

import logging
from pathlib import Path

from schemas.package import InformationPackage, IPType

from ..manifest_patcher import patch_package_type
from .converter import PackageConverter

logger = logging.getLogger(__name__)


class AIPToDIPConverter(PackageConverter):
    """Convert a zipped E-ARK AIP into a zipped DIP.

    Example:
        converter = AIPToDIPConverter()
        dip = converter.convert(Path("aip.zip"), Path("dip.zip"))
    """

    source_type = IPType.AIP
    target_type = IPType.DIP

    def convert_package(
        self, source: InformationPackage, staging_dir: Path
    ) -> InformationPackage:
        """Derive an unbuilt DIP from a parsed AIP.

        The returned model has type AIP until ``finish_build`` runs.
        """
        dip = self.new_package(self.settings.dip_profile)
        dip.type = IPType.AIP
        logger.info(f"Deriving DIP {dip.id} from AIP {source.id}")

        for md in source.descriptive_metadata:
            dip.add_descriptive_metadata(md)
        for md in source.preservation_metadata:
            dip.add_preservation_metadata(md)

        self.copy_schemas(source, dip, staging_dir)
        self.bundle_submission(source, dip, staging_dir)
        dip.add_agent(self.settings.aip_to_dip_agent)

        return dip

    def finish_build(self, package: InformationPackage, build_dir: Path) -> None:
        """Flip the package to DIP and patch the already written manifest."""
        built_type = package.type
        package.type = IPType.DIP
        patch_package_type(build_dir, package.id, built_type, IPType.DIP)
