"""SIP to AIP converter.

The AIP keeps the SIP's profile and descriptive metadata, carries the whole
SIP as its submission, and gets a fresh PREMIS record naming this software.
The SIP's own preservation metadata travels only inside the submission.
"""

import logging
from pathlib import Path

from schemas.package import InformationPackage, IPFile, IPMetadata, IPType

from ..compilers.premis_compiler import PREMIS_FILENAME, PREMISCompiler
from ..config import SCHEMA_PREMIS, ConverterSettings
from .converter import PackageConverter

logger = logging.getLogger(__name__)


class SIPToAIPConverter(PackageConverter):
    """Convert a zipped E-ARK SIP into a zipped AIP.

    Example:
        converter = SIPToAIPConverter()
        aip = converter.convert(Path("sip.zip"), Path("aip.zip"))
    """

    source_type = IPType.SIP
    target_type = IPType.AIP

    def __init__(
        self,
        settings: ConverterSettings | None = None,
        premis_compiler: PREMISCompiler | None = None,
        **kwargs,
    ):
        super().__init__(settings, **kwargs)
        self._premis = premis_compiler or PREMISCompiler()

    def convert_package(
        self, source: InformationPackage, staging_dir: Path
    ) -> InformationPackage:
        """Derive an unbuilt AIP from a parsed SIP.

        The returned model references files in ``staging_dir``; build it
        before that directory is removed.
        """
        aip = self.new_package(source.profile)
        logger.info(f"Deriving AIP {aip.id} from SIP {source.id}")

        for md in source.descriptive_metadata:
            aip.add_descriptive_metadata(md)

        self.copy_schemas(source, aip, staging_dir)
        self.bundle_submission(source, aip, staging_dir)
        self._add_preservation_metadata(aip, staging_dir)
        aip.add_agent(self.settings.sip_to_aip_agent)

        return aip

    def _add_preservation_metadata(
        self, aip: InformationPackage, staging_dir: Path
    ) -> None:
        """Write a PREMIS agent record for this software and register its schema."""
        premis_dir = staging_dir / "premis"
        premis_dir.mkdir(exist_ok=True)
        premis_path = self._premis.compile_agent(
            premis_dir / f"{aip.id}-{PREMIS_FILENAME}",
            name=self.settings.software_name,
            agent_type="Software",
            version=self.settings.software_version,
        )
        aip.add_preservation_metadata(
            IPMetadata(
                file=IPFile(path=premis_path, name=PREMIS_FILENAME),
                metadata_type="PREMIS",
            )
        )

        schema_path = self.copy_schema(SCHEMA_PREMIS, premis_dir)
        aip.add_schema(IPFile(path=schema_path, name=SCHEMA_PREMIS))
