"""E-ARK Package Parser for reading zipped information packages."""

import logging
from pathlib import Path
from typing import BinaryIO

from schemas.package import InformationPackage, IPType

from ..archive import unpack
from ..compilers.compiler import MANIFEST_FILENAME
from ..exceptions import PackageFormatError
from .mets_parser import METSParser

logger = logging.getLogger(__name__)


class EARKPackageParser:
    """Unpack a zipped package and parse its manifest.

    The archive is expected to hold a single package directory named after
    the package identifier with METS.xml inside it; an archive with METS.xml
    at its root is accepted as well.
    """

    def __init__(self, mets_parser: METSParser | None = None):
        self._mets = mets_parser or METSParser()

    def parse(
        self,
        source: str | Path | BinaryIO,
        extraction_dir: Path,
        expected_type: IPType | None = None,
    ) -> InformationPackage:
        """Unpack and parse a package.

        Args:
            source: Path to, or readable binary stream of, the package archive
            extraction_dir: Empty directory to unpack into
            expected_type: Package type the manifest must declare

        Returns:
            The parsed package, bound to its unpacked directory

        Raises:
            PackageFormatError: If the archive is not a package of the
                expected type
        """
        if isinstance(source, str):
            source = Path(source)
        entries = unpack(source, extraction_dir)
        logger.debug(f"Unpacked {len(entries)} entries from {source}")

        package_dir = self._find_package_dir(extraction_dir)
        package = self._mets.parse(package_dir)

        if expected_type is not None and package.type != expected_type:
            raise PackageFormatError(
                f"Expected a {expected_type.value} but {package.id} is a "
                f"{package.type.value}"
            )
        return package

    def _find_package_dir(self, extraction_dir: Path) -> Path:
        """Locate the directory holding the package manifest."""
        if (extraction_dir / MANIFEST_FILENAME).is_file():
            return extraction_dir

        candidates = [
            d
            for d in sorted(extraction_dir.iterdir())
            if d.is_dir() and (d / MANIFEST_FILENAME).is_file()
        ]
        if len(candidates) != 1:
            raise PackageFormatError(
                f"Expected one package directory with {MANIFEST_FILENAME}, "
                f"found {len(candidates)}"
            )
        return candidates[0]
