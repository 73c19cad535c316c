"""Base class for package compilers."""

from abc import ABC, abstractmethod
from pathlib import Path

from schemas.package import InformationPackage, IPFile

MANIFEST_FILENAME = "METS.xml"
METADATA_DESCRIPTIVE = "metadata/descriptive"
METADATA_PRESERVATION = "metadata/preservation"
SCHEMAS = "schemas"
SUBMISSION = "submission"


def package_layout(package: InformationPackage) -> list[tuple[str, IPFile]]:
    """List every file of a package with its path inside the package directory.

    The manifest itself is not included.

    Returns:
        List of (relative POSIX path, file) tuples in manifest order
    """
    layout = []
    for md in package.descriptive_metadata:
        layout.append((f"{METADATA_DESCRIPTIVE}/{md.file.name}", md.file))
    for md in package.preservation_metadata:
        layout.append((f"{METADATA_PRESERVATION}/{md.file.name}", md.file))
    for schema in package.schemas:
        layout.append((f"{SCHEMAS}/{schema.name}", schema))
    for submission in package.submissions:
        layout.append((f"{SUBMISSION}/{submission.name}", submission))
    return layout


class Compiler(ABC):
    """Abstract base class for package compilers.

    Compilers serialize an InformationPackage model to disk.
    """

    @abstractmethod
    def compile(self, package: InformationPackage, target_dir: Path) -> Path:
        """Compile a package model.

        Args:
            package: The package model to serialize
            target_dir: Directory to write into

        Returns:
            Path of the written output
        """
        pass
