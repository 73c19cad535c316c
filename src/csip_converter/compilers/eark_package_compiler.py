"""E-ARK Package Compiler for serializing information packages to disk.

Lays out a package directory per the CSIP folder structure and delegates
manifest generation to METSCompiler.
"""

import logging
import shutil
from pathlib import Path

from schemas.package import InformationPackage

from ..exceptions import PackageBuildError
from .compiler import Compiler, package_layout
from .mets_compiler import METSCompiler

logger = logging.getLogger(__name__)


class EARKPackageCompiler(Compiler):
    """Compile an InformationPackage into a CSIP package directory.

    Orchestrates:
    1. Copying every referenced file to its place under {target_dir}/{id}/
    2. METSCompiler writing METS.xml at the package root

    A package directory that fails to build is removed before the error
    propagates.
    """

    def __init__(self, mets_compiler: METSCompiler | None = None):
        self._mets = mets_compiler or METSCompiler()

    def compile(self, package: InformationPackage, target_dir: Path) -> Path:
        """Build a package directory.

        Args:
            package: Package model to serialize
            target_dir: Existing directory to build the package in

        Returns:
            Path of the package root ({target_dir}/{id})

        Raises:
            PackageBuildError: If a referenced file is missing or two files
                claim the same place in the package
        """
        package_dir = Path(target_dir) / package.id
        if package_dir.exists():
            raise PackageBuildError(f"Package directory already exists: {package_dir}")

        logger.info(f"Building {package.type.value} {package.id} in {target_dir}")
        package_dir.mkdir(parents=True)
        try:
            self._copy_files(package, package_dir)
            self._mets.compile(package, package_dir)
        except BaseException:
            shutil.rmtree(package_dir, ignore_errors=True)
            raise

        return package_dir

    def _copy_files(self, package: InformationPackage, package_dir: Path) -> None:
        """Copy each file in the package layout into the package directory."""
        seen: set[str] = set()
        for relative_path, ip_file in package_layout(package):
            if relative_path in seen:
                raise PackageBuildError(
                    f"More than one file would be written to {relative_path}"
                )
            seen.add(relative_path)

            if not ip_file.path.is_file():
                raise PackageBuildError(
                    f"Cannot read {ip_file.path} for {relative_path}"
                )

            destination = package_dir / relative_path
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(ip_file.path, destination)
            logger.debug(f"Copied {ip_file.path} to {relative_path}")
