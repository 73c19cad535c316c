"""Base class for package converters.

A converter turns one zipped information package into another:

1. A StagingArea root holds an extraction directory and a build directory
2. The source archive is unpacked and parsed
3. ``convert_package`` derives the destination model
4. The destination is built, finished by ``finish_build``, and packed
5. The packed archive is handed to the caller's destination
6. The staging root is removed, whatever happened in between
"""

import logging
import os
import shutil
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from schemas.package import InformationPackage, IPFile, IPType

from ..archive import pack_to_file
from ..compilers.compiler import SCHEMAS
from ..compilers.eark_package_compiler import EARKPackageCompiler
from ..config import ConverterSettings
from ..exceptions import ConversionError, InternalInconsistencyError, PackageIOError
from ..parsers.eark_package_parser import EARKPackageParser
from ..resources import copy_resource_schema
from ..staging import StagingArea

logger = logging.getLogger(__name__)

# os.umask can only be read by setting it
_UMASK_LOCK = threading.Lock()


class PackageConverter(ABC):
    """Abstract base class for package converters.

    Subclasses set ``source_type`` and ``target_type`` and implement
    ``convert_package``.

    Attributes:
        settings: Immutable converter settings
        parser: Parser for the source archive
        compiler: Compiler for the destination package
    """

    source_type: IPType
    target_type: IPType

    def __init__(
        self,
        settings: ConverterSettings | None = None,
        parser: EARKPackageParser | None = None,
        compiler: EARKPackageCompiler | None = None,
    ):
        self.settings = settings or ConverterSettings()
        self.parser = parser or EARKPackageParser()
        self.compiler = compiler or EARKPackageCompiler()

    @property
    def name(self) -> str:
        return f"{self.source_type.value.lower()}-to-{self.target_type.value.lower()}"

    def convert(
        self,
        source: str | Path | BinaryIO,
        destination: str | Path | BinaryIO,
    ) -> InformationPackage:
        """Convert a zipped package and write the result.

        Nothing is written to ``destination`` unless the whole conversion
        succeeds. A path destination is replaced atomically; a stream
        destination receives the finished archive in one copy.

        Args:
            source: Path to, or readable binary stream of, the source archive
            destination: Path to write, or writable binary stream to receive,
                the resulting archive

        Returns:
            The resulting package, with zip_entries set

        Raises:
            PackageIOError: If storage or a stream fails
            PackageFormatError: If the source is not a valid package of
                the expected type
            InternalInconsistencyError: On any other failure
        """
        try:
            with StagingArea(self.settings.staging_dir) as staging:
                root = staging.acquire(self.name)
                package, archive = self._convert_staged(source, staging, root)
                self._deliver(archive, destination)
        except ConversionError:
            raise
        except OSError as e:
            raise PackageIOError(f"{self.name} conversion failed: {e}") from e
        except Exception as e:
            raise InternalInconsistencyError(
                f"{self.name} conversion failed unexpectedly: {e}"
            ) from e

        logger.info(
            f"Converted {self.source_type.value} into {package.type.value} "
            f"{package.id} ({len(package.zip_entries)} entries)"
        )
        return package

    def _convert_staged(
        self,
        source: str | Path | BinaryIO,
        staging: StagingArea,
        root: Path,
    ) -> tuple[InformationPackage, Path]:
        """Run the pipeline inside a staging root.

        Returns:
            The resulting package and the path of its staged archive
        """
        source_type = self.source_type.value.lower()
        target_type = self.target_type.value.lower()
        extraction_dir = staging.acquire(f"{source_type}-extracted", parent=root)
        build_dir = staging.acquire(f"{target_type}-extracted", parent=root)

        source_package = self.parser.parse(
            source, extraction_dir, expected_type=self.source_type
        )
        package = self.convert_package(source_package, root)

        built = self.compiler.compile(package, build_dir)
        logger.info(f"Built {package.id} at {built}")
        self.finish_build(package, build_dir)

        archive = root / f"{package.id}.zip"
        entries = pack_to_file(build_dir, archive)
        prefix = f"{package.id}/"
        package.zip_entries = [
            e[len(prefix):] if e.startswith(prefix) else e for e in entries
        ]
        return package, archive

    @abstractmethod
    def convert_package(
        self, source: InformationPackage, staging_dir: Path
    ) -> InformationPackage:
        """Derive an unbuilt destination package from a parsed source.

        Args:
            source: Parsed source package
            staging_dir: Directory for intermediate files; it must outlive
                the build of the returned package

        Returns:
            The destination package model
        """
        pass

    def finish_build(self, package: InformationPackage, build_dir: Path) -> None:
        """Adjust a built package before it is archived."""
        pass

    def new_package(self, profile: str) -> InformationPackage:
        """Create an empty destination package with a fresh identifier."""
        return InformationPackage(
            id=str(uuid.uuid4()),
            type=self.target_type,
            profile=profile,
        )

    def copy_schemas(
        self,
        source: InformationPackage,
        package: InformationPackage,
        staging_dir: Path,
    ) -> None:
        """Copy the source's schema files, or inject the defaults if it has none."""
        schema_dir = source.base_path / SCHEMAS if source.base_path else None
        if schema_dir is not None and schema_dir.is_dir():
            for path in sorted(p for p in schema_dir.iterdir() if p.is_file()):
                package.add_schema(IPFile(path=path))

        if not package.schemas:
            logger.info(f"{source.id} carries no schemas; adding default schemas")
            default_dir = staging_dir / "default-schemas"
            for name in self.settings.default_schemas:
                path = self.copy_schema(name, default_dir)
                package.add_schema(IPFile(path=path, name=name))

    def copy_schema(self, name: str, target_dir: Path) -> Path:
        """Copy a configured or bundled schema file into a staging directory.

        Raises:
            InternalInconsistencyError: If the schema is not available
        """
        try:
            return copy_resource_schema(name, target_dir, self.settings.schema_dir)
        except FileNotFoundError as e:
            raise InternalInconsistencyError(
                f"Schema {name} is not available: {e}"
            ) from e

    def bundle_submission(
        self,
        source: InformationPackage,
        package: InformationPackage,
        staging_dir: Path,
    ) -> None:
        """Zip the whole staged source package and register it as the submission."""
        if source.base_path is None:
            raise InternalInconsistencyError(f"{source.id} has no staged directory")
        bundle = staging_dir / f"{source.id}.zip"
        entries = pack_to_file(source.base_path, bundle)
        logger.debug(f"Bundled {len(entries)} entries of {source.id} into {bundle.name}")
        package.add_submission(IPFile(path=bundle))

    def _deliver(self, archive: Path, destination: str | Path | BinaryIO) -> None:
        """Copy a finished archive to the caller's destination."""
        if isinstance(destination, (str, os.PathLike)):
            target = Path(destination)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}-", suffix=".part", dir=target.parent
            )
            try:
                with os.fdopen(fd, "wb") as out, archive.open("rb") as src:
                    shutil.copyfileobj(src, out)
                os.chmod(tmp_name, _new_file_mode())
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        else:
            with archive.open("rb") as src:
                shutil.copyfileobj(src, destination)
        logger.debug(f"Delivered {archive.name}")


def _new_file_mode() -> int:
    """Mode a newly created file gets under the current umask."""
    with _UMASK_LOCK:
        umask = os.umask(0)
        os.umask(umask)
    return 0o666 & ~umask
