"""Zip archive reading and writing for information packages.

Entries are named by their POSIX path relative to the packed directory and
written in sorted order, so packing the same tree twice yields the same entry
list. Directories themselves are never written as entries.
"""

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from .exceptions import PackageFormatError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def _source_files(source_dir: Path) -> list[Path]:
    return sorted(
        (p for p in source_dir.rglob("*") if p.is_file()),
        key=lambda p: p.relative_to(source_dir).as_posix(),
    )


def pack(source_dir: Path, out: BinaryIO) -> list[str]:
    """Write every regular file under a directory into a zip stream.

    Any I/O error propagates; whatever was already written to ``out`` is not
    a usable archive and must be discarded by the caller.

    Args:
        source_dir: Directory to pack
        out: Writable binary stream receiving the archive

    Returns:
        The entry names written, in write order
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise NotADirectoryError(f"Cannot pack missing directory: {source_dir}")

    entries = []
    with zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in _source_files(source_dir):
            name = path.relative_to(source_dir).as_posix()
            with path.open("rb") as src, zf.open(name, "w", force_zip64=True) as dst:
                while chunk := src.read(CHUNK_SIZE):
                    dst.write(chunk)
            entries.append(name)
            logger.debug(f"Packed {name}")

    logger.debug(f"Packed {len(entries)} entries from {source_dir}")
    return entries


def pack_to_file(source_dir: Path, archive_path: Path) -> list[str]:
    """Pack a directory into a zip file, removing the file if packing fails."""
    archive_path = Path(archive_path)
    try:
        with archive_path.open("wb") as out:
            return pack(source_dir, out)
    except BaseException:
        archive_path.unlink(missing_ok=True)
        raise


def _checked_name(name: str) -> PurePosixPath:
    entry = PurePosixPath(name)
    if (
        not entry.parts
        or entry.is_absolute()
        or ".." in entry.parts
        or ":" in entry.parts[0]
    ):
        raise PackageFormatError(f"Unsafe archive entry name: {name}", path=name)
    return entry


def _extract(zf: zipfile.ZipFile, info: zipfile.ZipInfo, destination: Path) -> None:
    if info.is_dir():
        destination.mkdir(parents=True, exist_ok=True)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    with zf.open(info) as src, destination.open("wb") as dst:
        while chunk := src.read(CHUNK_SIZE):
            dst.write(chunk)


def unpack(archive: Path | BinaryIO, target_dir: Path) -> list[str]:
    """Extract a zip archive into a directory.

    Args:
        archive: Path to, or readable binary stream of, the archive
        target_dir: Existing directory to extract into

    Returns:
        Names of the file entries extracted

    Raises:
        PackageFormatError: If the archive is corrupt, an entry would land
            outside target_dir, or two entries claim the same path
    """
    target_dir = Path(target_dir)
    entries = []
    seen: set[str] = set()
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                entry = _checked_name(info.filename)
                if not info.is_dir():
                    name = entry.as_posix()
                    if name in seen:
                        raise PackageFormatError(
                            f"Duplicate archive entry: {info.filename}", path=info.filename
                        )
                    seen.add(name)
                try:
                    _extract(zf, info, target_dir / entry)
                except (FileExistsError, NotADirectoryError, IsADirectoryError) as e:
                    raise PackageFormatError(
                        f"Archive entry {info.filename} conflicts with another entry: {e}",
                        path=info.filename,
                    ) from e
                if not info.is_dir():
                    entries.append(entry.as_posix())
    except zipfile.BadZipFile as e:
        raise PackageFormatError(f"Not a valid zip archive: {e}") from e

    logger.debug(f"Unpacked {len(entries)} entries into {target_dir}")
    return entries


def list_entries(archive: Path | BinaryIO) -> list[str]:
    """Return the names of the file entries in a zip archive."""
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            return [info.filename for info in zf.infolist() if not info.is_dir()]
    except zipfile.BadZipFile as e:
        raise PackageFormatError(f"Not a valid zip archive: {e}") from e
