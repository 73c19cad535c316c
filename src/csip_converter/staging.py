"""Temporary staging directories for package conversion.

A StagingArea hands out uniquely named directories and removes every
top-level one it created when the ``with`` block exits, whatever the exit
path.

Example:
    with StagingArea() as staging:
        root = staging.acquire("sip-to-aip")
        extracted = staging.acquire("sip-extracted", parent=root)
        ...
    # root and everything beneath it is gone here
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class StagingArea:
    """Create and clean up staging directories.

    Attributes:
        base_dir: Directory new staging roots are created in (system temp
            directory when None)
        roots: Top-level directories acquired and not yet released
    """

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.roots: list[Path] = []

    def __enter__(self) -> "StagingArea":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release_all()

    def acquire(self, prefix: str, parent: Path | None = None) -> Path:
        """Create a new, empty, uniquely named directory.

        Args:
            prefix: Leading part of the directory name
            parent: Directory to create it in; when omitted the new
                directory is a tracked staging root

        Returns:
            Path of the created directory
        """
        if parent is not None:
            return Path(tempfile.mkdtemp(prefix=f"{prefix}-", dir=parent))

        if self.base_dir is not None:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix=f"{prefix}-", dir=self.base_dir))
        self.roots.append(root)
        logger.debug(f"Acquired staging root {root}")
        return root

    def release(self, root: Path | None) -> bool:
        """Remove a directory and everything beneath it.

        Entries that disappear while the tree is being removed are skipped.
        Releasing a directory that does not exist succeeds.

        Args:
            root: Directory to remove

        Returns:
            True if the directory no longer exists afterwards
        """
        if root is None:
            return True
        root = Path(root)
        if root in self.roots:
            self.roots.remove(root)

        if not root.exists() and not root.is_symlink():
            return True

        if not root.is_dir() or root.is_symlink():
            return _remove(root, os.unlink)

        ok = True
        for dirpath, dirnames, filenames in os.walk(root, topdown=False):
            for name in filenames:
                ok = _remove(Path(dirpath) / name, os.unlink) and ok
            for name in dirnames:
                path = Path(dirpath) / name
                remover = os.unlink if path.is_symlink() else os.rmdir
                ok = _remove(path, remover) and ok
        ok = _remove(root, os.rmdir) and ok

        if ok:
            logger.debug(f"Released staging directory {root}")
        return ok and not root.exists()

    def release_all(self) -> bool:
        """Release every tracked staging root."""
        ok = True
        for root in list(self.roots):
            ok = self.release(root) and ok
        return ok


def _remove(path: Path, remover) -> bool:
    try:
        remover(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove staged path {path}: {e}")
        return False
    return True
