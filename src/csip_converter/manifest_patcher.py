"""Post-build rewrite of the package type declared in METS.xml.

The package compiler writes the type the model carries at build time. When a
package is built under one type and published under another, the declaration
is rewritten in the written manifest before the package is archived.
"""

import logging
from pathlib import Path

from schemas.package import IPType

from .compilers.compiler import MANIFEST_FILENAME
from .exceptions import ManifestPatchError

logger = logging.getLogger(__name__)

PACKAGE_TYPE_MARKER = 'csip:OAISPACKAGETYPE="{}"'


def package_type_marker(package_type: IPType) -> str:
    return PACKAGE_TYPE_MARKER.format(package_type.value)


def patch_package_type(
    build_dir: Path,
    package_id: str,
    source_type: IPType,
    target_type: IPType,
) -> Path:
    """Replace the package type declaration in a built manifest.

    Args:
        build_dir: Directory the package was built in
        package_id: Identifier of the built package
        source_type: Type the manifest currently declares
        target_type: Type it must declare

    Returns:
        Path of the patched manifest

    Raises:
        ManifestPatchError: If the manifest does not contain the source
            type declaration
    """
    mets_path = Path(build_dir) / package_id / MANIFEST_FILENAME
    text = mets_path.read_text(encoding="utf-8")

    old = package_type_marker(source_type)
    new = package_type_marker(target_type)
    if old not in text:
        raise ManifestPatchError(
            f"{mets_path} does not declare {old}; refusing to archive it unpatched",
            manifest_path=str(mets_path),
        )

    mets_path.write_text(text.replace(old, new, 1), encoding="utf-8")
    logger.info(f"Patched package type of {package_id}: {source_type.value} -> {target_type.value}")
    return mets_path
