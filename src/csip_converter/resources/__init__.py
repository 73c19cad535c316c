"""Bundled schema files.

The XSD files under ``schemas/`` are copied into packages whose source
carries no schemas of its own.
"""

import logging
import shutil
from importlib import resources
from pathlib import Path

logger = logging.getLogger(__name__)


def copy_resource_schema(
    name: str, target_dir: Path, schema_dir: Path | None = None
) -> Path:
    """Copy a schema file into a directory.

    Args:
        name: Schema file name (e.g. "mets1_12.xsd")
        target_dir: Directory to copy the schema into
        schema_dir: Directory to take the schema from instead of the
            bundled resources

    Returns:
        Path of the copied file

    Raises:
        FileNotFoundError: If no schema with that name is available
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    destination = target_dir / name

    if schema_dir is not None:
        source = Path(schema_dir) / name
        if not source.is_file():
            raise FileNotFoundError(f"Schema {name} not found in {schema_dir}")
        shutil.copyfile(source, destination)
    else:
        resource = resources.files(__name__).joinpath("schemas").joinpath(name)
        if not resource.is_file():
            raise FileNotFoundError(f"Bundled schema {name} not found")
        with resource.open("rb") as src, destination.open("wb") as dst:
            shutil.copyfileobj(src, dst)

    logger.debug(f"Copied schema {name} to {destination}")
    return destination
