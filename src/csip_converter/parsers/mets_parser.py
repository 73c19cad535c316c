"""METS Parser for reading E-ARK CSIP package manifests.

Reads the package-level METS.xml of an unpacked package into an
InformationPackage. Only the structure the converters rely on is checked;
the manifest is not validated against its XML schemas.
"""

import logging
from datetime import datetime
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from lxml import etree

from schemas.package import InformationPackage, IPAgent, IPFile, IPMetadata, IPType

from ..compilers.compiler import MANIFEST_FILENAME, SCHEMAS, SUBMISSION
from ..compilers.mets_compiler import CSIP_NS, METS_NS, XLINK_NS
from ..exceptions import PackageFormatError

logger = logging.getLogger(__name__)

NS = {"mets": METS_NS, "csip": CSIP_NS, "xlink": XLINK_NS}


class METSParser:
    """Parse a package directory's METS.xml into an InformationPackage."""

    def parse(self, package_dir: Path) -> InformationPackage:
        """Parse an unpacked package.

        Args:
            package_dir: Directory holding METS.xml

        Returns:
            InformationPackage with base_path set to package_dir

        Raises:
            PackageFormatError: If the manifest is missing, malformed, or
                references files the package does not contain
        """
        root = self._load_mets(package_dir)

        package_id = root.get("OBJID")
        if not package_id:
            package_id = package_dir.name
            logger.warning(f"METS has no OBJID; using directory name {package_id}")

        profile = root.get("PROFILE")
        if not profile:
            raise PackageFormatError(f"METS of {package_id} declares no PROFILE")

        hdr = root.find("mets:metsHdr", NS)
        package = InformationPackage(
            id=package_id,
            type=self._package_type(root, hdr, package_id),
            profile=profile,
            base_path=package_dir,
        )
        if hdr is not None:
            created = _parse_timestamp(hdr.get("CREATEDATE"))
            if created is not None:
                package.created = created
            for agent in hdr.findall("mets:agent", NS):
                package.add_agent(self._parse_agent(agent))

        for md_ref in root.findall("mets:dmdSec/mets:mdRef", NS):
            package.add_descriptive_metadata(self._parse_md_ref(md_ref, package_dir))
        for md_ref in root.findall("mets:amdSec/mets:digiprovMD/mets:mdRef", NS):
            package.add_preservation_metadata(self._parse_md_ref(md_ref, package_dir))

        for schema in _list_files(package_dir / SCHEMAS):
            package.add_schema(IPFile(path=schema))
        for submission in _list_files(package_dir / SUBMISSION):
            package.add_submission(IPFile(path=submission))

        logger.info(
            f"Parsed {package.type.value} {package.id}: "
            f"{len(package.descriptive_metadata)} descriptive, "
            f"{len(package.preservation_metadata)} preservation records, "
            f"{len(package.schemas)} schemas"
        )
        return package

    def _load_mets(self, package_dir: Path) -> etree._Element:
        """Load and sanity-check the METS root element."""
        mets_path = package_dir / MANIFEST_FILENAME
        if not mets_path.is_file():
            raise PackageFormatError(
                f"No {MANIFEST_FILENAME} in {package_dir}", path=str(mets_path)
            )

        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.parse(str(mets_path), parser).getroot()
        except etree.XMLSyntaxError as e:
            raise PackageFormatError(
                f"Malformed {MANIFEST_FILENAME}: {e}", path=str(mets_path)
            ) from e

        if root.tag != f"{{{METS_NS}}}mets":
            raise PackageFormatError(
                f"{MANIFEST_FILENAME} root is {root.tag}, not a METS document",
                path=str(mets_path),
            )
        return root

    def _package_type(
        self, root: etree._Element, hdr: etree._Element | None, package_id: str
    ) -> IPType:
        """Read the OAIS package type from metsHdr, falling back to the root."""
        attr = f"{{{CSIP_NS}}}OAISPACKAGETYPE"
        value = hdr.get(attr) if hdr is not None else None
        value = value or root.get(attr)
        if value is None:
            raise PackageFormatError(f"METS of {package_id} declares no OAIS package type")
        try:
            return IPType(value)
        except ValueError as e:
            raise PackageFormatError(
                f"METS of {package_id} declares unknown package type {value!r}"
            ) from e

    def _parse_agent(self, agent: etree._Element) -> IPAgent:
        name = agent.findtext("mets:name", default="", namespaces=NS)
        note_el = agent.find("mets:note", NS)
        return IPAgent(
            name=name.strip(),
            role=agent.get("ROLE", "CREATOR"),
            type=agent.get("TYPE", "OTHER"),
            other_type=agent.get("OTHERTYPE"),
            note=note_el.text.strip() if note_el is not None and note_el.text else None,
            note_type=note_el.get(f"{{{CSIP_NS}}}NOTETYPE") if note_el is not None else None,
        )

    def _parse_md_ref(self, md_ref: etree._Element, package_dir: Path) -> IPMetadata:
        """Resolve an mdRef to a metadata record inside the package."""
        href = md_ref.get(f"{{{XLINK_NS}}}href")
        if not href:
            raise PackageFormatError("mdRef without xlink:href")

        relative = _relative_href(href)
        path = package_dir / relative
        if not path.is_file():
            raise PackageFormatError(
                f"Metadata file {href} referenced by METS is missing", path=href
            )

        md_type = md_ref.get("MDTYPE", "OTHER")
        if md_type == "OTHER":
            md_type = md_ref.get("OTHERMDTYPE") or "OTHER"
        return IPMetadata(file=IPFile(path=path, name=relative.name), metadata_type=md_type)


def _relative_href(href: str) -> PurePosixPath:
    """Turn a METS file URL into a package-relative path."""
    value = unquote(href)
    if value.startswith("file://./"):
        value = value[len("file://./"):]
    relative = PurePosixPath(value)
    if relative.is_absolute() or ".." in relative.parts or "://" in value:
        raise PackageFormatError(f"File reference {href} points outside the package", path=href)
    return relative


def _list_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file())


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparseable METS timestamp {value!r}")
        return None
