"""METS Compiler for writing E-ARK CSIP package manifests.

Builds the METS.xml of a package directory whose files have already been laid
out, following the E-ARK Common Specification for Information Packages.
Files are referenced by package-relative URL with size and SHA-256 checksum.
"""

import hashlib
import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import Path

from lxml import etree

from schemas.package import InformationPackage, IPMetadata

from ..exceptions import PackageBuildError
from .compiler import (
    MANIFEST_FILENAME,
    METADATA_DESCRIPTIVE,
    METADATA_PRESERVATION,
    SCHEMAS,
    SUBMISSION,
    Compiler,
)

logger = logging.getLogger(__name__)

METS_NS = "http://www.loc.gov/METS/"
CSIP_NS = "https://DILCIS.eu/XML/METS/CSIPExtensionMETS"
SIP_NS = "https://DILCIS.eu/XML/METS/SIPExtensionMETS"
XLINK_NS = "http://www.w3.org/1999/xlink"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

SCHEMA_LOCATIONS = [
    (METS_NS, "mets1_12.xsd"),
    (XLINK_NS, "xlink.xsd"),
    (CSIP_NS, "DILCISExtensionMETS.xsd"),
    (SIP_NS, "DILCISExtensionSIPMETS.xsd"),
]

METS_MDTYPES = {
    "MARC", "MODS", "EAD", "DC", "NISOIMG", "LC-AV", "VRA", "TEIHDR", "DDI",
    "FGDC", "LOM", "PREMIS", "PREMIS:OBJECT", "PREMIS:AGENT", "PREMIS:RIGHTS",
    "PREMIS:EVENT", "TEXTMD", "METSRIGHTS", "ISO 19115:2003 NAP", "EAC-CPF",
    "LIDO",
}

CONTENT_INFORMATION_TYPE = "MIXED"
CONTENT_CATEGORY = "Mixed"


def _mets(local: str) -> str:
    return f"{{{METS_NS}}}{local}"


class METSCompiler(Compiler):
    """Compile the METS manifest of a laid-out package directory.

    The METSCompiler writes:
    - mets root: OBJID, TYPE, PROFILE and the CSIP content information type
    - metsHdr: the OAIS package type and one agent per package agent
    - dmdSec: one per descriptive metadata record
    - amdSec: one digiprovMD per preservation metadata record
    - fileSec: Schemas and Submission file groups
    - structMap (PHYSICAL, CSIP): Metadata, Schemas and Submission divs
    """

    def compile(self, package: InformationPackage, target_dir: Path) -> Path:
        """Write METS.xml for a package.

        Args:
            package: Package model being built
            target_dir: Package directory holding the laid-out files

        Returns:
            Path of the written METS.xml
        """
        root = self._build_mets(package, target_dir)
        mets_path = target_dir / MANIFEST_FILENAME
        mets_path.write_bytes(
            etree.tostring(
                root,
                xml_declaration=True,
                encoding="UTF-8",
                pretty_print=True,
            )
        )
        logger.info(f"Wrote {package.type.value} METS for {package.id} to {mets_path}")
        return mets_path

    def _build_mets(
        self, package: InformationPackage, package_dir: Path
    ) -> etree._Element:
        nsmap = {
            "mets": METS_NS,
            "csip": CSIP_NS,
            "xlink": XLINK_NS,
            "xsi": XSI_NS,
        }
        root = etree.Element(_mets("mets"), nsmap=nsmap)
        root.set("OBJID", package.id)
        root.set("TYPE", CONTENT_CATEGORY)
        root.set(f"{{{CSIP_NS}}}CONTENTINFORMATIONTYPE", CONTENT_INFORMATION_TYPE)
        root.set("PROFILE", package.profile)

        schema_names = {s.name for s in package.schemas}
        locations = [
            f"{ns} {SCHEMAS}/{name}"
            for ns, name in SCHEMA_LOCATIONS
            if name in schema_names
        ]
        if locations:
            root.set(f"{{{XSI_NS}}}schemaLocation", " ".join(locations))

        root.append(self._build_mets_hdr(package))
        dmd_ids = []
        for n, md in enumerate(package.descriptive_metadata, start=1):
            dmd_id = f"dmd-{n}"
            root.append(
                self._build_md_sec(
                    "dmdSec", dmd_id, md, f"{METADATA_DESCRIPTIVE}/{md.file.name}",
                    package, package_dir,
                )
            )
            dmd_ids.append(dmd_id)

        digiprov_ids = []
        if package.preservation_metadata:
            amd = etree.SubElement(root, _mets("amdSec"))
            amd.set("ID", "amd-1")
            for n, md in enumerate(package.preservation_metadata, start=1):
                digiprov_id = f"digiprov-{n}"
                amd.append(
                    self._build_md_sec(
                        "digiprovMD", digiprov_id, md,
                        f"{METADATA_PRESERVATION}/{md.file.name}",
                        package, package_dir,
                    )
                )
                digiprov_ids.append(digiprov_id)

        root.append(self._build_file_sec(package, package_dir))
        root.append(self._build_struct_map(package, dmd_ids, digiprov_ids))
        return root

    def _build_mets_hdr(self, package: InformationPackage) -> etree._Element:
        """Build the metsHdr element."""
        hdr = etree.Element(_mets("metsHdr"))
        hdr.set("CREATEDATE", _timestamp(package.created))
        hdr.set("LASTMODDATE", _timestamp(datetime.now(timezone.utc)))
        hdr.set("RECORDSTATUS", "NEW")
        hdr.set(f"{{{CSIP_NS}}}OAISPACKAGETYPE", package.type.value)

        for ip_agent in package.agents:
            agent = etree.SubElement(hdr, _mets("agent"))
            agent.set("ROLE", ip_agent.role)
            agent.set("TYPE", ip_agent.type)
            if ip_agent.other_type:
                agent.set("OTHERTYPE", ip_agent.other_type)
            name = etree.SubElement(agent, _mets("name"))
            name.text = ip_agent.name
            if ip_agent.note:
                note = etree.SubElement(agent, _mets("note"))
                note.text = ip_agent.note
                if ip_agent.note_type:
                    note.set(f"{{{CSIP_NS}}}NOTETYPE", ip_agent.note_type)

        return hdr

    def _build_md_sec(
        self,
        tag: str,
        sec_id: str,
        md: IPMetadata,
        href: str,
        package: InformationPackage,
        package_dir: Path,
    ) -> etree._Element:
        """Build a dmdSec or digiprovMD referencing a metadata file."""
        sec = etree.Element(_mets(tag))
        sec.set("ID", sec_id)
        sec.set("CREATED", _timestamp(package.created))
        sec.set("STATUS", "CURRENT")

        md_ref = etree.SubElement(sec, _mets("mdRef"))
        md_ref.set("LOCTYPE", "URL")
        md_ref.set(f"{{{XLINK_NS}}}type", "simple")
        md_ref.set(f"{{{XLINK_NS}}}href", href)
        if md.metadata_type.upper() in METS_MDTYPES:
            md_ref.set("MDTYPE", md.metadata_type.upper())
        else:
            md_ref.set("MDTYPE", "OTHER")
            md_ref.set("OTHERMDTYPE", md.metadata_type)
        self._set_file_attributes(md_ref, package_dir / href, package)
        return sec

    def _build_file_sec(
        self, package: InformationPackage, package_dir: Path
    ) -> etree._Element:
        """Build the fileSec with Schemas and Submission groups."""
        file_sec = etree.Element(_mets("fileSec"))
        file_sec.set("ID", "file-sec")

        groups = [
            ("Schemas", SCHEMAS, package.schemas),
            ("Submission", SUBMISSION, package.submissions),
        ]
        for use, folder, files in groups:
            if not files:
                continue
            grp = etree.SubElement(file_sec, _mets("fileGrp"))
            grp.set("ID", f"file-grp-{folder}")
            grp.set("USE", use)
            for n, ip_file in enumerate(files, start=1):
                href = f"{folder}/{ip_file.name}"
                file_el = etree.SubElement(grp, _mets("file"))
                file_el.set("ID", f"file-{folder}-{n}")
                self._set_file_attributes(file_el, package_dir / href, package)
                flocat = etree.SubElement(file_el, _mets("FLocat"))
                flocat.set("LOCTYPE", "URL")
                flocat.set(f"{{{XLINK_NS}}}type", "simple")
                flocat.set(f"{{{XLINK_NS}}}href", href)

        return file_sec

    def _build_struct_map(
        self,
        package: InformationPackage,
        dmd_ids: list[str],
        digiprov_ids: list[str],
    ) -> etree._Element:
        """Build the CSIP physical structMap."""
        struct_map = etree.Element(_mets("structMap"))
        struct_map.set("ID", "struct-map-1")
        struct_map.set("TYPE", "PHYSICAL")
        struct_map.set("LABEL", "CSIP")

        root_div = etree.SubElement(struct_map, _mets("div"))
        root_div.set("ID", "struct-map-div")
        root_div.set("LABEL", package.id)

        if dmd_ids or digiprov_ids:
            md_div = etree.SubElement(root_div, _mets("div"))
            md_div.set("ID", "struct-map-metadata-div")
            md_div.set("LABEL", "Metadata")
            if dmd_ids:
                md_div.set("DMDID", " ".join(dmd_ids))
            if digiprov_ids:
                md_div.set("ADMID", " ".join(digiprov_ids))

        for label, folder, files in [
            ("Schemas", SCHEMAS, package.schemas),
            ("Submission", SUBMISSION, package.submissions),
        ]:
            if not files:
                continue
            div = etree.SubElement(root_div, _mets("div"))
            div.set("ID", f"struct-map-{folder}-div")
            div.set("LABEL", label)
            fptr = etree.SubElement(div, _mets("fptr"))
            fptr.set("FILEID", f"file-grp-{folder}")

        return struct_map

    def _set_file_attributes(
        self, element: etree._Element, path: Path, package: InformationPackage
    ) -> None:
        """Set MIMETYPE, SIZE, CREATED and checksum attributes for a file."""
        if not path.is_file():
            raise PackageBuildError(f"Referenced file missing from package: {path}")
        element.set("MIMETYPE", _media_type(path))
        element.set("SIZE", str(path.stat().st_size))
        element.set("CREATED", _timestamp(package.created))
        element.set("CHECKSUM", _compute_checksum(path))
        element.set("CHECKSUMTYPE", "SHA-256")


def _timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def _media_type(path: Path) -> str:
    if path.suffix.lower() in (".xml", ".xsd"):
        return "text/xml"
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type or "application/octet-stream"


def _compute_checksum(file_path: Path) -> str:
    """Compute the SHA-256 checksum of a file.

    Returns:
        Upper-case hex-encoded SHA-256 hash
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return sha256.hexdigest().upper()
