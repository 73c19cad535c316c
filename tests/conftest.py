"""Pytest fixtures for csip-converter tests."""

import zipfile
from pathlib import Path

import pytest

from csip_converter.config import CSIP_PROFILE, ConverterSettings

SIP_ID = "uuid-B3E228EE-B429-45D8-B814-5F567B1A8754"

DC_XML = """<?xml version="1.0" encoding="UTF-8"?>
<oai_dc:dc xmlns:oai_dc="http://www.openarchives.org/OAI/2.0/oai_dc/"
           xmlns:dc="http://purl.org/dc/elements/1.1/">
  <dc:title>Minutes of the Board, 1962</dc:title>
  <dc:creator>City Archives</dc:creator>
</oai_dc:dc>
"""

PREMIS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<premis:premis xmlns:premis="http://www.loc.gov/premis/v3" version="3.0">
  <premis:agent>
    <premis:agentName>Submission Tool</premis:agentName>
    <premis:agentType>Software</premis:agentType>
  </premis:agent>
</premis:premis>
"""


def _mets_xml(
    package_id: str,
    package_type: str,
    profile: str,
    descriptive: tuple[str, ...],
    preservation: tuple[str, ...],
) -> str:
    dmd_secs = "".join(
        f"""
  <mets:dmdSec ID="dmd-{n}" STATUS="CURRENT">
    <mets:mdRef LOCTYPE="URL" xlink:type="simple" xlink:href="metadata/descriptive/{name}" MDTYPE="DC"/>
  </mets:dmdSec>"""
        for n, name in enumerate(descriptive, start=1)
    )
    digiprov = "".join(
        f"""
    <mets:digiprovMD ID="digiprov-{n}" STATUS="CURRENT">
      <mets:mdRef LOCTYPE="URL" xlink:type="simple" xlink:href="metadata/preservation/{name}" MDTYPE="PREMIS"/>
    </mets:digiprovMD>"""
        for n, name in enumerate(preservation, start=1)
    )
    amd_sec = f"\n  <mets:amdSec>{digiprov}\n  </mets:amdSec>" if preservation else ""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<mets:mets xmlns:mets="http://www.loc.gov/METS/"
           xmlns:csip="https://DILCIS.eu/XML/METS/CSIPExtensionMETS"
           xmlns:xlink="http://www.w3.org/1999/xlink"
           OBJID="{package_id}" TYPE="Mixed" csip:CONTENTINFORMATIONTYPE="MIXED"
           PROFILE="{profile}">
  <mets:metsHdr CREATEDATE="2024-03-01T10:00:00+00:00" RECORDSTATUS="NEW" csip:OAISPACKAGETYPE="{package_type}">
    <mets:agent ROLE="CREATOR" TYPE="OTHER" OTHERTYPE="SOFTWARE">
      <mets:name>Submission Tool</mets:name>
      <mets:note csip:NOTETYPE="SOFTWARE VERSION">2.0</mets:note>
    </mets:agent>
  </mets:metsHdr>{dmd_secs}{amd_sec}
  <mets:structMap TYPE="PHYSICAL" LABEL="CSIP">
    <mets:div LABEL="{package_id}"/>
  </mets:structMap>
</mets:mets>
"""


@pytest.fixture
def make_package_dir(tmp_path):
    """Factory writing an unpacked E-ARK package directory.

    Structure::

        {parent}/{package_id}/
          METS.xml
          metadata/descriptive/DC.xml
          metadata/preservation/*.xml   (when preservation is given)
          representations/rep1/data/letter.txt
          schemas/*.xsd                 (when schemas is given)
    """
    made = []

    def _make(
        package_id: str = SIP_ID,
        package_type: str = "SIP",
        profile: str = CSIP_PROFILE,
        descriptive: tuple[str, ...] = ("DC.xml",),
        preservation: tuple[str, ...] = (),
        schemas: tuple[str, ...] = (),
        mets: str | None = None,
    ) -> Path:
        package_dir = tmp_path / f"src-{len(made)}" / package_id
        made.append(package_dir)

        for name in descriptive:
            path = package_dir / "metadata" / "descriptive" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(DC_XML)
        for name in preservation:
            path = package_dir / "metadata" / "preservation" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(PREMIS_XML)
        for name in schemas:
            path = package_dir / "schemas" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"<!-- {name} -->\n")

        data = package_dir / "representations" / "rep1" / "data" / "letter.txt"
        data.parent.mkdir(parents=True, exist_ok=True)
        data.write_text("Dear Board,\n")

        if mets is None:
            mets = _mets_xml(package_id, package_type, profile, descriptive, preservation)
        (package_dir / "METS.xml").write_text(mets)
        return package_dir

    return _make


@pytest.fixture
def make_package(tmp_path, make_package_dir):
    """Factory writing a zipped E-ARK package; accepts make_package_dir's arguments."""

    def _make(**kwargs) -> Path:
        package_dir = make_package_dir(**kwargs)
        zip_path = package_dir.parent / f"{package_dir.name}.zip"
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in sorted(package_dir.rglob("*")):
                if path.is_file():
                    zf.write(path, path.relative_to(package_dir.parent).as_posix())
        return zip_path

    return _make


@pytest.fixture
def sip_zip(make_package) -> Path:
    """Zipped SIP with DC.xml descriptive metadata and no schemas."""
    return make_package()


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def settings(staging_dir) -> ConverterSettings:
    """Settings staging into a per-test directory."""
    return ConverterSettings(staging_dir=staging_dir)
