"""Tests for AIP to DIP conversion."""

import io
import zipfile

import pytest

from csip_converter.config import DIP_PROFILE, ConverterSettings
from csip_converter.converters import AIPToDIPConverter, SIPToAIPConverter
from csip_converter.exceptions import ManifestPatchError, PackageFormatError
from csip_converter.parsers import EARKPackageParser
from schemas.package import IPType
from conftest import SIP_ID

AIP_ID = "aip-5d1f07c2-8f44-4a3c-a2e1-63a7c3c0e0aa"


@pytest.fixture
def converter(settings) -> AIPToDIPConverter:
    return AIPToDIPConverter(settings)


@pytest.fixture
def aip_zip(make_package):
    """Zipped AIP with descriptive and preservation metadata and no schemas."""
    return make_package(
        package_id=AIP_ID,
        package_type="AIP",
        preservation=("premis.xml",),
    )


@pytest.fixture
def output(tmp_path):
    path = tmp_path / "out" / "dip.zip"
    path.parent.mkdir()
    return path


def _manifest(archive, package_id) -> str:
    with zipfile.ZipFile(archive) as zf:
        return zf.read(f"{package_id}/METS.xml").decode("utf-8")


class TestAIPToDIPConversion:
    def test_returns_dip(self, converter, aip_zip, output):
        """convert() returns a DIP carrying the DIP profile."""
        dip = converter.convert(aip_zip, output)
        assert dip.type is IPType.DIP
        assert dip.profile == DIP_PROFILE
        assert dip.id != AIP_ID

    def test_manifest_declares_dip(self, converter, aip_zip, output):
        """The archived manifest declares DIP and no longer AIP."""
        dip = converter.convert(aip_zip, output)
        text = _manifest(output, dip.id)
        assert 'csip:OAISPACKAGETYPE="DIP"' in text
        assert 'csip:OAISPACKAGETYPE="AIP"' not in text

    def test_configured_profile(self, aip_zip, output, staging_dir):
        """The DIP profile comes from the settings."""
        settings = ConverterSettings(staging_dir=staging_dir, dip_profile="urn:local:dip")
        dip = AIPToDIPConverter(settings).convert(aip_zip, output)
        assert dip.profile == "urn:local:dip"
        assert 'PROFILE="urn:local:dip"' in _manifest(output, dip.id)

    def test_zip_entries(self, converter, aip_zip, output):
        """The DIP holds both metadata sets, default schemas and the AIP."""
        dip = converter.convert(aip_zip, output)
        assert set(dip.zip_entries) == {
            "METS.xml",
            "metadata/descriptive/DC.xml",
            "metadata/preservation/premis.xml",
            "schemas/DILCISExtensionMETS.xsd",
            "schemas/DILCISExtensionSIPMETS.xsd",
            "schemas/mets1_12.xsd",
            "schemas/xlink.xsd",
            f"submission/{AIP_ID}.zip",
        }

    def test_metadata_copied_unchanged(self, converter, aip_zip, output):
        """Metadata files are byte-identical to the AIP's."""
        dip = converter.convert(aip_zip, output)
        with zipfile.ZipFile(aip_zip) as zf:
            source_dc = zf.read(f"{AIP_ID}/metadata/descriptive/DC.xml")
            source_premis = zf.read(f"{AIP_ID}/metadata/preservation/premis.xml")
        with zipfile.ZipFile(output) as zf:
            assert zf.read(f"{dip.id}/metadata/descriptive/DC.xml") == source_dc
            assert zf.read(f"{dip.id}/metadata/preservation/premis.xml") == source_premis

    def test_manifest_reads_back(self, converter, aip_zip, output, tmp_path):
        """The written DIP parses with the converter's agent."""
        dip = converter.convert(aip_zip, output)
        target = tmp_path / "read-back"
        target.mkdir()
        parsed = EARKPackageParser().parse(output, target, expected_type=IPType.DIP)
        assert parsed.id == dip.id
        assert parsed.profile == DIP_PROFILE
        assert [a.name for a in parsed.agents] == ["csip-converter-AipToDip"]
        assert [m.metadata_type for m in parsed.preservation_metadata] == ["PREMIS"]

    def test_stream_destination(self, converter, aip_zip):
        """convert() writes to a binary stream."""
        out = io.BytesIO()
        dip = converter.convert(aip_zip, out)
        out.seek(0)
        assert 'csip:OAISPACKAGETYPE="DIP"' in _manifest(out, dip.id)

    def test_staging_cleaned_up(self, converter, aip_zip, output, staging_dir):
        converter.convert(aip_zip, output)
        assert list(staging_dir.iterdir()) == []


class TestAIPToDIPFailures:
    def test_rejects_sip_input(self, converter, sip_zip, output, staging_dir):
        """A SIP is not accepted where an AIP is expected."""
        with pytest.raises(PackageFormatError, match="Expected a AIP"):
            converter.convert(sip_zip, output)
        assert list(output.parent.iterdir()) == []
        assert list(staging_dir.iterdir()) == []

    def test_patch_failure_leaves_no_output(
        self, converter, aip_zip, output, staging_dir, monkeypatch
    ):
        """A manifest that cannot be patched is never archived."""

        def failing_patch(build_dir, package_id, source_type, target_type):
            raise ManifestPatchError("marker not found")

        monkeypatch.setattr(
            "csip_converter.converters.aip_to_dip.patch_package_type", failing_patch
        )
        with pytest.raises(ManifestPatchError):
            converter.convert(aip_zip, output)
        assert list(output.parent.iterdir()) == []
        assert list(staging_dir.iterdir()) == []


class TestSIPToAIPToDIP:
    def test_chain(self, settings, sip_zip, tmp_path):
        """A SIP converted to an AIP converts on to a DIP."""
        aip = SIPToAIPConverter(settings).convert(sip_zip, tmp_path / "aip.zip")
        dip = AIPToDIPConverter(settings).convert(tmp_path / "aip.zip", tmp_path / "dip.zip")

        assert dip.type is IPType.DIP
        assert set(dip.zip_entries) == {
            "METS.xml",
            "metadata/descriptive/DC.xml",
            "metadata/preservation/premis.xml",
            "schemas/DILCISExtensionMETS.xsd",
            "schemas/DILCISExtensionSIPMETS.xsd",
            "schemas/mets1_12.xsd",
            "schemas/premis.xsd",
            "schemas/xlink.xsd",
            f"submission/{aip.id}.zip",
        }

    def test_submissions_nest(self, settings, sip_zip, tmp_path):
        """The DIP's submission is the AIP, whose submission is the SIP."""
        aip = SIPToAIPConverter(settings).convert(sip_zip, tmp_path / "aip.zip")
        dip = AIPToDIPConverter(settings).convert(tmp_path / "aip.zip", tmp_path / "dip.zip")

        with zipfile.ZipFile(tmp_path / "dip.zip") as zf:
            aip_bundle = zf.read(f"{dip.id}/submission/{aip.id}.zip")
        with zipfile.ZipFile(io.BytesIO(aip_bundle)) as zf:
            assert f"submission/{SIP_ID}.zip" in zf.namelist()
            assert 'csip:OAISPACKAGETYPE="AIP"' in zf.read("METS.xml").decode("utf-8")
