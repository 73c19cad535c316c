"""Tests for rewriting the declared package type of a built manifest."""

import pytest

from csip_converter.exceptions import InternalInconsistencyError, ManifestPatchError
from csip_converter.manifest_patcher import package_type_marker, patch_package_type
from schemas.package import IPType


@pytest.fixture
def built(tmp_path):
    """Build directory holding pkg-1/METS.xml declared as AIP."""
    package_dir = tmp_path / "build" / "pkg-1"
    package_dir.mkdir(parents=True)
    (package_dir / "METS.xml").write_text(
        '<mets:mets OBJID="pkg-1">\n'
        '  <mets:metsHdr csip:OAISPACKAGETYPE="AIP"/>\n'
        '  <mets:note>AIP</mets:note>\n'
        "</mets:mets>\n",
        encoding="utf-8",
    )
    return tmp_path / "build"


class TestPackageTypeMarker:
    def test_marker(self):
        assert package_type_marker(IPType.DIP) == 'csip:OAISPACKAGETYPE="DIP"'


class TestPatchPackageType:
    def test_rewrites_declaration(self, built):
        """patch_package_type() replaces the declared type."""
        path = patch_package_type(built, "pkg-1", IPType.AIP, IPType.DIP)
        text = path.read_text(encoding="utf-8")
        assert 'csip:OAISPACKAGETYPE="DIP"' in text
        assert 'csip:OAISPACKAGETYPE="AIP"' not in text

    def test_leaves_other_text_alone(self, built):
        """Only the type declaration is rewritten."""
        path = patch_package_type(built, "pkg-1", IPType.AIP, IPType.DIP)
        assert "<mets:note>AIP</mets:note>" in path.read_text(encoding="utf-8")

    def test_missing_declaration_fails(self, built):
        """A manifest lacking the expected declaration is not archived unpatched."""
        with pytest.raises(ManifestPatchError, match="refusing to archive") as exc_info:
            patch_package_type(built, "pkg-1", IPType.SIP, IPType.DIP)
        assert exc_info.value.manifest_path.endswith("METS.xml")
        assert isinstance(exc_info.value, InternalInconsistencyError)

    def test_missing_manifest_raises_os_error(self, tmp_path):
        """A manifest that was never written surfaces as an OSError."""
        with pytest.raises(FileNotFoundError):
            patch_package_type(tmp_path, "pkg-1", IPType.AIP, IPType.DIP)
