"""
Unit tests for cad_svg.io.dxf_loader module.
"""

import pytest

from cad_svg.io.dxf_loader import DXFInfo, DXFLoadError, load_dxf


class TestLoadDxf:
    """Tests for load_dxf function."""

    def test_valid_file(self, sample_dxf_path):
        """Test loading a valid DXF file."""
        doc, info = load_dxf(str(sample_dxf_path))

        assert isinstance(info, DXFInfo)
        assert info.dxf_version == doc.dxfversion
        assert info.n_modelspace_entities == 11
        assert info.file_size_bytes > 0
        assert info.recovered is False

    def test_recover_mode(self, sample_dxf_path):
        """Test loading through ezdxf.recover."""
        doc, info = load_dxf(str(sample_dxf_path), use_recover=True)
        assert len(doc.modelspace()) == 11

    def test_missing_file(self, tmp_path):
        """Test error for a file that does not exist."""
        with pytest.raises(DXFLoadError):
            load_dxf(str(tmp_path / "missing.dxf"))

    def test_not_a_dxf_file(self, tmp_path):
        """Test error for a file that is not DXF."""
        path = tmp_path / "broken.dxf"
        path.write_text("this is not a DXF file")

        with pytest.raises(DXFLoadError):
            load_dxf(str(path))

    def test_file_size_kb(self):
        """Test size conversion to kilobytes."""
        info = DXFInfo('a.dxf', 'AC1024', 2048, 1, 0, 0)
        assert info.file_size_kb == 2.0
