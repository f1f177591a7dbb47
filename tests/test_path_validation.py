"""
Tests for path validation of mapping files.

Covers path traversal, symlinks, extensions, reserved device names and
encoding failures when reading mapping sheets and transcripts.
"""

import os
import platform

import pytest

from layermap.path_validation import MAPPING_EXTENSIONS, PathValidator, read_mapping_file


class TestPathValidatorValidateFile:
    """Tests for PathValidator.validate_file() method."""

    def test_valid_csv_file_returns_resolved_path(self, tmp_path):
        """Test that a valid mapping file returns its resolved path."""
        test_file = tmp_path / "mapping.csv"
        test_file.write_text("raw_a,x,fdp_b,y")

        result = PathValidator().validate_file(str(test_file), allowed_extensions=[".csv"])

        assert result == test_file.resolve()

    def test_nonexistent_file_raises_error(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="does not exist"):
            PathValidator().validate_file(str(tmp_path / "missing.csv"), allowed_extensions=[".csv"])

    def test_directory_instead_of_file_raises_error(self, tmp_path):
        """Test that a directory is rejected."""
        directory = tmp_path / "dir.csv"
        directory.mkdir()

        with pytest.raises(ValueError, match="not a file"):
            PathValidator().validate_file(str(directory), allowed_extensions=[".csv"])

    def test_wrong_extension_raises_error(self, tmp_path):
        """Test that unexpected extensions are rejected."""
        test_file = tmp_path / "mapping.exe"
        test_file.write_text("x")

        with pytest.raises(ValueError, match="Invalid file extension"):
            PathValidator().validate_file(str(test_file), allowed_extensions=MAPPING_EXTENSIONS)

    def test_case_insensitive_extension_matching(self, tmp_path):
        """Test that .CSV matches .csv."""
        test_file = tmp_path / "MAPPING.CSV"
        test_file.write_text("x")

        assert PathValidator().validate_file(str(test_file), allowed_extensions=[".csv"]).exists()

    def test_path_traversal_detected(self, tmp_path):
        """Test that '..' components are rejected before resolution."""
        (tmp_path / "mapping.csv").write_text("x")
        traversal = str(tmp_path / "sub" / ".." / "mapping.csv")

        with pytest.raises(ValueError, match="[Pp]ath traversal"):
            PathValidator().validate_file(traversal, allowed_extensions=[".csv"])

    def test_file_outside_base_dir_rejected(self, tmp_path):
        """Test the base directory restriction."""
        base = tmp_path / "base"
        base.mkdir()
        outside = tmp_path / "outside.csv"
        outside.write_text("x")

        with pytest.raises(ValueError, match="escapes the base directory"):
            PathValidator().validate_file(str(outside), allowed_extensions=[".csv"], base_dir=base)

    @pytest.mark.skipif(platform.system() == "Windows", reason="symlinks need privileges")
    def test_symlink_rejected_by_default(self, tmp_path):
        """Test that symlinks are refused unless allowed."""
        target = tmp_path / "real.csv"
        target.write_text("x")
        link = tmp_path / "link.csv"
        os.symlink(target, link)

        with pytest.raises(ValueError, match="Symbolic links"):
            PathValidator().validate_file(str(link), allowed_extensions=[".csv"])

        resolved = PathValidator().validate_file(
            str(link), allowed_extensions=[".csv"], allow_symlinks=True
        )
        assert resolved == target.resolve()

    def test_reserved_names_rejected(self, tmp_path):
        """Test that Windows device names are rejected on every platform."""
        test_file = tmp_path / "con.csv"
        test_file.write_text("x")

        with pytest.raises(ValueError, match="Reserved Windows device name"):
            PathValidator().validate_file(str(test_file), allowed_extensions=[".csv"])


class TestEdgeCases:
    """Tests for degenerate inputs."""

    def test_empty_path_rejected(self):
        """Test that an empty path is rejected."""
        with pytest.raises(ValueError, match="empty"):
            PathValidator().validate_file("   ", allowed_extensions=[".csv"])

    def test_none_path_raises_type_error(self):
        """Test that None raises TypeError."""
        with pytest.raises(TypeError):
            PathValidator().validate_file(None, allowed_extensions=[".csv"])


class TestReadMappingFile:
    """Tests for read_mapping_file()."""

    def test_valid_file_returns_content(self, tmp_path):
        """Test reading a transcript file."""
        test_file = tmp_path / "diagram.txt"
        test_file.write_text("ODP: SRC\nFDP: TGT\nid -> id", encoding="utf-8")

        assert read_mapping_file(test_file) == "ODP: SRC\nFDP: TGT\nid -> id"

    def test_default_extensions(self, tmp_path):
        """Test that SQL files are not accepted as mapping input."""
        test_file = tmp_path / "model.sql"
        test_file.write_text("SELECT 1")

        with pytest.raises(ValueError, match="Invalid file extension"):
            read_mapping_file(test_file)

    def test_unicode_decode_error_handled(self, tmp_path):
        """Test that binary content raises ValueError."""
        test_file = tmp_path / "binary.csv"
        test_file.write_bytes(b"\xff\xfe\x00\x80")

        with pytest.raises(ValueError, match="not valid UTF-8"):
            read_mapping_file(test_file)
