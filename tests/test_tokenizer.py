"""
Tests for format detection and line splitting.
"""

from layermap import InputFormat, detect_format, split_field_tokens, split_lines


class TestDetectFormat:
    """Test the global CSV/transcript decision."""

    def test_csv(self):
        """Test that plain comma rows are CSV."""
        assert detect_format("raw_customers,customer_id,fdp_customer,id,STRING") == InputFormat.CSV

    def test_header_markers(self):
        """Test that any layer header marker makes the blob a transcript."""
        assert detect_format("ODP: CUSTOMER") == InputFormat.TRANSCRIPT
        assert detect_format("some text\nFDP: X") == InputFormat.TRANSCRIPT
        assert detect_format("CDP: Y") == InputFormat.TRANSCRIPT

    def test_arrow(self):
        """Test that an arrow token makes the blob a transcript."""
        assert detect_format("a.x -> b.y") == InputFormat.TRANSCRIPT

    def test_dot_notation_alone_is_csv(self):
        """Test that dot-notation headers without markers do not flip the format."""
        assert detect_format("ODP.CUST FDP.CUST_CLEAN") == InputFormat.CSV

    def test_empty(self):
        """Test that empty content is CSV."""
        assert detect_format("") == InputFormat.CSV


class TestSplitLines:
    """Test transcript line splitting."""

    def test_trims_and_drops_short_lines(self):
        """Test that blank and single-character lines are dropped."""
        assert split_lines("  ODP: A  \n\n-\nx\n  id -> id\r\n") == ["ODP: A", "id -> id"]


class TestSplitFieldTokens:
    """Test loose field token filtering."""

    def test_splits_on_whitespace_and_pipe(self):
        """Test that pipes and whitespace both separate tokens."""
        assert split_field_tokens("CUST_ID | NAME\tEMAIL") == ["CUST_ID", "NAME", "EMAIL"]

    def test_drops_noise(self):
        """Test that short, non-alphanumeric and reserved tokens are dropped."""
        tokens = split_field_tokens("a id NULL odp name-x (x) amount")
        assert tokens == ["amount"]
