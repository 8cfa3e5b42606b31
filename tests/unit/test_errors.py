"""Tests for treesum error types."""

from treesum.errors import (
    ConfigurationError,
    DigestFinalizedError,
    HashWriteError,
    ReportFormatError,
    TreesumError,
    UnsupportedAlgorithmError,
)


class TestErrorHierarchy:
    """Test error class hierarchy."""

    def test_all_errors_inherit_from_treesum_error(self) -> None:
        """All custom errors should inherit from TreesumError."""
        assert issubclass(ConfigurationError, TreesumError)
        assert issubclass(UnsupportedAlgorithmError, TreesumError)
        assert issubclass(HashWriteError, TreesumError)
        assert issubclass(DigestFinalizedError, TreesumError)
        assert issubclass(ReportFormatError, TreesumError)

    def test_treesum_error_inherits_from_exception(self) -> None:
        assert issubclass(TreesumError, Exception)


class TestUnsupportedAlgorithmError:
    def test_stores_algorithm(self) -> None:
        error = UnsupportedAlgorithmError("whirlpool")
        assert error.algorithm == "whirlpool"
        assert "whirlpool" in str(error)

    def test_includes_reason(self) -> None:
        error = UnsupportedAlgorithmError("md5", "disabled for FIPS")
        assert str(error) == "Digest algorithm not available: md5 (disabled for FIPS)"


class TestHashWriteError:
    def test_stores_counts(self) -> None:
        error = HashWriteError("short write", expected=10, written=4)
        assert error.expected == 10
        assert error.written == 4

    def test_counts_default_to_none(self) -> None:
        error = HashWriteError("rejected")
        assert error.expected is None
        assert error.written is None


class TestReportFormatError:
    def test_prefixes_line_number(self) -> None:
        error = ReportFormatError("bad entry", line_number=3)
        assert str(error) == "line 3: bad entry"
        assert error.line_number == 3

    def test_without_line_number(self) -> None:
        assert str(ReportFormatError("missing hash")) == "missing hash"
