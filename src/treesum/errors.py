"""treesum error types.

All custom exceptions inherit from TreesumError to allow
catching any treesum-specific error. Per-file failures are
not raised; they travel on the result stream as ChecksumError
values (see treesum.models.results).
"""


class TreesumError(Exception):
    """Base exception for all treesum errors."""

    pass


class ConfigurationError(TreesumError):
    """Invalid configuration."""

    pass


class UnsupportedAlgorithmError(TreesumError):
    """Requested digest algorithm is not available in this runtime."""

    def __init__(self, algorithm: str, reason: str | None = None) -> None:
        message = f"Digest algorithm not available: {algorithm}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.algorithm = algorithm


class HashWriteError(TreesumError):
    """Digest accumulator rejected or short-wrote a chunk."""

    def __init__(self, message: str, expected: int | None = None, written: int | None = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.written = written


class DigestFinalizedError(TreesumError):
    """Digest was finalized more than once."""

    pass


class ReportFormatError(TreesumError):
    """Checksum report could not be parsed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
