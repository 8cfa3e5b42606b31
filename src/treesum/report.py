"""Key/value checksum report.

The report is INI-shaped::

    [Config]
    hash=sha1
    [Files]
    path/to/file=<hex digest>
    [Errors]
    path/to/other=<description>

Paths may contain ``=``; digests never do, so file lines are split
on the last ``=``. Error lines are split on the first ``=`` that is
followed by a known error description.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from treesum.errors import ReportFormatError
from treesum.models.results import ChecksumError, ErrorKind, FileChecksum, Result

CONFIG_SECTION = "Config"
FILES_SECTION = "Files"
ERRORS_SECTION = "Errors"

_DESCRIPTIONS = tuple(kind.description for kind in ErrorKind)


def _split_error_line(line: str) -> tuple[str, str]:
    """Split ``path=description`` where the path itself may contain ``=``."""
    start = line.find("=")
    while start != -1:
        if line.startswith(_DESCRIPTIONS, start + 1):
            return line[:start], line[start + 1 :]
        start = line.find("=", start + 1)

    path, _, description = line.partition("=")
    return path, description


@dataclass
class ReportDiff:
    """Differences between a report and a fresh set of results."""

    changed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failed: list[ChecksumError] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.changed or self.added or self.missing or self.failed)


@dataclass
class ChecksumReport:
    """Digests and errors of one run, keyed by path."""

    algorithm: str
    files: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    def add(self, result: Result) -> None:
        if isinstance(result, FileChecksum):
            self.files[result.path] = result.hexdigest
        else:
            self.errors[result.path] = result.describe()

    def render(self, stream: TextIO) -> None:
        """Write the report, files and errors sorted by path."""
        stream.write(f"[{CONFIG_SECTION}]\nhash={self.algorithm}\n")
        stream.write(f"[{FILES_SECTION}]\n")
        for path in sorted(self.files):
            stream.write(f"{path}={self.files[path]}\n")
        if self.errors:
            stream.write(f"[{ERRORS_SECTION}]\n")
            for path in sorted(self.errors):
                stream.write(f"{path}={self.errors[path]}\n")

    @classmethod
    def parse(cls, text: str) -> "ChecksumReport":
        """
        Parse report text.

        Raises:
            ReportFormatError: If the text is not a valid report.
        """
        algorithm: str | None = None
        files: dict[str, str] = {}
        errors: dict[str, str] = {}
        section: str | None = None

        for number, raw in enumerate(text.splitlines(), start=1):
            line = raw.rstrip("\r")
            if not line.strip() or line.lstrip().startswith(("#", ";")):
                continue

            if line.startswith("[") and line.endswith("]"):
                section = line[1:-1].strip()
                if section not in (CONFIG_SECTION, FILES_SECTION, ERRORS_SECTION):
                    raise ReportFormatError(f"unknown section [{section}]", number)
                continue

            if section is None:
                raise ReportFormatError("entry outside of a section", number)
            if "=" not in line:
                raise ReportFormatError(f"expected key=value, got {line!r}", number)

            if section == FILES_SECTION:
                path, _, digest = line.rpartition("=")
                files[path] = digest.strip().lower()
            elif section == ERRORS_SECTION:
                path, description = _split_error_line(line)
                errors[path] = description
            else:
                key, _, value = line.partition("=")
                if key.strip() == "hash":
                    algorithm = value.strip()

        if not algorithm:
            raise ReportFormatError(f"missing hash entry in [{CONFIG_SECTION}]")

        return cls(algorithm=algorithm, files=files, errors=errors)

    @classmethod
    def load(cls, path: Path) -> "ChecksumReport":
        return cls.parse(path.read_text(encoding="utf-8"))

    def compare(self, results: Iterable[Result], expected: Iterable[str] | None = None) -> ReportDiff:
        """
        Compare fresh results against this report.

        Args:
            results: Results of re-hashing.
            expected: Recorded paths that should have produced a result;
                any of them without one is reported missing. Defaults to
                every recorded file.

        Returns:
            ReportDiff with paths sorted.
        """
        diff = ReportDiff()
        seen: set[str] = set()

        for result in results:
            seen.add(result.path)
            if isinstance(result, ChecksumError):
                # A recorded file that no longer exists is missing, not failed
                if result.kind == ErrorKind.CANNOT_BE_READ and result.path in self.files:
                    diff.missing.append(result.path)
                else:
                    diff.failed.append(result)
                continue

            recorded = self.files.get(result.path)
            if recorded is None:
                diff.added.append(result.path)
            elif recorded != result.hexdigest:
                diff.changed.append(result.path)

        scope = self.files if expected is None else expected
        diff.missing.extend(path for path in scope if path in self.files and path not in seen)

        diff.changed.sort()
        diff.added.sort()
        diff.missing.sort()
        diff.failed.sort(key=lambda error: error.path)
        return diff

    def paths_under(self, roots: Iterable[Path]) -> list[str]:
        """Recorded file paths equal to, or beneath, any of ``roots``."""
        prefixes = [Path(root) for root in roots]
        return [
            path
            for path in self.files
            if any(Path(path) == root or root in Path(path).parents for root in prefixes)
        ]
