"""Diagnostics emitted by checks and the log they are collected in."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path


class LintStatus(IntEnum):
    """Verdict of one check. The error count of a run is the sum of verdicts."""
    SUCCESS = 0
    ERROR_DETECTED = 1


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A single message, optionally naming the paths it is about."""
    severity: Severity
    message: str
    paths: tuple[Path, ...] = ()
    check: str | None = None

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"    {path.as_posix()}" for path in self.paths)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "check": self.check,
            "severity": self.severity.value,
            "message": self.message,
            "paths": [path.as_posix() for path in self.paths],
        }


@dataclass
class DiagnosticLog:
    """Append-only list of diagnostics produced by one check (or the run itself)."""
    check: str | None = None
    entries: list[Diagnostic] = field(default_factory=list)

    def _add(self, severity: Severity, message: str, paths: Iterable[Path]) -> None:
        self.entries.append(Diagnostic(severity, message, tuple(Path(p) for p in paths), self.check))

    def info(self, message: str, paths: Iterable[Path] = ()) -> None:
        self._add(Severity.INFO, message, paths)

    def warning(self, message: str, paths: Iterable[Path] = ()) -> None:
        self._add(Severity.WARNING, message, paths)

    def error(self, message: str, paths: Iterable[Path] = ()) -> None:
        self._add(Severity.ERROR, message, paths)

    @property
    def text(self) -> str:
        """All messages joined, for assertions and plain-text output."""
        return "\n".join(str(entry) for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)
