"""Adapter around ``dumpbin``, the external binary-introspection tool.

Each query runs the tool once against one artifact and scans its report for a
fixed marker. A failing tool aborts the run: the tool is trusted, so a non-zero
exit means the environment is broken rather than the package.
"""

import logging
import subprocess
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import TypeVar

from portlint.exceptions import ToolInvocationError

logger = logging.getLogger(__name__)

EXPORT_TABLE_MARKER = "ordinal hint RVA      name"
APP_CONTAINER_MARKER = "App Container"

T = TypeVar("T")


class DumpbinMode(str, Enum):
    """Inspection flags passed to the tool."""
    EXPORTS = "/exports"
    HEADERS = "/headers"
    DEPENDENTS = "/dependents"
    DIRECTIVES = "/directives"


class DumpbinTool:
    """Runs the tool and returns its textual report."""

    def __init__(self, executable: Path):
        self.executable = Path(executable)

    def run(self, mode: DumpbinMode, artifact: Path) -> str:
        """Run one inspection and return stdout and stderr combined.

        Raises:
            ToolInvocationError: If the tool cannot be started or exits with a non-zero status
        """
        command = [str(self.executable), mode.value, str(artifact)]
        logger.debug(f"Running {' '.join(command)}")
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error(f"Could not start {self.executable}: {e}")
            raise ToolInvocationError(command, -1, str(e)) from e
        if completed.returncode != 0:
            logger.error(f"{self.executable.name} {mode.value} failed on {artifact} with exit code {completed.returncode}")
            raise ToolInvocationError(command, completed.returncode, completed.stdout)
        return completed.stdout


def has_export_table(output: str) -> bool:
    return EXPORT_TABLE_MARKER in output


def has_app_container_marker(output: str) -> bool:
    return APP_CONTAINER_MARKER in output


def first_match(output: str, candidates: Iterable[T], pattern_of) -> T | None:
    """Return the first candidate whose pattern is found in ``output``.

    Args:
        output: Tool report to search
        candidates: Ordered candidates
        pattern_of: Callable returning the compiled regex of a candidate
    """
    for candidate in candidates:
        if pattern_of(candidate).search(output):
            return candidate
    return None
