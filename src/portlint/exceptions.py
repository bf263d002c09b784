"""Fatal errors raised by portlint.

Lint violations are never raised; they are counted. The exceptions below mean
the environment is broken or an internal invariant does not hold, and they
abort the whole validation run.
"""

from pathlib import Path


class PortlintError(Exception):
    """Base class for all fatal portlint errors."""


class ToolInvocationError(PortlintError):
    """The external binary-introspection tool exited with a non-zero status."""

    def __init__(self, command: list[str], exit_code: int, output: str):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        command_line = " ".join(f'"{part}"' for part in command)
        super().__init__(
            f"Running command:\n   {command_line}\n failed with exit code {exit_code} and message:\n{output}"
        )


class CoffFormatError(PortlintError):
    """A binary artifact does not have a readable PE/COFF header."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read binary header of {path.as_posix()}: {reason}")


class InconsistentArchiveError(PortlintError):
    """A static library reports more than one distinct machine type."""

    def __init__(self, path: Path, architectures: list[str]):
        self.path = path
        self.architectures = architectures
        super().__init__(
            f"Found more than 1 architecture in file {path.as_posix()}: {', '.join(architectures)}"
        )


class UnknownLinkageError(PortlintError):
    """The build reported a library linkage mode the check suite does not know."""

    def __init__(self, linkage: object):
        self.linkage = linkage
        super().__init__(f"Unrecognized library linkage: {linkage!r}")


class CapabilityUnavailableError(PortlintError):
    """An inspector was asked for metadata no configured strategy can provide."""

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"No binary inspector provides the '{capability}' capability")
