"""One interface over the two ways of extracting binary metadata.

Checks ask an inspector for the architecture, exports, app-container bit,
dependent runtimes or CRT directives of an artifact without knowing whether
the answer comes from reading the header directly or from ``dumpbin``.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from portlint.binary import coff
from portlint.binary.dumpbin import (
    DumpbinMode,
    DumpbinTool,
    first_match,
    has_app_container_marker,
    has_export_table,
)
from portlint.binary.machine import get_actual_architecture
from portlint.crt_database import OutdatedRuntimeEntry
from portlint.exceptions import CapabilityUnavailableError, InconsistentArchiveError
from portlint.models.build_type import BuildType

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Kinds of metadata an inspector can extract."""
    ARCHITECTURE = "architecture"
    EXPORTS = "exports"
    APP_CONTAINER = "app_container"
    DEPENDENTS = "dependents"
    DIRECTIVES = "directives"


class BinaryInspector(ABC):
    """Extracts metadata from DLLs and static libraries."""

    @property
    @abstractmethod
    def capabilities(self) -> frozenset[Capability]:
        pass

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def dll_architecture(self, dll: Path) -> str:
        """Architecture name of a DLL (``x64``, ``x86``, ``arm``, ``arm64`` ...)."""
        raise CapabilityUnavailableError(Capability.ARCHITECTURE.value)

    def lib_architecture(self, lib: Path) -> str | None:
        """Architecture name of a static library, or None when it reports no machine type.

        Raises:
            InconsistentArchiveError: If the library mixes architectures
        """
        raise CapabilityUnavailableError(Capability.ARCHITECTURE.value)

    def has_exports(self, dll: Path) -> bool:
        raise CapabilityUnavailableError(Capability.EXPORTS.value)

    def has_app_container_bit(self, dll: Path) -> bool:
        raise CapabilityUnavailableError(Capability.APP_CONTAINER.value)

    def find_outdated_runtime(
        self, dll: Path, entries: Sequence[OutdatedRuntimeEntry]
    ) -> OutdatedRuntimeEntry | None:
        """First entry found among the DLL's dependents, if any."""
        raise CapabilityUnavailableError(Capability.DEPENDENTS.value)

    def find_crt_linkage(self, lib: Path, build_types: Sequence[BuildType]) -> BuildType | None:
        """First build type whose CRT marker appears in the library's directives, if any."""
        raise CapabilityUnavailableError(Capability.DIRECTIVES.value)


class CoffHeaderInspector(BinaryInspector):
    """Reads machine types straight from PE/COFF headers."""

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset({Capability.ARCHITECTURE})

    def dll_architecture(self, dll: Path) -> str:
        return get_actual_architecture(coff.read_dll(dll).machine_type)

    def lib_architecture(self, lib: Path) -> str | None:
        machine_types = coff.read_lib(lib).machine_types
        if not machine_types:
            return None

        architectures = [get_actual_architecture(m) for m in machine_types]
        if len(machine_types) > 1:
            raise InconsistentArchiveError(Path(lib), architectures)
        return architectures[0]


class DumpbinInspector(BinaryInspector):
    """Answers metadata questions by parsing ``dumpbin`` reports."""

    def __init__(self, tool: DumpbinTool):
        self.tool = tool

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset({
            Capability.EXPORTS,
            Capability.APP_CONTAINER,
            Capability.DEPENDENTS,
            Capability.DIRECTIVES,
        })

    def has_exports(self, dll: Path) -> bool:
        return has_export_table(self.tool.run(DumpbinMode.EXPORTS, dll))

    def has_app_container_bit(self, dll: Path) -> bool:
        return has_app_container_marker(self.tool.run(DumpbinMode.HEADERS, dll))

    def find_outdated_runtime(
        self, dll: Path, entries: Sequence[OutdatedRuntimeEntry]
    ) -> OutdatedRuntimeEntry | None:
        output = self.tool.run(DumpbinMode.DEPENDENTS, dll)
        return first_match(output, entries, lambda entry: entry.regex)

    def find_crt_linkage(self, lib: Path, build_types: Sequence[BuildType]) -> BuildType | None:
        output = self.tool.run(DumpbinMode.DIRECTIVES, lib)
        return first_match(output, build_types, lambda build_type: build_type.crt_regex)


class CompositeInspector(BinaryInspector):
    """Routes each query to the first inspector that supports it."""

    def __init__(self, inspectors: Sequence[BinaryInspector]):
        self.inspectors = list(inspectors)

    @property
    def capabilities(self) -> frozenset[Capability]:
        combined: set[Capability] = set()
        for inspector in self.inspectors:
            combined |= inspector.capabilities
        return frozenset(combined)

    def _provider(self, capability: Capability) -> BinaryInspector:
        for inspector in self.inspectors:
            if inspector.supports(capability):
                return inspector
        raise CapabilityUnavailableError(capability.value)

    def dll_architecture(self, dll: Path) -> str:
        return self._provider(Capability.ARCHITECTURE).dll_architecture(dll)

    def lib_architecture(self, lib: Path) -> str | None:
        return self._provider(Capability.ARCHITECTURE).lib_architecture(lib)

    def has_exports(self, dll: Path) -> bool:
        return self._provider(Capability.EXPORTS).has_exports(dll)

    def has_app_container_bit(self, dll: Path) -> bool:
        return self._provider(Capability.APP_CONTAINER).has_app_container_bit(dll)

    def find_outdated_runtime(
        self, dll: Path, entries: Sequence[OutdatedRuntimeEntry]
    ) -> OutdatedRuntimeEntry | None:
        return self._provider(Capability.DEPENDENTS).find_outdated_runtime(dll, entries)

    def find_crt_linkage(self, lib: Path, build_types: Sequence[BuildType]) -> BuildType | None:
        return self._provider(Capability.DIRECTIVES).find_crt_linkage(lib, build_types)


@dataclass(frozen=True)
class ToolingCapabilities:
    """What binary tooling is available on this host, decided once per run."""
    header_parsing: bool
    dumpbin: Path | None = None

    @classmethod
    def detect(cls, header_parsing: bool = True, dumpbin: str | Path | None = None) -> "ToolingCapabilities":
        """Probe the host for binary tooling.

        Args:
            header_parsing: Whether native header parsing is allowed
            dumpbin: Explicit tool path; when None, ``dumpbin`` is looked up on PATH
        """
        if dumpbin is None:
            found = shutil.which("dumpbin")
            tool_path = Path(found) if found else None
        else:
            tool_path = Path(dumpbin)

        capabilities = cls(header_parsing=header_parsing, dumpbin=tool_path)
        logger.info(
            f"Binary tooling: header parsing {'enabled' if header_parsing else 'disabled'}, "
            f"dumpbin {tool_path or 'not found'}"
        )
        return capabilities

    def create_inspector(self) -> CompositeInspector:
        inspectors: list[BinaryInspector] = []
        if self.header_parsing:
            inspectors.append(CoffHeaderInspector())
        if self.dumpbin is not None:
            inspectors.append(DumpbinInspector(DumpbinTool(self.dumpbin)))
        return CompositeInspector(inspectors)
