"""Binary artifact metadata extraction."""

from .inspector import (
    BinaryInspector,
    Capability,
    CoffHeaderInspector,
    CompositeInspector,
    DumpbinInspector,
    ToolingCapabilities,
)
from .machine import MachineType, get_actual_architecture

__all__ = [
    "BinaryInspector",
    "Capability",
    "CoffHeaderInspector",
    "CompositeInspector",
    "DumpbinInspector",
    "ToolingCapabilities",
    "MachineType",
    "get_actual_architecture",
]
