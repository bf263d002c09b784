"""COFF machine types and their triplet architecture names."""

from enum import IntEnum


class MachineType(IntEnum):
    """Values of the ``Machine`` field of a COFF file header."""
    UNKNOWN = 0x0
    I386 = 0x14C
    R4000 = 0x166
    WCEMIPSV2 = 0x169
    SH3 = 0x1A2
    SH3DSP = 0x1A3
    SH4 = 0x1A6
    SH5 = 0x1A8
    ARM = 0x1C0
    THUMB = 0x1C2
    ARMNT = 0x1C4
    AM33 = 0x1D3
    POWERPC = 0x1F0
    POWERPCFP = 0x1F1
    IA64 = 0x200
    MIPS16 = 0x266
    MIPSFPU = 0x366
    MIPSFPU16 = 0x466
    EBC = 0xEBC
    AMD64 = 0x8664
    M32R = 0x9041
    ARM64 = 0xAA64


_ARCHITECTURES = {
    MachineType.AMD64: "x64",
    MachineType.IA64: "x64",
    MachineType.I386: "x86",
    MachineType.ARM: "arm",
    MachineType.ARMNT: "arm",
    MachineType.ARM64: "arm64",
}


def to_machine_type(value: int) -> MachineType | int:
    """Wrap a raw field value in ``MachineType`` when it is a known code."""
    try:
        return MachineType(value)
    except ValueError:
        return value


def get_actual_architecture(machine_type: MachineType | int) -> str:
    """Map a machine type to the architecture name used in triplets.

    Unrecognised codes map to ``"Machine Type Code = <n>"`` so they still show
    up as a mismatch against any real architecture.
    """
    architecture = _ARCHITECTURES.get(machine_type)
    if architecture is None:
        return f"Machine Type Code = {int(machine_type)}"
    return architecture
