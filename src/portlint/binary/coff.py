"""Native PE/COFF header reading for DLLs and static/import libraries.

Only the machine type is extracted. DLLs carry a single COFF file header
behind the DOS stub; ``.lib`` files are ``ar`` archives whose members are
either COFF objects or short import headers.
"""

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path

from portlint.binary.machine import MachineType, to_machine_type
from portlint.exceptions import CoffFormatError

logger = logging.getLogger(__name__)

PE_POINTER_OFFSET = 0x3C
PE_SIGNATURE = b"PE\0\0"
ARCHIVE_SIGNATURE = b"!<arch>\n"
ARCHIVE_HEADER_SIZE = 60
ARCHIVE_HEADER_END = b"`\n"
IMPORT_HEADER_SIG2 = 0xFFFF

# Linker, long-name and hybrid symbol-map members hold no object code
_SPECIAL_MEMBERS = {"/", "//", "/SYM64/", "/<ECSYMBOLS>/", "/<HYBRIDMAP>/"}


@dataclass
class DllInfo:
    machine_type: MachineType | int


@dataclass
class LibInfo:
    machine_types: list[MachineType | int] = field(default_factory=list)


def read_dll(path: Path) -> DllInfo:
    """Read the machine type of a PE image.

    Raises:
        CoffFormatError: If the file is not a PE image
    """
    path = Path(path)
    with open(path, "rb") as f:
        dos_header = f.read(PE_POINTER_OFFSET + 4)
        if len(dos_header) < PE_POINTER_OFFSET + 4 or dos_header[:2] != b"MZ":
            raise CoffFormatError(path, "missing MZ header")

        (pe_offset,) = struct.unpack_from("<I", dos_header, PE_POINTER_OFFSET)
        f.seek(pe_offset)
        signature = f.read(4)
        if signature != PE_SIGNATURE:
            raise CoffFormatError(path, "PE signature not found")

        machine_bytes = f.read(2)
        if len(machine_bytes) != 2:
            raise CoffFormatError(path, "truncated COFF file header")

    (machine,) = struct.unpack("<H", machine_bytes)
    logger.debug(f"{path.name}: machine type 0x{machine:04x}")
    return DllInfo(machine_type=to_machine_type(machine))


def read_lib(path: Path) -> LibInfo:
    """Collect the distinct machine types of all object members of a library.

    Members with an unknown (zero) machine type do not contribute.

    Raises:
        CoffFormatError: If the file is not a well-formed archive
    """
    path = Path(path)
    data = path.read_bytes()
    if not data.startswith(ARCHIVE_SIGNATURE):
        raise CoffFormatError(path, "missing archive signature")

    machine_types: set[int] = set()
    offset = len(ARCHIVE_SIGNATURE)
    while offset < len(data):
        # Members start on even offsets; a lone trailing pad byte ends the archive
        if len(data) - offset < ARCHIVE_HEADER_SIZE:
            if data[offset:].strip(b"\n"):
                raise CoffFormatError(path, f"truncated archive member header at offset {offset}")
            break

        header = data[offset:offset + ARCHIVE_HEADER_SIZE]
        if header[58:60] != ARCHIVE_HEADER_END:
            raise CoffFormatError(path, f"bad archive member header at offset {offset}")

        name = header[0:16].decode("ascii", errors="replace").rstrip()
        try:
            size = int(header[48:58].decode("ascii").strip())
        except ValueError:
            raise CoffFormatError(path, f"bad member size at offset {offset}")

        body_start = offset + ARCHIVE_HEADER_SIZE
        if body_start + size > len(data):
            raise CoffFormatError(path, f"member at offset {offset} extends past end of file")

        if name not in _SPECIAL_MEMBERS:
            machine = _member_machine_type(data, body_start, size)
            if machine is not None and machine != MachineType.UNKNOWN:
                machine_types.add(machine)

        offset = body_start + size + (size & 1)

    logger.debug(f"{path.name}: machine types {[hex(m) for m in sorted(machine_types)]}")
    return LibInfo(machine_types=[to_machine_type(m) for m in sorted(machine_types)])


def _member_machine_type(data: bytes, start: int, size: int) -> int | None:
    if size < 4:
        return None

    sig1, sig2 = struct.unpack_from("<HH", data, start)
    if sig1 == MachineType.UNKNOWN and sig2 == IMPORT_HEADER_SIG2:
        # Import header (or anonymous object header): version at +4, machine at +6
        if size < 8:
            return None
        (machine,) = struct.unpack_from("<H", data, start + 6)
        return machine
    return sig1
