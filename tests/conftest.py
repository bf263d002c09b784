"""Shared fixtures: package trees, synthetic binaries and a scripted inspector."""

import struct
from collections.abc import Sequence
from pathlib import Path

import pytest

from portlint.binary.dumpbin import first_match
from portlint.binary.inspector import BinaryInspector, Capability
from portlint.binary.machine import MachineType
from portlint.config import PathsConfig
from portlint.exceptions import InconsistentArchiveError
from portlint.models import BuildInfo, BuildPolicies, LinkageType, PackageSpec, PreBuildInfo


def pe_image(machine: int) -> bytes:
    """Minimal PE image: DOS header pointing at a PE signature and COFF header."""
    pe_offset = 0x80
    dos = bytearray(pe_offset)
    dos[0:2] = b"MZ"
    struct.pack_into("<I", dos, 0x3C, pe_offset)
    coff_header = struct.pack("<HHIIIHH", machine, 0, 0, 0, 0, 0, 0)
    return bytes(dos) + b"PE\0\0" + coff_header


def _archive_member(name: str, body: bytes) -> bytes:
    header = (
        name.ljust(16).encode("ascii")
        + b"0".ljust(12)
        + b"0".ljust(6)
        + b"0".ljust(6)
        + b"644".ljust(8)
        + str(len(body)).encode("ascii").ljust(10)
        + b"`\n"
    )
    padding = b"\n" if len(body) % 2 else b""
    return header + body + padding


def coff_object(machine: int) -> bytes:
    return struct.pack("<HHIIIHH", machine, 0, 0, 0, 0, 0, 0)


def import_object(machine: int) -> bytes:
    # sig1, sig2, version, machine, timestamp, size of data, ordinal/hint, type
    return struct.pack("<HHHHIIHH", 0, 0xFFFF, 0, machine, 0, 0, 0, 0) + b"foo\0foo.dll\0"


def lib_archive(members: Sequence[bytes]) -> bytes:
    """An ``ar`` archive with linker and long-name members followed by ``members``."""
    data = b"!<arch>\n"
    data += _archive_member("/", struct.pack(">I", 0))
    data += _archive_member("/", struct.pack("<I", 0) + struct.pack("<I", 0))
    data += _archive_member("//", b"a_rather_long_member_name.obj\0")
    for index, body in enumerate(members):
        data += _archive_member(f"m{index}.obj/", body)
    return data


@pytest.fixture
def make_dll():
    def _make(path: Path, machine: int = MachineType.AMD64) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(pe_image(machine))
        return path
    return _make


@pytest.fixture
def make_lib():
    def _make(path: Path, machines: Sequence[int] = (MachineType.AMD64,), import_members: bool = False) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        build = import_object if import_members else coff_object
        path.write_bytes(lib_archive([build(m) for m in machines]))
        return path
    return _make


class FakeInspector(BinaryInspector):
    """Inspector answering from dictionaries keyed by file name."""

    def __init__(
        self,
        architectures: dict[str, str | None] | None = None,
        default_architecture: str = "x64",
        without_exports: Sequence[str] = (),
        app_container: Sequence[str] = (),
        dependents: dict[str, str] | None = None,
        directives: dict[str, str] | None = None,
        mixed_archives: Sequence[str] = (),
        capabilities: Sequence[Capability] = tuple(Capability),
    ):
        self.architectures = architectures or {}
        self.default_architecture = default_architecture
        self.without_exports = set(without_exports)
        self.app_container = set(app_container)
        self.dependents = dependents or {}
        self.directives = directives or {}
        self.mixed_archives = set(mixed_archives)
        self._capabilities = frozenset(capabilities)
        self.calls: list[tuple[str, str]] = []

    @property
    def capabilities(self) -> frozenset[Capability]:
        return self._capabilities

    def dll_architecture(self, dll: Path) -> str:
        self.calls.append(("dll_architecture", dll.name))
        return self.architectures.get(dll.name, self.default_architecture)

    def lib_architecture(self, lib: Path) -> str | None:
        self.calls.append(("lib_architecture", lib.name))
        if lib.name in self.mixed_archives:
            raise InconsistentArchiveError(lib, ["x64", "x86"])
        return self.architectures.get(lib.name, self.default_architecture)

    def has_exports(self, dll: Path) -> bool:
        self.calls.append(("has_exports", dll.name))
        return dll.name not in self.without_exports

    def has_app_container_bit(self, dll: Path) -> bool:
        self.calls.append(("has_app_container_bit", dll.name))
        return dll.name in self.app_container

    def find_outdated_runtime(self, dll, entries):
        self.calls.append(("find_outdated_runtime", dll.name))
        return first_match(self.dependents.get(dll.name, "KERNEL32.dll"), entries, lambda e: e.regex)

    def find_crt_linkage(self, lib, build_types):
        self.calls.append(("find_crt_linkage", lib.name))
        return first_match(self.directives.get(lib.name, ""), build_types, lambda b: b.crt_regex)


@pytest.fixture
def fake_inspector():
    return FakeInspector()


@pytest.fixture
def spec():
    return PackageSpec(name="zlib", triplet="x64-windows")


@pytest.fixture
def paths_config(tmp_path):
    return PathsConfig(root=str(tmp_path))


@pytest.fixture
def package_dir(paths_config, spec):
    directory = paths_config.package_dir(spec)
    directory.mkdir(parents=True)
    return directory


@pytest.fixture
def pre_build_info():
    return PreBuildInfo(target_architecture="x64", platform_toolset="v141")


@pytest.fixture
def dynamic_build_info():
    return BuildInfo(library_linkage=LinkageType.DYNAMIC, crt_linkage=LinkageType.DYNAMIC)


@pytest.fixture
def static_build_info():
    return BuildInfo(library_linkage=LinkageType.STATIC, crt_linkage=LinkageType.DYNAMIC)


def write(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def clean_dynamic_package(package_dir, spec):
    """A dynamic package tree that passes every check."""
    write(package_dir / "include" / "zlib.h")
    write(package_dir / "share" / spec.name / "copyright", "zlib license")
    write(package_dir / "lib" / "zlib.lib")
    write(package_dir / "debug" / "lib" / "zlibd.lib")
    write(package_dir / "bin" / "zlib1.dll")
    write(package_dir / "debug" / "bin" / "zlibd1.dll")
    write(package_dir / "CONTROL", "Package: zlib")
    write(package_dir / "BUILD_INFO", "CRTLinkage: dynamic\nLibraryLinkage: dynamic\n")
    return package_dir


@pytest.fixture
def clean_static_package(package_dir, spec):
    """A static package tree that passes every check."""
    write(package_dir / "include" / "zlib.h")
    write(package_dir / "share" / spec.name / "copyright", "zlib license")
    write(package_dir / "lib" / "zlib.lib")
    write(package_dir / "debug" / "lib" / "zlibd.lib")
    write(package_dir / "BUILD_INFO", "CRTLinkage: dynamic\nLibraryLinkage: static\n")
    return package_dir


@pytest.fixture
def static_directives():
    return {
        "zlib.lib": "   /DEFAULTLIB:MSVCRT /DEFAULTLIB:OLDNAMES",
        "zlibd.lib": "   /DEFAULTLIB:MSVCRTD /DEFAULTLIB:OLDNAMES",
    }


@pytest.fixture
def policies_of():
    def _of(*policies):
        return BuildPolicies.of(*policies)
    return _of


@pytest.fixture
def make_inspector():
    """Factory for ``FakeInspector`` instances."""
    return FakeInspector


@pytest.fixture
def touch():
    """Write a small text file, creating parent directories."""
    return write
