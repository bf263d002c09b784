"""Tests for native PE/COFF header reading."""

import pytest

from portlint.binary.coff import read_dll, read_lib
from portlint.binary.machine import MachineType, get_actual_architecture, to_machine_type
from portlint.exceptions import CoffFormatError


class TestReadDll:
    """Test machine type extraction from PE images."""

    @pytest.mark.parametrize("machine", [MachineType.AMD64, MachineType.I386, MachineType.ARM64, MachineType.ARMNT])
    def test_machine_type(self, tmp_path, make_dll, machine):
        dll = make_dll(tmp_path / "a.dll", machine=machine)
        assert read_dll(dll).machine_type == machine

    def test_not_a_pe_image(self, tmp_path):
        path = tmp_path / "a.dll"
        path.write_bytes(b"ELF" + bytes(100))
        with pytest.raises(CoffFormatError, match="missing MZ header"):
            read_dll(path)

    def test_bad_pe_signature(self, tmp_path, make_dll):
        dll = make_dll(tmp_path / "a.dll")
        data = bytearray(dll.read_bytes())
        data[0x80:0x84] = b"NE\0\0"
        dll.write_bytes(bytes(data))
        with pytest.raises(CoffFormatError, match="PE signature not found"):
            read_dll(dll)

    def test_truncated_file(self, tmp_path):
        path = tmp_path / "a.dll"
        path.write_bytes(b"MZ")
        with pytest.raises(CoffFormatError):
            read_dll(path)


class TestReadLib:
    """Test machine type collection from archive members."""

    def test_object_members(self, tmp_path, make_lib):
        lib = make_lib(tmp_path / "a.lib", machines=[MachineType.AMD64, MachineType.AMD64])
        assert read_lib(lib).machine_types == [MachineType.AMD64]

    def test_import_members(self, tmp_path, make_lib):
        lib = make_lib(tmp_path / "a.lib", machines=[MachineType.I386], import_members=True)
        assert read_lib(lib).machine_types == [MachineType.I386]

    def test_mixed_members_reported(self, tmp_path, make_lib):
        lib = make_lib(tmp_path / "a.lib", machines=[MachineType.AMD64, MachineType.I386])
        assert read_lib(lib).machine_types == [MachineType.I386, MachineType.AMD64]

    def test_unknown_machine_dropped(self, tmp_path, make_lib):
        lib = make_lib(tmp_path / "a.lib", machines=[MachineType.UNKNOWN])
        assert read_lib(lib).machine_types == []

    def test_empty_archive(self, tmp_path, make_lib):
        lib = make_lib(tmp_path / "a.lib", machines=[])
        assert read_lib(lib).machine_types == []

    def test_missing_signature(self, tmp_path):
        path = tmp_path / "a.lib"
        path.write_bytes(b"not an archive")
        with pytest.raises(CoffFormatError, match="missing archive signature"):
            read_lib(path)

    def test_member_past_end_of_file(self, tmp_path, make_lib):
        lib = make_lib(tmp_path / "a.lib")
        lib.write_bytes(lib.read_bytes()[:-10])
        with pytest.raises(CoffFormatError):
            read_lib(lib)


class TestMachineNames:
    """Test architecture names of machine types."""

    @pytest.mark.parametrize(
        "machine,expected",
        [
            (MachineType.AMD64, "x64"),
            (MachineType.IA64, "x64"),
            (MachineType.I386, "x86"),
            (MachineType.ARM, "arm"),
            (MachineType.ARMNT, "arm"),
            (MachineType.ARM64, "arm64"),
        ],
    )
    def test_known(self, machine, expected):
        assert get_actual_architecture(machine) == expected

    def test_unknown_code(self):
        assert get_actual_architecture(MachineType.POWERPC) == f"Machine Type Code = {0x1F0}"
        assert get_actual_architecture(to_machine_type(0x1234)) == f"Machine Type Code = {0x1234}"
