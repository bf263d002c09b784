"""Tests for the outdated runtime table."""

import pytest

from portlint.crt_database import (
    OUTDATED_CRTS_BEFORE_V120,
    OUTDATED_CRTS_THROUGH_V120,
    get_outdated_dynamic_crts,
)

V120_RUNTIMES = ["msvcp120.dll", "msvcp120_clr0400.dll", "msvcr120.dll", "msvcr120_clr0400.dll"]


class TestOutdatedDynamicCrts:
    """Test toolset-dependent runtime lists."""

    def test_v120_list(self):
        names = [entry.name for entry in get_outdated_dynamic_crts("v120")]
        assert len(names) == 12
        assert "msvcrt.dll" in names
        assert not set(V120_RUNTIMES) & set(names)

    @pytest.mark.parametrize("toolset", ["v140", "v141", "v142", None, "unknown"])
    def test_other_toolsets_add_v120_runtime(self, toolset):
        entries = get_outdated_dynamic_crts(toolset)
        assert len(entries) == len(OUTDATED_CRTS_BEFORE_V120) + 4
        assert [entry.name for entry in entries[-4:]] == V120_RUNTIMES

    def test_entries_unique(self):
        names = [entry.name for entry in OUTDATED_CRTS_THROUGH_V120]
        assert len(names) == len(set(names))

    def test_match_is_case_insensitive(self):
        msvcrt = next(e for e in OUTDATED_CRTS_BEFORE_V120 if e.name == "msvcrt.dll")
        assert msvcrt.regex.search("    MSVCRT.dll")
        assert not msvcrt.regex.search("    msvcrtxdll")
