"""Table of outdated dynamic C runtime modules, keyed by platform toolset.

The table is static data built once at import time. Packages built with the
v120 toolset may still depend on the v120 runtime, so that generation is only
flagged for newer toolsets.
"""

import re
from dataclasses import dataclass, field

EARLIEST_TOOLSET = "v120"


@dataclass(frozen=True)
class OutdatedRuntimeEntry:
    """An obsolete runtime module and the pattern that finds it in a dependents listing."""
    name: str
    pattern: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))


def _entry(name: str) -> OutdatedRuntimeEntry:
    return OutdatedRuntimeEntry(name, re.escape(name))


OUTDATED_CRTS_BEFORE_V120: tuple[OutdatedRuntimeEntry, ...] = tuple(
    _entry(name)
    for name in (
        "msvcp100.dll",
        "msvcp100d.dll",
        "msvcp110.dll",
        "msvcp110_win.dll",
        "msvcp60.dll",
        "msvcrt.dll",
        "msvcr100.dll",
        "msvcr100d.dll",
        "msvcr100_clr0400.dll",
        "msvcr110.dll",
        "msvcrt20.dll",
        "msvcrt40.dll",
    )
)

OUTDATED_CRTS_THROUGH_V120: tuple[OutdatedRuntimeEntry, ...] = OUTDATED_CRTS_BEFORE_V120 + tuple(
    _entry(name)
    for name in (
        "msvcp120.dll",
        "msvcp120_clr0400.dll",
        "msvcr120.dll",
        "msvcr120_clr0400.dll",
    )
)


def get_outdated_dynamic_crts(toolset_version: str | None) -> tuple[OutdatedRuntimeEntry, ...]:
    """Return the runtime modules considered outdated for a toolset.

    Args:
        toolset_version: Platform toolset identifier such as ``v141``, or None

    Returns:
        The historical list for ``v120``; for every other value (including
        None and unknown toolsets) the list extended with the v120 runtime.
    """
    if toolset_version == EARLIEST_TOOLSET:
        return OUTDATED_CRTS_BEFORE_V120
    return OUTDATED_CRTS_THROUGH_V120
