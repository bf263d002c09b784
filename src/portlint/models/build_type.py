"""Configuration and CRT linkage pairs, with the directive patterns that reveal them."""

import re
from enum import Enum

from portlint.models.package import ConfigurationType, LinkageType


class BuildType(Enum):
    """The closed set of (configuration, CRT linkage) combinations.

    Each value carries the case-insensitive pattern that detects it in the
    linker directives embedded in a static library.
    """
    DEBUG_STATIC = (ConfigurationType.DEBUG, LinkageType.STATIC, r"/DEFAULTLIB:LIBCMTD")
    DEBUG_DYNAMIC = (ConfigurationType.DEBUG, LinkageType.DYNAMIC, r"/DEFAULTLIB:MSVCRTD")
    RELEASE_STATIC = (ConfigurationType.RELEASE, LinkageType.STATIC, r"/DEFAULTLIB:LIBCMT[^D]")
    RELEASE_DYNAMIC = (ConfigurationType.RELEASE, LinkageType.DYNAMIC, r"/DEFAULTLIB:MSVCRT[^D]")

    def __init__(self, configuration: ConfigurationType, linkage: LinkageType, pattern: str):
        self.configuration = configuration
        self.linkage = linkage
        self.crt_regex = re.compile(pattern, re.IGNORECASE)

    @classmethod
    def value_of(cls, configuration: ConfigurationType, linkage: LinkageType) -> "BuildType":
        for build_type in cls:
            if build_type.configuration == configuration and build_type.linkage == linkage:
                return build_type
        raise ValueError(f"No build type for {configuration!r} with {linkage!r} CRT linkage")

    def __str__(self) -> str:
        return f"{self.configuration.value.capitalize()},{self.linkage.value.capitalize()}"
