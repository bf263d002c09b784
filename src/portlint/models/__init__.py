"""Data models describing a package and the build that produced it."""

from portlint.models.build_type import BuildType
from portlint.models.package import (
    BuildInfo,
    ConfigurationType,
    LinkageType,
    PackageSpec,
    PreBuildInfo,
    parse_control_fields,
)
from portlint.models.policies import BuildPolicies, BuildPolicy

__all__ = [
    "BuildInfo",
    "BuildPolicies",
    "BuildPolicy",
    "BuildType",
    "ConfigurationType",
    "LinkageType",
    "PackageSpec",
    "PreBuildInfo",
    "parse_control_fields",
]
