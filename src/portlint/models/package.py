"""Package identity and the build configuration snapshots the checks consume."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portlint.models.policies import BuildPolicies


class LinkageType(str, Enum):
    """Library or CRT linkage mode."""
    DYNAMIC = "dynamic"
    STATIC = "static"


class ConfigurationType(str, Enum):
    """Build configuration."""
    DEBUG = "debug"
    RELEASE = "release"


def _lowercase(v):
    return v.lower() if isinstance(v, str) else v


class PackageSpec(BaseModel):
    """A package name plus the triplet it was built for."""
    name: str
    triplet: str

    model_config = ConfigDict(frozen=True)

    @field_validator("name", "triplet")
    @classmethod
    def validate_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("package name and triplet must not be empty")
        return v

    @property
    def dir(self) -> str:
        """Directory name of the installed package under the packages root."""
        return f"{self.name}_{self.triplet}"

    def __str__(self) -> str:
        return f"{self.name}:{self.triplet}"


class PreBuildInfo(BaseModel):
    """Target configuration known before the build ran."""
    target_architecture: str = Field(alias="targetArchitecture")
    platform_toolset: str | None = Field(alias="platformToolset", default=None)
    build_type: ConfigurationType | None = Field(alias="buildType", default=None)
    cmake_system_name: str = Field(alias="cmakeSystemName", default="")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("build_type", mode="before")
    @classmethod
    def normalize_build_type(cls, v):
        return _lowercase(v)

    @property
    def is_windows_store(self) -> bool:
        return self.cmake_system_name == "WindowsStore"


class BuildInfo(BaseModel):
    """Facts recorded by the build: linkage modes and the package's policies."""
    library_linkage: LinkageType = Field(alias="libraryLinkage")
    crt_linkage: LinkageType = Field(alias="crtLinkage")
    policies: BuildPolicies = Field(default_factory=BuildPolicies)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("library_linkage", "crt_linkage", mode="before")
    @classmethod
    def normalize_linkage(cls, v):
        return _lowercase(v)

    @field_validator("policies", mode="before")
    @classmethod
    def coerce_policies(cls, v):
        if isinstance(v, BuildPolicies) or (isinstance(v, dict) and "enabled" in v):
            return v
        return BuildPolicies(enabled=v)

    @classmethod
    def from_control_fields(cls, fields: dict[str, str]) -> "BuildInfo":
        """Build from the fields of a BUILD_INFO control file.

        Raises:
            ValueError: If a linkage field is missing or a policy entry is invalid
        """
        missing = [key for key in ("CRTLinkage", "LibraryLinkage") if key not in fields]
        if missing:
            raise ValueError(f"BUILD_INFO is missing required fields: {', '.join(missing)}")
        return cls(
            library_linkage=fields["LibraryLinkage"],
            crt_linkage=fields["CRTLinkage"],
            policies=BuildPolicies.from_control_lines(fields),
        )


def parse_control_fields(text: str) -> dict[str, str]:
    """Parse ``Key: value`` lines of a control file into a dict."""
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            raise ValueError(f"Malformed control file line: {line}")
        fields[key.strip()] = value.strip()
    return fields
