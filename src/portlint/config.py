"""Configuration management for portlint using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portlint.models.package import BuildInfo, PackageSpec, PreBuildInfo, parse_control_fields

CONFIG_FILE_NAME = ".portlint.json"


class OutputFormat(str, Enum):
    """Report output formats."""
    TABLE = "table"
    JSON = "json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class PathsConfig(BaseModel):
    """Locations of the package, build-tree and recipe roots."""
    root: str = "."
    packages: str = "packages"
    buildtrees: str = "buildtrees"
    ports: str = "ports"

    model_config = ConfigDict(populate_by_name=True)

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return Path(self.root) / path

    @property
    def packages_root(self) -> Path:
        return self._resolve(self.packages)

    @property
    def buildtrees_root(self) -> Path:
        return self._resolve(self.buildtrees)

    @property
    def ports_root(self) -> Path:
        return self._resolve(self.ports)

    def package_dir(self, spec: PackageSpec) -> Path:
        """Installed tree of a package: ``<packages>/<name>_<triplet>``."""
        return self.packages_root / spec.dir

    def buildtrees_dir(self, spec: PackageSpec) -> Path:
        return self.buildtrees_root / spec.name

    def portfile(self, spec: PackageSpec) -> Path:
        """Build recipe to correct when violations are found."""
        return self.ports_root / spec.name / "portfile.cmake"


class ToolingConfig(BaseModel):
    """Binary introspection tooling."""
    dumpbin: str | None = None
    header_parsing: bool = Field(alias="headerParsing", default=True)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("dumpbin")
    @classmethod
    def validate_dumpbin(cls, v):
        if v is not None and not v.strip():
            raise ValueError("dumpbin path must not be empty")
        return v


class OutputConfig(BaseModel):
    """Output configuration section."""
    format: OutputFormat = OutputFormat.TABLE

    model_config = ConfigDict(use_enum_values=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class PortlintConfig(BaseModel):
    """Complete portlint configuration model."""
    paths: PathsConfig = Field(default_factory=PathsConfig)
    tooling: ToolingConfig = Field(default_factory=ToolingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> PortlintConfig:
    """Load configuration from file with fallback to defaults.

    Relative paths in the ``paths`` section are anchored at the directory
    holding the configuration file.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .portlint.json

    Returns:
        PortlintConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")

        try:
            config = PortlintConfig(**config_data)
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

        if "root" not in config_data.get("paths", {}):
            paths = config.paths.model_copy(update={"root": str(config_path.parent)})
            config = config.model_copy(update={"paths": paths})
        return config

    return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .portlint.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def create_default_config() -> PortlintConfig:
    """Default configuration: roots relative to the current directory, dumpbin from PATH."""
    return PortlintConfig()


def load_build_descriptor(descriptor_path: str | Path) -> tuple[PreBuildInfo, BuildInfo]:
    """Load a JSON build descriptor with ``preBuild`` and ``build`` sections.

    Raises:
        FileNotFoundError: If the descriptor does not exist
        ValueError: If the descriptor is not valid JSON or fails validation
    """
    descriptor_path = Path(descriptor_path)
    if not descriptor_path.exists():
        raise FileNotFoundError(f"Build descriptor not found: {descriptor_path}")

    try:
        with open(descriptor_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in build descriptor {descriptor_path}: {e}")

    missing = [key for key in ("preBuild", "build") if key not in data]
    if missing:
        raise ValueError(f"Build descriptor {descriptor_path} is missing sections: {', '.join(missing)}")

    return PreBuildInfo.model_validate(data["preBuild"]), BuildInfo.model_validate(data["build"])


def read_build_info_file(build_info_path: str | Path) -> BuildInfo:
    """Read the BUILD_INFO control file written next to an installed package.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is malformed
    """
    build_info_path = Path(build_info_path)
    if not build_info_path.exists():
        raise FileNotFoundError(f"BUILD_INFO not found: {build_info_path}")
    return BuildInfo.from_control_fields(parse_control_fields(build_info_path.read_text(encoding="utf-8")))
