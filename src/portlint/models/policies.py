"""Build policies: named switches a build recipe uses to opt out of checks."""

from collections.abc import Iterable, Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Acronyms keep the spelling the build step writes to BUILD_INFO
_CONTROL_KEY_WORDS = {"DLLS": "DLLs", "LIBS": "LIBs", "CRT": "CRT"}


class BuildPolicy(str, Enum):
    """Policies recognised by the post-build checks."""
    EMPTY_PACKAGE = "EMPTY_PACKAGE"
    DLLS_WITHOUT_LIBS = "DLLS_WITHOUT_LIBS"
    ONLY_RELEASE_CRT = "ONLY_RELEASE_CRT"
    EMPTY_INCLUDE_FOLDER = "EMPTY_INCLUDE_FOLDER"
    ALLOW_OBSOLETE_MSVCRT = "ALLOW_OBSOLETE_MSVCRT"

    @property
    def recipe_variable(self) -> str:
        """Variable a build recipe sets to enable this policy."""
        return f"VCPKG_POLICY_{self.value}"

    @property
    def control_key(self) -> str:
        """Key used for this policy in a BUILD_INFO control file."""
        words = [_CONTROL_KEY_WORDS.get(part, part.capitalize()) for part in self.value.split("_")]
        return "Policy" + "".join(words)

    @classmethod
    def from_name(cls, name: str) -> "BuildPolicy":
        """Resolve a policy from its enum name, recipe variable or control key.

        Matching ignores case, so ``PolicyDLLsWithoutLIBs`` and
        ``PolicyDllsWithoutLibs`` name the same policy.
        """
        wanted = name.strip().lower()
        for policy in cls:
            if wanted in (policy.value.lower(), policy.recipe_variable.lower(), policy.control_key.lower()):
                return policy
        raise ValueError(f"Unknown build policy: {name}")


class BuildPolicies(BaseModel):
    """Enabled/disabled state of every policy for one package.

    Policies default to disabled (strict). The registry is frozen once built.
    """
    enabled: frozenset[BuildPolicy] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True)

    @field_validator("enabled", mode="before")
    @classmethod
    def coerce_policies(cls, v):
        if isinstance(v, Mapping):
            return frozenset(
                BuildPolicy.from_name(str(name)) for name, state in v.items() if _parse_state(name, state)
            )
        if isinstance(v, Iterable) and not isinstance(v, (str, bytes)):
            return frozenset(p if isinstance(p, BuildPolicy) else BuildPolicy.from_name(str(p)) for p in v)
        return v

    @classmethod
    def of(cls, *policies: BuildPolicy) -> "BuildPolicies":
        return cls(enabled=frozenset(policies))

    @classmethod
    def from_control_lines(cls, fields: Mapping[str, str]) -> "BuildPolicies":
        """Build the registry from ``Policy<Name>: enabled|disabled`` entries.

        Keys that do not start with ``Policy`` are ignored so the whole parsed
        control file can be passed in.

        Raises:
            ValueError: On an unknown policy key or an unknown state value
        """
        states = {key: value for key, value in fields.items() if key.startswith("Policy")}
        return cls(enabled=states)

    def is_enabled(self, policy: BuildPolicy) -> bool:
        return policy in self.enabled


def _parse_state(name, state) -> bool:
    if isinstance(state, bool):
        return state
    normalized = str(state).strip().lower()
    if normalized == "enabled":
        return True
    if normalized == "disabled":
        return False
    raise ValueError(f"Unknown setting for policy '{name}': {state}")
