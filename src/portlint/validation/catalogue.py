"""The post-build check catalogue.

Each entry names a check, the library linkages it applies to, the policy that
switches it off, the binary capability it needs, and an adapter that feeds it
from the scanned ``LintContext``. The orchestrator runs entries in table order,
which is also the order diagnostics are presented in.
"""

from collections.abc import Callable
from dataclasses import dataclass

from portlint.binary.inspector import Capability
from portlint.models.build_type import BuildType
from portlint.models.package import ConfigurationType, LinkageType
from portlint.models.policies import BuildPolicy
from portlint.validation import rules
from portlint.validation.diagnostics import DiagnosticLog, LintStatus
from portlint.validation.framework import LintContext

ALL_LINKAGES = frozenset({LinkageType.DYNAMIC, LinkageType.STATIC})
DYNAMIC_ONLY = frozenset({LinkageType.DYNAMIC})
STATIC_ONLY = frozenset({LinkageType.STATIC})

CheckFunction = Callable[[LintContext, DiagnosticLog], LintStatus]


@dataclass(frozen=True)
class CheckDefinition:
    id: str
    run: CheckFunction
    linkages: frozenset[LinkageType] = ALL_LINKAGES
    skip_policy: BuildPolicy | None = None
    requires: Capability | None = None
    applies: Callable[[LintContext], bool] | None = None

    def skip_reason(self, ctx: LintContext) -> str | None:
        """Why this check does not apply to ``ctx``, or None when it should run."""
        if ctx.build_info.library_linkage not in self.linkages:
            return f"not applicable to {ctx.build_info.library_linkage.value} linkage"
        if self.skip_policy is not None and ctx.build_info.policies.is_enabled(self.skip_policy):
            return f"{self.skip_policy.value} policy"
        if self.applies is not None and not self.applies(ctx):
            return "not applicable to this build"
        return None


def _no_explicit_build_type(ctx: LintContext) -> bool:
    return ctx.pre_build_info.build_type is None


def _expected_build_type(ctx: LintContext, configuration: ConfigurationType) -> BuildType:
    return BuildType.value_of(configuration, ctx.build_info.crt_linkage)


DEFAULT_CHECKS: tuple[CheckDefinition, ...] = (
    CheckDefinition(
        "include_directory",
        lambda ctx, log: rules.check_for_files_in_include_directory(ctx.package_dir, log),
        skip_policy=BuildPolicy.EMPTY_INCLUDE_FOLDER,
    ),
    CheckDefinition(
        "debug_include_directory",
        lambda ctx, log: rules.check_for_files_in_debug_include_directory(ctx.package_dir, log),
    ),
    CheckDefinition(
        "debug_share_directory",
        lambda ctx, log: rules.check_for_files_in_debug_share_directory(ctx.package_dir, log),
    ),
    CheckDefinition(
        "lib_cmake_folder",
        lambda ctx, log: rules.check_folder_lib_cmake(ctx.package_dir, ctx.spec, log),
    ),
    CheckDefinition(
        "misplaced_cmake_files",
        lambda ctx, log: rules.check_for_misplaced_cmake_files(ctx.package_dir, ctx.spec, log),
    ),
    CheckDefinition(
        "debug_lib_cmake_folder",
        lambda ctx, log: rules.check_folder_debug_lib_cmake(ctx.package_dir, ctx.spec, log),
    ),
    CheckDefinition(
        "dlls_in_lib_dir",
        lambda ctx, log: rules.check_for_dlls_in_lib_dir(ctx.package_dir, log),
    ),
    CheckDefinition(
        "dlls_in_debug_lib_dir",
        lambda ctx, log: rules.check_for_dlls_in_lib_dir(ctx.package_dir / "debug", log),
    ),
    CheckDefinition(
        "copyright_file",
        lambda ctx, log: rules.check_for_copyright_file(ctx.spec, ctx.package_dir, ctx.buildtrees_dir, log),
    ),
    CheckDefinition(
        "exes_in_bin",
        lambda ctx, log: rules.check_for_exes(ctx.package_dir, log),
    ),
    CheckDefinition(
        "exes_in_debug_bin",
        lambda ctx, log: rules.check_for_exes(ctx.package_dir / "debug", log),
    ),
    CheckDefinition(
        "matching_debug_release_libs",
        lambda ctx, log: rules.check_matching_debug_and_release_binaries(ctx.debug_libs, ctx.release_libs, log),
        applies=_no_explicit_build_type,
    ),
    CheckDefinition(
        "lib_architecture",
        lambda ctx, log: rules.check_lib_architecture(
            ctx.pre_build_info.target_architecture, ctx.libs, ctx.inspector, log
        ),
        requires=Capability.ARCHITECTURE,
    ),
    # Dynamic linkage
    CheckDefinition(
        "matching_debug_release_dlls",
        lambda ctx, log: rules.check_matching_debug_and_release_binaries(ctx.debug_dlls, ctx.release_dlls, log),
        linkages=DYNAMIC_ONLY,
        applies=_no_explicit_build_type,
    ),
    CheckDefinition(
        "debug_import_libs",
        lambda ctx, log: rules.check_lib_files_are_available_if_dlls_are_available(
            len(ctx.debug_libs), len(ctx.debug_dlls), ctx.debug_lib_dir, log
        ),
        linkages=DYNAMIC_ONLY,
        skip_policy=BuildPolicy.DLLS_WITHOUT_LIBS,
    ),
    CheckDefinition(
        "release_import_libs",
        lambda ctx, log: rules.check_lib_files_are_available_if_dlls_are_available(
            len(ctx.release_libs), len(ctx.release_dlls), ctx.release_lib_dir, log
        ),
        linkages=DYNAMIC_ONLY,
        skip_policy=BuildPolicy.DLLS_WITHOUT_LIBS,
    ),
    CheckDefinition(
        "dll_exports",
        lambda ctx, log: rules.check_exports_of_dlls(ctx.dlls, ctx.inspector, log),
        linkages=DYNAMIC_ONLY,
        requires=Capability.EXPORTS,
    ),
    CheckDefinition(
        "dll_app_container_bit",
        lambda ctx, log: rules.check_uwp_bit_of_dlls(
            ctx.pre_build_info.cmake_system_name, ctx.dlls, ctx.inspector, log
        ),
        linkages=DYNAMIC_ONLY,
        requires=Capability.APP_CONTAINER,
        applies=lambda ctx: ctx.pre_build_info.is_windows_store,
    ),
    CheckDefinition(
        "outdated_dynamic_crt",
        lambda ctx, log: rules.check_outdated_crt_linkage_of_dlls(
            ctx.dlls, ctx.inspector, ctx.pre_build_info.platform_toolset, log
        ),
        linkages=DYNAMIC_ONLY,
        skip_policy=BuildPolicy.ALLOW_OBSOLETE_MSVCRT,
        requires=Capability.DEPENDENTS,
    ),
    CheckDefinition(
        "dll_architecture",
        lambda ctx, log: rules.check_dll_architecture(
            ctx.pre_build_info.target_architecture, ctx.dlls, ctx.inspector, log
        ),
        linkages=DYNAMIC_ONLY,
        requires=Capability.ARCHITECTURE,
    ),
    # Static linkage
    CheckDefinition(
        "no_dlls_present",
        lambda ctx, log: rules.check_no_dlls_present(ctx.all_dlls(), log),
        linkages=STATIC_ONLY,
    ),
    CheckDefinition(
        "no_bin_folders",
        lambda ctx, log: rules.check_bin_folders_are_not_present_in_static_build(ctx.package_dir, log),
        linkages=STATIC_ONLY,
    ),
    CheckDefinition(
        "debug_crt_linkage",
        lambda ctx, log: rules.check_crt_linkage_of_libs(
            _expected_build_type(ctx, ConfigurationType.DEBUG), ctx.debug_libs, ctx.inspector, log
        ),
        linkages=STATIC_ONLY,
        skip_policy=BuildPolicy.ONLY_RELEASE_CRT,
        requires=Capability.DIRECTIVES,
    ),
    CheckDefinition(
        "release_crt_linkage",
        lambda ctx, log: rules.check_crt_linkage_of_libs(
            _expected_build_type(ctx, ConfigurationType.RELEASE), ctx.release_libs, ctx.inspector, log
        ),
        linkages=STATIC_ONLY,
        requires=Capability.DIRECTIVES,
    ),
    # Closing checks
    CheckDefinition(
        "no_empty_folders",
        lambda ctx, log: rules.check_no_empty_folders(ctx.package_dir, log),
    ),
    CheckDefinition(
        "no_files_in_package_root",
        lambda ctx, log: rules.check_no_files_in_dir(ctx.package_dir, log),
    ),
    CheckDefinition(
        "no_files_in_debug_root",
        lambda ctx, log: rules.check_no_files_in_dir(ctx.package_dir / "debug", log),
    ),
)


def find_check(check_id: str) -> CheckDefinition:
    for check in DEFAULT_CHECKS:
        if check.id == check_id:
            return check
    raise KeyError(f"Unknown check: {check_id}")
