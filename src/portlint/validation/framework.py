"""Post-build validation orchestrator.

Runs the check catalogue over one installed package in a fixed order and
aggregates the verdicts into an error count. Lint violations only add to the
count; fatal errors (a failing tool, a mixed-architecture archive, an unknown
linkage mode) propagate and abort the run.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from portlint.binary.inspector import BinaryInspector, ToolingCapabilities
from portlint.config import PathsConfig, PortlintConfig, create_default_config
from portlint.exceptions import UnknownLinkageError
from portlint.models.package import BuildInfo, LinkageType, PackageSpec, PreBuildInfo
from portlint.models.policies import BuildPolicy
from portlint.scanner import get_files_recursive, has_extension
from portlint.validation.diagnostics import Diagnostic, DiagnosticLog, LintStatus

if TYPE_CHECKING:
    from portlint.validation.catalogue import CheckDefinition

logger = logging.getLogger(__name__)


class CheckState(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    NOT_EVALUATED = "not_evaluated"


@dataclass(frozen=True)
class CheckOutcome:
    """What happened to one catalogue entry during a run."""
    check: str
    state: CheckState
    reason: str | None = None


@dataclass
class LintContext:
    """Everything a check may look at, scanned once per run."""
    spec: PackageSpec
    pre_build_info: PreBuildInfo
    build_info: BuildInfo
    paths: PathsConfig
    inspector: BinaryInspector
    package_dir: Path
    debug_libs: list[Path] = field(default_factory=list)
    release_libs: list[Path] = field(default_factory=list)
    debug_dlls: list[Path] = field(default_factory=list)
    release_dlls: list[Path] = field(default_factory=list)

    @classmethod
    def scan(
        cls,
        spec: PackageSpec,
        pre_build_info: PreBuildInfo,
        build_info: BuildInfo,
        paths: PathsConfig,
        inspector: BinaryInspector,
    ) -> "LintContext":
        package_dir = paths.package_dir(spec)
        return cls(
            spec=spec,
            pre_build_info=pre_build_info,
            build_info=build_info,
            paths=paths,
            inspector=inspector,
            package_dir=package_dir,
            debug_libs=get_files_recursive(package_dir / "debug" / "lib", has_extension(".lib")),
            release_libs=get_files_recursive(package_dir / "lib", has_extension(".lib")),
            debug_dlls=get_files_recursive(package_dir / "debug" / "bin", has_extension(".dll")),
            release_dlls=get_files_recursive(package_dir / "bin", has_extension(".dll")),
        )

    @property
    def debug_lib_dir(self) -> Path:
        return self.package_dir / "debug" / "lib"

    @property
    def release_lib_dir(self) -> Path:
        return self.package_dir / "lib"

    @property
    def libs(self) -> list[Path]:
        return self.debug_libs + self.release_libs

    @property
    def dlls(self) -> list[Path]:
        return self.debug_dlls + self.release_dlls

    def all_dlls(self) -> list[Path]:
        """Every DLL anywhere in the package, not only under bin."""
        return get_files_recursive(self.package_dir, has_extension(".dll"))

    @property
    def buildtrees_dir(self) -> Path:
        return self.paths.buildtrees_dir(self.spec)


@dataclass
class ValidationReport:
    """Result of validating one package."""
    spec: PackageSpec
    portfile: Path
    error_count: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)
    outcomes: list[CheckOutcome] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = no violations, 1 = violations found."""
        return 0 if self.error_count == 0 else 1

    def outcome(self, check: str) -> CheckOutcome | None:
        for outcome in self.outcomes:
            if outcome.check == check:
                return outcome
        return None

    @property
    def failed_checks(self) -> list[str]:
        return [o.check for o in self.outcomes if o.state == CheckState.FAILED]

    @property
    def text(self) -> str:
        return "\n".join(str(d) for d in self.diagnostics)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "package": self.spec.name,
            "triplet": self.spec.triplet,
            "error_count": self.error_count,
            "exit_code": self.exit_code,
            "portfile": self.portfile.as_posix(),
            "outcomes": [
                {"check": o.check, "state": o.state.value, "reason": o.reason}
                for o in self.outcomes
            ],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class PostBuildValidator:
    """Runs the post-build check catalogue against installed packages."""

    def __init__(
        self,
        paths: PathsConfig,
        inspector: BinaryInspector,
        checks: Sequence["CheckDefinition"] | None = None,
    ):
        if checks is None:
            from .catalogue import DEFAULT_CHECKS
            checks = DEFAULT_CHECKS
        self.paths = paths
        self.inspector = inspector
        self.checks = list(checks)

    def perform_all_checks(
        self, spec: PackageSpec, pre_build_info: PreBuildInfo, build_info: BuildInfo
    ) -> ValidationReport:
        """Validate one package and return the report.

        Raises:
            UnknownLinkageError: If the build's library linkage is not dynamic or static
            PortlintError: Any fatal error raised by a check
        """
        report = ValidationReport(spec=spec, portfile=self.paths.portfile(spec))
        run_log = DiagnosticLog()
        run_log.info("-- Performing post-build validation")
        report.diagnostics.extend(run_log.entries)

        report.error_count = self._run_checks(spec, pre_build_info, build_info, report)

        closing = DiagnosticLog()
        if report.error_count != 0:
            closing.error(
                f"Found {report.error_count} error(s). Please correct the portfile:\n"
                f"    {report.portfile.as_posix()}"
            )
        closing.info("-- Performing post-build validation done")
        report.diagnostics.extend(closing.entries)

        logger.info(f"Post-build validation of {spec} finished with {report.error_count} error(s)")
        return report

    def _run_checks(
        self,
        spec: PackageSpec,
        pre_build_info: PreBuildInfo,
        build_info: BuildInfo,
        report: ValidationReport,
    ) -> int:
        if build_info.policies.is_enabled(BuildPolicy.EMPTY_PACKAGE):
            logger.info(f"{spec}: {BuildPolicy.EMPTY_PACKAGE.recipe_variable} is enabled; skipping all checks")
            report.outcomes.extend(
                CheckOutcome(check.id, CheckState.SKIPPED, f"{BuildPolicy.EMPTY_PACKAGE.value} policy")
                for check in self.checks
            )
            return 0

        if build_info.library_linkage not in (LinkageType.DYNAMIC, LinkageType.STATIC):
            raise UnknownLinkageError(build_info.library_linkage)

        ctx = LintContext.scan(spec, pre_build_info, build_info, self.paths, self.inspector)
        logger.debug(
            f"{spec}: {len(ctx.debug_libs)} debug libs, {len(ctx.release_libs)} release libs, "
            f"{len(ctx.debug_dlls)} debug dlls, {len(ctx.release_dlls)} release dlls"
        )

        error_count = 0
        for check in self.checks:
            skip_reason = check.skip_reason(ctx)
            if skip_reason is not None:
                logger.debug(f"Skipping check {check.id}: {skip_reason}")
                report.outcomes.append(CheckOutcome(check.id, CheckState.SKIPPED, skip_reason))
                continue

            if check.requires is not None and not self.inspector.supports(check.requires):
                reason = f"no binary inspector provides '{check.requires.value}'"
                log = DiagnosticLog(check.id)
                log.info(f"Check {check.id} was not evaluated: {reason}")
                report.diagnostics.extend(log.entries)
                report.outcomes.append(CheckOutcome(check.id, CheckState.NOT_EVALUATED, reason))
                continue

            logger.debug(f"Executing check: {check.id}")
            log = DiagnosticLog(check.id)
            status = check.run(ctx, log)
            error_count += int(status)
            report.diagnostics.extend(log.entries)
            report.outcomes.append(
                CheckOutcome(
                    check.id,
                    CheckState.FAILED if status == LintStatus.ERROR_DETECTED else CheckState.PASSED,
                )
            )

        return error_count


def perform_all_checks(
    spec: PackageSpec,
    pre_build_info: PreBuildInfo,
    build_info: BuildInfo,
    config: PortlintConfig | None = None,
) -> ValidationReport:
    """Validate one package with the tooling detected from ``config``.

    Args:
        spec: Package to validate
        pre_build_info: Target configuration
        build_info: Linkage modes and policies recorded by the build
        config: portlint configuration (defaults when None)

    Returns:
        ValidationReport with the error count and ordered diagnostics
    """
    config = config or create_default_config()
    capabilities = ToolingCapabilities.detect(
        header_parsing=config.tooling.header_parsing,
        dumpbin=config.tooling.dumpbin,
    )
    validator = PostBuildValidator(config.paths, capabilities.create_inspector())
    return validator.perform_all_checks(spec, pre_build_info, build_info)
