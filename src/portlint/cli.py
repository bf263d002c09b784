"""CLI interface for portlint using Typer framework."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from portlint import __description__, __version__
from portlint.config import (
    LogLevel,
    OutputFormat,
    PortlintConfig,
    load_build_descriptor,
    load_config,
    read_build_info_file,
)
from portlint.exceptions import PortlintError
from portlint.models import BuildPolicy, ConfigurationType, PackageSpec, PreBuildInfo
from portlint.output import render_json, render_report
from portlint.validation import perform_all_checks

app = typer.Typer(
    name="portlint",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

FATAL_EXIT_CODE = 2

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"portlint version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """portlint - post-build validation of installed package trees."""


def _configure_logging(config: PortlintConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else _LOG_LEVELS.get(config.logging.level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _resolve_build_configuration(
    config: PortlintConfig,
    spec: PackageSpec,
    build_info_path: Path | None,
    target_arch: str | None,
    toolset: str | None,
    build_type: str | None,
    system_name: str,
):
    if build_info_path is not None and build_info_path.suffix.lower() == ".json":
        return load_build_descriptor(build_info_path)

    if target_arch is None:
        console.print("[red]Error:[/red] --target-arch is required unless a JSON build descriptor is given")
        raise typer.Exit(1)

    pre_build_info = PreBuildInfo(
        target_architecture=target_arch,
        platform_toolset=toolset,
        build_type=ConfigurationType(build_type.lower()) if build_type else None,
        cmake_system_name=system_name,
    )
    build_info = read_build_info_file(build_info_path or config.paths.package_dir(spec) / "BUILD_INFO")
    return pre_build_info, build_info


@app.command()
def validate(
    name: Annotated[str, typer.Argument(help="Package name")],
    triplet: Annotated[str, typer.Argument(help="Target triplet, e.g. x64-windows")],
    build_info: Annotated[
        Optional[Path],
        typer.Option("--build-info", "-b", help="JSON build descriptor or BUILD_INFO file (default: <package>/BUILD_INFO)")
    ] = None,
    target_arch: Annotated[
        Optional[str],
        typer.Option("--target-arch", "-a", help="Expected architecture: x86, x64, arm, arm64")
    ] = None,
    toolset: Annotated[
        Optional[str],
        typer.Option("--toolset", help="Platform toolset version, e.g. v141")
    ] = None,
    build_type: Annotated[
        Optional[str],
        typer.Option("--build-type", help="Explicit single configuration: debug or release")
    ] = None,
    system_name: Annotated[
        str,
        typer.Option("--system-name", help="Target system name, e.g. WindowsStore")
    ] = "",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .portlint.json)")
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: table, json (default: from config)")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
) -> None:
    """Run the post-build checks on an installed package."""
    valid_formats = [f.value for f in OutputFormat]
    if format is not None and format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    if build_type is not None and build_type.lower() not in [c.value for c in ConfigurationType]:
        console.print(f"[red]Error:[/red] Invalid build type '{build_type}'. Must be debug or release")
        raise typer.Exit(1)

    try:
        portlint_config = load_config(config)
        _configure_logging(portlint_config, verbose)

        spec = PackageSpec(name=name, triplet=triplet)
        pre_build_info, package_build_info = _resolve_build_configuration(
            portlint_config, spec, build_info, target_arch, toolset, build_type, system_name
        )
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    try:
        report = perform_all_checks(spec, pre_build_info, package_build_info, portlint_config)
    except PortlintError as e:
        console.print(f"[red]Fatal:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(FATAL_EXIT_CODE)

    output_format = format or portlint_config.output.format
    if output_format == OutputFormat.JSON.value:
        render_json(console, report)
    else:
        render_report(console, report, show_outcomes=verbose)

    raise typer.Exit(report.exit_code)


@app.command()
def policies() -> None:
    """List the build policies a recipe can enable."""
    table = Table(title="Build policies")
    table.add_column("Policy", style="cyan")
    table.add_column("Recipe variable")
    table.add_column("BUILD_INFO key")
    for policy in BuildPolicy:
        table.add_row(policy.value, policy.recipe_variable, policy.control_key)
    console.print(table)


if __name__ == "__main__":
    app()
