"""
LEAN Regression Kit - Command Line Interface

Usage:
    regression [--config PATH] <command> [<args>]

Commands:
    list        List the generated test cases
    show        Show the baseline and overrides of one case
    run         Run and verify test cases through the LEAN launcher
    config      Show the effective configuration

Exit codes for run: 0 when every case passed, 1 when any case failed,
2 when the harness could not be set up.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml

from regression_system import __version__
from regression_system.core import (
    Config,
    ConfigurationError,
    SettingsStore,
    load_config,
    setup_logging,
    validate_config,
)
from regression_system.engine import LeanLauncherEngine
from regression_system.harness import (
    NON_DEFAULT_STATUSES,
    OverrideRegistry,
    Runner,
    TestCase,
    generate_cases,
    select_cases,
)
from regression_system.registry import (
    DescriptorRegistry,
    RegistrySetupError,
    default_registry,
    discover,
    load_yaml_catalog,
)
from regression_system.schemas import Language

SETUP_ERROR_EXIT_CODE = 2

app = typer.Typer(
    name="regression",
    help="Run LEAN regression algorithms and verify them against their baselines.",
    no_args_is_help=True,
)


# =============================================================================
# SETUP HELPERS
# =============================================================================


def build_store(config: Config) -> SettingsStore:
    """Create the settings store from the configured defaults."""
    if config.settings.defaults_file:
        return SettingsStore.from_file(config.settings.defaults_file, config.settings.values)
    return SettingsStore(config.settings.values)


def build_registry(config: Config) -> DescriptorRegistry:
    """Collect descriptors from configured modules and YAML catalogs."""
    for module in config.registry.modules:
        discover(module)
    registry = default_registry.copy()
    for catalog_path in config.registry.catalog_paths:
        load_yaml_catalog(registry, catalog_path)
    return registry


def _fail_setup(error: Exception) -> None:
    typer.secho(f"Setup error: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=SETUP_ERROR_EXIT_CODE)


def _load_cases(
    config: Config,
    algorithms: Optional[list[str]],
    languages: Optional[list[str]],
) -> tuple[list[TestCase], SettingsStore]:
    try:
        store = build_store(config)
        cases = generate_cases(build_registry(config), store, NON_DEFAULT_STATUSES)
        language_filter = [Language.parse(name) for name in languages] if languages else None
    except (ConfigurationError, RegistrySetupError, ValueError) as e:
        _fail_setup(e)
    return select_cases(cases, algorithms, language_filter), store


AlgorithmOption = Annotated[
    Optional[list[str]],
    typer.Option("--algorithm", "-a", help="Only cases for this algorithm (repeatable)"),
]
LanguageOption = Annotated[
    Optional[list[str]],
    typer.Option("--language", "-l", help="Only cases in this language (repeatable)"),
]


# =============================================================================
# COMMANDS
# =============================================================================


def _version_callback(value: bool):
    if value:
        typer.echo(f"regression {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to regression-kit.yaml"),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
):
    """Run LEAN regression algorithms and verify them against their baselines."""
    try:
        ctx.obj = load_config(config_path)
    except ConfigurationError as e:
        _fail_setup(e)


@app.command("list")
def list_cases(
    ctx: typer.Context,
    algorithm: AlgorithmOption = None,
    language: LanguageOption = None,
):
    """List generated test cases in run order."""
    cases, _ = _load_cases(ctx.obj, algorithm, language)
    for case in cases:
        typer.echo(case.name)
    typer.echo(f"\n{len(cases)} cases")


@app.command("show")
def show_case(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Case name, e.g. Python/BasicTemplateAlgorithm")],
):
    """Show a case's baseline and the settings overrides applied to it."""
    cases, _ = _load_cases(ctx.obj, None, None)
    matches = [case for case in cases if case.name == name]
    if not matches:
        typer.secho(f"No such case: {name}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    case = matches[0]
    details = case.to_dict()
    overrides = OverrideRegistry()
    details["overrides"] = [
        {"key": key, "value": value}
        for key, value in overrides.baseline + overrides.overrides_for(case.algorithm)
    ]
    typer.echo(yaml.dump(details, default_flow_style=False, sort_keys=False))


@app.command("run")
def run_cases(
    ctx: typer.Context,
    algorithm: AlgorithmOption = None,
    language: LanguageOption = None,
    report: Annotated[
        Optional[Path],
        typer.Option("--report", "-r", help="Write a YAML report to this path"),
    ] = None,
    markdown: Annotated[
        Optional[Path],
        typer.Option("--markdown", "-m", help="Write a Markdown summary to this path"),
    ] = None,
):
    """Run and verify test cases sequentially through the LEAN launcher."""
    config: Config = ctx.obj
    setup_logging(Path.cwd(), config)

    cases, store = _load_cases(config, algorithm, language)
    if not cases:
        typer.secho("No cases selected", fg=typer.colors.YELLOW)
        raise typer.Exit()

    runner = Runner(LeanLauncherEngine.from_config(config.engine), store)
    run_report = runner.run_all(cases)

    for outcome in run_report.outcomes:
        if outcome.passed:
            typer.secho(f"PASS  {outcome.case.name}", fg=typer.colors.GREEN)
        elif outcome.error is not None:
            typer.secho(f"ERROR {outcome.case.name}: {outcome.error}", fg=typer.colors.RED)
        else:
            typer.secho(f"FAIL  {outcome.verdict.summary()}", fg=typer.colors.RED)

    typer.echo(
        f"\n{run_report.passed_count}/{run_report.total} passed, "
        f"{run_report.failed_count} failed, {run_report.errored_count} errored"
    )

    if report is None:
        report = Path(config.report.output_directory) / "regression-report.yaml"
    run_report.save(report)
    typer.echo(f"Report: {report}")

    if markdown is not None:
        markdown.parent.mkdir(parents=True, exist_ok=True)
        markdown.write_text(run_report.render_markdown())

    if not run_report.passed:
        raise typer.Exit(code=1)


@app.command("config")
def show_config(ctx: typer.Context):
    """Show the effective configuration and any warnings."""
    config: Config = ctx.obj
    typer.echo(yaml.dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False))

    warnings = validate_config(config)
    if warnings:
        typer.secho("Warnings:", fg=typer.colors.YELLOW)
        for warning in warnings:
            typer.echo(f"  - {warning}")


if __name__ == "__main__":
    app()
