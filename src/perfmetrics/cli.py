"""Command-line interface for perfmetrics.

Subcommands:
    perfmetrics run     Run the catalog and print the JSON report
    perfmetrics list    List catalog tests with their controls
    perfmetrics show    Display a saved report
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from perfmetrics import __version__
from perfmetrics.logging import setup_logging

if TYPE_CHECKING:
    from perfmetrics.config import RunConfig

log = logging.getLogger("perfmetrics")


def _build_config(
    profile_path: Path | None,
    probe_specs: tuple[str, ...],
    cli_overrides: dict[str, Any],
) -> RunConfig:
    """Merge profile, inline probe bindings and CLI values into a RunConfig."""
    from perfmetrics.config import config_from_profile, load_profile, parse_probe_spec

    profile_data = load_profile(profile_path) if profile_path else {}
    config = config_from_profile(profile_data, cli_overrides=cli_overrides)
    for spec in probe_specs:
        kind, argv = parse_probe_spec(spec)
        config.probes[kind] = argv
    return config


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """perfmetrics: run performance probes and report summary statistics."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "--filter",
    "test_filter",
    type=str,
    default=None,
    envvar="TEST_FILTER",
    help="Only run tests whose name contains this substring [env: TEST_FILTER].",
)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML profile with probe bindings and control overrides.",
)
@click.option(
    "--probe",
    "probe_specs",
    type=str,
    multiple=True,
    help="Inline probe binding: 'kind=command ...' (repeatable).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the JSON report to this file.",
)
@click.option(
    "--git-label",
    type=str,
    default=None,
    envvar="GIT_HUMAN_READABLE",
    help="Human-readable source revision [env: GIT_HUMAN_READABLE].",
)
@click.option(
    "--git-revision",
    type=str,
    default=None,
    envvar="GIT_REVISION",
    help="Source revision hash [env: GIT_REVISION].",
)
@click.option(
    "--timeout-allowance",
    type=int,
    default=None,
    help="Setup/cleanup seconds added to each iteration's deadline (default: 20).",
)
@click.option(
    "--fail-on-abort",
    is_flag=True,
    default=False,
    help="Exit with status 1 if a test failure aborted the run.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write a DEBUG log to this file.",
)
def run(
    test_filter: str | None,
    profile_path: Path | None,
    probe_specs: tuple[str, ...],
    output: Path | None,
    git_label: str | None,
    git_revision: str | None,
    timeout_allowance: int | None,
    fail_on_abort: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Run the performance tests sequentially and print the JSON report.

    The first test that fails or times out aborts the run; the results
    collected so far are still reported.

    \b
    Examples:
        # Bind probes in a profile
        perfmetrics run --profile perf.yaml -o report.json

        # Only boot-time tests, probe given inline
        TEST_FILTER=boot_time perfmetrics run \\
            --probe "boot_time=./probes/boot_time.sh"
    """
    from perfmetrics.catalog import build_registry
    from perfmetrics.config import check_config
    from perfmetrics.report import save_report
    from perfmetrics.runner import PerfRunner

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    cli_overrides: dict[str, Any] = {
        "test_filter": test_filter,
        "git_human_readable": git_label,
        "git_revision": git_revision,
        "timeout_allowance": timeout_allowance,
        "output": str(output) if output else None,
        "fail_on_abort": fail_on_abort or None,
    }
    try:
        config = _build_config(profile_path, probe_specs, cli_overrides)
        check_config(config)
        registry = build_registry(config.probe_callables(), overrides=config.overrides)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if not len(registry):
        log.warning("No probes are bound; use --profile or --probe to bind probe kinds.")

    try:
        outcome = PerfRunner(registry, config).run()
    except KeyboardInterrupt:
        click.echo("\nRun interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    if config.output:
        save_report(config.output, outcome.report)

    log.info("Tests result in json format:")
    click.echo(outcome.report.to_json())

    if outcome.aborted and config.fail_on_abort:
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@main.command("list")
@click.option(
    "--filter",
    "test_filter",
    type=str,
    default=None,
    envvar="TEST_FILTER",
    help="Only list tests whose name contains this substring [env: TEST_FILTER].",
)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML profile; applies its overrides and marks unbound probes.",
)
@click.option(
    "--probe",
    "probe_specs",
    type=str,
    multiple=True,
    help="Inline probe binding: 'kind=command ...' (repeatable).",
)
def list_cmd(
    test_filter: str | None,
    profile_path: Path | None,
    probe_specs: tuple[str, ...],
) -> None:
    """List catalog tests with their control and computed deadline."""
    from perfmetrics.catalog import CATALOG, CatalogEntry
    from perfmetrics.display import format_catalog

    try:
        config = _build_config(profile_path, probe_specs, {"test_filter": test_filter})
        entries = [
            CatalogEntry(
                e.name,
                e.kind,
                e.control.replace(**config.overrides[e.name])
                if e.name in config.overrides
                else e.control,
            )
            for e in CATALOG
            if config.test_filter in e.name
        ]
    except (TypeError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    bound = config.probes if (profile_path or probe_specs) else None
    click.echo(format_catalog(entries, bound=bound, allowance=config.timeout_allowance))


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@main.command("show")
@click.argument("report_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Re-emit the report as JSON.")
def show(report_path: Path, as_json: bool) -> None:
    """Display a saved report.

    REPORT_PATH is a JSON file written by ``perfmetrics run --output``.
    """
    from perfmetrics.display import format_report
    from perfmetrics.report import load_report

    try:
        report = load_report(report_path)
    except (ValueError, KeyError) as exc:
        click.echo(f"Error: cannot read report {report_path}: {exc}", err=True)
        raise SystemExit(1) from exc

    if as_json:
        click.echo(report.to_json())
    else:
        click.echo(format_report(report))
