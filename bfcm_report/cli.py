"""
Command line interface for bfcm-report.

Commands::

    bfcm-report validate-config [--config PATH] [--full]
    bfcm-report generate --shop-id 12345 --start-date 2025-11-28 --end-date 2025-12-01 \\
        [--fixture tests/fixtures/sample_sources.json] [--json]

Each command loads ``AppConfig`` first and exits early with a one-line
``[ERROR]`` message when the config or the arguments are bad.  Report text
goes to stdout; progress, warnings and log records go to stderr when
``--json`` is given so the JSON can be piped.

Exit codes: 0 report produced (complete or partial), 1 bad config or
arguments, 2 every data source failed.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import List, Optional

import typer

from bfcm_report.utils.logging import configure_logging

app = typer.Typer(
    name="bfcm-report",
    help="Black Friday / Cyber Monday merchant reports from analytics sources.",
    add_completion=False,
)

_CONFIG_HELP = "TOML config file (default: config/default.toml)."


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.echo(f"[ERROR] {message}", err=True)
    return typer.Exit(code=code)


def _config_or_exit(config_path: Optional[str]):
    from pydantic import ValidationError

    from bfcm_report.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        raise _fail(str(exc))
    except (ValidationError, ValueError) as exc:
        raise _fail(f"Config validation failed: {exc}")


def _iso_date(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise _fail(f"{option} must be YYYY-MM-DD, got '{value}'.")


def _open_fetchers(config, fixture: Optional[str]):
    """Pick the fetcher set: a JSON snapshot if one is given, else the HTTP API."""
    path = fixture or config.sources.fixture_path
    if path:
        from bfcm_report.sources.fixture import FixtureSourceFetcherSet

        return FixtureSourceFetcherSet.from_file(path), f"fixture={path}"

    from bfcm_report.sources.http_client import HttpSourceFetcherSet

    return HttpSourceFetcherSet(config.sources), f"api={config.sources.base_url}"


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    show_full: bool = typer.Option(
        False, "--full", help="Also dump every field as JSON (secret omitted).",
    ),
) -> None:
    """Load the config layers and print the values a report run would use."""
    config = _config_or_exit(config_path)
    report, sources = config.report, config.sources

    rows = [
        ("Max window days", report.max_window_days),
        ("Max recommendations", report.max_recommendations),
        ("Comparison label", report.comparison_label),
        ("Peak timezone", report.peak_timezone or "(source clock)"),
        ("Sources base URL", sources.base_url or "(not set)"),
        ("Fixture path", sources.fixture_path or "(not set)"),
        ("Credentials", "set" if sources.has_credentials else "not set"),
        ("Log level", config.logging.level),
        ("Debug mode", config.debug),
    ]
    typer.echo("Loaded configuration:")
    for name, value in rows:
        typer.echo(f"  {name + ':':<20} {value}")

    if show_full:
        dumped = config.model_dump(exclude={"sources": {"client_secret"}})
        typer.echo("\nAll fields:")
        typer.echo(json.dumps(dumped, indent=2, default=str))

    typer.echo("\n[OK] Config is valid.")


@app.command("generate")
def generate(
    shop_ids: List[str] = typer.Option(
        ..., "--shop-id", help="Numeric shop id; repeat the option for several shops.",
    ),
    start_date: str = typer.Option(..., "--start-date", help="First day of the window, YYYY-MM-DD."),
    end_date: str = typer.Option(..., "--end-date", help="Last day of the window, YYYY-MM-DD."),
    account_name: Optional[str] = typer.Option(
        None, "--account-name", help="Name shown in the report title.",
    ),
    fixture: Optional[str] = typer.Option(
        None, "--fixture", help="Read source payloads from a JSON snapshot instead of the API.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit the report as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Fetch every source for the window and print the merchant report.

    \b
    Payload source, first match wins:
      --fixture PATH         JSON snapshot
      sources.fixture_path   JSON snapshot from config
      sources.base_url       analytics HTTP API

    A failed source leaves its section at defaults and prints a [WARN]
    line.  The command only fails (exit 2) when no source succeeds.
    """
    from pydantic import ValidationError

    from bfcm_report.models.request import FetchRequest, check_window_length
    from bfcm_report.pipeline.orchestrator import AllSourcesFailedError, ProgressEvent
    from bfcm_report.pipeline.report import run_report
    from bfcm_report.reporting.formatters import format_report_text

    config = _config_or_exit(config_path)
    configure_logging(config.logging)

    try:
        request = FetchRequest(
            shop_ids=shop_ids,
            start_date=_iso_date(start_date, "--start-date"),
            end_date=_iso_date(end_date, "--end-date"),
            account_name=account_name,
        )
        check_window_length(request, config.report.max_window_days)
    except (ValidationError, ValueError) as exc:
        raise _fail(f"Invalid request: {exc}")

    try:
        fetchers, mode = _open_fetchers(config, fixture)
    except (FileNotFoundError, ValueError) as exc:
        raise _fail(str(exc))

    # With --json, stdout carries only the report.
    status_to_stderr = as_json
    typer.echo(
        f"generate | shops={', '.join(request.shop_ids)} | "
        f"{request.start_date}..{request.end_date} | {mode}",
        err=status_to_stderr,
    )

    def on_progress(event: ProgressEvent) -> None:
        typer.echo(f"  [{event.completed:>2}/{event.total}] {event.current_label}", err=status_to_stderr)

    try:
        report = run_report(request, fetchers, config, on_progress=on_progress)
    except AllSourcesFailedError as exc:
        raise _fail(str(exc), code=2)

    for label in report.failed_labels:
        typer.echo(f"[WARN] {label} unavailable; showing defaults.", err=True)

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
        return

    typer.echo(format_report_text(report))
    typer.echo(f"\n[OK] Report {'partial' if report.is_partial else 'complete'}.")
