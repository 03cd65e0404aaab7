"""
CLI interface for AI Usage Recon.

Provides command-line access to the reconciled usage views.
"""

import logging
import sys
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from ai_usage_recon.config.loader import ReconConfig, default_config, load_recon_config
from ai_usage_recon.core.cumulative import track_cumulative
from ai_usage_recon.core.daily import aggregate_daily
from ai_usage_recon.core.delta import (
    DeltaDirection,
    delta_direction,
    format_difference,
    latest_comparison,
)
from ai_usage_recon.sdk.reconciler import UsageReconciler
from ai_usage_recon.storage.models import SNAPSHOT_METRICS, CURRENCY_METRICS

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

_DIRECTION_STYLE = {
    DeltaDirection.UP: "green",
    DeltaDirection.DOWN: "red",
    DeltaDirection.NEUTRAL: "dim",
    DeltaDirection.ABSENT: "",
}


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """AI Usage Recon CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        console.print("AI Usage Recon - Use --help to see available commands")


def _load_config(path: Optional[str]) -> ReconConfig:
    if path is None:
        return default_config()
    return load_recon_config(path)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/] {str(error)}")
    sys.exit(EXIT_CODE_FAIL)


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    return f"${amount:,.2f}"


def _format_delta(value: Optional[float], currency: bool = False) -> str:
    text = format_difference(value, decimals=2 if currency else 0)
    style = _DIRECTION_STYLE[delta_direction(value)]
    return f"[{style}]{text}[/]" if style else text


@app.command()
def events(
    path: Optional[str] = typer.Argument(None, help="Usage events CSV"),
    tokens: Optional[str] = typer.Option(None, "--tokens", help="Legacy token-volume CSV"),
    details: Optional[str] = typer.Option(None, "--details", help="Legacy kind/detail CSV"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML config file"),
):
    """Show totals for the trailing window ending at the latest event."""
    try:
        reconciler = UsageReconciler(_load_config(config_path))
        if tokens and details:
            records = reconciler.load_legacy_events(tokens, details)
        elif path:
            records = reconciler.load_events(path)
        else:
            raise ValueError("Pass an events CSV or both --tokens and --details")

        report = reconciler.build_report(records, [])
        aggregate = report.trailing_window
        if aggregate is None:
            console.print("\n[bold yellow]No usage events found[/]\n")
            sys.exit(EXIT_CODE_PASS)

        console.print("\n[bold]Trailing Window Usage[/bold]")
        console.print("-" * 40)
        console.print(f"Latest event: {aggregate.window_end:%Y-%m-%d %H:%M:%S} UTC")
        console.print(f"Window start: {aggregate.window_start:%Y-%m-%d %H:%M:%S} UTC")
        console.print(f"Events (successful/total): {aggregate.successful_count:,}/{aggregate.event_count:,}")
        console.print(f"Errored events: {aggregate.errored_count:,}")
        console.print(f"Input (w/ Cache Write): {aggregate.input_with_cache_write:,}")
        console.print(f"Input (w/o Cache Write): {aggregate.input_without_cache_write:,}")
        console.print(f"Cache Read: {aggregate.cache_read:,}")
        console.print(f"Output Tokens: {aggregate.output_tokens:,}")
        console.print(f"Total Tokens: {aggregate.total_tokens:,}")
        console.print(f"Cost: {_format_currency(aggregate.cost)}")
        sys.exit(EXIT_CODE_PASS)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)


@app.command()
def summary(
    path: str = typer.Argument(..., help="Cumulative snapshot CSV"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model to compare (defaults to config)"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML config file"),
):
    """Compare the latest snapshot of a model with the previous day."""
    try:
        config = _load_config(config_path)
        reconciler = UsageReconciler(config)
        snapshots = reconciler.load_snapshots(path)
        wanted = model or config.summary.default_model

        comparison = latest_comparison(snapshots, model=wanted, mode=config.summary.reset_mode)
        if comparison is None:
            console.print(f"\n[bold yellow]No snapshot rows found for model '{wanted}'[/]\n")
            sys.exit(EXIT_CODE_PASS)

        table = Table(title=f"{comparison.latest.model} on {comparison.latest.date.isoformat()}")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_column("vs. previous", justify="right")
        for metric in SNAPSHOT_METRICS:
            currency = metric in CURRENCY_METRICS
            value = getattr(comparison.latest, metric)
            shown = value if currency else f"{value:,.0f}"
            table.add_row(metric, shown, _format_delta(comparison.delta.get(metric), currency))
        console.print(table)
        sys.exit(EXIT_CODE_PASS)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)


@app.command()
def series(
    path: str = typer.Argument(..., help="Cumulative snapshot CSV"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model to show (defaults to config)"),
    metric: str = typer.Option("total", "--metric", help="Snapshot metric to decompose"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML config file"),
):
    """Show the carried/new decomposition of a cumulative metric."""
    try:
        if metric not in SNAPSHOT_METRICS:
            raise ValueError(f"Unknown metric '{metric}', choose from: {list(SNAPSHOT_METRICS)}")
        config = _load_config(config_path)
        reconciler = UsageReconciler(config)
        snapshots = reconciler.load_snapshots(path)
        wanted = model or config.summary.default_model
        cumulative = track_cumulative(snapshots, metrics=[metric])
        if not cumulative.has_model(wanted):
            console.print(f"\n[bold yellow]No snapshot rows found for model '{wanted}'[/]\n")
            sys.exit(EXIT_CODE_PASS)

        table = Table(title=f"{wanted} / {metric}")
        table.add_column("Date")
        table.add_column("Carried", justify="right")
        table.add_column("New", justify="right")
        table.add_column("Cumulative", justify="right")
        table.add_column("Reset")
        for day, point in zip(cumulative.dates, cumulative.points(wanted, metric)):
            table.add_row(
                day.isoformat(),
                f"{point.carried:,.2f}",
                f"{point.new:,.2f}",
                f"{point.cumulative:,.2f}",
                "yes" if point.reset else "",
            )
        console.print(table)
        sys.exit(EXIT_CODE_PASS)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)


@app.command()
def daily(
    path: str = typer.Argument(..., help="Usage events CSV"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML config file"),
):
    """Show per-day event totals (UTC days)."""
    try:
        reconciler = UsageReconciler(_load_config(config_path))
        records = reconciler.load_events(path)
        days = aggregate_daily(records)
        if not days:
            console.print("\n[bold yellow]No usage events found[/]\n")
            sys.exit(EXIT_CODE_PASS)

        table = Table(title="Daily Usage")
        table.add_column("Date")
        table.add_column("Events", justify="right")
        table.add_column("Total Tokens", justify="right")
        table.add_column("Cost", justify="right")
        for day, usage in days.items():
            table.add_row(
                day.isoformat(),
                f"{usage.event_count:,}",
                f"{usage.total_tokens:,}",
                _format_currency(usage.cost),
            )
        console.print(table)
        sys.exit(EXIT_CODE_PASS)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)


if __name__ == "__main__":
    app()
