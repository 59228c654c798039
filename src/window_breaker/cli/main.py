"""CLI for window-breaker: keys / status / record / trip / warn commands."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from window_breaker.breaker import MAX_WINDOW_VALUE, WindowCircuitBreaker, create_breaker
from window_breaker.buckets import as_utc
from window_breaker.core.config import AppSettings, BreakerConfig, ObservabilityConfig
from window_breaker.core.startup_checks import validate_settings
from window_breaker.logging_config import setup_logging

app = typer.Typer(name="window-breaker", help="Inspect and drive sliding-window usage breakers")
console = Console()

_FLAG_VALUES = {"on": True, "off": False}


def _build_settings(feature: Optional[str], window_minutes: Optional[int]) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    overrides: dict = {}
    if feature:
        overrides["feature_name"] = feature
    if window_minutes:
        overrides["window"] = timedelta(minutes=window_minutes)
    return AppSettings(breaker=BreakerConfig(**overrides))


def _load_breaker(
    feature: Optional[str],
    window_minutes: Optional[int],
    verbose: bool,
) -> WindowCircuitBreaker:
    settings = _build_settings(feature, window_minutes)
    if verbose:
        settings.observability = ObservabilityConfig(log_level="DEBUG")
        setup_logging(settings.observability)
    try:
        validate_settings(settings)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return create_breaker(settings)


def _parse_flag(value: str) -> bool:
    try:
        return _FLAG_VALUES[value.lower()]
    except KeyError:
        raise typer.BadParameter(f"Expected 'on' or 'off', got {value!r}") from None


def _fmt_limit(value: int) -> str:
    return "disabled" if value == MAX_WINDOW_VALUE else str(value)


def _fmt_flag(value: Optional[bool]) -> str:
    if value is None:
        return "[dim]unset[/dim]"
    return "[red]on[/red]" if value else "[green]off[/green]"


@app.command()
def keys(
    at: Optional[datetime] = typer.Option(None, "--at", help="Evaluate the window at this instant (UTC)"),
    feature: Optional[str] = typer.Option(None, "--feature", "-f", help="Feature name"),
    window_minutes: Optional[int] = typer.Option(None, "--window-minutes", "-w", help="Window length in minutes"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Print the counter keys that make up the current window."""
    breaker = _load_breaker(feature, window_minutes, verbose)
    now = as_utc(at) if at else datetime.now(timezone.utc)
    for key in breaker.generate_keys(now):
        console.print(key)


@app.command()
def status(
    feature: Optional[str] = typer.Option(None, "--feature", "-f", help="Feature name"),
    window_minutes: Optional[int] = typer.Option(None, "--window-minutes", "-w", help="Window length in minutes"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Show window value, thresholds and trip/warning flags."""
    breaker = _load_breaker(feature, window_minutes, verbose)
    snap = breaker.snapshot()

    table = Table(title=f"{snap.feature_name} ({snap.window})")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Active", "yes" if snap.active else "no")
    table.add_row("Window value", str(snap.window_value) if snap.active else "n/a")
    table.add_row("Threshold", _fmt_limit(snap.threshold))
    table.add_row("Warning threshold", _fmt_limit(snap.warning_threshold))
    table.add_row("Exceeding threshold", str(snap.exceeding_threshold))
    table.add_row("Exceeding warning", str(snap.exceeding_warning_threshold))
    table.add_row("Tripped", _fmt_flag(snap.tripped))
    table.add_row("Warning", _fmt_flag(snap.warning))
    console.print(table)


@app.command()
def record(
    amount: int = typer.Argument(..., help="Amount to add to the current buckets"),
    feature: Optional[str] = typer.Option(None, "--feature", "-f", help="Feature name"),
    window_minutes: Optional[int] = typer.Option(None, "--window-minutes", "-w", help="Window length in minutes"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Add an amount to every bucket tier at the current instant."""
    breaker = _load_breaker(feature, window_minutes, verbose)
    breaker.update_latest_buckets_value(amount)
    console.print(f"[green]Recorded {amount} for {breaker.feature_name}[/green]")


@app.command()
def trip(
    state: str = typer.Argument(..., help="on | off"),
    feature: Optional[str] = typer.Option(None, "--feature", "-f", help="Feature name"),
    window_minutes: Optional[int] = typer.Option(None, "--window-minutes", "-w", help="Window length in minutes"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Set or clear the trip flag."""
    value = _parse_flag(state)
    breaker = _load_breaker(feature, window_minutes, verbose)
    breaker.update_trip(value)
    console.print(f"Trip flag for {breaker.trip_key}: {_fmt_flag(value)}")


@app.command()
def warn(
    state: str = typer.Argument(..., help="on | off"),
    feature: Optional[str] = typer.Option(None, "--feature", "-f", help="Feature name"),
    window_minutes: Optional[int] = typer.Option(None, "--window-minutes", "-w", help="Window length in minutes"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Set or clear the warning flag."""
    value = _parse_flag(state)
    breaker = _load_breaker(feature, window_minutes, verbose)
    breaker.update_trip_warning(value)
    console.print(f"Warning flag for {breaker.warning_key}: {_fmt_flag(value)}")


if __name__ == "__main__":
    app()
