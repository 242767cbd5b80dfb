"""Command-line interface."""
from __future__ import annotations

import sys
from typing import Optional

import typer
import structlog
from rich.console import Console
from rich.table import Table

from .config.settings import settings
from .logging_config import configure_logging
from .retry.backoff import ExponentialBackoffPolicy
from .retry.sleeper import RecordingSleeper

logger = structlog.get_logger()
app = typer.Typer()


@app.callback()
def setup() -> None:
    """Preview and inspect exponential backoff schedules."""
    configure_logging(settings.log_level)


@app.command()
def schedule(
    attempts: int = typer.Option(
        10,
        "--attempts", "-n",
        min=1,
        help="Number of retries to simulate",
    ),
    initial: Optional[int] = typer.Option(
        None,
        "--initial", "-i",
        help="Initial interval in milliseconds",
    ),
    multiplier: Optional[float] = typer.Option(
        None,
        "--multiplier", "-m",
        help="Growth factor between retries",
    ),
    max_interval: Optional[int] = typer.Option(
        None,
        "--max", "-x",
        help="Maximum interval in milliseconds",
    ),
) -> None:
    """Show the delays a fresh retry sequence would wait."""
    recorder = RecordingSleeper()
    policy = ExponentialBackoffPolicy.from_settings().with_sleeper(recorder)
    if initial is not None:
        policy.initial_interval = initial
    if multiplier is not None:
        policy.multiplier = multiplier
    if max_interval is not None:
        policy.max_interval = max_interval

    state = policy.start()
    for _ in range(attempts):
        policy.back_off(state)

    console = Console()
    console.print(repr(policy), soft_wrap=True)

    table = Table(show_header=True)
    table.add_column("Attempt", justify="right")
    table.add_column("Delay (ms)", justify="right")
    table.add_column("Total (ms)", justify="right")

    total = 0
    for attempt, delay in enumerate(recorder.sleeps, start=1):
        total += delay
        style = "[yellow]" if delay == policy.max_interval else "[green]"
        table.add_row(str(attempt), f"{style}{delay}[/]", str(total))

    console.print(table)
    logger.debug("schedule_rendered", attempts=attempts, total_ms=total)


@app.command()
def config() -> None:
    """Show the effective backoff settings."""
    console = Console()

    table = Table(show_header=True)
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Initial interval", f"{settings.initial_interval}ms")
    table.add_row("Multiplier", str(settings.multiplier))
    table.add_row("Max interval", f"{settings.max_interval}ms")
    table.add_row("Log level", settings.log_level)

    console.print(table)


def main() -> None:
    """Application entry point."""
    app()


if __name__ == "__main__":
    sys.exit(main())
