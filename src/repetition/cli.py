"""
Review Scheduler CLI.

Developer tool for inspecting the scheduling policy without a running platform.

Commands:
- srs replay    - Apply a sequence of grades to a fresh card
- srs streak    - Replay activity dates through the streak tracker
- srs settings  - Show the active scheduling policy
"""
from __future__ import annotations

import sys
from datetime import UTC, date, datetime, time
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from config import get_settings

from .clock import FixedClock
from .errors import RepetitionError
from .models import ReviewOutcome
from .scheduler import SM2Config, SM2Scheduler
from .streaks import StreakTracker

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="srs",
    help="Spaced-repetition review scheduler tools",
    no_args_is_help=True,
)
console = Console()

OUTCOME_STYLES = {
    ReviewOutcome.LAPSE: "bold red",
    ReviewOutcome.PROGRESS: "bold cyan",
    ReviewOutcome.MASTERED: "bold green",
}


def parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Not an ISO date: {value}") from None


def fail(exc: RepetitionError) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(code=1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def replay(
    qualities: list[int] = typer.Argument(..., help="Grades (0-5) in review order"),
    start: Optional[str] = typer.Option(
        None, "--start", "-s", help="First review date (default: today, UTC)"
    ),
    gap: Optional[int] = typer.Option(
        None, "--gap", "-g", help="Fixed days between reviews (default: review when due)"
    ),
) -> None:
    """Apply a sequence of grades to a fresh card and show the schedule."""
    scheduler = SM2Scheduler(SM2Config.from_settings())
    first_day = parse_day(start) if start is not None else datetime.now(UTC).date()
    clock = FixedClock(datetime.combine(first_day, time(9, 0), tzinfo=UTC))
    state = scheduler.new_state("replay", 1)

    table = Table(title="SM-2 Replay")
    table.add_column("#", justify="right")
    table.add_column("Reviewed")
    table.add_column("Grade", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Next review")
    table.add_column("Outcome")

    for index, quality in enumerate(qualities, start=1):
        try:
            state, result = scheduler.schedule(state, quality, now=clock.now())
        except RepetitionError as exc:
            fail(exc)

        style = OUTCOME_STYLES[result.outcome]
        table.add_row(
            str(index),
            clock.today().isoformat(),
            str(quality),
            f"{result.ease_factor:.2f}",
            str(result.repetitions),
            f"{result.interval_days}d",
            result.next_review_at.date().isoformat(),
            f"[{style}]{result.outcome.value}[/{style}]",
        )
        clock.advance(days=gap if gap is not None else result.interval_days)

    console.print(table)
    console.print(f"Final status: [{state.status.color}]{state.status.display_name}[/{state.status.color}]")


@app.command()
def streak(
    dates: list[str] = typer.Argument(..., help="Activity dates (YYYY-MM-DD) in order"),
) -> None:
    """Replay activity dates and show the resulting streak."""
    tracker = StreakTracker()
    summary = None

    for value in dates:
        try:
            summary = tracker.record_activity("replay", parse_day(value))
        except RepetitionError as exc:
            fail(exc)
        marker = " [green]new record[/green]" if summary.is_new_record else ""
        console.print(f"{value}: current={summary.current_streak}{marker}")

    table = Table(title="Streak")
    table.add_column("Current", justify="right")
    table.add_column("Longest", justify="right")
    table.add_column("Active days", justify="right")
    table.add_column("Last activity")
    table.add_row(
        str(summary.current_streak),
        str(summary.longest_streak),
        str(summary.total_active_days),
        summary.last_activity_date.isoformat(),
    )
    console.print(table)


@app.command()
def settings() -> None:
    """Show the active scheduling policy."""
    table = Table(title="Scheduling Policy")
    table.add_column("Setting")
    table.add_column("Value", justify="right")
    for name, value in get_settings().get_scheduling_config().items():
        table.add_row(name, str(value))
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    current = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=current.log_level,
        format="<level>{message}</level>",
    )
    if current.log_file:
        logger.add(current.log_file, level=current.log_level, rotation="10 MB")

    app()


if __name__ == "__main__":
    main()
