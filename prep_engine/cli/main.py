"""
Prep CLI - terminal front end for the exam-prep engine.

Usage:
    prep init-db                                  # Create tables
    prep answer alice Physics Mechanics Friction --correct
    prep level alice Physics Mechanics Friction   # Current mastery level
    prep revisions alice                          # Revisions due today
    prep log-day alice --hours 5 --questions 40 --accuracy 72
    prep energy alice                             # Burnout assessment
    prep plan alice --hours 6 --days 45           # Weekly study plan
    prep plan alice --exam NEET --days 120        # Rank projection against NEET

All logic lives in prep_engine.study; commands only parse, call and render.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Annotated, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from prep_engine.config import get_settings
from prep_engine.core.errors import PrepEngineError
from prep_engine.core.models import (
    BurnoutAssessment,
    EnergyLog,
    MasteryLevel,
    Severity,
    TopicKey,
    Urgency,
)
from prep_engine.db.database import dispose_engine, init_db
from prep_engine.db.sql_store import SqlAlchemyStore
from prep_engine.study.level_tracker import AdaptiveLevelTracker
from prep_engine.study.mastery_model import progress_percentage
from prep_engine.study.study_service import StudyPlan, StudyPlanService

T = TypeVar("T")

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="prep",
    help="Exam prep engine - adaptive levels, revision scheduling and weekly plans",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

URGENCY_STYLES = {
    Urgency.CRITICAL: "bold red",
    Urgency.HIGH: "red",
    Urgency.MEDIUM: "yellow",
    Urgency.LOW: "green",
}

SEVERITY_STYLES = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def _execute(factory: Callable[[], Awaitable[T]]) -> T:
    """Run an async command body, disposing the engine and mapping domain errors."""

    async def runner() -> T:
        try:
            return await factory()
        finally:
            await dispose_engine()

    try:
        return asyncio.run(runner())
    except PrepEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _tracker() -> AdaptiveLevelTracker:
    settings = get_settings()
    return AdaptiveLevelTracker(
        SqlAlchemyStore(), persistence_timeout=settings.persistence_timeout_seconds
    )


def _service() -> StudyPlanService:
    return StudyPlanService(SqlAlchemyStore())


def _format_progress_bar(score: float, width: int = 10) -> str:
    filled = int(score / 100 * width)
    return "#" * filled + "-" * (width - filled)


# =============================================================================
# Database
# =============================================================================


@app.command("init-db")
def init_db_command() -> None:
    """Create the mastery and energy-log tables."""
    _execute(init_db)
    console.print(f"[green]Database ready:[/green] {get_settings().database_url}")


# =============================================================================
# Mastery
# =============================================================================


@app.command()
def answer(
    user: Annotated[str, typer.Argument(help="Learner id")],
    subject: Annotated[str, typer.Argument(help="Subject, e.g. Physics")],
    chapter: Annotated[str, typer.Argument(help="Chapter within the subject")],
    topic: Annotated[str, typer.Argument(help="Topic within the chapter")],
    correct: Annotated[
        bool, typer.Option("--correct/--wrong", help="Whether the answer was correct")
    ] = True,
) -> None:
    """
    Record one answered question.

    Examples:
        prep answer alice Physics Mechanics Friction --correct
        prep answer alice Physics Mechanics Friction --wrong
    """
    transition = _execute(
        lambda: _tracker().record_answer(user, TopicKey(subject, chapter, topic), correct)
    )

    record = transition.record
    if transition.leveled_up:
        style = "bold green"
    elif transition.leveled_down:
        style = "bold yellow"
    else:
        style = "cyan"

    level = MasteryLevel(transition.new_level)
    console.print(
        Panel(
            f"[{style}]{transition.message}[/]\n"
            f"Level: {level.display_name}\n"
            f"Accuracy: {record.accuracy:.1f}% over {record.questions_attempted} questions",
            title=str(record.key),
            border_style="cyan",
        )
    )


@app.command()
def level(
    user: Annotated[str, typer.Argument(help="Learner id")],
    subject: Annotated[str, typer.Argument()],
    chapter: Annotated[str, typer.Argument()],
    topic: Annotated[str, typer.Argument()],
) -> None:
    """Show the learner's current mastery level for a topic."""
    store = SqlAlchemyStore()

    async def fetch():
        return await store.load_mastery_record(user, TopicKey(subject, chapter, topic))

    record = _execute(fetch)
    if record is None:
        console.print(
            f"[dim]{subject} / {chapter} / {topic}: not practiced yet (Foundation)[/dim]"
        )
        return

    current = MasteryLevel(record.current_level)
    pct = progress_percentage(record)
    console.print(
        f"[cyan]{record.key}[/cyan]: {current.display_name} "
        f"{_format_progress_bar(pct)} {pct:.0f}%  "
        f"[dim]({record.accuracy:.1f}% over {record.questions_attempted} questions)[/dim]"
    )


# =============================================================================
# Revision
# =============================================================================


@app.command()
def revisions(
    user: Annotated[str, typer.Argument(help="Learner id")],
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Show the full schedule, not just today's")
    ] = False,
) -> None:
    """Show revisions due today, most urgent first."""
    service = _service()
    entries = _execute(
        (lambda: service.revision_schedule(user)) if show_all else (lambda: service.revisions_due(user))
    )

    if not entries:
        console.print("[green]No revisions due - all caught up![/green]")
        return

    table = Table(title="Revision Schedule" if show_all else "Revisions Due Today")
    table.add_column("Topic", style="cyan")
    table.add_column("Urgency")
    table.add_column("Retention", justify="right")
    table.add_column("Last Reviewed", justify="right")
    table.add_column("Next Review")
    table.add_column("Minutes", justify="right")

    for entry in entries:
        style = URGENCY_STYLES[entry.urgency]
        table.add_row(
            str(entry.key),
            f"[{style}]{entry.urgency.value}[/{style}]",
            f"{entry.retention_probability:.0f}%",
            f"{entry.days_since_review}d ago",
            entry.next_review.strftime("%Y-%m-%d"),
            str(entry.recommended_minutes),
        )
    console.print(table)


# =============================================================================
# Energy
# =============================================================================


def _print_assessment(assessment: BurnoutAssessment) -> None:
    score = assessment.energy_score
    color = "green" if score >= 60 else "yellow" if score >= 30 else "red"
    console.print(
        f"Energy: [{color}]{_format_progress_bar(score)} {score:.0f}/100[/{color}]"
    )
    for signal in assessment.signals:
        style = SEVERITY_STYLES[signal.severity]
        console.print(f"  [{style}][{signal.severity.value.upper()}][/{style}] {signal.message}")
    if assessment.suggest_rest:
        console.print(f"[bold yellow]{assessment.message}[/bold yellow]")
    else:
        console.print(f"[dim]{assessment.message}[/dim]")


@app.command("log-day")
def log_day(
    user: Annotated[str, typer.Argument(help="Learner id")],
    hours: Annotated[float, typer.Option("--hours", "-h", help="Hours studied")],
    questions: Annotated[int, typer.Option("--questions", "-q", help="Questions attempted")],
    accuracy: Annotated[float, typer.Option("--accuracy", "-a", help="Accuracy (0-100)")],
    late_night: Annotated[
        bool, typer.Option("--late-night", help="Studied late at night")
    ] = False,
    day: Annotated[
        str | None, typer.Option("--date", "-d", help="Day to log (YYYY-MM-DD, default today)")
    ] = None,
) -> None:
    """Log one day of study aggregates and show the refreshed energy score."""
    try:
        logged_day = date.fromisoformat(day) if day else date.today()
    except ValueError:
        console.print(f"[red]Error:[/red] invalid date {day!r}, expected YYYY-MM-DD")
        raise typer.Exit(code=1)

    def submit():
        log = EnergyLog(
            day=logged_day,
            study_hours=hours,
            questions_attempted=questions,
            accuracy=accuracy,
            late_night_study=late_night,
        )
        return _service().log_day(user, log)

    assessment = _execute(submit)
    console.print(f"[green]Logged {logged_day}[/green]")
    _print_assessment(assessment)


@app.command()
def energy(user: Annotated[str, typer.Argument(help="Learner id")]) -> None:
    """Show the burnout assessment over the last logged week."""
    service = _service()
    _print_assessment(_execute(lambda: service.assess_energy(user)))


# =============================================================================
# Planning
# =============================================================================


def _print_plan(plan: StudyPlan) -> None:
    alloc = plan.time_allocation
    console.print(
        Panel(
            f"[bold cyan]WEEKLY STUDY PLAN[/]\n"
            f"Days to exam: {plan.days_to_exam}\n"
            f"Split: study {alloc.study_time:.0%} | revision {alloc.revision_time:.0%} | "
            f"mock tests {alloc.mock_test_time:.0%}\n"
            f"Energy: {plan.burnout.energy_score:.0f}/100",
            border_style="cyan",
        )
    )

    rank = plan.rank
    console.print(
        f"Projected rank: [bold]{rank.current_rank:,}[/bold] ({rank.percentile_range}), "
        f"target {rank.target_rank:,} in {rank.improvement_weeks} weeks at "
        f"{rank.weekly_accuracy_target:.0f}% accuracy next week"
    )
    console.print(f"{plan.motivation.emoji} {plan.motivation.message}\n")

    for daily in plan.weekly_plan:
        title = f"{daily.day_name} {daily.date.isoformat()}"
        if daily.is_rest_day:
            title += " (rest day)"
        table = Table(title=title, title_justify="left")
        table.add_column("Slot")
        table.add_column("Type")
        table.add_column("Subject", style="cyan")
        table.add_column("Topic")
        table.add_column("Min", justify="right")
        for task in daily.tasks:
            table.add_row(
                task.time_slot.value,
                task.type.value,
                task.subject,
                task.topic,
                str(task.duration),
            )
        console.print(table)

    swot = plan.swot
    console.print("\n[bold]SWOT[/bold]")
    for label, items in (
        ("Strengths", swot.strengths),
        ("Weaknesses", swot.weaknesses),
        ("Opportunities", swot.opportunities),
        ("Threats", swot.threats),
    ):
        console.print(f"  [cyan]{label}:[/cyan] {'; '.join(items)}")

    if plan.burnout.suggest_rest:
        console.print(f"\n[bold yellow]{plan.burnout.message}[/bold yellow]")


@app.command()
def plan(
    user: Annotated[str, typer.Argument(help="Learner id")],
    hours: Annotated[
        float | None, typer.Option("--hours", "-h", help="Study hours per day")
    ] = None,
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Days to exam (default: from EXAM_DATE)")
    ] = None,
    exam: Annotated[
        str | None, typer.Option("--exam", "-e", help="JEE or NEET (default: from TARGET_EXAM)")
    ] = None,
) -> None:
    """
    Generate the 7-day study plan.

    Examples:
        prep plan alice --hours 6 --days 45
        prep plan alice --exam NEET --days 120
        prep plan alice              # Uses DEFAULT_DAILY_HOURS and EXAM_DATE
    """
    settings = get_settings()
    daily_hours = hours if hours is not None else settings.default_daily_hours
    days_to_exam = days if days is not None else settings.days_to_exam(date.today())
    if days_to_exam is None:
        console.print("[red]Error:[/red] pass --days or set EXAM_DATE")
        raise typer.Exit(code=1)

    target_exam = exam or settings.target_exam

    service = _service()
    _print_plan(
        _execute(lambda: service.build_plan(user, daily_hours, days_to_exam, target_exam))
    )


# =============================================================================
# Entry Point
# =============================================================================


def _configure_logging() -> None:
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB")


def run() -> None:
    """Entry point for the CLI."""
    _configure_logging()
    app()


if __name__ == "__main__":
    run()
