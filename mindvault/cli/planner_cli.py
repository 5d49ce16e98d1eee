"""
MindVault Planner CLI

Builds and manages an adaptive study schedule from the terminal.

Usage:
    mindvault plan profile.json              # Generate and store a schedule
    mindvault plan profile.json --narrate    # ...with AI commentary for today
    mindvault show --date 2025-01-10         # Show a stored day
    mindvault complete 2025-01-10 2          # Tick off a slot
    mindvault export --ics plan.ics          # Export to a calendar
    mindvault friction update outcomes.json  # Feed task outcomes back
    mindvault blocker add 2025-01-10 10:00 11:00 --reason Dentist

The profile file is JSON with "chapters", "exams" and an optional "config"
object overriding the settings-derived scheduler defaults.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated, Any

import httpx
import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from mindvault.core.errors import CapacityError, NarrationError
from mindvault.core.utils import from_epoch_day, today_epoch_day
from mindvault.delivery.export import schedule_to_ics, schedule_to_json
from mindvault.delivery.state_store import ProfileStore
from mindvault.integrations.narrator import ScheduleNarrator, attach_commentary
from mindvault.study.friction import update_friction
from mindvault.study.models import (
    Chapter,
    Exam,
    ScheduleDay,
    ScheduleResult,
    SchedulerConfig,
    SlotType,
    TaskOutcome,
    TimeBlocker,
    UserFriction,
)
from mindvault.study.scheduler import generate_schedule

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="mindvault",
    help="📚 MindVault Planner - adaptive study scheduling",
    add_completion=False,
    rich_markup_mode="rich",
)

friction_app = typer.Typer(help="Inspect and update the friction profile")
blocker_app = typer.Typer(help="Manage calendar blockers")
app.add_typer(friction_app, name="friction")
app.add_typer(blocker_app, name="blocker")

console = Console()

SLOT_STYLES = {
    SlotType.STUDY: "green",
    SlotType.REVIEW: "cyan",
    SlotType.MINI_REVIEW: "blue",
    SlotType.BREAK: "dim",
    SlotType.BUFFER: "yellow",
}


def _open_store(ctx: typer.Context) -> ProfileStore:
    settings: Settings = ctx.obj["settings"]
    data_dir: Path | None = ctx.obj.get("data_dir")
    return ProfileStore(data_dir / "planner.db" if data_dir else settings.database_path)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        console.print(f"[red]File not found: {path}[/]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/]")
        raise typer.Exit(1)


def _render_day(day: ScheduleDay) -> None:
    if day.warning:
        console.print(f"[yellow]{day.date}: {day.warning}[/]")
        return
    if not day.slots:
        console.print(f"[dim]{day.date}: nothing scheduled[/]")
        return

    table = Table(title=f"{day.date} ({day.total_hours:.1f}h)", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time")
    table.add_column("Type")
    table.add_column("Chapter")
    table.add_column("Cards", justify="right")
    table.add_column("Reason", overflow="fold")
    table.add_column("✓", justify="center")

    for i, slot in enumerate(day.slots):
        style = SLOT_STYLES.get(slot.type, "white")
        chapter = f"{slot.subject} / {slot.chapter_id}" if slot.subject else "-"
        table.add_row(
            str(i),
            f"{slot.start}-{slot.end}",
            f"[{style}]{slot.type.value}[/]",
            chapter,
            str(slot.cards) if slot.cards is not None else "",
            slot.reason,
            "✓" if slot.completed else "",
        )
    console.print(table)

    for note in day.friction_notes:
        console.print(f"  [magenta]• {note}[/]")
    if day.ai_commentary:
        console.print(Panel(day.ai_commentary, title="Coach", border_style="cyan"))


def _render_summary(result: ScheduleResult) -> None:
    s = result.summary
    risk = ", ".join(s.risk_chapters[:8]) + (" ..." if len(s.risk_chapters) > 8 else "")
    console.print(Panel(
        f"Today: {s.today}   Mode: {s.mode.upper()}\n"
        f"Coverage: [bold]{s.total_coverage:.1%}[/]   "
        f"Remaining: {s.remaining_hours_total:.1f}h\n"
        f"At risk: {risk or 'none'}",
        title="Schedule Summary",
        border_style="green" if not s.risk_chapters else "yellow",
    ))


def _write_exports(result: ScheduleResult, json_path: Path | None, ics_path: Path | None) -> None:
    if json_path:
        json_path.write_text(schedule_to_json(result), encoding="utf-8")
        console.print(f"[green]✓[/] JSON written to {json_path}")
    if ics_path:
        ics_path.write_text(schedule_to_ics(result.days), encoding="utf-8", newline="")
        console.print(f"[green]✓[/] Calendar written to {ics_path}")


async def _narrate(result: ScheduleResult, settings: Settings) -> ScheduleResult:
    """Narrate today's plan; any narration failure yields the plan as is."""
    try:
        async with ScheduleNarrator(settings.get_narrator_config()) as narrator:
            return await attach_commentary(result, narrator)
    except (NarrationError, httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Narration unavailable: {e}")
        return result


# =============================================================================
# Planning Commands
# =============================================================================


@app.command()
def plan(
    ctx: typer.Context,
    profile: Annotated[Path, typer.Argument(help="Profile JSON with chapters and exams")],
    mode: Annotated[
        str | None, typer.Option("--mode", "-m", help="base, assisted or power")
    ] = None,
    today: Annotated[
        str | None, typer.Option("--today", help="Plan as if today were this ISO date")
    ] = None,
    seed: Annotated[
        int | None, typer.Option("--seed", help="Seed for practice-paper injection")
    ] = None,
    no_papers: Annotated[
        bool, typer.Option("--no-papers", help="Disable practice papers")
    ] = False,
    json_out: Annotated[
        Path | None, typer.Option("--json", help="Also write the schedule as JSON")
    ] = None,
    ics_out: Annotated[
        Path | None, typer.Option("--ics", help="Also write the schedule as iCalendar")
    ] = None,
    narrate: Annotated[
        bool, typer.Option("--narrate", help="Add AI commentary for today")
    ] = False,
    days: Annotated[
        int, typer.Option("--days", "-d", help="Days to display")
    ] = 3,
) -> None:
    """
    Generate a schedule from a profile and store it.

    Friction, blockers and study history come from the local profile
    database; the run's history suggestions are written back to it.
    """
    settings: Settings = ctx.obj["settings"]
    data = _load_json(profile)
    if not isinstance(data, dict):
        console.print("[red]Profile must be a JSON object[/]")
        raise typer.Exit(1)

    chapters = [Chapter.from_dict(c) for c in data.get("chapters", [])]
    exams = [Exam.from_dict(e) for e in data.get("exams", [])]

    overrides = settings.get_scheduler_defaults()
    profile_config = data.get("config") or {}
    if isinstance(profile_config, dict):
        overrides.update(profile_config)
    if mode:
        overrides["mode"] = mode
    if today:
        overrides["today"] = today
    if seed is not None:
        overrides["seed"] = seed
    if no_papers:
        overrides["practice_papers"] = False

    with _open_store(ctx) as store:
        history = store.get_history()
        profile_history = overrides.get("history")
        if isinstance(profile_history, dict):
            history.update(profile_history)
        overrides["history"] = history
        config = SchedulerConfig.from_dict(overrides)

        blockers = store.get_blockers()
        blockers.extend(TimeBlocker.from_dict(b) for b in data.get("blockers", []))

        try:
            result = generate_schedule(exams, chapters, store.get_friction(), blockers, config)
        except CapacityError as e:
            console.print(f"[red]✗ {e}[/]")
            raise typer.Exit(1)

        if narrate:
            if not settings.has_ai_configured():
                console.print("[yellow]⚠ NARRATOR_API_KEY not set; skipping commentary[/]")
            else:
                with console.status("[cyan]Asking the coach..."):
                    result = asyncio.run(_narrate(result, settings))

        store.save_schedule(result)
        written = store.merge_history(result.summary.history_suggestions)
        logger.info(f"Stored schedule ({len(result.days)} days), {written} history entries")

    if not result.days:
        console.print("[yellow]No chapters to schedule.[/]")
    for day in result.days[: max(days, 0)]:
        _render_day(day)
    _render_summary(result)
    _write_exports(result, json_out, ics_out)


@app.command()
def show(
    ctx: typer.Context,
    date: Annotated[
        str | None, typer.Option("--date", help="ISO date (defaults to today)")
    ] = None,
) -> None:
    """Show one day of the stored schedule."""
    with _open_store(ctx) as store:
        result = store.get_schedule()
        generated_at = store.get_generated_at()

    if result is None:
        console.print("[yellow]No schedule stored. Run 'mindvault plan' first.[/]")
        raise typer.Exit(1)

    target = date or from_epoch_day(today_epoch_day())
    day = result.get_day(target)
    if day is None:
        console.print(f"[yellow]{target} is outside the stored schedule[/]")
        raise typer.Exit(1)

    console.print(f"[dim]Generated {generated_at}[/]")
    _render_day(day)


@app.command()
def complete(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="ISO date of the slot")],
    index: Annotated[int, typer.Argument(help="Slot index as shown by 'show'")],
    undo: Annotated[
        bool, typer.Option("--undo", help="Mark the slot as not completed")
    ] = False,
) -> None:
    """Mark a stored slot as completed."""
    with _open_store(ctx) as store:
        ok = store.mark_slot_completed(date, index, completed=not undo)

    if not ok:
        console.print(f"[red]No slot {index} on {date}[/]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/] Slot {index} on {date} {'reopened' if undo else 'completed'}")


@app.command()
def export(
    ctx: typer.Context,
    json_out: Annotated[
        Path | None, typer.Option("--json", help="JSON output path")
    ] = None,
    ics_out: Annotated[
        Path | None, typer.Option("--ics", help="iCalendar output path")
    ] = None,
) -> None:
    """Export the stored schedule."""
    if not json_out and not ics_out:
        console.print("[yellow]Nothing to do: pass --json and/or --ics[/]")
        raise typer.Exit(1)

    with _open_store(ctx) as store:
        result = store.get_schedule()
    if result is None:
        console.print("[yellow]No schedule stored. Run 'mindvault plan' first.[/]")
        raise typer.Exit(1)

    _write_exports(result, json_out, ics_out)


# =============================================================================
# Friction Commands
# =============================================================================


def _render_friction(friction: UserFriction) -> None:
    table = Table(title="Friction Profile", show_header=True)
    table.add_column("Signal")
    table.add_column("Value", justify="right")
    table.add_row("Average overrun", f"{friction.avg_overrun:.2f}")
    table.add_row("Quiz error rate", f"{friction.quiz_error_rate:.2f}")
    table.add_row("Revision frequency", f"{friction.revision_frequency:.2f}")
    console.print(table)


@friction_app.command("show")
def friction_show(ctx: typer.Context) -> None:
    """Show the stored friction profile."""
    with _open_store(ctx) as store:
        _render_friction(store.get_friction())


@friction_app.command("update")
def friction_update(
    ctx: typer.Context,
    outcomes_file: Annotated[Path, typer.Argument(help="JSON list of task outcomes")],
) -> None:
    """Fold task outcomes into the friction profile."""
    raw = _load_json(outcomes_file)
    if not isinstance(raw, list):
        console.print("[red]Outcomes file must be a JSON list[/]")
        raise typer.Exit(1)
    outcomes = [TaskOutcome.from_dict(o) for o in raw if isinstance(o, dict)]

    with _open_store(ctx) as store:
        updated = update_friction(store.get_friction(), outcomes)
        store.save_friction(updated)

    console.print(f"[green]✓[/] Applied {len(outcomes)} outcome(s)")
    _render_friction(updated)


# =============================================================================
# Blocker Commands
# =============================================================================


@blocker_app.command("add")
def blocker_add(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="ISO date")],
    start: Annotated[str, typer.Argument(help="Start time HH:MM")],
    end: Annotated[str, typer.Argument(help="End time HH:MM")],
    reason: Annotated[str, typer.Option("--reason", "-r", help="Why you're busy")] = "",
) -> None:
    """Block out time on one day."""
    with _open_store(ctx) as store:
        store.add_blocker(TimeBlocker(date=date, start=start, end=end, reason=reason))
    console.print(f"[green]✓[/] Blocked {date} {start}-{end}")


@blocker_app.command("remove")
def blocker_remove(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="ISO date")],
    start: Annotated[str, typer.Argument(help="Start time HH:MM")],
) -> None:
    """Remove blockers starting at a given time."""
    with _open_store(ctx) as store:
        removed = store.remove_blocker(date, start)
    if not removed:
        console.print(f"[yellow]No blocker at {date} {start}[/]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/] Removed {removed} blocker(s)")


@blocker_app.command("list")
def blocker_list(ctx: typer.Context) -> None:
    """List all blockers."""
    with _open_store(ctx) as store:
        blockers = store.get_blockers()

    if not blockers:
        console.print("[dim]No blockers[/]")
        return

    table = Table(title="Blockers", show_header=True)
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Reason")
    for b in blockers:
        table.add_row(b.date, f"{b.start}-{b.end}", b.reason)
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Override the profile directory")
    ] = None,
) -> None:
    """
    📚 MindVault Planner - adaptive study scheduling

    \b
    Quick Start:
      mindvault plan profile.json         # Build a schedule
      mindvault show                      # Today's slots
      mindvault export --ics plan.ics     # Calendar export
    """
    ctx.obj = {"settings": get_settings(), "data_dir": data_dir}


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{level: <8}</level> | <level>{message}</level>",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB")


def run() -> None:
    """Entry point for the CLI."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    run()
