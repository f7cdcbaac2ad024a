"""Command line front end for Goal Ledger."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import click
from apscheduler.triggers.cron import CronTrigger

from .config import BaseConfig
from .context import AppContext, create_app_context
from .logging_config import setup_logging
from .models.event import EVENT_TYPES, Priority
from .services.dates import MONTH_NAMES, weekday_short
from .services.transfer import default_export_name, export_month, import_month


def _parse_month(value: str) -> tuple[int, int]:
    try:
        year_text, month_text = value.split("-")
        year, month = int(year_text), int(month_text)
    except ValueError as exc:
        raise click.BadParameter("expected YYYY-MM") from exc
    if not 1 <= month <= 12:
        raise click.BadParameter("month must be 01..12")
    return year, month - 1


def _require_activity(ctx: AppContext, name: str):
    activity = ctx.tracker.find_activity(name)
    if activity is None:
        raise click.ClickException(f"No activity named {name!r}")
    return activity


@click.group()
@click.option("--month", "month_opt", default=None, help="Month to open, YYYY-MM (default: current).")
@click.pass_context
def cli(click_ctx: click.Context, month_opt: Optional[str]) -> None:
    """Track daily habits, streaks and day reminders."""

    config = BaseConfig()
    setup_logging(config)
    app_ctx = create_app_context(config)
    click_ctx.call_on_close(app_ctx.close)
    if month_opt:
        year, month = _parse_month(month_opt)
        app_ctx.tracker.open_month(year, month)
    click_ctx.obj = app_ctx


@cli.command("stats")
@click.option("--from", "day_from", default=None, help="First day of the span.")
@click.option("--to", "day_to", default=None, help="Last day of the span.")
@click.pass_obj
def stats(ctx: AppContext, day_from: Optional[str], day_to: Optional[str]) -> None:
    """Show efficiency and streaks for every activity."""

    tracker = ctx.tracker
    if day_from is not None or day_to is not None:
        try:
            tracker.apply_span(day_from or tracker.day_from, day_to or tracker.day_to)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc

    click.echo(
        f"{MONTH_NAMES[tracker.month]} {tracker.year} "
        f"(days {tracker.day_from}-{tracker.day_to})"
    )
    all_stats = tracker.all_global_stats()
    for activity in tracker.activities:
        eff = tracker.efficiency(activity)
        streaks = all_stats[activity.id]
        click.echo(
            f"  {activity.name}: {eff.checked_count}/{eff.total_days} ({eff.percent}%) "
            f"current {streaks.current} best {streaks.max}"
        )
    if not tracker.activities:
        click.echo("  No activities yet.")


@cli.command("add-activity")
@click.argument("name")
@click.pass_obj
def add_activity(ctx: AppContext, name: str) -> None:
    """Add a new activity to the open month."""

    activity = ctx.tracker.add_activity(name)
    if activity is None:
        raise click.ClickException("Activity name cannot be blank")
    click.echo(f"Added {activity.name} ({activity.id})")


@cli.command("remove-activity")
@click.argument("name")
@click.pass_obj
def remove_activity(ctx: AppContext, name: str) -> None:
    """Remove an activity from the open month."""

    activity = _require_activity(ctx, name)
    ctx.tracker.remove_activity(activity.id)
    click.echo(f"Removed {activity.name}")


@cli.command("check")
@click.argument("name")
@click.argument("day", type=int)
@click.pass_obj
def check(ctx: AppContext, name: str, day: int) -> None:
    """Toggle the check of NAME on DAY of the open month."""

    activity = _require_activity(ctx, name)
    try:
        checked = ctx.tracker.toggle_check(activity.id, day)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    state = "checked" if checked else "unchecked"
    click.echo(f"{activity.name} {state} on {ctx.tracker.date_key(day)}")


@cli.command("events")
@click.argument("day", type=int)
@click.pass_obj
def events(ctx: AppContext, day: int) -> None:
    """List the items attached to DAY."""

    tracker = ctx.tracker
    try:
        items = tracker.events_for_day(day)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{weekday_short(tracker.year, tracker.month, day)} {tracker.date_key(day)}")
    scheduled = sorted((e for e in items if e.is_scheduled), key=lambda e: e.from_time or "")
    for item in scheduled:
        mark = "x" if item.is_completed else " "
        until = f"-{item.to_time}" if item.to_time else ""
        click.echo(f"  [{mark}] {item.from_time}{until} {item.title} ({item.priority.value})")
    for item in (e for e in items if not e.is_scheduled):
        click.echo(f"  * {item.title} [{item.type}]")
    progress = tracker.day_progress(day)
    if progress.total:
        click.echo(f"  {progress.completed}/{progress.total} done ({progress.percent}%)")


@cli.command("add-event")
@click.argument("day", type=int)
@click.argument("title")
@click.option("--at", "from_time", default=None, help="Start time HH:MM; omit for an untimed event.")
@click.option("--until", "to_time", default=None, help="End time HH:MM.")
@click.option("--notify", "notify_before", type=int, default=None, help="Minutes before start to remind.")
@click.option(
    "--type", "event_type", type=click.Choice(EVENT_TYPES), default="General", show_default=True
)
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    default=Priority.NORMAL.value,
    show_default=True,
)
@click.pass_obj
def add_event(
    ctx: AppContext,
    day: int,
    title: str,
    from_time: Optional[str],
    to_time: Optional[str],
    notify_before: Optional[int],
    event_type: str,
    priority: str,
) -> None:
    """Attach a scheduled item or untimed event to DAY."""

    payload = {
        "title": title,
        "type": event_type,
        "priority": priority,
        "fromTime": from_time,
        "toTime": to_time if from_time else None,
        "notifyBefore": notify_before if from_time else None,
        "isCompleted": False,
        "reminderScheduled": False,
    }
    try:
        event = ctx.tracker.add_event(day, payload)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added {event.title} ({event.id}) on {ctx.tracker.date_key(day)}")


@cli.command("export")
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.pass_obj
def export(ctx: AppContext, path: Optional[Path]) -> None:
    """Write the open month to a JSON file."""

    tracker = ctx.tracker
    target = path or Path(default_export_name(tracker.year, tracker.month))
    written = export_month(tracker.snapshot(), target)
    click.echo(f"Export written: {written}")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def import_(ctx: AppContext, path: Path) -> None:
    """Replace a month with the contents of an exported JSON file."""

    try:
        snapshot = import_month(path)
        ctx.tracker.import_snapshot(snapshot)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Imported {MONTH_NAMES[snapshot.month]} {snapshot.year}")


@cli.command("remind")
@click.pass_obj
def remind(ctx: AppContext) -> None:
    """Arm today's reminders and keep firing them until interrupted."""

    tracker = ctx.tracker
    reminders = ctx.reminders

    def rearm() -> None:
        tracker.go_to_today()
        tracker.arm_today()

    reminders.start()
    reminders.scheduler.add_job(
        func=rearm,
        trigger=CronTrigger(hour=0, minute=1),
        id="daily_rearm",
        name="Re-arm Today's Reminders",
        replace_existing=True,
    )
    tracker.go_to_today()
    tracker.arm_today()
    click.echo(f"{len(reminders.pending_keys())} reminder(s) armed; press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        click.echo("Stopping reminders.")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
