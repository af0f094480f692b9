"""
Main CLI application using Typer.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from itertools import groupby
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.blob_store import JsonFileBlobStore
from ..adapters.pendulum_timezone import PendulumTimezoneAuthority
from ..config import AppConfig, load_app_config
from ..domain.exceptions import GenerationError, InvalidConfigError, StorageError
from ..domain.models import Slot, SlotConfig, SlotFilterOptions, ValidationError
from ..domain.timezone import format_offset
from ..services.slot_planner import SlotPlannerService
from ..services.slot_repository import SlotRepository

app = typer.Typer(
    name="slotplanner",
    help="Generate and browse bookable appointment slots across timezones",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)


class SlotStatus(str, Enum):
    ALL = "all"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./slotplanner.yaml"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def build_service(config: AppConfig, authority: PendulumTimezoneAuthority) -> SlotPlannerService:
    """Wire the file-backed store and the pendulum authority into a service."""
    repository = SlotRepository(
        store=JsonFileBlobStore(config.storage.path),
        namespace=config.storage.namespace,
    )
    return SlotPlannerService(repository=repository, authority=authority)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _bootstrap(
    config_file: Optional[Path],
    verbose: bool,
) -> Tuple[AppConfig, PendulumTimezoneAuthority, SlotPlannerService]:
    try:
        config = load_app_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging("DEBUG" if verbose else config.log_level)

    authority = PendulumTimezoneAuthority()
    return config, authority, build_service(config, authority)


def _run(coro):
    try:
        return asyncio.run(coro)
    except StorageError as e:
        console.print(f"[bold red]Storage error:[/bold red] {e}")
        raise typer.Exit(1)


def _resolve_timezone(
    option: Optional[str],
    config: AppConfig,
    saved: Optional[SlotConfig],
    authority: PendulumTimezoneAuthority,
) -> str:
    """Explicit option, then config file, then saved config, then the machine's zone."""
    zone = option or config.timezone or (saved.time_zone if saved else None) or authority.local_timezone()
    if not authority.zone_exists(zone):
        console.print(f"[bold red]Error:[/bold red] Unknown timezone: {zone}")
        raise typer.Exit(1)
    return zone


def _resolve_slot_config(
    service: SlotPlannerService,
    config: AppConfig,
    authority: PendulumTimezoneAuthority,
    overrides: Dict[str, Any],
) -> SlotConfig:
    """
    Start from the saved configuration (or the configured defaults) and apply
    the options given on the command line.
    """
    saved = _run(service.load_config())
    if saved is None:
        zone = overrides.get("time_zone") or config.timezone or authority.local_timezone()
        if authority.zone_exists(zone):
            today = authority.to_local(authority.now(), zone).date()
        else:
            today = authority.now().date()
        saved = config.defaults.to_slot_config(time_zone=zone, today=today)

    updates = {name: value for name, value in overrides.items() if value is not None}
    return saved.model_copy(update=updates)


def _parse_reference(now: Optional[str], zone: str):
    if not now:
        return None
    try:
        parsed = pendulum.parse(now, tz=zone)
    except ValueError as e:
        console.print(f"[bold red]Error parsing --now:[/bold red] {e}")
        raise typer.Exit(1)

    if not isinstance(parsed, datetime):
        console.print(f"[bold red]Error parsing --now:[/bold red] {now!r} is not a date and time")
        raise typer.Exit(1)
    return parsed


def _print_validation_errors(errors: List[ValidationError]) -> None:
    table = Table(title="Invalid configuration", show_header=True, header_style="bold red")
    table.add_column("Field", style="bold yellow")
    table.add_column("Problem")

    for error in errors:
        table.add_row(error.field, error.message)

    console.print()
    console.print(table)
    console.print()


def _print_config(slot_config: SlotConfig) -> None:
    console.print(f"   Date range: {slot_config.start_date} - {slot_config.end_date}")
    console.print(f"   Hours: {slot_config.start_time} - {slot_config.end_time}")
    console.print(f"   Timezone: {slot_config.time_zone}")
    console.print(
        f"   Slot / break / buffer: {slot_config.slot_duration} / "
        f"{slot_config.break_duration} / {slot_config.buffer_duration} min"
    )


@app.command()
def generate(
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    start_time: Annotated[Optional[str], typer.Option("--start-time", help="Daily start (HH:mm)")] = None,
    end_time: Annotated[Optional[str], typer.Option("--end-time", help="Daily end (HH:mm)")] = None,
    tz: Annotated[Optional[str], typer.Option("--tz", help="IANA timezone, e.g. America/New_York")] = None,
    slot: Annotated[Optional[int], typer.Option("--slot", help="Slot duration in minutes")] = None,
    break_: Annotated[Optional[int], typer.Option("--break", help="Break between slots in minutes")] = None,
    buffer: Annotated[Optional[int], typer.Option("--buffer", help="Minimum notice in minutes")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Generate slots and save them together with the configuration.

    Options not given fall back to the last saved configuration, then to the
    defaults of the config file.

    Examples:

        slotplanner generate --start 2025-04-25 --end 2025-04-30 --tz America/New_York

        slotplanner generate --slot 45 --break 0
    """
    config, authority, service = _bootstrap(config_file, verbose)

    slot_config = _resolve_slot_config(
        service,
        config,
        authority,
        {
            "start_date": start,
            "end_date": end,
            "start_time": start_time,
            "end_time": end_time,
            "time_zone": tz,
            "slot_duration": slot,
            "break_duration": break_,
            "buffer_duration": buffer,
        },
    )

    try:
        result = _run(service.generate_and_save(slot_config))
    except InvalidConfigError as e:
        _print_validation_errors(e.errors)
        raise typer.Exit(1)
    except GenerationError as e:
        console.print(f"[bold red]Generation failed:[/bold red] {e}")
        raise typer.Exit(1)

    estimate = result.estimate
    console.print(Panel.fit(
        f"[bold green]✓ Generated {len(result.slots)} slots across {estimate.total_days} days[/bold green]\n\n"
        f"[bold]Date range:[/bold] {slot_config.start_date} to {slot_config.end_date}\n"
        f"[bold]Time range:[/bold] {slot_config.start_time} - {slot_config.end_time}\n"
        f"[bold]Slot duration:[/bold] {slot_config.slot_duration} minutes\n"
        f"[bold]Timezone:[/bold] {slot_config.time_zone}\n\n"
        f"Run [bold]slotplanner show[/bold] to see your slots.",
        title="Slots generated"
    ))


@app.command()
def validate(
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    start_time: Annotated[Optional[str], typer.Option("--start-time", help="Daily start (HH:mm)")] = None,
    end_time: Annotated[Optional[str], typer.Option("--end-time", help="Daily end (HH:mm)")] = None,
    tz: Annotated[Optional[str], typer.Option("--tz", help="IANA timezone")] = None,
    slot: Annotated[Optional[int], typer.Option("--slot", help="Slot duration in minutes")] = None,
    break_: Annotated[Optional[int], typer.Option("--break", help="Break between slots in minutes")] = None,
    buffer: Annotated[Optional[int], typer.Option("--buffer", help="Minimum notice in minutes")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Check a configuration without generating anything.
    """
    config, authority, service = _bootstrap(config_file, verbose)

    slot_config = _resolve_slot_config(
        service,
        config,
        authority,
        {
            "start_date": start,
            "end_date": end,
            "start_time": start_time,
            "end_time": end_time,
            "time_zone": tz,
            "slot_duration": slot,
            "break_duration": break_,
            "buffer_duration": buffer,
        },
    )

    errors = service.validate(slot_config)
    if errors:
        _print_validation_errors(errors)
        raise typer.Exit(1)

    console.print("[green]✓ Configuration is valid[/green]")
    _print_config(slot_config)


@app.command()
def show(
    tz: Annotated[Optional[str], typer.Option("--tz", help="Timezone to display slots in")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Manual reference time, e.g. '2025-04-25 09:30'")] = None,
    buffer: Annotated[Optional[int], typer.Option("--buffer", help="Minimum notice in minutes")] = None,
    from_date: Annotated[Optional[str], typer.Option("--from", help="First date (YYYY-MM-DD)")] = None,
    to_date: Annotated[Optional[str], typer.Option("--to", help="Last date (YYYY-MM-DD)")] = None,
    after: Annotated[Optional[str], typer.Option("--after", help="Earliest start time (HH:mm)")] = None,
    before: Annotated[Optional[str], typer.Option("--before", help="Start times before (HH:mm)")] = None,
    status: Annotated[SlotStatus, typer.Option("--status", help="Which slots to list")] = SlotStatus.ALL,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Maximum number of slots")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List saved slots with their current availability, grouped by day.

    Examples:

        slotplanner show --tz Europe/Berlin --status available

        slotplanner show --now "2025-04-25 09:30" --from 2025-04-25 --to 2025-04-25
    """
    config, authority, service = _bootstrap(config_file, verbose)

    saved = _run(service.load_config())
    zone = _resolve_timezone(tz, config, saved, authority)
    reference = _parse_reference(now, zone) or authority.now()
    buffer_duration = buffer if buffer is not None else (
        saved.buffer_duration if saved else config.defaults.buffer_duration
    )

    options = SlotFilterOptions(
        reference_instant=reference,
        timezone=zone,
        buffer_duration=buffer_duration,
        start_date=from_date,
        end_date=to_date,
        start_time=after,
        end_time=before,
        available_only=status is SlotStatus.AVAILABLE,
        limit=None if status is SlotStatus.UNAVAILABLE else limit,
    )
    slots = _run(service.filter_saved(options))

    if status is SlotStatus.UNAVAILABLE:
        slots = [slot for slot in slots if not slot.is_available]
        if limit is not None and limit > 0:
            slots = slots[:limit]

    local_now = authority.to_local(reference, zone)
    console.print(
        f"\n[bold cyan]Slots in {zone}[/bold cyan] "
        f"({format_offset(authority.utc_offset(zone, reference))}), "
        f"now {local_now.strftime('%Y-%m-%d %H:%M')}, {buffer_duration} min notice\n"
    )

    if not slots:
        console.print(
            "[yellow]⚠ No slots to show.[/yellow]\n"
            "Generate slots with [bold]slotplanner generate[/bold] or relax the filters."
        )
        return

    _print_slots(slots)


def _print_slots(slots: List[Slot]) -> None:
    for day, day_slots in groupby(slots, key=lambda slot: slot.start.date()):
        table = Table(title=day.strftime("%A, %B %d, %Y"), show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Time")
        table.add_column("Duration", justify="right")
        table.add_column("Status")

        for slot in day_slots:
            table.add_row(
                slot.id,
                f"{slot.start.strftime('%H:%M')} – {slot.end.strftime('%H:%M')}",
                f"{slot.duration_minutes()} min",
                "[green]Available[/green]" if slot.is_available else "[red]Unavailable[/red]",
            )

        console.print(table)
        console.print()


@app.command()
def stats(
    tz: Annotated[Optional[str], typer.Option("--tz", help="Timezone to group days in")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Manual reference time")] = None,
    buffer: Annotated[Optional[int], typer.Option("--buffer", help="Minimum notice in minutes")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show availability statistics for the saved slots.
    """
    config, authority, service = _bootstrap(config_file, verbose)

    saved = _run(service.load_config())
    zone = _resolve_timezone(tz, config, saved, authority)
    buffer_duration = buffer if buffer is not None else (
        saved.buffer_duration if saved else config.defaults.buffer_duration
    )

    summary = _run(service.statistics(SlotFilterOptions(
        reference_instant=_parse_reference(now, zone),
        timezone=zone,
        buffer_duration=buffer_duration,
    )))

    table = Table(title=f"Slot statistics ({zone})", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total slots", str(summary.total))
    table.add_row("Available", str(summary.available))
    table.add_row("Unavailable", str(summary.unavailable))
    table.add_row("Availability rate", f"{summary.availability_rate_percent}%")
    table.add_row("Days with slots", str(summary.days_with_slots))
    table.add_row("Average slots per day", str(summary.average_slots_per_day))
    table.add_row("Date range", f"{summary.date_range.start or '-'} - {summary.date_range.end or '-'}")

    console.print()
    console.print(table)
    console.print()


@app.command()
def timezones(
    search: Annotated[str, typer.Argument(help="Filter by name or offset, e.g. 'berlin' or '+05:30'")] = "",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum rows to print")] = 50,
):
    """
    List IANA timezones with their current UTC offset.
    """
    authority = PendulumTimezoneAuthority()
    options = authority.zone_options(search)
    local_zone = authority.local_timezone()

    table = Table(title="Timezones", show_header=True, header_style="bold cyan")
    table.add_column("Identifier", style="bold yellow")
    table.add_column("Label")

    for zone, label in options[:limit]:
        if zone == local_zone:
            label = f"{label} (your timezone)"
        table.add_row(zone, label)

    console.print(table)
    if len(options) > limit:
        console.print(f"[dim]{len(options) - limit} more, narrow the search or raise --limit[/dim]")


@app.command()
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Delete the saved configuration and all generated slots.
    """
    _, _, service = _bootstrap(config_file, verbose)

    if not yes and not typer.confirm("Delete all saved slots and configuration?"):
        console.print("Aborted.")
        raise typer.Exit(0)

    removed = _run(service.clear())
    console.print(f"\n[green]✓ Cleared {removed} stored item(s).[/green]\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotplanner[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
