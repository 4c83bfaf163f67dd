"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_store import JsonScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingError
from ..schemas import BookingPayload
from ..services.booking_service import BookingService

app = typer.Typer(
    name="salonslots",
    help="Check availability and manage salon appointments",
    add_completion=False
)

console = Console()

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
NowOption = Annotated[
    Optional[str],
    typer.Option("--now", help="Override the current time (YYYY-MM-DD HH:mm)"),
]


def _load(config_file: Optional[Path]) -> Tuple[AppConfig, JsonScheduleStore, BookingService]:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    store = JsonScheduleStore.load(config.data_file)
    service = BookingService(repository=store, policy=config.policy)
    return config, store, service


def _resolve_now(now_option: Optional[str], tz: str) -> DateTime:
    if not now_option:
        return pendulum.now(tz)
    try:
        return pendulum.from_format(now_option, "YYYY-MM-DD HH:mm", tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse --now: {e}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Salon availability and booking engine.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    professional: Annotated[Optional[str], typer.Option("--professional", "-p", help="Professional id. Omit for salon hours.")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    service_ids: Annotated[Optional[List[str]], typer.Option("--service", "-s", help="Service id (repeatable)")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the slot grid for a day.

    Examples:

        salonslots slots 2024-11-25 -p ana --duration 60

        salonslots slots 2024-11-25 -p ana -s cut -s color
    """
    if duration is None and not service_ids:
        console.print("[red]Give either --duration or at least one --service.[/red]")
        raise typer.Exit(1)

    try:
        config, _, service = _load(config_file)

        if duration is not None:
            grid = asyncio.run(
                service.get_day_slots(
                    professional_id=professional,
                    date=date,
                    service_duration_minutes=duration,
                )
            )
        else:
            grid = asyncio.run(
                service.get_day_slots_for_services(
                    professional_id=professional,
                    date=date,
                    service_ids=service_ids,
                )
            )
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not grid:
        console.print(f"[yellow]No working hours on {date}.[/yellow]")
        return

    console.print(f"\n[bold cyan]{config.salon_name} - {date}[/bold cyan]\n")

    for slot in grid:
        console.print(f"  {slot.format_display()}", style="green" if slot.available else "dim")

    free = sum(1 for slot in grid if slot.available)
    console.print(f"\n{free} of {len(grid)} slot(s) available.\n")


@app.command()
def book(
    name: Annotated[str, typer.Option("--name", help="Client name")],
    phone: Annotated[str, typer.Option("--phone", help="Client phone")],
    date: Annotated[str, typer.Option("--date", help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Option("--time", help="Start time (HH:MM)")],
    service_ids: Annotated[Optional[List[str]], typer.Option("--service", "-s", help="Service id (repeatable)")] = None,
    email: Annotated[Optional[str], typer.Option("--email", help="Client e-mail")] = None,
    professional: Annotated[Optional[str], typer.Option("--professional", "-p", help="Professional id")] = None,
    source: Annotated[str, typer.Option("--source", help="Origin tag")] = "direct",
    notes: Annotated[Optional[str], typer.Option("--notes", help="Client notes")] = None,
    now: NowOption = None,
    config_file: ConfigOption = None,
):
    """
    Book an appointment.
    """
    try:
        config, store, service = _load(config_file)
        payload = BookingPayload(
            client_name=name,
            client_phone=phone,
            client_email=email,
            professional_id=professional,
            date=date,
            time=time,
            services=service_ids or [],
            source=source,
            notes=notes,
        )
        appointment = asyncio.run(
            service.create_booking(payload, now=_resolve_now(now, config.timezone))
        )
        store.save()
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"\n[bold green]✓ Booked {appointment.id}[/bold green]")
    console.print(f"  {appointment.summary()}\n")


@app.command()
def cancel(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    admin: Annotated[bool, typer.Option("--admin", help="Cancel as administrator (no notice required).")] = False,
    now: NowOption = None,
    config_file: ConfigOption = None,
):
    """
    Cancel an appointment.
    """
    try:
        config, store, service = _load(config_file)
        appointment = asyncio.run(
            service.cancel_appointment(
                appointment_id,
                requested_by_admin=admin,
                now=_resolve_now(now, config.timezone),
            )
        )
        store.save()
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"\n[green]✓ Cancelled {appointment.id}[/green]\n")


@app.command()
def status(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    new_status: Annotated[str, typer.Argument(help="pending, confirmed, completed, cancelled or no_show")],
    notes: Annotated[Optional[str], typer.Option("--notes", help="Admin notes")] = None,
    config_file: ConfigOption = None,
):
    """
    Change an appointment's status (administrator).
    """
    try:
        _, store, service = _load(config_file)
        appointment = asyncio.run(service.update_status(appointment_id, new_status, notes))
        store.save()
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"\n[green]✓ {appointment.summary()}[/green]\n")


@app.command()
def professionals(config_file: ConfigOption = None):
    """
    List professionals and their weekly hours.
    """
    try:
        _, store, _ = _load(config_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    listed = store.list_professionals()
    if not listed:
        console.print("[yellow]No professionals in the data file.[/yellow]")
        return

    table = Table(
        title="Professionals",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="bold yellow")
    table.add_column("Name")
    table.add_column("Hours", style="dim")
    table.add_column("Breaks", style="dim")

    for professional in listed:
        hours = ", ".join(
            f"{WEEKDAY_NAMES[p.day_of_week]} {p.start_time}-{p.end_time}"
            for p in professional.working_hours if p.is_active
        )
        breaks = ", ".join(
            f"{WEEKDAY_NAMES[p.day_of_week]} {p.start_time}-{p.end_time}"
            for p in professional.breaks if p.is_active
        )
        name = professional.name if professional.is_active else f"{professional.name} (inactive)"
        table.add_row(professional.id, name, hours or "-", breaks or "-")

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]salonslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
