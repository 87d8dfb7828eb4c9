"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.firestore_store import FirestoreBookingStore, create_firestore_client
from ..adapters.memory_store import DEFAULT_SEED_FILE, InMemoryBookingStore
from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityEngine
from ..domain.clock import SystemClock
from ..domain.exceptions import BookingFetchError, ReservationError, SlotUnavailableError
from ..domain.pricing import PriceEstimator
from ..services.forms import ReservationRequest
from ..services.reservation_service import ReservationService

app = typer.Typer(
    name="supervitre",
    help="Check appointment availability and manage window cleaning reservations",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use the in-memory store with sample reservations instead of Firestore."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    SuperVitre reservation scheduling.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """
    Load the configuration, falling back to defaults when no file exists.

    An explicitly requested file must exist.
    """
    config_path = config_file or get_default_config_path()
    if config_file is None and not config_path.exists():
        logger.debug("No config file at %s; using defaults", config_path)
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig, mock: bool) -> ReservationService:
    if mock:
        store = InMemoryBookingStore(
            seed_file=DEFAULT_SEED_FILE,
            service_duration_hours=config.service_duration_hours,
        )
    else:
        client = create_firestore_client(
            credentials_path=config.firestore.credentials_path,
            project_id=config.firestore.project_id,
        )
        store = FirestoreBookingStore(
            client,
            collection=config.firestore.collection,
            locks_collection=config.firestore.locks_collection,
        )

    engine = AvailabilityEngine(
        business_hours=config.get_business_hours(),
        service_duration_hours=config.service_duration_hours,
        timezone=config.timezone,
    )

    return ReservationService(
        store=store,
        engine=engine,
        clock=SystemClock(config.timezone),
        pricing=PriceEstimator(config.pricing.get_rates()),
        view_days=config.calendar_days,
    )


def _parse_date(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Invalid date '{value}' (expected YYYY-MM-DD): {e}[/red]")
        raise typer.Exit(1)


@app.command()
def calendar(
    start: Annotated[Optional[str], typer.Option("--start", help="Any date in the first week (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the reservation calendar with the number of free slots per day.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)
        anchor = _parse_date(start, config.timezone) if start else pendulum.today(config.timezone).date()

        if mock:
            console.print("[yellow]⚠  MOCK MODE: using sample reservations[/yellow]\n")

        days = service.calendar_view(anchor)

        table = Table(title="Reservation calendar", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold")
        table.add_column("Status")
        table.add_column("Free slots")

        for day in days:
            if not day.slots:
                status = "[dim]closed[/dim]"
            elif day.is_past:
                status = "[dim]past[/dim]"
            elif day.selectable:
                status = "[green]open[/green]"
            else:
                status = "[red]full[/red]"
            label = day.date.format("ddd YYYY-MM-DD")
            if day.is_today:
                label = f"{label} (today)"
            table.add_row(label, status, ", ".join(day.available_labels()) or "-")

        console.print(table)

    except BookingFetchError as e:
        console.print(f"[bold red]Could not load existing appointments:[/bold red] {e}")
        console.print("Please try again in a moment.")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, ReservationError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date to check (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List the time slots of a day and whether they can be booked.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)
        day = _parse_date(date, config.timezone)

        availability = service.slots_for_date(day)

        if not availability:
            console.print(f"[yellow]Closed on {day.format('dddd, MMMM D, YYYY')}.[/yellow]")
            return

        table = Table(title=f"Slots on {day.format('dddd, MMMM D, YYYY')}", header_style="bold cyan")
        table.add_column("Time", style="bold")
        table.add_column("Available")
        for slot in availability:
            table.add_row(slot.label, "[green]✓ yes[/green]" if slot.available else "[red]✗ no[/red]")

        console.print(table)

        if not any(slot.available for slot in availability):
            console.print("[yellow]No free slots on this day. Try another date.[/yellow]")

    except BookingFetchError as e:
        console.print(f"[bold red]Could not load existing appointments:[/bold red] {e}")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, ReservationError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def book(
    date: Annotated[str, typer.Argument(help="Appointment date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Start time, e.g. '9:00 AM'")],
    first_name: Annotated[str, typer.Option("--first-name", prompt=True)],
    last_name: Annotated[str, typer.Option("--last-name", prompt=True)],
    email: Annotated[str, typer.Option("--email", prompt=True)],
    phone: Annotated[str, typer.Option("--phone", prompt=True)],
    address: Annotated[str, typer.Option("--address", prompt=True)],
    city: Annotated[str, typer.Option("--city", prompt=True)],
    zip_code: Annotated[str, typer.Option("--zip-code", prompt=True)],
    windows: Annotated[str, typer.Option("--windows", help="Number of windows")] = "10",
    stories: Annotated[str, typer.Option("--stories", help="Number of stories (1, 2, 3 or 4+)")] = "1",
    property_type: Annotated[str, typer.Option("--property-type")] = "residential",
    exterior_only: Annotated[bool, typer.Option("--exterior-only", help="Skip interior cleaning.")] = False,
    instructions: Annotated[str, typer.Option("--instructions", help="Special instructions")] = "",
    contact: Annotated[str, typer.Option("--contact", help="Preferred contact method")] = "email",
    locale: Annotated[Optional[str], typer.Option("--locale")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book an appointment.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)

        request = ReservationRequest(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            address=address,
            city=city,
            zip_code=zip_code,
            selected_date=_parse_date(date, config.timezone),
            selected_time=time,
            windows=windows,
            stories=stories,
            property_type=property_type,
            include_interior=not exterior_only,
            special_instructions=instructions,
            preferred_contact=contact,
            locale=locale or config.locale,
        )

        reservation = service.submit_reservation(request)

        console.print("\n[bold green]✓ Reservation confirmed[/bold green]")
        console.print(f"   Reference: [bold]{reservation.booking_reference}[/bold]")
        console.print(f"   When: {reservation.selected_date} at {reservation.selected_time}")
        if reservation.estimated_price_range:
            console.print(f"   Estimated price: {reservation.estimated_price_range}")
        console.print()

    except SlotUnavailableError as e:
        console.print(f"[bold yellow]{e}[/bold yellow]")
        console.print(f"Run [bold]supervitre slots {date}[/bold] to see what is still free.")
        raise typer.Exit(2)

    except ValidationError as e:
        console.print("[bold red]Invalid reservation:[/bold red]")
        for error in e.errors():
            console.print(f"   {error['msg']}")
        raise typer.Exit(1)

    except BookingFetchError as e:
        console.print(f"[bold red]Could not check availability:[/bold red] {e}")
        console.print("Nothing was booked. Please try again.")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, ReservationError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def cancel(
    reference: Annotated[str, typer.Argument(help="Booking reference, e.g. SV0042137")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Cancel a reservation and free its time slot.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)

        reservation = service.cancel_reservation(reference)
        console.print(
            f"\n[green]✓ Reservation {reservation.booking_reference} "
            f"({reservation.selected_date} {reservation.selected_time}) cancelled.[/green]\n"
        )

    except (FileNotFoundError, ValueError, ReservationError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def estimate(
    windows: Annotated[str, typer.Option("--windows", help="Number of windows")] = "10",
    stories: Annotated[str, typer.Option("--stories", help="Number of stories (1, 2, 3 or 4+)")] = "1",
    exterior_only: Annotated[bool, typer.Option("--exterior-only", help="Skip interior cleaning.")] = False,
    config_file: ConfigOption = None,
):
    """
    Estimate the price range of a cleaning job.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    price = PriceEstimator(config.pricing.get_rates()).estimate(
        windows=windows,
        stories=stories,
        include_interior=not exterior_only,
    )

    if price is None:
        console.print("[yellow]Unable to estimate a price for this input.[/yellow]")
        raise typer.Exit(1)

    console.print(f"Estimated price: [bold]{price}[/bold]")


@app.command()
def hours(config_file: ConfigOption = None):
    """
    Show the configured business hours.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    for line in config.get_business_hours().describe():
        console.print(f"  {line}")
    console.print(f"\n  Appointments block {config.service_duration_hours} hours.\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]supervitre[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
