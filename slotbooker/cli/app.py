"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.booking_store import InMemoryBookingStore
from ..adapters.mock_webhook_client import MockWebhookClient
from ..adapters.settings_store import YamlSettingsRepository
from ..adapters.webhook_client import WebhookClient
from ..config import AppConfig, load_config, validate_webhook_url
from ..domain.exceptions import BookingError
from ..domain.models import Booking, BookingOutcome, Slot
from ..domain.slot_generator import validate_granularity
from ..services.booking_service import BookingService, resolve_webhook_url

app = typer.Typer(
    name="slotbooker",
    help="Book appointment slots and forward them to an automation webhook",
    add_completion=False
)

webhook_app = typer.Typer(
    help="Webhook-Einstellungen verwalten (Admin)",
    add_completion=False
)
app.add_typer(webhook_app, name="webhook")

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug-Logging aktivieren.")] = False,
):
    """
    slotbooker - Termin wählen, Uhrzeit wählen, Namen eingeben.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _parse_date(value: str, tz: str) -> pendulum.Date:
    """Parse a YYYY-MM-DD string, exiting with an error message on failure."""
    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Fehler beim Parsen des Datums '{value}': {e}[/red]")
        raise typer.Exit(1)


def _build_service(
    config: AppConfig,
    *,
    mock: bool,
    store: InMemoryBookingStore,
    granularity: Optional[int] = None
) -> BookingService:
    """Wire the booking service with the real or the mock webhook client."""
    if mock:
        notifier = MockWebhookClient()
    else:
        settings = YamlSettingsRepository(config.settings_file)
        notifier = WebhookClient(
            url=resolve_webhook_url(settings, config.webhook.url),
            timeout_seconds=config.webhook.timeout_seconds
        )

    return BookingService(
        time_windows=config.slots.to_time_windows(),
        booking_store=store,
        notifier=notifier,
        granularity_minutes=granularity or config.slots.granularity_minutes,
        timezone=config.timezone,
    )


def _prompt_date(service: BookingService, tz: str) -> pendulum.Date:
    """Step 1: ask for a date that is not in the past."""
    today = service.today()
    while True:
        date_str = typer.prompt(
            "→ Datum (YYYY-MM-DD)",
            default=today.isoformat()
        ).strip()

        try:
            day = pendulum.from_format(date_str, "YYYY-MM-DD", tz=tz).date()
        except ValueError:
            console.print(f"[yellow]Ungültiges Datum '{date_str}', bitte erneut eingeben.[/yellow]")
            continue

        if day < today:
            console.print("[yellow]Das Datum liegt in der Vergangenheit, bitte ein anderes wählen.[/yellow]")
            continue

        return day


def _prompt_time(available: List[Slot]) -> Slot:
    """Step 2: pick a slot by number or by HH:MM."""
    for idx, slot in enumerate(available, 1):
        console.print(f"  {idx:>2}. {slot}")

    while True:
        choice = typer.prompt("\n→ Uhrzeit (Nummer oder HH:MM)", default="1").strip()

        if choice.isdigit():
            idx = int(choice) - 1  # Convert to 0-based index
            if 0 <= idx < len(available):
                return available[idx]
            console.print(f"[yellow]Nummer {choice} ungültig, bitte erneut wählen.[/yellow]")
            continue

        try:
            slot = Slot.parse(choice)
        except ValueError:
            console.print(f"[yellow]Ungültige Uhrzeit '{choice}', bitte erneut wählen.[/yellow]")
            continue

        if slot in available:
            return slot
        console.print(f"[yellow]{slot} ist nicht verfügbar, bitte eine andere Uhrzeit wählen.[/yellow]")


def _run_booking_wizard(
    service: BookingService,
    tz: str,
    preset_day: Optional[str] = None,
    preset_time: Optional[str] = None,
    preset_name: Optional[str] = None
) -> Optional[dict]:
    """
    Run the interactive three-step wizard.

    Values given on the command line fill their step instead of a prompt,
    as long as they are still valid.

    Returns:
        Dictionary with keys: day, time, name. None if the chosen day is fully booked.
    """
    # 1. DATUM
    console.print("[bold]1️⃣  Datum wählen[/bold]")
    day = None
    if preset_day:
        day = _parse_date(preset_day, tz)
        if day < service.today():
            console.print("[yellow]Das Datum liegt in der Vergangenheit, bitte ein anderes wählen.[/yellow]")
            day = None
        else:
            console.print(f"→ Datum: {day.isoformat()} (vorgegeben)")
    if day is None:
        day = _prompt_date(service, tz)

    # 2. UHRZEIT
    console.print(f"\n[bold]2️⃣  Uhrzeit wählen[/bold] ({day.format('DD.MM.YYYY')})")
    available = service.available_slots(day)
    if not available:
        console.print("[yellow]⚠ An diesem Tag sind keine Termine mehr frei.[/yellow]")
        return None

    slot = None
    if preset_time:
        try:
            slot = Slot.parse(preset_time)
        except ValueError:
            console.print(f"[yellow]Ungültige Uhrzeit '{preset_time}', bitte erneut wählen.[/yellow]")
        else:
            if slot in available:
                console.print(f"→ Uhrzeit: {slot} (vorgegeben)")
            else:
                console.print(f"[yellow]{slot} ist nicht verfügbar, bitte eine andere Uhrzeit wählen.[/yellow]")
                slot = None
    if slot is None:
        slot = _prompt_time(available)

    # 3. NAME
    console.print("\n[bold]3️⃣  Namen eingeben[/bold]")
    name = (preset_name or "").strip()
    if name:
        console.print(f"→ Ihr Name: {name} (vorgegeben)")
    while not name:
        name = typer.prompt("→ Ihr Name").strip()

    console.print("\n" + "="*60 + "\n")

    return {"day": day, "time": slot, "name": name}


def _print_outcome(outcome: BookingOutcome) -> None:
    if outcome.confirmed:
        console.print(
            f"[bold green]✓ Termin gebucht:[/bold green] {outcome.booking.format_display()}\n"
            "Sie erhalten in Kürze eine Bestätigung."
        )
        return

    console.print(
        "[bold red]✗ Buchung fehlgeschlagen.[/bold red] "
        "Der Termin konnte nicht übermittelt werden, bitte versuchen Sie es erneut."
    )
    detail = outcome.delivery.error or f"Status {outcome.delivery.status_code}"
    console.print(f"[dim]{detail}[/dim]")


def _print_session_bookings(bookings: List[Booking]) -> None:
    table = Table(
        title="Gebuchte Termine (diese Sitzung)",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Datum", style="bold yellow")
    table.add_column("Uhrzeit")
    table.add_column("Name", style="dim")

    for booking in bookings:
        table.add_row(booking.date.isoformat(), str(booking.time), booking.name)

    console.print()
    console.print(table)
    console.print()


@app.command()
def slots(
    day: Annotated[Optional[str], typer.Argument(help="Datum (YYYY-MM-DD), Standard: heute")] = None,
    config_file: ConfigOption = None,
    granularity: Annotated[Optional[int], typer.Option("--granularity", "-g", help="Slot spacing in minutes")] = None,
):
    """
    Show the bookable slots of a day.
    """
    try:
        config = load_config(config_file)
        tz = config.timezone

        if granularity is not None:
            validate_granularity(granularity)

        # Listing never notifies, so no webhook URL is required here
        service = _build_service(config, mock=True, store=InMemoryBookingStore(), granularity=granularity)
        selected_day = _parse_date(day, tz) if day else service.today()
        available = service.available_slots(selected_day)

        if not available:
            console.print("[yellow]⚠ Keine Zeitslots konfiguriert.[/yellow]")
            return

        morning, _ = config.slots.to_time_windows().windows()

        table = Table(
            title=f"Verfügbare Zeitslots am {selected_day.format('DD.MM.YYYY')}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("#", style="dim")
        table.add_column("Uhrzeit", style="bold yellow")
        table.add_column("Zeitfenster")

        for idx, slot in enumerate(available, 1):
            window = "Vormittag" if slot.minutes < morning.end_minutes else "Nachmittag"
            table.add_row(str(idx), str(slot), window)

        console.print()
        console.print(table)
        if selected_day < service.today():
            console.print("[yellow]Das Datum liegt in der Vergangenheit, Buchungen sind nicht möglich.[/yellow]")
        console.print()

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def book(
    day: Annotated[Optional[str], typer.Option("--date", help="Datum (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", help="Uhrzeit (HH:MM)")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Name für die Buchung")] = None,
    config_file: ConfigOption = None,
    mock: Annotated[bool, typer.Option("--mock", help="Webhook nicht aufrufen, nur simulieren.")] = False,
):
    """
    Book an appointment - Supports Interactive and Batch mode.

    Examples:

        # Interactive mode (date, time, name)
        slotbooker book

        # Batch mode
        slotbooker book --date 2024-11-25 --time 14:00 --name "Maria Silva"

        # Try the flow without calling the webhook
        slotbooker book --mock
    """
    try:
        config = load_config(config_file)
        tz = config.timezone
        store = InMemoryBookingStore()
        service = _build_service(config, mock=mock, store=store)

        if mock:
            console.print("[yellow]⚠  MOCK-MODUS: Webhook wird nicht aufgerufen[/yellow]\n")

        if day and time and name:
            outcome = service.book(day=_parse_date(day, tz), time=time, name=name)
            _print_outcome(outcome)
            if not outcome.confirmed:
                raise typer.Exit(1)
            return

        console.print("\n" + "="*60)
        console.print("[bold cyan]🗓️  Termin vereinbaren[/bold cyan]")
        console.print("="*60 + "\n")

        # Partial --date/--time/--name values prefill the first round only
        presets = {"preset_day": day, "preset_time": time, "preset_name": name}
        while True:
            wizard_result = _run_booking_wizard(service, tz, **presets)
            presets = {}
            if wizard_result is not None:
                outcome = service.book(
                    day=wizard_result["day"],
                    time=wizard_result["time"],
                    name=wizard_result["name"]
                )
                _print_outcome(outcome)

            if not typer.confirm("\nWeiteren Termin buchen?", default=False):
                break
            console.print()

        if len(store):
            _print_session_bookings(store.all())

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@webhook_app.command("show")
def webhook_show(config_file: ConfigOption = None):
    """
    Show the webhook URL in use.
    """
    try:
        config = load_config(config_file)
        settings = YamlSettingsRepository(config.settings_file)

        stored = settings.get_webhook_url()
        if stored:
            console.print(f"\n[bold]Webhook:[/bold] {stored} [dim](gespeichert in {config.settings_file})[/dim]\n")
        elif config.webhook.url:
            console.print(f"\n[bold]Webhook:[/bold] {config.webhook.url} [dim](aus der Konfiguration)[/dim]\n")
        else:
            console.print("\n[yellow]Kein Webhook konfiguriert.[/yellow]\n")

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@webhook_app.command("set")
def webhook_set(
    url: Annotated[str, typer.Argument(help="Zapier-Webhook-URL (Catch Hook)")],
    config_file: ConfigOption = None,
):
    """
    Save the webhook URL for future bookings.
    """
    try:
        config = load_config(config_file)
        clean_url = validate_webhook_url(url, zapier_only=config.webhook.zapier_only)

        YamlSettingsRepository(config.settings_file).set_webhook_url(clean_url)
        console.print("\n[green]✓ Webhook konfiguriert, URL gespeichert.[/green]\n")

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@webhook_app.command("clear")
def webhook_clear(config_file: ConfigOption = None):
    """
    Forget the saved webhook URL.
    """
    try:
        config = load_config(config_file)
        YamlSettingsRepository(config.settings_file).clear()
        console.print("\n[green]✓ Gespeicherte Webhook-URL gelöscht.[/green]\n")

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@webhook_app.command("test")
def webhook_test(config_file: ConfigOption = None):
    """
    Send a test payload to the webhook.
    """
    try:
        config = load_config(config_file)
        service = _build_service(config, mock=False, store=InMemoryBookingStore())

        console.print("\n[bold]Sende Test-Webhook...[/bold]\n")
        result = service.send_test_notification()

    except (FileNotFoundError, ValueError, BookingError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    if not result.delivered:
        console.print(f"[bold red]✗ Test fehlgeschlagen:[/bold red] Webhook nicht erreichbar. {result.error or ''}")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Test gesendet![/bold green]\n\n"
        f"[bold]Status:[/bold] {result.status_code}\n"
        f"Prüfen Sie die 'Task History' in Zapier.",
        title="✓ Verbindungstest"
    ))
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
