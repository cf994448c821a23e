"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import List, Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import FreetimeError
from ..domain.models import TimeRange
from ..domain.slot_calculator import SlotCalculator
from ..adapters.google_authenticator import GoogleAuthenticator
from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..services.free_time_finder import FreeTimeService

app = typer.Typer(
    name="freetime",
    help="Find open meeting slots in your Google Calendar",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_calendar_client(config: AppConfig, mock: bool):
    """Create the mock client or an authenticated Google client."""
    if mock:
        return MockCalendarClient(data_file=config.mock_data_file)

    authenticator = GoogleAuthenticator(
        client_secret_file=config.client_secret_file,
        token_cache_file=config.token_cache_file
    )
    credentials = authenticator.get_credentials(force_refresh=False)
    return GoogleCalendarClient(credentials=credentials)


def _render_slots(slots: List[TimeRange], tz) -> Table:
    """Build the result table: one row per free slot."""
    table = Table(
        title="Free time",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Date")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Duration", justify="right", style="dim")

    for slot in slots:
        start = slot.start.in_timezone(tz)
        end = slot.end.in_timezone(tz)
        table.add_row(
            start.format("dddd"),
            start.format("YYYY-MM-DD"),
            start.format("HH:mm"),
            end.format("HH:mm"),
            f"{slot.duration_minutes()} min"
        )

    return table


@app.command()
def find(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-n", min=1, help="Number of workdays to look ahead")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", min=1, help="Minimum slot duration in minutes")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock calendar data and skip authentication.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log blocking calendars and events.")] = False,
):
    """
    Find open meeting slots over the next workdays.

    Examples:

        # Next three workdays, slots of at least 30 minutes
        freetime find

        # Five days ahead, one-hour slots
        freetime find --days 5 --duration 60

        # Use mock data (for testing without Google credentials)
        freetime find --mock
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)

        lookahead_days = days if days is not None else config.lookahead_days
        min_duration = duration if duration is not None else config.defaults.duration_minutes
        working_hours = config.working_hours()
        tz = working_hours.tzinfo()

        if mock:
            console.print("[yellow]⚠  MOCK MODE: using test data[/yellow]\n")

        client = _build_calendar_client(config, mock)
        service = FreeTimeService(
            calendar_client=client,
            slot_calculator=SlotCalculator(working_hours=working_hours)
        )

        slots = service.find_slots(
            now=pendulum.now(tz),
            busy_calendars=config.busy_calendars,
            lookahead_days=lookahead_days,
            min_duration_minutes=min_duration
        )

    except (FileNotFoundError, ValueError, FreetimeError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    if not slots:
        console.print(
            "[yellow]⚠ No free slots found.[/yellow]\n"
            "Try more lookahead days or a shorter minimum duration."
        )
    else:
        console.print(_render_slots(slots, tz))
    console.print()


@app.command()
def list_calendars(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    ),
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Use mock calendar data"
    )
):
    """
    List calendars and mark those that block free time.
    """
    try:
        config = _load_config(config_file)
        client = _build_calendar_client(config, mock)
        calendars = client.list_calendars()

        table = Table(
            title="Calendars",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name", style="bold yellow")
        table.add_column("ID", style="dim")
        table.add_column("Busy", justify="center")

        busy = set(config.busy_calendars)
        for calendar in calendars:
            table.add_row(
                calendar.summary,
                calendar.id,
                "✓" if calendar.summary in busy else ""
            )

        console.print()
        console.print(table)
        console.print()

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def test_auth(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Force re-authentication"
    )
):
    """
    Test Google Calendar authentication.
    """
    try:
        config = _load_config(config_file)

        console.print("\n[bold]Testing Google Calendar authentication...[/bold]\n")

        authenticator = GoogleAuthenticator(
            client_secret_file=config.client_secret_file,
            token_cache_file=config.token_cache_file
        )
        credentials = authenticator.get_credentials(force_refresh=force)

        # Test connection
        calendars = GoogleCalendarClient(credentials=credentials).list_calendars()

        console.print(
            f"[bold green]✓ Authentication successful![/bold green] "
            f"{len(calendars)} calendar(s) visible.\n"
        )

    except Exception as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)


@app.command()
def clear_cache(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    Clear the authentication token cache.
    """
    try:
        config = _load_config(config_file)

        authenticator = GoogleAuthenticator(
            client_secret_file=config.client_secret_file,
            token_cache_file=config.token_cache_file
        )
        authenticator.clear_cache()

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]freetime[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
