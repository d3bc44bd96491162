from __future__ import annotations

import logging
import signal
import threading
from datetime import date, timedelta
from typing import Optional

import click

from .airports import AIRPORTS, find_by_city
from .aggregator import gather
from .config import get_settings
from .daily_runner import CycleScheduler, build_automation, build_sources
from .models import TripPriority, UserSearchRequest
from .ranking import rank_trips
from .report import build_message, trips_to_dataframe
from .scraper import SimpleWebScraper
from .storage import JsonTripStore

logger = logging.getLogger(__name__)


def configure_logging(log_file: str, level: int = logging.INFO) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        handlers=handlers,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _parse_date(ctx, param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date format: {value} (expected YYYY-MM-DD)")


def search_options(func):
    """Options shared by every command that needs a search request."""
    options = [
        click.option("--origin", required=True, help="Departure city"),
        click.option("--destination", required=True, help="Arrival city"),
        click.option("--date-from", required=True, callback=_parse_date, help="Earliest departure (YYYY-MM-DD)"),
        click.option("--date-to", required=True, callback=_parse_date, help="Latest departure (YYYY-MM-DD)"),
        click.option(
            "--priority",
            type=click.Choice([p.value for p in TripPriority], case_sensitive=False),
            default=TripPriority.PRICE.value,
            show_default=True,
        ),
        click.option("--currency", default="USD", show_default=True),
        click.option("--max-stops", type=click.IntRange(min=0), default=3, show_default=True),
        click.option("--max-top", type=click.IntRange(min=1), default=10, show_default=True),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_request(
    origin, destination, date_from, date_to, priority, currency, max_stops, max_top
) -> UserSearchRequest:
    try:
        return UserSearchRequest(
            origin_city=origin,
            destination_city=destination,
            departure_from=date_from,
            departure_to=date_to,
            priority=TripPriority.parse(priority),
            currency=currency.upper(),
            max_stops=max_stops,
            max_top_results=max_top,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Watch flight sources and get notified when the best trips change."""
    configure_logging(get_settings().log_file, logging.DEBUG if verbose else logging.INFO)


@cli.command()
@search_options
@click.option("--once", is_flag=True, help="Run a single cycle and exit")
@click.option("--interval-h", type=click.FloatRange(min=0, min_open=True), default=None, help="Hours between cycles (default: POLL_INTERVAL_H)")
def run(once: bool, interval_h: Optional[float], **search) -> None:
    """Poll all sources periodically and notify on changes."""
    request = _build_request(**search)
    cfg = get_settings()
    interval = timedelta(hours=interval_h if interval_h is not None else cfg.poll_interval_h)
    scheduler = CycleScheduler(build_automation(cfg), interval)

    stop_event = threading.Event()

    def _stop(signum, _frame) -> None:
        logger.info("Received signal %s, stopping", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    logger.info(
        "Watching %s ➔ %s (%s – %s), every %.1f h",
        request.origin_city,
        request.destination_city,
        request.departure_from,
        request.departure_to,
        interval.total_seconds() / 3600,
    )
    scheduler.run(request, stop_event, max_cycles=1 if once else None)


@cli.command()
@search_options
def fetch(**search) -> None:
    """Fetch and rank trips once, print them, persist nothing."""
    request = _build_request(**search)
    sources = build_sources(get_settings())
    trips = gather(sources, request, scraper=SimpleWebScraper(sources))
    ranked = rank_trips(trips, request.priority)[: request.max_top_results]
    if not ranked:
        click.echo("No trips found")
        return
    click.echo(build_message(request, ranked))


@cli.command()
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), help="Write the table to a CSV file")
def show(csv_path: Optional[str]) -> None:
    """Print the currently stored best trips."""
    trips = JsonTripStore(get_settings().storage_path).load()
    df = trips_to_dataframe(trips)
    if df.empty:
        click.echo("No stored trips.", err=True)
        return
    click.echo(df.to_string(index=False))
    if csv_path:
        df.to_csv(csv_path, index=False)
        click.echo(f"\nWrote {len(df)} rows to {csv_path}", err=True)


@cli.command()
@click.option("--city", help="Only airports of this city")
def airports(city: Optional[str]) -> None:
    """List the known airports."""
    for airport in find_by_city(city) if city else AIRPORTS:
        click.echo(f"{airport.code}  {airport}  – {airport.name}")


if __name__ == "__main__":
    cli()
