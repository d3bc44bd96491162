from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from .comparison import dedupe_trips
from .models import Trip, UserSearchRequest
from .sources import FlightSource, ScrapingSource

logger = logging.getLogger(__name__)


def collect_trips(
    sources: Sequence[FlightSource],
    request: UserSearchRequest,
    *,
    scraper: Optional[ScrapingSource] = None,
    stop_event: Optional[threading.Event] = None,
) -> List[Trip]:
    """Query every source concurrently and concatenate their trips.

    Results are joined in configured order: sources first, then the trips
    wrapped by the scraper findings. An exception escaping a source is
    re-raised here and aborts the cycle.
    """
    workers = len(sources) + (1 if scraper is not None else 0)
    if workers == 0:
        return []

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="source") as pool:
        futures = [pool.submit(src.search, request, stop_event) for src in sources]
        scrape_future = (
            pool.submit(scraper.scrape, request, stop_event)
            if scraper is not None
            else None
        )

        trips: List[Trip] = []
        for src, fut in zip(sources, futures):
            found = fut.result()
            logger.info("%s returned %d trips", getattr(src, "name", src), len(found))
            trips.extend(found)

        if scrape_future is not None:
            findings = scrape_future.result()
            trips.extend(f.trip for f in findings)

    return trips


def aggregate(trips: Iterable[Trip], max_stops: int) -> List[Trip]:
    """Drop trips with too many stops, then structural duplicates."""
    allowed = [t for t in trips if t.stops <= max_stops]
    unique = dedupe_trips(allowed)
    logger.info(
        "Aggregated %d trips (max %d stops) into %d unique trips",
        len(allowed),
        max_stops,
        len(unique),
    )
    return unique


def gather(
    sources: Sequence[FlightSource],
    request: UserSearchRequest,
    *,
    scraper: Optional[ScrapingSource] = None,
    stop_event: Optional[threading.Event] = None,
) -> List[Trip]:
    """Collect from all sources and aggregate for *request*."""
    raw = collect_trips(sources, request, scraper=scraper, stop_event=stop_event)
    return aggregate(raw, request.max_stops)


__all__ = ["aggregate", "collect_trips", "gather"]
