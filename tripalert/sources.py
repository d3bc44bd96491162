"""Interfaces for pluggable trip sources."""

from __future__ import annotations

import threading
from typing import List, Optional, Protocol, runtime_checkable

from .models import Trip, UserSearchRequest, WebScrapingFinding


@runtime_checkable
class FlightSource(Protocol):
    """Source returning candidate trips for a search request.

    Implementations must not raise for expected failures (unknown route,
    missing credentials, upstream error); they return an empty list instead.
    When *stop_event* is set they should stop early.
    """

    name: str

    def search(
        self,
        request: UserSearchRequest,
        stop_event: Optional[threading.Event] = None,
    ) -> List[Trip]:
        ...


@runtime_checkable
class ScrapingSource(Protocol):
    """Source returning provenance-tagged findings."""

    def scrape(
        self,
        request: UserSearchRequest,
        stop_event: Optional[threading.Event] = None,
    ) -> List[WebScrapingFinding]:
        ...


def is_cancelled(stop_event: Optional[threading.Event]) -> bool:
    return stop_event is not None and stop_event.is_set()


__all__ = ["FlightSource", "ScrapingSource", "is_cancelled"]
