"""Structural trip equality.

Two trips are the same offer when they cover the same airports in the same
currency through the same ordered flights. Flights match on airline, airport
codes, departure/arrival instants and currency; strings compare
case-insensitively. Prices, baggage and airport display data are ignored.
"""

from __future__ import annotations

import logging
from typing import Hashable, Iterable, List, Sequence

from .models import Flight, Trip

logger = logging.getLogger(__name__)


def _fold(value: str) -> str:
    return (value or "").casefold()


def flight_key(flight: Flight) -> tuple:
    return (
        _fold(flight.airline),
        _fold(flight.departure_airport.code),
        _fold(flight.arrival_airport.code),
        flight.departure_time,
        flight.arrival_time,
        _fold(flight.currency),
    )


def trip_key(trip: Trip) -> Hashable:
    """Return a hashable key; equal keys mean structurally equal trips."""
    return (
        _fold(trip.departure_airport.code),
        _fold(trip.arrival_airport.code),
        _fold(trip.currency),
        tuple(flight_key(f) for f in trip.flights),
    )


def flights_equal(a: Flight, b: Flight) -> bool:
    return flight_key(a) == flight_key(b)


def trips_equal(a: Trip, b: Trip) -> bool:
    if a is b:
        return True
    return trip_key(a) == trip_key(b)


def dedupe_trips(trips: Iterable[Trip]) -> List[Trip]:
    """Drop structural duplicates keeping the first-seen instance in order."""
    seen: set = set()
    unique: List[Trip] = []
    total = 0
    for trip in trips:
        total += 1
        key = trip_key(trip)
        if key in seen:
            continue
        seen.add(key)
        unique.append(trip)
    if total != len(unique):
        logger.debug("Dropped %d duplicate trips", total - len(unique))
    return unique


def same_sequence(a: Sequence[Trip], b: Sequence[Trip]) -> bool:
    """Ordered comparison: same length and pairwise structurally equal."""
    if len(a) != len(b):
        return False
    return all(trips_equal(x, y) for x, y in zip(a, b))


__all__ = [
    "dedupe_trips",
    "flight_key",
    "flights_equal",
    "same_sequence",
    "trip_key",
    "trips_equal",
]
