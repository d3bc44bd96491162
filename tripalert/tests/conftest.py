"""Pytest configuration and fixtures."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tripalert.airports import find_by_code
from tripalert.config import get_settings
from tripalert.models import Flight, Trip, TripPriority, UserSearchRequest

T0 = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def _flight(
    origin="EZE",
    destination="MAD",
    *,
    airline="Iberia",
    depart=T0,
    hours=12.0,
    price="500",
    currency="USD",
    baggage_included=True,
    baggage_notes="Baggage included",
):
    return Flight(
        airline=airline,
        departure_airport=find_by_code(origin),
        arrival_airport=find_by_code(destination),
        departure_time=depart,
        arrival_time=depart + timedelta(hours=hours),
        price=Decimal(price),
        currency=currency,
        baggage_included=baggage_included,
        baggage_notes=baggage_notes,
    )


@pytest.fixture
def make_flight():
    return _flight


@pytest.fixture
def make_trip():
    """Build a trip from ``(origin, destination)`` hops, 2 h layovers apart."""

    def _make(*hops, airline="Iberia", depart=T0, hours=3.0, price="100", currency="USD"):
        hops = hops or (("EZE", "MAD"),)
        flights = []
        start = depart
        for origin, destination in hops:
            flights.append(
                _flight(
                    origin,
                    destination,
                    airline=airline,
                    depart=start,
                    hours=hours,
                    price=price,
                    currency=currency,
                )
            )
            start = start + timedelta(hours=hours + 2)
        return Trip.from_flights(flights)

    return _make


@pytest.fixture
def search_request():
    return UserSearchRequest(
        origin_city="Buenos Aires",
        destination_city="Madrid",
        departure_from=date(2025, 3, 10),
        departure_to=date(2025, 3, 12),
        priority=TripPriority.PRICE,
        max_stops=1,
        max_top_results=3,
    )


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.setenv("TRIPALERT_LOG_FILE", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
