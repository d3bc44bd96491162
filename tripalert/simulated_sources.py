"""Simulated flight sources.

They generate deterministic direct trips from the airport catalog so the
whole pipeline can run without real provider credentials.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import FrozenSet, List, Optional

from .airports import find_by_city
from .models import Airport, Flight, Trip, UserSearchRequest
from .sources import is_cancelled

logger = logging.getLogger(__name__)

DEPARTURE_TZ = timezone(timedelta(hours=8))
CENT = Decimal("0.01")

# Monday=0 ... Sunday=6
_WEEKDAY_MODIFIERS = {
    0: Decimal("0.95"),
    4: Decimal("1.25"),
    5: Decimal("1.15"),
    6: Decimal("1.25"),
}


def weekday_modifier(day: date) -> Decimal:
    return _WEEKDAY_MODIFIERS.get(day.weekday(), Decimal("1.0"))


class SimulatedFlightSource:
    """Generic generator; concrete providers only tweak the constants."""

    def __init__(
        self,
        name: str,
        airline: str,
        base_duration: timedelta,
        base_price: Decimal | str,
        *,
        price_factor: Decimal | str = "1",
        duration_offset: timedelta = timedelta(0),
        supported_city_pairs: Optional[FrozenSet[tuple[str, str]]] = None,
    ) -> None:
        self.name = name
        self.airline = airline
        self.base_duration = base_duration
        self.base_price = Decimal(str(base_price))
        self.price_factor = Decimal(str(price_factor))
        self.duration_offset = duration_offset
        self.supported_city_pairs = (
            frozenset((o.casefold(), d.casefold()) for o, d in supported_city_pairs)
            if supported_city_pairs is not None
            else None
        )

    def is_supported(self, origin: Airport, destination: Airport) -> bool:
        if self.supported_city_pairs is None:
            return True
        return (
            origin.city.casefold(),
            destination.city.casefold(),
        ) in self.supported_city_pairs

    def price_for(self, day: date) -> Decimal:
        price = self.base_price * self.price_factor * weekday_modifier(day)
        return price.quantize(CENT, rounding=ROUND_HALF_UP)

    def search(
        self,
        request: UserSearchRequest,
        stop_event: Optional[threading.Event] = None,
    ) -> List[Trip]:
        origins = find_by_city(request.origin_city)
        destinations = find_by_city(request.destination_city)
        if not origins or not destinations:
            logger.info(
                "%s: no airports for %s ➔ %s",
                self.name,
                request.origin_city,
                request.destination_city,
            )
            return []

        trips: List[Trip] = []
        for origin in origins:
            for destination in destinations:
                if not self.is_supported(origin, destination):
                    continue
                for day in request.iter_dates():
                    if is_cancelled(stop_event):
                        logger.info("%s: search cancelled", self.name)
                        return trips
                    trips.append(
                        self._make_trip(origin, destination, day, request.currency)
                    )
        logger.info("%s: generated %d trips", self.name, len(trips))
        return trips

    def _make_trip(
        self, origin: Airport, destination: Airport, day: date, currency: str
    ) -> Trip:
        departure = datetime.combine(day, time(0, 0), tzinfo=DEPARTURE_TZ)
        duration = self.base_duration + self.duration_offset
        international = origin.country.casefold() != destination.country.casefold()
        flight = Flight(
            airline=self.airline,
            departure_airport=origin,
            arrival_airport=destination,
            departure_time=departure,
            arrival_time=departure + duration,
            price=self.price_for(day),
            currency=currency,
            duration=duration,
            baggage_included=international,
            baggage_notes=(
                "Baggage included"
                if international
                else "Checked baggage at extra cost"
            ),
        )
        return Trip.from_flights([flight], currency=currency)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class SkyscannerSimulatedSource(SimulatedFlightSource):
    def __init__(self) -> None:
        super().__init__(
            "Skyscanner",
            "SkyScanner Airways",
            timedelta(hours=2.5),
            "120",
            price_factor="0.92",
        )


class KiwiSource(SimulatedFlightSource):
    def __init__(self) -> None:
        super().__init__(
            "Kiwi",
            "Kiwi Connect",
            timedelta(hours=3.1),
            "135",
            price_factor="1.05",
        )


class AmadeusSource(SimulatedFlightSource):
    def __init__(self) -> None:
        super().__init__(
            "Amadeus",
            "Amadeus Global",
            timedelta(hours=2.8),
            "142",
            price_factor="0.99",
            duration_offset=timedelta(minutes=25),
        )


class GoogleFlightsSource(SimulatedFlightSource):
    """Only knows a handful of popular routes."""

    POPULAR_ROUTES = frozenset(
        {
            ("Neuquén", "Buenos Aires"),
            ("Buenos Aires", "Madrid"),
            ("Buenos Aires", "Barcelona"),
            ("Buenos Aires", "Santiago"),
            ("Buenos Aires", "São Paulo"),
            ("Buenos Aires", "Miami"),
            ("Madrid", "Barcelona"),
            ("Madrid", "Rome"),
        }
    )

    def __init__(self) -> None:
        super().__init__(
            "GoogleFlights",
            "Google Flights Aggregator",
            timedelta(hours=2.6),
            "150",
            price_factor="0.88",
            supported_city_pairs=self.POPULAR_ROUTES,
        )


__all__ = [
    "AmadeusSource",
    "GoogleFlightsSource",
    "KiwiSource",
    "SimulatedFlightSource",
    "SkyscannerSimulatedSource",
    "weekday_modifier",
]
