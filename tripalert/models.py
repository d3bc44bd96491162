"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence


class TripPriority(str, Enum):
    """Criterion used to rank candidate trips."""

    PRICE = "price"
    TIME = "time"
    STOPS = "stops"

    @classmethod
    def parse(cls, value: str) -> "TripPriority":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown priority: {value!r}. Expected one of: price, time, stops"
            ) from None

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True, slots=True)
class Airport:
    country: str
    city: str
    code: str
    name: str

    def __str__(self) -> str:
        return f"{self.city}, {self.country} ({self.code})"


@dataclass(frozen=True, slots=True)
class Flight:
    """One operated segment of a trip."""

    airline: str
    departure_airport: Airport
    arrival_airport: Airport
    departure_time: datetime
    arrival_time: datetime
    price: Decimal
    currency: str
    duration: Optional[timedelta] = None
    baggage_included: bool = False
    baggage_notes: str = ""

    def __post_init__(self) -> None:
        if self.duration is None:
            object.__setattr__(
                self, "duration", self.arrival_time - self.departure_time
            )


@dataclass(frozen=True, slots=True)
class Layover:
    airport: Airport
    waiting_time: timedelta


@dataclass(frozen=True, slots=True)
class Trip:
    """Purchasable itinerary made of one or more chained flights."""

    flights: tuple[Flight, ...]
    layovers: tuple[Layover, ...]
    start_time: datetime
    end_time: datetime
    total_price: Decimal
    currency: str
    departure_airport: Airport
    arrival_airport: Airport

    @classmethod
    def from_flights(
        cls, flights: Sequence[Flight], currency: Optional[str] = None
    ) -> "Trip":
        """Build a trip deriving layovers, time span and total price."""
        if not flights:
            raise ValueError("A trip needs at least one flight")

        flights = tuple(flights)
        layovers = tuple(
            Layover(
                airport=prev.arrival_airport,
                waiting_time=max(
                    nxt.departure_time - prev.arrival_time, timedelta(0)
                ),
            )
            for prev, nxt in zip(flights, flights[1:])
        )
        return cls(
            flights=flights,
            layovers=layovers,
            start_time=flights[0].departure_time,
            end_time=flights[-1].arrival_time,
            total_price=sum((f.price for f in flights), Decimal("0")),
            currency=currency or flights[0].currency,
            departure_airport=flights[0].departure_airport,
            arrival_airport=flights[-1].arrival_airport,
        )

    @property
    def stops(self) -> int:
        return max(0, len(self.flights) - 1)

    @property
    def total_duration(self) -> timedelta:
        return self.end_time - self.start_time


@dataclass(frozen=True, slots=True)
class UserSearchRequest:
    origin_city: str
    destination_city: str
    departure_from: date
    departure_to: date
    priority: TripPriority = TripPriority.PRICE
    currency: str = "USD"
    max_stops: int = 3
    max_top_results: int = 10

    def __post_init__(self) -> None:
        if not self.origin_city.strip() or not self.destination_city.strip():
            raise ValueError("Origin and destination cities must be non-empty")
        if self.departure_to < self.departure_from:
            raise ValueError(
                "departure_to cannot be earlier than departure_from"
            )
        if self.max_stops < 0:
            raise ValueError("max_stops must be >= 0")
        if self.max_top_results < 0:
            raise ValueError("max_top_results must be >= 0")

    def iter_dates(self):
        """Iterate over all departure dates in the range (inclusive)."""
        d = self.departure_from
        while d <= self.departure_to:
            yield d
            d += timedelta(days=1)


@dataclass(frozen=True, slots=True)
class WebScrapingFinding:
    """Trip discovered by a scraping-style source, tagged with its origin."""

    source_name: str
    source_url: str
    trip: Trip
    found_at: datetime = field(
        default_factory=lambda: datetime.now().astimezone()
    )


__all__ = [
    "Airport",
    "Flight",
    "Layover",
    "Trip",
    "TripPriority",
    "UserSearchRequest",
    "WebScrapingFinding",
]
