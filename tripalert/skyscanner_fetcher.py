from __future__ import annotations

import datetime as dt
import logging
import os
import threading
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, List, Optional

import requests
from dotenv import load_dotenv

from .airports import find_by_city, find_by_code
from .models import Airport, Flight, Trip, UserSearchRequest
from .simulated_sources import SimulatedFlightSource, SkyscannerSimulatedSource
from .sources import is_cancelled

load_dotenv()

logger = logging.getLogger(__name__)

_PRICE_UNITS = {
    "PRICE_UNIT_WHOLE": Decimal("1"),
    "PRICE_UNIT_CENTI": Decimal("100"),
    "PRICE_UNIT_MILLI": Decimal("1000"),
    "PRICE_UNIT_MICRO": Decimal("1000000"),
}


class SkyscannerError(RuntimeError):
    """Error while talking to the Skyscanner live prices API."""


class SkyscannerFetcher:
    """
    Client for the Skyscanner Flights Live Prices API (``/v3``).

    Malformed itineraries are skipped one by one. When the API key is missing
    or the API yields no usable itinerary at all, the simulated Skyscanner
    generator answers instead.
    """

    name = "Skyscanner"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://partners.api.skyscanner.net/apiservices/v3",
        *,
        market: str = "US",
        locale: str = "en-US",
        timeout: int = 15,
        fallback: SimulatedFlightSource | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.getenv("SKYSCANNER_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.market = market
        self.locale = locale
        self.timeout = timeout
        self.fallback = fallback or SkyscannerSimulatedSource()

    # ──────────────────────────────────────────────────────────

    def search(
        self,
        request: UserSearchRequest,
        stop_event: Optional[threading.Event] = None,
    ) -> List[Trip]:
        """Return trips from the live API, or from the fallback generator."""
        if not self.api_key:
            logger.info("Skyscanner: no API key, using simulated data")
            return self.fallback.search(request, stop_event)

        trips: List[Trip] = []
        for origin in find_by_city(request.origin_city):
            for destination in find_by_city(request.destination_city):
                for day in request.iter_dates():
                    if is_cancelled(stop_event):
                        logger.info("Skyscanner: search cancelled")
                        return trips
                    try:
                        payload = self.search_prices(
                            origin.code, destination.code, day, request.currency
                        )
                    except (SkyscannerError, requests.RequestException, ValueError) as exc:
                        logger.warning(
                            "  Skyscanner failed for %s->%s on %s: %s",
                            origin.code,
                            destination.code,
                            day,
                            exc,
                        )
                        continue
                    trips.extend(self.parse_trips(payload, request.currency))

        if not trips and not is_cancelled(stop_event):
            logger.warning(
                "Skyscanner returned nothing usable, falling back to simulated data"
            )
            return self.fallback.search(request, stop_event)
        return trips

    def search_prices(
        self,
        origin: str,
        destination: str,
        departure: dt.date,
        currency: str = "USD",
    ) -> dict:
        """POST a one-way live prices query and return the decoded JSON."""
        body = {
            "query": {
                "market": self.market,
                "locale": self.locale,
                "currency": currency.upper(),
                "queryLegs": [
                    {
                        "originPlaceId": {"iata": origin},
                        "destinationPlaceId": {"iata": destination},
                        "date": {
                            "year": departure.year,
                            "month": departure.month,
                            "day": departure.day,
                        },
                    }
                ],
                "adults": 1,
                "cabinClass": "CABIN_CLASS_ECONOMY",
            }
        }
        resp = requests.post(
            f"{self.base_url}/flights/live/search/create",
            json=body,
            headers={"x-api-key": self.api_key, "Accept-Encoding": "gzip"},
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise SkyscannerError(f"HTTP {resp.status_code} – {resp.text[:120]}")

        data = resp.json()
        if not isinstance(data, dict):
            raise SkyscannerError("API error: unexpected payload")
        return data

    # ──────────────────────────────────────────────────────────

    def parse_trips(self, payload: dict, currency: str) -> List[Trip]:
        """Map every parseable itinerary of *payload* to a Trip."""
        if not isinstance(payload, dict):
            return []
        content = payload.get("content")
        if not isinstance(content, dict):
            return []
        results = content.get("results") or {}
        if not isinstance(results, dict):
            return []
        itineraries = results.get("itineraries") or {}
        if not isinstance(itineraries, dict):
            return []

        trips = []
        skipped = 0
        for itinerary_id, itinerary in itineraries.items():
            try:
                trip = self._to_trip(itinerary, results, currency)
            except (AttributeError, ArithmeticError, KeyError, TypeError, ValueError):
                trip = None
            if trip is None:
                skipped += 1
                logger.debug("Skipping itinerary %s", itinerary_id)
                continue
            trips.append(trip)
        if skipped:
            logger.info("Skyscanner: skipped %d malformed itineraries", skipped)
        return trips

    def _to_trip(self, itinerary: Any, results: dict, currency: str) -> Trip | None:
        """Maps one itinerary record onto a Trip (``None`` if malformed)."""
        if not isinstance(itinerary, dict):
            return None

        price = self._price(itinerary)
        if price is None:
            return None

        legs = results.get("legs") or {}
        segments = results.get("segments") or {}
        segment_ids: List[str] = []
        for leg_id in itinerary.get("legIds") or []:
            leg = legs.get(leg_id)
            if not isinstance(leg, dict) or not leg.get("segmentIds"):
                return None
            segment_ids.extend(leg["segmentIds"])
        if not segment_ids:
            return None

        prices = self._split_price(price, len(segment_ids))
        flights = []
        for segment_id, segment_price in zip(segment_ids, prices):
            flight = self._to_flight(
                segments.get(segment_id), results, segment_price, currency
            )
            if flight is None:
                return None
            flights.append(flight)

        return Trip.from_flights(flights, currency=currency)

    def _to_flight(
        self, segment: Any, results: dict, price: Decimal, currency: str
    ) -> Flight | None:
        if not isinstance(segment, dict):
            return None

        origin = self._airport(segment.get("originPlaceId"), results)
        destination = self._airport(segment.get("destinationPlaceId"), results)
        if origin is None or destination is None:
            return None

        try:
            departure = _parse_datetime(segment["departureDateTime"])
            arrival = _parse_datetime(segment["arrivalDateTime"])
        except (ArithmeticError, KeyError, TypeError, ValueError):
            return None
        if arrival < departure:
            return None

        carriers = results.get("carriers") or {}
        carrier_id = segment.get("operatingCarrierId") or segment.get("marketingCarrierId")
        carrier = carriers.get(carrier_id) if carrier_id else None
        airline = (carrier or {}).get("name") or (carrier or {}).get("iata") or ""
        if not airline:
            return None

        duration = None
        minutes = segment.get("durationInMinutes")
        if isinstance(minutes, (int, float)) and minutes >= 0:
            try:
                duration = dt.timedelta(minutes=minutes)
            except OverflowError:
                return None

        return Flight(
            airline=airline,
            departure_airport=origin,
            arrival_airport=destination,
            departure_time=departure,
            arrival_time=arrival,
            price=price,
            currency=currency,
            duration=duration,
            baggage_included=False,
            baggage_notes="Baggage policy not provided by Skyscanner",
        )

    def _airport(self, place_id: Any, results: dict) -> Airport | None:
        places = results.get("places") or {}
        place = places.get(place_id) if isinstance(place_id, str) else None
        if not isinstance(place, dict) or not place.get("iata"):
            return None

        known = find_by_code(place["iata"])
        if known is not None:
            return known

        city = places.get(place.get("parentId")) or {}
        country = places.get(city.get("parentId")) or {}
        return Airport(
            country=country.get("name", ""),
            city=city.get("name", "") or place.get("name", ""),
            code=place["iata"].upper(),
            name=place.get("name", ""),
        )

    @staticmethod
    def _price(itinerary: dict) -> Decimal | None:
        options = itinerary.get("pricingOptions") or []
        if not options or not isinstance(options[0], dict):
            return None
        price = options[0].get("price") or {}
        try:
            amount = Decimal(str(price["amount"]))
        except (KeyError, TypeError, InvalidOperation):
            return None
        divisor = _PRICE_UNITS.get(price.get("unit", "PRICE_UNIT_WHOLE"))
        if divisor is None or not amount.is_finite() or amount < 0:
            return None
        return amount / divisor

    @staticmethod
    def _split_price(total: Decimal, parts: int) -> List[Decimal]:
        """Split *total* evenly; rounding leftovers go to the last part."""
        share = (total / parts).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
        prices = [share] * (parts - 1)
        prices.append(total - share * (parts - 1))
        return prices


def _parse_datetime(raw: dict) -> dt.datetime:
    """Skyscanner sends local times as component dicts without an offset."""
    return dt.datetime(
        int(raw["year"]),
        int(raw["month"]),
        int(raw["day"]),
        int(raw.get("hour", 0)),
        int(raw.get("minute", 0)),
        int(raw.get("second", 0)),
        tzinfo=dt.timezone.utc,
    )


__all__ = ["SkyscannerError", "SkyscannerFetcher"]
