from __future__ import annotations

from datetime import timedelta
from typing import List, Sequence

import pandas as pd

from .models import Trip, UserSearchRequest

REPORT_COLUMNS = [
    "rank",
    "origin",
    "destination",
    "airlines",
    "departure",
    "arrival",
    "stops",
    "duration_h",
    "price",
    "currency",
]


def format_duration(value: timedelta) -> str:
    """``timedelta(hours=26, minutes=5)`` -> ``"1d 2h 05m"``."""
    minutes = max(0, int(value.total_seconds() // 60))
    days, minutes = divmod(minutes, 24 * 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{hours}h {minutes:02d}m"
    return f"{days}d {text}" if days else text


def build_message(request: UserSearchRequest, trips: Sequence[Trip]) -> str:
    """Render the change notification for the ranked *trips*."""
    lines: List[str] = [
        f"Changes detected in the best trips "
        f"{request.origin_city} -> {request.destination_city}.",
        f"Priority: {request.priority.label}.",
        "",
    ]
    for idx, trip in enumerate(trips, start=1):
        dep, arr = trip.departure_airport, trip.arrival_airport
        lines.append(f"#{idx} - {dep.city} ({dep.code}) -> {arr.city} ({arr.code})")
        lines.append(
            f"      Price: {trip.currency} {trip.total_price:.2f} | "
            f"Stops: {trip.stops} | "
            f"Duration: {format_duration(trip.total_duration)}"
        )
        for flight in trip.flights:
            baggage = "Included" if flight.baggage_included else flight.baggage_notes
            lines.append(
                f"      Flight {flight.airline}: "
                f"{flight.departure_airport.code} {flight.departure_time:%d/%m %H:%M} -> "
                f"{flight.arrival_airport.code} {flight.arrival_time:%d/%m %H:%M} | "
                f"Price: {flight.currency} {flight.price:.2f} | "
                f"Baggage: {baggage}"
            )
        if idx < len(trips):
            lines.append("")
    return "\n".join(lines) + "\n"


def trips_to_dataframe(trips: Sequence[Trip]) -> pd.DataFrame:
    """Convert ranked trips to a pandas DataFrame (one row per trip)."""
    if not trips:
        return pd.DataFrame(columns=REPORT_COLUMNS)
    return pd.DataFrame(
        [
            {
                "rank": idx,
                "origin": t.departure_airport.code,
                "destination": t.arrival_airport.code,
                "airlines": " / ".join(f.airline for f in t.flights),
                "departure": t.start_time.isoformat(),
                "arrival": t.end_time.isoformat(),
                "stops": t.stops,
                "duration_h": round(t.total_duration.total_seconds() / 3600, 2),
                "price": float(t.total_price),
                "currency": t.currency,
            }
            for idx, t in enumerate(trips, start=1)
        ],
        columns=REPORT_COLUMNS,
    )


__all__ = ["build_message", "format_duration", "trips_to_dataframe"]
