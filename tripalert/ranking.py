from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from .models import Trip, TripPriority

_SORT_KEYS: Dict[TripPriority, Callable[[Trip], tuple]] = {
    TripPriority.PRICE: lambda t: (t.total_price, t.total_duration),
    TripPriority.TIME: lambda t: (t.total_duration, t.total_price),
    TripPriority.STOPS: lambda t: (t.stops, t.total_price),
}


def rank_trips(trips: Iterable[Trip], priority: TripPriority) -> List[Trip]:
    """Order *trips* by *priority*.

    ``sorted`` is stable, so trips with equal keys keep their input order.
    """
    return sorted(trips, key=_SORT_KEYS[TripPriority(priority)])


__all__ = ["rank_trips"]
