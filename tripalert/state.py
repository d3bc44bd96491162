"""Reconcile this cycle's trips with the persisted best set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from .comparison import dedupe_trips, same_sequence
from .models import Trip, TripPriority
from .ranking import rank_trips

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MergeResult:
    previous_top: List[Trip]
    top_trips: List[Trip]
    changed: bool


def merge_top_trips(
    persisted: Sequence[Trip],
    ranked: Sequence[Trip],
    priority: TripPriority,
    max_top_results: int,
) -> MergeResult:
    """Merge *persisted* with *ranked*, re-rank and compare the top-N.

    Persisted trips come first so they win over equal new ones. The top-N
    counts as changed on any difference in membership, order or length.
    """
    merged = dedupe_trips([*persisted, *ranked])
    top = rank_trips(merged, priority)[:max_top_results]
    previous = list(persisted[:max_top_results])
    changed = not same_sequence(previous, top)

    logger.info(
        "Merged %d persisted + %d new trips; top %d %s",
        len(persisted),
        len(ranked),
        len(top),
        "changed" if changed else "unchanged",
    )
    return MergeResult(previous_top=previous, top_trips=top, changed=changed)


__all__ = ["MergeResult", "merge_top_trips"]
