"""Scraping-style source built on top of regular flight sources."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

from .models import UserSearchRequest, WebScrapingFinding
from .sources import FlightSource, is_cancelled

logger = logging.getLogger(__name__)


class SimpleWebScraper:
    """Re-use *sources* to emulate findings scraped from their websites."""

    def __init__(
        self,
        sources: Iterable[FlightSource],
        *,
        per_source: int = 2,
        base_url: str = "https://example.com",
    ) -> None:
        self.sources = list(sources)
        self.per_source = per_source
        self.base_url = base_url.rstrip("/")

    def scrape(
        self,
        request: UserSearchRequest,
        stop_event: Optional[threading.Event] = None,
    ) -> List[WebScrapingFinding]:
        findings: List[WebScrapingFinding] = []
        for source in self.sources:
            if is_cancelled(stop_event):
                logger.info("Scraping cancelled")
                break
            try:
                trips = source.search(request, stop_event)
            except Exception as exc:
                logger.warning("  Failed to scrape %s: %s", source.name, exc)
                continue

            for trip in trips[: self.per_source]:
                findings.append(
                    WebScrapingFinding(
                        source_name=f"{source.name} Scraper",
                        source_url=f"{self.base_url}/{source.name.lower()}",
                        trip=trip,
                    )
                )
        logger.info("Scraped %d findings", len(findings))
        return findings


__all__ = ["SimpleWebScraper"]
