from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

from .aggregator import gather
from .config import Settings
from .mailer import EmailChannel
from .models import Trip, UserSearchRequest
from .notifier import (
    ConsoleChannel,
    DeferredWhatsAppChannel,
    NotificationDispatcher,
    Subscription,
    TelegramChannel,
    WHATSAPP_PREFIX,
)
from .ranking import rank_trips
from .report import build_message
from .scraper import SimpleWebScraper
from .simulated_sources import AmadeusSource, GoogleFlightsSource, KiwiSource
from .skyscanner_fetcher import SkyscannerFetcher
from .sources import FlightSource, ScrapingSource, is_cancelled
from .state import merge_top_trips
from .storage import JsonTripStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = timedelta(hours=24)


@dataclass(frozen=True)
class CycleResult:
    top_trips: List[Trip]
    changed: bool
    notified: bool
    deliveries: Dict[str, bool]


# ────────────────────────────────────────────────────────────────
# One cycle
# ────────────────────────────────────────────────────────────────


class TripAlertAutomation:
    """fetch → aggregate → rank → merge → notify → persist."""

    def __init__(
        self,
        sources: Sequence[FlightSource],
        store: JsonTripStore,
        dispatcher: NotificationDispatcher,
        *,
        scraper: Optional[ScrapingSource] = None,
    ) -> None:
        self.sources = list(sources)
        self.store = store
        self.dispatcher = dispatcher
        self.scraper = scraper

    def run_once(
        self,
        request: UserSearchRequest,
        stop_event: Optional[threading.Event] = None,
    ) -> Optional[CycleResult]:
        """Run a single cycle; ``None`` when cancelled before persisting."""
        trips = gather(
            self.sources, request, scraper=self.scraper, stop_event=stop_event
        )
        if is_cancelled(stop_event):
            logger.info("Cycle cancelled, nothing persisted")
            return None

        ranked = rank_trips(trips, request.priority)
        persisted = self.store.load()
        merge = merge_top_trips(
            persisted, ranked, request.priority, request.max_top_results
        )

        deliveries: Dict[str, bool] = {}
        notified = merge.changed and bool(merge.top_trips)
        if notified:
            message = build_message(request, merge.top_trips)
            deliveries = self.dispatcher.dispatch(message)

        self.store.save(merge.top_trips)
        return CycleResult(
            top_trips=merge.top_trips,
            changed=merge.changed,
            notified=notified,
            deliveries=deliveries,
        )


# ────────────────────────────────────────────────────────────────
# Scheduler
# ────────────────────────────────────────────────────────────────


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class CycleScheduler:
    """Run cycles back to back, sleeping *interval* in between.

    Only ``stop_event`` ends the loop; it is checked before every cycle and
    wakes the sleep early. A failing cycle is logged and the next one runs
    on schedule.
    """

    def __init__(
        self,
        automation: TripAlertAutomation,
        interval: timedelta = DEFAULT_INTERVAL,
    ) -> None:
        self.automation = automation
        self.interval = interval
        self.state = SchedulerState.IDLE
        self.cycles = 0

    def run(
        self,
        request: UserSearchRequest,
        stop_event: threading.Event,
        *,
        max_cycles: Optional[int] = None,
    ) -> None:
        try:
            while not stop_event.is_set():
                self.state = SchedulerState.RUNNING
                self._run_cycle(request, stop_event)
                self.cycles += 1
                if max_cycles is not None and self.cycles >= max_cycles:
                    break
                self.state = SchedulerState.SLEEPING
                logger.info(
                    "Next cycle in %.1f h", self.interval.total_seconds() / 3600
                )
                if stop_event.wait(self.interval.total_seconds()):
                    break
        finally:
            self.state = SchedulerState.STOPPED
            logger.info("Scheduler stopped after %d cycles", self.cycles)

    def _run_cycle(
        self, request: UserSearchRequest, stop_event: threading.Event
    ) -> None:
        try:
            result = self.automation.run_once(request, stop_event)
        except StorageError:
            logger.error("Cycle failed: best trips could not be persisted", exc_info=True)
            return
        except Exception:
            logger.exception("Cycle failed")
            return
        if result is not None:
            logger.info(
                "Cycle done: %d top trips, changed=%s, notified=%s",
                len(result.top_trips),
                result.changed,
                result.notified,
            )


# ────────────────────────────────────────────────────────────────
# Wiring
# ────────────────────────────────────────────────────────────────


def build_sources(cfg: Settings) -> List[FlightSource]:
    factories = {
        "skyscanner": lambda: SkyscannerFetcher(
            cfg.skyscanner_api_key, cfg.skyscanner_base_url
        ),
        "kiwi": KiwiSource,
        "amadeus": AmadeusSource,
        "googleflights": GoogleFlightsSource,
    }
    return [factories[name]() for name in cfg.sources]


def build_dispatcher(cfg: Settings) -> NotificationDispatcher:
    subs: List[Subscription] = []
    if cfg.has_telegram:
        subs.append(Subscription(TelegramChannel(cfg.telegram_token), cfg.telegram_chat_id))
    else:
        logger.warning(
            "Telegram not configured (TRIPALERT_TELEGRAM_BOT_TOKEN / "
            "TRIPALERT_TELEGRAM_CHAT); messages will only be logged"
        )
        subs.append(Subscription(ConsoleChannel(), cfg.telegram_chat_id or "console"))
    subs.append(
        Subscription(DeferredWhatsAppChannel(), cfg.whatsapp_number, WHATSAPP_PREFIX)
    )
    if cfg.has_email:
        subs.append(
            Subscription(
                EmailChannel(
                    cfg.smtp_host,
                    cfg.smtp_user,
                    cfg.smtp_pass,
                    port=cfg.smtp_port,
                    use_tls=cfg.smtp_starttls,
                ),
                cfg.email_to,
            )
        )
    return NotificationDispatcher(subs)


def build_automation(cfg: Settings) -> TripAlertAutomation:
    sources = build_sources(cfg)
    return TripAlertAutomation(
        sources,
        JsonTripStore(cfg.storage_path),
        build_dispatcher(cfg),
        scraper=SimpleWebScraper(sources),
    )


__all__ = [
    "CycleResult",
    "CycleScheduler",
    "SchedulerState",
    "TripAlertAutomation",
    "build_automation",
    "build_dispatcher",
    "build_sources",
]
