"""Background sweep that ends tables whose current actor has stalled."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from .service import GameService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeoutReport:
    game_id: str
    stalled_player: Optional[str]
    retained_bots: List[str] = field(default_factory=list)
    evicted_players: List[str] = field(default_factory=list)
    message: str = ""


class TurnTimeoutMonitor:
    """Daemon thread calling ``sweep`` every ``period`` seconds."""

    def __init__(
        self,
        service: "GameService",
        period: float = 1.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._service = service
        self.period = period
        self._clock = clock or service.clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="turn-timeout-monitor", daemon=True)
        self._thread.start()
        logger.info("Turn timeout monitor started (period %.2fs)", self.period)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def sweep(self, now: Optional[float] = None) -> List[TimeoutReport]:
        """Terminate every active game whose current actor exceeded the table timeout."""
        now = self._clock() if now is None else now
        reports = []
        for game_id in self._service.active_game_ids():
            report = self._service.expire_if_stalled(game_id, now)
            if report is not None:
                reports.append(report)
        return reports

    def _run(self) -> None:
        while not self._stop_event.wait(self.period):
            try:
                self.sweep()
            except Exception:
                logger.exception("Timeout sweep failed")
