"""State-transition events relayed to transport collaborators."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

BID_MADE = "bid_made"
GAME_UPDATED = "game_updated"
CARD_PLAYED = "card_played"
TRICK_COMPLETED = "trick_completed"
ROUND_COMPLETED = "round_completed"
GAME_ENDED = "game_ended"
GAME_TIMEOUT = "game_timeout"

EVENT_TYPES = (
    BID_MADE,
    GAME_UPDATED,
    CARD_PLAYED,
    TRICK_COMPLETED,
    ROUND_COMPLETED,
    GAME_ENDED,
    GAME_TIMEOUT,
)


@dataclass(frozen=True)
class GameEvent:
    type: str
    game_id: str
    sequence: int
    payload: Dict[str, Any] = field(default_factory=dict)
    snapshot: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "game_id": self.game_id,
            "sequence": self.sequence,
            "payload": self.payload,
            "game": self.snapshot,
        }


Listener = Callable[[GameEvent], None]


class EventBus:
    """Synchronous fan-out; listeners run inside the mutation that emitted the event."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: GameEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed on %s #%d for game %s", event.type, event.sequence, event.game_id)
