"""Append-only record of everything that happened at a table."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class TranscriptEntry:
    timestamp: float
    type: str
    data: Dict[str, Any]
    state: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "type": self.type, "data": dict(self.data), "state": dict(self.state)}


@dataclass
class Transcript:
    game_id: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    clock: Callable[[], float] = time.time
    entries: List[TranscriptEntry] = field(default_factory=list)
    started_at: Optional[float] = None

    def __post_init__(self) -> None:
        if self.started_at is None:
            self.started_at = self.clock()

    def record(self, entry_type: str, state: Dict[str, Any], **data: Any) -> TranscriptEntry:
        entry = TranscriptEntry(timestamp=self.clock(), type=entry_type, data=data, state=state)
        self.entries.append(entry)
        return entry

    def of_type(self, entry_type: str) -> List[TranscriptEntry]:
        return [entry for entry in self.entries if entry.type == entry_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "started_at": self.started_at,
            "metadata": dict(self.metadata),
            "entries": [entry.to_dict() for entry in self.entries],
        }
