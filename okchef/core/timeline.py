# okchef/core/timeline.py

"""
Timeline of one cooking session.

- In-memory list of events (time + kind + text)
- Controller pushes events: "voice", "move", "say", "patterns", ...
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import threading
from typing import List, Optional


@dataclass
class TimelineEvent:
    timestamp: datetime
    kind: str
    text: str

    def pretty(self) -> str:
        return f"[{self.timestamp.strftime('%H:%M:%S')}] ({self.kind}) {self.text}"


class TimelineManager:
    def __init__(self):
        self._events: List[TimelineEvent] = []
        self._lock = threading.Lock()

    def add_event(self, kind: str, text: str) -> TimelineEvent:
        ev = TimelineEvent(timestamp=datetime.now(), kind=kind, text=text)
        with self._lock:
            self._events.append(ev)
        return ev

    def get_events(self, kind: Optional[str] = None) -> List[TimelineEvent]:
        with self._lock:
            events = list(self._events)
        if kind is None:
            return events
        return [ev for ev in events if ev.kind == kind]
