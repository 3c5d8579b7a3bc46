"""
Bounded event log.

Ring buffer over a deque: appends past capacity evict the oldest entry.
Events are frozen models, so returning new lists of them is a full copy.
"""

from collections import deque
from itertools import islice
from typing import Optional

from models.event import Event

DEFAULT_CAPACITY = 10_000


class EventLog:
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._events: deque[Event] = deque()

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: Event) -> Optional[Event]:
        """Add to the tail. Returns the evicted head event, if any."""
        self._events.append(event)
        if len(self._events) > self.capacity:
            return self._events.popleft()
        return None

    def recent(self, limit: int) -> list[Event]:
        """Last `limit` events, oldest first."""
        if limit <= 0:
            return []
        newest_first = list(islice(reversed(self._events), limit))
        newest_first.reverse()
        return newest_first

    def filter_by_session(self, session_id: str, limit: int) -> list[Event]:
        """Like recent(), restricted to one session. Relative order is preserved."""
        if limit <= 0:
            return []
        matching = (e for e in reversed(self._events) if e.session_id == session_id)
        newest_first = list(islice(matching, limit))
        newest_first.reverse()
        return newest_first
