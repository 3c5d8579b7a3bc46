"""
Hive: the single owner of all mutable tracking state.

Holds the session table, the event log, the running tool/event counters and
the subscriber registry. Every mutation and every snapshot capture happens
under one lock; fan-out to subscribers happens after the lock is released.

Flow for one event:
  ingest(payload)
    -> stamp receivedAt, resolve session id
    -> [lock] SessionStore.upsert, EventLog.append, counters, seq += 1
    -> Broadcaster.publish({type: "event", event, session})
"""

import logging
import threading
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from models.event import Event
from models.session import Session, SessionStatus
from tracking.broadcaster import Broadcaster, Subscriber, DEFAULT_QUEUE_SIZE
from tracking.event_log import EventLog, DEFAULT_CAPACITY
from tracking.sessions import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_INIT_EVENTS = 100
UNKNOWN_KEY = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Hive:
    def __init__(
        self,
        max_events: int = DEFAULT_CAPACITY,
        init_events: int = DEFAULT_INIT_EVENTS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        clock=_utcnow,
    ):
        self.sessions = SessionStore()
        self.events = EventLog(max_events)
        self.broadcaster = Broadcaster(queue_size)
        self.init_events = init_events
        self._clock = clock
        self._lock = threading.Lock()
        self._seq = 0
        self._tool_counts: Counter = Counter()
        self._event_counts: Counter = Counter()

    # ---------- Ingestion ----------

    def ingest(self, payload: dict) -> tuple[Event, Session]:
        """Store one structurally valid event and broadcast it."""
        event = Event.from_payload(payload, received_at=self._clock())

        with self._lock:
            session = self.sessions.upsert(event.session_id, event)
            evicted = self.events.append(event)
            self._count(event, 1)
            if evicted is not None:
                self._count(evicted, -1)
            self._seq += 1
            seq = self._seq

        message = {"type": "event", "event": event.to_wire(), "session": session.to_wire()}
        self.broadcaster.publish(message, seq)
        return event, session

    def _count(self, event: Event, delta: int):
        for counter, key in (
            (self._tool_counts, event.tool_name),
            (self._event_counts, event.hook_event_name),
        ):
            key = key or UNKNOWN_KEY
            counter[key] += delta
            if counter[key] <= 0:
                del counter[key]

    # ---------- Subscribers ----------

    def subscribe(self) -> Subscriber:
        """Register a live subscriber, queueing its init snapshot first."""
        # Registered under the lock: every event after the watermark is
        # published only once the subscriber is in the registry.
        with self._lock:
            init = {
                "type": "init",
                "sessions": {sid: s.to_wire() for sid, s in self.sessions.snapshot_all().items()},
                "recentEvents": [e.to_wire() for e in self.events.recent(self.init_events)],
            }
            subscriber = self.broadcaster.subscribe(init, watermark=self._seq)
        logger.info("Client connected (%d total)", len(self.broadcaster))
        return subscriber

    def unsubscribe(self, subscriber: Subscriber):
        with self._lock:
            removed = self.broadcaster.unsubscribe(subscriber)
        if removed:
            logger.info("Client disconnected (%d total)", len(self.broadcaster))

    # ---------- Queries ----------

    def list_sessions(self) -> dict[str, Session]:
        with self._lock:
            return self.sessions.snapshot_all()

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self.sessions.get(session_id)

    def recent_events(self, limit: int = DEFAULT_INIT_EVENTS, session_id: Optional[str] = None) -> list[Event]:
        with self._lock:
            if session_id:
                return self.events.filter_by_session(session_id, limit)
            return self.events.recent(limit)

    def stats(self) -> dict:
        with self._lock:
            return {
                "totalSessions": len(self.sessions),
                "totalEvents": len(self.events),
                "activeSessions": self.sessions.count_by_status(SessionStatus.ACTIVE),
                "toolCounts": dict(self._tool_counts),
                "eventCounts": dict(self._event_counts),
            }

    def health(self) -> dict:
        with self._lock:
            session_count = len(self.sessions)
        return {"status": "ok", "clients": len(self.broadcaster), "sessions": session_count}
