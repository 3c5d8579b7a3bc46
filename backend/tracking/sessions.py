"""
In-memory session table.

Not thread-safe on its own: the Hive coordinator serialises every call.
Every read hands out copies so callers can never mutate stored state.
"""

from collections import Counter
from typing import Optional

from models.event import Event
from models.session import Session, SessionStatus
from tracking.status import derive_status


class SessionStore:
    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._status_counts: Counter = Counter()

    def __len__(self) -> int:
        return len(self._sessions)

    def upsert(self, session_id: str, event: Event) -> Session:
        """Apply one event to its session, creating it on first sight. Returns a snapshot."""
        session = self._sessions.get(session_id)
        previous = session.status if session is not None else None
        if session is None:
            session = Session(
                id=session_id,
                started_at=event.received_at,
                last_activity=event.received_at,
                project=event.project_dir or "unknown",
            )
            self._sessions[session_id] = session

        session.last_activity = event.received_at
        session.tool_call_count += 1
        if event.tool_name is not None:
            session.last_tool = event.tool_name
        session.status = derive_status(event.hook_event_name, event.tool_name)
        if session.status != previous:
            if previous is not None:
                self._status_counts[previous] -= 1
            self._status_counts[session.status] += 1

        return session.model_copy()

    def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session is not None else None

    def snapshot_all(self) -> dict[str, Session]:
        return {sid: s.model_copy() for sid, s in self._sessions.items()}

    def count_by_status(self, status: SessionStatus) -> int:
        return self._status_counts[status]
