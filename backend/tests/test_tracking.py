"""
Unit tests for the tracking core: status derivation, session table and
bounded event log. No server involved.
"""

from datetime import datetime, timedelta, timezone

import pytest

from models.event import Event, UNKNOWN_SESSION
from models.session import SessionStatus
from tracking.event_log import EventLog
from tracking.sessions import SessionStore
from tracking.status import derive_status

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _event(seq: int = 0, **fields) -> Event:
    return Event.from_payload(fields, received_at=T0 + timedelta(seconds=seq))


# ── Status deriver ──────────────────────────────────────────────────────────

class TestDeriveStatus:

    @pytest.mark.parametrize("hook, tool, expected", [
        ("Stop", None, SessionStatus.IDLE),
        ("Stop", "Bash", SessionStatus.IDLE),
        ("Notification", "permission_prompt", SessionStatus.WAITING),
        ("Notification", "idle_prompt", SessionStatus.IDLE),
        ("Notification", None, SessionStatus.ACTIVE),
        ("Notification", "something_else", SessionStatus.ACTIVE),
        ("PreToolUse", "Bash", SessionStatus.ACTIVE),
        ("PostToolUse", "Edit", SessionStatus.ACTIVE),
        ("SomethingNew", None, SessionStatus.ACTIVE),
        (None, None, SessionStatus.ACTIVE),
    ])
    def test_mapping(self, hook, tool, expected):
        assert derive_status(hook, tool) == expected

    def test_tool_name_ignored_outside_notifications(self):
        assert derive_status("PostToolUse", "permission_prompt") == SessionStatus.ACTIVE


# ── Event model ─────────────────────────────────────────────────────────────

class TestEventModel:

    def test_missing_session_id_defaults_to_unknown(self):
        assert _event(hook_event_name="Stop").session_id == UNKNOWN_SESSION

    def test_empty_session_id_defaults_to_unknown(self):
        assert _event(session_id="").session_id == UNKNOWN_SESSION

    def test_sender_cannot_override_received_at(self):
        event = _event(session_id="s1", receivedAt="1999-01-01T00:00:00Z")
        assert event.received_at == T0

    def test_extra_fields_survive_serialisation(self):
        event = _event(session_id="s1", transcript_path="/tmp/t.jsonl", tool_input={"command": "ls"})
        wire = event.to_wire()
        assert wire["transcript_path"] == "/tmp/t.jsonl"
        assert wire["tool_input"] == {"command": "ls"}
        assert wire["receivedAt"].startswith("2026-01-01T12:00:00")

    def test_non_string_scalars_are_stringified(self):
        event = _event(session_id=42, tool_name=7)
        assert event.session_id == "42"
        assert event.tool_name == "7"

    def test_events_are_immutable(self):
        event = _event(session_id="s1")
        with pytest.raises(Exception):
            event.session_id = "s2"


# ── Session store ───────────────────────────────────────────────────────────

class TestSessionStore:

    def setup_method(self):
        self.store = SessionStore()

    def test_first_event_creates_session(self):
        session = self.store.upsert("s1", _event(0, session_id="s1", project_dir="/work/app"))
        assert session.id == "s1"
        assert session.started_at == T0
        assert session.last_activity == T0
        assert session.tool_call_count == 1
        assert session.project == "/work/app"
        assert len(self.store) == 1

    def test_project_defaults_to_unknown(self):
        assert self.store.upsert("s1", _event(session_id="s1")).project == "unknown"

    def test_project_is_first_seen(self):
        self.store.upsert("s1", _event(0, session_id="s1", project_dir="/a"))
        assert self.store.upsert("s1", _event(1, session_id="s1", project_dir="/b")).project == "/a"

    def test_count_and_status_follow_last_event(self):
        hooks = [
            ("PreToolUse", "Bash"),
            ("Notification", "permission_prompt"),
            ("PostToolUse", "Bash"),
            ("Notification", "idle_prompt"),
            ("Stop", None),
        ]
        for i, (hook, tool) in enumerate(hooks):
            session = self.store.upsert("s1", _event(i, session_id="s1", hook_event_name=hook, tool_name=tool))
        assert session.tool_call_count == len(hooks)
        assert session.status == derive_status("Stop", None)
        assert session.started_at == T0
        assert session.last_activity == T0 + timedelta(seconds=len(hooks) - 1)

    def test_last_tool_kept_when_event_has_none(self):
        self.store.upsert("s1", _event(0, session_id="s1", tool_name="Edit"))
        session = self.store.upsert("s1", _event(1, session_id="s1", hook_event_name="Stop"))
        assert session.last_tool == "Edit"

    def test_returned_session_is_a_snapshot(self):
        session = self.store.upsert("s1", _event(session_id="s1"))
        session.tool_call_count = 99
        session.status = SessionStatus.IDLE
        stored = self.store.get("s1")
        assert stored.tool_call_count == 1
        assert stored.status == SessionStatus.ACTIVE

    def test_snapshot_all_is_a_copy(self):
        self.store.upsert("s1", _event(session_id="s1"))
        snapshot = self.store.snapshot_all()
        snapshot["s1"].tool_call_count = 50
        snapshot["s2"] = snapshot["s1"]
        assert self.store.get("s1").tool_call_count == 1
        assert self.store.get("s2") is None

    def test_sessions_are_independent(self):
        self.store.upsert("a", _event(session_id="a", hook_event_name="Stop"))
        self.store.upsert("b", _event(session_id="b", hook_event_name="PreToolUse"))
        assert self.store.get("a").status == SessionStatus.IDLE
        assert self.store.get("b").status == SessionStatus.ACTIVE
        assert self.store.count_by_status(SessionStatus.ACTIVE) == 1

    def test_status_counts_track_transitions(self):
        transitions = [
            ("a", "PreToolUse", None),
            ("b", "PreToolUse", None),
            ("c", "Notification", "permission_prompt"),
            ("a", "Stop", None),
            ("b", "PostToolUse", "Bash"),
            ("c", "PostToolUse", "Edit"),
            ("b", "Notification", "idle_prompt"),
        ]
        for i, (sid, hook, tool) in enumerate(transitions):
            self.store.upsert(sid, _event(i, session_id=sid, hook_event_name=hook, tool_name=tool))

            snapshot = self.store.snapshot_all().values()
            for status in SessionStatus:
                expected = sum(1 for s in snapshot if s.status == status)
                assert self.store.count_by_status(status) == expected

        assert self.store.count_by_status(SessionStatus.ACTIVE) == 1
        assert self.store.count_by_status(SessionStatus.IDLE) == 2
        assert self.store.count_by_status(SessionStatus.WAITING) == 0


# ── Event log ───────────────────────────────────────────────────────────────

class TestEventLog:

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            EventLog(0)

    def test_evicts_oldest_past_default_capacity(self):
        log = EventLog()
        events = [_event(i, session_id="s", tool_name=str(i)) for i in range(10_001)]
        evicted = [log.append(e) for e in events]

        assert len(log) == 10_000
        assert evicted[-1] is events[0]
        assert all(e is None for e in evicted[:-1])
        kept = log.recent(10_000)
        assert kept[0] is events[1]
        assert kept == events[1:]

    def test_recent_is_newest_last(self):
        log = EventLog(10)
        events = [_event(i, session_id="s") for i in range(5)]
        for e in events:
            log.append(e)
        assert log.recent(3) == events[2:]
        assert log.recent(100) == events
        assert log.recent(0) == []

    def test_recent_returns_a_copy(self):
        log = EventLog(10)
        log.append(_event(session_id="s"))
        log.recent(10).clear()
        assert len(log) == 1

    def test_filter_by_session_preserves_order(self):
        log = EventLog(100)
        for i in range(20):
            log.append(_event(i, session_id="a" if i % 3 else "b", tool_name=str(i)))

        only_b = log.filter_by_session("b", 100)
        assert [e.tool_name for e in only_b] == ["0", "3", "6", "9", "12", "15", "18"]
        assert [e.tool_name for e in log.filter_by_session("b", 2)] == ["15", "18"]
        assert log.filter_by_session("missing", 10) == []

    def test_filter_by_session_is_idempotent(self):
        log = EventLog(100)
        for i in range(10):
            log.append(_event(i, session_id="a" if i % 2 else "b"))
        once = log.filter_by_session("a", 100)

        again = EventLog(100)
        for e in once:
            again.append(e)
        assert again.filter_by_session("a", 100) == once
