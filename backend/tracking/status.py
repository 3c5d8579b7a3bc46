"""
Session status derivation.

Status is a function of the most recent event only. There is no time-based
staleness: a session that goes quiet keeps whatever status its last event gave it.
"""

from typing import Optional

from models.session import SessionStatus


def derive_status(hook_event_name: Optional[str], tool_name: Optional[str] = None) -> SessionStatus:
    if hook_event_name == "Stop":
        return SessionStatus.IDLE
    if hook_event_name == "Notification":
        if tool_name == "permission_prompt":
            return SessionStatus.WAITING
        if tool_name == "idle_prompt":
            return SessionStatus.IDLE
    return SessionStatus.ACTIVE
