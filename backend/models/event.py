from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_SESSION = "unknown"


class Event(BaseModel):
    """
    One hook payload as accepted by POST /events.

    Field names follow the agent's hook JSON (snake_case). Keys the sender adds
    beyond these are kept as extras and echoed back untouched.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    session_id: str = UNKNOWN_SESSION
    hook_event_name: Optional[str] = None     # "PreToolUse" | "PostToolUse" | "Notification" | "Stop" | ...
    tool_name: Optional[str] = None
    tool_input: Any = None                    # opaque, never interpreted
    timestamp: Any = None                     # sender clock, opaque
    project_dir: Optional[str] = None
    received_at: datetime = Field(alias="receivedAt")

    @field_validator("session_id", mode="before")
    @classmethod
    def _default_session(cls, value: Any) -> str:
        if value is None or value == "":
            return UNKNOWN_SESSION
        return str(value)

    @field_validator("hook_event_name", "tool_name", "project_dir", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Optional[str]:
        # No schema validation: odd scalars are stringified, not rejected.
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    @classmethod
    def from_payload(cls, payload: dict, received_at: datetime) -> "Event":
        data = {k: v for k, v in payload.items() if k not in ("receivedAt", "received_at")}
        data["receivedAt"] = received_at
        return cls.model_validate(data)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
