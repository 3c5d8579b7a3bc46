from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SessionStatus(str, Enum):
    ACTIVE = "active"
    WAITING = "waiting"     # blocked on a permission prompt
    IDLE = "idle"


class Session(BaseModel):
    """Derived state for one agent run. Serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    started_at: datetime
    last_activity: datetime
    tool_call_count: int = 0
    last_tool: Optional[str] = None
    status: SessionStatus = SessionStatus.ACTIVE
    project: str = "unknown"

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
