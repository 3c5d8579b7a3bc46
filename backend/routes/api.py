import re
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.session import Session
from store import get_hive
from tracking.hive import Hive

router = APIRouter(prefix="/api", tags=["api"])


# ---------- Response schema ----------

class StatsResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_sessions: int
    total_events: int
    active_sessions: int
    tool_counts: dict[str, int]     # tool_name -> events in the log
    event_counts: dict[str, int]    # hook_event_name -> events in the log


DEFAULT_LIMIT = 100


def _parse_limit(raw: Optional[str]) -> int:
    """Leading integer of `raw`; anything missing, unparseable or below 1 means the default."""
    match = re.match(r"\s*[+-]?\d+", raw or "")
    limit = int(match.group()) if match else 0
    return limit if limit >= 1 else DEFAULT_LIMIT


# ---------- Endpoints ----------

@router.get("/sessions", response_model=dict[str, Session])
async def list_sessions(hive: Hive = Depends(get_hive)):
    return hive.list_sessions()


@router.get("/events")
async def list_events(
    limit: Optional[str] = None,
    session: Optional[str] = None,
    hive: Hive = Depends(get_hive),
):
    """Most recent events, oldest first, optionally for one session only."""
    return [event.to_wire() for event in hive.recent_events(_parse_limit(limit), session_id=session)]


@router.get("/stats", response_model=StatsResponse)
async def get_stats(hive: Hive = Depends(get_hive)):
    return StatsResponse(**hive.stats())
