import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError

from store import get_hive
from tracking.hive import Hive

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


# ---------- Response schema ----------

class IngestResponse(BaseModel):
    ok: bool = True


# ---------- Endpoint ----------

@router.post("/events", response_model=IngestResponse)
async def ingest_event(request: Request, hive: Hive = Depends(get_hive)):
    """
    Receives one hook event from the agent.

    The body may be any JSON object; only unparseable bodies and non-objects
    are rejected. Once stored, the sender always gets {"ok": true}, whatever
    happens while broadcasting to live clients.
    """
    try:
        payload = await request.json()
    except (ValueError, RecursionError):
        # RecursionError: nesting deeper than the json decoder can follow.
        logger.warning("Rejected event: body is not valid JSON")
        raise HTTPException(status_code=400, detail="Body must be valid JSON")

    if not isinstance(payload, dict):
        logger.warning("Rejected event: expected a JSON object, got %s", type(payload).__name__)
        raise HTTPException(status_code=400, detail="Body must be a JSON object")

    try:
        hive.ingest(payload)
    except ValidationError as exc:
        logger.warning("Rejected event: %s", exc)
        raise HTTPException(status_code=400, detail="Event could not be read")

    return IngestResponse()
