"""
Hook event sender.

Installed as the command for the agent's PreToolUse / PostToolUse /
Notification / Stop hooks. Reads the hook JSON from stdin, stamps it with the
send time and project directory, and POSTs it to the Hive server.

Never blocks or fails the agent: every error path exits 0.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:4520"
SEND_TIMEOUT = 2.0      # seconds


def build_event(raw: str, project_dir: Optional[str] = None) -> Optional[dict]:
    """Parse hook input. Returns None for empty or unusable input."""
    if not raw.strip():
        return None
    try:
        event = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(f"[Hive] Failed to parse hook input: {exc}", file=sys.stderr)
        return None
    if not isinstance(event, dict):
        print("[Hive] Hook input is not a JSON object", file=sys.stderr)
        return None

    event["timestamp"] = datetime.now(timezone.utc).isoformat()
    event["project_dir"] = project_dir or os.environ.get("CLAUDE_PROJECT_DIR") or os.getcwd()
    return event


def send_event(event: dict, base_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> bool:
    """POST one event. Returns False on any transport or HTTP error."""
    url = (base_url or os.environ.get("CLAUDE_HIVE_URL") or DEFAULT_URL).rstrip("/") + "/events"
    owns_client = client is None
    client = client or httpx.Client(timeout=SEND_TIMEOUT)
    try:
        response = client.post(url, json=event)
        response.raise_for_status()
        return True
    except httpx.HTTPError as exc:
        logger.debug("Hive server unreachable at %s: %s", url, exc)
        return False
    finally:
        if owns_client:
            client.close()


def main() -> int:
    event = build_event(sys.stdin.read())
    if event is not None:
        send_event(event)
    return 0


if __name__ == "__main__":
    sys.exit(main())
