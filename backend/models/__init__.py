from models.event import Event, UNKNOWN_SESSION
from models.session import Session, SessionStatus

__all__ = ["Event", "UNKNOWN_SESSION", "Session", "SessionStatus"]
