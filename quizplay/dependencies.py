"""
Request-scoped dependencies shared by the routers
"""
from typing import Optional

from fastapi import Header, HTTPException

from quizplay.services.session_engine import SessionEngine, session_engine


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> int:
    """
    Authenticated user id forwarded by the gateway in X-User-Id

    Identity is established upstream; this only checks the header is a
    positive integer.
    """
    if not x_user_id or not x_user_id.isdigit() or int(x_user_id) < 1:
        raise HTTPException(status_code=401, detail="Authentication required")
    return int(x_user_id)


def get_session_engine() -> SessionEngine:
    return session_engine
