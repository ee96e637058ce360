"""
Name: Session status helpers

Responsibilities:
  - Format the remaining session time for the status badge
  - Decide whether the session is "expiring soon"

Collaborators:
  - domain.session.SessionInfo
  - application/session_manager.py (LoggingSessionNotifier)
"""

from __future__ import annotations

from typing import Optional

from ..domain.session import SessionInfo

EXPIRING_SOON_SECONDS = 600


def format_time_remaining(seconds: Optional[float]) -> str:
    """
    "1h 5m" / "4m 10s" / "30s"; "Unknown" when there is no value.

    Zero counts as "no value" as well.
    """
    if not seconds:
        return "Unknown"

    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def is_expiring_soon(
    info: SessionInfo, threshold: float = EXPIRING_SOON_SECONDS
) -> bool:
    remaining = info.time_until_expiry
    return bool(info.is_authenticated and remaining is not None and remaining < threshold)
