"""
Timestamp helpers for values written to the database.
"""
from datetime import datetime, timezone


def utcnow_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()
