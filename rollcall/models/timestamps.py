# rollcall/models/timestamps.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Naive UTC timestamp with microseconds, as stored in created_at/updated_at.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
