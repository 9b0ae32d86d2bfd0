# rollcall/api/dependencies/clock.py
from datetime import datetime
from zoneinfo import ZoneInfo

from rollcall.core.config import get_settings


def get_now() -> datetime:
    """
    Current organization wall-clock time (naive, in ORG_TIMEZONE).

    Overridden in tests with a fixed instant.
    """
    settings = get_settings()
    return datetime.now(ZoneInfo(settings.ORG_TIMEZONE)).replace(tzinfo=None)
