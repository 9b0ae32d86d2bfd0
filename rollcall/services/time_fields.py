# rollcall/services/time_fields.py
from __future__ import annotations

from datetime import time

from rollcall.core.errors import MalformedTemporalField


def parse_hhmm(value: str | None, field: str = "time") -> time:
    """
    Parse an `HH:MM` (or legacy `HH:MM:SS`) string into a `time`.

    Raises
    ------
    MalformedTemporalField
        If the value is missing, has no `:` separator, or is out of range.
    """
    if not isinstance(value, str) or ":" not in value:
        raise MalformedTemporalField(field, value)

    parts = value.strip().split(":")
    if len(parts) > 3:
        raise MalformedTemporalField(field, value)

    try:
        numbers = [int(p) for p in parts]
        return time(*numbers)
    except (TypeError, ValueError) as exc:
        raise MalformedTemporalField(field, value) from exc
