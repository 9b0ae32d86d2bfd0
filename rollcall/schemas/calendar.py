# rollcall/schemas/calendar.py
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class CalendarIndicator(str, Enum):
    """
    Color of the dot rendered under a calendar day.

    - RED    : at least one session that day is Past
    - YELLOW : no Past session, but at least one was edited after creation
    - GREEN  : only unedited, not-yet-past sessions

    Days without (non-cancelled) sessions have no indicator at all.
    """

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class CalendarDay(BaseModel):
    day: date = Field(..., examples=["2025-03-01"])
    indicator: CalendarIndicator | None = Field(
        None,
        description="Aggregated indicator for the day, or null when nothing is scheduled.",
        examples=["green"],
    )


class CalendarMonth(BaseModel):
    """
    Indicators for every day of one calendar month.
    """

    year: int = Field(..., examples=[2025])
    month: int = Field(..., ge=1, le=12, examples=[3])
    days: list[CalendarDay]
