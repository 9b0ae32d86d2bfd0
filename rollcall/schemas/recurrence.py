# rollcall/schemas/recurrence.py
from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

HHMM_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"


class Frequency(str, Enum):
    """
    How a class batch repeats.
    """

    ONE_TIME = "OneTime"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    RANDOM = "Random"


class Weekday(str, Enum):
    """
    Day names accepted in `weekly_days`, ordered like `date.weekday()`.
    """

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class RecurrenceDescriptor(BaseModel):
    """
    Describes how a batch materializes into dated sessions.

    Rules
    -----
    - OneTime uses `start_date` only.
    - Daily / Weekly / Monthly expand over `[start_date, end_date]`.
    - Weekly additionally requires a non-empty `weekly_days`.
    - Random ignores `start_date`/`end_date` and uses `custom_dates`.
    """

    model_config = ConfigDict(frozen=True)

    frequency: Frequency = Field(
        ...,
        description="Recurrence kind.",
        examples=["Weekly"],
    )
    start_date: date | None = Field(
        None,
        description="First date of the recurrence window (unused for Random).",
        examples=["2025-01-06"],
    )
    end_date: date | None = Field(
        None,
        description="Last date (inclusive) of the recurrence window for Daily/Weekly/Monthly.",
        examples=["2025-01-26"],
    )
    weekly_days: tuple[Weekday, ...] = Field(
        default=(),
        description="Days of the week on which Weekly sessions occur.",
        examples=[["Monday", "Wednesday"]],
    )
    custom_dates: tuple[date, ...] = Field(
        default=(),
        description="Explicit session dates for Random recurrences.",
    )
    start_time: str = Field(
        ...,
        pattern=HHMM_PATTERN,
        description="Shared session start time (HH:MM, 24-hour).",
        examples=["09:00"],
    )
    end_time: str = Field(
        ...,
        pattern=HHMM_PATTERN,
        description="Shared session end time (HH:MM, 24-hour).",
        examples=["10:00"],
    )


class Occurrence(BaseModel):
    """
    One concrete date produced by expanding a RecurrenceDescriptor.
    """

    model_config = ConfigDict(frozen=True)

    session_date: date
    start_time: str
    end_time: str
