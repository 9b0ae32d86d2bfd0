# rollcall/services/recurrence_expander.py
from __future__ import annotations

import calendar
from datetime import date, timedelta

from rollcall.core.errors import InvalidRecurrence, MalformedTemporalField
from rollcall.core.logging import get_logger
from rollcall.schemas.recurrence import (
    Frequency,
    Occurrence,
    RecurrenceDescriptor,
    Weekday,
)
from rollcall.services.time_fields import parse_hhmm

logger = get_logger(__name__)


class RecurrenceExpander:
    """
    Expands a RecurrenceDescriptor into the ordered list of dates a batch
    materializes as sessions.

    Rules
    -----
    1) OneTime   => [start_date]
    2) Daily     => every date in [start_date, end_date]
    3) Weekly    => dates in [start_date, end_date] whose weekday is selected
    4) Monthly   => start_date's day-of-month once per month up to end_date;
                    months without that day (e.g. the 31st in April) are skipped
    5) Random    => custom_dates, deduplicated and sorted ascending

    The descriptor is validated completely before any date is produced, so an
    invalid descriptor never yields a partial expansion.
    """

    @staticmethod
    def expand(
        descriptor: RecurrenceDescriptor,
        today: date | None = None,
    ) -> list[Occurrence]:
        """
        Produce the occurrences for `descriptor`.

        Parameters
        ----------
        descriptor:
            Recurrence to expand.
        today:
            When given (batch creation time), Random dates before `today` are
            rejected.

        Raises
        ------
        InvalidRecurrence
            On any inconsistent descriptor.
        """
        RecurrenceExpander.validate(descriptor, today=today)

        frequency = descriptor.frequency
        if frequency is Frequency.RANDOM:
            dates = sorted(set(descriptor.custom_dates))
        elif frequency is Frequency.ONE_TIME:
            dates = [descriptor.start_date]
        elif frequency is Frequency.DAILY:
            dates = list(_each_day(descriptor.start_date, descriptor.end_date))
        elif frequency is Frequency.WEEKLY:
            selected = set(descriptor.weekly_days)
            dates = [
                d
                for d in _each_day(descriptor.start_date, descriptor.end_date)
                if Weekday.of(d) in selected
            ]
        else:
            dates = _monthly(descriptor.start_date, descriptor.end_date)

        logger.debug(
            "recurrence_expanded",
            frequency=frequency.value,
            occurrences=len(dates),
        )

        return [
            Occurrence(
                session_date=d,
                start_time=descriptor.start_time,
                end_time=descriptor.end_time,
            )
            for d in dates
        ]

    @staticmethod
    def validate(descriptor: RecurrenceDescriptor, today: date | None = None) -> None:
        """
        Check `descriptor` without expanding it. Raises InvalidRecurrence.
        """
        try:
            start_time = parse_hhmm(descriptor.start_time, "start_time")
            end_time = parse_hhmm(descriptor.end_time, "end_time")
        except MalformedTemporalField as exc:
            raise InvalidRecurrence(str(exc)) from exc

        if start_time >= end_time:
            raise InvalidRecurrence("end_time must be after start_time")

        frequency = descriptor.frequency

        if frequency is Frequency.RANDOM:
            if not descriptor.custom_dates:
                raise InvalidRecurrence(
                    "At least one custom date is required for Random recurrences."
                )
            if today is not None:
                past = sorted(d for d in descriptor.custom_dates if d < today)
                if past:
                    raise InvalidRecurrence(
                        f"Custom dates must not be in the past: {past[0].isoformat()}"
                    )
            return

        if descriptor.start_date is None:
            raise InvalidRecurrence(f"start_date is required for {frequency.value} recurrences.")

        if descriptor.end_date is not None and descriptor.end_date < descriptor.start_date:
            raise InvalidRecurrence("end_date must be greater than or equal to start_date")

        if frequency is Frequency.ONE_TIME:
            return

        if descriptor.end_date is None:
            raise InvalidRecurrence(f"end_date is required for {frequency.value} recurrences.")

        if frequency is Frequency.WEEKLY and not descriptor.weekly_days:
            raise InvalidRecurrence("At least one weekday is required for Weekly recurrences.")


def _each_day(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def _monthly(start: date, end: date) -> list[date]:
    dates: list[date] = []
    year, month = start.year, start.month

    while date(year, month, 1) <= end:
        days_in_month = calendar.monthrange(year, month)[1]
        if start.day <= days_in_month:
            candidate = date(year, month, start.day)
            if candidate > end:
                break
            dates.append(candidate)

        month += 1
        if month > 12:
            month = 1
            year += 1

    return dates
