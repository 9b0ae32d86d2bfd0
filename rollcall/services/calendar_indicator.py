# rollcall/services/calendar_indicator.py
from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from rollcall.schemas.calendar import CalendarDay, CalendarIndicator
from rollcall.schemas.session import SessionStatus
from rollcall.services.session_status import SessionStatusClassifier

# Highest priority first
_PRIORITY = (CalendarIndicator.RED, CalendarIndicator.YELLOW, CalendarIndicator.GREEN)


class CalendarIndicatorAggregator:
    """
    Reduces all sessions on a calendar day to a single indicator.

    Rules
    -----
    1) Only non-cancelled sessions starting on the target date count.
       None of them => no indicator (None).
    2) Per session: RED if Past, else YELLOW if edited since creation
       (updated_at > created_at), else GREEN.
    3) Day color is a strict priority reduction: any RED => RED,
       else any YELLOW => YELLOW, else GREEN.
    """

    @staticmethod
    def session_indicator(session: Any, now: datetime) -> CalendarIndicator:
        if SessionStatusClassifier.status(session, now) is SessionStatus.PAST:
            return CalendarIndicator.RED

        created_at = getattr(session, "created_at", None)
        updated_at = getattr(session, "updated_at", None)
        if created_at is not None and updated_at is not None and updated_at > created_at:
            return CalendarIndicator.YELLOW

        return CalendarIndicator.GREEN

    @staticmethod
    def day_indicator(
        sessions: Iterable[Any],
        target: date,
        now: datetime,
    ) -> CalendarIndicator | None:
        """
        Aggregate indicator for `target`, or None when nothing is scheduled.
        """
        colors = {
            CalendarIndicatorAggregator.session_indicator(s, now)
            for s in sessions
            if s.start_date == target and not getattr(s, "is_cancelled", False)
        }
        if not colors:
            return None

        for color in _PRIORITY:
            if color in colors:
                return color
        return None  # pragma: no cover

    @staticmethod
    def month_indicators(
        sessions: Iterable[Any],
        year: int,
        month: int,
        now: datetime,
    ) -> list[CalendarDay]:
        """
        Indicators for every day of the given month, in date order.
        """
        sessions = list(sessions)
        days_in_month = calendar.monthrange(year, month)[1]

        days: list[CalendarDay] = []
        for day_number in range(1, days_in_month + 1):
            day = date(year, month, day_number)
            days.append(
                CalendarDay(
                    day=day,
                    indicator=CalendarIndicatorAggregator.day_indicator(sessions, day, now),
                )
            )
        return days
