# rollcall/services/session_status.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any

from rollcall.core.constants import END_OF_DAY, SESSION_END_BUFFER
from rollcall.core.errors import MalformedTemporalField
from rollcall.core.logging import get_logger
from rollcall.schemas.session import SessionClassification, SessionStatus
from rollcall.services.time_fields import parse_hhmm

logger = get_logger(__name__)


def wall_clock(now: datetime) -> datetime:
    """
    Drop tzinfo so `now` compares against naive session wall-clock datetimes.

    Session dates and HH:MM times are local to the organization; an aware
    `now` is read in its own zone.
    """
    if now.tzinfo is not None:
        return now.replace(tzinfo=None)
    return now


class SessionStatusClassifier:
    """
    Classifies a single session as Upcoming, Live or Past relative to `now`.

    This is the only place session timing is derived. List views, calendars,
    edit guards, scan gating and the completion sweep all call into it.

    Rules (first match wins)
    -----
    1) is_cancelled => Upcoming, with `is_cancelled` flagged separately
    2) is_completed => Past
    3) start = start_date + start_time
       end   = (end_date or start_date) + (end_time or 23:59:59.999)
       no end_date and end < start => end rolls to the next day (overnight)
    4) cutoff = end + SESSION_END_BUFFER (10 minutes)
    5) now < start => Upcoming; start <= now <= cutoff => Live; else Past

    `is_today` compares calendar dates only: a session can be today and Past.

    Sessions are accepted duck-typed (pydantic SessionOccurrence or ORM rows).
    """

    @staticmethod
    def session_bounds(session: Any) -> tuple[datetime, datetime]:
        """
        Return the (start, end) wall-clock datetimes of `session`, without buffer.

        Malformed or missing times never raise: the start falls back to the
        start of the day and the end to the end of the day.
        """
        start_date: date = session.start_date
        end_date: date | None = getattr(session, "end_date", None)

        start_time = _soft_time(session, "start_time", time.min)
        end_time = _soft_time(session, "end_time", END_OF_DAY)

        start = datetime.combine(start_date, start_time)
        end = datetime.combine(end_date or start_date, end_time)

        if end_date is None and end < start:
            end += timedelta(days=1)

        return start, end

    @staticmethod
    def cutoff(session: Any) -> datetime:
        """
        Instant after which a session stops being Live.
        """
        _, end = SessionStatusClassifier.session_bounds(session)
        return end + SESSION_END_BUFFER

    @staticmethod
    def status(session: Any, now: datetime) -> SessionStatus:
        return SessionStatusClassifier.classify(session, now).status

    @staticmethod
    def classify(session: Any, now: datetime) -> SessionClassification:
        """
        Determine the SessionClassification of `session` at `now`.
        """
        now = wall_clock(now)
        is_today = now.date() == session.start_date
        is_cancelled = bool(getattr(session, "is_cancelled", False))

        # Rule 1: cancellation is a flag, not a status
        if is_cancelled:
            return SessionClassification(
                status=SessionStatus.UPCOMING,
                is_today=is_today,
                is_cancelled=True,
            )

        # Rule 2: completed sessions are over regardless of the clock
        if getattr(session, "is_completed", False):
            return SessionClassification(status=SessionStatus.PAST, is_today=is_today)

        start, end = SessionStatusClassifier.session_bounds(session)
        cutoff = end + SESSION_END_BUFFER

        if now < start:
            status = SessionStatus.UPCOMING
        elif now <= cutoff:
            status = SessionStatus.LIVE
        else:
            status = SessionStatus.PAST

        return SessionClassification(status=status, is_today=is_today)


def _soft_time(session: Any, field: str, fallback: time) -> time:
    value = getattr(session, field, None)
    if value is None:
        return fallback
    try:
        return parse_hhmm(value, field)
    except MalformedTemporalField as exc:
        logger.warning(
            "malformed_session_time",
            session_id=getattr(session, "id", None),
            field=exc.field,
            value=exc.value,
            fallback=fallback.isoformat(),
        )
        return fallback
