# rollcall/services/check_in_window.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from rollcall.services.session_status import SessionStatusClassifier, wall_clock


@dataclass(frozen=True)
class CheckInTiming:
    is_late: bool
    late_by_minutes: int
    allowed: bool


class CheckInWindow:
    """
    Timing rules applied when an attendee scans a session's QR code.

    Scanning is gated on the calendar date (`is_today`), not on Live/Past
    status. Lateness is measured from the session start against the
    organization's lateness limit, which has nothing to do with the
    post-end buffer used for status.
    """

    @staticmethod
    def scan_block_reason(session: Any, now: datetime) -> str | None:
        """
        Return why scanning is not possible right now, or None if it is.
        """
        classification = SessionStatusClassifier.classify(session, now)
        if classification.is_cancelled:
            return "Session has been cancelled."
        if getattr(session, "is_completed", False):
            return "Session has already been completed."
        if not classification.is_today:
            return "Attendance can only be marked on the day of the session."
        return None

    @staticmethod
    def can_scan(session: Any, now: datetime) -> bool:
        return CheckInWindow.scan_block_reason(session, now) is None

    @staticmethod
    def evaluate_check_in(
        session: Any,
        check_in_at: datetime,
        late_limit_minutes: int,
        strict: bool = False,
    ) -> CheckInTiming:
        """
        Evaluate a check-in instant.

        Rules
        -----
        - On time while check_in_at <= start + late_limit_minutes.
        - Otherwise late by the whole minutes elapsed since start.
        - Strict organizations reject late check-ins (allowed=False).
        """
        check_in_at = wall_clock(check_in_at)
        start, _ = SessionStatusClassifier.session_bounds(session)
        deadline = start + timedelta(minutes=late_limit_minutes)

        if check_in_at <= deadline:
            return CheckInTiming(is_late=False, late_by_minutes=0, allowed=True)

        late_by = int((check_in_at - start).total_seconds() // 60)
        return CheckInTiming(is_late=True, late_by_minutes=late_by, allowed=not strict)
