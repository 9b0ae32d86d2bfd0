# rollcall/services/session_filter.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from rollcall.core.constants import SESSION_LIST_DISPLAY_LIMIT
from rollcall.schemas.session import SessionStatus
from rollcall.services.session_status import SessionStatusClassifier


@dataclass(frozen=True)
class SessionListPlan:
    visible: list[Any] = field(default_factory=list)
    remaining_count: int = 0

    @property
    def hidden_count(self) -> int:
        """`remaining_count` clamped at zero for display."""
        return max(self.remaining_count, 0)


class SessionFilterPlanner:
    """
    Derives the visible part of a session list.

    Rules
    -----
    1) A selected date shows every session starting that day (past or not),
       without limit; remaining_count is 0.
    2) Without a date and show_past=False, Past sessions are dropped first.
    3) Without a date, the eligible list is truncated to `limit` in list order
       and remaining_count = eligible - limit (negative when under the limit).
    """

    @staticmethod
    def plan(
        sessions: Sequence[Any],
        now: datetime,
        selected_date: date | None = None,
        show_past: bool = False,
        limit: int = SESSION_LIST_DISPLAY_LIMIT,
    ) -> SessionListPlan:
        if selected_date is not None:
            return SessionListPlan(
                visible=[s for s in sessions if s.start_date == selected_date],
                remaining_count=0,
            )

        if show_past:
            eligible = list(sessions)
        else:
            eligible = [
                s
                for s in sessions
                if SessionStatusClassifier.status(s, now) is not SessionStatus.PAST
            ]

        return SessionListPlan(
            visible=eligible[:limit],
            remaining_count=len(eligible) - limit,
        )
