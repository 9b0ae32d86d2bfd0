# rollcall/services/session_views.py
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from rollcall.schemas.class_batch import ClassBatchRead
from rollcall.schemas.session import SessionOccurrence, SessionRead
from rollcall.services.batch_planner import latest_session_end
from rollcall.services.session_status import SessionStatusClassifier


def session_read(record: Any, now: datetime) -> SessionRead:
    """
    Build the public representation of a stored session, classified at `now`.
    """
    occurrence = SessionOccurrence.model_validate(record)
    return SessionRead(
        **occurrence.model_dump(),
        classification=SessionStatusClassifier.classify(occurrence, now),
    )


def batch_read(batch: Any, sessions: Iterable[Any] = ()) -> ClassBatchRead:
    """
    Build the public representation of a class batch, including the latest
    end of its (non-cancelled) sessions.
    """
    occurrences = [SessionOccurrence.model_validate(s) for s in sessions]
    read = ClassBatchRead.model_validate(batch)
    return read.model_copy(update={"latest_session_end": latest_session_end(occurrences)})
