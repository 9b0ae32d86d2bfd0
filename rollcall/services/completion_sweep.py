# rollcall/services/completion_sweep.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rollcall.core.logging import get_logger
from rollcall.models.session import SessionRecord
from rollcall.schemas.completion_sweep import CompletionSweepSummary
from rollcall.schemas.session import SessionOccurrence, SessionStatus
from rollcall.services.session_status import SessionStatusClassifier, wall_clock

logger = get_logger(__name__)


async def run_completion_sweep(db: AsyncSession, now: datetime) -> CompletionSweepSummary:
    """
    Mark every open session whose cutoff has passed as completed.

    Steps
    -----
    1) Load sessions that are neither completed nor cancelled.
    2) Classify each against `now`.
    3) Past sessions get `is_completed = True`.

    Idempotent: a second run at the same instant finds nothing to complete.
    """
    now = wall_clock(now)

    stmt = select(SessionRecord).where(
        SessionRecord.is_completed.is_(False),
        SessionRecord.is_cancelled.is_(False),
    )
    result = await db.execute(stmt)
    open_sessions = list(result.scalars().all())

    completed_ids: list[int] = []
    for record in open_sessions:
        occurrence = SessionOccurrence.model_validate(record)
        if SessionStatusClassifier.status(occurrence, now) is SessionStatus.PAST:
            record.is_completed = True
            completed_ids.append(record.id)

    if completed_ids:
        await db.commit()

    logger.info(
        "completion_sweep_finished",
        reference_time=now.isoformat(),
        evaluated=len(open_sessions),
        completed=len(completed_ids),
    )

    return CompletionSweepSummary(
        reference_time=now,
        sessions_evaluated=len(open_sessions),
        sessions_completed=len(completed_ids),
        completed_session_ids=completed_ids,
    )
