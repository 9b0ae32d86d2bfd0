# rollcall/services/sessions.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rollcall.core.config import Settings
from rollcall.core.logging import get_logger
from rollcall.models.session import SessionRecord
from rollcall.schemas.session import ScanEligibility, SessionOccurrence, SessionUpdate
from rollcall.services.batch_planner import SHARED_FIELDS, ensure_editable, merge_shared_updates
from rollcall.services.check_in_window import CheckInWindow
from rollcall.services.session_status import SessionStatusClassifier

logger = get_logger(__name__)


async def get_session(db: AsyncSession, session_id: int) -> SessionRecord:
    """
    Fetch a session by id.

    Raises
    ------
    LookupError
        If the session does not exist.
    """
    result = await db.execute(select(SessionRecord).where(SessionRecord.id == session_id))
    record = result.scalar_one_or_none()
    if record is None:
        raise LookupError(f"Session with id={session_id} not found.")
    return record


async def list_sessions(
    db: AsyncSession,
    organization_prefix: str | None = None,
    class_batch_id: int | None = None,
) -> list[SessionRecord]:
    """
    Sessions in chronological order, optionally narrowed to one organization
    or one batch.
    """
    stmt = select(SessionRecord)
    if organization_prefix is not None:
        stmt = stmt.where(SessionRecord.organization_prefix == organization_prefix)
    if class_batch_id is not None:
        stmt = stmt.where(SessionRecord.class_batch_id == class_batch_id)

    stmt = stmt.order_by(
        SessionRecord.start_date.asc(),
        SessionRecord.start_time.asc(),
        SessionRecord.id.asc(),
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_session(
    db: AsyncSession,
    session_id: int,
    payload: SessionUpdate,
    settings: Settings,
    now: datetime,
) -> SessionRecord:
    """
    Apply a partial update to one session.

    Raises
    ------
    LookupError
        Unknown session.
    SessionLocked
        The session has already ended.
    InvalidSessionPayload
        Location, virtual link, roster or time range are inconsistent.
    """
    record = await get_session(db, session_id)
    occurrence = SessionOccurrence.model_validate(record)
    ensure_editable(occurrence, now)

    provided = payload.model_fields_set
    changes = {f: getattr(payload, f) for f in SHARED_FIELDS if f in provided}
    values = merge_shared_updates(occurrence, changes, settings)
    if payload.name:
        values["name"] = payload.name

    for field, value in values.items():
        setattr(record, field, value)

    await db.commit()
    await db.refresh(record)

    logger.info("session_updated", session_id=record.id, fields=sorted(provided))
    return record


async def cancel_session(
    db: AsyncSession,
    session_id: int,
    reason: str | None,
    now: datetime,
) -> SessionRecord:
    """
    Flag a session as cancelled. Cancelling twice only refreshes the reason.

    Raises
    ------
    LookupError
        Unknown session.
    SessionLocked
        The session has already ended.
    """
    record = await get_session(db, session_id)
    ensure_editable(SessionOccurrence.model_validate(record), now)

    record.is_cancelled = True
    record.cancellation_reason = reason
    await db.commit()
    await db.refresh(record)

    logger.info("session_cancelled", session_id=record.id, reason=reason)
    return record


def scan_eligibility(record: SessionRecord, now: datetime, settings: Settings) -> ScanEligibility:
    """
    Whether attendees may scan the session's QR code at `now`, and how the
    check-in would be timed.
    """
    occurrence = SessionOccurrence.model_validate(record)
    classification = SessionStatusClassifier.classify(occurrence, now)
    reason = CheckInWindow.scan_block_reason(occurrence, now)

    eligibility = ScanEligibility(
        session_id=record.id,
        can_scan=reason is None,
        is_today=classification.is_today,
        status=classification.status,
        reason=reason,
    )
    if reason is not None:
        return eligibility

    timing = CheckInWindow.evaluate_check_in(
        occurrence,
        now,
        settings.LATE_ATTENDANCE_LIMIT_MINUTES,
        strict=settings.STRICT_ATTENDANCE,
    )
    return eligibility.model_copy(
        update={
            "is_late": timing.is_late,
            "late_by_minutes": timing.late_by_minutes,
            "check_in_allowed": timing.allowed,
        }
    )
