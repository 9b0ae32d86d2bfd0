# rollcall/services/class_batches.py
from __future__ import annotations

from datetime import date as date_type
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rollcall.core.config import Settings
from rollcall.core.logging import get_logger
from rollcall.models.class_batch import ClassBatch
from rollcall.models.session import SessionRecord
from rollcall.models.timestamps import utcnow
from rollcall.schemas.class_batch import (
    ClassBatchCreate,
    ClassBatchRead,
    ClassBatchUpdate,
    SharedSessionFields,
)
from rollcall.schemas.recurrence import Frequency, RecurrenceDescriptor
from rollcall.schemas.session import SessionOccurrence
from rollcall.services.batch_planner import (
    SHARED_FIELDS,
    build_descriptor,
    build_session_payloads,
    is_preserved_past,
    merge_shared_updates,
    resolve_times,
    schedule_changed,
    shared_session_values,
    upcoming_occurrences,
)
from rollcall.services.recurrence_expander import RecurrenceExpander

logger = get_logger(__name__)


async def get_class_batch(db: AsyncSession, class_batch_id: int) -> ClassBatch:
    """
    Fetch a batch by id.

    Raises
    ------
    LookupError
        If the batch does not exist.
    """
    result = await db.execute(select(ClassBatch).where(ClassBatch.id == class_batch_id))
    batch = result.scalar_one_or_none()
    if batch is None:
        raise LookupError(f"ClassBatch with id={class_batch_id} not found.")
    return batch


async def list_batch_sessions(db: AsyncSession, class_batch_id: int) -> list[SessionRecord]:
    result = await db.execute(
        select(SessionRecord)
        .where(SessionRecord.class_batch_id == class_batch_id)
        .order_by(SessionRecord.start_date.asc(), SessionRecord.id.asc())
    )
    return list(result.scalars().all())


def _store_recurrence(batch: ClassBatch, descriptor: RecurrenceDescriptor) -> None:
    batch.frequency = descriptor.frequency.value
    batch.start_date = descriptor.start_date
    batch.end_date = descriptor.end_date
    batch.weekly_days = [d.value for d in descriptor.weekly_days]
    batch.custom_dates = [d.isoformat() for d in descriptor.custom_dates]


def _new_records(payloads: list[dict[str, Any]]) -> list[SessionRecord]:
    # Same stamp for both columns: a fresh session must not look edited.
    stamp = utcnow()
    return [SessionRecord(**p, created_at=stamp, updated_at=stamp) for p in payloads]


def _apply(record: SessionRecord, values: dict[str, Any]) -> bool:
    changed = False
    for field, value in values.items():
        if getattr(record, field) != value:
            setattr(record, field, value)
            changed = True
    return changed


async def create_class_batch(
    db: AsyncSession,
    payload: ClassBatchCreate,
    settings: Settings,
    today: date_type,
) -> tuple[ClassBatch, list[SessionRecord]]:
    """
    Create a class batch and, when requested, its sessions.

    Steps
    -----
    1) Validate and expand the recurrence (nothing is written on failure).
    2) Validate shared session fields and the roster.
    3) Persist the batch, then one session per occurrence.

    Raises
    ------
    InvalidRecurrence, InvalidSessionPayload
        On invalid input; no rows are written.
    """
    descriptor: RecurrenceDescriptor | None = None
    occurrences = []
    shared_values: dict[str, Any] = {}

    if payload.generate_sessions:
        start_time, end_time = resolve_times(
            payload.start_time, payload.end_time, payload.default_time, settings
        )
        descriptor = build_descriptor(
            payload.frequency,
            payload.start_date,
            payload.end_date,
            payload.weekly_days,
            payload.custom_dates,
            start_time,
            end_time,
        )
        occurrences = RecurrenceExpander.expand(descriptor, today=today)
        shared_values = shared_session_values(payload, settings, payload.default_location)

    batch = ClassBatch(
        name=payload.name,
        description=payload.description,
        default_time=payload.default_time,
        default_location=payload.default_location,
        created_by=payload.created_by,
        organization_prefix=payload.organization_prefix,
        weekly_days=[],
        custom_dates=[],
    )
    if descriptor is not None:
        _store_recurrence(batch, descriptor)

    db.add(batch)
    await db.flush()

    records: list[SessionRecord] = []
    if descriptor is not None:
        records = _new_records(
            build_session_payloads(
                batch.id,
                descriptor,
                occurrences,
                shared_values,
                payload.created_by,
                payload.organization_prefix,
            )
        )
        db.add_all(records)

    await db.commit()

    logger.info(
        "class_batch_created",
        class_batch_id=batch.id,
        frequency=batch.frequency,
        sessions_created=len(records),
    )
    return batch, records


async def update_class_batch(
    db: AsyncSession,
    class_batch_id: int,
    payload: ClassBatchUpdate,
    settings: Settings,
    today: date_type,
) -> tuple[ClassBatch, int, int]:
    """
    Update a batch and optionally push the change to its sessions.

    Behavior
    --------
    - Batch metadata (name, description, defaults) is always applied.
    - With `update_sessions`:
        - Schedule changed: Random batches drop every session; other
          frequencies drop sessions from `today` on. Occurrences on or after
          `today` are regenerated and sessions kept from the past receive the
          provided shared fields.
        - Schedule unchanged: provided shared fields are applied to every
          linked session in place.

    Returns
    -------
    (batch, sessions_updated, sessions_regenerated)

    Raises
    ------
    LookupError
        Unknown batch.
    InvalidRecurrence, InvalidSessionPayload
        On invalid input; nothing is committed.
    """
    batch = await get_class_batch(db, class_batch_id)
    current = ClassBatchRead.model_validate(batch)
    provided = payload.model_fields_set

    if payload.name:
        batch.name = payload.name
    for field in ("description", "default_time", "default_location"):
        if field in provided:
            setattr(batch, field, getattr(payload, field))

    updated = 0
    regenerated = 0

    if payload.update_sessions:
        sessions = await list_batch_sessions(db, class_batch_id)
        changes = {f: getattr(payload, f) for f in SHARED_FIELDS if f in provided}

        if schedule_changed(current, payload):
            updated, regenerated = await _regenerate(
                db, batch, current, sessions, payload, changes, settings, today
            )
        else:
            for record in sessions:
                values = merge_shared_updates(
                    SessionOccurrence.model_validate(record), changes, settings
                )
                if _apply(record, values):
                    updated += 1

    await db.commit()

    logger.info(
        "class_batch_updated",
        class_batch_id=batch.id,
        sessions_updated=updated,
        sessions_regenerated=regenerated,
    )
    return batch, updated, regenerated


async def _regenerate(
    db: AsyncSession,
    batch: ClassBatch,
    current: ClassBatchRead,
    sessions: list[SessionRecord],
    payload: ClassBatchUpdate,
    changes: dict[str, Any],
    settings: Settings,
    today: date_type,
) -> tuple[int, int]:
    provided = payload.model_fields_set
    template = SessionOccurrence.model_validate(sessions[0]) if sessions else None

    start_time, end_time = resolve_times(
        payload.start_time or (template.start_time if template else None),
        payload.end_time or (template.end_time if template else None),
        batch.default_time,
        settings,
    )
    descriptor = build_descriptor(
        payload.frequency or current.frequency,
        payload.start_date if "start_date" in provided else current.start_date,
        payload.end_date if "end_date" in provided else current.end_date,
        payload.weekly_days if payload.weekly_days is not None else current.weekly_days,
        payload.custom_dates if payload.custom_dates is not None else current.custom_dates,
        start_time,
        end_time,
    )

    # Validate everything before touching stored sessions
    occurrences = upcoming_occurrences(descriptor, today)
    if template is not None:
        shared_values = merge_shared_updates(template, changes, settings)
    else:
        shared_values = shared_session_values(
            SharedSessionFields(**changes), settings, batch.default_location
        )

    if descriptor.frequency is Frequency.RANDOM:
        kept: list[SessionRecord] = []
        await db.execute(
            delete(SessionRecord).where(SessionRecord.class_batch_id == batch.id)
        )
    else:
        kept = [s for s in sessions if is_preserved_past(s, today)]
        await db.execute(
            delete(SessionRecord).where(
                SessionRecord.class_batch_id == batch.id,
                SessionRecord.start_date >= today,
            )
        )

    records = _new_records(
        build_session_payloads(
            batch.id,
            descriptor,
            occurrences,
            shared_values,
            batch.created_by,
            batch.organization_prefix,
        )
    )
    db.add_all(records)
    _store_recurrence(batch, descriptor)

    updated = 0
    if changes:
        for record in kept:
            values = merge_shared_updates(
                SessionOccurrence.model_validate(record), changes, settings
            )
            if _apply(record, values):
                updated += 1

    logger.info(
        "class_batch_regenerated",
        class_batch_id=batch.id,
        frequency=descriptor.frequency.value,
        kept=len(kept),
        regenerated=len(records),
    )
    return updated, len(records)
