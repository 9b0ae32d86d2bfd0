# rollcall/api/routes/classes.py
from datetime import datetime
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from rollcall.api.dependencies.clock import get_now
from rollcall.core.config import get_settings
from rollcall.db.session import get_db
from rollcall.schemas.class_batch import (
    ClassBatchCreate,
    ClassBatchCreateResult,
    ClassBatchSessions,
    ClassBatchUpdate,
    ClassBatchUpdateResult,
)
from rollcall.services.class_batches import (
    create_class_batch,
    get_class_batch,
    list_batch_sessions,
    update_class_batch,
)
from rollcall.services.session_views import batch_read, session_read

router = APIRouter(prefix="/classes", tags=["Classes"])


@router.post(
    "",
    response_model=ClassBatchCreateResult,
    status_code=HTTPStatus.CREATED,
    summary="Create a class batch",
    description=(
        "Register a new class batch and, when `generate_sessions` is true, expand "
        "its recurrence into concrete sessions.\n\n"
        "Frequencies:\n"
        "- `OneTime`: a single session on `start_date`\n"
        "- `Daily` / `Weekly` / `Monthly`: every matching date up to `end_date`\n"
        "- `Random`: exactly the `custom_dates` (none may be in the past)\n\n"
        "Monthly batches skip months that lack the start day (e.g. the 31st)."
    ),
    responses={
        201: {
            "description": "Batch created; generated sessions are returned.",
            "content": {
                "application/json": {
                    "example": {
                        "class_batch": {
                            "id": 1,
                            "name": "Morning Yoga",
                            "created_by": "665f1c2ab1e4",
                            "organization_prefix": "acme",
                            "frequency": "Weekly",
                            "start_date": "2025-01-06",
                            "end_date": "2025-01-26",
                            "weekly_days": ["Monday", "Wednesday"],
                            "custom_dates": [],
                        },
                        "sessions_created": 6,
                        "sessions": [],
                    }
                }
            },
        },
        400: {
            "description": "Invalid recurrence or session fields.",
            "content": {
                "application/json": {
                    "example": {"detail": "weekly_days must not be empty for Weekly frequency."}
                }
            },
        },
    },
)
async def create_class(
    payload: ClassBatchCreate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> ClassBatchCreateResult:
    """
    Create a batch. Invalid input is rejected before anything is written.
    """
    try:
        batch, records = await create_class_batch(db, payload, get_settings(), now.date())
    except ValueError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc))

    return ClassBatchCreateResult(
        class_batch=batch_read(batch, records),
        sessions_created=len(records),
        sessions=[session_read(r, now) for r in records],
    )


@router.get(
    "/{class_batch_id}",
    response_model=ClassBatchSessions,
    summary="Get a class batch with its sessions",
    responses={
        404: {
            "description": "Class batch not found.",
            "content": {
                "application/json": {"example": {"detail": "ClassBatch with id=42 not found."}}
            },
        },
    },
)
async def get_class(
    class_batch_id: int = Path(..., description="ID of the class batch."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> ClassBatchSessions:
    return await _batch_with_sessions(db, class_batch_id, now)


@router.get(
    "/{class_batch_id}/sessions",
    response_model=ClassBatchSessions,
    summary="List the sessions of a class batch",
    description=(
        "Return every session generated for the batch in chronological order, each "
        "classified as `Upcoming`, `Live` or `Past` at the current organization time."
    ),
    responses={404: {"description": "Class batch not found."}},
)
async def get_class_sessions(
    class_batch_id: int = Path(..., description="ID of the class batch."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> ClassBatchSessions:
    return await _batch_with_sessions(db, class_batch_id, now)


@router.patch(
    "/{class_batch_id}",
    response_model=ClassBatchUpdateResult,
    summary="Update a class batch",
    description=(
        "Update batch metadata. With `update_sessions=true` the change is pushed "
        "to the batch's sessions:\n\n"
        "- **Schedule changed** (frequency, dates, weekly days, custom dates): "
        "`Random` batches are regenerated completely; other frequencies keep "
        "sessions before today and regenerate the rest.\n"
        "- **Schedule unchanged**: times, session type, location, virtual link "
        "and roster are applied to every linked session."
    ),
    responses={
        400: {"description": "Invalid recurrence or session fields."},
        404: {"description": "Class batch not found."},
    },
)
async def update_class(
    payload: ClassBatchUpdate,
    class_batch_id: int = Path(..., description="ID of the class batch to update."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> ClassBatchUpdateResult:
    try:
        batch, updated, regenerated = await update_class_batch(
            db, class_batch_id, payload, get_settings(), now.date()
        )
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc))

    sessions = await list_batch_sessions(db, class_batch_id)
    return ClassBatchUpdateResult(
        class_batch=batch_read(batch, sessions),
        sessions_updated=updated,
        sessions_regenerated=regenerated,
    )


async def _batch_with_sessions(
    db: AsyncSession,
    class_batch_id: int,
    now: datetime,
) -> ClassBatchSessions:
    try:
        batch = await get_class_batch(db, class_batch_id)
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))

    sessions = await list_batch_sessions(db, class_batch_id)
    return ClassBatchSessions(
        class_batch=batch_read(batch, sessions),
        sessions=[session_read(s, now) for s in sessions],
        count=len(sessions),
    )
