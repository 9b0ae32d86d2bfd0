# rollcall/api/routes/sessions.py
from datetime import date as date_type, datetime
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rollcall.api.dependencies.clock import get_now
from rollcall.core.config import get_settings
from rollcall.core.errors import SessionLocked
from rollcall.db.session import get_db
from rollcall.schemas.calendar import CalendarMonth
from rollcall.schemas.session import (
    ScanEligibility,
    SessionCancel,
    SessionListPage,
    SessionOccurrence,
    SessionRead,
    SessionUpdate,
)
from rollcall.services.calendar_indicator import CalendarIndicatorAggregator
from rollcall.services.session_filter import SessionFilterPlanner
from rollcall.services.session_views import session_read
from rollcall.services.sessions import (
    cancel_session,
    get_session,
    list_sessions,
    scan_eligibility,
    update_session,
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get(
    "",
    response_model=SessionListPage,
    summary="List sessions for display",
    description=(
        "Return the visible part of the session list.\n\n"
        "- With `date`: every session starting that day, past ones included, no limit.\n"
        "- Without `date`: the first 7 sessions in chronological order; Past sessions "
        "are dropped unless `show_past=true`. `remaining_count` is the number of "
        "eligible sessions beyond the limit (negative when under it); "
        "`hidden_count` is the same value clamped at zero."
    ),
    responses={
        200: {
            "description": "Visible sessions and the overflow count.",
            "content": {
                "application/json": {
                    "example": {"sessions": [], "remaining_count": -7, "hidden_count": 0}
                }
            },
        }
    },
)
async def list_visible_sessions(
    selected_date: date_type | None = Query(
        default=None,
        alias="date",
        description="Show only sessions starting on this date.",
        examples=["2025-03-01"],
    ),
    show_past: bool = Query(default=False, description="Include sessions that have ended."),
    organization_prefix: str | None = Query(default=None, description="Limit to one organization."),
    class_batch_id: int | None = Query(default=None, description="Limit to one class batch."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> SessionListPage:
    records = await list_sessions(db, organization_prefix, class_batch_id)
    occurrences = [SessionOccurrence.model_validate(r) for r in records]

    plan = SessionFilterPlanner.plan(
        occurrences,
        now,
        selected_date=selected_date,
        show_past=show_past,
    )
    return SessionListPage(
        sessions=[session_read(o, now) for o in plan.visible],
        remaining_count=plan.remaining_count,
        hidden_count=plan.hidden_count,
    )


@router.get(
    "/calendar",
    response_model=CalendarMonth,
    summary="Calendar indicators for a month",
    description=(
        "One indicator per day of the month:\n\n"
        "- `red`: at least one session that day has ended\n"
        "- `yellow`: none ended, but at least one was edited after creation\n"
        "- `green`: only unedited upcoming or live sessions\n"
        "- `null`: no (non-cancelled) sessions that day"
    ),
)
async def month_calendar(
    year: int = Query(..., ge=1970, le=9999, examples=[2025]),
    month: int = Query(..., ge=1, le=12, examples=[3]),
    organization_prefix: str | None = Query(default=None, description="Limit to one organization."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> CalendarMonth:
    records = await list_sessions(db, organization_prefix)
    occurrences = [SessionOccurrence.model_validate(r) for r in records]

    return CalendarMonth(
        year=year,
        month=month,
        days=CalendarIndicatorAggregator.month_indicators(occurrences, year, month, now),
    )


@router.get(
    "/{session_id}",
    response_model=SessionRead,
    summary="Get a single session",
    responses={404: {"description": "Session not found."}},
)
async def get_single_session(
    session_id: int = Path(..., description="ID of the session."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> SessionRead:
    try:
        record = await get_session(db, session_id)
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    return session_read(record, now)


@router.patch(
    "/{session_id}",
    response_model=SessionRead,
    summary="Edit a single session",
    description=(
        "Partially update one session. Sessions that have already ended "
        "(status `Past`) are locked and return **409 Conflict**."
    ),
    responses={
        400: {"description": "Inconsistent location, virtual link, roster or times."},
        404: {"description": "Session not found."},
        409: {
            "description": "Session has already ended.",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Session has already ended and can no longer be edited."
                    }
                }
            },
        },
    },
)
async def edit_session(
    payload: SessionUpdate,
    session_id: int = Path(..., description="ID of the session to update."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> SessionRead:
    try:
        record = await update_session(db, session_id, payload, get_settings(), now)
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    except SessionLocked as exc:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc))
    return session_read(record, now)


@router.post(
    "/{session_id}/cancel",
    response_model=SessionRead,
    summary="Cancel a session",
    description=(
        "Flag a session as cancelled. Cancelled sessions keep the status `Upcoming` "
        "with `is_cancelled=true`, are hidden from calendar indicators and cannot be "
        "scanned."
    ),
    responses={
        404: {"description": "Session not found."},
        409: {"description": "Session has already ended."},
    },
)
async def cancel_single_session(
    payload: SessionCancel,
    session_id: int = Path(..., description="ID of the session to cancel."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> SessionRead:
    try:
        record = await cancel_session(db, session_id, payload.reason, now)
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    except SessionLocked as exc:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=str(exc))
    return session_read(record, now)


@router.get(
    "/{session_id}/scan-eligibility",
    response_model=ScanEligibility,
    summary="Check whether a session can be scanned now",
    description=(
        "Scanning is allowed on the session's calendar day only, and never for "
        "cancelled or completed sessions. When allowed, the response also tells "
        "whether a check-in right now would be late and whether the organization "
        "accepts it."
    ),
    responses={404: {"description": "Session not found."}},
)
async def session_scan_eligibility(
    session_id: int = Path(..., description="ID of the session."),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> ScanEligibility:
    try:
        record = await get_session(db, session_id)
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    return scan_eligibility(record, now, get_settings())
