# rollcall/api/routes/internal.py
from datetime import datetime
from http import HTTPStatus

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rollcall.api.dependencies.clock import get_now
from rollcall.api.dependencies.internal_auth import verify_internal_api_key
from rollcall.db.session import get_db
from rollcall.schemas.completion_sweep import CompletionSweepSummary
from rollcall.services.completion_sweep import run_completion_sweep

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


@router.post(
    "/run-completion-sweep",
    response_model=CompletionSweepSummary,
    status_code=HTTPStatus.OK,
    summary="Mark ended sessions as completed",
    description=(
        "Classifies every open session (not completed, not cancelled) at the "
        "current organization time and marks those that are `Past` as completed.\n\n"
        "Intended to be called from a scheduler, roughly once a minute. Protected via "
        "the `X-Internal-Api-Key` header when configured. Safe to call repeatedly."
    ),
    responses={
        200: {
            "description": "Sweep executed. A summary is returned.",
            "content": {
                "application/json": {
                    "example": {
                        "reference_time": "2025-03-01T18:30:00",
                        "sessions_evaluated": 12,
                        "sessions_completed": 3,
                        "completed_session_ids": [4, 5, 9],
                    }
                }
            },
        },
        401: {"description": "Missing or invalid internal API key (if configured)."},
    },
)
async def trigger_completion_sweep(
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> CompletionSweepSummary:
    return await run_completion_sweep(db=db, now=now)
