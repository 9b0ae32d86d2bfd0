# rollcall/api/dependencies/internal_auth.py
from http import HTTPStatus
from typing import Optional

from fastapi import Header, HTTPException

from rollcall.core.config import get_settings

# Environments where the scheduler hooks may run without a key
OPEN_ENVIRONMENTS = ("local", "test")


async def verify_internal_api_key(
    internal_api_key: Optional[str] = Header(
        default=None,
        alias="X-Internal-Api-Key",
        description="Shared secret of the scheduler calling /internal endpoints.",
    ),
) -> None:
    """
    Guard for the scheduler-only /internal routes (the completion sweep).

    Rules
    -----
    - A configured INTERNAL_API_KEY is always enforced: the header must match
      it, otherwise 401.
    - Without a configured key, local and test environments let the sweep run
      unauthenticated; every other environment answers 500 so a deployment
      missing its key is noticed instead of exposing the sweep.
    """
    settings = get_settings()
    expected = getattr(settings, "INTERNAL_API_KEY", None)
    env = (settings.APP_ENV or "local").lower()

    if not expected:
        if env in OPEN_ENVIRONMENTS:
            return
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"INTERNAL_API_KEY is not configured for the '{env}' environment.",
        )

    if internal_api_key != expected:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED,
            detail="Invalid or missing internal API key.",
        )
