# rollcall/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rollcall.api.routes import classes, health, internal, sessions
from rollcall.core.config import get_settings
from rollcall.core.logging import get_logger, setup_logging
from rollcall.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    get_logger(__name__).info("startup_complete", app_name=app.title)
    yield


def create_app() -> FastAPI:
    """
    Application factory for the Rollcall session service.
    """
    settings = get_settings()
    setup_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Backend service for class batches and their sessions: expands recurrences\n"
            "into dated sessions, classifies sessions as Upcoming/Live/Past, renders\n"
            "calendar indicators and gates QR attendance scanning."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Routers
    app.include_router(health.router)
    app.include_router(classes.router)
    app.include_router(sessions.router)
    app.include_router(internal.router)

    return app


app = create_app()
