# rollcall/schemas/completion_sweep.py
from datetime import datetime

from pydantic import BaseModel, Field


class CompletionSweepSummary(BaseModel):
    """
    Summary payload returned by the /internal/run-completion-sweep endpoint.
    """

    reference_time: datetime = Field(
        ...,
        description="Organization wall-clock instant the sweep classified sessions against.",
        examples=["2025-03-01T18:30:00"],
    )
    sessions_evaluated: int = Field(
        ...,
        description="Open (not completed, not cancelled) sessions inspected in this run.",
        examples=[12],
    )
    sessions_completed: int = Field(
        ...,
        description="Sessions whose cutoff had passed and were marked completed.",
        examples=[3],
    )
    completed_session_ids: list[int] = Field(
        default_factory=list,
        description="Identifiers of the sessions marked completed in this run.",
    )
