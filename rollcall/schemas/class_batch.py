# rollcall/schemas/class_batch.py

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from rollcall.schemas.recurrence import HHMM_PATTERN, Frequency, Weekday
from rollcall.schemas.session import (
    AssignedUser,
    LocationSpec,
    SessionRead,
    SessionType,
)


# --------------------------------------------------------------------------
# Fields shared by every session generated from a batch
# --------------------------------------------------------------------------

class SharedSessionFields(BaseModel):
    """
    Session fields copied onto every occurrence of a batch.
    """

    start_time: str | None = Field(
        None,
        pattern=HHMM_PATTERN,
        description="Session start time (HH:MM). Falls back to the batch default time.",
        examples=["09:00"],
    )
    end_time: str | None = Field(
        None,
        pattern=HHMM_PATTERN,
        description="Session end time (HH:MM). Falls back to the configured default.",
        examples=["10:00"],
    )
    session_type: SessionType = Field(
        default=SessionType.PHYSICAL,
        description="PHYSICAL, REMOTE or HYBRID.",
    )
    location: LocationSpec | None = Field(
        None,
        description="Required for PHYSICAL and HYBRID sessions.",
    )
    radius_meters: int | None = Field(
        None,
        gt=0,
        description="Geofence radius in meters for PHYSICAL and HYBRID sessions.",
        examples=[100],
    )
    virtual_link: str | None = Field(
        None,
        description="Meeting URL, required for REMOTE and HYBRID sessions.",
        examples=["https://meet.example.com/abc"],
    )
    assigned_users: list[AssignedUser] = Field(
        default_factory=list,
        description="Serialized roster (see AttendeeRosterManager.serialize).",
    )


# --------------------------------------------------------------------------
# Create schema (POST /classes)
# --------------------------------------------------------------------------

class ClassBatchCreate(SharedSessionFields):
    """
    Schema for creating a class batch, optionally generating its sessions.
    """

    name: str = Field(..., examples=["Morning Yoga"])
    description: str | None = Field(None)
    default_time: str | None = Field(None, pattern=HHMM_PATTERN, examples=["07:00"])
    default_location: str | None = Field(
        None,
        description="Fallback Google Maps link for physical sessions.",
    )
    created_by: str = Field(..., examples=["665f1c2ab1e4"])
    organization_prefix: str = Field(..., examples=["acme"])

    generate_sessions: bool = Field(
        default=False,
        description="If true, expand the recurrence below into sessions.",
    )
    frequency: Frequency | None = Field(None, examples=["Weekly"])
    start_date: date | None = Field(None, examples=["2025-01-06"])
    end_date: date | None = Field(None, examples=["2025-01-26"])
    weekly_days: list[Weekday] = Field(default_factory=list)
    custom_dates: list[date] = Field(default_factory=list)


# --------------------------------------------------------------------------
# Update schema (PATCH /classes/{id})
# --------------------------------------------------------------------------

class ClassBatchUpdate(BaseModel):
    """
    Schema for updating a class batch.

    Batch metadata is applied directly. When `update_sessions` is true the
    remaining fields are pushed to the linked sessions: a changed schedule
    regenerates upcoming sessions, otherwise shared fields are updated in place.
    """

    name: str | None = None
    description: str | None = None
    default_time: str | None = Field(None, pattern=HHMM_PATTERN)
    default_location: str | None = None

    update_sessions: bool = False
    frequency: Frequency | None = None
    start_date: date | None = None
    end_date: date | None = None
    weekly_days: list[Weekday] | None = None
    custom_dates: list[date] | None = None

    start_time: str | None = Field(None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(None, pattern=HHMM_PATTERN)
    session_type: SessionType | None = None
    location: LocationSpec | None = None
    radius_meters: int | None = Field(None, gt=0)
    virtual_link: str | None = None
    assigned_users: list[AssignedUser] | None = None


# --------------------------------------------------------------------------
# Read schemas
# --------------------------------------------------------------------------

class ClassBatchRead(BaseModel):
    """
    Response schema for a class batch.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., examples=[3])
    name: str
    description: str | None = None
    default_time: str | None = None
    default_location: str | None = None
    created_by: str
    organization_prefix: str

    frequency: Frequency | None = None
    start_date: date | None = None
    end_date: date | None = None
    weekly_days: list[Weekday] = Field(default_factory=list)
    custom_dates: list[date] = Field(default_factory=list)

    created_at: datetime | None = None
    updated_at: datetime | None = None

    latest_session_end: datetime | None = Field(
        None,
        description="Latest end datetime among the batch's non-cancelled sessions.",
    )


class ClassBatchCreateResult(BaseModel):
    class_batch: ClassBatchRead
    sessions_created: int = Field(..., examples=[6])
    sessions: list[SessionRead]


class ClassBatchUpdateResult(BaseModel):
    class_batch: ClassBatchRead
    sessions_updated: int = Field(
        ...,
        description="Existing sessions whose shared fields were modified.",
    )
    sessions_regenerated: int = Field(
        ...,
        description="Sessions created by re-expanding a changed schedule.",
    )


class ClassBatchSessions(BaseModel):
    class_batch: ClassBatchRead
    sessions: list[SessionRead]
    count: int
