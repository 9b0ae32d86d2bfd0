# rollcall/schemas/session.py
from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rollcall.schemas.recurrence import HHMM_PATTERN, Frequency, Weekday


class SessionType(str, Enum):
    """
    How attendees take part in a session.
    """

    PHYSICAL = "PHYSICAL"
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"

    @property
    def needs_location(self) -> bool:
        return self in (SessionType.PHYSICAL, SessionType.HYBRID)

    @property
    def needs_virtual_link(self) -> bool:
        return self in (SessionType.REMOTE, SessionType.HYBRID)


class AttendeeMode(str, Enum):
    """
    Per-attendee check-in mode. PHYSICAL attendees are geofence-verified,
    REMOTE attendees are not.
    """

    PHYSICAL = "PHYSICAL"
    REMOTE = "REMOTE"


class SessionStatus(str, Enum):
    """
    Temporal status of a session relative to a reference instant.
    """

    UPCOMING = "Upcoming"
    LIVE = "Live"
    PAST = "Past"


class LocationType(str, Enum):
    LINK = "LINK"
    COORDS = "COORDS"


class GeoPoint(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, examples=[12.9716])
    longitude: float = Field(..., ge=-180, le=180, examples=[77.5946])


class LocationSpec(BaseModel):
    """
    Geofence anchor for physical attendance: either a Google Maps link or an
    explicit latitude/longitude pair. Carried as opaque data; distance checks
    happen in the scanning client.
    """

    type: LocationType = Field(..., examples=["LINK"])
    link: str | None = Field(
        None,
        description="Google Maps link (when type is LINK).",
        examples=["https://maps.google.com/?q=12.9716,77.5946"],
    )
    geolocation: GeoPoint | None = Field(
        None,
        description="Coordinates (when type is COORDS).",
    )


class Attendee(BaseModel):
    """
    A user that can be selected into a session roster.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., examples=["665f1c2ab1e4"])
    email: str = Field(..., examples=["asha@example.com"])
    first_name: str = Field(..., examples=["Asha"])
    last_name: str = Field(..., examples=["Rao"])


class AssignedUser(Attendee):
    """
    Roster entry persisted on a session.

    `mode` is None only for rows written before per-user modes existed.
    """

    mode: AttendeeMode | None = Field(None, examples=["PHYSICAL"])


def _date_part(value: object) -> object:
    # Stored dates may arrive as full ISO timestamps, e.g. "2025-03-01T00:00:00.000Z"
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    if isinstance(value, datetime):
        return value.date()
    return value


class SessionOccurrence(BaseModel):
    """
    One concrete dated session as stored by the persistence layer.

    Time fields are deliberately plain strings: rows may come from older schema
    versions, and the status classifier tolerates malformed values.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | None = Field(None, description="Database identifier of the session.")
    class_batch_id: int | None = Field(
        None,
        description="Identifier of the class batch this session was generated from.",
    )
    name: str = Field("", examples=["Session - 2025-03-01"])
    frequency: Frequency | None = Field(None, examples=["Weekly"])

    start_date: date = Field(..., examples=["2025-03-01"])
    end_date: date | None = Field(
        None,
        description="Present only for sessions spanning several days.",
    )
    start_time: str | None = Field(None, examples=["09:00"])
    end_time: str | None = Field(None, examples=["10:00"])

    session_type: SessionType = Field(SessionType.PHYSICAL)
    location: LocationSpec | None = None
    radius_meters: int | None = Field(None, examples=[100])
    virtual_link: str | None = Field(None, examples=["https://meet.example.com/abc"])
    assigned_users: list[AssignedUser] = Field(default_factory=list)
    weekly_days: list[Weekday] = Field(default_factory=list)

    is_cancelled: bool = False
    cancellation_reason: str | None = None
    is_completed: bool = False

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _strip_time_component(cls, value: object) -> object:
        return _date_part(value)

    @field_validator("is_cancelled", "is_completed", mode="before")
    @classmethod
    def _none_is_false(cls, value: object) -> object:
        return False if value is None else value


class SessionClassification(BaseModel):
    """
    Result of classifying one session against a reference instant.

    `is_cancelled` is orthogonal to `status`: a cancelled session keeps the
    scheduling status Upcoming and is flagged separately.
    """

    status: SessionStatus = Field(..., examples=["Live"])
    is_today: bool = Field(
        ...,
        description="True when the session's start date equals the reference date.",
    )
    is_cancelled: bool = Field(False)


class SessionRead(SessionOccurrence):
    """
    Public representation of a session, including its current classification.
    """

    id: int
    classification: SessionClassification


class SessionUpdate(BaseModel):
    """
    Partial update of a single session. Only provided fields are modified.
    """

    name: str | None = None
    start_time: str | None = Field(None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(None, pattern=HHMM_PATTERN)
    session_type: SessionType | None = None
    location: LocationSpec | None = None
    radius_meters: int | None = Field(None, gt=0)
    virtual_link: str | None = None
    assigned_users: list[AssignedUser] | None = None


class SessionCancel(BaseModel):
    reason: str | None = Field(
        None,
        description="Optional explanation shown to attendees.",
        examples=["Trainer unavailable"],
    )


class ScanEligibility(BaseModel):
    """
    Whether a QR scan may be attempted for a session right now.
    """

    session_id: int
    can_scan: bool
    is_today: bool
    status: SessionStatus
    reason: str | None = Field(
        None,
        description="Why scanning is not possible, when `can_scan` is false.",
    )
    is_late: bool = Field(
        False,
        description="True when a scan right now would be past the lateness limit.",
    )
    late_by_minutes: int = Field(0, description="Whole minutes since the session start.")
    check_in_allowed: bool = Field(
        False,
        description="False when scanning is blocked or the organization rejects late check-ins.",
    )


class SessionListPage(BaseModel):
    """
    Visible slice of the session list plus the "show N more" count.
    """

    sessions: list[SessionRead]
    remaining_count: int = Field(
        ...,
        description=(
            "Eligible sessions minus the display limit. Negative when fewer "
            "sessions than the limit exist."
        ),
    )
    hidden_count: int = Field(
        ...,
        description="`remaining_count` clamped at zero, ready for display.",
    )
