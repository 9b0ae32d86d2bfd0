# rollcall/services/batch_planner.py
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from rollcall.core.config import Settings
from rollcall.core.errors import (
    InvalidRecurrence,
    InvalidSessionPayload,
    MalformedTemporalField,
    SessionLocked,
)
from rollcall.schemas.class_batch import ClassBatchRead, ClassBatchUpdate, SharedSessionFields
from rollcall.schemas.recurrence import (
    Frequency,
    Occurrence,
    RecurrenceDescriptor,
    Weekday,
)
from rollcall.schemas.session import (
    AssignedUser,
    LocationSpec,
    LocationType,
    SessionOccurrence,
    SessionType,
)
from rollcall.services.attendee_roster import AttendeeRosterManager, RosterTarget
from rollcall.services.recurrence_expander import RecurrenceExpander
from rollcall.services.session_status import SessionStatusClassifier, wall_clock
from rollcall.services.time_fields import parse_hhmm

# Column names shared by every session of a batch
SHARED_FIELDS = (
    "start_time",
    "end_time",
    "session_type",
    "location",
    "radius_meters",
    "virtual_link",
    "assigned_users",
)


# --------------------------------------------------------------------------
# Descriptor handling
# --------------------------------------------------------------------------

def build_descriptor(
    frequency: Frequency | None,
    start_date: date | None,
    end_date: date | None,
    weekly_days: Iterable[Weekday] | None,
    custom_dates: Iterable[date] | None,
    start_time: str,
    end_time: str,
) -> RecurrenceDescriptor:
    """
    Assemble a RecurrenceDescriptor from batch payload fields.
    """
    if frequency is None:
        raise InvalidRecurrence("frequency is required when generating sessions.")

    return RecurrenceDescriptor(
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        weekly_days=tuple(weekly_days or ()),
        custom_dates=tuple(custom_dates or ()),
        start_time=start_time,
        end_time=end_time,
    )


def resolve_times(
    start_time: str | None,
    end_time: str | None,
    default_time: str | None,
    settings: Settings,
) -> tuple[str, str]:
    """
    Apply the fallbacks: start -> batch default time -> configured default,
    end -> configured default.
    """
    return (
        start_time or default_time or settings.DEFAULT_START_TIME,
        end_time or settings.DEFAULT_END_TIME,
    )


def schedule_changed(current: ClassBatchRead, update: ClassBatchUpdate) -> bool:
    """
    Whether `update` changes the recurrence stored on the batch.

    Only fields the client actually sent are compared. Random batches that
    receive custom dates are always treated as changed.
    """
    provided = update.model_fields_set

    if update.frequency is not None and update.frequency != current.frequency:
        return True
    if "start_date" in provided and update.start_date != current.start_date:
        return True
    if "end_date" in provided and update.end_date != current.end_date:
        return True
    if update.weekly_days is not None and set(update.weekly_days) != set(current.weekly_days):
        return True

    frequency = update.frequency or current.frequency
    if frequency is Frequency.RANDOM and update.custom_dates:
        return True

    return False


def upcoming_occurrences(descriptor: RecurrenceDescriptor, today: date) -> list[Occurrence]:
    """
    Occurrences to regenerate after a schedule change.

    Random batches are replaced completely (their dates must not be in the
    past). Other frequencies keep sessions before `today`, so only occurrences
    on or after `today` are produced. Expansion still starts at the original
    start date, which keeps Weekly and Monthly anchors intact.
    """
    if descriptor.frequency is Frequency.RANDOM:
        return RecurrenceExpander.expand(descriptor, today=today)

    return [o for o in RecurrenceExpander.expand(descriptor) if o.session_date >= today]


def is_preserved_past(session: Any, today: date) -> bool:
    """
    Sessions starting before `today` survive a schedule regeneration.
    """
    return session.start_date < today


# --------------------------------------------------------------------------
# Shared session fields
# --------------------------------------------------------------------------

def validate_location(
    session_type: SessionType,
    location: LocationSpec | None,
    virtual_link: str | None,
) -> None:
    """
    PHYSICAL/HYBRID sessions need a geofence anchor, REMOTE/HYBRID a link.
    """
    if session_type.needs_location:
        if location is None:
            raise InvalidSessionPayload("Location is required for Physical or Hybrid sessions.")
        if location.type is LocationType.LINK and not (location.link or "").strip():
            raise InvalidSessionPayload("Location link is required.")
        if location.type is LocationType.COORDS and location.geolocation is None:
            raise InvalidSessionPayload("Latitude and longitude are required.")

    if session_type.needs_virtual_link and not (virtual_link or "").strip():
        raise InvalidSessionPayload("Virtual link is required for Remote or Hybrid sessions.")


def normalize_roster(
    session_type: SessionType,
    users: Sequence[AssignedUser],
) -> list[AssignedUser]:
    """
    Validate a submitted roster against the session type and return it in
    canonical order (see AttendeeRosterManager.serialize).

    Single-mode sessions accept untagged users and tag them with the session
    type; a user tagged with the other mode is rejected. Hybrid sessions need
    every user tagged. A user id may appear only once.
    """
    manager = AttendeeRosterManager(session_type)
    seen: set[str] = set()

    for user in users:
        if user.user_id in seen:
            raise InvalidSessionPayload(f"User {user.user_id} is assigned more than once.")
        seen.add(user.user_id)

        if session_type is SessionType.HYBRID:
            if user.mode is None:
                raise InvalidSessionPayload(
                    f"User {user.user_id} needs a PHYSICAL or REMOTE mode in a Hybrid session."
                )
            target = RosterTarget(user.mode.value)
        else:
            if user.mode is not None and user.mode.value != session_type.value:
                raise InvalidSessionPayload(
                    f"User {user.user_id} has mode {user.mode.value} in a "
                    f"{session_type.value} session."
                )
            target = RosterTarget.ASSIGNED

        manager.toggle_selection(user, target)

    return manager.serialize()


def _validate_time_range(start_time: str | None, end_time: str | None) -> None:
    try:
        start = parse_hhmm(start_time, "start_time")
        end = parse_hhmm(end_time, "end_time")
    except MalformedTemporalField as exc:
        raise InvalidSessionPayload(str(exc)) from exc
    if start >= end:
        raise InvalidSessionPayload("end_time must be after start_time")


def _column_values(
    session_type: SessionType,
    location: LocationSpec | None,
    radius_meters: int | None,
    virtual_link: str | None,
    roster: list[AssignedUser],
    settings: Settings,
) -> dict[str, Any]:
    needs_location = session_type.needs_location
    return {
        "session_type": session_type.value,
        "location": location.model_dump(mode="json") if needs_location and location else None,
        "radius_meters": (radius_meters or settings.DEFAULT_RADIUS_METERS) if needs_location else None,
        "virtual_link": virtual_link if session_type.needs_virtual_link else None,
        "assigned_users": [u.model_dump(mode="json") for u in roster],
    }


def shared_session_values(
    shared: SharedSessionFields,
    settings: Settings,
    default_location: str | None = None,
) -> dict[str, Any]:
    """
    Validate shared fields of a new batch and convert them to column values.

    A batch `default_location` stands in for a missing location link.
    """
    session_type = shared.session_type
    location = shared.location
    if location is None and session_type.needs_location and default_location:
        location = LocationSpec(type=LocationType.LINK, link=default_location)

    validate_location(session_type, location, shared.virtual_link)
    roster = normalize_roster(session_type, shared.assigned_users)

    return _column_values(
        session_type,
        location,
        shared.radius_meters,
        shared.virtual_link,
        roster,
        settings,
    )


def merge_shared_updates(
    existing: SessionOccurrence,
    changes: dict[str, Any],
    settings: Settings,
) -> dict[str, Any]:
    """
    Apply partial `changes` over `existing` and return the full set of shared
    column values to write.

    When the session type changes without a new roster, the existing roster
    goes through the same type-switch rule as the authoring UI: leaving or
    entering HYBRID drops the selection, PHYSICAL <-> REMOTE re-tags it.
    """
    old_type = existing.session_type
    new_type = changes.get("session_type") or old_type

    location = changes["location"] if "location" in changes else existing.location
    virtual_link = changes["virtual_link"] if "virtual_link" in changes else existing.virtual_link
    radius_meters = changes.get("radius_meters") or existing.radius_meters

    if changes.get("assigned_users") is not None:
        roster = normalize_roster(new_type, changes["assigned_users"])
    else:
        manager = AttendeeRosterManager.hydrate(existing.assigned_users, old_type)
        manager.switch_session_type(new_type)
        roster = manager.serialize()

    validate_location(new_type, location, virtual_link)

    values = _column_values(new_type, location, radius_meters, virtual_link, roster, settings)

    start_time = changes.get("start_time") or existing.start_time
    end_time = changes.get("end_time") or existing.end_time
    if changes.get("start_time") or changes.get("end_time"):
        _validate_time_range(start_time, end_time)
    values["start_time"] = start_time
    values["end_time"] = end_time

    return values


def build_session_payloads(
    class_batch_id: int,
    descriptor: RecurrenceDescriptor,
    occurrences: Sequence[Occurrence],
    shared_values: dict[str, Any],
    created_by: str,
    organization_prefix: str,
) -> list[dict[str, Any]]:
    """
    One session row (as column values) per occurrence.
    """
    weekly_days = (
        [d.value for d in descriptor.weekly_days]
        if descriptor.frequency is Frequency.WEEKLY
        else []
    )

    return [
        {
            **shared_values,
            "class_batch_id": class_batch_id,
            "name": f"Session - {occurrence.session_date.isoformat()}",
            "frequency": descriptor.frequency.value,
            "start_date": occurrence.session_date,
            "end_date": None,
            "start_time": occurrence.start_time,
            "end_time": occurrence.end_time,
            "weekly_days": weekly_days,
            "created_by": created_by,
            "organization_prefix": organization_prefix,
        }
        for occurrence in occurrences
    ]


# --------------------------------------------------------------------------
# Lifecycle guards
# --------------------------------------------------------------------------

def ensure_editable(session: Any, now: datetime) -> None:
    """
    Raise SessionLocked if the session has already ended.

    Decided from timing and completion only: a cancelled session that ended
    is locked as well, although its status stays Upcoming.
    """
    now_wall = wall_clock(now)
    ended = bool(getattr(session, "is_completed", False)) or (
        now_wall > SessionStatusClassifier.cutoff(session)
    )
    if ended:
        raise SessionLocked("Session has already ended and can no longer be edited.")


def latest_session_end(sessions: Iterable[Any]) -> datetime | None:
    """
    Latest end datetime among non-cancelled sessions, or None.
    """
    ends = [
        SessionStatusClassifier.session_bounds(s)[1]
        for s in sessions
        if not getattr(s, "is_cancelled", False)
    ]
    return max(ends, default=None)
