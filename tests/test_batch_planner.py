# tests/test_batch_planner.py
from datetime import date, datetime

import pytest

from rollcall.core.config import Settings
from rollcall.core.errors import InvalidRecurrence, InvalidSessionPayload, SessionLocked
from rollcall.schemas.class_batch import ClassBatchRead, ClassBatchUpdate, SharedSessionFields
from rollcall.schemas.recurrence import Frequency, RecurrenceDescriptor, Weekday
from rollcall.schemas.session import (
    AssignedUser,
    AttendeeMode,
    LocationSpec,
    LocationType,
    SessionOccurrence,
    SessionType,
)
from rollcall.services import batch_planner

SETTINGS = Settings()
MAPS_LINK = LocationSpec(type=LocationType.LINK, link="https://maps.google.com/?q=1,2")


def _user(user_id: str, mode: AttendeeMode | None = None) -> AssignedUser:
    return AssignedUser(
        user_id=user_id,
        email=f"{user_id}@example.com",
        first_name=user_id,
        last_name="Tester",
        mode=mode,
    )


def _batch(**overrides) -> ClassBatchRead:
    values = {
        "id": 1,
        "name": "Morning Yoga",
        "created_by": "u1",
        "organization_prefix": "acme",
        "frequency": "Weekly",
        "start_date": date(2025, 1, 6),
        "end_date": date(2025, 1, 26),
        "weekly_days": ["Monday", "Wednesday"],
    }
    values.update(overrides)
    return ClassBatchRead(**values)


# --------------------------------------------------------------------------
# Descriptor handling
# --------------------------------------------------------------------------

def test_build_descriptor_requires_frequency():
    with pytest.raises(InvalidRecurrence):
        batch_planner.build_descriptor(None, date(2025, 1, 6), None, [], [], "09:00", "10:00")


def test_resolve_times_falls_back_to_defaults():
    assert batch_planner.resolve_times(None, None, None, SETTINGS) == ("09:00", "17:00")
    assert batch_planner.resolve_times(None, None, "07:30", SETTINGS) == ("07:30", "17:00")
    assert batch_planner.resolve_times("08:00", "08:45", "07:30", SETTINGS) == ("08:00", "08:45")


def test_schedule_unchanged_when_only_shared_fields_sent():
    update = ClassBatchUpdate(update_sessions=True, start_time="10:00", end_time="11:00")
    assert batch_planner.schedule_changed(_batch(), update) is False


def test_schedule_unchanged_when_weekdays_are_reordered():
    update = ClassBatchUpdate(weekly_days=["Wednesday", "Monday"])
    assert batch_planner.schedule_changed(_batch(), update) is False


def test_schedule_changed_on_new_end_date():
    update = ClassBatchUpdate(end_date=date(2025, 2, 9))
    assert batch_planner.schedule_changed(_batch(), update) is True


def test_schedule_changed_for_random_with_custom_dates():
    current = _batch(frequency="Random", start_date=None, end_date=None, weekly_days=[])
    update = ClassBatchUpdate(custom_dates=[date(2025, 2, 1)])
    assert batch_planner.schedule_changed(current, update) is True


def test_upcoming_occurrences_keep_weekly_anchor():
    descriptor = RecurrenceDescriptor(
        frequency=Frequency.WEEKLY,
        start_date=date(2025, 1, 6),
        end_date=date(2025, 1, 26),
        weekly_days=(Weekday.MONDAY, Weekday.WEDNESDAY),
        start_time="09:00",
        end_time="10:00",
    )

    occurrences = batch_planner.upcoming_occurrences(descriptor, date(2025, 1, 14))

    assert [o.session_date for o in occurrences] == [
        date(2025, 1, 15),
        date(2025, 1, 20),
        date(2025, 1, 22),
    ]


# --------------------------------------------------------------------------
# Shared session fields
# --------------------------------------------------------------------------

def test_physical_session_requires_location():
    with pytest.raises(InvalidSessionPayload, match="Location"):
        batch_planner.validate_location(SessionType.PHYSICAL, None, None)


def test_blank_link_is_rejected():
    location = LocationSpec(type=LocationType.LINK, link="   ")
    with pytest.raises(InvalidSessionPayload):
        batch_planner.validate_location(SessionType.PHYSICAL, location, None)


def test_coords_without_geolocation_are_rejected():
    location = LocationSpec(type=LocationType.COORDS)
    with pytest.raises(InvalidSessionPayload, match="Latitude"):
        batch_planner.validate_location(SessionType.HYBRID, location, "https://meet")


def test_hybrid_session_requires_virtual_link():
    with pytest.raises(InvalidSessionPayload, match="Virtual link"):
        batch_planner.validate_location(SessionType.HYBRID, MAPS_LINK, None)


def test_normalize_roster_tags_single_mode_users():
    roster = batch_planner.normalize_roster(SessionType.REMOTE, [_user("a"), _user("b")])
    assert [(u.user_id, u.mode) for u in roster] == [
        ("a", AttendeeMode.REMOTE),
        ("b", AttendeeMode.REMOTE),
    ]


def test_normalize_roster_rejects_mismatched_single_mode():
    with pytest.raises(InvalidSessionPayload):
        batch_planner.normalize_roster(SessionType.PHYSICAL, [_user("a", AttendeeMode.REMOTE)])


def test_normalize_roster_requires_modes_in_hybrid():
    with pytest.raises(InvalidSessionPayload):
        batch_planner.normalize_roster(SessionType.HYBRID, [_user("a")])


def test_normalize_roster_rejects_duplicate_users():
    users = [_user("a", AttendeeMode.PHYSICAL), _user("a", AttendeeMode.REMOTE)]
    with pytest.raises(InvalidSessionPayload, match="more than once"):
        batch_planner.normalize_roster(SessionType.HYBRID, users)


def test_shared_values_drop_fields_unused_by_remote_sessions():
    shared = SharedSessionFields(
        session_type=SessionType.REMOTE,
        location=MAPS_LINK,
        radius_meters=250,
        virtual_link="https://meet.example.com/abc",
    )

    values = batch_planner.shared_session_values(shared, SETTINGS)

    assert values["session_type"] == "REMOTE"
    assert values["location"] is None
    assert values["radius_meters"] is None
    assert values["virtual_link"] == "https://meet.example.com/abc"


def test_shared_values_use_default_location_and_radius():
    shared = SharedSessionFields(session_type=SessionType.PHYSICAL)

    values = batch_planner.shared_session_values(shared, SETTINGS, "https://maps.google.com/?q=x")

    assert values["location"] == {
        "type": "LINK",
        "link": "https://maps.google.com/?q=x",
        "geolocation": None,
    }
    assert values["radius_meters"] == SETTINGS.DEFAULT_RADIUS_METERS


def test_merge_switching_to_hybrid_drops_single_mode_roster():
    existing = SessionOccurrence(
        start_date=date(2025, 3, 1),
        start_time="09:00",
        end_time="10:00",
        session_type=SessionType.PHYSICAL,
        location=MAPS_LINK,
        radius_meters=100,
        assigned_users=[_user("a", AttendeeMode.PHYSICAL)],
    )

    values = batch_planner.merge_shared_updates(
        existing,
        {"session_type": SessionType.HYBRID, "virtual_link": "https://meet"},
        SETTINGS,
    )

    assert values["session_type"] == "HYBRID"
    assert values["assigned_users"] == []
    assert values["start_time"] == "09:00"


def test_merge_rejects_inverted_time_range():
    existing = SessionOccurrence(
        start_date=date(2025, 3, 1),
        start_time="09:00",
        end_time="10:00",
        session_type=SessionType.REMOTE,
        virtual_link="https://meet",
    )

    with pytest.raises(InvalidSessionPayload, match="end_time"):
        batch_planner.merge_shared_updates(existing, {"start_time": "11:00"}, SETTINGS)


def test_build_session_payloads_use_occurrence_dates_and_times():
    descriptor = RecurrenceDescriptor(
        frequency=Frequency.WEEKLY,
        start_date=date(2025, 1, 6),
        end_date=date(2025, 1, 12),
        weekly_days=(Weekday.MONDAY,),
        start_time="09:00",
        end_time="10:00",
    )
    occurrences = batch_planner.upcoming_occurrences(descriptor, date(2025, 1, 1))
    shared = {"session_type": "REMOTE", "virtual_link": "https://meet", "start_time": "07:00"}

    payloads = batch_planner.build_session_payloads(7, descriptor, occurrences, shared, "u1", "acme")

    assert len(payloads) == 1
    payload = payloads[0]
    assert payload["class_batch_id"] == 7
    assert payload["name"] == "Session - 2025-01-06"
    assert payload["start_date"] == date(2025, 1, 6)
    assert payload["start_time"] == "09:00"
    assert payload["weekly_days"] == ["Monday"]
    assert payload["virtual_link"] == "https://meet"


# --------------------------------------------------------------------------
# Lifecycle guards
# --------------------------------------------------------------------------

def test_ensure_editable_blocks_past_sessions():
    session = SessionOccurrence(start_date=date(2025, 3, 1), start_time="09:00", end_time="10:00")

    batch_planner.ensure_editable(session, datetime(2025, 3, 1, 10, 5))
    with pytest.raises(SessionLocked):
        batch_planner.ensure_editable(session, datetime(2025, 3, 1, 10, 11))


def test_ensure_editable_locks_cancelled_sessions_that_ended():
    """
    Cancellation keeps the status Upcoming, but an ended session stays locked.
    """
    session = SessionOccurrence(
        start_date=date(2025, 3, 1), start_time="09:00", end_time="10:00", is_cancelled=True
    )

    batch_planner.ensure_editable(session, datetime(2025, 2, 28, 12, 0))
    with pytest.raises(SessionLocked):
        batch_planner.ensure_editable(session, datetime(2025, 3, 20, 12, 0))


def test_ensure_editable_locks_completed_sessions():
    session = SessionOccurrence(
        start_date=date(2025, 3, 1), start_time="09:00", end_time="10:00", is_completed=True
    )

    with pytest.raises(SessionLocked):
        batch_planner.ensure_editable(session, datetime(2025, 3, 1, 9, 30))


def test_latest_session_end_ignores_cancelled_sessions():
    sessions = [
        SessionOccurrence(start_date=date(2025, 3, 1), start_time="09:00", end_time="10:00"),
        SessionOccurrence(
            start_date=date(2025, 3, 5), start_time="09:00", end_time="10:00", is_cancelled=True
        ),
    ]

    assert batch_planner.latest_session_end(sessions) == datetime(2025, 3, 1, 10, 0)
    assert batch_planner.latest_session_end([]) is None
