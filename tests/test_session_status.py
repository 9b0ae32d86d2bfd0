# tests/test_session_status.py
from datetime import date, datetime, timedelta, timezone

from rollcall.schemas.session import SessionOccurrence, SessionStatus
from rollcall.services.session_status import SessionStatusClassifier


def _session(**overrides) -> SessionOccurrence:
    values = {"start_date": date(2025, 3, 1), "start_time": "09:00", "end_time": "10:00"}
    values.update(overrides)
    return SessionOccurrence(**values)


def test_live_within_buffer_and_past_after_it():
    """
    A session ending at 10:00 stays Live until 10:10 and is Past afterwards.
    """
    session = SessionOccurrence(start_date=date(2025, 3, 1), end_time="10:00")

    assert SessionStatusClassifier.status(session, datetime(2025, 3, 1, 10, 9)) == "Live"
    assert SessionStatusClassifier.status(session, datetime(2025, 3, 1, 10, 11)) == "Past"


def test_upcoming_before_start():
    classification = SessionStatusClassifier.classify(_session(), datetime(2025, 3, 1, 8, 59))

    assert classification.status is SessionStatus.UPCOMING
    assert classification.is_today is True
    assert classification.is_cancelled is False


def test_live_from_the_start_instant():
    assert SessionStatusClassifier.status(_session(), datetime(2025, 3, 1, 9, 0)) is SessionStatus.LIVE


def test_cutoff_is_inclusive():
    session = _session()
    cutoff = SessionStatusClassifier.cutoff(session)

    assert cutoff == datetime(2025, 3, 1, 10, 10)
    assert SessionStatusClassifier.status(session, cutoff) is SessionStatus.LIVE
    assert (
        SessionStatusClassifier.status(session, cutoff + timedelta(milliseconds=1))
        is SessionStatus.PAST
    )


def test_completed_session_is_past_even_before_start():
    session = _session(is_completed=True)
    assert SessionStatusClassifier.status(session, datetime(2025, 2, 1, 8, 0)) is SessionStatus.PAST


def test_cancelled_session_stays_upcoming_and_is_flagged():
    session = _session(is_cancelled=True, is_completed=True)

    classification = SessionStatusClassifier.classify(session, datetime(2025, 3, 2, 12, 0))

    assert classification.status is SessionStatus.UPCOMING
    assert classification.is_cancelled is True
    assert classification.is_today is False


def test_overnight_session_rolls_end_to_next_day():
    session = _session(start_time="22:00", end_time="01:00")

    start, end = SessionStatusClassifier.session_bounds(session)
    assert start == datetime(2025, 3, 1, 22, 0)
    assert end == datetime(2025, 3, 2, 1, 0)

    assert SessionStatusClassifier.status(session, datetime(2025, 3, 2, 0, 30)) is SessionStatus.LIVE
    assert SessionStatusClassifier.status(session, datetime(2025, 3, 2, 1, 11)) is SessionStatus.PAST


def test_multi_day_session_uses_end_date():
    session = _session(end_date=date(2025, 3, 3), start_time="09:00", end_time="08:00")

    _, end = SessionStatusClassifier.session_bounds(session)
    assert end == datetime(2025, 3, 3, 8, 0)
    assert SessionStatusClassifier.status(session, datetime(2025, 3, 2, 12, 0)) is SessionStatus.LIVE


def test_malformed_times_fall_back_to_day_bounds():
    session = _session(start_time="nine", end_time="25:99")

    start, end = SessionStatusClassifier.session_bounds(session)

    assert start == datetime(2025, 3, 1, 0, 0)
    assert end == datetime(2025, 3, 1, 23, 59, 59, 999000)


def test_missing_end_time_means_end_of_day():
    session = _session(end_time=None)

    assert SessionStatusClassifier.status(session, datetime(2025, 3, 1, 23, 0)) is SessionStatus.LIVE
    assert SessionStatusClassifier.status(session, datetime(2025, 3, 2, 0, 5)) is SessionStatus.LIVE
    assert SessionStatusClassifier.status(session, datetime(2025, 3, 2, 0, 11)) is SessionStatus.PAST


def test_is_today_holds_for_a_session_that_already_ended():
    classification = SessionStatusClassifier.classify(_session(), datetime(2025, 3, 1, 18, 0))

    assert classification.status is SessionStatus.PAST
    assert classification.is_today is True


def test_aware_now_is_read_as_wall_clock():
    now = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert SessionStatusClassifier.status(_session(), now) is SessionStatus.LIVE


def test_iso_timestamp_dates_are_accepted():
    session = SessionOccurrence(start_date="2025-03-01T00:00:00.000Z", start_time="09:00")
    assert session.start_date == date(2025, 3, 1)
