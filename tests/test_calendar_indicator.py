# tests/test_calendar_indicator.py
from datetime import date, datetime

from rollcall.schemas.calendar import CalendarIndicator
from rollcall.schemas.session import SessionOccurrence
from rollcall.services.calendar_indicator import CalendarIndicatorAggregator

DAY = date(2025, 3, 10)
CREATED = datetime(2025, 3, 1, 8, 0)


def _session(start_time="09:00", end_time="10:00", edited=False, **overrides):
    values = {
        "start_date": DAY,
        "start_time": start_time,
        "end_time": end_time,
        "created_at": CREATED,
        "updated_at": datetime(2025, 3, 2, 8, 0) if edited else CREATED,
    }
    values.update(overrides)
    return SessionOccurrence(**values)


def test_no_sessions_means_no_indicator():
    assert CalendarIndicatorAggregator.day_indicator([], DAY, datetime(2025, 3, 10, 8)) is None


def test_only_cancelled_sessions_means_no_indicator():
    sessions = [_session(is_cancelled=True)]
    assert CalendarIndicatorAggregator.day_indicator(sessions, DAY, datetime(2025, 3, 10, 8)) is None


def test_unedited_upcoming_sessions_are_green():
    sessions = [_session(), _session(start_time="11:00", end_time="12:00")]

    indicator = CalendarIndicatorAggregator.day_indicator(sessions, DAY, datetime(2025, 3, 10, 8))

    assert indicator is CalendarIndicator.GREEN


def test_edited_session_turns_day_yellow():
    sessions = [_session(), _session(start_time="11:00", end_time="12:00", edited=True)]

    indicator = CalendarIndicatorAggregator.day_indicator(sessions, DAY, datetime(2025, 3, 10, 8))

    assert indicator is CalendarIndicator.YELLOW


def test_any_past_session_turns_day_red():
    """
    09:00-10:00 has ended at 11:00 while the edited afternoon session has not.
    """
    sessions = [_session(), _session(start_time="15:00", end_time="16:00", edited=True)]

    indicator = CalendarIndicatorAggregator.day_indicator(sessions, DAY, datetime(2025, 3, 10, 11))

    assert indicator is CalendarIndicator.RED


def test_past_and_plain_upcoming_sessions_are_red_in_either_order():
    ended = _session()
    upcoming = _session(start_time="15:00", end_time="16:00")
    now = datetime(2025, 3, 10, 11)

    for sessions in ([ended, upcoming], [upcoming, ended]):
        assert CalendarIndicatorAggregator.day_indicator(sessions, DAY, now) is CalendarIndicator.RED


def test_sessions_on_other_days_are_ignored():
    sessions = [_session(start_date=date(2025, 3, 9))]
    assert CalendarIndicatorAggregator.day_indicator(sessions, DAY, datetime(2025, 3, 10, 8)) is None


def test_month_indicators_cover_every_day():
    sessions = [
        _session(start_date=date(2025, 2, 3)),
        _session(start_date=date(2025, 2, 20), edited=True),
    ]

    days = CalendarIndicatorAggregator.month_indicators(sessions, 2025, 2, datetime(2025, 2, 10, 12))

    assert len(days) == 28
    by_day = {d.day: d.indicator for d in days}
    assert by_day[date(2025, 2, 3)] is CalendarIndicator.RED
    assert by_day[date(2025, 2, 20)] is CalendarIndicator.YELLOW
    assert by_day[date(2025, 2, 4)] is None
