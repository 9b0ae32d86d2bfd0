# tests/test_session_filter.py
from datetime import date, datetime, timedelta

from rollcall.schemas.session import SessionOccurrence
from rollcall.services.session_filter import SessionFilterPlanner

NOW = datetime(2025, 3, 10, 12, 0)


def _sessions(first_day: date, count: int) -> list[SessionOccurrence]:
    return [
        SessionOccurrence(
            id=i + 1,
            start_date=first_day + timedelta(days=i),
            start_time="09:00",
            end_time="10:00",
        )
        for i in range(count)
    ]


def test_past_sessions_are_hidden_by_default():
    sessions = _sessions(date(2025, 3, 8), 5)  # 8th, 9th, 10th (ended) then 11th, 12th

    plan = SessionFilterPlanner.plan(sessions, NOW)

    assert [s.start_date.day for s in plan.visible] == [11, 12]
    assert plan.remaining_count == 2 - 7
    assert plan.hidden_count == 0


def test_list_is_truncated_to_seven():
    sessions = _sessions(date(2025, 3, 11), 10)

    plan = SessionFilterPlanner.plan(sessions, NOW)

    assert [s.id for s in plan.visible] == [1, 2, 3, 4, 5, 6, 7]
    assert plan.remaining_count == 3
    assert plan.hidden_count == 3


def test_show_past_keeps_ended_sessions():
    sessions = _sessions(date(2025, 3, 1), 9)

    plan = SessionFilterPlanner.plan(sessions, NOW, show_past=True)

    assert len(plan.visible) == 7
    assert plan.visible[0].start_date == date(2025, 3, 1)
    assert plan.remaining_count == 2


def test_selected_date_shows_all_sessions_that_day_including_past():
    day = date(2025, 3, 10)
    sessions = [
        SessionOccurrence(id=i, start_date=day, start_time="08:00", end_time="09:00")
        for i in range(9)
    ] + _sessions(date(2025, 3, 11), 3)

    plan = SessionFilterPlanner.plan(sessions, NOW, selected_date=day)

    assert len(plan.visible) == 9
    assert plan.remaining_count == 0
