from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.gym_attendance.gym_attendance.core.enums import CheckInSource, StatsPeriod
from src.gym_attendance.gym_attendance.core.exceptions import ValidationError
from tests.fakes import GYM, NOW, OTHER_GYM, FixedClock, InMemoryAttendance, make_container


@pytest.fixture
def setup():
    """Five check-ins today, three of them checked out, plus noise outside the window/facility."""

    clock = FixedClock()
    repo = InMemoryAttendance()
    container = make_container(clock, attendance=repo)
    service = container.attendance_service

    for i, subject_id in enumerate((1, 2, 3, 4, 5)):
        service.check_in(subject_id, GYM, now=NOW + timedelta(minutes=i))
    for subject_id in (1, 2, 3):
        service.check_out(subject_id, GYM, now=NOW + timedelta(minutes=30))

    # Yesterday (15:30 IST on Mar 9), never checked out.
    repo.create_checkin(facility_id=GYM, subject_id=6, check_in_time=datetime(2026, 3, 9, 10, 0), source=CheckInSource.MANUAL)
    # Another gym today.
    repo.create_checkin(facility_id=OTHER_GYM, subject_id=20, check_in_time=NOW, source=CheckInSource.MANUAL)

    return container, container.query_service


def test_currently_inside_counts_open_records_today(setup):
    _, queries = setup
    today = queries.today()

    assert today.day == date(2026, 3, 10)
    assert queries.currently_inside(GYM, today) == 2
    assert queries.todays_checkins(GYM, today) == 5


def test_history_is_zero_filled_oldest_first(setup):
    _, queries = setup

    series = queries.history(GYM, date(2026, 3, 8), date(2026, 3, 10))

    assert [d.to_dict() for d in series] == [
        {"date": "2026-03-08", "checkins": 0},
        {"date": "2026-03-09", "checkins": 1},
        {"date": "2026-03-10", "checkins": 5},
    ]


def test_history_buckets_by_facility_local_day():
    repo = InMemoryAttendance()
    container = make_container(FixedClock(), attendance=repo)
    # 19:00 UTC on Mar 9 is 00:30 on Mar 10 in IST.
    repo.create_checkin(facility_id=GYM, subject_id=1, check_in_time=datetime(2026, 3, 9, 19, 0), source=CheckInSource.MANUAL)

    series = container.query_service.history(GYM, date(2026, 3, 9), date(2026, 3, 10))

    assert [d.checkins for d in series] == [0, 1]


def test_history_rejects_inverted_range(setup):
    _, queries = setup
    with pytest.raises(ValidationError):
        queries.history(GYM, date(2026, 3, 10), date(2026, 3, 9))


def test_stats_by_period(setup):
    _, queries = setup

    assert queries.stats(GYM, StatsPeriod.TODAY) == {"totalCheckIns": 5, "uniqueMembers": 5, "currentlyInGym": 2}
    assert queries.stats(GYM, StatsPeriod.WEEK) == {"totalCheckIns": 6, "uniqueMembers": 6, "currentlyInGym": 3}
    assert queries.stats(OTHER_GYM, StatsPeriod.MONTH)["totalCheckIns"] == 1


def test_list_records_filters(setup):
    _, queries = setup

    assert len(queries.list_records(GYM)) == 6
    assert [r.subject_id for r in queries.list_records(GYM, subject_id=6)] == [6]
    assert len(queries.list_records(GYM, date_from=date(2026, 3, 10))) == 5
    assert len(queries.list_records(GYM, date_to=date(2026, 3, 9))) == 1
    with pytest.raises(ValidationError):
        queries.list_records(GYM, date_from=date(2026, 3, 10), date_to=date(2026, 3, 9))


def test_list_records_newest_first(setup):
    _, queries = setup
    times = [r.check_in_time for r in queries.list_records(GYM)]

    assert times == sorted(times, reverse=True)


def test_subject_history(setup):
    container, queries = setup
    service = container.attendance_service
    service.check_in(1, GYM, now=NOW + timedelta(hours=1))

    history = queries.subject_history(1, limit=1)

    assert len(history) == 1
    assert history[0].check_in_time == NOW + timedelta(hours=1)


def test_dashboard_payload(setup):
    _, queries = setup

    payload = queries.dashboard(GYM, queries.today(), days=7)

    assert payload["date"] == "2026-03-10"
    assert payload["todayCheckIns"] == 5
    assert payload["currentlyInside"] == 2
    assert payload["pollSeconds"] == 5
    assert len(payload["records"]) == 5
    assert payload["records"][0]["subjectName"] == "Subject 5"
    assert len(payload["history"]) == 7
    assert payload["history"][-1] == {"date": "2026-03-10", "checkins": 5}


def test_queries_have_no_side_effects(setup):
    container, queries = setup
    before = dict(container.attendance_repo.rows)

    queries.dashboard(GYM, queries.today(), days=3)
    queries.stats(GYM, StatsPeriod.MONTH)

    assert container.attendance_repo.rows == before
