from datetime import datetime, timedelta

import pytest

from fitlog.core.conflicts import check_end, find_start_conflict, start_conflict
from fitlog.core.results import Err, ErrorKind, Ok

from conftest import session

DAY = datetime(2025, 10, 23)


def at(h: int, m: int = 0, day: datetime = DAY) -> datetime:
    return day.replace(hour=h, minute=m)


@pytest.fixture
def leg_day():
    return session("Leg Day", at(19), at(20))


@pytest.mark.parametrize("start, clashes", [
    (at(19), True),
    (at(19, 30), True),
    (at(19, 59), True),
    (at(20), False),          # fin exclusive
    (at(18, 59), False),
])
def test_start_inside_an_ended_session(leg_day, start, clashes):
    assert (find_start_conflict([leg_day], start) is leg_day) is clashes


def test_open_session_blocks_anything_after_its_start():
    running = session("Run", at(7))
    assert find_start_conflict([running], at(23, 59)) is running
    assert find_start_conflict([running], at(6, 59)) is None


def test_only_same_day_sessions_are_compared():
    late = session("Late", at(23), None)
    next_morning = DAY + timedelta(days=1, hours=0, minutes=30)
    assert find_start_conflict([late], next_morning) is None


def test_start_conflict_names_the_colliding_session(leg_day):
    result = start_conflict([leg_day], at(19, 30))
    assert isinstance(result, Err)
    assert result.kind is ErrorKind.CONFLICT
    assert result.conflict_with is leg_day
    assert "Leg Day (19:00 - 20:00)" in result.message


def test_end_must_be_after_start():
    active = session("Push", at(19))
    for end in (at(18, 59), at(19), at(19, 0).replace(second=40)):
        result = check_end([active], active, end)
        assert isinstance(result, Err)
        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert "end must be after start" in result.message


def test_end_cannot_swallow_a_later_session():
    active = session("Push", at(18))
    later = session("Yoga", at(20), at(21))
    result = check_end([active, later], active, at(20, 30))
    assert isinstance(result, Err) and result.kind is ErrorKind.CONFLICT
    assert result.conflict_with is later
    assert check_end([active, later], active, at(20)) == Ok(at(20))


def test_end_is_truncated_to_the_minute():
    active = session("Push", at(18))
    assert check_end([active], active, at(19).replace(second=59)) == Ok(at(19))
