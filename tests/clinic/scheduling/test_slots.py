from datetime import date, datetime, time

import pytest

from clinic.scheduling.slots import (
    InvalidSlotError,
    TimeOfDay,
    appointment_hour,
    day_bounds,
    is_upcoming,
    parse_slot,
    slot_hour,
    validate_slot_template,
)


def test_parse_slot_returns_start_and_end() -> None:
    assert parse_slot(' 09:00-10:30 ') == (time(9, 0), time(10, 30))


@pytest.mark.parametrize('slot', ['9:00-10:00', '09:00', '09:00-09:00', '11:00-10:00', '25:00-26:00', 'morning'])
def test_parse_slot_rejects_malformed_slots(slot: str) -> None:
    with pytest.raises(InvalidSlotError):
        parse_slot(slot)


def test_slot_identity_is_the_leading_hour() -> None:
    assert slot_hour('09:00-10:00') == '09'
    assert slot_hour('09:30-10:30') == '09'
    assert appointment_hour(datetime(2030, 1, 7, 9, 45)) == '09'


def test_validate_slot_template_keeps_order_and_strips() -> None:
    assert validate_slot_template([' 14:00-15:00', '09:00-10:00 ']) == ['14:00-15:00', '09:00-10:00']


def test_validate_slot_template_rejects_duplicates() -> None:
    with pytest.raises(InvalidSlotError):
        validate_slot_template(['09:00-10:00', '09:00-10:00'])


def test_validate_slot_template_rejects_overlaps() -> None:
    with pytest.raises(InvalidSlotError):
        validate_slot_template(['09:00-11:00', '10:00-12:00'])


def test_validate_slot_template_rejects_two_slots_in_the_same_hour() -> None:
    with pytest.raises(InvalidSlotError):
        validate_slot_template(['09:00-09:30', '09:30-10:00'])


def test_day_bounds_cover_the_whole_day() -> None:
    start, end = day_bounds(date(2030, 1, 7))

    assert start == datetime(2030, 1, 7, 0, 0)
    assert end.date() == date(2030, 1, 7)
    assert end.time() > time(23, 59, 59)


def test_is_upcoming_is_strict() -> None:
    now = datetime(2030, 1, 7, 9, 0)

    assert is_upcoming(datetime(2030, 1, 7, 9, 1), now)
    assert not is_upcoming(now, now)
    assert not is_upcoming(datetime(2030, 1, 6, 9, 0), now)


@pytest.mark.parametrize(
    ('period', 'hour', 'expected'),
    [
        (TimeOfDay.AM, 0, True),
        (TimeOfDay.AM, 11, True),
        (TimeOfDay.AM, 12, False),
        (TimeOfDay.PM, 12, True),
        (TimeOfDay.PM, 23, True),
        (TimeOfDay.PM, 11, False),
    ],
)
def test_time_of_day_boundaries(period: TimeOfDay, hour: int, expected: bool) -> None:
    assert period.matches(hour) is expected
