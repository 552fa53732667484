"""Slot-string parsing and the time helpers shared by the scheduling core.

A slot is a recurring daily window written as ``"HH:MM-HH:MM"``. Slots are
identified by their two-digit start hour: ``"09:00-10:00"`` and
``"09:30-10:30"`` collide. Bookings are made on the hour.
"""

import re
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable

SLOT_PATTERN = re.compile(r'^(\d{2}):(\d{2})-(\d{2}):(\d{2})$')
NOON_HOUR = 12


class InvalidSlotError(ValueError):
    pass


class TimeOfDay(str, Enum):
    AM = 'AM'
    PM = 'PM'

    def matches(self, hour: int) -> bool:
        if self is TimeOfDay.AM:
            return hour < NOON_HOUR
        return hour >= NOON_HOUR


def parse_slot(slot: str) -> tuple[time, time]:
    match = SLOT_PATTERN.match(slot.strip())
    if not match:
        raise InvalidSlotError(f'Invalid slot "{slot}". Expected HH:MM-HH:MM.')

    start_hour, start_minute, end_hour, end_minute = (int(part) for part in match.groups())
    try:
        start = time(start_hour, start_minute)
        end = time(end_hour, end_minute)
    except ValueError as exc:
        raise InvalidSlotError(f'Invalid slot "{slot}". {exc}.') from exc

    if end <= start:
        raise InvalidSlotError(f'Invalid slot "{slot}". The end must be after the start.')

    return start, end


def slot_hour(slot: str) -> str:
    return slot.strip()[:2]


def slot_start_hour(slot: str) -> int:
    return int(slot_hour(slot))


def appointment_hour(moment: datetime) -> str:
    return f'{moment.hour:02d}'


def validate_slot_template(slots: Iterable[str]) -> list[str]:
    """Normalize a doctor's slot template and reject duplicates or overlaps.

    The returned list keeps the caller's order.
    """
    template: list[str] = []
    windows: list[tuple[time, time, str]] = []
    seen_hours: set[str] = set()

    for raw_slot in slots:
        slot = raw_slot.strip()
        start, end = parse_slot(slot)

        hour = slot_hour(slot)
        if hour in seen_hours:
            raise InvalidSlotError(f'Slot "{slot}" starts in an hour that is already offered.')

        for other_start, other_end, other_slot in windows:
            if start < other_end and other_start < end:
                raise InvalidSlotError(f'Slot "{slot}" overlaps "{other_slot}".')

        seen_hours.add(hour)
        windows.append((start, end, slot))
        template.append(slot)

    return template


def day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def is_upcoming(moment: datetime, now: datetime | None = None) -> bool:
    return moment > (now or datetime.now())
