"""
Availability calculator.

Turns a business's opening hours, the start instants already booked and the
current instant into the list of free 30-minute slots for one local day.
Pure: no database or app access, so it is tested directly.
"""
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, NamedTuple

from queuedesk.utils.timeutils import DEFAULT_OFFSET_MINUTES, isoformat_utc

SLOT_LENGTH = timedelta(minutes=30)


class Slot(NamedTuple):
    start: datetime  # naive UTC
    end: datetime

    def to_dict(self):
        return {'startTime': isoformat_utc(self.start), 'endTime': isoformat_utc(self.end)}


def candidate_starts(start_hour: int, start_minute: int, end_hour: int, end_minute: int,
                     slot_length: timedelta = SLOT_LENGTH) -> List[int]:
    """
    Minutes-past-midnight of every candidate slot start.

    A slot is emitted while its start is before closing time, so a span that
    is not a multiple of the slot length ends with a slot running past closing.
    """
    step = int(slot_length.total_seconds() // 60)
    opening = start_hour * 60 + start_minute
    closing = end_hour * 60 + end_minute
    return list(range(opening, closing, step))


def compute_available_slots(
    start_hour: int,
    start_minute: int,
    end_hour: int,
    end_minute: int,
    day: date,
    booked_starts: Iterable[datetime],
    now: datetime,
    offset: timedelta = timedelta(minutes=DEFAULT_OFFSET_MINUTES),
    slot_length: timedelta = SLOT_LENGTH,
) -> List[Slot]:
    """
    Free slots for ``day`` (a local calendar date), ascending, in UTC.

    Args:
        start_hour, start_minute, end_hour, end_minute: local business hours
        day: target local date
        booked_starts: UTC start instants of scheduled appointments
        now: current instant, naive UTC
        offset: fixed local offset from UTC
        slot_length: slot duration

    A slot is dropped when its UTC start equals a booked start, or when ``day``
    is local today and the slot's local start is at or before local now.
    """
    booked = set(booked_starts)
    local_midnight = datetime.combine(day, time.min)
    local_now = now + offset
    is_today = local_now.date() == day

    slots = []
    for minutes in candidate_starts(start_hour, start_minute, end_hour, end_minute, slot_length):
        local_start = local_midnight + timedelta(minutes=minutes)
        if is_today and local_start <= local_now:
            continue

        utc_start = local_start - offset
        if utc_start in booked:
            continue

        slots.append(Slot(utc_start, utc_start + slot_length))

    return slots
