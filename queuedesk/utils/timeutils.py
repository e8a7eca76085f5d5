"""
Time helpers.

Instants are stored as naive UTC datetimes. Business-local values (business
hours, "today", midnight resets) use a fixed UTC offset rather than a
timezone database.
"""
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional, Tuple

from flask import current_app, has_app_context

DEFAULT_OFFSET_MINUTES = 330  # UTC+5:30


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def business_offset() -> timedelta:
    """Configured business offset, falling back to UTC+5:30 outside an app context"""
    minutes = DEFAULT_OFFSET_MINUTES
    if has_app_context():
        minutes = current_app.config.get('BUSINESS_UTC_OFFSET_MINUTES', DEFAULT_OFFSET_MINUTES)
    return timedelta(minutes=minutes)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_iso_datetime(value) -> datetime:
    """
    Parse an ISO 8601 string into a naive UTC datetime.

    Naive input is taken to already be UTC. Raises ValueError on bad input.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Expected an ISO 8601 datetime string')
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(date_string) -> Optional[date]:
    """
    Parse YYYY-MM-DD to a date.

    A full ISO timestamp is also accepted and resolves to its business-local
    calendar date.
    """
    if not date_string:
        return None
    try:
        return datetime.strptime(date_string, '%Y-%m-%d').date()
    except ValueError:
        pass
    try:
        return local_today(parse_iso_datetime(date_string), business_offset())
    except ValueError:
        return None


def to_local(instant: datetime, offset: timedelta) -> datetime:
    return instant + offset


def local_today(now: datetime, offset: timedelta) -> date:
    return to_local(now, offset).date()


def local_day_bounds(day: date, offset: timedelta) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a local calendar day"""
    start = datetime.combine(day, time.min) - offset
    return start, start + timedelta(days=1)


def local_midnight_utc(now: datetime, offset: timedelta) -> datetime:
    """UTC instant of the most recent local midnight at or before ``now``"""
    return local_day_bounds(local_today(now, offset), offset)[0]
