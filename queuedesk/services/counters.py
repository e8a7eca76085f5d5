"""
Owner counters on the users table.

All writes are single UPDATE statements evaluated by the database
(``col = col + 1`` and a guarded reset), so concurrent requests do not lose
increments. Callers own the transaction and commit.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_

from queuedesk.models import User
from queuedesk.utils.timeutils import utcnow, business_offset, local_midnight_utc

logger = logging.getLogger(__name__)


def needs_daily_reset(last_reset: Optional[datetime], now: datetime, offset: timedelta) -> bool:
    """True when local midnight has passed since ``last_reset``"""
    if last_reset is None:
        return True
    return last_reset < local_midnight_utc(now, offset)


def reset_daily_count_if_needed(user_id: int, now: Optional[datetime] = None) -> bool:
    """
    Zero ``daily_patients`` the first time the account is touched after local midnight.

    The read skips the write on the common path; the WHERE clause repeats the
    check, so only one of several concurrent callers performs the reset.
    Returns True if this call reset the counter.
    """
    now = now or utcnow()
    offset = business_offset()

    last_reset = User.query.with_entities(User.last_reset_date).filter(User.id == user_id).scalar()
    if not needs_daily_reset(last_reset, now, offset):
        return False

    midnight = local_midnight_utc(now, offset)
    updated = User.query.filter(
        User.id == user_id,
        or_(User.last_reset_date.is_(None), User.last_reset_date < midnight),
    ).update(
        {User.daily_patients: 0, User.last_reset_date: now},
        synchronize_session=False,
    )
    if updated:
        logger.info("Daily patient count reset for user %s", user_id)
    return bool(updated)


def count_new_patient(user_id: int) -> None:
    """Lazy daily reset, then bump total and daily counters"""
    reset_daily_count_if_needed(user_id)
    User.query.filter(User.id == user_id).update(
        {
            User.total_patients: User.total_patients + 1,
            User.daily_patients: User.daily_patients + 1,
        },
        synchronize_session=False,
    )


def count_cancellation(user_id: int) -> None:
    User.query.filter(User.id == user_id).update(
        {User.canceled_patients: User.canceled_patients + 1},
        synchronize_session=False,
    )
