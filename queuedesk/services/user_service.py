"""
User Service
Accounts, tokens, business hours and per-business statistics.
"""
import logging
from typing import Dict, Any, List, Optional

from flask_jwt_extended import create_access_token
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from queuedesk.extensions import db
from queuedesk.models import User
from queuedesk.services.counters import reset_daily_count_if_needed
from queuedesk.utils.errors import ConflictError, CredentialsError, NotFoundError
from queuedesk.utils.timeutils import isoformat_utc
from queuedesk.utils.validators import (
    slugify_business_name,
    validate_business_hours,
    validate_weekend_flags,
    validate_role,
)

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    """Identity is the user id (string "sub" claim); role travels as a claim"""
    return create_access_token(identity=str(user.id), additional_claims={'role': user.role})


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user


def signup(email: str, password: str, business_name: str, role: str = 'user') -> Dict[str, str]:
    if User.query.filter_by(email=email).first():
        raise ConflictError('User already exists')

    slug = slugify_business_name(business_name)
    taken = User.query.filter(
        or_(User.business_name == business_name, User.business_name_for_url == slug)
    ).first()
    if taken:
        raise ConflictError('Business name already taken')

    user = User(
        email=email,
        business_name=business_name,
        business_name_for_url=slug,
        role=role,
    )
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race on one of the unique columns
        db.session.rollback()
        raise ConflictError('User already exists')

    logger.info("New %s account %s (%s)", role, user.id, slug)
    return {'token': issue_token(user), 'role': user.role}


def login(email: str, password: str) -> Dict[str, str]:
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        raise CredentialsError('Invalid credentials')
    return {'token': issue_token(user), 'role': user.role}


def get_profile(user_id: int) -> User:
    return _get_user(user_id)


def get_all_users() -> List[User]:
    return User.query.order_by(User.id.asc()).all()


def change_user_role(user_id: int, role: str) -> User:
    validate_role(role)
    user = _get_user(user_id)
    user.role = role
    db.session.commit()
    logger.info("User %s role changed to %s", user_id, role)
    return user


def get_business_name(user_id: int) -> Dict[str, Any]:
    user = _get_user(user_id)
    return {'id': user.id, 'businessName': user.business_name}


def get_user_by_business(slug: str) -> User:
    user = User.query.filter_by(business_name_for_url=slug).first()
    if user is None:
        raise NotFoundError('Business not found')
    return user


def get_patient_stats(user_id: int) -> Dict[str, Any]:
    _get_user(user_id)
    reset_daily_count_if_needed(user_id)
    db.session.commit()

    user = _get_user(user_id)
    return {
        'totalPatients': user.total_patients,
        'dailyPatients': user.daily_patients,
        'canceledPatients': user.canceled_patients,
        'lastResetDate': isoformat_utc(user.last_reset_date),
    }


def update_business_hours(user_id: int, start_hour, start_minute, end_hour, end_minute,
                          sunday_open: Optional[bool] = None,
                          saturday_open: Optional[bool] = None) -> User:
    """Validate first, then write; weekend flags are left alone when None"""
    validate_business_hours(start_hour, start_minute, end_hour, end_minute)
    validate_weekend_flags(sunday_open, saturday_open)
    user = _get_user(user_id)

    user.start_hour = start_hour
    user.start_minute = start_minute
    user.end_hour = end_hour
    user.end_minute = end_minute
    if sunday_open is not None:
        user.sunday_open = sunday_open
    if saturday_open is not None:
        user.saturday_open = saturday_open
    db.session.commit()

    logger.info("Business hours for user %s set to %02d:%02d-%02d:%02d",
                user_id, start_hour, start_minute, end_hour, end_minute)
    return user
