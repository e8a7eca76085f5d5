"""
Input validation helpers shared by the user, queue and appointment routes.
"""
import re

from .errors import ValidationError

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 4

VALID_ROLES = ('admin', 'user')


def _is_int(value):
    # bool is an int subclass; reject it explicitly
    return isinstance(value, int) and not isinstance(value, bool)


def validate_business_hours(start_hour, start_minute, end_hour, end_minute):
    """
    Hours in [0, 23], minutes in [0, 59], and opening strictly before closing.

    Raises ValidationError; performs no writes.
    """
    values = (start_hour, start_minute, end_hour, end_minute)
    if not all(_is_int(v) for v in values):
        raise ValidationError('Business hours must be whole numbers')

    if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23
            and 0 <= start_minute <= 59 and 0 <= end_minute <= 59):
        raise ValidationError('Invalid time format. Hours should be 0-23 and minutes should be 0-59.')

    if start_hour * 60 + start_minute >= end_hour * 60 + end_minute:
        raise ValidationError('End time must be after start time.')


def validate_weekend_flags(sunday_open, saturday_open):
    """Each flag is a JSON boolean, or None to leave it unchanged"""
    for field, value in (('sundayOpen', sunday_open), ('saturdayOpen', saturday_open)):
        if value is not None and not isinstance(value, bool):
            raise ValidationError(f'Field "{field}" must be true or false')


def slugify_business_name(business_name):
    """Lowercase, drop whitespace, then drop anything outside [a-z0-9-]"""
    slug = re.sub(r'\s+', '', business_name.lower())
    return re.sub(r'[^a-z0-9-]', '', slug)


def validate_signup(data):
    email = data.get('email')
    password = data.get('password')
    business_name = data.get('businessName')

    if not isinstance(email, str) or not EMAIL_RE.match(email):
        raise ValidationError('A valid "email" is required')
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Field "password" must be at least {MIN_PASSWORD_LENGTH} characters')
    if not isinstance(business_name, str) or not business_name.strip():
        raise ValidationError('Field "businessName" is required')
    if not slugify_business_name(business_name):
        raise ValidationError('Field "businessName" must contain letters or digits')

    return email.strip().lower(), password, business_name.strip()


def validate_login(data):
    email = data.get('email')
    password = data.get('password')
    if not isinstance(email, str) or not EMAIL_RE.match(email):
        raise ValidationError('A valid "email" is required')
    if not isinstance(password, str):
        raise ValidationError('Field "password" is required')
    return email.strip().lower(), password


def validate_role(role):
    if role not in VALID_ROLES:
        raise ValidationError(f'Invalid role. Valid values: {", ".join(VALID_ROLES)}')
    return role


def validate_patient_fields(data):
    """Common {name, phoneNumber, age} payload for queue adds and bookings"""
    name = data.get('name')
    phone_number = data.get('phoneNumber')
    age = data.get('age')

    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Field "name" is required')

    if phone_number is None or isinstance(phone_number, bool) or str(phone_number).strip() == '':
        raise ValidationError('Field "phoneNumber" is required')
    phone_number = str(phone_number).strip()
    if len(phone_number) > 20:
        raise ValidationError('Field "phoneNumber" is too long')

    if age is not None and age != '':
        try:
            age = int(age)
        except (TypeError, ValueError):
            raise ValidationError('Field "age" must be a number')
        if isinstance(data.get('age'), bool) or age < 0:
            raise ValidationError('Field "age" must be a non-negative number')
    else:
        age = None

    return {'name': name.strip(), 'phone_number': phone_number, 'age': age}
