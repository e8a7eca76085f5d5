"""
Appointment Service
Booking, cancelling and converting appointments, plus slot availability.
"""
import logging
from datetime import datetime
from typing import Dict, Any, List, Tuple

from sqlalchemy.exc import IntegrityError

from queuedesk.extensions import db
from queuedesk.models import User, Patient, Appointment, QueueEntry
from queuedesk.models.appointment import SCHEDULED, COMPLETED, CANCELLED
from queuedesk.models.queue_entry import WAITING
from queuedesk.services.availability import compute_available_slots, SLOT_LENGTH, Slot
from queuedesk.services.counters import count_new_patient
from queuedesk.utils.decorators import is_admin
from queuedesk.utils.errors import NotFoundError, ConflictError, ValidationError
from queuedesk.utils.timeutils import (
    utcnow,
    business_offset,
    parse_date,
    local_today,
    local_day_bounds,
)

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = 'This slot is no longer available. Please choose another time.'


def _scoped(query, user_id, role):
    if not is_admin(role):
        query = query.filter(Appointment.user_id == user_id)
    return query


def _slot_taken(user_id: int, start_time: datetime) -> bool:
    return Appointment.query.filter_by(
        user_id=user_id,
        status=SCHEDULED,
        start_time=start_time,
    ).first() is not None


def get_available_slots(user_id: int, date_string: str) -> List[Slot]:
    """Free 30-minute slots for the owner's local day ``date_string``"""
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found')

    day = parse_date(date_string)
    if day is None:
        raise ValidationError('Invalid date format. Use YYYY-MM-DD')

    offset = business_offset()
    day_start, day_end = local_day_bounds(day, offset)
    booked = [
        row.start_time for row in Appointment.query.filter(
            Appointment.user_id == user_id,
            Appointment.status == SCHEDULED,
            Appointment.start_time >= day_start,
            Appointment.start_time < day_end,
        ).with_entities(Appointment.start_time)
    ]

    return compute_available_slots(
        user.start_hour, user.start_minute, user.end_hour, user.end_minute,
        day=day,
        booked_starts=booked,
        now=utcnow(),
        offset=offset,
    )


def book_appointment(user_id: int, start_time: datetime, fields: Dict[str, Any],
                     self_registered: bool = True) -> Tuple[Appointment, Patient]:
    """
    Create a Patient and a scheduled Appointment in one transaction.

    The lookup gives a readable error for the common case; the partial unique
    index on (user_id, start_time) for scheduled rows settles concurrent
    bookings of the same slot.
    """
    if db.session.get(User, user_id) is None:
        raise NotFoundError('User not found')

    if _slot_taken(user_id, start_time):
        raise ConflictError(SLOT_TAKEN_MESSAGE)

    try:
        patient = Patient(
            user_id=user_id,
            name=fields['name'],
            phone_number=fields['phone_number'],
            age=fields.get('age'),
            entry_time=start_time,
            date=start_time,
            self_registered=self_registered,
        )
        db.session.add(patient)
        db.session.flush()

        appointment = Appointment(
            user_id=user_id,
            patient_id=patient.id,
            start_time=start_time,
            end_time=start_time + SLOT_LENGTH,
            status=SCHEDULED,
        )
        db.session.add(appointment)
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        logger.info("Slot %s for user %s lost to a concurrent booking", start_time, user_id)
        raise ConflictError(SLOT_TAKEN_MESSAGE)

    count_new_patient(user_id)
    db.session.commit()

    logger.info("Appointment %s booked for user %s at %s", appointment.id, user_id, start_time)
    return appointment, patient


def add_booking(user_id: int, start_time: datetime, fields: Dict[str, Any]) -> Tuple[Appointment, Patient]:
    """Owner books on a customer's behalf"""
    return book_appointment(user_id, start_time, fields, self_registered=False)


def cancel_appointment(appointment_id: int, user_id: int, role: str) -> Appointment:
    """scheduled -> cancelled; flags the patient as canceled"""
    appointment = _scoped(
        Appointment.query.filter(Appointment.id == appointment_id, Appointment.status == SCHEDULED),
        user_id, role,
    ).first()
    if appointment is None:
        raise NotFoundError('Appointment not found or already cancelled')

    updated = Appointment.query.filter(
        Appointment.id == appointment.id,
        Appointment.status == SCHEDULED,
    ).update({Appointment.status: CANCELLED, Appointment.updated_at: utcnow()}, synchronize_session=False)
    if updated != 1:
        db.session.rollback()
        raise NotFoundError('Appointment not found or already cancelled')

    if appointment.patient_id is not None:
        Patient.query.filter(Patient.id == appointment.patient_id).update(
            {Patient.canceled: True}, synchronize_session=False
        )
    db.session.commit()

    logger.info("Appointment %s cancelled", appointment.id)
    return appointment


def move_to_waitlist(appointment_id: int, user_id: int, role: str) -> Tuple[Patient, QueueEntry]:
    """
    Convert a scheduled appointment into a walk-in queue entry.

    The appointment becomes ``completed``, the patient re-enters the queue
    with entry time reset to now. The patient was already counted at booking.
    """
    appointment = _scoped(
        Appointment.query.filter(Appointment.id == appointment_id, Appointment.status == SCHEDULED),
        user_id, role,
    ).first()
    if appointment is None or appointment.patient_id is None:
        raise NotFoundError('Appointment not found or not in scheduled status')

    now = utcnow()
    updated = Appointment.query.filter(
        Appointment.id == appointment.id,
        Appointment.status == SCHEDULED,
    ).update({Appointment.status: COMPLETED, Appointment.updated_at: now}, synchronize_session=False)
    if updated != 1:
        db.session.rollback()
        raise NotFoundError('Appointment not found or not in scheduled status')

    Patient.query.filter(Patient.id == appointment.patient_id).update(
        {Patient.entry_time: now, Patient.date: now}, synchronize_session=False
    )

    entry = QueueEntry(user_id=appointment.user_id, patient_id=appointment.patient_id, status=WAITING)
    db.session.add(entry)
    db.session.commit()

    logger.info("Appointment %s moved to waitlist as queue entry %s", appointment.id, entry.id)
    return db.session.get(Patient, appointment.patient_id), entry


def get_user_appointments(user_id: int, role: str) -> List[Appointment]:
    return _scoped(Appointment.query, user_id, role) \
        .order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()


def get_today_bookings(user_id: int, role: str) -> List[Appointment]:
    offset = business_offset()
    day_start, day_end = local_day_bounds(local_today(utcnow(), offset), offset)
    return _scoped(
        Appointment.query.filter(
            Appointment.status == SCHEDULED,
            Appointment.start_time >= day_start,
            Appointment.start_time < day_end,
        ),
        user_id, role,
    ).order_by(Appointment.start_time.asc()).all()
