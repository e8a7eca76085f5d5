"""
Queue Service
Walk-in queue: adding patients and moving entries through
waiting -> serving -> completed and waiting -> cancelled.
"""
import logging
from typing import Dict, Any, List

from queuedesk.extensions import db
from queuedesk.models import User, Patient, QueueEntry
from queuedesk.models.queue_entry import WAITING, SERVING, COMPLETED, CANCELLED
from queuedesk.services.counters import count_new_patient, count_cancellation
from queuedesk.utils.decorators import is_admin
from queuedesk.utils.errors import NotFoundError
from queuedesk.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def _owner_scope(query, model, user_id, role):
    """Admins see every tenant; everyone else only their own rows"""
    if not is_admin(role):
        query = query.filter(model.user_id == user_id)
    return query


def _enqueue(user_id: int, fields: Dict[str, Any], self_registered: bool) -> QueueEntry:
    now = utcnow()
    patient = Patient(
        user_id=user_id,
        name=fields['name'],
        phone_number=fields['phone_number'],
        age=fields.get('age'),
        entry_time=now,
        date=now,
        self_registered=self_registered,
    )
    db.session.add(patient)
    db.session.flush()

    entry = QueueEntry(user_id=user_id, patient_id=patient.id, status=WAITING)
    db.session.add(entry)
    count_new_patient(user_id)
    db.session.commit()

    logger.info("Patient %s added to queue of user %s", patient.id, user_id)
    return entry


def add_patient(user_id: int, fields: Dict[str, Any]) -> QueueEntry:
    """Owner adds a walk-in patient to their own queue"""
    return _enqueue(user_id, fields, self_registered=False)


def add_customer_patient(user_id: int, fields: Dict[str, Any]) -> QueueEntry:
    """Customer self-registers into a business's queue (no authentication)"""
    if db.session.get(User, user_id) is None:
        raise NotFoundError('Queue not found')
    return _enqueue(user_id, fields, self_registered=True)


def _transition(patient_id: int, source: str, target: str, user_id: int, role: str,
                not_found_message: str) -> QueueEntry:
    """
    Move the patient's entry from ``source`` to ``target``.

    The UPDATE is guarded on the entry id and source status, so a concurrent
    transition of the same entry makes this one report not-found. A missing
    entry, a wrong owner and a wrong state are indistinguishable to the caller.
    """
    query = QueueEntry.query.filter(
        QueueEntry.patient_id == patient_id,
        QueueEntry.status == source,
    )
    query = _owner_scope(query, QueueEntry, user_id, role)
    entry = query.order_by(QueueEntry.created_at.asc()).first()
    if entry is None:
        raise NotFoundError(not_found_message)

    updated = QueueEntry.query.filter(
        QueueEntry.id == entry.id,
        QueueEntry.status == source,
    ).update({QueueEntry.status: target, QueueEntry.updated_at: utcnow()}, synchronize_session=False)

    if updated != 1:
        db.session.rollback()
        raise NotFoundError(not_found_message)

    logger.info("Queue entry %s: %s -> %s", entry.id, source, target)
    return entry


def serve_patient(patient_id: int, user_id: int, role: str) -> QueueEntry:
    entry = _transition(patient_id, WAITING, SERVING, user_id, role, 'Patient not found in waitlist')
    Patient.query.filter(Patient.id == entry.patient_id).update(
        {Patient.post_consultation: utcnow()}, synchronize_session=False
    )
    db.session.commit()
    return entry


def complete_patient(patient_id: int, user_id: int, role: str) -> QueueEntry:
    entry = _transition(patient_id, SERVING, COMPLETED, user_id, role, 'Patient not found in serving list')
    Patient.query.filter(Patient.id == entry.patient_id).update(
        {Patient.completion_time: utcnow()}, synchronize_session=False
    )
    db.session.commit()
    return entry


def _cancel(entry: QueueEntry, self_canceled: bool) -> Patient:
    flags = {Patient.canceled: True}
    if self_canceled:
        flags[Patient.self_canceled] = True
    Patient.query.filter(Patient.id == entry.patient_id).update(flags, synchronize_session=False)

    # Counted against the queue's owner, not whoever performed the cancel
    count_cancellation(entry.user_id)
    db.session.commit()
    return db.session.get(Patient, entry.patient_id)


def cancel_patient(patient_id: int, user_id: int, role: str) -> Patient:
    """Owner (or admin) cancels a waiting patient"""
    entry = _transition(patient_id, WAITING, CANCELLED, user_id, role,
                        'Patient not found in waitlist or unauthorized')
    return _cancel(entry, self_canceled=False)


def remove_patient(patient_id: int, user_id: int) -> Patient:
    """Customer removes themselves from a business's waitlist (no authentication)"""
    entry = _transition(patient_id, WAITING, CANCELLED, user_id, 'user',
                        'Patient not found in waitlist or unauthorized')
    return _cancel(entry, self_canceled=True)


def get_waitlist(user_id: int, role: str) -> List[QueueEntry]:
    query = _owner_scope(QueueEntry.query.filter(QueueEntry.status == WAITING), QueueEntry, user_id, role)
    return query.order_by(QueueEntry.created_at.asc(), QueueEntry.id.asc()).all()


def get_serving(user_id: int, role: str) -> List[QueueEntry]:
    query = _owner_scope(QueueEntry.query.filter(QueueEntry.status == SERVING), QueueEntry, user_id, role)
    return query.order_by(QueueEntry.updated_at.asc(), QueueEntry.id.asc()).all()


def get_all_patients(user_id: int, role: str) -> List[QueueEntry]:
    query = _owner_scope(QueueEntry.query, QueueEntry, user_id, role)
    return query.order_by(QueueEntry.updated_at.asc(), QueueEntry.id.asc()).all()


def get_patient(patient_id: int, user_id: int, role: str) -> Patient:
    query = _owner_scope(Patient.query.filter(Patient.id == patient_id), Patient, user_id, role)
    patient = query.first()
    if patient is None:
        raise NotFoundError('Patient not found')
    return patient


def get_public_waitlist(user_id: int) -> List[QueueEntry]:
    return QueueEntry.query.filter(
        QueueEntry.user_id == user_id,
        QueueEntry.status == WAITING,
    ).order_by(QueueEntry.created_at.asc(), QueueEntry.id.asc()).all()


def get_queue_status(user_id: int) -> Dict[str, int]:
    base = QueueEntry.query.filter(QueueEntry.user_id == user_id)
    return {
        'waitingCount': base.filter(QueueEntry.status == WAITING).count(),
        'servingCount': base.filter(QueueEntry.status == SERVING).count(),
    }
