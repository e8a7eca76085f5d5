"""
Queue entry model.

Tracks one patient's progress through the walk-in queue. Status only moves
forward: waiting -> serving -> completed, or waiting -> cancelled.
"""
from queuedesk.extensions import db
from queuedesk.utils.timeutils import isoformat_utc
from .base import TimestampMixin

WAITING = 'waiting'
SERVING = 'serving'
COMPLETED = 'completed'
CANCELLED = 'cancelled'

QUEUE_STATUSES = (WAITING, SERVING, COMPLETED, CANCELLED)


class QueueEntry(db.Model, TimestampMixin):
    __tablename__ = 'queue_entries'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id'), nullable=False, index=True)

    status = db.Column(
        db.Enum(*QUEUE_STATUSES, name='queue_status', native_enum=False, validate_strings=True),
        nullable=False,
        default=WAITING,
        index=True,
    )

    # Present for the dashboard; nothing computes them yet
    time_waited = db.Column(db.Integer, nullable=False, default=0)
    time_served = db.Column(db.Integer, nullable=False, default=0)

    patient = db.relationship('Patient', backref=db.backref('queue_entries', lazy='dynamic'), lazy='joined')

    def to_dict(self, include_patient=True):
        data = {
            'id': self.id,
            'userId': self.user_id,
            'patientId': self.patient_id,
            'status': self.status,
            'timeWaited': self.time_waited,
            'timeServed': self.time_served,
            'createdAt': isoformat_utc(self.created_at),
            'updatedAt': isoformat_utc(self.updated_at),
        }
        if include_patient:
            data['patient'] = self.patient.to_dict() if self.patient else None
        return data

    def to_public_dict(self):
        """Customer-facing view: only the patient's name is exposed"""
        return {
            'id': self.id,
            'status': self.status,
            'patient': {'id': self.patient_id, 'name': self.patient.name if self.patient else None},
            'createdAt': isoformat_utc(self.created_at),
        }

    def __repr__(self):
        return f"<QueueEntry {self.id} patient={self.patient_id} {self.status}>"
