from queuedesk.extensions import db
from queuedesk.utils.timeutils import isoformat_utc
from .base import TimestampMixin

SCHEDULED = 'scheduled'
COMPLETED = 'completed'  # also means "converted to a walk-in queue entry"
CANCELLED = 'cancelled'

APPOINTMENT_STATUSES = (SCHEDULED, COMPLETED, CANCELLED)


class Appointment(db.Model, TimestampMixin):
    __tablename__ = 'appointments'
    __table_args__ = (
        # At most one scheduled appointment per owner and start instant
        db.Index(
            'uq_appointments_user_start_scheduled',
            'user_id', 'start_time',
            unique=True,
            sqlite_where=db.text("status = 'scheduled'"),
            postgresql_where=db.text("status = 'scheduled'"),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id'), nullable=True, index=True)

    start_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False)

    status = db.Column(
        db.Enum(*APPOINTMENT_STATUSES, name='appointment_status', native_enum=False, validate_strings=True),
        nullable=False,
        default=SCHEDULED,
    )

    patient = db.relationship('Patient', backref=db.backref('appointments', lazy='dynamic'), lazy='joined')

    def to_dict(self, include_patient=True):
        data = {
            'id': self.id,
            'userId': self.user_id,
            'patientId': self.patient_id,
            'startTime': isoformat_utc(self.start_time),
            'endTime': isoformat_utc(self.end_time),
            'status': self.status,
            'createdAt': isoformat_utc(self.created_at),
            'updatedAt': isoformat_utc(self.updated_at),
        }
        if include_patient:
            data['patient'] = self.patient.to_dict() if self.patient else None
        return data

    def __repr__(self):
        return f"<Appointment {self.id} user={self.user_id} {self.start_time} {self.status}>"
