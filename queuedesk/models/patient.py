from queuedesk.extensions import db
from queuedesk.utils.timeutils import utcnow, isoformat_utc
from .base import TimestampMixin


class Patient(db.Model, TimestampMixin):
    __tablename__ = 'patients'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    phone_number = db.Column(db.String(20), nullable=False)
    age = db.Column(db.Integer)

    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    entry_time = db.Column(db.DateTime, nullable=False, default=utcnow)
    post_consultation = db.Column(db.DateTime)  # stamped on waiting -> serving
    completion_time = db.Column(db.DateTime)    # stamped on serving -> completed

    # Patients are never deleted, only flagged
    self_registered = db.Column(db.Boolean, nullable=False, default=False)
    self_canceled = db.Column(db.Boolean, nullable=False, default=False)
    canceled = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'phoneNumber': self.phone_number,
            'age': self.age,
            'date': isoformat_utc(self.date),
            'entryTime': isoformat_utc(self.entry_time),
            'postConsultation': isoformat_utc(self.post_consultation),
            'completionTime': isoformat_utc(self.completion_time),
            'selfRegistered': self.self_registered,
            'selfCanceled': self.self_canceled,
            'canceled': self.canceled,
        }

    def __repr__(self):
        return f"<Patient {self.name} ({self.id})>"
