from queuedesk.extensions import db, bcrypt
from queuedesk.utils.timeutils import utcnow, isoformat_utc
from .base import TimestampMixin


class User(db.Model, TimestampMixin):
    """A business account (tenant) that owns a queue and an appointment calendar"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    business_name = db.Column(db.String(120), unique=True, nullable=False)
    business_name_for_url = db.Column(db.String(120), unique=True, nullable=False, index=True)

    # 'admin' bypasses all owner scoping, 'user' sees only its own records
    role = db.Column(db.String(20), nullable=False, default='user')

    # Running counters
    total_patients = db.Column(db.Integer, nullable=False, default=0)
    daily_patients = db.Column(db.Integer, nullable=False, default=0)
    canceled_patients = db.Column(db.Integer, nullable=False, default=0)
    last_reset_date = db.Column(db.DateTime, nullable=True, default=utcnow)

    # Business hours, local time in the configured fixed offset
    start_hour = db.Column(db.Integer, nullable=False, default=9)
    start_minute = db.Column(db.Integer, nullable=False, default=0)
    end_hour = db.Column(db.Integer, nullable=False, default=17)
    end_minute = db.Column(db.Integer, nullable=False, default=0)
    sunday_open = db.Column(db.Boolean, nullable=False, default=False)
    saturday_open = db.Column(db.Boolean, nullable=False, default=False)

    # Relationships
    patients = db.relationship('Patient', backref='owner', lazy='dynamic')
    queue_entries = db.relationship('QueueEntry', backref='owner', lazy='dynamic')
    appointments = db.relationship('Appointment', backref='owner', lazy='dynamic')

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def business_hours_dict(self):
        return {
            'startHour': self.start_hour,
            'startMinute': self.start_minute,
            'endHour': self.end_hour,
            'endMinute': self.end_minute,
            'sundayOpen': self.sunday_open,
            'saturdayOpen': self.saturday_open,
        }

    def to_dict(self):
        """Public representation; never includes the password hash"""
        return {
            'id': self.id,
            'email': self.email,
            'businessName': self.business_name,
            'businessNameForUrl': self.business_name_for_url,
            'role': self.role,
            'totalPatients': self.total_patients,
            'dailyPatients': self.daily_patients,
            'canceledPatients': self.canceled_patients,
            'lastResetDate': isoformat_utc(self.last_reset_date),
            'businessHours': self.business_hours_dict(),
            'createdAt': isoformat_utc(self.created_at),
        }

    def __repr__(self):
        return f"<User {self.email} ({self.business_name}) - {self.role}>"
