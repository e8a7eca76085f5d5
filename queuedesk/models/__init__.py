from .user import User
from .patient import Patient
from .queue_entry import QueueEntry
from .appointment import Appointment

__all__ = ["User", "Patient", "QueueEntry", "Appointment"]
