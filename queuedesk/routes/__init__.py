from .user import user_bp
from .queue import queue_bp
from .appointment import appointment_bp
from .health import health_bp

__all__ = ['user_bp', 'queue_bp', 'appointment_bp', 'health_bp']
