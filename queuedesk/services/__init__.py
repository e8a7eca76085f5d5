from .availability import compute_available_slots, candidate_starts, Slot

from .counters import (
    needs_daily_reset,
    reset_daily_count_if_needed,
    count_new_patient,
    count_cancellation,
)

from . import user_service, queue_service, appointment_service

__all__ = [
    # Availability
    "compute_available_slots",
    "candidate_starts",
    "Slot",
    # Counters
    "needs_daily_reset",
    "reset_daily_count_if_needed",
    "count_new_patient",
    "count_cancellation",
    # Service modules
    "user_service",
    "queue_service",
    "appointment_service",
]
