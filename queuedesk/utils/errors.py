"""
Service-layer exceptions.

Services raise these; the app-level handler registered in create_app()
turns them into the JSON error envelope with the matching status code.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    status_code = 400


class ConflictError(ServiceError):
    """Duplicate email/business name or an already-booked slot"""
    status_code = 400


class CredentialsError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    """Also raised when the caller does not own the record"""
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403
