from .decorators import require_role, get_current_owner, is_admin

from .errors import (
    ServiceError,
    ValidationError,
    ConflictError,
    CredentialsError,
    NotFoundError,
    ForbiddenError,
)

from .validators import (
    validate_business_hours,
    slugify_business_name,
    validate_patient_fields,
)

__all__ = [
    # Decorators
    "require_role",
    "get_current_owner",
    "is_admin",
    # Errors
    "ServiceError",
    "ValidationError",
    "ConflictError",
    "CredentialsError",
    "NotFoundError",
    "ForbiddenError",
    # Validators
    "validate_business_hours",
    "slugify_business_name",
    "validate_patient_fields",
]
