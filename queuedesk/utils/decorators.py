from functools import wraps
from flask_jwt_extended import get_jwt_identity, get_jwt

from .errors import ForbiddenError


def get_current_owner():
    """Returns (user_id, role) from the JWT identity and claims."""
    claims = get_jwt()
    return int(get_jwt_identity()), claims.get('role', 'user')


def is_admin(role):
    return role == 'admin'


def require_role(*roles):
    """
    Decorator to require specific roles
    Usage: @require_role('admin')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            """
            Require that the current JWT-authenticated user has one of the given roles.
            Must be used together with @jwt_required() on the route.
            """
            role = get_jwt().get('role')
            if role not in roles:
                if roles == ('admin',):
                    raise ForbiddenError('Admin access required')
                raise ForbiddenError(f'Permission denied. Required roles: {", ".join(roles)}')

            return f(*args, **kwargs)
        return decorated_function
    return decorator
