from functools import wraps

from flask_jwt_extended import verify_jwt_in_request

from digital_library.errors import ForbiddenError
from digital_library.utils.auth import current_role


def role_required(*roles, message="Admin access required"):
    """Reject callers whose token ``role`` claim is not one of ``roles``."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if current_role() not in roles:
                raise ForbiddenError(message)
            return fn(*args, **kwargs)
        return wrapper
    return decorator


admin_required = role_required("admin")
