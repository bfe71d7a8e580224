"""
Application errors.

Services raise these; the Flask error handlers registered in
``create_app`` turn them into ``{"success": False, "message": ...}``
responses. ``kind`` is the machine readable category, ``message`` the
human readable text shown to clients.
"""


class AppError(Exception):
    status_code = 500
    kind = "internal"

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"success": False, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    kind = "validation"


class UnauthorizedError(AppError):
    status_code = 401
    kind = "unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    kind = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    kind = "not_found"


class GatewayTimeoutError(AppError):
    status_code = 408
    kind = "timeout"


class ConflictError(AppError):
    status_code = 409
    kind = "conflict"


class TooManyRequestsError(AppError):
    status_code = 429
    kind = "rate_limited"


class InternalError(AppError):
    status_code = 500
    kind = "internal"


class ServiceUnavailableError(AppError):
    status_code = 503
    kind = "unavailable"
