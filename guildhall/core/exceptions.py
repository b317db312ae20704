"""
Service-level error taxonomy.
Services raise these; the application maps each one to an HTTP status
and a stable ``error`` kind so clients can tell a bad request from a
state problem or a permission problem.
"""
from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by the feature services"""
    status_code: int = 400
    kind: str = "error"
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationFailed(ServiceError):
    kind = "validation"
    default_detail = "Invalid request data"


class NotFoundError(ServiceError):
    status_code = 404
    kind = "not_found"
    default_detail = "Not found"


class ConflictError(ServiceError):
    kind = "conflict"
    default_detail = "Already exists"


class ForbiddenError(ServiceError):
    status_code = 403
    kind = "forbidden"
    default_detail = "Not enough permissions"


class StateInvalidError(ServiceError):
    kind = "state_invalid"
    default_detail = "Operation not allowed in the current state"
