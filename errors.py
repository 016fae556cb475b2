"""
Error taxonomy for the order service.

Every operation raises one of these; the web layer maps them to an HTTP
response with the same ``{"detail": ...}`` body FastAPI uses for
HTTPException.
"""


class OrderServiceError(Exception):
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(OrderServiceError):
    status_code = 401
    default_detail = "Unauthorized"


class Forbidden(OrderServiceError):
    status_code = 403
    default_detail = "Forbidden"


class ValidationError(OrderServiceError):
    status_code = 422
    default_detail = "Invalid payload"


class NotFound(OrderServiceError):
    status_code = 404
    default_detail = "Not found"


class AlreadyExists(OrderServiceError):
    status_code = 400
    default_detail = "Already exists"


class StorageError(OrderServiceError):
    status_code = 500
    default_detail = "Database error"
