from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self, 
        message: str, 
        status_code: int = 400, 
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """Missing or malformed input. Raised before any mutation happens."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            message=f"{entity} {entity_id} not found",
            status_code=404,
            error_code="NOT_FOUND",
            details={"id": entity_id}
        )

class StoreUnavailableError(AppException):
    """
    The durable store could not be reached.
    Only raised while probing at startup; the application answers it by
    switching to the in-process stores instead of failing requests.
    """
    def __init__(self, message: str = "Backing store is unavailable"):
        super().__init__(
            message=message,
            status_code=503,
            error_code="STORE_UNAVAILABLE"
        )

class InternalError(AppException):
    def __init__(self, message: str = "An unexpected server error occurred."):
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_ERROR"
        )
