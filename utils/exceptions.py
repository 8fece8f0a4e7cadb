"""
Domain errors raised by the EcoPoints core.

Every error carries the HTTP status and machine-readable code the API
returns; ``main.py`` registers one handler for the whole hierarchy.
"""
from fastapi import status


class EcoCycleError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ECOCYCLE_ERROR"

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(EcoCycleError):
    """Missing or invalid fields"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"


class InvalidQuantity(ValidationError):
    """Quantity must be a positive number"""
    code = "INVALID_QUANTITY"


class UnknownCategory(ValidationError):
    """Unknown waste category"""
    code = "UNKNOWN_CATEGORY"


class UserNotFound(EcoCycleError):
    """User not found"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"


class RecordNotFound(EcoCycleError):
    """Action record not found"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "RECORD_NOT_FOUND"


class WriteConflict(EcoCycleError):
    """The record could not be written"""
    status_code = status.HTTP_409_CONFLICT
    code = "WRITE_CONFLICT"


class InvalidStatusTransition(EcoCycleError):
    """Status transition not allowed"""
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_STATUS_TRANSITION"


class PermissionDenied(EcoCycleError):
    """Not allowed"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NetworkError(EcoCycleError):
    """Service temporarily unavailable, please try again"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"
