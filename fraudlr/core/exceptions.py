"""
Custom exception classes.

Each error carries an HTTP status, a machine-readable code and a short
human message. Handlers in fraudlr.main render them as {"error", "code"}.
"""
from fastapi import status


class FraudlrError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(FraudlrError):
    """Raised for malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "Invalid request"


class AuthenticationError(FraudlrError):
    """Raised for bad credentials or an invalid/expired session. Message stays generic."""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"
    default_message = "Not authenticated"


class PlanLimitError(FraudlrError):
    """Raised when the subscription tier does not allow the action"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "plan_limit_exceeded"
    default_message = "Your plan does not allow this action. Upgrade to continue."


class NotFoundError(FraudlrError):
    """Raised when a resolved identity or resource has no backing record"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class ConflictError(FraudlrError):
    """Raised on uniqueness violations such as a duplicate email"""
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists"


class InternalError(FraudlrError):
    """Raised when storage or hashing fails"""
