"""Custom exceptions for the taskboard authentication flow"""
from typing import Optional


class TaskboardError(Exception):
    """Base exception for Taskboard"""
    code = "error"
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__doc__)

    @property
    def message(self) -> str:
        return str(self)


class Unauthenticated(TaskboardError):
    """Not authenticated"""
    code = "unauthenticated"
    status_code = 401


class AccountNotFound(TaskboardError):
    """Account not found"""
    code = "account_not_found"
    status_code = 404


class InvalidOrExpiredCode(TaskboardError):
    """Invalid or expired OTP"""
    code = "invalid_or_expired_code"
    status_code = 400


class CredentialRejected(TaskboardError):
    """Authentication failed"""
    code = "credential_rejected"
    status_code = 400

    # reason codes
    INVALID_CREDENTIALS = "invalid_credentials"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_EMAIL = "invalid_email"
    WEAK_PASSWORD = "weak_password"

    def __init__(self, message: Optional[str] = None, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)
        if reason == self.DUPLICATE_EMAIL:
            self.status_code = 409


class ConfigurationError(TaskboardError):
    """Service is not configured"""
    code = "configuration_error"
    status_code = 503


class DeliveryUnavailable(TaskboardError):
    """Mail delivery failed. Logged by the mailer, never returned to callers."""
    code = "delivery_unavailable"
    status_code = 502


class AIServiceError(TaskboardError):
    """AI service error"""
    code = "ai_service_error"
    status_code = 502


class SessionStateError(TaskboardError):
    """Operation not allowed in the current session state"""
    code = "session_state"
    status_code = 409


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        Unauthenticated,
        AccountNotFound,
        InvalidOrExpiredCode,
        CredentialRejected,
        ConfigurationError,
        DeliveryUnavailable,
        SessionStateError,
        AIServiceError,
    )
}
