"""
Service-layer errors.

Services raise these; main.py turns them into the
{"success": false, "error": ..., "code": ...} response envelope.
"""


class ServiceError(Exception):
    """Base class. `code` is machine readable, `message` is shown to the user."""

    status_code = 400
    default_code = "ERROR"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "code": self.code}


class NotFoundError(ServiceError):
    status_code = 404
    default_code = "NOT_FOUND"


class AuthorizationError(ServiceError):
    """PROTECTED or INSUFFICIENT_PRIVILEGE."""
    status_code = 403
    default_code = "INSUFFICIENT_PRIVILEGE"


class ValidationError(ServiceError):
    """DUPLICATE_USERNAME, DUPLICATE_NAME, DUPLICATE_LETTER or INVALID_VALUE."""
    status_code = 400
    default_code = "INVALID_VALUE"


class CredentialError(ServiceError):
    """ACCOUNT_LOCKED, NOT_VERIFIED or BAD_CREDENTIAL."""
    status_code = 401
    default_code = "BAD_CREDENTIAL"
