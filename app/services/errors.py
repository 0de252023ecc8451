"""Error taxonomy for auth and user services; the API maps each kind to a status."""

import enum
import uuid


class ErrorKind(str, enum.Enum):
    """Closed set of failures a caller can receive from the services."""

    DUPLICATE_EMAIL = "DuplicateEmail"
    INVALID_CREDENTIALS = "InvalidCredentials"
    ACCOUNT_LOCKED = "AccountLocked"
    VERIFICATION_PENDING = "VerificationPending"
    INVALID_OR_EXPIRED_CODE = "InvalidOrExpiredCode"
    MISSING_TOKEN = "MissingToken"
    INVALID_OR_EXPIRED_TOKEN = "InvalidOrExpiredToken"
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    VALIDATION_ERROR = "ValidationError"


class AuthServiceError(Exception):
    """Base class; every subclass pins one ErrorKind and a default message."""

    kind: ErrorKind
    default_message: str = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmailError(AuthServiceError):
    kind = ErrorKind.DUPLICATE_EMAIL
    default_message = "A user with this email already exists."


class InvalidCredentialsError(AuthServiceError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid email or password."


class AccountLockedError(AuthServiceError):
    kind = ErrorKind.ACCOUNT_LOCKED
    default_message = "Account is blocked."


class VerificationPendingError(AuthServiceError):
    """Raised by login for an unverified email; a fresh code has been sent."""

    kind = ErrorKind.VERIFICATION_PENDING
    default_message = "Email is not verified. A new verification code has been sent."

    def __init__(self, user_id: uuid.UUID, message: str | None = None) -> None:
        self.user_id = user_id
        super().__init__(message)


class InvalidOrExpiredCodeError(AuthServiceError):
    kind = ErrorKind.INVALID_OR_EXPIRED_CODE
    default_message = "Invalid or expired verification code."


class MissingTokenError(AuthServiceError):
    kind = ErrorKind.MISSING_TOKEN
    default_message = "Refresh token was not provided."


class InvalidOrExpiredTokenError(AuthServiceError):
    kind = ErrorKind.INVALID_OR_EXPIRED_TOKEN
    default_message = "Invalid or expired refresh token."


class NotFoundError(AuthServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "User not found."


class ForbiddenError(AuthServiceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Not allowed to perform this operation."


class ValidationFailedError(AuthServiceError):
    kind = ErrorKind.VALIDATION_ERROR
    default_message = "Invalid input."
