"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Not found errors (404)
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    TARGET_PROFILE_MISSING = "TARGET_PROFILE_MISSING"

    # Validation errors (400 / 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SELF_CONNECT_NOT_ALLOWED = "SELF_CONNECT_NOT_ALLOWED"

    # Precondition errors (409)
    REQUESTER_PROFILE_MISSING = "REQUESTER_PROFILE_MISSING"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500 / 503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class NotAuthenticatedError(AuthenticationError):
    """The operation needs a signed-in caller and none was supplied."""

    def __init__(self, message: str = "Please sign in first") -> None:
        super().__init__(message=message, error_code=ErrorCode.UNAUTHORIZED)


class SelfConnectNotAllowedError(AppException):
    """A player tried to connect with their own profile."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.SELF_CONNECT_NOT_ALLOWED,
            message="You cannot connect with your own profile",
            status_code=400,
            details={"profile_id": profile_id},
        )


class RequesterProfileMissingError(AppException):
    """The caller has not completed onboarding yet."""

    def __init__(self, requester_id: str, target_profile_id: str | None = None) -> None:
        details: dict[str, str] = {"requester_id": requester_id}
        if target_profile_id:
            details["target_profile_id"] = target_profile_id
        super().__init__(
            error_code=ErrorCode.REQUESTER_PROFILE_MISSING,
            message="Create your player profile before connecting",
            status_code=409,
            details=details,
        )


class TargetProfileMissingError(AppException):
    """The profile being connected to does not exist."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TARGET_PROFILE_MISSING,
            message=f"Player not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
        )


class PlayerNotFoundError(AppException):
    """Player profile not found."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PLAYER_NOT_FOUND,
            message=f"Player not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
        )


class ProfileValidationError(AppException):
    """Profile fields failed domain validation."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message="Profile validation failed",
            status_code=422,
            details=errors,
        )


class InvalidDocumentError(AppException):
    """A stored document could not be parsed into its entity."""

    def __init__(self, collection: str, document_id: str | None, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_DOCUMENT,
            message=f"Malformed {collection} document: {reason}",
            status_code=500,
            details={"collection": collection, "document_id": document_id},
        )


class DocumentStoreError(AppException):
    """The document store rejected or failed a request."""

    def __init__(self, operation: str, message: str = "Document store unavailable") -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=message,
            status_code=503,
            details={"operation": operation},
        )
