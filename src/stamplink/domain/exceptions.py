"""Errors raised while issuing and checking validation tokens.

Only InputValidationError ever reaches callers of the token provider.
The TokenValidationError family is raised inside the validation pipeline and
flattened to ``False`` before it leaves the provider; its reason is logged.
"""

from enum import Enum


class TokenValidationEvent(str, Enum):
    """Diagnostic events logged by the token provider."""

    TOKEN_GENERATED = "token_generated"
    TOKEN_VALIDATED = "token_validated"
    INVALID_BASE64 = "invalid_base64"
    UNPROTECT_FAILED = "unprotect_failed"
    MALFORMED_PAYLOAD = "malformed_payload"
    TOKEN_EXPIRED = "token_expired"
    RESOURCE_ID_MISMATCH = "resource_id_mismatch"
    PURPOSE_MISMATCH = "purpose_mismatch"
    SECURITY_STAMP_MISMATCH = "security_stamp_mismatch"
    UNHANDLED_EXCEPTION = "unhandled_exception"


class TokenError(Exception):
    """Base exception for token-related errors."""

    pass


class InputValidationError(TokenError, ValueError):
    """Raised when a required argument is missing or not usable as text."""

    pass


class CryptographicError(TokenError):
    """Raised when protected data cannot be unprotected."""

    pass


class TokenValidationError(TokenError):
    """Base exception for a token that failed validation."""

    def __init__(self, reason: TokenValidationEvent, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason.value)


class DecodingError(TokenValidationError):
    """Raised when a token or payload is structurally malformed."""

    def __init__(
        self,
        message: str,
        reason: TokenValidationEvent = TokenValidationEvent.MALFORMED_PAYLOAD,
    ) -> None:
        super().__init__(reason, message)


class ExpiredError(TokenValidationError):
    """Raised when a token's lifespan has elapsed."""

    def __init__(self) -> None:
        super().__init__(TokenValidationEvent.TOKEN_EXPIRED, "Token has expired")


class FieldMismatchError(TokenValidationError):
    """Raised when a decoded field does not match the expected value.

    Only the field name is kept; values never leave the provider.
    """

    REASONS = {
        "resource_id": TokenValidationEvent.RESOURCE_ID_MISMATCH,
        "purpose": TokenValidationEvent.PURPOSE_MISMATCH,
        "security_stamp": TokenValidationEvent.SECURITY_STAMP_MISMATCH,
    }

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(self.REASONS[field], f"Token {field} does not match")
