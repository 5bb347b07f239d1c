"""Validation token provider.

Issues and checks short-lived tokens that bind a purpose, a resource ID and a
security stamp. Tokens are the standard base64 form of an authenticated
ciphertext over the encoded payload, protected under the provider's name.

Validation runs a fixed sequence of checks and stops at the first failure:
base64 decoding, unprotecting, payload decoding, expiration, resource ID,
purpose, and finally the constant-time security stamp comparison. Every
failure, expected or not, comes back as ``False``; the reason is only logged.
"""

import base64
import binascii
import hmac
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Callable

from pydantic import ValidationError

from stamplink.core.config import get_settings
from stamplink.core.logging import get_logger
from stamplink.domain.entities.token_payload import TokenPayload
from stamplink.domain.exceptions import (
    CryptographicError,
    DecodingError,
    ExpiredError,
    FieldMismatchError,
    InputValidationError,
    TokenValidationError,
    TokenValidationEvent,
)
from stamplink.domain.services.payload_codec import PayloadCodec
from stamplink.infrastructure.security.data_protection import (
    DataProtector,
    FernetDataProtector,
)

DEFAULT_PROVIDER_NAME = "ValidationTokenProvider"
DEFAULT_TOKEN_LIFESPAN = timedelta(days=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenProvider(ABC):
    """Public contract for issuing and checking validation tokens."""

    @abstractmethod
    def generate(self, purpose: str, resource_id: str, security_stamp: str) -> str:
        """Generate a protected token for a resource."""
        pass

    @abstractmethod
    def validate(
        self,
        token: str,
        expected_purpose: str,
        expected_resource_id: str,
        expected_security_stamp: str,
    ) -> bool:
        """Check a token against the expected purpose, resource and stamp."""
        pass


class DataProtectorTokenProvider(TokenProvider):
    """Token provider backed by a DataProtector.

    The provider holds no mutable state, so one instance can serve
    concurrent generate and validate calls from any number of threads.
    """

    def __init__(
        self,
        data_protector: DataProtector,
        *,
        name: str = DEFAULT_PROVIDER_NAME,
        token_lifespan: timedelta = DEFAULT_TOKEN_LIFESPAN,
        logger: Any | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the token provider.

        Args:
            data_protector: Authenticated-encryption provider for payloads.
            name: Protection purpose the provider encrypts under. Distinct from
                the purpose field carried inside each token.
            token_lifespan: How long a generated token stays valid.
            logger: Structured logger receiving validation events.
            clock: Callable returning the current aware UTC time.
        """
        if data_protector is None:
            raise InputValidationError("data_protector must not be None")
        if not name:
            raise InputValidationError("name must not be empty")
        if token_lifespan <= timedelta(0):
            raise InputValidationError("token_lifespan must be positive")

        self.data_protector = data_protector
        self.name = name
        self.token_lifespan = token_lifespan
        self.logger = logger if logger is not None else get_logger(__name__)
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(cls, settings: Any | None = None) -> "DataProtectorTokenProvider":
        """Create a provider wired from application settings.

        Args:
            settings: Optional settings instance. Loaded from environment if omitted.
        """
        if settings is None:
            settings = get_settings()
        return cls(
            FernetDataProtector.from_settings(settings),
            name=settings.token_provider_name,
            token_lifespan=settings.token_lifespan,
        )

    def generate(self, purpose: str, resource_id: str, security_stamp: str) -> str:
        """Generate a protected token for the specified resource.

        Args:
            purpose: Caller-chosen use case, e.g. "ConfirmEmail".
            resource_id: Identifier of the entity the token is for.
            security_stamp: Current security stamp of that entity.

        Returns:
            Opaque base64 token string.

        Raises:
            InputValidationError: If any argument is None or not a string.
        """
        for arg_name, value in (
            ("purpose", purpose),
            ("resource_id", resource_id),
            ("security_stamp", security_stamp),
        ):
            if value is None:
                raise InputValidationError(f"{arg_name} must not be None")
            if not isinstance(value, str):
                raise InputValidationError(f"{arg_name} must be a string")

        try:
            payload = TokenPayload(
                created_at=self._clock(),
                resource_id=resource_id,
                purpose=purpose,
                security_stamp=security_stamp,
            )
        except ValidationError as e:
            raise InputValidationError("Token fields must be valid text") from e
        protected = self.data_protector.protect(PayloadCodec.encode(payload), self.name)

        self.logger.debug("Validation token generated", event_type=TokenValidationEvent.TOKEN_GENERATED.value)
        return base64.b64encode(protected).decode("ascii")

    def validate(
        self,
        token: str,
        expected_purpose: str,
        expected_resource_id: str,
        expected_security_stamp: str,
    ) -> bool:
        """Validate a token for the expected purpose, resource and stamp.

        Never raises. Malformed, tampered, expired and mismatched tokens all
        return False.

        Args:
            token: The token to validate.
            expected_purpose: Purpose the token must have been issued for.
            expected_resource_id: Resource the token must belong to.
            expected_security_stamp: Stamp the token must carry.

        Returns:
            True if the token is valid, False otherwise.
        """
        try:
            self._verify(token, expected_purpose, expected_resource_id, expected_security_stamp)
        except TokenValidationError as e:
            log_fields = {"event_type": e.reason.value}
            if isinstance(e, FieldMismatchError):
                log_fields["field"] = e.field
            self.logger.info("Validation token rejected", **log_fields)
            return False
        except Exception:
            self.logger.error(
                "Validation token rejected",
                event_type=TokenValidationEvent.UNHANDLED_EXCEPTION.value,
                exc_info=True,
            )
            return False

        self.logger.debug("Validation token accepted", event_type=TokenValidationEvent.TOKEN_VALIDATED.value)
        return True

    def _verify(
        self,
        token: Any,
        expected_purpose: Any,
        expected_resource_id: Any,
        expected_security_stamp: Any,
    ) -> None:
        """Run every check in order, raising on the first failure."""
        payload = self._read_payload(token)

        try:
            expires_at = payload.created_at + self.token_lifespan
        except OverflowError as e:
            raise DecodingError("Token expiration is out of range") from e
        if expires_at < self._clock():
            raise ExpiredError()

        if payload.resource_id != expected_resource_id:
            raise FieldMismatchError("resource_id")

        if payload.purpose != expected_purpose:
            raise FieldMismatchError("purpose")

        if not _constant_time_equals(payload.security_stamp, expected_security_stamp):
            raise FieldMismatchError("security_stamp")

    def _read_payload(self, token: Any) -> TokenPayload:
        """Decode, unprotect and parse a token into its payload."""
        if not isinstance(token, str) or not token:
            raise DecodingError("Token is empty", reason=TokenValidationEvent.INVALID_BASE64)

        try:
            protected = base64.b64decode(token, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodingError(
                "Token is not valid base64", reason=TokenValidationEvent.INVALID_BASE64
            ) from e

        try:
            data = self.data_protector.unprotect(protected, self.name)
        except CryptographicError as e:
            raise DecodingError(
                "Token could not be unprotected", reason=TokenValidationEvent.UNPROTECT_FAILED
            ) from e

        return PayloadCodec.decode(data)


def _constant_time_equals(actual: str, expected: Any) -> bool:
    """Compare a secret string against an expected value in constant time."""
    if not isinstance(expected, str):
        return False
    return hmac.compare_digest(
        actual.encode("utf-8"),
        expected.encode("utf-8", errors="surrogatepass"),
    )


@lru_cache
def get_token_provider() -> DataProtectorTokenProvider:
    """Get a cached token provider built from application settings."""
    return DataProtectorTokenProvider.from_settings()
