"""Authenticated encryption for token payloads.

A DataProtector seals bytes under a purpose string. Data protected under one
purpose can only be unprotected under that same purpose and master key; any
modification of the ciphertext makes unprotect fail.
"""

import base64
import threading
from abc import ABC, abstractmethod
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from stamplink.domain.exceptions import CryptographicError

KEY_DERIVATION_LABEL = b"stamplink.data-protection:"


class DataProtector(ABC):
    """Abstract base class for authenticated-encryption providers."""

    @abstractmethod
    def protect(self, data: bytes, purpose: str) -> bytes:
        """Encrypt and authenticate data under a purpose.

        Args:
            data: Plaintext bytes.
            purpose: Context string the ciphertext is bound to.

        Returns:
            Ciphertext bytes.
        """
        pass

    @abstractmethod
    def unprotect(self, data: bytes, purpose: str) -> bytes:
        """Verify and decrypt data protected under a purpose.

        Args:
            data: Ciphertext bytes produced by protect.
            purpose: Context string the ciphertext must be bound to.

        Returns:
            The original plaintext bytes.

        Raises:
            CryptographicError: If the data was tampered with, truncated, or
                protected under another key or purpose.
        """
        pass


class FernetDataProtector(DataProtector):
    """Data protector using Fernet with a per-purpose HKDF-derived key.

    Fernet provides AES-128-CBC encryption with an HMAC-SHA256 tag. Each
    purpose gets its own key, derived from the master secret with
    HKDF-SHA256, so ciphertext from one purpose never verifies under another.
    """

    def __init__(self, master_key: str) -> None:
        """Initialize the protector with a master secret.

        Args:
            master_key: Secret the per-purpose keys are derived from.
        """
        if not master_key:
            raise ValueError("master_key must not be empty")
        self._master_key = master_key.encode("utf-8")
        self._fernets: dict[str, Fernet] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Any) -> "FernetDataProtector":
        """Create a protector from the configured data protection key."""
        return cls(settings.data_protection_key)

    def _derive_key(self, purpose: str) -> bytes:
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=KEY_DERIVATION_LABEL + purpose.encode("utf-8"),
        )
        return base64.urlsafe_b64encode(hkdf.derive(self._master_key))

    def _fernet_for(self, purpose: str) -> Fernet:
        with self._lock:
            fernet = self._fernets.get(purpose)
            if fernet is None:
                fernet = Fernet(self._derive_key(purpose))
                self._fernets[purpose] = fernet
            return fernet

    def protect(self, data: bytes, purpose: str) -> bytes:
        token = self._fernet_for(purpose).encrypt(data)
        return base64.urlsafe_b64decode(token)

    def unprotect(self, data: bytes, purpose: str) -> bytes:
        fernet = self._fernet_for(purpose)
        try:
            return fernet.decrypt(base64.urlsafe_b64encode(data))
        except (InvalidToken, TypeError, ValueError) as e:
            raise CryptographicError("Unable to unprotect data") from e
