"""Symmetric field codec.

Every sensitive scalar passes through a Codec on its way to and from the
record repository. Ciphertext is a Fernet token: AES-128-CBC with a fresh
random IV per call plus an HMAC-SHA256 tag, so encrypting the same value
twice never yields the same text. Persisted sensitive columns therefore
cannot be compared or ordered in SQL; all such filtering happens after
decryption.

The Codec is built once per process from the provisioned key and injected
into stores and analytics engines. There is no module-level key.
"""

import base64
import binascii
import json
import secrets
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from finvault.config import Settings
from finvault.domain.errors import CryptoError

KEY_BYTES = 32

Number = Union[Decimal, int, float]


def generate_key() -> str:
    """Return a new random key as a 64-character hex string."""
    return secrets.token_hex(KEY_BYTES)


class Codec:
    """Encrypts and decrypts numbers, strings, dates and JSON payloads."""

    def __init__(self, key_hex: str):
        """Initialize the codec.

        Args:
            key_hex: 64-character hex string (32 bytes)

        Raises:
            CryptoError: If the key is missing or malformed
        """
        if not key_hex:
            raise CryptoError("Encryption key not provided; set FINVAULT_ENCRYPTION_KEY")
        try:
            raw = bytes.fromhex(key_hex)
        except ValueError as e:
            raise CryptoError("Encryption key must be a hex string") from e
        if len(raw) != KEY_BYTES:
            raise CryptoError(
                f"Encryption key must be a {KEY_BYTES * 2}-character hex string ({KEY_BYTES} bytes)"
            )
        self._fernet = Fernet(base64.urlsafe_b64encode(raw))

    @classmethod
    def from_settings(cls, settings: Settings) -> "Codec":
        return cls(settings.encryption_key)

    # Strings
    def encrypt_string(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt_string(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError, AttributeError, binascii.Error) as e:
            raise CryptoError("Unable to decrypt field: wrong key or corrupted ciphertext") from e

    def encrypt_optional_string(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return self.encrypt_string(value)

    def decrypt_optional_string(self, ciphertext: Optional[str]) -> Optional[str]:
        if ciphertext is None:
            return None
        return self.decrypt_string(ciphertext)

    # Numbers
    def encrypt_number(self, value: Number) -> str:
        return self.encrypt_string(str(value))

    def decrypt_number(self, ciphertext: str) -> Decimal:
        text = self.decrypt_string(ciphertext)
        try:
            return Decimal(text)
        except InvalidOperation as e:
            raise CryptoError("Decrypted field is not a number") from e

    def encrypt_optional_number(self, value: Optional[Number]) -> Optional[str]:
        if value is None:
            return None
        return self.encrypt_number(value)

    def decrypt_optional_number(self, ciphertext: Optional[str]) -> Optional[Decimal]:
        if ciphertext is None:
            return None
        return self.decrypt_number(ciphertext)

    # Dates
    def encrypt_date(self, value: date) -> str:
        return self.encrypt_string(value.isoformat())

    def decrypt_date(self, ciphertext: str) -> date:
        text = self.decrypt_string(ciphertext)
        try:
            return date.fromisoformat(text)
        except ValueError as e:
            raise CryptoError("Decrypted field is not an ISO date") from e

    def encrypt_optional_date(self, value: Optional[date]) -> Optional[str]:
        if value is None:
            return None
        return self.encrypt_date(value)

    def decrypt_optional_date(self, ciphertext: Optional[str]) -> Optional[date]:
        if ciphertext is None:
            return None
        return self.decrypt_date(ciphertext)

    # JSON payloads (list fields, notification config and metadata)
    def encrypt_json(self, value: Any) -> str:
        return self.encrypt_string(json.dumps(value, separators=(",", ":"), sort_keys=True))

    def decrypt_json(self, ciphertext: str) -> Any:
        text = self.decrypt_string(ciphertext)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise CryptoError("Decrypted field is not valid JSON") from e

    def encrypt_optional_json(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        return self.encrypt_json(value)

    def decrypt_optional_json(self, ciphertext: Optional[str]) -> Any:
        if ciphertext is None:
            return None
        return self.decrypt_json(ciphertext)
