"""Binary codec for validation token payloads.

Layout, in this exact order::

    [created_at: int64 LE ticks][resource_id][purpose][security_stamp]

Ticks are 100 ns intervals since 0001-01-01T00:00:00Z. Each string is an
unsigned LEB128 byte length (at most 5 bytes) followed by UTF-8 bytes, the
same framing .NET's BinaryWriter produces. Nothing may follow the last field.
"""

import struct
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from stamplink.domain.entities.token_payload import TokenPayload
from stamplink.domain.exceptions import DecodingError, InputValidationError

TICKS_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)
TICKS_PER_MICROSECOND = 10

_INT64 = struct.Struct("<q")
_MAX_STRING_LENGTH = 2**31 - 1
_MAX_PREFIX_BYTES = 5


def datetime_to_ticks(value: datetime) -> int:
    """Convert an aware datetime to UTC ticks."""
    return ((value - TICKS_EPOCH) // timedelta(microseconds=1)) * TICKS_PER_MICROSECOND


def ticks_to_datetime(ticks: int) -> datetime:
    """Convert UTC ticks to an aware datetime, truncating to microseconds.

    Raises:
        DecodingError: If the ticks fall outside the datetime range.
    """
    if ticks < 0:
        raise DecodingError("Timestamp is before the tick epoch")
    try:
        return TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)
    except OverflowError as e:
        raise DecodingError("Timestamp is out of range") from e


class _PayloadReader:
    """Sequential reader over a payload buffer that never reads past the end."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read_bytes(self, count: int) -> bytes:
        if count > self.remaining:
            raise DecodingError("Unexpected end of payload")
        chunk = self._data[self._offset : self._offset + count].tobytes()
        self._offset += count
        return chunk

    def read_int64(self) -> int:
        return _INT64.unpack(self.read_bytes(_INT64.size))[0]

    def read_length(self) -> int:
        value = 0
        for index in range(_MAX_PREFIX_BYTES):
            byte = self.read_bytes(1)[0]
            value |= (byte & 0x7F) << (7 * index)
            if not byte & 0x80:
                if index and byte == 0:
                    raise DecodingError("Non-canonical string length prefix")
                if value > _MAX_STRING_LENGTH:
                    raise DecodingError("String length prefix out of range")
                return value
        raise DecodingError("String length prefix is too long")

    def read_string(self) -> str:
        raw = self.read_bytes(self.read_length())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError("String field is not valid UTF-8") from e


class PayloadCodec:
    """Encode and decode token payloads to and from their binary layout."""

    @staticmethod
    def _encode_length(length: int) -> bytes:
        """Encode a string byte length as unsigned LEB128."""
        if length > _MAX_STRING_LENGTH:
            raise InputValidationError("String field is too long to encode")
        out = bytearray()
        while length >= 0x80:
            out.append((length & 0x7F) | 0x80)
            length >>= 7
        out.append(length)
        return bytes(out)

    @classmethod
    def _encode_string(cls, name: str, value: str) -> bytes:
        try:
            raw = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InputValidationError(f"{name} is not encodable as UTF-8") from e
        return cls._encode_length(len(raw)) + raw

    @classmethod
    def encode(cls, payload: TokenPayload) -> bytes:
        """Serialize a payload in the fixed field order.

        Raises:
            InputValidationError: If a string field cannot be encoded as UTF-8.
        """
        return b"".join(
            [
                _INT64.pack(datetime_to_ticks(payload.created_at)),
                cls._encode_string("resource_id", payload.resource_id),
                cls._encode_string("purpose", payload.purpose),
                cls._encode_string("security_stamp", payload.security_stamp),
            ]
        )

    @classmethod
    def decode(cls, data: bytes) -> TokenPayload:
        """Deserialize a payload, rejecting anything but an exact encoding.

        Raises:
            DecodingError: If the data is truncated, has bad field boundaries,
                contains invalid UTF-8, or carries trailing bytes.
        """
        reader = _PayloadReader(data)
        created_at = ticks_to_datetime(reader.read_int64())
        resource_id = reader.read_string()
        purpose = reader.read_string()
        security_stamp = reader.read_string()

        if reader.remaining:
            raise DecodingError(f"Unexpected {reader.remaining} trailing bytes after payload")

        try:
            return TokenPayload(
                created_at=created_at,
                resource_id=resource_id,
                purpose=purpose,
                security_stamp=security_stamp,
            )
        except ValidationError as e:
            raise DecodingError("Decoded payload is invalid") from e
