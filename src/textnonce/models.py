from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, FrozenSet, NamedTuple

from textnonce.exceptions import MalformedNonceError

# Sub-second nanoseconds (u32) then whole seconds since the epoch (i64),
# both little-endian.
TIME_PREFIX_FORMAT = "<Iq"
TIME_PREFIX_BYTES = struct.calcsize(TIME_PREFIX_FORMAT)
TIME_PREFIX_CHARS = TIME_PREFIX_BYTES // 3 * 4

_BASE_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
_URL_SAFE_TO_STANDARD = str.maketrans("-_", "+/")


class TimePrefix(NamedTuple):
    seconds: int
    nanoseconds: int


class Base64Alphabet(str, Enum):
    """The two base64 character sets a nonce can be encoded with."""

    STANDARD = "standard"
    URL_SAFE = "url_safe"

    @property
    def charset(self) -> FrozenSet[str]:
        extra = "+/" if self is Base64Alphabet.STANDARD else "-_"
        return frozenset(_BASE_CHARS + extra)

    @property
    def encoder(self) -> Callable[[bytes], bytes]:
        if self is Base64Alphabet.STANDARD:
            return base64.b64encode
        return base64.urlsafe_b64encode

    def encode_bytes(self, raw: bytes, padded: bool = False) -> str:
        """Encode ``raw`` without line breaks, stripping ``=`` unless ``padded``."""

        text = self.encoder(raw).decode("ascii")
        return text if padded else text.rstrip("=")

    @classmethod
    def coerce(cls, value: "Base64Alphabet | str") -> "Base64Alphabet":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower().replace("-", "_"))
        except ValueError:
            raise ValueError(
                f"Unknown base64 alphabet {value!r}; expected one of "
                + ", ".join(member.value for member in cls)
            ) from None


@dataclass(frozen=True)
class NonceValue:
    """An immutable, opaque text token.

    Equality and hashing follow the string content. ``from_text`` and
    ``as_text`` are the only seam serialization layers need.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(
                f"NonceValue wraps a str, got {type(self.value).__name__}"
            )

    @classmethod
    def from_text(cls, text: str) -> NonceValue:
        return cls(text)

    def as_text(self) -> str:
        return self.value

    def into_text(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

    def __len__(self) -> int:
        return len(self.value)

    def time_prefix(self) -> TimePrefix:
        """Decode the time component carried by the first 16 characters.

        Both alphabets are accepted. Raises :class:`MalformedNonceError` if
        the value is too short or the prefix is not valid base64.
        """

        head = self.value[:TIME_PREFIX_CHARS]
        if len(head) < TIME_PREFIX_CHARS:
            raise MalformedNonceError(
                f"nonce must have at least {TIME_PREFIX_CHARS} characters"
            )
        try:
            raw = base64.b64decode(
                head.translate(_URL_SAFE_TO_STANDARD), validate=True
            )
        except (binascii.Error, ValueError) as exc:
            raise MalformedNonceError(f"nonce prefix is not base64: {exc}") from exc
        if len(raw) != TIME_PREFIX_BYTES:
            raise MalformedNonceError(
                f"nonce prefix decodes to {len(raw)} bytes, expected {TIME_PREFIX_BYTES}"
            )

        nanoseconds, seconds = struct.unpack(TIME_PREFIX_FORMAT, raw)
        return TimePrefix(seconds=seconds, nanoseconds=nanoseconds)

    def issued_at(self) -> datetime:
        """UTC instant encoded in the time prefix, truncated to microseconds."""

        prefix = self.time_prefix()
        try:
            base = datetime.fromtimestamp(prefix.seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedNonceError(
                f"nonce seconds {prefix.seconds} out of datetime range"
            ) from exc
        return base + timedelta(microseconds=prefix.nanoseconds // 1000)


def pack_time_prefix(prefix: TimePrefix) -> bytes:
    """Return the 12 byte little-endian encoding of ``prefix``."""

    return struct.pack(TIME_PREFIX_FORMAT, prefix.nanoseconds, prefix.seconds)
