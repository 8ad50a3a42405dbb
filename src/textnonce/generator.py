# src/textnonce/generator.py

"""Nonce construction.

A nonce is a byte buffer of ``length // 4 * 3`` bytes: the first 12 bytes
hold the current time (sub-second nanoseconds as u32 LE, then whole seconds
as i64 LE) and the rest are secure random bytes. The buffer is base64
encoded, so the first 16 characters are determined by the time and every
character after that is random. Because the byte count is always a
multiple of 3 the encoding never needs padding.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Optional

from textnonce.clock import Clock, SystemClock
from textnonce.entropy import EntropySource, OsEntropySource
from textnonce.exceptions import (
    EntropyUnavailableError,
    NotAlignedError,
    TooShortError,
)
from textnonce.logging_config import structured_log_extra
from textnonce.models import (
    TIME_PREFIX_BYTES,
    Base64Alphabet,
    NonceValue,
    pack_time_prefix,
)

if TYPE_CHECKING:
    from textnonce.config_models import NonceConfig

logger = logging.getLogger(__name__)

MIN_LENGTH = 16
DEFAULT_LENGTH = 32


def validate_length(length: int) -> int:
    """Return the raw byte count for an encoded ``length`` or raise."""

    if isinstance(length, bool) or not isinstance(length, int):
        raise TypeError(f"length must be an int, got {type(length).__name__}")
    if length < MIN_LENGTH:
        raise TooShortError(length)
    if length % 4 != 0:
        raise NotAlignedError(length)
    return (length // 4) * 3


class NonceGenerator:
    """
    Builds text nonces from a clock and an entropy source.

    Instances hold no mutable state of their own, so one generator can be
    shared freely between threads.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        entropy: Optional[EntropySource] = None,
        default_length: int = DEFAULT_LENGTH,
        default_alphabet: Base64Alphabet | str = Base64Alphabet.STANDARD,
        padded: bool = False,
    ) -> None:
        validate_length(default_length)
        self._clock = clock or SystemClock()
        self._entropy = entropy or OsEntropySource()
        self.default_length = default_length
        self.default_alphabet = Base64Alphabet.coerce(default_alphabet)
        self.padded = padded

    @classmethod
    def from_config(
        cls,
        config: NonceConfig,
        clock: Optional[Clock] = None,
        entropy: Optional[EntropySource] = None,
    ) -> NonceGenerator:
        return cls(
            clock=clock,
            entropy=entropy or OsEntropySource(strict=config.strict_entropy),
            default_length=config.default_length,
            default_alphabet=config.alphabet,
            padded=config.padded,
        )

    def new(self) -> NonceValue:
        """Generate a nonce using this generator's configured defaults."""
        return self.generate_configured(
            self.default_length, self.default_alphabet, self.padded
        )

    def generate_default(self) -> NonceValue:
        """16 characters of time followed by 16 characters of randomness."""
        return self.generate_configured(DEFAULT_LENGTH, Base64Alphabet.STANDARD, False)

    def generate(self, length: int) -> NonceValue:
        return self.generate_configured(length, Base64Alphabet.STANDARD, False)

    def generate_url_safe(self, length: int) -> NonceValue:
        return self.generate_configured(length, Base64Alphabet.URL_SAFE, False)

    def generate_configured(
        self, length: int, alphabet: Base64Alphabet | str, padded: bool
    ) -> NonceValue:
        """
        Generate a nonce of exactly ``length`` characters.

        ``length`` must be at least 16 and divisible by 4, otherwise
        :class:`TooShortError` or :class:`NotAlignedError` is raised before
        the clock or entropy source is touched.
        """
        try:
            bytelength = validate_length(length)
        except (TooShortError, NotAlignedError) as exc:
            logger.debug(
                "Rejected nonce request: %s",
                exc,
                extra=structured_log_extra(event="nonce_config_rejected", length=length),
            )
            raise
        alphabet = Base64Alphabet.coerce(alphabet)

        raw = bytearray(bytelength)
        raw[:TIME_PREFIX_BYTES] = pack_time_prefix(self._clock.now())
        random_bytes = self._entropy.fill(bytelength - TIME_PREFIX_BYTES)
        if len(random_bytes) != bytelength - TIME_PREFIX_BYTES:
            raise EntropyUnavailableError("entropy source returned a short read")
        raw[TIME_PREFIX_BYTES:] = random_bytes

        nonce = NonceValue(alphabet.encode_bytes(bytes(raw), padded=padded))
        logger.debug(
            "Generated nonce",
            extra=structured_log_extra(
                event="nonce_generated", length=length, alphabet=alphabet.value
            ),
        )
        return nonce


_default_generator: Optional[NonceGenerator] = None
_default_lock = threading.Lock()


def get_default_generator() -> NonceGenerator:
    """Return the lazily created process-wide generator."""

    global _default_generator
    if _default_generator is None:
        with _default_lock:
            if _default_generator is None:
                _default_generator = NonceGenerator()
    return _default_generator


def generate_default() -> NonceValue:
    return get_default_generator().generate_default()


def generate(length: int) -> NonceValue:
    return get_default_generator().generate(length)


def generate_url_safe(length: int) -> NonceValue:
    return get_default_generator().generate_url_safe(length)


def generate_configured(
    length: int, alphabet: Base64Alphabet | str, padded: bool = False
) -> NonceValue:
    return get_default_generator().generate_configured(length, alphabet, padded)
