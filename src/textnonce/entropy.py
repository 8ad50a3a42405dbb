"""Secure random byte sources.

The primary tier is the operating system (``os.urandom``), which is safe to
call from any thread. When the OS source raises, bytes are drawn from a
process-wide ChaCha20 keystream that is seeded once from the OS and guarded
by a lock. Callers that would rather fail than degrade can pass
``strict=True``.
"""

from __future__ import annotations

import logging
import os
import secrets
import threading
from typing import Optional, Protocol

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from textnonce.exceptions import EntropyUnavailableError
from textnonce.logging_config import structured_log_extra

logger = logging.getLogger(__name__)

_KEY_BYTES = 32
_NONCE_BYTES = 16
# The first 4 nonce bytes are the little-endian block counter. It starts at
# zero after every (re)key, so rekeying at 1 GiB stays far below its 256 GiB wrap.
_COUNTER_BYTES = 4
_REKEY_AFTER_BYTES = 1 << 30


class EntropySource(Protocol):
    def fill(self, size: int) -> bytes: ...


class FallbackRandom:
    """Lock-guarded ChaCha20 keystream generator seeded from the OS."""

    def __init__(self, seed: Optional[bytes] = None) -> None:
        if seed is None:
            try:
                seed = secrets.token_bytes(_KEY_BYTES + _NONCE_BYTES)
            except (OSError, NotImplementedError) as exc:
                logger.error(
                    "Unable to seed fallback random generator",
                    extra=structured_log_extra(
                        event="entropy_unavailable", error=str(exc)
                    ),
                )
                raise EntropyUnavailableError(
                    "no entropy available to seed the fallback generator"
                ) from exc
        if len(seed) != _KEY_BYTES + _NONCE_BYTES:
            raise ValueError(f"seed must be {_KEY_BYTES + _NONCE_BYTES} bytes")

        self._lock = threading.Lock()
        self._rekey(seed)

    def _rekey(self, seed: bytes) -> None:
        nonce = bytes(_COUNTER_BYTES) + seed[_KEY_BYTES + _COUNTER_BYTES :]
        algorithm = algorithms.ChaCha20(seed[:_KEY_BYTES], nonce)
        self._encryptor = Cipher(algorithm, mode=None).encryptor()
        self._produced = 0

    def fill(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("size must be non-negative")
        if size == 0:
            return b""
        with self._lock:
            if self._produced + size > _REKEY_AFTER_BYTES:
                self._rekey(self._encryptor.update(bytes(_KEY_BYTES + _NONCE_BYTES)))
            self._produced += size
            return self._encryptor.update(bytes(size))


_fallback: Optional[FallbackRandom] = None
_fallback_lock = threading.Lock()


def get_fallback_random() -> FallbackRandom:
    """Return the process-wide fallback generator, seeding it on first use."""

    global _fallback
    if _fallback is None:
        with _fallback_lock:
            if _fallback is None:
                _fallback = FallbackRandom()
    return _fallback


def _reset_after_fork() -> None:
    """Forget the inherited fallback state so a child never replays the parent's stream."""

    global _fallback, _fallback_lock
    _fallback = None
    _fallback_lock = threading.Lock()


if hasattr(os, "register_at_fork"):
    os.register_at_fork(after_in_child=_reset_after_fork)


class OsEntropySource:
    """Random bytes from the OS, degrading to :class:`FallbackRandom`."""

    def __init__(
        self, strict: bool = False, fallback: Optional[FallbackRandom] = None
    ) -> None:
        self.strict = strict
        self._fallback = fallback

    def fill(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("size must be non-negative")
        if size == 0:
            return b""
        try:
            return os.urandom(size)
        except (OSError, NotImplementedError) as exc:
            if self.strict:
                logger.error(
                    "OS entropy unavailable and strict mode is enabled",
                    extra=structured_log_extra(
                        event="entropy_unavailable", error=str(exc)
                    ),
                )
                raise EntropyUnavailableError("OS entropy source unavailable") from exc

            logger.warning(
                "OS entropy unavailable; using fallback generator",
                extra=structured_log_extra(event="entropy_fallback", error=str(exc)),
            )
            fallback = self._fallback or get_fallback_random()
            return fallback.fill(size)


class FixedEntropySource:
    """Replays ``data`` cyclically. Only meant for reproducible tests."""

    def __init__(self, data: bytes) -> None:
        if not data:
            raise ValueError("data must not be empty")
        self._data = bytes(data)

    def fill(self, size: int) -> bytes:
        repeats, remainder = divmod(size, len(self._data))
        return self._data * repeats + self._data[:remainder]
