"""Shared fixtures for deterministic nonce generation."""
from __future__ import annotations

import pytest

from textnonce.clock import FixedClock
from textnonce.entropy import FixedEntropySource
from textnonce.generator import NonceGenerator


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(seconds=1_700_000_000, nanoseconds=123_456_789)


@pytest.fixture
def fixed_entropy() -> FixedEntropySource:
    return FixedEntropySource(b"\xff")


@pytest.fixture
def fixed_generator(fixed_clock, fixed_entropy) -> NonceGenerator:
    return NonceGenerator(clock=fixed_clock, entropy=fixed_entropy)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "TEXTNONCE_ENV",
        "TEXTNONCE_DEFAULT_LENGTH",
        "TEXTNONCE_ALPHABET",
        "TEXTNONCE_STRICT_ENTROPY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
