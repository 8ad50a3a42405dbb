"""Pydantic adapter for exchanging nonces as a single-field record.

The core :class:`~textnonce.models.NonceValue` knows nothing about pydantic;
this module maps it to and from ``{"nonce": "<text>"}``.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from textnonce.models import NonceValue


class NonceRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    nonce: str

    @field_validator("nonce", mode="before")
    @classmethod
    def _unwrap_nonce_value(cls, value: Any) -> Any:
        if isinstance(value, NonceValue):
            return value.as_text()
        return value


def to_record(nonce: NonceValue) -> NonceRecord:
    return NonceRecord(nonce=nonce.as_text())


def from_record(record: NonceRecord | Mapping[str, Any]) -> NonceValue:
    """Build a :class:`NonceValue` from a record or a plain mapping."""

    if not isinstance(record, NonceRecord):
        record = NonceRecord.model_validate(record)
    return NonceValue.from_text(record.nonce)


def dump_json(nonce: NonceValue) -> str:
    return to_record(nonce).model_dump_json()


def load_json(payload: str | bytes) -> NonceValue:
    return from_record(NonceRecord.model_validate_json(payload))


__all__ = ["NonceRecord", "to_record", "from_record", "dump_json", "load_json"]
