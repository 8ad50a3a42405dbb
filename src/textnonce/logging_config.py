"""Structured logging configuration helpers for textnonce."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from textnonce.config_models import AppConfig

DEFAULT_ENV = os.getenv("TEXTNONCE_ENV", os.getenv("ENV", "local"))

_RESERVED_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter that emits a stable set of fields.

    Values passed through the logging ``extra`` dictionary are preserved, so
    callers can attach ``event``, ``length`` or ``alphabet`` without them
    being dropped. ``event`` is a short machine-readable label for the line.
    """

    def __init__(self, env: str | None = None) -> None:
        super().__init__()
        self.env = env or DEFAULT_ENV

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": log_time.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "event": getattr(record, "event", None),
            "env": getattr(record, "env", self.env),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_FIELDS:
                continue
            payload.setdefault(key, value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(
    level: int | str = logging.INFO, env: str | None = None, json_output: bool = True
) -> None:
    """Configure root logging with a stdout handler (JSON unless disabled)."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JsonFormatter(env=env))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    root_logger.addHandler(handler)


def structured_log_extra(
    *,
    env: str | None = None,
    event: str | None = None,
    length: int | None = None,
    alphabet: str | None = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Build a consistent set of logging extras with common fields.

    ``length`` and ``alphabet`` are only included when provided. Additional
    custom fields are preserved via ``**kwargs``. Never pass nonce text here.
    """

    extra: Dict[str, Any] = {
        "event": event,
        "env": env or DEFAULT_ENV,
    }

    identifier_fields = {"length": length, "alphabet": alphabet}
    for key, value in identifier_fields.items():
        if value is not None:
            extra[key] = value

    extra.update(kwargs)
    return extra


def configure_logging_from_config(config: AppConfig) -> None:
    """Apply the ``logging`` section and environment of a loaded config."""

    configure_logging(
        level=config.logging.level,
        env=config.env,
        json_output=config.logging.json,
    )


__all__: list[str] = [
    "JsonFormatter",
    "configure_logging",
    "structured_log_extra",
    "configure_logging_from_config",
]
