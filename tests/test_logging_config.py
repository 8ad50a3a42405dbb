import io
import json
import logging

from textnonce.clock import FixedClock
from textnonce.config_models import AppConfig, LoggingConfig
from textnonce.entropy import FixedEntropySource
from textnonce.generator import NonceGenerator
from textnonce.logging_config import (
    DEFAULT_ENV,
    JsonFormatter,
    configure_logging,
    configure_logging_from_config,
    structured_log_extra,
)


def _build_logger(stream: io.StringIO, name: str = "textnonce.test.logging") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.handlers = [handler]
    return logger


def test_structured_log_extra_adds_common_fields():
    extra = structured_log_extra(
        event="nonce_generated",
        length=32,
        alphabet="standard",
        custom_field="value",
    )

    assert extra["event"] == "nonce_generated"
    assert extra["env"] == DEFAULT_ENV
    assert extra["length"] == 32
    assert extra["alphabet"] == "standard"
    assert extra["custom_field"] == "value"

    minimal_extra = structured_log_extra()
    assert "length" not in minimal_extra
    assert "alphabet" not in minimal_extra
    assert minimal_extra["event"] is None


def test_json_formatter_preserves_extra_fields():
    stream = io.StringIO()
    logger = _build_logger(stream)

    logger.info(
        "log message",
        extra=structured_log_extra(event="entropy_fallback", length=24, custom_field="value"),
    )

    payload = json.loads(stream.getvalue())

    assert payload["event"] == "entropy_fallback"
    assert payload["length"] == 24
    assert payload["custom_field"] == "value"
    assert payload["env"] == DEFAULT_ENV
    assert payload["message"] == "log message"
    assert payload["level"] == "INFO"


def test_generated_nonce_text_is_never_logged():
    stream = io.StringIO()
    _build_logger(stream, name="textnonce.generator")
    generator = NonceGenerator(
        clock=FixedClock(seconds=1), entropy=FixedEntropySource(b"\xff")
    )

    try:
        nonce = generator.generate(24)
    finally:
        logging.getLogger("textnonce.generator").handlers = []
        logging.getLogger("textnonce.generator").propagate = True
        logging.getLogger("textnonce.generator").setLevel(logging.NOTSET)

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert [line["event"] for line in lines] == ["nonce_generated"]
    assert lines[0]["length"] == 24
    assert lines[0]["alphabet"] == "standard"
    assert nonce.as_text() not in stream.getvalue()


def test_configure_logging_installs_single_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging(level=logging.DEBUG, env="test")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, JsonFormatter)
        assert formatter.env == "test"
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_from_config_applies_logging_section():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        config = AppConfig(logging=LoggingConfig(level="WARNING", json=False), env="dev")
        configure_logging_from_config(config)

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert not isinstance(formatter, JsonFormatter)
        assert isinstance(formatter, logging.Formatter)

        configure_logging_from_config(AppConfig(env="test"))

        assert root.level == logging.INFO
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, JsonFormatter)
        assert formatter.env == "test"
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
