"""Convenience bootstrapper for loading config, logging and a generator."""

import logging
from pathlib import Path
from typing import Optional, Tuple

from textnonce.config import AppConfig, load_config
from textnonce.generator import NonceGenerator
from textnonce.logging_config import configure_logging_from_config

logger = logging.getLogger(__name__)


def bootstrap(
    config_path: Optional[Path] = None, env: Optional[str] = None
) -> Tuple[NonceGenerator, AppConfig]:
    """Load configuration, configure root logging and build a generator.

    Returns:
        A tuple of ``(NonceGenerator, AppConfig)`` ready for use.
    """

    config = load_config(config_path=config_path, env=env)
    configure_logging_from_config(config)
    generator = NonceGenerator.from_config(config.nonce)

    logger.info(
        "Nonce generator ready",
        extra={
            "event": "generator_ready",
            "length": config.nonce.default_length,
            "alphabet": config.nonce.alphabet,
            "strict_entropy": config.nonce.strict_entropy,
        },
    )
    return generator, config


__all__ = ["bootstrap", "AppConfig", "NonceGenerator"]
