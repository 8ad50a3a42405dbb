from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class NonceConfig:
    default_length: int = 32
    alphabet: str = "standard"
    padded: bool = False
    # Raise instead of using the fallback generator when OS entropy fails.
    strict_entropy: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class AppConfig:
    nonce: NonceConfig = field(default_factory=NonceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    env: str = "prod"
