from __future__ import annotations

# Re-export loader helpers
from .config_loader import get_config_dir, load_config

# Re-export config models
from .config_models import AppConfig, LoggingConfig, NonceConfig

__all__ = [
    # models
    "NonceConfig",
    "LoggingConfig",
    "AppConfig",
    # loader
    "get_config_dir",
    "load_config",
]
