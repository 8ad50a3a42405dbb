from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import appdirs  # type: ignore[import-untyped]
import yaml  # type: ignore[import-untyped]

from textnonce.config_models import AppConfig, LoggingConfig, NonceConfig
from textnonce.exceptions import NonceConfigError
from textnonce.generator import DEFAULT_LENGTH, validate_length
from textnonce.models import Base64Alphabet

APP_NAME = "textnonce"
ALLOWED_ENVS = {"dev", "test", "prod"}
DEFAULT_ENV = "prod"

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """
    Returns the OS-specific configuration directory using appdirs.
    """
    return Path(appdirs.user_config_dir(APP_NAME))


def _read_yaml_mapping(path: Path, event: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning(
            "Configuration file is not a mapping; ignoring it",
            extra={"event": event, "config_path": str(path)},
        )
        return {}
    return data


def _deep_merge_dicts(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    merged = base.copy()
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return None


def _apply_env_overrides(nonce_data: Dict[str, Any]) -> Dict[str, Any]:
    overrides = {
        "default_length": os.environ.get("TEXTNONCE_DEFAULT_LENGTH"),
        "alphabet": os.environ.get("TEXTNONCE_ALPHABET"),
        "strict_entropy": os.environ.get("TEXTNONCE_STRICT_ENTROPY"),
    }
    merged = nonce_data.copy()
    for key, value in overrides.items():
        if value is None or value == "":
            continue
        if key == "default_length":
            try:
                merged[key] = int(value)
            except ValueError:
                merged[key] = value
        else:
            merged[key] = value
    return merged


def _section(raw_config: Dict[str, Any], name: str, config_path: Path) -> Dict[str, Any]:
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        logger.warning(
            "%s config is not a mapping; using defaults",
            name.capitalize(),
            extra={"event": f"config_invalid_{name}", "config_path": str(config_path)},
        )
        return {}
    return data


def _build_nonce_config(data: Dict[str, Any], config_path: Path) -> NonceConfig:
    defaults = NonceConfig()

    default_length = data.get("default_length", defaults.default_length)
    try:
        validate_length(default_length)
    except (TypeError, NonceConfigError) as exc:
        logger.warning(
            "nonce.default_length is invalid (%s); using default",
            exc,
            extra={"event": "config_invalid_length", "config_path": str(config_path)},
        )
        default_length = DEFAULT_LENGTH

    alphabet = data.get("alphabet", defaults.alphabet)
    try:
        alphabet = Base64Alphabet.coerce(alphabet).value
    except ValueError:
        logger.warning(
            "nonce.alphabet '%s' is unknown; using default",
            alphabet,
            extra={"event": "config_invalid_alphabet", "config_path": str(config_path)},
        )
        alphabet = defaults.alphabet

    flags = {}
    for name in ("padded", "strict_entropy"):
        raw_value = data.get(name, getattr(defaults, name))
        parsed = _parse_bool(raw_value)
        if parsed is None:
            logger.warning(
                "nonce.%s is not a boolean; using default",
                name,
                extra={"event": f"config_invalid_{name}", "config_path": str(config_path)},
            )
            parsed = getattr(defaults, name)
        flags[name] = parsed

    return NonceConfig(
        default_length=default_length,
        alphabet=alphabet,
        padded=flags["padded"],
        strict_entropy=flags["strict_entropy"],
    )


def _build_logging_config(data: Dict[str, Any], config_path: Path) -> LoggingConfig:
    defaults = LoggingConfig()

    level = str(data.get("level", defaults.level)).upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(
            "logging.level '%s' is unknown; using default",
            level,
            extra={"event": "config_invalid_log_level", "config_path": str(config_path)},
        )
        level = defaults.level

    json_output = _parse_bool(data.get("json", defaults.json))
    if json_output is None:
        json_output = defaults.json

    return LoggingConfig(level=level, json=json_output)


def load_config(
    config_path: Optional[Path] = None, env: Optional[str] = None
) -> AppConfig:
    """
    Loads the configuration from the default location or a specified path.

    ``config.<env>.yaml`` next to the base file is deep-merged on top, then
    ``TEXTNONCE_*`` environment variables override the nonce section.
    """
    if config_path is None:
        config_path = get_config_dir() / "config.yaml"

    config_path = Path(config_path).expanduser()

    initial_env = env if env is not None else os.environ.get("TEXTNONCE_ENV")
    if initial_env not in ALLOWED_ENVS:
        if initial_env is not None:
            logger.warning(
                "Invalid environment '%s'; defaulting to '%s'",
                initial_env,
                DEFAULT_ENV,
                extra={"event": "config_invalid_env", "config_path": str(config_path)},
            )
        effective_env = DEFAULT_ENV
    else:
        effective_env = initial_env

    if not config_path.exists():
        logger.info(
            "Configuration file not found; using defaults",
            extra={"event": "config_missing_file", "config_path": str(config_path)},
        )
        raw_config: Dict[str, Any] = {}
    else:
        raw_config = _read_yaml_mapping(config_path, "config_invalid_format")

    env_config_path = config_path.parent / f"config.{effective_env}.yaml"
    if env_config_path.exists():
        env_config = _read_yaml_mapping(env_config_path, "config_invalid_env_file")
        raw_config = _deep_merge_dicts(raw_config, env_config)

    nonce_data = _apply_env_overrides(_section(raw_config, "nonce", config_path))
    logging_data = _section(raw_config, "logging", config_path)

    return AppConfig(
        nonce=_build_nonce_config(nonce_data, config_path),
        logging=_build_logging_config(logging_data, config_path),
        env=effective_env,
    )
