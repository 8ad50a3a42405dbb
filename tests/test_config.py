"""Tests for configuration loading, overlays and environment overrides."""

import logging
from pathlib import Path

import pytest

import appdirs  # type: ignore[import-untyped]
from textnonce.config import AppConfig, NonceConfig, get_config_dir, load_config
from textnonce.entropy import OsEntropySource
from textnonce.generator import NonceGenerator
from textnonce.models import Base64Alphabet


@pytest.fixture
def config_dir(clean_env, tmp_path: Path) -> Path:
    directory = tmp_path / "config"
    directory.mkdir(parents=True, exist_ok=True)
    clean_env.setattr(appdirs, "user_config_dir", lambda appname: str(directory))
    return directory


def test_missing_file_uses_defaults(config_dir):
    config = load_config()

    assert isinstance(config, AppConfig)
    assert config.nonce == NonceConfig()
    assert config.logging.level == "INFO"
    assert config.logging.json is True
    assert config.env == "prod"


def test_config_dir_comes_from_appdirs(config_dir):
    assert get_config_dir() == config_dir


def test_reads_nonce_section(config_dir):
    (config_dir / "config.yaml").write_text(
        """
nonce:
  default_length: 48
  alphabet: url_safe
  padded: true
  strict_entropy: true
logging:
  level: debug
  json: false
""".strip()
    )

    config = load_config()

    assert config.nonce.default_length == 48
    assert config.nonce.alphabet == "url_safe"
    assert config.nonce.padded is True
    assert config.nonce.strict_entropy is True
    assert config.logging.level == "DEBUG"
    assert config.logging.json is False


def test_env_overlay_is_deep_merged(config_dir, clean_env):
    (config_dir / "config.yaml").write_text(
        """
nonce:
  default_length: 48
  alphabet: url_safe
""".strip()
    )
    (config_dir / "config.dev.yaml").write_text(
        """
nonce:
  default_length: 24
""".strip()
    )
    clean_env.setenv("TEXTNONCE_ENV", "dev")

    config = load_config()

    assert config.env == "dev"
    assert config.nonce.default_length == 24
    assert config.nonce.alphabet == "url_safe"


def test_invalid_env_falls_back_to_prod(config_dir, caplog):
    with caplog.at_level(logging.WARNING, logger="textnonce.config_loader"):
        config = load_config(env="staging")

    assert config.env == "prod"
    assert any(getattr(r, "event", None) == "config_invalid_env" for r in caplog.records)


def test_environment_variables_override_file(config_dir, clean_env):
    (config_dir / "config.yaml").write_text("nonce:\n  default_length: 48\n")
    clean_env.setenv("TEXTNONCE_DEFAULT_LENGTH", "64")
    clean_env.setenv("TEXTNONCE_ALPHABET", "url-safe")
    clean_env.setenv("TEXTNONCE_STRICT_ENTROPY", "yes")

    config = load_config()

    assert config.nonce.default_length == 64
    assert config.nonce.alphabet == "url_safe"
    assert config.nonce.strict_entropy is True


@pytest.mark.parametrize("length", [12, 30, "abc", True])
def test_invalid_length_falls_back_to_default(config_dir, caplog, length):
    (config_dir / "config.yaml").write_text(f"nonce:\n  default_length: {length}\n")

    with caplog.at_level(logging.WARNING, logger="textnonce.config_loader"):
        config = load_config()

    assert config.nonce.default_length == 32
    assert any(getattr(r, "event", None) == "config_invalid_length" for r in caplog.records)


def test_invalid_values_fall_back(config_dir):
    (config_dir / "config.yaml").write_text(
        """
nonce:
  alphabet: base32
  padded: maybe
logging:
  level: chatty
""".strip()
    )

    config = load_config()

    assert config.nonce.alphabet == "standard"
    assert config.nonce.padded is False
    assert config.logging.level == "INFO"


def test_non_mapping_file_is_ignored(config_dir):
    (config_dir / "config.yaml").write_text("- just\n- a list\n")
    assert load_config().nonce == NonceConfig()


def test_non_mapping_section_is_ignored(config_dir):
    (config_dir / "config.yaml").write_text("nonce: 48\n")
    assert load_config().nonce == NonceConfig()


def test_explicit_path(clean_env, tmp_path: Path):
    path = tmp_path / "custom.yaml"
    path.write_text("nonce:\n  default_length: 20\n")

    assert load_config(path).nonce.default_length == 20


def test_generator_from_config():
    config = NonceConfig(default_length=20, alphabet="url_safe", strict_entropy=True)
    generator = NonceGenerator.from_config(config)

    assert generator.default_length == 20
    assert generator.default_alphabet is Base64Alphabet.URL_SAFE
    assert isinstance(generator._entropy, OsEntropySource)
    assert generator._entropy.strict is True

    nonce = generator.new()
    assert len(nonce) == 20
    assert set(nonce.as_text()) <= Base64Alphabet.URL_SAFE.charset
