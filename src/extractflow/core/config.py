"""Configuration management for extractflow.

Handles TOML configuration loading from local and global paths,
with environment variable precedence for connection and credential values.
The resulting Config is passed explicitly into every orchestrator.
"""

from __future__ import annotations

import copy
import os
import tomllib
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from extractflow.core.errors import ConfigError
from extractflow.core.models import AIProvider, ProcessingOptions

# Configuration file paths
LOCAL_CONFIG_PATH = Path(".extractflow/config")
GLOBAL_CONFIG_PATH = Path.home() / ".extractflow" / "config"

# Environment variables that override file values
ENV_BASE_URL = "EXTRACTFLOW_BASE_URL"
ENV_ANON_KEY = "EXTRACTFLOW_ANON_KEY"
ENV_ACCESS_TOKEN = "EXTRACTFLOW_ACCESS_TOKEN"

DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "base_url": "",
        "anon_key": "",
        "access_token": "",
        "timeout_s": 120.0,
    },
    "extraction": {
        "ai_provider": "claude",
        "max_text_length": 50000,
        "accepted_file_types": [".txt", ".md", ".pdf", ".docx"],
        "quality_validation": True,
        "auto_approve": False,
    },
    "translation": {
        "source_language": "en",
        "target_languages": [],
        "max_retries": 2,
        "retry_delay_s": 1.0,
    },
    "features": {
        "multilingual_extraction": False,
        "per_language_fanout": False,
    },
}

VALID_PROVIDERS = {p.value for p in AIProvider}


@dataclass
class ApiConfig:
    """Connection settings for the hosted functions and store."""

    base_url: str = ""
    anon_key: str = ""
    access_token: str = ""
    timeout_s: float = 120.0


@dataclass
class ExtractionConfig:
    """Extraction defaults and client-side input limits."""

    ai_provider: str = "claude"
    max_text_length: int = 50000
    accepted_file_types: list[str] = field(
        default_factory=lambda: [".txt", ".md", ".pdf", ".docx"]
    )
    quality_validation: bool = True
    auto_approve: bool = False


@dataclass
class TranslationConfig:
    """Translation defaults."""

    source_language: str = "en"
    target_languages: list[str] = field(default_factory=list)
    max_retries: int = 2
    retry_delay_s: float = 1.0


@dataclass
class FeatureFlags:
    """Rollout switches for the workflow."""

    multilingual_extraction: bool = False
    per_language_fanout: bool = False


@dataclass
class Config:
    """Main configuration container.

    Holds all configuration settings for extractflow, loaded from
    local and global config files with environment variable overrides.
    """

    api: ApiConfig = field(default_factory=ApiConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    features: FeatureFlags = field(default_factory=FeatureFlags)

    def get_base_url(self) -> str:
        """Base URL of the hosted project, env var first, without trailing slash."""
        value = os.environ.get(ENV_BASE_URL, "") or self.api.base_url
        return value.rstrip("/")

    def get_anon_key(self) -> str:
        return os.environ.get(ENV_ANON_KEY, "") or self.api.anon_key

    def get_access_token(self) -> str:
        """Session access token, env var first. Empty means not signed in."""
        return os.environ.get(ENV_ACCESS_TOKEN, "") or self.api.access_token

    def get_ai_provider(self) -> AIProvider:
        return AIProvider(self.extraction.ai_provider)

    def processing_options(self) -> ProcessingOptions:
        return ProcessingOptions(
            parallel_processing=self.features.per_language_fanout,
            quality_validation=self.extraction.quality_validation,
            auto_approve=self.extraction.auto_approve,
        )


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load and parse a TOML configuration file.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    if not path.exists():
        return {}

    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in config file {path}: {e}") from e
    except OSError as e:
        warnings.warn(f"Could not read config file {path}: {e}", UserWarning, stacklevel=2)
        return {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _check_bool(section: str, key: str, value: Any) -> None:
    if value is not None and not isinstance(value, bool):
        raise ConfigError(f"{section}.{key} must be a boolean, got {type(value).__name__}")


def _validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If configuration values are invalid.
    """
    api = config_dict.get("api", {})
    for key in ("base_url", "anon_key", "access_token"):
        value = api.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"api.{key} must be a string, got {type(value).__name__}")
    timeout = api.get("timeout_s")
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
        raise ConfigError(f"api.timeout_s must be a positive number, got {timeout!r}")

    extraction = config_dict.get("extraction", {})
    provider = extraction.get("ai_provider")
    if provider not in VALID_PROVIDERS:
        raise ConfigError(
            f"Invalid AI provider '{provider}'. "
            f"Valid options: {', '.join(sorted(VALID_PROVIDERS))}"
        )
    max_len = extraction.get("max_text_length")
    if not isinstance(max_len, int) or isinstance(max_len, bool) or max_len < 1:
        raise ConfigError(f"extraction.max_text_length must be >= 1, got {max_len!r}")
    for key in ("quality_validation", "auto_approve"):
        _check_bool("extraction", key, extraction.get(key))

    translation = config_dict.get("translation", {})
    targets = translation.get("target_languages")
    if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
        raise ConfigError("translation.target_languages must be a list of language codes")
    retries = translation.get("max_retries")
    if not isinstance(retries, int) or isinstance(retries, bool) or retries < 0:
        raise ConfigError(f"translation.max_retries must be >= 0, got {retries!r}")
    delay = translation.get("retry_delay_s")
    if not isinstance(delay, (int, float)) or isinstance(delay, bool) or delay < 0:
        raise ConfigError(f"translation.retry_delay_s must be >= 0, got {delay!r}")

    features = config_dict.get("features", {})
    for key in ("multilingual_extraction", "per_language_fanout"):
        _check_bool("features", key, features.get(key))


def _dict_to_config(config_dict: dict[str, Any]) -> Config:
    api = config_dict["api"]
    extraction = config_dict["extraction"]
    translation = config_dict["translation"]
    features = config_dict["features"]

    return Config(
        api=ApiConfig(
            base_url=api["base_url"],
            anon_key=api["anon_key"],
            access_token=api["access_token"],
            timeout_s=float(api["timeout_s"]),
        ),
        extraction=ExtractionConfig(
            ai_provider=extraction["ai_provider"],
            max_text_length=extraction["max_text_length"],
            accepted_file_types=[s.lower() for s in extraction["accepted_file_types"]],
            quality_validation=extraction["quality_validation"],
            auto_approve=extraction["auto_approve"],
        ),
        translation=TranslationConfig(
            source_language=translation["source_language"],
            target_languages=list(translation["target_languages"]),
            max_retries=translation["max_retries"],
            retry_delay_s=float(translation["retry_delay_s"]),
        ),
        features=FeatureFlags(
            multilingual_extraction=features["multilingual_extraction"],
            per_language_fanout=features["per_language_fanout"],
        ),
    )


def write_default_config(path: Path) -> None:
    """Write the default configuration to ``path`` if it does not exist."""
    if path.exists():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(DEFAULT_CONFIG, f)


def load_config(
    local_path: Path | None = None,
    global_path: Path | None = None,
    auto_create_local: bool = False,
) -> Config:
    """Load configuration from local and global config files.

    Configuration priority (highest to lowest):
    1. Local config file (.extractflow/config in current directory)
    2. Global config file ($HOME/.extractflow/config)
    3. Default values

    Environment variables EXTRACTFLOW_BASE_URL, EXTRACTFLOW_ANON_KEY and
    EXTRACTFLOW_ACCESS_TOKEN take precedence over file values when read
    through the Config getters.

    Args:
        local_path: Override path for local config file.
        global_path: Override path for global config file.
        auto_create_local: If True, write a default local config when no
            config file exists anywhere.

    Raises:
        ConfigError: If configuration files are invalid.
    """
    local_path = local_path or LOCAL_CONFIG_PATH
    global_path = global_path or GLOBAL_CONFIG_PATH

    merged = copy.deepcopy(DEFAULT_CONFIG)

    global_config = _load_toml_file(global_path)
    if global_config:
        merged = _deep_merge(merged, global_config)

    local_config = _load_toml_file(local_path)
    if local_config:
        merged = _deep_merge(merged, local_config)

    if auto_create_local and not local_config and not global_config:
        write_default_config(local_path)

    _validate_config(merged)
    return _dict_to_config(merged)
