"""Tests for configuration loading."""

import tomllib
from pathlib import Path

import pytest

from extractflow.core.config import (
    ENV_ACCESS_TOKEN,
    ENV_BASE_URL,
    ApiConfig,
    Config,
    FeatureFlags,
    load_config,
)
from extractflow.core.errors import ConfigError
from extractflow.core.models import AIProvider


@pytest.fixture
def paths(tmp_path: Path) -> tuple[Path, Path]:
    """Local and global config paths that do not exist yet."""
    return tmp_path / "local" / "config", tmp_path / "global" / "config"


def write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


class TestLoadConfig:
    def test_defaults_without_files(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths

        config = load_config(local_path=local, global_path=global_)

        assert config.extraction.ai_provider == "claude"
        assert config.extraction.max_text_length == 50000
        assert config.extraction.accepted_file_types == [".txt", ".md", ".pdf", ".docx"]
        assert config.translation.source_language == "en"
        assert config.translation.target_languages == []
        assert config.features.multilingual_extraction is False
        assert config.api.timeout_s == 120.0
        assert config.translation.retry_delay_s == 1.0

    def test_local_overrides_global(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(global_, '[api]\nbase_url = "https://global.test"\nanon_key = "g-key"\n')
        write(local, '[api]\nbase_url = "https://local.test"\n')

        config = load_config(local_path=local, global_path=global_)

        assert config.api.base_url == "https://local.test"
        assert config.api.anon_key == "g-key"

    def test_global_fills_unset_sections(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(global_, '[translation]\ntarget_languages = ["fr", "de"]\n')
        write(local, "[features]\nmultilingual_extraction = true\n")

        config = load_config(local_path=local, global_path=global_)

        assert config.translation.target_languages == ["fr", "de"]
        assert config.features.multilingual_extraction is True

    def test_invalid_toml_raises(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(local, "[api\nbase_url = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(local_path=local, global_path=global_)

    def test_unknown_provider_raises(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(local, '[extraction]\nai_provider = "gemini"\n')

        with pytest.raises(ConfigError, match="Invalid AI provider 'gemini'"):
            load_config(local_path=local, global_path=global_)

    def test_non_positive_limit_raises(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(local, "[extraction]\nmax_text_length = 0\n")

        with pytest.raises(ConfigError, match="max_text_length"):
            load_config(local_path=local, global_path=global_)

    def test_negative_retry_delay_raises(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(local, "[translation]\nretry_delay_s = -1\n")

        with pytest.raises(ConfigError, match="retry_delay_s"):
            load_config(local_path=local, global_path=global_)

    def test_non_boolean_flag_raises(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        write(local, '[features]\nper_language_fanout = "yes"\n')

        with pytest.raises(ConfigError, match="must be a boolean"):
            load_config(local_path=local, global_path=global_)

    def test_auto_create_writes_defaults(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths

        load_config(local_path=local, global_path=global_, auto_create_local=True)

        assert local.exists()
        written = tomllib.loads(local.read_text())
        assert written["extraction"]["ai_provider"] == "claude"
        assert written["features"]["per_language_fanout"] is False

    def test_defaults_not_shared_between_loads(self, paths: tuple[Path, Path]) -> None:
        local, global_ = paths
        first = load_config(local_path=local, global_path=global_)
        first.extraction.accepted_file_types.append(".rtf")

        second = load_config(local_path=local, global_path=global_)

        assert ".rtf" not in second.extraction.accepted_file_types


class TestEnvironmentOverrides:
    def test_env_wins_over_file(
        self, paths: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        local, global_ = paths
        write(local, '[api]\nbase_url = "https://file.test"\naccess_token = "file-token"\n')
        monkeypatch.setenv(ENV_BASE_URL, "https://env.test/")
        monkeypatch.setenv(ENV_ACCESS_TOKEN, "env-token")

        config = load_config(local_path=local, global_path=global_)

        assert config.get_base_url() == "https://env.test"
        assert config.get_access_token() == "env-token"

    def test_file_used_when_env_unset(self) -> None:
        config = Config(api=ApiConfig(base_url="https://file.test/", access_token="t"))

        assert config.get_base_url() == "https://file.test"
        assert config.get_access_token() == "t"
        assert config.get_anon_key() == ""


class TestDerivedSettings:
    def test_processing_options_follow_flags(self) -> None:
        config = Config(features=FeatureFlags(per_language_fanout=True))

        options = config.processing_options()

        assert options.parallel_processing is True
        assert options.quality_validation is True
        assert options.auto_approve is False

    def test_ai_provider_enum(self) -> None:
        config = Config()
        config.extraction.ai_provider = "openai"

        assert config.get_ai_provider() == AIProvider.OPENAI
