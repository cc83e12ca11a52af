"""Unit tests for Settings class and get_settings function."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from deepcurrent.config import get_settings, reload_settings
from deepcurrent.config.models.research import ResearchConfig
from deepcurrent.config.settings import Settings, set_toml_config


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated config directory with an empty default.toml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.toml").write_text("")
    monkeypatch.setenv("DEEPCURRENT_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("DEEPCURRENT_ENV", "nonexistent")
    return config_dir


class TestSettingsDefaults:
    """Tests for Settings model defaults."""

    @pytest.fixture(autouse=True)
    def empty_toml(self) -> None:
        set_toml_config({})

    def test_default_values(self) -> None:
        settings = Settings()
        assert settings.app_name == "deepcurrent"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_storage_defaults_to_inmemory(self) -> None:
        assert Settings().storage.backend == "inmemory"

    def test_research_defaults(self) -> None:
        settings = Settings()
        assert settings.research.agent.provider == "scripted"
        assert settings.research.stream_buffer_size is None
        assert settings.research.note_title_max_length == 60

    def test_evolution_defaults(self) -> None:
        settings = Settings()
        assert settings.evolution.min_episodes == 1
        assert settings.evolution.candidate_rollout_percentage == 20
        assert settings.evolution.recent_limit == 5
        assert settings.evolution.analysis.workers == 1

    def test_stream_buffer_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ResearchConfig(stream_buffer_size=0)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_loads_toml_values(self, config_dir: Path) -> None:
        (config_dir / "default.toml").write_text("[evolution]\nrecent_limit = 3")

        assert get_settings().evolution.recent_limit == 3

    def test_settings_cached(self, config_dir: Path) -> None:
        assert get_settings() is get_settings()

    def test_reload_settings_clears_cache(self, config_dir: Path) -> None:
        (config_dir / "default.toml").write_text("app_name = 'original'")
        assert get_settings().app_name == "original"

        (config_dir / "default.toml").write_text("app_name = 'updated'")
        assert reload_settings().app_name == "updated"

    def test_missing_config_falls_back_to_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()
        monkeypatch.setenv("DEEPCURRENT_CONFIG_DIR", str(empty_dir))

        assert get_settings().app_name == "deepcurrent"


class TestEnvironmentVariableOverrides:
    """Tests for environment variable configuration overrides."""

    def test_top_level_override(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEEPCURRENT_DEBUG", "true")
        assert get_settings().debug is True

    def test_nested_override_wins_over_toml(
        self, config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (config_dir / "default.toml").write_text('[storage]\nbackend = "inmemory"')
        monkeypatch.setenv("DEEPCURRENT_STORAGE__BACKEND", "postgres")

        assert get_settings().storage.backend == "postgres"

    def test_deeply_nested_override(
        self, config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEEPCURRENT_EVOLUTION__ANALYSIS__WORKERS", "3")
        assert get_settings().evolution.analysis.workers == 3
