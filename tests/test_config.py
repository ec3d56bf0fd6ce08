"""Tests for config loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from idea2app.config import get_settings, load_config, reset_settings
from idea2app.schemas.config import ProjectConfig, ProviderSettings


class TestProjectConfig:
    """Test the ProjectConfig Pydantic model directly."""

    def test_valid_minimal(self) -> None:
        cfg = ProjectConfig(name="WalkBuddy", idea="Dog walkers on demand")
        assert cfg.project_id == "local-project"
        assert cfg.credits == 100
        assert cfg.output_directory == "./output"

    def test_requires_idea_text(self) -> None:
        with pytest.raises(ValidationError, match="'idea' must not be empty"):
            ProjectConfig(name="WalkBuddy", idea="   ")

    def test_requires_name_text(self) -> None:
        with pytest.raises(ValidationError, match="'name' must not be empty"):
            ProjectConfig(name="", idea="Dog walkers")

    def test_negative_credits_rejected(self) -> None:
        with pytest.raises(ValidationError, match="credits"):
            ProjectConfig(name="W", idea="I", credits=-1)


class TestLoadConfig:
    """Test YAML file loading."""

    def test_load_valid(self, tmp_config: Path) -> None:
        cfg = load_config(tmp_config)
        assert cfg.name == "WalkBuddy"
        assert cfg.idea == "A marketplace for dog walkers"
        assert cfg.data_file.endswith("data.json")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yml")

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(path)

    def test_empty_block_scalar_idea(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("name: WalkBuddy\nidea:\n")
        with pytest.raises(ValidationError, match="'idea' must not be empty"):
            load_config(path)


class TestProviderSettings:
    def test_from_env(self) -> None:
        settings = ProviderSettings.from_env({
            "OPENROUTER_API_KEY": "or",
            "OPENROUTER_CHAT_MODEL": "openai/gpt-4o-mini",
            "TAVILY_API_KEY": "tv",
            "IDEA2APP_PIPELINE_TIMEOUT": "120",
        })
        assert settings.openrouter_api_key == "or"
        assert settings.chat_model == "openai/gpt-4o-mini"
        assert settings.analysis_model == "anthropic/claude-sonnet-4"
        assert settings.pipeline_timeout == 120.0
        assert settings.perplexity_api_key == ""

    def test_get_settings_cached_until_reset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reset_settings()
        monkeypatch.setenv("PERPLEXITY_API_KEY", "first")
        assert get_settings().perplexity_api_key == "first"

        monkeypatch.setenv("PERPLEXITY_API_KEY", "second")
        assert get_settings().perplexity_api_key == "first"

        reset_settings()
        assert get_settings().perplexity_api_key == "second"
        reset_settings()
