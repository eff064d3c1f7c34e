"""Tests for environment-driven settings."""

import os

import pytest

from schema_diagram.config import DiagramConfig, SyncSettings, load_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear SCHEMA_DIAGRAM_* variables and run from an empty directory."""
    for name in list(os.environ):
        if name.startswith("SCHEMA_DIAGRAM_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestLoadSettings:
    """Defaults, overrides and malformed values."""

    def test_defaults(self, clean_env, tmp_path):
        """Without variables the dataclass defaults are used."""
        settings = load_settings(str(tmp_path / "missing.env"))
        assert settings == SyncSettings()
        assert settings.diagram == DiagramConfig()

    def test_environment_overrides(self, clean_env, tmp_path):
        """Variables override individual fields; milliseconds become seconds."""
        clean_env.setenv("SCHEMA_DIAGRAM_MAX_DEPTH", "6")
        clean_env.setenv("SCHEMA_DIAGRAM_GROUP_PROPERTIES", "yes")
        clean_env.setenv("SCHEMA_DIAGRAM_DEBOUNCE_MS", "120")
        clean_env.setenv("SCHEMA_DIAGRAM_BULK_MAX_PATHS", "40")
        settings = load_settings(str(tmp_path / "missing.env"))
        assert settings.diagram.max_depth == 6
        assert settings.diagram.group_properties is True
        assert settings.debounce_seconds == pytest.approx(0.12)
        assert settings.bulk_max_paths == 40

    def test_dotenv_file_is_read(self, clean_env, tmp_path):
        """A .env file supplies values not already in the environment."""
        env_file = tmp_path / "diagram.env"
        env_file.write_text("SCHEMA_DIAGRAM_TRUNCATE_ANCESTRAL=true\n", encoding="utf-8")
        try:
            settings = load_settings(str(env_file))
        finally:
            os.environ.pop("SCHEMA_DIAGRAM_TRUNCATE_ANCESTRAL", None)
        assert settings.diagram.truncate_ancestral is True

    def test_malformed_value_names_variable(self, clean_env, tmp_path):
        """Bad values raise ValueError mentioning the variable."""
        clean_env.setenv("SCHEMA_DIAGRAM_MAX_DEPTH", "deep")
        with pytest.raises(ValueError, match="SCHEMA_DIAGRAM_MAX_DEPTH"):
            load_settings(str(tmp_path / "missing.env"))
