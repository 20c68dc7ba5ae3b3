"""
Tests for environment configuration.
"""

from pathlib import Path

from skillsync.env import get_settings, load_env, reset_settings


class TestSettings:
    """Test settings read from the environment."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.db_path == Path("data/skillsync.db")
        assert settings.org_id == "default"
        assert settings.log_level == "INFO"
        assert settings.fuzzy_match is True

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SKILLSYNC_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("SKILLSYNC_ORG_ID", "plant-7")
        monkeypatch.setenv("SKILLSYNC_LOG_LEVEL", "debug")

        settings = get_settings()
        assert settings.db_path == Path("/tmp/x.db")
        assert settings.org_id == "plant-7"
        assert settings.log_level == "DEBUG"

    def test_fuzzy_flag_disabled(self, monkeypatch):
        for value in ("0", "false", "OFF", "no"):
            monkeypatch.setenv("SKILLSYNC_FUZZY_MATCH", value)
            reset_settings()
            assert get_settings().fuzzy_match is False

    def test_fuzzy_flag_blank_uses_default(self, monkeypatch):
        monkeypatch.setenv("SKILLSYNC_FUZZY_MATCH", " ")
        assert get_settings().fuzzy_match is True

    def test_cached_until_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("SKILLSYNC_ORG_ID", "changed")
        assert get_settings() is first

        reset_settings()
        assert get_settings().org_id == "changed"


class TestLoadEnv:
    """Test .env loading."""

    def test_loads_dotenv_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("SKILLSYNC_ORG_ID=from-file\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        # Registers the variable with monkeypatch so teardown removes what load_env sets
        monkeypatch.setenv("SKILLSYNC_ORG_ID", "placeholder")
        monkeypatch.delenv("SKILLSYNC_ORG_ID")

        load_env()

        assert get_settings().org_id == "from-file"

    def test_existing_variables_win(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("SKILLSYNC_ORG_ID=from-file\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SKILLSYNC_ORG_ID", "from-shell")

        load_env()

        assert get_settings().org_id == "from-shell"

    def test_missing_file_is_fine(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        load_env()
        assert get_settings().org_id == "default"
