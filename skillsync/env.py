import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DISABLED_FLAG_VALUES = {"0", "false", "no", "off"}


def load_env() -> None:
    """Load .env from the working directory if present. Existing variables win."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in DISABLED_FLAG_VALUES


class Settings:
    """Process-wide configuration read from the environment."""

    def __init__(self):
        self.db_path = Path(os.getenv("SKILLSYNC_DB_PATH", "data/skillsync.db"))
        self.org_id = os.getenv("SKILLSYNC_ORG_ID", "default")
        self.log_level = os.getenv("SKILLSYNC_LOG_LEVEL", "INFO").upper()
        self.log_dir = Path(os.getenv("SKILLSYNC_LOG_DIR", "logs"))
        self.fuzzy_match = _flag("SKILLSYNC_FUZZY_MATCH", True)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Read settings once per process."""
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reset_settings():
    """Drop cached settings (useful for testing)."""
    global _settings
    _settings = None
