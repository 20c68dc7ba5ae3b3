"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path

from skillsync.database import init_database, get_session
from skillsync.env import reset_settings
from skillsync.logger import get_logger, reset_logger


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir with no console output."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    logger.logger.handlers.clear()
    reset_logger()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings."""
    for name in (
        "SKILLSYNC_DB_PATH",
        "SKILLSYNC_ORG_ID",
        "SKILLSYNC_LOG_LEVEL",
        "SKILLSYNC_LOG_DIR",
        "SKILLSYNC_FUZZY_MATCH",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Initialized temporary SQLite database."""
    path = tmp_path / "skillsync.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Session on a fresh temporary database."""
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def areas_csv() -> str:
    return (
        "Area Code,Area Name\n"
        "A1,Assembly\n"
        "P1,Packaging\n"
    )


@pytest.fixture
def stations_csv() -> str:
    return (
        "station_code,station_name,area\n"
        "1040.0,Press 1,A1\n"
        "1050,Press 2,Assembly\n"
        "2010,Wrapper,Packaging\n"
    )


@pytest.fixture
def skills_csv() -> str:
    return (
        "skill_code,skill_name,station,category\n"
        "S1,Press operation,1040,Machines\n"
        "S2,Forklift driving,,Logistics\n"
        "S3,Wrapper setup,2010,Machines\n"
    )


@pytest.fixture
def employees_csv() -> str:
    return (
        "employee_number,name,email,area\n"
        "100,Anna Berg,anna@example.com,A1\n"
        "101,Omar Said,,Packaging\n"
        "102,Lena Holm,lena@example.com,Assembly\n"
    )


@pytest.fixture
def write_file(tmp_path):
    """Write text to a file under tmp_path and return its path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
