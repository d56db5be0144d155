from __future__ import annotations

import pytest

from team_board.config import Settings

_VARS = (
    "DATABASE_URL", "POSTGRES_URL", "DB_PATH", "DB_POOL_SIZE", "API_SECRET_KEY",
    "TEAM_API_KEY", "DEFAULT_PUSHED_BY", "LOG_LEVEL", "LOG_DIR", "HOST", "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.database_url is None
    assert s.api_secret_key is None
    assert s.team_api_key == "team-member-access"
    assert s.default_pushed_by == "ChiliHead System"
    assert s.db_pool_size == 1
    assert s.port == 8000


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POSTGRES_URL", "postgres://u:p@db/board")
    monkeypatch.setenv("API_SECRET_KEY", "s3cret")
    monkeypatch.setenv("TEAM_API_KEY", "crew")
    monkeypatch.setenv("DB_POOL_SIZE", "4")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PORT", "9000")

    s = Settings.from_env()
    assert s.database_url == "postgres://u:p@db/board"
    assert s.api_secret_key == "s3cret"
    assert s.team_api_key == "crew"
    assert s.db_pool_size == 4
    assert s.log_level == "DEBUG"
    assert s.port == 9000


def test_database_url_wins_over_postgres_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://a/one")
    monkeypatch.setenv("POSTGRES_URL", "postgresql://b/two")
    assert Settings.from_env().database_url == "postgresql://a/one"


def test_blank_secrets_count_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_SECRET_KEY", "   ")
    monkeypatch.setenv("TEAM_API_KEY", "")
    s = Settings.from_env()
    assert s.api_secret_key is None
    assert s.team_api_key == "team-member-access"


def test_bad_integer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_POOL_SIZE", "many")
    with pytest.raises(ValueError, match="DB_POOL_SIZE"):
        Settings.from_env()
