from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _first_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    db_path: str = "./data/team_board.db"
    db_pool_size: int = 1
    api_secret_key: Optional[str] = None
    team_api_key: str = "team-member-access"
    default_pushed_by: str = "ChiliHead System"
    log_level: str = "INFO"
    log_dir: str = "./logs"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=_first_env("DATABASE_URL", "POSTGRES_URL"),
            db_path=os.getenv("DB_PATH", cls.db_path),
            db_pool_size=max(1, _env_int("DB_POOL_SIZE", cls.db_pool_size)),
            api_secret_key=_first_env("API_SECRET_KEY"),
            team_api_key=_first_env("TEAM_API_KEY") or cls.team_api_key,
            default_pushed_by=_first_env("DEFAULT_PUSHED_BY") or cls.default_pushed_by,
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            log_dir=os.getenv("LOG_DIR", cls.log_dir),
            host=os.getenv("HOST", cls.host),
            port=_env_int("PORT", cls.port),
        )
