import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Tuple


def _env_float(name: str, default: float) -> float:
    try:
        v = os.environ.get(name)
        if v is not None and v.strip():
            return float(v.strip())
    except ValueError:
        pass
    return default


def _env_int(name: str, default: int) -> int:
    try:
        v = os.environ.get(name)
        if v is not None and v.strip():
            return int(v.strip())
    except ValueError:
        pass
    return default


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.environ.get(name)
    if v is None or not v.strip():
        return default
    return v.strip().lower() in ("1", "true", "yes")


def _env_list(name: str) -> List[str]:
    raw = os.environ.get(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "Scoreline Ingest"
    env: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./scoreline.db"
    log_level: str = "INFO"

    feed_provider: str = "goalserve"
    feed_base_url: str = "https://www.goalserve.com/getfeed/"
    feed_key: str = ""  # secret; only ever logged redacted
    feed_timeout_seconds: float = 10.0

    job_secret: str = ""
    job_http_calls_cap: int = 2000

    standings_refresh_cooldown_seconds: float = 60.0

    scheduler_enabled: bool = False
    today_poll_seconds: int = 120
    yesterday_poll_seconds: int = 3600
    tracked_league_ids: Tuple[str, ...] = ()

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=os.getenv("DATABASE_URL") or cls.database_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            feed_provider=os.getenv("FEED_PROVIDER", cls.feed_provider),
            feed_base_url=os.getenv("FEED_BASE_URL") or cls.feed_base_url,
            feed_key=os.getenv("FEED_KEY", ""),
            feed_timeout_seconds=_env_float("FEED_TIMEOUT_SECONDS", cls.feed_timeout_seconds),
            job_secret=os.getenv("JOB_SECRET", ""),
            job_http_calls_cap=max(100, _env_int("JOB_HTTP_CALLS_CAP", cls.job_http_calls_cap)),
            standings_refresh_cooldown_seconds=_env_float(
                "STANDINGS_REFRESH_COOLDOWN_SECONDS", cls.standings_refresh_cooldown_seconds
            ),
            scheduler_enabled=_env_bool("SCHEDULER_ENABLED"),
            today_poll_seconds=max(10, _env_int("TODAY_POLL_SECONDS", cls.today_poll_seconds)),
            yesterday_poll_seconds=max(60, _env_int("YESTERDAY_POLL_SECONDS", cls.yesterday_poll_seconds)),
            tracked_league_ids=tuple(_env_list("TRACKED_LEAGUE_IDS")),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
