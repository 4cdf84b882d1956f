# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)
if str(_tests_dir) not in sys.path:
    sys.path.append(str(_tests_dir))

import json
from typing import Any, Callable, Dict, Optional

import httpx
import pytest
import pytest_asyncio

from core.config import Settings, get_settings
from core.database import create_all_tables, dispose_database, get_database_manager, init_database
from feed.client import FeedClient
from ingestion.throttle import get_refresh_throttle

from payloads import FEED_BASE_URL, FEED_KEY


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings and the refresh throttle are process-wide; start each test clean."""
    get_settings.cache_clear()
    get_refresh_throttle().reset()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db(tmp_path):
    """File-backed SQLite (job runs and business writes use separate sessions)."""
    await dispose_database()
    await init_database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_all_tables()
    yield get_database_manager()
    await dispose_database()


@pytest.fixture
def feed_settings() -> Settings:
    return Settings(feed_key=FEED_KEY, feed_base_url=FEED_BASE_URL, job_secret="s3cret", job_http_calls_cap=100)


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode("utf-8"))


@pytest.fixture
def make_feed(feed_settings: Settings) -> Callable[..., FeedClient]:
    """Build a FeedClient over a mock transport.

    `routes` maps a feed path (without base or key) to a payload (dict -> JSON,
    str -> raw body) or to a handler returning an httpx.Response.
    """

    def _make(routes: Dict[str, Any], settings: Optional[Settings] = None) -> FeedClient:
        prefix = f"/getfeed/{FEED_KEY}/"

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            path = path[len(prefix):] if path.startswith(prefix) else path
            target = routes.get(path)
            if target is None:
                return httpx.Response(404, content=b"unknown feed path")
            if callable(target):
                return target(request)
            if isinstance(target, str):
                return httpx.Response(200, content=target.encode("utf-8"))
            return json_response(target)

        return FeedClient(settings or feed_settings, transport=httpx.MockTransport(handler))

    return _make

