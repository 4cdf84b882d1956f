"""
Feed client: URL building, key redaction, gzip sniffing, error mapping and per-call audit records.
"""

from __future__ import annotations

import gzip
import json
from typing import Any, Dict, List

import httpx
import pytest

from core.config import Settings
from core.errors import FeedConfigError, FeedMalformed, FeedUnavailable
from feed.client import FeedClient, decode_body
from feed.paths import fixtures_path, scores_path, standings_path

from payloads import FEED_KEY


class RecordingSink:
    """Collects record_http_call payloads like a JobContext would."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    async def record_http_call(self, **payload: Any) -> None:
        self.calls.append(payload)


def test_paths() -> None:
    assert fixtures_path("1204") == "soccerfixtures/leagueid/1204"
    assert standings_path("1204") == "standings/1204.xml"
    assert scores_path("home") == "soccernew/home"
    assert scores_path("/d-1") == "soccernew/d-1"
    assert scores_path("soccernew/home") == "soccernew/home"
    assert scores_path("soccernew/soccernew/home") == "soccernew/home"
    assert scores_path("") == "soccernew/home"


def test_decode_body_sniffs_gzip_magic() -> None:
    assert decode_body(gzip.compress(b'{"a": 1}')) == '{"a": 1}'
    assert decode_body(b"plain") == "plain"


def test_build_url_requires_key() -> None:
    client = FeedClient(Settings(feed_key=""))
    with pytest.raises(FeedConfigError):
        client.build_url("soccernew/home")


def test_build_url_and_redact(feed_settings) -> None:
    client = FeedClient(feed_settings)
    url = client.build_url("soccernew/home", {"json": "1"})
    assert url == f"http://feed.test/getfeed/{FEED_KEY}/soccernew/home?json=1"
    assert FEED_KEY not in client.redact(url)
    assert "/getfeed/***/soccernew/home" in client.redact(url)


@pytest.mark.asyncio
async def test_fetch_json_adds_json_param_and_records_call(make_feed) -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=json.dumps({"scores": {}}).encode())

    sink = RecordingSink()
    async with make_feed({"soccernew/home": handler}) as client:
        tree = await client.fetch("soccernew/home", sink)

    assert tree == {"scores": {}}
    assert seen[0].url.params["json"] == "1"
    assert len(sink.calls) == 1
    call = sink.calls[0]
    assert call["status_code"] == 200
    assert call["method"] == "GET"
    assert call["provider"] == "goalserve"
    assert call["error"] is None
    assert FEED_KEY not in call["url"]
    assert call["bytes_in"] > 0


@pytest.mark.asyncio
async def test_fetch_gzip_xml(make_feed) -> None:
    body = gzip.compress(b"<standings timestamp='10.08.2024 18:30:00'><tournament/></standings>")

    def handler(request: httpx.Request) -> httpx.Response:
        assert "json" not in request.url.params
        return httpx.Response(200, content=body)

    async with make_feed({"standings/1204.xml": handler}) as client:
        tree = await client.fetch("standings/1204.xml", fmt="xml")
    assert tree["standings"]["@timestamp"] == "10.08.2024 18:30:00"


@pytest.mark.asyncio
async def test_non_200_raises_unavailable_with_redacted_snippet(make_feed) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, content=f"down for {FEED_KEY} ".encode() * 100)

    sink = RecordingSink()
    async with make_feed({"soccernew/home": handler}) as client:
        with pytest.raises(FeedUnavailable) as exc_info:
            await client.fetch("soccernew/home", sink)

    err = exc_info.value
    assert err.status_code == 503
    assert len(err.body_snippet) <= 300
    assert FEED_KEY not in err.body_snippet
    assert FEED_KEY not in err.url
    assert sink.calls[0]["status_code"] == 503
    assert sink.calls[0]["error"] == "HTTP 503"


@pytest.mark.asyncio
async def test_transport_error_raises_unavailable_without_status(make_feed) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    sink = RecordingSink()
    async with make_feed({"soccernew/home": handler}) as client:
        with pytest.raises(FeedUnavailable) as exc_info:
            await client.fetch("soccernew/home", sink)
    assert exc_info.value.status_code is None
    assert sink.calls[0]["status_code"] is None
    assert "ConnectError" in sink.calls[0]["error"]


@pytest.mark.asyncio
async def test_unparsable_body_raises_malformed(make_feed) -> None:
    sink = RecordingSink()
    async with make_feed({"soccernew/home": "<html>not json</html>"}) as client:
        with pytest.raises(FeedMalformed) as exc_info:
            await client.fetch("soccernew/home", sink)
    assert exc_info.value.to_dict()["kind"] == "feed_malformed"
    assert sink.calls[0]["error"] == "unparsable json"


@pytest.mark.asyncio
async def test_missing_key_raises_before_any_request(make_feed) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    sink = RecordingSink()
    async with make_feed({"soccernew/home": handler}, settings=Settings(feed_key="")) as client:
        with pytest.raises(FeedConfigError):
            await client.fetch("soccernew/home", sink)
    assert sink.calls == []


@pytest.mark.asyncio
async def test_corrupt_gzip_raises_malformed_and_records_call(make_feed) -> None:
    body = gzip.compress(b'{"scores": {}}')[:10] + b"\xff" * 40

    sink = RecordingSink()
    async with make_feed({"soccernew/home": lambda request: httpx.Response(200, content=body)}) as client:
        with pytest.raises(FeedMalformed) as exc_info:
            await client.fetch("soccernew/home", sink)
    assert "undecodable body" in str(exc_info.value)
    assert len(sink.calls) == 1
    assert sink.calls[0]["status_code"] == 200
    assert sink.calls[0]["error"] == "undecodable body"


@pytest.mark.asyncio
async def test_corrupt_gzip_error_body_still_yields_snippet(make_feed) -> None:
    body = b"\x1f\x8b\x08\x00" + b"\xff" * 40

    async with make_feed({"soccernew/home": lambda request: httpx.Response(500, content=body)}) as client:
        with pytest.raises(FeedUnavailable) as exc_info:
            await client.fetch("soccernew/home")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_xml_body_without_root_raises_malformed(make_feed) -> None:
    sink = RecordingSink()
    async with make_feed({"standings/1204.xml": "not xml at all"}) as client:
        with pytest.raises(FeedMalformed):
            await client.fetch("standings/1204.xml", sink, fmt="xml")
    assert sink.calls[0]["error"] == "unparsable xml"
