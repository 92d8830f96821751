"""Tests for the async timedtext client and its per-video cache.

WHY: The client is the only code that touches the network. It must
fetch the source-language track, never re-download a payload it
already holds, and turn every failure into CaptionFetchError.

HOW: httpx.MockTransport answers requests in-process, so no test
touches the network. Coroutines are driven with asyncio.run().

RULES:
- Every handler counts its calls so cache hits are observable
"""

import asyncio

import httpx
import pytest

from silence_skipper.sources import CaptionFetchError, TimedTextClient
from silence_skipper.sources.timedtext import strip_translation

URL = "https://captions.example.com/api/timedtext?v=abc&lang=en&fmt=json3"
PAYLOAD = {"events": [{"tStartMs": 0, "dDurationMs": 500, "segs": [{"utf8": "hi"}]}]}


class _Handler:
    def __init__(self, status_code=200, error=None, **content):
        self.status_code = status_code
        self.content = content or {"json": PAYLOAD}
        self.error = error
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, **self.content)


def _run(handler, scenario):
    async def main():
        async with TimedTextClient(transport=httpx.MockTransport(handler)) as client:
            return await scenario(client)

    return asyncio.run(main())


class TestStripTranslation:
    def test_removes_tlang(self):
        stripped = strip_translation(URL + "&tlang=fr")
        assert "tlang" not in stripped
        assert "lang=en" in stripped
        assert "v=abc" in stripped

    def test_untouched_without_tlang(self):
        assert strip_translation(URL) == URL


class TestUrlRegistry:
    def test_register_strips_translation_and_detects_language(self):
        client = TimedTextClient()
        client.register_url("abc", "https://x.test/api/timedtext?v=abc&lang=ja&tlang=en")
        assert "tlang" not in client.url_for("abc")
        assert client.language_for("abc") == "ja"

    def test_unknown_video(self):
        client = TimedTextClient()
        assert client.url_for("nope") is None
        assert client.language_for("nope") is None


class TestFetch:
    def test_fetch_decodes_json(self):
        handler = _Handler()

        async def scenario(client):
            client.register_url("abc", URL)
            return await client.fetch("abc")

        assert _run(handler, scenario) == PAYLOAD
        assert str(handler.requests[0].url) == URL

    def test_second_fetch_served_from_cache(self):
        handler = _Handler()

        async def scenario(client):
            client.register_url("abc", URL)
            await client.fetch("abc")
            assert client.is_cached("abc")
            return await client.fetch("abc")

        assert _run(handler, scenario) == PAYLOAD
        assert len(handler.requests) == 1

    def test_new_url_drops_cached_payload(self):
        handler = _Handler()

        async def scenario(client):
            client.register_url("abc", URL)
            await client.fetch("abc")
            client.register_url("abc", URL)
            assert client.is_cached("abc")
            client.register_url("abc", URL.replace("lang=en", "lang=de"))
            assert not client.is_cached("abc")
            await client.fetch("abc")

        _run(handler, scenario)
        assert len(handler.requests) == 2

    def test_invalidate_and_reset(self):
        handler = _Handler()

        async def scenario(client):
            client.register_url("abc", URL)
            client.register_url("def", URL)
            await client.fetch("abc")
            client.invalidate("abc")
            assert not client.is_cached("abc")
            assert client.url_for("abc") is None
            assert client.url_for("def") == URL
            client.reset()
            assert client.url_for("def") is None

        _run(handler, scenario)

    def test_no_registered_url(self):
        async def scenario(client):
            await client.fetch("abc")

        with pytest.raises(CaptionFetchError) as exc_info:
            _run(_Handler(), scenario)
        assert exc_info.value.status_code is None

    def test_http_error_status(self):
        handler = _Handler(404, text="not found")

        async def scenario(client):
            client.register_url("abc", URL)
            await client.fetch("abc")

        with pytest.raises(CaptionFetchError) as exc_info:
            _run(handler, scenario)
        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    def test_failure_not_cached(self):
        handler = _Handler(500, text="oops")

        async def scenario(client):
            client.register_url("abc", URL)
            for _ in range(2):
                with pytest.raises(CaptionFetchError):
                    await client.fetch("abc")
            return client.is_cached("abc")

        assert _run(handler, scenario) is False
        assert len(handler.requests) == 2

    def test_network_error(self):
        handler = _Handler(error=httpx.ConnectError("connection refused"))

        async def scenario(client):
            client.register_url("abc", URL)
            await client.fetch("abc")

        with pytest.raises(CaptionFetchError, match="connection refused"):
            _run(handler, scenario)

    def test_non_json_body(self):
        handler = _Handler(text="<html>")

        async def scenario(client):
            client.register_url("abc", URL)
            await client.fetch("abc")

        with pytest.raises(CaptionFetchError, match="not valid JSON"):
            _run(handler, scenario)

    def test_requires_context_manager(self):
        client = TimedTextClient()
        client.register_url("abc", URL)
        with pytest.raises(RuntimeError, match="async context manager"):
            asyncio.run(client.fetch("abc"))
