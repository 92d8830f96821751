"""Async HTTP client for timedtext caption payloads, with a per-video cache.

WHY: Caption URLs are discovered by the host (it sees the player's own
timedtext request) and the payload is needed once per video. The same
video is often reloaded within a session — a caption variant toggle,
a settings change, an ad ending — so the payload must be served from
memory until the viewer navigates away.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. TimedTextClient is an
async context manager — enter it to open the connection pool, exit to
close it. register_url() records the URL for a video (stripping the
``tlang`` translation parameter), fetch() downloads and caches the JSON,
invalidate() and reset() drop cached entries.

RULES:
- Always use the async context manager (async with TimedTextClient() as client:)
- ``tlang`` is removed so the source-language track is fetched, not a
  machine translation
- Non-2xx responses, network errors, and non-JSON bodies raise CaptionFetchError
- A cached payload is returned without touching the network
- Failures are not cached and not retried
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from silence_skipper.config import TIMEDTEXT_TIMEOUT_S
from silence_skipper.core.language import detect_language_from_url

logger = logging.getLogger(__name__)

_TRANSLATION_PARAM = "tlang"


class CaptionFetchError(Exception):
    """Raised when a caption payload cannot be obtained.

    WHY: The engine reports a failed fetch once and stays disarmed for
    the video; it needs one exception type for every way that can fail.

    RULES:
    - status_code is the HTTP status, or None for non-HTTP failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is not None:
            super().__init__("Caption fetch failed ({}): {}".format(status_code, message))
        else:
            super().__init__("Caption fetch failed: {}".format(message))


def strip_translation(url: str) -> str:
    """Remove the ``tlang`` query parameter from a timedtext URL."""
    if _TRANSLATION_PARAM + "=" not in url:
        return url
    try:
        return str(httpx.URL(url).copy_remove_param(_TRANSLATION_PARAM))
    except httpx.InvalidURL:
        logger.warning("URL processing failed, using original: %s", url)
        return url


class TimedTextClient:
    """Async timedtext client with a per-video URL and payload cache."""

    def __init__(
        self,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout_s = timeout_s or TIMEDTEXT_TIMEOUT_S
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._urls: Dict[str, str] = {}
        self._payloads: Dict[str, Any] = {}

    async def __aenter__(self) -> TimedTextClient:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_s),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "TimedTextClient must be used as an async context manager: "
                "async with TimedTextClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def register_url(self, video_id: str, url: str) -> str:
        """Record the timedtext URL for ``video_id``; return the stored URL.

        RULES:
        - A new URL for the same video drops the cached payload
        """
        processed = strip_translation(url)
        if self._urls.get(video_id) != processed:
            self._payloads.pop(video_id, None)
        self._urls[video_id] = processed
        return processed

    def url_for(self, video_id: str) -> Optional[str]:
        return self._urls.get(video_id)

    def language_for(self, video_id: str) -> Optional[str]:
        """Language tag detected from the registered URL, or None."""
        return detect_language_from_url(self._urls.get(video_id))

    def is_cached(self, video_id: str) -> bool:
        return video_id in self._payloads

    def invalidate(self, video_id: str) -> None:
        self._urls.pop(video_id, None)
        self._payloads.pop(video_id, None)

    def reset(self) -> None:
        self._urls.clear()
        self._payloads.clear()

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(self, video_id: str) -> Any:
        """Return the decoded timedtext payload for ``video_id``.

        Raises:
            CaptionFetchError: If no URL is registered, the request fails,
                or the body is not JSON.
        """
        if video_id in self._payloads:
            logger.debug("Serving cached captions for %s", video_id)
            return self._payloads[video_id]

        url = self._urls.get(video_id)
        if not url:
            raise CaptionFetchError("no caption URL registered for video {}".format(video_id))

        client = self._ensure_client()
        try:
            resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise CaptionFetchError(str(exc)) from exc

        if resp.status_code != 200:
            raise CaptionFetchError(resp.text[:200], status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise CaptionFetchError("response is not valid JSON") from exc

        self._payloads[video_id] = payload
        logger.info("Fetched captions for %s (%d bytes)", video_id, len(resp.content))
        return payload
