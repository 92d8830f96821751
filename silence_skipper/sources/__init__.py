"""Caption sources — where raw timedtext payloads come from.

WHY: The engine consumes caption payloads but never fetches them
itself. A source resolves a video identity to a payload, remembers it
for the rest of the viewing session, and forgets it when the viewer
moves on.

HOW: CaptionSource is the protocol the engine depends on.
TimedTextClient is the httpx-backed implementation for timedtext URLs.

RULES:
- fetch() is async and raises CaptionFetchError on any failure
- Repeated fetch() calls for the same video return the cached payload
- invalidate() drops everything cached for one video
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from silence_skipper.sources.timedtext import CaptionFetchError, TimedTextClient


class CaptionSource(Protocol):
    async def fetch(self, video_id: str) -> Any:
        ...

    def language_for(self, video_id: str) -> Optional[str]:
        ...

    def invalidate(self, video_id: str) -> None:
        ...


__all__ = ["CaptionFetchError", "CaptionSource", "TimedTextClient"]
