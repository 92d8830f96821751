"""Single-shot timer contract and its asyncio implementation.

WHY: The scheduler sleeps until the next interesting moment (a gap
opens, a landing point is reached, an ad re-poll). It must be able to
cancel that wake-up at any time, and tests must be able to drive it
without real waiting.

HOW: Timers is a protocol with one method, ``call_later(delay_ms,
callback)``, returning a handle with ``cancel()``. AsyncioTimers maps it
onto ``loop.call_later``; VirtualClock (simulation.py) implements it
against a manually advanced clock.

RULES:
- Delays are milliseconds; negative delays are treated as 0
- Callbacks run on the event loop thread, never concurrently
- cancel() on a fired or cancelled handle is a no-op
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Timers(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioTimers:
    """Timers backed by an asyncio event loop.

    RULES:
    - loop defaults to the loop running at call time
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000.0, callback)
