"""Playback-synchronized skip scheduling.

WHY: Skip decisions must be made against a live playback clock that the
engine cannot pause, and must survive its own seeks, user seeks, pauses,
and ad interruptions. This package holds everything time-related.

HOW: timers.py defines the single-shot timer contract and its asyncio
implementation, playback.py defines the live playback handle contract,
simulation.py provides a virtual clock and a simulated player, and
strategies.py holds the manual and auto-generated skip strategies.

RULES:
- Single-threaded and cooperative: all state changes happen inside one
  synchronous evaluation pass
- A strategy owns at most one pending timer at any moment
"""
