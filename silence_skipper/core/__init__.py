"""Core timeline modules.

WHY: The core package holds the stable heart of the skip engine — the
IR dataclasses, payload validation, language-code helpers, and the
timeline builder. These are consumed by the estimators and by the
scheduler and must stay free of playback concerns.

HOW: ir.py defines the data structures, schema.py validates the raw
timedtext payload, language.py normalizes and detects language codes,
and timeline.py turns raw events into skip zones.

RULES:
- IR dataclasses are the contract — change with care
- No module in core/ touches timers or playback handles
"""
