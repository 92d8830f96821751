"""Configuration constants, language names, and .env loading.

WHY: The skip engine has many small numbers (skip thresholds, per-mora
durations, punctuation pauses) that get tuned by ear. Keeping them in
one module of plain values means a retune never touches estimator or
scheduler logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values, dicts, and strings. User-facing defaults can be
overridden via environment variables; estimator constants are fixed
except for the Japanese duration scale.

RULES:
- DEFAULT_* values seed SkipSettings.from_env()
- Timing constants are integer or float milliseconds
- LANGUAGE_NAMES maps ISO 639-1 → English display name (33 languages)
- Unknown language codes display as the upper-cased code
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Default user settings
# ---------------------------------------------------------------------------

DEFAULT_SKIP_ENABLED = _env_bool("SKIP_ENABLED", True)
DEFAULT_MIN_SKIP_SECONDS = _env_float("MIN_SKIP_SECONDS", 0.2)
DEFAULT_SKIP_AFTER_SEEK = _env_bool("SKIP_AFTER_SEEK", False)
DEFAULT_SKIP_CC_CAPTIONS = _env_bool("SKIP_CC_CAPTIONS", True)
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "default").strip().lower()
DEFAULT_PRE_SPEECH_OFFSET_SECONDS = _env_float("PRE_SPEECH_OFFSET_SECONDS", 0.0)
DEFAULT_POST_SILENCE_DELAY_SECONDS = _env_float("POST_SILENCE_DELAY_SECONDS", 0.0)

# ---------------------------------------------------------------------------
# Scheduler timing
# ---------------------------------------------------------------------------

AD_REPOLL_MS = 1000
"""Re-poll interval while an ad interruption is active."""

# ---------------------------------------------------------------------------
# Pronunciation estimator constants
# ---------------------------------------------------------------------------

CAPTION_MARKER_DURATION_MS = 10
"""Duration given to bracketed sound descriptions like "[Music]"."""

MIN_ESTIMATE_MS = 100
"""Floor for every regular word estimate."""

EN_SYLLABLE_SPEED_FACTOR = 1.5
EN_ONE_SYLLABLE_MS = 500
EN_NON_LEXICAL_MS = 2000

# Per-syllable milliseconds by syllable count; longer words are spoken faster.
EN_SYLLABLE_MS = {2: 225, 3: 175}
EN_SYLLABLE_MS_LONG = 125

KO_CHAR_MS = 200
ZH_CHAR_MS = 180
ES_SYLLABLE_MS = 160

JA_MORA_MS = 150
JA_CHOON_MS = 80
JA_SOKUON_MS = 30
JA_DURATION_SCALE = _env_float("JA_DURATION_SCALE", 2.0)
"""Flat multiplier applied after the per-mora math for Japanese."""

# ---------------------------------------------------------------------------
# Caption source
# ---------------------------------------------------------------------------

TIMEDTEXT_TIMEOUT_S = _env_float("TIMEDTEXT_TIMEOUT_S", 30.0)

# ---------------------------------------------------------------------------
# Language display names
# ---------------------------------------------------------------------------

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "ko": "Korean",
    "ja": "Japanese",
    "zh": "Chinese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "th": "Thai",
    "vi": "Vietnamese",
    "tr": "Turkish",
    "pl": "Polish",
    "nl": "Dutch",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "he": "Hebrew",
    "cs": "Czech",
    "hu": "Hungarian",
    "ro": "Romanian",
    "bg": "Bulgarian",
    "hr": "Croatian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "et": "Estonian",
    "lv": "Latvian",
    "lt": "Lithuanian",
    "mt": "Maltese",
}


def language_name(code: str) -> str:
    """Return the display name for an ISO 639-1 code.

    RULES:
    - Known codes map to their English name
    - Unknown codes return the code upper-cased (e.g. "xx" → "XX")
    """
    return LANGUAGE_NAMES.get(code, code.upper())
