"""Japanese pronunciation estimator — mora counting by script class.

WHY: Japanese rhythm is mora-timed: each mora takes roughly the same
time regardless of the word. Auto-generated Japanese captions mix
hiragana, katakana, and kanji, and each script needs a different way to
get from characters to morae.

HOW: Every character is classified into hiragana, katakana, kanji, or
other. Kana count one mora each; the small kana (ゃ ゅ ょ っ and their
katakana forms) and the long-vowel mark ー belong to the mora they
extend and add no count of their own. Kanji readings are estimated from
two short lists (one-mora numerals/positions, three-mora complex
characters), defaulting to two. Other characters count half a mora.

The per-mora duration is nudged by the dominant script, extra time is
added for long-vowel marks and geminate stops, then small
multiplicative adjustments are applied for speech level (polite/casual
endings) and word type (repeated-pattern onomatopoeia, exclamations).
A final flat scale (JA_DURATION_SCALE) is applied last.

RULES:
- Base mora duration: 150 ms; +20 ms if >50% kanji; -10 ms if >50% katakana
- Each ー adds 80 ms; any っ/ッ adds 30 ms once
- Polite x1.1, casual x0.95; onomatopoeia x1.2, exclamation x1.15
- Mora count rounds half up and floors at 1
- Result = max(100, round(total x adjustment) x JA_DURATION_SCALE)
"""

from __future__ import annotations

import math
from typing import Dict

from silence_skipper import config
from silence_skipper.config import JA_CHOON_MS, JA_MORA_MS, JA_SOKUON_MS
from silence_skipper.core.ir import PronunciationEstimate
from silence_skipper.estimators.base import BaseEstimator

HIRAGANA = "hiragana"
KATAKANA = "katakana"
KANJI = "kanji"
OTHER = "other"

_CHOON = "ー"
_SOKUON = frozenset("っッ")
_SMALL_KANA = frozenset("ゃゅょャュョっッ")

_SINGLE_MORA_KANJI = frozenset("一二三四五六七八九十人大小中上下左右前後")
_LONG_KANJI = frozenset("難複雑議説関係様業")

_POLITE_ENDINGS = ("ます", "です", "ございます", "であります")
_CASUAL_ENDINGS = ("だ", "である", "じゃん", "よ", "ね")
_EXCLAMATIONS = frozenset({"あっ", "えっ", "おっ", "うわっ", "わあ"})


def character_type(char: str) -> str:
    code = ord(char)
    if 0x3040 <= code <= 0x309F:
        return HIRAGANA
    if 0x30A0 <= code <= 0x30FF:
        return KATAKANA
    if 0x4E00 <= code <= 0x9FAF:
        return KANJI
    return OTHER


def _kanji_mora(char: str) -> int:
    if char in _SINGLE_MORA_KANJI:
        return 1
    if char in _LONG_KANJI:
        return 3
    return 2


def count_mora(word: str) -> int:
    """Estimate the mora count of a Japanese word.

    Returns:
        0 for empty input, otherwise at least 1.
    """
    if not word:
        return 0

    mora = 0.0
    for char in word:
        kind = character_type(char)
        if kind in (HIRAGANA, KATAKANA):
            if char in _SMALL_KANA or char == _CHOON:
                continue
            mora += 1
        elif kind == KANJI:
            mora += _kanji_mora(char)
        else:
            mora += 0.5

    return max(1, math.floor(mora + 0.5))


def script_ratios(word: str) -> Dict[str, float]:
    """Return the share of each script class in ``word``."""
    counts = {HIRAGANA: 0, KATAKANA: 0, KANJI: 0, OTHER: 0}
    for char in word:
        counts[character_type(char)] += 1
    total = len(word) or 1
    return {kind: count / total for kind, count in counts.items()}


def detect_speech_level(word: str) -> str:
    if word.endswith(_POLITE_ENDINGS):
        return "polite"
    if word.endswith(_CASUAL_ENDINGS):
        return "casual"
    return "neutral"


def has_repeating_pattern(word: str) -> bool:
    """True for reduplicated words such as "ドキドキ" or "キラキラ"."""
    if len(word) < 4:
        return False
    half = len(word) // 2
    return word[:half] == word[half:half * 2]


def detect_word_type(word: str, ratios: Dict[str, float]) -> str:
    if ratios[KATAKANA] > 0.8 and has_repeating_pattern(word):
        return "onomatopoeia"
    if word in _EXCLAMATIONS:
        return "exclamation"
    return "normal"


class JapaneseEstimator(BaseEstimator):
    """Estimator for Japanese auto-generated captions."""

    @property
    def language_code(self) -> str:
        return "ja"

    def _estimate_word(self, word: str) -> PronunciationEstimate:
        mora = count_mora(word)
        ratios = script_ratios(word)

        per_mora_ms = JA_MORA_MS
        if ratios[KANJI] > 0.5:
            per_mora_ms += 20
        if ratios[KATAKANA] > 0.5:
            per_mora_ms -= 10

        choon_ms = word.count(_CHOON) * JA_CHOON_MS
        total = mora * per_mora_ms + choon_ms
        if any(char in _SOKUON for char in word):
            total += JA_SOKUON_MS

        adjustment = 1.0
        speech_level = detect_speech_level(word)
        if speech_level == "polite":
            adjustment *= 1.1
        elif speech_level == "casual":
            adjustment *= 0.95

        word_type = detect_word_type(word, ratios)
        if word_type == "onomatopoeia":
            adjustment *= 1.2
        elif word_type == "exclamation":
            adjustment *= 1.15

        adjusted = math.floor(total * adjustment + 0.5)
        return PronunciationEstimate(
            total_ms=adjusted * config.JA_DURATION_SCALE,
            details={
                "mora": mora,
                "per_mora_ms": per_mora_ms,
                "script_ratios": ratios,
                "speech_level": speech_level,
                "word_type": word_type,
                "choon_ms": choon_ms,
                "adjustment": adjustment,
            },
        )
