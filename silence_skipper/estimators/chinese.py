"""Chinese pronunciation estimator — one syllable per ideograph.

WHY: Every CJK ideograph is a single syllable, so counting ideographs
gives the syllable count directly. Auto-generated tracks sometimes mix
in Latin words or digits; those fall back to plain character count.

RULES:
- Ideographs: U+4E00..U+9FAF
- Duration = ideograph count x ZH_CHAR_MS (180 ms)
- No ideographs → total character count x ZH_CHAR_MS
"""

from __future__ import annotations

from silence_skipper.config import ZH_CHAR_MS
from silence_skipper.core.ir import PronunciationEstimate
from silence_skipper.estimators.base import BaseEstimator

_IDEOGRAPH_FIRST = 0x4E00
_IDEOGRAPH_LAST = 0x9FAF


def count_ideographs(word: str) -> int:
    return sum(1 for char in word if _IDEOGRAPH_FIRST <= ord(char) <= _IDEOGRAPH_LAST)


class ChineseEstimator(BaseEstimator):
    """Estimator for Chinese auto-generated captions."""

    @property
    def language_code(self) -> str:
        return "zh"

    def _estimate_word(self, word: str) -> PronunciationEstimate:
        ideographs = count_ideographs(word)
        characters = ideographs or len(word)
        return PronunciationEstimate(
            total_ms=characters * ZH_CHAR_MS,
            details={"ideographs": ideographs},
        )
