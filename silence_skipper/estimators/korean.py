"""Korean pronunciation estimator — one beat per Hangul block.

WHY: Each Hangul syllable block is read as one syllable, so character
count tracks speaking time closely without any phonetic analysis.

RULES:
- Duration = character count x KO_CHAR_MS (200 ms)
"""

from __future__ import annotations

from silence_skipper.config import KO_CHAR_MS
from silence_skipper.core.ir import PronunciationEstimate
from silence_skipper.estimators.base import BaseEstimator


class KoreanEstimator(BaseEstimator):
    """Estimator for Korean auto-generated captions."""

    @property
    def language_code(self) -> str:
        return "ko"

    def _estimate_word(self, word: str) -> PronunciationEstimate:
        return PronunciationEstimate(
            total_ms=len(word) * KO_CHAR_MS,
            details={"characters": len(word)},
        )
