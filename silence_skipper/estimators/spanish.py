"""Spanish pronunciation estimator — vowel counting with diphthong merge.

WHY: Spanish spelling is close to phonetic; every vowel nucleus is a
syllable except where a vowel glides into a following "i" or "u"
(diphthongs such as "ciudad" or "aire").

HOW: Count vowel characters (accented vowels and "ü" included), then
subtract one syllable per vowel+i/u pair found left to right without
overlap.

RULES:
- Matching is case-insensitive
- Syllables floor at 1
- Duration = syllables x ES_SYLLABLE_MS (160 ms)
"""

from __future__ import annotations

import re

from silence_skipper.config import ES_SYLLABLE_MS
from silence_skipper.core.ir import PronunciationEstimate
from silence_skipper.estimators.base import BaseEstimator

_VOWEL_RE = re.compile(r"[aeiouáéíóúü]", re.IGNORECASE)
_DIPHTHONG_RE = re.compile(r"[aeiouáéíóúü][iu]", re.IGNORECASE)


def count_syllables(word: str) -> int:
    vowels = len(_VOWEL_RE.findall(word))
    diphthongs = len(_DIPHTHONG_RE.findall(word))
    return max(1, vowels - diphthongs)


class SpanishEstimator(BaseEstimator):
    """Estimator for Spanish auto-generated captions."""

    @property
    def language_code(self) -> str:
        return "es"

    def _estimate_word(self, word: str) -> PronunciationEstimate:
        syllables = count_syllables(word)
        return PronunciationEstimate(
            total_ms=syllables * ES_SYLLABLE_MS,
            details={"syllables": syllables},
        )
