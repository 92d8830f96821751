"""English pronunciation estimator — syllable counting.

WHY: English is the default track language and the fallback when the
caption language is unknown. Syllable count is a cheap, good-enough
proxy for how long a word is held.

HOW: count_syllables() counts vowel clusters (``y`` counts as a vowel
after the first letter) and applies suffix corrections for silent
"e", "-le", "-ed", and "-es". Words with digits or capitals are treated
as non-lexical tokens (acronyms, numbers, names) with a fixed long
duration. One-syllable words get a fixed short duration; longer words
get syllables x per-syllable time x speed factor.

RULES:
- Per-syllable time: 2 → 225 ms, 3 → 175 ms, 4+ → 125 ms
- Speed factor: EN_SYLLABLE_SPEED_FACTOR (1.5)
- One syllable: EN_ONE_SYLLABLE_MS (500 ms)
- Any digit or uppercase letter: EN_NON_LEXICAL_MS (2000 ms)
- count_syllables() never returns less than 1 for a non-empty word
"""

from __future__ import annotations

import re

from silence_skipper.config import (
    EN_NON_LEXICAL_MS,
    EN_ONE_SYLLABLE_MS,
    EN_SYLLABLE_MS,
    EN_SYLLABLE_MS_LONG,
    EN_SYLLABLE_SPEED_FACTOR,
)
from silence_skipper.core.ir import PronunciationEstimate
from silence_skipper.estimators.base import BaseEstimator

_VOWELS = frozenset("aeiou")
_NON_LEXICAL_RE = re.compile(r"[0-9A-Z]")
_SIBILANT_RE = re.compile(r"ch|sh|ss|[sxz]")


def count_syllables(word: str) -> int:
    """Estimate the number of syllables in an English word.

    Returns:
        0 for empty input, otherwise at least 1.
    """
    if not word or not isinstance(word, str):
        return 0

    word = word.lower().strip()
    if not word:
        return 0

    count = 0
    previous_was_vowel = False
    for i, char in enumerate(word):
        if char in _VOWELS or (char == "y" and i > 0):
            if not previous_was_vowel:
                count += 1
            previous_was_vowel = True
        else:
            previous_was_vowel = False

    # Silent final "e" ("make"), unless it follows another vowel ("free")
    if word.endswith("e") and count > 1 and word[-2:-1] not in _VOWELS:
        count -= 1

    # Consonant + "le" is its own syllable ("table")
    if word.endswith("le") and len(word) > 2 and word[-3] not in "aeiouy":
        count += 1

    # "-ed" is silent except after t/d ("jumped" vs "wanted")
    if word.endswith("ed") and len(word) > 2 and word[-3] not in "td":
        count = max(1, count - 1)

    # "-es" is silent except after sibilants ("makes" vs "boxes")
    if word.endswith("es") and len(word) > 2:
        if not _SIBILANT_RE.search(word[-4:-2]):
            count = max(1, count - 1)

    return max(1, count)


class EnglishEstimator(BaseEstimator):
    """Estimator for English and the default fallback for unknown tracks."""

    @property
    def language_code(self) -> str:
        return "en"

    def _estimate_word(self, word: str) -> PronunciationEstimate:
        if _NON_LEXICAL_RE.search(word):
            return PronunciationEstimate(
                total_ms=EN_NON_LEXICAL_MS,
                details={"non_lexical": True},
            )

        syllables = count_syllables(word)
        if syllables == 1:
            return PronunciationEstimate(
                total_ms=EN_ONE_SYLLABLE_MS,
                details={"syllables": 1},
            )

        per_syllable_ms = EN_SYLLABLE_MS.get(syllables, EN_SYLLABLE_MS_LONG)
        return PronunciationEstimate(
            total_ms=syllables * per_syllable_ms * EN_SYLLABLE_SPEED_FACTOR,
            details={"syllables": syllables, "per_syllable_ms": per_syllable_ms},
        )
