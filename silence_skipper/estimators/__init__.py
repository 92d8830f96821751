"""Pronunciation estimator registry — pluggable per-language timing.

WHY: The auto-generated caption path needs exactly one estimator for
the track's language. A central, ordered registry makes it trivial to
add a language: create the estimator class, import it here, add one
line.

HOW: ESTIMATORS lists estimator *classes* in selection order.
EstimatorRegistry instantiates them, normalizes the requested language
code, and returns the first estimator whose ``identify()`` accepts it.
A missing code selects the fallback (English). An unrecognized code is
reported once through the notifier and yields None.

RULES:
- Selection is pure and deterministic: same code → same estimator
- select() never raises; None means "auto-caption skipping unavailable
  for this video", not a fatal error
- require() is the raising variant for callers that want an exception
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Type

from silence_skipper.config import language_name
from silence_skipper.core.language import normalize_language_code
from silence_skipper.estimators.base import BaseEstimator
from silence_skipper.estimators.chinese import ChineseEstimator
from silence_skipper.estimators.english import EnglishEstimator
from silence_skipper.estimators.japanese import JapaneseEstimator
from silence_skipper.estimators.korean import KoreanEstimator
from silence_skipper.estimators.spanish import SpanishEstimator

if TYPE_CHECKING:
    from silence_skipper.notifications import Notifier

logger = logging.getLogger(__name__)

ESTIMATORS: List[Type[BaseEstimator]] = [
    EnglishEstimator,
    KoreanEstimator,
    JapaneseEstimator,
    ChineseEstimator,
    SpanishEstimator,
]

DEFAULT_ESTIMATOR: Type[BaseEstimator] = EnglishEstimator


class UnsupportedLanguageError(LookupError):
    """Raised by EstimatorRegistry.require() when no estimator matches.

    RULES:
    - language_code holds the code as requested (not normalized)
    """

    def __init__(self, language_code: str) -> None:
        self.language_code = language_code
        super().__init__("No pronunciation estimator for language {!r}".format(language_code))


class EstimatorRegistry:
    """Ordered estimator list plus a fallback for unknown track languages."""

    def __init__(
        self,
        estimators: Optional[Sequence[BaseEstimator]] = None,
        fallback: Optional[BaseEstimator] = None,
    ) -> None:
        self.estimators: List[BaseEstimator] = (
            list(estimators) if estimators is not None else [cls() for cls in ESTIMATORS]
        )
        self.fallback = fallback if fallback is not None else DEFAULT_ESTIMATOR()

    def find(self, language_code: Optional[str]) -> Optional[BaseEstimator]:
        """Return the matching estimator without reporting anything."""
        normalized = normalize_language_code(language_code)
        if not normalized:
            return self.fallback
        for estimator in self.estimators:
            if estimator.identify(normalized):
                return estimator
        return None

    def select(
        self,
        language_code: Optional[str],
        notifier: Optional[Notifier] = None,
    ) -> Optional[BaseEstimator]:
        """Select the estimator for ``language_code``.

        Returns:
            The first matching estimator, the fallback when no code is
            given, or None for an unsupported language.
        """
        estimator = self.find(language_code)
        if estimator is not None:
            logger.debug("Using %r for language %r", estimator, language_code)
            return estimator

        name = language_name(normalize_language_code(language_code))
        logger.info("No estimator found for language %r (%s)", language_code, name)
        if notifier is not None:
            notifier.notify(
                "{} auto-captions are currently not supported.".format(name),
                "default",
            )
        return None

    def require(self, language_code: Optional[str]) -> BaseEstimator:
        """Like select(), but raise UnsupportedLanguageError instead of returning None."""
        estimator = self.find(language_code)
        if estimator is None:
            raise UnsupportedLanguageError(language_code or "")
        return estimator
