"""Language-code normalization and detection from caption URLs.

WHY: Estimators are keyed by bare ISO 639-1 codes ("en", "ja"), but the
caption source reports region- and script-tagged codes ("en-US",
"zh_Hant") and often only exposes the language as a URL query parameter.

HOW: normalize_language_code() lower-cases and strips subtags.
detect_language_from_url() reads the ``lang``, ``tlang`` or ``hl`` query
parameter, falling back to a regex for URLs that do not parse cleanly.

RULES:
- Subtags are split on "-" or "_"; only the primary tag is kept
- Detection returns the full lower-cased tag (e.g. "en-us"); callers
  normalize when selecting an estimator
- Returns None when no language can be found
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

_SUBTAG_SEPARATOR_RE = re.compile(r"[-_]")
_LANG_PARAM_RE = re.compile(r"[&?]lang=([a-z]{2}(?:-[A-Z]{2})?)", re.IGNORECASE)
_LANG_PARAMS = ("lang", "tlang", "hl")


def normalize_language_code(code: Optional[str]) -> str:
    """Reduce a language tag to its lower-cased primary subtag.

    RULES:
    - "en-US" → "en", "zh_Hant_TW" → "zh", "JA" → "ja"
    - None or blank → ""
    """
    if not code:
        return ""
    return _SUBTAG_SEPARATOR_RE.split(code.strip().lower(), maxsplit=1)[0]


def detect_language_from_url(url: Optional[str]) -> Optional[str]:
    """Detect the caption language from a timedtext URL.

    Args:
        url: The timedtext request URL, or None.

    Returns:
        The lower-cased language tag, or None if not found.
    """
    if not url or not isinstance(url, str):
        return None

    try:
        params = parse_qs(urlsplit(url).query)
    except ValueError as exc:
        logger.debug("Failed to parse timedtext URL for language detection: %s", exc)
        params = {}

    for name in _LANG_PARAMS:
        values = params.get(name)
        if values and values[0]:
            return values[0].lower()

    match = _LANG_PARAM_RE.search(url)
    if match:
        return match.group(1).lower()

    return None
