"""Unit tests for language-code normalization and URL detection.

WHY: The estimator is chosen from a language code that arrives in many
shapes ("en-US", "zh_Hant", a query parameter). A wrong normalization
silently picks the English fallback for a Japanese track.

RULES:
- Normalization keeps only the lower-cased primary subtag
- URL detection returns the full lower-cased tag, or None
"""

import pytest

from silence_skipper.config import language_name
from silence_skipper.core.language import detect_language_from_url, normalize_language_code


class TestNormalizeLanguageCode:
    @pytest.mark.parametrize("code,expected", [
        ("en", "en"),
        ("en-US", "en"),
        ("zh_Hant_TW", "zh"),
        ("JA", "ja"),
        (" ko ", "ko"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize(self, code, expected):
        assert normalize_language_code(code) == expected


class TestDetectLanguageFromUrl:
    def test_lang_param(self):
        url = "https://www.example.com/api/timedtext?v=abc&lang=ja&fmt=json3"
        assert detect_language_from_url(url) == "ja"

    def test_region_tag_lower_cased(self):
        url = "https://www.example.com/api/timedtext?v=abc&lang=en-US"
        assert detect_language_from_url(url) == "en-us"

    def test_lang_wins_over_translation(self):
        url = "https://www.example.com/api/timedtext?lang=ko&tlang=en"
        assert detect_language_from_url(url) == "ko"

    def test_translation_param_when_no_lang(self):
        assert detect_language_from_url("https://x.test/t?tlang=es") == "es"

    def test_host_language_param(self):
        assert detect_language_from_url("https://x.test/t?hl=fr&v=1") == "fr"

    @pytest.mark.parametrize("url", [
        None,
        "",
        "https://www.example.com/api/timedtext?v=abc",
        "not a url",
    ])
    def test_not_found(self, url):
        assert detect_language_from_url(url) is None


class TestLanguageName:
    def test_known(self):
        assert language_name("ja") == "Japanese"

    def test_unknown_is_upper_cased(self):
        assert language_name("tlh") == "TLH"
