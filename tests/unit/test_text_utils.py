"""
Unit tests for text cleaning, date normalization and language detection.
"""

import pytest

from work_metadata.dates import normalize_date
from work_metadata.language import detect_language, normalize_language_code
from work_metadata.text import (
    clean_text_value,
    is_http_url,
    resolve_url,
    split_keywords,
    strip_cdata,
)


class TestNormalizeDate:
    """Tests for normalize_date()."""

    def test_eight_digits_is_utc_midnight(self):
        assert normalize_date('20240115') == '2024-01-15T00:00:00Z'

    def test_separated_eight_digits(self):
        assert normalize_date('2024/01/15') == '2024-01-15T00:00:00Z'

    def test_unparseable_returns_none(self):
        assert normalize_date('not a date') is None

    def test_empty_and_none(self):
        assert normalize_date('') is None
        assert normalize_date('   ') is None
        assert normalize_date(None) is None

    def test_offset_converted_to_utc(self):
        assert normalize_date('2024-01-15T09:00:00+08:00') == '2024-01-15T01:00:00Z'

    def test_naive_timestamp_treated_as_utc(self):
        assert normalize_date('2024-01-15T10:30:00') == '2024-01-15T10:30:00Z'

    def test_rfc822_date(self):
        assert normalize_date('Mon, 15 Jan 2024 10:00:00 GMT') == '2024-01-15T10:00:00Z'

    def test_impossible_calendar_date_is_none(self):
        assert normalize_date('2024-02-31') is None

    def test_idempotent(self):
        once = normalize_date('2024-03-01T08:00:00Z')
        assert normalize_date(once) == once


class TestDetectLanguage:
    """Tests for script-based detect_language()."""

    @pytest.mark.parametrize('text,expected', [
        ('進撃の巨人', 'ja'),
        ('カタカナ', 'ja'),
        ('「測試」', 'ja'),
        ('나 혼자만 레벨업', 'ko'),
        ('測試作品', 'zh'),
        ('Attack on Titan', 'en'),
    ])
    def test_scripts(self, text, expected):
        assert detect_language(text) == expected

    def test_too_few_letters(self):
        assert detect_language('A1') is None

    def test_mostly_non_ascii_latin_is_not_english(self):
        assert detect_language('ÉÈÊËéèêë abc') is None

    def test_empty(self):
        assert detect_language('') is None
        assert detect_language(None) is None


class TestNormalizeLanguageCode:
    """Tests for normalize_language_code()."""

    @pytest.mark.parametrize('value,expected', [
        ('zh-TW', 'zh'),
        ('ja_JP', 'ja'),
        ('jp', 'ja'),
        ('ko-KR', 'ko'),
        ('kr', 'ko'),
        ('en-US', 'en'),
        (' EN ', 'en'),
    ])
    def test_known_prefixes(self, value, expected):
        assert normalize_language_code(value) == expected

    def test_unknown_language(self):
        assert normalize_language_code('fr-FR') is None
        assert normalize_language_code(None) is None


class TestCleanTextValue:
    """Tests for clean_text_value()."""

    def test_cdata_entities_and_tags(self):
        assert clean_text_value('<![CDATA[ <b>Tom &amp; Jerry</b> ]]>') == 'Tom & Jerry'

    def test_whitespace_collapsed(self):
        assert clean_text_value('  a \n\t b  ') == 'a b'

    def test_nothing_left_is_none(self):
        assert clean_text_value('<br/>') is None
        assert clean_text_value(None) is None
        assert clean_text_value(42) is None

    def test_strip_cdata_leaves_plain_text(self):
        assert strip_cdata('  plain  ') == 'plain'


class TestSplitKeywords:
    """Tests for split_keywords()."""

    def test_mixed_separators(self):
        assert split_keywords('SF, 冒険、ファンタジー；drama|comedy／action') == [
            'SF', '冒険', 'ファンタジー', 'drama', 'comedy', 'action'
        ]

    def test_empty_parts_dropped(self):
        assert split_keywords(',,a,, ,b') == ['a', 'b']


class TestUrls:
    """Tests for resolve_url() and is_http_url()."""

    def test_relative_resolved(self):
        assert resolve_url('https://example.com/works/1', 'cover.jpg') == 'https://example.com/works/cover.jpg'

    def test_protocol_relative(self):
        assert resolve_url('https://example.com/', '//cdn.example.com/a.png') == 'https://cdn.example.com/a.png'

    def test_empty_value(self):
        assert resolve_url('https://example.com/', '  ') is None
        assert resolve_url('https://example.com/', None) is None

    def test_is_http_url(self):
        assert is_http_url('https://example.com/a')
        assert not is_http_url('ftp://example.com/a')
        assert not is_http_url('/relative/path')
        assert not is_http_url('')
