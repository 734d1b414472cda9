"""
Script-based language detection.

Only the languages the catalogue distinguishes are reported: 'ja', 'ko', 'zh'
and 'en'. Anything else is None.
"""

import re
from typing import Optional

_KANA_RE = re.compile(r'[\u3040-\u309f\u30a0-\u30ff\u31f0-\u31ff\uff66-\uff9f]')
_JAPANESE_MARKS_RE = re.compile('[の・〜～「」『』【】｢｣]')
_HANGUL_RE = re.compile(r'[\u1100-\u11ff\u3130-\u318f\uac00-\ud7af]')
_HAN_RE = re.compile(r'[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\U00020000-\U0002ebef]')
_ASCII_LETTER_RE = re.compile(r'[A-Za-z]')
_NON_ASCII_RE = re.compile(r'[^\x00-\x7f]')

LANGUAGE_PREFIXES = [
    ('zh', 'zh'),
    ('ja', 'ja'),
    ('jp', 'ja'),
    ('ko', 'ko'),
    ('kr', 'ko'),
    ('en', 'en'),
]


def detect_language(text: Optional[str]) -> Optional[str]:
    """
    Guess the language of a short string from the scripts it uses.

    Kana or Japanese punctuation wins over Hangul, which wins over Han.
    Latin text counts as English when it has at least three letters and
    ASCII letters make up at least 60% of the letters and non-ASCII characters.
    """
    if not text:
        return None
    normalized = text.strip()
    if not normalized:
        return None
    if _KANA_RE.search(normalized) or _JAPANESE_MARKS_RE.search(normalized):
        return 'ja'
    if _HANGUL_RE.search(normalized):
        return 'ko'
    if _HAN_RE.search(normalized):
        return 'zh'
    ascii_letters = len(_ASCII_LETTER_RE.findall(normalized))
    if ascii_letters >= 3:
        non_ascii = len(_NON_ASCII_RE.findall(normalized))
        if non_ascii == 0 or ascii_letters / (ascii_letters + non_ascii) >= 0.6:
            return 'en'
    return None


def normalize_language_code(value: Optional[str]) -> Optional[str]:
    """Map a locale or language tag (zh-TW, ja_JP, en) onto a catalogue language."""
    if not value:
        return None
    lowered = value.strip().lower()
    for prefix, language in LANGUAGE_PREFIXES:
        if lowered.startswith(prefix):
            return language
    return None
