"""
Text helpers shared by the extractors.

Everything scraped from a page passes through clean_text_value() before it is
compared or stored: CDATA is unwrapped, entities decoded, markup dropped and
whitespace collapsed.
"""

import html
import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment

_CDATA_RE = re.compile(r'^<!\[CDATA\[(.*)\]\]>$', re.DOTALL)
_TAG_RE = re.compile(r'<[^>]*>')
_WHITESPACE_RE = re.compile(r'\s+')
_KEYWORD_SPLIT_RE = re.compile(r'[;；,，、|｜/／]+')

NON_CONTENT_TAGS = ['script', 'style', 'noscript']


def strip_cdata(value: str) -> str:
    """Unwrap a <![CDATA[...]]> section, if the whole value is one."""
    trimmed = value.strip()
    match = _CDATA_RE.match(trimmed)
    if match:
        return match.group(1).strip()
    return trimmed


def decode_entities(value: str) -> str:
    return html.unescape(value)


def strip_tags(value: str) -> str:
    return _TAG_RE.sub(' ', value)


def normalize_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(' ', value).strip()


def clean_text_value(value: Optional[str]) -> Optional[str]:
    """
    Normalize a scraped string for comparison and storage.

    Returns:
        The cleaned text, or None when nothing is left.
    """
    if not value or not isinstance(value, str):
        return None
    cleaned = normalize_whitespace(strip_tags(decode_entities(strip_cdata(value))))
    return cleaned or None


def split_keywords(value: str) -> List[str]:
    """Split a keyword list on commas, semicolons, pipes and slashes (ASCII and fullwidth)."""
    keywords = []
    for part in _KEYWORD_SPLIT_RE.split(value):
        cleaned = clean_text_value(part)
        if cleaned:
            keywords.append(cleaned)
    return keywords


def unique(values) -> list:
    """Drop repeated values, keeping first-seen order."""
    return list(dict.fromkeys(values))


def resolve_url(base: str, value: Optional[str]) -> Optional[str]:
    """Resolve value against base. Returns None when value is empty or not a URL."""
    if not value:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        resolved = urljoin(base, value)
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    return resolved


def is_http_url(value: Optional[str]) -> bool:
    """True for an absolute http or https URL with a host."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def clean_soup(markup: str) -> BeautifulSoup:
    """Parse markup and drop script, style, noscript and comment nodes."""
    soup = BeautifulSoup(markup or '', 'html.parser')
    for element in soup.find_all(NON_CONTENT_TAGS):
        element.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return soup
