"""
Tag scanning for fetched pages.

Head metadata (<meta>, <link>, <title>, JSON-LD) is read with attribute-level
regular expressions over the <head> section only, which keeps the cost bounded
on very large pages. Headings and inline images come from the body, parsed
with BeautifulSoup after scripts, styles and comments are removed.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from bs4 import BeautifulSoup

from .config import ExtractorConfig
from .lexicons import DECORATIVE_ALT_PATTERN
from .models import LinkTag, MetaTag
from .text import clean_soup, clean_text_value, decode_entities, resolve_url, strip_cdata
from .titles import is_likely_non_title

logger = logging.getLogger(__name__)

_HEAD_RE = re.compile(r'<head(?:\s[^>]*)?>(.*?)</head\s*>', re.IGNORECASE | re.DOTALL)
_ATTRIBUTE_RE = re.compile(r'''([a-zA-Z0-9_:.-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))''')
_META_RE = re.compile(r'<meta\b([^>]*?)>', re.IGNORECASE)
_LINK_RE = re.compile(r'<link\b([^>]*?)>', re.IGNORECASE)
_TITLE_RE = re.compile(r'<title[^>]*>(.*?)</title\s*>', re.IGNORECASE | re.DOTALL)
_HTML_LANG_RE = re.compile(
    r'''<html\b[^>]*?\blang\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))''',
    re.IGNORECASE,
)
_SCRIPT_RE = re.compile(r'<script\b([^>]*?)>(.*?)</script\s*>', re.IGNORECASE | re.DOTALL)
_HTML_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
_NESTED_SCRIPT_RE = re.compile(r'<script.*?</script\s*>', re.IGNORECASE | re.DOTALL)
_DECORATIVE_ALT_RE = re.compile(DECORATIVE_ALT_PATTERN, re.IGNORECASE)

JSON_LD_TYPE = 'application/ld+json'
IMAGE_SOURCE_ATTRIBUTES = ['src', 'data-src', 'data-original', 'data-lazy-src', 'data-zoom-src']
IMAGE_SRCSET_ATTRIBUTES = ['srcset', 'data-srcset']


@dataclass
class ScannedPage:
    meta_tags: List[MetaTag] = field(default_factory=list)
    link_tags: List[LinkTag] = field(default_factory=list)
    title: Optional[str] = None
    html_lang: Optional[str] = None
    json_ld_blocks: List[Any] = field(default_factory=list)
    heading: Optional[str] = None
    inline_images: List[str] = field(default_factory=list)


def extract_head_section(html: str, limit: int = 20000) -> str:
    """Content of <head>, or the first `limit` characters when there is none."""
    match = _HEAD_RE.search(html)
    if match:
        return match.group(1)
    return html[:limit]


def parse_attributes(fragment: str) -> Dict[str, str]:
    """
    Parse the attributes of a tag body.

    Names are lowercased. Values may be double-quoted, single-quoted or bare,
    and are trimmed. Entities are left for the caller to decode.
    """
    attributes = {}
    for match in _ATTRIBUTE_RE.finditer(fragment):
        name = match.group(1).lower()
        value = next((group for group in match.group(2, 3, 4) if group is not None), '')
        attributes[name] = value.strip()
    return attributes


def parse_meta_tags(head: str) -> List[MetaTag]:
    tags = []
    for match in _META_RE.finditer(head):
        attrs = parse_attributes(match.group(1))
        if not attrs.get('name') and not attrs.get('property'):
            continue
        content = attrs['content'] if 'content' in attrs else attrs.get('value')
        tags.append(MetaTag(
            name=attrs.get('name'),
            property=attrs.get('property'),
            content=decode_entities(content) if content is not None else None,
        ))
    return tags


def parse_link_tags(head: str) -> List[LinkTag]:
    tags = []
    for match in _LINK_RE.finditer(head):
        attrs = parse_attributes(match.group(1))
        tags.append(LinkTag(
            rel=attrs.get('rel'),
            href=decode_entities(attrs['href']) if 'href' in attrs else None,
            type=attrs.get('type'),
            title=attrs.get('title'),
        ))
    return tags


def parse_html_title(head: str) -> Optional[str]:
    match = _TITLE_RE.search(head)
    if not match:
        return None
    return decode_entities(strip_cdata(match.group(1))).strip() or None


def extract_html_lang(html: str) -> Optional[str]:
    match = _HTML_LANG_RE.search(html)
    if not match:
        return None
    value = next((group for group in match.groups() if group is not None), '')
    return value.strip() or None


def parse_json_ld_blocks(head: str) -> List[Any]:
    """Parse every application/ld+json script. Malformed blocks are skipped."""
    blocks = []
    for match in _SCRIPT_RE.finditer(head):
        attrs = parse_attributes(match.group(1))
        if attrs.get('type', '').lower() != JSON_LD_TYPE:
            continue
        body = _NESTED_SCRIPT_RE.sub('', _HTML_COMMENT_RE.sub('', match.group(2))).strip()
        if not body:
            continue
        try:
            blocks.append(json.loads(body))
        except ValueError as e:
            logger.debug('Skipping malformed JSON-LD block: %s', e)
    return blocks


def iter_meta_contents(meta_tags: Iterable[MetaTag], keys: Iterable[str]) -> Iterator[str]:
    """Raw content of every meta tag whose name or property is one of keys, in document order."""
    wanted = {key.lower() for key in keys}
    for tag in meta_tags:
        if tag.content is None:
            continue
        name = (tag.name or '').strip().lower()
        prop = (tag.property or '').strip().lower()
        if name in wanted or prop in wanted:
            yield tag.content


def first_meta_content(meta_tags: Iterable[MetaTag], keys: Iterable[str]) -> Optional[str]:
    """First cleaned, non-empty content for any of keys."""
    for content in iter_meta_contents(meta_tags, keys):
        cleaned = clean_text_value(content)
        if cleaned:
            return cleaned
    return None


def extract_heading_title(soup: BeautifulSoup) -> Optional[str]:
    """First <h1>/<h2> text that could be a title."""
    for heading in soup.find_all(['h1', 'h2']):
        value = clean_text_value(heading.get_text(' '))
        if value and len(value) >= 2 and not is_likely_non_title(value):
            return value
    return None


def _image_source(img) -> Optional[str]:
    for attribute in IMAGE_SOURCE_ATTRIBUTES:
        value = img.get(attribute)
        if isinstance(value, str) and value.strip():
            return value.strip()
    for attribute in IMAGE_SRCSET_ATTRIBUTES:
        value = img.get(attribute)
        if isinstance(value, str) and value.strip():
            first = value.split(',')[0].strip().split()
            if first:
                return first[0]
    return None


def extract_inline_images(soup: BeautifulSoup, page_url: str, limit: int = 30) -> List[str]:
    """
    Absolute URLs of inline <img> elements in document order.

    data: URIs and images whose alt text marks them as decoration are skipped.
    """
    images = []
    seen = set()
    for img in soup.find_all('img'):
        source = _image_source(img)
        if not source or source.lower().startswith('data:'):
            continue
        resolved = resolve_url(page_url, source)
        if not resolved or resolved in seen:
            continue
        seen.add(resolved)
        alt = img.get('alt')
        if isinstance(alt, str) and _DECORATIVE_ALT_RE.search(alt):
            continue
        images.append(resolved)
        if len(images) >= limit:
            break
    return images


def scan_page(html: str, base_url: str, config: Optional[ExtractorConfig] = None) -> ScannedPage:
    """Collect head tags, JSON-LD blocks, the first heading and inline images from a page."""
    config = config or ExtractorConfig()
    head = extract_head_section(html, config.head_scan_limit)
    soup = clean_soup(html)
    return ScannedPage(
        meta_tags=parse_meta_tags(head),
        link_tags=parse_link_tags(head),
        title=parse_html_title(head),
        html_lang=extract_html_lang(html),
        json_ld_blocks=parse_json_ld_blocks(head),
        heading=extract_heading_title(soup),
        inline_images=extract_inline_images(soup, base_url, config.max_inline_images),
    )
