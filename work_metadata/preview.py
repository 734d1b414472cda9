"""
Link previews.

A lighter sibling of the full extractor: image, title, author and site name
for a URL, taken from meta tags with a single inline <img> fallback and a
label-pattern author search. Only the first preview_max_bytes of the page are
read.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .config import ExtractorConfig
from .fetcher import FetchFailure, fetch_document
from .lexicons import (
    PREVIEW_AUTHOR_KEYWORDS,
    PREVIEW_DESCRIPTION_META_KEYS,
    PREVIEW_IMAGE_META_KEYS,
    PREVIEW_SITE_NAME_META_KEYS,
    PREVIEW_TITLE_META_KEYS,
)
from .models import LinkPreview
from .schema_summary import collect_schema_nodes
from .tag_scanner import parse_attributes, parse_html_title, parse_json_ld_blocks
from .text import decode_entities, is_http_url, normalize_whitespace, resolve_url

logger = logging.getLogger(__name__)

PREVIEW_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8'

_META_RE = re.compile(r'<meta\s+([^>]*)>', re.IGNORECASE)
_IMG_RE = re.compile(r'<img\s+([^>]*)>', re.IGNORECASE)
_AUTHOR_LABEL_RE = re.compile(r'^(?:作者|著者|(?:author|byline|by)\b)\s*[：:\-]?\s*', re.IGNORECASE)
_AUTHOR_SEGMENT_RE = re.compile(r'[|｜／/\n\r]')
_AUTHOR_IN_TEXT_RE = re.compile(r'(?:作者|著者|\bauthor\b)\s*[：:\-]?\s*([^|｜／/\n\r]{1,80})', re.IGNORECASE)
_AUTHOR_IN_MARKUP_RE = re.compile(r'(?:作者|著者)\s*[：:\-]\s*([^<\n\r]{1,80})', re.IGNORECASE)


def collect_meta_map(html: str) -> Dict[str, str]:
    """First non-empty content per lowercased property/name/itemprop key, in document order."""
    meta = {}
    for match in _META_RE.finditer(html):
        attrs = parse_attributes(match.group(1))
        key = (attrs.get('property') or attrs.get('name') or attrs.get('itemprop') or '').strip().lower()
        if not key or key in meta:
            continue
        content = attrs.get('content')
        if not content:
            continue
        meta[key] = decode_entities(content).strip()
    return meta


def clean_author_value(raw: Optional[str]) -> Optional[str]:
    """
    Strip a leading label and keep the first segment of a byline.

    Examples:
        >>> clean_author_value('作者：山田太郎 | 出版社')
        '山田太郎'
    """
    if not raw:
        return None
    normalized = normalize_whitespace(raw)
    if not normalized:
        return None
    stripped = _AUTHOR_LABEL_RE.sub('', normalized)
    first_segment = _AUTHOR_SEGMENT_RE.split(stripped, maxsplit=1)[0]
    return normalize_whitespace(first_segment) or None


def _json_ld_string(value: Any) -> Optional[str]:
    """A string, the first string of a list, or an object's name."""
    if not value:
        return None
    if isinstance(value, str):
        return normalize_whitespace(value) or None
    if isinstance(value, list):
        for entry in value:
            candidate = _json_ld_string(entry)
            if candidate:
                return candidate
        return None
    if isinstance(value, dict):
        return _json_ld_string(value.get('name'))
    return None


def pick_image(html: str, page_url: str, meta: Dict[str, str]) -> Optional[str]:
    for key in PREVIEW_IMAGE_META_KEYS:
        resolved = resolve_url(page_url, meta.get(key))
        if is_http_url(resolved):
            return resolved
    for match in _IMG_RE.finditer(html):
        source = parse_attributes(match.group(1)).get('src')
        if not source:
            continue
        resolved = resolve_url(page_url, decode_entities(source))
        if is_http_url(resolved):
            return resolved
        break
    return None


def pick_title(html: str, meta: Dict[str, str], nodes: List[dict]) -> Optional[str]:
    for key in PREVIEW_TITLE_META_KEYS:
        if meta.get(key):
            return meta[key]
    title = parse_html_title(html)
    if title:
        return title
    for node in nodes:
        candidate = _json_ld_string(node.get('headline')) or _json_ld_string(node.get('name'))
        if candidate:
            return candidate
    return None


def pick_author(html: str, meta: Dict[str, str], nodes: List[dict]) -> Optional[str]:
    for key, value in meta.items():
        if any(keyword in key for keyword in PREVIEW_AUTHOR_KEYWORDS):
            candidate = clean_author_value(value)
            if candidate:
                return candidate

    for key in PREVIEW_DESCRIPTION_META_KEYS:
        value = meta.get(key)
        if not value:
            continue
        match = _AUTHOR_IN_TEXT_RE.search(normalize_whitespace(value))
        if match:
            candidate = clean_author_value(match.group(0))
            if candidate:
                return candidate

    match = _AUTHOR_IN_MARKUP_RE.search(html)
    if match:
        candidate = clean_author_value(match.group(0))
        if candidate:
            return candidate

    for node in nodes:
        author = _json_ld_string(node.get('author') or node.get('creator'))
        candidate = clean_author_value(author)
        if candidate:
            return candidate
    return None


def pick_site_name(meta: Dict[str, str], nodes: List[dict]) -> Optional[str]:
    for key in PREVIEW_SITE_NAME_META_KEYS:
        value = normalize_whitespace(meta.get(key) or '')
        if value:
            return value
    for key, value in meta.items():
        if 'site_name' in key or 'sitename' in key:
            normalized = normalize_whitespace(value)
            if normalized:
                return normalized
    for node in nodes:
        candidate = _json_ld_string(node.get('publisher'))
        if candidate:
            return candidate
    return None


def build_link_preview(html: str, page_url: str) -> LinkPreview:
    """Preview fields for an HTML page."""
    meta = collect_meta_map(html)
    nodes = collect_schema_nodes(parse_json_ld_blocks(html), [])
    return LinkPreview(
        image=pick_image(html, page_url, meta),
        title=pick_title(html, meta, nodes),
        author=pick_author(html, meta, nodes),
        site_name=pick_site_name(meta, nodes),
    )


def fetch_link_preview(
    url: str,
    config: Optional[ExtractorConfig] = None,
) -> Tuple[Optional[LinkPreview], Optional[FetchFailure]]:
    """
    Fetch url and build its preview.

    Returns:
        (preview, None), or (None, failure) when the fetch failed. A target
        that is not HTML yields an image-only preview with no image.
    """
    config = config or ExtractorConfig()
    document, failure = fetch_document(
        url,
        accept=PREVIEW_ACCEPT,
        timeout=config.preview_timeout,
        config=config,
        max_bytes=config.preview_max_bytes,
    )
    if failure:
        return None, failure

    if 'text/html' not in (document.content_type or '').lower():
        logger.debug('Not an HTML page: %s (%s)', url, document.content_type)
        return LinkPreview(image_only=True), None
    html = document.text
    if not html:
        return LinkPreview(image_only=True), None
    return build_link_preview(html, document.url or url), None
