"""
Syndication feeds linked from a page.

Pages advertise RSS, Atom or JSON feeds with <link rel="alternate">. The
first linked feed that downloads and parses is summarized into a
FeedSummary: the newest item's title, author, image, episode, summary and
dates, plus the feed's own title and language.
"""

import json
import logging
import re
from typing import Any, List, Optional, Sequence, Tuple, Union

import feedparser

from .config import FEED_ACCEPT, JSON_FEED_ACCEPT, ExtractorConfig
from .dates import normalize_date
from .fetcher import fetch_document
from .models import FeedLink, FeedSummary, LinkTag
from .text import clean_text_value, decode_entities, resolve_url, strip_cdata

logger = logging.getLogger(__name__)

FEED_TYPE_MARKERS = ['xml', 'json', 'atom', 'rss']

_ITEM_BLOCK_RE = re.compile(r'<item\b.*?</item\s*>', re.IGNORECASE | re.DOTALL)
_ENTRY_BLOCK_RE = re.compile(r'<entry\b.*?</entry\s*>', re.IGNORECASE | re.DOTALL)
_FEED_LANG_RE = re.compile(r'''<feed\b[^>]*\bxml:lang\s*=\s*(?:"([^"]*)"|'([^']*)')''', re.IGNORECASE)


def _element_text(block: str, *names: str) -> Optional[str]:
    """Text of the first element named in names, CDATA unwrapped and entities decoded."""
    for name in names:
        match = re.search(
            rf'<{re.escape(name)}\b[^>]*>(.*?)</{re.escape(name)}\s*>',
            block,
            re.IGNORECASE | re.DOTALL,
        )
        if match:
            value = decode_entities(strip_cdata(match.group(1))).strip()
            if value:
                return value
    return None


def discover_feed_links(link_tags: Sequence[LinkTag], base_url: str) -> List[FeedLink]:
    """Alternate links whose type names a feed format, resolved against base_url."""
    feeds = []
    for link in link_tags:
        if 'alternate' not in (link.rel or '').lower():
            continue
        link_type = (link.type or '').lower()
        if not any(marker in link_type for marker in FEED_TYPE_MARKERS):
            continue
        resolved = resolve_url(base_url, link.href)
        if not resolved:
            continue
        feeds.append(FeedLink(url=resolved, type=link_type or None))
    return feeds


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    return None


def _first_entry_image(entry) -> Optional[str]:
    for enclosure in entry.get('enclosures') or []:
        href = enclosure.get('href') or enclosure.get('url')
        if href:
            return decode_entities(href).strip() or None
    for media in entry.get('media_content') or []:
        if media.get('url'):
            return decode_entities(media['url']).strip() or None
    return None


def _first_entry_summary(entry) -> Optional[str]:
    summary = clean_text_value(entry.get('summary'))
    if summary:
        return summary
    for content in entry.get('content') or []:
        value = clean_text_value(content.get('value'))
        if value:
            return value
    return None


def parse_xml_feed(content: Union[bytes, str]) -> Optional[FeedSummary]:
    """
    Summarize an RSS or Atom document.

    Returns:
        The summary, or None when the document has neither feed-level data nor
        items.
    """
    if isinstance(content, str):
        raw = content
        content = content.encode('utf-8')
    else:
        raw = content.decode('utf-8', errors='replace')

    parsed = feedparser.parse(content)
    feed = parsed.get('feed') or {}
    entries = parsed.get('entries') or []
    if not feed and not entries:
        return None

    language = _text(feed.get('language'))
    if not language:
        match = _FEED_LANG_RE.search(raw)
        if match:
            language = (match.group(1) or match.group(2) or '').strip() or None

    summary = FeedSummary(language=language, site_name=clean_text_value(feed.get('title')))
    if not entries:
        return summary

    entry = entries[0]
    block_match = _ITEM_BLOCK_RE.search(raw) or _ENTRY_BLOCK_RE.search(raw)
    block = block_match.group(0) if block_match else ''

    summary.title = clean_text_value(entry.get('title'))
    summary.author = clean_text_value(entry.get('author'))
    summary.image = _first_entry_image(entry)
    summary.episode = _element_text(block, 'episode', 'itunes:episode', 'episodeNumber') or _text(entry.get('itunes_episode'))
    summary.summary = _first_entry_summary(entry)
    summary.published = normalize_date(entry.get('published'))
    summary.updated = normalize_date(_element_text(block, 'updated', 'lastBuildDate'))
    summary.next_update = normalize_date(_element_text(block, 'nextUpdate', 'next_update'))
    return summary


def parse_json_feed(content: Union[bytes, str]) -> Optional[FeedSummary]:
    """
    Summarize a JSON Feed document.

    Returns:
        The summary, or None when the content is not a JSON object.
    """
    try:
        data = json.loads(content)
    except ValueError as e:
        logger.debug('Invalid JSON feed: %s', e)
        return None
    if not isinstance(data, dict):
        return None

    items = data.get('items') if isinstance(data.get('items'), list) else []
    item = items[0] if items and isinstance(items[0], dict) else {}

    feed_title = _text(data.get('title'))
    item_title = _text(item.get('title'))

    author = _text(item.get('author'))
    if not author and isinstance(item.get('authors'), list):
        author = next(
            (_text(entry.get('name')) for entry in item['authors'] if isinstance(entry, dict) and _text(entry.get('name'))),
            None,
        )

    language = data.get('language')
    if isinstance(language, (int, float)) and not isinstance(language, bool):
        language = str(language)

    episode = _text(item.get('episode'))
    number = item.get('number')
    if not episode and isinstance(number, (int, float)) and not isinstance(number, bool):
        episode = str(number)

    summary = next(
        (item[key] for key in ('summary', 'content_text', 'content_html') if isinstance(item.get(key), str)),
        None,
    )

    return FeedSummary(
        title=item_title or feed_title,
        alternate_titles=[feed_title] if feed_title and item_title and feed_title != item_title else [],
        author=author,
        language=_text(language),
        image=_text(item.get('image')) or _text(data.get('image')),
        episode=episode,
        summary=clean_text_value(summary),
        site_name=clean_text_value(feed_title),
        published=normalize_date(_text(item.get('date_published')) or _text(data.get('date_published'))),
        updated=normalize_date(_text(item.get('date_modified')) or _text(data.get('date_modified'))),
        next_update=normalize_date(_text(data.get('next_update')) or _text(data.get('nextUpdate'))),
    )


def load_feed(
    feeds: Sequence[FeedLink],
    config: Optional[ExtractorConfig] = None,
) -> Tuple[Optional[FeedSummary], Optional[str]]:
    """
    Try each feed in order; the first that downloads and parses wins.

    Returns:
        (summary, feed_url), or (None, None) when no candidate produced data.
    """
    config = config or ExtractorConfig()
    for feed in feeds:
        is_json = bool(feed.type and 'json' in feed.type)
        document, failure = fetch_document(
            feed.url,
            accept=JSON_FEED_ACCEPT if is_json else FEED_ACCEPT,
            timeout=config.feed_timeout,
            config=config,
        )
        if failure:
            logger.debug('Feed %s unavailable: %s', feed.url, failure.message)
            continue

        content_type = (document.content_type or feed.type or '').lower()
        try:
            if 'json' in content_type:
                summary = parse_json_feed(document.text)
            else:
                summary = parse_xml_feed(document.content)
        except Exception as e:
            logger.warning('Failed to parse feed %s: %s', feed.url, e)
            continue

        if summary:
            return summary, feed.url
    return None, None
