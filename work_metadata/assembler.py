"""
Metadata assembly.

collect_metadata() runs the whole pipeline for one URL:

    fetch page -> scan tags -> summarize JSON-LD -> load feed -> scan text
    -> resolve titles, creators, image, language, dates, episode

Only the page fetch can end the pipeline early. Every later stage is
isolated: if one raises, the error is logged with the stage name and the
stage contributes nothing.

Each scalar field is resolved from an ordered list of candidate sources; the
first source that yields a value wins. The lists below are the priority
policy.
"""

import logging
import re
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar
from urllib.parse import urlparse

from .config import HTML_ACCEPT, ExtractorConfig
from .creators import CreatorAccumulator
from .dates import normalize_date
from .feeds import discover_feed_links, load_feed
from .fetcher import FetchFailure, fetch_document
from .images import order_inline_images, select_best_image
from .language import detect_language, normalize_language_code
from .lexicons import (
    APPLICATION_NAME_META_KEYS,
    BOOK_AUTHOR_META_KEYS,
    BOOK_PAGE_META_KEYS,
    BOOK_PUBLISHER_META_KEYS,
    BOOK_RELEASE_META_KEYS,
    DESCRIPTION_META_KEYS,
    GENERIC_SITE_NAME_META_KEYS,
    KEYWORD_META_CJK_FRAGMENTS,
    KEYWORD_META_FRAGMENTS,
    KEYWORD_META_KEYS,
    NEXT_UPDATE_META_KEYS,
    PAGES_FACT_LABEL,
    PUBLISHED_META_KEYS,
    SITE_NAME_META_KEYS,
    UPDATE_LABEL_PATTERN,
    UPDATED_META_KEYS,
)
from .models import Episode, ExtractedMetadata, Fact, FeedSummary, MetaTag, SchemaSummary
from .schema_summary import summarize_schema
from .tag_scanner import ScannedPage, first_meta_content, iter_meta_contents, scan_page
from .text import clean_text_value, is_http_url, resolve_url, split_keywords, unique
from .text_facts import FactAccumulator, scan_text_facts
from .titles import TitleCandidate, collect_site_tokens, extract_episode_from_title, resolve_titles

logger = logging.getLogger(__name__)

T = TypeVar('T')

ALTERNATE_TITLE_LANGUAGES = ['ja', 'en', 'ko']

_UPDATE_LABEL_RE = re.compile(UPDATE_LABEL_PATTERN, re.IGNORECASE)


def first_match(extractors: Iterable[Callable[[], Optional[T]]]) -> Optional[T]:
    """Call extractors in order and return the first truthy result."""
    for extractor in extractors:
        value = extractor()
        if value:
            return value
    return None


def _first(values: Iterable[Optional[T]]) -> Optional[T]:
    return next((value for value in values if value), None)


def run_stage(stage: str, default_factory: Callable[[], T], func: Callable[..., T], *args) -> T:
    """Run one pipeline stage; on any error log it and fall back to default_factory()."""
    try:
        return func(*args)
    except Exception:
        logger.exception('Metadata stage %r failed', stage)
        return default_factory()


def _hostname(url: str) -> Optional[str]:
    host = urlparse(url).hostname or ''
    return re.sub(r'^www\.', '', host) or None


def _twitter_site(meta_tags: Sequence[MetaTag]) -> Optional[str]:
    for content in iter_meta_contents(meta_tags, ['twitter:site']):
        value = clean_text_value(content.strip().lstrip('@'))
        if value:
            return value
    return None


def resolve_source_name(
    url: str,
    meta_tags: Sequence[MetaTag],
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
) -> Optional[str]:
    """Site name: JSON-LD publisher/isPartOf, og:site_name, application-name, site_name, twitter:site, feed title, host."""
    return first_match([
        lambda: _first(clean_text_value(name) for name in schema.site_names),
        lambda: first_meta_content(meta_tags, SITE_NAME_META_KEYS),
        lambda: first_meta_content(meta_tags, APPLICATION_NAME_META_KEYS),
        lambda: first_meta_content(meta_tags, GENERIC_SITE_NAME_META_KEYS),
        lambda: _twitter_site(meta_tags),
        lambda: clean_text_value(feed.site_name) if feed else None,
        lambda: _hostname(url),
    ])


def collect_meta_keywords(
    meta_tags: Sequence[MetaTag],
    exact_keys: Sequence[str] = KEYWORD_META_KEYS,
    fragments: Sequence[str] = KEYWORD_META_FRAGMENTS,
    cjk_fragments: Sequence[str] = KEYWORD_META_CJK_FRAGMENTS,
) -> List[str]:
    keywords = []
    for tag in meta_tags:
        raw_key = (tag.name or tag.property or '').strip()
        if not raw_key:
            continue
        lowered = raw_key.lower()
        wanted = (
            lowered in exact_keys
            or any(fragment in lowered for fragment in fragments)
            or any(fragment in raw_key for fragment in cjk_fragments)
        )
        if not wanted:
            continue
        content = clean_text_value(tag.content)
        if content:
            keywords.extend(split_keywords(content))
    return keywords


def _title_candidates(
    page: ScannedPage,
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    text_facts: Sequence[Fact],
) -> List[TitleCandidate]:
    candidates = [
        TitleCandidate(title, 1 + index * 0.01)
        for index, title in enumerate(schema.titles)
        if title.strip()
    ]
    for value, priority in [
        (first_meta_content(page.meta_tags, ['og:title']), 2),
        (first_meta_content(page.meta_tags, ['twitter:title']), 2.1),
        (page.title, 3),
        (page.heading, 3.2),
    ]:
        if value:
            candidates.append(TitleCandidate(value, priority))
    candidates.extend(
        TitleCandidate(fact.value, 3.5) for fact in text_facts if fact.type in ('title', 'name')
    )
    if feed and feed.title:
        candidates.append(TitleCandidate(feed.title, 4))
    return candidates


def resolve_language(
    page: ScannedPage,
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    primary_title: Optional[str],
    alternate_titles: Sequence[str],
) -> Optional[str]:
    """
    Declared language first (JSON-LD, og:locale, <html lang>, feed). Without
    one, a Japanese, English or Korean alternate title beats the primary
    title's script, which beats any other detected alternate.
    """
    declared = first_match([
        lambda: normalize_language_code(schema.language),
        lambda: normalize_language_code(_first(
            content.strip() for content in iter_meta_contents(page.meta_tags, ['og:locale'])
        )),
        lambda: normalize_language_code(page.html_lang),
        lambda: normalize_language_code(feed.language) if feed else None,
    ])
    if declared:
        return declared

    detected = [detect_language(title) for title in alternate_titles]
    return first_match([
        lambda: _first(language for language in detected if language in ALTERNATE_TITLE_LANGUAGES),
        lambda: detect_language(primary_title),
        lambda: _first(detected),
    ])


def _accumulate_creators(
    accumulator: CreatorAccumulator,
    meta_tags: Sequence[MetaTag],
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    text_facts: Sequence[Fact],
) -> None:
    for creator in schema.creators:
        accumulator.add(creator.name, 'schema', role=creator.role, is_organization=creator.is_organization)

    for content in iter_meta_contents(meta_tags, ['author', 'article:author']):
        if not is_http_url(content):
            accumulator.add(clean_text_value(content), 'meta')
    for content in iter_meta_contents(meta_tags, BOOK_AUTHOR_META_KEYS):
        accumulator.add(clean_text_value(content), 'meta')
    for content in iter_meta_contents(meta_tags, BOOK_PUBLISHER_META_KEYS):
        accumulator.add(clean_text_value(content), 'meta', role='publisher', is_organization=True)
    for content in iter_meta_contents(meta_tags, ['twitter:creator']):
        accumulator.add(clean_text_value(content.strip().lstrip('@')), 'twitter')

    if feed and feed.author:
        accumulator.add(feed.author, 'feed')

    for fact in text_facts:
        if fact.type == 'author':
            accumulator.add(fact.value, 'page')
    for fact in text_facts:
        if fact.type == 'publisher':
            accumulator.add(fact.value, 'page', role='publisher', is_organization=True)


def _image_candidates(
    url: str,
    page: ScannedPage,
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    feed_url: Optional[str],
    site_tokens: Sequence[str],
) -> Iterator[Optional[str]]:
    yield schema.image
    yield first_meta_content(page.meta_tags, ['og:image'])
    yield first_meta_content(page.meta_tags, ['twitter:image'])
    if feed and feed.image:
        # feed images are relative to the feed document
        yield resolve_url(feed_url or url, feed.image) or feed.image
    yield from order_inline_images(page.inline_images, url, site_tokens)


def resolve_episode(
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    primary_title: Optional[str],
) -> Optional[Episode]:
    return first_match([
        lambda: Episode.from_raw(schema.episode) if schema.episode else None,
        lambda: Episode.from_raw(feed.episode) if feed and feed.episode else None,
        lambda: extract_episode_from_title(primary_title),
    ])


def resolve_description(
    meta_tags: Sequence[MetaTag],
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    limit: int = 500,
) -> Optional[str]:
    description = first_match([
        lambda: clean_text_value(schema.description),
        lambda: _first(
            clean_text_value(content) for content in iter_meta_contents(meta_tags, DESCRIPTION_META_KEYS)
        ),
        lambda: clean_text_value(feed.summary) if feed else None,
    ])
    if description and len(description) > limit:
        description = description[:limit - 3] + '...'
    return description


def _first_date(candidates: Iterable[Optional[str]]) -> Optional[str]:
    """First candidate that normalizes to a date."""
    return _first(normalize_date(candidate) for candidate in candidates)


def resolve_dates(
    meta_tags: Sequence[MetaTag],
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    text_facts: Sequence[Fact],
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """(next_update_at, published_at, updated_at)."""
    date_facts = [fact for fact in text_facts if fact.type == 'date']
    update_facts = [fact.value for fact in date_facts if _UPDATE_LABEL_RE.search(fact.label)]
    release_facts = [fact.value for fact in date_facts if not _UPDATE_LABEL_RE.search(fact.label)]

    def candidates(schema_value, feed_value, *sources):
        yield schema_value
        yield feed_value
        for source in sources:
            yield from source

    next_update_at = _first_date(candidates(
        schema.next_update,
        feed.next_update if feed else None,
        iter_meta_contents(meta_tags, NEXT_UPDATE_META_KEYS),
    ))
    published_at = _first_date(candidates(
        schema.published,
        feed.published if feed else None,
        iter_meta_contents(meta_tags, PUBLISHED_META_KEYS),
        iter_meta_contents(meta_tags, BOOK_RELEASE_META_KEYS),
        release_facts,
    ))
    updated_at = _first_date(candidates(
        schema.updated,
        feed.updated if feed else None,
        iter_meta_contents(meta_tags, UPDATED_META_KEYS),
        update_facts,
    ))
    return next_update_at, published_at, updated_at


def build_metadata(
    url: str,
    page: ScannedPage,
    schema: SchemaSummary,
    feed: Optional[FeedSummary],
    feed_url: Optional[str],
    text_facts: Sequence[Fact],
    config: Optional[ExtractorConfig] = None,
) -> ExtractedMetadata:
    """Reconcile the scanned sources of one page into an ExtractedMetadata record."""
    config = config or ExtractorConfig()
    meta_tags = page.meta_tags

    source_name = resolve_source_name(url, meta_tags, schema, feed)
    site_tokens = collect_site_tokens(source_name, url)

    alternate_sources = list(schema.alternate_titles) + list(schema.titles)
    if feed:
        alternate_sources.extend(feed.alternate_titles)
    alternate_sources.extend(fact.value for fact in text_facts if fact.type in ('title', 'name'))
    titles = resolve_titles(
        _title_candidates(page, schema, feed, text_facts),
        alternate_sources,
        site_tokens,
    )

    creators = CreatorAccumulator(config.source_weights)
    _accumulate_creators(creators, meta_tags, schema, feed, text_facts)

    facts = FactAccumulator()
    facts.extend(schema.facts)
    facts.extend(text_facts)
    for content in iter_meta_contents(meta_tags, BOOK_PAGE_META_KEYS):
        pages = clean_text_value(content)
        if pages:
            facts.add(Fact(type='pages', label=PAGES_FACT_LABEL, value=pages))
    merged_facts = facts.facts()

    keywords = unique(
        [keyword for keyword in schema.keywords if keyword]
        + collect_meta_keywords(meta_tags)
        + [fact.value for fact in merged_facts if fact.type == 'tag']
    )

    next_update_at, published_at, updated_at = resolve_dates(meta_tags, schema, feed, text_facts)
    ranked_creators = creators.creators()

    return ExtractedMetadata(
        primary_title=titles.primary_title,
        original_title=titles.original_title,
        alternate_titles=titles.alternate_titles,
        image=select_best_image(
            list(_image_candidates(url, page, schema, feed, feed_url, site_tokens)),
            url,
            site_tokens,
        ),
        language=resolve_language(page, schema, feed, titles.primary_title, titles.alternate_titles),
        creators=ranked_creators,
        author=creators.top_name(),
        episode=resolve_episode(schema, feed, titles.primary_title),
        feed_url=feed_url,
        source_name=source_name,
        description=resolve_description(meta_tags, schema, feed, config.description_limit),
        next_update_at=next_update_at,
        published_at=published_at,
        updated_at=updated_at,
        keywords=keywords,
        facts=merged_facts,
    )


def extract_from_html(
    url: str,
    html: str,
    config: Optional[ExtractorConfig] = None,
    fetch_feeds: bool = True,
) -> ExtractedMetadata:
    """Run every stage after the page fetch on an already downloaded page."""
    config = config or ExtractorConfig()
    page = run_stage('scan', ScannedPage, scan_page, html, url, config)
    schema = run_stage('schema', SchemaSummary, summarize_schema, page.json_ld_blocks, url)

    feed, feed_url = None, None
    if fetch_feeds:
        feed_links = discover_feed_links(page.link_tags, url)
        if feed_links:
            feed, feed_url = run_stage('feed', lambda: (None, None), load_feed, feed_links, config)

    text_facts = run_stage('text_facts', list, scan_text_facts, html, config)
    return build_metadata(url, page, schema, feed, feed_url, text_facts, config)


def collect_metadata(
    url: str,
    config: Optional[ExtractorConfig] = None,
) -> Tuple[Optional[ExtractedMetadata], Optional[FetchFailure]]:
    """
    Fetch a page and extract its metadata.

    Returns:
        (metadata, None), or (None, failure) when the page itself could not be
        fetched.
    """
    config = config or ExtractorConfig()
    document, failure = fetch_document(url, accept=HTML_ACCEPT, timeout=config.page_timeout, config=config)
    if failure:
        logger.info('Page fetch failed for %s: %s', url, failure.message)
        return None, failure
    return extract_from_html(document.url or url, document.text, config), None


def extract_metadata(url: str, config: Optional[ExtractorConfig] = None) -> Optional[ExtractedMetadata]:
    """Metadata for url, or None when the page could not be fetched."""
    metadata, _ = collect_metadata(url, config)
    return metadata
