"""
Title processing for extracted works.

Title candidates arrive from structured data, Open Graph, Twitter Cards,
<title>, the first heading, labeled page text and feeds. Each candidate is
stripped of site-name decoration, filtered for credit lines and other
non-titles, and the survivors are ranked by priority then by a language
preference (Chinese, Japanese, English, Korean, undetected).
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from .language import detect_language
from .lexicons import TITLE_ROLE_KEYWORDS, TITLE_ROLE_PREFIXES
from .models import Episode
from .text import clean_text_value, normalize_whitespace

TITLE_LANGUAGE_PREFERENCE = ['zh', 'ja', 'en', 'ko', None]
ORIGINAL_TITLE_LANGUAGES = ['ja', 'en', 'ko']

_TITLE_ALIAS_RE = re.compile(r'[(（［\[]([^)）］\]]+)[)）］\]]')
_TITLE_SLASH_RE = re.compile(r'[/|｜]')
_TITLE_SEGMENT_RE = re.compile(r'[：:/／]')
_TOKEN_SPLIT_RE = re.compile(r'[\s|｜:/_-]+')
_DECORATION_SEPARATOR = r'\s*[:：\-–—|｜]+\s*'
_NON_COMPACT_RE = re.compile(r'[^a-z0-9\u3040-\u309f\u30a0-\u30ff\u3400-\u4dbf\u4e00-\u9fff]')
_URL_RE = re.compile(r'^https?://', re.IGNORECASE)
_ISBN_RE = re.compile(r'^isbn\s*\d+', re.IGNORECASE)

_EPISODE_PATTERNS = [
    re.compile(r'第\s*(\d+)\s*(?:話|集|回|章|卷|期)'),
    re.compile(r'\b(?:EP|Episode)\.?\s*(\d{1,4})|(\d{1,4})\s*(?:話|集|回|章|卷|期)', re.IGNORECASE),
    re.compile(r'[#＃](\d{1,4})'),
]


@dataclass
class TitleCandidate:
    value: str
    priority: float


@dataclass
class TitleResolution:
    primary_title: Optional[str] = None
    original_title: Optional[str] = None
    alternate_titles: List[str] = field(default_factory=list)


def collect_site_tokens(source_name: Optional[str], url: str) -> List[str]:
    """
    Lowercased tokens that identify the site rather than the work.

    Built from the resolved site name and the page host: the whole host, the
    host without www., the host minus its TLD, the second-level label, plus
    every word of three or more characters in each of those.
    """
    tokens = []

    def append(value):
        if not value:
            return
        normalized = value.strip().lower()
        if not normalized:
            return
        tokens.append(normalized)
        for part in _TOKEN_SPLIT_RE.split(normalized.replace('.', ' ')):
            part = part.strip()
            if len(part) >= 3:
                tokens.append(part)

    append(source_name)
    host = (urlparse(url).hostname or '') if url else ''
    if host:
        append(host)
        append(re.sub(r'^www\.', '', host))
        parts = host.split('.')
        if len(parts) >= 2:
            append('.'.join(parts[:-1]))
            append(parts[-2])
        tokens.extend(part for part in parts if len(part) >= 3)

    return list(dict.fromkeys(tokens))


def sanitize_title_candidate(value: Optional[str], tokens: Sequence[str]) -> Optional[str]:
    """
    Strip site-name decoration from a title.

    For each token, removes a leading "token - " / "token | " prefix, the
    matching suffix, a trailing "(token)", or the whole value when it is the
    token itself.

    Examples:
        >>> sanitize_title_candidate('第3話：英雄誕生 - MyComicSite', ['mycomicsite'])
        '第3話：英雄誕生'
    """
    cleaned = clean_text_value(value)
    if not cleaned:
        return None
    result = cleaned
    for token in tokens:
        if not token:
            continue
        escaped = re.escape(token)
        result = re.sub(rf'^{escaped}{_DECORATION_SEPARATOR}', '', result, flags=re.IGNORECASE)
        result = re.sub(rf'{_DECORATION_SEPARATOR}{escaped}$', '', result, flags=re.IGNORECASE)
        result = re.sub(rf'\({escaped}\)$', '', result, flags=re.IGNORECASE)
        result = re.sub(rf'^{escaped}$', '', result, flags=re.IGNORECASE)
    result = normalize_whitespace(result)
    return result or None


def _contains_keyword(value: str, keywords: Iterable[str]) -> bool:
    lowered = value.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def is_likely_non_title(
    value: Optional[str],
    role_keywords: Sequence[str] = TITLE_ROLE_KEYWORDS,
    role_prefixes: Sequence[str] = TITLE_ROLE_PREFIXES,
) -> bool:
    """
    True for strings that are not titles: empty values, bare URLs, ISBNs and
    credit lines such as "作者：山田" or "by Jane Doe".
    """
    if not value:
        return True
    trimmed = value.strip()
    if not trimmed:
        return True
    if _URL_RE.match(trimmed) or _ISBN_RE.match(trimmed):
        return True

    prefix_pattern = '|'.join(re.escape(prefix) for prefix in role_prefixes)
    if prefix_pattern and re.match(rf'^(?:{prefix_pattern})\b', trimmed, re.IGNORECASE):
        return True

    segments = [segment.strip() for segment in _TITLE_SEGMENT_RE.split(trimmed)]
    if len(segments) >= 2:
        for segment in segments[:2]:
            if _contains_keyword(segment, role_keywords):
                return True

    lowered = trimmed.lower()
    if _contains_keyword(lowered, role_keywords):
        ordered = sorted((keyword.lower() for keyword in role_keywords), key=len, reverse=True)
        remainder = re.sub('|'.join(re.escape(keyword) for keyword in ordered), '', lowered)
        if not remainder.strip():
            return True
    return False


def matches_site_token(value: Optional[str], tokens: Sequence[str]) -> bool:
    """True when value is the site name (or host) rather than a work title."""
    if not value:
        return False
    lowered = value.strip().lower()
    if not lowered:
        return False
    compact = _NON_COMPACT_RE.sub('', lowered)
    for token in tokens:
        normalized = token.lower()
        if not normalized:
            continue
        if normalized == lowered:
            return True
        if normalized == compact and len(normalized) >= 3:
            return True
        if len(normalized) >= 4 and normalized in lowered:
            return True
    return False


def extract_title_aliases(title: str) -> List[str]:
    """
    Alternate names embedded in a title.

    Examples:
        >>> extract_title_aliases('進撃の巨人 (Attack on Titan)')
        ['Attack on Titan']
        >>> extract_title_aliases('鬼滅の刃 / Demon Slayer')
        ['鬼滅の刃', 'Demon Slayer']
    """
    aliases = []
    for match in _TITLE_ALIAS_RE.finditer(title):
        value = match.group(1).strip()
        if value:
            aliases.append(value)
    for part in _TITLE_SLASH_RE.split(title):
        value = part.strip()
        if value and value != title:
            aliases.append(value)
    return list(dict.fromkeys(aliases))


def pick_title_by_language(
    candidates: Sequence[TitleCandidate],
    order: Sequence[Optional[str]] = TITLE_LANGUAGE_PREFERENCE,
) -> Optional[str]:
    """First candidate whose detected language comes earliest in order. None in order means undetected."""
    detected = [(candidate, detect_language(candidate.value)) for candidate in candidates]
    for language in order:
        for candidate, candidate_language in detected:
            if candidate_language == language:
                return candidate.value
    return None


def select_primary_title(
    processed: Sequence[TitleCandidate],
    fallback: Sequence[TitleCandidate],
    tokens: Sequence[str],
) -> Optional[str]:
    match = pick_title_by_language(processed)
    if match:
        return match
    if processed:
        return processed[0].value

    non_token = [entry for entry in fallback if not matches_site_token(entry.value, tokens)]
    match = pick_title_by_language(non_token)
    if match:
        return match
    if non_token:
        return non_token[0].value
    return fallback[0].value if fallback else None


def derive_original_title(primary_title: Optional[str], alternate_titles: Sequence[str]) -> Optional[str]:
    """
    The title in the work's original language.

    A primary title in a detected non-Chinese language is its own original.
    Otherwise the first Japanese, then English, then Korean alternate wins,
    then any alternate in a detected non-Chinese language, then the primary.
    """
    if not primary_title:
        return None
    primary_language = detect_language(primary_title)
    if primary_language and primary_language != 'zh':
        return primary_title

    detected = [(title, detect_language(title)) for title in alternate_titles]
    for language in ORIGINAL_TITLE_LANGUAGES:
        for title, title_language in detected:
            if title_language == language:
                return title
    for title, title_language in detected:
        if title_language and title_language != 'zh':
            return title
    return primary_title


def resolve_titles(
    candidates: Sequence[TitleCandidate],
    alternate_sources: Sequence[str],
    site_tokens: Sequence[str],
) -> TitleResolution:
    """
    Pick the primary, original and alternate titles.

    Args:
        candidates: Title candidates with their source priority (lower wins).
        alternate_sources: Other names for the work, in preference order.
        site_tokens: Output of collect_site_tokens().
    """
    ordered = sorted(candidates, key=lambda candidate: candidate.priority)
    processed = []
    fallback = []
    seen = set()
    for candidate in ordered:
        sanitized = sanitize_title_candidate(candidate.value, site_tokens)
        if sanitized and not is_likely_non_title(sanitized):
            if sanitized.lower() not in seen:
                seen.add(sanitized.lower())
                processed.append(TitleCandidate(sanitized, candidate.priority))
            continue
        cleaned = clean_text_value(candidate.value)
        if cleaned and not is_likely_non_title(cleaned) and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            fallback.append(TitleCandidate(cleaned, candidate.priority))

    primary_title = select_primary_title(processed, fallback, site_tokens)
    if primary_title and matches_site_token(primary_title, site_tokens):
        replacement = next(
            (entry.value for entry in processed + fallback if not matches_site_token(entry.value, site_tokens)),
            None,
        )
        if replacement:
            primary_title = replacement

    alternate_inputs = list(alternate_sources)
    if primary_title:
        alternate_inputs.extend(extract_title_aliases(primary_title))

    alternate_titles = []
    alternate_keys = {primary_title.lower()} if primary_title else set()
    for value in alternate_inputs:
        sanitized = sanitize_title_candidate(value, site_tokens)
        if not sanitized or is_likely_non_title(sanitized):
            continue
        if sanitized.lower() in alternate_keys:
            continue
        alternate_keys.add(sanitized.lower())
        alternate_titles.append(sanitized)

    return TitleResolution(
        primary_title=primary_title,
        original_title=derive_original_title(primary_title, alternate_titles),
        alternate_titles=alternate_titles,
    )


def extract_episode_from_title(title: Optional[str]) -> Optional[Episode]:
    """
    Episode marker in a title: 第N話/集/回/章/卷/期, then EP N / Episode N / N話,
    then #N.

    Examples:
        >>> extract_episode_from_title('第12話 新たな旅')
        Episode(raw='第12話', number=12)
    """
    if not title:
        return None
    for pattern in _EPISODE_PATTERNS:
        match = pattern.search(title)
        if match:
            digits = next(group for group in match.groups() if group is not None)
            return Episode(raw=match.group(0).strip(), number=int(digits))
    return None
