"""
Data model for the metadata extractor.

Internal records use snake_case attributes. ExtractedMetadata.to_dict()
produces the camelCase wire format the catalogue screens consume, and
ExtractedMetadata.from_dict() reads it back defensively.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .lexicons import FACT_TYPES

_LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)')


@dataclass
class MetaTag:
    name: Optional[str] = None
    property: Optional[str] = None
    content: Optional[str] = None


@dataclass
class LinkTag:
    rel: Optional[str] = None
    href: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None


@dataclass
class FeedLink:
    url: str
    type: Optional[str] = None


@dataclass
class FeedSummary:
    title: Optional[str] = None
    alternate_titles: List[str] = field(default_factory=list)
    author: Optional[str] = None
    language: Optional[str] = None
    image: Optional[str] = None
    episode: Optional[str] = None
    summary: Optional[str] = None
    site_name: Optional[str] = None
    published: Optional[str] = None
    updated: Optional[str] = None
    next_update: Optional[str] = None


@dataclass
class SchemaCreator:
    name: str
    is_organization: bool = False
    role: Optional[str] = None


@dataclass
class Fact:
    type: str
    label: str
    value: str

    @property
    def key(self) -> str:
        return f'{self.type}:{self.label}:{self.value}'.lower()

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'label': self.label, 'value': self.value}


@dataclass
class SchemaSummary:
    titles: List[str] = field(default_factory=list)
    alternate_titles: List[str] = field(default_factory=list)
    language: Optional[str] = None
    image: Optional[str] = None
    creators: List[SchemaCreator] = field(default_factory=list)
    episode: Optional[str] = None
    description: Optional[str] = None
    site_names: List[str] = field(default_factory=list)
    published: Optional[str] = None
    updated: Optional[str] = None
    next_update: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    facts: List[Fact] = field(default_factory=list)


@dataclass
class Creator:
    name: str
    role: Optional[str] = 'author'
    is_organization: bool = False
    confidence: float = 0.0
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'role': self.role,
            'isOrganization': self.is_organization,
            'confidence': self.confidence,
            'sources': list(self.sources),
        }


@dataclass
class Episode:
    raw: str
    number: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: str) -> 'Episode':
        """Keep the raw text; the number is its leading integer, if any."""
        match = _LEADING_INT_RE.match(raw)
        return cls(raw=raw, number=int(match.group(1)) if match else None)

    def to_dict(self) -> Dict[str, Any]:
        return {'raw': self.raw, 'number': self.number}


@dataclass
class ExtractedMetadata:
    primary_title: Optional[str] = None
    original_title: Optional[str] = None
    alternate_titles: List[str] = field(default_factory=list)
    image: Optional[str] = None
    language: Optional[str] = None
    creators: List[Creator] = field(default_factory=list)
    author: Optional[str] = None
    episode: Optional[Episode] = None
    feed_url: Optional[str] = None
    source_name: Optional[str] = None
    description: Optional[str] = None
    next_update_at: Optional[str] = None
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    facts: List[Fact] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'primaryTitle': self.primary_title,
            'originalTitle': self.original_title,
            'alternateTitles': list(self.alternate_titles),
            'image': self.image,
            'language': self.language,
            'creators': [creator.to_dict() for creator in self.creators],
            'author': self.author,
            'episode': self.episode.to_dict() if self.episode else None,
            'feedUrl': self.feed_url,
            'sourceName': self.source_name,
            'description': self.description,
            'nextUpdateAt': self.next_update_at,
            'publishedAt': self.published_at,
            'updatedAt': self.updated_at,
            'keywords': list(self.keywords),
            'facts': [fact.to_dict() for fact in self.facts],
        }

    @classmethod
    def from_dict(cls, payload: Any) -> Optional['ExtractedMetadata']:
        """
        Rebuild a record from a wire payload.

        Anything malformed is dropped rather than rejected: non-string scalars
        become None, creators without a name and facts without a label or
        value are skipped, confidence is clamped to [0, 1].

        Returns:
            The record, or None if payload is not a mapping.
        """
        if not isinstance(payload, dict):
            return None

        creators = []
        for entry in _list(payload.get('creators')):
            creator = _creator_from_dict(entry)
            if creator:
                creators.append(creator)

        facts = []
        for entry in _list(payload.get('facts')):
            fact = _fact_from_dict(entry)
            if fact:
                facts.append(fact)

        return cls(
            primary_title=_string(payload.get('primaryTitle')),
            original_title=_string(payload.get('originalTitle')),
            alternate_titles=[
                entry for entry in _list(payload.get('alternateTitles'))
                if isinstance(entry, str) and entry.strip()
            ],
            image=_string(payload.get('image')),
            language=_string(payload.get('language')),
            creators=creators,
            author=_string(payload.get('author')),
            episode=_episode_from_dict(payload.get('episode')),
            feed_url=_trimmed(payload.get('feedUrl')),
            source_name=_trimmed(payload.get('sourceName')),
            description=_trimmed(payload.get('description')),
            next_update_at=_trimmed(payload.get('nextUpdateAt')),
            published_at=_trimmed(payload.get('publishedAt')),
            updated_at=_trimmed(payload.get('updatedAt')),
            keywords=[
                entry.strip() for entry in _list(payload.get('keywords'))
                if isinstance(entry, str) and entry.strip()
            ],
            facts=facts,
        )


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _trimmed(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _creator_from_dict(entry: Any) -> Optional[Creator]:
    if not isinstance(entry, dict):
        return None
    name = _trimmed(entry.get('name'))
    if not name:
        return None
    confidence = entry.get('confidence')
    confidence = max(0.0, min(1.0, float(confidence))) if _is_number(confidence) else 0.0
    return Creator(
        name=name,
        role=_trimmed(entry.get('role')),
        is_organization=bool(entry.get('isOrganization')),
        confidence=confidence,
        sources=[
            source.strip() for source in _list(entry.get('sources'))
            if isinstance(source, str) and source.strip()
        ],
    )


def _fact_from_dict(entry: Any) -> Optional[Fact]:
    if not isinstance(entry, dict):
        return None
    label = _trimmed(entry.get('label'))
    value = _trimmed(entry.get('value'))
    if not label or not value:
        return None
    fact_type = entry.get('type')
    if fact_type not in FACT_TYPES:
        fact_type = 'other'
    return Fact(type=fact_type, label=label, value=value)


def _episode_from_dict(entry: Any) -> Optional[Episode]:
    if not isinstance(entry, dict):
        return None
    raw = entry.get('raw')
    number = entry.get('number')
    has_raw = isinstance(raw, str) and bool(raw.strip())
    has_number = _is_number(number)
    if not has_raw and not has_number:
        return None
    return Episode(
        raw=raw if isinstance(raw, str) else str(number),
        number=int(number) if has_number else None,
    )


@dataclass
class LinkPreview:
    image: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    site_name: Optional[str] = None
    # Set for non-HTML targets, which only report an (absent) image
    image_only: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if self.image_only:
            return {'image': self.image}
        return {
            'image': self.image,
            'title': self.title,
            'author': self.author,
            'siteName': self.site_name,
        }
