"""
Summaries of embedded schema.org (JSON-LD) data.

JSON-LD blocks are arbitrary JSON: single nodes, arrays of nodes, or graphs
nested under @graph. collect_schema_nodes() flattens them into the list of
typed nodes, and summarize_schema() reads the fields the extractor cares
about from each node. Scalar fields are first-wins across nodes; titles,
creators, keywords and facts accumulate.
"""

import logging
import math
from functools import singledispatch
from typing import Any, List, Optional

from .creators import looks_like_organization
from .lexicons import AWARD_FACT_LABEL, ISBN_FACT_LABEL, ORGANIZATION_SCHEMA_TYPES, PAGES_FACT_LABEL
from .models import Fact, SchemaCreator, SchemaSummary
from .text import clean_text_value, resolve_url, split_keywords
from .titles import extract_title_aliases

logger = logging.getLogger(__name__)

TITLE_FIELDS = ['headline', 'name', 'title', 'alternativeHeadline']
LANGUAGE_FIELDS = ['inLanguage', 'language']
IMAGE_FIELDS = ['image', 'thumbnailUrl']
NEXT_UPDATE_FIELDS = ['endDate', 'availabilityEnds', 'expires']
KEYWORD_FIELDS = ['keywords', 'genre', 'about', 'tag', 'category']

# (JSON-LD property, role given to the creators found there)
CREATOR_FIELDS = [
    ('author', 'author'),
    ('creator', 'creator'),
    ('illustrator', 'illustrator'),
    ('editor', 'editor'),
    ('translator', 'translator'),
    ('contributor', 'contributor'),
    ('producer', 'producer'),
    ('director', 'director'),
    ('musicBy', 'music'),
    ('actor', 'actor'),
    ('brand', 'brand'),
    ('manufacturer', 'manufacturer'),
    ('productionCompany', 'production'),
]


@singledispatch
def collect_schema_nodes(value: Any, collector: List[dict]) -> List[dict]:
    """Append every JSON-LD node found in value to collector. Scalars hold no nodes."""
    return collector


@collect_schema_nodes.register(list)
def _collect_from_list(value: list, collector: List[dict]) -> List[dict]:
    for entry in value:
        collect_schema_nodes(entry, collector)
    return collector


@collect_schema_nodes.register(dict)
def _collect_from_dict(value: dict, collector: List[dict]) -> List[dict]:
    if value.get('@type') or value.get('@context'):
        collector.append(value)
    if value.get('@graph'):
        collect_schema_nodes(value['@graph'], collector)
    return collector


def _type_names(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(entry) for entry in value if entry is not None]
    return []


def normalize_schema_creators(value: Any, default_role: str = 'author') -> List[SchemaCreator]:
    """
    Creator entries from a JSON-LD person/organization value.

    Accepts a plain name, a {name, @type, jobTitle} object or a list of
    either. jobTitle overrides default_role.
    """
    if not value:
        return []
    if isinstance(value, list):
        creators = []
        for entry in value:
            creators.extend(normalize_schema_creators(entry, default_role))
        return creators
    if isinstance(value, str):
        name = value.strip()
        if not name:
            return []
        return [SchemaCreator(name=name, is_organization=looks_like_organization(name), role=default_role)]
    if isinstance(value, dict):
        name = value.get('name')
        if not isinstance(name, str) or not name.strip():
            return []
        name = name.strip()
        is_organization = any(
            type_name in ORGANIZATION_SCHEMA_TYPES for type_name in _type_names(value.get('@type'))
        )
        job_title = value.get('jobTitle')
        role = job_title.strip() if isinstance(job_title, str) and job_title.strip() else default_role
        return [SchemaCreator(
            name=name,
            is_organization=is_organization or looks_like_organization(name),
            role=role,
        )]
    return []


def _first_image(value: Any, base_url: str) -> Optional[str]:
    if isinstance(value, str):
        candidate = value
    elif isinstance(value, list):
        candidate = next((entry for entry in value if isinstance(entry, str)), None)
    elif isinstance(value, dict) and isinstance(value.get('url'), str):
        candidate = value['url']
    else:
        return None
    if not candidate or not candidate.strip():
        return None
    return resolve_url(base_url, candidate) or candidate.strip()


def _keywords(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return split_keywords(value)
    if isinstance(value, list):
        keywords = []
        for entry in value:
            keywords.extend(_keywords(entry))
        return keywords
    if isinstance(value, dict):
        for field_name in ('name', 'value'):
            if isinstance(value.get(field_name), str):
                return split_keywords(value[field_name])
    return []


def _strings(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [entry.strip() for entry in value if isinstance(entry, str) and entry.strip()]


def _number_text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        return clean_text_value(value)
    return None


def _first_string(node: dict, fields: List[str]) -> Optional[str]:
    for field_name in fields:
        value = node.get(field_name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def summarize_schema(blocks: List[Any], base_url: str) -> SchemaSummary:
    """Fold every JSON-LD node in blocks into one SchemaSummary."""
    nodes = collect_schema_nodes(blocks, [])
    summary = SchemaSummary()
    site_names = []

    for node in nodes:
        for field_name in TITLE_FIELDS:
            value = node.get(field_name)
            if isinstance(value, str) and value.strip():
                title = value.strip()
                summary.titles.append(title)
                summary.alternate_titles.extend(extract_title_aliases(title))
        summary.alternate_titles.extend(_strings(node.get('alternateName')))

        if summary.language is None:
            summary.language = _first_string(node, LANGUAGE_FIELDS)

        if summary.episode is None:
            episode = node.get('episodeNumber')
            if isinstance(episode, str) and episode.strip():
                summary.episode = episode.strip()
            elif isinstance(episode, (int, float)) and not isinstance(episode, bool):
                summary.episode = _number_text(episode)

        if summary.image is None:
            image_field = next((node[name] for name in IMAGE_FIELDS if node.get(name)), None)
            summary.image = _first_image(image_field, base_url)

        for field_name, role in CREATOR_FIELDS:
            summary.creators.extend(normalize_schema_creators(node.get(field_name), role))

        publishers = normalize_schema_creators(node.get('publisher'), 'publisher')
        summary.creators.extend(publishers)
        site_names.extend(publisher.name for publisher in publishers)

        if summary.description is None:
            summary.description = _first_string(node, ['description'])
        if summary.published is None:
            summary.published = _first_string(node, ['datePublished'])
        if summary.updated is None:
            summary.updated = _first_string(node, ['dateModified'])
        if summary.next_update is None:
            summary.next_update = _first_string(node, NEXT_UPDATE_FIELDS)

        for field_name in KEYWORD_FIELDS:
            summary.keywords.extend(_keywords(node.get(field_name)))

        pages = _number_text(node.get('numberOfPages'))
        if pages:
            summary.facts.append(Fact(type='pages', label=PAGES_FACT_LABEL, value=pages))
        for award in _strings(node.get('award')):
            summary.facts.append(Fact(type='other', label=AWARD_FACT_LABEL, value=award))
        for isbn in _strings(node.get('isbn')):
            summary.facts.append(Fact(type='other', label=ISBN_FACT_LABEL, value=isbn))

        site_names.extend(part.name for part in normalize_schema_creators(node.get('isPartOf')))

    summary.site_names = list(dict.fromkeys(site_names))
    logger.debug('Summarized %d JSON-LD nodes from %s', len(nodes), base_url)
    return summary
