"""
Creator aggregation.

Every mention of a creator (from JSON-LD, meta tags, Twitter Cards, the feed
or labeled page text) is folded into one entry per trimmed name. Repeated
mentions add their source weight to the entry's confidence, capped at 1.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_SOURCE_WEIGHTS
from .lexicons import ORGANIZATION_MARKERS
from .models import Creator


@dataclass(frozen=True)
class CreatorMention:
    name: str
    source: str
    weight: float
    role: Optional[str] = None
    is_organization: Optional[bool] = None


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def looks_like_organization(name: str, markers: Sequence[str] = ORGANIZATION_MARKERS) -> bool:
    """
    True when a creator name reads like a company, imprint or studio.

    ASCII markers (press, studio, inc, ...) must stand as whole words; CJK
    markers (出版, 工作室, 有限, ...) match anywhere in the name.
    """
    if not name:
        return False
    lowered = name.lower()
    for marker in markers:
        marker = marker.lower()
        if marker.isascii():
            if re.search(rf'\b{re.escape(marker)}\b', lowered):
                return True
        elif marker in lowered:
            return True
    return False


def merge_creator(existing: Optional[Creator], mention: CreatorMention) -> Creator:
    """
    Fold one mention into the running entry for its name.

    A new entry takes the mention's weight as its confidence and defaults to
    the 'author' role. An existing entry gains the weight (capped at 1), keeps
    its first role, takes the latest explicit organization flag and records
    the source once.
    """
    name = mention.name.strip()
    if existing is None:
        is_organization = mention.is_organization
        if is_organization is None:
            is_organization = looks_like_organization(name)
        return Creator(
            name=name,
            role=mention.role or 'author',
            is_organization=is_organization,
            confidence=_clamp(mention.weight),
            sources=[mention.source],
        )

    sources = list(existing.sources)
    if mention.source not in sources:
        sources.append(mention.source)
    return replace(
        existing,
        role=existing.role or mention.role,
        is_organization=existing.is_organization if mention.is_organization is None else mention.is_organization,
        confidence=_clamp(existing.confidence + mention.weight),
        sources=sources,
    )


class CreatorAccumulator:
    """Keyed accumulator of creator mentions."""

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        self.weights = dict(DEFAULT_SOURCE_WEIGHTS if weights is None else weights)
        self._entries: Dict[str, Creator] = {}

    def add(
        self,
        name: Optional[str],
        source: str,
        role: Optional[str] = None,
        is_organization: Optional[bool] = None,
    ) -> None:
        if not name or not isinstance(name, str):
            return
        key = name.strip()
        if not key:
            return
        mention = CreatorMention(
            name=key,
            source=source,
            weight=self.weights.get(source, 0.0),
            role=role,
            is_organization=is_organization,
        )
        self._entries[key] = merge_creator(self._entries.get(key), mention)

    def creators(self) -> List[Creator]:
        """Entries by descending confidence; ties keep first-seen order."""
        return sorted(self._entries.values(), key=lambda creator: creator.confidence, reverse=True)

    def top_name(self) -> Optional[str]:
        ranked = self.creators()
        return ranked[0].name if ranked else None

    def __len__(self) -> int:
        return len(self._entries)
