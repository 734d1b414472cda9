"""
Labeled facts in visible page text.

Product and catalogue pages often print details as "作者：山田太郎" or as a
label on one line followed by its value on the next. The page is flattened to
lines and each line is checked against TEXT_FACT_LABELS.
"""

import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import ExtractorConfig
from .lexicons import TEXT_FACT_LABELS
from .models import Fact
from .text import clean_soup, normalize_whitespace, split_keywords

_LEADING_SEPARATOR_RE = re.compile(r'^[：:]+')
_TRAILING_SEPARATOR_RE = re.compile(r'\s*[：:>】)]+$')


class FactAccumulator:
    """Facts keyed by case-insensitive (type, label, value); the first one seen is kept."""

    def __init__(self):
        self._facts: Dict[str, Fact] = {}

    def add(self, fact: Optional[Fact]) -> bool:
        if not fact or not fact.value:
            return False
        if fact.key in self._facts:
            return False
        self._facts[fact.key] = fact
        return True

    def extend(self, facts: Iterable[Fact]) -> None:
        for fact in facts:
            self.add(fact)

    def facts(self) -> List[Fact]:
        return list(self._facts.values())


def flatten_text_lines(html: str, limit: int = 800) -> List[str]:
    """Visible text of a page as non-empty, whitespace-collapsed lines."""
    soup = clean_soup(html)
    lines = []
    # every element boundary is a line break
    for raw_line in soup.get_text('\n').split('\n'):
        line = normalize_whitespace(raw_line)
        if line:
            lines.append(line)
            if len(lines) >= limit:
                break
    return lines


@lru_cache(maxsize=None)
def _label_pattern(label: str):
    return re.compile(rf'^{re.escape(label)}(?:\s*[：:>】)]+\s*|\s+)(.+)$', re.IGNORECASE)


def _match_line(
    lines: Sequence[str],
    index: int,
    labels: Sequence[Tuple[str, Sequence[str]]],
) -> Optional[Tuple[str, str, str, bool]]:
    """(type, label, value, consumed_next_line) for the first label matching lines[index]."""
    line = lines[index]
    bare_label = _TRAILING_SEPARATOR_RE.sub('', line).lower()
    for fact_type, type_labels in labels:
        for label in type_labels:
            if bare_label == label.lower() and index + 1 < len(lines):
                return fact_type, label, lines[index + 1], True
            match = _label_pattern(label).match(line)
            if match:
                return fact_type, label, match.group(1), False
    return None


def scan_text_facts(
    html: str,
    config: Optional[ExtractorConfig] = None,
    labels: Sequence[Tuple[str, Sequence[str]]] = TEXT_FACT_LABELS,
) -> List[Fact]:
    """
    Find labeled values in the page text.

    A label matches at the start of a line followed by a separator
    (: ： > 】 ")") or whitespace, or as a whole line whose value is the next
    line. Tag values are split into one fact per keyword. Values are clipped
    to config.fact_value_limit characters.

    Examples:
        A page containing "<p>作者：山田太郎</p>" yields
        Fact(type='author', label='作者', value='山田太郎').
    """
    config = config or ExtractorConfig()
    lines = flatten_text_lines(html, config.max_text_lines)
    accumulator = FactAccumulator()

    index = 0
    while index < len(lines):
        matched = _match_line(lines, index, labels)
        if matched:
            fact_type, label, value, consumed_next_line = matched
            value = _LEADING_SEPARATOR_RE.sub('', value).strip()
            if len(value) > config.fact_value_limit:
                value = value[:config.fact_value_limit].strip()
            if value:
                if fact_type == 'tag':
                    for keyword in split_keywords(value):
                        accumulator.add(Fact(type=fact_type, label=label, value=keyword))
                else:
                    accumulator.add(Fact(type=fact_type, label=label, value=value))
            if consumed_next_line:
                index += 1
        index += 1

    return accumulator.facts()
