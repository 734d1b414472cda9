"""
Cover image selection.

Pages offer many image candidates and most of them are site decoration:
logos, favicons, share cards. A candidate is "generic" when its URL looks
like decoration; the first non-generic candidate wins.
"""

import re
from typing import List, Optional, Sequence
from urllib.parse import urljoin, urlparse

from .lexicons import GENERIC_IMAGE_KEYWORDS, IMAGE_EXTENSIONS
from .text import clean_text_value, resolve_url

_EXTENSION_RE = re.compile(r'\.([a-z0-9]+)$')
_NON_ALNUM_RE = re.compile(r'[^a-z0-9]')


def is_likely_generic_image(
    candidate: str,
    page_url: str,
    tokens: Sequence[str],
    keywords: Sequence[str] = GENERIC_IMAGE_KEYWORDS,
    extensions=IMAGE_EXTENSIONS,
) -> bool:
    """
    True when an image URL looks like site decoration.

    That is: a file extension outside the usual image formats, a path
    mentioning a decoration keyword (logo, icon, og-image, ...), or a file
    name containing a site token of four or more characters.
    """
    try:
        parsed = urlparse(urljoin(page_url, candidate))
    except ValueError:
        return True
    pathname = parsed.path.lower()
    filename = pathname.rsplit('/', 1)[-1]

    match = _EXTENSION_RE.search(filename)
    if match and match.group(1) not in extensions:
        return True
    if any(keyword in pathname for keyword in keywords):
        return True
    if filename:
        for token in tokens:
            compact = _NON_ALNUM_RE.sub('', token.lower())
            if len(token) >= 4 and compact and compact in filename:
                return True
    return False


def order_inline_images(images: Sequence[str], page_url: str, tokens: Sequence[str]) -> List[str]:
    """Strong images first, generic ones last; document order kept within each group."""
    strong = []
    generic = []
    for image in images:
        if is_likely_generic_image(image, page_url, tokens):
            generic.append(image)
        else:
            strong.append(image)
    return list(dict.fromkeys(strong + generic))


def select_best_image(candidates: Sequence[Optional[str]], page_url: str, tokens: Sequence[str]) -> Optional[str]:
    """
    The first non-generic candidate, else the first generic one, else None.

    Candidates are resolved against page_url and deduplicated first.
    """
    strong = []
    fallback = []
    seen = set()
    for candidate in candidates:
        value = clean_text_value(candidate)
        if not value:
            continue
        normalized = resolve_url(page_url, value) or value
        if normalized in seen:
            continue
        seen.add(normalized)
        if is_likely_generic_image(normalized, page_url, tokens):
            fallback.append(normalized)
        else:
            strong.append(normalized)
    if strong:
        return strong[0]
    return fallback[0] if fallback else None
