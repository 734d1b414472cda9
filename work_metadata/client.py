"""
Client for the metadata-extractor function.

Callers post a work URL and get back an ExtractedMetadata record, or None
when the URL is not http(s), the service failed, or the payload carried an
error.
"""

import logging
from typing import Optional

import requests

from .models import ExtractedMetadata
from .text import is_http_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


def fetch_external_item_data(
    url: str,
    endpoint: str,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Optional[ExtractedMetadata]:
    """
    Ask the extractor at endpoint for the metadata of url.

    Args:
        url: Work page to describe. Non-http(s) values return None without a request.
        endpoint: URL of the deployed extract_metadata function.
        timeout: Request timeout in seconds.
        session: Optional requests session to reuse.

    Returns:
        The normalized record, or None.
    """
    if not is_http_url(url):
        return None

    http = session or requests
    try:
        response = http.post(endpoint, json={'url': url}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as e:
        logger.debug('Metadata request for %s failed: %s', url, e)
        return None
    except ValueError as e:
        logger.debug('Metadata response for %s was not JSON: %s', url, e)
        return None

    if not isinstance(payload, dict) or payload.get('error') or 'data' not in payload:
        return None
    return ExtractedMetadata.from_dict(payload.get('data'))
