"""
Bounded-time HTTP retrieval.

fetch_document() never raises for transport problems. It returns a
(document, failure) pair where exactly one side is set, so callers can treat a
missing page or feed as "no data" without wrapping every call in try/except.
"""

import http.client
import logging
import re
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import requests

from .config import HTML_ACCEPT, ExtractorConfig

logger = logging.getLogger(__name__)

CHUNK_SIZE = 16384
# Bytes inspected for a <meta charset> declaration
CHARSET_SNIFF_BYTES = 4096

_META_CHARSET_RE = re.compile(rb'<meta[^>]+charset\s*=\s*["\']?\s*([A-Za-z0-9_.:-]+)', re.IGNORECASE)


@dataclass
class FetchFailure:
    """Why a fetch produced no document. kind is timeout, network or http_status."""

    kind: str
    message: str
    status_code: Optional[int] = None


@dataclass
class FetchedDocument:
    url: str
    status_code: int
    content: bytes
    content_type: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        return decode_body(self.content, self.encoding)


def detect_charset(content: bytes, declared: Optional[str]) -> str:
    """Charset from the Content-Type header, else a <meta charset> near the top, else UTF-8."""
    if declared:
        return declared
    match = _META_CHARSET_RE.search(content[:CHARSET_SNIFF_BYTES])
    if match:
        return match.group(1).decode('ascii', 'replace')
    return 'utf-8'


def decode_body(content: bytes, encoding: Optional[str]) -> str:
    charset = detect_charset(content, encoding)
    try:
        return content.decode(charset, errors='replace')
    except LookupError:
        return content.decode('utf-8', errors='replace')


def _header_charset(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    match = re.search(r'charset\s*=\s*["\']?([^;"\'\s]+)', content_type, re.IGNORECASE)
    return match.group(1) if match else None


def _abort(response: requests.Response) -> None:
    """Unblock any read in progress on response and close it."""
    connection = getattr(response.raw, '_connection', None)
    sock = getattr(connection, 'sock', None)
    if sock is not None:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            logger.debug('Socket shutdown failed: %s', e)
    response.close()


def _timed_out(url: str, budget: float) -> Tuple[None, FetchFailure]:
    logger.info('Timed out reading %s after %.1fs', url, budget)
    return None, FetchFailure('timeout', 'Request timed out')


def fetch_document(
    url: str,
    *,
    accept: str = HTML_ACCEPT,
    timeout: Optional[float] = None,
    config: Optional[ExtractorConfig] = None,
    max_bytes: Optional[int] = None,
) -> Tuple[Optional[FetchedDocument], Optional[FetchFailure]]:
    """
    Fetch a URL within a wall-clock budget.

    Args:
        url: Absolute http(s) URL.
        accept: Accept header for the expected content.
        timeout: Budget in seconds. Defaults to the page timeout.
        config: Supplies the User-Agent and Accept-Language headers.
        max_bytes: Stop reading once this many bytes have arrived and keep
            what was read.

    Returns:
        (document, None) on a 2xx response, otherwise (None, failure).
    """
    config = config or ExtractorConfig()
    budget = config.page_timeout if timeout is None else timeout
    headers = {
        'User-Agent': config.user_agent,
        'Accept': accept,
        'Accept-Language': config.accept_language,
    }
    deadline = time.monotonic() + budget

    try:
        response = requests.get(url, headers=headers, timeout=budget, allow_redirects=True, stream=True)
    except requests.exceptions.Timeout:
        logger.info('Timed out fetching %s after %.1fs', url, budget)
        return None, FetchFailure('timeout', 'Request timed out')
    except requests.exceptions.RequestException as e:
        logger.info('Request for %s failed: %s', url, e)
        return None, FetchFailure('network', f'Request failed: {e}')

    expired = threading.Event()

    def expire():
        expired.set()
        _abort(response)

    # Aborts the response at the deadline, even in the middle of a chunk read
    timer = threading.Timer(max(deadline - time.monotonic(), 0.0), expire)
    timer.daemon = True
    timer.start()

    try:
        if not 200 <= response.status_code < 300:
            logger.info('HTTP %s from %s', response.status_code, url)
            return None, FetchFailure(
                'http_status',
                f'HTTP error: {response.status_code}',
                status_code=response.status_code,
            )

        chunks = []
        received = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if expired.is_set() or time.monotonic() > deadline:
                return _timed_out(url, budget)
            if not chunk:
                continue
            chunks.append(chunk)
            received += len(chunk)
            if max_bytes is not None and received >= max_bytes:
                break
        if expired.is_set():
            return _timed_out(url, budget)
        content = b''.join(chunks)
        if max_bytes is not None:
            content = content[:max_bytes]
    except requests.exceptions.Timeout:
        return _timed_out(url, budget)
    except requests.exceptions.RequestException as e:
        if expired.is_set():
            return _timed_out(url, budget)
        logger.warning('Reading %s failed: %s', url, e)
        return None, FetchFailure('network', f'Request failed: {e}')
    except (AttributeError, ValueError, OSError, http.client.HTTPException):
        # Raised by reads on a response closed under them
        if not expired.is_set():
            raise
        return _timed_out(url, budget)
    finally:
        timer.cancel()
        response.close()

    content_type = response.headers.get('Content-Type')
    logger.debug('Fetched %s (%s, %d bytes)', url, content_type, len(content))
    return FetchedDocument(
        url=response.url or url,
        status_code=response.status_code,
        content=content,
        content_type=content_type,
        headers=dict(response.headers),
        encoding=_header_charset(content_type),
    ), None
