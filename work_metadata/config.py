"""
Runtime configuration for the metadata extractor.

Timeouts, the client signature and per-source creator weights are carried in
one ExtractorConfig instance that is passed into every entry point. Cloud
Function deployments build it from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36'

HTML_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
FEED_ACCEPT = 'application/rss+xml,application/atom+xml;q=0.9,*/*;q=0.8'
JSON_FEED_ACCEPT = 'application/json, */*'

# Confidence contributed by a single creator mention, per source
DEFAULT_SOURCE_WEIGHTS = {
    'schema': 0.9,
    'meta': 0.8,
    'twitter': 0.6,
    'feed': 0.5,
    'page': 0.45,
}


@dataclass(frozen=True)
class ExtractorConfig:
    """Settings for one extraction pipeline. Timeouts are in seconds."""

    page_timeout: float = 8.0
    feed_timeout: float = 7.0
    preview_timeout: float = 7.0
    user_agent: str = USER_AGENT
    accept_language: str = 'en-US,en;q=0.9'
    source_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SOURCE_WEIGHTS))
    head_scan_limit: int = 20000
    max_inline_images: int = 30
    max_text_lines: int = 800
    fact_value_limit: int = 160
    description_limit: int = 500
    preview_max_bytes: int = 512000

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'ExtractorConfig':
        """
        Build a config from environment variables.

        Recognized variables (timeouts in milliseconds):
            METADATA_PAGE_TIMEOUT_MS, METADATA_FEED_TIMEOUT_MS,
            METADATA_PREVIEW_TIMEOUT_MS, METADATA_USER_AGENT
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            page_timeout=_millis(env.get('METADATA_PAGE_TIMEOUT_MS'), defaults.page_timeout),
            feed_timeout=_millis(env.get('METADATA_FEED_TIMEOUT_MS'), defaults.feed_timeout),
            preview_timeout=_millis(env.get('METADATA_PREVIEW_TIMEOUT_MS'), defaults.preview_timeout),
            user_agent=env.get('METADATA_USER_AGENT') or defaults.user_agent,
        )


def _millis(raw: Optional[str], default: float) -> float:
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return value / 1000.0
