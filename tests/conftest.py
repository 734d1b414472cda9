"""
Shared pytest fixtures for the work metadata tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load Cloud Function modules with unique names at module load time
_metadata_extractor_module = _load_module_from_path(
    'metadata_extractor_main',
    PROJECT_ROOT / 'metadata-extractor' / 'main.py'
)

_link_preview_module = _load_module_from_path(
    'link_preview_main',
    PROJECT_ROOT / 'link-preview' / 'main.py'
)


# ============================================================================
# Cloud Function Fixtures
# ============================================================================

@pytest.fixture
def extract_metadata_handler():
    """Returns main entry point from metadata-extractor."""
    return _metadata_extractor_module.extract_metadata


@pytest.fixture
def validate_url():
    """Returns validate_url function from metadata-extractor."""
    return _metadata_extractor_module.validate_url


@pytest.fixture
def link_preview_handler():
    """Returns main entry point from link-preview."""
    return _link_preview_module.link_preview


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST', args=None, invalid_json=False):
            self._json = json_data
            self._invalid_json = invalid_json
            self.method = method
            self.args = args or {}
            self.data = b''

        def get_json(self, force=False, silent=False):
            if self._invalid_json:
                if silent:
                    return None
                raise ValueError('Failed to decode JSON object')
            return self._json

    return MockRequest


# ============================================================================
# Sample Pages
# ============================================================================

@pytest.fixture
def structured_data_html():
    """A comic page described by JSON-LD with no competing Open Graph title."""
    return """
    <!DOCTYPE html>
    <html lang="zh-TW">
    <head>
        <title>Example Comics</title>
        <script type="application/ld+json">
        {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": "測試作品",
            "author": {"@type": "Person", "name": "王小明"},
            "publisher": {"@type": "Organization", "name": "Example Comics"},
            "datePublished": "2024-01-15T09:00:00+08:00",
            "keywords": "冒險, 奇幻"
        }
        </script>
    </head>
    <body>
        <p>Some chapter text.</p>
    </body>
    </html>
    """


@pytest.fixture
def site_suffix_html():
    """An episode page whose <title> carries the site name as a suffix."""
    return """
    <html>
    <head>
        <title>第3話：英雄誕生 - MyComicSite</title>
        <meta property="og:site_name" content="MyComicSite">
    </head>
    <body><p>...</p></body>
    </html>
    """


@pytest.fixture
def generic_image_html():
    """A page whose only Open Graph image is a default share card."""
    return """
    <html>
    <head>
        <title>Cover Story</title>
        <meta property="og:image" content="https://example.com/static/og-image-default.png">
    </head>
    <body>
        <img src="cover-art.jpg" alt="Cover">
    </body>
    </html>
    """


@pytest.fixture
def product_page_html():
    """A book product page with labeled details in the body text."""
    return """
    <html>
    <head>
        <title>星の旅人 | Example Books</title>
        <meta property="og:site_name" content="Example Books">
        <meta name="keywords" content="SF, 冒険">
    </head>
    <body>
        <h1>星の旅人</h1>
        <ul>
            <li>作者：山田太郎</li>
            <li>出版社：星光出版</li>
            <li>頁數：320</li>
            <li>發售日：2024/03/01</li>
        </ul>
        <dl>
            <dt>ジャンル</dt>
            <dd>SF、冒険</dd>
        </dl>
    </body>
    </html>
    """


@pytest.fixture
def atom_feed_xml():
    """A small Atom feed whose newest entry is an episode."""
    return """<?xml version="1.0" encoding="utf-8"?>
    <feed xmlns="http://www.w3.org/2005/Atom" xml:lang="ja">
        <title>Feed Site</title>
        <updated>2024-02-01T00:00:00Z</updated>
        <entry>
            <title>第5話 星の海</title>
            <author><name>Atom Author</name></author>
            <published>2024-01-31T12:00:00Z</published>
            <updated>2024-02-01T00:00:00Z</updated>
            <summary>The crew reaches the sea of stars.</summary>
        </entry>
    </feed>
    """
