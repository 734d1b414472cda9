"""
Unit tests for cover image selection.
"""

import pytest

from work_metadata.images import is_likely_generic_image, order_inline_images, select_best_image

PAGE_URL = 'https://example.com/works/1'
TOKENS = ['mycomicsite', 'example.com', 'example']


class TestIsLikelyGenericImage:
    """Tests for is_likely_generic_image()."""

    @pytest.mark.parametrize('candidate', [
        'https://example.com/static/og-image-default.png',
        '/assets/logo.png',
        '/favicon.ico',
        '/img/share-card.jpg',
        '/img/mycomicsite-banner.jpg',
        '/img/cover.php',
    ])
    def test_generic(self, candidate):
        assert is_likely_generic_image(candidate, PAGE_URL, TOKENS)

    @pytest.mark.parametrize('candidate', [
        'cover-art.jpg',
        'https://cdn.example.net/covers/12345.webp',
        '/images/volume-1',
    ])
    def test_content_images(self, candidate):
        assert not is_likely_generic_image(candidate, PAGE_URL, TOKENS)


class TestOrderInlineImages:
    """Tests for order_inline_images()."""

    def test_strong_first_order_kept(self):
        images = [
            'https://example.com/logo.png',
            'https://example.com/a.jpg',
            'https://example.com/icon.png',
            'https://example.com/b.jpg',
        ]
        assert order_inline_images(images, PAGE_URL, TOKENS) == [
            'https://example.com/a.jpg',
            'https://example.com/b.jpg',
            'https://example.com/logo.png',
            'https://example.com/icon.png',
        ]


class TestSelectBestImage:
    """Tests for select_best_image()."""

    def test_generic_og_image_loses_to_inline_cover(self):
        candidates = [None, 'https://example.com/static/og-image-default.png', 'cover-art.jpg']
        assert select_best_image(candidates, PAGE_URL, TOKENS) == 'https://example.com/works/cover-art.jpg'

    def test_generic_used_when_nothing_else(self):
        assert select_best_image(['/assets/logo.png'], PAGE_URL, TOKENS) == 'https://example.com/assets/logo.png'

    def test_no_candidates(self):
        assert select_best_image([None, '', '  '], PAGE_URL, TOKENS) is None
