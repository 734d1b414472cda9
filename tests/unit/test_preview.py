"""
Unit tests for link preview field picking.
"""

from work_metadata.models import LinkPreview
from work_metadata.preview import build_link_preview, clean_author_value, collect_meta_map

PAGE_URL = 'https://example.com/posts/1'


class TestCollectMetaMap:
    """Tests for collect_meta_map()."""

    def test_first_non_empty_value_wins(self):
        html = (
            '<meta property="og:title" content="">'
            '<meta property="og:title" content="First &amp; Best">'
            '<meta property="og:title" content="Second">'
            '<meta itemprop="image" content="/i.png">'
        )
        assert collect_meta_map(html) == {'og:title': 'First & Best', 'image': '/i.png'}


class TestCleanAuthorValue:
    """Tests for clean_author_value()."""

    def test_label_and_segments(self):
        assert clean_author_value('作者：山田太郎 | 出版社') == '山田太郎'
        assert clean_author_value('By Jane Doe / Staff') == 'Jane Doe'

    def test_name_starting_with_by_kept(self):
        assert clean_author_value('Byron Smith') == 'Byron Smith'

    def test_empty(self):
        assert clean_author_value('   ') is None
        assert clean_author_value(None) is None


class TestBuildLinkPreview:
    """Tests for build_link_preview()."""

    def test_meta_tags(self):
        html = """
        <head>
            <meta property="og:image" content="/img/card.jpg">
            <meta property="og:title" content="Card Title">
            <meta name="author" content="作者：山田太郎 | 出版社">
            <meta property="og:site_name" content="Example">
        </head>
        """
        preview = build_link_preview(html, PAGE_URL)
        assert preview == LinkPreview(
            image='https://example.com/img/card.jpg',
            title='Card Title',
            author='山田太郎',
            site_name='Example',
        )

    def test_json_ld_title_fallback(self):
        html = """
        <head>
            <script type="application/ld+json">
            {"@context": "https://schema.org", "@type": "NewsArticle",
             "headline": "From JSON-LD",
             "author": {"@type": "Person", "name": "Jane Doe"},
             "publisher": {"@type": "Organization", "name": "Daily"}}
            </script>
        </head>
        <body><p>No title tags here.</p></body>
        """
        preview = build_link_preview(html, PAGE_URL)
        assert preview.title == 'From JSON-LD'
        assert preview.author == 'Jane Doe'
        assert preview.site_name == 'Daily'
        assert preview.image is None

    def test_title_tag_before_json_ld(self):
        html = '<title>Tag Title</title><script type="application/ld+json">{"@type": "Thing", "name": "LD"}</script>'
        assert build_link_preview(html, PAGE_URL).title == 'Tag Title'

    def test_author_from_description(self):
        html = '<meta name="description" content="An epic tale. 作者：李四 / 出版：某社">'
        assert build_link_preview(html, PAGE_URL).author == '李四'

    def test_author_from_markup(self):
        html = '<body><div class="info">著者：佐藤花子</div></body>'
        assert build_link_preview(html, PAGE_URL).author == '佐藤花子'

    def test_inline_image_fallback(self):
        html = '<body><img src="/media/first.png"><img src="/media/second.png"></body>'
        assert build_link_preview(html, PAGE_URL).image == 'https://example.com/media/first.png'

    def test_wire_format(self):
        preview = LinkPreview(image='https://example.com/a.jpg', title='T', author=None, site_name='S')
        assert preview.to_dict() == {
            'image': 'https://example.com/a.jpg',
            'title': 'T',
            'author': None,
            'siteName': 'S',
        }
        assert LinkPreview(image_only=True).to_dict() == {'image': None}
