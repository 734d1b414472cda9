"""
Unit tests for title sanitizing, filtering and selection.
"""

import pytest

from work_metadata.models import Episode
from work_metadata.titles import (
    TitleCandidate,
    collect_site_tokens,
    derive_original_title,
    extract_episode_from_title,
    extract_title_aliases,
    is_likely_non_title,
    matches_site_token,
    resolve_titles,
    sanitize_title_candidate,
)


class TestCollectSiteTokens:
    """Tests for collect_site_tokens()."""

    def test_name_and_host(self):
        tokens = collect_site_tokens('MyComicSite', 'https://www.mycomic.example.com/works/3')
        assert tokens[0] == 'mycomicsite'
        assert 'www.mycomic.example.com' in tokens
        assert 'mycomic.example.com' in tokens
        assert 'example' in tokens
        assert len(tokens) == len(set(tokens))

    def test_no_url(self):
        assert collect_site_tokens(None, '') == []


class TestSanitizeTitleCandidate:
    """Tests for sanitize_title_candidate()."""

    def test_suffix_removed(self):
        assert sanitize_title_candidate('第3話：英雄誕生 - MyComicSite', ['mycomicsite']) == '第3話：英雄誕生'

    def test_prefix_removed(self):
        assert sanitize_title_candidate('Example Books | 星の旅人', ['example books']) == '星の旅人'

    def test_parenthesized_suffix_removed(self):
        assert sanitize_title_candidate('Great Work (example)', ['example']) == 'Great Work'

    def test_site_name_alone_is_none(self):
        assert sanitize_title_candidate('MyComicSite', ['mycomicsite']) is None

    def test_untouched_without_tokens(self):
        assert sanitize_title_candidate('  A   Title ', []) == 'A Title'


class TestIsLikelyNonTitle:
    """Tests for is_likely_non_title()."""

    @pytest.mark.parametrize('value', [
        '',
        'https://example.com/works/1',
        'ISBN 9784088807232',
        'by Jane Doe',
        'Author: Jane Doe',
        '作者：山田太郎',
        '作者',
        '出版社 編集',
    ])
    def test_non_titles(self, value):
        assert is_likely_non_title(value)

    @pytest.mark.parametrize('value', [
        '進撃の巨人',
        '第3話：英雄誕生',
        'Bystander Effect',
        'The Authority of Dreams',
    ])
    def test_titles(self, value):
        assert not is_likely_non_title(value)


class TestMatchesSiteToken:
    """Tests for matches_site_token()."""

    def test_exact_and_compact(self):
        assert matches_site_token('MyComicSite', ['mycomicsite'])
        assert matches_site_token('My Comic Site', ['mycomicsite'])

    def test_contains_long_token(self):
        assert matches_site_token('Welcome to Example Comics', ['example'])

    def test_short_token_needs_exact_match(self):
        assert not matches_site_token('Bob and Alice', ['bob'])
        assert not matches_site_token(None, ['bob'])


class TestAliases:
    """Tests for extract_title_aliases()."""

    def test_parentheses(self):
        assert extract_title_aliases('進撃の巨人 (Attack on Titan)') == ['Attack on Titan']

    def test_fullwidth_brackets(self):
        assert extract_title_aliases('葬送のフリーレン（Frieren）') == ['Frieren']

    def test_slash(self):
        assert extract_title_aliases('鬼滅の刃 / Demon Slayer') == ['鬼滅の刃', 'Demon Slayer']

    def test_plain_title(self):
        assert extract_title_aliases('Plain') == []


class TestDeriveOriginalTitle:
    """Tests for derive_original_title()."""

    def test_non_chinese_primary_is_original(self):
        assert derive_original_title('進撃の巨人', ['Attack on Titan']) == '進撃の巨人'

    def test_japanese_alternate_preferred(self):
        assert derive_original_title('葬送的芙莉蓮', ['Frieren', '葬送のフリーレン']) == '葬送のフリーレン'

    def test_falls_back_to_primary(self):
        assert derive_original_title('測試作品', ['另一個名字']) == '測試作品'

    def test_no_primary(self):
        assert derive_original_title(None, ['Anything']) is None


class TestResolveTitles:
    """Tests for resolve_titles()."""

    def test_priority_wins(self):
        result = resolve_titles(
            [TitleCandidate('Lower Priority', 3), TitleCandidate('測試作品', 1)],
            [],
            [],
        )
        assert result.primary_title == '測試作品'

    def test_language_preference_within_candidates(self):
        result = resolve_titles(
            [TitleCandidate('Attack on Titan', 2), TitleCandidate('進撃の巨人', 3)],
            [],
            [],
        )
        assert result.primary_title == '進撃の巨人'

    def test_alternates_exclude_primary(self):
        result = resolve_titles(
            [TitleCandidate('進撃の巨人 (Attack on Titan)', 1)],
            ['進撃の巨人 (attack on titan)', 'Shingeki no Kyojin', 'Shingeki no Kyojin'],
            [],
        )
        assert result.primary_title == '進撃の巨人 (Attack on Titan)'
        assert result.alternate_titles == ['Shingeki no Kyojin', 'Attack on Titan']
        assert result.primary_title not in result.alternate_titles

    def test_site_name_only_candidate_falls_back(self):
        tokens = ['mycomicsite']
        result = resolve_titles([TitleCandidate('MyComicSite', 3)], [], tokens)
        assert result.primary_title == 'MyComicSite'

    def test_site_name_primary_replaced(self):
        tokens = ['example comics', 'example', 'comics']
        result = resolve_titles(
            [TitleCandidate('Example Comics Home', 2), TitleCandidate('Real Work', 3)],
            [],
            tokens,
        )
        assert result.primary_title == 'Real Work'

    def test_empty_input_has_no_primary(self):
        result = resolve_titles([], [], [])
        assert result.primary_title is None
        assert result.original_title is None
        assert result.alternate_titles == []


class TestExtractEpisodeFromTitle:
    """Tests for extract_episode_from_title()."""

    @pytest.mark.parametrize('title,raw,number', [
        ('第12話 新たな旅', '第12話', 12),
        ('第 3 集', '第 3 集', 3),
        ('Frieren Episode 7', 'Episode 7', 7),
        ('Show EP.08 recap', 'EP.08', 8),
        ('Podcast #42', '#42', 42),
        ('鬼滅 5話', '5話', 5),
    ])
    def test_markers(self, title, raw, number):
        assert extract_episode_from_title(title) == Episode(raw=raw, number=number)

    def test_word_boundary_before_ep(self):
        assert extract_episode_from_title('Deep 5 dive') is None

    def test_no_marker(self):
        assert extract_episode_from_title('Plain Title') is None
        assert extract_episode_from_title(None) is None
