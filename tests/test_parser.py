"""Tests for the ArticleParser high-level class."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from articleparser.errors import NullOrEmptyError, TransportError
from articleparser.fetcher import FetchOptions, UrllibFetcher
from articleparser.items import ParsedContent
from articleparser.parser import ArticleParser
from articleparser.settings import ParseOptions
from articleparser.transformations import (
    Transformation,
    TransformationRegistry,
    get_default_registry,
)

ARTICLE_URL = "https://somewhere.com/blog/article-title-here#comments"
BEST_URL = "https://somewhere.com/blog/article-title-here"


def _fetcher(body: bytes) -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch.return_value = body
    return fetcher


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestArticleParserInit:
    def test_defaults(self):
        parser = ArticleParser()
        assert parser.options == ParseOptions()
        assert parser.fetch_options == FetchOptions()
        assert parser.registry is get_default_registry()
        assert isinstance(parser._fetcher, UrllibFetcher)
        assert parser._extractor is None

    def test_custom_options_stored(self):
        options = ParseOptions(words_per_minute=120)
        fetch_options = FetchOptions(timeout=5, max_retries=2)
        parser = ArticleParser(options=options, fetch_options=fetch_options)
        assert parser.options is options
        assert parser.fetch_options is fetch_options

    def test_default_fetcher_uses_fetch_options(self):
        fetch_options = FetchOptions(proxy="http://proxy:8080")
        parser = ArticleParser(fetch_options=fetch_options)
        assert parser._fetcher._options is fetch_options

    def test_private_registry(self, registry):
        parser = ArticleParser(registry=registry)
        assert parser.registry is registry
        assert parser.registry is not get_default_registry()


# ---------------------------------------------------------------------------
# parse()
# ---------------------------------------------------------------------------

class TestArticleParserParse:
    def test_parses_html(self, article_html, registry):
        parser = ArticleParser(registry=registry)
        result = parser.parse(article_html, ARTICLE_URL)
        assert isinstance(result, ParsedContent)
        assert result.url == BEST_URL
        assert result.title == "Article title here"

    def test_delegates_with_configuration(self, registry):
        options = ParseOptions(content_len_threshold=10)
        extractor = MagicMock()
        parser = ArticleParser(options=options, registry=registry, extractor=extractor)
        with patch("articleparser.parser.extract_from_html") as mock_extract:
            parser.parse("<html></html>", url="https://example.com/post")
        mock_extract.assert_called_once_with(
            "<html></html>",
            "https://example.com/post",
            options,
            registry=registry,
            extractor=extractor,
        )

    def test_errors_propagate(self, no_title_html, registry):
        parser = ArticleParser(registry=registry)
        with pytest.raises(NullOrEmptyError):
            parser.parse(no_title_html, ARTICLE_URL)


# ---------------------------------------------------------------------------
# fetch() / fetch_batch()
# ---------------------------------------------------------------------------

class TestArticleParserFetch:
    def test_uses_injected_fetcher(self, article_html, registry):
        fetcher = _fetcher(article_html.encode("utf-8"))
        fetch_options = FetchOptions(timeout=7)
        parser = ArticleParser(fetch_options=fetch_options, registry=registry, fetcher=fetcher)
        result = parser.fetch(ARTICLE_URL)
        fetcher.fetch.assert_called_once_with(ARTICLE_URL, fetch_options)
        assert result.url == BEST_URL

    def test_fetch_error_propagates(self, registry):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = TransportError("refused", url=ARTICLE_URL)
        parser = ArticleParser(registry=registry, fetcher=fetcher)
        with pytest.raises(TransportError):
            parser.fetch(ARTICLE_URL)

    def test_fetch_batch(self, article_html, registry):
        fetcher = _fetcher(article_html.encode("utf-8"))
        parser = ArticleParser(registry=registry, fetcher=fetcher)
        results = parser.fetch_batch([ARTICLE_URL, ARTICLE_URL], max_workers=2)
        assert len(results) == 2
        assert all(r.url == BEST_URL for r in results)
        assert fetcher.fetch.call_count == 2

    def test_fetch_batch_forwards_error_policy(self, registry):
        parser = ArticleParser(registry=registry, fetcher=MagicMock())
        with patch("articleparser.parser.extract_batch", return_value=[]) as mock_batch:
            parser.fetch_batch([ARTICLE_URL], max_workers=3, on_error="include")
        _, kwargs = mock_batch.call_args
        assert kwargs["max_workers"] == 3
        assert kwargs["on_error"] == "include"
        assert kwargs["registry"] is registry


# ---------------------------------------------------------------------------
# Transformations
# ---------------------------------------------------------------------------

class TestArticleParserTransformations:
    def test_register_list_unregister(self, registry):
        parser = ArticleParser(registry=registry)
        t1 = Transformation(patterns=[r"https?://somewhere\.com/"], pre=lambda soup: None)
        t2 = Transformation(patterns=[r"https?://elsewhere\.org/"], post=lambda soup: None)

        assert parser.register_transformations([t1, t2]) == 2
        assert parser.list_transformations() == [t1, t2]

        assert parser.unregister_transformations([r"https?://somewhere\.com/"]) == 1
        assert parser.list_transformations() == [t2]

        assert parser.unregister_transformations() == 1
        assert parser.list_transformations() == []

    def test_registered_hook_runs_on_parse(self, article_html, registry):
        parser = ArticleParser(registry=registry)
        hook = MagicMock(return_value=None)
        parser.register_transformations(
            [Transformation(patterns=[r"somewhere\.com"], pre=hook)],
        )
        parser.parse(article_html, ARTICLE_URL)
        hook.assert_called_once()

    def test_private_registry_leaves_default_untouched(self, registry):
        before = len(get_default_registry())
        parser = ArticleParser(registry=registry)
        parser.register_transformations(
            [Transformation(patterns=[r"example\.com"], pre=lambda soup: None)],
        )
        assert len(get_default_registry()) == before


# ---------------------------------------------------------------------------
# Public API imports
# ---------------------------------------------------------------------------

class TestArticleParserImports:
    def test_importable_from_top_level(self):
        from articleparser import ArticleParser as TopArticleParser
        assert TopArticleParser is ArticleParser

    def test_registry_importable(self):
        from articleparser import TransformationRegistry as TopRegistry
        assert TopRegistry is TransformationRegistry

    def test_functions_importable(self):
        from articleparser import extract_batch, extract_from_html, extract_from_url
        assert callable(extract_from_html)
        assert callable(extract_from_url)
        assert callable(extract_batch)
