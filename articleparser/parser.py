"""articleparser.parser - High-level ArticleParser class.

Bundles parse options, fetch options, a transformation registry and the
collaborators into a single reusable object.

Usage::

    from articleparser import ArticleParser, ParseOptions

    # Simple fetch with defaults
    parser = ArticleParser()
    article = parser.fetch("https://example.com/blog/post")

    # Custom thresholds and a private hook registry
    from articleparser import TransformationRegistry
    parser = ArticleParser(
        options=ParseOptions(words_per_minute=250),
        registry=TransformationRegistry(),
    )

    # Parse pre-fetched HTML (no network)
    article = parser.parse("<html>...</html>", url="https://example.com/post")
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from articleparser.fetcher import FetchOptions, UrllibFetcher
from articleparser.query import extract_batch, extract_from_html, extract_from_url
from articleparser.settings import ParseOptions
from articleparser.transformations import (
    Transformation,
    TransformationRegistry,
    get_default_registry,
)

if TYPE_CHECKING:
    from articleparser.extractors.readability import ContentExtractor
    from articleparser.fetcher import Fetcher
    from articleparser.items import ParsedContent


class ArticleParser:
    """Stateful entry point over :mod:`articleparser.query`.

    All parameters are optional.  ``ArticleParser()`` behaves exactly like
    calling :func:`~articleparser.query.extract_from_url` directly, sharing
    the process-wide transformation registry.

    Args:
        options:       Pipeline thresholds.
        fetch_options: Headers, proxy, timeout and retries for fetching.
        registry:      Transformation hooks.  Pass a fresh
                       :class:`TransformationRegistry` to isolate hook state.
        fetcher:       HTTP client implementing the ``Fetcher`` protocol.
        extractor:     Boilerplate remover implementing ``ContentExtractor``.
    """

    def __init__(
        self,
        options: ParseOptions | None = None,
        fetch_options: FetchOptions | None = None,
        registry: TransformationRegistry | None = None,
        fetcher: Fetcher | None = None,
        extractor: ContentExtractor | None = None,
    ) -> None:
        self.options = options or ParseOptions()
        self.fetch_options = fetch_options or FetchOptions()
        self.registry = registry if registry is not None else get_default_registry()
        self._fetcher = fetcher or UrllibFetcher(self.fetch_options)
        self._extractor = extractor

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def parse(self, html: str, url: str = "") -> ParsedContent:
        """Extract an article from pre-fetched *html* - no network calls."""
        return extract_from_html(
            html, url, self.options, registry=self.registry, extractor=self._extractor,
        )

    def fetch(self, url: str) -> ParsedContent:
        """Fetch *url* with the configured fetch options and extract it."""
        return extract_from_url(
            url,
            self.options,
            self.fetch_options,
            registry=self.registry,
            fetcher=self._fetcher,
            extractor=self._extractor,
        )

    def fetch_batch(
        self,
        urls: Sequence[str],
        *,
        max_workers: int = 8,
        on_error: str = "skip",
    ) -> list[ParsedContent | None]:
        """Fetch and extract *urls* concurrently; see :func:`~articleparser.query.extract_batch`."""
        return extract_batch(
            urls,
            self.options,
            self.fetch_options,
            max_workers=max_workers,
            on_error=on_error,
            registry=self.registry,
            fetcher=self._fetcher,
            extractor=self._extractor,
        )

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def register_transformations(self, transformations: Iterable[Transformation]) -> int:
        return self.registry.register(transformations)

    def unregister_transformations(
        self, patterns: Sequence[str | re.Pattern[str]] | None = None,
    ) -> int:
        return self.registry.unregister(patterns)

    def list_transformations(self) -> list[Transformation]:
        return self.registry.list()
