"""articleparser.query - single-document and batch extraction API.

Basic usage::

    from articleparser.query import extract_from_url

    article = extract_from_url("https://example.com/blog/some-post")
    print(article.title)
    print(article.url)          # canonical URL chosen among the candidates
    print(article.description)
    print(article.ttr)          # seconds

    # As a plain dict
    data = extract_from_url("https://example.com/blog/some-post").model_dump()

Pre-fetched HTML::

    from articleparser.query import extract_from_html

    article = extract_from_html(html, "https://example.com/blog/post")

Every failure is an :class:`~articleparser.errors.ArticleParserError`; no
partial record is ever returned.
"""

from __future__ import annotations

import codecs
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from articleparser.errors import (
    AppError,
    ArticleParserError,
    InvalidArgumentError,
    NullOrEmptyError,
    UnsupportedEncodingError,
)
from articleparser.extractors.metadata import MetaEntry, extract_metadata
from articleparser.extractors.readability import ContentExtractor, ReadabilityExtractor
from articleparser.extractors.sanitize import (
    cleanify,
    detect_charset,
    normalize_links,
    sanitize,
    strip_tags,
)
from articleparser.extractors.urlnorm import (
    absolutify,
    choose_best_url,
    extract_domain,
    gather_candidate_urls,
    is_valid_url,
)
from articleparser.fetcher import Fetcher, FetchOptions, UrllibFetcher
from articleparser.items import ParsedContent
from articleparser.reading_time import estimate_reading_time
from articleparser.settings import DOCUMENT_SANITIZE_POLICY, ParseOptions
from articleparser.transformations import TransformationRegistry, get_default_registry

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_readability = ReadabilityExtractor()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_document(raw: bytes) -> str:
    """Decode fetched bytes using the charset the document declares.

    Raises:
        NullOrEmptyError:         *raw* is empty or whitespace only.
        UnsupportedEncodingError: The declared charset has no codec.
    """
    text = raw.decode("utf-8", errors="replace").strip()
    if not text:
        raise NullOrEmptyError("input")

    label = detect_charset(text)
    try:
        codec = codecs.lookup(label)
    except LookupError as exc:
        raise UnsupportedEncodingError(label) from exc
    return raw.decode(codec.name, errors="replace")


# ---------------------------------------------------------------------------
# Assembly helpers
# ---------------------------------------------------------------------------

def _summarize(harvested: str, text: str, options: ParseOptions) -> str:
    if len(harvested) > options.desc_len_threshold:
        return harvested
    return text[:options.desc_truncate_len].replace("\n", " ").strip()


def _source_label(meta: MetaEntry, best_url: str) -> str:
    if meta.source:
        return meta.source
    host = extract_domain(best_url)
    return host.removeprefix("www.")


def _resolve_title(html: str, url: str, meta: MetaEntry, extractor: ContentExtractor) -> str:
    first_pass = extractor.extract_title(meta.title, document=False)
    if not first_pass:
        raise NullOrEmptyError("title")
    return extractor.extract_title(html, url) or first_pass


def _extract(
    html: str,
    url: str,
    options: ParseOptions,
    registry: TransformationRegistry,
    extractor: ContentExtractor,
) -> ParsedContent:
    pure_html = sanitize(html, DOCUMENT_SANITIZE_POLICY)
    meta = extract_metadata(pure_html)

    title = _resolve_title(pure_html, url, meta, extractor)

    links = gather_candidate_urls(meta, url)
    if not links:
        raise NullOrEmptyError("links")
    best_url = choose_best_url(links, title)
    logger.debug("Resolved %s to %s (candidates: %s)", url or "<html>", best_url, links)

    content = registry.run_pre(normalize_links(html, best_url), links)
    extracted = extractor.extract_content(content, best_url)
    if not extracted:
        logger.debug("No main content found for %s", best_url)
        raise NullOrEmptyError("content")
    content = registry.run_post(extracted, links)
    content = cleanify(normalize_links(content, best_url))

    text = strip_tags(content)
    if len(text) < options.content_len_threshold:
        raise NullOrEmptyError("text content")

    return ParsedContent(
        url=best_url,
        title=title,
        description=_summarize(meta.description, text, options),
        links=links,
        image=absolutify(best_url, meta.image) if meta.image else "",
        content=content,
        author=meta.author,
        favicon=absolutify(best_url, meta.favicon) if meta.favicon else "",
        source=_source_label(meta, best_url),
        published=meta.published,
        ttr=estimate_reading_time(text, options.words_per_minute),
        meta_type=meta.meta_type,
    )


# ---------------------------------------------------------------------------
# Main public API
# ---------------------------------------------------------------------------

def extract_from_html(
    html: str,
    url: str,
    options: ParseOptions | None = None,
    *,
    registry: TransformationRegistry | None = None,
    extractor: ContentExtractor | None = None,
) -> ParsedContent:
    """Extract an article record from pre-fetched *html*. No network calls.

    Args:
        html:      Raw HTML of the page.
        url:       URL the page was served from; one of the canonical URL
                   candidates and the fallback for relative links.
        options:   Pipeline thresholds (default :class:`ParseOptions()`).
        registry:  Transformation hooks (default: the process-wide registry).
        extractor: Boilerplate remover (default: readability-lxml).

    Returns:
        :class:`~articleparser.items.ParsedContent` with every field set.

    Raises:
        NullOrEmptyError: title, links, content or text content missing.
        AppError:         An unexpected failure inside a collaborator.
    """
    options = options or ParseOptions()
    if registry is None:
        registry = get_default_registry()
    if extractor is None:
        extractor = _readability

    logger.info("Extracting article from %s", url or "<html>")
    try:
        return _extract(html or "", url or "", options, registry, extractor)
    except ArticleParserError:
        raise
    except Exception as exc:
        raise AppError(f"Extraction failed for {url or '<html>'}: {exc}") from exc


def extract_from_url(
    url: str,
    options: ParseOptions | None = None,
    fetch_options: FetchOptions | None = None,
    *,
    registry: TransformationRegistry | None = None,
    fetcher: Fetcher | None = None,
    extractor: ContentExtractor | None = None,
) -> ParsedContent:
    """Fetch *url* and extract its article record.

    When *url* is not a valid http(s) URL nothing is fetched: the input is
    handed to :func:`extract_from_html` as the document itself.

    Raises:
        RequestFailedError:       The server answered with a 4xx/5xx status.
        TransportError:           The request never produced a response.
        NullOrEmptyError:         Empty body or a missing artifact.
        UnsupportedEncodingError: The declared charset has no codec.
        AppError:                 An unexpected failure inside a collaborator.
    """
    if not is_valid_url(url):
        logger.debug("Not a fetchable URL, treating input as HTML: %.60r", url)
        return extract_from_html(url, url, options, registry=registry, extractor=extractor)

    if fetcher is None:
        fetcher = UrllibFetcher()
    try:
        raw = fetcher.fetch(url, fetch_options)
    except ArticleParserError:
        raise
    except Exception as exc:
        raise AppError(f"Fetcher failed for {url}: {exc}") from exc

    html = decode_document(raw)
    return extract_from_html(html, url, options, registry=registry, extractor=extractor)


# ---------------------------------------------------------------------------
# Batch API
# ---------------------------------------------------------------------------

def extract_batch(
    urls: Sequence[str],
    options: ParseOptions | None = None,
    fetch_options: FetchOptions | None = None,
    *,
    max_workers: int = 8,
    on_error: str = "skip",
    registry: TransformationRegistry | None = None,
    fetcher: Fetcher | None = None,
    extractor: ContentExtractor | None = None,
) -> list[ParsedContent | None]:
    """Run :func:`extract_from_url` over *urls* concurrently.

    Results come back in the same order as *urls* regardless of which
    requests finish first.

    Args:
        on_error: How to handle individual URL failures:
                  ``"skip"`` (default) - omit failed URLs from results;
                  ``"raise"`` - re-raise the first exception;
                  ``"include"`` - keep a ``None`` slot for each failure.

    Raises:
        :class:`~articleparser.errors.InvalidArgumentError`: For unknown
            *on_error* values or a non-positive *max_workers*.
    """
    if on_error not in ("skip", "raise", "include"):
        raise InvalidArgumentError(
            f"on_error must be 'skip', 'raise', or 'include'; got {on_error!r}",
        )
    if max_workers < 1:
        raise InvalidArgumentError(f"max_workers must be >= 1; got {max_workers}")

    results: list[ParsedContent | None] = [None] * len(urls)
    if not urls:
        return results

    def _extract_one(idx: int, url: str) -> tuple[int, ParsedContent | None]:
        try:
            return idx, extract_from_url(
                url,
                options,
                fetch_options,
                registry=registry,
                fetcher=fetcher,
                extractor=extractor,
            )
        except ArticleParserError as exc:
            if on_error == "raise":
                raise
            logger.warning("extract_batch: failed to extract %s: %s", url, exc)
            return idx, None

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_extract_one, i, url): i
            for i, url in enumerate(urls)
        }
        for future in as_completed(futures):
            idx, article = future.result()
            results[idx] = article

    if on_error == "include":
        return results
    return [r for r in results if r is not None]
