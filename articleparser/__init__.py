"""articleparser - turn any web page into a normalized article record.

Quick single-URL usage::

    from articleparser import extract_from_url

    article = extract_from_url("https://example.com/blog/some-post")
    print(article.title)
    print(article.url)
    print(article.content)

Pre-fetched HTML::

    from articleparser import extract_from_html

    article = extract_from_html(html, "https://example.com/blog/some-post")

Per-site hooks::

    from articleparser import Transformation, register_transformations

    def drop_newsletter(soup):
        for el in soup.select(".newsletter"):
            el.decompose()

    register_transformations([
        Transformation(patterns=[r"https?://example\\.com/"], pre=drop_newsletter),
    ])
"""

from articleparser.errors import (
    AppError,
    ArticleParserError,
    FetchError,
    InvalidArgumentError,
    NullOrEmptyError,
    RequestFailedError,
    TransportError,
    UnsupportedEncodingError,
)
from articleparser.fetcher import FetchOptions, UrllibFetcher, fetch_bytes
from articleparser.items import ParsedContent
from articleparser.parser import ArticleParser
from articleparser.query import extract_batch, extract_from_html, extract_from_url
from articleparser.settings import ParseOptions
from articleparser.transformations import (
    Transformation,
    TransformationRegistry,
    get_default_registry,
    list_transformations,
    register_transformations,
    unregister_transformations,
)

__version__ = "0.1.0"
__all__ = [
    "AppError",
    "ArticleParser",
    "ArticleParserError",
    "FetchError",
    "FetchOptions",
    "InvalidArgumentError",
    "NullOrEmptyError",
    "ParseOptions",
    "ParsedContent",
    "RequestFailedError",
    "Transformation",
    "TransformationRegistry",
    "TransportError",
    "UnsupportedEncodingError",
    "UrllibFetcher",
    "extract_batch",
    "extract_from_html",
    "extract_from_url",
    "fetch_bytes",
    "get_default_registry",
    "list_transformations",
    "register_transformations",
    "unregister_transformations",
]
