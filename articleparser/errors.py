"""Exception taxonomy for the extraction pipeline.

Every failure the pipeline can report derives from :class:`ArticleParserError`
so callers can catch the whole family with one ``except`` clause::

    from articleparser import ArticleParserError, extract_from_url

    try:
        article = extract_from_url("https://example.com/post")
    except ArticleParserError as exc:
        print("extraction failed:", exc)
"""

from __future__ import annotations


class ArticleParserError(RuntimeError):
    """Base class for every error raised by articleparser."""


class NullOrEmptyError(ArticleParserError):
    """A required artifact is missing or below its length threshold.

    Attributes:
        field -- name of the missing artifact ("input", "title", "links",
                 "content" or "text content")
    """

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is null or empty")
        self.field = field


class FetchError(ArticleParserError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
        body   -- decoded error body, when the server sent one
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int = 0,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class RequestFailedError(FetchError):
    """The server answered with a 4xx/5xx status code."""

    def __init__(
        self,
        status: int,
        url: str = "",
        reason: str = "",
        body: str | None = None,
    ) -> None:
        message = f"Request failed with status code {status}"
        if url:
            message += f" fetching {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message, url=url, status=status, body=body)


class TransportError(FetchError):
    """Connection, TLS, proxy or decompression failure below the HTTP layer."""


class UnsupportedEncodingError(ArticleParserError):
    """The detected charset label has no known decoder."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Unsupported encoding: {label}")
        self.label = label


class InvalidArgumentError(ArticleParserError, ValueError):
    """Malformed call into the similarity matcher, registry or options."""


class AppError(ArticleParserError):
    """Catch-all for failures not covered by a more specific error."""
