"""Main-content and title extraction backed by readability-lxml.

readability-lxml implements Mozilla's Readability scoring; this module only
adapts its API to the shape the pipeline expects (``None`` for "nothing
found").  Documents readability reports as unparseable count as "nothing
found"; any other failure propagates to the caller.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from bs4 import BeautifulSoup
from readability import Document  # type: ignore[import-untyped]
from readability.readability import Unparseable  # type: ignore[import-untyped]

from articleparser.extractors.sanitize import collapse_spaces

logger = logging.getLogger(__name__)


@runtime_checkable
class ContentExtractor(Protocol):
    """Boilerplate remover used by the pipeline."""

    def extract_content(self, html: str, base_url: str) -> str | None:
        """Return an HTML fragment with the main content, or None."""
        ...

    def extract_title(self, html: str, url: str = "", *, document: bool = True) -> str | None:
        """Return the display title of *html*, or None.

        With ``document=False`` *html* is a title string (possibly with
        markup) rather than a whole page.
        """
        ...


class ReadabilityExtractor:
    """:class:`ContentExtractor` over ``readability.Document``."""

    def extract_content(self, html: str, base_url: str) -> str | None:
        if not html or not html.strip():
            return None
        try:
            content = Document(html, url=base_url or None).summary(html_partial=True)
        except Unparseable as exc:
            logger.debug("readability could not parse %s: %s", base_url, exc)
            return None
        if not BeautifulSoup(content, "lxml").get_text().strip():
            return None
        return content

    def extract_title(self, html: str, url: str = "", *, document: bool = True) -> str | None:
        """Return the display title of *html*.

        A title string (``document=False``, e.g. a harvested title) is
        reduced to its text.  Whole documents go through readability's title
        shortening, which drops site-name suffixes when a heading confirms
        the shorter form; a document without a ``<title>`` has no title.
        """
        if not html or not html.strip():
            return None
        soup = BeautifulSoup(html, "lxml")
        title_tag = soup.find("title")
        if title_tag is None:
            if document:
                return None
            return collapse_spaces(soup.get_text()) or None

        fallback = collapse_spaces(title_tag.get_text())
        if not document:
            return fallback or None
        try:
            title = collapse_spaces(Document(html, url=url or None).short_title())
        except Unparseable as exc:
            logger.debug("readability title failed for %s: %s", url or "<html>", exc)
            title = ""
        return title or fallback or None
