"""Deterministic metadata harvesting from the document head.

Processing order (later writes win within a step):
    <head><title> → <link rel=…> → <meta name|property|itemprop=…> → JSON-LD (gap filling only)
"""

from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import dateparser
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------

class MetaField(str, enum.Enum):
    """Closed set of fields a document can contribute to a :class:`MetaEntry`."""

    URL = "url"
    SHORTLINK = "shortlink"
    AMPHTML = "amphtml"
    CANONICAL = "canonical"
    TITLE = "title"
    DESCRIPTION = "description"
    IMAGE = "image"
    AUTHOR = "author"
    SOURCE = "source"
    PUBLISHED = "published"
    FAVICON = "favicon"
    TYPE = "type"

    @classmethod
    def parse(cls, key: str | None) -> MetaField | None:
        """Map external text (a ``rel`` value, a schema key) to a field, or None."""
        if not key:
            return None
        try:
            return cls(key.strip().lower())
        except ValueError:
            return None


@dataclass
class MetaEntry:
    url: str = ""
    shortlink: str = ""
    amphtml: str = ""
    canonical: str = ""
    title: str = ""
    description: str = ""
    image: str = ""
    author: str = ""
    source: str = ""
    published: str = ""
    favicon: str = ""
    meta_type: str = ""

    def get(self, field: MetaField) -> str:
        return getattr(self, _ATTRIBUTE_NAMES[field])

    def set(self, field: MetaField, value: str) -> None:
        setattr(self, _ATTRIBUTE_NAMES[field], value)

    def to_dict(self) -> dict[str, str]:
        return {f.value: self.get(f) for f in MetaField}


_ATTRIBUTE_NAMES: dict[MetaField, str] = {
    f: ("meta_type" if f is MetaField.TYPE else f.value) for f in MetaField
}

# Accepted name/property/itemprop identifiers per field, in precedence order.
# The first entry containing a tag's identifier claims that tag.
_FIELD_IDENTIFIERS: tuple[tuple[MetaField, frozenset[str]], ...] = (
    (
        MetaField.SOURCE,
        frozenset({"application-name", "og:site_name", "twitter:site", "dc.title"}),
    ),
    (MetaField.URL, frozenset({"og:url", "twitter:url", "parsely-link"})),
    (MetaField.TITLE, frozenset({"title", "og:title", "twitter:title", "parsely-title"})),
    (
        MetaField.DESCRIPTION,
        frozenset(
            {"description", "og:description", "twitter:description", "parsely-description"},
        ),
    ),
    (
        MetaField.IMAGE,
        frozenset(
            {
                "image",
                "og:image",
                "og:image:url",
                "og:image:secure_url",
                "twitter:image",
                "twitter:image:src",
                "parsely-image-url",
            },
        ),
    ),
    (
        MetaField.AUTHOR,
        frozenset(
            {
                "author",
                "creator",
                "og:creator",
                "article:author",
                "twitter:creator",
                "dc.creator",
                "parsely-author",
            },
        ),
    ),
    (
        MetaField.PUBLISHED,
        frozenset(
            {
                "article:published_time",
                "article:modified_time",
                "og:updated_time",
                "dc.date",
                "dc.date.issued",
                "dc.date.created",
                "dc:created",
                "dcterms.date",
                "datepublished",
                "datemodified",
                "updated_time",
                "modified_time",
                "published_time",
                "release_date",
                "date",
                "parsely-pub-date",
            },
        ),
    ),
    (MetaField.TYPE, frozenset({"og:type"})),
)

_FAVICON_RELS: frozenset[str] = frozenset({"icon", "shortcut icon"})

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ISO_CLEANUP_RE = re.compile(r"\s+")


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _parse_date(raw: str | None) -> str | None:
    """Parse a date string to ISO 8601.

    Returns None on failure or when the year falls outside 1990-2099
    (catches epoch defaults like 1970-01-01 and far-future typos).
    """
    if not raw:
        return None
    raw = _ISO_CLEANUP_RE.sub(" ", raw.strip())
    try:
        parsed = dateparser.parse(
            raw,
            settings={
                "RETURN_AS_TIMEZONE_AWARE": True,
                "PREFER_DAY_OF_MONTH": "first",
                "PREFER_LOCALE_DATE_ORDER": False,
            },
        )
        if parsed:
            if not (1990 <= parsed.year <= 2099):
                return None
            return parsed.isoformat()
    except Exception as exc:
        logger.debug("Date parse failed for %r: %s", raw, exc)
    return None


def _meta_identifiers(tag: Tag) -> tuple[str, str]:
    prop = _safe_str(tag.get("property") or tag.get("itemprop")).strip().lower()
    name = _safe_str(tag.get("name")).strip().lower()
    return prop, name


def _field_for_meta(tag: Tag) -> MetaField | None:
    prop, name = _meta_identifiers(tag)
    for field, identifiers in _FIELD_IDENTIFIERS:
        if (prop and prop in identifiers) or (name and name in identifiers):
            return field
    return None


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------

_TYPE_SCHEMAS: frozenset[str] = frozenset(
    {
        "aboutpage",
        "checkoutpage",
        "collectionpage",
        "contactpage",
        "faqpage",
        "itempage",
        "medicalwebpage",
        "profilepage",
        "qapage",
        "realestatelisting",
        "searchresultspage",
        "webpage",
        "website",
        "article",
        "advertisercontentarticle",
        "newsarticle",
        "analysisnewsarticle",
        "askpublicnewsarticle",
        "backgroundnewsarticle",
        "opinionnewsarticle",
        "reportagenewsarticle",
        "reviewnewsarticle",
        "report",
        "satiricalarticle",
        "scholarlyarticle",
        "medicalscholarlyarticle",
        "blogposting",
        "techarticle",
    },
)


def _jsonld_nodes(raw: Any) -> list[dict]:
    """Flatten a parsed JSON-LD payload (object, array or @graph) into nodes."""
    nodes: list[dict] = []
    pending: list[Any] = [raw]
    while pending:
        item = pending.pop(0)
        if isinstance(item, list):
            pending.extend(item)
        elif isinstance(item, dict):
            graph = item.get("@graph")
            if isinstance(graph, list):
                pending.extend(graph)
            if "@type" in item:
                nodes.append(item)
    return nodes


def _node_type(node: dict) -> str | None:
    dtype = node.get("@type")
    candidates = dtype if isinstance(dtype, list) else [dtype]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.lower() in _TYPE_SCHEMAS:
            return candidate
    return None


def _name_of(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return _safe_str(value.get("name"))
    if isinstance(value, list) and value:
        return _name_of(value[0])
    return ""


def _url_of(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return _safe_str(value.get("url") or value.get("contentUrl"))
    if isinstance(value, list) and value:
        return _url_of(value[0])
    return ""


def _jsonld_values(node: dict, dtype: str) -> dict[MetaField, str]:
    return {
        MetaField.TITLE: _safe_str(node.get("headline") or node.get("name")),
        MetaField.DESCRIPTION: _safe_str(node.get("description")),
        MetaField.IMAGE: _url_of(node.get("image")),
        MetaField.AUTHOR: _name_of(node.get("author")),
        MetaField.PUBLISHED: _safe_str(node.get("datePublished")),
        MetaField.TYPE: dtype,
        MetaField.URL: _url_of(node.get("url")),
    }


def _extract_ld_schema(soup: BeautifulSoup, entry: MetaEntry) -> None:
    """Fill empty *entry* fields from JSON-LD blocks.

    Malformed JSON and unexpected shapes are skipped, never raised.
    """
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            raw = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError) as exc:
            logger.debug("Skipping malformed JSON-LD block: %s", exc)
            continue

        for node in _jsonld_nodes(raw):
            dtype = _node_type(node)
            if dtype is None:
                continue
            for field, value in _jsonld_values(node, dtype).items():
                value = value.strip()
                if value and not entry.get(field):
                    entry.set(field, value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_metadata(html: str, soup: BeautifulSoup | None = None) -> MetaEntry:
    """Harvest head-level metadata from *html* into a :class:`MetaEntry`.

    Args:
        html: Raw (ideally document-sanitized) HTML string.
        soup: Pre-parsed BeautifulSoup object.  When provided the HTML is
              not re-parsed.

    Every field is always present; absent signals are empty strings.
    """
    entry = MetaEntry()
    if soup is None:
        if not html or not html.strip():
            return entry
        soup = BeautifulSoup(html, "lxml")

    title_tag = soup.select_one("head > title")
    if title_tag is not None:
        entry.set(MetaField.TITLE, title_tag.get_text().strip())

    for link in soup.find_all("link"):
        if not isinstance(link, Tag):
            continue
        rel = _safe_str(link.get("rel")).strip().lower()
        href = link.get("href")
        if not rel or href is None:
            continue
        href = _safe_str(href).strip()
        field = MetaField.parse(rel)
        if field is not None:
            entry.set(field, href)
        if rel in _FAVICON_RELS:
            entry.set(MetaField.FAVICON, href)

    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        content = meta.get("content")
        if content is None:
            continue
        field = _field_for_meta(meta)
        if field is not None:
            entry.set(field, _safe_str(content).strip())

    _extract_ld_schema(soup, entry)

    if entry.published:
        entry.published = _parse_date(entry.published) or entry.published

    return entry
