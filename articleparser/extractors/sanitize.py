"""Allow-list HTML sanitization and text/markup normalization.

The sanitizer walks a BeautifulSoup tree and applies a
:class:`~articleparser.settings.SanitizePolicy`:

- tags outside ``allowed_tags`` are discarded (children kept) or escaped,
- attributes outside ``allowed_attributes[tag]`` are dropped,
- ``iframe`` elements survive only when their host is allow-listed,
- comments, scripts and styles never survive unless the policy says so.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from articleparser.extractors.urlnorm import absolutify
from articleparser.settings import (
    DEFAULT_SANITIZE_POLICY,
    DisallowedTagsMode,
    SanitizePolicy,
)

logger = logging.getLogger(__name__)

# Tags whose text is never meaningful article content once the tag is gone
_CONTENT_DROPPED_TAGS: frozenset[str] = frozenset({"head", "title", "object", "embed"})

# Raw-text containers; their content goes with them unless the policy
# allows vulnerable tags
_RAW_TEXT_TAGS: frozenset[str] = frozenset(
    {"noscript", "template", "textarea", "option", "xmp"},
)

# Tags that execute or restyle the page; removed with their content unless
# the policy allows vulnerable tags
_VULNERABLE_TAGS: frozenset[str] = frozenset({"script", "style"})

_URL_ATTRIBUTES: frozenset[str] = frozenset({"href", "src", "srcset", "action", "data-srcset"})
_UNSAFE_SCHEMES: tuple[str, ...] = ("javascript:", "vbscript:", "data:")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]+")

_LD_JSON = "application/ld+json"

# Whitespace recognised by the text collapsers: ASCII whitespace, NBSP,
# Unicode space separators, line/paragraph separators and the BOM
_WS_CHARS = (
    r"\s\f\n\r\t\v\x20\xa0"
    r"\u1680\u180e\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)
_WS_RUN_RE = re.compile(f"[{_WS_CHARS}]+")
_WS_ONLY_RE = re.compile(f"^[{_WS_CHARS}]+$")
_MULTI_LINEBREAK_RE = re.compile(r"(?:\r\n|\n|\u2424|\u2028){2,}")

_BLOCK_TAGS: tuple[str, ...] = (
    "p", "div", "section", "article", "blockquote", "pre", "figure", "figcaption",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "dl", "dd", "dt",
    "table", "thead", "tbody", "tfoot", "tr", "td", "th",
    "details", "summary", "fieldset", "legend", "hr", "header", "footer", "main",
)


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------

def _is_unsafe_url(tag_name: str, value: str) -> bool:
    compact = _CONTROL_CHARS_RE.sub("", value).lower()
    if not compact.startswith(_UNSAFE_SCHEMES):
        return False
    # Inline images are harmless where an image is expected
    return not (tag_name in ("img", "source") and compact.startswith("data:image/"))


def _iframe_allowed(tag: Tag, policy: SanitizePolicy) -> bool:
    src = str(tag.get("src") or "").strip()
    if not src:
        return False
    try:
        host = (urlparse(src).hostname or "").lower()
    except ValueError:
        return False
    if not host:
        return False
    return any(
        host == domain or host.endswith("." + domain)
        for domain in policy.allowed_iframe_domains
    )


def _clean_attributes(tag: Tag, policy: SanitizePolicy) -> None:
    name = tag.name.lower()
    for attr in list(tag.attrs):
        key = attr.lower()
        if key == "style" and not policy.parse_style_attributes:
            del tag.attrs[attr]
            continue
        if not policy.allows_attribute(name, key):
            del tag.attrs[attr]
            continue
        value = tag.attrs[attr]
        if key in _URL_ATTRIBUTES and isinstance(value, str) and _is_unsafe_url(name, value):
            del tag.attrs[attr]


def _open_tag_text(tag: Tag) -> str:
    parts = [tag.name]
    for key, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        parts.append(f'{key}="{value}"')
    return "<" + " ".join(parts) + ">"


def _escape_tag(tag: Tag, policy: SanitizePolicy) -> None:
    _clean_children(tag, policy)
    tag.insert_before(NavigableString(_open_tag_text(tag)))
    if not tag.is_empty_element:
        tag.insert_after(NavigableString(f"</{tag.name}>"))
    tag.unwrap()


def _clean_tag(tag: Tag, policy: SanitizePolicy) -> None:
    name = tag.name.lower()

    if name in _VULNERABLE_TAGS:
        if (
            name == "script"
            and policy.preserve_structured_data
            and str(tag.get("type") or "").strip().lower() == _LD_JSON
        ):
            tag.attrs = {"type": _LD_JSON}
            return
        if not policy.allow_vulnerable_tags:
            tag.decompose()
            return

    if name not in policy.allowed_tags:
        if name in _CONTENT_DROPPED_TAGS or (
            name in _RAW_TEXT_TAGS and not policy.allow_vulnerable_tags
        ):
            tag.decompose()
        elif policy.disallowed_tags_mode is DisallowedTagsMode.RECURSIVE_ESCAPE:
            tag.replace_with(NavigableString(str(tag)))
        elif policy.disallowed_tags_mode is DisallowedTagsMode.ESCAPE:
            _escape_tag(tag, policy)
        else:
            _clean_children(tag, policy)
            tag.unwrap()
        return

    if name == "iframe" and not _iframe_allowed(tag, policy):
        logger.debug("Dropping iframe with src %r", tag.get("src"))
        tag.decompose()
        return

    _clean_attributes(tag, policy)
    _clean_children(tag, policy)


def _clean_children(node: Tag, policy: SanitizePolicy) -> None:
    for child in list(node.children):
        if isinstance(child, PreformattedString):
            # comments, CDATA, doctypes, processing instructions
            child.extract()
        elif isinstance(child, Tag):
            _clean_tag(child, policy)


def _unwrap_implied(soup: BeautifulSoup, html: str) -> None:
    # lxml wraps fragments in <html><body>; drop wrappers the input never had
    lowered = html.lower()
    for name in ("html", "body"):
        if f"<{name}" in lowered:
            continue
        tag = soup.find(name)
        if isinstance(tag, Tag):
            tag.unwrap()


def sanitize(html: str, policy: SanitizePolicy = DEFAULT_SANITIZE_POLICY) -> str:
    """Return *html* filtered through the allow-lists in *policy*."""
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "lxml")
    _unwrap_implied(soup, html)

    if policy.enforce_html_boundary:
        root = soup.find("html")
        if root is not None:
            for sibling in list(soup.contents):
                if sibling is not root:
                    sibling.extract()

    _clean_children(soup, policy)
    return str(soup)


# ---------------------------------------------------------------------------
# Charset
# ---------------------------------------------------------------------------

def detect_charset(html: str) -> str:
    """Return the charset declared by *html*, lower-cased (default ``"utf8"``).

    ``<meta charset>`` wins over ``<meta http-equiv="content-type">``.
    """
    if not html:
        return "utf8"
    soup = BeautifulSoup(html, "lxml")

    meta = soup.find("meta", charset=True)
    if isinstance(meta, Tag):
        charset = str(meta.get("charset") or "").strip()
        if charset:
            return charset.lower()

    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        if str(meta.get("http-equiv") or "").strip().lower() != "content-type":
            continue
        for part in str(meta.get("content") or "").split(";"):
            key, _, value = part.strip().partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip("'\"").lower()

    return "utf8"


# ---------------------------------------------------------------------------
# Text cleanup
# ---------------------------------------------------------------------------

def collapse_linebreaks(text: str) -> str:
    """Collapse runs of line breaks to one and drop blank lines."""
    collapsed = _MULTI_LINEBREAK_RE.sub("\n", text)
    lines = (
        line.strip() if _WS_ONLY_RE.match(line) else line
        for line in collapsed.split("\n")
    )
    return "\n".join(line for line in lines if line)


def collapse_spaces(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WS_RUN_RE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Markup normalization
# ---------------------------------------------------------------------------

def normalize_links(html: str, base_url: str) -> str:
    """Make anchor and image URLs in *html* absolute against *base_url*.

    Anchors also get ``target="_blank"``.  Images prefer ``data-src``
    (lazy-loading placeholders) over ``src``.
    """
    soup = BeautifulSoup(html or "", "lxml")

    for anchor in soup.find_all("a"):
        if not isinstance(anchor, Tag):
            continue
        href = anchor.get("href")
        if href is not None:
            absolute = absolutify(base_url, str(href))
            if absolute:
                anchor["href"] = absolute
        anchor["target"] = "_blank"

    for img in soup.find_all("img"):
        if not isinstance(img, Tag):
            continue
        src = str(img.get("data-src") or img.get("src") or "").strip()
        if not src:
            continue
        img["src"] = absolutify(base_url, src) or src

    return str(soup)


def cleanify(html: str, policy: SanitizePolicy = DEFAULT_SANITIZE_POLICY) -> str:
    """Sanitize the inner markup of ``<html>`` and collapse its whitespace."""
    soup = BeautifulSoup(html or "", "lxml")
    root = soup.find("html")
    inner = root.decode_contents() if isinstance(root, Tag) else str(soup)

    sanitized = sanitize(inner, policy)
    return collapse_spaces(collapse_linebreaks(sanitized))


def strip_tags(html: str) -> str:
    """Return the plain text of *html*, one line per block element."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")

    for el in soup.find_all(["script", "style", "noscript", "template"]):
        el.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for el in soup.find_all(_BLOCK_TAGS):
        el.insert_before("\n")
        el.insert_after("\n")

    lines = [collapse_spaces(line) for line in soup.get_text().split("\n")]
    return collapse_linebreaks("\n".join(lines))
