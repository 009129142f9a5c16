"""Project settings and configuration records for articleparser.

Module-level constants hold process defaults.  Per-call configuration lives
in two frozen dataclasses:

- :class:`ParseOptions` - thresholds used by the extraction pipeline.
- :class:`SanitizePolicy` - allow-lists consumed by the HTML sanitizer.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field, fields

from articleparser.errors import InvalidArgumentError

# ---------------------------------------------------------------------------
# Project identity
# ---------------------------------------------------------------------------
BOT_NAME = "articleparser"

# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/115.0"

DOWNLOAD_TIMEOUT = 30

# Retries belong to the fetcher and are off unless a caller asks for them
RETRY_TIMES = 0
RETRY_HTTP_CODES = [500, 502, 503, 504, 408, 429]

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

# ---------------------------------------------------------------------------
# Environment overrides for ParseOptions
# ---------------------------------------------------------------------------
ENV_PREFIX = "ARTICLEPARSER_"


# ---------------------------------------------------------------------------
# Parse options
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParseOptions:
    """Thresholds used while assembling a :class:`~articleparser.items.ParsedContent`.

    Attributes:
        words_per_minute:      Reading speed used for ``ttr``.
        desc_truncate_len:     Max characters of a synthesized description.
        desc_len_threshold:    A harvested description longer than this is
                               used verbatim instead of being synthesized.
        content_len_threshold: Minimum plain-text length of the article body.
    """

    words_per_minute: int = 300
    desc_truncate_len: int = 210
    desc_len_threshold: int = 180
    content_len_threshold: int = 200

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidArgumentError(f"{f.name} must be an int; got {value!r}")
            if value < 0:
                raise InvalidArgumentError(f"{f.name} must be >= 0; got {value}")
        if self.words_per_minute == 0:
            raise InvalidArgumentError("words_per_minute must be > 0")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ParseOptions:
        """Build options from ``ARTICLEPARSER_*`` environment variables.

        Unset variables keep their defaults, e.g.
        ``ARTICLEPARSER_WORDS_PER_MINUTE=250``.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, int] = {}
        for f in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or not raw.strip():
                continue
            try:
                overrides[f.name] = int(raw.strip())
            except ValueError as exc:
                raise InvalidArgumentError(
                    f"{ENV_PREFIX}{f.name.upper()} must be an integer; got {raw!r}",
                ) from exc
        return cls(**overrides)


# ---------------------------------------------------------------------------
# Sanitize policy
# ---------------------------------------------------------------------------

class DisallowedTagsMode(str, enum.Enum):
    """What the sanitizer does with a tag outside the allow-list."""

    DISCARD = "discard"                    # drop the tag, keep its children
    ESCAPE = "escape"                      # render the tag itself as text
    RECURSIVE_ESCAPE = "recursive_escape"  # render the whole subtree as text


def _attrs(mapping: dict[str, tuple[str, ...]]) -> dict[str, frozenset[str]]:
    return {tag: frozenset(names) for tag, names in mapping.items()}


_CONTENT_TAGS: frozenset[str] = frozenset(
    {
        "h1", "h2", "h3", "h4", "h5", "h6",
        "u", "b", "i", "em", "strong", "small", "sup", "sub",
        "div", "span", "p", "article", "blockquote", "section",
        "details", "summary", "pre", "code", "ul", "ol", "li", "dd", "dl",
        "table", "th", "tr", "td", "thead", "tbody", "tfoot", "fieldset", "legend",
        "figure", "figcaption", "img", "picture", "video", "audio", "source",
        "iframe", "progress", "br", "hr", "label", "abbr", "a", "svg",
    },
)

_CONTENT_ATTRIBUTES: dict[str, frozenset[str]] = _attrs(
    {
        "h1": ("id",),
        "h2": ("id",),
        "h3": ("id",),
        "h4": ("id",),
        "h5": ("id",),
        "h6": ("id",),
        "a": ("href", "target", "title"),
        "abbr": ("title",),
        "progress": ("value", "max"),
        "img": ("src", "srcset", "alt", "title"),
        "picture": ("media", "srcset"),
        "video": ("controls", "width", "height", "autoplay", "muted", "loop", "src"),
        "audio": ("controls", "width", "height", "autoplay", "muted", "loop", "src"),
        "source": ("src", "srcset", "data-srcset", "type", "media", "sizes"),
        "iframe": ("src", "frameborder", "height", "width", "scrolling", "allow"),
        "svg": ("width", "height"),
    },
)

_IFRAME_DOMAINS: frozenset[str] = frozenset(
    {
        "youtube.com",
        "vimeo.com",
        "odysee.com",
        "soundcloud.com",
        "audius.co",
        "github.com",
        "codepen.com",
        "twitter.com",
        "facebook.com",
        "instagram.com",
    },
)


@dataclass(frozen=True)
class SanitizePolicy:
    """Allow-list configuration for :func:`articleparser.extractors.sanitize.sanitize`."""

    allowed_tags: frozenset[str] = _CONTENT_TAGS
    allowed_attributes: dict[str, frozenset[str]] = field(
        default_factory=lambda: dict(_CONTENT_ATTRIBUTES),
    )
    allowed_iframe_domains: frozenset[str] = _IFRAME_DOMAINS
    disallowed_tags_mode: DisallowedTagsMode = DisallowedTagsMode.DISCARD
    allow_vulnerable_tags: bool = False
    parse_style_attributes: bool = False
    enforce_html_boundary: bool = False
    preserve_structured_data: bool = False

    def allows_attribute(self, tag: str, attr: str) -> bool:
        allowed = self.allowed_attributes.get(tag, frozenset())
        return attr in allowed or attr in self.allowed_attributes.get("*", frozenset())


DEFAULT_SANITIZE_POLICY = SanitizePolicy()

# Used before metadata harvesting: keeps head-level signals alive while the
# body goes through the same allow-list as extracted content.
DOCUMENT_SANITIZE_POLICY = SanitizePolicy(
    allowed_tags=_CONTENT_TAGS | {"html", "head", "body", "title", "meta", "link"},
    allowed_attributes={
        **_CONTENT_ATTRIBUTES,
        "html": frozenset({"lang"}),
        "meta": frozenset({"name", "property", "itemprop", "content", "charset", "http-equiv"}),
        "link": frozenset({"rel", "href", "type", "sizes", "hreflang"}),
    },
    preserve_structured_data=True,
)
