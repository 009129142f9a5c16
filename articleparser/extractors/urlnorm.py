"""URL validation, purification and canonical-URL selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING
from urllib.parse import unquote_plus, urljoin, urlparse, urlunparse

from articleparser.errors import InvalidArgumentError
from articleparser.similarity import find_best_match

if TYPE_CHECKING:
    from articleparser.extractors.metadata import MetaEntry

logger = logging.getLogger(__name__)

# Query parameters that only carry campaign / click tracking state.
# Matched case-sensitively, as publishers emit them.
_TRACKING_PARAMS: frozenset[str] = frozenset(
    {
        "CNDID",
        "__twitter_impression",
        "_ga",
        "_gl",
        "_hsenc",
        "_hsmi",
        "_openstat",
        "action_object_map",
        "action_ref_map",
        "action_type_map",
        "amp",
        "dclid",
        "ef_id",
        "fb_action_ids",
        "fb_action_types",
        "fb_ref",
        "fb_source",
        "fbclid",
        "ga_campaign",
        "ga_content",
        "ga_medium",
        "ga_place",
        "ga_source",
        "ga_term",
        "gclid",
        "gclsrc",
        "gs_l",
        "hmb_campaign",
        "hmb_medium",
        "hmb_source",
        "igshid",
        "mbid",
        "mc_cid",
        "mc_eid",
        "mkt_tok",
        "msclkid",
        "mtm_campaign",
        "mtm_medium",
        "mtm_source",
        "oly_anon_id",
        "oly_enc_id",
        "pk_campaign",
        "pk_content",
        "pk_keyword",
        "pk_kwd",
        "pk_medium",
        "pk_source",
        "referrer",
        "s_kwcid",
        "spJobID",
        "spMailingID",
        "spReportId",
        "spUserID",
        "ttclid",
        "twclid",
        "utm_brand",
        "utm_campaign",
        "utm_cid",
        "utm_content",
        "utm_id",
        "utm_int",
        "utm_mailing",
        "utm_medium",
        "utm_name",
        "utm_place",
        "utm_pubreferrer",
        "utm_reader",
        "utm_social",
        "utm_source",
        "utm_swu",
        "utm_term",
        "utm_userid",
        "utm_viz_id",
        "vero_conv",
        "vero_id",
        "wickedid",
        "wt_mc_o",
        "yclid",
        "WT.mc_ev",
        "WT.mc_id",
        "WT.srch",
    },
)

_WEB_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def is_valid_url(url: str | None) -> bool:
    """Return True if *url* is an absolute http(s) URL with a host.

    Bare words (``"null"``), JSON text and non-web schemes are rejected.
    """
    if not url or not isinstance(url, str):
        return False
    candidate = url.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
        _ = parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return parsed.scheme.lower() in _WEB_SCHEMES and bool(host)


def purify(url: str) -> str | None:
    """Strip tracking parameters and the fragment from *url*.

    Returns None when *url* is not a valid URL.  All other query parameters
    are kept in their original order.

    Example:
        https://s/a?q=3&utm_source=x#top → https://s/a?q=3
    """
    if not is_valid_url(url):
        return None
    parsed = urlparse(url.strip())

    # Kept parameters are copied byte for byte; only the key is decoded for the lookup
    kept = [
        segment
        for segment in parsed.query.split("&")
        if segment and unquote_plus(segment.partition("=")[0]) not in _TRACKING_PARAMS
    ]
    query = "&".join(kept)

    return urlunparse(parsed._replace(query=query, fragment=""))


def absolutify(base_url: str, relative_url: str) -> str:
    """Resolve *relative_url* against *base_url*.

    Returns an empty string when *base_url* is not a valid URL or the
    reference cannot be resolved.
    """
    if not is_valid_url(base_url):
        return ""
    try:
        return urljoin(base_url.strip(), (relative_url or "").strip())
    except ValueError as exc:
        logger.debug("Cannot resolve %r against %r: %s", relative_url, base_url, exc)
        return ""


def choose_best_url(candidates: list[str], title: str) -> str:
    """Return the candidate URL most similar to *title*.

    Falls back to the first candidate when similarity ranking is not
    possible (empty title or an empty candidate).
    """
    try:
        return find_best_match(title, candidates).best_match.target
    except InvalidArgumentError as exc:
        logger.debug("URL ranking skipped: %s", exc)
        return candidates[0] if candidates else ""


def gather_candidate_urls(meta: MetaEntry, input_url: str = "") -> list[str]:
    """Collect, validate and purify every URL that may identify the article.

    Order: ``og:url``-style url, shortlink, amphtml, canonical, input URL.
    Duplicates after purification keep their first position.
    """
    purified: list[str] = []
    for candidate in (meta.url, meta.shortlink, meta.amphtml, meta.canonical, input_url):
        cleaned = purify(candidate) if is_valid_url(candidate) else None
        if cleaned:
            purified.append(cleaned)
    return _dedupe(purified)


def _dedupe(urls: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            unique.append(url)
    return unique


def extract_domain(url: str) -> str:
    """Return the host component of a URL, lowercased."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""
