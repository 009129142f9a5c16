"""Extraction sub-package: metadata harvesting, URL resolution, sanitization, readability."""

from .metadata import MetaEntry, MetaField, extract_metadata
from .readability import ContentExtractor, ReadabilityExtractor
from .sanitize import cleanify, normalize_links, sanitize, strip_tags
from .urlnorm import choose_best_url, gather_candidate_urls, is_valid_url, purify

__all__ = [
    "ContentExtractor",
    "MetaEntry",
    "MetaField",
    "ReadabilityExtractor",
    "choose_best_url",
    "cleanify",
    "extract_metadata",
    "gather_candidate_urls",
    "is_valid_url",
    "normalize_links",
    "purify",
    "sanitize",
    "strip_tags",
]
