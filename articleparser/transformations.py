"""articleparser.transformations - per-site hooks around content extraction.

A :class:`Transformation` pairs URL patterns with an optional *pre* hook
(run on the full document before boilerplate removal) and an optional *post*
hook (run on the extracted fragment).  Hooks receive a BeautifulSoup tree and
may mutate it in place (return ``None``) or return a replacement tree.

Usage::

    from articleparser import Transformation, register_transformations

    def drop_related(soup):
        for el in soup.select(".related-posts"):
            el.decompose()

    register_transformations([
        Transformation(patterns=[r"https?://(www\\.)?example\\.com/.*"], pre=drop_related),
    ])
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from bs4 import BeautifulSoup

from articleparser.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

Hook = Callable[[BeautifulSoup], "BeautifulSoup | None"]


@dataclass(frozen=True)
class Transformation:
    """URL patterns plus the hooks to run for matching documents.

    *patterns* may hold strings or compiled regexes; strings are compiled on
    construction and an invalid one raises :class:`InvalidArgumentError`.
    """

    patterns: tuple[re.Pattern[str], ...] = ()
    pre: Hook | None = None
    post: Hook | None = None

    def __post_init__(self) -> None:
        compiled: list[re.Pattern[str]] = []
        for pattern in self.patterns:
            if isinstance(pattern, re.Pattern):
                compiled.append(pattern)
                continue
            try:
                compiled.append(re.compile(pattern))
            except (re.error, TypeError) as exc:
                raise InvalidArgumentError(
                    f"Invalid transformation pattern {pattern!r}: {exc}",
                ) from exc
        object.__setattr__(self, "patterns", tuple(compiled))

    @property
    def pattern_strings(self) -> frozenset[str]:
        return frozenset(p.pattern for p in self.patterns)

    def matches(self, urls: Iterable[str]) -> bool:
        return any(p.search(url) for url in urls for p in self.patterns)


class TransformationRegistry:
    """Ordered, thread-safe collection of :class:`Transformation` entries.

    The lock guards the entry list only; hooks always run outside it so a
    slow or re-entrant hook cannot block other extractions.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[Transformation] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def register(self, transformations: Iterable[Transformation]) -> int:
        """Append *transformations*; return how many were added.

        Entries without patterns can never match and are skipped.
        """
        accepted = [t for t in transformations if t.patterns]
        with self._lock:
            self._entries.extend(accepted)
        logger.debug("Registered %d transformation(s)", len(accepted))
        return len(accepted)

    def unregister(self, patterns: Sequence[str | re.Pattern[str]] | None = None) -> int:
        """Remove entries and return how many were removed.

        ``None`` clears the registry.  Otherwise every entry that shares at
        least one pattern string with *patterns* is removed.
        """
        with self._lock:
            if patterns is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed

            targets = {p.pattern if isinstance(p, re.Pattern) else p for p in patterns}
            kept = [t for t in self._entries if not (t.pattern_strings & targets)]
            removed = len(self._entries) - len(kept)
            self._entries = kept
            return removed

    def list(self) -> list[Transformation]:
        with self._lock:
            return list(self._entries)

    def find_matching(self, urls: Iterable[str]) -> list[Transformation]:
        """Return the entries whose patterns match any of *urls*, in registration order."""
        urls = list(urls)
        with self._lock:
            entries = list(self._entries)
        return [t for t in entries if t.matches(urls)]

    def run_pre(self, html: str, urls: Iterable[str]) -> str:
        return self._run(html, urls, "pre")

    def run_post(self, html: str, urls: Iterable[str]) -> str:
        return self._run(html, urls, "post")

    def _run(self, html: str, urls: Iterable[str], stage: str) -> str:
        hooks = [
            hook
            for hook in (getattr(t, stage) for t in self.find_matching(urls))
            if hook is not None
        ]
        if not hooks:
            return html

        soup = BeautifulSoup(html, "lxml")
        for hook in hooks:
            try:
                result = hook(soup)
            except Exception as exc:
                logger.warning(
                    "%s-transformation %r failed, skipping: %s",
                    stage, getattr(hook, "__name__", hook), exc,
                )
                continue
            if result is not None:
                soup = result
        return str(soup)


# ---------------------------------------------------------------------------
# Process-wide default registry
# ---------------------------------------------------------------------------

_default_registry = TransformationRegistry()


def get_default_registry() -> TransformationRegistry:
    """Return the registry used when no explicit one is passed."""
    return _default_registry


def register_transformations(transformations: Iterable[Transformation]) -> int:
    """Add *transformations* to the default registry."""
    return _default_registry.register(transformations)


def unregister_transformations(
    patterns: Sequence[str | re.Pattern[str]] | None = None,
) -> int:
    """Remove entries from the default registry (all of them when *patterns* is None)."""
    return _default_registry.unregister(patterns)


def list_transformations() -> list[Transformation]:
    """Return a snapshot of the default registry."""
    return _default_registry.list()
