"""Dice-coefficient string similarity over character bigrams.

Used to decide which of several candidate URLs best matches an article title::

    >>> from articleparser.similarity import compare, find_best_match
    >>> compare("night", "nacht")
    0.25
    >>> find_best_match("hello world", ["hello", "hello world"]).best_match_index
    1
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from articleparser.errors import InvalidArgumentError

_WHITESPACE_RE = re.compile(r"\s+")


class MatchResult(NamedTuple):
    target: str
    rating: float


@dataclass(frozen=True)
class BestMatch:
    ratings: list[MatchResult]
    best_match: MatchResult
    best_match_index: int


def _bigrams(text: str) -> list[str]:
    return [text[i:i + 2] for i in range(len(text) - 1)]


def compare(first: str, second: str) -> float:
    """Return the Dice similarity of *first* and *second* in ``[0, 1]``.

    Whitespace is ignored.  Identical strings score 1.0; a string shorter
    than two characters scores 0.0 against anything it is not equal to.
    """
    first = _WHITESPACE_RE.sub("", first)
    second = _WHITESPACE_RE.sub("", second)

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    remaining = Counter(_bigrams(first))
    intersection = 0
    for bigram in _bigrams(second):
        if remaining[bigram] > 0:
            remaining[bigram] -= 1
            intersection += 1

    return (2.0 * intersection) / (len(first) + len(second) - 2)


def find_best_match(main_string: str, targets: Sequence[str]) -> BestMatch:
    """Rate every string in *targets* against *main_string*.

    The earliest target wins ties.

    Raises:
        InvalidArgumentError: *main_string* is empty, *targets* is empty, or
            any target is empty.
    """
    if not main_string or not targets or not all(targets):
        raise InvalidArgumentError(
            "Bad arguments: first argument should be a non-empty string, "
            "second should be a non-empty sequence of non-empty strings",
        )

    ratings: list[MatchResult] = []
    best_index = 0
    for i, target in enumerate(targets):
        rating = compare(main_string, target)
        ratings.append(MatchResult(target=target, rating=rating))
        if rating > ratings[best_index].rating:
            best_index = i

    return BestMatch(
        ratings=ratings,
        best_match=ratings[best_index],
        best_match_index=best_index,
    )
