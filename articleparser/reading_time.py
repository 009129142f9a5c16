"""Reading-time estimate for extracted article text."""

from __future__ import annotations

import math

from articleparser.errors import InvalidArgumentError


def estimate_reading_time(text: str, words_per_minute: int) -> int:
    """Return the whole number of seconds needed to read *text*.

    Words are whitespace-separated tokens.  The estimate is rounded up, so
    any non-empty text takes at least one second.

    Raises:
        InvalidArgumentError: *words_per_minute* is not positive.
    """
    if words_per_minute <= 0:
        raise InvalidArgumentError(
            f"words_per_minute must be > 0; got {words_per_minute}",
        )
    words = len(text.split()) if text else 0
    if not words:
        return 0
    return math.ceil(words / words_per_minute * 60)
