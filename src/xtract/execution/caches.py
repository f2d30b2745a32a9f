"""
Shared state crossing concurrent record-processing calls.

Both caches guard every read-modify-write with one lock, so a single
instance can be handed to any number of worker threads.
"""

import re
import threading
from collections.abc import Iterator

from xtract.text.normalize import is_all_digits

GROUP_REFERENCE = re.compile(r"\$\{?(\d+)\}?")


def convert_replacement(expansion: str) -> str:
    """Translate `$1` / `${1}` group references into Python's `\\g<1>` form."""
    return GROUP_REFERENCE.sub(r"\\g<\1>", expansion.replace("\\", "\\\\"))


class RegexCache:
    """Compiled regular expressions keyed by pattern text."""

    def __init__(self):
        self._lock = threading.Lock()
        self._compiled: dict[str, re.Pattern | None] = {}

    def get(self, pattern: str) -> re.Pattern | None:
        """
        Return the compiled pattern, compiling it on first use.

        Returns:
            The compiled expression, or None if the pattern is invalid
        """
        with self._lock:
            if pattern in self._compiled:
                return self._compiled[pattern]
            try:
                compiled = re.compile(pattern)
            except re.error:
                compiled = None
            self._compiled[pattern] = compiled
            return compiled

    def __len__(self) -> int:
        with self._lock:
            return len(self._compiled)


def _histogram_order(key: str) -> tuple:
    # numbers sort by value (shorter first), before any text
    if is_all_digits(key):
        return (0, len(key), key)
    return (1, 0, key)


class Histogram:
    """Occurrence counts of extracted values."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}

    def increment(self, key: str, amount: int = 1) -> int:
        with self._lock:
            count = self._counts.get(key, 0) + amount
            self._counts[key] = count
            return count

    def __getitem__(self, key: str) -> int:
        with self._lock:
            return self._counts.get(key, 0)

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            keys = list(self._counts)
        return iter(keys)

    def report(self) -> str:
        """Format all counts as `count<TAB>value` lines in value order."""
        with self._lock:
            items = sorted(self._counts.items(), key=lambda item: _histogram_order(item[0]))
        return "".join(f"{count}\t{key}\n" for key, count in items)
