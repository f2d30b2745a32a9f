"""
Multi-pattern phrase search used by the -classify command.
"""

import re
from collections.abc import Callable, Iterable
from typing import Protocol

from xtract.text.normalize import compress_runs_of_spaces

# Callback receives the searched text, the matched pattern and its offset,
# and returns False to stop the search early.
MatchCallback = Callable[[str, str, int], bool]

NON_WORD = re.compile(r"[^0-9A-Za-z]+")


def relax_string(text: str) -> str:
    """Replace every run of punctuation or non-ASCII characters by one space."""
    return compress_runs_of_spaces(NON_WORD.sub(" ", text)).strip()


class Searcher(Protocol):
    """Anything that can report pattern occurrences in a text."""

    def search(self, text: str, callback: MatchCallback) -> None: ...


class PatternSearcher:
    """
    Whole-word, case-insensitive search for many phrases at once.

    Patterns and text are both relaxed so that punctuation differences do
    not prevent a match. Matches are reported in order of their end
    position, overlapping matches included, with the pattern as it was
    originally supplied.

    Params:
        patterns: Phrases to look for
        case_sensitive: Compare without folding case
        whole_word: Require word boundaries on both sides of a match
    """

    def __init__(self, patterns: Iterable[str], case_sensitive: bool = False, whole_word: bool = True):
        self.case_sensitive = case_sensitive
        self.whole_word = whole_word
        self._patterns: dict[str, list[str]] = {}
        for pattern in patterns:
            key = self._prepare(pattern)
            if key.strip() == "":
                continue
            self._patterns.setdefault(key, []).append(pattern)

    def __len__(self) -> int:
        return sum(len(originals) for originals in self._patterns.values())

    def _prepare(self, text: str) -> str:
        text = relax_string(text)
        if not self.case_sensitive:
            text = text.lower()
        if self.whole_word:
            text = f" {text} "
        return text

    def search(self, text: str, callback: MatchCallback) -> None:
        """
        Report every pattern occurrence in the text.

        Params:
            text: Text to search
            callback: Called as callback(prepared_text, pattern, offset)
        """
        if not text or not self._patterns:
            return

        prepared = self._prepare(text)

        hits: list[tuple[int, int, str]] = []
        for key, originals in self._patterns.items():
            start = prepared.find(key)
            while start >= 0:
                for original in originals:
                    hits.append((start + len(key), start, original))
                start = prepared.find(key, start + 1)

        hits.sort(key=lambda hit: (hit[0], hit[1]))
        for _, start, original in hits:
            if not callback(prepared, original, start):
                return
