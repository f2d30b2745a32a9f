"""
Record partitioning.

Splits a stream of XML text into the top-level records named by a -pattern
argument, without building a document tree. Records nested inside a record
of the same name stay part of the outer record. The `Parent/*` form yields
every element directly below each Parent element instead.
"""

import logging
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import TextIO

from xtract.exceptions import PatternError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


class TagKind(Enum):
    """Kinds of tags seen by the record scanner."""

    START = "start"
    STOP = "stop"
    SELF = "self"


def split_pattern(text: str) -> tuple[str, str]:
    """
    Split a -pattern argument into the enclosing parent and record names.

    Params:
        text: "Record", "Parent/Record", "Parent/*" or "*"

    Returns:
        Parent name ("" if none) and record name ("*" for any element)

    Raises:
        PatternError: If either side is empty or the argument is a flag
    """
    if text == "":
        raise PatternError("Item missing after -pattern command")
    if text.startswith("-"):
        raise PatternError(f"Misplaced {text} command")

    parent, found, record = text.partition("/")
    if not found:
        return "", text
    if parent == "" or record == "":
        raise PatternError(f"Incomplete -pattern argument '{text}'")
    return parent, record


def _tag_name(tag: str) -> str:
    """Element name of a tag such as "<name attr='x'>" or "</name>"."""
    body = tag[1:-1].lstrip("/").rstrip("/")
    end = 0
    while end < len(body) and not body[end].isspace():
        end += 1
    return body[:end]


class RecordPartitioner:
    """
    Incremental splitter fed with chunks of text.

    Complete records are returned from `feed` as soon as their closing tag
    has been seen, so memory use is bounded by the largest record rather
    than the whole input.

    Params:
        pattern: Record element name, or "*" for any element
        parent: Element enclosing the records, "" for none
    """

    def __init__(self, pattern: str, parent: str = ""):
        self.pattern = pattern
        self.parent = parent
        self._buffer = ""
        self._pos = 0
        self._begin = -1
        self._depth = 0
        # depth of the elements currently inside a parent element, None outside one
        self._anchor: int | None = None if parent else 0
        self._level = 0

    def _next_tag(self) -> tuple[TagKind | None, int, int] | None:
        """
        Locate the next element tag after the scan position.

        Returns:
            Kind, start and end of the tag, with kind None for comments and
            declarations, or None when the buffer holds no complete tag
        """
        text = self._buffer
        start = text.find("<", self._pos)
        if start < 0:
            self._pos = len(text)
            return None

        if text.startswith("<!--", start):
            end = text.find("-->", start + 4)
            return None if end < 0 else (None, start, end + 3)
        if text.startswith("<![CDATA[", start):
            end = text.find("]]>", start + 9)
            return None if end < 0 else (None, start, end + 3)

        end = text.find(">", start + 1)
        if end < 0:
            return None
        end += 1

        if text[start + 1] in "?!":
            return None, start, end
        if text[start + 1] == "/":
            return TagKind.STOP, start, end
        if text[end - 2] == "/":
            return TagKind.SELF, start, end
        return TagKind.START, start, end

    def _scan(self) -> Iterator[str]:
        while True:
            found = self._next_tag()
            if found is None:
                return
            kind, start, end = found
            self._pos = end
            if kind is None:
                continue
            name = _tag_name(self._buffer[start:end])
            if self.pattern == "*":
                yield from self._visit_star(kind, name, start, end)
            else:
                yield from self._visit_named(kind, name, start, end)

    def _visit_named(self, kind: TagKind, name: str, start: int, end: int) -> Iterator[str]:
        if self.parent:
            self._track_parent(kind, name)
            if self._anchor is None:
                return

        if name != self.pattern:
            return

        if kind == TagKind.SELF:
            if self._level == 0:
                yield self._buffer[start:end]
        elif kind == TagKind.START:
            if self._level == 0:
                self._begin = start
            self._level += 1
        elif self._level > 0:
            self._level -= 1
            if self._level == 0:
                yield self._buffer[self._begin : end]
                self._begin = -1

    def _track_parent(self, kind: TagKind, name: str) -> None:
        """Follow entry into and exit from parent elements."""
        if kind == TagKind.START:
            if self._anchor is None and name == self.parent:
                self._anchor = self._depth + 1
            self._depth += 1
        elif kind == TagKind.STOP:
            self._depth -= 1
            if self._anchor is not None and self._depth == self._anchor - 1 and name == self.parent:
                self._anchor = None

    def _visit_star(self, kind: TagKind, name: str, start: int, end: int) -> Iterator[str]:
        if kind == TagKind.SELF:
            if self._anchor is not None and self._depth == self._anchor:
                yield self._buffer[start:end]
            return

        if kind == TagKind.START:
            if self._anchor is not None and self._depth == self._anchor:
                self._begin = start
            elif self._anchor is None and name == self.parent:
                self._anchor = self._depth + 1
            self._depth += 1
            return

        self._depth -= 1
        if self._anchor is None:
            return
        if self._depth == self._anchor and self._begin >= 0:
            yield self._buffer[self._begin : end]
            self._begin = -1
        elif self.parent and self._depth == self._anchor - 1:
            self._anchor = None

    def _compact(self) -> None:
        """Drop text that can no longer be part of a record."""
        keep = self._begin if self._begin >= 0 else self._pos
        if keep > 0:
            self._buffer = self._buffer[keep:]
            self._pos -= keep
            if self._begin >= 0:
                self._begin = 0

    def feed(self, chunk: str) -> list[str]:
        """
        Add text and collect the records it completes.

        Params:
            chunk: Next piece of the input

        Returns:
            Records completed by this chunk, in input order
        """
        self._buffer += chunk
        records = list(self._scan())
        self._compact()
        return records

    def close(self) -> None:
        """Report an unterminated record left at the end of the input."""
        if self._begin >= 0:
            logger.warning("Input ended inside an unterminated <%s> record", self.pattern)
        self._buffer = ""
        self._pos = 0
        self._begin = -1


def partition_records(chunks: Iterable[str], pattern: str, parent: str = "") -> Iterator[str]:
    """
    Yield each record found in a sequence of text chunks.

    Params:
        chunks: Input text, in pieces of any size
        pattern: Record element name, or "*" for every element below `parent`
            (or every top-level element when there is no parent)
        parent: Element enclosing the records, "" for none

    Returns:
        Iterator over record text, in document order
    """
    partitioner = RecordPartitioner(pattern, parent)
    for chunk in chunks:
        yield from partitioner.feed(chunk)
    partitioner.close()


def read_chunks(stream: TextIO, size: int = CHUNK_SIZE) -> Iterator[str]:
    """Read a text stream in fixed-size pieces."""
    while True:
        chunk = stream.read(size)
        if not chunk:
            return
        yield chunk
