"""
Tree walker and per-record driver.

`process_extract` is the entry point called once per record: it parses the
record, walks the compiled Block tree over it, and returns the record's
complete output.
"""

import logging
from collections.abc import Callable, Iterator
from typing import TypeVar

from xtract.core.config import DEFAULT_POLICY, TextPolicy
from xtract.document.node import XMLNode, explore_nodes, parse_record
from xtract.exceptions import ExecutionError
from xtract.execution.caches import Histogram, RegexCache
from xtract.execution.conditions import conditions_are_satisfied
from xtract.execution.context import RecordContext
from xtract.execution.instructions import process_instructions
from xtract.parsing.blocks import Block
from xtract.search import Searcher

logger = logging.getLogger(__name__)

Visit = tuple[XMLNode, int, int]
T = TypeVar("T")


def _explore_path(curr: XMLNode, path: list[str], index: int, level: int) -> Iterator[Visit]:
    """Descend one child level per path component, numbering the final matches."""
    if not path:
        yield curr, index, level
        return
    name, rest = path[0], path[1:]
    for child in curr.children:
        if child.name == name:
            for visit in _explore_path(child, rest, index, level + 1):
                yield visit
                index = visit[1] + 1


def select_positions(visits: Iterator[T], position: str) -> Iterator[T]:
    """
    Filter matched nodes by a -position argument.

    Params:
        visits: Matched items in document order, such as nodes with their index and depth
        position: "", "all", "first", "last", "outer", "inner", "even", "odd" or a number

    Raises:
        ExecutionError: For any other position
    """
    if position in ("", "all"):
        yield from visits
        return

    if position == "first":
        first = next(visits, None)
        if first is not None:
            yield first
        return

    if position == "last":
        last = None
        for last in visits:
            pass
        if last is not None:
            yield last
        return

    if position == "outer":
        items = list(visits)
        if items:
            yield items[0]
        if len(items) > 1:
            yield items[-1]
        return

    if position == "inner":
        items = list(visits)
        yield from items[1:-1]
        return

    if position in ("even", "odd"):
        keep = position == "odd"
        for visit in visits:
            if keep:
                yield visit
            keep = not keep
        return

    if position.lstrip("+-").isdigit():
        number = int(position)
        for count, visit in enumerate(visits, start=1):
            if count == number:
                yield visit
                return
        return

    raise ExecutionError(f"Unrecognized position '{position}'", value=position)


def process_commands(
    block: Block,
    curr: XMLNode,
    tab: str,
    ret: str,
    index: int,
    level: int,
    context: RecordContext,
    accum: Callable[[str], None],
) -> tuple[str, str]:
    """
    Visit the nodes matched by a Block and run its clauses on each.

    Params:
        block: Compiled exploration scope
        curr: Node to explore below
        tab: Pending tab from earlier output
        ret: Pending line ending from earlier output
        index: Index assigned to the first match
        level: Depth of `curr`
        context: Per-record runtime state
        accum: Receives output text

    Returns:
        Updated pending tab and line ending
    """
    mask = block.match

    if block.foreword:
        accum(block.foreword)

    matches = explore_nodes(curr, block.parent, block.match, index, level)

    if block.position == "path":
        visits: Iterator[Visit] = (
            visit for node, idx, lvl in matches for visit in _explore_path(node, block.path, idx, lvl)
        )
        position = ""
    else:
        visits = matches
        position = block.position

    for node, idx, lvl in select_positions(visits, position):
        if conditions_are_satisfied(block.conditions, node, mask, idx, lvl, context.variables):
            if block.commands:
                tab, ret = process_instructions(block.commands, node, mask, tab, ret, idx, lvl, context, accum)
            for sub in block.subtasks:
                tab, ret = process_commands(sub, node, tab, ret, 1, lvl, context, accum)
        elif block.failure:
            tab, ret = process_instructions(block.failure, node, mask, tab, ret, idx, lvl, context, accum)

    if block.afterword:
        accum(block.afterword)

    return tab, ret


def encode_non_ascii(text: str) -> str:
    """Replace every non-ASCII character by a hexadecimal character reference."""
    if text.isascii():
        return text
    return "".join(ch if ord(ch) < 128 else f"&#x{ord(ch):X};" for ch in text)


def process_extract(
    text: str,
    parent: str,
    index: int,
    hd: str,
    tl: str,
    transform: dict[str, str] | None,
    searcher: Searcher | None,
    histogram: Histogram | None,
    block: Block | None,
    policy: TextPolicy = DEFAULT_POLICY,
    regexes: RegexCache | None = None,
) -> str:
    """
    Run a compiled command line over one record.

    Params:
        text: Markup of the record
        parent: Name of the element enclosing the record in the source
        index: Record number, reported by -element "+"
        hd: Text written before the record's output
        tl: Text written after the record's output
        transform: Lookup table for -translate and related commands
        searcher: Phrase searcher for -classify
        histogram: Shared counts for -histogram
        block: Block tree returned by parse_arguments
        policy: Text-handling toggles
        regexes: Shared compiled-pattern cache for -replace

    Returns:
        The record's output, or "" if nothing was produced
    """
    if not text or block is None:
        return ""

    record = parse_record(text, parent, policy)
    if record is None:
        logger.debug("Record %d could not be parsed", index)
        return ""

    context = RecordContext(
        transform=transform or {},
        searcher=searcher,
        histogram=histogram,
        regexes=regexes if regexes is not None else RegexCache(),
        policy=policy,
    )

    buffer: list[str] = []
    ok = False

    def accum(output: str) -> None:
        nonlocal ok
        if output:
            ok = True
            buffer.append(output)

    if hd:
        buffer.append(hd)

    ret = ""

    if block.position == "select":
        if conditions_are_satisfied(block.conditions, record, block.match, index, 1, context.variables):
            ok = True
            buffer.append(text)
            ret = "\n"
    else:
        _, ret = process_commands(block, record, "", "", index, 1, context, accum)

    if tl:
        buffer.append(tl)

    if ret:
        ok = True
        buffer.append(ret)

    if not ok:
        return ""

    result = "".join(buffer).removeprefix("\n")

    if policy.ascii:
        result = encode_non_ascii(result)

    return result
