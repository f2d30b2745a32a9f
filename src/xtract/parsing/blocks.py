"""
Block model and the exploration-level compiler.

The token stream is partitioned at exploration flags, outermost level
first. Each occurrence of a level's flag opens a sibling Block whose own
tokens run until the next exploration flag; tokens after that are handed
to the next inner level. `parse_arguments` is the single entry point that
turns a command line into a compiled Block tree.
"""

import logging
from dataclasses import dataclass, field

from xtract.core.tokens import (
    ARGUMENT_TYPES,
    DEPRECATED_LEVEL_FLAGS,
    LEVEL_FLAGS,
    find_level_flag,
)
from xtract.core.types import ArgumentType, LevelType
from xtract.exceptions import CommandParseError, ErrorContext, MisplacedCommandError, PatternError
from xtract.parsing.operations import Operation, parse_conditionals, parse_extractions
from xtract.parsing.ranges import split_in_two_left, split_in_two_right

logger = logging.getLogger(__name__)

PATTERN_FLAGS = ("-pattern", "-Pattern")


@dataclass
class Block:
    """
    One compiled exploration scope.

    Params:
        visit: Exploration argument as typed, after slash conversion
        parent: Required parent tag of matched nodes, "" for any
        match: Tag of nodes to visit
        path: Remaining components of a dotted path, one per child level
        position: Positional selection policy, "" meaning all
        foreword: Literal text emitted before the scope's output
        afterword: Literal text emitted after the scope's output
        conditions: Compiled -if/-unless clause
        commands: Compiled extraction clause
        failure: Commands run for nodes failing the conditions (-else)
        subtasks: Nested exploration scopes
        parsed: Raw tokens owned by this scope, kept for diagnostics
    """

    visit: str = ""
    parent: str = ""
    match: str = ""
    path: list[str] = field(default_factory=list)
    position: str = ""
    foreword: str = ""
    afterword: str = ""
    conditions: list[Operation] = field(default_factory=list)
    commands: list[Operation] = field(default_factory=list)
    failure: list[Operation] = field(default_factory=list)
    subtasks: list["Block"] = field(default_factory=list)
    parsed: list[str] = field(default_factory=list)

    def describe(self, depth: int = 0) -> str:
        """Render the Block tree as indented text for debugging."""
        indent = "  " * depth
        lines = [f"{indent}<Visit> {self.visit} </Visit>"]
        if self.position:
            lines.append(f"{indent}  <Position> {self.position} </Position>")
        if self.parsed:
            lines.append(f"{indent}  <Parsed> {' '.join(self.parsed)} </Parsed>")
        for label, operations in (
            ("Conditions", self.conditions),
            ("Commands", self.commands),
            ("Failure", self.failure),
        ):
            for operation in operations:
                lines.append(f"{indent}  <{label}> {operation.describe()}")
        for sub in self.subtasks:
            lines.append(sub.describe(depth + 1))
        return "\n".join(lines)


def _is_level_flag(token: str, level: LevelType) -> bool:
    return token == LEVEL_FLAGS[level] or token == DEPRECATED_LEVEL_FLAGS[level]


def _find_next_level(tokens: list[str], level: int) -> LevelType | None:
    """Return the outermost level at or below `level` that occurs in the tokens."""
    if len(tokens) < 2:
        return None
    while level >= LevelType.UNIT:
        if find_level_flag(tokens, LevelType(level)) is not None:
            return LevelType(level)
        level -= 1
    return None


def _subset_commands(tokens: list[str]) -> tuple[Block, list[str]]:
    """
    Create the Block for one exploration flag and its tokens.

    Returns:
        The new Block and the tokens left over for inner levels
    """
    visit = ""
    if len(tokens) > 1:
        visit = tokens[1]
        tokens = tokens[2:]
    else:
        tokens = []

    partition = len(tokens)
    for cur, token in enumerate(tokens):
        if token.startswith("-") and ARGUMENT_TYPES.get(token) == ArgumentType.EXPLORATION:
            partition = cur
            break

    # parent/child is shorthand for parent.child
    if "/" in visit and "." not in visit:
        visit = visit.replace("/", ".")

    parent, remainder = split_in_two_right(visit, ".")
    match, rest = split_in_two_left(remainder, ".")

    if rest != "":
        # match on the first component, then descend one child level per component
        block = Block(
            visit=visit,
            match=parent,
            path=remainder.split("."),
            position="path",
            parsed=tokens[:partition],
        )
    else:
        block = Block(visit=visit, parent=parent, match=match, parsed=tokens[:partition])

    return block, tokens[partition:]


def _parse_commands(parent: Block, working: list[str], start_level: int) -> None:
    """Recursively partition tokens into nested Blocks."""
    level = _find_next_level(working, start_level)
    if level is None:
        return

    cur = 0
    for idx, token in enumerate(working):
        if _is_level_flag(token, level):
            if idx == 0:
                continue
            block, rest = _subset_commands(working[cur:idx])
            _parse_commands(block, rest, level - 1)
            parent.subtasks.append(block)
            cur = idx

    if cur < len(working):
        block, rest = _subset_commands(working[cur:])
        _parse_commands(block, rest, level - 1)
        parent.subtasks.append(block)


def _split_clauses(tokens: list[str]) -> tuple[list[str], list[str], list[str], bool]:
    """Split a scope's tokens into conditionals, extractions and the -else branch."""
    partition = len(tokens)
    for cur, token in enumerate(tokens):
        if token.startswith("-") and ARGUMENT_TYPES.get(token) != ArgumentType.CONDITIONAL:
            partition = cur
            break

    conditionals = tokens[:partition]
    rest = tokens[partition:]

    found_else = "-else" in rest
    if found_else:
        partition = rest.index("-else")
        extractions = rest[:partition]
        alternative = rest[partition + 1 :]
    else:
        extractions = rest
        alternative = []

    return conditionals, extractions, alternative, found_else


def _locate_error(error: CommandParseError, block: Block, clause: list[str]) -> None:
    """Record where in a scope's clause a grammar error was found."""
    position = clause.index(error.token) if error.token in clause else None
    command = None
    if position is not None:
        command = next((token for token in reversed(clause[: position + 1]) if token.startswith("-")), None)
    error.add_context(ErrorContext(token=error.token, command=command, scope=block.visit, position=position))


def _parse_operations(block: Block, pattern: str) -> None:
    """Compile the clauses of a Block and all of its descendants."""
    conditionals, extractions, alternative, found_else = _split_clauses(block.parsed)

    clause = conditionals
    try:
        block.conditions = parse_conditionals(block, conditionals)
        clause = extractions
        block.commands = parse_extractions(block, extractions, pattern)
        clause = alternative
        block.failure = parse_extractions(block, alternative, pattern)

        clause = block.parsed
        if found_else and (not conditionals or not alternative or block.subtasks):
            raise MisplacedCommandError("-else")
    except CommandParseError as e:
        _locate_error(e, block, clause)
        raise

    for sub in block.subtasks:
        _parse_operations(sub, pattern)


def parse_arguments(tokens: list[str], pattern: str) -> Block:
    """
    Compile a command line into its Block tree.

    Params:
        tokens: Command-line tokens starting at the -pattern flag
        pattern: Name of the record element, used for sequence coordinate lookups

    Returns:
        The Block of the -pattern scope

    Raises:
        PatternError: If there is no -pattern, more than one, or nothing to extract
        CommandParseError: For any other grammar violation
    """
    num_patterns = sum(1 for token in tokens if token in PATTERN_FLAGS)
    if num_patterns < 1:
        raise PatternError("No -pattern in command-line arguments")
    if num_patterns > 1:
        raise PatternError("Only one -pattern command is permitted")

    no_element = True
    for token in tokens:
        if ARGUMENT_TYPES.get(token) == ArgumentType.EXTRACTION or token in ("-select", "-cls", "-slf"):
            no_element = False
            break
    if no_element:
        raise PatternError("No -element statement in argument list")

    head = Block()
    _parse_commands(head, list(tokens), LevelType.PATTERN)

    if len(head.subtasks) != 1:
        raise CommandParseError("Problem parsing command-line arguments")

    top = head.subtasks[0]
    _parse_operations(top, pattern)

    if "-select" in tokens:
        top.position = "select"

    logger.debug("Compiled command line:\n%s", top.describe())

    return top
