"""
Evaluation of -if, -unless, -and and -or clauses.

Each -if (or -select, -match) starts a group that succeeds when every -and
term and at least one -or term is found. Each -unless (or -avoid) starts a
group that fails when any of its terms is found. A clause passes only when
all of its groups pass.
"""

from xtract.core.types import (
    ELEMENT_CONSTRAINTS,
    NUMERIC_CONSTRAINTS,
    STRING_CONSTRAINTS,
    OpType,
)
from xtract.document.node import XMLNode, explore_elements
from xtract.execution.ranges import slice_value, to_int
from xtract.parsing.operations import Operation
from xtract.parsing.steps import Step
from xtract.text.normalize import remove_comma_or_semicolon, sort_string_by_words


def _explore(curr: XMLNode, mask: str, step: Step, level: int):
    return explore_elements(curr, mask, step.parent, step.match, step.attrib, step.wild, True, level)


def _test_string(op: OpType, text: str, value: str) -> bool:
    text = text.upper()
    value = value.upper()

    if op == OpType.EQUALS:
        return text == value
    if op == OpType.CONTAINS:
        return value in text
    if op == OpType.INCLUDES:
        return f" {value.strip()} " in f" {text.strip()} "
    if op == OpType.ISWITHIN:
        return text in value
    if op == OpType.STARTSWITH:
        return text.startswith(value)
    if op == OpType.ENDSWITH:
        return text.endswith(value)
    if op == OpType.ISNOT:
        return text != value
    if op == OpType.ISBEFORE:
        return text < value
    if op == OpType.ISAFTER:
        return text > value
    if op == OpType.MATCHES:
        return remove_comma_or_semicolon(text) == value.lower()
    if op == OpType.RESEMBLES:
        return sort_string_by_words(text) == value.lower()
    return False


def _resolve_element_value(curr: XMLNode, mask: str, constraint: Step, level: int, numeric: bool, variables: dict[str, str]) -> str:
    """Replace an element-valued constraint by the value it addresses in the current node."""
    value = constraint.value
    lead = value[0]

    if lead == "#":
        return str(sum(1 for _ in _explore(curr, mask, constraint, level)))
    if lead == "%":
        return str(sum(len(text) for text, _ in _explore(curr, mask, constraint, level)))
    if lead == "^":
        depth = 0
        for _, depth in _explore(curr, mask, constraint, level):
            pass
        return str(depth)
    if numeric and lead == "&":
        if len(value) > 1:
            return variables.get(value[1:], "")
        return value

    for text, _ in _explore(curr, mask, constraint, level):
        if text != "" and (not numeric or to_int(text) is not None):
            value = text
    return value


def _test_constraint(
    text: str,
    constraint: Step | None,
    curr: XMLNode,
    mask: str,
    level: int,
    variables: dict[str, str],
) -> bool:
    if text == "" or constraint is None:
        return False

    op = constraint.op
    value = constraint.value
    addresses_element = constraint.parent != "" or constraint.match != "" or constraint.attrib != ""

    if op in STRING_CONSTRAINTS:
        return _test_string(op, text, value)

    if op in ELEMENT_CONSTRAINTS:
        if addresses_element:
            value = _resolve_element_value(curr, mask, constraint, level, False, variables)
        same = text.upper() == value.upper()
        return same if op == OpType.ISEQUALTO else not same

    if op in NUMERIC_CONSTRAINTS:
        if addresses_element:
            value = _resolve_element_value(curr, mask, constraint, level, True, variables)
        x = to_int(text)
        y = to_int(value)
        if x is None or y is None:
            return False
        if op == OpType.GT:
            return x > y
        if op == OpType.GE:
            return x >= y
        if op == OpType.LT:
            return x < y
        if op == OpType.LE:
            return x <= y
        if op == OpType.EQ:
            return x == y
        if op == OpType.NE:
            return x != y

    return False


def match_found(
    steps: list[Step],
    curr: XMLNode,
    mask: str,
    index: int,
    level: int,
    variables: dict[str, str],
) -> bool:
    """
    Test one conditional term.

    Params:
        steps: The tested item, optionally followed by its constraint
        curr: Node being visited
        mask: Name of the current exploration scope
        index: Index of the node among its matched siblings
        level: Depth of the node
        variables: Current variable table

    Returns:
        True if the item is present and satisfies the constraint
    """
    if not steps:
        return False

    step = steps[0]
    constraint = steps[1] if len(steps) > 1 else None

    def check(text: str) -> bool:
        if constraint is None:
            return True
        sliced = slice_value(text, step.range, variables)
        if sliced is None:
            return False
        return _test_constraint(sliced, constraint, curr, mask, level, variables)

    op = step.op

    if op == OpType.ELEMENT:
        # containers report "", which still counts as present without a constraint
        found = False
        for text, _ in _explore(curr, mask, step, level):
            if check(text):
                found = True
        return found

    if op == OpType.VARIABLE:
        value = variables.get(step.match)
        return value is not None and check(value)

    found = False
    number = ""

    if op == OpType.COUNT:
        count = 0
        for _ in _explore(curr, mask, step, level):
            count += 1
            found = True
        number = str(count)
    elif op == OpType.LENGTH:
        length = 0
        for text, _ in _explore(curr, mask, step, level):
            length += len(text)
            found = True
        number = str(length)
    elif op == OpType.DEPTH:
        depth = 0
        for _, depth in _explore(curr, mask, step, level):
            found = True
        number = str(depth)
    elif op == OpType.INDEX:
        number = str(index)
        found = True

    if number == "":
        return found

    return check(number)


def conditions_are_satisfied(
    conditions: list[Operation],
    curr: XMLNode | None,
    mask: str,
    index: int,
    level: int,
    variables: dict[str, str],
) -> bool:
    """
    Decide whether a node passes a compiled conditional clause.

    An empty clause always passes.
    """
    if curr is None:
        return False

    required = 0
    observed = 0
    forbidden = 0
    is_match = False
    is_avoid = False

    def group_failed() -> bool:
        return (is_match and observed < required) or (is_avoid and forbidden > 0)

    for operation in conditions:
        op = operation.op

        if op in (OpType.SELECT, OpType.IF, OpType.MATCH, OpType.AND, OpType.OR):
            if op in (OpType.SELECT, OpType.IF, OpType.MATCH):
                if group_failed():
                    return False
                required = observed = forbidden = 0
                is_match = True
                is_avoid = False
            if op != OpType.OR:
                required += 1
            if match_found(operation.steps, curr, mask, index, level, variables):
                observed += 1
                # an -and/-or inside an -unless group records a forbidden hit
                forbidden += 1

        elif op in (OpType.UNLESS, OpType.AVOID):
            if group_failed():
                return False
            required = observed = forbidden = 0
            is_match = False
            is_avoid = True
            if match_found(operation.steps, curr, mask, index, level, variables):
                forbidden += 1

    return not group_failed()
