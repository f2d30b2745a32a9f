"""
Step model and builders.

A Step is one addressing unit inside an Operation: an optional parent tag,
an element match (possibly a namespace wildcard), an optional attribute,
the retrieval kind selected by a leading sigil, and a range descriptor.
"""

from attrs import frozen

from xtract.core.tokens import SEQUENCE_COORDINATES, is_all_caps_or_digits
from xtract.core.types import INDEXING_OPS, OpType, SequenceEnd
from xtract.exceptions import CommandParseError, ConditionSyntaxError
from xtract.parsing.ranges import (
    NO_RANGE,
    Range,
    parse_range,
    split_in_two_left,
    split_in_two_right,
    split_range,
)

# Single-character extraction items and the tree views they select
SINGLE_CHARACTER_ITEMS: dict[str, OpType] = {
    "?": OpType.QUESTION,
    "~": OpType.TILDE,
    ".": OpType.DOT,
    "%": OpType.PRCNT,
    "*": OpType.STAR,
    "$": OpType.DOLLAR,
    "@": OpType.ATSIGN,
    "+": OpType.INDEX,
}

# Leading sigils shared by conditional and extraction items
ITEM_SIGILS: dict[str, OpType] = {
    "#": OpType.COUNT,
    "%": OpType.LENGTH,
    "^": OpType.DEPTH,
}


@frozen
class Step:
    """
    One addressing unit of an Operation.

    Params:
        op: Retrieval kind, or the constraint code for comparison steps
        value: Item text after sigil removal (the literal for constraints)
        parent: Required parent tag, "" for any
        match: Element name to match
        attrib: Attribute name, "" for element content
        range: Range descriptor applied to each retrieved value
        norm: True when no range is applied
        wild: True when any component carries a leading namespace colon
        unescape: True when retrieved content should be HTML-unescaped
    """

    op: OpType
    value: str = ""
    parent: str = ""
    match: str = ""
    attrib: str = ""
    range: Range = NO_RANGE
    norm: bool = True
    wild: bool = False
    unescape: bool = False


def parse_address(text: str) -> tuple[str, str, str, bool]:
    """
    Split `parent/element@attribute` into its components.

    Returns:
        Tuple of parent, match, attribute and the namespace wildcard flag
    """
    parent, match = split_in_two_right(text, "/")
    match, attrib = split_in_two_left(match, "@")
    wild = parent.startswith(":") or match.startswith(":") or attrib.startswith(":")
    return parent, match, attrib, wild


def split_element_colon_value(text: str) -> tuple[str, str]:
    """
    Split the `element:value` form used by -match and -avoid.

    A colon leading the element name is a namespace wildcard and is not
    treated as the value separator.
    """
    pos = text.find(":")
    while pos >= 0 and (pos == 0 or text[pos - 1] in "/@"):
        pos = text.find(":", pos + 1)
    if pos < 0:
        return text, ""
    return text[:pos], text[pos + 1 :]


def build_condition_step(text: str, element_colon_value: bool) -> list[Step]:
    """
    Build the test step for one conditional item.

    Params:
        text: The item following -if, -unless, -and, -or and friends
        element_colon_value: Accept the `element:value` shorthand

    Returns:
        The test step, followed by an implicit EQUALS step when the
        shorthand carried a value

    Raises:
        CommandParseError: For malformed items
    """
    name, rnge = split_range(text)
    rng = parse_range(name, rnge)

    status = OpType.ELEMENT
    if len(name) > 1:
        lead = name[0]
        if lead == "&":
            if is_all_caps_or_digits(name[1:]):
                status = OpType.VARIABLE
                name = name[1:]
            elif ":" in name:
                raise ConditionSyntaxError(
                    f"Unsupported construct '{name}', use -if &VARIABLE -equals VALUE instead",
                    token=name,
                )
            else:
                raise ConditionSyntaxError(f"Unrecognized variable '{name}'", token=name)
        elif lead in ITEM_SIGILS:
            status = ITEM_SIGILS[lead]
            name = name[1:]
    elif name == "+":
        status = OpType.INDEX

    parent, match, attrib, wild = parse_address(name)

    value = ""
    if element_colon_value:
        address, value = split_element_colon_value(name)
        parent, match = split_in_two_right(address, "/")
        match, attrib = split_in_two_left(match, "@")

    steps = [
        Step(
            op=status,
            value=name,
            parent=parent,
            match=match,
            attrib=attrib,
            range=rng,
            norm=not rng.is_set,
            wild=wild,
        )
    ]

    if value != "":
        steps.append(Step(op=OpType.EQUALS, value=value))

    return steps


def build_element_constraint(op: OpType, text: str, numeric: bool) -> Step:
    """
    Build a constraint step whose right-hand side is another element.

    Params:
        op: Constraint code
        text: Element item, optionally prefixed by #, % or ^
        numeric: Also accept an `&VARIABLE` reference

    Raises:
        ConditionSyntaxError: If the item does not name an element
    """
    if text == "":
        raise ConditionSyntaxError("Empty conditional argument")

    body = text
    if body[0] in ITEM_SIGILS:
        body = body[1:]
        if body == "":
            raise ConditionSyntaxError(
                f"Unexpected {'numeric match' if numeric else 'conditional'} constraints",
                token=text,
            )

    lead = body[0]
    if not (lead.isascii() and lead.isalpha()) and not (numeric and lead == "&"):
        raise ConditionSyntaxError(
            f"Unexpected {'numeric match' if numeric else 'conditional'} constraints",
            token=text,
        )

    parent, match, attrib, wild = parse_address(body)
    return Step(op=op, value=text, parent=parent, match=match, attrib=attrib, wild=wild)


def _sequence_status(status: OpType, item: str, match: str, attrib: str, pattern: str) -> OpType:
    """Convert a coordinate-base flag into ELEMENT, INC or DEC."""
    key = pattern + ":"
    if attrib != "":
        key += "@" + attrib
    elif match != "":
        key += match

    coordinate = SEQUENCE_COORDINATES.get(key)
    if coordinate is None:
        raise CommandParseError(
            f"Element '{item}' is not suitable for sequence coordinate conversion",
            token=item,
        )

    if status == OpType.ZEROBASED:
        return OpType.DEC if coordinate.based == 1 else OpType.ELEMENT
    if status == OpType.ONEBASED:
        return OpType.INC if coordinate.based == 0 else OpType.ELEMENT

    # half-open intervals: start is 0-based, stop is 1-based
    if coordinate.based == 0 and coordinate.which == SequenceEnd.STOP:
        return OpType.INC
    if coordinate.based == 1 and coordinate.which == SequenceEnd.START:
        return OpType.DEC
    return OpType.ELEMENT


def build_extraction_steps(op: OpType, text: str, pattern: str) -> list[Step]:
    """
    Build the steps for one extraction argument.

    Comma-separated items each become their own Step with their own range.

    Params:
        op: The extraction operation code
        text: The argument following the extraction flag
        pattern: Name of the -pattern scope, used for coordinate lookups

    Returns:
        List of Steps in argument order
    """
    steps = []

    for raw in text.split(","):
        status = op

        item, rnge = split_range(raw)
        rng = parse_range(item, rnge)

        if len(item) > 1:
            lead = item[0]
            if lead == "&":
                if is_all_caps_or_digits(item[1:]):
                    status = OpType.VARIABLE
                    item = item[1:]
                else:
                    raise CommandParseError(f"Unrecognized variable '{item}'", token=item)
            elif lead in ITEM_SIGILS:
                status = ITEM_SIGILS[lead]
                item = item[1:]
            elif lead == "*":
                status = OpType.STAR
        elif item in SINGLE_CHARACTER_ITEMS:
            status = SINGLE_CHARACTER_ITEMS[item]

        parent, match, attrib, wild = parse_address(item)

        if status in (OpType.ZEROBASED, OpType.ONEBASED, OpType.UCSCBASED):
            status = _sequence_status(status, item, match, attrib, pattern)

        unescape = status not in INDEXING_OPS and status != OpType.RAW

        steps.append(
            Step(
                op=status,
                value=item,
                parent=parent,
                match=match,
                attrib=attrib,
                range=rng,
                norm=not rng.is_set,
                wild=wild,
                unescape=unescape,
            )
        )

    return steps
