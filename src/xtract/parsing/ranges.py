"""
Parser for the optional range suffix attached to addressable items.

Three forms are accepted inside the brackets:

    Name[2:5]          1-based inclusive integer bounds, either side optional
    Name[&START+1:&STOP]  variable-relative bounds with integer offsets
    Name[after|before] case-insensitive string delimiters
"""

from attrs import frozen

from xtract.core.types import RangeType
from xtract.exceptions import RangeParseError


@frozen
class Bound:
    """One side of a range: kind, variable or delimiter text, integer value."""

    kind: RangeType = RangeType.NORANGE
    text: str = ""
    number: int = 0

    @property
    def is_set(self) -> bool:
        return self.kind != RangeType.NORANGE or self.text != "" or self.number != 0


NO_BOUND = Bound()


@frozen
class Range:
    """Range descriptor for a Step."""

    left: Bound = NO_BOUND
    right: Bound = NO_BOUND

    @property
    def is_set(self) -> bool:
        return self.left.is_set or self.right.is_set

    @property
    def is_string(self) -> bool:
        return self.left.kind == RangeType.STRINGRANGE


NO_RANGE = Range()


def split_in_two_left(text: str, sep: str) -> tuple[str, str]:
    """Split at the first separator; the whole text goes left if absent."""
    left, found, right = text.partition(sep)
    if not found:
        return text, ""
    return left, right


def split_in_two_right(text: str, sep: str) -> tuple[str, str]:
    """Split at the first separator; the whole text goes right if absent."""
    left, found, right = text.partition(sep)
    if not found:
        return "", text
    return left, right


def split_range(item: str) -> tuple[str, str]:
    """
    Separate an item from its bracketed range suffix.

    Returns:
        Tuple of the trimmed item and the trimmed range text following the
        opening bracket (still carrying its closing bracket), or "" if none.
    """
    name, rnge = split_in_two_left(item, "[")
    name = name.strip()
    rnge = rnge.strip()
    if name == "" and rnge != "":
        raise RangeParseError(f"[{rnge}", "Variable missing in range specification")
    return name, rnge


def _parse_offset(item: str, text: str) -> Bound:
    """Parse `NAME`, `NAME+n` or `NAME-n` following an ampersand."""
    if text == "" or text[0] == " ":
        raise RangeParseError(f"&{text}", "Unrecognized variable")

    name, plus = split_in_two_left(text, "+")
    name, minus = split_in_two_left(name, "-")

    offset = 0
    if plus != "":
        try:
            offset = int(plus)
        except ValueError:
            raise RangeParseError(f"&{name}+{plus}", "Unrecognized range adjustment") from None
    elif minus != "":
        try:
            offset = -int(minus)
        except ValueError:
            raise RangeParseError(f"&{name}-{minus}", "Unrecognized range adjustment") from None

    return Bound(RangeType.VARIABLERANGE, name, offset)


def _parse_integer(item: str, text: str, must_be_positive: bool) -> Bound:
    """Parse a literal integer bound."""
    try:
        value = int(text)
    except ValueError:
        raise RangeParseError(f"{item}[{text}:]", "Unrecognized range component") from None

    if must_be_positive and value < 1:
        raise RangeParseError(f"{item}[{text}:]", "Range component must be positive")
    if not must_be_positive and value == 0:
        raise RangeParseError(f"{item}[:{text}]", "Range component must not be zero")

    return Bound(RangeType.INTEGERRANGE, "", value)


def parse_range(item: str, rnge: str) -> Range:
    """
    Parse the text after an item's opening bracket into a Range.

    Params:
        item: The item name, used in diagnostics
        rnge: Range text including the closing bracket, or "" for none

    Returns:
        The parsed Range, or NO_RANGE when rnge is empty

    Raises:
        RangeParseError: For any malformed range
    """
    if rnge == "":
        return NO_RANGE

    if not rnge.endswith("]"):
        raise RangeParseError(rnge, "Unrecognized range")

    rnge = rnge[:-1]
    if rnge == "":
        raise RangeParseError(f"{item}[]", "Empty range")

    if "|" in rnge:
        # spacing matters for string delimiters
        left, right = split_in_two_left(rnge, "|")
        if left == "" and right == "":
            raise RangeParseError(f"{item}[|]", "Empty range")
        return Range(
            Bound(RangeType.STRINGRANGE, left),
            Bound(RangeType.STRINGRANGE, right),
        )

    if ":" not in rnge:
        raise RangeParseError(f"{item}[{rnge}]", "Colon missing in range")

    left, right = split_in_two_left(rnge, ":")
    left = left.strip()
    right = right.strip()

    if left == "" and right == "":
        raise RangeParseError(f"{item}[:]", "Empty range")

    lft = NO_BOUND
    if left != "":
        if left[0] == "&":
            lft = _parse_offset(item, left[1:])
        else:
            lft = _parse_integer(item, left, must_be_positive=True)

    rgt = NO_BOUND
    if right != "":
        if right[0] == "&":
            rgt = _parse_offset(item, right[1:])
        else:
            rgt = _parse_integer(item, right, must_be_positive=False)

    return Range(lft, rgt)
