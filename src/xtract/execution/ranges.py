"""
Range slicing of retrieved values.
"""

import html
import re

from xtract.core.types import RangeType
from xtract.parsing.ranges import Bound, Range
from xtract.text.sequence import reverse_complement

SIGNED_INTEGER = re.compile(r"[+-]?\d+")


def to_int(text: str) -> int | None:
    """Parse an optionally signed decimal integer, None if the text is anything else."""
    if not SIGNED_INTEGER.fullmatch(text):
        return None
    return int(text)


def _variable_value(bound: Bound, variables: dict[str, str]) -> int | None:
    if bound.text == "":
        return None
    value = variables.get(bound.text)
    if value is None:
        return None
    return to_int(value)


def _string_slice(value: str, rng: Range) -> str | None:
    after = rng.left.text
    before = rng.right.text
    if after:
        idx = value.upper().find(after.upper())
        if idx < 0:
            return None
        value = value[idx + len(after) :]
    if before:
        idx = value.upper().find(before.upper())
        if idx < 0:
            return None
        value = value[:idx]
    return value or None


def slice_value(
    value: str,
    rng: Range,
    variables: dict[str, str],
    nucleic: bool = False,
) -> str | None:
    """
    Apply a range to one retrieved value.

    Integer bounds are 1-based and inclusive; a negative right bound counts
    in from the end. Variable bounds add their offset to the variable's
    integer value. For -nucleic a descending range selects the reverse
    complement, and the result is always upper case.

    Params:
        value: Retrieved text
        rng: Range descriptor of the step
        variables: Current variable table, for variable-relative bounds
        nucleic: Apply the -nucleic strand rules

    Returns:
        The selected substring, or None when the range selects nothing
    """
    if not rng.is_set:
        return value

    if rng.left.kind == RangeType.STRINGRANGE or rng.right.kind == RangeType.STRINGRANGE:
        return _string_slice(value, rng)

    lo = 0
    hi = 0

    if rng.left.kind == RangeType.VARIABLERANGE:
        start = _variable_value(rng.left, variables)
        if start is None:
            return None
        lo = start + rng.left.number - 1
    elif rng.left.kind == RangeType.INTEGERRANGE:
        lo = rng.left.number - 1

    if rng.right.kind == RangeType.VARIABLERANGE:
        stop = _variable_value(rng.right, variables)
        if stop is None:
            return None
        stop += rng.right.number
        hi = len(value) + stop + 1 if stop < 0 else stop
    elif rng.right.kind == RangeType.INTEGERRANGE:
        stop = rng.right.number
        hi = len(value) + stop + 1 if stop < 0 else stop

    flip = False
    if nucleic and lo + 1 > hi:
        lo, hi = hi - 1, lo + 1
        flip = True

    if lo == 0 and hi == 0:
        result = value
    elif hi == 0:
        if not 0 < lo < len(value):
            return None
        result = value[lo:]
    elif lo == 0:
        if not 0 < hi <= len(value):
            return None
        result = value[:hi]
    else:
        if not (0 < lo < hi and hi <= len(value)):
            return None
        result = value[lo:hi]

    if result == "":
        return None
    if flip:
        result = reverse_complement(result)
    if nucleic:
        result = result.upper()
    return result


def send_slice(value: str, rng: Range, variables: dict[str, str], escape: bool, nucleic: bool = False) -> str | None:
    """Slice a value and HTML-escape it for wrapped output."""
    result = slice_value(value, rng, variables, nucleic)
    if result is None:
        return None
    if escape:
        result = html.escape(result, quote=False)
    return result
