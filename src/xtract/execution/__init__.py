"""
Interpreter for compiled xtract Block trees.
"""

from xtract.execution.caches import Histogram, RegexCache, convert_replacement
from xtract.execution.clause import process_clause
from xtract.execution.conditions import conditions_are_satisfied, match_found
from xtract.execution.context import RecordContext
from xtract.execution.instructions import FormatterState, parse_color, process_instructions
from xtract.execution.ranges import send_slice, slice_value
from xtract.execution.walker import (
    encode_non_ascii,
    process_commands,
    process_extract,
    select_positions,
)

__all__ = [
    "FormatterState",
    "Histogram",
    "RecordContext",
    "RegexCache",
    "conditions_are_satisfied",
    "convert_replacement",
    "encode_non_ascii",
    "match_found",
    "parse_color",
    "process_clause",
    "process_commands",
    "process_extract",
    "process_instructions",
    "select_positions",
    "send_slice",
    "slice_value",
]
