"""
Command-line compiler for xtract.

Turns a flat token stream into the Block tree executed once per record.
"""

from xtract.parsing.blocks import Block, parse_arguments
from xtract.parsing.operations import Operation, parse_conditionals, parse_extractions
from xtract.parsing.ranges import NO_RANGE, Bound, Range, parse_range, split_range
from xtract.parsing.steps import Step, build_condition_step, build_extraction_steps

__all__ = [
    "Block",
    "Bound",
    "NO_RANGE",
    "Operation",
    "Range",
    "Step",
    "build_condition_step",
    "build_extraction_steps",
    "parse_arguments",
    "parse_conditionals",
    "parse_extractions",
    "parse_range",
    "split_range",
]
