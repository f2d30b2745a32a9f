"""
xtract - Compile and run xtract-style extraction queries over XML records

xtract turns a flat command line of exploration, conditional and extraction
flags into a Block tree, then walks that tree over each record to produce
tab-delimited or XML-wrapped text.
"""

from importlib.metadata import version

from xtract.core.config import ExtractConfig, TextPolicy
from xtract.execution.caches import Histogram
from xtract.execution.walker import process_extract
from xtract.parsing.blocks import Block, parse_arguments
from xtract.records import partition_records

__version__ = version("xtract")

__all__ = [
    "__version__",
    "Block",
    "ExtractConfig",
    "Histogram",
    "TextPolicy",
    "parse_arguments",
    "partition_records",
    "process_extract",
]
