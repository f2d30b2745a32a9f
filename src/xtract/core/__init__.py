"""
Core xtract components.

This package provides the closed enumerations, token classification tables
and configuration objects shared by the compiler and interpreter.
"""

from xtract.core.config import DEFAULT_POLICY, ExtractConfig, TextPolicy, load_transform
from xtract.core.tokens import (
    TokenClass,
    argument_type,
    classify_token,
    parse_flag,
)
from xtract.core.types import (
    ArgumentType,
    IndentType,
    LevelType,
    OpType,
    RangeType,
    SequenceEnd,
)

__all__ = [
    "ArgumentType",
    "DEFAULT_POLICY",
    "ExtractConfig",
    "IndentType",
    "LevelType",
    "OpType",
    "RangeType",
    "SequenceEnd",
    "TextPolicy",
    "TokenClass",
    "argument_type",
    "classify_token",
    "load_transform",
    "parse_flag",
]
