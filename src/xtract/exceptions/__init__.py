"""
xtract exception classes.

This package provides all exception types used by the xtract compiler,
interpreter and command-line driver.
"""

from xtract.exceptions.core import (
    CommandParseError,
    ConditionSyntaxError,
    ConfigurationError,
    ErrorContext,
    ErrorLevel,
    ExecutionError,
    MisplacedCommandError,
    MissingArgumentError,
    PatternError,
    RangeParseError,
    UnrecognizedArgumentError,
    XtractError,
)

__all__ = [
    "XtractError",
    "CommandParseError",
    "ConditionSyntaxError",
    "ConfigurationError",
    "ErrorContext",
    "ErrorLevel",
    "ExecutionError",
    "MisplacedCommandError",
    "MissingArgumentError",
    "PatternError",
    "RangeParseError",
    "UnrecognizedArgumentError",
]
