"""
Tests for command-line token classification.
"""

import logging
from typing import NamedTuple

from xtract.core.tokens import (
    classify_token,
    find_level_flag,
    is_all_caps_or_digits,
    parse_flag,
)
from xtract.core.types import ArgumentType, LevelType, OpType


class FlagCase(NamedTuple):
    """Test case for flag lookup."""

    token: str
    op: OpType
    is_extraction: bool
    description: str


class TestParseFlag:
    """Test mapping tokens to operation codes."""

    def test_flags(self):
        """Test known flags, variables, accumulators and plain values."""
        test_cases = [
            FlagCase("-element", OpType.ELEMENT, True, "extraction command"),
            FlagCase("-sep", OpType.SEP, False, "customization"),
            FlagCase("-if", OpType.IF, False, "conditional"),
            FlagCase("-KEY", OpType.VARIABLE, True, "variable"),
            FlagCase("-X1", OpType.VARIABLE, True, "variable with digit"),
            FlagCase("--ALL", OpType.ACCUMULATOR, True, "accumulator"),
            FlagCase("-bogus", OpType.UNRECOGNIZED, False, "unknown flag"),
            FlagCase("-", OpType.UNRECOGNIZED, False, "lone dash"),
            FlagCase("Name", OpType.UNSET, False, "plain value"),
        ]
        for case in test_cases:
            assert parse_flag(case.token) == (case.op, case.is_extraction), f"Failed for {case.description}"


class TestClassifyToken:
    """Test token categories."""

    def test_categories(self):
        """Test each category is reported."""
        assert classify_token("-block").category == ArgumentType.EXPLORATION
        assert classify_token("-block").op == OpType.UNSET
        assert classify_token("-Block").category == ArgumentType.EXPLORATION
        assert classify_token("-equals").category == ArgumentType.CONDITIONAL
        assert classify_token("-first").category == ArgumentType.EXTRACTION
        assert classify_token("-tab").category == ArgumentType.CUSTOMIZATION

    def test_variables_are_extractions(self):
        """Test variable references count as extraction commands."""
        result = classify_token("-KEY")
        assert result.category == ArgumentType.EXTRACTION
        assert result.is_extraction

    def test_values_have_no_category(self):
        """Test plain values are not flags."""
        assert classify_token("Name").category is None


class TestFindLevelFlag:
    """Test detection of exploration levels in a command line."""

    def test_lower_case(self):
        """Test the lower-case spelling is found."""
        tokens = ["-pattern", "Rec", "-block", "A", "-element", "B"]
        assert find_level_flag(tokens, LevelType.BLOCK) == "-block"
        assert find_level_flag(tokens, LevelType.GROUP) is None

    def test_deprecated_spelling(self, caplog):
        """Test the capitalized spelling is accepted with a warning."""
        with caplog.at_level(logging.WARNING):
            assert find_level_flag(["-Block", "A"], LevelType.BLOCK) == "-block"
        assert "deprecated" in caplog.text


class TestIsAllCapsOrDigits:
    """Test the variable-name character check."""

    def test_names(self):
        """Test upper-case letters and digits only."""
        assert is_all_caps_or_digits("KEY1")
        assert not is_all_caps_or_digits("Key")
        assert not is_all_caps_or_digits("KEY_1")
