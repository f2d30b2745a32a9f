"""
Tests for running compiled Block trees over records.

Covers exploration scopes, -position selection, conditional groups,
variables and the record-level output rules of process_extract.
"""

from typing import NamedTuple

import pytest

from xtract.core.config import TextPolicy
from xtract.exceptions import ExecutionError
from xtract.execution.walker import encode_non_ascii, select_positions


class WalkerTestCase(NamedTuple):
    """Test case for a command line run over a single record."""

    tokens: tuple[str, ...]
    expected: str
    description: str


class TestExploration:
    """Test block exploration and output joining."""

    def test_conditional_block_joins_matches_with_tabs(self, extract, record_set):
        """Test only matching records contribute, joined by tabs on one line."""
        result = extract(
            record_set,
            "-pattern", "Set", "-block", "Rec", "-if", "Status", "-equals", "Active", "-element", "Name",
        )
        assert result == "X\tY\n"

    def test_equals_is_case_insensitive(self, extract, record_set):
        """Test string constraints compare without regard to case."""
        result = extract(
            record_set,
            "-pattern", "Set", "-block", "Rec", "-if", "Status", "-equals", "active", "-element", "Name",
        )
        assert result == "X\tY\n"

    def test_group_sum_per_record(self, extract):
        """Test a reduction within each record's group."""
        record = "<Rec><Score>3</Score><Score>4</Score></Rec>"
        assert extract(record, "-pattern", "Rec", "-group", "Rec", "-sum", "Score") == "7\n"

    def test_group_sum_per_member(self, extract):
        """Test a reduction per member when one record holds several groups."""
        record = (
            "<Set>"
            "<Rec><Score>3</Score><Score>4</Score></Rec>"
            "<Rec><Score>5</Score><Score>1</Score></Rec>"
            "<Rec><Score>2</Score><Score>2</Score></Rec>"
            "</Set>"
        )
        assert extract(record, "-pattern", "Set", "-group", "Rec", "-sum", "Score") == "7\t6\t4\n"

    def test_sibling_blocks_run_in_order(self, extract):
        """Test consecutive blocks at the same level each visit their own nodes."""
        record = "<Rec><Author>Smith</Author><Grant>G1</Grant><Author>Jones</Author></Rec>"
        result = extract(
            record,
            "-pattern", "Rec", "-block", "Grant", "-element", "Grant", "-block", "Author", "-element", "Author",
        )
        assert result == "G1\tSmith\tJones\n"

    def test_dotted_path_exploration(self, extract):
        """Test a dotted exploration path descends one child level per component."""
        record = (
            "<Rec>"
            "<A><B><C>1</C></B><B><C>2</C></B></A>"
            "<C>stray</C>"
            "</Rec>"
        )
        assert extract(record, "-pattern", "Rec", "-block", "A.B.C", "-element", "C") == "1\t2\n"

    def test_no_output_gives_empty_string(self, extract):
        """Test a record that produces nothing returns the empty string."""
        assert extract("<Rec><A>1</A></Rec>", "-pattern", "Rec", "-element", "Missing") == ""

    def test_head_and_tail_wrap_record_output(self, extract):
        """Test per-record head and tail text."""
        result = extract("<Rec><A>1</A></Rec>", "-pattern", "Rec", "-element", "A", hd="<R>", tl="</R>")
        assert result == "<R>1</R>\n"

    def test_select_returns_matching_record_markup(self, extract):
        """Test -select copies the record's own markup."""
        record = "<Rec><A>1</A></Rec>"
        assert extract(record, "-pattern", "Rec", "-select", "A") == record + "\n"
        assert extract(record, "-pattern", "Rec", "-select", "B") == ""

    def test_record_index(self, extract):
        """Test the "+" item reports the record index."""
        assert extract("<Rec><A>1</A></Rec>", "-pattern", "Rec", "-element", "+", index=7) == "7\n"


class TestPositions:
    """Test -position filtering of matched nodes."""

    def test_positions(self, extract, numbered_set):
        """Test every supported -position argument."""
        test_cases = [
            WalkerTestCase(("first",), "1\n", "first match"),
            WalkerTestCase(("last",), "5\n", "last match"),
            WalkerTestCase(("outer",), "1\t5\n", "first and last"),
            WalkerTestCase(("inner",), "2\t3\t4\n", "all but first and last"),
            WalkerTestCase(("even",), "2\t4\n", "even-numbered matches"),
            WalkerTestCase(("odd",), "1\t3\t5\n", "odd-numbered matches"),
            WalkerTestCase(("3",), "3\n", "numbered match"),
            WalkerTestCase(("9",), "", "number past the end"),
            WalkerTestCase(("all",), "1\t2\t3\t4\t5\n", "every match"),
        ]

        for case in test_cases:
            result = extract(
                numbered_set, "-pattern", "Set", "-block", "Rec", "-position", case.tokens[0], "-element", "Id"
            )
            assert result == case.expected, f"Failed for {case.description}"

    def test_unknown_position_raises(self, extract, numbered_set):
        """Test an unrecognized position is reported when the block runs."""
        with pytest.raises(ExecutionError, match="middle"):
            extract(numbered_set, "-pattern", "Set", "-block", "Rec", "-position", "middle", "-element", "Id")

    def test_select_positions_on_plain_items(self):
        """Test the position filter works on any iterator."""
        assert list(select_positions(iter("abcde"), "outer")) == ["a", "e"]
        assert list(select_positions(iter("abcde"), "inner")) == ["b", "c", "d"]
        assert list(select_positions(iter("a"), "outer")) == ["a"]
        assert list(select_positions(iter(""), "last")) == []


class TestConditions:
    """Test -if, -unless, -and, -or and -else."""

    RECORD = "<Rec><A>1</A><B>2</B></Rec>"

    def test_condition_algebra(self, extract):
        """Test the group semantics of the conditional operators."""
        test_cases = [
            WalkerTestCase(("-if", "A", "-and", "B", "-element", "A"), "1\n", "both present"),
            WalkerTestCase(("-if", "A", "-and", "C", "-element", "A"), "", "-and term missing"),
            WalkerTestCase(("-if", "C", "-or", "A", "-element", "A"), "1\n", "-or term present"),
            WalkerTestCase(("-if", "C", "-or", "D", "-element", "A"), "", "no -or term present"),
            WalkerTestCase(("-unless", "A", "-element", "B"), "", "-unless term present"),
            WalkerTestCase(("-unless", "C", "-element", "B"), "2\n", "-unless term missing"),
            WalkerTestCase(("-if", "A", "-lt", "2", "-element", "A"), "1\n", "numeric literal"),
            WalkerTestCase(("-if", "A", "-gt", "1", "-element", "A"), "", "numeric literal failing"),
            WalkerTestCase(("-if", "A", "-lt", "B", "-element", "A"), "1\n", "element-valued constraint"),
            WalkerTestCase(("-if", "#A", "-eq", "1", "-element", "A"), "1\n", "count test"),
            WalkerTestCase(("-if", "A", "-is-not", "2", "-element", "A"), "1\n", "string inequality"),
            WalkerTestCase(("-if", "C", "-element", "A", "-else", "-element", "B"), "2\n", "-else branch"),
        ]

        for case in test_cases:
            result = extract(self.RECORD, "-pattern", "Rec", *case.tokens)
            assert result == case.expected, f"Failed for {case.description}"

    def test_attribute_condition(self, extract):
        """Test conditions on attribute values."""
        record = '<Rec><Id type="pmid">12</Id><Id type="doi">10.1/x</Id></Rec>'
        result = extract(
            record, "-pattern", "Rec", "-block", "Id", "-if", "@type", "-equals", "doi", "-element", "Id"
        )
        assert result == "10.1/x\n"

    def test_string_constraints(self, extract):
        """Test the string and element comparison constraints."""
        record = "<Rec><A>Smith, J.</A><B>beta alpha</B><C>smith, j.</C><D>Jones</D></Rec>"
        test_cases = [
            WalkerTestCase(("-if", "A", "-matches", "smith j", "-element", "D"), "Jones\n", "punctuation ignored"),
            WalkerTestCase(("-if", "A", "-matches", "smith k", "-element", "D"), "", "different words"),
            WalkerTestCase(("-if", "B", "-resembles", "Alpha Beta", "-element", "D"), "Jones\n", "word order ignored"),
            WalkerTestCase(("-if", "B", "-resembles", "alpha gamma", "-element", "D"), "", "different word set"),
            WalkerTestCase(("-if", "A", "-is-equal-to", "C", "-element", "D"), "Jones\n", "same as other element"),
            WalkerTestCase(("-if", "A", "-is-equal-to", "D", "-element", "D"), "", "unlike other element"),
            WalkerTestCase(("-if", "A", "-differs-from", "D", "-element", "D"), "Jones\n", "differs from element"),
            WalkerTestCase(("-if", "A", "-differs-from", "C", "-element", "D"), "", "does not differ"),
            WalkerTestCase(("-if", "D", "-starts-with", "jo", "-element", "D"), "Jones\n", "prefix ignores case"),
            WalkerTestCase(("-if", "D", "-starts-with", "ne", "-element", "D"), "", "not a prefix"),
            WalkerTestCase(("-if", "D", "-is-before", "Kent", "-element", "D"), "Jones\n", "sorts before"),
            WalkerTestCase(("-if", "D", "-is-before", "Adams", "-element", "D"), "", "sorts after"),
        ]

        for case in test_cases:
            result = extract(record, "-pattern", "Rec", *case.tokens)
            assert result == case.expected, f"Failed for {case.description}"

    def test_element_colon_value(self, extract):
        """Test the element:value shorthand of -match and -avoid."""
        record = "<Rec><Status>active</Status><Id>7</Id></Rec>"
        test_cases = [
            WalkerTestCase(("-match", "Status:Active", "-element", "Id"), "7\n", "matching value"),
            WalkerTestCase(("-match", "Status:Retired", "-element", "Id"), "", "other value"),
            WalkerTestCase(("-avoid", "Status:Retired", "-element", "Id"), "7\n", "avoided value absent"),
            WalkerTestCase(("-avoid", "Status:Active", "-element", "Id"), "", "avoided value present"),
        ]

        for case in test_cases:
            result = extract(record, "-pattern", "Rec", *case.tokens)
            assert result == case.expected, f"Failed for {case.description}"

    def test_depth_and_length_items(self, extract):
        """Test ^ and % items in conditions and extractions."""
        record = "<Rec><Name>Alice</Name><Box><Item>x</Item></Box></Rec>"
        test_cases = [
            WalkerTestCase(("-element", "^Item"), "3\n", "depth of nested element"),
            WalkerTestCase(("-element", "^Name"), "2\n", "depth of child element"),
            WalkerTestCase(("-element", "%Name"), "5\n", "length of contents"),
            WalkerTestCase(("-if", "^Item", "-eq", "3", "-element", "Name"), "Alice\n", "depth condition"),
            WalkerTestCase(("-if", "%Name", "-gt", "5", "-element", "Name"), "", "length condition failing"),
            WalkerTestCase(("-if", "Name", "-is-equal-to", "%Name", "-element", "Item"), "", "length as other value"),
            WalkerTestCase(("-if", "%Name", "-eq", "^Item", "-element", "Item"), "", "length against depth"),
            WalkerTestCase(("-if", "#Item", "-lt", "^Item", "-element", "Item"), "x\n", "count below depth"),
        ]

        for case in test_cases:
            result = extract(record, "-pattern", "Rec", *case.tokens)
            assert result == case.expected, f"Failed for {case.description}"


class TestVariables:
    """Test -NAME variables and --NAME accumulators."""

    def test_variable_used_in_condition(self, extract):
        """Test a variable set at record level and tested in a nested block."""
        record = "<Rec><A>1</A><B>2</B></Rec>"
        result = extract(
            record,
            "-pattern", "Rec", "-KEY", "A", "-block", "Rec", "-if", "&KEY", "-equals", "1", "-element", "B",
        )
        assert result == "2\n"

    def test_variable_printed(self, extract):
        """Test printing a variable by name."""
        record = "<Rec><Name>X</Name></Rec>"
        assert extract(record, "-pattern", "Rec", "-NAME", "Name", "-element", "&NAME") == "X\n"

    def test_literal_variable(self, extract):
        """Test a parenthesized literal value."""
        record = "<Rec><Name>X</Name></Rec>"
        assert extract(record, "-pattern", "Rec", "-TXT", "(hello)", "-element", "&TXT") == "hello\n"

    def test_accumulator_joins_values(self, extract):
        """Test an accumulator collects values from several visits."""
        record = "<Rec><A>x</A><A>y</A></Rec>"
        result = extract(
            record, "-pattern", "Rec", "-block", "A", "--ALL", "A", "-block", "Rec", "-element", "&ALL"
        )
        assert result == "x\ty\n"


class TestTextPolicy:
    """Test text-handling toggles applied to whole records."""

    def test_ascii_encodes_output(self, extract):
        """Test non-ASCII output becomes character references."""
        record = "<Rec><Name>café</Name></Rec>"
        assert extract(record, "-pattern", "Rec", "-element", "Name") == "café\n"
        result = extract(record, "-pattern", "Rec", "-element", "Name", policy=TextPolicy(ascii=True))
        assert result == "caf&#xE9;\n"

    def test_encode_non_ascii(self):
        """Test the character reference encoder."""
        assert encode_non_ascii("plain") == "plain"
        assert encode_non_ascii("α-β") == "&#x3B1;-&#x3B2;"
