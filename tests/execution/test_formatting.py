"""
Tests for formatter state handling: wrapping, enclosing and colors.
"""

import pytest

from xtract.exceptions import ExecutionError
from xtract.execution.instructions import FormatterState, parse_color


class TestWrap:
    """Test -wrp argument forms."""

    def test_single_tag(self):
        """Test a tag name sets prefix, suffix and separator."""
        state = FormatterState()
        state.wrap("Name", {})
        assert (state.pfx, state.sfx, state.sep) == ("<Name>", "</Name>", "</Name><Name>")
        assert state.wrp

    def test_tag_path(self):
        """Test a slash-separated path nests the tags."""
        state = FormatterState()
        state.wrap("A/B", {})
        assert state.pfx == "<A><B>"
        assert state.sfx == "</B></A>"

    def test_comma_form(self):
        """Test the older outer,inner form sets the clause tags too."""
        state = FormatterState()
        state.wrap("Set,Rec", {})
        assert (state.plg, state.elg) == ("<Set>", "</Set>")
        assert (state.pfx, state.sfx) == ("<Rec>", "</Rec>")

    def test_variable_tag(self):
        """Test a tag taken from a variable."""
        state = FormatterState()
        state.wrap("&TAG", {"TAG": "Item"})
        assert state.pfx == "<Item>"

    def test_dash_resets(self):
        """Test "-" clears all wrapping."""
        state = FormatterState()
        state.wrap("Name", {})
        state.wrap("-", {})
        assert (state.pfx, state.sfx, state.sep) == ("", "", "\t")
        assert not state.wrp


class TestEnclose:
    """Test -enc argument forms."""

    def test_enclose(self):
        """Test tags written around the whole clause."""
        state = FormatterState()
        state.enclose("Outer/Inner", {})
        assert (state.plg, state.elg) == ("<Outer><Inner>", "</Inner></Outer>")

    def test_enclose_dash(self):
        """Test "-" removes the enclosing tags."""
        state = FormatterState()
        state.enclose("Outer", {})
        state.enclose("-", {})
        assert (state.plg, state.elg) == ("", "")


class TestColor:
    """Test -color styles."""

    def test_plain(self):
        """Test the names that turn styling off."""
        for name in ("-", "reset", "clear"):
            assert parse_color(name) is None

    def test_combined(self):
        """Test comma-separated names combine into one style."""
        style = parse_color("red,bold")
        assert style.color.name == "red"
        assert style.bold

    def test_unknown(self):
        """Test an unknown name is a run-time error."""
        with pytest.raises(ExecutionError, match="purple"):
            parse_color("purple")

    def test_paint(self):
        """Test painted text carries terminal escapes and empty text stays empty."""
        state = FormatterState(style=parse_color("red"))
        painted = state.paint("X")
        assert painted != "X"
        assert "X" in painted
        assert state.paint("") == ""
        assert FormatterState().paint("X") == "X"
