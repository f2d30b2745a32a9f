"""
Shared test fixtures and utilities for the xtract test suite.
"""

import pytest

from xtract.core.config import DEFAULT_POLICY
from xtract.execution.caches import Histogram
from xtract.execution.walker import process_extract
from xtract.parsing.blocks import parse_arguments
from xtract.records import split_pattern


@pytest.fixture
def extract():
    """Compile a command line and run it over one record.

    Returns a callable taking the record markup followed by the command
    tokens, plus optional keyword arguments forwarded to process_extract.

    Usage:
        def test_something(extract):
            assert extract("<Rec><A>1</A></Rec>", "-pattern", "Rec", "-element", "A") == "1\\n"
    """

    def run(
        xml,
        *tokens,
        index=1,
        policy=DEFAULT_POLICY,
        transform=None,
        searcher=None,
        histogram=None,
        hd="",
        tl="",
    ):
        parent, pattern = split_pattern(tokens[1])
        block = parse_arguments(list(tokens), pattern)
        return process_extract(
            xml,
            parent,
            index,
            hd,
            tl,
            transform,
            searcher,
            histogram,
            block,
            policy=policy,
        )

    return run


@pytest.fixture
def histogram():
    """Fresh histogram for -histogram tests."""
    return Histogram()


@pytest.fixture
def record_set():
    """Set of three records used by the exploration tests."""
    return (
        "<Set>"
        "<Rec><Name>X</Name><Status>Active</Status></Rec>"
        "<Rec><Name>Z</Name><Status>Retired</Status></Rec>"
        "<Rec><Name>Y</Name><Status>Active</Status></Rec>"
        "</Set>"
    )


@pytest.fixture
def numbered_set():
    """Set of five records with Id 1 through 5."""
    return "<Set>" + "".join(f"<Rec><Id>{n}</Id></Rec>" for n in range(1, 6)) + "</Set>"
