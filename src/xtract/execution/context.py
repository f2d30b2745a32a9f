"""
Per-record runtime state handed through the executor.
"""

from dataclasses import dataclass, field

from xtract.core.config import DEFAULT_POLICY, TextPolicy
from xtract.execution.caches import Histogram, RegexCache
from xtract.search import Searcher


@dataclass
class RecordContext:
    """
    Everything an extraction needs besides the node being visited.

    The variable table is private to one record; the remaining members are
    read-only or internally synchronized and may be shared by every record
    of a run.

    Params:
        variables: Values recorded by -NAME and --NAME commands
        transform: Lookup table for -translate, -matrix, -meshcode and -classify
        searcher: Phrase searcher used by -classify
        histogram: Counts collected by -histogram
        regexes: Compiled -reg patterns for -replace
        policy: Text-handling toggles
    """

    variables: dict[str, str] = field(default_factory=dict)
    transform: dict[str, str] = field(default_factory=dict)
    searcher: Searcher | None = None
    histogram: Histogram | None = None
    regexes: RegexCache = field(default_factory=RegexCache)
    policy: TextPolicy = DEFAULT_POLICY
