"""
Value production for a single extraction command.

`process_clause` retrieves the values addressed by an Operation's Steps,
applies the command's transform or reduction, and joins the results with
the current separator between the pending tab, prefix and suffix.
"""

import base64
import binascii
import html
import math
import re
import statistics
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from xtract.core.types import IndentType, OpType
from xtract.document.node import XMLNode, explore_elements
from xtract.document.printers import print_asn_tree, print_json_tree, print_xml_tree
from xtract.execution.caches import convert_replacement
from xtract.execution.context import RecordContext
from xtract.execution.ranges import send_slice, to_int
from xtract.parsing.ranges import split_in_two_right
from xtract.parsing.steps import Step
from xtract.text import citations
from xtract.text.normalize import (
    clean_prose,
    compress_runs_of_spaces,
    has_combining_accent,
    has_invisible_unicode,
    is_all_digits_or_period,
    is_stop_word,
    prepare_for_indexing,
    sort_string_by_words,
    stem,
    trim_trailing_punctuation,
)
from xtract.text.sequence import (
    ncbi2na_to_iupac,
    ncbi4na_to_iupac,
    pad_numeric_id,
    parse_hgvs,
    protein_weight,
    reverse_complement,
)

if TYPE_CHECKING:
    from xtract.execution.instructions import FormatterState

WORD_BREAK = re.compile(r"[\W_]+")
ALNUM_BREAK = re.compile(r"[^0-9A-Za-z]+")
CLAUSE_BREAK = re.compile(r"[.,;:]+")
# punctuation other than space and underscore, and any non-ASCII character
INDEX_BREAK = re.compile(r"[^0-9A-Za-z _]+")
PAIR_BREAK = re.compile(r"[^0-9A-Za-z ]+")
TITLE_WORD = re.compile(r"[^\W_]+(?:'[^\W_]+)*")

FASTA_LINE = 70

INDEX_LABELS = {
    OpType.INDICES: "TIAB",
    OpType.ARTICLE: "TITL",
    OpType.ABSTRACT: "ABST",
    OpType.PARAGRAPH: "TEXT",
    OpType.STEMMED: "STEM",
}

PROSE_MODES = {
    OpType.BASIC: "basic",
    OpType.PLAIN: "plain",
    OpType.SIMPLE: "simple",
    OpType.AUTHOR: "author",
    OpType.PROSE: "prose",
}

MESH_TREE_LETTERS = frozenset("acdefgz")


@dataclass
class Clause:
    """What a command handler can see besides the retrieved values."""

    status: OpType
    state: "FormatterState"
    context: RecordContext

    @property
    def wrapped(self) -> bool:
        return self.state.wrp


Handler = Callable[[list[str], Clause], tuple[list[str], bool]]


def _retrieve(
    curr: XMLNode,
    steps: list[Step],
    mask: str,
    status: OpType,
    index: int,
    level: int,
    clause: Clause,
) -> Iterator[str]:
    """Yield the raw values addressed by each Step in turn."""
    context = clause.context
    variables = context.variables
    mixed = context.policy.mixed

    for step in steps:

        def explore() -> Iterator[tuple[str, int]]:
            return explore_elements(
                curr,
                mask,
                step.parent,
                step.match,
                step.attrib,
                step.wild,
                step.unescape,
                level,
                mixed,
            )

        escape = clause.wrapped and step.op != OpType.REPLACE
        nucleic = status == OpType.NUCLEIC

        def sliced(value: str) -> Iterator[str]:
            result = send_slice(value, step.range, variables, escape, nucleic)
            if result is not None:
                yield result

        op = step.op

        if op in (OpType.VARIABLE, OpType.ACCUMULATOR):
            value = variables.get(step.match)
            if value is not None:
                yield from sliced(value)

        elif op in (OpType.NUM, OpType.COUNT):
            yield str(sum(1 for _ in explore()))

        elif op == OpType.LENGTH:
            yield str(sum(len(text) for text, _ in explore()))

        elif op == OpType.DEPTH:
            for _, depth in explore():
                yield str(depth)

        elif op == OpType.INDEX:
            yield str(index)

        elif op in (OpType.INC, OpType.DEC):
            delta = 1 if op == OpType.INC else -1
            for text, _ in explore():
                number = to_int(text) if text else None
                if number is not None:
                    yield str(number + delta)

        elif op == OpType.QUESTION:
            yield curr.name

        elif op == OpType.TILDE:
            yield curr.contents

        elif op == OpType.DOT:
            text = print_asn_tree(curr)
            if text:
                yield text.removesuffix("\n")

        elif op == OpType.PRCNT:
            text = print_json_tree(curr)
            if text:
                yield text.removesuffix("\n")

        elif op == OpType.STAR:
            style = step.value.count("*")
            style = min(max(style, IndentType.COMPACT), IndentType.WRAPPED)
            text = print_xml_tree(curr, IndentType(style), "@" not in step.value)
            if text:
                yield text

        elif op == OpType.DOLLAR:
            for child in curr.children:
                yield child.name

        elif op == OpType.ATSIGN:
            yield from curr.attribs[0::2]

        else:
            for text, _ in explore():
                if text != "":
                    yield from sliced(text)


# handlers over individual values


def _per_value(transform: Callable[[str, Clause], str | None]) -> Handler:
    """Apply a transform to each non-empty value; None drops the value."""

    def handler(values: list[str], clause: Clause) -> tuple[list[str], bool]:
        items = []
        for value in values:
            if value == "":
                continue
            result = transform(value, clause)
            if result is not None:
                items.append(result)
        return items, bool(items)

    return handler


def _per_value_many(split: Callable[[str, Clause], list[str]]) -> Handler:
    """Expand each non-empty value into zero or more items."""

    def handler(values: list[str], clause: Clause) -> tuple[list[str], bool]:
        items = []
        for value in values:
            if value:
                items.extend(split(value, clause))
        return items, bool(items)

    return handler


def _identity(text: str, clause: Clause) -> str:
    return text


def _encode(text: str, clause: Clause) -> str:
    return text if clause.wrapped else html.escape(text, quote=False)


def _decode(text: str, clause: Clause) -> str | None:
    try:
        return base64.b64decode(text, validate=True).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return None


def _title(text: str, clause: Clause) -> str:
    return TITLE_WORD.sub(lambda m: m.group(0).capitalize(), text.lower())


def _alnum(text: str, clause: Clause) -> str | None:
    text = compress_runs_of_spaces(" ".join(ALNUM_BREAK.split(text)).strip())
    return text or None


def _prose(text: str, clause: Clause) -> str:
    return clean_prose(text, PROSE_MODES[clause.status], clause.wrapped)


def _page(text: str, clause: Clause) -> str | None:
    return citations.first_page(text) or None


def _trim(text: str, clause: Clause) -> str | None:
    return citations.trim_leading_zero(text) or None


def _translate(text: str, clause: Clause) -> str | None:
    return clause.context.transform.get(text)


def _replace(text: str, clause: Clause) -> str | None:
    regex = clause.context.regexes.get(clause.state.reg)
    if regex is None:
        return None
    result = regex.sub(convert_replacement(clause.state.exp), text)
    if result == "":
        return None
    return html.escape(result, quote=False) if clause.wrapped else result


def _accented(text: str, clause: Clause) -> str | None:
    return text if not text.isascii() else None


def _pad(text: str, clause: Clause) -> str:
    return pad_numeric_id(text)


def _molwt(text: str, clause: Clause) -> str:
    return protein_weight(text, trim_leading_met=True)


def _logarithm(text: str, clause: Clause) -> str | None:
    number = to_int(text)
    if number is None or number <= 0:
        return None
    if clause.status == OpType.LG2:
        result = math.log2(number)
    elif clause.status == OpType.LGE:
        result = math.log(number)
    else:
        result = math.log10(number)
    return str(int(result))


def _radix(text: str, clause: Clause) -> str | None:
    number = to_int(text)
    if number is None:
        return None
    code = {OpType.BIN: "b", OpType.OCT: "o", OpType.HEX: "X"}[clause.status]
    return format(number, code)


def _bit_count(text: str, clause: Clause) -> str | None:
    number = to_int(text)
    if number is None:
        return None
    return str(bin(number & 0xFFFFFFFFFFFFFFFF).count("1"))


def _simple(fn: Callable[[str], str]) -> Callable[[str, Clause], str]:
    return lambda text, clause: fn(text)


# handlers producing several items per value


def _words(text: str, clause: Clause, reverse: bool = False) -> list[str]:
    policy = clause.context.policy
    words = [word for word in WORD_BREAK.split(text) if word]
    if reverse:
        words.reverse()
    items = []
    for word in words:
        word = word.lower()
        if policy.stop and is_stop_word(word):
            continue
        if policy.stem:
            word = stem(word)
        if word:
            items.append(word)
    return items


def _terms(text: str, clause: Clause) -> list[str]:
    return [term for term in (trim_trailing_punctuation(item) for item in text.split()) if term]


def _clauses(text: str, clause: Clause) -> list[str]:
    return [item.lower().strip() for item in CLAUSE_BREAK.split(text) if item.strip()]


def _pairs(text: str, clause: Clause) -> list[str]:
    """Adjacent word pairs within each punctuation-delimited phrase; -pairx keeps isolated words."""
    policy = clause.context.policy
    single = clause.status == OpType.PAIRX
    if single:
        text = prepare_for_indexing(text)

    words: list[str | None] = []
    for phrase in PAIR_BREAK.split(text):
        words.extend(word for word in WORD_BREAK.split(phrase) if word)
        # None marks a phrase boundary
        words.append(None)

    if sum(1 for word in words if word is not None) < 2:
        return []

    items = []
    past = ""
    run = 0
    for word in words:
        if word is not None:
            word = word.lower()
        if word is None or (policy.stop and is_stop_word(word)):
            if single and run == 1 and past:
                items.append(past)
            past = ""
            run = 0
            continue
        if policy.stem:
            word = stem(word)
        if word == "":
            past = ""
            continue
        if past:
            items.append(past + " " + word)
        past = word
        run += 1
    return items


def _fasta(text: str, clause: Clause) -> list[str]:
    return [text[i : i + FASTA_LINE].upper() for i in range(0, len(text), FASTA_LINE)]


def _test(text: str, clause: Clause) -> list[str]:
    state = clause.state
    suffix = f" in {state.exp}" if state.reg == "" and state.exp != "" else ""
    items = []
    if has_combining_accent(text):
        items.append("Combining Accent" + suffix)
    if has_invisible_unicode(text):
        items.append("Invisible Unicode" + suffix)
    return items


def _scan(text: str, clause: Clause) -> list[str]:
    for ch in text:
        if ch == "ß":
            return ["0x00DF"]
        if ch == "β":
            return ["0x03B2"]
    return []


def _classify(text: str, clause: Clause) -> list[str]:
    searcher = clause.context.searcher
    if searcher is None:
        return []
    transform = clause.context.transform
    keywords: set[str] = set()

    def found(_text: str, pattern: str, _pos: int) -> bool:
        result = transform.get(pattern.strip(), "")
        if result:
            for item in result.split(","):
                tag, value = split_in_two_right(item, ":")
                keywords.add(f"<{tag}>{value}</{tag}>" if tag else value)
        return True

    searcher.search(text, found)
    return sorted(keywords)


# handlers over the whole list of values


def _first(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    single = next((value for value in values if value != ""), "")
    return ([single] if single else []), bool(values)


def _last(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    single = values[-1] if values else ""
    return ([single] if single else []), bool(values)


def _backward(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    items = [value for value in reversed(values) if value]
    return items, bool(items)


def _integers(values: list[str]) -> list[int]:
    return [number for number in map(to_int, values) if number is not None]


def _total_length(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    if not values:
        return [], False
    return [str(sum(len(value) for value in values))], True


def _reduction(reduce: Callable[[list[int]], int | None], minimum: int = 1, exact: int | None = None) -> Handler:
    """Combine all integer values into one number."""

    def handler(values: list[str], clause: Clause) -> tuple[list[str], bool]:
        numbers = _integers(values)
        if exact is not None and len(numbers) != exact:
            return [], False
        if len(numbers) < minimum:
            return [], False
        result = reduce(numbers)
        if result is None:
            return [], False
        return [str(result)], True

    return handler


def _truncated_divide(a: int, b: int) -> int | None:
    if b == 0:
        return None
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _truncated_modulo(a: int, b: int) -> int | None:
    quotient = _truncated_divide(a, b)
    if quotient is None:
        return None
    return a - b * quotient


def _deviation(numbers: list[int]) -> int:
    return int(statistics.stdev(numbers))


def _running_sum(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    items = []
    total = 0
    for number in _integers(values):
        total += number
        items.append(str(total))
    return items, bool(items)


def _year(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    for value in values:
        year = citations.extract_year(value) if value else ""
        if year:
            return [year], True
    return [], False


def _month(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    for value in values:
        month = citations.extract_month(value) if value else ""
        if month:
            return [month], True
    return [], False


def _date(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    year = month = day = ""
    for value in values:
        if value:
            year, month, day = citations.extract_date(value)
    state = clause.state
    separator = state.exp if state.reg == "/" and state.exp != "" else "/"
    text = citations.format_date(year, month, day, separator)
    return ([text] if text else []), bool(text)


def _word_count(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    count = sum(len(_words(value, clause)) for value in values if value)
    return ([str(count)] if count else []), count > 0


def _indices(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    """Build a positional term index, padding positions between values."""
    stop = clause.context.policy.stop
    positions: dict[str, list[str]] = {}
    cumulative = 0

    for value in values:
        if value == "" or value == "[Not Available].":
            continue

        cleaned = prepare_for_indexing(value)
        words = " ".join(INDEX_BREAK.split(cleaned)).split()

        for word in words:
            cumulative += 1
            if is_all_digits_or_period(word):
                continue
            if stop and is_stop_word(word):
                continue
            if clause.status == OpType.STEMMED:
                word = stem(word)
            positions.setdefault(word, []).append(str(cumulative))

        # keep words of adjacent values out of proximity range
        rounded = ((cumulative + 99) // 100) * 100
        if rounded - cumulative < 20:
            rounded += 100
        cumulative = rounded

    if not positions:
        return [], False

    label = INDEX_LABELS.get(clause.status, "TITL")
    parts = []
    for term in sorted(positions):
        if term.strip() == "":
            continue
        parts.append(f'<{label} pos="{",".join(positions[term])}">{term}</{label}>')
    return ["".join(parts)], True


def _meshcode(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    transform = clause.context.transform
    codes: set[str] = set()
    trees: set[str] = set()
    for value in values:
        if value == "":
            continue
        codes.add(value.lower())
        mapped = transform.get(value)
        if mapped is None:
            continue
        for item in mapped.lower().replace(".", "_").split(","):
            if item and item[0] in MESH_TREE_LETTERS:
                trees.add(item)
    if not codes:
        return [], False
    text = "".join(f"<CODE>{code}</CODE>" for code in sorted(codes))
    text += "".join(f"<TREE>{tree}</TREE>" for tree in sorted(trees))
    return [text], True


def _matrix(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    transform = clause.context.transform
    items = sorted(transform.get(value, value) for value in values if value)
    if len(items) < 2:
        return [], bool(items)
    pairs = [f"{a}\t{b}" for i, a in enumerate(items) for j, b in enumerate(items) if i != j]
    return ["\n".join(pairs)], True


def _histogram(values: list[str], clause: Clause) -> tuple[list[str], bool]:
    histogram = clause.context.histogram
    ok = False
    for value in values:
        if value:
            ok = True
            if histogram is not None:
                histogram.increment(value)
    return [], ok


HANDLERS: dict[OpType, Handler] = {
    OpType.FIRST: _first,
    OpType.LAST: _last,
    OpType.BACKWARD: _backward,
    OpType.ENCODE: _per_value(_encode),
    OpType.DECODE: _per_value(_decode),
    OpType.UPPER: _per_value(_simple(str.upper)),
    OpType.LOWER: _per_value(_simple(str.lower)),
    OpType.CHAIN: _per_value(_simple(lambda text: text.replace(" ", "_"))),
    OpType.TITLE: _per_value(_title),
    OpType.MIRROR: _per_value(_simple(lambda text: text[::-1])),
    OpType.ALNUM: _per_value(_alnum),
    **{op: _per_value(_prose) for op in PROSE_MODES},
    OpType.ORDER: _per_value(_simple(sort_string_by_words)),
    OpType.YEAR: _year,
    OpType.MONTH: _month,
    OpType.DATE: _date,
    OpType.PAGE: _per_value(_page),
    OpType.AUTH: _per_value(_simple(citations.genbank_to_medline_authors)),
    OpType.INITIALS: _per_value(_simple(citations.initials)),
    OpType.JOUR: _per_value(_simple(citations.clean_journal)),
    OpType.PROP: _per_value(_simple(citations.describe_property)),
    OpType.TRIM: _per_value(_trim),
    OpType.WCT: _word_count,
    OpType.DOI: _per_value(_simple(citations.doi_url)),
    OpType.TRANSLATE: _per_value(_translate),
    OpType.REPLACE: _per_value(_replace),
    OpType.LEN: _total_length,
    OpType.SUM: _reduction(sum),
    OpType.ACC: _running_sum,
    OpType.MIN: _reduction(min),
    OpType.MAX: _reduction(max),
    OpType.SUB: _reduction(lambda n: n[0] - n[1], exact=2),
    OpType.MUL: _reduction(lambda n: n[0] * n[1], exact=2),
    OpType.DIV: _reduction(lambda n: _truncated_divide(n[0], n[1]), exact=2),
    OpType.MOD: _reduction(lambda n: _truncated_modulo(n[0], n[1]), exact=2),
    OpType.AVG: _reduction(lambda n: int(sum(n) / len(n))),
    OpType.DEV: _reduction(_deviation, minimum=2),
    OpType.MED: _reduction(lambda n: sorted(n)[len(n) // 2]),
    OpType.LG2: _per_value(_logarithm),
    OpType.LGE: _per_value(_logarithm),
    OpType.LOG: _per_value(_logarithm),
    OpType.BIN: _per_value(_radix),
    OpType.OCT: _per_value(_radix),
    OpType.HEX: _per_value(_radix),
    OpType.BIT: _per_value(_bit_count),
    OpType.PAD: _per_value(_pad),
    OpType.REVCOMP: _per_value(_simple(reverse_complement)),
    OpType.FASTA: _per_value_many(_fasta),
    OpType.NCBI2NA: _per_value(_simple(ncbi2na_to_iupac)),
    OpType.NCBI4NA: _per_value(_simple(ncbi4na_to_iupac)),
    OpType.MOLWT: _per_value(_molwt),
    OpType.HGVS: _per_value(_simple(parse_hgvs)),
    **{op: _indices for op in INDEX_LABELS},
    OpType.TERMS: _per_value_many(_terms),
    OpType.WORDS: _per_value_many(_words),
    OpType.PAIRS: _per_value_many(_pairs),
    OpType.PAIRX: _per_value_many(_pairs),
    OpType.REVERSE: _per_value_many(lambda text, clause: _words(text, clause, reverse=True)),
    OpType.LETTERS: _per_value_many(lambda text, clause: list(text)),
    OpType.CLAUSES: _per_value_many(_clauses),
    OpType.MESHCODE: _meshcode,
    OpType.MATRIX: _matrix,
    OpType.CLASSIFY: _per_value_many(_classify),
    OpType.HISTOGRAM: _histogram,
    OpType.ACCENTED: _per_value(_accented),
    OpType.TEST: _per_value_many(_test),
    OpType.SCAN: _per_value_many(_scan),
}

# commands whose values pass through unchanged
PASS_THROUGH = (
    OpType.ELEMENT,
    OpType.VALUE,
    OpType.NUM,
    OpType.INC,
    OpType.DEC,
    OpType.ZEROBASED,
    OpType.ONEBASED,
    OpType.UCSCBASED,
    OpType.NUCLEIC,
    OpType.RAW,
)
for _op in PASS_THROUGH:
    HANDLERS[_op] = _per_value(_identity)


def process_clause(
    curr: XMLNode | None,
    steps: list[Step],
    mask: str,
    prev: str,
    state: "FormatterState",
    status: OpType,
    index: int,
    level: int,
    context: RecordContext,
) -> tuple[str, bool]:
    """
    Produce the formatted output of one extraction command.

    Params:
        curr: Node being visited
        steps: Addressing steps of the command
        mask: Name of the current exploration scope
        prev: Pending tab written before the output
        state: Current formatting customizations
        status: Command code selecting the transform or reduction
        index: Index of the node among its matched siblings
        level: Depth of the node
        context: Per-record runtime state

    Returns:
        Formatted text and whether anything (or a default) was produced
    """
    if curr is None or not steps:
        return "", False

    handler = HANDLERS.get(status)
    if handler is None:
        return "", False

    clause = Clause(status, state, context)
    values = list(_retrieve(curr, steps, mask, status, index, level, clause))
    items, ok = handler(values, clause)

    body = state.sep.join(items)
    if not ok and state.default != "":
        ok = True
        body = state.default
    if not ok:
        return "", False

    return prev + state.plg + state.pfx + body + state.sfx, True
