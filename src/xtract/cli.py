"""
xtract command-line driver.

Usage:
  xtract [driver options] -pattern Record [exploration and extraction commands]

Driver options must come before -pattern. Everything from -pattern on is
compiled into a Block tree and run once per record found in the input.

Driver options:
  -input FILE            Read XML from FILE instead of stdin
  -config FILE           YAML file with defaults for the options below
  -head TEXT, -tail TEXT Printed once around all output
  -hd TEXT, -tl TEXT     Printed around each record's output
  -wrp A,B               Same as -set A -rec B
  -set A, -rec B         Wrap all output in <A>, each record in <B>
  -transform FILE        Tab-separated lookup table for -translate
  -aliases FILE          Same, also used as the phrase list for -classify
  -transfigure FILE      Same, skipping "#" lines, "-" values delete keys
  -empty                 Print the index of records with no output
  -ident                 Prefix each record's output with its index
  -mixed, -strict, -accent, -ascii, -stems, -stops, -spaces, -self
                         Text handling toggles
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Iterator
from importlib.metadata import PackageNotFoundError, version
from typing import TextIO

from rich.console import Console
from rich.markup import escape

from xtract.core.config import ExtractConfig, load_transform
from xtract.exceptions import CommandParseError, ErrorLevel, PatternError, XtractError
from xtract.execution.caches import Histogram, RegexCache
from xtract.execution.walker import process_extract, select_positions
from xtract.parsing.blocks import PATTERN_FLAGS, parse_arguments
from xtract.records import partition_records, read_chunks, split_pattern
from xtract.search import PatternSearcher
from xtract.text.normalize import convert_slash

console = Console(stderr=True)
logger = logging.getLogger(__name__)

POLICY_FLAGS = {
    "mixed": ("-mixed",),
    "strict": ("-strict",),
    "accent": ("-accent",),
    "ascii": ("-ascii",),
    "stem": ("-stem", "-stems"),
    "stop": ("-stop", "-stops"),
    "cleanup": ("-spaces", "-cleanup"),
    "self_closing": ("-self",),
}

FLAG_POLICIES = {
    "strict": "strict",
    "mixed": "mixed",
    "stem": "stem",
    "stems": "stem",
    "stop": "stop",
    "stops": "stop",
}

# positions applied to whole records rather than nodes inside a record
RECORD_POSITIONS_EXCLUDED = ("", "select", "path")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xtract",
        description="Extract fields from XML records with a command-line query language.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
        allow_abbrev=False,
    )
    parser.add_argument("--version", action="version", version=f"xtract {_package_version()}")

    parser.add_argument("-input", metavar="FILE", help="read XML from FILE instead of stdin")
    parser.add_argument("-config", metavar="FILE", help="YAML file with driver defaults")

    parser.add_argument("-head", nargs="+", metavar="TEXT")
    parser.add_argument("-tail", metavar="TEXT")
    parser.add_argument("-hd", metavar="TEXT")
    parser.add_argument("-tl", metavar="TEXT")
    parser.add_argument("-wrp", metavar="A,B")
    parser.add_argument("-set", metavar="A")
    parser.add_argument("-rec", metavar="B")

    tables = parser.add_mutually_exclusive_group()
    tables.add_argument("-transform", metavar="FILE")
    tables.add_argument("-aliases", metavar="FILE")
    tables.add_argument("-transfigure", metavar="FILE")

    parser.add_argument("-empty", action="store_true", default=None)
    parser.add_argument("-ident", action="store_true", default=None)

    for dest, flags in POLICY_FLAGS.items():
        parser.add_argument(*flags, dest=dest, action="store_true", default=None)
    parser.add_argument("-flag", "-flags", dest="flag", choices=sorted(FLAG_POLICIES))

    parser.add_argument("-verbose", action="store_true", help="log progress")
    parser.add_argument("-debug", action="store_true", help="log the compiled command tree")

    return parser


def _package_version() -> str:
    try:
        return version("xtract")
    except PackageNotFoundError:
        return "unknown"


def split_command_line(argv: list[str]) -> tuple[list[str], list[str]]:
    """
    Separate driver options from the extraction command line.

    Returns:
        Tokens before -pattern, and tokens from -pattern on

    Raises:
        PatternError: If there is no -pattern
    """
    for idx, token in enumerate(argv):
        if token in PATTERN_FLAGS:
            return argv[:idx], argv[idx:]
    raise PatternError("No -pattern in command-line arguments")


def build_config(args: argparse.Namespace) -> ExtractConfig:
    """
    Merge an optional YAML configuration with command-line options.

    Command-line values win over the configuration file.
    """
    config = ExtractConfig.from_yaml(args.config) if args.config else ExtractConfig()

    if args.head:
        head = ""
        for item in args.head:
            # extra -head arguments are joined with tabs
            if head != "" and not head.endswith("\t"):
                head += "\t"
            head += convert_slash(item)
        config.head = head
    if args.tail is not None:
        config.tail = convert_slash(args.tail)
    if args.hd is not None:
        config.hd = convert_slash(args.hd)
    if args.tl is not None:
        config.tl = convert_slash(args.tl)

    if args.wrp is not None:
        outer, _, inner = convert_slash(args.wrp).partition(",")
        if outer:
            config.head, config.tail = f"<{outer}>", f"</{outer}>"
        if inner:
            config.hd, config.tl = f"<{inner}>", f"</{inner}>"
    if args.set:
        tag = convert_slash(args.set)
        config.head, config.tail = f"<{tag}>", f"</{tag}>"
    if args.rec:
        tag = convert_slash(args.rec)
        config.hd, config.tl = f"<{tag}>", f"</{tag}>"

    if args.transform:
        config.transform = args.transform
    if args.aliases:
        config.aliases = args.aliases
    if args.transfigure:
        config.transfigure = args.transfigure

    for name in ("empty", "ident", *POLICY_FLAGS):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)
    if args.flag:
        setattr(config, FLAG_POLICIES[args.flag], True)

    return config


def load_tables(config: ExtractConfig) -> tuple[dict[str, str], PatternSearcher | None]:
    """
    Read the lookup table named in the configuration.

    Returns:
        The table (empty if none) and, for -aliases, a searcher over its keys
    """
    transform: dict[str, str] = {}
    searcher = None

    if config.transform:
        load_transform(config.transform, table=transform)
    if config.transfigure:
        load_transform(config.transfigure, special=True, table=transform)
    if config.aliases:
        load_transform(config.aliases, table=transform)
        searcher = PatternSearcher(transform)
        logger.debug("Loaded %d classification phrases", len(searcher))

    return transform, searcher


def write_results(
    results: Iterable[tuple[int, str]],
    out: TextIO,
    head: str = "",
    tail: str = "",
    empty: bool = False,
    ident: bool = False,
) -> int:
    """
    Print record outputs in order.

    The head and tail are only printed when at least one line is written.

    Params:
        results: Record index and output pairs
        out: Destination stream
        head: Text printed before the first line
        tail: Text printed after the last line
        empty: Print only the indices of records without output
        ident: Prefix each output with its record index and a tab

    Returns:
        Number of records written
    """
    written = 0

    for index, text in results:
        if empty:
            if text:
                continue
            line = f"{index}\n"
        elif not text:
            continue
        elif ident:
            line = f"{index}\t{text}"
        else:
            line = text

        if written == 0 and head:
            out.write(head + "\n")
        out.write(line)
        written += 1

    if written and tail:
        out.write(tail + "\n")

    return written


def run(argv: list[str], stdin: TextIO, stdout: TextIO) -> None:
    """
    Execute one xtract command line.

    Raises:
        XtractError: For grammar, configuration or run-time usage errors
    """
    driver_args, tokens = split_command_line(argv)

    args = build_parser().parse_args(driver_args)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose or args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = build_config(args)
    transform, searcher = load_tables(config)

    if len(tokens) < 2:
        raise PatternError("Item missing after -pattern command")
    parent, pattern = split_pattern(tokens[1])

    try:
        block = parse_arguments(tokens, pattern)
    except CommandParseError as e:
        if args.debug:
            raise e.with_level(ErrorLevel.DEVELOPER)
        raise

    # -position on the -pattern scope selects records
    position = block.position
    if position in RECORD_POSITIONS_EXCLUDED:
        position = ""
    else:
        block.position = ""

    histogram = Histogram()
    regexes = RegexCache()
    policy = config.policy

    def extract(stream: TextIO) -> Iterator[tuple[int, str]]:
        records = enumerate(partition_records(read_chunks(stream), pattern, parent), start=1)
        for index, text in select_positions(records, position):
            result = process_extract(
                text,
                parent,
                index,
                config.hd,
                config.tl,
                transform,
                searcher,
                histogram,
                block,
                policy=policy,
                regexes=regexes,
            )
            yield index, result

    if args.input:
        try:
            stream = open(args.input, encoding="utf-8")
        except OSError as e:
            raise XtractError(f"Unable to open input file '{args.input}': {e}") from e
        with stream:
            count = write_results(extract(stream), stdout, config.head, config.tail, config.empty, config.ident)
    else:
        if stdin.isatty():
            raise XtractError("No data supplied to xtract from stdin or file")
        count = write_results(extract(stdin), stdout, config.head, config.tail, config.empty, config.ident)

    logger.debug("Wrote %d records", count)

    if len(histogram):
        stdout.write(histogram.report())


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in ("-h", "-help", "--help"):
        build_parser().print_help()
        return
    if argv[0] == "--version":
        print(f"xtract {_package_version()}")
        return

    try:
        run(argv, sys.stdin, sys.stdout)
    except XtractError as e:
        console.print(f"[red]ERROR:[/red] {escape(str(e))}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
