"""
Token classification tables for xtract command lines.

Maps literal command-line flags to their argument category and operation
code, and recognizes variable (`-NAME`) and accumulator (`--NAME`)
references.
"""

import logging
from typing import NamedTuple

from xtract.core.types import ArgumentType, LevelType, OpType, SequenceEnd

logger = logging.getLogger(__name__)

# Exploration flags indexed by level
LEVEL_FLAGS: dict[LevelType, str] = {
    LevelType.UNIT: "-unit",
    LevelType.SUBSET: "-subset",
    LevelType.SECTION: "-section",
    LevelType.BLOCK: "-block",
    LevelType.BRANCH: "-branch",
    LevelType.GROUP: "-group",
    LevelType.DIVISION: "-division",
    LevelType.PATH: "-path",
    LevelType.PATTERN: "-pattern",
}

# Capitalized spellings kept for old scripts
DEPRECATED_LEVEL_FLAGS: dict[LevelType, str] = {
    level: "-" + flag[1:].capitalize() for level, flag in LEVEL_FLAGS.items()
}

EXPLORATION_FLAGS = frozenset(LEVEL_FLAGS.values()) | frozenset(
    DEPRECATED_LEVEL_FLAGS.values()
)

CONDITIONAL_OPS: dict[str, OpType] = {
    "-position": OpType.POSITION,
    "-select": OpType.SELECT,
    "-if": OpType.IF,
    "-unless": OpType.UNLESS,
    "-match": OpType.MATCH,
    "-avoid": OpType.AVOID,
    "-and": OpType.AND,
    "-or": OpType.OR,
    "-equals": OpType.EQUALS,
    "-contains": OpType.CONTAINS,
    "-includes": OpType.INCLUDES,
    "-is-within": OpType.ISWITHIN,
    "-starts-with": OpType.STARTSWITH,
    "-ends-with": OpType.ENDSWITH,
    "-is-not": OpType.ISNOT,
    "-is-before": OpType.ISBEFORE,
    "-is-after": OpType.ISAFTER,
    "-matches": OpType.MATCHES,
    "-resembles": OpType.RESEMBLES,
    "-is-equal-to": OpType.ISEQUALTO,
    "-differs-from": OpType.DIFFERSFROM,
    "-gt": OpType.GT,
    "-ge": OpType.GE,
    "-lt": OpType.LT,
    "-le": OpType.LE,
    "-eq": OpType.EQ,
    "-ne": OpType.NE,
}

EXTRACTION_OPS: dict[str, OpType] = {
    "-element": OpType.ELEMENT,
    "-first": OpType.FIRST,
    "-last": OpType.LAST,
    "-backward": OpType.BACKWARD,
    "-encode": OpType.ENCODE,
    "-decode": OpType.DECODE,
    "-decode64": OpType.DECODE,
    "-upper": OpType.UPPER,
    "-lower": OpType.LOWER,
    "-chain": OpType.CHAIN,
    "-title": OpType.TITLE,
    "-mirror": OpType.MIRROR,
    "-alnum": OpType.ALNUM,
    "-basic": OpType.BASIC,
    "-plain": OpType.PLAIN,
    "-simple": OpType.SIMPLE,
    "-author": OpType.AUTHOR,
    "-prose": OpType.PROSE,
    "-order": OpType.ORDER,
    "-year": OpType.YEAR,
    "-month": OpType.MONTH,
    "-date": OpType.DATE,
    "-page": OpType.PAGE,
    "-auth": OpType.AUTH,
    "-initials": OpType.INITIALS,
    "-jour": OpType.JOUR,
    "-prop": OpType.PROP,
    "-trim": OpType.TRIM,
    "-wct": OpType.WCT,
    "-doi": OpType.DOI,
    "-translate": OpType.TRANSLATE,
    "-replace": OpType.REPLACE,
    "-terms": OpType.TERMS,
    "-words": OpType.WORDS,
    "-pairs": OpType.PAIRS,
    "-pairx": OpType.PAIRX,
    "-reverse": OpType.REVERSE,
    "-letters": OpType.LETTERS,
    "-clauses": OpType.CLAUSES,
    "-indices": OpType.INDICES,
    "-article": OpType.ARTICLE,
    "-abstract": OpType.ABSTRACT,
    "-paragraph": OpType.PARAGRAPH,
    "-stemmed": OpType.STEMMED,
    "-meshcode": OpType.MESHCODE,
    "-matrix": OpType.MATRIX,
    "-classify": OpType.CLASSIFY,
    "-histogram": OpType.HISTOGRAM,
    "-accented": OpType.ACCENTED,
    "-test": OpType.TEST,
    "-scan": OpType.SCAN,
    "-num": OpType.NUM,
    "-len": OpType.LEN,
    "-sum": OpType.SUM,
    "-acc": OpType.ACC,
    "-min": OpType.MIN,
    "-max": OpType.MAX,
    "-inc": OpType.INC,
    "-dec": OpType.DEC,
    "-sub": OpType.SUB,
    "-avg": OpType.AVG,
    "-dev": OpType.DEV,
    "-med": OpType.MED,
    "-mul": OpType.MUL,
    "-div": OpType.DIV,
    "-mod": OpType.MOD,
    "-lg2": OpType.LG2,
    "-lge": OpType.LGE,
    "-log": OpType.LOG,
    "-bin": OpType.BIN,
    "-oct": OpType.OCT,
    "-hex": OpType.HEX,
    "-bit": OpType.BIT,
    "-pad": OpType.PAD,
    "-raw": OpType.RAW,
    "-0-based": OpType.ZEROBASED,
    "-zero-based": OpType.ZEROBASED,
    "-1-based": OpType.ONEBASED,
    "-one-based": OpType.ONEBASED,
    "-ucsc": OpType.UCSCBASED,
    "-ucsc-based": OpType.UCSCBASED,
    "-ucsc-coords": OpType.UCSCBASED,
    "-bed-based": OpType.UCSCBASED,
    "-bed-coords": OpType.UCSCBASED,
    "-revcomp": OpType.REVCOMP,
    "-nucleic": OpType.NUCLEIC,
    "-fasta": OpType.FASTA,
    "-ncbi2na": OpType.NCBI2NA,
    "-ncbi4na": OpType.NCBI4NA,
    "-molwt": OpType.MOLWT,
    "-hgvs": OpType.HGVS,
    "-else": OpType.ELSE,
}

CUSTOMIZATION_OPS: dict[str, OpType] = {
    "-pfx": OpType.PFX,
    "-sfx": OpType.SFX,
    "-sep": OpType.SEP,
    "-tab": OpType.TAB,
    "-ret": OpType.RET,
    "-lbl": OpType.LBL,
    "-tag": OpType.TAG,
    "-att": OpType.ATT,
    "-atr": OpType.ATR,
    "-cls": OpType.CLS,
    "-slf": OpType.SLF,
    "-end": OpType.END,
    "-clr": OpType.CLR,
    "-pfc": OpType.PFC,
    "-deq": OpType.DEQ,
    "-plg": OpType.PLG,
    "-elg": OpType.ELG,
    "-fwd": OpType.FWD,
    "-awd": OpType.AWD,
    "-wrp": OpType.WRP,
    "-enc": OpType.ENC,
    "-pkg": OpType.PKG,
    "-rst": OpType.RST,
    "-def": OpType.DEF,
    "-reg": OpType.REG,
    "-exp": OpType.EXP,
    "-color": OpType.COLOR,
}

ARGUMENT_TYPES: dict[str, ArgumentType] = {
    **{flag: ArgumentType.EXPLORATION for flag in EXPLORATION_FLAGS},
    **{flag: ArgumentType.CONDITIONAL for flag in CONDITIONAL_OPS},
    **{flag: ArgumentType.EXTRACTION for flag in EXTRACTION_OPS},
    **{flag: ArgumentType.CUSTOMIZATION for flag in CUSTOMIZATION_OPS},
}

OPERATION_TYPES: dict[str, OpType] = {
    **CONDITIONAL_OPS,
    **EXTRACTION_OPS,
    **CUSTOMIZATION_OPS,
}


class TokenClass(NamedTuple):
    """Classification result for a single command-line token."""

    category: ArgumentType | None
    op: OpType
    is_extraction: bool


class SequenceCoordinate(NamedTuple):
    """Native coordinate base and interval end for a known sequence element."""

    based: int
    which: SequenceEnd


# Native coordinate conventions of well-known sequence record elements,
# keyed by "pattern:element" or "pattern:@attribute"
SEQUENCE_COORDINATES: dict[str, SequenceCoordinate] = {
    "INSDSeq:INSDInterval_from": SequenceCoordinate(1, SequenceEnd.START),
    "INSDSeq:INSDInterval_to": SequenceCoordinate(1, SequenceEnd.STOP),
    "DocumentSummary:ChrStart": SequenceCoordinate(0, SequenceEnd.START),
    "DocumentSummary:ChrStop": SequenceCoordinate(0, SequenceEnd.STOP),
    "DocumentSummary:Chr_start": SequenceCoordinate(1, SequenceEnd.START),
    "DocumentSummary:Chr_end": SequenceCoordinate(1, SequenceEnd.STOP),
    "DocumentSummary:Chr_inner_start": SequenceCoordinate(1, SequenceEnd.START),
    "DocumentSummary:Chr_inner_end": SequenceCoordinate(1, SequenceEnd.STOP),
    "DocumentSummary:Chr_outer_start": SequenceCoordinate(1, SequenceEnd.START),
    "DocumentSummary:Chr_outer_end": SequenceCoordinate(1, SequenceEnd.STOP),
    "DocumentSummary:start": SequenceCoordinate(1, SequenceEnd.START),
    "DocumentSummary:stop": SequenceCoordinate(1, SequenceEnd.STOP),
    "DocumentSummary:display_start": SequenceCoordinate(1, SequenceEnd.START),
    "DocumentSummary:display_stop": SequenceCoordinate(1, SequenceEnd.STOP),
    "Entrezgene:Seq-interval_from": SequenceCoordinate(0, SequenceEnd.START),
    "Entrezgene:Seq-interval_to": SequenceCoordinate(0, SequenceEnd.STOP),
    "GenomicInfoType:ChrStart": SequenceCoordinate(0, SequenceEnd.START),
    "GenomicInfoType:ChrStop": SequenceCoordinate(0, SequenceEnd.STOP),
    "RS:position": SequenceCoordinate(0, SequenceEnd.POSITION),
    "RS:@asnFrom": SequenceCoordinate(0, SequenceEnd.START),
    "RS:@asnTo": SequenceCoordinate(0, SequenceEnd.STOP),
    "RS:@end": SequenceCoordinate(0, SequenceEnd.STOP),
    "RS:@leftContigNeighborPos": SequenceCoordinate(0, SequenceEnd.START),
    "RS:@physMapInt": SequenceCoordinate(0, SequenceEnd.POSITION),
    "RS:@protLoc": SequenceCoordinate(0, SequenceEnd.POSITION),
    "RS:@rightContigNeighborPos": SequenceCoordinate(0, SequenceEnd.STOP),
    "RS:@start": SequenceCoordinate(0, SequenceEnd.START),
    "RS:@structLoc": SequenceCoordinate(0, SequenceEnd.POSITION),
}


def is_all_caps_or_digits(text: str) -> bool:
    """Return True if every character is an upper-case letter or a digit."""
    return all(ch.isupper() or ch.isdigit() for ch in text)


def parse_flag(token: str) -> tuple[OpType, bool]:
    """
    Map a token to its operation code and extraction status.

    Params:
        token: Literal command-line token

    Returns:
        Tuple of the operation code and whether the flag is an extraction
        (value-producing) command. Tokens that are not flags map to UNSET,
        unknown flags to UNRECOGNIZED.
    """
    op = OPERATION_TYPES.get(token)
    if op is not None:
        return op, ARGUMENT_TYPES[token] == ArgumentType.EXTRACTION

    if len(token) > 1 and token[0] == "-" and is_all_caps_or_digits(token[1:]):
        return OpType.VARIABLE, True

    if (
        len(token) > 2
        and token.startswith("--")
        and is_all_caps_or_digits(token[2:])
    ):
        return OpType.ACCUMULATOR, True

    if token.startswith("-"):
        return OpType.UNRECOGNIZED, False

    return OpType.UNSET, False


def classify_token(token: str) -> TokenClass:
    """
    Classify a token into (category, operation code, is-extraction).

    Exploration flags have no operation code of their own and report UNSET.
    """
    category = ARGUMENT_TYPES.get(token)
    if category == ArgumentType.EXPLORATION:
        return TokenClass(category, OpType.UNSET, False)
    op, is_extraction = parse_flag(token)
    if category is None and op in (OpType.VARIABLE, OpType.ACCUMULATOR):
        category = ArgumentType.EXTRACTION
    return TokenClass(category, op, is_extraction)


def argument_type(token: str) -> ArgumentType | None:
    """Return the category of a known flag, or None."""
    return ARGUMENT_TYPES.get(token)


def find_level_flag(tokens: list[str], level: LevelType) -> str | None:
    """
    Return the spelling of the level's flag if present in the tokens.

    Capitalized spellings are accepted with a deprecation warning.
    """
    lower = LEVEL_FLAGS[level]
    upper = DEPRECATED_LEVEL_FLAGS[level]
    for token in tokens:
        if token == lower:
            return lower
        if token == upper:
            logger.warning(
                "Upper-case '%s' exploration command is deprecated, use lower-case '%s' instead",
                upper,
                lower,
            )
            return lower
    return None
