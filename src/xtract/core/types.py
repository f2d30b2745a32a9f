"""
Core enumerations shared by the xtract compiler and interpreter.

Every command token, sigil, range form and printer style is represented by
a closed enum so the executor can dispatch on identity instead of on raw
command-line strings.
"""

from enum import Enum, IntEnum


class LevelType(IntEnum):
    """Exploration levels, ordered from innermost to outermost."""

    UNIT = 1
    SUBSET = 2
    SECTION = 3
    BLOCK = 4
    BRANCH = 5
    GROUP = 6
    DIVISION = 7
    PATH = 8
    PATTERN = 9


class ArgumentType(Enum):
    """Category of a command-line flag."""

    EXPLORATION = "exploration"
    CONDITIONAL = "conditional"
    EXTRACTION = "extraction"
    CUSTOMIZATION = "customization"


class RangeType(Enum):
    """Form of one side of a `[...]` range suffix."""

    NORANGE = "none"
    STRINGRANGE = "string"
    VARIABLERANGE = "variable"
    INTEGERRANGE = "integer"


class IndentType(IntEnum):
    """XML subtree printer styles, selected by the number of stars."""

    SINGULARITY = 0
    COMPACT = 1
    FLUSH = 2
    INDENT = 3
    SUBTREE = 4
    WRAPPED = 5


class SequenceEnd(Enum):
    """Which end of a feature interval a coordinate element describes."""

    START = "start"
    STOP = "stop"
    POSITION = "position"


class OpType(Enum):
    """Operation codes for every command, condition, sigil and shortcut."""

    UNSET = "unset"

    # direct extraction and text transforms
    ELEMENT = "element"
    FIRST = "first"
    LAST = "last"
    BACKWARD = "backward"
    ENCODE = "encode"
    DECODE = "decode"
    UPPER = "upper"
    LOWER = "lower"
    CHAIN = "chain"
    TITLE = "title"
    MIRROR = "mirror"
    ALNUM = "alnum"
    BASIC = "basic"
    PLAIN = "plain"
    SIMPLE = "simple"
    AUTHOR = "author"
    PROSE = "prose"
    ORDER = "order"
    YEAR = "year"
    MONTH = "month"
    DATE = "date"
    PAGE = "page"
    AUTH = "auth"
    INITIALS = "initials"
    JOUR = "jour"
    PROP = "prop"
    TRIM = "trim"
    WCT = "wct"
    DOI = "doi"
    TRANSLATE = "translate"
    REPLACE = "replace"
    TERMS = "terms"
    WORDS = "words"
    PAIRS = "pairs"
    PAIRX = "pairx"
    REVERSE = "reverse"
    LETTERS = "letters"
    CLAUSES = "clauses"
    INDICES = "indices"
    ARTICLE = "article"
    ABSTRACT = "abstract"
    PARAGRAPH = "paragraph"
    STEMMED = "stemmed"
    MESHCODE = "meshcode"
    MATRIX = "matrix"
    CLASSIFY = "classify"
    HISTOGRAM = "histogram"
    ACCENTED = "accented"
    TEST = "test"
    SCAN = "scan"

    # formatting and customization
    PFX = "pfx"
    SFX = "sfx"
    SEP = "sep"
    TAB = "tab"
    RET = "ret"
    LBL = "lbl"
    TAG = "tag"
    ATT = "att"
    ATR = "atr"
    CLS = "cls"
    SLF = "slf"
    END = "end"
    CLR = "clr"
    PFC = "pfc"
    DEQ = "deq"
    PLG = "plg"
    ELG = "elg"
    FWD = "fwd"
    AWD = "awd"
    WRP = "wrp"
    ENC = "enc"
    PKG = "pkg"
    RST = "rst"
    DEF = "def"
    REG = "reg"
    EXP = "exp"
    COLOR = "color"

    # conditional commands
    POSITION = "position"
    SELECT = "select"
    IF = "if"
    UNLESS = "unless"
    MATCH = "match"
    AVOID = "avoid"
    AND = "and"
    OR = "or"

    # string constraints
    EQUALS = "equals"
    CONTAINS = "contains"
    INCLUDES = "includes"
    ISWITHIN = "is-within"
    STARTSWITH = "starts-with"
    ENDSWITH = "ends-with"
    ISNOT = "is-not"
    ISBEFORE = "is-before"
    ISAFTER = "is-after"
    MATCHES = "matches"
    RESEMBLES = "resembles"
    ISEQUALTO = "is-equal-to"
    DIFFERSFROM = "differs-from"

    # numeric constraints
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    EQ = "eq"
    NE = "ne"

    # numeric reductions and conversions
    NUM = "num"
    LEN = "len"
    SUM = "sum"
    ACC = "acc"
    MIN = "min"
    MAX = "max"
    INC = "inc"
    DEC = "dec"
    SUB = "sub"
    AVG = "avg"
    DEV = "dev"
    MED = "med"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    LG2 = "lg2"
    LGE = "lge"
    LOG = "log"
    BIN = "bin"
    OCT = "oct"
    HEX = "hex"
    BIT = "bit"
    PAD = "pad"
    RAW = "raw"

    # sequence coordinates and sequence data
    ZEROBASED = "0-based"
    ONEBASED = "1-based"
    UCSCBASED = "ucsc-based"
    REVCOMP = "revcomp"
    NUCLEIC = "nucleic"
    FASTA = "fasta"
    NCBI2NA = "ncbi2na"
    NCBI4NA = "ncbi4na"
    MOLWT = "molwt"
    HGVS = "hgvs"

    ELSE = "else"

    # variables and step sigils
    VARIABLE = "variable"
    ACCUMULATOR = "accumulator"
    VALUE = "value"
    QUESTION = "?"
    TILDE = "~"
    STAR = "*"
    DOT = "."
    PRCNT = "%"
    DOLLAR = "$"
    ATSIGN = "@"
    COUNT = "count"
    LENGTH = "length"
    DEPTH = "depth"
    INDEX = "index"

    UNRECOGNIZED = "unrecognized"


# Constraint codes that compare against a literal string
STRING_CONSTRAINTS = frozenset(
    {
        OpType.EQUALS,
        OpType.CONTAINS,
        OpType.INCLUDES,
        OpType.ISWITHIN,
        OpType.STARTSWITH,
        OpType.ENDSWITH,
        OpType.ISNOT,
        OpType.ISBEFORE,
        OpType.ISAFTER,
        OpType.MATCHES,
        OpType.RESEMBLES,
    }
)

# Constraint codes that compare against another element
ELEMENT_CONSTRAINTS = frozenset({OpType.ISEQUALTO, OpType.DIFFERSFROM})

# Constraint codes that compare integers
NUMERIC_CONSTRAINTS = frozenset(
    {OpType.GT, OpType.GE, OpType.LT, OpType.LE, OpType.EQ, OpType.NE}
)

CONSTRAINTS = STRING_CONSTRAINTS | ELEMENT_CONSTRAINTS | NUMERIC_CONSTRAINTS

# Commands that open a new condition group
GROUP_STARTERS = frozenset(
    {
        OpType.SELECT,
        OpType.IF,
        OpType.UNLESS,
        OpType.MATCH,
        OpType.AVOID,
        OpType.POSITION,
    }
)

# Operations whose text is kept escaped because it feeds an indexer
INDEXING_OPS = frozenset(
    {
        OpType.INDICES,
        OpType.ARTICLE,
        OpType.ABSTRACT,
        OpType.PARAGRAPH,
        OpType.STEMMED,
    }
)
