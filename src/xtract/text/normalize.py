"""
Text cleanup and normalization helpers.

These functions back the text-transform and indexing extraction commands:
markup removal, accent folding, space repair, stop-word filtering and
stemming, and the word-sorting used by word-order-insensitive comparisons.
"""

import html
import re
import threading
import unicodedata

import snowballstemmer

STOP_WORDS = frozenset(
    """
    a about above abs accordingly across after afterwards again against all
    almost alone along already also although always am among amongst an analyze
    and another any anyhow anyone anything anywhere applicable apply are arise
    around as assume at be became because become becomes becoming been before
    beforehand being below beside besides between beyond both but by came can
    cannot cc cm come compare could de dealing department depend did discover
    dl do does done due during each ec ed effected eg either else elsewhere
    enough especially et etc ever every everyone everything everywhere except
    find for found from further gave get give go gone got gov had has have
    having he hence her here hereafter hereby herein hereupon hers herself him
    himself his how however hr i ie if ii iii immediately importance important
    in inc incl indeed into investigate is it its itself just keep kept kg km
    last latter latterly lb ld letter like ltd made mainly make many may me
    meanwhile mg might ml mm mo more moreover most mostly mr much mug must my
    myself namely nearly necessarily neither never nevertheless next no nobody
    noone nor normally nos not noted nothing now nowhere obtained of off often
    on only onto or other others otherwise ought our ours ourselves out over
    overall owing own oz particularly per perhaps pm pmid precede predominantly
    present presently previously primarily promptly pt quickly quite quot
    rather readily really recently refs regarding relate said same seem seemed
    seeming seems seen seriously several shall she should show showed shown
    shows significantly since slightly so some somehow someone something
    sometime sometimes somewhat somewhere soon specifically still strongly
    studied studies study sub substantially such sufficiently take tell th than
    that the their theirs them themselves then thence there thereafter thereby
    therefore therein thereupon these they this thorough those though through
    throughout thru thus to together too toward towards try type ug under
    unless until up upon us use used usefully usefulness using usually various
    very via was we were what whatever when whence whenever where whereafter
    whereas whereby wherein whereupon wherever whether which while whither who
    whoever whom whose why will with within without wk would wt yet you your
    yours yourself yourselves yr
    """.split()
)

# Prefixes whose trailing hyphen is dropped before indexing
HYPHENATED_PREFIXES = frozenset(
    """
    anti bi co contra counter de di extra infra inter intra micro mid mono
    multi non over peri post pre pro proto pseudo re semi sub super supra tetra
    trans tri ultra un under whole
    """.split()
)

# 5' and 3' nucleotide ends
PRIMED_PREFIXES = frozenset({"5", "3"})

INVISIBLE_CHARACTERS = frozenset(
    chr(cp)
    for cp in (
        0x00A0, 0x00AD, 0x034F, 0x061C, 0x115F, 0x1160, 0x17B4, 0x17B5,
        0x180E, 0x2000, 0x2001, 0x2002, 0x2003, 0x2004, 0x2005, 0x2006,
        0x2007, 0x2008, 0x2009, 0x200A, 0x200B, 0x200C, 0x200D, 0x200E,
        0x200F, 0x202F, 0x205F, 0x2060, 0x2061, 0x2062, 0x2063, 0x2064,
        0x206A, 0x206B, 0x206C, 0x206D, 0x206E, 0x206F, 0x3000, 0x2800,
        0x3164, 0xFEFF, 0xFFA0,
    )
)

# Lower-case names of combining diacritical marks, as spelled out in text
COMBINING_ACCENT_NAMES = frozenset(
    unicodedata.name(chr(cp)).lower()
    for cp in range(0x0300, 0x0370)
    if unicodedata.name(chr(cp), "")
)

SUPERSCRIPTS = {
    "²": "2", "³": "3", "¹": "1", "⁰": "0", "ⁱ": "1",
    "⁴": "4", "⁵": "5", "⁶": "6", "⁷": "7", "⁸": "8",
    "⁹": "9", "⁺": "+", "⁻": "-", "⁼": "=", "⁽": "(",
    "⁾": ")", "ⁿ": "n",
}

SUBSCRIPTS = {
    "₀": "0", "₁": "1", "₂": "2", "₃": "3", "₄": "4",
    "₅": "5", "₆": "6", "₇": "7", "₈": "8", "₉": "9",
    "₊": "+", "₋": "-", "₌": "=", "₍": "(", "₎": ")",
    "ₐ": "a", "ₑ": "e", "ₒ": "o", "ₓ": "x", "ₔ": "e",
    "ₕ": "h", "ₖ": "k", "ₗ": "l", "ₘ": "m", "ₙ": "n",
    "ₚ": "p", "ₛ": "s", "ₜ": "t",
}

GREEK_NAMES = {
    "α": "alpha", "β": "beta", "γ": "gamma", "δ": "delta", "ε": "epsilon",
    "ζ": "zeta", "η": "eta", "θ": "theta", "ι": "iota", "κ": "kappa",
    "λ": "lambda", "μ": "mu", "ν": "nu", "ξ": "xi", "ο": "omicron",
    "π": "pi", "ρ": "rho", "σ": "sigma", "ς": "sigma", "τ": "tau",
    "υ": "upsilon", "φ": "phi", "χ": "chi", "ψ": "psi", "ω": "omega",
}

# Look-alike characters that are replaced by the intended letter
MISUSED_LETTERS = {
    "µ": "μ",  # micro sign to Greek mu
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "‐": "-",
    "‑": "-",
    "–": "-",
}

# Inline formatting tags stripped by remove_html_decorations
DECORATION_TAGS = re.compile(r"</?(?:b|i|u|sup|sub|mml:[a-z]+)\s*/?>")

# Entity-encoded inline formatting tags, e.g. &lt;sup&gt; or &lt;/i&gt;
ENCODED_INLINE_TAGS = re.compile(
    r"&lt;(/?)(b|i|u|sup|sub|em|strong|small|tt|smallcaps)(\s*/)?&gt;", re.IGNORECASE
)

# Closing and reopening tags inside one run of subscripts or superscripts
SCRIPT_RUN_JOINS = re.compile(r"</sub><sub>|</sup><sup>")

_stemmers = threading.local()


def convert_slash(text: str) -> str:
    """Convert backslash escapes (\\n, \\r, \\t, \\f, \\a) to control characters."""
    if text == "":
        return text

    escapes = {"n": "\n", "r": "\r", "t": "\t", "f": "\f", "a": "\a"}
    result = []
    is_slash = False
    for ch in text:
        if is_slash:
            result.append(escapes.get(ch, ch))
            is_slash = False
        elif ch == "\\":
            is_slash = True
        else:
            result.append(ch)
    return "".join(result)


def compress_runs_of_spaces(text: str) -> str:
    """Collapse runs of ASCII whitespace into a single space."""
    return re.sub(r"[ \t\n\r\f\v]+", " ", text)


def has_adjacent_spaces(text: str) -> bool:
    return "  " in text or "\n\n" in text or " \n" in text or "\n " in text


def remove_comma_or_semicolon(text: str) -> str:
    """Lower-case, replace commas and semicolons by spaces, trim trailing `.?:`."""
    text = text.lower()
    if any(ch in ",;-" for ch in text):
        text = text.replace(",", " ").replace(";", " ")
        text = compress_runs_of_spaces(text)
    text = text.strip()
    return text.rstrip(".?:")


def sort_string_by_words(text: str) -> str:
    """Normalize punctuation and sort the words of a phrase."""
    text = remove_comma_or_semicolon(text)
    if " " in text or "-" in text:
        words = sorted(text.split())
        text = " ".join(words)
        text = text.replace("-", " ")
        text = compress_runs_of_spaces(text)
        text = text.rstrip(".?:")
    return text


def split_alphanumeric(text: str) -> list[str]:
    """Split at every character that is not an ASCII letter or digit."""
    return [word for word in re.split(r"[^A-Za-z0-9]+", text) if word]


def split_letters_or_digits(text: str) -> list[str]:
    """Split at every character that is not a Unicode letter or digit."""
    return [word for word in re.split(r"[\W_]+", text) if word]


def remove_embedded_markup(text: str) -> str:
    """Remove everything between angle brackets."""
    result = []
    in_content = True
    for ch in text:
        if ch == "<":
            in_content = False
        elif ch == ">":
            in_content = True
        elif in_content:
            result.append(ch)
    return "".join(result)


def repair_encoded_markup(text: str) -> str:
    """
    Turn entity-encoded inline formatting tags back into real tags.

    An encoded tag with a space on both sides is left alone, since it is
    more likely a symbol in the text (such as "<b>" marking a stem position)
    than formatting. Other escaped characters, including a lone &lt; or
    &gt;, are untouched.
    """

    def repair(match: re.Match) -> str:
        start, end = match.span()
        if start > 0 and text[start - 1] == " " and text[end : end + 1] == " ":
            return match.group(0)
        closing, name, empty = match.groups()
        return f"<{closing}{name.lower()}{'/' if empty else ''}>"

    if "&lt;" in text:
        text = ENCODED_INLINE_TAGS.sub(repair, text)
    return SCRIPT_RUN_JOINS.sub("", text)


def remove_html_decorations(text: str) -> str:
    """Unescape entities and drop inline formatting tags."""
    text = html.unescape(text)
    return DECORATION_TAGS.sub("", text)


def has_angle_bracket(text: str) -> bool:
    """Report on raw or encoded angle brackets."""
    if "<" in text or ">" in text:
        return True
    if "&" in text and ";" in text:
        return "&lt;" in text or "&gt;" in text or "&amp;" in text
    return False


def has_bad_space(text: str) -> bool:
    for ch in text:
        if ch > "\x7f":
            cp = ord(ch)
            if ch.isspace() or 0x80 <= cp <= 0x9F or 0x2001 <= cp <= 0x200B or 0xE000 <= cp <= 0xF8FF:
                return True
    return False


def cleanup_bad_spaces(text: str) -> str:
    """Convert non-ASCII spaces to ASCII space and drop C1 control characters."""
    result = []
    for ch in text:
        cp = ord(ch)
        if cp < 128:
            result.append(ch)
        elif ch.isspace() or 0x2001 <= cp <= 0x200B:
            result.append(" ")
        elif 0x80 <= cp <= 0x9F:
            continue
        elif 0xE000 <= cp <= 0xF8FF:
            result.append("(?)")
        else:
            result.append(ch)
    return "".join(result)


def remove_extra_spaces(text: str) -> str:
    """Remove spaces inside parentheses, after hyphens and before commas."""
    text = re.sub(r"\( +", "(", text)
    text = re.sub(r" +\)", ")", text)
    text = re.sub(r"- +", "-", text)
    return re.sub(r" +,", ",", text)


def has_unicode_markup(text: str) -> bool:
    return any(ch in SUPERSCRIPTS or ch in SUBSCRIPTS for ch in text)


def repair_unicode_markup(text: str) -> str:
    """Replace superscript and subscript characters by plain ones, spacing at transitions."""
    result = []
    scripted = False
    for ch in text:
        plain = SUPERSCRIPTS.get(ch) or SUBSCRIPTS.get(ch)
        if plain is not None:
            if not scripted and result and result[-1] != " ":
                result.append(" ")
            result.append(plain)
            scripted = True
        else:
            if scripted and ch != " ":
                result.append(" ")
            result.append(ch)
            scripted = False
    return "".join(result)


def fix_misused_letters(text: str) -> str:
    """Replace look-alike punctuation and symbols by the intended characters."""
    return "".join(MISUSED_LETTERS.get(ch, ch) for ch in text)


def transform_accents(text: str, spell_greek: bool = False) -> str:
    """
    Fold accented letters to their unaccented ASCII base.

    Params:
        text: Input text
        spell_greek: Spell out Greek letters (alpha, beta, ...) instead of
            leaving them in place

    Returns:
        Text with combining marks removed
    """
    if text.isascii():
        return text

    result = []
    for ch in text:
        if ch.isascii():
            result.append(ch)
            continue
        lower = ch.lower()
        if spell_greek and lower in GREEK_NAMES:
            result.append(GREEK_NAMES[lower])
            continue
        decomposed = unicodedata.normalize("NFKD", ch)
        stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
        if ch == "ß":
            stripped = "ss"
        result.append(stripped or ch)
    return "".join(result)


def has_combining_accent(text: str) -> bool:
    """Report on spelled-out combining accent names (data-quality check)."""
    text = text.lower()
    if "combining" not in text:
        return False
    return any(name in text for name in COMBINING_ACCENT_NAMES)


def has_invisible_unicode(text: str) -> bool:
    return any(ch in INVISIBLE_CHARACTERS for ch in text)


def is_all_digits(text: str) -> bool:
    return text != "" and text.isdigit()


def is_all_digits_or_period(text: str) -> bool:
    return all(ch.isdigit() or ch == "." for ch in text)


def is_stop_word(word: str) -> bool:
    return word in STOP_WORDS


def stem(word: str) -> str:
    """Apply the English (Porter2) stemmer."""
    stemmer = getattr(_stemmers, "english", None)
    if stemmer is None:
        stemmer = snowballstemmer.stemmer("english")
        _stemmers.english = stemmer
    return stemmer.stemWord(word).strip()


def fix_special_cases(text: str) -> str:
    """Join hyphenated prefixes and mark 5'/3' ends before indexing."""
    words = []
    for item in text.split():
        result = []
        for i, ch in enumerate(item):
            if ch == "-" and item[:i] in HYPHENATED_PREFIXES:
                continue
            if ch == "'":
                if item[:i] in PRIMED_PREFIXES:
                    result.append("_prime ")
                    continue
                if item[i + 1 :] == "s":
                    continue
            result.append(ch)
        words.append("".join(result))
    return " ".join(words)


def trim_trailing_punctuation(word: str) -> str:
    """Remove trailing periods, commas, colons and semicolons (keep one character)."""
    while len(word) > 1 and word[-1] in ".,:;":
        word = word[:-1]
    return word


def prepare_for_indexing(text: str) -> str:
    """
    Clean and lower-case text for term indexing.

    Folds accents, removes markup and entities, replaces parentheses,
    underscores, hyphens and similar joiners by spaces, and strips trailing
    punctuation from every word.
    """
    if not text.isascii():
        text = fix_misused_letters(text)
        text = transform_accents(text, spell_greek=True)
        if has_unicode_markup(text):
            text = repair_unicode_markup(text)

    text = text.lower()

    if has_bad_space(text):
        text = cleanup_bad_spaces(text)
    # markup is removed while literal brackets are still escaped
    if has_angle_bracket(text):
        text = remove_embedded_markup(repair_encoded_markup(text))
    if "&" in text or not text.isascii():
        text = html.unescape(text).lower()

    text = compress_runs_of_spaces(text)

    for ch in "()_":
        text = text.replace(ch, " ")

    if "-" in text or "'" in text:
        text = fix_special_cases(text)

    for ch in "_-+~":
        text = text.replace(ch, " ")

    words = [trim_trailing_punctuation(item) for item in text.split()]
    return " ".join(word for word in words if word)


def clean_prose(text: str, mode: str, wrapped: bool = False) -> str:
    """
    Shared cleanup for the -basic, -plain, -simple, -author and -prose commands.

    Params:
        text: Extracted value
        mode: One of "basic", "plain", "simple", "author", "prose"
        wrapped: True when output is being XML-wrapped and must stay escaped

    Returns:
        Cleaned text on a single line
    """
    text = text.replace("\n", " ")

    if mode == "plain":
        text = remove_embedded_markup(text)
        text = transform_accents(text)
    elif mode == "simple":
        text = transform_accents(text, spell_greek=True)
    elif mode == "author":
        text = fix_misused_letters(text)
        text = transform_accents(text)
        text = text.replace("&#39;", "'").replace("' ", "'")
    elif mode == "prose":
        if wrapped:
            text = html.unescape(text)
        text = remove_embedded_markup(text)
        text = fix_misused_letters(text)
        text = transform_accents(text)
        if wrapped:
            text = html.escape(text, quote=False)

    if has_unicode_markup(text):
        text = repair_unicode_markup(text)
    if has_angle_bracket(text):
        text = remove_html_decorations(text)
        if wrapped:
            text = html.escape(text, quote=False)
    if has_bad_space(text):
        text = cleanup_bad_spaces(text)
    if has_adjacent_spaces(text):
        text = compress_runs_of_spaces(text)
    return remove_extra_spaces(text)
