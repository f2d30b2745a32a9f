"""
Sequence helpers: reverse complement, packed nucleotide decoding,
protein molecular weight, HGVS substitution parsing and identifier padding.
"""

import binascii
import html
import logging
import re
from dataclasses import dataclass
from enum import IntEnum

from xtract.parsing.ranges import split_in_two_left
from xtract.text.normalize import is_all_digits

logger = logging.getLogger(__name__)

REVERSE_COMPLEMENT = str.maketrans(
    "ABCDGHKMNRSTUVWXYabcdghkmnrstuvwxy",
    "TVGHCDMKNYSAABWXRtvghcdmknysaabwxr",
)

NCBI2NA_BASES = "ACGT"
NCBI4NA_BASES = "NACMGRSVTWYHKDBN"

# element counts per residue: C, H, N, O, S, Se
RESIDUE_ATOMS = {
    "A": (3, 5, 1, 1, 0, 0),
    "B": (4, 5, 1, 3, 0, 0),
    "C": (3, 5, 1, 1, 1, 0),
    "D": (4, 5, 1, 3, 0, 0),
    "E": (5, 7, 1, 3, 0, 0),
    "F": (9, 9, 1, 1, 0, 0),
    "G": (2, 3, 1, 1, 0, 0),
    "H": (6, 7, 3, 1, 0, 0),
    "I": (6, 11, 1, 1, 0, 0),
    "J": (6, 11, 1, 1, 0, 0),
    "K": (6, 12, 2, 1, 0, 0),
    "L": (6, 11, 1, 1, 0, 0),
    "M": (5, 9, 1, 1, 1, 0),
    "N": (4, 6, 2, 2, 0, 0),
    "O": (12, 19, 3, 2, 0, 0),
    "P": (5, 7, 1, 1, 0, 0),
    "Q": (5, 8, 2, 2, 0, 0),
    "R": (6, 12, 4, 1, 0, 0),
    "S": (3, 5, 1, 2, 0, 0),
    "T": (4, 7, 1, 2, 0, 0),
    "U": (3, 5, 1, 1, 0, 1),
    "V": (5, 9, 1, 1, 0, 0),
    "W": (11, 10, 2, 1, 0, 0),
    "X": (0, 0, 0, 0, 0, 0),
    "Y": (9, 9, 1, 2, 0, 0),
    "Z": (5, 7, 1, 3, 0, 0),
}

ATOMIC_WEIGHTS = (12.01115, 1.0079, 14.0067, 15.9994, 32.064, 78.96)


def reverse_complement(seq: str) -> str:
    """
    Reverse a nucleotide sequence and complement every base.

    Case is preserved, uracil complements to adenine, and anything that is
    not an IUPAC nucleotide code becomes X.
    """
    out = []
    for ch in reversed(seq):
        comp = ch.translate(REVERSE_COMPLEMENT)
        if comp == ch and ch not in "NnSsWwXx":
            comp = "X"
        out.append(comp)
    return "".join(out)


def _unhexlify(text: str) -> bytes | None:
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError):
        return None


def ncbi2na_to_iupac(text: str) -> str:
    """Decode hex-encoded ncbi2na (four bases per byte) to IUPAC letters."""
    data = _unhexlify(text) if text else None
    if not data:
        return ""
    out = []
    for byte in data:
        for shift in (6, 4, 2, 0):
            out.append(NCBI2NA_BASES[(byte >> shift) & 0x03])
    return "".join(out)


def ncbi4na_to_iupac(text: str) -> str:
    """Decode hex-encoded ncbi4na (two bases per byte) to IUPAC letters."""
    data = _unhexlify(text) if text else None
    if not data:
        return ""
    out = []
    for byte in data:
        out.append(NCBI4NA_BASES[byte >> 4])
        out.append(NCBI4NA_BASES[byte & 0x0F])
    return "".join(out)


def protein_weight(seq: str, trim_leading_met: bool = False) -> str:
    """
    Compute the rounded molecular weight of a protein sequence.

    Params:
        seq: One-letter amino acid codes
        trim_leading_met: Ignore an initial methionine

    Returns:
        Weight in daltons as an integer string
    """
    seq = seq.upper()
    if trim_leading_met and seq.startswith("M"):
        seq = seq[1:]

    # one water for the chain ends
    totals = [0, 2, 0, 1, 0, 0]
    for ch in seq:
        atoms = RESIDUE_ATOMS.get(ch)
        if atoms is None:
            continue
        for i, count in enumerate(atoms):
            totals[i] += count

    weight = sum(w * n for w, n in zip(ATOMIC_WEIGHTS, totals))
    return str(int(weight + 0.5))


def pad_numeric_id(text: str) -> str:
    """Left-pad an all-digit identifier to eight characters with zeros."""
    if len(text) > 64:
        return text
    if is_all_digits(text) and len(text) < 8:
        return text.zfill(8)
    return text


class VariantClass(IntEnum):
    GENOMIC = 1
    CODING = 2
    NONCODING = 3
    MITOCONDRIAL = 4
    RNA = 5
    PROTEIN = 6


class VariantType(IntEnum):
    SUBSTITUTION = 1
    MISSENSE = 2
    TERMINATION = 3
    EXTENSION = 4
    SYNONYMOUS = 5


NUCLEOTIDE_CODES = {"-": "-", "a": "A", "c": "C", "g": "G", "r": "R", "t": "T", "u": "T", "y": "Y"}

AMINO_ACID_CODES = {
    "-": "-",
    "*": "*",
    **{ch: ch.upper() for ch in "abcdefghijklmnopqrstuvwxyz"},
    "ala": "A",
    "arg": "R",
    "asn": "N",
    "asp": "D",
    "asx": "B",
    "cys": "C",
    "gap": "-",
    "gln": "Q",
    "glu": "E",
    "glx": "Z",
    "gly": "G",
    "his": "H",
    "ile": "I",
    "leu": "L",
    "lys": "K",
    "met": "M",
    "phe": "F",
    "pro": "P",
    "pyl": "O",
    "sec": "U",
    "ser": "S",
    "stp": "*",
    "ter": "*",
    "thr": "T",
    "trp": "W",
    "tyr": "Y",
    "val": "V",
    "xle": "J",
    "xxx": "X",
}

ACCESSION_PARTS = re.compile(r"\*|\d+|\.|\D+")
NUCLEOTIDE_PARTS = re.compile(r"\d+|\D|>|\D")
PROTEIN_PARTS = re.compile(r"\*|\d+|\D+")

# variation kinds that are recognized but not converted
UNSUPPORTED_MARKERS = ("delins", "indel", "del", "inv", "dup", "con", "ins", "fs", "*", "?", ";", "/", "(", ")", "[", "]")


@dataclass
class Variant:
    """One parsed HGVS substitution, position 0-based."""

    vclass: VariantClass
    vtype: VariantType
    accession: str
    position: int
    deleted: str
    inserted: str
    prefix: str = ""
    digits: str = ""
    number: int = 0
    version: int = 0
    hgvs: str = ""

    def sort_key(self) -> tuple:
        # most recent version first
        return (
            self.vclass,
            self.vtype,
            self.prefix,
            self.number,
            -self.version,
            self.position,
            self.deleted,
            self.inserted,
        )

    def to_xml(self) -> str:
        label = "Offset" if self.vclass == VariantClass.CODING else "Position"
        return (
            "<Variant>"
            f"<Class>{self.vclass.name.title() if self.vclass != VariantClass.RNA else 'RNA'}</Class>"
            f"<Type>{self.vtype.name.title()}</Type>"
            f"<Accession>{self.accession}</Accession>"
            f"<{label}>{self.position}</{label}>"
            f"<Deleted>{self.deleted}</Deleted>"
            f"<Inserted>{self.inserted}</Inserted>"
            f"<Hgvs>{self.hgvs}</Hgvs>"
            "</Variant>\n"
        )


def _parse_substitution(cls: str, accession: str, change: str) -> Variant | None:
    if cls in ("g", "c"):
        parts = NUCLEOTIDE_PARTS.findall(change)
        if len(parts) != 4:
            return None
        pos = parts[0]
        deleted = NUCLEOTIDE_CODES.get(parts[1].lower())
        inserted = NUCLEOTIDE_CODES.get(parts[3].lower())
        if deleted is None or inserted is None:
            logger.debug("Unrecognized nucleotide in '%s'", change)
            return None
        vclass = VariantClass.GENOMIC if cls == "g" else VariantClass.CODING
        vtype = VariantType.SUBSTITUTION
    elif cls == "p":
        parts = PROTEIN_PARTS.findall(change)
        if len(parts) != 3:
            return None
        pos = parts[1]
        deleted = AMINO_ACID_CODES.get(parts[0].lower())
        inserted = AMINO_ACID_CODES.get(parts[2].lower())
        if deleted is None or inserted is None:
            logger.debug("Unrecognized amino acid in '%s'", change)
            return None
        vclass = VariantClass.PROTEIN
        if inserted == "*":
            vtype = VariantType.TERMINATION
        elif deleted == "*":
            vtype = VariantType.EXTENSION
        elif deleted == inserted:
            vtype = VariantType.SYNONYMOUS
        else:
            vtype = VariantType.MISSENSE
    else:
        return None

    if not is_all_digits(pos):
        logger.debug("Non-integer position '%s'", pos)
        return None

    return Variant(vclass, vtype, accession, int(pos) - 1, deleted, inserted)


def parse_hgvs(text: str) -> str:
    """
    Convert HGVS substitution notation to Variant XML.

    Only genomic, coding and protein substitutions are converted; other
    variation kinds are skipped. Older versions of an accession are dropped,
    and XM_/XP_ entries are suppressed when NM_/NP_ entries are present.

    Params:
        text: Comma-separated HGVS expressions, optionally prefixed by `HGVS=`

    Returns:
        One `<Variant>` element per line, or "" if none were recognized
    """
    text = text.removeprefix("HGVS=")
    text = text.split("|", 1)[0]

    highest: dict[str, int] = {}
    has_nm = False
    has_np = False
    variants: list[Variant] = []

    for hgv in text.split(","):
        if hgv == "":
            continue

        accession, rest = split_in_two_left(hgv, ":")
        if accession == "" or rest == "":
            continue
        cls, change = split_in_two_left(rest, ".")
        if cls == "" or change == "":
            continue

        change = change.strip().lower().removeprefix("(").removesuffix(")")
        if any(marker in change for marker in UNSUPPORTED_MARKERS):
            continue

        variant = _parse_substitution(cls, accession, change)
        if variant is None:
            continue

        parts = ACCESSION_PARTS.findall(accession)
        version = "0"
        if len(parts) == 2:
            prefix, digits = parts[0].upper(), parts[1].lower()
        elif len(parts) == 4 and parts[2] == ".":
            prefix, digits, version = parts[0].upper(), parts[1].lower(), parts[3].lower()
        else:
            logger.warning("Unable to parse accession '%s'", accession)
            continue

        if prefix == "" or not is_all_digits(digits) or not is_all_digits(version):
            logger.warning("Unable to parse accession '%s'", accession)
            continue

        variant.prefix = prefix
        variant.digits = digits
        variant.number = int(digits)
        variant.version = int(version)
        variant.hgvs = html.escape(hgv)

        unversioned = prefix + digits
        highest[unversioned] = max(highest.get(unversioned, variant.version), variant.version)

        has_nm = has_nm or prefix.startswith("NM_")
        has_np = has_np or prefix.startswith("NP_")

        variants.append(variant)

    out = []
    for variant in sorted(variants, key=Variant.sort_key):
        if highest.get(variant.prefix + variant.digits, 0) > variant.version:
            continue
        if has_nm and variant.accession.startswith("XM_"):
            continue
        if has_np and variant.accession.startswith("XP_"):
            continue
        out.append(variant.to_xml())

    return "".join(out)
