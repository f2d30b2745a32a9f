"""
Text helpers used by extraction commands.
"""

from xtract.text.citations import (
    clean_journal,
    describe_property,
    doi_url,
    extract_date,
    extract_month,
    extract_year,
    first_page,
    format_date,
    genbank_to_medline_authors,
    initials,
    trim_leading_zero,
)
from xtract.text.normalize import clean_prose, prepare_for_indexing, stem
from xtract.text.sequence import (
    ncbi2na_to_iupac,
    ncbi4na_to_iupac,
    pad_numeric_id,
    parse_hgvs,
    protein_weight,
    reverse_complement,
)

__all__ = [
    "clean_journal",
    "clean_prose",
    "describe_property",
    "doi_url",
    "extract_date",
    "extract_month",
    "extract_year",
    "first_page",
    "format_date",
    "genbank_to_medline_authors",
    "initials",
    "ncbi2na_to_iupac",
    "ncbi4na_to_iupac",
    "pad_numeric_id",
    "parse_hgvs",
    "prepare_for_indexing",
    "protein_weight",
    "reverse_complement",
    "stem",
    "trim_leading_zero",
]
