"""
Citation field helpers for the -year, -month, -date, -page, -auth,
-initials, -jour, -prop and -doi extraction commands.
"""

import html
import re
from urllib.parse import quote_plus

from xtract.text.normalize import compress_runs_of_spaces, is_all_digits

MONTHS = {
    "jan": 1,
    "january": 1,
    "feb": 2,
    "february": 2,
    "mar": 3,
    "march": 3,
    "apr": 4,
    "april": 4,
    "may": 5,
    "jun": 6,
    "june": 6,
    "jul": 7,
    "july": 7,
    "aug": 8,
    "august": 8,
    "sep": 9,
    "september": 9,
    "oct": 10,
    "october": 10,
    "nov": 11,
    "november": 11,
    "dec": 12,
    "december": 12,
}

PROPERTIES = {
    "AssociatedDataset": "Associated Dataset",
    "AssociatedPublication": "Associated Publication",
    "CommentIn": "Comment In",
    "CommentOn": "Comment On",
    "ErratumFor": "Erratum For",
    "ErratumIn": "Erratum In",
    "ExpressionOfConcernFor": "Expression Of Concern For",
    "ExpressionOfConcernIn": "Expression Of Concern In",
    "OriginalReportIn": "Original Report In",
    "ReprintIn": "Reprint In",
    "ReprintOf": "Reprint Of",
    "RepublishedFrom": "Republished From",
    "RepublishedIn": "Republished In",
    "RetractedandRepublishedFrom": "Retracted And Republished From",
    "RetractedandRepublishedIn": "Retracted And Republished In",
    "RetractionIn": "Retraction In",
    "RetractionOf": "Retraction Of",
    "SummaryForPatientsIn": "Summary For Patients In",
    "UpdateIn": "Update In",
    "UpdateOf": "Update Of",
    "aheadofprint": "Ahead Of Print",
    "epublish": "Electronically Published",
    "ppublish": "Published In Print",
}

DIGIT_RUNS = re.compile(r"\d+")
LETTER_RUNS = re.compile(r"[^\W\d_]+")
WORD_RUNS = re.compile(r"[^\W_]+")
JOURNAL_WORDS = re.compile(r"[A-Za-z0-9]+")

DOI_PREFIXES = ("https://doi.org/", "http://dx.doi.org/")


def extract_year(text: str) -> str:
    """Return the first four-digit number, e.g. 2008 for "2008 Dec-2009 Jan"."""
    for item in DIGIT_RUNS.findall(text):
        if len(item) == 4:
            return item
    return ""


def extract_month(text: str) -> str:
    """Return the number of the first month name or abbreviation in the text."""
    for item in LETTER_RUNS.findall(text):
        month = MONTHS.get(item.lower())
        if month is not None:
            return str(month)
    return ""


def month_number(text: str) -> str:
    if text == "" or is_all_digits(text):
        return text
    month = MONTHS.get(text.lower())
    return str(month) if month is not None else text


def _between_tags(text: str, tag: str) -> str:
    _, found, after = text.partition(f"<{tag}>")
    if not found or after == "":
        return ""
    inner, found, _ = after.partition(f"</{tag}>")
    return inner if found else ""


def extract_date(text: str) -> tuple[str, str, str]:
    """
    Find year, month and day in the XML of a date container.

    Handles MedlineDate free text, compact `<date>YYYYMMDD</date>` values,
    space-separated `<PubDate>` text and Year/Month/Day child elements.

    Returns:
        Year, month and day strings, any of which may be empty
    """
    year = month = day = ""

    if "MedlineDate" in text:
        year = extract_year(text)
        if year:
            month = extract_month(text)

    elif "date" in text:
        raw = _between_tags(html.unescape(text), "date")
        if len(raw) in (4, 6, 8):
            year, month, day = raw[0:4], raw[4:6], raw[6:8]

    elif "PubDate" in text and "<Year>" not in text:
        for item in _between_tags(text, "PubDate").split(" "):
            if year == "":
                year = item
            elif month == "":
                month = item
            elif day == "":
                day = item
        month = month_number(month)

    else:
        year = _between_tags(text, "Year")
        month = month_number(_between_tags(text, "Month"))
        day = _between_tags(text, "Day")

    return year, month, day


def format_date(year: str, month: str, day: str, separator: str = "/") -> str:
    """Join date parts, zero-padding single-digit month and day."""
    if year == "":
        return ""
    text = year
    if month:
        text += separator + month.zfill(2) if len(month) == 1 else separator + month
        if day:
            text += separator + day.zfill(2) if len(day) == 1 else separator + day
    return text


def first_page(text: str) -> str:
    words = WORD_RUNS.findall(text)
    return words[0] if words else ""


def genbank_to_medline_authors(name: str) -> str:
    """
    Convert a GenBank author to MEDLINE form.

    "Smith-Jones,J.-P." becomes "Smith-Jones JP": commas turn into spaces,
    periods are removed, and hyphens are dropped from the initials only.
    """
    if name == "":
        return name
    name = name.replace(",", " ").replace(".", "").strip()
    idx = name.rfind(" ")
    if idx >= 0:
        lft = name[:idx].strip()
        rgt = name[idx:].replace("-", "").strip()
        name = lft + " " + rgt
    return name


def initials(name: str) -> str:
    """Reduce a given name to one or two uppercase initials."""
    if name == "":
        return name
    if len(name) != 2 or not (name[0].isupper() and name[1].isupper()):
        for sep in (" ", "-", "."):
            lft, found, rgt = name.partition(sep)
            if found:
                break
        if found and lft and rgt:
            name = lft[0] + rgt[0]
        else:
            name = name[0]
    return name.upper()


def clean_journal(text: str) -> str:
    """Normalize a journal title for citation matching."""
    if text == "":
        return text
    text = text.replace("&#39;", "'").replace("'", "")
    text = text.replace(".", " ")
    text = text.replace(" &amp; ", " and ")
    text = " ".join(JOURNAL_WORDS.findall(text))
    return compress_runs_of_spaces(text).strip()


def describe_property(name: str) -> str:
    return PROPERTIES.get(name, "Other")


def doi_url(text: str) -> str:
    """Convert a DOI in any common written form to an escaped resolver URL."""
    text = text.removeprefix("doi:").strip().removeprefix("/")
    for prefix in DOI_PREFIXES:
        text = text.removeprefix(prefix)
    return "https://doi.org/" + quote_plus(text)


def trim_leading_zero(text: str) -> str:
    """Strip surrounding spaces and one leading zero, leaving "0" for a lone zero."""
    text = text.strip()
    if text.startswith("0"):
        text = text[1:] or "0"
    return text
