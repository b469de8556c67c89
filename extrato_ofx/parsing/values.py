"""
Value helpers shared by the extractors: Brazilian amounts, dates, year
inference and Portuguese month names.
"""
import re
from datetime import date
from typing import Optional, Tuple

from .exceptions import AmountUnparsable, DateOutOfRange

# 1.234,56 (thousands separated by '.', two decimals after ',')
AMOUNT_PATTERN = r"\d{1,3}(?:\.\d{3})*,\d{2}"
LOOSE_AMOUNT_PATTERN = r"[\d.]+,\d{2}"

MONTHS = {
    'JANEIRO': 1, 'FEVEREIRO': 2, 'MARCO': 3, 'MARÇO': 3, 'ABRIL': 4,
    'MAIO': 5, 'JUNHO': 6, 'JULHO': 7, 'AGOSTO': 8, 'SETEMBRO': 9,
    'OUTUBRO': 10, 'NOVEMBRO': 11, 'DEZEMBRO': 12,
}

MONTH_ABBREVIATIONS = {
    'JAN': 1, 'FEV': 2, 'MAR': 3, 'ABR': 4, 'MAI': 5, 'JUN': 6,
    'JUL': 7, 'AGO': 8, 'SET': 9, 'OUT': 10, 'NOV': 11, 'DEZ': 12
}

MONTH_NAME_PATTERN = r"(?:janeiro|fevereiro|mar[cç]o|abril|maio|junho|julho|agosto|setembro|outubro|novembro|dezembro)"
MONTH_ABBR_PATTERN = r"(?:jan|fev|mar|abr|mai|jun|jul|ago|set|out|nov|dez)"

_AMOUNT_CLEAN = re.compile(r"[R$\s+]")


def parse_br_amount(raw) -> float:
    """
    Parses a Brazilian currency token into its absolute value.

        "1.234,56"     -> 1234.56
        "-R$ 1.234,56" -> 1234.56
        "150,00C"      -> 150.0

    Raises AmountUnparsable when nothing numeric is left.
    """
    if isinstance(raw, (int, float)):
        return abs(float(raw))
    if raw is None:
        raise AmountUnparsable("empty amount")

    txt = _AMOUNT_CLEAN.sub("", str(raw)).strip().rstrip("CDcd*").lstrip("-").rstrip("-")
    if not re.fullmatch(r"[\d.]*\d(?:,\d{1,2})?", txt):
        raise AmountUnparsable(f"not a BR amount: {raw!r}")

    clean_str = txt.replace('.', '').replace(',', '.')
    try:
        return abs(float(clean_str))
    except ValueError:
        raise AmountUnparsable(f"not a BR amount: {raw!r}")


def is_negative_amount(raw: str) -> bool:
    """True when the token carries a leading or trailing minus sign."""
    txt = str(raw).strip()
    return txt.startswith("-") or txt.endswith("-")


def month_from_name(name: str) -> Optional[int]:
    """Month number for a Portuguese month name or 3-letter abbreviation."""
    key = name.strip().upper()
    if key in MONTHS:
        return MONTHS[key]
    return MONTH_ABBREVIATIONS.get(key[:3])


def to_iso_date(day, month, year) -> str:
    """
    Build an ISO date, validating it against the calendar.

    Raises DateOutOfRange for day/month outside 1-31/1-12 or impossible
    dates such as 31/02.
    """
    try:
        d, m, y = int(day), int(month), int(year)
    except (TypeError, ValueError):
        raise DateOutOfRange(f"non-numeric date {day}/{month}/{year}")
    if not (1 <= d <= 31 and 1 <= m <= 12):
        raise DateOutOfRange(f"date out of range: {day}/{month}/{year}")
    try:
        return date(y, m, d).isoformat()
    except ValueError:
        raise DateOutOfRange(f"invalid calendar date: {day}/{month}/{year}")


def parse_br_date(raw: str) -> date:
    """Parse 'dd/mm/yyyy' (or 'dd/mm/yy') into a date."""
    parts = raw.strip().split("/")
    if len(parts) != 3:
        raise DateOutOfRange(f"not a full date: {raw!r}")
    day, month, year = parts
    if len(year) == 2:
        year = expand_two_digit_year(year)
    return date.fromisoformat(to_iso_date(day, month, year))


def br_date_to_iso(raw: str) -> str:
    return parse_br_date(raw).isoformat()


def expand_two_digit_year(year) -> int:
    """'25' -> 2025, '98' -> 1998 (pivot at 50)."""
    y = int(year)
    return 2000 + y if y < 50 else 1900 + y


def infer_year(month: int, period_start: date, period_end: date) -> int:
    """
    Year of a dd/mm date printed inside a statement period.

    Only a period that crosses the new year is ambiguous: months earlier
    than the start month belong to the end year.
    """
    if period_end.year > period_start.year and month < period_start.month and month <= period_end.month:
        return period_end.year
    return period_start.year


def day_month_to_iso(day_month: str, period: Tuple[date, date]) -> str:
    """'05/01' + period -> ISO date with the inferred year."""
    day, month = day_month.split("/")[:2]
    try:
        year = infer_year(int(month), period[0], period[1])
    except ValueError:
        raise DateOutOfRange(f"non-numeric date {day_month!r}")
    return to_iso_date(day, month, year)
