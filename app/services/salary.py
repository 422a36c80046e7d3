"""
Salary formatting

pt-BR currency without cents, as shown on job cards and public job ads
"""
import re
from typing import Optional

from app.services.pipeline import round_half_up

# Intl.NumberFormat("pt-BR") puts a no-break space after the symbol
CURRENCY_PREFIX = "R$\u00a0"
NEGOTIABLE = "A combinar"

_NON_DIGITS = re.compile(r"\D")


def format_currency(value: Optional[float]) -> str:
    if not value:
        return ""
    sign = "-" if value < 0 else ""
    whole = round_half_up(abs(value))
    grouped = f"{whole:,}".replace(",", ".")
    return f"{sign}{CURRENCY_PREFIX}{grouped}"


def parse_currency(value: Optional[str]) -> Optional[float]:
    """Keep only the digits: "R$ 5.000" -> 5000.0"""
    if not value:
        return None
    digits = _NON_DIGITS.sub("", value)
    return float(digits) if digits else None


def format_salary_range(
    salary_min: Optional[float],
    salary_max: Optional[float],
    mode: Optional[str] = None,
) -> str:
    if mode == "A_COMBINAR":
        return NEGOTIABLE

    has_min = salary_min is not None and salary_min > 0
    has_max = salary_max is not None and salary_max > 0

    if has_min and has_max:
        return f"{format_currency(salary_min)} – {format_currency(salary_max)}"
    if has_min:
        return f"A partir de {format_currency(salary_min)}"
    if has_max:
        return f"Até {format_currency(salary_max)}"
    return NEGOTIABLE


def coerce_currency(value):
    """Form input may arrive as display text ("R$ 5.000"); numbers pass through"""
    if isinstance(value, str):
        return parse_currency(value)
    return value
