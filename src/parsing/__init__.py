"""Free-text spend parsing package."""

from src.parsing.spend_parser import (
    AMOUNT_PATTERNS,
    CATEGORY_KEYWORDS,
    CONFIDENCE_WEIGHTS,
    CURRENCY_WORDS,
    parse,
    parse_spend,
)

__all__ = [
    "AMOUNT_PATTERNS",
    "CATEGORY_KEYWORDS",
    "CONFIDENCE_WEIGHTS",
    "CURRENCY_WORDS",
    "parse",
    "parse_spend",
]
