"""
Free-text Spend Parser

Turns one spoken or typed utterance ("bbq hogfather 1200 baht ribs with Dasha")
into a ParsedSpend draft: amount, currency, merchant, note, category guess
and a confidence score.

DESIGN DECISION: The parser is a pure function of its input.
- No I/O, no logging, no settings lookup, no shared mutable state
- Safe to call on every transcript update and from any thread
- Never raises: input it cannot make sense of yields fewer fields and
  a lower confidence, not an error

All priority rules (amount patterns, category keyword lists, confidence
weights) live in the ordered tables below so they can be audited in one place.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from src.models.expense import CategoryKey, Currency, ParsedSpend


# =============================================================================
# PATTERN TABLES
# =============================================================================

CURRENCY_WORDS = ("baht", "thb", "eur", "euro", "bath")
EURO_WORDS = ("eur", "euro")

_CURRENCY = "(?:" + "|".join(CURRENCY_WORDS) + ")"

# Thousands groups separated by a comma or whitespace, up to two decimals.
_NUMBER = r"(\d{1,3}(?:[,\s]\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"

# Tried in order; the first pattern whose first match yields a positive
# amount wins, so a currency-tagged number beats an earlier bare one.
AMOUNT_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    ("number_then_currency", re.compile(rf"(?<![\w.,]){_NUMBER}\s*{_CURRENCY}\b", re.IGNORECASE)),
    ("currency_then_number", re.compile(rf"\b{_CURRENCY}\s*{_NUMBER}(?!\w)", re.IGNORECASE)),
    ("standalone_number", re.compile(rf"(?<![\w.,]){_NUMBER}(?!\w)")),
)

CURRENCY_WORD_RE = re.compile(rf"\b{_CURRENCY}\b", re.IGNORECASE)
EURO_WORD_RE = re.compile(r"\b(?:" + "|".join(EURO_WORDS) + r")\b", re.IGNORECASE)

_SEPARATORS_RE = re.compile(r"[,\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_NUMERIC_WORD_RE = re.compile(r"^\d+$")

# Checked in order: the first list with any substring hit wins.
CATEGORY_KEYWORDS: tuple[tuple[CategoryKey, tuple[str, ...]], ...] = (
    (CategoryKey.FOOD, (
        "food", "restaurant", "cafe", "coffee", "lunch", "dinner", "breakfast",
        "bbq", "burger", "pizza", "pasta", "sushi", "thai", "chinese", "indian",
        "meal", "eat", "dining", "takeout", "delivery", "grocery", "supermarket",
        "market", "ribs", "steak", "chicken", "fish", "vegetable", "fruit",
    )),
    (CategoryKey.FUN, (
        "fun", "entertainment", "movie", "cinema", "theater", "concert", "show",
        "game", "gaming", "arcade", "bowling", "karaoke", "bar", "pub", "club",
        "drink", "beer", "wine", "cocktail", "party", "event", "festival",
        "amusement", "park", "zoo", "museum", "gallery", "sport", "gym", "fitness",
    )),
    (CategoryKey.BILLS, (
        "bill", "bills", "utility", "electric", "electricity", "water", "gas",
        "internet", "wifi", "phone", "mobile", "rent", "mortgage", "insurance",
        "tax", "subscription", "netflix", "spotify", "youtube", "premium",
        "service", "maintenance", "repair", "fuel", "petrol", "diesel",
    )),
)

# (field, weight) on a 5-point scale.
CONFIDENCE_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("amount", 2.0),
    ("currency", 1.0),
    ("merchant", 1.0),
    ("note", 0.5),
    ("group_guess", 0.5),
)

MAX_MERCHANT_WORDS = 3


# =============================================================================
# EXTRACTION STEPS
# =============================================================================

def _to_amount(raw: str) -> Optional[Decimal]:
    try:
        amount = Decimal(_SEPARATORS_RE.sub("", raw))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def extract_amount(text: str) -> Optional[Decimal]:
    """
    Find the spend amount.

    Each pattern in AMOUNT_PATTERNS gets one shot (its first match);
    a match that does not parse to a positive number hands over
    to the next pattern.
    """
    for _name, pattern in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        amount = _to_amount(match.group(1))
        if amount is not None:
            return amount
    return None


def format_amount(amount: Decimal) -> str:
    """Shortest decimal string for an amount: 1200.00 -> '1200', 12.50 -> '12.5'."""
    # Exact at any length: no int() conversion, no context rounding
    integral = amount.to_integral_value()
    if amount == integral:
        return format(integral, "f")
    return format(amount, "f").rstrip("0")


def find_amount_word_index(words: list[str], amount: Optional[Decimal]) -> int:
    """Index of the first word containing the amount (separators ignored), else -1."""
    if amount is None:
        return -1
    amount_str = format_amount(amount)
    for index, word in enumerate(words):
        if amount_str in _SEPARATORS_RE.sub("", word):
            return index
    return -1


def extract_currency(text: str) -> Currency:
    """EUR when a euro word is present, THB otherwise (explicit or default)."""
    if EURO_WORD_RE.search(text):
        return Currency.EUR
    return Currency.THB


def extract_merchant(text: str, amount_word_index: int) -> Optional[str]:
    """
    Pick a short merchant span.

    1. Up to three words right before the amount ("<merchant> <amount> ...")
    2. Otherwise the meaningful words among the first three
       (longer than two characters, not purely numeric)
    """
    words = text.split()

    if amount_word_index > 0:
        candidate = " ".join(words[:amount_word_index][-MAX_MERCHANT_WORDS:]).strip()
        if len(candidate) > 1:
            return candidate

    merchant_words = [
        word for word in words[:MAX_MERCHANT_WORDS]
        if len(word) > 2 and not _NUMERIC_WORD_RE.match(word)
    ]
    if merchant_words:
        return " ".join(merchant_words)

    return None


def extract_note(
    text: str,
    amount: Optional[Decimal],
    merchant: Optional[str],
) -> Optional[str]:
    """
    Whatever is left once amount, currency words and merchant words are removed.

    Merchant words are removed everywhere in the text, not only inside
    the merchant span.
    """
    note = text.strip()

    if amount is not None:
        amount_re = re.compile(rf"\b{re.escape(format_amount(amount))}\b")
        note = amount_re.sub("", note).strip()

    note = CURRENCY_WORD_RE.sub("", note).strip()

    if merchant:
        for word in merchant.split():
            word_re = re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)
            note = word_re.sub("", note).strip()

    note = _WHITESPACE_RE.sub(" ", note).strip()

    return note or None


def guess_category(text: str) -> Optional[CategoryKey]:
    """First category in CATEGORY_KEYWORDS with a keyword inside the text."""
    lower_text = text.lower()
    for key, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return key
    return None


def calculate_confidence(fields: dict[str, Any]) -> float:
    """Share of CONFIDENCE_WEIGHTS covered by the populated fields, at most 1."""
    max_score = sum(weight for _field, weight in CONFIDENCE_WEIGHTS)
    score = sum(
        weight for field, weight in CONFIDENCE_WEIGHTS
        if fields.get(field) is not None
    )
    return min(1.0, score / max_score) if max_score > 0 else 0.0


# =============================================================================
# API
# =============================================================================

def parse_spend(text: Union[str, Any]) -> ParsedSpend:
    """
    Parse a free-form utterance into a ParsedSpend draft.

    Empty, whitespace-only or non-string input is not an error: it yields
    a zero-confidence draft carrying the input untouched.

    Example:
        >>> parse_spend("bbq hogfather 1200 baht ribs with Dasha")
        ParsedSpend(raw_text='bbq hogfather 1200 baht ribs with Dasha',
                    amount=Decimal('1200'), currency=<Currency.THB: 'THB'>,
                    merchant='bbq hogfather', note='ribs with Dasha',
                    group_guess=<CategoryKey.FOOD: 'food'>, confidence=1.0)
    """
    if not isinstance(text, str) or not text.strip():
        return ParsedSpend(raw_text=text, confidence=0.0)

    normalized_text = text.strip()

    # Amount first: the merchant is anchored on its position
    amount = extract_amount(normalized_text)
    amount_word_index = find_amount_word_index(normalized_text.split(), amount)

    fields = {
        "amount": amount,
        "currency": extract_currency(normalized_text),
        "merchant": extract_merchant(normalized_text, amount_word_index),
        "group_guess": guess_category(normalized_text),
    }
    fields["note"] = extract_note(normalized_text, amount, fields["merchant"])

    return ParsedSpend(
        raw_text=normalized_text,
        confidence=calculate_confidence(fields),
        **fields,
    )


parse = parse_spend
