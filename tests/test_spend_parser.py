"""Tests for the free-text spend parser."""

from decimal import Decimal

import pytest

from src.models.expense import CategoryKey, Currency
from src.parsing import parse, parse_spend
from src.parsing.spend_parser import (
    calculate_confidence,
    extract_amount,
    extract_currency,
    extract_merchant,
    extract_note,
    find_amount_word_index,
    format_amount,
    guess_category,
)


class TestScenarios:
    """End-to-end phrases."""

    def test_merchant_amount_currency_note(self):
        """Test the canonical quick-add phrase."""
        parsed = parse_spend("bbq hogfather 1200 baht ribs with Dasha")

        assert parsed.amount == Decimal("1200")
        assert parsed.currency == Currency.THB
        assert parsed.merchant == "bbq hogfather"
        assert parsed.note == "ribs with Dasha"
        assert parsed.group_guess == CategoryKey.FOOD
        assert parsed.confidence == pytest.approx(1.0)

    def test_euro_subscription(self):
        """Test a euro bill with the amount first."""
        parsed = parse_spend("50 eur netflix subscription")

        assert parsed.amount == Decimal("50")
        assert parsed.currency == Currency.EUR
        assert parsed.group_guess == CategoryKey.BILLS
        # Fallback merchant scan keeps 3+ letter words among the first three
        assert parsed.merchant == "eur netflix"
        assert parsed.note == "subscription"

    def test_single_word(self):
        """Test a phrase with a merchant-like word only."""
        parsed = parse_spend("coffee")

        assert parsed.amount is None
        assert parsed.currency == Currency.THB
        assert parsed.merchant == "coffee"
        assert parsed.note is None
        assert parsed.group_guess == CategoryKey.FOOD
        assert parsed.confidence == pytest.approx(0.5)

    def test_empty_string(self):
        """Test that empty input is a zero-confidence draft, not an error."""
        parsed = parse_spend("")

        assert parsed.raw_text == ""
        assert parsed.confidence == 0.0
        assert parsed.currency is None

    def test_bare_number(self):
        """Test a phrase that is only an amount."""
        parsed = parse_spend("1200")

        assert parsed.amount == Decimal("1200")
        assert parsed.currency == Currency.THB
        assert parsed.merchant is None
        assert parsed.note is None
        assert parsed.group_guess is None
        assert parsed.confidence == pytest.approx(0.6)

    def test_parse_alias(self):
        """Test that parse and parse_spend are the same operation."""
        assert parse is parse_spend


class TestInputContract:
    """Tests for empty and invalid input."""

    @pytest.mark.parametrize("value", ["", "   ", "\n\t", None, 42, ["1200 baht"]])
    def test_empty_or_invalid_input(self, value):
        """Test that every field but raw_text is absent."""
        parsed = parse_spend(value)

        assert parsed.raw_text == value
        assert parsed.confidence == 0.0
        assert parsed.amount is None
        assert parsed.currency is None
        assert parsed.merchant is None
        assert parsed.note is None
        assert parsed.group_guess is None

    def test_text_is_trimmed(self):
        """Test that surrounding whitespace is dropped from raw_text."""
        parsed = parse_spend("   coffee 60 baht  ")
        assert parsed.raw_text == "coffee 60 baht"

    def test_same_input_same_result(self):
        """Test that parsing is repeatable."""
        text = "pizza with friends 450 thb"
        assert parse_spend(text) == parse_spend(text)


class TestAmountExtraction:
    """Tests for the ordered amount patterns."""

    def test_currency_tagged_number_wins(self):
        """Test that a tagged number beats an earlier untagged one."""
        parsed = parse_spend("table 5 lunch 1200 baht")

        assert parsed.amount == Decimal("1200")
        assert parsed.merchant == "table 5 lunch"
        assert parsed.note is None
        assert parsed.confidence == pytest.approx(0.9)

    def test_currency_before_number(self):
        """Test 'thb 300' style phrases."""
        assert extract_amount("taxi thb 300") == Decimal("300")

    def test_no_partial_number_match(self):
        """Test that '200' is never read out of '1200 baht'."""
        assert extract_amount("dinner 1200 baht") == Decimal("1200")

    def test_thousands_separators(self):
        """Test comma and space separated thousands."""
        assert extract_amount("rent 12,500 baht") == Decimal("12500")
        assert extract_amount("rent 5 100 baht") == Decimal("5100")

    def test_decimal_amount(self):
        """Test up to two decimal places."""
        assert extract_amount("coffee 3.50 eur") == Decimal("3.50")

    def test_zero_falls_through(self):
        """Test that a non-positive match hands over to the next pattern."""
        assert extract_amount("tip 0 baht, paid thb 40") == Decimal("40")

    def test_no_amount(self):
        """Test text without any number."""
        assert extract_amount("lunch with Dasha") is None

    def test_case_insensitive_currency(self):
        """Test that currency words match in any case."""
        assert extract_amount("Beer 90 BAHT") == Decimal("90")


class TestCurrencyExtraction:
    """Tests for currency detection."""

    @pytest.mark.parametrize("text,expected", [
        ("50 eur netflix", Currency.EUR),
        ("museum 12 Euro", Currency.EUR),
        ("lunch 120 baht", Currency.THB),
        ("lunch 120 bath", Currency.THB),
        ("lunch 120", Currency.THB),
        ("europe trip 300", Currency.THB),
    ])
    def test_currency(self, text, expected):
        """Test euro words versus the THB default."""
        assert extract_currency(text) == expected

    def test_currency_always_present(self):
        """Test that non-empty input always gets a currency."""
        for text in ("x", "123", "hello world", "?!"):
            assert parse_spend(text).currency in (Currency.THB, Currency.EUR)


class TestMerchantExtraction:
    """Tests for the merchant heuristics."""

    def test_words_before_amount(self):
        """Test that at most three words before the amount are kept."""
        text = "dinner at the big bbq place 900 baht"
        index = find_amount_word_index(text.split(), Decimal("900"))
        assert index == 6
        assert extract_merchant(text, index) == "big bbq place"

    def test_fallback_skips_short_and_numeric_words(self):
        """Test the first-words fallback."""
        assert extract_merchant("90 to pub", -1) == "pub"

    def test_fallback_only_looks_at_first_three_words(self):
        """Test that words after the third are never used."""
        assert extract_merchant("at a 10 restaurant", -1) is None

    def test_amount_index_ignores_separators(self):
        """Test locating '12,500' for the amount 12500."""
        assert find_amount_word_index(["rent", "12,500", "baht"], Decimal("12500")) == 1

    def test_amount_index_missing(self):
        """Test that no amount yields -1."""
        assert find_amount_word_index(["coffee"], None) == -1


class TestNoteExtraction:
    """Tests for the leftover-text note."""

    def test_note_removes_amount_currency_and_merchant(self):
        """Test the basic removal steps."""
        note = extract_note("bbq hogfather 1200 baht ribs with Dasha", Decimal("1200"), "bbq hogfather")
        assert note == "ribs with Dasha"

    def test_merchant_words_removed_everywhere(self):
        """Test that merchant words are removed across the whole text."""
        note = extract_note("Market 200 baht fruit from the market", Decimal("200"), "Market")
        assert note == "fruit from the"

    def test_empty_note_is_none(self):
        """Test that nothing left means no note."""
        assert extract_note("coffee 60 baht", Decimal("60"), "coffee") is None

    def test_format_amount(self):
        """Test shortest decimal strings."""
        assert format_amount(Decimal("1200.00")) == "1200"
        assert format_amount(Decimal("12.50")) == "12.5"
        assert format_amount(Decimal("5100")) == "5100"

    def test_very_long_amount_is_located(self):
        """Test amounts far beyond int string limits and decimal precision."""
        digits = "9" * 5000
        parsed = parse_spend("rent " + digits + " baht")

        assert format_amount(Decimal(digits)) == digits
        assert parsed.amount == Decimal(digits)
        assert parsed.merchant == "rent"
        assert parsed.note is None


class TestCategoryGuess:
    """Tests for keyword-based category guessing."""

    def test_food_checked_before_fun(self):
        """Test priority when two lists match."""
        assert guess_category("pizza and a movie") == CategoryKey.FOOD

    def test_fun_before_bills(self):
        """Test priority between fun and bills."""
        assert guess_category("karaoke then phone top-up") == CategoryKey.FUN

    def test_case_insensitive(self):
        """Test that keywords match in any case."""
        assert guess_category("NETFLIX") == CategoryKey.BILLS

    def test_substring_match(self):
        """Test that keywords match inside longer words."""
        assert guess_category("seafood") == CategoryKey.FOOD

    def test_no_match(self):
        """Test text without keywords."""
        assert guess_category("random stuff") is None


class TestConfidence:
    """Tests for the weighted confidence score."""

    def test_all_fields(self):
        """Test the maximum score."""
        fields = {
            "amount": Decimal("1"),
            "currency": Currency.THB,
            "merchant": "x",
            "note": "y",
            "group_guess": CategoryKey.FOOD,
        }
        assert calculate_confidence(fields) == pytest.approx(1.0)

    def test_currency_only(self):
        """Test the minimum score on non-empty input."""
        assert calculate_confidence({"currency": Currency.THB}) == pytest.approx(0.2)

    def test_monotonic(self):
        """Test that adding a field never lowers the score."""
        fields = {"currency": Currency.THB}
        previous = calculate_confidence(fields)
        for name, value in (
            ("merchant", "cafe"),
            ("amount", Decimal("5")),
            ("note", "latte"),
            ("group_guess", CategoryKey.FOOD),
        ):
            fields[name] = value
            current = calculate_confidence(fields)
            assert current >= previous
            previous = current

    @pytest.mark.parametrize("text", [
        "bbq hogfather 1200 baht ribs with Dasha",
        "0",
        "1,2,3,4",
        "baht baht baht",
        "eur 0.5",
        "999999999999999999999 thb",
        "9" * 5000,
        "rent " + "9" * 5000 + " baht",
    ])
    def test_bounds_and_positive_amounts(self, text):
        """Test confidence bounds and amount positivity on odd input."""
        parsed = parse_spend(text)
        assert 0.0 <= parsed.confidence <= 1.0
        if parsed.amount is not None:
            assert parsed.amount > 0
            assert parsed.amount.is_finite()
