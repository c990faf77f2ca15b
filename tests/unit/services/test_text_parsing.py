"""Tests for cell text cleanup and holdings string helpers."""

import pytest

from model_tracker.services.email_parsing.holdings_text import (
    extract_allocations,
    extract_holdings,
    extract_symbols,
    holdings_by_symbol,
)
from model_tracker.services.email_parsing.text_utils import (
    clean_text,
    decode_html_entities,
    parse_int,
    parse_number,
)


class TestParseNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("$(1,234.56)", -1234.56),
            ("$1,234.56", 1234.56),
            ("22%", 22.0),
            ("-8.5%", -8.5),
            ("(2.5%)", -2.5),
            ("", 0.0),
            (None, 0.0),
            ("N/A", 0.0),
            ("-", 0.0),
        ],
    )
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected


def test_parse_int_takes_leading_integer():
    assert parse_int("12") == 12
    assert parse_int("30 trades") == 30
    assert parse_int("n/a") == 0
    assert parse_int("") == 0


def test_decode_html_entities():
    assert decode_html_entities("Glen S&amp;P 100") == "Glen S&P 100"
    assert decode_html_entities("") == ""


def test_clean_text_collapses_whitespace():
    assert clean_text("  Glen\xa0S&P \n 100 ") == "Glen S&P 100"
    assert clean_text(None) == ""


class TestHoldingsText:
    text = "NVDA (22%)\nAVGO (39%)\nPXT.TO (18%)"

    def test_extract_allocations(self):
        allocations = extract_allocations(self.text)
        assert [(a.symbol, a.percentage) for a in allocations] == [
            ("NVDA", 22),
            ("AVGO", 39),
            ("PXT.TO", 18),
        ]

    def test_extract_holdings_keeps_source_text(self):
        assert extract_holdings(self.text) == ["NVDA (22%)", "AVGO (39%)", "PXT.TO (18%)"]

    def test_extract_symbols(self):
        assert extract_symbols(self.text) == ["NVDA", "AVGO", "PXT.TO"]

    def test_holdings_by_symbol_keeps_first(self):
        assert holdings_by_symbol("NVDA (22%) NVDA (5%)") == {"NVDA": "NVDA (22%)"}

    def test_empty_text(self):
        assert extract_holdings("") == []
        assert extract_symbols(None) == []
