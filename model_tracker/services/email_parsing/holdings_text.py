"""Helpers for the vendor's "SYMBOL (NN%)" holdings strings.

A model's allocation arrives as free text such as::

    NVDA (22%)
    AVGO (39%)
    PXT.TO (18%)

The same strings are reported back verbatim in change alerts, so every helper
here returns the exact matched text rather than a re-formatted one.
"""

import re
from dataclasses import dataclass

HOLDING_PATTERN = re.compile(r"([A-Z.]+)\s*\((\d+)%\)")


@dataclass(frozen=True)
class Allocation:
    symbol: str
    percentage: int
    text: str  # exact source text, e.g. "NVDA (22%)"


def extract_allocations(portfolio_text: str | None) -> list[Allocation]:
    if not portfolio_text:
        return []
    return [
        Allocation(symbol=match.group(1), percentage=int(match.group(2)), text=match.group(0))
        for match in HOLDING_PATTERN.finditer(portfolio_text)
    ]


def extract_holdings(portfolio_text: str | None) -> list[str]:
    """Full "SYMBOL (NN%)" strings in source order."""
    return [allocation.text for allocation in extract_allocations(portfolio_text)]


def extract_symbols(portfolio_text: str | None) -> list[str]:
    """Symbols only; weights are ignored so rebalancing is not a change."""
    return [allocation.symbol for allocation in extract_allocations(portfolio_text)]


def holdings_by_symbol(portfolio_text: str | None) -> dict[str, str]:
    """First full holding string per symbol."""
    result: dict[str, str] = {}
    for allocation in extract_allocations(portfolio_text):
        result.setdefault(allocation.symbol, allocation.text)
    return result
