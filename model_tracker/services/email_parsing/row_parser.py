"""Row-level parsing of holdings and model performance tables."""

import logging

from lxml.html import HtmlElement

from model_tracker.services.email_parsing.holdings_text import HOLDING_PATTERN
from model_tracker.services.email_parsing.table_extractor import (
    cell_text,
    cell_text_with_breaks,
    find_header_index,
    inline_color,
)
from model_tracker.services.email_parsing.text_utils import (
    decode_html_entities,
    parse_int,
    parse_number,
)
from model_tracker.services.email_parsing.types import Holding, PerformanceData
from model_tracker.services.model_matching import strip_number_prefix

logger = logging.getLogger(__name__)

GREEN_COLORS = {"green", "#00ff00", "#008000", "#0f0"}

HOLDING_COLUMNS = {
    "symbol": ["symbol", "ticker", "security"],
    "name": ["name", "description", "security name"],
    "quantity": ["quantity", "shares", "units"],
    "price": ["price", "market price", "current price"],
    "value": ["value", "market value", "total value"],
    "day_change": ["change", "day change", "daily change"],
    "day_change_percent": ["change %", "% change", "day change %"],
}

PERFORMANCE_COLUMNS = {
    "name": ["name", "model", "fund name"],
    "final_equity": ["final equity", "equity"],
    "probability_win": ["pr. win", "prob win"],
    "return_ytd": ["ret. ytd", "ytd"],
    "return_1_month": ["ret. 1mo", "1mo"],
    "return_3_month": ["ret. 3mo", "3mo"],
    "return_6_month": ["ret. 6mo", "6mo"],
    "return_12_month": ["ret. 12mo", "12mo"],
    "trades_ytd": ["trades ytd", "trades"],
    "max_drawdown": ["max dd", "max drawdown"],
    "current_drawdown": ["cur dd", "current dd"],
    "sharpe_ratio": ["sharpe"],
    "cagr": ["cagr"],
    "volatility": ["std(26)", "std", "volatility"],
    "portfolio": ["portfolio"],
    "ml_accuracies": ["ml accuracies", "accuracies"],
}

# PerformanceData fields parsed with parse_number
_NUMERIC_PERFORMANCE_FIELDS = (
    "final_equity",
    "probability_win",
    "return_ytd",
    "return_1_month",
    "return_3_month",
    "return_6_month",
    "return_12_month",
    "max_drawdown",
    "current_drawdown",
    "sharpe_ratio",
    "cagr",
    "volatility",
)


def resolve_columns(headers: list[str], columns: dict[str, list[str]]) -> dict[str, int]:
    """Field name -> column index (-1 when the table has no such column)."""
    return {field: find_header_index(headers, terms) for field, terms in columns.items()}


def _cell_value(values: list[str], index: int) -> str:
    if index == -1 or index >= len(values):
        return ""
    return values[index]


def parse_holding_row(cells: list[HtmlElement], headers: list[str]) -> Holding | None:
    """Parse a holdings-table row; None when the row has no symbol."""
    if not cells:
        return None

    values = [cell_text(cell) for cell in cells]
    columns = resolve_columns(headers, HOLDING_COLUMNS)

    symbol = _cell_value(values, columns["symbol"])
    if not symbol:
        return None

    name = _cell_value(values, columns["name"]) if columns["name"] != -1 else symbol

    return Holding(
        symbol=symbol,
        name=decode_html_entities(name) or symbol,
        quantity=parse_number(_cell_value(values, columns["quantity"])),
        price=parse_number(_cell_value(values, columns["price"])),
        value=parse_number(_cell_value(values, columns["value"])),
        day_change=parse_number(_cell_value(values, columns["day_change"])),
        day_change_percent=parse_number(_cell_value(values, columns["day_change_percent"])),
    )


def parse_performance_row(cells: list[HtmlElement], headers: list[str]) -> Holding | None:
    """
    Parse a model performance row into a model-as-a-holding.

    The holding carries quantity 1 and final equity as both price and value.
    Day change percent is the YTD return, since the vendor reports no daily
    change.
    """
    if not cells:
        return None

    values = [cell_text(cell) for cell in cells]
    columns = resolve_columns(headers, PERFORMANCE_COLUMNS)

    name = decode_html_entities(_cell_value(values, columns["name"]))
    if not name:
        return None

    performance = PerformanceData(
        trades_ytd=parse_int(_cell_value(values, columns["trades_ytd"])),
        ml_accuracies=_cell_value(values, columns["ml_accuracies"]),
    )
    for field in _NUMERIC_PERFORMANCE_FIELDS:
        setattr(performance, field, parse_number(_cell_value(values, columns[field])))

    portfolio_index = columns["portfolio"]
    if 0 <= portfolio_index < len(cells):
        portfolio_cell = cells[portfolio_index]
        performance.portfolio = cell_text_with_breaks(portfolio_cell)
        performance.green_holdings = extract_green_holdings(portfolio_cell)

    return Holding(
        symbol=strip_number_prefix(name),
        name=name,
        quantity=1,
        price=performance.final_equity,
        value=performance.final_equity,
        day_change=0.0,
        day_change_percent=performance.return_ytd,
        performance=performance,
    )


def parse_row(cells: list[HtmlElement], headers: list[str]) -> Holding | None:
    """Holdings interpretation first, performance interpretation as fallback."""
    return parse_holding_row(cells, headers) or parse_performance_row(cells, headers)


def is_green(color: str | None) -> bool:
    if not color:
        return False
    return color in GREEN_COLORS or "green" in color


def extract_green_holdings(cell: HtmlElement) -> list[str]:
    """
    Holdings rendered in green inside a portfolio cell (new positions).

    Green descendants are scanned for "SYMBOL (NN%)" tokens; a green element
    with text but no token contributes its raw text. The cell itself is also
    checked, tokens only.
    """
    green_holdings: list[str] = []

    def add(text: str) -> None:
        if text and text not in green_holdings:
            green_holdings.append(text)

    for element in cell.iterdescendants():
        if not isinstance(element.tag, str) or not is_green(inline_color(element)):
            continue
        text = cell_text(element)
        if not text:
            continue
        tokens = [match.group(0) for match in HOLDING_PATTERN.finditer(text)]
        if tokens:
            for token in tokens:
                add(token)
        else:
            add(text)

    if is_green(inline_color(cell)):
        for match in HOLDING_PATTERN.finditer(cell_text(cell)):
            add(match.group(0))

    if green_holdings:
        logger.debug(f"Found {len(green_holdings)} green holdings: {green_holdings}")
    return green_holdings
