"""Table extraction and classification for vendor portfolio emails.

Scans an HTML document for tables, reduces each to its header texts and data
rows, and classifies it as a holdings table, a model performance table, or
neither. Layout and decorative tables are common in the vendor's emails, so a
table that does not classify is skipped, never treated as an error.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from lxml import etree, html
from lxml.html import HtmlElement

from model_tracker.services.email_parsing.text_utils import clean_text

logger = logging.getLogger(__name__)

HOLDINGS_KEYWORDS = ["symbol", "quantity", "price", "value", "shares", "position", "market value"]
PERFORMANCE_KEYWORDS = ["final equity", "ret. ytd", "ret. 1mo", "sharpe", "cagr", "portfolio", "name"]
PERFORMANCE_KEYWORD_THRESHOLD = 3
NAME_COLUMN_TERMS = ["name", "model", "fund name", "security name"]

BLOCK_TAGS = {"div", "p", "li", "tr", "table"}
_STYLE_COLOR = re.compile(r"(?:^|;)\s*color\s*:\s*([^;]+)", re.IGNORECASE)


class TableKind(str, Enum):
    HOLDINGS = "holdings"
    PERFORMANCE = "performance"


@dataclass
class ExtractedTable:
    """A table reduced to lower-cased header texts and data-row cells."""

    index: int
    headers: list[str]
    rows: list[list[HtmlElement]]
    kind: TableKind | None
    skip_reason: str = ""

    @property
    def header_text(self) -> str:
        return " ".join(self.headers)


def is_holdings_table(header_text: str) -> bool:
    return any(keyword in header_text for keyword in HOLDINGS_KEYWORDS)


def is_performance_table(header_text: str) -> bool:
    hits = sum(1 for keyword in PERFORMANCE_KEYWORDS if keyword in header_text)
    return hits >= PERFORMANCE_KEYWORD_THRESHOLD


def classify_headers(headers: list[str]) -> TableKind | None:
    """Holdings wins when a header row satisfies both heuristics."""
    header_text = " ".join(header.lower() for header in headers)
    if is_holdings_table(header_text):
        return TableKind.HOLDINGS
    if is_performance_table(header_text):
        return TableKind.PERFORMANCE
    return None


def find_header_index(headers: list[str], search_terms: list[str]) -> int:
    """Index of the first header containing a search term; terms are tried in order."""
    for term in search_terms:
        for index, header in enumerate(headers):
            if term in header:
                return index
    return -1


def load_document(html_content: str) -> HtmlElement | None:
    if not html_content or not html_content.strip():
        return None
    try:
        return html.fromstring(html_content)
    except (etree.ParserError, ValueError) as e:
        logger.warning(f"Unparseable email HTML: {e}")
        return None


def table_rows(table: HtmlElement) -> list[HtmlElement]:
    """The table's own rows; nested tables are extracted separately."""
    return table.xpath("./tr | ./thead/tr | ./tbody/tr | ./tfoot/tr")


def row_cells(row: HtmlElement) -> list[HtmlElement]:
    return row.xpath("./th | ./td")


def cell_text(cell: HtmlElement) -> str:
    return clean_text(cell.text_content())


def cell_text_with_breaks(cell: HtmlElement) -> str:
    """Cell text keeping <br> and block boundaries as newlines."""
    raw = _text_with_breaks(cell)
    lines = (clean_text(line) for line in raw.split("\n"))
    return "\n".join(line for line in lines if line)


def _text_with_breaks(element: HtmlElement) -> str:
    chunks = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str):
            if child.tag == "br":
                chunks.append("\n")
            elif child.tag in BLOCK_TAGS:
                chunks.append("\n" + _text_with_breaks(child) + "\n")
            else:
                chunks.append(_text_with_breaks(child))
        chunks.append(child.tail or "")
    return "".join(chunks)


def get_attribute(element: HtmlElement, name: str) -> str | None:
    value = element.get(name)
    return value if value else None


def inline_color(element: HtmlElement) -> str | None:
    """Text color declared on the element itself (style `color:` or <font color>)."""
    style = get_attribute(element, "style")
    if style:
        match = _STYLE_COLOR.search(style)
        if match:
            return match.group(1).strip().lower()
    if element.tag == "font":
        color = get_attribute(element, "color")
        if color:
            return color.strip().lower()
    return None


def extract_tables(html_content: str) -> list[ExtractedTable]:
    """
    Extract and classify every table in the document.

    Args:
        html_content: Full HTML document

    Returns:
        Tables in document order. `kind` is None for unclassified tables;
        tables without a header row and a data row also carry a skip_reason
    """
    document = load_document(html_content)
    if document is None:
        return []

    tables = []
    for index, table in enumerate(document.iter("table")):
        rows = table_rows(table)
        if len(rows) < 2:
            logger.debug(f"Skipping table {index}: insufficient rows ({len(rows)})")
            tables.append(ExtractedTable(index, [], [], None, skip_reason="insufficient rows"))
            continue

        header_cells = row_cells(rows[0])
        if not header_cells:
            logger.debug(f"Skipping table {index}: no header row")
            tables.append(ExtractedTable(index, [], [], None, skip_reason="no header row"))
            continue

        headers = [cell_text(cell).lower() for cell in header_cells]
        data_rows = [row_cells(row) for row in rows[1:]]
        tables.append(
            ExtractedTable(
                index=index,
                headers=headers,
                rows=data_rows,
                kind=classify_headers(headers),
            )
        )

    return tables


def document_text(html_content: str) -> str:
    document = load_document(html_content)
    if document is None:
        return ""
    return document.text_content()
