"""Vendor portfolio email parsing.

Table extraction, row parsing and per-email orchestration.
"""

from .email_parser import EmailParser, parse_email_date
from .holdings_text import extract_holdings, extract_symbols, holdings_by_symbol
from .table_extractor import ExtractedTable, TableKind, extract_tables
from .types import (
    EmailParseResult,
    Holding,
    ParseReport,
    ParseStatus,
    PerformanceData,
    PortfolioData,
    RawEmail,
)

__all__ = [
    "EmailParseResult",
    "EmailParser",
    "ExtractedTable",
    "Holding",
    "ParseReport",
    "ParseStatus",
    "PerformanceData",
    "PortfolioData",
    "RawEmail",
    "TableKind",
    "extract_holdings",
    "extract_symbols",
    "extract_tables",
    "holdings_by_symbol",
    "parse_email_date",
]
