"""Portfolio email parsing.

Turns one vendor email into per-table PortfolioData records. Two entry points:

- parse_filtered_portfolio_email: every holdings or performance table, rows
  limited to the given model names (an empty list keeps every row). This is
  the path used by account assembly, change detection and the watch list.
- parse_portfolio_email: the first holdings table only, with totals taken
  from the email's own summary text when present.
"""

import logging
import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from zoneinfo import ZoneInfo

from model_tracker.config import settings
from model_tracker.services.email_parsing.row_parser import parse_holding_row, parse_row
from model_tracker.services.email_parsing.table_extractor import (
    NAME_COLUMN_TERMS,
    TableKind,
    cell_text,
    document_text,
    extract_tables,
    find_header_index,
)
from model_tracker.services.email_parsing.text_utils import decode_html_entities, parse_number
from model_tracker.services.email_parsing.types import (
    EmailParseResult,
    Holding,
    ParseReport,
    ParseStatus,
    PortfolioData,
)
from model_tracker.services.model_matching import matches_any

logger = logging.getLogger(__name__)

ACCOUNT_NAME_PATTERNS = [
    re.compile(r"account\s*name[:\s]*([^\n\r<]+)", re.IGNORECASE),
    re.compile(r"portfolio[:\s]*([^\n\r<]+)", re.IGNORECASE),
]
ACCOUNT_NUMBER_PATTERN = re.compile(r"account\s*(?:number|#)[:\s]*([0-9\-*]+)", re.IGNORECASE)

SUMMARY_TOTAL_PATTERN = re.compile(
    r"total\s*(?:value|portfolio)[:\s]*\$?([0-9,]+(?:\.[0-9]{2})?)", re.IGNORECASE
)
SUMMARY_CHANGE_PATTERN = re.compile(
    r"(?:day|daily)\s*change[:\s]*\$?([+-]?[0-9,]+(?:\.[0-9]{2})?)", re.IGNORECASE
)
SUMMARY_PERCENT_PATTERN = re.compile(
    r"(?:day|daily)\s*change[:\s]*[^%]*?([+-]?[0-9.]+)%", re.IGNORECASE
)


def calculate_total_value(holdings: list[Holding]) -> float:
    return sum(holding.value for holding in holdings)


def calculate_total_day_change(holdings: list[Holding]) -> float:
    return sum(holding.day_change for holding in holdings)


def calculate_day_change_percent(total_value: float, day_change: float) -> float:
    """Change relative to the prior-day value, 0 when there is no value or no base."""
    base = total_value - day_change
    if total_value <= 0 or base == 0:
        return 0.0
    return day_change / base * 100


def parse_email_date(date_string: str | None, timezone: str | None = None) -> str:
    """
    Normalise an email Date header (RFC 2822 or ISO) to an ISO calendar date.

    Aware timestamps are converted to the market timezone first; unparseable
    input falls back to today's market date.
    """
    tz = ZoneInfo(timezone or settings.market_timezone)
    parsed: datetime | None = None

    if date_string:
        try:
            parsed = parsedate_to_datetime(date_string)
        except (TypeError, ValueError, IndexError):
            try:
                parsed = datetime.fromisoformat(date_string.strip().replace("Z", "+00:00"))
            except ValueError:
                logger.warning(f"Unparseable email date '{date_string}', using today")

    if parsed is None:
        return datetime.now(tz).date().isoformat()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.date().isoformat()


def find_account_name(text: str) -> str | None:
    for pattern in ACCOUNT_NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if name:
                return name
    return None


def find_account_number(text: str) -> str | None:
    match = ACCOUNT_NUMBER_PATTERN.search(text)
    return match.group(1).strip() if match else None


class EmailParser:
    """Parses vendor portfolio emails into PortfolioData records."""

    def parse_filtered_portfolio_email(
        self,
        html_content: str,
        subject: str,
        email_date: str,
        allowed_models: list[str],
    ) -> EmailParseResult:
        """
        Parse every holdings/performance table, keeping rows whose name column
        matches one of allowed_models.

        Args:
            html_content: Email HTML body
            subject: Email subject (logged only)
            email_date: Email Date header
            allowed_models: Canonical model names; empty keeps every row

        Returns:
            EmailParseResult with one PortfolioData per table that produced
            holdings, and a report of skipped and malformed tables/rows
        """
        report = ParseReport()
        portfolios: list[PortfolioData] = []
        parsed_date = parse_email_date(email_date)

        tables = extract_tables(html_content)
        if not tables:
            logger.info(f"No usable tables in email '{subject}'")
            return EmailParseResult(portfolios=portfolios, report=report)

        text = document_text(html_content)
        account_name = find_account_name(text)
        account_number = find_account_number(text)

        for table in tables:
            if table.kind is None:
                report.record(
                    ParseStatus.SKIPPED,
                    table.index,
                    reason=table.skip_reason or "not a holdings table",
                )
                continue

            name_index = find_header_index(table.headers, NAME_COLUMN_TERMS)
            if name_index == -1:
                logger.debug(f"Table {table.index}: no name column, skipping")
                report.record(ParseStatus.SKIPPED, table.index, reason="no name column")
                continue

            holdings: list[Holding] = []
            for row_index, cells in enumerate(table.rows, start=1):
                if not cells:
                    continue
                if len(cells) <= name_index:
                    report.record(
                        ParseStatus.MALFORMED,
                        table.index,
                        row_index,
                        reason="insufficient cells for name column",
                    )
                    continue

                model_name = decode_html_entities(cell_text(cells[name_index]))
                if not matches_any(model_name, allowed_models):
                    continue

                holding = parse_row(cells, table.headers)
                if holding is None:
                    report.record(
                        ParseStatus.MALFORMED,
                        table.index,
                        row_index,
                        reason=f"unparseable row for model '{model_name}'",
                    )
                    continue

                holdings.append(holding)
                report.record(ParseStatus.PARSED, table.index, row_index)

            if not holdings:
                logger.debug(f"Table {table.index}: no matching holdings")
                continue

            total_value = calculate_total_value(holdings)
            day_change = calculate_total_day_change(holdings)
            portfolios.append(
                PortfolioData(
                    account_name=account_name or f"Table {table.index + 1}",
                    account_number=account_number or f"table-{table.index}",
                    holdings=holdings,
                    total_value=total_value,
                    day_change=day_change,
                    day_change_percent=calculate_day_change_percent(total_value, day_change),
                    date=parsed_date,
                )
            )

        logger.info(
            f"Parsed email '{subject}': {len(portfolios)} portfolios, "
            f"{report.parsed_count} rows parsed, {report.skipped_count} tables skipped, "
            f"{report.malformed_count} malformed"
        )
        return EmailParseResult(portfolios=portfolios, report=report)

    def parse_portfolio_email(
        self,
        html_content: str,
        subject: str,
        email_date: str,
    ) -> PortfolioData | None:
        """Parse the first holdings table, honouring summary totals found in the email text."""
        tables = [table for table in extract_tables(html_content) if table.kind == TableKind.HOLDINGS]

        for table in tables:
            holdings = [
                holding
                for holding in (parse_holding_row(cells, table.headers) for cells in table.rows)
                if holding is not None
            ]
            if not holdings:
                continue

            text = document_text(html_content)
            summary_total, summary_change, summary_percent = self._extract_summary(text)

            total_value = summary_total or calculate_total_value(holdings)
            day_change = summary_change or calculate_total_day_change(holdings)
            day_change_percent = summary_percent or calculate_day_change_percent(
                calculate_total_value(holdings), calculate_total_day_change(holdings)
            )

            return PortfolioData(
                account_name=find_account_name(text) or "Unknown Account",
                account_number=find_account_number(text) or "",
                holdings=holdings,
                total_value=total_value,
                day_change=day_change,
                day_change_percent=day_change_percent,
                date=parse_email_date(email_date),
            )

        logger.info(f"No holdings table found in email '{subject}'")
        return None

    @staticmethod
    def _extract_summary(text: str) -> tuple[float, float, float]:
        total = SUMMARY_TOTAL_PATTERN.search(text)
        change = SUMMARY_CHANGE_PATTERN.search(text)
        percent = SUMMARY_PERCENT_PATTERN.search(text)
        return (
            parse_number(total.group(1)) if total else 0.0,
            parse_number(change.group(1)) if change else 0.0,
            parse_number(percent.group(1)) if percent else 0.0,
        )

