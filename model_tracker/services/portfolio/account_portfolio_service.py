"""Account portfolio assembly.

Joins the models parsed from a day's vendor emails with the model -> account
mapping sheet. A model mapped to several accounts appears in each of them;
a parsed model with no mapping is logged and dropped.
"""

import asyncio
import copy
import logging
from collections import defaultdict
from datetime import date

from model_tracker.services.email_parsing import EmailParser, Holding, ParseReport, PerformanceData
from model_tracker.services.model_matching import models_match
from model_tracker.services.portfolio.portfolio_types import (
    AccountPortfolio,
    ModelAccountMapping,
    ModelData,
)

logger = logging.getLogger(__name__)


def to_model_data(holding: Holding) -> ModelData:
    """Model view of a parsed holding; plain holdings get a minimal performance block."""
    if holding.performance is not None:
        performance = copy.deepcopy(holding.performance)
    else:
        performance = PerformanceData(
            final_equity=holding.value,
            return_ytd=holding.day_change_percent,
        )
    return ModelData(name=holding.name, symbol=holding.symbol, performance=performance)


def group_by_account(
    holdings: list[Holding],
    mappings: list[ModelAccountMapping],
    day: str,
) -> list[AccountPortfolio]:
    """Fan each holding out to every mapping it matches, sorted by account name."""
    groups: dict[str, list[ModelData]] = defaultdict(list)

    for holding in holdings:
        matching = [mapping for mapping in mappings if models_match(holding.name, mapping.model)]
        if not matching:
            logger.warning(f"No account mapping found for model '{holding.name}'")
            continue

        for mapping in matching:
            groups[mapping.account].append(to_model_data(holding))

    portfolios = [
        AccountPortfolio(
            account_name=account_name,
            models=models,
            total_value=sum(model.performance.final_equity for model in models),
            date=day,
        )
        for account_name, models in groups.items()
    ]
    return sorted(portfolios, key=lambda portfolio: portfolio.account_name)


def log_parse_report(report: ParseReport, day: str) -> None:
    message = (
        f"Parse report for {day}: {report.parsed_count} rows parsed, "
        f"{report.skipped_count} tables skipped, {report.malformed_count} malformed"
    )
    if report.malformed_count:
        logger.warning(message)
    else:
        logger.info(message)


class AccountPortfolioService:
    """Builds per-account model portfolios for a date.

    Args:
        mail_client: Source of raw portfolio emails (``get_portfolio_emails``)
        sheets_client: Source of model -> account mappings
            (``get_model_account_mappings``)
        parser: Email parser, a fresh EmailParser by default
    """

    def __init__(self, mail_client, sheets_client, parser: EmailParser | None = None) -> None:
        self.mail_client = mail_client
        self.sheets_client = sheets_client
        self.parser = parser or EmailParser()

    async def fetch_email_holdings(
        self,
        target_date: date,
        allowed_models: list[str],
    ) -> list[Holding]:
        """All holdings parsed from the day's emails; an empty filter keeps every model."""
        emails = await asyncio.to_thread(self.mail_client.get_portfolio_emails, target_date, target_date)
        holdings, report = self.parse_emails(emails, allowed_models)
        log_parse_report(report, target_date.isoformat())
        return holdings

    def parse_emails(self, emails, allowed_models: list[str]) -> tuple[list[Holding], ParseReport]:
        """Holdings from every email plus one report merged across them."""
        holdings: list[Holding] = []
        report = ParseReport()
        for email in emails:
            result = self.parser.parse_filtered_portfolio_email(
                email.html_body, email.subject, email.date, allowed_models
            )
            holdings.extend(result.holdings)
            report.merge(result.report)
        return holdings, report

    async def get_account_portfolios(self, target_date: date) -> list[AccountPortfolio]:
        """
        Account portfolios for a date.

        Mappings and emails are fetched concurrently; a failure in either
        propagates.

        Args:
            target_date: Email date to assemble

        Returns:
            AccountPortfolio list sorted by account name, empty when there is
            no email for the date
        """
        day = target_date.isoformat()
        logger.info(f"Getting account portfolios for {day}")

        mappings, emails = await asyncio.gather(
            asyncio.to_thread(self.sheets_client.get_model_account_mappings),
            asyncio.to_thread(self.mail_client.get_portfolio_emails, target_date, target_date),
        )
        logger.info(f"Found {len(mappings)} model-account mappings and {len(emails)} emails for {day}")

        if not emails:
            return []

        allowed_models = [mapping.model for mapping in mappings]
        holdings, report = self.parse_emails(emails, allowed_models)
        log_parse_report(report, day)

        portfolios = group_by_account(holdings, mappings, day)
        logger.info(f"Created {len(portfolios)} account portfolios for {day}")
        return portfolios

    async def get_unique_accounts(self) -> list[str]:
        """Sorted distinct account names from the mapping sheet."""
        mappings = await asyncio.to_thread(self.sheets_client.get_model_account_mappings)
        return sorted({mapping.account for mapping in mappings})
