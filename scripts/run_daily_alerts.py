#!/usr/bin/env python3
"""Daily change-alert run.

Detects model holdings changes against the previous trading day and emails
the alert. Meant to be scheduled once per weekday after the vendor email
arrives; weekends and market holidays exit without fetching anything.

Usage:
    python scripts/run_daily_alerts.py                    # Today's market date
    python scripts/run_daily_alerts.py --date 2025-06-02  # A specific date
    python scripts/run_daily_alerts.py --dry-run          # Detect but do not email
"""

import argparse
import asyncio
import logging
import sys
from datetime import date

from model_tracker.config import settings
from model_tracker.services.change_detection_service import ChangeDetectionService
from model_tracker.services.clients import GmailImapClient, GoogleSheetsClient
from model_tracker.services.email_service import EmailService
from model_tracker.services.portfolio import AccountPortfolioService
from model_tracker.services.trading_calendar_service import TradingCalendarService, market_today

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Detect model portfolio changes and email the alert")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Date to check (YYYY-MM-DD). Defaults to today's market date",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Detect changes and log them without sending email",
    )
    return parser.parse_args(argv)


async def run_daily_alerts(
    target_date: date,
    change_detection_service: ChangeDetectionService | None = None,
    dry_run: bool = False,
) -> int:
    """
    One daily run.

    Args:
        target_date: Date to check
        change_detection_service: Service to use; built from settings when omitted
        dry_run: Skip sending the alert email

    Returns:
        Process exit code: 0 on success or a skipped day, 1 on failure
    """
    if not TradingCalendarService.should_send_daily_email(target_date):
        reason = TradingCalendarService.get_no_change_reason(target_date)
        logger.info(f"Skipping daily alert for {target_date}: {reason}")
        return 0

    try:
        if change_detection_service is None:
            with GoogleSheetsClient() as sheets_client:
                account_service = AccountPortfolioService(GmailImapClient(), sheets_client)
                alert = await ChangeDetectionService(account_service).detect_changes(target_date)
        else:
            alert = await change_detection_service.detect_changes(target_date)
    except Exception as e:
        logger.exception(f"Daily change detection failed for {target_date}")
        EmailService.send_error_notification(f"{type(e).__name__}: {e}")
        return 1

    logger.info(alert.message)
    if dry_run:
        logger.info("Dry run, alert email not sent")
        return 0

    EmailService.send_change_alert(alert)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    target_date = args.date or market_today(settings.market_timezone)
    return asyncio.run(run_daily_alerts(target_date, dry_run=args.dry_run))


if __name__ == "__main__":
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(main())
