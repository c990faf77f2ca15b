"""Trading calendar service for market holiday detection."""

import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pandas as pd
import pandas_market_calendars as mcal

from model_tracker.services.exceptions import TradingCalendarError

logger = logging.getLogger(__name__)

# Upper bound on day-stepping; real calendars never close this long
MAX_TRADING_DAY_SEARCH = 30

FIRST_COVERED_YEAR = 2024
LAST_COVERED_YEAR = 2030


def day_after_thanksgiving(year: int) -> date:
    """Friday after the fourth Thursday of November (early close, no vendor run)."""
    november_first = date(year, 11, 1)
    first_thursday = november_first + timedelta(days=(3 - november_first.weekday()) % 7)
    return first_thursday + timedelta(days=22)


def load_market_holidays(first_year: int, last_year: int) -> frozenset[date]:
    """
    NYSE full-day closures for the covered years, plus the day after Thanksgiving.

    Args:
        first_year: First calendar year to include
        last_year: Last calendar year to include

    Returns:
        Frozen set of closure dates
    """
    nyse = mcal.get_calendar("NYSE")
    closures = {pd.Timestamp(holiday).date() for holiday in nyse.holidays().holidays}
    covered = {day for day in closures if first_year <= day.year <= last_year}
    covered.update(day_after_thanksgiving(year) for year in range(first_year, last_year + 1))
    return frozenset(covered)


MARKET_HOLIDAYS: frozenset[date] = load_market_holidays(FIRST_COVERED_YEAR, LAST_COVERED_YEAR)


def market_today(timezone: str = "America/New_York") -> date:
    """Current calendar date in the market's timezone."""
    return datetime.now(ZoneInfo(timezone)).date()


class TradingCalendarService:
    """Service for checking market trading days and holidays."""

    @staticmethod
    def is_weekend(check_date: date) -> bool:
        return check_date.weekday() >= 5

    @staticmethod
    def is_holiday(check_date: date) -> bool:
        if not FIRST_COVERED_YEAR <= check_date.year <= LAST_COVERED_YEAR:
            logger.warning(
                f"{check_date.isoformat()} is outside the holiday calendar "
                f"({FIRST_COVERED_YEAR}-{LAST_COVERED_YEAR})"
            )
        return check_date in MARKET_HOLIDAYS

    @staticmethod
    def is_trading_day(check_date: date) -> bool:
        """
        Check if a given date is a trading day.

        Args:
            check_date: Date to check

        Returns:
            False on weekends and listed holidays, True otherwise
        """
        if TradingCalendarService.is_weekend(check_date):
            return False
        return not TradingCalendarService.is_holiday(check_date)

    @staticmethod
    def _step_to_trading_day(from_date: date, step: int) -> date:
        current = from_date
        for _ in range(MAX_TRADING_DAY_SEARCH):
            current += timedelta(days=step)
            if TradingCalendarService.is_trading_day(current):
                return current
        direction = "before" if step < 0 else "after"
        raise TradingCalendarError(
            f"No trading day within {MAX_TRADING_DAY_SEARCH} days {direction} {from_date.isoformat()}"
        )

    @staticmethod
    def get_previous_trading_day(from_date: date) -> date:
        """
        Get the most recent trading day before the given date.

        Raises:
            TradingCalendarError: If none is found within MAX_TRADING_DAY_SEARCH days
        """
        return TradingCalendarService._step_to_trading_day(from_date, -1)

    @staticmethod
    def get_next_trading_day(from_date: date) -> date:
        """Get the first trading day after the given date."""
        return TradingCalendarService._step_to_trading_day(from_date, 1)

    @staticmethod
    def should_calculate_changes(today: date, yesterday: date) -> bool:
        """
        Check whether two dates form a valid day-over-day comparison.

        Both must be trading days and `yesterday` must be the trading day
        immediately preceding `today`.
        """
        if not TradingCalendarService.is_trading_day(today):
            return False
        if not TradingCalendarService.is_trading_day(yesterday):
            return False
        return yesterday == TradingCalendarService.get_previous_trading_day(today)

    @staticmethod
    def get_no_change_reason(check_date: date) -> str:
        """Human-readable explanation of why no change comparison applies."""
        if TradingCalendarService.is_weekend(check_date):
            return "Markets closed - Weekend"
        if TradingCalendarService.is_holiday(check_date):
            return "Markets closed - Holiday"

        previous = TradingCalendarService.get_previous_trading_day(check_date)
        gap_days = (check_date - previous).days
        if gap_days > 3:
            return f"Markets closed - {gap_days} day gap since last trading day"

        return "First trading day comparison"

    @staticmethod
    def should_send_daily_email(check_date: date) -> bool:
        """The daily batch only runs on trading days."""
        return TradingCalendarService.is_trading_day(check_date)

    @staticmethod
    def get_next_trading_days(start_date: date, count: int) -> list[date]:
        """
        Get the next `count` trading days after start_date.

        Args:
            start_date: Exclusive starting point
            count: Number of trading days to return

        Returns:
            List of trading days in ascending order
        """
        days = []
        current = start_date
        for _ in range(count):
            current = TradingCalendarService.get_next_trading_day(current)
            days.append(current)
        return days
