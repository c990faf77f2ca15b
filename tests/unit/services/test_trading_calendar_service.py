"""Tests for the trading calendar service."""

import logging
from datetime import date, timedelta
from unittest.mock import patch

import pytest

from model_tracker.services.exceptions import TradingCalendarError
from model_tracker.services.trading_calendar_service import (
    LAST_COVERED_YEAR,
    MAX_TRADING_DAY_SEARCH,
    TradingCalendarService,
    day_after_thanksgiving,
)

MONDAY = date(2025, 6, 2)
FRIDAY = date(2025, 5, 30)
SATURDAY = date(2025, 6, 7)
INDEPENDENCE_DAY = date(2025, 7, 4)


class TestTradingDays:
    def test_weekday_is_trading_day(self):
        assert TradingCalendarService.is_trading_day(MONDAY)

    def test_weekend_is_not_trading_day(self):
        assert TradingCalendarService.is_weekend(SATURDAY)
        assert not TradingCalendarService.is_trading_day(SATURDAY)
        assert not TradingCalendarService.is_trading_day(SATURDAY + timedelta(days=1))

    def test_holiday_is_not_trading_day(self):
        assert TradingCalendarService.is_holiday(INDEPENDENCE_DAY)
        assert not TradingCalendarService.is_trading_day(INDEPENDENCE_DAY)

    @pytest.mark.parametrize(
        "holiday",
        [
            date(2027, 1, 1),  # New Year's Day
            date(2027, 3, 26),  # Good Friday
            date(2027, 11, 25),  # Thanksgiving
            date(2030, 12, 25),  # Christmas Day
        ],
    )
    def test_later_years_have_holidays(self, holiday):
        assert TradingCalendarService.is_holiday(holiday)
        assert not TradingCalendarService.is_trading_day(holiday)

    def test_day_after_thanksgiving_is_closed(self):
        assert day_after_thanksgiving(2025) == date(2025, 11, 28)
        assert day_after_thanksgiving(2027) == date(2027, 11, 26)
        assert not TradingCalendarService.is_trading_day(date(2027, 11, 26))

    def test_new_year_2027_bridges_to_previous_year(self):
        assert TradingCalendarService.get_previous_trading_day(date(2027, 1, 4)) == date(2026, 12, 31)
        assert TradingCalendarService.get_no_change_reason(date(2027, 1, 1)) == "Markets closed - Holiday"

    def test_date_outside_calendar_is_logged(self, caplog):
        beyond = date(LAST_COVERED_YEAR + 1, 3, 4)

        with caplog.at_level(logging.WARNING):
            TradingCalendarService.is_holiday(beyond)

        assert "outside the holiday calendar" in caplog.text


class TestTradingDayStepping:
    def test_previous_trading_day_skips_weekend(self):
        assert TradingCalendarService.get_previous_trading_day(MONDAY) == FRIDAY

    def test_previous_trading_day_skips_holiday(self):
        # Tuesday after Memorial Day 2025
        assert TradingCalendarService.get_previous_trading_day(date(2025, 5, 27)) == date(2025, 5, 23)

    def test_next_trading_day_skips_holiday_and_weekend(self):
        assert TradingCalendarService.get_next_trading_day(date(2025, 7, 3)) == date(2025, 7, 7)

    def test_next_trading_days(self):
        days = TradingCalendarService.get_next_trading_days(FRIDAY, 3)
        assert days == [date(2025, 6, 2), date(2025, 6, 3), date(2025, 6, 4)]

    def test_stepping_is_bounded(self):
        """A malformed holiday table fails loudly instead of looping."""
        closed = frozenset(MONDAY - timedelta(days=n) for n in range(1, MAX_TRADING_DAY_SEARCH + 5))
        with patch("model_tracker.services.trading_calendar_service.MARKET_HOLIDAYS", closed):
            with pytest.raises(TradingCalendarError):
                TradingCalendarService.get_previous_trading_day(MONDAY)


class TestChangeRules:
    def test_should_calculate_changes_between_consecutive_trading_days(self):
        assert TradingCalendarService.should_calculate_changes(MONDAY, FRIDAY)

    def test_should_not_calculate_changes_on_weekend(self):
        assert not TradingCalendarService.should_calculate_changes(SATURDAY, FRIDAY)

    def test_should_not_calculate_changes_against_wrong_day(self):
        assert not TradingCalendarService.should_calculate_changes(MONDAY, date(2025, 5, 29))

    def test_no_change_reasons(self):
        assert TradingCalendarService.get_no_change_reason(SATURDAY) == "Markets closed - Weekend"
        assert TradingCalendarService.get_no_change_reason(INDEPENDENCE_DAY) == "Markets closed - Holiday"

    def test_daily_email_only_on_trading_days(self):
        assert TradingCalendarService.should_send_daily_email(MONDAY)
        assert not TradingCalendarService.should_send_daily_email(SATURDAY)
