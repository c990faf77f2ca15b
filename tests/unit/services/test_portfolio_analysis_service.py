"""Tests for portfolio analysis."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from model_tracker.services.analysis import PortfolioAnalysisService
from model_tracker.services.analysis.model_watch_list_service import ModelWatchList
from model_tracker.services.analysis.portfolio_analysis_service import (
    estimate_security_change,
    extract_held_models,
    find_best_and_worst,
    find_daily_movements,
    find_significant_moves,
    find_underperforming_models,
    model_move_significance,
    security_move_significance,
)
from tests.conftest import make_combined, make_model, make_watch_list_model


class TestSignificance:
    def test_model_move_significance(self):
        assert model_move_significance(12.0) == "high"
        assert model_move_significance(-6.0) == "medium"
        assert model_move_significance(3.5) == "low"

    def test_security_move_significance(self):
        assert security_move_significance(10.0) == "high"
        assert security_move_significance(-7.5) == "medium"
        assert security_move_significance(5.0) == "low"


def test_estimate_security_change():
    assert estimate_security_change(3, 0.5) == 6.0
    assert estimate_security_change(3, 10.0) == pytest.approx(9.0)


def test_find_daily_movements():
    today = [make_combined("Glen RRSP", [make_model("Alpha", "NVDA (30%)\nAMD (70%)", final_equity=110.0)])]
    previous = [make_combined("Glen RRSP", [make_model("Alpha", "NVDA (25%)\nAMD (75%)", final_equity=100.0)])]

    model_moves, security_moves = find_daily_movements(today, previous)

    assert len(model_moves) == 1
    assert model_moves[0].daily_change == pytest.approx(10.0)
    assert model_moves[0].significance == "high"

    # NVDA +5 points -> 10 + 3 correlation; AMD -5 points -> -10 + 3
    estimates = {move.security_symbol: move.estimated_daily_change for move in security_moves}
    assert estimates == pytest.approx({"NVDA": 13.0, "AMD": -7.0})
    assert security_moves[0].security_symbol == "NVDA"


def test_daily_movements_need_previous_day_model():
    today = [make_combined("Glen RRSP", [make_model("Alpha", final_equity=200.0)])]
    previous = [make_combined("Glen RRSP", [make_model("Beta", final_equity=100.0)])]
    assert find_daily_movements(today, previous) == ([], [])


def test_find_significant_moves():
    models = extract_held_models(
        [
            make_combined(
                "Glen RRSP",
                [
                    make_model("Hot", final_equity=1.0, return_ytd=20.0),
                    make_model("Quiet", final_equity=1.0, return_ytd=1.0),
                ],
            )
        ]
    )

    moves = find_significant_moves(models, total_value=1000.0)

    assert [(move.model_name, move.significance) for move in moves] == [("Hot", "high")]


def test_find_underperforming_models():
    models = extract_held_models(
        [
            make_combined(
                "Glen RRSP",
                [make_model("Laggard", return_12_month=10.0), make_model("Leader", return_12_month=38.0)],
            )
        ]
    )
    top = [make_watch_list_model("A", 40.0), make_watch_list_model("B", 40.0)]

    underperformers = find_underperforming_models(models, top)

    assert [model.model_name for model in underperformers] == ["Laggard"]
    assert underperformers[0].performance_gap == pytest.approx(30.0)


def test_find_best_and_worst():
    models = extract_held_models(
        [make_combined("Glen RRSP", [make_model("Low", return_12_month=2.0), make_model("High", return_12_month=30.0)])]
    )
    best, worst = find_best_and_worst(models)
    assert (best.name, worst.name) == ("High", "Low")
    assert find_best_and_worst([]) == (None, None)


def test_generate_analysis_data():
    today = [make_combined("Glen RRSP", [make_model("Alpha", "NVDA (100%)", final_equity=104.0)])]
    previous = [make_combined("Glen RRSP", [make_model("Alpha", "NVDA (100%)", final_equity=100.0)])]
    combined_service = MagicMock()
    combined_service.get_combined_account_portfolios = AsyncMock(
        side_effect=lambda day: today if day == date(2025, 6, 2) else previous
    )
    watch_list_service = MagicMock()
    watch_list_service.get_model_watch_list = AsyncMock(
        return_value=ModelWatchList(
            top_performers=[
                make_watch_list_model("Alpha", 20.0, is_owned=True),
                make_watch_list_model("Other", 50.0),
            ],
            total_models_analyzed=2,
            owned_models_count=1,
            opportunity_models_count=1,
            date="2025-06-02",
        )
    )
    service = PortfolioAnalysisService(combined_service, watch_list_service)

    data = asyncio.run(service.generate_analysis_data(date(2025, 6, 2)))

    assert data.current_date == "2025-06-02"
    assert data.comparison_date == "2025-05-30"
    assert data.total_value == 104.0
    assert data.total_models == 1
    assert [model.name for model in data.top5_not_owned] == ["Other"]
    assert data.daily_model_moves[0].daily_change == pytest.approx(4.0)
    assert data.best_performer_12mo.name == "Alpha"
