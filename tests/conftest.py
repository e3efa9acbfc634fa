"""
Pytest configuration and shared fixtures.
"""
from datetime import date

import pytest

from nw_tracker.services.portfolio_service import PortfolioService
from nw_tracker.services.report_service import ReportService

JUNE = date(2025, 6, 1)


@pytest.fixture
def service() -> PortfolioService:
    """Portfolio with one USD ETF and one CHF bank account, no snapshots."""
    svc = PortfolioService()
    svc.add_asset("vti", "Vanguard Total Market", "ETF", "usd")
    svc.add_asset("sav", "Swiss Savings", "Bank", "chf")
    return svc


@pytest.fixture
def june_service(service: PortfolioService) -> PortfolioService:
    service.upsert_snapshot(JUNE, {"CHF": 0.90}, {"vti": 12500, "sav": 9000})
    return service


@pytest.fixture
def reports(june_service: PortfolioService) -> ReportService:
    return ReportService(june_service)


@pytest.fixture
def answers():
    """Build a fake ``input`` that replays the given answers in order."""

    def build(*replies: str):
        queue = iter(replies)
        return lambda prompt: next(queue)

    return build
