import pytest

from nw_tracker.errors import MissingRateError
from nw_tracker.models.asset import Asset
from nw_tracker.services.currency import required_currencies, to_usd


def test_to_usd_passes_usd_through() -> None:
    assert to_usd(1000.0, "USD", {}) == 1000.0


def test_to_usd_divides_by_rate() -> None:
    # 1 USD = 0.92 EUR, so 800 EUR is about 869.57 USD
    assert to_usd(800.0, "EUR", {"EUR": 0.92}) == pytest.approx(869.565, abs=0.001)
    assert to_usd(2_500_000.0, "AMD", {"AMD": 387.5}) == pytest.approx(6451.61, abs=0.01)


def test_to_usd_does_not_round() -> None:
    assert to_usd(1.0, "EUR", {"EUR": 3.0}) == 1.0 / 3.0


def test_to_usd_missing_rate() -> None:
    with pytest.raises(MissingRateError) as excinfo:
        to_usd(100.0, "EUR", {"CHF": 0.9})
    assert excinfo.value.currencies == ["EUR"]


def test_required_currencies_are_distinct_sorted_and_skip_usd() -> None:
    assets = [
        Asset(id="a", name="A", category="bank", currency="EUR"),
        Asset(id="b", name="B", category="etf", currency="USD"),
        Asset(id="c", name="C", category="bank", currency="CHF"),
        Asset(id="d", name="D", category="bank", currency="EUR"),
    ]
    assert required_currencies(assets) == ["CHF", "EUR"]
