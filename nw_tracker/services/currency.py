from typing import Iterable, List, Mapping

from nw_tracker.errors import MissingRateError
from nw_tracker.models.asset import Asset, USD


def to_usd(value: float, currency: str, rates: Mapping[str, float]) -> float:
    """Convert a native value to USD; rates are quoted as 1 USD = N units."""
    if currency == USD:
        return value
    rate = rates.get(currency)
    if rate is None:
        raise MissingRateError([currency])
    return value / rate


def required_currencies(assets: Iterable[Asset]) -> List[str]:
    return sorted({asset.currency for asset in assets if asset.currency != USD})
