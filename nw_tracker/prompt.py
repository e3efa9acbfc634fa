"""Interactive prompts for snapshot values, exchange rates and confirmations."""

import math
from typing import Callable, Dict, Iterable, Mapping, Optional

from nw_tracker.models.asset import Asset

Reader = Callable[[str], str]


def _parse_number(text: str) -> Optional[float]:
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def prompt_values(
    assets: Iterable[Asset],
    existing: Optional[Mapping[str, float]] = None,
    read: Reader = input,
) -> Dict[str, float]:
    """Ask for each asset's value; Enter keeps the existing value or omits the asset."""
    assets = list(assets)
    values: Dict[str, float] = {}
    if not assets:
        return values

    print("--- Asset Values (press Enter to omit) ---")
    for asset in assets:
        current = existing.get(asset.id) if existing else None
        label = f"{asset.name} ({asset.category.upper()}, {asset.currency})"
        question = f"{label} [{current}]: " if current is not None else f"{label}: "
        while True:
            answer = read(question).strip()
            if not answer:
                if current is not None:
                    values[asset.id] = current
                break
            number = _parse_number(answer)
            if number is None:
                print("  Invalid number. Please try again.")
            elif number < 0:
                print("  Value must be non-negative.")
            else:
                values[asset.id] = number
                break
    return values


def prompt_rates(
    currencies: Iterable[str],
    existing: Optional[Mapping[str, float]] = None,
    read: Reader = input,
) -> Dict[str, float]:
    """Ask for "1 USD = ? CCY" for every currency; a rate is always required."""
    currencies = list(currencies)
    rates: Dict[str, float] = {}
    if not currencies:
        return rates

    print("--- Exchange Rates ---")
    for currency in currencies:
        current = existing.get(currency) if existing else None
        label = f"{currency} rate (1 USD = ? {currency})"
        question = f"{label} [{current}]: " if current is not None else f"{label}: "
        while True:
            answer = read(question).strip()
            if not answer:
                if current is not None:
                    rates[currency] = current
                    break
                print("  Rate is required.")
                continue
            number = _parse_number(answer)
            if number is None:
                print("  Invalid number. Please try again.")
            elif number <= 0:
                print("  Rate must be a positive number.")
            else:
                rates[currency] = number
                break
    return rates


def confirm(message: str, read: Reader = input) -> bool:
    """Yes/no question that defaults to No."""
    try:
        answer = read(f"{message} ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}
