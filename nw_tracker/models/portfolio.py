from collections import Counter
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from nw_tracker.errors import InvalidPortfolioError
from nw_tracker.models.asset import Asset, USD
from nw_tracker.models.snapshot import Snapshot


class Portfolio(BaseModel):
    model_config = ConfigDict(extra="forbid")

    assets: List[Asset] = Field(default_factory=list)
    snapshots: List[Snapshot] = Field(default_factory=list)

    def asset_map(self) -> Dict[str, Asset]:
        return {asset.id: asset for asset in self.assets}


def find_invariant_violations(portfolio: Portfolio) -> List[str]:
    """Return a message for every broken invariant; an empty list means the portfolio is valid."""
    issues: List[str] = []

    for asset_id, count in Counter(asset.id for asset in portfolio.assets).items():
        if count > 1:
            issues.append(f"asset id '{asset_id}' appears {count} times")

    assets = portfolio.asset_map()
    used = {asset.currency for asset in portfolio.assets} - {USD}
    for snapshot in portfolio.snapshots:
        day = snapshot.date.isoformat()
        unknown = sorted(asset_id for asset_id in snapshot.entries if asset_id not in assets)
        for asset_id in unknown:
            issues.append(f"snapshot {day} references unknown asset '{asset_id}'")
        needed = {
            assets[asset_id].currency
            for asset_id in snapshot.entries
            if asset_id in assets and assets[asset_id].currency != USD
        }
        for currency in sorted(needed - set(snapshot.rates)):
            issues.append(f"snapshot {day} has no rate for {currency}")
        for currency in sorted(set(snapshot.rates) - used):
            issues.append(f"snapshot {day} has a rate for unused currency {currency}")

    for day, count in Counter(snapshot.date for snapshot in portfolio.snapshots).items():
        if count > 1:
            issues.append(f"snapshot date {day.isoformat()} appears {count} times")

    dates = [snapshot.date for snapshot in portfolio.snapshots]
    if dates != sorted(dates):
        issues.append("snapshots are not in ascending date order")

    return issues


def check_invariants(portfolio: Portfolio) -> None:
    issues = find_invariant_violations(portfolio)
    if issues:
        raise InvalidPortfolioError(issues)
