import logging
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

from nw_tracker.errors import (
    DuplicateIdError,
    DuplicateRateError,
    ExtraneousRateError,
    InvalidReferenceError,
    MissingRateError,
    NotFoundError,
)
from nw_tracker.models.asset import Asset, USD
from nw_tracker.models.portfolio import Portfolio
from nw_tracker.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class PortfolioService:
    """Handles asset and snapshot mutations while keeping the portfolio invariants.

    Every operation validates first and only then swaps in the new asset or
    snapshot list, so a rejected call leaves the portfolio untouched.
    """

    def __init__(self, portfolio: Optional[Portfolio] = None) -> None:
        self.portfolio = portfolio if portfolio is not None else Portfolio()

    # Assets

    def list_assets(self) -> Tuple[Asset, ...]:
        return tuple(self.portfolio.assets)

    def get_asset(self, asset_id: str) -> Asset:
        for asset in self.portfolio.assets:
            if asset.id == asset_id:
                return asset
        raise NotFoundError.asset(asset_id)

    def add_asset(self, asset_id: str, name: str, category: str, currency: str) -> Asset:
        if any(asset.id == asset_id for asset in self.portfolio.assets):
            raise DuplicateIdError(asset_id)
        asset = Asset(id=asset_id, name=name, category=category, currency=currency)
        self.portfolio.assets = [*self.portfolio.assets, asset]
        logger.info("Added asset %s (%s, %s)", asset.id, asset.category, asset.currency)
        return asset

    def edit_asset(
        self,
        asset_id: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Asset:
        current = self.get_asset(asset_id)
        fields = current.model_dump()
        if name is not None:
            fields["name"] = name
        if category is not None:
            fields["category"] = category
        if currency is not None:
            fields["currency"] = currency
        updated = Asset(**fields)

        assets = [updated if asset.id == asset_id else asset for asset in self.portfolio.assets]
        snapshots = self.portfolio.snapshots
        if updated.currency != current.currency:
            if updated.currency != USD:
                uncovered = [
                    snapshot.date
                    for snapshot in snapshots
                    if asset_id in snapshot.entries and updated.currency not in snapshot.rates
                ]
                if uncovered:
                    raise MissingRateError([updated.currency], uncovered[0])
            snapshots = _drop_unused_rate(snapshots, assets, current.currency)

        self.portfolio.assets = assets
        self.portfolio.snapshots = snapshots
        logger.info("Edited asset %s", asset_id)
        return updated

    def snapshot_references(self, asset_id: str) -> int:
        """Number of snapshots holding a value for the asset."""
        self.get_asset(asset_id)
        return sum(1 for snapshot in self.portfolio.snapshots if asset_id in snapshot.entries)

    def remove_asset(self, asset_id: str) -> Asset:
        removed = self.get_asset(asset_id)
        assets = [asset for asset in self.portfolio.assets if asset.id != asset_id]
        snapshots = []
        for snapshot in self.portfolio.snapshots:
            if asset_id in snapshot.entries:
                entries = {key: value for key, value in snapshot.entries.items() if key != asset_id}
                snapshot = snapshot.model_copy(update={"entries": entries})
            snapshots.append(snapshot)
        snapshots = _drop_unused_rate(snapshots, assets, removed.currency)

        self.portfolio.assets = assets
        self.portfolio.snapshots = snapshots
        logger.info("Removed asset %s", asset_id)
        return removed

    # Snapshots

    def list_snapshots(self) -> Tuple[Snapshot, ...]:
        return tuple(self.portfolio.snapshots)

    def has_snapshot(self, snapshot_date: date) -> bool:
        return any(snapshot.date == snapshot_date for snapshot in self.portfolio.snapshots)

    def get_snapshot(self, snapshot_date: date) -> Snapshot:
        for snapshot in self.portfolio.snapshots:
            if snapshot.date == snapshot_date:
                return snapshot
        raise NotFoundError.snapshot(snapshot_date)

    def upsert_snapshot(
        self,
        snapshot_date: date,
        rates: Mapping[str, float],
        entries: Mapping[str, float],
    ) -> Snapshot:
        """Insert or replace the snapshot for a date.

        ``rates`` must name exactly the non-USD currencies of the assets valued
        in ``entries``: a missing one raises MissingRateError, a superfluous one
        (USD included) raises ExtraneousRateError.
        """
        assets = self.portfolio.asset_map()
        unknown = [asset_id for asset_id in entries if asset_id not in assets]
        if unknown:
            raise InvalidReferenceError(unknown)

        given: Dict[str, float] = {}
        for code, rate in rates.items():
            key = code.strip().upper()
            if key in given:
                raise DuplicateRateError(key)
            given[key] = rate
        needed = {assets[asset_id].currency for asset_id in entries} - {USD}
        missing = needed - set(given)
        if missing:
            raise MissingRateError(missing, snapshot_date)
        extra = set(given) - needed
        if extra:
            raise ExtraneousRateError(extra)

        snapshot = Snapshot(
            date=snapshot_date,
            rates={code: given[code] for code in sorted(given)},
            entries={asset.id: entries[asset.id] for asset in self.portfolio.assets if asset.id in entries},
        )
        replaced = self.has_snapshot(snapshot_date)
        snapshots = [s for s in self.portfolio.snapshots if s.date != snapshot_date]
        snapshots.append(snapshot)
        snapshots.sort(key=lambda s: s.date)
        self.portfolio.snapshots = snapshots
        logger.info(
            "%s snapshot %s (%d entries)",
            "Replaced" if replaced else "Added",
            snapshot_date.isoformat(),
            len(snapshot.entries),
        )
        return snapshot

    def remove_snapshot(self, snapshot_date: date) -> Snapshot:
        removed = self.get_snapshot(snapshot_date)
        self.portfolio.snapshots = [s for s in self.portfolio.snapshots if s.date != snapshot_date]
        logger.info("Removed snapshot %s", snapshot_date.isoformat())
        return removed


def _drop_unused_rate(snapshots: List[Snapshot], assets: List[Asset], currency: str) -> List[Snapshot]:
    """Strip ``currency`` from every snapshot's rates once no asset uses it."""
    if currency == USD or any(asset.currency == currency for asset in assets):
        return snapshots
    result = []
    for snapshot in snapshots:
        if currency in snapshot.rates:
            rates: Dict[str, float] = {
                code: rate for code, rate in snapshot.rates.items() if code != currency
            }
            snapshot = snapshot.model_copy(update={"rates": rates})
        result.append(snapshot)
    return result
