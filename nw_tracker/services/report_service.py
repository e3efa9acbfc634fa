from datetime import date
from typing import Dict, List, Optional, Tuple

import pandas as pd

from nw_tracker.errors import EmptyCategoryError, NoSnapshotsError
from nw_tracker.models.asset import Asset
from nw_tracker.models.report import (
    AssetRow,
    CategoryGroup,
    HistoryRange,
    HistoryRow,
    HistoryView,
    SnapshotView,
)
from nw_tracker.models.snapshot import Snapshot
from nw_tracker.services.currency import to_usd
from nw_tracker.services.portfolio_service import PortfolioService

RANGE_OFFSETS = {
    HistoryRange.ONE_MONTH: pd.DateOffset(months=1),
    HistoryRange.SIX_MONTHS: pd.DateOffset(months=6),
    HistoryRange.ONE_YEAR: pd.DateOffset(years=1),
    HistoryRange.FIVE_YEARS: pd.DateOffset(years=5),
}


def history_start(history_range: HistoryRange, today: date) -> Optional[date]:
    """Earliest date included in a history range; None means unbounded.

    Calendar arithmetic clamps to the end of the month, so one month before
    2025-03-31 is 2025-02-28.
    """
    offset = RANGE_OFFSETS.get(history_range)
    if offset is None:
        return None
    return (pd.Timestamp(today) - offset).date()


def allocation_percent(subtotal: float, total: float) -> float:
    return 100 * subtotal / total if total else 0.0


def change_between(previous: float, current: float) -> Tuple[float, Optional[float]]:
    change = current - previous
    percent = 100 * change / previous if previous else None
    return change, percent


class ReportService:
    """Builds point-in-time breakdowns and historical series in USD."""

    def __init__(self, portfolio_service: PortfolioService) -> None:
        self.portfolio_service = portfolio_service

    def _select_snapshot(self, snapshot_date: Optional[date]) -> Snapshot:
        snapshots = self.portfolio_service.list_snapshots()
        if not snapshots:
            raise NoSnapshotsError()
        if snapshot_date is not None:
            return self.portfolio_service.get_snapshot(snapshot_date)
        return max(snapshots, key=lambda snapshot: snapshot.date)

    def build_snapshot_view(
        self,
        snapshot_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> SnapshotView:
        snapshot = self._select_snapshot(snapshot_date)
        assets = list(self.portfolio_service.list_assets())
        if category is not None:
            wanted = category.strip().lower()
            assets = [asset for asset in assets if asset.category == wanted]
            if not assets:
                raise EmptyCategoryError(category)

        rows_by_category: Dict[str, List[AssetRow]] = {
            name: [] for name in sorted({asset.category for asset in assets})
        }
        for asset in assets:
            if asset.id not in snapshot.entries:
                continue
            value = snapshot.entries[asset.id]
            rows_by_category[asset.category].append(
                AssetRow(
                    asset_id=asset.id,
                    name=asset.name,
                    category=asset.category,
                    currency=asset.currency,
                    native_value=value,
                    usd_value=to_usd(value, asset.currency, snapshot.rates),
                )
            )

        subtotals = {name: sum(row.usd_value for row in rows) for name, rows in rows_by_category.items()}
        total = sum(subtotals.values())
        groups = [
            CategoryGroup(
                category=name,
                rows=rows,
                subtotal=subtotals[name],
                allocation_percent=allocation_percent(subtotals[name], total),
            )
            for name, rows in rows_by_category.items()
        ]
        return SnapshotView(
            date=snapshot.date,
            category_filter=category.strip().lower() if category is not None else None,
            groups=groups,
            total=total,
        )

    def snapshot_total(self, snapshot: Snapshot) -> float:
        assets: Dict[str, Asset] = {asset.id: asset for asset in self.portfolio_service.list_assets()}
        return sum(
            to_usd(value, assets[asset_id].currency, snapshot.rates)
            for asset_id, value in snapshot.entries.items()
        )

    def build_history(self, history_range: HistoryRange, today: Optional[date] = None) -> HistoryView:
        since = history_start(history_range, today or date.today())
        snapshots = [
            snapshot
            for snapshot in sorted(self.portfolio_service.list_snapshots(), key=lambda s: s.date)
            if since is None or snapshot.date >= since
        ]
        if not snapshots:
            raise NoSnapshotsError(f"no snapshots in range {history_range.value}")

        rows: List[HistoryRow] = []
        previous: Optional[float] = None
        for snapshot in snapshots:
            total = self.snapshot_total(snapshot)
            change, percent = change_between(previous, total) if previous is not None else (None, None)
            rows.append(HistoryRow(date=snapshot.date, total_usd=total, change=change, change_percent=percent))
            previous = total
        return HistoryView(range=history_range, since=since, rows=rows)
