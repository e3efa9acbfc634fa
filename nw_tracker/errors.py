from datetime import date
from typing import Iterable, List, Optional


class NwTrackerError(Exception):
    """Base class for every error raised by the portfolio engine."""


class DuplicateIdError(NwTrackerError):
    def __init__(self, asset_id: str) -> None:
        super().__init__(f"asset id '{asset_id}' already exists")
        self.asset_id = asset_id


class NotFoundError(NwTrackerError):
    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} '{key}' not found")
        self.kind = kind
        self.key = key

    @classmethod
    def asset(cls, asset_id: str) -> "NotFoundError":
        return cls("asset", asset_id)

    @classmethod
    def snapshot(cls, snapshot_date: date) -> "NotFoundError":
        return cls("snapshot", snapshot_date.isoformat())


class DuplicateSnapshotError(NwTrackerError):
    def __init__(self, snapshot_date: date) -> None:
        super().__init__(f"snapshot for date '{snapshot_date.isoformat()}' already exists")
        self.snapshot_date = snapshot_date


class InvalidReferenceError(NwTrackerError):
    def __init__(self, asset_ids: Iterable[str]) -> None:
        self.asset_ids = sorted(asset_ids)
        super().__init__(f"snapshot entries reference unknown asset(s): {', '.join(self.asset_ids)}")


class MissingRateError(NwTrackerError):
    def __init__(self, currencies: Iterable[str], snapshot_date: Optional[date] = None) -> None:
        self.currencies = sorted(currencies)
        self.snapshot_date = snapshot_date
        where = f" in snapshot {snapshot_date.isoformat()}" if snapshot_date else ""
        super().__init__(f"no rate found for currency {', '.join(self.currencies)}{where}")


class ExtraneousRateError(NwTrackerError):
    def __init__(self, currencies: Iterable[str]) -> None:
        self.currencies = sorted(currencies)
        super().__init__(
            f"rate given for currency not used by any valued asset: {', '.join(self.currencies)}"
        )


class DuplicateRateError(NwTrackerError):
    def __init__(self, currency: str) -> None:
        super().__init__(f"rate for currency {currency} given more than once")
        self.currency = currency


class NoSnapshotsError(NwTrackerError):
    def __init__(self, message: str = "no snapshots found in portfolio") -> None:
        super().__init__(message)


class EmptyCategoryError(NwTrackerError):
    def __init__(self, category: str) -> None:
        super().__init__(f"no asset belongs to category '{category}'")
        self.category = category


class CorruptDataError(NwTrackerError):
    """The persisted document is not valid JSON or does not have the expected shape."""


class InvalidPortfolioError(NwTrackerError):
    """The document parsed but breaks one or more portfolio invariants."""

    def __init__(self, issues: List[str]) -> None:
        self.issues = list(issues)
        super().__init__("invalid portfolio: " + "; ".join(self.issues))


class IOFailureError(NwTrackerError):
    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"failed to access portfolio file at {path}: {reason}")
        self.path = path
