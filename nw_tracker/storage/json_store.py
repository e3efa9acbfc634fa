import json
import logging
import os
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from nw_tracker.errors import CorruptDataError, IOFailureError
from nw_tracker.models.portfolio import Portfolio, check_invariants
from nw_tracker.models.snapshot import PERSISTED

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def load_portfolio(data: bytes) -> Portfolio:
    """Parse a persisted document and reject it if it breaks any invariant."""
    try:
        document = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptDataError(f"malformed JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise CorruptDataError("portfolio document must be a JSON object")
    try:
        portfolio = Portfolio.model_validate(document, context={PERSISTED: True})
    except ValidationError as exc:
        raise CorruptDataError(f"unexpected document shape: {exc}") from exc
    check_invariants(portfolio)
    return portfolio


def serialize_portfolio(portfolio: Portfolio) -> bytes:
    """Deterministic JSON: snapshots ascending by date, assets in stored order."""
    document = portfolio.model_dump(mode="json")
    document["snapshots"].sort(key=lambda snapshot: snapshot["date"])
    return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def atomic_save(path: PathLike, data: bytes) -> None:
    """Write ``data`` next to ``path`` and rename it into place.

    The rename is the commit point: readers see either the old file or the new
    one, never a partial write.
    """
    target = Path(path)
    tmp_path = target.with_name(target.name + ".tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, target)
    except OSError as exc:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup_exc:
            logger.warning("Could not remove temporary file %s: %s", tmp_path, cleanup_exc)
        raise IOFailureError(target, str(exc)) from exc
    logger.debug("Saved %d bytes to %s", len(data), target)


class JsonFileStore:
    """Portfolio persisted as a single JSON document on disk."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Portfolio:
        if not self.path.exists():
            logger.debug("No portfolio at %s, starting empty", self.path)
            return Portfolio()
        try:
            data = self.path.read_bytes()
        except OSError as exc:
            raise IOFailureError(self.path, str(exc)) from exc
        logger.debug("Loaded %d bytes from %s", len(data), self.path)
        return load_portfolio(data)

    def save(self, portfolio: Portfolio) -> None:
        check_invariants(portfolio)
        atomic_save(self.path, serialize_portfolio(portfolio))
