import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from pydantic import ValidationError

from nw_tracker.config.settings import get_settings
from nw_tracker.display import render_assets, render_history, render_show, render_snapshots
from nw_tracker.errors import DuplicateSnapshotError, NoSnapshotsError, NwTrackerError
from nw_tracker.models.report import HistoryRange
from nw_tracker.models.snapshot import parse_date
from nw_tracker.prompt import Reader, confirm, prompt_rates, prompt_values
from nw_tracker.services.currency import required_currencies
from nw_tracker.services.portfolio_service import PortfolioService
from nw_tracker.services.report_service import ReportService
from nw_tracker.storage.json_store import JsonFileStore

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _date_arg(text: str) -> date:
    try:
        return parse_date(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date format '{text}': expected YYYY-MM-DD") from None


def _range_arg(text: str) -> HistoryRange:
    try:
        return HistoryRange.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nw", description="Net worth tracker")
    parser.add_argument("--portfolio", help="Path to the portfolio JSON file")
    parser.add_argument("--log-level", help="Logging level (default: WARNING)")
    commands = parser.add_subparsers(dest="command", required=True)

    asset = commands.add_parser("asset", help="Manage assets").add_subparsers(dest="action", required=True)
    add = asset.add_parser("add", help="Add a new asset")
    add.add_argument("--id", required=True)
    add.add_argument("--name", required=True)
    add.add_argument("--category", required=True)
    add.add_argument("--currency", required=True)
    add.set_defaults(handler=asset_add)
    edit = asset.add_parser("edit", help="Edit an existing asset")
    edit.add_argument("--id", required=True)
    edit.add_argument("--name")
    edit.add_argument("--category")
    edit.add_argument("--currency")
    edit.set_defaults(handler=asset_edit)
    remove = asset.add_parser("remove", help="Remove an asset and its snapshot values")
    remove.add_argument("--id", required=True)
    remove.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    remove.set_defaults(handler=asset_remove)
    asset.add_parser("list", help="List all assets").set_defaults(handler=asset_list)

    snapshot = commands.add_parser("snapshot", help="Manage snapshots").add_subparsers(dest="action", required=True)
    snap_add = snapshot.add_parser("add", help="Record a new snapshot")
    snap_add.add_argument("--date", required=True, type=_date_arg)
    snap_add.set_defaults(handler=snapshot_add)
    snap_edit = snapshot.add_parser("edit", help="Edit an existing snapshot")
    snap_edit.add_argument("--date", required=True, type=_date_arg)
    snap_edit.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    snap_edit.set_defaults(handler=snapshot_edit)
    snap_remove = snapshot.add_parser("remove", help="Remove a snapshot")
    snap_remove.add_argument("--date", required=True, type=_date_arg)
    snap_remove.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    snap_remove.set_defaults(handler=snapshot_remove)
    snapshot.add_parser("list", help="List all snapshots").set_defaults(handler=snapshot_list)

    show = commands.add_parser("show", help="Show current (or past) net worth")
    show.add_argument("--date", type=_date_arg, help="Snapshot date (default: latest)")
    show.add_argument("--category", help="Only show one category")
    show.set_defaults(handler=show_report)

    history = commands.add_parser("history", help="Show net worth history over a time range")
    history.add_argument("--range", required=True, type=_range_arg, help="1M, 6M, 1Y, 5Y or ALL")
    history.set_defaults(handler=history_report)
    return parser


def asset_add(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    service.add_asset(args.id, args.name, args.category, args.currency)
    store.save(service.portfolio)
    print("Asset added.")
    return 0


def asset_edit(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    if args.name is None and args.category is None and args.currency is None:
        service.get_asset(args.id)
        print("Nothing to update.")
        return 0
    service.edit_asset(args.id, name=args.name, category=args.category, currency=args.currency)
    store.save(service.portfolio)
    print("Asset updated.")
    return 0


def asset_remove(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    count = service.snapshot_references(args.id)
    if count and not args.yes:
        if not confirm(f"This asset appears in {count} snapshot(s). Are you sure? (y/N)", read):
            print("Aborted.")
            return 0
    service.remove_asset(args.id)
    store.save(service.portfolio)
    print("Asset removed.")
    return 0


def asset_list(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    print(render_assets(service.list_assets()))
    return 0


def _prompt_snapshot(service: PortfolioService, read: Reader, existing=None):
    assets = service.list_assets()
    values = prompt_values(assets, existing.entries if existing else None, read)
    currencies = required_currencies(asset for asset in assets if asset.id in values)
    rates = prompt_rates(currencies, existing.rates if existing else None, read)
    return rates, values


def snapshot_add(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    if service.has_snapshot(args.date):
        raise DuplicateSnapshotError(args.date)
    rates, values = _prompt_snapshot(service, read)
    service.upsert_snapshot(args.date, rates, values)
    store.save(service.portfolio)
    print("Snapshot saved.")
    return 0


def snapshot_edit(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    existing = service.get_snapshot(args.date)
    if not args.yes and not confirm(f"Overwrite snapshot for {args.date.isoformat()}? (y/N)", read):
        print("Aborted.")
        return 0
    rates, values = _prompt_snapshot(service, read, existing)
    service.upsert_snapshot(args.date, rates, values)
    store.save(service.portfolio)
    print("Snapshot updated.")
    return 0


def snapshot_remove(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    service.get_snapshot(args.date)
    if not args.yes and not confirm(f"Remove snapshot for {args.date.isoformat()}? (y/N)", read):
        print("Aborted.")
        return 0
    service.remove_snapshot(args.date)
    store.save(service.portfolio)
    print("Snapshot removed.")
    return 0


def snapshot_list(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    print(render_snapshots(service.list_snapshots()))
    return 0


def show_report(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    try:
        view = ReportService(service).build_snapshot_view(args.date, args.category)
    except NoSnapshotsError:
        print("No snapshots yet.")
        return 0
    print(render_show(view))
    return 0


def history_report(args, service: PortfolioService, store: JsonFileStore, read: Reader) -> int:
    try:
        view = ReportService(service).build_history(args.range)
    except NoSnapshotsError:
        print("No snapshots in range.")
        return 0
    print(render_history(view))
    return 0


def main(argv: Optional[List[str]] = None, read: Reader = input) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level)

    store = JsonFileStore(args.portfolio or settings.portfolio_path)
    try:
        service = PortfolioService(store.load())
        return args.handler(args, service, store, read)
    except (NwTrackerError, ValidationError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print("\nAborted.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
