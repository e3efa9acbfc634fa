"""Plain-text rendering of listings and reports."""

from typing import Iterable, List, Optional

import pandas as pd

from nw_tracker.models.asset import Asset, USD
from nw_tracker.models.report import HistoryView, SnapshotView
from nw_tracker.models.snapshot import Snapshot

MISSING = "—"


def format_money(value: float) -> str:
    return f"{value:,.2f}"


def format_change(value: Optional[float]) -> str:
    if value is None:
        return MISSING
    return f"+{format_money(value)}" if value >= 0 else format_money(value)


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return MISSING
    return f"{value:+.2f}%"


def _table(rows: List[dict], indent: str = "") -> str:
    text = pd.DataFrame(rows).to_string(index=False)
    return "\n".join(indent + line for line in text.splitlines())


def render_show(view: SnapshotView) -> str:
    day = view.date.isoformat()
    title = f"NET WORTH — {day}" if view.category_filter else f"CURRENT NET WORTH — {day}"
    lines = [title]

    for group in view.groups:
        if not group.rows:
            continue
        rows = [
            {
                "Name": row.name,
                "Currency": row.currency,
                "Value (native)": format_money(row.native_value),
                "Value (USD)": format_money(row.usd_value),
            }
            for row in group.rows
        ]
        rows.append({"Name": "Subtotal", "Currency": "", "Value (native)": "", "Value (USD)": format_money(group.subtotal)})
        lines += ["", group.category.upper(), _table(rows, indent="  ")]

    lines += ["", f"TOTAL  {format_money(view.total)}"]

    if view.category_filter is None and view.total:
        lines += ["", "ALLOCATION"]
        for category, percent in view.allocation:
            lines.append(f"  {category.upper():<12} {percent:>6.1f}%")
    return "\n".join(lines)


def render_history(view: HistoryView) -> str:
    rows = [
        {
            "Date": row.date.isoformat(),
            "Total (USD)": format_money(row.total_usd),
            "Change (USD)": format_change(row.change),
            "Change %": format_percent(row.change_percent),
        }
        for row in view.rows
    ]
    return "\n".join([f"NET WORTH HISTORY — {view.range.value}", "", _table(rows)])


def render_assets(assets: Iterable[Asset]) -> str:
    rows = [
        {"ID": asset.id, "Name": asset.name, "Category": asset.category, "Currency": asset.currency}
        for asset in assets
    ]
    if not rows:
        return "No assets yet."
    return _table(rows)


def render_snapshots(snapshots: Iterable[Snapshot]) -> str:
    rows = []
    for snapshot in snapshots:
        currencies = sorted(snapshot.rates)
        rows.append(
            {
                "Date": snapshot.date.isoformat(),
                "Entries": len(snapshot.entries),
                "Currencies": ", ".join([USD, *currencies]) if currencies else f"{USD} only",
            }
        )
    if not rows:
        return "No snapshots yet."
    return _table(rows)
