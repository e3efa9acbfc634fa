import json
from pathlib import Path

import pytest

from nw_tracker.cli import main


@pytest.fixture
def nw(tmp_path: Path):
    """Run the CLI against a throwaway portfolio file."""
    path = tmp_path / "portfolio.json"

    def run(*argv: str, read=None) -> int:
        kwargs = {"read": read} if read is not None else {}
        return main(["--portfolio", str(path), *argv], **kwargs)

    run.path = path
    return run


def _add_assets(nw) -> None:
    assert nw("asset", "add", "--id", "vti", "--name", "VTI", "--category", "ETF", "--currency", "usd") == 0
    assert nw("asset", "add", "--id", "sav", "--name", "Savings", "--category", "bank", "--currency", "CHF") == 0


def test_asset_add_and_list(nw, capsys) -> None:
    _add_assets(nw)
    assert nw("asset", "list") == 0
    out = capsys.readouterr().out
    assert "Asset added." in out
    assert "Savings" in out
    document = json.loads(nw.path.read_text(encoding="utf-8"))
    assert document["assets"][0] == {"id": "vti", "name": "VTI", "category": "etf", "currency": "USD"}


def test_duplicate_asset_is_an_error(nw, capsys) -> None:
    _add_assets(nw)
    assert nw("asset", "add", "--id", "vti", "--name", "x", "--category", "etf", "--currency", "USD") == 1
    assert "already exists" in capsys.readouterr().err


def test_asset_edit_without_fields(nw, capsys) -> None:
    _add_assets(nw)
    assert nw("asset", "edit", "--id", "vti") == 0
    assert "Nothing to update." in capsys.readouterr().out


def test_snapshot_add_then_show_and_history(nw, answers, capsys) -> None:
    _add_assets(nw)
    assert nw("snapshot", "add", "--date", "2025-06-01", read=answers("12500", "9000", "0.90")) == 0
    assert nw("show") == 0
    out = capsys.readouterr().out
    assert "Snapshot saved." in out
    assert "CURRENT NET WORTH — 2025-06-01" in out
    assert "TOTAL  22,500.00" in out
    assert "ALLOCATION" in out

    assert nw("history", "--range", "all") == 0
    out = capsys.readouterr().out
    assert "NET WORTH HISTORY — ALL" in out
    assert "22,500.00" in out


def test_snapshot_add_only_asks_needed_rates(nw, answers) -> None:
    _add_assets(nw)
    assert nw("snapshot", "add", "--date", "2025-06-01", read=answers("100", "")) == 0
    document = json.loads(nw.path.read_text(encoding="utf-8"))
    assert document["snapshots"][0]["rates"] == {}


def test_snapshot_add_twice_is_an_error(nw, answers, capsys) -> None:
    _add_assets(nw)
    nw("snapshot", "add", "--date", "2025-06-01", read=answers("100", ""))
    assert nw("snapshot", "add", "--date", "2025-06-01") == 1
    assert "already exists" in capsys.readouterr().err


def test_snapshot_edit_prefills_values(nw, answers) -> None:
    _add_assets(nw)
    nw("snapshot", "add", "--date", "2025-06-01", read=answers("100", "50", "0.9"))
    assert nw("snapshot", "edit", "--date", "2025-06-01", read=answers("y", "200", "", "")) == 0
    document = json.loads(nw.path.read_text(encoding="utf-8"))
    snapshot = document["snapshots"][0]
    assert snapshot["entries"] == [{"asset_id": "vti", "value": 200.0}, {"asset_id": "sav", "value": 50.0}]
    assert snapshot["rates"] == {"CHF": 0.9}


def test_asset_remove_declined(nw, answers, capsys) -> None:
    _add_assets(nw)
    nw("snapshot", "add", "--date", "2025-06-01", read=answers("100", "50", "0.9"))
    assert nw("asset", "remove", "--id", "sav", read=answers("n")) == 0
    assert "Aborted." in capsys.readouterr().out
    document = json.loads(nw.path.read_text(encoding="utf-8"))
    assert len(document["assets"]) == 2


def test_asset_remove_confirmed_cascades(nw, answers) -> None:
    _add_assets(nw)
    nw("snapshot", "add", "--date", "2025-06-01", read=answers("100", "50", "0.9"))
    assert nw("asset", "remove", "--id", "sav", read=answers("y")) == 0
    document = json.loads(nw.path.read_text(encoding="utf-8"))
    assert [asset["id"] for asset in document["assets"]] == ["vti"]
    assert document["snapshots"][0] == {
        "date": "2025-06-01",
        "rates": {},
        "entries": [{"asset_id": "vti", "value": 100.0}],
    }


def test_show_and_history_without_snapshots(nw, capsys) -> None:
    assert nw("show") == 0
    assert nw("history", "--range", "1M") == 0
    out = capsys.readouterr().out
    assert "No snapshots yet." in out
    assert "No snapshots in range." in out


def test_show_unknown_category(nw, answers, capsys) -> None:
    _add_assets(nw)
    nw("snapshot", "add", "--date", "2025-06-01", read=answers("100", ""))
    assert nw("show", "--category", "crypto") == 1
    assert "crypto" in capsys.readouterr().err


@pytest.mark.parametrize("day", ["06/01/2025", "2025-6-1"])
def test_bad_date_is_rejected_by_parser(nw, day: str) -> None:
    with pytest.raises(SystemExit):
        nw("snapshot", "add", "--date", day)


def test_corrupt_file_is_reported(nw, capsys) -> None:
    nw.path.write_text("not json", encoding="utf-8")
    assert nw("asset", "list") == 1
    assert "malformed JSON" in capsys.readouterr().err
