from nw_tracker.models.asset import Asset
from nw_tracker.prompt import confirm, prompt_rates, prompt_values

ASSETS = [
    Asset(id="vti", name="VTI", category="etf", currency="USD"),
    Asset(id="sav", name="Savings", category="bank", currency="CHF"),
]


def test_prompt_values_omits_blank_answers(answers, capsys) -> None:
    values = prompt_values(ASSETS, read=answers("abc", "-5", "12500", ""))
    assert values == {"vti": 12500.0}
    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "Value must be non-negative" in out


def test_prompt_values_keeps_existing_on_blank(answers) -> None:
    values = prompt_values(ASSETS, {"vti": 100.0, "sav": 200.0}, read=answers("", "250"))
    assert values == {"vti": 100.0, "sav": 250.0}


def test_prompt_rates_requires_positive_rate(answers, capsys) -> None:
    rates = prompt_rates(["CHF"], read=answers("", "0", "nan", "0.9"))
    assert rates == {"CHF": 0.9}
    out = capsys.readouterr().out
    assert "Rate is required" in out
    assert "Rate must be a positive number" in out


def test_prompt_rates_prefills_existing(answers) -> None:
    assert prompt_rates(["CHF", "EUR"], {"CHF": 0.9}, read=answers("", "0.95")) == {"CHF": 0.9, "EUR": 0.95}


def test_prompt_nothing_to_ask() -> None:
    assert prompt_values([]) == {}
    assert prompt_rates([]) == {}


def test_confirm(answers) -> None:
    assert confirm("Sure?", answers("y"))
    assert confirm("Sure?", answers(" YES "))
    assert not confirm("Sure?", answers(""))
    assert not confirm("Sure?", answers("nope"))


def test_confirm_defaults_to_no_on_eof() -> None:
    def closed(prompt: str) -> str:
        raise EOFError

    assert not confirm("Sure?", closed)
