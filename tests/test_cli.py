import json

import pytest

from planwise import cli

BASE_ARGS = [
    "--age", "30", "--income", "5000", "--savings", "10000",
    "--sip", "1000", "--risk", "Moderate", "--years", "10",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("_PLANWISE_ENV_LOADED", "1")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("PLANWISE_DISABLE_AI", raising=False)
    monkeypatch.chdir(tmp_path)


def test_report_output(capsys):
    assert cli.main(BASE_ARGS) == 0
    out = capsys.readouterr().out
    assert "Risk score     : 65/100 (Moderate)" in out
    assert "Equity 59% | Debt 32% | Gold 9%" in out
    assert "VTI" in out
    assert "not financial advice" in out


def test_json_output(capsys):
    assert cli.main(BASE_ARGS + ["--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["risk_score"] == 65
    assert data["total_invested"] == 130000
    assert [p["year"] for p in data["growth_chart"]][-1] == 10.0
    assert data["ai_explanation"] is None


def test_invalid_profile_exit_code(capsys):
    args = BASE_ARGS[:]
    args[args.index("--age") + 1] = "15"
    assert cli.main(args) == 2
    err = capsys.readouterr().err
    assert "error: age: Age must be between 18 and 100." in err


def test_save_writes_history(tmp_path, capsys):
    path = tmp_path / "hist.json"
    assert cli.main(BASE_ARGS + ["--save", "--history", str(path), "--user", "carol", "--json"]) == 0
    plan_id = json.loads(capsys.readouterr().out)["id"]
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["carol"][0]["id"] == plan_id


def test_ai_without_key_uses_static_content(capsys):
    assert cli.main(BASE_ARGS + ["--ai", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["ai_explanation"] is None
    assert data["equity_breakdown"]["etf"][0]["symbol"] == "VTI"


def test_config_file_sets_defaults(tmp_path, capsys):
    cfg = tmp_path / "config.yaml"
    hist = tmp_path / "from_config.json"
    cfg.write_text(f"app:\n  history_path: {hist}\n  user_id: cfg-user\n", encoding="utf-8")
    assert cli.main(BASE_ARGS + ["--config", str(cfg), "--save", "--json"]) == 0
    stored = json.loads(hist.read_text(encoding="utf-8"))
    assert list(stored) == ["cfg-user"]


@pytest.mark.parametrize(
    "flag, field",
    [("--years", "investment_horizon_years"), ("--savings", "current_savings"), ("--income", "monthly_income")],
)
def test_nan_input_exit_code(flag, field, capsys):
    args = BASE_ARGS[:]
    args[args.index(flag) + 1] = "nan"
    assert cli.main(args) == 2
    err = capsys.readouterr().err
    assert f"error: {field}:" in err
