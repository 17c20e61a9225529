"""Tests for the command-line entry point."""

import json

from fxlead import main as cli
from fxlead.runner import PairError


def test_invalid_config_exits_1(monkeypatch, tmp_path):
    monkeypatch.delenv("TWELVEDATA_API_KEY_DAILY", raising=False)
    monkeypatch.delenv("TWELVEDATA_API_KEY_H4", raising=False)
    code = cli._run_cli(["--env-file", str(tmp_path / "nonexistent.env")])
    assert code == 1


def test_writes_report(monkeypatch, tmp_path):
    monkeypatch.setenv("TWELVEDATA_API_KEY_DAILY", "d")
    monkeypatch.setenv("TWELVEDATA_API_KEY_H4", "h")
    seen = {}

    async def _fake_batch(config, pairs=None):
        seen["pairs"] = pairs
        return [PairError(p, "boom", 0) for p in pairs]

    monkeypatch.setattr("fxlead.runner.run_batch", _fake_batch)
    out = tmp_path / "report.json"
    code = cli._run_cli([
        "--pairs", "EUR/USD, GBP/JPY",
        "--output", str(out),
        "--env-file", str(tmp_path / "nonexistent.env"),
    ])
    assert code == 0
    assert seen["pairs"] == ["EUR/USD", "GBP/JPY"]
    payload = json.loads(out.read_text())
    assert [r["pair"] for r in payload["results"]] == ["EUR/USD", "GBP/JPY"]
    assert payload["actionable"] == []
