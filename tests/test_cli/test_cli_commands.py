"""
Tests for the typer CLI (bfcm_report/cli.py).

What we test
------------
validate-config:
  - Default config validates; --full prints JSON without the client secret.
  - Missing --config file → exit 1.

generate:
  - Fixture run → exit 0, progress lines, report text, [OK] line.
  - --json prints the report as JSON.
  - Failing sources → [WARN] lines, still exit 0.
  - Every source failing → exit 2.
  - Bad dates, non-numeric shop ids, over-long windows → exit 1.
"""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from bfcm_report.cli import app
from bfcm_report.sources.base import SOURCE_NAMES

runner = CliRunner()

_WINDOW = ["--start-date", "2025-11-28", "--end-date", "2025-12-01"]


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch):
    monkeypatch.delenv("BFCM_REPORT_CLIENT_SECRET", raising=False)
    monkeypatch.delenv("BFCM_REPORT_FIXTURE_PATH", raising=False)
    yield
    # generate installs a stderr handler bound to the runner's stream.
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


def _fixture_with_failures(tmp_path, payloads, failing) -> str:
    path = tmp_path / "sources.json"
    path.write_text(json.dumps({"sources": payloads, "fail": list(failing)}), encoding="utf-8")
    return str(path)


class TestValidateConfig:
    def test_default_config(self):
        result = runner.invoke(app, ["validate-config"])
        assert result.exit_code == 0
        assert "Max window days:     90" in result.output
        assert "[OK] Config is valid." in result.output

    def test_full_hides_secret(self, monkeypatch):
        monkeypatch.setenv("BFCM_REPORT_CLIENT_ID", "cid")
        monkeypatch.setenv("BFCM_REPORT_CLIENT_SECRET", "hunter2")
        result = runner.invoke(app, ["validate-config", "--full"])
        assert result.exit_code == 0
        assert "Credentials:         set" in result.output
        assert '"client_id": "cid"' in result.output
        assert "hunter2" not in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "x.toml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestGenerate:
    def test_fixture_run(self, sample_sources_path):
        result = runner.invoke(app, [
            "generate", "--shop-id", "12345", *_WINDOW,
            "--account-name", "Northwind Outfitters",
            "--fixture", str(sample_sources_path),
        ])
        assert result.exit_code == 0, result.output
        assert "[14/14]" in result.output
        assert "=== BFCM Report: Northwind Outfitters ===" in result.output
        assert "[OK] Report complete." in result.output

    def test_json_output(self, sample_sources_path):
        result = runner.invoke(app, [
            "generate", "--shop-id", "12345", *_WINDOW,
            "--fixture", str(sample_sources_path), "--json",
        ])
        assert result.exit_code == 0, result.output
        assert '"failed_labels": []' in result.output
        assert '"performance_grade": "D"' in result.output

    def test_partial_run_warns(self, tmp_path, sample_payloads):
        path = _fixture_with_failures(tmp_path, sample_payloads, ["peak_gmv"])
        result = runner.invoke(app, [
            "generate", "--shop-id", "12345", *_WINDOW, "--fixture", path,
        ])
        assert result.exit_code == 0, result.output
        assert "[WARN] Peak GMV unavailable; showing defaults." in result.output
        assert "[PARTIAL] 1 of 14 sources failed: Peak GMV" in result.output
        assert "[OK] Report partial." in result.output

    def test_all_sources_fail(self, tmp_path, sample_payloads):
        path = _fixture_with_failures(tmp_path, sample_payloads, SOURCE_NAMES)
        result = runner.invoke(app, [
            "generate", "--shop-id", "12345", *_WINDOW, "--fixture", path,
        ])
        assert result.exit_code == 2
        assert "All 14 data sources failed" in result.output

    def test_multiple_shops(self, sample_sources_path):
        result = runner.invoke(app, [
            "generate", "--shop-id", "12345", "--shop-id", "678", *_WINDOW,
            "--fixture", str(sample_sources_path),
        ])
        assert result.exit_code == 0, result.output
        assert "shops=12345, 678" in result.output

    @pytest.mark.parametrize("args, message", [
        (["--shop-id", "12345", "--start-date", "11/28/2025", "--end-date", "2025-12-01"],
         "--start-date must be YYYY-MM-DD"),
        (["--shop-id", "abc", *_WINDOW], "numeric"),
        (["--shop-id", "12345", "--start-date", "2025-12-02", "--end-date", "2025-12-01"],
         "on or before end_date"),
        (["--shop-id", "12345", "--start-date", "2025-01-01", "--end-date", "2025-12-01"],
         "exceeds the maximum"),
    ])
    def test_invalid_input(self, sample_sources_path, args, message):
        result = runner.invoke(app, ["generate", *args, "--fixture", str(sample_sources_path)])
        assert result.exit_code == 1
        assert message in result.output

    def test_no_source_configured(self, monkeypatch):
        monkeypatch.delenv("BFCM_REPORT_SOURCES_BASE_URL", raising=False)
        result = runner.invoke(app, ["generate", "--shop-id", "12345", *_WINDOW])
        assert result.exit_code == 1
        assert "base_url is not configured" in result.output
