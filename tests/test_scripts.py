"""
tests/test_scripts.py — Tests for the command-line scripts.
"""

import json
from unittest.mock import MagicMock

import gspread

from botengine.leads.sheets import SheetInfo, SheetsLeadStore
from scripts.calculate_price import main as calculate_price_main
from scripts.init_sheets import init_sheets


# ── calculate_price ───────────────────────────────────────────────────────────

class TestCalculatePrice:
    def _write(self, tmp_path, responses) -> str:
        path = tmp_path / "responses.json"
        path.write_text(json.dumps(responses), encoding="utf-8")
        return str(path)

    def test_prints_range(self, tmp_path, capsys):
        path = self._write(tmp_path, {"projectType": "Residential", "finishTier": "Premium", "areaSqft": 1000})
        assert calculate_price_main([path, "--persona", "kavya"]) == 0
        out = capsys.readouterr().out
        assert "Kavya" in out
        assert "₹23,80,000 - ₹32,20,000" in out

    def test_json_output(self, tmp_path, capsys):
        path = self._write(tmp_path, {})
        assert calculate_price_main([path, "--json", "--client-type", "salon"]) == 0
        record = json.loads(capsys.readouterr().out)
        assert record["finalPrice"] == 1_500_000
        assert record["metadata"]["clientCategory"] == "salon"

    def test_non_object_responses_fail(self, tmp_path, capsys):
        path = self._write(tmp_path, ["not", "an", "object"])
        assert calculate_price_main([path]) == 1
        assert "Fallback quote" in capsys.readouterr().out


# ── init_sheets ───────────────────────────────────────────────────────────────

class TestInitSheets:
    def test_initializes_clients_with_sheets(self, registry):
        store = MagicMock(spec=SheetsLeadStore)
        store.initialize.return_value = SheetInfo(sheet_id=1, title="Leads", row_count=1)

        summary = init_sheets(registry, store)

        assert summary == {"initialized": 1, "skipped": 1, "failed": 0}
        store.initialize.assert_called_once_with(registry.get("test_interiors").sheet)

    def test_only_one_client(self, registry):
        store = MagicMock(spec=SheetsLeadStore)
        summary = init_sheets(registry, store, only="test_salon")
        assert summary == {"initialized": 0, "skipped": 1, "failed": 0}
        store.initialize.assert_not_called()

    def test_sheet_errors_are_counted(self, registry):
        store = MagicMock(spec=SheetsLeadStore)
        store.initialize.side_effect = gspread.exceptions.WorksheetNotFound("Leads")

        summary = init_sheets(registry, store)

        assert summary["failed"] == 1
        assert summary["initialized"] == 0
