"""Management CLI tests (memory backend)."""

import json

import pytest

from farmlog import cli
from farmlog.config import settings
from farmlog.services.transfer import BOM


@pytest.fixture(autouse=True)
def memory_storage(monkeypatch):
    monkeypatch.setattr(settings, "storage_backend", "memory")


@pytest.mark.unit
class TestCli:
    def test_usage_on_unknown_command(self, capsys):
        assert cli.main(["frobnicate"]) == 1
        assert "Usage" in capsys.readouterr().out

    def test_export_json_to_file(self, tmp_path):
        target = tmp_path / "out.json"

        assert cli.main(["export-json", "alice", str(target)]) == 0

        doc = json.loads(target.read_text(encoding="utf-8"))
        assert doc == {"crops": [], "growthRecords": [], "tasks": [], "farmAreas": []}

    def test_export_csv_to_file(self, tmp_path):
        target = tmp_path / "out.csv"

        cli.main(["export-csv", "alice", str(target)])

        assert target.read_text(encoding="utf-8").startswith(BOM + "ID,Crop")

    def test_import_json(self, tmp_path, capsys):
        source = tmp_path / "in.json"
        source.write_text(json.dumps({
            "crops": [{
                "id": "x", "name": "Tomato", "plantingDate": "2024-01-01",
                "expectedHarvestDate": "2024-04-01", "createdAt": "2024-01-01T00:00:00Z",
                "updatedAt": "2024-01-01T00:00:00Z",
            }],
            "growthRecords": [], "tasks": [], "farmAreas": [],
        }), encoding="utf-8")

        assert cli.main(["import-json", "alice", str(source), "--replace"]) == 0
        assert "Imported 1 crops" in capsys.readouterr().out

    def test_stats(self, capsys):
        cli.main(["stats", "alice"])
        assert json.loads(capsys.readouterr().out)["totalCrops"] == 0
