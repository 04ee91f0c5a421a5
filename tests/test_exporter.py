"""Tests de exportación CSV/JSON."""

import csv
import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from telemetry_ingest.errors import ExportError, StoreError
from telemetry_ingest.exports.exporter import (
    CSV_HEADER,
    ExportFormat,
    PacketExporter,
    generate_export_filename,
)

FIXED_NOW = datetime(2024, 3, 5, 14, 7, 9)


@pytest.fixture
def exporter(store, tmp_path):
    return PacketExporter(store, tmp_path / "exports", clock=lambda: FIXED_NOW)


class TestFilename:

    def test_format(self):
        assert generate_export_filename("csv", "komkomunikacijos_data", FIXED_NOW) == (
            "komkomunikacijos_data_20240305_140709.csv"
        )
        assert generate_export_filename(ExportFormat.JSON, "x", FIXED_NOW) == "x_20240305_140709.json"

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            generate_export_filename("xml", "x", FIXED_NOW)


class TestCsvExport:

    def test_header_only_when_empty(self, exporter):
        result = exporter.export_csv()

        assert result.rows == 0
        with open(result.path, newline="", encoding="utf-8") as fh:
            assert list(csv.reader(fh)) == [CSV_HEADER]

    def test_rows_newest_first_with_fixed_precision(self, exporter, store, packet_factory):
        store.insert(packet_factory(0, z=0.5))
        store.insert(packet_factory(1, z=-0.12345))

        result = exporter.export(ExportFormat.CSV)

        assert result.path.name == "komkomunikacijos_data_20240305_140709.csv"
        with open(result.path, newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == CSV_HEADER
        assert len(rows) == 3
        newest = rows[1]
        assert newest[1] == "12:00:01"
        assert newest[2] == "54.688157"
        assert newest[4] == "9"
        assert newest[5:8] == ["0.100", "-0.200", "-0.123"]
        assert len(newest[8]) == len("2024-01-01 00:00:00")

    def test_limit(self, exporter, store, packet_factory):
        for i in range(5):
            store.insert(packet_factory(i))
        assert exporter.export_csv(limit=2).rows == 2


class TestJsonExport:

    def test_empty_array(self, exporter):
        result = exporter.export_json()
        assert result.rows == 0
        assert json.loads(result.path.read_text(encoding="utf-8")) == []

    def test_records_match_stored_fields(self, exporter, store, packet_factory):
        packet_id = store.insert(packet_factory(2, z=0.25))

        result = exporter.export_json()

        text = result.path.read_text(encoding="utf-8")
        assert '\n  {' in text
        records = json.loads(text)
        assert records[0]["id"] == packet_id
        assert records[0]["acceleration_z"] == 0.25
        assert set(records[0]) == {
            "id", "time", "latitude", "longitude", "satellites",
            "acceleration_x", "acceleration_y", "acceleration_z",
            "created_at", "updated_at",
        }


class TestExportErrors:

    def test_unwritable_directory(self, store, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        exporter = PacketExporter(store, blocker, clock=lambda: FIXED_NOW)

        with pytest.raises(ExportError):
            exporter.export_csv()

    def test_store_failure_propagates(self, tmp_path):
        store = MagicMock()
        store.list.side_effect = StoreError("down")
        exporter = PacketExporter(store, tmp_path, clock=lambda: FIXED_NOW)

        with pytest.raises(StoreError):
            exporter.export_json()
        assert list(tmp_path.iterdir()) == []
