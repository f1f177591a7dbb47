"""
Tests for export functionality.

Tests JSON and CSV exporters.
"""

import csv
import json
import tempfile
from pathlib import Path

from layermap import CSVExporter, JSONExporter, analyze


def create_test_result():
    """Create a small three-layer mapping for export tests"""
    return analyze(
        "raw_orders,order_id,fdp_orders,id,STRING\n"
        "raw_orders,amount,fdp_orders,total_amount,NUMERIC,ROUND(${source})\n"
        "fdp_orders,total_amount,cdp_revenue,revenue,NUMERIC\n"
    )


def test_json_export():
    """Test JSON exporter basic functionality"""
    result = create_test_result()

    data = JSONExporter.export(result)

    # Check structure
    assert data["input_format"] == "csv"
    assert data["summary"] == {
        "origination_tables": 1,
        "foundational_tables": 1,
        "consumption_tables": 1,
        "total_fields": 3,
    }
    assert data["lineage"]["cdp_revenue"] == ["fdp_orders"]

    tables = {t["target_name"]: t for t in data["tables"]}
    assert tables["fdp_orders"]["id"] == "fdp-fdp_orders"
    assert tables["fdp_orders"]["layer"] == "FDP (Foundational)"
    assert tables["fdp_orders"]["primary_keys"] == ["id"]

    mappings = tables["fdp_orders"]["sources"][0]["mappings"]
    assert mappings[0] == {"source_field": "order_id", "target_field": "id", "transformation": None}
    assert mappings[1]["transformation"] == "ROUND(${source})"


def test_json_export_without_mappings():
    """Test JSON export without field mappings"""
    result = create_test_result()

    data = JSONExporter.export(result, include_mappings=False)

    source = next(t for t in data["tables"] if t["target_name"] == "cdp_revenue")["sources"][0]
    assert source == {"name": "fdp_orders"}


def test_json_export_to_file():
    """Test JSON export to file"""
    result = create_test_result()

    with tempfile.TemporaryDirectory() as tmpdir:
        file_path = Path(tmpdir) / "nested" / "inventory.json"
        JSONExporter.export_to_file(result, str(file_path))

        assert file_path.exists()
        with open(file_path) as f:
            data = json.load(f)

        assert len(data["tables"]) == 3


def test_csv_tables_export():
    """Test CSV table inventory export"""
    result = create_test_result()

    with tempfile.TemporaryDirectory() as tmpdir:
        file_path = Path(tmpdir) / "tables.csv"
        CSVExporter.export_tables_to_file(result, str(file_path))

        with open(file_path, newline="") as f:
            rows = list(csv.DictReader(f))

    assert [r["target_name"] for r in rows] == ["cdp_revenue", "fdp_orders", "raw_orders"]
    assert rows[1]["layer"] == "FDP"
    assert rows[1]["column_count"] == "4"
    assert rows[1]["sources"] == "raw_orders"
    assert rows[2]["sources"] == ""


def test_csv_mappings_export():
    """Test CSV field mapping export"""
    result = create_test_result()

    with tempfile.TemporaryDirectory() as tmpdir:
        file_path = Path(tmpdir) / "mappings.csv"
        CSVExporter.export_mappings_to_file(result, str(file_path))

        with open(file_path, newline="") as f:
            rows = list(csv.DictReader(f))

    assert len(rows) == 3
    first = rows[0]
    assert (first["source_table"], first["source_field"]) == ("raw_orders", "order_id")
    assert (first["target_table"], first["target_field"]) == ("fdp_orders", "id")
    assert first["transformation"] == ""
    assert rows[1]["data_type"] == "NUMERIC"
    assert rows[1]["transformation"] == "ROUND(${source})"
