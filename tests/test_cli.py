"""
Tests for the layermap command line interface.
"""

import json

import pytest

from layermap.cli import EXIT_ERROR, EXIT_OK, EXIT_UNRECOGNIZED, main

MAPPING = """raw_customers,customer_id,fdp_customer,id,STRING
raw_customers,email,fdp_customer,email_address,STRING
fdp_customer,id,cdp_customer_summary,customer_id,STRING
"""


@pytest.fixture
def mapping_file(tmp_path):
    path = tmp_path / "mapping.csv"
    path.write_text(MAPPING)
    return path


class TestParseCommand:
    """Test `layermap parse`."""

    def test_json_to_stdout(self, mapping_file, capsys):
        """Test the default JSON output."""
        assert main(["parse", str(mapping_file)]) == EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["total_fields"] == 3
        assert data["lineage"]["cdp_customer_summary"] == ["fdp_customer"]

    def test_summary(self, mapping_file, capsys):
        """Test the human-readable summary."""
        assert main(["parse", str(mapping_file), "--format", "summary"]) == EXIT_OK

        out = capsys.readouterr().out
        assert out.startswith("3 tables recognized (ODP: 1, FDP: 1, CDP: 1) from 3 field mappings.")
        assert "  fdp_customer <- raw_customers" in out

    def test_output_file(self, mapping_file, tmp_path):
        """Test writing to a file."""
        out = tmp_path / "out" / "inventory.json"
        assert main(["parse", str(mapping_file), "--output", str(out)]) == EXIT_OK
        assert len(json.loads(out.read_text())["tables"]) == 3

    def test_unrecognized_input(self, tmp_path, capsys):
        """Test the dedicated exit code for noise."""
        path = tmp_path / "noise.txt"
        path.write_text("...\n!!!\n")

        assert main(["parse", str(path)]) == EXIT_UNRECOGNIZED
        assert "No valid mapping data found" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """Test that file errors are reported, not raised."""
        assert main(["parse", str(tmp_path / "missing.csv")]) == EXIT_ERROR
        assert capsys.readouterr().err.startswith("error: ")


class TestValidateCommand:
    """Test `layermap validate`."""

    def test_reports_issues(self, tmp_path, capsys):
        """Test that warnings are printed without failing."""
        path = tmp_path / "broken.csv"
        path.write_text("raw_a,name,fdp_b,label,STRING,CONCAT(${source} 'x\n")

        assert main(["validate", str(path)]) == EXIT_OK
        assert "WARNING [fdp_b]: Transformation for 'label'" in capsys.readouterr().out

    def test_clean(self, mapping_file, capsys):
        """Test output for a clean mapping."""
        assert main(["validate", str(mapping_file)]) == EXIT_OK
        assert "No validation issues found" in capsys.readouterr().out


class TestRenderCommand:
    """Test `layermap render`."""

    def test_sql_files(self, mapping_file, tmp_path):
        """Test one model file per table."""
        out_dir = tmp_path / "models"
        assert main(["render", str(mapping_file), "--kind", "sql", "--output-dir", str(out_dir)]) == EXIT_OK

        names = sorted(p.name for p in out_dir.iterdir())
        assert names == ["cdp_customer_summary.sql", "fdp_customer.sql", "raw_customers.sql"]
        assert "ref('raw_customers')" in (out_dir / "fdp_customer.sql").read_text()

    def test_yaml_stdout(self, mapping_file, capsys):
        """Test schema YAML to stdout."""
        assert main(["render", str(mapping_file), "--kind", "yaml"]) == EXIT_OK
        assert "version: 2" in capsys.readouterr().out

    def test_dag_files(self, mapping_file, tmp_path):
        """Test DAG modules named by DAG id."""
        out_dir = tmp_path / "dags"
        assert main(["render", str(mapping_file), "--kind", "dag", "--output-dir", str(out_dir)]) == EXIT_OK
        assert (out_dir / "datatrust_fdp_fdp_customer.py").exists()

    def test_config_project(self, mapping_file, capsys):
        """Test project and dataset overrides."""
        args = ["render", str(mapping_file), "--kind", "config", "--project", "prod", "--dataset", "fdp"]
        assert main(args) == EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["environment"]["default_target_project"] == "prod"
        assert data["environment"]["default_target_dataset"] == "fdp"


class TestTemplateCommand:
    """Test `layermap template`."""

    def test_prints_sample(self, capsys):
        """Test the sample sheet output."""
        assert main(["template"]) == EXIT_OK
        assert "raw_customers,customer_id,odp_customer,id,STRING" in capsys.readouterr().out
