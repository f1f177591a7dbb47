"""
Tests for Airflow orchestrator integration.

DAG module rendering is tested without Airflow; to_dag() tests are skipped
unless Airflow is installed.
"""

import importlib.util

import pytest

from layermap import RenderConfig, analyze
from layermap.orchestrators import AirflowOrchestrator, BaseOrchestrator

MAPPING = """raw_customers,customer_id,fdp_customer,id,STRING
fdp_customer,id,cdp_customer_summary,customer_id,STRING
raw_orders,amount,cdp_customer_summary,total_amount,NUMERIC,SUM(amount)
"""

HAS_AIRFLOW = importlib.util.find_spec("airflow") is not None


@pytest.fixture
def result():
    return analyze(MAPPING)


class TestExecutionLevels:
    """Test dependency levels over the table graph."""

    def test_levels(self, result):
        """Test that tables load after all their upstreams."""
        levels = BaseOrchestrator(result).execution_levels()

        assert levels == [
            ["raw_customers", "raw_orders"],
            ["fdp_customer"],
            ["cdp_customer_summary"],
        ]

    def test_cycle_detected(self):
        """Test that mutual dependencies raise."""
        result = analyze("fdp_a,x,fdp_b,y\nfdp_b,y,fdp_a,x")

        with pytest.raises(RuntimeError, match="Circular dependency"):
            BaseOrchestrator(result).execution_levels()

    def test_self_reference_ignored(self):
        """Test that a table reading from itself is not a cycle."""
        result = analyze("FDP: T\nold -> new")
        assert BaseOrchestrator(result).execution_levels() == [["T"]]


class TestDagSource:
    """Test standalone DAG module rendering."""

    def test_dag_id_and_schedule(self, result):
        """Test naming and layer-dependent schedules."""
        orchestrator = AirflowOrchestrator(result)

        assert orchestrator.dag_id(result.get_table("fdp_customer")) == "datatrust_fdp_fdp_customer"
        assert orchestrator.schedule(result.get_table("raw_orders")) == "@daily"
        assert orchestrator.schedule(result.get_table("cdp_customer_summary")) == "0 2 * * *"

    def test_sensors_per_source(self, result):
        """Test one existence sensor per upstream, wired into the check task."""
        source = AirflowOrchestrator(result).to_dag_source(result.get_table("cdp_customer_summary"))

        assert "wait_for_fdp_customer = BigQueryTableExistenceSensor(" in source
        assert "wait_for_raw_orders = BigQueryTableExistenceSensor(" in source
        assert "    wait_for_fdp_customer >> dq_check" in source
        assert "    wait_for_raw_orders >> dq_check" in source
        assert "schedule='0 2 * * *'" in source

    def test_no_sources(self, result):
        """Test a DAG with only the check task."""
        source = AirflowOrchestrator(result).to_dag_source(result.get_table("raw_orders"))

        assert "BigQueryTableExistenceSensor(" not in source.split("import BigQueryTableExistenceSensor")[1]
        assert source.rstrip().endswith("dq_check")

    def test_valid_python(self, result):
        """Test that every rendered module compiles."""
        sources = AirflowOrchestrator(result).to_dag_sources()

        assert set(sources) == {
            "datatrust_fdp_fdp_customer",
            "datatrust_odp_raw_customers",
            "datatrust_cdp_cdp_customer_summary",
            "datatrust_odp_raw_orders",
        }
        for dag_id, text in sources.items():
            compile(text, f"{dag_id}.py", "exec")

    def test_config_values(self, result):
        """Test that owner, emails and projects come from RenderConfig."""
        config = RenderConfig(
            dag_owner="platform",
            alert_emails=["oncall@example.com"],
            default_source_project="lake",
        )
        source = AirflowOrchestrator(result, config).to_dag_source(result.get_table("fdp_customer"))

        assert "'owner': 'platform'" in source
        assert "'email': ['oncall@example.com']" in source
        assert "project_id='lake'" in source


@pytest.mark.skipif(not HAS_AIRFLOW, reason="Airflow not installed")
class TestToDag:
    """Test in-process DAG creation."""

    def test_basic_dag_creation(self, result):
        """Test that one task is created per table with lineage edges."""
        executed = []
        dag = AirflowOrchestrator(result).to_dag(executor=executed.append, dag_id="layered")

        assert dag.dag_id == "layered"
        assert len(dag.tasks) == 4
        fdp_task = dag.get_task("fdp_customer")
        assert "raw_customers" in fdp_task.upstream_task_ids
