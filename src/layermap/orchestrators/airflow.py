"""
Airflow orchestrator integration for layermap.

Two outputs:
- to_dag_source(): standalone DAG module text per table, waiting on each
  upstream table with a BigQuery existence sensor before running the model
- to_dag(): an in-process Airflow DAG (TaskFlow API) loading every table in
  lineage order; needs Airflow installed
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from ..models import Layer, Table
from .base import BaseOrchestrator


class AirflowOrchestrator(BaseOrchestrator):
    """
    Converts parsed tables to Airflow DAGs.

    Example:
        from layermap.orchestrators import AirflowOrchestrator

        orchestrator = AirflowOrchestrator(result, config)
        source = orchestrator.to_dag_source(result.get_table("fdp_customer"))
        Path("dags/fdp_customer.py").write_text(source)
    """

    def dag_id(self, table: Table) -> str:
        """e.g. "datatrust_fdp_customer" for fdp-layer table "customer" """
        return f"datatrust_{table.layer.prefix}_{self._sanitize_name(table.target_name)}"

    def schedule(self, table: Table) -> str:
        if table.layer == Layer.ORIGINATION:
            return self.config.origination_schedule
        return self.config.downstream_schedule

    def to_dag_source(self, table: Table) -> str:
        """
        Render an Airflow DAG module for one table.

        Args:
            table: Table whose model the DAG runs

        Returns:
            Python source text of the DAG module
        """
        model_sql = self.templates.generate_model_sql(table).replace("`", "'")
        model_sql = model_sql.replace('"""', "'''")

        sensor_blocks = []
        wiring = []
        for source_name in table.source_names():
            task_name = f"wait_for_{self._sanitize_name(source_name)}"
            sensor_blocks.append(
                "\n".join(
                    [
                        f"    # Data dependency: wait for {source_name}",
                        f"    {task_name} = BigQueryTableExistenceSensor(",
                        f"        task_id='{task_name}',",
                        f"        project_id='{self.config.default_source_project}',",
                        f"        dataset_id='{self.config.default_source_dataset}',",
                        f"        table_id='{source_name}',",
                        "        timeout=600,",
                        "        mode='reschedule',",
                        "    )",
                        "",
                    ]
                )
            )
            wiring.append(f"    {task_name} >> dq_check")
        if not wiring:
            wiring.append("    dq_check")

        emails = ", ".join(f"'{e}'" for e in self.config.alert_emails)
        lines = [
            "from datetime import datetime, timedelta",
            "",
            "from airflow import DAG",
            "from airflow.providers.google.cloud.operators.bigquery import BigQueryInsertJobOperator",
            "from airflow.providers.google.cloud.sensors.bigquery import BigQueryTableExistenceSensor",
            "",
            "default_args = {",
            f"    'owner': '{self.config.dag_owner}',",
            "    'depends_on_past': False,",
            "    'email_on_failure': True,",
            f"    'email': [{emails}],",
            "    'retries': 3,",
            "    'retry_delay': timedelta(minutes=5),",
            "}",
            "",
            "with DAG(",
            f"    '{self.dag_id(table)}',",
            "    default_args=default_args,",
            f"    description='Managed by DataTrust: {table.target_name}',",
            f"    schedule='{self.schedule(table)}',",
            "    start_date=datetime(2024, 1, 1),",
            f"    tags=['{table.layer.short_name}', 'datatrust'],",
            "    catchup=False,",
            ") as dag:",
            "",
            "    dq_check = BigQueryInsertJobOperator(",
            "        task_id='dq_compliance_measure',",
            "        configuration={",
            '            "query": {',
            f'                "query": """{model_sql}""",',
            '                "useLegacySql": False,',
            '                "priority": "BATCH",',
            "            }",
            "        },",
            f"        location='{self.config.location}',",
            "    )",
            "",
            *sensor_blocks,
            *wiring,
            "",
        ]
        return "\n".join(lines)

    def to_dag_sources(self) -> Dict[str, str]:
        """DAG module text for every table, keyed by DAG id"""
        return {self.dag_id(t): self.to_dag_source(t) for t in self.result.tables}

    def to_dag(
        self,
        executor: Callable[[str], None],
        dag_id: str,
        schedule: str = "@daily",
        start_date: Optional[datetime] = None,
        default_args: Optional[dict] = None,
        **dag_kwargs,
    ):
        """
        Create an Airflow DAG that runs each table's model SQL in lineage order.

        Args:
            executor: Function that executes SQL (takes sql string)
            dag_id: Airflow DAG ID
            schedule: Schedule interval (default: "@daily")
            start_date: DAG start date (default: datetime(2024, 1, 1))
            default_args: Airflow default_args (default: owner from config, retries=2)
            **dag_kwargs: Additional DAG parameters (catchup, tags, max_active_runs, ...)

        Returns:
            Airflow DAG instance

        Raises:
            ImportError: If Airflow is not installed
            RuntimeError: If the table lineage contains a cycle
        """
        try:
            from airflow.decorators import dag, task  # type: ignore[import-untyped]
        except ImportError as e:
            raise ImportError(
                "Airflow is required for DAG generation. "
                "Install it with: pip install 'apache-airflow>=2.7.0'"
            ) from e

        if start_date is None:
            start_date = datetime(2024, 1, 1)

        if default_args is None:
            default_args = {
                "owner": self.config.dag_owner,
                "retries": 2,
                "retry_delay": timedelta(minutes=5),
            }

        dag_params = {
            "dag_id": dag_id,
            "schedule": schedule,
            "start_date": start_date,
            "default_args": default_args,
            **dag_kwargs,
        }
        dag_params.setdefault("catchup", False)
        dag_params.setdefault("tags", ["layermap"])

        levels = self.execution_levels()
        ordered = [name for level in levels for name in level]
        tables = self.tables
        templates = self.templates
        sanitize = self._sanitize_name

        @dag(**dag_params)
        def layered_dag():
            """Generated layered load DAG"""

            def make_task(name, sql):
                @task(task_id=sanitize(name))
                def load_table():
                    """Execute model SQL"""
                    executor(sql)
                    return f"Completed: {name}"

                return load_table

            task_instances = {
                name: make_task(name, templates.generate_model_sql(tables[name]))()
                for name in ordered
            }

            for name in ordered:
                for upstream in self._dependencies(tables[name]):
                    task_instances[upstream] >> task_instances[name]

        return layered_dag()


__all__ = ["AirflowOrchestrator"]
