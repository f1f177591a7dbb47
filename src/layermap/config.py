"""
Rendering configuration.

Parsing needs no configuration beyond ParserVocabulary; everything that
turns a parsed table into deployable text reads from RenderConfig.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class RenderConfig:
    """
    Environment defaults for generated SQL, YAML and DAG artifacts.

    Example:
        config = RenderConfig(
            default_target_project="analytics-prod",
            default_target_dataset="fdp",
        )
        TemplateService(config).generate_model_sql(table)
    """

    default_source_project: str = "source-project"
    default_source_dataset: str = "raw"
    default_target_project: str = "target-project"
    default_target_dataset: str = "curated"

    dialect: str = "bigquery"  # sqlglot dialect for generated SQL
    raw_source_name: str = "odp_raw"  # dbt source() name for origination tables
    schema_version: str = "1.2.8"

    # Airflow defaults
    dag_owner: str = "data-trust-governance"
    alert_emails: List[str] = field(default_factory=lambda: ["data-governance@example.com"])
    origination_schedule: str = "@daily"
    downstream_schedule: str = "0 2 * * *"
    location: str = "US"

    # Freshness thresholds (hours)
    freshness_warn_hours: int = 12
    freshness_error_hours: int = 24

    # Accepted values for "status" columns
    accepted_status_values: List[str] = field(
        default_factory=lambda: ["active", "inactive", "pending", "deleted", "archived"]
    )

    def target_table_path(
        self, table_name: str, project: Optional[str] = None, dataset: Optional[str] = None
    ) -> str:
        """Fully qualified BigQuery path, e.g. `project.dataset.table`"""
        project = project or self.default_target_project
        dataset = dataset or self.default_target_dataset
        return f"`{project}.{dataset}.{table_name}`"

    def to_dict(self) -> Dict[str, object]:
        return {
            "default_source_project": self.default_source_project,
            "default_source_dataset": self.default_source_dataset,
            "default_target_project": self.default_target_project,
            "default_target_dataset": self.default_target_dataset,
            "dialect": self.dialect,
        }


__all__ = ["RenderConfig"]
