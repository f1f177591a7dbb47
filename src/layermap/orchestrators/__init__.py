"""
Orchestrator integrations for layermap.

Supported orchestrators:
- Airflow (DAG module source per table, or an in-process TaskFlow DAG)

Example:
    from layermap import analyze
    from layermap.orchestrators import AirflowOrchestrator

    result = analyze(mapping_text)
    airflow = AirflowOrchestrator(result)
    sources = airflow.to_dag_sources()
"""

from .airflow import AirflowOrchestrator
from .base import BaseOrchestrator

__all__ = [
    "BaseOrchestrator",
    "AirflowOrchestrator",
]
