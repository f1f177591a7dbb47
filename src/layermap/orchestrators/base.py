"""
Base classes and protocols for orchestrator integrations.

This module defines the interface that all orchestrator integrations must follow.
"""

from typing import Dict, List, Optional, Protocol

from ..config import RenderConfig
from ..models import MappingResult, Table
from ..rendering import TemplateService


class OrchestratorProtocol(Protocol):
    """Protocol defining the interface for orchestrator integrations."""

    def __init__(self, result: MappingResult, config: Optional[RenderConfig] = None) -> None:
        """Initialize with a parsed MappingResult."""
        ...


class BaseOrchestrator:
    """
    Base class for orchestrator integrations.

    Provides dependency levels over the parsed table graph and shared naming
    helpers. Upstream names that resolve to no table in the result are
    treated as external and never block a level.
    """

    def __init__(self, result: MappingResult, config: Optional[RenderConfig] = None) -> None:
        """
        Initialize orchestrator with a parsed mapping.

        Args:
            result: The MappingResult to convert
            config: Rendering defaults (projects, datasets, schedules)
        """
        self.result = result
        self.config = config or RenderConfig()
        self.templates = TemplateService(self.config)
        self.tables: Dict[str, Table] = {t.target_name: t for t in result.tables}

    def _dependencies(self, table: Table) -> List[str]:
        return [
            name
            for name in table.source_names()
            if name in self.tables and name != table.target_name
        ]

    def execution_levels(self) -> List[List[str]]:
        """
        Group tables into levels for concurrent loading.

        Level 0: Tables with no upstream in the result
        Level 1: Tables that depend only on Level 0
        etc.

        Returns:
            List of levels, where each level is a list of table names

        Raises:
            RuntimeError: If the table lineage contains a cycle
        """
        levels = []
        completed = set()

        while len(completed) < len(self.tables):
            current_level = [
                name
                for name, table in self.tables.items()
                if name not in completed
                and all(dep in completed for dep in self._dependencies(table))
            ]

            if not current_level:
                raise RuntimeError("Circular dependency detected in table lineage")

            levels.append(current_level)
            completed.update(current_level)

        return levels

    def _sanitize_name(self, name: str) -> str:
        """
        Sanitize a name for use in orchestrator identifiers.

        Replaces dots and dashes with underscores to ensure compatibility
        with orchestrator naming requirements.
        """
        return name.replace(".", "_").replace("-", "_")


__all__ = ["BaseOrchestrator", "OrchestratorProtocol"]
