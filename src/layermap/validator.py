"""
Mapping validation component.

This module provides the MappingValidator class which inspects a parsed
table graph and reports issues without changing it. The parser stays
permissive on noisy input; the validator is where callers find out what to
fix before importing.
"""

import logging
from collections import defaultdict
from typing import Iterable, List, Optional, Union

import sqlglot
from sqlglot.errors import SqlglotError

from .inference import apply_transformation
from .models import (
    IssueCategory,
    IssueSeverity,
    Layer,
    MappingResult,
    Table,
    ValidationIssue,
)

logger = logging.getLogger(__name__)


class MappingValidator:
    """
    Validation checks for a parsed mapping.

    Example:
        result = analyze(text)
        validator = MappingValidator(result)
        if validator.has_warnings():
            validator.log_issues()
    """

    def __init__(
        self,
        tables: Union[MappingResult, Iterable[Table]],
        dialect: Optional[str] = "bigquery",
        audit_column: str = "updated_at",
    ):
        """
        Args:
            tables: A MappingResult or any iterable of tables
            dialect: sqlglot dialect used to parse transformation expressions
            audit_column: Column non-origination tables are expected to carry
        """
        if isinstance(tables, MappingResult):
            tables = tables.tables
        self._tables: List[Table] = list(tables)
        self.dialect = dialect
        self.audit_column = audit_column
        self._issues: Optional[List[ValidationIssue]] = None

    def validate(self) -> List[ValidationIssue]:
        """Run all checks and return the issues found (cached)"""
        if self._issues is None:
            issues: List[ValidationIssue] = []
            names = {t.target_name for t in self._tables}
            for table in self._tables:
                issues.extend(self._check_sources(table, names))
                issues.extend(self._check_primary_keys(table))
                issues.extend(self._check_audit_column(table))
                issues.extend(self._check_transformations(table))
            self._issues = issues
        return list(self._issues)

    def get_issues(
        self,
        severity: Optional[Union[str, IssueSeverity]] = None,
        category: Optional[Union[str, IssueCategory]] = None,
        table_name: Optional[str] = None,
    ) -> List[ValidationIssue]:
        """
        Get filtered validation issues.

        Args:
            severity: Filter by severity ('error', 'warning', 'info' or IssueSeverity enum)
            category: Filter by category (string or IssueCategory enum)
            table_name: Filter by table

        Returns:
            Filtered list of ValidationIssue objects
        """
        issues = self.validate()

        if severity:
            severity_enum = (
                severity if isinstance(severity, IssueSeverity) else IssueSeverity(severity)
            )
            issues = [i for i in issues if i.severity == severity_enum]

        if category:
            category_enum = (
                category if isinstance(category, IssueCategory) else IssueCategory(category)
            )
            issues = [i for i in issues if i.category == category_enum]

        if table_name:
            issues = [i for i in issues if i.table_name == table_name]

        return issues

    def has_errors(self) -> bool:
        return any(i.severity == IssueSeverity.ERROR for i in self.validate())

    def has_warnings(self) -> bool:
        return any(i.severity == IssueSeverity.WARNING for i in self.validate())

    def log_issues(self, severity: Optional[Union[str, IssueSeverity]] = None) -> None:
        """Log issues grouped by severity, errors first"""
        issues = self.get_issues(severity=severity)

        if not issues:
            logger.info("No validation issues found")
            return

        by_severity = defaultdict(list)
        for issue in issues:
            by_severity[issue.severity.value].append(issue)

        for sev in ["error", "warning", "info"]:
            if sev not in by_severity:
                continue
            logger.info("%s (%d)", sev.upper(), len(by_severity[sev]))
            for issue in by_severity[sev]:
                logger.info("%s", issue)

    # ─── Checks ───

    def _check_sources(self, table: Table, names) -> List[ValidationIssue]:
        issues = []
        for source in table.sources:
            if source.name not in names:
                issues.append(
                    ValidationIssue(
                        severity=IssueSeverity.WARNING,
                        category=IssueCategory.UNRESOLVED_SOURCE,
                        message=f"Source '{source.name}' does not name a known table",
                        table_name=table.target_name,
                        suggestion="Declare the upstream table or fix the source name",
                    )
                )
            if not source.mappings:
                issues.append(
                    ValidationIssue(
                        severity=IssueSeverity.INFO,
                        category=IssueCategory.NO_FIELD_MAPPINGS,
                        message=f"Source '{source.name}' has no field mappings",
                        table_name=table.target_name,
                    )
                )
        return issues

    def _check_primary_keys(self, table: Table) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=IssueSeverity.WARNING,
                category=IssueCategory.PRIMARY_KEY_NOT_IN_COLUMNS,
                message=f"Primary key column '{pk}' is not among the table columns",
                table_name=table.target_name,
            )
            for pk in table.primary_keys
            if pk not in table.columns
        ]

    def _check_audit_column(self, table: Table) -> List[ValidationIssue]:
        if table.layer == Layer.ORIGINATION or self.audit_column in table.columns:
            return []
        return [
            ValidationIssue(
                severity=IssueSeverity.INFO,
                category=IssueCategory.MISSING_AUDIT_COLUMN,
                message=f"Missing recommended field '{self.audit_column}'",
                table_name=table.target_name,
            )
        ]

    def _check_transformations(self, table: Table) -> List[ValidationIssue]:
        issues = []
        for source in table.sources:
            for mapping in source.mappings:
                if not mapping.transformation:
                    continue
                expression = apply_transformation(mapping.transformation, mapping.source_field)
                try:
                    sqlglot.parse_one(expression, read=self.dialect)
                except SqlglotError as e:
                    logger.debug("Unparseable transformation %r", expression, exc_info=True)
                    issues.append(
                        ValidationIssue(
                            severity=IssueSeverity.WARNING,
                            category=IssueCategory.INVALID_TRANSFORMATION,
                            message=(
                                f"Transformation for '{mapping.target_field}' is not valid SQL: "
                                f"{type(e).__name__}"
                            ),
                            table_name=table.target_name,
                        )
                    )
        return issues


__all__ = ["MappingValidator"]
