"""
Core data models for the layer mapping system.

Contains all dataclass definitions for:
- Architectural layers
- Table graph models (tables, source references, field mappings)
- Transient parse models (mapping rows, table fragments)
- Parse results and validation issues
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# ============================================================================
# Layer Models
# ============================================================================


class Layer(Enum):
    """Architectural layer of a table, from raw-ingested to business-ready"""

    ORIGINATION = "ODP (Origination)"
    FOUNDATIONAL = "FDP (Foundational)"
    CONSUMPTION = "CDP (Common/Consumption)"

    @property
    def prefix(self) -> str:
        """Lowercase first word of the display label ("odp", "fdp", "cdp")"""
        return self.value.split(" ")[0].lower()

    @property
    def short_name(self) -> str:
        """Upper-case token used in transcripts and tags ("ODP", "FDP", "CDP")"""
        return self.value.split(" ")[0]


class InputFormat(Enum):
    """Shape of a raw mapping blob"""

    CSV = "csv"
    TRANSCRIPT = "transcript"


# ============================================================================
# Table Graph Models
# ============================================================================


@dataclass
class FieldMapping:
    """One source-field to target-field correspondence"""

    source_field: str
    target_field: str
    transformation: Optional[str] = None


@dataclass
class SourceReference:
    """
    Upstream dependency of a table.

    Owned by exactly one Table. The referenced name may not resolve to a
    table in the same result when the input names an unknown upstream.
    """

    name: str
    mappings: List[FieldMapping] = field(default_factory=list)

    def has_target_field(self, target_field: str) -> bool:
        """Check if a mapping to this target field already exists"""
        return any(m.target_field == target_field for m in self.mappings)

    def add_mapping(self, mapping: FieldMapping) -> bool:
        """
        Append a field mapping unless its target field is already mapped.

        Returns:
            True if the mapping was added, False if it was a duplicate
        """
        if self.has_target_field(mapping.target_field):
            return False
        self.mappings.append(mapping)
        return True


@dataclass
class Table:
    """
    A table in the layered inventory.

    Columns keep insertion order (rendering depends on it) and never contain
    duplicates. Primary keys are not checked against the column list here,
    see MappingValidator for that report.
    """

    id: str  # "<layer-prefix>-<name>", e.g. "fdp-customer"
    target_name: str
    layer: Layer
    columns: List[str] = field(default_factory=list)
    primary_keys: List[str] = field(default_factory=list)
    sources: List[SourceReference] = field(default_factory=list)

    # ─── Deployment hints (used by renderers only) ───
    target_project: Optional[str] = None
    target_dataset: Optional[str] = None
    metric_columns: List[str] = field(default_factory=list)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Table):
            return False
        return self.id == other.id

    def get_source(self, name: str) -> Optional[SourceReference]:
        """Find a source reference by upstream table name"""
        for source in self.sources:
            if source.name == name:
                return source
        return None

    def get_mapping_for(self, target_field: str) -> Optional[FieldMapping]:
        """Find the first field mapping feeding a target column"""
        for source in self.sources:
            for mapping in source.mappings:
                if mapping.target_field == target_field:
                    return mapping
        return None

    def source_names(self) -> List[str]:
        """Names of upstream tables in the order they were referenced"""
        return [s.name for s in self.sources]


# ============================================================================
# Transient Parse Models
# ============================================================================


@dataclass
class MappingRow:
    """
    The atomic unit produced by parsing one line of input.

    Consumed once by the graph builder and then discarded.
    """

    source_table: str
    source_field: str
    target_table: str
    target_field: str
    data_type: str = "STRING"
    transformation: Optional[str] = None
    source_layer: Layer = Layer.ORIGINATION
    target_layer: Layer = Layer.ORIGINATION


@dataclass
class TableFragment:
    """An explicitly declared table header from diagram-style input"""

    name: str
    layer: Layer
    fields: List[str] = field(default_factory=list)

    def add_field(self, name: str) -> bool:
        """Append a field unless already present. Returns True if added."""
        if name in self.fields:
            return False
        self.fields.append(name)
        return True


# ============================================================================
# Result Models
# ============================================================================


@dataclass
class MappingSummary:
    """Counts of tables per layer and mapping rows processed"""

    origination_tables: int = 0
    foundational_tables: int = 0
    consumption_tables: int = 0
    total_fields: int = 0

    @property
    def total_tables(self) -> int:
        return self.origination_tables + self.foundational_tables + self.consumption_tables

    def to_dict(self) -> Dict[str, int]:
        return {
            "origination_tables": self.origination_tables,
            "foundational_tables": self.foundational_tables,
            "consumption_tables": self.consumption_tables,
            "total_fields": self.total_fields,
        }


@dataclass
class MappingResult:
    """Output of one parse call"""

    tables: List[Table]
    lineage: Dict[str, List[str]]
    summary: MappingSummary
    input_format: InputFormat = InputFormat.CSV

    def get_table(self, name: str) -> Optional[Table]:
        """Find a table by its target name"""
        for table in self.tables:
            if table.target_name == name:
                return table
        return None

    def tables_in_layer(self, layer: Layer) -> List[Table]:
        return [t for t in self.tables if t.layer == layer]

    def describe(self) -> str:
        """
        Human-readable summary for callers to display before import.

        Example:
            "3 tables recognized (ODP: 1, FDP: 1, CDP: 1) from 4 field mappings. "
            "Verify before import."
        """
        s = self.summary
        noun = "table" if s.total_tables == 1 else "tables"
        return (
            f"{s.total_tables} {noun} recognized "
            f"(ODP: {s.origination_tables}, FDP: {s.foundational_tables}, "
            f"CDP: {s.consumption_tables}) from {s.total_fields} field mappings. "
            "Verify before import."
        )


# ============================================================================
# Validation Models
# ============================================================================


class IssueSeverity(Enum):
    """Severity of a validation issue"""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(Enum):
    """Category of a validation issue"""

    UNRESOLVED_SOURCE = "unresolved_source"
    PRIMARY_KEY_NOT_IN_COLUMNS = "primary_key_not_in_columns"
    MISSING_AUDIT_COLUMN = "missing_audit_column"
    INVALID_TRANSFORMATION = "invalid_transformation"
    NO_FIELD_MAPPINGS = "no_field_mappings"


@dataclass
class ValidationIssue:
    """A problem found while validating a parsed mapping"""

    severity: IssueSeverity
    category: IssueCategory
    message: str
    table_name: Optional[str] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        location = f" [{self.table_name}]" if self.table_name else ""
        text = f"{self.severity.value.upper()}{location}: {self.message}"
        if self.suggestion:
            text += f" (suggestion: {self.suggestion})"
        return text


__all__ = [
    # Layers
    "Layer",
    "InputFormat",
    # Table graph
    "FieldMapping",
    "SourceReference",
    "Table",
    # Transient parse models
    "MappingRow",
    "TableFragment",
    # Results
    "MappingSummary",
    "MappingResult",
    # Validation
    "IssueSeverity",
    "IssueCategory",
    "ValidationIssue",
]
