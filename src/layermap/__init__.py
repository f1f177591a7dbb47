"""
layermap - Layered table mapping ingestion

Parses CSV mapping sheets and diagram transcripts into a graph of tables,
columns and field-level lineage across the origination (ODP), foundational
(FDP) and consumption (CDP) layers, and renders dbt/Airflow artifacts from it.
"""

from importlib.metadata import version

__version__ = version("layermap")

# Parse entry points
from .analyzer import LayermapError, MappingAnalyzer, UnrecognizedInputError, analyze

# Core components
from .classifier import classify_layer, resolve_layer_token
from .config import RenderConfig

# Export functionality
from .export import CSVExporter, JSONExporter
from .extraction import (
    ExtractionResult,
    LineMatch,
    LineRule,
    ParserState,
    TranscriptParser,
    parse_csv,
    parse_transcript,
)
from .graph_builder import TableGraphBuilder, TableRegistry, build_tables, make_table_id
from .lineage import build_lineage, downstream_of, upstream_closure
from .merge import MergeOutcome, merge_tables

# Data model
from .models import (
    FieldMapping,
    InputFormat,
    IssueCategory,
    IssueSeverity,
    Layer,
    MappingResult,
    MappingRow,
    MappingSummary,
    SourceReference,
    Table,
    TableFragment,
    ValidationIssue,
)

# Rendering
from .rendering import TemplateService, TestType
from .tokenizer import detect_format, split_field_tokens, split_lines
from .validator import MappingValidator
from .vocabulary import DEFAULT_VOCABULARY, ParserVocabulary

# Import visualization functions
from .visualizations import visualize_table_lineage

__all__ = [
    # Version
    "__version__",
    # Main entry points
    "analyze",
    "MappingAnalyzer",
    "LayermapError",
    "UnrecognizedInputError",
    # Core components
    "classify_layer",
    "resolve_layer_token",
    "detect_format",
    "split_lines",
    "split_field_tokens",
    "TranscriptParser",
    "ParserState",
    "LineMatch",
    "LineRule",
    "ExtractionResult",
    "parse_transcript",
    "parse_csv",
    "TableRegistry",
    "TableGraphBuilder",
    "build_tables",
    "make_table_id",
    "build_lineage",
    "upstream_closure",
    "downstream_of",
    # Configuration
    "ParserVocabulary",
    "DEFAULT_VOCABULARY",
    "RenderConfig",
    # Data model
    "Layer",
    "InputFormat",
    "FieldMapping",
    "SourceReference",
    "Table",
    "MappingRow",
    "TableFragment",
    "MappingSummary",
    "MappingResult",
    # Validation
    "MappingValidator",
    "ValidationIssue",
    "IssueSeverity",
    "IssueCategory",
    # Merge
    "merge_tables",
    "MergeOutcome",
    # Export and rendering
    "JSONExporter",
    "CSVExporter",
    "TemplateService",
    "TestType",
    # Visualization functions
    "visualize_table_lineage",
]
