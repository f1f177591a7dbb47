"""
Mapping analyzer - main parse entry point.

Detects the input format, runs the matching extraction, builds the table
graph and derives lineage and summary counts.
"""

import logging
from typing import Optional

from .extraction import ExtractionResult, parse_csv, parse_transcript
from .graph_builder import TableGraphBuilder
from .lineage import build_lineage
from .models import InputFormat, Layer, MappingResult, MappingSummary
from .tokenizer import detect_format
from .vocabulary import DEFAULT_VOCABULARY, ParserVocabulary

logger = logging.getLogger(__name__)


class LayermapError(Exception):
    """Base class for layermap errors"""


class UnrecognizedInputError(LayermapError, ValueError):
    """Raised when a parse extracted neither tables nor mapping rows"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "No valid mapping data found. Please check the input format."
        )


class MappingAnalyzer:
    """
    Parses CSV or diagram-transcript mapping text into a MappingResult.

    Stateless between calls: each analyze() builds a fresh graph. Results of
    separate calls are not reconciled; use merge_tables() for that.

    Example:
        analyzer = MappingAnalyzer()
        result = analyzer.analyze("raw_customers,customer_id,fdp_customer,id,STRING")
        result.lineage  # {"fdp_customer": ["raw_customers"], "raw_customers": []}
    """

    def __init__(self, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY):
        self.vocabulary = vocabulary

    def extract(self, content: str) -> ExtractionResult:
        """Run the extraction for the detected format without building tables"""
        input_format = detect_format(content, self.vocabulary)
        if input_format == InputFormat.TRANSCRIPT:
            return parse_transcript(content, self.vocabulary)
        return parse_csv(content, self.vocabulary)

    def analyze(self, content: str) -> MappingResult:
        """
        Parse a mapping blob.

        Args:
            content: Raw UTF-8 text (CSV rows or transcript)

        Returns:
            MappingResult with tables, lineage and summary

        Raises:
            UnrecognizedInputError: If nothing at all was recognized
        """
        content = content or ""
        input_format = detect_format(content, self.vocabulary)
        extraction = self.extract(content)

        if extraction.is_empty():
            logger.info("No mapping data recognized in %d characters of input", len(content))
            raise UnrecognizedInputError()

        tables = list(
            TableGraphBuilder(self.vocabulary).build(extraction.rows, extraction.fragments).values()
        )
        summary = MappingSummary(
            origination_tables=sum(1 for t in tables if t.layer == Layer.ORIGINATION),
            foundational_tables=sum(1 for t in tables if t.layer == Layer.FOUNDATIONAL),
            consumption_tables=sum(1 for t in tables if t.layer == Layer.CONSUMPTION),
            total_fields=len(extraction.rows),
        )
        logger.info(
            "Parsed %s input: %d tables, %d mapping rows",
            input_format.value,
            len(tables),
            len(extraction.rows),
        )

        return MappingResult(
            tables=tables,
            lineage=build_lineage(tables),
            summary=summary,
            input_format=input_format,
        )


def analyze(content: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY) -> MappingResult:
    """Parse a mapping blob with a default MappingAnalyzer"""
    return MappingAnalyzer(vocabulary).analyze(content)


__all__ = ["LayermapError", "UnrecognizedInputError", "MappingAnalyzer", "analyze"]
