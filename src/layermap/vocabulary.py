"""
Parser vocabulary registry.

Contains the static marker lists, reserved words and header tokens that the
classifier, format detector and extraction engine consult. Kept as data so a
different naming convention only needs a different ParserVocabulary.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from .models import Layer

# ============================================================================
# Layer Markers
# ============================================================================

# Header tokens accepted in transcripts, mapped to their canonical layer
LAYER_TOKENS: Dict[str, Layer] = {
    "ODP": Layer.ORIGINATION,
    "RAW": Layer.ORIGINATION,
    "FDP": Layer.FOUNDATIONAL,
    "FOUNDATION": Layer.FOUNDATIONAL,
    "CDP": Layer.CONSUMPTION,
    "CONSUMPTION": Layer.CONSUMPTION,
}

# Name markers per layer: (prefix, infix, keyword). Checked in this order,
# consumption first, so a name carrying both marker sets is consumption.
LAYER_NAME_MARKERS: Tuple[Tuple[Layer, str, str, str], ...] = (
    (Layer.CONSUMPTION, "cdp", "_cdp", "consumption"),
    (Layer.FOUNDATIONAL, "fdp", "_fdp", "foundation"),
)

# Literal markers that flag a blob as diagram transcript
TRANSCRIPT_MARKERS: Tuple[str, ...] = ("ODP:", "FDP:", "CDP:", "->")

# Loose tokens never treated as field names
RESERVED_WORDS: FrozenSet[str] = frozenset(["ODP", "FDP", "CDP", "ID", "NULL"])

# Seed columns for every table
DEFAULT_COLUMNS: Tuple[str, ...] = ("id", "created_at", "updated_at")
DEFAULT_PRIMARY_KEYS: Tuple[str, ...] = ("id",)

DEFAULT_DATA_TYPE = "STRING"

# Placeholders used when an arrow names no table and none is active
UNKNOWN_SOURCE = "Unknown_Source"
UNKNOWN_TARGET = "Unknown_Target"


@dataclass(frozen=True)
class ParserVocabulary:
    """
    Vocabulary injected into the classifier, tokenizer and extraction engine.

    Example:
        vocabulary = ParserVocabulary(reserved_words=frozenset(["ODP", "FDP", "CDP", "NULL"]))
        result = MappingAnalyzer(vocabulary=vocabulary).analyze(text)
    """

    layer_tokens: Dict[str, Layer] = field(default_factory=lambda: dict(LAYER_TOKENS))
    name_markers: Tuple[Tuple[Layer, str, str, str], ...] = LAYER_NAME_MARKERS
    transcript_markers: Tuple[str, ...] = TRANSCRIPT_MARKERS
    reserved_words: FrozenSet[str] = RESERVED_WORDS
    default_columns: Tuple[str, ...] = DEFAULT_COLUMNS
    default_primary_keys: Tuple[str, ...] = DEFAULT_PRIMARY_KEYS
    default_data_type: str = DEFAULT_DATA_TYPE
    unknown_source: str = UNKNOWN_SOURCE
    unknown_target: str = UNKNOWN_TARGET

    def token_alternation(self) -> str:
        """Regex alternation of header tokens, longest first"""
        return "|".join(sorted(self.layer_tokens, key=len, reverse=True))

    def is_reserved(self, word: str) -> bool:
        return word.upper() in self.reserved_words


DEFAULT_VOCABULARY = ParserVocabulary()


__all__ = [
    "LAYER_TOKENS",
    "LAYER_NAME_MARKERS",
    "TRANSCRIPT_MARKERS",
    "RESERVED_WORDS",
    "DEFAULT_COLUMNS",
    "DEFAULT_PRIMARY_KEYS",
    "DEFAULT_DATA_TYPE",
    "UNKNOWN_SOURCE",
    "UNKNOWN_TARGET",
    "ParserVocabulary",
    "DEFAULT_VOCABULARY",
]
