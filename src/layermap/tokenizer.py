"""
Format detection and line splitting for raw mapping text.
"""

import re
from typing import List

from .models import InputFormat
from .vocabulary import DEFAULT_VOCABULARY, ParserVocabulary

# Separators for loose field tokens on a transcript line
_FIELD_SPLIT_PATTERN = re.compile(r"[\s|]+")
_FIELD_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def detect_format(content: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY) -> InputFormat:
    """
    Decide whether a blob is CSV-shaped or diagram-transcript-shaped.

    Any transcript marker ("ODP:", "FDP:", "CDP:" or "->") anywhere in the
    content makes the whole blob a transcript. Mixed input is not supported.
    """
    if any(marker in content for marker in vocabulary.transcript_markers):
        return InputFormat.TRANSCRIPT
    return InputFormat.CSV


def split_lines(content: str) -> List[str]:
    """Split content into trimmed semantic lines, dropping lines of length <= 1"""
    lines = [line.strip() for line in content.splitlines()]
    return [line for line in lines if len(line) > 1]


def split_field_tokens(
    line: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY
) -> List[str]:
    """
    Split a loose field line into candidate field names.

    Drops tokens of length <= 1, tokens with characters outside
    [A-Za-z0-9_] and reserved words (case-insensitive).
    """
    tokens = []
    for word in _FIELD_SPLIT_PATTERN.split(line):
        if len(word) <= 1:
            continue
        if not _FIELD_TOKEN_PATTERN.match(word):
            continue
        if vocabulary.is_reserved(word):
            continue
        tokens.append(word)
    return tokens


__all__ = ["detect_format", "split_lines", "split_field_tokens"]
