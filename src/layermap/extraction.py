"""
Mapping extraction engine.

Turns raw mapping text into transient MappingRows and TableFragments:

- TranscriptParser: state-driven parser for diagram transcripts (OCR output
  or hand-typed "ODP: TABLE" / "a.x -> b.y" text)
- parse_csv: flat positional parser for
  source_table,source_field,target_table,target_field[,data_type[,transformation]]

The transcript parser threads a ParserState through process_line(). Each line
is offered to an ordered list of line matchers; the first one returning a
LineMatch wins and its emission is applied to produce the next state.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .classifier import classify_layer, resolve_layer_token
from .models import MappingRow, TableFragment
from .tokenizer import split_field_tokens, split_lines
from .vocabulary import DEFAULT_VOCABULARY, ParserVocabulary

logger = logging.getLogger(__name__)

_NAME = r"[A-Za-z0-9_]+"


# ============================================================================
# State and Emissions
# ============================================================================


class LineRule(Enum):
    """Transcript line rules, in priority order"""

    DOT_HEADER = "dot_header"  # "ODP.CUST FDP.CUST_CLEAN"
    SINGLE_HEADER = "single_header"  # "ODP: CUSTOMER"
    ARROW = "arrow"  # "a.x -> b.y" or "x -> y"
    FIELD_LIST = "field_list"  # "CUST_ID NAME"


@dataclass(frozen=True)
class ParserState:
    """
    Immutable transcript parser state.

    active_tables receive loose field tokens. mapping_context supplies the
    tables for bare-field arrows: the header set for a dot-notation header,
    or the two most recent single headers when they were declared back to
    back.
    """

    active_tables: Tuple[TableFragment, ...] = ()
    mapping_context: Tuple[TableFragment, ...] = ()
    last_header_single: bool = False
    fragments: Tuple[TableFragment, ...] = ()
    rows: Tuple[MappingRow, ...] = ()

    def find_fragment(self, name: str, layer) -> Optional[TableFragment]:
        for fragment in self.fragments:
            if fragment.name == name and fragment.layer == layer:
                return fragment
        return None


@dataclass
class LineMatch:
    """
    What a matched line contributes to the next state.

    None for active_tables / mapping_context means "unchanged".
    """

    rule: LineRule
    active_tables: Optional[Tuple[TableFragment, ...]] = None
    mapping_context: Optional[Tuple[TableFragment, ...]] = None
    header_single: Optional[bool] = None
    new_fragments: Tuple[TableFragment, ...] = ()
    rows: Tuple[MappingRow, ...] = ()
    fields: Tuple[Tuple[TableFragment, str], ...] = ()


LineMatcher = Callable[[ParserState, str], Optional[LineMatch]]


@dataclass
class ExtractionResult:
    """Rows and fragments extracted from one blob"""

    rows: List[MappingRow] = field(default_factory=list)
    fragments: List[TableFragment] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.rows and not self.fragments


# ============================================================================
# Transcript Parser
# ============================================================================


class TranscriptParser:
    """
    State-driven parser for diagram transcript text.

    Example:
        parser = TranscriptParser()
        result = parser.parse("ODP: SRC\\nFDP: TGT\\nid -> id")
        result.rows[0].source_table  # "SRC"
    """

    def __init__(self, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY):
        self.vocabulary = vocabulary
        tokens = vocabulary.token_alternation()
        self._dot_header = re.compile(rf"\b({tokens})\.({_NAME})\b", re.IGNORECASE)
        self._single_header = re.compile(rf"^({tokens})[:\s_-]+({_NAME})", re.IGNORECASE)
        self._arrow = re.compile(
            rf"({_NAME})\.?([A-Za-z0-9_]*)\s*[-=]>\s*({_NAME})\.?([A-Za-z0-9_]*)"
        )
        self.matchers: Tuple[LineMatcher, ...] = (
            self.match_dot_header,
            self.match_single_header,
            self.match_arrow,
            self.match_field_list,
        )

    def parse(self, content: str) -> ExtractionResult:
        """Run every line of a transcript through the state machine"""
        state = ParserState()
        for line in split_lines(content):
            state, _ = self.process_line(state, line)
        return ExtractionResult(rows=list(state.rows), fragments=list(state.fragments))

    def process_line(self, state: ParserState, line: str) -> Tuple[ParserState, Optional[LineMatch]]:
        """
        Apply the first matching rule to one line.

        Returns:
            (next_state, match); match is None when the line was ignored
        """
        for matcher in self.matchers:
            match = matcher(state, line)
            if match is not None:
                return self._apply(state, match), match
        logger.debug("Ignoring unrecognized transcript line: %r", line)
        return state, None

    # ─── Matchers ───

    def match_dot_header(self, state: ParserState, line: str) -> Optional[LineMatch]:
        """One or more LAYER.NAME references; the set replaces the active tables"""
        matches = list(self._dot_header.finditer(line))
        if not matches:
            return None
        tables, created = self._lookup_or_create(
            state, [(m.group(1), m.group(2)) for m in matches]
        )
        return LineMatch(
            rule=LineRule.DOT_HEADER,
            active_tables=tables,
            mapping_context=tables,
            header_single=False,
            new_fragments=created,
        )

    def match_single_header(self, state: ParserState, line: str) -> Optional[LineMatch]:
        """A line starting with LAYER followed by a separator and a table name"""
        match = self._single_header.match(line)
        if not match:
            return None
        tables, created = self._lookup_or_create(state, [(match.group(1), match.group(2))])
        table = tables[0]

        previous = None
        if state.last_header_single and state.mapping_context:
            previous = state.mapping_context[-1]
        context = (previous, table) if previous is not None and previous is not table else (table,)

        return LineMatch(
            rule=LineRule.SINGLE_HEADER,
            active_tables=(table,),
            mapping_context=context,
            header_single=True,
            new_fragments=created,
        )

    def match_arrow(self, state: ParserState, line: str) -> Optional[LineMatch]:
        """table.field -> table.field, or bare field -> field under declared headers"""
        match = self._arrow.search(line)
        if not match:
            return None
        p1, p2, p3, p4 = match.groups()
        context = state.mapping_context

        if p2:
            source_table, source_field = p1, p2
        else:
            source_table = context[0].name if context else self.vocabulary.unknown_source
            source_field = p1
        if p4:
            target_table, target_field = p3, p4
        else:
            target_table = context[-1].name if context else self.vocabulary.unknown_target
            target_field = p3

        row = MappingRow(
            source_table=source_table,
            source_field=source_field,
            target_table=target_table,
            target_field=target_field,
            data_type=self.vocabulary.default_data_type,
            source_layer=classify_layer(source_table, self.vocabulary),
            target_layer=classify_layer(target_table, self.vocabulary),
        )
        return LineMatch(rule=LineRule.ARROW, rows=(row,))

    def match_field_list(self, state: ParserState, line: str) -> Optional[LineMatch]:
        """
        Attribute loose tokens to the active tables.

        With N >= 2 active tables and at least N tokens, token i goes to
        table i (multi-column diagram layout). Otherwise every token goes to
        the last active table. Column order in the transcript is trusted.
        """
        active = state.active_tables
        if not active:
            return None
        tokens = split_field_tokens(line, self.vocabulary)
        if not tokens:
            return None

        if len(active) > 1 and len(tokens) >= len(active):
            pairs = list(zip(active, tokens))
        else:
            pairs = [(active[-1], token) for token in tokens]

        fields = tuple((fragment, token) for fragment, token in pairs if token not in fragment.fields)
        return LineMatch(rule=LineRule.FIELD_LIST, fields=fields)

    # ─── Helpers ───

    def _lookup_or_create(
        self, state: ParserState, headers: List[Tuple[str, str]]
    ) -> Tuple[Tuple[TableFragment, ...], Tuple[TableFragment, ...]]:
        """Resolve (token, name) pairs to fragments keyed by (name, layer)"""
        tables: List[TableFragment] = []
        created: List[TableFragment] = []
        for token, name in headers:
            layer = resolve_layer_token(token, self.vocabulary)
            fragment = state.find_fragment(name, layer)
            if fragment is None:
                fragment = next(
                    (f for f in created if f.name == name and f.layer == layer), None
                )
            if fragment is None:
                fragment = TableFragment(name=name, layer=layer)
                created.append(fragment)
            tables.append(fragment)
        return tuple(tables), tuple(created)

    def _apply(self, state: ParserState, match: LineMatch) -> ParserState:
        # Fragments reachable from the input state are never mutated; touched
        # ones are copied and swapped into every tuple of the next state.
        copies: Dict[int, TableFragment] = {}
        for fragment, name in match.fields:
            copy = copies.get(id(fragment))
            if copy is None:
                copy = replace(fragment, fields=list(fragment.fields))
                copies[id(fragment)] = copy
            copy.add_field(name)

        def swap(fragments: Tuple[TableFragment, ...]) -> Tuple[TableFragment, ...]:
            return tuple(copies.get(id(f), f) for f in fragments)

        active = state.active_tables if match.active_tables is None else match.active_tables
        context = state.mapping_context if match.mapping_context is None else match.mapping_context
        return replace(
            state,
            active_tables=swap(active),
            mapping_context=swap(context),
            last_header_single=(
                state.last_header_single if match.header_single is None else match.header_single
            ),
            fragments=swap(state.fragments + match.new_fragments),
            rows=state.rows + match.rows,
        )


def parse_transcript(
    content: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY
) -> ExtractionResult:
    """Parse diagram transcript text. See TranscriptParser."""
    return TranscriptParser(vocabulary).parse(content)


# ============================================================================
# CSV Parser
# ============================================================================


def parse_csv(content: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY) -> ExtractionResult:
    """
    Parse comma-separated mapping rows.

    Blank lines, "#" comments and "source_table..." header lines are skipped,
    as are lines with fewer than four values or an empty table or field name.
    """
    rows: List[MappingRow] = []
    for line in content.strip().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.lower().startswith("source_table"):
            continue

        parts = [p.strip() for p in line.split(",")]
        if len(parts) < 4:
            logger.debug("Skipping CSV line with %d values: %r", len(parts), line)
            continue
        if not all(parts[:4]):
            logger.debug("Skipping CSV line with an empty table or field name: %r", line)
            continue

        data_type = parts[4] if len(parts) > 4 and parts[4] else vocabulary.default_data_type
        transformation = parts[5] if len(parts) > 5 and parts[5] else None

        rows.append(
            MappingRow(
                source_table=parts[0],
                source_field=parts[1],
                target_table=parts[2],
                target_field=parts[3],
                data_type=data_type,
                transformation=transformation,
                source_layer=classify_layer(parts[0], vocabulary),
                target_layer=classify_layer(parts[2], vocabulary),
            )
        )
    return ExtractionResult(rows=rows)


__all__ = [
    "LineRule",
    "ParserState",
    "LineMatch",
    "ExtractionResult",
    "TranscriptParser",
    "parse_transcript",
    "parse_csv",
]
