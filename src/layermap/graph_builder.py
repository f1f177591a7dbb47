"""
Table graph construction.

Lowers transient TableFragments and MappingRows into a deduplicated map of
Tables. All lookup-or-create and column insertion goes through TableRegistry,
so default seeding and the no-duplicate-columns rule live in one place.
"""

import logging
from typing import Dict, Iterable, List

from .models import FieldMapping, Layer, MappingRow, SourceReference, Table, TableFragment
from .vocabulary import DEFAULT_VOCABULARY, ParserVocabulary

logger = logging.getLogger(__name__)


def make_table_id(layer: Layer, name: str) -> str:
    """Deterministic synthetic id, e.g. make_table_id(Layer.FOUNDATIONAL, "cust") -> "fdp-cust" """
    return f"{layer.prefix}-{name}"


class TableRegistry:
    """
    Owned name -> Table map with a single creation choke point.

    Example:
        registry = TableRegistry()
        table = registry.get_or_create("fdp_customer", Layer.FOUNDATIONAL)
        registry.add_column(table, "customer_id")
    """

    def __init__(self, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY):
        self.vocabulary = vocabulary
        self._tables: Dict[str, Table] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def get(self, name: str) -> Table:
        return self._tables[name]

    def get_or_create(self, name: str, layer: Layer) -> Table:
        """
        Return the table registered under name, creating it if missing.

        The layer only applies on creation; an existing table keeps its layer.
        """
        table = self._tables.get(name)
        if table is None:
            table = Table(
                id=make_table_id(layer, name),
                target_name=name,
                layer=layer,
                columns=list(self.vocabulary.default_columns),
                primary_keys=list(self.vocabulary.default_primary_keys),
            )
            self._tables[name] = table
        return table

    def add_column(self, table: Table, column: str) -> bool:
        """Append a column unless already present. Returns True if added."""
        if column in table.columns:
            return False
        table.columns.append(column)
        return True

    def as_dict(self) -> Dict[str, Table]:
        return dict(self._tables)


class TableGraphBuilder:
    """
    Builds the table graph from explicit fragments and mapping rows.

    Fragments are lowered first, so a declared table keeps its layer and
    default columns even when later rows reference the same name. Rows only
    add columns, source references and field mappings.
    """

    def __init__(self, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY):
        self.vocabulary = vocabulary

    def build(
        self, rows: Iterable[MappingRow], fragments: Iterable[TableFragment] = ()
    ) -> Dict[str, Table]:
        registry = TableRegistry(self.vocabulary)

        for fragment in fragments:
            table = registry.get_or_create(fragment.name, fragment.layer)
            for name in fragment.fields:
                registry.add_column(table, name)

        row_count = 0
        for row in rows:
            self._apply_row(registry, row)
            row_count += 1

        tables = registry.as_dict()
        logger.debug("Built %d tables from %d mapping rows", len(tables), row_count)
        return tables

    def _apply_row(self, registry: TableRegistry, row: MappingRow):
        target = registry.get_or_create(row.target_table, row.target_layer)
        registry.add_column(target, row.target_field)

        source = registry.get_or_create(row.source_table, row.source_layer)
        registry.add_column(source, row.source_field)

        reference = target.get_source(row.source_table)
        if reference is None:
            reference = SourceReference(name=row.source_table)
            target.sources.append(reference)

        added = reference.add_mapping(
            FieldMapping(
                source_field=row.source_field,
                target_field=row.target_field,
                transformation=row.transformation,
            )
        )
        if not added:
            logger.debug(
                "Skipping duplicate mapping %s.%s -> %s.%s",
                row.source_table,
                row.source_field,
                row.target_table,
                row.target_field,
            )


def build_tables(
    rows: Iterable[MappingRow],
    fragments: Iterable[TableFragment] = (),
    vocabulary: ParserVocabulary = DEFAULT_VOCABULARY,
) -> List[Table]:
    """Convenience wrapper returning the built tables as a list"""
    return list(TableGraphBuilder(vocabulary).build(rows, fragments).values())


__all__ = ["make_table_id", "TableRegistry", "TableGraphBuilder", "build_tables"]
