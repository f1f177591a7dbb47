"""
Pure visualization functions for layered table lineage.

These functions translate a parsed mapping into Graphviz DOT format.
No business logic - just presentation layer.
"""

from typing import Optional

import graphviz

from .models import Layer, MappingResult

# Color scheme per architectural layer
LAYER_COLORS = {
    Layer.ORIGINATION: "#FF9800",  # Orange
    Layer.FOUNDATIONAL: "#2196F3",  # Blue
    Layer.CONSUMPTION: "#4CAF50",  # Green
}

# Fallback for upstream names that resolve to no table
UNRESOLVED_COLOR = "#BDBDBD"


def _sanitize_graphviz_id(node_id: str) -> str:
    """
    Sanitize a node ID for use in Graphviz.

    Graphviz interprets colons as node:port syntax, so colons are
    percent-escaped (and "%" itself first). Every other character is left
    alone and graphviz quotes the ID, so distinct table ids stay distinct.
    """
    return node_id.replace("%", "%25").replace(":", "%3A")


def visualize_table_lineage(
    result: MappingResult,
    show_fields: bool = False,
    max_fields: Optional[int] = 12,
) -> graphviz.Digraph:
    """
    Create Graphviz visualization of table-level lineage.

    Tables are grouped into one cluster per layer (ODP -> FDP -> CDP, left to
    right). Edges are labeled with the number of field mappings they carry.

    Args:
        result: The parsed mapping result
        show_fields: If True, list column names inside each table node
        max_fields: Maximum columns listed per node (None for all)

    Returns:
        graphviz.Digraph object ready to render
    """
    dot = graphviz.Digraph(comment="Layered Table Lineage")
    dot.attr(rankdir="LR")
    dot.attr("node", shape="box", style="rounded,filled", fontname="Arial", fontsize="12")
    dot.attr("edge", fontsize="10", color="#555555")

    known = set()
    for layer in Layer:
        tables = result.tables_in_layer(layer)
        if not tables:
            continue
        with dot.subgraph(name=f"cluster_{layer.prefix}") as cluster:
            cluster.attr(label=layer.value, style="dashed", color=LAYER_COLORS[layer])
            for table in tables:
                label = table.target_name
                if show_fields:
                    columns = table.columns if max_fields is None else table.columns[:max_fields]
                    label += "\n" + "\n".join(columns)
                    if max_fields is not None and len(table.columns) > max_fields:
                        label += f"\n... (+{len(table.columns) - max_fields} more)"
                cluster.node(
                    _sanitize_graphviz_id(table.id),
                    label=label,
                    fillcolor=LAYER_COLORS[table.layer],
                )
                known.add(table.target_name)

    ids = {t.target_name: _sanitize_graphviz_id(t.id) for t in result.tables}
    for table in result.tables:
        for source in table.sources:
            if source.name not in known:
                ids[source.name] = _sanitize_graphviz_id(f"unresolved-{source.name}")
                dot.node(ids[source.name], label=source.name, fillcolor=UNRESOLVED_COLOR)
                known.add(source.name)
            count = len(source.mappings)
            dot.edge(
                ids[source.name],
                ids[table.target_name],
                label=f"{count} field{'s' if count != 1 else ''}",
            )

    return dot


__all__ = ["visualize_table_lineage"]
