"""
Lineage index derived from a table graph.
"""

from collections import deque
from typing import Dict, Iterable, List

from .models import Table


def build_lineage(tables: Iterable[Table]) -> Dict[str, List[str]]:
    """
    Map each table's target name to its direct upstream names.

    Upstream names keep the order their source references were created. The
    index is a snapshot and does not follow later changes to the tables.
    """
    return {table.target_name: table.source_names() for table in tables}


def upstream_closure(lineage: Dict[str, List[str]], name: str) -> List[str]:
    """
    All transitive upstream names of a table, nearest first.

    Cycles and repeated upstreams are visited once; the table itself is
    never part of the result.
    """
    seen = {name}
    ordered: List[str] = []
    queue = deque(lineage.get(name, []))
    while queue:
        upstream = queue.popleft()
        if upstream in seen:
            continue
        seen.add(upstream)
        ordered.append(upstream)
        queue.extend(lineage.get(upstream, []))
    return ordered


def downstream_of(lineage: Dict[str, List[str]], name: str) -> List[str]:
    """Tables that read directly from name"""
    return [target for target, sources in lineage.items() if name in sources]


__all__ = ["build_lineage", "upstream_closure", "downstream_of"]
