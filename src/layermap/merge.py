"""
Merge policy for folding newly parsed tables into an existing inventory.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from .models import Table

logger = logging.getLogger(__name__)


@dataclass
class MergeOutcome:
    """Result of merge_tables()"""

    tables: List[Table] = field(default_factory=list)  # existing + added
    added: List[Table] = field(default_factory=list)
    skipped: List[Table] = field(default_factory=list)


def merge_tables(existing: Iterable[Table], incoming: Iterable[Table]) -> MergeOutcome:
    """
    Append incoming tables that do not collide with the inventory.

    A table collides when its id matches an existing id, or its target name
    matches an existing name case-insensitively (also among tables added by
    this same call). Colliding tables are skipped, never merged field by
    field. Inputs are not mutated.
    """
    current = list(existing)
    ids = {t.id for t in current}
    names = {t.target_name.upper() for t in current}

    outcome = MergeOutcome(tables=list(current))
    for table in incoming:
        if table.id in ids or table.target_name.upper() in names:
            logger.debug("Skipping %s: already in inventory", table.target_name)
            outcome.skipped.append(table)
            continue
        ids.add(table.id)
        names.add(table.target_name.upper())
        outcome.added.append(table)
        outcome.tables.append(table)

    logger.info("Merged %d new tables, skipped %d", len(outcome.added), len(outcome.skipped))
    return outcome


__all__ = ["MergeOutcome", "merge_tables"]
