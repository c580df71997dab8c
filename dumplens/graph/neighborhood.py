"""Bounded neighborhood traversal around a focal table.

Foreign key direction is not the traversal direction: a table joins the
neighborhood whether it is the source or the target of an edge. Frontier
expansion runs first; the closure pass runs afterwards so that edges between
two tables that entered through different paths are kept as well.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, Field

from dumplens.ir.models import ForeignKey, SchemaGraph, TableKey
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)


class Neighborhood(BaseModel):
    """Result of a bounded traversal.

    Both collections keep discovery order, which keeps generated diagram text
    deterministic.
    """
    focal: TableKey
    degrees: int
    tables: List[TableKey] = Field(default_factory=list)
    foreign_keys: List[str] = Field(default_factory=list)

    @property
    def table_set(self) -> Set[TableKey]:
        return set(self.tables)

    @property
    def foreign_key_set(self) -> Set[str]:
        return set(self.foreign_keys)


def find_neighborhood(focal: TableKey, graph: SchemaGraph, degrees: int) -> Neighborhood:
    """Collect tables within ``degrees`` hops of ``focal`` and the constraints among them.

    Args:
        focal: Key of the table the neighborhood is centered on
        graph: Schema graph to traverse
        degrees: Number of hops, 0 or more

    Returns:
        Neighborhood with included table keys and constraint names

    Raises:
        ValueError: If degrees is negative
    """
    if degrees < 0:
        raise ValueError(f"degrees must be >= 0, got {degrees}")

    known = set(graph.table_index())
    # dicts double as insertion-ordered sets
    included: Dict[TableKey, None] = {focal: None}
    included_fks: Dict[str, None] = {}
    frontier: List[TableKey] = [focal]

    for _ in range(degrees):
        next_frontier: List[TableKey] = []
        for key in frontier:
            for fk in graph.foreign_keys:
                source_key = fk.source_key
                target_key = fk.target_key
                # Dangling references neither join nor carry the traversal
                if source_key not in known or target_key not in known:
                    continue
                if source_key == key and target_key not in included:
                    included[target_key] = None
                    next_frontier.append(target_key)
                    included_fks[fk.constraint_name] = None
                if target_key == key and source_key not in included:
                    included[source_key] = None
                    next_frontier.append(source_key)
                    included_fks[fk.constraint_name] = None
        frontier = next_frontier
        if not frontier:
            break

    if degrees > 0:
        for fk in graph.foreign_keys:
            if fk.source_key not in known or fk.target_key not in known:
                continue
            if fk.source_key in included and fk.target_key in included:
                included_fks[fk.constraint_name] = None

    logger.debug(
        f"Neighborhood of {focal} at {degrees} degree(s): "
        f"{len(included)} table(s), {len(included_fks)} constraint(s)"
    )
    return Neighborhood(
        focal=focal,
        degrees=degrees,
        tables=list(included),
        foreign_keys=list(included_fks),
    )


class RelationType(str, Enum):
    """How a related table is connected to the table that reached it."""
    REFERENCES = "references"
    REFERENCED_BY = "referenced_by"


class RelatedTable(BaseModel):
    schema_name: str
    table_name: str
    relationship: RelationType
    path: List[str] = Field(default_factory=list)
    hop_count: int


def find_related_tables(graph: SchemaGraph, focal: TableKey, max_hops: int) -> List[RelatedTable]:
    """List tables reachable from ``focal`` within ``max_hops``, with the constraint path used.

    Each table is reported once, at the hop it was first reached.
    """
    known = set(graph.table_index())
    outbound: Dict[TableKey, List[ForeignKey]] = {}
    inbound: Dict[TableKey, List[ForeignKey]] = {}
    for fk in graph.foreign_keys:
        outbound.setdefault(fk.source_key, []).append(fk)
        inbound.setdefault(fk.target_key, []).append(fk)

    visited: Set[TableKey] = {focal}
    result: List[RelatedTable] = []
    queue: deque[Tuple[TableKey, int, List[str]]] = deque([(focal, 0, [])])

    while queue:
        current, depth, path = queue.popleft()
        if depth >= max_hops:
            continue

        steps = [
            (fk.target_key, fk, RelationType.REFERENCED_BY) for fk in outbound.get(current, [])
        ] + [
            (fk.source_key, fk, RelationType.REFERENCES) for fk in inbound.get(current, [])
        ]
        for next_key, fk, relationship in steps:
            if next_key in visited or next_key not in known:
                continue
            visited.add(next_key)
            next_path = path + [fk.constraint_name]
            result.append(RelatedTable(
                schema_name=next_key.schema_name,
                table_name=next_key.table_name,
                relationship=relationship,
                path=next_path,
                hop_count=depth + 1,
            ))
            queue.append((next_key, depth + 1, next_path))

    return result
