"""In-memory cache of schema graphs fetched from the dump service."""

from collections import OrderedDict
from datetime import datetime, UTC
from typing import Optional, Tuple
import logging

from pydantic import BaseModel, Field

from dumplens.ir.models import SchemaGraph
from dumplens.view import SchemaView

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, Optional[str]]


class CachedSchema(BaseModel):
    """Schema graph of one dump database, as fetched.

    ``view`` memoizes the relation index and diagram text derived from
    ``graph``; it lives and dies with the entry.
    """
    model_config = {"arbitrary_types_allowed": True}

    dump_id: str
    database: Optional[str] = None
    graph: SchemaGraph
    whole_graph_text: Optional[str] = None
    fetched_at: str
    view: SchemaView = Field(exclude=True)


class SchemaCache:
    """Keeps one entry per (dump_id, database), least recently used evicted first.

    Entries are replaced wholesale on refetch, never patched.
    """

    def __init__(self, max_entries: int = 32):
        self.max_entries = max_entries
        self.entries: "OrderedDict[CacheKey, CachedSchema]" = OrderedDict()

    def get(self, dump_id: str, database: Optional[str] = None) -> Optional[CachedSchema]:
        """Get cached schema, marking it most recently used."""
        key = (dump_id, database)
        entry = self.entries.get(key)
        if entry is not None:
            self.entries.move_to_end(key)
        return entry

    def put(
        self,
        dump_id: str,
        graph: SchemaGraph,
        whole_graph_text: Optional[str] = None,
        database: Optional[str] = None,
    ) -> CachedSchema:
        """Store (or replace) the schema of a dump database."""
        key = (dump_id, database)
        entry = CachedSchema(
            dump_id=dump_id,
            database=database,
            graph=graph,
            whole_graph_text=whole_graph_text,
            fetched_at=datetime.now(UTC).isoformat(),
            view=SchemaView(graph, whole_graph_text=whole_graph_text),
        )
        self.entries[key] = entry
        self.entries.move_to_end(key)

        while len(self.entries) > self.max_entries:
            evicted, _ = self.entries.popitem(last=False)
            logger.debug(f"Evicted schema cache entry {evicted}")

        logger.info(
            f"Cached schema for dump {dump_id} (database={database}): "
            f"{len(graph.tables)} tables, {len(graph.foreign_keys)} foreign keys"
        )
        return entry

    def invalidate(self, dump_id: str, database: Optional[str] = None) -> bool:
        """Drop one entry. Returns True if it existed."""
        return self.entries.pop((dump_id, database), None) is not None

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)
