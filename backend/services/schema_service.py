"""Schema service - cached access to dump schema graphs."""

from typing import Optional
import logging

from backend.services.dump_client import DumpServiceClient
from backend.utils.schema_cache import CachedSchema, SchemaCache
from dumplens.diagram import generate_er_diagram

logger = logging.getLogger(__name__)


class SchemaService:
    """Loads schema graphs through the cache, fetching on miss or refresh."""

    def __init__(self, client: DumpServiceClient, cache: SchemaCache):
        self.client = client
        self.cache = cache

    async def get_schema(
        self,
        dump_id: str,
        database: Optional[str] = None,
        refresh: bool = False,
    ) -> CachedSchema:
        """Return the cached schema, refetching when missing or ``refresh`` is set.

        Raises:
            DumpNotFoundError: if the dump does not exist upstream
            DumpServiceError: on any other upstream failure
        """
        if not refresh:
            cached = self.cache.get(dump_id, database)
            if cached is not None:
                return cached

        logger.info(f"Fetching schema for dump {dump_id} (database={database}, refresh={refresh})")
        upstream = await self.client.fetch_schema(dump_id, database=database)
        return self.cache.put(
            dump_id,
            upstream.graph,
            whole_graph_text=upstream.whole_graph_text,
            database=database,
        )

    @staticmethod
    def whole_graph_text(schema: CachedSchema) -> str:
        """Upstream whole-graph diagram text if supplied, else generated."""
        if schema.whole_graph_text:
            return schema.whole_graph_text
        return generate_er_diagram(schema.graph)
