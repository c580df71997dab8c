"""HTTP client for the upstream dump service."""

from typing import Any, Dict, Optional
import logging

import httpx

from dumplens.ir.models import SchemaGraph

logger = logging.getLogger(__name__)

# Connection limits for pooling
LIMITS = httpx.Limits(max_connections=50, max_keepalive_connections=10)


class DumpServiceError(Exception):
    """The dump service could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DumpNotFoundError(DumpServiceError):
    """The dump (or table) does not exist upstream."""


class UpstreamSchema:
    """Schema payload returned by the dump service."""

    def __init__(self, graph: SchemaGraph, whole_graph_text: Optional[str] = None):
        self.graph = graph
        self.whole_graph_text = whole_graph_text


class DumpServiceClient:
    """Fetches schema graphs and table rows from the dump service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout, connect=5.0)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create the shared async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                limits=LIMITS,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the shared HTTP client (call on app shutdown)."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self.get_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise DumpNotFoundError(f"Not found upstream: {path}", status_code=404) from e
            raise DumpServiceError(f"Dump service returned {status} for {path}", status_code=status) from e
        except httpx.HTTPError as e:
            raise DumpServiceError(f"Dump service request failed for {path}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise DumpServiceError(f"Dump service returned a non-JSON body for {path}") from e

    async def fetch_schema(self, dump_id: str, database: Optional[str] = None) -> UpstreamSchema:
        """GET /api/dumps/{dump_id}/schema"""
        params = {"database": database} if database else None
        payload = await self._get_json(f"/api/dumps/{dump_id}/schema", params=params)
        if not isinstance(payload, dict):
            raise DumpServiceError(
                f"Dump service returned a {type(payload).__name__} schema payload, expected an object"
            )

        try:
            graph = SchemaGraph.model_validate(payload.get("schema_graph") or {})
        except ValueError as e:
            raise DumpServiceError(f"Dump service returned an invalid schema graph: {e}") from e

        logger.info(f"Fetched schema for dump {dump_id}: {len(graph.tables)} tables")
        return UpstreamSchema(graph=graph, whole_graph_text=payload.get("mermaid_er"))

    async def fetch_table_rows(
        self,
        dump_id: str,
        schema: str,
        table: str,
        limit: int = 100,
        offset: int = 0,
        database: Optional[str] = None,
    ) -> Dict[str, Any]:
        """GET /api/dumps/{dump_id}/tables/{table}"""
        params: Dict[str, Any] = {"schema": schema, "limit": limit, "offset": offset}
        if database:
            params["database"] = database
        data = await self._get_json(f"/api/dumps/{dump_id}/tables/{table}", params=params)
        if not isinstance(data, dict):
            raise DumpServiceError(f"Dump service returned a {type(data).__name__} row payload, expected an object")
        return data
