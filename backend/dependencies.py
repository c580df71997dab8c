"""FastAPI dependencies - process-wide singletons."""

from functools import lru_cache
from backend.config import settings
from backend.utils.schema_cache import SchemaCache
from backend.utils.websocket_manager import WebSocketManager
from backend.services.dump_client import DumpServiceClient
from backend.services.schema_service import SchemaService
from backend.services.diagram_service import DiagramService
from dumplens.export import ExportConfig, RasterExporter


# Process-wide singletons (single process, no DB)
@lru_cache(maxsize=1)
def get_schema_cache() -> SchemaCache:
    """Singleton SchemaCache - shared across all requests."""
    return SchemaCache(max_entries=settings.schema_cache_size)


@lru_cache(maxsize=1)
def get_dump_client() -> DumpServiceClient:
    """Singleton DumpServiceClient (one pooled HTTP client)."""
    return DumpServiceClient(
        base_url=settings.dump_service_url,
        timeout=settings.dump_service_timeout,
    )


@lru_cache(maxsize=1)
def get_websocket_manager() -> WebSocketManager:
    """Singleton WebSocketManager - viewport sessions."""
    return WebSocketManager()


@lru_cache(maxsize=1)
def get_schema_service() -> SchemaService:
    """Create SchemaService with dependencies (singleton)."""
    return SchemaService(
        client=get_dump_client(),
        cache=get_schema_cache()
    )


@lru_cache(maxsize=1)
def get_diagram_service() -> DiagramService:
    """Singleton DiagramService."""
    export_config = ExportConfig.from_config().model_copy(
        update={"background": settings.export_background}
    )
    return DiagramService(exporter=RasterExporter(export_config))
