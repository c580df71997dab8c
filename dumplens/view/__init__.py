"""Memoized derived state for the schema explorer."""

from .memo import memoize_last
from .schema_view import MAX_DEGREES, MIN_DEGREES, SchemaSummary, SchemaView

__all__ = [
    "memoize_last",
    "MAX_DEGREES",
    "MIN_DEGREES",
    "SchemaSummary",
    "SchemaView",
]
