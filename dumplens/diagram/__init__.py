"""ER diagram text: generation, sanitization and parsing."""

from .sanitize import entity_id, sanitize_type, sanitize_column_name
from .generator import (
    DIAGRAM_HEADER,
    MAX_COLUMNS_PER_ENTITY,
    RelationshipLabel,
    generate_er_diagram,
    generate_filtered_er_diagram,
    generate_neighborhood_er_diagram,
)
from .models import Cardinality, ERAttribute, EREntity, ERRelationship, ERDocument
from .errors import DiagramSyntaxError, SyntaxErrorDetail
from .parser import parse_er_diagram

__all__ = [
    "entity_id",
    "sanitize_type",
    "sanitize_column_name",
    "DIAGRAM_HEADER",
    "MAX_COLUMNS_PER_ENTITY",
    "RelationshipLabel",
    "generate_er_diagram",
    "generate_filtered_er_diagram",
    "generate_neighborhood_er_diagram",
    "Cardinality",
    "ERAttribute",
    "EREntity",
    "ERRelationship",
    "ERDocument",
    "DiagramSyntaxError",
    "SyntaxErrorDetail",
    "parse_er_diagram",
]
