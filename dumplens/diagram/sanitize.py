"""Identifier sanitization for ER diagram text."""

import re

MAX_TYPE_LENGTH = 25
TYPE_PLACEHOLDER = "unknown"
NAME_PLACEHOLDER = "col"

_WHITESPACE_RUN = re.compile(r"\s+")
_NOT_WORD = re.compile(r"[^A-Za-z0-9_]")


def entity_id(schema_name: str, table_name: str) -> str:
    """Entity identifier for a table; hyphens are not valid in diagram identifiers."""
    return f"{schema_name}_{table_name}".replace("-", "_")


def sanitize_type(data_type: str) -> str:
    """``character varying(255)`` -> ``character_varying255``."""
    if not data_type or not data_type.strip():
        return TYPE_PLACEHOLDER
    cleaned = _WHITESPACE_RUN.sub("_", data_type)
    cleaned = _NOT_WORD.sub("", cleaned)
    return cleaned[:MAX_TYPE_LENGTH] or TYPE_PLACEHOLDER


def sanitize_column_name(name: str) -> str:
    """``user-id!`` -> ``user_id_``."""
    return _NOT_WORD.sub("_", name) or NAME_PLACEHOLDER
