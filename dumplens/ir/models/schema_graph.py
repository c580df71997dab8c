"""Pydantic models for the relational schema graph.

The graph is supplied by the dump service and treated as read-only for the
lifetime of a view. Tables are addressed by ``TableKey`` values and foreign
keys reference tables by key rather than by object, so self-references and
cycles are ordinary data.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel, Field


class TableKey(NamedTuple):
    """Composite identity of a table within a schema graph."""
    schema_name: str
    table_name: str

    def __str__(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


class FkAction(str, Enum):
    NO_ACTION = "NO_ACTION"
    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET_NULL"
    SET_DEFAULT = "SET_DEFAULT"

    def __str__(self) -> str:
        return self.value.replace("_", " ")

    @classmethod
    def _missing_(cls, value):
        # Accept the SQL spelling ("SET NULL") as well
        if isinstance(value, str):
            normalized = value.strip().upper().replace(" ", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class Column(BaseModel):
    name: str
    data_type: str
    is_nullable: bool = True
    is_primary_key: bool = False
    default_value: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}


class Table(BaseModel):
    schema_name: str
    table_name: str
    columns: List[Column] = Field(default_factory=list)
    estimated_row_count: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True, "extra": "ignore"}

    @property
    def key(self) -> TableKey:
        return TableKey(self.schema_name, self.table_name)


class ForeignKey(BaseModel):
    constraint_name: str
    source_schema: str
    source_table: str
    source_columns: List[str] = Field(default_factory=list)
    target_schema: str
    target_table: str
    target_columns: List[str] = Field(default_factory=list)
    on_delete: FkAction = FkAction.NO_ACTION
    on_update: FkAction = FkAction.NO_ACTION

    model_config = {"frozen": True, "extra": "ignore"}

    @property
    def source_key(self) -> TableKey:
        return TableKey(self.source_schema, self.source_table)

    @property
    def target_key(self) -> TableKey:
        return TableKey(self.target_schema, self.target_table)


class SchemaStats(BaseModel):
    tables: int = 0
    columns: int = 0
    foreign_keys: int = 0
    tables_per_schema: Dict[str, int] = Field(default_factory=dict)


class SchemaGraph(BaseModel):
    tables: List[Table] = Field(default_factory=list)
    foreign_keys: List[ForeignKey] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "ignore"}

    def table_index(self) -> Dict[TableKey, Table]:
        """Map every table key to its table (first occurrence wins)."""
        index: Dict[TableKey, Table] = {}
        for table in self.tables:
            index.setdefault(table.key, table)
        return index

    def table(self, key: TableKey) -> Optional[Table]:
        for table in self.tables:
            if table.key == key:
                return table
        return None

    def schema_names(self) -> List[str]:
        return sorted({t.schema_name for t in self.tables})

    def stats(self) -> SchemaStats:
        per_schema: Dict[str, int] = {}
        for table in self.tables:
            per_schema[table.schema_name] = per_schema.get(table.schema_name, 0) + 1
        return SchemaStats(
            tables=len(self.tables),
            columns=sum(len(t.columns) for t in self.tables),
            foreign_keys=len(self.foreign_keys),
            tables_per_schema=dict(sorted(per_schema.items())),
        )


def filter_by_schemas(graph: SchemaGraph, schemas: Iterable[str]) -> SchemaGraph:
    """Keep tables of the selected schemas and the foreign keys joining them."""
    selected = set(schemas)
    tables = [t for t in graph.tables if t.schema_name in selected]
    kept = {t.key for t in tables}
    foreign_keys = [
        fk for fk in graph.foreign_keys
        if fk.source_key in kept and fk.target_key in kept
    ]
    return SchemaGraph(tables=tables, foreign_keys=foreign_keys)


def default_schema(schema_names: List[str]) -> Optional[str]:
    """Schema selected when a graph is first shown: ``public`` if present."""
    if not schema_names:
        return None
    if "public" in schema_names:
        return "public"
    return sorted(schema_names)[0]
