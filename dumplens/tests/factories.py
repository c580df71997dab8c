"""Builders for schema graph test data."""

from typing import List, Optional

from dumplens.ir.models import Column, ForeignKey, Table


def make_table(schema: str, name: str, columns: Optional[List[Column]] = None, rows: Optional[int] = None) -> Table:
    return Table(
        schema_name=schema,
        table_name=name,
        columns=columns if columns is not None else [Column(name="id", data_type="integer", is_nullable=False, is_primary_key=True)],
        estimated_row_count=rows,
    )


def make_fk(name: str, source: str, target: str, source_columns: Optional[List[str]] = None) -> ForeignKey:
    """``source``/``target`` are ``schema.table`` strings."""
    source_schema, source_table = source.split(".")
    target_schema, target_table = target.split(".")
    return ForeignKey(
        constraint_name=name,
        source_schema=source_schema,
        source_table=source_table,
        source_columns=source_columns if source_columns is not None else ["id"],
        target_schema=target_schema,
        target_table=target_table,
        target_columns=["id"],
    )
