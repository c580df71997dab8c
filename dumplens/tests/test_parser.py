"""Tests for the ER diagram text parser."""

import pytest

from dumplens.diagram import (
    Cardinality,
    DiagramSyntaxError,
    generate_er_diagram,
    parse_er_diagram,
)


def test_parse_entities_and_relationships():
    text = (
        "erDiagram\n"
        "    public_users {\n"
        '        integer id PK "NOT NULL"\n'
        "        text email UK\n"
        "        integer team_id FK,UK\n"
        "    }\n"
        '    public_users ||--o{ public_orders : "fk_orders_user"\n'
        "    public_teams |o..|{ public_users : membership\n"
    )
    doc = parse_er_diagram(text)

    assert [e.id for e in doc.entities] == ["public_users"]
    attrs = doc.entities[0].attributes
    assert attrs[0].type == "integer" and attrs[0].name == "id"
    assert attrs[0].is_primary_key
    assert attrs[0].comment == "NOT NULL"
    assert attrs[1].keys == ["UK"]
    assert attrs[2].keys == ["FK", "UK"]

    first, second = doc.relationships
    assert first.left == "public_users" and first.right == "public_orders"
    assert first.left_cardinality == Cardinality.EXACTLY_ONE
    assert first.right_cardinality == Cardinality.ZERO_OR_MORE
    assert first.identifying
    assert first.label == "fk_orders_user"

    assert second.left_cardinality == Cardinality.ZERO_OR_ONE
    assert second.right_cardinality == Cardinality.ONE_OR_MORE
    assert not second.identifying
    assert second.label == "membership"

    assert doc.entity_ids() == ["public_users", "public_orders", "public_teams"]


def test_parse_generated_text(shop_graph):
    doc = parse_er_diagram(generate_er_diagram(shop_graph))

    assert len(doc.entities) == len(shop_graph.tables)
    assert {r.label for r in doc.relationships} == {
        fk.constraint_name for fk in shop_graph.foreign_keys if fk.constraint_name != "orders_ghost_fkey"
    }


def test_comments_and_empty_entities():
    doc = parse_er_diagram("erDiagram\n%% generated\n    a {\n    }\n    a ||--o{ b : \"\"\n")
    assert doc.entities[0].attributes == []
    assert doc.relationships[0].label == ""


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   \n",
        "graph TD\n    a --> b\n",
        "erDiagram\n    a {\n        integer\n    }\n",
        "erDiagram\n    a ||--o{ b\n",
        "erDiagram\n    a <--> b : x\n",
    ],
)
def test_invalid_text_raises(text: str) -> None:
    with pytest.raises(DiagramSyntaxError):
        parse_er_diagram(text)


def test_syntax_error_carries_location():
    with pytest.raises(DiagramSyntaxError) as exc_info:
        parse_er_diagram("erDiagram\n    a {\n        integer id\n    \n    a ??? b\n")

    error = exc_info.value
    assert error.line == 5
    assert error.column is not None
    assert "Syntax error" in str(error)
    assert error.detail.context is not None
