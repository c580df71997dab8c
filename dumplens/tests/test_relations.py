"""Tests for the relation index."""

from dumplens.graph import build_relation_index, relations_for
from dumplens.ir.models import FkAction, SchemaGraph, TableKey, filter_by_schemas
from dumplens.tests.factories import make_fk, make_table


def test_every_table_has_an_entry(shop_graph):
    index = build_relation_index(shop_graph)
    assert set(index) == {t.key for t in shop_graph.tables}
    assert index[TableKey("public", "products")].parents == []


def test_parents_and_children(shop_graph):
    index = build_relation_index(shop_graph)
    orders = index[TableKey("public", "orders")]

    assert orders.parents == [TableKey("public", "customers")]
    assert orders.children == [TableKey("public", "order_items"), TableKey("billing", "invoices")]
    assert index[TableKey("public", "customers")].children == [TableKey("public", "orders")]


def test_dangling_foreign_key_is_skipped(shop_graph):
    index = build_relation_index(shop_graph)

    assert TableKey("public", "ghost") not in index
    assert TableKey("public", "ghost") not in index[TableKey("public", "orders")].parents


def test_self_reference_is_parent_and_child():
    graph = SchemaGraph(
        tables=[make_table("public", "employees")],
        foreign_keys=[make_fk("employees_manager_fkey", "public.employees", "public.employees")],
    )
    index = build_relation_index(graph)
    employees = index[TableKey("public", "employees")]

    assert employees.parents == [TableKey("public", "employees")]
    assert employees.children == [TableKey("public", "employees")]


def test_parallel_foreign_keys_are_listed_once():
    graph = SchemaGraph(
        tables=[make_table("public", "users"), make_table("public", "messages")],
        foreign_keys=[
            make_fk("messages_sender_fkey", "public.messages", "public.users", ["sender_id"]),
            make_fk("messages_recipient_fkey", "public.messages", "public.users", ["recipient_id"]),
        ],
    )
    index = build_relation_index(graph)

    assert index[TableKey("public", "messages")].parents == [TableKey("public", "users")]
    assert index[TableKey("public", "users")].children == [TableKey("public", "messages")]


def test_empty_graph():
    assert build_relation_index(SchemaGraph()) == {}


def test_relations_for_unknown_table(shop_graph):
    index = build_relation_index(shop_graph)
    relations = relations_for(index, TableKey("public", "missing"))
    assert relations.parents == [] and relations.children == []


def test_filter_by_schemas(shop_graph):
    billing = filter_by_schemas(shop_graph, ["billing"])
    assert [str(t.key) for t in billing.tables] == ["billing.invoices"]
    assert billing.foreign_keys == []

    both = filter_by_schemas(shop_graph, {"billing", "public"})
    names = {fk.constraint_name for fk in both.foreign_keys}
    assert "invoices_order_id_fkey" in names
    # Dangling constraints do not survive filtering
    assert "orders_ghost_fkey" not in names


def test_stats(shop_graph):
    stats = shop_graph.stats()
    assert stats.tables == 6
    assert stats.foreign_keys == 6
    assert stats.tables_per_schema == {"billing": 1, "public": 5}


def test_fk_action_accepts_sql_spelling():
    assert FkAction("SET NULL") is FkAction.SET_NULL
    assert FkAction("cascade") is FkAction.CASCADE
    assert str(FkAction.SET_DEFAULT) == "SET DEFAULT"
