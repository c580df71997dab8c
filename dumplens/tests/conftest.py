"""Pytest fixtures for the dumplens core."""

import pytest

from dumplens.ir.models import Column, SchemaGraph
from dumplens.render import reset_renderer
from dumplens.tests.factories import make_fk, make_table


@pytest.fixture
def shop_graph() -> SchemaGraph:
    """Small multi-schema graph with a self reference and a dangling foreign key."""
    customers = make_table("public", "customers", [
        Column(name="id", data_type="integer", is_nullable=False, is_primary_key=True),
        Column(name="email", data_type="character varying(255)", is_nullable=False),
        Column(name="display-name", data_type="text"),
    ], rows=1200)
    orders = make_table("public", "orders", [
        Column(name="id", data_type="integer", is_nullable=False, is_primary_key=True),
        Column(name="customer_id", data_type="integer", is_nullable=False),
        Column(name="placed_at", data_type="timestamp with time zone"),
    ], rows=5000)
    products = make_table("public", "products", rows=300)
    order_items = make_table("public", "order_items", [
        Column(name="order_id", data_type="integer", is_nullable=False),
        Column(name="product_id", data_type="integer", is_nullable=False),
    ], rows=20000)
    employees = make_table("public", "employees", [
        Column(name="id", data_type="integer", is_nullable=False, is_primary_key=True),
        Column(name="manager_id", data_type="integer"),
    ], rows=40)
    invoices = make_table("billing", "invoices", [
        Column(name="id", data_type="integer", is_nullable=False, is_primary_key=True),
        Column(name="order_id", data_type="integer"),
    ], rows=4800)

    return SchemaGraph(
        tables=[customers, orders, products, order_items, employees, invoices],
        foreign_keys=[
            make_fk("orders_customer_id_fkey", "public.orders", "public.customers", ["customer_id"]),
            make_fk("order_items_order_id_fkey", "public.order_items", "public.orders", ["order_id"]),
            make_fk("order_items_product_id_fkey", "public.order_items", "public.products", ["product_id"]),
            make_fk("employees_manager_id_fkey", "public.employees", "public.employees", ["manager_id"]),
            make_fk("invoices_order_id_fkey", "billing.invoices", "public.orders", ["order_id"]),
            make_fk("orders_ghost_fkey", "public.orders", "public.ghost", ["id"]),
        ],
    )


@pytest.fixture
def triangle_graph() -> SchemaGraph:
    """a -> b, a -> c, b -> c."""
    return SchemaGraph(
        tables=[make_table("public", "a"), make_table("public", "b"), make_table("public", "c")],
        foreign_keys=[
            make_fk("a_b_fkey", "public.a", "public.b"),
            make_fk("a_c_fkey", "public.a", "public.c"),
            make_fk("b_c_fkey", "public.b", "public.c"),
        ],
    )


@pytest.fixture(autouse=True)
def clean_renderer():
    """Every test starts and ends with an uninitialized renderer."""
    reset_renderer()
    yield
    reset_renderer()
