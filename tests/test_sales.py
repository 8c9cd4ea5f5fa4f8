"""
Tests for cart and purchase-order arithmetic and display helpers.
"""

import pytest

from utils.formatting import format_currency, order_status_label, stock_badge
from utils.sales import CartError, build_sale_items, cart_totals, merge_cart_lines, purchase_order_total

PRODUCTS = {
    "p1": {"id": "p1", "name": "Martillo", "status": "active", "sale_price": 116.0, "cost_price": 70.0, "stock": 5},
    "p2": {"id": "p2", "name": "Clavos", "status": "active", "sale_price": 23.2, "cost_price": 10.0, "stock": 0},
    "p3": {"id": "p3", "name": "Pala", "status": "archived", "sale_price": 300.0, "cost_price": 150.0, "stock": 8},
}


def test_cart_totals_split_tax_out_of_sale_price():
    totals = cart_totals([{"sale_price": 116.0, "quantity": 2}, {"sale_price": 58.0, "quantity": 1}])

    assert totals == {"total": 290.0, "subtotal": 250.0, "tax": 40.0, "total_quantity": 3}


def test_cart_totals_empty_cart():
    assert cart_totals([]) == {"total": 0.0, "subtotal": 0.0, "tax": 0.0, "total_quantity": 0}


def test_merge_cart_lines_sums_repeated_products():
    lines = merge_cart_lines([
        {"product_id": "p1", "quantity": 1},
        {"product_id": "p2", "quantity": 2},
        {"product_id": "p1", "quantity": 3},
    ])

    assert lines == [{"product_id": "p1", "quantity": 4}, {"product_id": "p2", "quantity": 2}]


def test_build_sale_items_uses_current_prices():
    items = build_sale_items([{"product_id": "p1", "quantity": 2}], PRODUCTS)

    assert items == [{"product_id": "p1", "quantity": 2, "sale_price": 116.0, "cost_price": 70.0}]


@pytest.mark.parametrize("line,message", [
    ({"product_id": "nope", "quantity": 1}, "no encontrado"),
    ({"product_id": "p1", "quantity": 6}, "más de 5"),
    ({"product_id": "p2", "quantity": 1}, "no tiene existencias"),
    ({"product_id": "p3", "quantity": 1}, "no está disponible"),
])
def test_build_sale_items_rejects_unsellable_lines(line, message):
    with pytest.raises(CartError, match=message):
        build_sale_items([line], PRODUCTS)


def test_purchase_order_total():
    assert purchase_order_total([
        {"quantity": 3, "cost_price": 10.5},
        {"quantity": 1, "cost_price": 0.1},
    ]) == 31.6


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(None) == "$0.00"
    assert format_currency(-5) == "-$5.00"


def test_stock_badge_thresholds():
    assert stock_badge(0) == "destructive"
    assert stock_badge(9) == "secondary"
    assert stock_badge(10) == "outline"


def test_order_status_label():
    assert order_status_label("pending") == "Pendiente"
    assert order_status_label("mystery") == "N/A"
