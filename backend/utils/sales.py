# backend/utils/sales.py
"""Client-side reductions over carts and purchase orders."""
from typing import Iterable, List, Mapping

from config import settings


class CartError(ValueError):
    """A cart line cannot be sold as requested."""


def cart_totals(lines: Iterable[Mapping], tax_rate: float = None) -> dict:
    """
    Totals of a cart whose sale prices already include tax.

    Each line needs ``sale_price`` and ``quantity``. The subtotal is the
    amount before tax (total / (1 + rate)); tax is the difference.
    """
    rate = settings.TAX_RATE if tax_rate is None else tax_rate
    total, quantity = 0.0, 0
    for line in lines:
        total += float(line["sale_price"]) * int(line["quantity"])
        quantity += int(line["quantity"])

    subtotal = total / (1 + rate)
    return {
        "total": round(total, 2),
        "subtotal": round(subtotal, 2),
        "tax": round(total - subtotal, 2),
        "total_quantity": quantity,
    }


def merge_cart_lines(lines: Iterable[Mapping]) -> List[dict]:
    # Same product twice in a cart is one line with the summed quantity
    merged = {}
    for line in lines:
        pid = line["product_id"]
        if pid in merged:
            merged[pid]["quantity"] += int(line["quantity"])
        else:
            merged[pid] = {"product_id": pid, "quantity": int(line["quantity"])}
    return list(merged.values())


def build_sale_items(cart: Iterable[Mapping], products: Mapping[str, Mapping]) -> List[dict]:
    """Join cart lines with fresh product rows, checking availability."""
    items = []
    for line in cart:
        product = products.get(line["product_id"])
        if product is None:
            raise CartError(f"Producto no encontrado: {line['product_id']}")
        if product.get("status") not in (None, "active"):
            raise CartError(f"{product['name']} no está disponible para la venta.")
        stock = int(product.get("stock") or 0)
        if stock < 1:
            raise CartError(f"{product['name']} no tiene existencias.")
        if line["quantity"] > stock:
            raise CartError(f"No puedes agregar más de {stock} unidades de {product['name']}.")
        items.append({
            "product_id": product["id"],
            "quantity": line["quantity"],
            "sale_price": float(product.get("sale_price") or 0),
            "cost_price": float(product.get("cost_price") or 0),
        })
    return items


def purchase_order_total(items: Iterable[Mapping]) -> float:
    return round(sum(int(i["quantity"]) * float(i["cost_price"]) for i in items), 2)
