# backend/utils/formatting.py
from typing import Optional

from config import settings

STATUS_LABELS = {
    "active": "Activo",
    "draft": "Borrador",
    "archived": "Archivado",
}

ORDER_STATUS_LABELS = {
    "pending": "Pendiente",
    "completed": "Completada",
    "cancelled": "Cancelada",
}


def format_currency(value: Optional[float]) -> str:
    """Amount with currency symbol, thousands separator and two decimals."""
    amount = float(value or 0)
    sign = "-" if amount < 0 else ""
    return f"{sign}{settings.CURRENCY_SYMBOL}{abs(amount):,.2f}"


def format_number(value: Optional[float]) -> str:
    number = value or 0
    if float(number).is_integer():
        return f"{int(number):,}"
    return f"{float(number):,.2f}"


def stock_badge(stock: Optional[int]) -> str:
    # Badge variant used by product and inventory tables
    stock = stock or 0
    if stock == 0:
        return "destructive"
    if stock < settings.LOW_STOCK_THRESHOLD:
        return "secondary"
    return "outline"


def product_status_label(status: Optional[str]) -> str:
    return STATUS_LABELS.get(status or "", status or "")


def order_status_label(status: Optional[str]) -> str:
    return ORDER_STATUS_LABELS.get(status or "", "N/A")
