# backend/utils/pdf.py

import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from utils.formatting import format_currency, format_number

logger = logging.getLogger(__name__)

FONT_DIR = Path("assets/fonts")
FONT_REGULAR_PATH = FONT_DIR / "DejaVuSans.ttf"
FONT_BOLD_PATH = FONT_DIR / "DejaVuSans-Bold.ttf"

# Built-in fonts cover Latin-1, enough for Spanish; DejaVu is used when shipped
FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

NO_DATA = "Sin datos disponibles"

# Cards printed first, in order: (panel, field, label, kind)
SUMMARY_FIELDS = [
    ("summary", "total_sales", "Ventas Totales", "currency"),
    ("summary", "total_profit", "Ganancia Bruta", "currency"),
    ("summary", "transaction_count", "No. de Transacciones", "number"),
    ("summary", "average_sale", "Venta Promedio", "currency"),
    ("inventory_value", "total_cost_value", "Valor del Inventario (costo)", "currency"),
    ("inventory_value", "total_sale_value", "Valor del Inventario (venta)", "currency"),
    ("inventory_value", "total_units", "Unidades en Existencia", "number"),
]

# Tables printed after the cards: (panel, title, [(header, field, kind, x_mm, align)])
TABLE_SECTIONS = [
    ("sales_over_time", "Ventas por Día", [
        ("Fecha", "date", "text", 22, "left"),
        ("Ventas", "sales", "currency", 185, "right"),
    ]),
    ("top_products", "Productos Más Vendidos", [
        ("Producto", "product_name", "text", 22, "left"),
        ("Cant.", "total_quantity", "number", 140, "right"),
        ("Ingresos", "total_revenue", "currency", 185, "right"),
    ]),
    ("sales_by_category", "Ventas por Categoría", [
        ("Categoría", "category_name", "text", 22, "left"),
        ("Cant.", "total_quantity", "number", 140, "right"),
        ("Ingresos", "total_revenue", "currency", 185, "right"),
    ]),
    ("sales_by_employee", "Ventas por Empleado", [
        ("Empleado", "employee_email", "text", 22, "left"),
        ("Transacciones", "transaction_count", "number", 140, "right"),
        ("Ventas", "total_sales", "currency", 185, "right"),
    ]),
    ("sales_by_payment", "Ventas por Método de Pago", [
        ("Método", "payment_method", "text", 22, "left"),
        ("Transacciones", "transaction_count", "number", 140, "right"),
        ("Total", "total_sales", "currency", 185, "right"),
    ]),
    ("top_customers", "Mejores Clientes", [
        ("Cliente", "customer_name", "text", 22, "left"),
        ("Compras", "transaction_count", "number", 140, "right"),
        ("Total", "total_spent", "currency", 185, "right"),
    ]),
]

TOP_MARGIN = 20 * mm
BOTTOM_MARGIN = 25 * mm
ROW_HEIGHT = 6 * mm

_fonts_inited = False


def _init_fonts():
    """Registers DejaVu in ReportLab when the font files are present."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True
    if not FONT_REGULAR_PATH.exists():
        return
    try:
        from reportlab.pdfbase import pdfmetrics
        from reportlab.pdfbase.ttfonts import TTFont

        pdfmetrics.registerFont(TTFont("DejaVuSans", str(FONT_REGULAR_PATH)))
        FONT_REGULAR_NAME = "DejaVuSans"
        if FONT_BOLD_PATH.exists():
            pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(FONT_BOLD_PATH)))
            FONT_BOLD_NAME = "DejaVuSans-Bold"
        else:
            FONT_BOLD_NAME = FONT_REGULAR_NAME
    except Exception as e:
        logger.warning(f"Font init warning: {e}")


def _fmt(value, kind: str) -> str:
    if kind == "currency":
        return format_currency(value)
    if kind == "number":
        return format_number(value)
    return "" if value is None else str(value)


def generate_report_pdf(
    date_from,
    date_to,
    panels: Dict[str, Optional[object]],
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Lays out the sales report:
    - Header with the date range
    - Summary cards (sales and inventory figures)
    - One table per breakdown, breaking pages as rows run out

    ``panels`` maps panel key to its data; None marks a panel whose call failed.
    """
    _init_fonts()

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    def draw_text(x, y, text, font=None, size=10, align="left", color=(0, 0, 0)):
        c.setFillColorRGB(*color)
        c.setFont(font or FONT_REGULAR_NAME, size)
        text_str = str(text) if text is not None else ""
        if align == "right":
            c.drawRightString(x, y, text_str)
        elif align == "center":
            c.drawCentredString(x, y, text_str)
        else:
            c.drawString(x, y, text_str)
        c.setFillColorRGB(0, 0, 0)

    def ensure_space(y, needed=ROW_HEIGHT):
        if y - needed < BOTTOM_MARGIN:
            c.showPage()
            return height - TOP_MARGIN
        return y

    # --- 1. HEADER ---
    y = height - TOP_MARGIN
    draw_text(20 * mm, y, "Reporte de Ventas", font=FONT_BOLD_NAME, size=16)
    y -= 7 * mm
    draw_text(20 * mm, y, f"Período: {date_from} - {date_to}", size=10)
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    draw_text(190 * mm, y, f"Generado: {stamp}", size=8, align="right", color=(0.4, 0.4, 0.4))
    y -= 5 * mm
    c.setLineWidth(0.5)
    c.line(20 * mm, y, 190 * mm, y)
    y -= 10 * mm

    # --- 2. SUMMARY ---
    draw_text(20 * mm, y, "Resumen", font=FONT_BOLD_NAME, size=12)
    y -= 8 * mm
    for panel_key, field, label, kind in SUMMARY_FIELDS:
        y = ensure_space(y)
        data = panels.get(panel_key)
        value = _fmt(data.get(field), kind) if isinstance(data, dict) else NO_DATA
        draw_text(22 * mm, y, label)
        draw_text(185 * mm, y, value, font=FONT_BOLD_NAME, align="right")
        y -= ROW_HEIGHT

    # --- 3. TABLES ---
    for panel_key, title, columns in TABLE_SECTIONS:
        y -= 6 * mm
        # Title, header bar and at least one row stay together
        y = ensure_space(y, 10 * mm + 2 * ROW_HEIGHT)
        draw_text(20 * mm, y, title, font=FONT_BOLD_NAME, size=12)
        y -= 9 * mm

        rows: Optional[List[dict]] = panels.get(panel_key)
        if not rows:
            draw_text(22 * mm, y, NO_DATA, color=(0.5, 0.5, 0.5))
            y -= ROW_HEIGHT
            continue

        c.setFillColorRGB(0.95, 0.95, 0.95)
        c.rect(20 * mm, y - 2 * mm, 170 * mm, 7 * mm, fill=1, stroke=0)
        c.setFillColorRGB(0, 0, 0)
        for header, _, _, x, align in columns:
            draw_text(x * mm, y, header, font=FONT_BOLD_NAME, size=9, align=align)
        y -= 8 * mm

        for row in rows:
            y = ensure_space(y)
            for _, field, kind, x, align in columns:
                text = _fmt(row.get(field), kind)
                if kind == "text":
                    text = text[:60]
                draw_text(x * mm, y, text, size=9, align=align)
            c.setLineWidth(0.1)
            c.line(20 * mm, y - 2 * mm, 190 * mm, y - 2 * mm)
            y -= ROW_HEIGHT

    c.showPage()
    c.save()
    return buffer.getvalue()
