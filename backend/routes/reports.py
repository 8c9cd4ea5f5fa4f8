# routes/reports.py
import asyncio
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from config import settings
from schemas.reports import ReportPanel, ReportResponse, Toast
from utils.auth import CurrentUser, get_backend, require_admin
from utils.backend_client import BackendClient, BackendError
from utils.pdf import generate_report_pdf

router = APIRouter(prefix="/dashboard/reports", tags=["Reports"])
logger = logging.getLogger(__name__)

TOP_LIMIT = 5

# (key, title, rpc, extra params, single row, date-bounded, error message)
REPORT_PANELS = [
    ("summary", "Resumen de Ventas", "get_sales_summary", {}, True, True,
     "No se pudo cargar el resumen de ventas."),
    ("sales_over_time", "Ventas por Día", "get_sales_over_time", {}, False, True,
     "No se pudieron cargar los datos del gráfico."),
    ("top_products", "Productos Más Vendidos", "get_top_selling_products", {"limit_count": TOP_LIMIT}, False, True,
     "No se pudieron cargar los productos más vendidos."),
    ("sales_by_category", "Ventas por Categoría", "get_sales_by_category", {}, False, True,
     "No se pudieron cargar las ventas por categoría."),
    ("sales_by_employee", "Ventas por Empleado", "get_sales_by_employee", {}, False, True,
     "No se pudieron cargar las ventas por empleado."),
    ("sales_by_payment", "Ventas por Método de Pago", "get_sales_by_payment_method", {}, False, True,
     "No se pudieron cargar las ventas por método de pago."),
    ("top_customers", "Mejores Clientes", "get_top_customers", {"limit_count": TOP_LIMIT}, False, True,
     "No se pudieron cargar los mejores clientes."),
    ("inventory_value", "Valor del Inventario", "get_inventory_valuation", {}, True, False,
     "No se pudo cargar el valor del inventario."),
]


def _parse_date(s: Optional[str], default: date) -> date:
    if not s:
        return default
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Bad date format: {s}")


def resolve_range(date_from: Optional[str], date_to: Optional[str], today: Optional[date] = None) -> Tuple[date, date]:
    """Selected range; defaults to the current month up to today."""
    today = today or datetime.now(ZoneInfo(settings.APP_TIMEZONE)).date()
    start = _parse_date(date_from, today.replace(day=1))
    end = _parse_date(date_to, today)
    if start > end:
        raise HTTPException(status_code=400, detail="date_from must not be after date_to")
    return start, end


def rpc_bounds(start: date, end: date) -> dict:
    # The end bound is the next local midnight so the whole last day is included
    tz = ZoneInfo(settings.APP_TIMEZONE)
    return {
        "start_date": datetime.combine(start, time.min, tzinfo=tz).isoformat(),
        "end_date": datetime.combine(end + timedelta(days=1), time.min, tzinfo=tz).isoformat(),
        "p_timezone": settings.APP_TIMEZONE,
    }


async def _load_panel(backend: BackendClient, panel, bounds: dict) -> Tuple[ReportPanel, Optional[Toast]]:
    key, title, rpc, extra, single, dated, error_message = panel
    params = dict(bounds, **extra) if dated else dict(extra)
    try:
        data = await backend.rpc(rpc, params, single=single)
    except BackendError as e:
        logger.error(f"Report panel '{key}' ({rpc}) failed: {e.message}")
        toast = Toast(title="Error", description=error_message, variant="destructive")
        return ReportPanel(key=key, title=title, data=None, error=error_message), toast
    if data is None and not single:
        data = []
    return ReportPanel(key=key, title=title, data=data), None


async def collect_report(backend: BackendClient, start: date, end: date) -> ReportResponse:
    """Fires every panel query at once; each panel succeeds or fails on its own."""
    bounds = rpc_bounds(start, end)
    results = await asyncio.gather(*(_load_panel(backend, panel, bounds) for panel in REPORT_PANELS))
    return ReportResponse(
        date_from=start,
        date_to=end,
        panels=[panel for panel, _ in results],
        toasts=[toast for _, toast in results if toast],
    )


@router.get("", response_model=ReportResponse)
async def report_screen(
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to first day of month"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    start, end = resolve_range(date_from, date_to)
    return await collect_report(backend, start, end)


@router.get("/pdf")
async def report_pdf(
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    start, end = resolve_range(date_from, date_to)
    report = await collect_report(backend, start, end)
    content = generate_report_pdf(
        start.isoformat(),
        end.isoformat(),
        {panel.key: panel.data for panel in report.panels},
    )
    filename = f"reporte-{start.isoformat()}-{end.isoformat()}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
