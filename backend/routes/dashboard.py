# backend/routes/dashboard.py
import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Union
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query

from config import settings
from schemas.product import ProductSearchResult
from schemas.reports import AdminDashboard, EmployeeDashboard, NavItem, SummaryCard, Toast
from utils.auth import ROLE_ADMIN, ROLE_EMPLOYEE, CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError, search_term
from utils.formatting import format_currency, format_number

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
logger = logging.getLogger(__name__)

# Navigation entries and the roles allowed to see them
NAV_ITEMS = [
    ("/dashboard", "Panel", (ROLE_ADMIN, ROLE_EMPLOYEE)),
    ("/dashboard/sell", "Vender", (ROLE_ADMIN, ROLE_EMPLOYEE)),
    ("/dashboard/products", "Productos", (ROLE_ADMIN, ROLE_EMPLOYEE)),
    ("/dashboard/categories", "Categorías", (ROLE_ADMIN, ROLE_EMPLOYEE)),
    ("/dashboard/orders", "Órdenes de Compra", (ROLE_ADMIN,)),
    ("/dashboard/inventory", "Inventario", (ROLE_ADMIN, ROLE_EMPLOYEE)),
    ("/dashboard/reports", "Reportes", (ROLE_ADMIN,)),
    ("/dashboard/customers", "Clientes", (ROLE_ADMIN, ROLE_EMPLOYEE)),
    ("/dashboard/suppliers", "Proveedores", (ROLE_ADMIN,)),
    ("/dashboard/settings", "Configuración", (ROLE_ADMIN,)),
]

SEARCH_MIN_LENGTH = 2


def nav_for_role(role: str) -> List[NavItem]:
    return [NavItem(href=href, label=label) for href, label, roles in NAV_ITEMS if role in roles]


def _local_midnight(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def _settle(label: str, call):
    """Await one dashboard call; a failure leaves that block empty."""
    try:
        return await call, None
    except BackendError as e:
        logger.error(f"Dashboard block '{label}' failed: {e}")
        return None, Toast(title="Error", description=f"No se pudo cargar: {label}.", variant="destructive")


async def build_admin_dashboard(backend: BackendClient, now: datetime = None) -> AdminDashboard:
    tz = settings.APP_TIMEZONE
    now = now or datetime.now(ZoneInfo(tz))
    today = _local_midnight(now)
    tomorrow = today + timedelta(days=1)
    seven_days_ago = today - timedelta(days=6)
    thirty_days_ago = now - timedelta(days=30)

    results = await asyncio.gather(
        _settle("resumen de ventas", backend.rpc(
            "get_sales_summary",
            {"start_date": today.isoformat(), "end_date": tomorrow.isoformat(), "p_timezone": tz},
            single=True,
        )),
        _settle("ventas de la semana", backend.rpc(
            "get_sales_over_time",
            {"start_date": seven_days_ago.isoformat(), "end_date": tomorrow.isoformat(), "p_timezone": tz},
        )),
        _settle("ventas recientes", backend.rpc("get_recent_sales", {"limit_count": 5})),
        _settle("productos con poco stock", backend.table("products")
                .select("name, stock")
                .lt("stock", settings.LOW_STOCK_THRESHOLD)
                .order("stock")
                .limit(5)
                .execute()),
        _settle("productos más vendidos", backend.rpc(
            "get_top_selling_products",
            {"start_date": thirty_days_ago.isoformat(), "end_date": tomorrow.isoformat(),
             "limit_count": 5, "p_timezone": tz},
        )),
    )
    (summary, _), (over_time, _), (recent, _), (low_stock, _), (top, _) = results
    toasts = [toast for _, toast in results if toast]

    summary = summary or {}
    cards = [
        SummaryCard(title="Ventas de Hoy", value=format_currency(summary.get("total_sales")),
                    description="Ventas totales del día"),
        SummaryCard(title="Ganancia Bruta", value=format_currency(summary.get("total_profit")),
                    description="Ganancia estimada del día"),
        SummaryCard(title="Transacciones", value=f"+{format_number(summary.get('transaction_count'))}",
                    description="Número de ventas realizadas"),
        SummaryCard(title="Venta Promedio", value=format_currency(summary.get("average_sale")),
                    description="Valor promedio por transacción"),
    ]
    return AdminDashboard(
        cards=cards,
        sales_over_time=over_time or [],
        recent_sales=recent or [],
        low_stock_products=low_stock or [],
        top_products=top or [],
        toasts=toasts,
    )


# Landing screen: figures for admins, a shortcut to the sell screen for employees
@router.get("", response_model=Union[AdminDashboard, EmployeeDashboard])
async def dashboard_home(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    if current_user.role == ROLE_ADMIN:
        return await build_admin_dashboard(backend)
    return EmployeeDashboard(
        title="¡Bienvenido de nuevo!",
        description="Estás listo para empezar a vender.",
    )


# Navigation entries visible to the caller
@router.get("/nav", response_model=List[NavItem])
async def dashboard_nav(current_user: CurrentUser = Depends(get_current_user)):
    return nav_for_role(current_user.role)


# Global product search box
@router.get("/search", response_model=List[ProductSearchResult])
async def search_products(
    q: str = Query("", description="Name or SKU fragment"),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    q = search_term(q)
    if len(q) < SEARCH_MIN_LENGTH:
        return []
    rows = await (
        backend.table("products")
        .select("id, name, sku, image_url")
        .or_(f"name.ilike.%{q}%,sku.ilike.%{q}%")
        .eq("status", "active")
        .limit(5)
        .execute()
    )
    return rows or []
