# schemas/reports.py
from datetime import date
from typing import Any, List, Optional
from pydantic import BaseModel


# Notification the client shows for a failed panel
class Toast(BaseModel):
    title: str
    description: str
    variant: str = "default"


# One independently loaded section of the report screen
class ReportPanel(BaseModel):
    key: str
    title: str
    data: Optional[Any] = None
    error: Optional[str] = None


class ReportResponse(BaseModel):
    date_from: date
    date_to: date
    panels: List[ReportPanel]
    toasts: List[Toast]


# Schemas for the dashboard summary cards
class SummaryCard(BaseModel):
    title: str
    value: str
    description: str


class AdminDashboard(BaseModel):
    view: str = "admin"
    cards: List[SummaryCard]
    sales_over_time: List[Any] = []
    recent_sales: List[Any] = []
    low_stock_products: List[Any] = []
    top_products: List[Any] = []
    toasts: List[Toast] = []


class EmployeeDashboard(BaseModel):
    view: str = "employee"
    title: str
    description: str
    sell_url: str = "/dashboard/sell"


class NavItem(BaseModel):
    href: str
    label: str
