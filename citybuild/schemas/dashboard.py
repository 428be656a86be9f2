from __future__ import annotations

from typing import List, Union

from pydantic import Field

from citybuild.schemas.bids import Bid
from citybuild.schemas.commerce import LoanApplication, Order
from citybuild.schemas.primitives import CamelModel
from citybuild.schemas.projects import Project


class GCDashboard(CamelModel):
    projects: List[Project] = Field(default_factory=list)
    total_projects: int = 0
    active_projects: int = 0
    total_bids: int = 0
    pending_bids: int = 0
    recent_activity: List[Bid] = Field(default_factory=list)


class SubcontractorDashboard(CamelModel):
    bids: List[Bid] = Field(default_factory=list)
    total_bids: int = 0
    awarded_bids: int = 0
    pending_bids: int = 0
    rejected_bids: int = 0
    available_projects: List[Project] = Field(default_factory=list)
    total_earnings: float = 0


class SupplierDashboard(CamelModel):
    orders: List[Order] = Field(default_factory=list)
    total_orders: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    total_revenue: float = 0


class BankDashboard(CamelModel):
    loans: List[LoanApplication] = Field(default_factory=list)
    total_loans: int = 0
    active_loans: int = 0
    total_amount: float = 0
    pending_approvals: int = 0


class AdminDashboard(CamelModel):
    total_users: int = 0
    total_projects: int = 0
    total_bids: int = 0
    unread_notifications: int = 0


DashboardData = Union[
    GCDashboard, SubcontractorDashboard, SupplierDashboard, BankDashboard, AdminDashboard
]
