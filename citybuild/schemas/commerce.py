#citybuild/schemas/commerce.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, model_validator

from citybuild.models.enums import (
    DocumentStatus,
    InventoryStatus,
    LoanStatus,
    LoanType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    UserRole,
)
from citybuild.schemas.primitives import CamelModel, Money, NonNegInt, UtcDatetime


# -----------------------
# Loans (bank)
# -----------------------


class LoanDocument(CamelModel):
    name: str
    status: DocumentStatus = DocumentStatus.pending


class LoanApplication(CamelModel):
    id: str
    application_number: str
    applicant_id: Optional[str] = None
    applicant_name: str
    applicant_type: UserRole
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    loan_amount: Money
    loan_type: LoanType
    interest_rate: float = Field(..., ge=0, le=100)
    term_months: int = Field(..., gt=0)
    status: LoanStatus = LoanStatus.pending_documents
    application_date: UtcDatetime
    expected_decision: Optional[UtcDatetime] = None
    approved_date: Optional[UtcDatetime] = None
    purpose: str = ""
    collateral: Optional[str] = None
    credit_score: Optional[int] = Field(default=None, ge=300, le=850)
    annual_revenue: Optional[Money] = None
    years_in_business: Optional[NonNegInt] = None
    documents: List[LoanDocument] = Field(default_factory=list)
    lender_id: Optional[str] = None
    assigned_officer: Optional[str] = None
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None


# -----------------------
# Orders (supplier)
# -----------------------


class OrderItem(CamelModel):
    name: str
    quantity: float = Field(..., gt=0)
    unit: str
    unit_price: Money

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class Order(CamelModel):
    id: str
    order_number: str
    supplier_id: str
    supplier_name: Optional[str] = None
    buyer_id: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: Money = 0
    status: OrderStatus = OrderStatus.pending
    order_date: UtcDatetime
    expected_delivery: Optional[UtcDatetime] = None
    delivery_address: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _total_from_items(self):
        # an explicit total wins; otherwise derive it from the line items
        if not self.total_amount and self.items:
            self.total_amount = round(sum(i.line_total for i in self.items), 2)
        return self


# -----------------------
# Payments
# -----------------------


class Payment(CamelModel):
    id: str
    project_name: str
    payer_id: Optional[str] = None
    recipient: str
    amount: Money
    status: PaymentStatus = PaymentStatus.pending
    due_date: UtcDatetime
    payment_method: PaymentMethod
    description: str = ""
    invoice_number: Optional[str] = None


# -----------------------
# Inventory (supplier)
# -----------------------


class InventoryItem(CamelModel):
    id: str
    sku: str
    name: str
    category: str
    description: str = ""
    current_stock: NonNegInt
    min_stock: NonNegInt = 0
    max_stock: NonNegInt = 0
    unit: str
    unit_price: Money
    supplier: Optional[str] = None
    supplier_id: Optional[str] = None
    location: Optional[str] = None
    last_restocked: Optional[UtcDatetime] = None

    @property
    def total_value(self) -> float:
        return round(self.current_stock * self.unit_price, 2)

    @property
    def status(self) -> InventoryStatus:
        if self.current_stock == 0:
            return InventoryStatus.out_of_stock
        if self.current_stock <= self.min_stock:
            return InventoryStatus.low_stock
        return InventoryStatus.in_stock
