#citybuild/models/enums.py
from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    gc = "gc"
    subcontractor = "subcontractor"
    supplier = "supplier"
    bank = "bank"
    admin = "admin"


class ProjectStatus(str, Enum):
    draft = "draft"
    active = "active"
    bidding = "bidding"
    awarded = "awarded"
    completed = "completed"


class BidStatus(str, Enum):
    # pending -> awarded | rejected; both terminal
    pending = "pending"
    awarded = "awarded"
    rejected = "rejected"


class NotificationType(str, Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"


class NotificationPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class NotificationCategory(str, Enum):
    bid = "bid"
    project = "project"
    payment = "payment"
    system = "system"
    message = "message"


class Theme(str, Enum):
    light = "light"
    dark = "dark"


class LoanType(str, Enum):
    construction = "construction"
    development = "development"
    equipment = "equipment"
    working_capital = "working_capital"


class LoanStatus(str, Enum):
    pending_documents = "pending_documents"
    under_review = "under_review"
    approved = "approved"
    rejected = "rejected"
    active = "active"


class DocumentStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class PaymentMethod(str, Enum):
    ach = "ach"
    wire = "wire"
    check = "check"
    credit_card = "credit_card"


class InventoryStatus(str, Enum):
    in_stock = "in_stock"
    low_stock = "low_stock"
    out_of_stock = "out_of_stock"


class FileCategory(str, Enum):
    plans = "plans"
    specifications = "specifications"
    permits = "permits"
    other = "other"
