# citybuild/services/integrity_service.py
from __future__ import annotations

from typing import Dict, List

from pydantic import Field

from citybuild.schemas.primitives import CamelModel
from citybuild.services.local_storage import LocalStore


class IntegrityReport(CamelModel):
    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    stats: Dict[str, int] = Field(default_factory=dict)


def validate_data_integrity(store: LocalStore) -> IntegrityReport:
    """Reports dangling references; never modifies storage."""
    users = store.users.get_users()
    projects = store.projects.get_projects()
    bids = store.bids.get_bids()
    notifications = store.notifications.get_notifications()

    user_ids = {u.id for u in users}
    project_ids = {p.id for p in projects}
    issues: List[str] = []

    for project in projects:
        if project.gc_id not in user_ids:
            issues.append(f"Project {project.id} references non-existent GC {project.gc_id}")

    for bid in bids:
        if bid.project_id not in project_ids:
            issues.append(f"Bid {bid.id} references non-existent project {bid.project_id}")
        if bid.subcontractor_id not in user_ids:
            issues.append(f"Bid {bid.id} references non-existent subcontractor {bid.subcontractor_id}")

    for n in notifications:
        if n.user_id not in user_ids:
            issues.append(f"Notification {n.id} references non-existent user {n.user_id}")

    loans = store.loans.get_loans()
    for loan in loans:
        if loan.applicant_id and loan.applicant_id not in user_ids:
            issues.append(f"Loan {loan.id} references non-existent applicant {loan.applicant_id}")
        if loan.lender_id and loan.lender_id not in user_ids:
            issues.append(f"Loan {loan.id} references non-existent lender {loan.lender_id}")
        if loan.project_id and loan.project_id not in project_ids:
            issues.append(f"Loan {loan.id} references non-existent project {loan.project_id}")

    orders = store.orders.get_orders()
    for order in orders:
        if order.supplier_id not in user_ids:
            issues.append(f"Order {order.id} references non-existent supplier {order.supplier_id}")
        if order.buyer_id and order.buyer_id not in user_ids:
            issues.append(f"Order {order.id} references non-existent buyer {order.buyer_id}")
        if order.project_id and order.project_id not in project_ids:
            issues.append(f"Order {order.id} references non-existent project {order.project_id}")

    payments = store.payments.get_payments()
    for payment in payments:
        if payment.payer_id and payment.payer_id not in user_ids:
            issues.append(f"Payment {payment.id} references non-existent payer {payment.payer_id}")

    inventory = store.inventory.get_inventory()
    for item in inventory:
        if item.supplier_id and item.supplier_id not in user_ids:
            issues.append(f"Inventory item {item.id} references non-existent supplier {item.supplier_id}")

    return IntegrityReport(
        is_valid=not issues,
        issues=issues,
        stats={
            "users": len(users),
            "projects": len(projects),
            "bids": len(bids),
            "notifications": len(notifications),
            "loans": len(loans),
            "orders": len(orders),
            "payments": len(payments),
            "inventory": len(inventory),
        },
    )
