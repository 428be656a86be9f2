from datetime import datetime, timedelta, timezone
from typing import List

from citybuild.models.enums import (
    BidStatus,
    LoanStatus,
    LoanType,
    NotificationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProjectStatus,
    UserRole,
)
from citybuild.schemas.bids import Bid
from citybuild.schemas.commerce import InventoryItem, LoanApplication, Order, OrderItem, Payment
from citybuild.schemas.notifications import Notification
from citybuild.schemas.projects import PlanFile, Project
from citybuild.schemas.users import User


def _d(raw: str) -> datetime:
    return datetime.fromisoformat(raw).replace(tzinfo=timezone.utc)


# (id, email, role, name, created)
_USERS = [
    ("gc-1", "john.contractor@example.com", UserRole.gc, "John Contractor", "2024-01-15"),
    ("gc-2", "maria.builder@example.com", UserRole.gc, "Maria Builder", "2024-02-10"),
    ("gc-3", "david.construction@example.com", UserRole.gc, "David Construction LLC", "2024-03-05"),
    ("sub-1", "mike.plumber@example.com", UserRole.subcontractor, "Mike Plumber", "2024-01-20"),
    ("sub-2", "sarah.electrician@example.com", UserRole.subcontractor, "Sarah Electrician", "2024-01-25"),
    ("sub-3", "premium.plumbing@example.com", UserRole.subcontractor, "Premium Plumbing Solutions", "2024-02-15"),
    ("sub-4", "smart.electrical@example.com", UserRole.subcontractor, "Smart Electrical Systems", "2024-03-01"),
    ("sub-5", "climate.control@example.com", UserRole.subcontractor, "Climate Control Experts", "2024-02-20"),
    ("sub-6", "concrete.pros@example.com", UserRole.subcontractor, "Concrete Professionals", "2024-03-15"),
    ("sub-7", "industrial.hvac@example.com", UserRole.subcontractor, "Industrial HVAC Solutions", "2024-04-10"),
    ("sub-8", "roofing.masters@example.com", UserRole.subcontractor, "Roofing Masters Inc.", "2024-04-20"),
    ("sup-1", "supplies@buildmart.com", UserRole.supplier, "BuildMart Supply Co.", "2024-01-10"),
    ("sup-2", "orders@constructionsupply.com", UserRole.supplier, "Construction Supply Depot", "2024-02-05"),
    ("sup-3", "sales@premiumbuilding.com", UserRole.supplier, "Premium Building Materials", "2024-03-12"),
    ("bank-1", "construction@firstbank.com", UserRole.bank, "First Construction Bank", "2024-01-05"),
    ("bank-2", "commercial@buildersbank.com", UserRole.bank, "Builders Commercial Bank", "2024-01-30"),
]

# (id, name, gc, status, cost, timeline, created, updated, [files])
_PROJECTS = [
    ("proj-1", "Downtown Office Complex", "gc-1", ProjectStatus.bidding, 2_500_000, "18 months",
     "2024-12-01", "2024-12-15", ["floor-plans.pdf", "electrical-layout.dwg"]),
    ("proj-2", "Residential Complex Phase 1", "gc-1", ProjectStatus.active, 1_800_000, "12 months",
     "2024-11-15", "2024-12-10", ["site-plan.pdf"]),
    ("proj-3", "Warehouse Renovation", "gc-1", ProjectStatus.bidding, 850_000, "8 months",
     "2024-12-10", "2024-12-10", ["renovation-plans.pdf"]),
    ("proj-4", "Smart Home Electrical Installation", "gc-2", ProjectStatus.bidding, 450_000, "6 weeks",
     "2024-12-12", "2024-12-16", ["electrical-schematics.dwg", "smart-home-specs.pdf"]),
    ("proj-5", "Commercial HVAC System Installation", "gc-3", ProjectStatus.bidding, 1_200_000, "4 months",
     "2024-12-14", "2024-12-17", ["hvac-layout.pdf"]),
    ("proj-6", "Luxury Hotel Plumbing Infrastructure", "gc-1", ProjectStatus.bidding, 3_200_000, "14 months",
     "2024-12-13", "2024-12-18", ["plumbing-blueprints.pdf", "spa-plumbing-details.dwg"]),
]

# (id, project, subcontractor, amount, timeline, status, submitted)
_BIDS = [
    ("bid-1", "proj-1", "sub-1", 125_000, "6 weeks", BidStatus.pending, "2024-12-05"),
    ("bid-2", "proj-1", "sub-2", 180_000, "8 weeks", BidStatus.pending, "2024-12-06"),
    ("bid-3", "proj-1", "sub-3", 135_000, "5 weeks", BidStatus.awarded, "2024-12-07"),
    ("bid-4", "proj-1", "sub-4", 165_000, "7 weeks", BidStatus.rejected, "2024-12-08"),
    ("bid-5", "proj-2", "sub-1", 95_000, "4 weeks", BidStatus.awarded, "2024-11-20"),
    ("bid-6", "proj-2", "sub-5", 220_000, "10 weeks", BidStatus.pending, "2024-11-22"),
    ("bid-7", "proj-3", "sub-2", 85_000, "6 weeks", BidStatus.pending, "2024-12-12"),
    ("bid-8", "proj-3", "sub-6", 45_000, "3 weeks", BidStatus.pending, "2024-12-13"),
    ("bid-9", "proj-4", "sub-2", 45_000, "4 weeks", BidStatus.pending, "2024-12-12"),
    ("bid-10", "proj-4", "sub-4", 52_000, "5 weeks", BidStatus.pending, "2024-12-14"),
    ("bid-11", "proj-5", "sub-5", 120_000, "3 months", BidStatus.pending, "2024-12-14"),
    ("bid-12", "proj-5", "sub-7", 135_000, "4 months", BidStatus.pending, "2024-12-15"),
    ("bid-13", "proj-6", "sub-1", 285_000, "12 months", BidStatus.pending, "2024-12-16"),
    ("bid-14", "proj-6", "sub-3", 310_000, "14 months", BidStatus.pending, "2024-12-17"),
]

# (id, user, type, read, created, title, message)
_NOTIFICATIONS = [
    ("notif-1", "gc-1", NotificationType.info, False, "2024-12-18T10:30:00",
     "New Bid Received", "A new bid was submitted for Downtown Office Complex."),
    ("notif-2", "gc-1", NotificationType.success, False, "2024-12-18T09:15:00",
     "Bid Awarded", "The plumbing contract for Downtown Office Complex was awarded."),
    ("notif-3", "gc-1", NotificationType.info, True, "2024-12-17T16:45:00",
     "Project File Updated", "Updated plans were uploaded to Warehouse Renovation."),
    ("notif-4", "gc-1", NotificationType.success, True, "2024-12-17T14:20:00",
     "Payment Approved", "The progress payment for Residential Complex Phase 1 was approved."),
    ("notif-5", "sub-1", NotificationType.success, False, "2024-12-18T11:00:00",
     "Bid Status Update", "Your bid for Residential Complex Phase 1 was awarded."),
    ("notif-6", "sub-1", NotificationType.info, False, "2024-12-18T08:30:00",
     "New Project Available", "Luxury Hotel Plumbing Infrastructure is open for bidding."),
    ("notif-7", "sub-2", NotificationType.warning, True, "2024-12-17T13:15:00",
     "Bid Rejected", "Your bid for Downtown Office Complex was not selected."),
    ("notif-8", "sub-1", NotificationType.success, True, "2024-12-16T15:30:00",
     "Payment Received", "A payment was deposited to your account."),
    ("notif-9", "sup-1", NotificationType.info, False, "2024-12-18T12:15:00",
     "New Material Order", "A new material order was placed for Downtown Office Complex."),
    ("notif-10", "sup-1", NotificationType.info, True, "2024-12-17T10:45:00",
     "Delivery Scheduled", "Delivery for order ORD-2024-001 is scheduled."),
    ("notif-11", "sup-1", NotificationType.success, True, "2024-12-16T14:20:00",
     "Invoice Approved", "Invoice INV-2024-015 was approved for payment."),
    ("notif-12", "bank-1", NotificationType.info, False, "2024-12-18T13:45:00",
     "Loan Draw Request", "A draw request was submitted against loan LA-2024-001."),
    ("notif-13", "bank-1", NotificationType.warning, False, "2024-12-18T11:30:00",
     "Payment Authorization Required", "A large payment is waiting for authorization."),
    ("notif-14", "bank-1", NotificationType.success, True, "2024-12-17T09:00:00",
     "Loan Approved", "Loan LA-2024-002 was approved."),
    ("notif-15", "sub-2", NotificationType.info, True, "2024-12-15T08:00:00",
     "Welcome to CityBuild", "Your account is set up and ready to bid."),
]

# (id, applicant, project, lender, amount, type, rate, term, status, applied)
_LOANS = [
    ("loan-1", "gc-1", "proj-2", "bank-1", 1_200_000, LoanType.construction, 6.75, 36, LoanStatus.active, "2024-10-20"),
    ("loan-2", "gc-3", "proj-5", "bank-1", 800_000, LoanType.construction, 7.25, 24, LoanStatus.approved, "2024-12-02"),
    ("loan-3", "sub-6", None, "bank-2", 150_000, LoanType.equipment, 8.50, 48, LoanStatus.under_review, "2024-12-09"),
    ("loan-4", "gc-2", "proj-4", "bank-1", 300_000, LoanType.working_capital, 7.90, 12,
     LoanStatus.pending_documents, "2024-12-15"),
]

# (id, supplier, buyer, project, status, ordered, [(material, qty, unit, price)])
_ORDERS = [
    ("order-1", "sup-1", "gc-1", "proj-1", OrderStatus.confirmed, "2024-12-10",
     [("Concrete Mix", 200, "bags", 12.50), ("Rebar #4", 50, "pieces", 30.00)]),
    ("order-2", "sup-1", "gc-1", "proj-2", OrderStatus.delivered, "2024-11-25",
     [("Lumber 2x4", 500, "pieces", 6.00)]),
    ("order-3", "sup-1", "gc-3", "proj-5", OrderStatus.pending, "2024-12-16",
     [("Copper Pipe 3/4in", 500, "feet", 4.00)]),
    ("order-4", "sup-2", "gc-2", "proj-4", OrderStatus.processing, "2024-12-13",
     [("Electrical Wire 12AWG", 40, "rolls", 85.00)]),
    ("order-5", "sup-3", "gc-1", "proj-6", OrderStatus.cancelled, "2024-12-14",
     [("Drywall Sheet", 100, "sheets", 15.00)]),
]

# (id, project name, payer, recipient, amount, status, due, method, invoice)
_PAYMENTS = [
    ("pay-1", "Residential Complex Phase 1", "gc-1", "Mike Plumber", 95_000, PaymentStatus.completed,
     "2024-12-05", PaymentMethod.ach, "INV-2024-011"),
    ("pay-2", "Downtown Office Complex", "gc-1", "BuildMart Supply Co.", 4_000, PaymentStatus.pending,
     "2024-12-30", PaymentMethod.wire, "INV-2024-015"),
]

# (id, sku, name, category, stock, min, unit, price, supplier)
_INVENTORY = [
    ("inv-1", "CON-001", "Concrete Mix", "Concrete & Cement", 850, 100, "bags", 12.50, "sup-1"),
    ("inv-2", "REB-002", "Rebar #4", "Steel & Metal", 40, 50, "pieces", 8.75, "sup-1"),
    ("inv-3", "LUM-003", "Lumber 2x4", "Lumber & Wood", 0, 200, "pieces", 6.25, "sup-1"),
    ("inv-4", "ELE-004", "Electrical Wire 12AWG", "Electrical", 120, 20, "rolls", 89.00, "sup-2"),
]


def _mime(filename: str) -> str:
    return "application/dwg" if filename.endswith(".dwg") else "application/pdf"


def mock_users() -> List[User]:
    return [
        User(
            id=uid,
            email=email,
            phone=f"+1-555-0{i + 101:03d}",
            role=role,
            name=name,
            verified=True,
            created_at=_d(created),
        )
        for i, (uid, email, role, name, created) in enumerate(_USERS)
    ]


def mock_projects() -> List[Project]:
    projects = []
    file_no = 1
    for pid, name, gc, status, cost, timeline, created, updated, files in _PROJECTS:
        plan_files = []
        for fname in files:
            plan_files.append(
                PlanFile(
                    id=f"file-{file_no}",
                    name=fname,
                    type=_mime(fname),
                    size=2_400_000,
                    url=f"/mock/{fname}",
                    uploaded_at=_d(created),
                )
            )
            file_no += 1
        projects.append(
            Project(
                id=pid,
                name=name,
                description=f"{name} for {gc}",
                gc_id=gc,
                status=status,
                plan_files=plan_files,
                estimated_cost=cost,
                timeline=timeline,
                created_at=_d(created),
                updated_at=_d(updated),
            )
        )
    return projects


def mock_bids() -> List[Bid]:
    return [
        Bid(
            id=bid_id,
            project_id=pid,
            subcontractor_id=sub,
            amount=amount,
            timeline=timeline,
            description=f"Scope and pricing for {pid} over {timeline}",
            status=status,
            submitted_at=_d(submitted),
        )
        for bid_id, pid, sub, amount, timeline, status, submitted in _BIDS
    ]


def mock_notifications() -> List[Notification]:
    return [
        Notification(
            id=nid,
            title=title,
            message=message,
            type=ntype,
            read=read,
            created_at=_d(created),
            user_id=uid,
        )
        for nid, uid, ntype, read, created, title, message in _NOTIFICATIONS
    ]


def mock_loans() -> List[LoanApplication]:
    users = {u[0]: u for u in _USERS}
    project_names = {p[0]: p[1] for p in _PROJECTS}
    loans = []
    for i, (lid, applicant, pid, lender, amount, ltype, rate, term, status, applied) in enumerate(_LOANS):
        _, _, role, name, _ = users[applicant]
        applied_at = _d(applied)
        loans.append(
            LoanApplication(
                id=lid,
                application_number=f"LA-2024-{i + 1:03d}",
                applicant_id=applicant,
                applicant_name=name,
                applicant_type=role,
                project_id=pid,
                project_name=project_names.get(pid),
                loan_amount=amount,
                loan_type=ltype,
                interest_rate=rate,
                term_months=term,
                status=status,
                application_date=applied_at,
                expected_decision=applied_at + timedelta(days=15),
                purpose=f"{ltype.value.replace('_', ' ').title()} financing",
                lender_id=lender,
            )
        )
    return loans


def mock_orders() -> List[Order]:
    supplier_names = {u[0]: u[3] for u in _USERS}
    project_names = {p[0]: p[1] for p in _PROJECTS}
    return [
        Order(
            id=oid,
            order_number=f"ORD-2024-{i + 1:03d}",
            supplier_id=supplier,
            supplier_name=supplier_names[supplier],
            buyer_id=buyer,
            project_id=pid,
            project_name=project_names[pid],
            items=[
                OrderItem(name=name, quantity=qty, unit=unit, unit_price=price)
                for name, qty, unit, price in items
            ],
            status=status,
            order_date=_d(ordered),
            expected_delivery=_d(ordered) + timedelta(days=7),
        )
        for i, (oid, supplier, buyer, pid, status, ordered, items) in enumerate(_ORDERS)
    ]


def mock_payments() -> List[Payment]:
    return [
        Payment(
            id=pay_id,
            project_name=project,
            payer_id=payer,
            recipient=recipient,
            amount=amount,
            status=status,
            due_date=_d(due),
            payment_method=method,
            description="Progress payment",
            invoice_number=invoice,
        )
        for pay_id, project, payer, recipient, amount, status, due, method, invoice in _PAYMENTS
    ]


def mock_inventory() -> List[InventoryItem]:
    supplier_names = {u[0]: u[3] for u in _USERS}
    return [
        InventoryItem(
            id=iid,
            sku=sku,
            name=name,
            category=category,
            current_stock=stock,
            min_stock=min_stock,
            max_stock=min_stock * 10,
            unit=unit,
            unit_price=price,
            supplier=supplier_names[supplier],
            supplier_id=supplier,
        )
        for iid, sku, name, category, stock, min_stock, unit, price, supplier in _INVENTORY
    ]


def seed():
    from citybuild.core.config import get_settings
    from citybuild.services.data_seeder import DataSeeder
    from citybuild.services.local_storage import LocalStore

    store = LocalStore.from_settings(get_settings())
    DataSeeder(store).seed_initial_data()


if __name__ == "__main__":
    seed()
