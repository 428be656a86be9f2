# citybuild/services/data_generator.py
from __future__ import annotations

import random
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, Field

from citybuild.models.enums import (
    BidStatus,
    DocumentStatus,
    LoanStatus,
    LoanType,
    NotificationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProjectStatus,
    UserRole,
)
from citybuild.schemas.bids import Bid, ContractorSnapshot
from citybuild.schemas.commerce import (
    InventoryItem,
    LoanApplication,
    LoanDocument,
    Order,
    OrderItem,
    Payment,
)
from citybuild.schemas.notifications import Notification
from citybuild.schemas.projects import PlanFile, Project
from citybuild.schemas.users import User

T = TypeVar("T")


# ---------------------------------------------------------------------
# literal pools
# ---------------------------------------------------------------------

PROJECT_NAMES = [
    "Downtown Office Complex",
    "Residential Complex Phase 1",
    "Warehouse Renovation",
    "Smart Home Electrical Installation",
    "Commercial HVAC System Installation",
    "Luxury Hotel Plumbing Infrastructure",
    "Shopping Mall Renovation",
    "Hospital Wing Construction",
    "School District Modernization",
    "Industrial Park Development",
    "Mixed-Use Development",
    "Senior Living Community",
    "Data Center Construction",
    "Restaurant Chain Buildout",
    "Retail Store Renovation",
]

PROJECT_DESCRIPTIONS = [
    "Modern construction project with sustainable materials and energy-efficient systems",
    "Comprehensive renovation including structural improvements and modern amenities",
    "New construction featuring advanced technology integration and smart building systems",
    "Renovation project focusing on accessibility improvements and code compliance",
    "Commercial development with mixed-use spaces and community amenities",
]

COMPANY_NAMES = [
    "Elite Construction",
    "Premier Builders",
    "Skyline Development",
    "Urban Construction Co.",
    "Metropolitan Builders",
    "Pinnacle Construction",
    "Apex Building Group",
    "Summit Contractors",
    "Horizon Construction",
    "Vertex Builders",
]

TRADE_NAMES = {
    "plumbing": ["Plumbing", "Pipe Works", "Water Systems", "Drain Masters", "Flow Solutions"],
    "electrical": ["Electrical", "Power Systems", "Wiring Solutions", "Current Contractors", "Volt Masters"],
    "hvac": ["HVAC", "Climate Control", "Air Systems", "Comfort Solutions", "Temperature Masters"],
    "concrete": ["Concrete", "Foundation Works", "Solid Solutions", "Pour Masters", "Stone Works"],
    "roofing": ["Roofing", "Top Solutions", "Cover Masters", "Peak Contractors", "Shield Systems"],
    "flooring": ["Flooring", "Surface Solutions", "Ground Masters", "Level Contractors", "Base Systems"],
}

COMPANY_SUFFIXES = ["Inc.", "LLC", "Co.", "Solutions", "Services"]

SUPPLIER_NAMES = [
    "BuildMart Supply Co.",
    "Construction Supply Depot",
    "Premium Building Materials",
    "Industrial Supply Solutions",
    "Trade Materials Inc.",
    "Professional Building Supply",
    "Commercial Construction Materials",
    "Quality Building Products",
]

BANK_NAMES = [
    "First Construction Bank",
    "Builders Commercial Bank",
    "Development Finance Corp",
    "Construction Capital Bank",
    "Trade Finance Solutions",
    "Building Industry Bank",
]

BID_DESCRIPTIONS = [
    "Comprehensive installation including all materials, labor, and warranty coverage",
    "Professional service with premium materials and extended warranty options",
    "Complete system installation with energy-efficient components and smart controls",
    "Full-service solution including design, installation, and ongoing maintenance",
    "Expert installation with code compliance and quality assurance guarantees",
]

NOTIFICATION_TEMPLATES = {
    NotificationType.info: [
        ("New Project Available", "A new project matching your specialization is now available for bidding."),
        ("File Updated", "New project files have been uploaded and are ready for review."),
        ("System Maintenance", "Scheduled maintenance will occur tonight from 2-4 AM EST."),
    ],
    NotificationType.success: [
        ("Bid Awarded", "Congratulations! Your bid has been selected for the project."),
        ("Payment Processed", "Your payment has been successfully processed and deposited."),
        ("Project Completed", "Project has been marked as completed. Thank you for your work!"),
    ],
    NotificationType.warning: [
        ("Bid Deadline Approaching", "The bidding deadline for this project is in 24 hours."),
        ("Document Required", "Additional documentation is required to complete your application."),
        ("Payment Pending", "Your payment is pending approval and will be processed soon."),
    ],
    NotificationType.error: [
        ("Upload Failed", "File upload failed. Please try again or contact support."),
        ("Connection Error", "Unable to connect to server. Please check your internet connection."),
        ("Validation Error", "There was an error validating your submission. Please review and resubmit."),
    ],
}

PLAN_FILE_TYPES = [
    ("floor-plans.pdf", "application/pdf"),
    ("electrical-layout.dwg", "application/dwg"),
    ("site-plan.pdf", "application/pdf"),
    ("structural-drawings.dwg", "application/dwg"),
    ("specifications.pdf", "application/pdf"),
]

TIMELINES = [
    "2 weeks", "3 weeks", "4 weeks", "6 weeks", "8 weeks",
    "2 months", "3 months", "4 months", "6 months", "8 months",
    "10 months", "12 months", "14 months", "16 months", "18 months",
]

MATERIALS = [
    ("Concrete Mix", "bags", 12.50, "Concrete & Cement"),
    ("Rebar #4", "pieces", 8.75, "Steel & Metal"),
    ("Lumber 2x4", "pieces", 6.25, "Lumber & Wood"),
    ("Drywall Sheet", "sheets", 14.00, "Drywall & Insulation"),
    ("Copper Pipe 3/4in", "feet", 4.10, "Plumbing"),
    ("Electrical Wire 12AWG", "rolls", 89.00, "Electrical"),
]

USERS_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
BIDS_START = datetime(2024, 11, 1, tzinfo=timezone.utc)
NOTIFICATIONS_START = datetime(2024, 12, 1, tzinfo=timezone.utc)


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


# ---------------------------------------------------------------------
# dataset
# ---------------------------------------------------------------------


@dataclass
class DatasetOptions:
    num_gcs: int = 3
    num_subcontractors: int = 8
    num_suppliers: int = 3
    num_banks: int = 2
    projects_per_gc: int = 3
    bids_per_project: int = 3
    notifications_per_user: int = 5
    loans_per_bank: int = 3
    orders_per_supplier: int = 3
    payments_per_gc: int = 2
    inventory_per_supplier: int = 4


class Dataset(BaseModel):
    users: List[User] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    bids: List[Bid] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    loans: List[LoanApplication] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    inventory: List[InventoryItem] = Field(default_factory=list)


class DataGenerator:
    """
    Randomized but shape-valid entities for demos and tests.

    Pass `seed` (or an explicit `random.Random`) for reproducible output;
    `now` pins the upper bound of every generated date.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        seed: Optional[Union[int, str]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        if rng is None:
            rng = random.Random(seed)
        self.rng = rng
        self._now = now or (lambda: datetime.now(timezone.utc))

    # -----------------------------------------------------------------
    # random helpers
    # -----------------------------------------------------------------

    def _item(self, items: Sequence[T]) -> T:
        return items[self.rng.randrange(len(items))]

    def _shuffled(self, items: Sequence[T]) -> List[T]:
        out = list(items)
        self.rng.shuffle(out)
        return out

    def _date_between(self, start: datetime, end: Optional[datetime] = None) -> datetime:
        end = end or self._now()
        if end <= start:
            return start
        span = (end - start).total_seconds()
        return start + timedelta(seconds=self.rng.random() * span)

    def _timeline(self) -> str:
        return self._item(TIMELINES)

    # -----------------------------------------------------------------
    # entities
    # -----------------------------------------------------------------

    def generate_user(self, role: UserRole, index: int = 1) -> User:
        role = UserRole(role)

        if role == UserRole.gc:
            name = self._item(COMPANY_NAMES)
            email = f"contact@{_slug(name)}.com"
        elif role == UserRole.subcontractor:
            trade = self._item(list(TRADE_NAMES))
            trade_name = self._item(TRADE_NAMES[trade])
            name = f"{trade_name} {self._item(COMPANY_SUFFIXES)}"
            email = f"info@{_slug(trade_name)}.com"
        elif role == UserRole.supplier:
            name = self._item(SUPPLIER_NAMES)
            email = f"orders@{_slug(name)}.com"
        elif role == UserRole.bank:
            name = self._item(BANK_NAMES)
            email = f"commercial@{_slug(name)}.com"
        else:
            name = f"Platform Admin {index}"
            email = f"admin{index}@citybuild.example"

        return User(
            id=f"{role.value}-{index}",
            email=email,
            phone=f"+1-555-{self.rng.randrange(10000):04d}",
            role=role,
            name=name,
            verified=self.rng.random() > 0.1,  # ~90% verified
            created_at=self._date_between(USERS_START),
        )

    def _plan_files(self, project_index: int) -> List[PlanFile]:
        count = self.rng.randint(1, 3)
        picked = self._shuffled(PLAN_FILE_TYPES)[:count]
        return [
            PlanFile(
                id=f"file-{project_index}-{i + 1}",
                name=name,
                type=mime,
                size=self.rng.randrange(5_000_000) + 500_000,  # 500KB - 5.5MB
                url=f"/mock/{name}",
                uploaded_at=self._date_between(BIDS_START),
            )
            for i, (name, mime) in enumerate(picked)
        ]

    def generate_project(self, gc_id: str, index: int = 1) -> Project:
        created_at = self._date_between(USERS_START)
        return Project(
            id=f"proj-{index}",
            name=self._item(PROJECT_NAMES),
            description=self._item(PROJECT_DESCRIPTIONS),
            gc_id=gc_id,
            status=self._item(list(ProjectStatus)),
            plan_files=self._plan_files(index),
            estimated_cost=self.rng.randrange(5_000_000) + 100_000,  # $100k - $5.1M
            timeline=self._timeline(),
            created_at=created_at,
            updated_at=self._date_between(created_at),
        )

    def generate_bid(self, project_id: str, subcontractor_id: str, index: int = 1) -> Bid:
        return Bid(
            id=f"bid-{index}",
            project_id=project_id,
            subcontractor_id=subcontractor_id,
            amount=self.rng.randrange(500_000) + 10_000,  # $10k - $510k
            timeline=self._timeline(),
            description=self._item(BID_DESCRIPTIONS),
            status=self._item(list(BidStatus)),
            submitted_at=self._date_between(BIDS_START),
        )

    def generate_notification(self, user_id: str, index: int = 1) -> Notification:
        ntype = self._item(list(NotificationType))
        title, message = self._item(NOTIFICATION_TEMPLATES[ntype])
        return Notification(
            id=f"notif-{index}",
            title=title,
            message=message,
            type=ntype,
            read=self.rng.random() > 0.3,  # ~70% read
            created_at=self._date_between(NOTIFICATIONS_START),
            user_id=user_id,
        )

    def generate_contractor_snapshot(self, user: User) -> ContractorSnapshot:
        trades = self._shuffled(list(TRADE_NAMES))[: self.rng.randint(1, 3)]
        return ContractorSnapshot(
            id=user.id,
            name=user.name,
            rating=round(3.0 + self.rng.random() * 2.0, 1),
            completed_projects=self.rng.randint(5, 150),
            on_time_rate=self.rng.randint(75, 100),
            specializations=trades,
        )

    # -----------------------------------------------------------------
    # page-level entities
    # -----------------------------------------------------------------

    def generate_loan_application(
        self,
        applicant: User,
        index: int = 1,
        *,
        project: Optional[Project] = None,
        lender: Optional[User] = None,
    ) -> LoanApplication:
        applied = self._date_between(BIDS_START)
        return LoanApplication(
            id=f"loan-{index}",
            application_number=f"LA-{applied.year}-{index:03d}",
            applicant_id=applicant.id,
            applicant_name=applicant.name,
            applicant_type=applicant.role,
            project_id=project.id if project else None,
            project_name=project.name if project else None,
            loan_amount=self.rng.randrange(50, 500) * 10_000,
            loan_type=self._item(list(LoanType)),
            interest_rate=round(5.0 + self.rng.random() * 4.0, 2),
            term_months=self._item([12, 24, 36, 48, 60]),
            status=self._item(list(LoanStatus)),
            application_date=applied,
            expected_decision=applied + timedelta(days=15),
            purpose="Construction financing",
            credit_score=self.rng.randint(620, 820),
            annual_revenue=self.rng.randrange(500, 10_000) * 1_000,
            years_in_business=self.rng.randint(1, 30),
            documents=[
                LoanDocument(name=doc, status=self._item(list(DocumentStatus)))
                for doc in ("Financial Statements", "Tax Returns", "Construction Plans")
            ],
            lender_id=lender.id if lender else None,
        )

    def generate_order(
        self, supplier: User, index: int = 1, *, project: Optional[Project] = None
    ) -> Order:
        ordered = self._date_between(BIDS_START)
        items = [
            OrderItem(name=name, quantity=self.rng.randint(1, 200), unit=unit, unit_price=price)
            for name, unit, price, _ in self._shuffled(MATERIALS)[: self.rng.randint(1, 4)]
        ]
        return Order(
            id=f"order-{index}",
            order_number=f"ORD-{ordered.year}-{index:03d}",
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            buyer_id=project.gc_id if project else None,
            project_id=project.id if project else None,
            project_name=project.name if project else None,
            items=items,
            status=self._item(list(OrderStatus)),
            order_date=ordered,
            expected_delivery=ordered + timedelta(days=self.rng.randint(3, 21)),
        )

    def generate_payment(self, payer: User, recipient: User, index: int = 1) -> Payment:
        return Payment(
            id=f"pay-{index}",
            project_name=self._item(PROJECT_NAMES),
            payer_id=payer.id,
            recipient=recipient.name,
            amount=self.rng.randrange(1_000, 250_000),
            status=self._item(list(PaymentStatus)),
            due_date=self._date_between(NOTIFICATIONS_START),
            payment_method=self._item(list(PaymentMethod)),
            description="Progress payment",
            invoice_number=f"INV-{index:05d}",
        )

    def generate_inventory_item(self, supplier: User, index: int = 1) -> InventoryItem:
        name, unit, price, category = self._item(MATERIALS)
        min_stock = self.rng.randint(10, 100)
        return InventoryItem(
            id=f"inv-{index}",
            sku=f"{_slug(name)[:3].upper()}-{index:03d}",
            name=name,
            category=category,
            current_stock=self.rng.randint(0, 500),
            min_stock=min_stock,
            max_stock=min_stock * 10,
            unit=unit,
            unit_price=price,
            supplier=supplier.name,
            supplier_id=supplier.id,
            last_restocked=self._date_between(BIDS_START),
        )

    # -----------------------------------------------------------------
    # complete dataset
    # -----------------------------------------------------------------

    def generate_complete_dataset(self, options: Optional[DatasetOptions] = None) -> Dataset:
        """
        A referentially consistent graph: every project's gcId is a
        generated gc, every bid references a generated project and
        subcontractor, every notification a generated user. Commerce
        records (loans, orders, payments, inventory) point only at
        generated users and projects.
        """
        o = options or DatasetOptions()

        gcs = [self.generate_user(UserRole.gc, i + 1) for i in range(o.num_gcs)]
        subs = [self.generate_user(UserRole.subcontractor, i + 1) for i in range(o.num_subcontractors)]
        suppliers = [self.generate_user(UserRole.supplier, i + 1) for i in range(o.num_suppliers)]
        banks = [self.generate_user(UserRole.bank, i + 1) for i in range(o.num_banks)]
        users = gcs + subs + suppliers + banks

        projects: List[Project] = []
        project_index = 1
        for gc in gcs:
            for _ in range(o.projects_per_gc):
                projects.append(self.generate_project(gc.id, project_index))
                project_index += 1

        bids: List[Bid] = []
        bid_index = 1
        if subs and o.bids_per_project > 0:
            for project in projects:
                if project.status not in (ProjectStatus.bidding, ProjectStatus.awarded):
                    continue
                num_bids = self.rng.randint(1, o.bids_per_project)
                awarded = False
                for sub in self._shuffled(subs)[:num_bids]:
                    bid = self.generate_bid(project.id, sub.id, bid_index)
                    # at most one awarded bid per project
                    if bid.status == BidStatus.awarded:
                        if awarded:
                            bid.status = BidStatus.rejected
                        awarded = True
                    bids.append(bid)
                    bid_index += 1

        notifications: List[Notification] = []
        notification_index = 1
        for user in users:
            for _ in range(o.notifications_per_user):
                notifications.append(self.generate_notification(user.id, notification_index))
                notification_index += 1

        # commerce records hang off the generated users and projects
        applicants = gcs + subs
        loans: List[LoanApplication] = []
        if applicants:
            for bank in banks:
                for _ in range(o.loans_per_bank):
                    applicant = self._item(applicants)
                    own = [p for p in projects if p.gc_id == applicant.id]
                    loans.append(
                        self.generate_loan_application(
                            applicant,
                            len(loans) + 1,
                            project=self._item(own) if own else None,
                            lender=bank,
                        )
                    )

        orders: List[Order] = []
        inventory: List[InventoryItem] = []
        for supplier in suppliers:
            for _ in range(o.orders_per_supplier):
                project = self._item(projects) if projects else None
                orders.append(self.generate_order(supplier, len(orders) + 1, project=project))
            for _ in range(o.inventory_per_supplier):
                inventory.append(self.generate_inventory_item(supplier, len(inventory) + 1))

        payments: List[Payment] = []
        payees = subs + suppliers
        if payees:
            for gc in gcs:
                for _ in range(o.payments_per_gc):
                    payments.append(self.generate_payment(gc, self._item(payees), len(payments) + 1))

        return Dataset(
            users=users,
            projects=projects,
            bids=bids,
            notifications=notifications,
            loans=loans,
            orders=orders,
            payments=payments,
            inventory=inventory,
        )
