# citybuild/services/mock_api.py
from __future__ import annotations

import asyncio
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from citybuild.core.config import Settings, get_settings
from citybuild.core.errors import ConflictError, NotFoundError, ValidationError
from citybuild.core.security import create_access_token
from citybuild.models.enums import (
    BidStatus,
    LoanStatus,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
    OrderStatus,
    ProjectStatus,
    UserRole,
)
from citybuild.policies import bid_policies
from citybuild.schemas.bids import (
    Bid,
    BidCreate,
    BidReviewResponse,
    BidUpdate,
    BidWithContractor,
)
from citybuild.schemas.dashboard import (
    AdminDashboard,
    BankDashboard,
    DashboardData,
    GCDashboard,
    SubcontractorDashboard,
    SupplierDashboard,
)
from citybuild.schemas.notifications import Notification
from citybuild.schemas.projects import (
    FileDescriptor,
    Project,
    ProjectCreate,
    ProjectUpdate,
    UploadedFile,
)
from citybuild.schemas.users import AuthResponse, RegisterRequest, User, UserUpdate
from citybuild.services.bid_ranking import BidSortKey, bid_statistics, sort_bids
from citybuild.services.data_generator import DataGenerator
from citybuild.services.repositories import Repositories

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_TYPES = ("application/pdf", "application/dwg", "application/dxf")

# simulated latency per call, in milliseconds
DEFAULT_DELAY_MS = 500
REGISTER_DELAY_MS = 1000
CREATE_PROJECT_DELAY_MS = 1000
SUBMIT_BID_DELAY_MS = 1500
UPLOAD_DELAY_MS = 2000

_SIX_DIGITS = re.compile(r"^\d{6}$")


def _patch_dict(updates: Union[BaseModel, Mapping[str, Any], None]) -> Dict[str, Any]:
    if updates is None:
        return {}
    if isinstance(updates, BaseModel):
        return updates.model_dump(exclude_unset=True)
    return dict(updates)


class MockApi:
    """
    Simulated marketplace backend over injectable repositories.

    Every call awaits a fixed delay scaled by `latency_scale` (0 disables
    it). Failures raise NotFoundError / ConflictError / ValidationError.
    """

    def __init__(
        self,
        repos: Repositories,
        *,
        latency_scale: float = 1.0,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repos = repos
        self.latency_scale = latency_scale
        self.settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def _delay(self, ms: int = DEFAULT_DELAY_MS) -> None:
        await asyncio.sleep(max(ms * self.latency_scale, 0) / 1000)

    def _now(self) -> datetime:
        return self._clock()

    @staticmethod
    def _new_id(prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"

    def _token_for(self, user: User) -> str:
        return create_access_token(
            subject=user.id,
            claims={"role": user.role.value, "name": user.name},
            settings=self.settings,
        )

    def _notify(
        self,
        user_id: str,
        title: str,
        message: str,
        *,
        type: NotificationType = NotificationType.info,
        category: Optional[NotificationCategory] = None,
        priority: Optional[NotificationPriority] = None,
        action_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            id=self._new_id("notif"),
            title=title,
            message=message,
            type=type,
            read=False,
            created_at=self._now(),
            user_id=user_id,
            category=category,
            priority=priority,
            action_url=action_url,
            metadata=metadata,
        )
        return self.repos.notifications.create(notification)

    # ------------------------------------------------------------------
    # auth / users
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str = "") -> AuthResponse:
        await self._delay()
        # any password is accepted
        user = self.repos.users.find(lambda u: u.email.lower() == email.strip().lower())
        if user is None:
            raise NotFoundError("Invalid email or password")
        logger.info("user logged in", extra={"user_id": user.id})
        return AuthResponse(user=user, token=self._token_for(user))

    async def register(self, data: RegisterRequest) -> AuthResponse:
        await self._delay(REGISTER_DELAY_MS)
        email = data.email.strip()
        if self.repos.users.find(lambda u: u.email.lower() == email.lower()) is not None:
            raise ConflictError("Email already registered")

        user = User(
            id=self._new_id("user"),
            email=email,
            phone=data.phone,
            role=data.role,
            name=data.name,
            verified=False,
            created_at=self._now(),
        )
        user = self.repos.users.create(user)
        logger.info("user registered", extra={"user_id": user.id, "role": user.role.value})
        return AuthResponse(user=user, token=self._token_for(user))

    async def verify_phone(self, phone: str, code: str) -> bool:
        """Any six-digit code passes; the matching user becomes verified."""
        await self._delay()
        if not _SIX_DIGITS.match(code or ""):
            raise ValidationError("Invalid verification code")
        user = self.repos.users.find(lambda u: u.phone == phone)
        if user is not None and not user.verified:
            self.repos.users.update(user.id, {"verified": True})
        return True

    async def get_user(self, user_id: str) -> User:
        await self._delay()
        return self.repos.users.get(user_id)

    async def update_user(self, user_id: str, updates: Union[UserUpdate, Mapping[str, Any]]) -> User:
        await self._delay()
        patch = _patch_dict(updates)
        patch.pop("role", None)
        patch.pop("created_at", None)
        return self.repos.users.update(user_id, patch)

    # ------------------------------------------------------------------
    # projects
    # ------------------------------------------------------------------

    async def get_projects(
        self,
        gc_id: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
        limit: Optional[int] = None,
    ) -> List[Project]:
        await self._delay()
        projects = self.repos.projects.list({"gc_id": gc_id, "status": status})
        projects.sort(key=lambda p: p.created_at, reverse=True)
        return projects[:limit] if limit else projects

    async def get_project(self, project_id: str) -> Project:
        await self._delay()
        return self.repos.projects.get(project_id)

    async def create_project(self, data: ProjectCreate) -> Project:
        await self._delay(CREATE_PROJECT_DELAY_MS)
        now = self._now()
        project = Project(
            id=self._new_id("proj"),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        project = self.repos.projects.create(project)
        logger.info("project created", extra={"project_id": project.id, "gc_id": project.gc_id})
        return project

    async def update_project(
        self, project_id: str, updates: Union[ProjectUpdate, Mapping[str, Any]]
    ) -> Project:
        await self._delay()
        current = self.repos.projects.get(project_id)
        patch = _patch_dict(updates)
        for frozen in ("id", "gc_id", "created_at"):
            patch.pop(frozen, None)
        patch["updated_at"] = max(self._now(), current.created_at)
        return self.repos.projects.update(project_id, patch)

    # ------------------------------------------------------------------
    # bids
    # ------------------------------------------------------------------

    async def get_bids(
        self,
        project_id: Optional[str] = None,
        subcontractor_id: Optional[str] = None,
        status: Optional[BidStatus] = None,
        limit: Optional[int] = None,
    ) -> List[Bid]:
        await self._delay()
        bids = self.repos.bids.list(
            {"project_id": project_id, "subcontractor_id": subcontractor_id, "status": status}
        )
        bids.sort(key=lambda b: b.submitted_at, reverse=True)
        return bids[:limit] if limit else bids

    async def get_bid(self, bid_id: str) -> Bid:
        await self._delay()
        return self.repos.bids.get(bid_id)

    async def submit_bid(self, data: BidCreate) -> Bid:
        await self._delay(SUBMIT_BID_DELAY_MS)
        project = self.repos.projects.get(data.project_id)
        subcontractor = self.repos.users.get(data.subcontractor_id)
        if project.status != ProjectStatus.bidding:
            raise ConflictError(f"Project {project.id} is not accepting bids.")

        bid = Bid(
            id=self._new_id("bid"),
            status=BidStatus.pending,
            submitted_at=self._now(),
            **data.model_dump(),
        )
        bid = self.repos.bids.create(bid)

        self._notify(
            project.gc_id,
            "New Bid Received",
            f"{subcontractor.name} submitted a bid of ${bid.amount:,.0f} for {project.name}.",
            category=NotificationCategory.bid,
            action_url=f"/projects/{project.id}/bids",
            metadata={"bidId": bid.id, "projectId": project.id},
        )
        logger.info("bid submitted", extra={"bid_id": bid.id, "project_id": project.id})
        return bid

    async def update_bid(self, bid_id: str, updates: Union[BidUpdate, Mapping[str, Any]]) -> Bid:
        """
        Field edits are only accepted while the bid is pending. A status
        change is checked against pending -> awarded | rejected.
        """
        await self._delay()
        current = self.repos.bids.get(bid_id)
        patch = _patch_dict(updates)
        for frozen in ("id", "project_id", "subcontractor_id", "submitted_at"):
            patch.pop(frozen, None)

        if current.status != BidStatus.pending and any(k != "status" for k in patch):
            raise ConflictError(f"Bid is {current.status.value}; only a pending bid can be edited.")

        new_status = patch.get("status")
        if new_status is not None and BidStatus(new_status) != current.status:
            new_status = BidStatus(new_status)
            if new_status == BidStatus.awarded:
                bid_policies.ensure_can_award(current, self.repos.bids.list({"project_id": current.project_id}))
            elif new_status == BidStatus.rejected:
                bid_policies.ensure_can_reject(current)
            else:
                raise ConflictError("A decided bid cannot return to pending.")

        return self.repos.bids.update(bid_id, patch)

    async def award_bid(self, bid_id: str) -> Bid:
        """
        Awards the bid, moves the project to `awarded` and notifies the
        subcontractor. Awarding the already-awarded bid returns it unchanged.
        """
        await self._delay()
        bid = self.repos.bids.get(bid_id)
        siblings = self.repos.bids.list({"project_id": bid.project_id})
        if not bid_policies.ensure_can_award(bid, siblings):
            return bid

        bid = self.repos.bids.update(bid_id, {"status": BidStatus.awarded})
        project = self.repos.projects.get(bid.project_id)
        self.repos.projects.update(
            project.id,
            {"status": ProjectStatus.awarded, "updated_at": max(self._now(), project.created_at)},
        )
        self._notify(
            bid.subcontractor_id,
            "Bid Awarded",
            f"Congratulations! Your bid for {project.name} has been awarded.",
            type=NotificationType.success,
            category=NotificationCategory.bid,
            priority=NotificationPriority.high,
            action_url=f"/bids/{bid.id}",
            metadata={"bidId": bid.id, "projectId": project.id},
        )
        logger.info("bid awarded", extra={"bid_id": bid.id, "project_id": project.id})
        return bid

    async def reject_bid(self, bid_id: str, feedback: Optional[str] = None) -> Bid:
        await self._delay()
        bid = self.repos.bids.get(bid_id)
        if not bid_policies.ensure_can_reject(bid):
            return bid

        bid = self.repos.bids.update(bid_id, {"status": BidStatus.rejected})
        project = self.repos.projects.get(bid.project_id)
        message = f"Your bid for {project.name} was not selected."
        if feedback:
            message = f"{message} Feedback: {feedback}"
        self._notify(
            bid.subcontractor_id,
            "Bid Rejected",
            message,
            type=NotificationType.warning,
            category=NotificationCategory.bid,
            action_url=f"/bids/{bid.id}",
            metadata={"bidId": bid.id, "projectId": project.id},
        )
        logger.info("bid rejected", extra={"bid_id": bid.id, "project_id": project.id})
        return bid

    async def request_clarification(self, bid_id: str, message: str) -> Notification:
        await self._delay()
        bid = self.repos.bids.get(bid_id)
        bid_policies.ensure_can_clarify(bid)
        if not message or not message.strip():
            raise ValidationError("Clarification message must not be blank.")
        project = self.repos.projects.get(bid.project_id)
        return self._notify(
            bid.subcontractor_id,
            "Clarification Requested",
            f"{project.name}: {message.strip()}",
            category=NotificationCategory.message,
            priority=NotificationPriority.medium,
            action_url=f"/bids/{bid.id}",
            metadata={"bidId": bid.id, "projectId": project.id},
        )

    async def get_bid_review(
        self, project_id: str, sort_by: Union[str, BidSortKey] = BidSortKey.amount
    ) -> BidReviewResponse:
        """Bids for a project with contractor snapshots, sorted, plus aggregates."""
        await self._delay()
        self.repos.projects.get(project_id)
        enriched: List[BidWithContractor] = []
        for bid in self.repos.bids.list({"project_id": project_id}):
            try:
                contractor = self.repos.users.get(bid.subcontractor_id)
            except NotFoundError:
                logger.warning(
                    "bid references unknown subcontractor",
                    extra={"bid_id": bid.id, "subcontractor_id": bid.subcontractor_id},
                )
                continue
            # seeded per contractor so the snapshot is stable across calls
            snapshot = DataGenerator(seed=contractor.id).generate_contractor_snapshot(contractor)
            enriched.append(BidWithContractor(contractor=snapshot, **bid.model_dump()))

        ranked = sort_bids(enriched, sort_by)
        return BidReviewResponse(
            project_id=project_id,
            sort_by=BidSortKey(sort_by).value,
            bids=ranked,
            statistics=bid_statistics(ranked),
        )

    # ------------------------------------------------------------------
    # notifications
    # ------------------------------------------------------------------

    async def get_notifications(
        self,
        user_id: Optional[str] = None,
        read: Optional[bool] = None,
        type: Optional[NotificationType] = None,
        limit: Optional[int] = None,
    ) -> List[Notification]:
        await self._delay()
        notifications = self.repos.notifications.list({"user_id": user_id, "read": read, "type": type})
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications[:limit] if limit else notifications

    async def mark_notification_as_read(self, notification_id: str) -> Notification:
        await self._delay()
        return self.repos.notifications.update(notification_id, {"read": True})

    async def mark_all_notifications_as_read(self, user_id: str) -> int:
        await self._delay()
        count = 0
        for n in self.repos.notifications.list({"user_id": user_id, "read": False}):
            self.repos.notifications.update(n.id, {"read": True})
            count += 1
        return count

    async def delete_notification(self, notification_id: str) -> None:
        await self._delay()
        self.repos.notifications.delete(notification_id)

    # ------------------------------------------------------------------
    # files
    # ------------------------------------------------------------------

    async def upload_file(self, descriptor: FileDescriptor) -> UploadedFile:
        """Validates type and size only; bytes are not kept."""
        await self._delay(UPLOAD_DELAY_MS)
        if descriptor.type not in ALLOWED_UPLOAD_TYPES:
            raise ValidationError(
                "Invalid file type. Only PDF, DWG, and DXF files are allowed.",
                code="unsupported_media_type",
            )
        max_bytes = self.settings.upload_max_bytes
        if descriptor.size > max_bytes:
            raise ValidationError(
                f"File size too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
                code="too_large",
            )
        return UploadedFile(
            id=self._new_id("file"),
            url=f"/mock/uploads/{descriptor.name}",
        )

    # ------------------------------------------------------------------
    # dashboards
    # ------------------------------------------------------------------

    async def get_dashboard_data(self, user_id: str, role: Optional[UserRole] = None) -> DashboardData:
        await self._delay()
        user = self.repos.users.get(user_id)
        role = UserRole(role) if role is not None else user.role

        if role == UserRole.gc:
            projects = self.repos.projects.list({"gc_id": user_id})
            project_ids = {p.id for p in projects}
            bids = self.repos.bids.list({"project_id": project_ids})
            bids.sort(key=lambda b: b.submitted_at, reverse=True)
            return GCDashboard(
                projects=projects,
                total_projects=len(projects),
                active_projects=sum(1 for p in projects if p.status == ProjectStatus.active),
                total_bids=len(bids),
                pending_bids=sum(1 for b in bids if b.status == BidStatus.pending),
                recent_activity=bids[:5],
            )

        if role == UserRole.subcontractor:
            bids = self.repos.bids.list({"subcontractor_id": user_id})
            bids.sort(key=lambda b: b.submitted_at, reverse=True)
            awarded = [b for b in bids if b.status == BidStatus.awarded]
            available = self.repos.projects.list({"status": ProjectStatus.bidding})
            available.sort(key=lambda p: p.created_at, reverse=True)
            return SubcontractorDashboard(
                bids=bids,
                total_bids=len(bids),
                awarded_bids=len(awarded),
                pending_bids=sum(1 for b in bids if b.status == BidStatus.pending),
                rejected_bids=sum(1 for b in bids if b.status == BidStatus.rejected),
                available_projects=available[:10],
                total_earnings=sum(b.amount for b in awarded),
            )

        if role == UserRole.supplier:
            orders = self.repos.orders.list({"supplier_id": user_id})
            live = [o for o in orders if o.status != OrderStatus.cancelled]
            return SupplierDashboard(
                orders=orders,
                total_orders=len(orders),
                pending_orders=sum(1 for o in orders if o.status == OrderStatus.pending),
                completed_orders=sum(1 for o in orders if o.status == OrderStatus.delivered),
                total_revenue=sum(o.total_amount for o in live),
            )

        if role == UserRole.bank:
            loans = self.repos.loans.list({"lender_id": user_id})
            active = [l for l in loans if l.status in (LoanStatus.active, LoanStatus.approved)]
            return BankDashboard(
                loans=loans,
                total_loans=len(loans),
                active_loans=len(active),
                total_amount=sum(l.loan_amount for l in active),
                pending_approvals=sum(
                    1
                    for l in loans
                    if l.status in (LoanStatus.pending_documents, LoanStatus.under_review)
                ),
            )

        return AdminDashboard(
            total_users=self.repos.users.count(),
            total_projects=self.repos.projects.count(),
            total_bids=self.repos.bids.count(),
            unread_notifications=self.repos.notifications.count({"read": False}),
        )
