# citybuild/services/local_storage.py
from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from citybuild.core.config import Settings
from citybuild.db.kv_backends import KeyValueBackend, build_backend
from citybuild.models.enums import ProjectStatus, Theme
from citybuild.schemas.bids import Bid
from citybuild.schemas.commerce import InventoryItem, LoanApplication, Order, Payment
from citybuild.schemas.notifications import Notification
from citybuild.schemas.projects import Project
from citybuild.schemas.users import User

logger = logging.getLogger(__name__)

# (operation, key, exception)
StorageErrorCallback = Callable[[str, str, Exception], None]


class StorageKeys:
    USERS = "citybuild_users"
    PROJECTS = "citybuild_projects"
    BIDS = "citybuild_bids"
    NOTIFICATIONS = "citybuild_notifications"
    LOANS = "citybuild_loans"
    ORDERS = "citybuild_orders"
    PAYMENTS = "citybuild_payments"
    INVENTORY = "citybuild_inventory"
    CURRENT_USER = "citybuild_current_user"
    AUTH_TOKEN = "citybuild_auth_token"
    THEME = "citybuild_theme"
    SIDEBAR_STATE = "citybuild_sidebar_open"

    @classmethod
    def all(cls) -> List[str]:
        return [
            cls.USERS,
            cls.PROJECTS,
            cls.BIDS,
            cls.NOTIFICATIONS,
            cls.LOANS,
            cls.ORDERS,
            cls.PAYMENTS,
            cls.INVENTORY,
            cls.CURRENT_USER,
            cls.AUTH_TOKEN,
            cls.THEME,
            cls.SIDEBAR_STATE,
        ]


_ISO_DATETIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


def _json_safe(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def _revive_dates(value: Any) -> Any:
    """
    Any string that starts like an ISO-8601 timestamp comes back as a
    datetime. Strings that match the prefix but do not parse are kept.
    """
    if isinstance(value, str):
        if _ISO_DATETIME_PREFIX.match(value):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return value
        return value
    if isinstance(value, dict):
        return {k: _revive_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_revive_dates(v) for v in value]
    return value


class LocalStorageManager:
    """
    JSON get/set over a key/value backend.

    Contract: never raises. An unavailable backend yields defaults and
    no-op writes silently; any other failure is logged and passed to
    `on_error` so callers can tell "empty" from "read failed".
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        on_error: Optional[StorageErrorCallback] = None,
    ):
        self.backend = backend
        self.on_error = on_error

    @property
    def is_available(self) -> bool:
        return bool(getattr(self.backend, "available", True))

    def report(self, operation: str, key: str, exc: Exception) -> None:
        logger.error(
            "storage operation failed",
            extra={"operation": operation, "key": key, "error": str(exc)},
        )
        if self.on_error is not None:
            self.on_error(operation, key, exc)

    def get(self, key: str, default: Any) -> Any:
        if not self.is_available:
            return default
        try:
            raw = self.backend.get_item(key)
            if raw is None:
                return default
            return _revive_dates(json.loads(raw))
        except Exception as exc:
            self.report("get", key, exc)
            return default

    def set(self, key: str, value: Any) -> None:
        if not self.is_available:
            return
        try:
            self.backend.set_item(key, json.dumps(_json_safe(value)))
        except Exception as exc:
            self.report("set", key, exc)

    def remove(self, key: str) -> None:
        if not self.is_available:
            return
        try:
            self.backend.remove_item(key)
        except Exception as exc:
            self.report("remove", key, exc)

    def clear(self) -> None:
        """Removes only the marketplace keys, never foreign ones."""
        if not self.is_available:
            return
        for key in StorageKeys.all():
            self.remove(key)

    def has_data(self) -> bool:
        if not self.is_available:
            return False
        try:
            return any(self.backend.get_item(k) is not None for k in StorageKeys.all())
        except Exception as exc:
            self.report("has_data", "*", exc)
            return False


M = TypeVar("M", bound=BaseModel)


class _CollectionStorage(Generic[M]):
    key: str
    model: Type[M]

    def __init__(self, manager: LocalStorageManager):
        self.manager = manager
        self._adapter = TypeAdapter(List[self.model])

    def _load(self) -> List[M]:
        raw = self.manager.get(self.key, [])
        try:
            return self._adapter.validate_python(raw)
        except PydanticValidationError as exc:
            self.manager.report("decode", self.key, exc)
            return []

    def _save(self, items: List[M]) -> None:
        self.manager.set(self.key, list(items))

    def _upsert(self, item: M) -> None:
        items = self._load()
        for i, existing in enumerate(items):
            if existing.id == item.id:
                items[i] = item
                break
        else:
            items.append(item)
        self._save(items)

    def get_all(self) -> List[M]:
        return self._load()

    def set_all(self, items: List[M]) -> None:
        self._save(items)


class UserStorage(_CollectionStorage[User]):
    key = StorageKeys.USERS
    model = User

    def get_users(self) -> List[User]:
        return self._load()

    def set_users(self, users: List[User]) -> None:
        self._save(users)

    def add_user(self, user: User) -> None:
        self._upsert(user)

    def get_current_user(self) -> Optional[User]:
        raw = self.manager.get(StorageKeys.CURRENT_USER, None)
        if raw is None:
            return None
        try:
            return User.model_validate(raw)
        except PydanticValidationError as exc:
            self.manager.report("decode", StorageKeys.CURRENT_USER, exc)
            return None

    def set_current_user(self, user: Optional[User]) -> None:
        self.manager.set(StorageKeys.CURRENT_USER, user)

    def get_auth_token(self) -> Optional[str]:
        token = self.manager.get(StorageKeys.AUTH_TOKEN, None)
        return token if isinstance(token, str) else None

    def set_auth_token(self, token: Optional[str]) -> None:
        self.manager.set(StorageKeys.AUTH_TOKEN, token)

    def logout(self) -> None:
        self.set_current_user(None)
        self.set_auth_token(None)


class ProjectStorage(_CollectionStorage[Project]):
    key = StorageKeys.PROJECTS
    model = Project

    def get_projects(self) -> List[Project]:
        return self._load()

    def set_projects(self, projects: List[Project]) -> None:
        self._save(projects)

    def add_project(self, project: Project) -> None:
        self._upsert(project)

    def get_projects_by_gc(self, gc_id: str) -> List[Project]:
        return [p for p in self._load() if p.gc_id == gc_id]

    def get_projects_for_bidding(self) -> List[Project]:
        return [p for p in self._load() if p.status == ProjectStatus.bidding]


class BidStorage(_CollectionStorage[Bid]):
    key = StorageKeys.BIDS
    model = Bid

    def get_bids(self) -> List[Bid]:
        return self._load()

    def set_bids(self, bids: List[Bid]) -> None:
        self._save(bids)

    def add_bid(self, bid: Bid) -> None:
        self._upsert(bid)

    def get_bids_by_project(self, project_id: str) -> List[Bid]:
        return [b for b in self._load() if b.project_id == project_id]

    def get_bids_by_subcontractor(self, subcontractor_id: str) -> List[Bid]:
        return [b for b in self._load() if b.subcontractor_id == subcontractor_id]


class NotificationStorage(_CollectionStorage[Notification]):
    key = StorageKeys.NOTIFICATIONS
    model = Notification

    def __init__(self, manager: LocalStorageManager, retention_per_user: int = 100):
        super().__init__(manager)
        self.retention_per_user = retention_per_user

    def get_notifications(self) -> List[Notification]:
        return self._load()

    def set_notifications(self, notifications: List[Notification]) -> None:
        self._save(notifications)

    def add_notification(self, notification: Notification) -> None:
        """
        Newest first. Per user at most `retention_per_user` are kept;
        the oldest beyond that are dropped.
        """
        notifications = [n for n in self._load() if n.id != notification.id]
        notifications.insert(0, notification)

        mine = [n for n in notifications if n.user_id == notification.user_id]
        if len(mine) > self.retention_per_user:
            others = [n for n in notifications if n.user_id != notification.user_id]
            self._save(mine[: self.retention_per_user] + others)
        else:
            self._save(notifications)

    def get_notifications_by_user(self, user_id: str) -> List[Notification]:
        return [n for n in self._load() if n.user_id == user_id]

    def mark_as_read(self, notification_id: str) -> bool:
        notifications = self._load()
        for n in notifications:
            if n.id == notification_id:
                n.read = True
                self._save(notifications)
                return True
        return False

    def mark_all_as_read(self, user_id: str) -> int:
        notifications = self._load()
        count = 0
        for n in notifications:
            if n.user_id == user_id and not n.read:
                n.read = True
                count += 1
        if count:
            self._save(notifications)
        return count

    def remove_notification(self, notification_id: str) -> bool:
        notifications = self._load()
        kept = [n for n in notifications if n.id != notification_id]
        if len(kept) == len(notifications):
            return False
        self._save(kept)
        return True


class LoanStorage(_CollectionStorage[LoanApplication]):
    key = StorageKeys.LOANS
    model = LoanApplication

    def get_loans(self) -> List[LoanApplication]:
        return self._load()

    def set_loans(self, loans: List[LoanApplication]) -> None:
        self._save(loans)

    def add_loan(self, loan: LoanApplication) -> None:
        self._upsert(loan)

    def get_loans_by_lender(self, lender_id: str) -> List[LoanApplication]:
        return [l for l in self._load() if l.lender_id == lender_id]


class OrderStorage(_CollectionStorage[Order]):
    key = StorageKeys.ORDERS
    model = Order

    def get_orders(self) -> List[Order]:
        return self._load()

    def set_orders(self, orders: List[Order]) -> None:
        self._save(orders)

    def add_order(self, order: Order) -> None:
        self._upsert(order)

    def get_orders_by_supplier(self, supplier_id: str) -> List[Order]:
        return [o for o in self._load() if o.supplier_id == supplier_id]


class PaymentStorage(_CollectionStorage[Payment]):
    key = StorageKeys.PAYMENTS
    model = Payment

    def get_payments(self) -> List[Payment]:
        return self._load()

    def set_payments(self, payments: List[Payment]) -> None:
        self._save(payments)

    def add_payment(self, payment: Payment) -> None:
        self._upsert(payment)


class InventoryStorage(_CollectionStorage[InventoryItem]):
    key = StorageKeys.INVENTORY
    model = InventoryItem

    def get_inventory(self) -> List[InventoryItem]:
        return self._load()

    def set_inventory(self, items: List[InventoryItem]) -> None:
        self._save(items)

    def add_inventory_item(self, item: InventoryItem) -> None:
        self._upsert(item)

    def get_inventory_by_supplier(self, supplier_id: str) -> List[InventoryItem]:
        return [i for i in self._load() if i.supplier_id == supplier_id]


class AppStorage:
    """Scalar UI state, not collections."""

    def __init__(self, manager: LocalStorageManager):
        self.manager = manager

    def get_theme(self) -> Theme:
        raw = self.manager.get(StorageKeys.THEME, Theme.light.value)
        try:
            return Theme(raw)
        except ValueError as exc:
            self.manager.report("decode", StorageKeys.THEME, exc)
            return Theme.light

    def set_theme(self, theme: Theme) -> None:
        self.manager.set(StorageKeys.THEME, Theme(theme).value)

    def get_sidebar_state(self) -> bool:
        return bool(self.manager.get(StorageKeys.SIDEBAR_STATE, False))

    def set_sidebar_state(self, is_open: bool) -> None:
        self.manager.set(StorageKeys.SIDEBAR_STATE, bool(is_open))


class LocalStore:
    """All adapters over one manager."""

    COLLECTIONS = ("users", "projects", "bids", "notifications", "loans", "orders", "payments", "inventory")

    def __init__(self, manager: LocalStorageManager, *, notification_retention: int = 100):
        self.manager = manager
        self.users = UserStorage(manager)
        self.projects = ProjectStorage(manager)
        self.bids = BidStorage(manager)
        self.notifications = NotificationStorage(manager, notification_retention)
        self.loans = LoanStorage(manager)
        self.orders = OrderStorage(manager)
        self.payments = PaymentStorage(manager)
        self.inventory = InventoryStorage(manager)
        self.app = AppStorage(manager)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        on_error: Optional[StorageErrorCallback] = None,
    ) -> "LocalStore":
        manager = LocalStorageManager(build_backend(settings), on_error=on_error)
        return cls(manager, notification_retention=settings.notification_retention_per_user)

    def collection(self, name: str) -> _CollectionStorage:
        if name not in self.COLLECTIONS:
            raise KeyError(name)
        return getattr(self, name)
