# citybuild/services/repositories.py
from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from citybuild.core.errors import ConflictError, NotFoundError
from citybuild.schemas.bids import Bid
from citybuild.schemas.commerce import InventoryItem, LoanApplication, Order, Payment
from citybuild.schemas.notifications import Notification
from citybuild.schemas.projects import Project
from citybuild.schemas.users import User
from citybuild.services.local_storage import LocalStore, _CollectionStorage

T = TypeVar("T", bound=BaseModel)


def _matches(item: BaseModel, filters: Optional[Mapping[str, Any]]) -> bool:
    """
    Exact match per field; a set/list/tuple value means "any of".
    None values are ignored.
    """
    if not filters:
        return True
    for field, expected in filters.items():
        if expected is None:
            continue
        actual = getattr(item, field, None)
        if isinstance(expected, (set, frozenset, list, tuple)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


class Repository(Generic[T]):
    """
    CRUD over one entity type. Every returned object is a copy; mutating
    it never changes what the repository holds.
    """

    model: Type[T]
    label: str = "Entity"

    def list(self, filters: Optional[Mapping[str, Any]] = None, limit: Optional[int] = None) -> List[T]:
        items = [i.model_copy(deep=True) for i in self._all() if _matches(i, filters)]
        if limit is not None:
            items = items[: max(limit, 0)]
        return items

    def find(self, predicate: Callable[[T], bool]) -> Optional[T]:
        for item in self._all():
            if predicate(item):
                return item.model_copy(deep=True)
        return None

    def get(self, item_id: str) -> T:
        for item in self._all():
            if item.id == item_id:
                return item.model_copy(deep=True)
        raise NotFoundError(f"{self.label} not found")

    def exists(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self._all())

    def create(self, item: T) -> T:
        if self.exists(item.id):
            raise ConflictError(f"{self.label} {item.id} already exists")
        self._put(item.model_copy(deep=True))
        return item.model_copy(deep=True)

    def update(self, item_id: str, patch: Mapping[str, Any]) -> T:
        current = self.get(item_id)
        data = current.model_dump()
        data.update({k: v for k, v in patch.items() if k != "id"})
        updated = self.model.model_validate(data)
        self._put(updated)
        return updated.model_copy(deep=True)

    def replace(self, item: T) -> T:
        if not self.exists(item.id):
            raise NotFoundError(f"{self.label} not found")
        self._put(item.model_copy(deep=True))
        return item.model_copy(deep=True)

    def delete(self, item_id: str) -> None:
        if not self._remove(item_id):
            raise NotFoundError(f"{self.label} not found")

    def count(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        return sum(1 for i in self._all() if _matches(i, filters))

    # -- backend hooks --

    def _all(self) -> List[T]:
        raise NotImplementedError

    def _put(self, item: T) -> None:
        raise NotImplementedError

    def _remove(self, item_id: str) -> bool:
        raise NotImplementedError


class InMemoryRepository(Repository[T]):
    def __init__(self, model: Type[T], label: str, items: Optional[Iterable[T]] = None):
        self.model = model
        self.label = label
        self._items: Dict[str, T] = {}
        for item in items or []:
            self._items[item.id] = item.model_copy(deep=True)

    def _all(self) -> List[T]:
        return list(self._items.values())

    def _put(self, item: T) -> None:
        self._items[item.id] = item

    def _remove(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None


class StorageRepository(Repository[T]):
    """
    Repository over one of the key/value collection adapters. The whole
    collection is read and written per operation (last write wins).
    """

    def __init__(self, storage: _CollectionStorage, label: str):
        self.storage = storage
        self.model = storage.model
        self.label = label

    def _all(self) -> List[T]:
        return self.storage._load()

    def _put(self, item: T) -> None:
        self.storage._upsert(item)

    def _remove(self, item_id: str) -> bool:
        items = self.storage._load()
        kept = [i for i in items if i.id != item_id]
        if len(kept) == len(items):
            return False
        self.storage._save(kept)
        return True


class NotificationRepository(StorageRepository[Notification]):
    """New notifications go through the adapter so the per-user cap applies."""

    def _put(self, item: Notification) -> None:
        if any(n.id == item.id for n in self.storage._load()):
            self.storage._upsert(item)
        else:
            self.storage.add_notification(item)


class Repositories:
    def __init__(
        self,
        *,
        users: Repository[User],
        projects: Repository[Project],
        bids: Repository[Bid],
        notifications: Repository[Notification],
        loans: Optional[Repository[LoanApplication]] = None,
        orders: Optional[Repository[Order]] = None,
        payments: Optional[Repository[Payment]] = None,
        inventory: Optional[Repository[InventoryItem]] = None,
    ):
        self.users = users
        self.projects = projects
        self.bids = bids
        self.notifications = notifications
        self.loans = loans if loans is not None else InMemoryRepository(LoanApplication, "Loan application")
        self.orders = orders if orders is not None else InMemoryRepository(Order, "Order")
        self.payments = payments if payments is not None else InMemoryRepository(Payment, "Payment")
        self.inventory = (
            inventory if inventory is not None else InMemoryRepository(InventoryItem, "Inventory item")
        )

    @classmethod
    def in_memory(
        cls,
        *,
        users: Iterable[User] = (),
        projects: Iterable[Project] = (),
        bids: Iterable[Bid] = (),
        notifications: Iterable[Notification] = (),
        loans: Iterable[LoanApplication] = (),
        orders: Iterable[Order] = (),
        payments: Iterable[Payment] = (),
        inventory: Iterable[InventoryItem] = (),
    ) -> "Repositories":
        return cls(
            users=InMemoryRepository(User, "User", users),
            projects=InMemoryRepository(Project, "Project", projects),
            bids=InMemoryRepository(Bid, "Bid", bids),
            notifications=InMemoryRepository(Notification, "Notification", notifications),
            loans=InMemoryRepository(LoanApplication, "Loan application", loans),
            orders=InMemoryRepository(Order, "Order", orders),
            payments=InMemoryRepository(Payment, "Payment", payments),
            inventory=InMemoryRepository(InventoryItem, "Inventory item", inventory),
        )

    @classmethod
    def from_store(cls, store: LocalStore) -> "Repositories":
        return cls(
            users=StorageRepository(store.users, "User"),
            projects=StorageRepository(store.projects, "Project"),
            bids=StorageRepository(store.bids, "Bid"),
            notifications=NotificationRepository(store.notifications, "Notification"),
            loans=StorageRepository(store.loans, "Loan application"),
            orders=StorageRepository(store.orders, "Order"),
            payments=StorageRepository(store.payments, "Payment"),
            inventory=StorageRepository(store.inventory, "Inventory item"),
        )
