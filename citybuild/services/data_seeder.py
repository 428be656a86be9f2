# citybuild/services/data_seeder.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from citybuild import seed as fixtures
from citybuild.core.errors import ValidationError
from citybuild.models.enums import Theme
from citybuild.schemas.bids import Bid
from citybuild.schemas.commerce import InventoryItem, LoanApplication, Order, Payment
from citybuild.schemas.notifications import Notification
from citybuild.schemas.projects import Project
from citybuild.schemas.users import User
from citybuild.services.data_generator import Dataset
from citybuild.services.local_storage import LocalStore

logger = logging.getLogger(__name__)

_USERS = TypeAdapter(List[User])
_PROJECTS = TypeAdapter(List[Project])
_BIDS = TypeAdapter(List[Bid])
_NOTIFICATIONS = TypeAdapter(List[Notification])
_LOANS = TypeAdapter(List[LoanApplication])
_ORDERS = TypeAdapter(List[Order])
_PAYMENTS = TypeAdapter(List[Payment])
_INVENTORY = TypeAdapter(List[InventoryItem])

# export / import sections, keyed like LocalStore attributes
_SECTIONS = {
    "users": _USERS,
    "projects": _PROJECTS,
    "bids": _BIDS,
    "notifications": _NOTIFICATIONS,
    "loans": _LOANS,
    "orders": _ORDERS,
    "payments": _PAYMENTS,
    "inventory": _INVENTORY,
}


class DataSeeder:
    def __init__(self, store: LocalStore):
        self.store = store

    def seed_initial_data(self) -> bool:
        """
        Writes the static fixtures, only when no marketplace key holds
        data yet. Returns True if anything was written.
        """
        if self.store.manager.has_data():
            return False
        if not self.store.manager.is_available:
            logger.warning("storage unavailable; skipping seed")
            return False

        self.store.users.set_users(fixtures.mock_users())
        self.store.projects.set_projects(fixtures.mock_projects())
        self.store.bids.set_bids(fixtures.mock_bids())
        self.store.notifications.set_notifications(fixtures.mock_notifications())
        self.store.loans.set_loans(fixtures.mock_loans())
        self.store.orders.set_orders(fixtures.mock_orders())
        self.store.payments.set_payments(fixtures.mock_payments())
        self.store.inventory.set_inventory(fixtures.mock_inventory())
        logger.info("initial data seeded")
        return True

    def clear_all_data(self) -> None:
        self.store.manager.clear()
        logger.info("all marketplace data cleared")

    def reset_to_initial_data(self) -> None:
        self.clear_all_data()
        self.seed_initial_data()

    def load_dataset(self, dataset: Dataset) -> None:
        """Replaces every collection with a generated dataset."""
        self.store.users.set_users(dataset.users)
        self.store.projects.set_projects(dataset.projects)
        self.store.bids.set_bids(dataset.bids)
        self.store.notifications.set_notifications(dataset.notifications)
        self.store.loans.set_loans(dataset.loans)
        self.store.orders.set_orders(dataset.orders)
        self.store.payments.set_payments(dataset.payments)
        self.store.inventory.set_inventory(dataset.inventory)
        logger.info(
            "dataset loaded",
            extra={
                "users": len(dataset.users),
                "projects": len(dataset.projects),
                "bids": len(dataset.bids),
                "notifications": len(dataset.notifications),
                "loans": len(dataset.loans),
                "orders": len(dataset.orders),
            },
        )

    def export_snapshot(self) -> Dict[str, Any]:
        current = self.store.users.get_current_user()
        return {
            "users": [u.to_json_dict() for u in self.store.users.get_users()],
            "projects": [p.to_json_dict() for p in self.store.projects.get_projects()],
            "bids": [b.to_json_dict() for b in self.store.bids.get_bids()],
            "notifications": [n.to_json_dict() for n in self.store.notifications.get_notifications()],
            "loans": [l.to_json_dict() for l in self.store.loans.get_loans()],
            "orders": [o.to_json_dict() for o in self.store.orders.get_orders()],
            "payments": [p.to_json_dict() for p in self.store.payments.get_payments()],
            "inventory": [i.to_json_dict() for i in self.store.inventory.get_inventory()],
            "currentUser": current.to_json_dict() if current else None,
            "theme": self.store.app.get_theme().value,
            "sidebarState": self.store.app.get_sidebar_state(),
            "exportedAt": datetime.now(timezone.utc).isoformat(),
        }

    def export_data(self) -> str:
        return json.dumps(self.export_snapshot(), indent=2)

    def import_data(self, json_data: str) -> None:
        """
        Every present section is validated before anything is written, so
        a bad payload leaves storage untouched.
        """
        try:
            data = json.loads(json_data)
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")

            sections = {
                name: adapter.validate_python(data[name])
                for name, adapter in _SECTIONS.items()
                if data.get(name)
            }
            current_user = User.model_validate(data["currentUser"]) if data.get("currentUser") else None
            theme = Theme(data["theme"]) if data.get("theme") else None
        except (ValueError, PydanticValidationError) as exc:
            logger.error("import failed", extra={"error": str(exc)})
            raise ValidationError("Invalid data format") from exc

        for name, items in sections.items():
            self.store.collection(name).set_all(items)
        if current_user is not None:
            self.store.users.set_current_user(current_user)
        if theme is not None:
            self.store.app.set_theme(theme)
        if data.get("sidebarState") is not None:
            self.store.app.set_sidebar_state(bool(data["sidebarState"]))
        logger.info("data imported")

