from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field, model_validator

from citybuild.models.enums import (
    NotificationCategory,
    NotificationPriority,
    NotificationType,
)
from citybuild.schemas.primitives import CamelModel, UtcDatetime


class Notification(CamelModel):
    """
    Canonical notification record.

    The notification center historically used `isRead` plus
    priority/category; storage and the API used `read`. Both are folded
    into this one shape: `isRead` is accepted on input and mapped onto
    `read`, priority/category are optional.
    """

    id: str = Field(..., min_length=1)
    title: str
    message: str
    type: NotificationType = NotificationType.info
    read: bool = False
    created_at: UtcDatetime
    user_id: str

    priority: Optional[NotificationPriority] = None
    category: Optional[NotificationCategory] = None
    action_url: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_is_read(cls, data: Any) -> Any:
        if isinstance(data, dict) and "isRead" in data and "read" not in data:
            data = dict(data)
            data["read"] = bool(data.pop("isRead"))
        return data
