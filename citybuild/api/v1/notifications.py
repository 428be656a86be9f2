# citybuild/api/v1/notifications.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from citybuild.core.auth_deps import get_current_principal
from citybuild.core.deps import get_mock_api
from citybuild.core.errors import MarketplaceError
from citybuild.core.http_errors import http_error
from citybuild.models.enums import NotificationType
from citybuild.policies.rbac import Principal
from citybuild.services.mock_api import MockApi

router = APIRouter(prefix="/notifications")


async def _ensure_recipient(api: MockApi, principal: Principal, notification_id: str) -> None:
    # the list is already scoped to the caller; a foreign id looks missing
    mine = await api.get_notifications(user_id=principal.user_id)
    if not any(n.id == notification_id for n in mine):
        raise HTTPException(status_code=404, detail="Notification not found")


@router.get("")
async def list_notifications(
    read: Optional[bool] = Query(default=None),
    type: Optional[NotificationType] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    notifications = await api.get_notifications(
        user_id=principal.user_id, read=read, type=type, limit=limit
    )
    unread = sum(1 for n in notifications if not n.read)
    return {
        "items": [n.to_json_dict() for n in notifications],
        "count": len(notifications),
        "unread": unread,
    }


@router.post("/read-all")
async def mark_all_read(
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    count = await api.mark_all_notifications_as_read(principal.user_id)
    return {"count": count}


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    await _ensure_recipient(api, principal, notification_id)
    try:
        notification = await api.mark_notification_as_read(notification_id)
    except MarketplaceError as e:
        raise http_error(e)
    return notification.to_json_dict()


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    await _ensure_recipient(api, principal, notification_id)
    try:
        await api.delete_notification(notification_id)
    except MarketplaceError as e:
        raise http_error(e)
