# citybuild/api/v1/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from citybuild.core.auth_deps import get_current_principal
from citybuild.core.deps import get_mock_api
from citybuild.core.errors import MarketplaceError
from citybuild.core.http_errors import http_error
from citybuild.models.enums import UserRole
from citybuild.policies.rbac import Principal
from citybuild.schemas.users import UserUpdate
from citybuild.services.mock_api import MockApi

router = APIRouter(prefix="/users")


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        user = await api.get_user(user_id)
    except MarketplaceError as e:
        raise http_error(e)
    return user.to_json_dict()


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    if principal.user_id != user_id and principal.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="You may only update your own profile.")
    try:
        user = await api.update_user(user_id, body)
    except MarketplaceError as e:
        raise http_error(e)
    return user.to_json_dict()
