# citybuild/api/v1/dashboard.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from citybuild.core.auth_deps import get_current_principal
from citybuild.core.deps import get_mock_api
from citybuild.core.errors import MarketplaceError
from citybuild.core.http_errors import http_error
from citybuild.policies.rbac import Principal
from citybuild.services.mock_api import MockApi

router = APIRouter(prefix="/dashboard")


@router.get("")
async def get_dashboard(
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        data = await api.get_dashboard_data(principal.user_id, principal.role)
    except MarketplaceError as e:
        raise http_error(e)
    return {"role": principal.role.value, "data": data.to_json_dict()}
