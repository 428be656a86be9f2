#citybuild/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from citybuild.core.auth_deps import get_current_principal
from citybuild.core.deps import get_mock_api
from citybuild.core.errors import MarketplaceError, NotFoundError
from citybuild.core.http_errors import http_error
from citybuild.policies.rbac import Principal
from citybuild.schemas.users import LoginRequest, RegisterRequest, VerifyPhoneRequest
from citybuild.services.mock_api import MockApi

router = APIRouter(prefix="/auth")


@router.post("/login")
async def login(req: LoginRequest, api: MockApi = Depends(get_mock_api)):
    try:
        auth = await api.login(req.email, req.password)
    except NotFoundError:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return auth.to_json_dict()


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, api: MockApi = Depends(get_mock_api)):
    try:
        auth = await api.register(req)
    except MarketplaceError as e:
        raise http_error(e)
    return auth.to_json_dict()


@router.post("/verify-phone")
async def verify_phone(req: VerifyPhoneRequest, api: MockApi = Depends(get_mock_api)):
    try:
        ok = await api.verify_phone(req.phone, req.code)
    except MarketplaceError as e:
        raise http_error(e)
    return {"success": ok}


@router.get("/me")
async def get_me(
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        user = await api.get_user(principal.user_id)
    except NotFoundError:
        # token outlived the account (e.g. after a data reset)
        raise HTTPException(status_code=401, detail="Unknown user.")
    return user.to_json_dict()
