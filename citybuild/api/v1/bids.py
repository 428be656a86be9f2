# citybuild/api/v1/bids.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from citybuild.core.auth_deps import get_current_principal
from citybuild.core.deps import get_mock_api
from citybuild.core.errors import MarketplaceError
from citybuild.core.http_errors import http_error
from citybuild.models.enums import BidStatus
from citybuild.policies.bid_policies import enforce_bid_submitter, enforce_project_owner
from citybuild.policies.rbac import ACTION_REVIEW_BIDS, ACTION_SUBMIT_BID, Principal, require_action
from citybuild.schemas.bids import BidCreate, BidRejectRequest, BidUpdate, ClarificationRequest
from citybuild.services.mock_api import MockApi

router = APIRouter(prefix="/bids")


async def _ensure_reviewer(api: MockApi, principal: Principal, bid_id: str) -> None:
    """Only the GC who owns the bid's project decides on it."""
    bid = await api.get_bid(bid_id)
    project = await api.get_project(bid.project_id)
    require_action(principal, ACTION_REVIEW_BIDS)
    enforce_project_owner(principal, project.gc_id)


@router.get("")
async def list_bids(
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    subcontractor_id: Optional[str] = Query(default=None, alias="subcontractorId"),
    status: Optional[BidStatus] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    bids = await api.get_bids(
        project_id=project_id, subcontractor_id=subcontractor_id, status=status, limit=limit
    )
    return {"items": [b.to_json_dict() for b in bids], "count": len(bids)}


@router.post("", status_code=201)
async def submit_bid(
    body: BidCreate,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        require_action(principal, ACTION_SUBMIT_BID)
        enforce_bid_submitter(principal, body.subcontractor_id)
        bid = await api.submit_bid(body)
    except (MarketplaceError, PermissionError) as e:
        raise http_error(e)
    return bid.to_json_dict()


@router.get("/{bid_id}")
async def get_bid(
    bid_id: str,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        bid = await api.get_bid(bid_id)
    except MarketplaceError as e:
        raise http_error(e)
    return bid.to_json_dict()


@router.patch("/{bid_id}")
async def update_bid(
    bid_id: str,
    body: BidUpdate,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    if body.status is not None:
        raise HTTPException(status_code=422, detail="Use award/reject to change bid status.")
    try:
        current = await api.get_bid(bid_id)
        enforce_bid_submitter(principal, current.subcontractor_id)
        bid = await api.update_bid(bid_id, body)
    except (MarketplaceError, PermissionError) as e:
        raise http_error(e)
    return bid.to_json_dict()


@router.post("/{bid_id}/award")
async def award_bid(
    bid_id: str,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        await _ensure_reviewer(api, principal, bid_id)
        bid = await api.award_bid(bid_id)
    except (MarketplaceError, PermissionError) as e:
        raise http_error(e)
    return bid.to_json_dict()


@router.post("/{bid_id}/reject")
async def reject_bid(
    bid_id: str,
    body: Optional[BidRejectRequest] = None,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        await _ensure_reviewer(api, principal, bid_id)
        bid = await api.reject_bid(bid_id, body.feedback if body else None)
    except (MarketplaceError, PermissionError) as e:
        raise http_error(e)
    return bid.to_json_dict()


@router.post("/{bid_id}/clarify", status_code=201)
async def request_clarification(
    bid_id: str,
    body: ClarificationRequest,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        await _ensure_reviewer(api, principal, bid_id)
        notification = await api.request_clarification(bid_id, body.message)
    except (MarketplaceError, PermissionError) as e:
        raise http_error(e)
    return notification.to_json_dict()
