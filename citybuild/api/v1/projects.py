# citybuild/api/v1/projects.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from citybuild.core.auth_deps import get_current_principal
from citybuild.core.deps import get_mock_api
from citybuild.core.errors import MarketplaceError
from citybuild.core.http_errors import http_error
from citybuild.models.enums import FileCategory, ProjectStatus
from citybuild.policies.bid_policies import enforce_project_owner
from citybuild.policies.rbac import (
    ACTION_CREATE_PROJECT,
    ACTION_REVIEW_BIDS,
    ACTION_UPDATE_PROJECT,
    ACTION_UPLOAD_FILE,
    Principal,
    require_action,
)
from citybuild.schemas.projects import FileDescriptor, PlanFile, ProjectCreate, ProjectUpdate
from citybuild.services.mock_api import MockApi

router = APIRouter(prefix="/projects")


def _require(principal: Principal, action: str, gc_id: Optional[str] = None) -> None:
    try:
        require_action(principal, action)
        if gc_id is not None:
            enforce_project_owner(principal, gc_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("")
async def list_projects(
    gc_id: Optional[str] = Query(default=None, alias="gcId"),
    status: Optional[ProjectStatus] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    projects = await api.get_projects(gc_id=gc_id, status=status, limit=limit)
    return {"items": [p.to_json_dict() for p in projects], "count": len(projects)}


@router.post("", status_code=201)
async def create_project(
    body: ProjectCreate,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    _require(principal, ACTION_CREATE_PROJECT, body.gc_id)
    try:
        project = await api.create_project(body)
    except MarketplaceError as e:
        raise http_error(e)
    return project.to_json_dict()


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        project = await api.get_project(project_id)
    except MarketplaceError as e:
        raise http_error(e)
    return project.to_json_dict()


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        current = await api.get_project(project_id)
        _require(principal, ACTION_UPDATE_PROJECT, current.gc_id)
        project = await api.update_project(project_id, body)
    except MarketplaceError as e:
        raise http_error(e)
    return project.to_json_dict()


@router.post("/{project_id}/files", status_code=201)
async def upload_project_file(
    project_id: str,
    file: UploadFile = File(...),
    category: FileCategory = Form(default=FileCategory.plans),
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    content = await file.read()
    descriptor = FileDescriptor(
        name=file.filename or "upload",
        type=file.content_type or "application/octet-stream",
        size=len(content),
    )
    try:
        project = await api.get_project(project_id)
        _require(principal, ACTION_UPLOAD_FILE, project.gc_id)
        uploaded = await api.upload_file(descriptor)
        plan_file = PlanFile(
            id=uploaded.id,
            name=descriptor.name,
            type=descriptor.type,
            size=descriptor.size,
            url=uploaded.url,
            uploaded_at=datetime.now(timezone.utc),
            category=category,
        )
        project = await api.update_project(
            project_id, {"plan_files": project.plan_files + [plan_file]}
        )
    except MarketplaceError as e:
        raise http_error(e)
    return {"file": plan_file.to_json_dict(), "project": project.to_json_dict()}


@router.get("/{project_id}/bids/review")
async def review_bids(
    project_id: str,
    sort_by: str = Query(default="amount", alias="sortBy"),
    principal: Principal = Depends(get_current_principal),
    api: MockApi = Depends(get_mock_api),
):
    try:
        project = await api.get_project(project_id)
        _require(principal, ACTION_REVIEW_BIDS, project.gc_id)
        review = await api.get_bid_review(project_id, sort_by)
    except MarketplaceError as e:
        raise http_error(e)
    return review.to_json_dict()
