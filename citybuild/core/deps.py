# citybuild/core/deps.py
from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from citybuild.core.config import Settings
from citybuild.services.local_storage import LocalStore
from citybuild.services.mock_api import MockApi


def get_mock_api(request: Request) -> MockApi:
    return request.app.state.mock_api


def get_store(request: Request) -> LocalStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_dev(settings: Settings = Depends(get_app_settings)) -> None:
    """Dev tooling routes exist only outside production."""
    if not settings.is_dev:
        raise HTTPException(status_code=404, detail="Not Found")
