#citybuild/core/auth_deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from citybuild.core.security import decode_token
from citybuild.models.enums import UserRole
from citybuild.policies.rbac import Principal

bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Principal:
    """
    Canonical authentication dependency.

    Guarantees:
    - a bearer token is present and its signature / expiry are valid
    - sub and role claims are present
    - role is a valid UserRole
    """
    if creds is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    settings = getattr(request.app.state, "settings", None)
    try:
        payload = decode_token(creds.credentials, settings)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    user_id = payload.get("sub")
    role = payload.get("role")
    name = payload.get("name") or "Unknown"

    if not role or not user_id:
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    try:
        role_enum = UserRole(role)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid role in token.")

    principal = Principal(user_id=str(user_id), role=role_enum, name=str(name))

    # Make principal available to downstream middleware / handlers
    request.state.principal = principal

    return principal
