#citybuild/policies/rbac.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Set

from citybuild.models.enums import UserRole


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: UserRole
    name: str


# --- Core action constants ---
ACTION_CREATE_PROJECT = "CREATE_PROJECT"
ACTION_UPDATE_PROJECT = "UPDATE_PROJECT"
ACTION_UPLOAD_FILE = "UPLOAD_FILE"
ACTION_SUBMIT_BID = "SUBMIT_BID"
ACTION_REVIEW_BIDS = "REVIEW_BIDS"

_GC_ACTIONS = {
    ACTION_CREATE_PROJECT,
    ACTION_UPDATE_PROJECT,
    ACTION_UPLOAD_FILE,
    ACTION_REVIEW_BIDS,
}


def allowed_actions(role: UserRole) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    Ownership checks live in bid_policies.
    """

    if role == UserRole.gc:
        return set(_GC_ACTIONS)

    if role == UserRole.subcontractor:
        return {ACTION_SUBMIT_BID}

    if role == UserRole.admin:
        return _GC_ACTIONS | {ACTION_SUBMIT_BID}

    # suppliers and banks only read
    return set()


def require_action(principal: Principal, action: str) -> None:
    if action not in allowed_actions(principal.role):
        raise PermissionError(
            f"Role {principal.role.value} not permitted for action {action}."
        )
