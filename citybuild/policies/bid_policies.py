from __future__ import annotations

from typing import Iterable

from citybuild.core.errors import ConflictError
from citybuild.models.enums import BidStatus, UserRole
from citybuild.policies.rbac import Principal
from citybuild.schemas.bids import Bid


def ensure_can_award(bid: Bid, project_bids: Iterable[Bid]) -> bool:
    """
    pending -> awarded. Returns False when the bid is already awarded
    (nothing to do), raises when the move is not allowed.

    At most one awarded bid per project.
    """
    if bid.status == BidStatus.awarded:
        return False
    if bid.status == BidStatus.rejected:
        raise ConflictError("A rejected bid cannot be awarded.")

    for other in project_bids:
        if other.id != bid.id and other.status == BidStatus.awarded:
            raise ConflictError(
                f"Project {bid.project_id} already has an awarded bid ({other.id})."
            )
    return True


def ensure_can_reject(bid: Bid) -> bool:
    """pending -> rejected. Rejecting twice is a no-op."""
    if bid.status == BidStatus.rejected:
        return False
    if bid.status == BidStatus.awarded:
        raise ConflictError("An awarded bid cannot be rejected.")
    return True


def ensure_can_clarify(bid: Bid) -> None:
    if bid.status != BidStatus.pending:
        raise ConflictError("Clarification can only be requested on a pending bid.")


def enforce_project_owner(principal: Principal, gc_id: str) -> None:
    if principal.role == UserRole.admin:
        return
    if principal.user_id != gc_id:
        raise PermissionError("Only the project's general contractor may do this.")


def enforce_bid_submitter(principal: Principal, subcontractor_id: str) -> None:
    """Subcontractors bid only as themselves."""
    if principal.role == UserRole.admin:
        return
    if principal.user_id != subcontractor_id:
        raise PermissionError("Bids may only be submitted on your own behalf.")
