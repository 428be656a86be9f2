import asyncio
import re

import pytest

from citybuild.core.errors import ConflictError, NotFoundError, ValidationError
from citybuild.core.security import decode_token
from citybuild.db.kv_backends import MemoryBackend
from citybuild.models.enums import BidStatus, NotificationType, ProjectStatus, UserRole
from citybuild.schemas.bids import BidCreate
from citybuild.schemas.projects import FileDescriptor, ProjectCreate
from citybuild.schemas.users import RegisterRequest
from citybuild.services import mock_api as mock_api_module
from citybuild.services.data_seeder import DataSeeder
from citybuild.services.local_storage import LocalStorageManager, LocalStore
from citybuild.services.mock_api import MockApi
from citybuild.services.repositories import Repositories
from citybuild.seed import mock_bids, mock_notifications, mock_projects, mock_users


def run(coro):
    return asyncio.run(coro)


def test_login_any_password_and_token_claims(api, settings):
    auth = run(api.login("john.contractor@example.com", "whatever"))

    assert auth.user.id == "gc-1"
    claims = decode_token(auth.token, settings)
    assert claims["sub"] == "gc-1"
    assert claims["role"] == "gc"


def test_login_unknown_email(api):
    with pytest.raises(NotFoundError):
        run(api.login("nobody@example.com", "x"))


def test_register_new_user_unverified_and_rejects_duplicate(api):
    auth = run(api.register(RegisterRequest(email="new@example.com", role=UserRole.supplier, name="New Co")))
    assert auth.user.verified is False
    assert run(api.get_user(auth.user.id)).email == "new@example.com"

    with pytest.raises(ConflictError):
        run(api.register(RegisterRequest(email="new@example.com", role=UserRole.gc, name="Again")))


def test_verify_phone(api):
    assert run(api.verify_phone("+1-555-0101", "123456")) is True
    for bad in ("12345", "abcdef", "1234567"):
        with pytest.raises(ValidationError):
            run(api.verify_phone("+1-555-0101", bad))


def test_update_user_keeps_role(api):
    user = run(api.update_user("sub-1", {"name": "Mike P.", "role": "admin"}))
    assert user.name == "Mike P."
    assert user.role == UserRole.subcontractor


def test_get_projects_sorted_by_recency_then_limited(api):
    projects = run(api.get_projects(gc_id="gc-1"))
    assert [p.id for p in projects] == ["proj-6", "proj-3", "proj-1", "proj-2"]

    top = run(api.get_projects(status=ProjectStatus.bidding, limit=2))
    assert [p.id for p in top] == ["proj-5", "proj-6"]


def test_get_project_not_found(api):
    with pytest.raises(NotFoundError, match="Project not found"):
        run(api.get_project("proj-404"))


def test_create_and_update_project(api):
    created = run(
        api.create_project(
            ProjectCreate(name="Clinic", description="Two-storey clinic", gc_id="gc-2", status=ProjectStatus.bidding)
        )
    )
    assert created.created_at == created.updated_at

    updated = run(api.update_project(created.id, {"timeline": "9 months"}))
    assert updated.timeline == "9 months"
    assert updated.updated_at >= created.updated_at
    assert updated.created_at == created.created_at


def test_get_bids_filters_and_order(api):
    bids = run(api.get_bids(project_id="proj-1"))
    assert [b.id for b in bids] == ["bid-4", "bid-3", "bid-2", "bid-1"]

    pending = run(api.get_bids(subcontractor_id="sub-2", status=BidStatus.pending))
    assert {b.id for b in pending} == {"bid-2", "bid-7", "bid-9"}


def test_submit_bid_notifies_gc(api):
    bid = run(
        api.submit_bid(
            BidCreate(project_id="proj-4", subcontractor_id="sub-5", amount=48_000, timeline="5 weeks", description="HVAC tie-in")
        )
    )

    assert bid.status == BidStatus.pending
    gc_notes = run(api.get_notifications(user_id="gc-2"))
    assert gc_notes[0].title == "New Bid Received"
    assert gc_notes[0].metadata["bidId"] == bid.id


def test_submit_bid_on_closed_project(api):
    with pytest.raises(ConflictError):
        run(api.submit_bid(BidCreate(project_id="proj-2", subcontractor_id="sub-5", amount=1, timeline="1 week", description="x")))


def test_submit_bid_unknown_project(api):
    with pytest.raises(NotFoundError):
        run(api.submit_bid(BidCreate(project_id="proj-99", subcontractor_id="sub-5", amount=1, timeline="1 week", description="x")))


def test_award_is_exclusive_per_project(api):
    # proj-1 already has bid-3 awarded
    with pytest.raises(ConflictError):
        run(api.award_bid("bid-1"))

    again = run(api.award_bid("bid-3"))
    assert again.status == BidStatus.awarded


def test_award_moves_project_and_notifies(api):
    bid = run(api.award_bid("bid-9"))

    assert bid.status == BidStatus.awarded
    assert run(api.get_project("proj-4")).status == ProjectStatus.awarded
    notes = run(api.get_notifications(user_id="sub-2", read=False))
    assert notes[0].title == "Bid Awarded"
    assert notes[0].type == NotificationType.success

    with pytest.raises(ConflictError):
        run(api.award_bid("bid-10"))


def test_reject_then_award_is_refused(api):
    rejected = run(api.reject_bid("bid-11", feedback="Over budget"))
    assert rejected.status == BidStatus.rejected
    assert "Over budget" in run(api.get_notifications(user_id="sub-5"))[0].message

    with pytest.raises(ConflictError):
        run(api.award_bid("bid-11"))
    with pytest.raises(ConflictError):
        run(api.reject_bid("bid-3"))


def test_update_bid_status_goes_through_state_machine(api):
    with pytest.raises(ConflictError):
        run(api.update_bid("bid-4", {"status": "pending"}))

    updated = run(api.update_bid("bid-12", {"amount": 130_000}))
    assert updated.amount == 130_000


def test_decided_bids_refuse_field_edits(api):
    for bid_id in ("bid-3", "bid-4"):
        with pytest.raises(ConflictError):
            run(api.update_bid(bid_id, {"amount": 1_000}))

    assert run(api.get_bid("bid-3")).amount == 135_000
    # restating the current status is still fine
    assert run(api.update_bid("bid-3", {"status": "awarded"})).status == BidStatus.awarded


def test_request_clarification(api):
    note = run(api.request_clarification("bid-13", "Does this include fixtures?"))
    assert note.user_id == "sub-1"

    with pytest.raises(ConflictError):
        run(api.request_clarification("bid-3", "too late"))


def test_bid_review_sorted_with_statistics(api):
    review = run(api.get_bid_review("proj-1", "amount"))

    assert [b.amount for b in review.bids] == sorted(b.amount for b in review.bids)
    assert review.statistics.count == 4
    assert review.statistics.lowest == 125_000
    assert review.bids[0].contractor.id == review.bids[0].subcontractor_id

    with pytest.raises(ValidationError):
        run(api.get_bid_review("proj-1", "nope"))


def test_contractor_snapshot_is_stable(api):
    first = run(api.get_bid_review("proj-1", "rating"))
    second = run(api.get_bid_review("proj-1", "rating"))
    assert [b.contractor for b in first.bids] == [b.contractor for b in second.bids]


def test_notifications_filters_and_mark_read(api):
    unread = run(api.get_notifications(user_id="gc-1", read=False))
    assert [n.id for n in unread] == ["notif-1", "notif-2"]

    marked = run(api.mark_notification_as_read("notif-1"))
    assert marked.read is True

    assert run(api.mark_all_notifications_as_read("gc-1")) == 1
    assert run(api.get_notifications(user_id="gc-1", read=False)) == []

    with pytest.raises(NotFoundError):
        run(api.mark_notification_as_read("notif-404"))


def test_delete_notification(api):
    run(api.delete_notification("notif-15"))
    assert run(api.get_notifications(user_id="sub-2", limit=10))[0].id == "notif-7"
    with pytest.raises(NotFoundError):
        run(api.delete_notification("notif-15"))


def test_upload_file_validation(api):
    ok = run(api.upload_file(FileDescriptor(name="plans.pdf", type="application/pdf", size=1024)))
    assert ok.url == "/mock/uploads/plans.pdf"

    with pytest.raises(ValidationError) as exc:
        run(api.upload_file(FileDescriptor(name="notes.txt", type="text/plain", size=10)))
    assert exc.value.code == "unsupported_media_type"

    with pytest.raises(ValidationError) as exc:
        run(api.upload_file(FileDescriptor(name="big.pdf", type="application/pdf", size=11 * 1024 * 1024)))
    assert exc.value.code == "too_large"


def test_dashboard_gc(api):
    data = run(api.get_dashboard_data("gc-1", UserRole.gc))

    assert data.total_projects == 4
    assert data.active_projects == 1
    assert data.total_bids == 10
    assert data.pending_bids == 7
    assert [b.id for b in data.recent_activity] == ["bid-14", "bid-13", "bid-8", "bid-7", "bid-4"]


def test_dashboard_subcontractor(api):
    data = run(api.get_dashboard_data("sub-1"))

    assert data.total_bids == 3
    assert data.awarded_bids == 1
    assert data.pending_bids == 2
    assert data.rejected_bids == 0
    assert data.total_earnings == 95_000
    assert len(data.available_projects) == 5


def test_dashboard_unknown_user(api):
    with pytest.raises(NotFoundError):
        run(api.get_dashboard_data("ghost", UserRole.gc))


def test_dashboard_admin_totals(api):
    data = run(api.get_dashboard_data("gc-1", UserRole.admin))
    assert (data.total_users, data.total_projects, data.total_bids) == (16, 6, 14)
    assert data.unread_notifications == 7


def test_in_memory_repositories_work_the_same(settings):
    repos = Repositories.in_memory(
        users=mock_users(), projects=mock_projects(), bids=mock_bids(), notifications=mock_notifications()
    )
    api = MockApi(repos, latency_scale=0, settings=settings)

    assert run(api.get_project("proj-5")).gc_id == "gc-3"
    assert run(api.mark_all_notifications_as_read("bank-1")) == 2


def test_delays_are_scaled(settings, monkeypatch):
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    monkeypatch.setattr(mock_api_module.asyncio, "sleep", fake_sleep)
    api = MockApi(Repositories.in_memory(projects=mock_projects()), latency_scale=0.5, settings=settings)

    run(api.get_projects())
    run(api.upload_file(FileDescriptor(name="a.pdf", type="application/pdf", size=1)))

    assert slept == [0.25, 1.0]


def test_dashboard_supplier(api):
    data = run(api.get_dashboard_data("sup-1"))

    assert data.total_orders == 3
    assert data.pending_orders == 1
    assert data.completed_orders == 1
    assert data.total_revenue == 9_000


def test_dashboard_bank(api):
    data = run(api.get_dashboard_data("bank-1"))

    assert {loan.id for loan in data.loans} == {"loan-1", "loan-2", "loan-4"}
    assert data.active_loans == 2
    assert data.total_amount == 2_000_000
    assert data.pending_approvals == 1


def test_naive_timestamps_are_read_as_utc(store, settings):
    source = LocalStore(LocalStorageManager(MemoryBackend()))
    DataSeeder(source).seed_initial_data()
    # drop every UTC offset from the exported timestamps
    naive = re.sub(r"(T\d{2}:\d{2}:\d{2}(?:\.\d+)?)(?:Z|\+00:00)", r"\1", DataSeeder(source).export_data())
    assert "+00:00" not in naive

    DataSeeder(store).import_data(naive)
    api = MockApi(Repositories.from_store(store), latency_scale=0, settings=settings)

    assert run(api.get_project("proj-1")).created_at.tzinfo is not None
    updated = run(api.update_project("proj-1", {"name": "Renamed"}))
    assert updated.updated_at >= updated.created_at

    created = run(api.create_project(ProjectCreate(name="Depot", description="Bus depot", gc_id="gc-2")))
    assert run(api.get_projects())[0].id == created.id
    assert run(api.award_bid("bid-13")).status == BidStatus.awarded
    assert run(api.get_notifications(user_id="sub-1"))[0].title == "Bid Awarded"
