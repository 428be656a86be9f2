from datetime import datetime, timezone

import pytest

from citybuild.core.config import Settings
from citybuild.core.errors import ConflictError, NotFoundError
from citybuild.models.enums import BidStatus, ProjectStatus
from citybuild.seed import mock_bids, mock_projects
from citybuild.services.data_seeder import DataSeeder
from citybuild.services.local_storage import LocalStore
from citybuild.services.repositories import Repositories


@pytest.fixture(params=["memory", "storage", "sql"])
def repos(request, seeded_store):
    if request.param == "memory":
        return Repositories.in_memory(projects=mock_projects(), bids=mock_bids())
    if request.param == "storage":
        return Repositories.from_store(seeded_store)
    store = LocalStore.from_settings(Settings(storage_backend="sql", database_url="sqlite:///:memory:"))
    DataSeeder(store).seed_initial_data()
    return Repositories.from_store(store)


def test_get_and_not_found_message(repos):
    assert repos.projects.get("proj-1").name == "Downtown Office Complex"

    with pytest.raises(NotFoundError, match="Project not found"):
        repos.projects.get("proj-404")


def test_results_are_copies(repos):
    p = repos.projects.get("proj-1")
    p.name = "mutated"
    listed = repos.projects.list()
    listed[0].name = "mutated too"

    assert repos.projects.get("proj-1").name == "Downtown Office Complex"
    assert all(x.name != "mutated too" for x in repos.projects.list())


def test_filters_exact_and_membership(repos):
    pending = repos.bids.list({"project_id": "proj-1", "status": BidStatus.pending})
    assert {b.id for b in pending} == {"bid-1", "bid-2"}

    several = repos.bids.list({"project_id": {"proj-4", "proj-5"}})
    assert {b.id for b in several} == {"bid-9", "bid-10", "bid-11", "bid-12"}

    assert len(repos.bids.list({"project_id": None})) == 14
    assert len(repos.bids.list(limit=3)) == 3


def test_update_patches_fields(repos):
    updated = repos.projects.update("proj-3", {"status": ProjectStatus.active, "id": "ignored"})

    assert updated.id == "proj-3"
    assert updated.status == ProjectStatus.active
    assert repos.projects.get("proj-3").status == ProjectStatus.active


def test_create_rejects_duplicate_id(repos):
    dup = repos.projects.get("proj-1")
    with pytest.raises(ConflictError):
        repos.projects.create(dup)


def test_delete(repos):
    repos.bids.delete("bid-1")
    assert not repos.bids.exists("bid-1")
    with pytest.raises(NotFoundError):
        repos.bids.delete("bid-1")


def test_sql_backend_persists_across_stores():
    settings = Settings(storage_backend="sql", database_url="sqlite:///:memory:")
    store = LocalStore.from_settings(settings)
    DataSeeder(store).seed_initial_data()
    repos = Repositories.from_store(store)
    repos.projects.update(
        "proj-1", {"name": "Renamed", "updated_at": datetime(2025, 1, 1, tzinfo=timezone.utc)}
    )

    # a second store over the same backend sees the write
    again = LocalStore(store.manager)
    assert again.projects.get_projects()[0].name == "Renamed"
    assert sorted(store.manager.backend.keys()) == sorted(
        [
            "citybuild_users",
            "citybuild_projects",
            "citybuild_bids",
            "citybuild_notifications",
            "citybuild_loans",
            "citybuild_orders",
            "citybuild_payments",
            "citybuild_inventory",
        ]
    )
