from datetime import datetime, timezone

from citybuild.models.enums import BidStatus, ProjectStatus, UserRole
from citybuild.services.data_generator import DataGenerator, DatasetOptions

FIXED_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_generator(seed=42):
    return DataGenerator(seed=seed, now=lambda: FIXED_NOW)


def test_dataset_is_referentially_consistent():
    ds = make_generator().generate_complete_dataset()

    user_ids = {u.id for u in ds.users}
    gc_ids = {u.id for u in ds.users if u.role == UserRole.gc}
    sub_ids = {u.id for u in ds.users if u.role == UserRole.subcontractor}
    project_ids = {p.id for p in ds.projects}

    assert all(p.gc_id in gc_ids for p in ds.projects)
    assert all(b.project_id in project_ids for b in ds.bids)
    assert all(b.subcontractor_id in sub_ids for b in ds.bids)
    assert all(n.user_id in user_ids for n in ds.notifications)


def test_commerce_records_reference_generated_entities():
    ds = make_generator(5).generate_complete_dataset()

    ids_by_role = {}
    for u in ds.users:
        ids_by_role.setdefault(u.role, set()).add(u.id)
    projects = {p.id: p for p in ds.projects}

    assert len(ds.loans) == 2 * 3
    for loan in ds.loans:
        assert loan.lender_id in ids_by_role[UserRole.bank]
        assert loan.applicant_id in ids_by_role[UserRole.gc] | ids_by_role[UserRole.subcontractor]
        if loan.project_id is not None:
            assert projects[loan.project_id].gc_id == loan.applicant_id

    assert len(ds.orders) == 3 * 3
    for order in ds.orders:
        assert order.supplier_id in ids_by_role[UserRole.supplier]
        assert order.buyer_id == projects[order.project_id].gc_id

    assert all(i.supplier_id in ids_by_role[UserRole.supplier] for i in ds.inventory)
    assert all(p.payer_id in ids_by_role[UserRole.gc] for p in ds.payments)


def test_default_dataset_sizes():
    ds = make_generator().generate_complete_dataset()

    assert len(ds.users) == 3 + 8 + 3 + 2
    assert len(ds.projects) == 3 * 3
    assert len(ds.notifications) == len(ds.users) * 5


def test_only_bidding_or_awarded_projects_receive_bids():
    ds = make_generator(7).generate_complete_dataset(DatasetOptions(projects_per_gc=6))
    by_id = {p.id: p for p in ds.projects}

    for bid in ds.bids:
        assert by_id[bid.project_id].status in (ProjectStatus.bidding, ProjectStatus.awarded)


def test_bidders_are_distinct_per_project_and_capped():
    opts = DatasetOptions(projects_per_gc=5, bids_per_project=4)
    ds = make_generator(3).generate_complete_dataset(opts)

    per_project = {}
    for bid in ds.bids:
        per_project.setdefault(bid.project_id, []).append(bid.subcontractor_id)
    for subs in per_project.values():
        assert 1 <= len(subs) <= 4
        assert len(set(subs)) == len(subs)


def test_at_most_one_awarded_bid_per_project():
    opts = DatasetOptions(num_gcs=5, projects_per_gc=8, bids_per_project=6)
    ds = make_generator(11).generate_complete_dataset(opts)

    awarded = {}
    for bid in ds.bids:
        if bid.status == BidStatus.awarded:
            awarded[bid.project_id] = awarded.get(bid.project_id, 0) + 1
    assert all(count == 1 for count in awarded.values())


def test_same_seed_same_dataset():
    a = make_generator(99).generate_complete_dataset()
    b = make_generator(99).generate_complete_dataset()

    assert a.model_dump() == b.model_dump()


def test_generated_values_stay_in_range():
    gen = make_generator()
    for i in range(1, 30):
        project = gen.generate_project("gc-1", i)
        assert 100_000 <= project.estimated_cost < 5_100_000
        assert project.updated_at >= project.created_at
        assert 1 <= len(project.plan_files) <= 3
        for f in project.plan_files:
            assert 500_000 <= f.size < 5_500_000

        bid = gen.generate_bid(project.id, "subcontractor-1", i)
        assert 10_000 <= bid.amount < 510_000


def test_ids_follow_role_and_index():
    gen = make_generator()

    assert gen.generate_user(UserRole.bank, 4).id == "bank-4"
    assert gen.generate_user("admin", 1).email == "admin1@citybuild.example"
    assert gen.generate_project("gc-1", 12).id == "proj-12"
    assert gen.generate_bid("proj-1", "subcontractor-1", 5).id == "bid-5"
    assert gen.generate_notification("gc-1", 8).id == "notif-8"


def test_page_level_entities():
    gen = make_generator()
    gc = gen.generate_user(UserRole.gc, 1)
    supplier = gen.generate_user(UserRole.supplier, 1)
    bank = gen.generate_user(UserRole.bank, 1)
    project = gen.generate_project(gc.id, 1)

    loan = gen.generate_loan_application(gc, 1, project=project, lender=bank)
    assert loan.applicant_id == gc.id
    assert loan.lender_id == bank.id
    assert loan.project_id == project.id

    order = gen.generate_order(supplier, 2, project=project)
    assert order.supplier_id == supplier.id
    assert order.buyer_id == gc.id
    assert order.total_amount == round(sum(i.line_total for i in order.items), 2)

    item = gen.generate_inventory_item(supplier, 3)
    assert item.total_value == round(item.current_stock * item.unit_price, 2)

    payment = gen.generate_payment(gc, supplier, 4)
    assert payment.recipient == supplier.name


def test_contractor_snapshot_bounds():
    gen = make_generator()
    sub = gen.generate_user(UserRole.subcontractor, 1)
    snap = gen.generate_contractor_snapshot(sub)

    assert snap.id == sub.id
    assert 3.0 <= snap.rating <= 5.0
    assert 5 <= snap.completed_projects <= 150
    assert 75 <= snap.on_time_rate <= 100
    assert 1 <= len(snap.specializations) <= 3
