import math
from datetime import datetime, timedelta, timezone

import pytest

from citybuild.core.errors import ValidationError
from citybuild.schemas.bids import BidWithContractor, ContractorSnapshot
from citybuild.services.bid_ranking import (
    bid_statistics,
    calculate_bid_total,
    sort_bids,
    timeline_to_days,
)

T0 = datetime(2024, 12, 1, tzinfo=timezone.utc)


def make_bid(bid_id, amount, timeline, rating, completed, day):
    return BidWithContractor(
        id=bid_id,
        project_id="proj-1",
        subcontractor_id=f"sub-{bid_id}",
        amount=amount,
        timeline=timeline,
        description="work",
        submitted_at=T0 + timedelta(days=day),
        contractor=ContractorSnapshot(
            id=f"sub-{bid_id}",
            name=f"Contractor {bid_id}",
            rating=rating,
            completed_projects=completed,
            on_time_rate=90,
        ),
    )


@pytest.fixture
def bids():
    return [
        make_bid("a", 125_000, "6 weeks", 4.8, 45, 0),
        make_bid("b", 95_000, "2 months", 4.2, 120, 3),
        make_bid("c", 95_000, "soon", 4.8, 10, 1),
        make_bid("d", 180_000, "3 weeks", 3.9, 45, 2),
    ]


@pytest.mark.parametrize(
    "text, days",
    [("2 weeks", 14), ("3 months", 90), ("10", 10), ("1 week", 7), ("45 days", 45), ("1.5 months", 30)],
)
def test_timeline_to_days(text, days):
    assert timeline_to_days(text) == days


@pytest.mark.parametrize("text", ["next spring", "", "TBD weeks"])
def test_timeline_without_leading_number_is_nan(text):
    assert math.isnan(timeline_to_days(text))


def test_sort_by_amount_is_stable(bids):
    ranked = sort_bids(bids, "amount")
    assert [b.id for b in ranked] == ["b", "c", "a", "d"]


def test_sort_by_rating_descending_keeps_ties_in_input_order(bids):
    ranked = sort_bids(bids, "rating")
    assert [b.id for b in ranked] == ["a", "c", "b", "d"]


def test_sort_by_timeline_puts_unparseable_last(bids):
    ranked = sort_bids(bids, "timeline")
    assert [b.id for b in ranked] == ["d", "a", "b", "c"]


def test_sort_by_experience_and_submitted(bids):
    assert [b.id for b in sort_bids(bids, "experience")] == ["b", "a", "d", "c"]
    assert [b.id for b in sort_bids(bids, "submitted")] == ["b", "d", "c", "a"]


def test_sort_does_not_mutate_input_and_is_deterministic(bids):
    before = [b.id for b in bids]
    first = sort_bids(bids, "amount")
    second = sort_bids(bids, "amount")

    assert [b.id for b in bids] == before
    assert [b.id for b in first] == [b.id for b in second]


def test_unknown_sort_key(bids):
    with pytest.raises(ValidationError):
        sort_bids(bids, "cheapest")


def test_statistics(bids):
    stats = bid_statistics(bids)

    assert stats.count == 4
    assert stats.lowest == 95_000
    assert stats.highest == 180_000
    assert stats.average_amount == pytest.approx((125_000 + 95_000 + 95_000 + 180_000) / 4)
    assert stats.average_rating == pytest.approx((4.8 + 4.2 + 4.8 + 3.9) / 4)


def test_statistics_empty():
    stats = bid_statistics([])
    assert (stats.count, stats.lowest, stats.highest, stats.average_amount, stats.average_rating) == (0, 0, 0, 0, 0)


def test_calculate_bid_total_default_contingency():
    result = calculate_bid_total(50_000, 30_000, 20_000)

    assert result.subtotal == 100_000
    assert result.contingency_amount == pytest.approx(10_000)
    assert result.total == pytest.approx(110_000)


def test_calculate_bid_total_explicit_contingency():
    result = calculate_bid_total(1_000, 0, 0, contingency_percent=0)
    assert result.total == 1_000
