# citybuild/services/bid_ranking.py
from __future__ import annotations

import math
import re
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

from citybuild.core.errors import ValidationError
from citybuild.schemas.bids import Bid, BidCostBreakdown, BidStatistics, BidWithContractor

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class BidSortKey(str, Enum):
    amount = "amount"
    rating = "rating"
    timeline = "timeline"
    experience = "experience"
    submitted = "submitted"


def timeline_to_days(timeline: str) -> float:
    """
    "2 weeks" -> 14, "3 months" -> 90, "10" -> 10.

    Only the leading integer counts ("1.5 months" -> 30). Text without a
    leading integer ("next spring") gives NaN.
    """
    m = _LEADING_INT.match(timeline or "")
    if not m:
        return math.nan
    n = int(m.group(1))
    lowered = timeline.lower()
    if "week" in lowered:
        return float(n * 7)
    if "month" in lowered:
        return float(n * 30)
    return float(n)


def _parse_sort_key(sort_by: Union[str, BidSortKey]) -> BidSortKey:
    try:
        return BidSortKey(sort_by)
    except ValueError:
        allowed = ", ".join(k.value for k in BidSortKey)
        raise ValidationError(f"Unknown sort key {sort_by!r}; expected one of: {allowed}")


def _timeline_key(bid: Bid):
    days = timeline_to_days(bid.timeline)
    # NaN never compares, so unparseable timelines go to the end
    if math.isnan(days):
        return (1, 0.0)
    return (0, days)


def sort_bids(bids: Iterable[BidWithContractor], sort_by: Union[str, BidSortKey]) -> List[BidWithContractor]:
    """Stable sort into a new list; the input is left untouched."""
    key = _parse_sort_key(sort_by)
    items = list(bids)

    if key == BidSortKey.amount:
        return sorted(items, key=lambda b: b.amount)
    if key == BidSortKey.rating:
        return sorted(items, key=lambda b: -b.contractor.rating)
    if key == BidSortKey.timeline:
        return sorted(items, key=_timeline_key)
    if key == BidSortKey.experience:
        return sorted(items, key=lambda b: -b.contractor.completed_projects)
    return sorted(items, key=lambda b: b.submitted_at, reverse=True)


def bid_statistics(bids: Sequence[Bid]) -> BidStatistics:
    """
    One pass over the bids. Rating is averaged only when the bids carry
    a contractor snapshot; everything is 0 for an empty input.
    """
    count = 0
    total = 0.0
    rating_total = 0.0
    lowest: Optional[float] = None
    highest: Optional[float] = None

    for bid in bids:
        count += 1
        total += bid.amount
        lowest = bid.amount if lowest is None else min(lowest, bid.amount)
        highest = bid.amount if highest is None else max(highest, bid.amount)
        contractor = getattr(bid, "contractor", None)
        if contractor is not None:
            rating_total += contractor.rating

    if count == 0:
        return BidStatistics()

    return BidStatistics(
        count=count,
        lowest=lowest,
        highest=highest,
        average_amount=total / count,
        average_rating=rating_total / count,
    )


def calculate_bid_total(
    labor_cost: float = 0,
    material_cost: float = 0,
    equipment_cost: float = 0,
    contingency_percent: Optional[float] = 10,
) -> BidCostBreakdown:
    subtotal = (labor_cost or 0) + (material_cost or 0) + (equipment_cost or 0)
    pct = 10 if contingency_percent is None else contingency_percent
    contingency = subtotal * pct / 100
    return BidCostBreakdown(
        subtotal=subtotal,
        contingency_amount=contingency,
        total=subtotal + contingency,
    )
