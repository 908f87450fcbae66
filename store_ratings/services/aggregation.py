"""
Rating statistics computed on demand from a collection of ratings.

Nothing here touches the database or keeps state between calls: every
function takes the ratings it summarises and returns fresh value objects,
so the results are always consistent with the rows the caller just read.
"""
import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Protocol

from store_ratings.models.timestamps import as_utc

RATING_VALUES = (1, 2, 3, 4, 5)
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class RatingLike(Protocol):
    value: int
    created_at: datetime


@dataclass(frozen=True)
class RatingSummary:
    count: int
    average: float
    distribution: dict[int, int] = field(
        default_factory=lambda: {value: 0 for value in RATING_VALUES}
    )


@dataclass(frozen=True)
class TrendPoint:
    month: str
    month_index: int
    year: int
    average: float
    count: int


def round_half_up(total: int, count: int) -> float:
    """Return total/count rounded half-up to one decimal place (0.0 if count is 0)."""
    if count == 0:
        return 0.0
    quotient = Decimal(total) / Decimal(count)
    return float(quotient.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_summary(ratings: Iterable[RatingLike]) -> RatingSummary:
    """
    Count, average and per-score distribution of *ratings*.

    Every score 1-5 appears in the distribution, so its values always sum to
    ``count``. A score outside 1-5 raises ``ValueError``.
    """
    values = [rating.value for rating in ratings]
    buckets = Counter(values)
    unexpected = set(buckets) - set(RATING_VALUES)
    if unexpected:
        raise ValueError(f"Rating values out of range 1-5: {sorted(unexpected)}")

    return RatingSummary(
        count=len(values),
        average=round_half_up(sum(values), len(values)),
        distribution={value: buckets.get(value, 0) for value in RATING_VALUES},
    )


def subtract_months(moment: datetime, months: int) -> datetime:
    """Shift *moment* back by calendar months, clamping the day to the month length."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def compute_monthly_trend(
    ratings: Iterable[RatingLike],
    months_back: int,
    now: Optional[datetime] = None,
) -> list[TrendPoint]:
    """
    Per-month average and count for ratings created in the trailing window.

    The window runs from ``now`` minus *months_back* calendar months up to
    ``now``, both ends inclusive. Buckets are ordered by year, then by
    calendar month.
    """
    now = as_utc(now or datetime.now(tz=timezone.utc))
    window_start = subtract_months(now, months_back)

    totals: dict[tuple[int, int], list[int]] = {}
    for rating in ratings:
        created_at = as_utc(rating.created_at)
        if not window_start <= created_at <= now:
            continue
        bucket = totals.setdefault((created_at.year, created_at.month), [0, 0])
        bucket[0] += rating.value
        bucket[1] += 1

    return [
        TrendPoint(
            month=MONTH_NAMES[month - 1],
            month_index=month,
            year=year,
            average=round_half_up(total, count),
            count=count,
        )
        for (year, month), (total, count) in sorted(totals.items())
    ]
