"""
Numeric and calendar helpers shared by the analyzers.

Every division that can see an empty batch or a zero denominator goes through
`safe_ratio`, so none of the analyzers can raise ZeroDivisionError.
"""

import calendar
import math
import statistics
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning `default` when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean; 0 for an empty batch."""
    values = list(values)
    if not values:
        return 0.0
    return statistics.fmean(values)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; 0 for an empty batch."""
    if not values:
        return 0.0
    return statistics.pstdev(values)


def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson coefficient, 0 when either side has no variance."""
    n = min(len(xs), len(ys))
    if n < 2:
        return 0.0

    x_mean = mean(xs[:n])
    y_mean = mean(ys[:n])
    covariance = sum((xs[i] - x_mean) * (ys[i] - y_mean) for i in range(n))
    x_spread = sum((x - x_mean) ** 2 for x in xs[:n])
    y_spread = sum((y - y_mean) ** 2 for y in ys[:n])

    r = safe_ratio(covariance, math.sqrt(x_spread * y_spread))
    return max(-1.0, min(1.0, r))


def resolve_now(now: datetime | None = None) -> datetime:
    """Aware reference time: the current UTC time when missing, UTC when naive."""
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


def sub_days(moment: datetime, days: float) -> datetime:
    return moment - timedelta(days=days)


def sub_weeks(moment: datetime, weeks: float) -> datetime:
    return sub_days(moment, weeks * 7)


def sub_months(moment: datetime, months: int) -> datetime:
    """Calendar month subtraction, clamping to the last day of the target month."""
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def difference_in_days(first: datetime, second: datetime) -> int:
    """Whole days between two instants, rounded up."""
    seconds = abs((first - second).total_seconds())
    return math.ceil(seconds / 86400)


@lru_cache(maxsize=32)
def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    return ZoneInfo(name)


def local_time(moment: datetime, timezone_name: str) -> datetime:
    """Express an instant in the journal's local zone."""
    return moment.astimezone(resolve_timezone(timezone_name))


def local_date(moment: datetime, timezone_name: str) -> date:
    return local_time(moment, timezone_name).date()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, as display averages are shown."""
    return math.floor(value + 0.5)
