from datetime import date, datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta

# Stand-in end for assignments with no expected return
OPEN_ENDED = date.max


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return utc_now().date()


def interval_end(end: Optional[date]) -> date:
    return end if end is not None else OPEN_ENDED


def intervals_overlap(start_a: date, end_a: Optional[date], start_b: date, end_b: Optional[date]) -> bool:
    """
    Half-open interval intersection: [start_a, end_a) against [start_b, end_b).

    A missing end is open-ended. Touching endpoints (end_a == start_b) do not
    overlap.
    """
    return start_a < interval_end(end_b) and interval_end(end_a) > start_b


def months_before(day: date, months: int) -> date:
    return day - relativedelta(months=months)


def years_after(day: date, years: int) -> date:
    return day + relativedelta(years=years)
