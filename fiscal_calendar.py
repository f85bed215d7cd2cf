"""
Fiscal calendar helpers. Fiscal years begin on the first day of a fixed
calendar month (April by default) and are labelled "FY 2025-26".
"""
import datetime as dt
from dataclasses import dataclass
from typing import List, Optional, Union

FISCAL_YEAR_START_MONTH = 4  # April

Moment = Union[dt.date, dt.datetime]


@dataclass(frozen=True)
class FiscalYearRange:
    label: str
    start: dt.datetime  # inclusive
    end: dt.datetime    # inclusive, last microsecond of the year

    def contains(self, moment: Moment) -> bool:
        return self.start <= _as_datetime(moment, self.start.tzinfo) <= self.end


def _check_month(start_month: int) -> None:
    if not 1 <= start_month <= 12:
        raise ValueError(f"Fiscal year start month must be 1-12, got: {start_month}")


def _as_datetime(moment: Moment, tzinfo: Optional[dt.tzinfo] = None) -> dt.datetime:
    if isinstance(moment, dt.datetime):
        return moment
    return dt.datetime(moment.year, moment.month, moment.day, tzinfo=tzinfo)


def fiscal_label(start_year: int) -> str:
    return f"FY {start_year}-{str(start_year + 1)[-2:]}"


def fiscal_year_starting(start_year: int, start_month: int = FISCAL_YEAR_START_MONTH,
                         tzinfo: Optional[dt.tzinfo] = None) -> FiscalYearRange:
    _check_month(start_month)
    start = dt.datetime(start_year, start_month, 1, tzinfo=tzinfo)
    end = dt.datetime(start_year + 1, start_month, 1, tzinfo=tzinfo) - dt.timedelta(microseconds=1)
    return FiscalYearRange(fiscal_label(start_year), start, end)


def fiscal_year_for(moment: Moment, start_month: int = FISCAL_YEAR_START_MONTH) -> FiscalYearRange:
    _check_month(start_month)
    tzinfo = moment.tzinfo if isinstance(moment, dt.datetime) else None
    start_year = moment.year if moment.month >= start_month else moment.year - 1
    return fiscal_year_starting(start_year, start_month, tzinfo)


def current_fiscal_year(start_month: int = FISCAL_YEAR_START_MONTH,
                        today: Optional[Moment] = None) -> FiscalYearRange:
    return fiscal_year_for(today if today is not None else dt.datetime.now(), start_month)


def recent_fiscal_years(count: int = 5, start_month: int = FISCAL_YEAR_START_MONTH,
                        today: Optional[Moment] = None) -> List[FiscalYearRange]:
    """Fiscal years covering January 1 of each of the last `count` calendar years, newest first."""
    year = (today if today is not None else dt.date.today()).year
    seen = {}
    for i in range(count):
        fy = fiscal_year_for(dt.date(year - i, 1, 1), start_month)
        seen.setdefault(fy.label, fy)
    return sorted(seen.values(), key=lambda fy: fy.start, reverse=True)
