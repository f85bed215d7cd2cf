"""
Revenue aggregation: folds completed project budgets into per-fiscal-year totals.

Timezone-aware reference dates are converted to naive UTC when a
ProjectContribution is built.
"""
import datetime as dt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from fiscal_calendar import FISCAL_YEAR_START_MONTH, Moment, fiscal_year_for

logger = logging.getLogger(__name__)


class ProjectStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class ProjectContribution:
    status: str
    budget: Optional[float]
    reference_date: Moment

    def __post_init__(self):
        # Ledger periods are compared against each other, so keep every date naive UTC.
        ref = self.reference_date
        if isinstance(ref, dt.datetime) and ref.tzinfo is not None:
            naive = ref.astimezone(dt.timezone.utc).replace(tzinfo=None)
            object.__setattr__(self, "reference_date", naive)

    @classmethod
    def from_timestamps(cls, status: str, budget: Optional[float],
                        updated_at: Optional[Moment], created_at: Optional[Moment]) -> "ProjectContribution":
        # Fiscal-year attribution follows the last update when there is one.
        return cls(status, budget, updated_at if updated_at is not None else created_at)

    @property
    def is_completed(self) -> bool:
        return self.status == ProjectStatus.COMPLETED.value

    @property
    def credited_amount(self) -> float:
        return float(self.budget or 0.0)


@dataclass(frozen=True)
class FiscalRevenueLedgerEntry:
    fiscal_year_label: str
    amount: float
    period_start: dt.datetime


def aggregate_by_fiscal_year(contributions: Iterable[ProjectContribution],
                             start_month: int = FISCAL_YEAR_START_MONTH) -> Dict[str, FiscalRevenueLedgerEntry]:
    totals: Dict[str, float] = {}
    starts: Dict[str, dt.datetime] = {}
    skipped = 0
    for c in contributions:
        if not c.is_completed:
            skipped += 1
            continue
        fy = fiscal_year_for(c.reference_date, start_month)
        totals[fy.label] = totals.get(fy.label, 0.0) + c.credited_amount
        starts[fy.label] = fy.start
    logger.debug("Aggregated %d fiscal years, skipped %d non-completed contributions", len(totals), skipped)
    return {
        label: FiscalRevenueLedgerEntry(label, amount, starts[label])
        for label, amount in totals.items()
    }


def sorted_ledger(ledger: Dict[str, FiscalRevenueLedgerEntry]) -> List[FiscalRevenueLedgerEntry]:
    return sorted(ledger.values(), key=lambda e: e.period_start, reverse=True)
