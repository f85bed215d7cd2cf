"""
Per-partner tier evaluation: fiscal-year ledger, revenue for the evaluated
year and the tier it earns. Everything here is recomputed from the supplied
contributions on every call.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from fiscal_calendar import FISCAL_YEAR_START_MONTH, Moment, current_fiscal_year
from revenue import FiscalRevenueLedgerEntry, ProjectContribution, aggregate_by_fiscal_year, sorted_ledger
from tiers import RevenueTier, TierEvaluation, TierLadder, resolve_tier, tier_unlock_progress

logger = logging.getLogger(__name__)

PartnerKey = Tuple[str, str]  # (partner_id, partner_name)


@dataclass(frozen=True)
class PartnerTierResult:
    ledger: List[FiscalRevenueLedgerEntry]  # newest fiscal year first
    fiscal_year_label: str
    current_year_revenue: float
    evaluation: TierEvaluation


@dataclass(frozen=True)
class TierBoardRow:
    tier: RevenueTier
    unlocked: bool
    progress: float


@dataclass(frozen=True)
class PartnerSummary:
    partner_id: str
    partner_name: str
    result: PartnerTierResult
    active_projects: int
    completed_projects: int


def evaluate_partner(contributions: Sequence[ProjectContribution],
                     ladder: Union[TierLadder, Sequence[RevenueTier]],
                     target_fiscal_year_label: Optional[str] = None,
                     *,
                     start_month: int = FISCAL_YEAR_START_MONTH,
                     today: Optional[Moment] = None) -> PartnerTierResult:
    by_label = aggregate_by_fiscal_year(contributions, start_month)
    ledger = sorted_ledger(by_label)
    if target_fiscal_year_label and target_fiscal_year_label in by_label:
        label = target_fiscal_year_label
    else:
        label = current_fiscal_year(start_month, today).label
        if target_fiscal_year_label:
            logger.debug("No revenue recorded for %s, evaluating %s", target_fiscal_year_label, label)
    entry = by_label.get(label)
    revenue = entry.amount if entry is not None else 0.0
    return PartnerTierResult(ledger, label, revenue, resolve_tier(ladder, revenue))


def tier_board(ladder: TierLadder, revenue: float) -> List[TierBoardRow]:
    return [
        TierBoardRow(t, revenue >= t.min_revenue, tier_unlock_progress(t, revenue))
        for t in ladder
    ]


def summarize_partners(assignments: Mapping[PartnerKey, Iterable[ProjectContribution]],
                       ladder: TierLadder,
                       target_fiscal_year_label: Optional[str] = None,
                       *,
                       start_month: int = FISCAL_YEAR_START_MONTH,
                       today: Optional[Moment] = None) -> List[PartnerSummary]:
    """
    Evaluate every partner in `assignments` against the same ladder and
    fiscal year. Sorted by evaluated revenue (highest first), then name.
    """
    summaries = []
    for (partner_id, partner_name), items in assignments.items():
        items = list(items)
        completed = sum(1 for c in items if c.is_completed)
        result = evaluate_partner(items, ladder, target_fiscal_year_label,
                                  start_month=start_month, today=today)
        summaries.append(PartnerSummary(
            partner_id=partner_id,
            partner_name=partner_name,
            result=result,
            active_projects=len(items) - completed,
            completed_projects=completed,
        ))
    summaries.sort(key=lambda s: (-s.result.current_year_revenue, s.partner_name))
    return summaries


def tier_distribution(summaries: Iterable[PartnerSummary], ladder: TierLadder) -> Dict[str, int]:
    """Partner count per tier name, in ladder order."""
    counts = {t.name: 0 for t in ladder}
    for s in summaries:
        counts[s.result.evaluation.tier.name] += 1
    return counts
