import datetime as dt
import itertools

import pytest

from revenue import (
    FiscalRevenueLedgerEntry,
    ProjectContribution,
    ProjectStatus,
    aggregate_by_fiscal_year,
    sorted_ledger,
)

DONE = ProjectStatus.COMPLETED.value


def contribution(status, budget, day):
    return ProjectContribution(status, budget, day)


@pytest.fixture
def mixed():
    return [
        contribution(DONE, 60_000, dt.date(2025, 6, 1)),
        contribution(DONE, 50_000, dt.date(2025, 7, 1)),
        contribution(ProjectStatus.IN_PROGRESS.value, 999_999, dt.date(2025, 6, 15)),
    ]


class TestAggregateByFiscalYear:
    def test_only_completed_projects_count(self, mixed):
        ledger = aggregate_by_fiscal_year(mixed)
        assert list(ledger) == ["FY 2025-26"]
        assert ledger["FY 2025-26"].amount == 110_000
        assert ledger["FY 2025-26"].period_start == dt.datetime(2025, 4, 1)

    def test_empty_input(self):
        assert aggregate_by_fiscal_year([]) == {}

    def test_zero_and_missing_budgets_still_touch_the_year(self):
        ledger = aggregate_by_fiscal_year([
            contribution(DONE, 0, dt.date(2024, 5, 1)),
            contribution(DONE, None, dt.date(2023, 5, 1)),
        ])
        assert ledger["FY 2024-25"].amount == 0
        assert ledger["FY 2023-24"].amount == 0

    def test_splits_across_fiscal_years(self):
        ledger = aggregate_by_fiscal_year([
            contribution(DONE, 10_000, dt.date(2025, 3, 31)),
            contribution(DONE, 20_000, dt.date(2025, 4, 1)),
        ])
        assert ledger["FY 2024-25"].amount == 10_000
        assert ledger["FY 2025-26"].amount == 20_000

    def test_enum_status_is_accepted(self):
        ledger = aggregate_by_fiscal_year([contribution(ProjectStatus.COMPLETED, 5, dt.date(2025, 5, 5))])
        assert ledger["FY 2025-26"].amount == 5

    def test_status_match_is_exact(self):
        ledger = aggregate_by_fiscal_year([contribution("completed", 5, dt.date(2025, 5, 5))])
        assert ledger == {}

    def test_order_does_not_matter(self, mixed):
        extra = mixed + [contribution(DONE, 7_500, dt.date(2024, 11, 2))]
        expected = aggregate_by_fiscal_year(extra)
        for perm in itertools.permutations(extra):
            assert aggregate_by_fiscal_year(perm) == expected

    @pytest.mark.parametrize("budget", [None, 0, 1, 10_000_000])
    def test_non_completed_budget_has_no_effect(self, mixed, budget):
        baseline = aggregate_by_fiscal_year(mixed)
        changed = mixed[:2] + [contribution(ProjectStatus.IN_PROGRESS.value, budget, dt.date(2025, 6, 15))]
        assert aggregate_by_fiscal_year(changed) == baseline

    def test_custom_start_month(self):
        ledger = aggregate_by_fiscal_year([contribution(DONE, 1, dt.date(2025, 6, 30))], start_month=7)
        assert list(ledger) == ["FY 2024-25"]


class TestReferenceDate:
    def test_prefers_updated_timestamp(self):
        c = ProjectContribution.from_timestamps(DONE, 100, dt.datetime(2025, 4, 2), dt.datetime(2025, 3, 1))
        assert c.reference_date == dt.datetime(2025, 4, 2)
        assert list(aggregate_by_fiscal_year([c])) == ["FY 2025-26"]

    def test_falls_back_to_created_timestamp(self):
        c = ProjectContribution.from_timestamps(DONE, 100, None, dt.datetime(2025, 3, 1))
        assert list(aggregate_by_fiscal_year([c])) == ["FY 2024-25"]

    def test_aware_dates_become_naive_utc(self):
        aware = dt.datetime(2025, 4, 1, 2, tzinfo=dt.timezone(dt.timedelta(hours=5, minutes=30)))
        c = ProjectContribution(DONE, 100, aware)
        assert c.reference_date == dt.datetime(2025, 3, 31, 20, 30)
        assert list(aggregate_by_fiscal_year([c])) == ["FY 2024-25"]

    def test_mixed_naive_and_aware_dates_sort(self):
        ledger = aggregate_by_fiscal_year([
            contribution(DONE, 1, dt.datetime(2023, 5, 1)),
            contribution(DONE, 2, dt.datetime(2025, 5, 1, tzinfo=dt.timezone.utc)),
            contribution(DONE, 3, dt.date(2024, 5, 1)),
        ])
        assert [e.fiscal_year_label for e in sorted_ledger(ledger)] == ["FY 2025-26", "FY 2024-25", "FY 2023-24"]


class TestSortedLedger:
    def test_newest_first(self):
        ledger = aggregate_by_fiscal_year([
            contribution(DONE, 1, dt.date(2022, 5, 1)),
            contribution(DONE, 2, dt.date(2025, 5, 1)),
            contribution(DONE, 3, dt.date(2023, 5, 1)),
        ])
        entries = sorted_ledger(ledger)
        assert [e.fiscal_year_label for e in entries] == ["FY 2025-26", "FY 2023-24", "FY 2022-23"]
        assert isinstance(entries[0], FiscalRevenueLedgerEntry)
