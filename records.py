"""
Boundary between the project/assignment store and the tier engine.

Rows arrive loosely typed (CSV cells, query results). They are coerced into
ProjectContribution records here so the engine only ever sees clean data.
"""
import datetime as dt
import logging
import math
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from partner_tiering import PartnerKey
from revenue import ProjectContribution, ProjectStatus

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["partner_id", "partner_name", "status", "budget", "created_at", "updated_at"]


class RecordError(ValueError):
    """Raised when an assignment row cannot be turned into a contribution."""


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_budget(value: Any) -> Optional[float]:
    if _blank(value):
        return None
    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()
    try:
        budget = float(value)
    except (TypeError, ValueError):
        raise RecordError(f"Budget is not a number: {value!r}")
    if not math.isfinite(budget):
        raise RecordError(f"Budget must be a finite number, got: {value!r}")
    if budget < 0:
        raise RecordError(f"Budget cannot be negative, got: {budget}")
    return budget


def parse_timestamp(value: Any) -> Optional[dt.datetime]:
    if _blank(value):
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        raise RecordError(f"Unreadable timestamp: {value!r}")
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        # Store timestamps are UTC; bucket on the naive UTC wall clock.
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def contribution_from_record(row: Mapping[str, Any]) -> ProjectContribution:
    status = "" if _blank(row.get("status")) else str(row.get("status")).strip()
    updated_at = parse_timestamp(row.get("updated_at"))
    created_at = parse_timestamp(row.get("created_at"))
    if updated_at is None and created_at is None:
        raise RecordError("Assignment has neither updated_at nor created_at.")
    return ProjectContribution.from_timestamps(status, parse_budget(row.get("budget")), updated_at, created_at)


def load_assignments(frame: pd.DataFrame) -> Dict[PartnerKey, List[ProjectContribution]]:
    """Group rows by partner. Rows that fail coercion are logged and skipped."""
    grouped: Dict[PartnerKey, List[ProjectContribution]] = OrderedDict()
    for i, row in enumerate(frame.to_dict("records")):
        key = (str(row.get("partner_id", "")).strip(), str(row.get("partner_name", "")).strip())
        try:
            contribution = contribution_from_record(row)
        except RecordError as e:
            logger.warning("Skipping assignment row %d for partner %s: %s", i, key[1] or key[0], e)
            grouped.setdefault(key, [])
            continue
        grouped.setdefault(key, []).append(contribution)
    return grouped


def read_assignments_csv(source: Any) -> pd.DataFrame:
    try:
        frame = pd.read_csv(source, dtype={"partner_id": str})
    except UnicodeDecodeError:
        raise RecordError("Assignments file is not UTF-8 encoded text.")
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise RecordError(f"Assignments file is missing columns: {', '.join(missing)}")
    return frame


def sample_assignments() -> pd.DataFrame:
    done = ProjectStatus.COMPLETED.value
    rows = [
        ("p-001", "Northwind Studio", "Brand refresh", done, 60_000, "2025-05-02", "2025-06-01"),
        ("p-001", "Northwind Studio", "Web platform", done, 50_000, "2025-04-10", "2025-07-01"),
        ("p-001", "Northwind Studio", "App redesign", ProjectStatus.IN_PROGRESS.value, 999_999, "2025-06-15", None),
        ("p-001", "Northwind Studio", "Launch campaign", done, 40_000, "2024-09-01", "2025-02-20"),
        ("p-002", "Blue Fern Media", "SEO retainer", done, 18_500, "2025-08-11", None),
        ("p-002", "Blue Fern Media", "Social content", ProjectStatus.REVIEW.value, 12_000, "2025-09-01", "2025-10-02"),
        ("p-003", "Harbor & Pine", "E-commerce build", done, 275_000, "2025-04-20", "2025-11-30"),
        ("p-003", "Harbor & Pine", "Content hub", done, None, "2025-05-05", "2025-12-12"),
        ("p-004", "Quill Collective", "Copy audit", ProjectStatus.NOT_STARTED.value, 8_000, "2025-10-01", None),
    ]
    return pd.DataFrame(rows, columns=["partner_id", "partner_name", "project_name", "status",
                                       "budget", "created_at", "updated_at"])
