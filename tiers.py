"""
Partner reward tiers and the resolver that maps fiscal-year revenue onto them.

A ladder is ordered from the highest threshold down and always ends with a
single zero-floor tier, so every non-negative revenue resolves to some tier.
"""
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union


class TierConfigurationError(ValueError):
    """Raised when a tier ladder cannot be used to rank revenue."""


@dataclass(frozen=True)
class RevenueTier:
    name: str
    min_revenue: float
    description: str = ""
    rewards: str = ""
    accent: str = ""


@dataclass(frozen=True)
class TierEvaluation:
    tier: RevenueTier
    next_tier: Optional[RevenueTier]
    progress_to_next: float


class TierLadder:
    """Validated, immutable tier ladder sorted descending by min_revenue."""

    def __init__(self, tiers: Iterable[RevenueTier]):
        self._tiers: Tuple[RevenueTier, ...] = tuple(tiers)
        _validate(self._tiers)

    @classmethod
    def from_records(cls, rows: Iterable[Mapping[str, Any]]) -> "TierLadder":
        tiers = []
        for row in rows:
            name = str(row.get("name") or "").strip()
            if not name:
                raise TierConfigurationError("Tier name cannot be blank.")
            try:
                min_revenue = float(row.get("min_revenue"))
            except (TypeError, ValueError):
                raise TierConfigurationError(f"Tier {name!r} has no numeric min_revenue.")
            tiers.append(RevenueTier(
                name=name,
                min_revenue=min_revenue,
                description=str(row.get("description") or ""),
                rewards=str(row.get("rewards") or ""),
                accent=str(row.get("accent") or ""),
            ))
        return cls(sorted(tiers, key=lambda t: t.min_revenue, reverse=True))

    @property
    def tiers(self) -> Tuple[RevenueTier, ...]:
        return self._tiers

    @property
    def top(self) -> RevenueTier:
        return self._tiers[0]

    @property
    def floor(self) -> RevenueTier:
        return self._tiers[-1]

    def by_name(self, name: str) -> RevenueTier:
        for t in self._tiers:
            if t.name == name:
                return t
        raise KeyError(name)

    def index(self, tier: RevenueTier) -> int:
        return self._tiers.index(tier)

    def __iter__(self):
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)

    def __getitem__(self, i: int) -> RevenueTier:
        return self._tiers[i]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TierLadder) and self._tiers == other._tiers

    def __hash__(self) -> int:
        return hash(self._tiers)

    def __repr__(self) -> str:
        return f"TierLadder({[t.name for t in self._tiers]!r})"


def _validate(tiers: Tuple[RevenueTier, ...]) -> None:
    if not tiers:
        raise TierConfigurationError("Tier ladder is empty.")
    names = [t.name for t in tiers]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise TierConfigurationError(f"Duplicate tier names: {', '.join(dupes)}.")
    for t in tiers:
        if not t.min_revenue >= 0:
            raise TierConfigurationError(f"Tier {t.name!r} needs a non-negative min_revenue, got: {t.min_revenue}.")
    for higher, lower in zip(tiers, tiers[1:]):
        if higher.min_revenue <= lower.min_revenue:
            raise TierConfigurationError(
                f"Tiers must be sorted descending by min_revenue: "
                f"{higher.name!r} ({higher.min_revenue}) is not above {lower.name!r} ({lower.min_revenue})."
            )
    if tiers[-1].min_revenue != 0:
        raise TierConfigurationError(f"Lowest tier {tiers[-1].name!r} must have min_revenue 0.")


def resolve_tier(ladder: Union[TierLadder, Sequence[RevenueTier]], revenue: float) -> TierEvaluation:
    if not isinstance(ladder, TierLadder):
        ladder = TierLadder(ladder)
    index = next((i for i, t in enumerate(ladder) if t.min_revenue <= revenue), len(ladder) - 1)
    tier = ladder[index]
    if index == 0:
        return TierEvaluation(tier, None, 1.0)
    next_tier = ladder[index - 1]
    # Progress is measured from zero, not from the current tier's threshold.
    return TierEvaluation(tier, next_tier, _clamp(revenue / next_tier.min_revenue))


def tier_unlock_progress(tier: RevenueTier, revenue: float) -> float:
    if tier.min_revenue == 0 or revenue >= tier.min_revenue:
        return 1.0
    return _clamp(revenue / tier.min_revenue)


def _clamp(fraction: float) -> float:
    if math.isnan(fraction):
        return 0.0
    return max(0.0, min(1.0, fraction))


PARTNER_TIERS = TierLadder([
    RevenueTier("Black", 500_000.0,
                "Black award, crafted art piece, exclusive privileges.",
                "Exclusive privileges & bespoke recognition",
                "#000000"),
    RevenueTier("Diamond", 250_000.0,
                "Exclusive event invite + enhanced exposure.",
                "High-visibility press + private event access",
                "#6f42c8"),
    RevenueTier("Gold", 100_000.0,
                "Personalized trophy + Portal feature.",
                "Personalized trophy & feature spotlight",
                "#f9d976"),
    RevenueTier("Silver", 50_000.0,
                "Engraved plaque + digital badge.",
                "Plaque & digital badge set",
                "#a5b4fc"),
    RevenueTier("Bronze", 15_000.0,
                "Custom frame + certificate.",
                "Custom frame & certificate",
                "#f4a259"),
    RevenueTier("Explorer", 0.0,
                "Onboarding partner",
                "Access to partner playbook",
                "#dfe9f3"),
])
