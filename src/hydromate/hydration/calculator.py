"""
Net hydration from logged drinks.

Raw volume is scaled by each drink's hydration multiplier to get the
effective volume. Caffeinated and alcoholic drinks then contribute a
dehydration penalty pool which is split across those entries in
proportion to their raw volume:

    entry_penalty = total_dehydration * amount / sum(raw dehydrating amount)

Net hydration is effective volume minus the pool, floored at zero.

Everything here is a pure function of its inputs.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Protocol, Sequence


@dataclass(frozen=True)
class DrinkMetadata:
    """The parts of a drink the calculator cares about."""
    hydration_multiplier: float = 1.0
    contains_caffeine: bool = False
    contains_alcohol: bool = False

    @property
    def is_dehydrating(self) -> bool:
        return self.contains_caffeine or self.contains_alcohol


NEUTRAL_DRINK = DrinkMetadata()


@dataclass(frozen=True)
class PenaltyPolicy:
    """
    Fraction of raw volume lost per substance.

    combine decides how an entry that is both caffeinated and alcoholic is
    penalised: "additive" sums both fractions, "max" takes the larger one.
    """
    caffeine_fraction: float = 0.05
    alcohol_fraction: float = 0.15
    combine: Literal["additive", "max"] = "additive"


DEFAULT_POLICY = PenaltyPolicy()


class EntryLike(Protocol):
    amount_ml: int
    drink_id: int


@dataclass(frozen=True)
class HydrationTotals:
    total_actual: float
    total_effective: float
    total_dehydration: float
    net_hydration: float
    entry_penalties: List[float] = field(default_factory=list)  # parallel to the input entries
    drink_breakdown: Dict[int, int] = field(default_factory=dict)  # drink_id -> raw ml


@dataclass(frozen=True)
class HydrationProgress:
    current: float
    goal: float          # goal after applying the threshold
    percentage: float    # 0-100
    remaining: float
    is_goal_reached: bool


def lookup_drink(drinks: Mapping[int, DrinkMetadata], drink_id: int) -> DrinkMetadata:
    """Metadata for drink_id; unknown drinks count as plain water."""
    return drinks.get(drink_id, NEUTRAL_DRINK)


def penalty_fraction(meta: DrinkMetadata, policy: PenaltyPolicy = DEFAULT_POLICY) -> float:
    """
    Dehydration fraction for a single drink under the policy.

    Returns:
        0.0 for drinks with neither caffeine nor alcohol.
    """
    fractions = []
    if meta.contains_caffeine:
        fractions.append(policy.caffeine_fraction)
    if meta.contains_alcohol:
        fractions.append(policy.alcohol_fraction)
    if not fractions:
        return 0.0
    if policy.combine == "max":
        return max(fractions)
    return sum(fractions)


def dehydration_pool(
    entries: Sequence[EntryLike],
    drinks: Mapping[int, DrinkMetadata],
    policy: PenaltyPolicy = DEFAULT_POLICY,
) -> float:
    """Total penalty derived from the per-substance fractions."""
    return sum(
        e.amount_ml * penalty_fraction(lookup_drink(drinks, e.drink_id), policy)
        for e in entries
    )


def distribute_penalty(
    entries: Sequence[EntryLike],
    drinks: Mapping[int, DrinkMetadata],
    total_dehydration: float,
) -> List[float]:
    """
    Split a penalty pool across the dehydrating entries by raw-volume share.

    Args:
        entries: logged entries, in any order.
        drinks: drink metadata keyed by drink id.
        total_dehydration: pool to distribute.

    Returns:
        One penalty per entry (same order). Non-dehydrating entries get 0.
        If no volume is dehydrating, every penalty is 0.
    """
    dehydrating = [lookup_drink(drinks, e.drink_id).is_dehydrating for e in entries]
    sum_raw = sum(e.amount_ml for e, flag in zip(entries, dehydrating) if flag)
    if sum_raw <= 0:
        return [0.0] * len(entries)
    return [
        total_dehydration * (e.amount_ml / sum_raw) if flag else 0.0
        for e, flag in zip(entries, dehydrating)
    ]


def calculate_totals(
    entries: Sequence[EntryLike],
    drinks: Mapping[int, DrinkMetadata],
    policy: PenaltyPolicy = DEFAULT_POLICY,
    total_dehydration: Optional[float] = None,
) -> HydrationTotals:
    """
    Compute actual, effective, dehydration and net totals for a set of entries.

    Args:
        entries: logged entries (anything with amount_ml and drink_id).
        drinks: drink metadata keyed by drink id; misses are neutral.
        policy: per-substance fractions used when total_dehydration is None.
        total_dehydration: caller-supplied penalty pool, overrides the policy.

    Returns:
        HydrationTotals. net_hydration is never negative.
    """
    total_actual = 0.0
    total_effective = 0.0
    breakdown: Dict[int, int] = {}

    for e in entries:
        meta = lookup_drink(drinks, e.drink_id)
        total_actual += e.amount_ml
        total_effective += e.amount_ml * meta.hydration_multiplier
        breakdown[e.drink_id] = breakdown.get(e.drink_id, 0) + e.amount_ml

    pool = (
        dehydration_pool(entries, drinks, policy)
        if total_dehydration is None
        else total_dehydration
    )
    penalties = distribute_penalty(entries, drinks, pool)
    # Nothing to attribute the pool to -> no penalty at all
    applied = sum(penalties)

    return HydrationTotals(
        total_actual=total_actual,
        total_effective=total_effective,
        total_dehydration=applied,
        net_hydration=max(0.0, total_effective - applied),
        entry_penalties=penalties,
        drink_breakdown=breakdown,
    )


def is_goal_reached(totals: HydrationTotals, goal: float, threshold: float = 1.0) -> bool:
    """True when net hydration covers goal * threshold."""
    return totals.net_hydration >= goal * threshold


def calculate_progress(net_hydration: float, goal: float, threshold: float = 1.0) -> HydrationProgress:
    """
    Progress toward the (threshold-adjusted) daily goal.

    A non-positive goal counts as already reached.
    """
    adjusted = goal * threshold
    if adjusted <= 0:
        return HydrationProgress(
            current=net_hydration, goal=adjusted, percentage=100.0,
            remaining=0.0, is_goal_reached=True,
        )
    percentage = min(100.0, max(0.0, net_hydration / adjusted * 100.0))
    return HydrationProgress(
        current=net_hydration,
        goal=adjusted,
        percentage=percentage,
        remaining=max(0.0, adjusted - net_hydration),
        is_goal_reached=net_hydration >= adjusted,
    )
