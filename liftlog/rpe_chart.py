"""
Lift Log Analytics — RPE chart

RTS-style %1RM table. One step down the sequence is half a rep or half an
RPE point, so %1RM for (reps, rpe) is a single lookup at
    (reps - 1) × 2 + (10 - rpe) × 2
Covers 1–12 reps and RPE 6–10 in half steps; anything else returns None.
"""
from liftlog.config import KG_TO_LB

_PERCENT_SEQUENCE = [
    100.0, 97.8, 95.5, 93.9, 92.2, 90.7, 89.2, 87.8, 86.3, 85.0,
    83.7, 82.4, 81.1, 79.9, 78.6, 77.4, 76.2, 75.1, 73.9, 72.3,
    70.7, 69.4, 68.0, 66.7, 65.3, 64.0, 62.6, 61.3, 59.9, 58.6,
    57.4,
]

REP_VALUES = list(range(1, 13))
RPE_VALUES = [10.0, 9.5, 9.0, 8.5, 8.0, 7.5, 7.0, 6.5, 6.0]


def rpe_percentage(reps: int, rpe: float) -> float | None:
    """Fraction of 1RM (0..1) for a set of `reps` at `rpe`, or None off the chart."""
    if reps not in REP_VALUES or rpe not in RPE_VALUES:
        return None
    idx = int((reps - 1) * 2 + (10 - rpe) * 2)
    return _PERCENT_SEQUENCE[idx] / 100


def round_to_increment(weight: float, increment: float = 2.5) -> float:
    if increment <= 0:
        return weight
    return round(round(weight / increment) * increment, 2)


def target_weight(one_rm: float, reps: int, rpe: float, increment: float = 2.5) -> float | None:
    """Working weight for reps @ RPE from a 1RM, rounded to loadable plates."""
    pct = rpe_percentage(reps, rpe)
    if pct is None or not one_rm or one_rm <= 0:
        return None
    return round_to_increment(one_rm * pct, increment)


def nearby_entries(reps: int, rpe: float, one_rm: float, increment: float = 2.5, spread: float = 1.0) -> list[dict]:
    """
    Same rep count at neighbouring RPEs (±spread), heaviest first.

    Each entry is {"rpe", "percentage", "weight"}; the requested RPE is
    included so the calculator can highlight it.
    """
    if rpe_percentage(reps, rpe) is None:
        return []
    entries = []
    for r in RPE_VALUES:
        if abs(r - rpe) > spread:
            continue
        pct = rpe_percentage(reps, r)
        entries.append({
            "rpe": r,
            "percentage": round(pct * 100, 1),
            "weight": round_to_increment(one_rm * pct, increment),
        })
    return entries


def estimate_e1rm(weight: float, reps: int, rpe: float | None = None) -> float:
    """
    Estimated 1RM from a logged set.

    With an on-chart RPE the set is divided by its %1RM; otherwise Epley,
    treating the set as all-out. 0 when the set can't be estimated.
    """
    if not weight or weight <= 0 or not reps or reps <= 0:
        return 0.0
    if rpe is not None:
        pct = rpe_percentage(int(reps), rpe)
        if pct:
            return round(weight / pct, 1)
    if reps == 1:
        return float(weight)
    return round(weight * (1 + reps / 30), 1)


def kg_to_lb(kg: float) -> float:
    return kg * KG_TO_LB


def lb_to_kg(lb: float) -> float:
    return lb / KG_TO_LB
