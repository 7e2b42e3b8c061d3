"""
Lift Log Analytics — Fatigue engine

Two layers:

1. Day score. Every squat/bench/deadlift row contributes
   reps × max(RPE - 5, 0) × lift multiplier. Optional sleep scaling multiplies
   the day by 0.85 (bad night) .. 1.15 (great night).

2. Residual fatigue. A single left-to-right fold over all days in
   chronological order:

       residual = residual × decay^gap + day_total

   decay is 0.70 per calendar day (sleep-adjusted when enabled) and gap is
   the number of calendar days since the last day with a known weekday,
   measured on a week axis that runs continuously across blocks.

The fold state is an explicit dict threaded through `advance_residual`, so
the recurrence can be tested without building a hierarchy.
"""
from liftlog.config import (
    LIFT_CATEGORIES,
    LIFT_MULTIPLIERS,
    RPE_EFFORT_FLOOR,
    BASE_DECAY,
    DECAY_BOUNDS,
    SLEEP_FACTOR_MIN,
    SLEEP_FACTOR_SPAN,
    SLEEP_QUALITY_BOUNDS,
    DAYS_PER_WEEK,
    UNCLASSIFIED,
)
from liftlog.hierarchy import walk as walk_hierarchy, resolve_columns, cell_text, has_rpe
from liftlog.lifts import classify_lift
from liftlog.parsing import parse_number, parse_optional, parse_rpe

FATIGUE_ROLES = ("exercise_label", "reps_label", "rpe_label")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ═════════════════════════════════════════════════════════════════════
# 1. DAY SCORE
# ═════════════════════════════════════════════════════════════════════

def set_fatigue(reps: float, rpe: float, category: str) -> float:
    """Fatigue of one logged row. Zero at or below RPE 5."""
    effort = max(rpe - RPE_EFFORT_FLOOR, 0.0)
    return reps * effort * LIFT_MULTIPLIERS[category]


def score_day(day: dict, settings: dict) -> tuple[dict, set]:
    """
    Per-lift fatigue subtotals for one day record.

    Returns ({"squat": .., "bench": .., "deadlift": ..}, active) where active
    holds the categories that recorded a nonzero set. A day without the
    exercise/reps/RPE columns scores 0 everywhere. Unclassified exercises and
    rows with reps <= 0 or RPE <= 0 (not logged) are skipped.
    """
    subtotals = {category: 0.0 for category in LIFT_CATEGORIES}
    active = set()

    labels = {role: (settings or {}).get(role) for role in FATIGUE_ROLES}
    cols = resolve_columns(day["columns"], labels)
    if cols is None:
        return subtotals, active

    for row in day["rows"]:
        category = classify_lift(cell_text(row, cols["exercise_label"]))
        if category == UNCLASSIFIED:
            continue
        reps = parse_number(cell_text(row, cols["reps_label"]))
        rpe = parse_rpe(cell_text(row, cols["rpe_label"]))
        if reps <= 0 or rpe <= 0:
            continue
        value = set_fatigue(reps, rpe, category)
        subtotals[category] += value
        if value > 0:
            active.add(category)

    return subtotals, active


def as_sleep_quality(value) -> float | None:
    """Numeric sleep quality, or None when the day has no usable sleep data."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # NaN reads as no data
        return float(value) if value == value else None
    return parse_optional(value)


def sleep_factor(quality: float) -> float:
    """0.85 at quality 0, 1.15 at quality 100; quality is clamped first."""
    q = _clamp(as_sleep_quality(quality) or 0.0, *SLEEP_QUALITY_BOUNDS)
    return SLEEP_FACTOR_MIN + SLEEP_FACTOR_SPAN * (q / 100.0)


# ═════════════════════════════════════════════════════════════════════
# 2. RESIDUAL FATIGUE
# ═════════════════════════════════════════════════════════════════════

def effective_decay(sleep_quality: float | None = None, sleep_adjustment: bool = False) -> float:
    """
    Fraction of residual fatigue carried to the next calendar day.

    Better sleep clears fatigue faster (lower decay). Always within
    DECAY_BOUNDS when sleep-adjusted.
    """
    quality = as_sleep_quality(sleep_quality)
    if not sleep_adjustment or quality is None:
        return BASE_DECAY
    return _clamp(BASE_DECAY / sleep_factor(quality), *DECAY_BOUNDS)


def decay_gap(prev_index, prev_abs_week, week_day_index, abs_week) -> int:
    """
    Calendar days between the previous tracked day and this one.

    Falls back to 1 when either weekday is unknown or the data goes
    backwards / repeats a day.
    """
    if prev_index is None or week_day_index is None:
        return 1
    gap = (abs_week - prev_abs_week) * DAYS_PER_WEEK + (week_day_index - prev_index)
    return gap if gap > 0 else 1


def new_residual_state() -> dict:
    return {"residual": 0.0, "prev_index": None, "prev_abs_week": None}


def advance_residual(state: dict, day: dict, day_total: float, sleep_adjustment: bool = False) -> dict:
    """
    One step of the fold. Returns a new state; `state` is not modified.

    `day` needs week_day_index, abs_week and sleep_quality. The gap baseline
    only moves on days with a known weekday.
    """
    decay = effective_decay(day.get("sleep_quality"), sleep_adjustment)
    gap = decay_gap(state["prev_index"], state["prev_abs_week"], day.get("week_day_index"), day.get("abs_week"))
    residual = state["residual"] * decay ** gap + day_total

    if day.get("week_day_index") is not None:
        return {"residual": residual, "prev_index": day["week_day_index"], "prev_abs_week": day["abs_week"]}
    return {**state, "residual": residual}


def residual_series(days: list[dict], totals: list[float], sleep_adjustment: bool = False) -> list[float]:
    """Running residual after each day; `days` must already be chronological."""
    state = new_residual_state()
    series = []
    for day, total in zip(days, totals):
        state = advance_residual(state, day, total, sleep_adjustment)
        series.append(state["residual"])
    return series


# ═════════════════════════════════════════════════════════════════════
# 3. FULL SERIES
# ═════════════════════════════════════════════════════════════════════

def compute_fatigue(hierarchy: dict, settings: dict, sleep_adjustment: bool = False, walk: dict = None) -> dict:
    """
    Per-day fatigue points with carried-over residual.

    Returns {"points": [...], "active_lift_types": [...]}; both empty when no
    RPE column is configured. Every day is emitted, including days that
    scored nothing, because the residual still decays through them.
    """
    if not has_rpe(settings):
        return {"points": [], "active_lift_types": []}
    if walk is None:
        walk = walk_hierarchy(hierarchy)

    points = []
    active = set()
    state = new_residual_state()

    for day in walk["days"]:
        subtotals, day_active = score_day(day, settings)
        active |= day_active

        quality = as_sleep_quality(day["sleep_quality"])
        adjusted = sleep_adjustment and quality is not None
        if adjusted:
            factor = sleep_factor(quality)
            subtotals = {k: v * factor for k, v in subtotals.items()}
        total = sum(subtotals[c] for c in LIFT_CATEGORIES)

        state = advance_residual(state, day, total, sleep_adjustment)

        points.append({
            "label": day["label"],
            "week_label": day["week_label"],
            "weekday": day["weekday"],
            **subtotals,
            "total": total,
            "sleep_adjusted": adjusted,
            "sleep_quality": quality,
            "sleep_time": day["sleep_time"],
            "residual": state["residual"],
        })

    return {
        "points": points,
        "active_lift_types": [c for c in LIFT_CATEGORIES if c in active],
    }


def peak_residual(fatigue: dict) -> dict | None:
    """The day carrying the most residual fatigue, or None without points."""
    if not fatigue["points"]:
        return None
    return max(fatigue["points"], key=lambda p: p["residual"])
