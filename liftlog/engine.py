"""
Lift Log Analytics — Engine entry point

run(hierarchy, settings, options) → {"volume": ..., "fatigue": ...}

Pure and synchronous: no I/O, no caching, nothing shared between calls.
Callers re-run the whole thing whenever the data or the mapping changes.
"""
import numpy as np
import pandas as pd

from liftlog.config import LIFT_CATEGORIES
from liftlog.fatigue import compute_fatigue
from liftlog.hierarchy import walk as walk_hierarchy, has_rpe
from liftlog.volume import aggregate_volume

DEFAULT_OPTIONS = {"sleep_adjustment": False}


def empty_result() -> dict:
    return {
        "volume": {"points": [], "exercises": []},
        "fatigue": {"points": [], "active_lift_types": []},
    }


def run(hierarchy: dict, settings: dict, options: dict = None) -> dict:
    """
    Compute weekly volume and daily fatigue for one program.

    Volume is always computed; fatigue only when an RPE column is mapped.
    The hierarchy is walked once and the ordered day records are shared.
    Without settings there is nothing to resolve columns against, so both
    series come back empty.
    """
    if not settings:
        return empty_result()
    opts = {**DEFAULT_OPTIONS, **(options or {})}

    walk = walk_hierarchy(hierarchy)
    volume = aggregate_volume(hierarchy, settings, walk=walk)
    if has_rpe(settings):
        fatigue = compute_fatigue(hierarchy, settings, bool(opts["sleep_adjustment"]), walk=walk)
    else:
        fatigue = empty_result()["fatigue"]

    return {"volume": volume, "fatigue": fatigue}


# ═════════════════════════════════════════════════════════════════════
# DataFrame views (dashboard, CLI, CSV export)
# ═════════════════════════════════════════════════════════════════════

def volume_frame(volume: dict) -> pd.DataFrame:
    """Weeks × exercises; NaN where an exercise wasn't trained that week."""
    if not volume["points"]:
        return pd.DataFrame()
    df = pd.DataFrame(volume["points"]).set_index("label")
    return df.reindex(columns=volume["exercises"]).astype(float)


def fatigue_frame(fatigue: dict) -> pd.DataFrame:
    """One row per day with per-lift fatigue, total and residual."""
    if not fatigue["points"]:
        return pd.DataFrame()
    df = pd.DataFrame(fatigue["points"]).set_index("label")
    df["sleep_quality"] = pd.to_numeric(df["sleep_quality"], errors="coerce")
    df["sleep_time"] = pd.to_numeric(df["sleep_time"], errors="coerce")
    df["carried"] = (df["residual"] - df["total"]).clip(lower=0)
    df["carried_pct"] = np.where(df["residual"] > 0, (df["carried"] / df["residual"] * 100).round(1), 0)
    return df[["week_label", "weekday", *LIFT_CATEGORIES, "total", "residual", "carried", "carried_pct",
               "sleep_adjusted", "sleep_quality", "sleep_time"]]


def weekly_fatigue(fatigue: dict) -> pd.DataFrame:
    """Daily fatigue summed per week, with the week-end residual."""
    df = fatigue_frame(fatigue)
    if df.empty:
        return pd.DataFrame()
    return (
        df.groupby("week_label", sort=False)
        .agg(
            days=("total", "size"),
            total=("total", "sum"),
            squat=("squat", "sum"),
            bench=("bench", "sum"),
            deadlift=("deadlift", "sum"),
            end_residual=("residual", "last"),
            peak_residual=("residual", "max"),
        )
        .round(1)
    )
