"""
Lift Log Analytics — Weekly volume (sets × reps × weight) per exercise

Output is sparse on purpose: an exercise that wasn't trained in a week is
absent from that week's point, not 0, so the chart draws a gap instead of a
drop to zero.
"""
import pandas as pd

from liftlog.hierarchy import walk as walk_hierarchy, resolve_columns, cell_text
from liftlog.parsing import parse_number

VOLUME_ROLES = ("exercise_label", "sets_label", "reps_label", "weight_label")

ENTRY_COLUMNS = ["week_label", "label", "exercise", "sets", "reps", "weight", "volume"]


def volume_entries(walk: dict, settings: dict) -> pd.DataFrame:
    """
    One row per logged exercise row with positive volume, in traversal order.

    Days missing any of the four mapped columns are skipped entirely; rows
    with an empty exercise cell or volume <= 0 are dropped.
    """
    labels = {role: (settings or {}).get(role) for role in VOLUME_ROLES}
    rows = []
    for day in walk["days"]:
        cols = resolve_columns(day["columns"], labels)
        if cols is None:
            continue
        for row in day["rows"]:
            exercise = cell_text(row, cols["exercise_label"]).strip()
            if not exercise:
                continue
            sets = parse_number(cell_text(row, cols["sets_label"]))
            reps = parse_number(cell_text(row, cols["reps_label"]))
            weight = parse_number(cell_text(row, cols["weight_label"]))
            volume = sets * reps * weight
            if volume <= 0:
                continue
            rows.append({
                "week_label": day["week_label"], "label": day["label"],
                "exercise": exercise, "sets": sets, "reps": reps,
                "weight": weight, "volume": volume,
            })
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def aggregate_volume(hierarchy: dict, settings: dict, walk: dict = None) -> dict:
    """
    Total volume per exercise per week.

    Returns {"points": [{"label": "B1W1", "<exercise>": volume, ...}, ...],
    "exercises": [sorted names]}. Every week gets a point, in traversal order,
    even when nothing was logged that week.
    """
    if walk is None:
        walk = walk_hierarchy(hierarchy)
    entries = volume_entries(walk, settings)

    totals = {}
    if not entries.empty:
        grouped = entries.groupby(["week_label", "exercise"], sort=False)["volume"].sum()
        for (label, exercise), vol in grouped.items():
            totals.setdefault(label, {})[exercise] = float(vol)

    exercises = sorted(entries["exercise"].unique().tolist()) if not entries.empty else []

    points = []
    for label in walk["week_labels"]:
        point = {"label": label}
        week_totals = totals.get(label, {})
        for exercise in exercises:
            if exercise in week_totals:
                point[exercise] = week_totals[exercise]
        points.append(point)

    return {"points": points, "exercises": exercises}


def exercise_totals(volume: dict) -> pd.DataFrame:
    """Program-wide volume per exercise, heaviest first."""
    if not volume["exercises"]:
        return pd.DataFrame(columns=["exercise", "total_volume", "weeks"])
    frame = pd.DataFrame(volume["points"]).set_index("label")
    rows = [
        {
            "exercise": ex,
            "total_volume": float(frame[ex].sum()),
            "weeks": int(frame[ex].notna().sum()),
        }
        for ex in volume["exercises"]
    ]
    return pd.DataFrame(rows).sort_values("total_volume", ascending=False).reset_index(drop=True)
