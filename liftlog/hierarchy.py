"""
Lift Log Analytics — Program hierarchy traversal

A program is Block → Week → Day, and each day is its own little spreadsheet:
columns with labels, rows with a sparse {column_id: text} cell map. Column ids
are per day, so a settings label must be resolved again inside every day.

`walk` flattens the hierarchy once into chronologically ordered day records
that both the volume and fatigue computations consume.
"""
from liftlog.config import REQUIRED_ROLES, WEEKDAY_NAMES


def _sort_key(field: str):
    # Missing ordering fields sort first instead of raising
    return lambda item: item.get(field) or 0


def week_label(block_order: int, week_number: int) -> str:
    return f"B{block_order + 1}W{week_number}"


def day_label(block_order: int, week_number: int, day_number: int) -> str:
    return f"B{block_order + 1}W{week_number}D{day_number}"


def weekday_name(week_day_index) -> str | None:
    """Weekday name ("Mon".."Sun") for a 0-based index, None when unknown or out of range."""
    if isinstance(week_day_index, int) and 0 <= week_day_index < len(WEEKDAY_NAMES):
        return WEEKDAY_NAMES[week_day_index]
    return None


def walk(hierarchy: dict) -> dict:
    """
    Flatten a hierarchy into ordered week labels and day records.

    Blocks are sorted by `order`, weeks by `week_number`, days by `day_number`
    (stable, so ties keep input order). Weeks of consecutive blocks form one
    continuous axis: `abs_week` is the week number plus the number of weeks in
    all earlier blocks.

    Returns {"week_labels": [...], "days": [...]} where each day record has
    block_order, week_number, abs_week, day_number, week_day_index, weekday,
    sleep_quality, sleep_time, week_label, label, columns (sorted by order)
    and rows (sorted by order).
    """
    week_labels = []
    days = []
    weeks_before = 0

    blocks = sorted((hierarchy or {}).get("blocks", []), key=lambda b: b["block"].get("order") or 0)
    for block_data in blocks:
        block_order = block_data["block"].get("order") or 0
        weeks = sorted(block_data.get("weeks", []), key=lambda w: w["week"].get("week_number") or 0)

        for week_data in weeks:
            week_number = week_data["week"].get("week_number") or 0
            w_label = week_label(block_order, week_number)
            week_labels.append(w_label)

            for day_data in sorted(week_data.get("days", []), key=lambda d: d["day"].get("day_number") or 0):
                day = day_data["day"]
                day_number = day.get("day_number") or 0
                days.append({
                    "block_order": block_order,
                    "week_number": week_number,
                    "abs_week": week_number + weeks_before,
                    "day_number": day_number,
                    "week_day_index": day.get("week_day_index"),
                    "weekday": weekday_name(day.get("week_day_index")),
                    "sleep_quality": day.get("sleep_quality"),
                    "sleep_time": day.get("sleep_time"),
                    "week_label": w_label,
                    "label": day_label(block_order, week_number, day_number),
                    "columns": sorted(day_data.get("columns", []), key=_sort_key("order")),
                    "rows": sorted(day_data.get("rows", []), key=_sort_key("order")),
                })

        weeks_before += len(weeks)

    return {"week_labels": week_labels, "days": days}


def resolve_columns(columns: list[dict], labels: dict) -> dict | None:
    """
    Resolve {role: label} to {role: column_id} within one day's columns.

    The first column (by order) whose label matches wins. Returns None when
    any role is unconfigured or has no matching column in this day.
    """
    resolved = {}
    for role, label in labels.items():
        if not label:
            return None
        col = next((c for c in columns if c.get("label") == label), None)
        if col is None:
            return None
        resolved[role] = col["id"]
    return resolved


def cell_text(row: dict, column_id: str) -> str:
    """Raw text of a row's cell, "" when the cell was never filled."""
    value = (row.get("cells") or {}).get(column_id)
    return "" if value is None else str(value)


def column_labels(hierarchy: dict) -> list[str]:
    """Every distinct column label in the program, sorted (for the mapping picker)."""
    labels = set()
    for block_data in (hierarchy or {}).get("blocks", []):
        for week_data in block_data.get("weeks", []):
            for day_data in week_data.get("days", []):
                labels.update(c["label"] for c in day_data.get("columns", []) if c.get("label"))
    return sorted(labels)


def missing_roles(settings: dict | None) -> list[str]:
    """Required column roles that are not configured."""
    settings = settings or {}
    return [role for role in REQUIRED_ROLES if not settings.get(role)]


def has_rpe(settings: dict | None) -> bool:
    """Fatigue scoring is opt-in: it needs an RPE column."""
    return bool((settings or {}).get("rpe_label"))
