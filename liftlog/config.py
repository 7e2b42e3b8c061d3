"""
Lift Log Analytics — Configuration

Backend credentials come from the environment. Everything else here is the
single source of truth for the training-load model: lift multipliers, decay
constants, sleep scaling and the column roles a program must map.
"""
import os

# ── Supabase ─────────────────────────────────────────────────────────
SUPABASE_URL = os.environ.get("SUPABASE_URL", "").rstrip("/")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY", "")
DEFAULT_PROGRAM_ID = os.environ.get("LIFTLOG_PROGRAM_ID", "")

# ── Column mapping ───────────────────────────────────────────────────
# Settings map semantic roles to column *labels*; ids differ per day.
REQUIRED_ROLES = {
    "exercise_label": "Exercise",
    "sets_label": "Sets",
    "reps_label": "Reps",
    "weight_label": "Weight",
}
OPTIONAL_ROLES = {
    "rpe_label": "RPE",
}

# ═════════════════════════════════════════════════════════════════════
# LIFT CLASSIFICATION
#
# Checked in this order, first match wins. "Deadlift Squat" is a deadlift.
# ═════════════════════════════════════════════════════════════════════

LIFT_KEYWORDS = [
    ("deadlift", ("deadlift", "dead lift")),
    ("squat", ("squat",)),
    ("bench", ("bench",)),
]
UNCLASSIFIED = "none"

# Chart / legend order
LIFT_CATEGORIES = ("squat", "bench", "deadlift")

# ═════════════════════════════════════════════════════════════════════
# FATIGUE MODEL
# ═════════════════════════════════════════════════════════════════════

# Relative systemic stress per rep of effort
LIFT_MULTIPLIERS = {
    "bench": 1.0,
    "squat": 1.3,
    "deadlift": 1.6,
}

# RPE at or below this carries no fatigue
RPE_EFFORT_FLOOR = 5.0

# ~70% of yesterday's fatigue is still there today (≈2-day half-life)
BASE_DECAY = 0.70
DECAY_BOUNDS = (0.55, 0.85)

# Sleep quality 0..100 → factor 0.85..1.15
SLEEP_FACTOR_MIN = 0.85
SLEEP_FACTOR_SPAN = 0.30
SLEEP_QUALITY_BOUNDS = (0.0, 100.0)

DAYS_PER_WEEK = 7

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# ═════════════════════════════════════════════════════════════════════
# PRESENTATION
# ═════════════════════════════════════════════════════════════════════

LIFT_COLORS = {
    "squat": "#8b5cf6",
    "bench": "#22d3ee",
    "deadlift": "#ec4899",
}
RESIDUAL_COLOR = "#f59e0b"

CHART_COLORS = [
    "#8b5cf6", "#22d3ee", "#ec4899", "#facc15", "#4ade80",
    "#fb923c", "#60a5fa", "#c084fc", "#2dd4bf", "#ef4444",
]

# Exercises preselected in the volume chart
DEFAULT_SELECTED_EXERCISES = 5

KG_TO_LB = 2.20462


def lift_label(category: str) -> str:
    """Display name for a lift category ("squat" → "Squat")."""
    return category[:1].upper() + category[1:]
