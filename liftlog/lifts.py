"""Exercise name → tracked lift category."""
from liftlog.config import LIFT_KEYWORDS, UNCLASSIFIED


def classify_lift(exercise_name) -> str:
    """
    Classify a free-text exercise name as deadlift, squat, bench or "none".

    Case-insensitive substring match in fixed priority (deadlift first), so
    "Paused Squat" is a squat and "Deadlift Squat" is a deadlift.
    """
    if not exercise_name:
        return UNCLASSIFIED
    name = str(exercise_name).lower()
    for category, keywords in LIFT_KEYWORDS:
        if any(k in name for k in keywords):
            return category
    return UNCLASSIFIED
