"""
Lift Log Analytics — Competition results

A meet has three attempts per lift, each with a weight and a good/no-lift
flag. The total is the best good attempt of each lift; a meet with no good
attempt at all has no total (None), not 0.
"""
import numpy as np
import pandas as pd

LIFTS = ("squat", "bench", "deadlift")
ATTEMPTS = (1, 2, 3)


def best_attempt(comp: dict, lift: str) -> float | None:
    best = None
    for attempt in ATTEMPTS:
        kg = comp.get(f"{lift}_{attempt}_kg")
        good = comp.get(f"{lift}_{attempt}_good")
        if kg is not None and good is True:
            if best is None or kg > best:
                best = kg
    return best


def compute_total(comp: dict) -> float | None:
    bests = [best_attempt(comp, lift) for lift in LIFTS]
    bests = [b for b in bests if b is not None]
    return sum(bests) if bests else None


def dots_coefficient(bw_kg: float, gender: str = "male") -> float:
    if gender == "male":
        a, b, c, d, e = -307.75076, 24.0900756, -0.1918759221, 0.0007391293, -0.000001093
    else:
        a, b, c, d, e = -57.96288, 13.6175032, -0.1126655495, 0.0005158568, -0.0000010706
    denom = a + b * bw_kg + c * bw_kg**2 + d * bw_kg**3 + e * bw_kg**4
    return round(500 / denom, 4) if denom != 0 else 0


def dots_score(comp: dict, gender: str = "male") -> float | None:
    """DOTS for a meet total; None without a total or a bodyweight."""
    total = compute_total(comp)
    bw = comp.get("bodyweight_kg")
    if total is None or not bw:
        return None
    return round(total * dots_coefficient(bw, gender), 1)


def competition_frame(competitions: list[dict], gender: str = "male") -> pd.DataFrame:
    """
    One row per meet, oldest first: bodyweight, every attempt (NaN when
    missed or not taken), best per lift, total and DOTS.
    """
    if not competitions:
        return pd.DataFrame()
    rows = []
    for comp in sorted(competitions, key=lambda c: c.get("meet_date") or ""):
        row = {
            "meet_name": comp.get("meet_name", ""),
            "meet_date": pd.Timestamp(comp["meet_date"]) if comp.get("meet_date") else pd.NaT,
            "bodyweight_kg": comp.get("bodyweight_kg"),
        }
        for lift in LIFTS:
            for attempt in ATTEMPTS:
                kg = comp.get(f"{lift}_{attempt}_kg")
                good = comp.get(f"{lift}_{attempt}_good")
                row[f"{lift}_{attempt}"] = kg if (kg is not None and good is True) else np.nan
            best = best_attempt(comp, lift)
            row[f"{lift}_best"] = best if best is not None else np.nan
        total = compute_total(comp)
        row["total"] = total if total is not None else np.nan
        dots = dots_score(comp, gender)
        row["dots"] = dots if dots is not None else np.nan
        rows.append(row)
    df = pd.DataFrame(rows)
    df["bodyweight_kg"] = pd.to_numeric(df["bodyweight_kg"], errors="coerce")
    df["total_delta"] = df["total"].diff()
    return df
