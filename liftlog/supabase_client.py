"""
Lift Log Analytics — Supabase (PostgREST) client

Read-only. Loads a program's hierarchy and stats settings in the nested shape
the engine consumes:

    {"blocks": [{"block": {...}, "weeks": [{"week": {...},
        "days": [{"day": {...}, "columns": [...], "rows": [...]}]}]}]}
"""
import time
import requests
from liftlog.config import SUPABASE_URL, SUPABASE_KEY

BASE_URL = f"{SUPABASE_URL}/rest/v1"
HEADERS = {
    "apikey": SUPABASE_KEY,
    "Authorization": f"Bearer {SUPABASE_KEY}",
    "Accept": "application/json",
}

MAX_RETRIES = 3
RETRY_BACKOFF = 2  # exponential backoff multiplier
TIMEOUT = 15


def _get(table: str, params: dict = None) -> list[dict]:
    """GET a PostgREST table with retry on 429 / 5xx / timeouts."""
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            r = requests.get(
                f"{BASE_URL}/{table}", headers=HEADERS,
                params=params or {}, timeout=TIMEOUT,
            )
            if r.status_code == 429:
                wait = RETRY_BACKOFF ** attempt
                print(f"  ⏳ Supabase rate limit, retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(wait)
                continue
            r.raise_for_status()
            return r.json()
        except requests.exceptions.Timeout:
            if attempt < MAX_RETRIES:
                print(f"  ⏳ Supabase timeout, retrying (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(RETRY_BACKOFF ** attempt)
            else:
                raise
        except requests.exceptions.HTTPError:
            if attempt < MAX_RETRIES and r.status_code >= 500:
                print(f"  ⏳ Supabase {r.status_code}, retrying (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(RETRY_BACKOFF ** attempt)
            else:
                raise
    raise requests.exceptions.RetryError(f"Supabase {table} failed after {MAX_RETRIES} attempts")


def _in_filter(ids: list[str]) -> str:
    return f"in.({','.join(ids)})"


# ── Tables ───────────────────────────────────────────────────────────

def fetch_programs() -> list[dict]:
    return _get("programs", {"select": "*", "order": "created_at.desc"})


def fetch_stats_settings(program_id: str) -> dict | None:
    """Column mapping for a program, None if it was never configured."""
    rows = _get("stats_settings", {"select": "*", "program_id": f"eq.{program_id}", "limit": 1})
    return rows[0] if rows else None


def fetch_blocks(program_id: str) -> list[dict]:
    return _get("blocks", {"select": "*", "program_id": f"eq.{program_id}", "order": "order.asc"})


def fetch_weeks(block_id: str) -> list[dict]:
    return _get("weeks", {"select": "*", "block_id": f"eq.{block_id}", "order": "week_number.asc"})


def fetch_days(week_id: str) -> list[dict]:
    return _get("days", {"select": "*", "week_id": f"eq.{week_id}", "order": "day_number.asc"})


def fetch_columns(day_ids: list[str]) -> list[dict]:
    if not day_ids:
        return []
    return _get("day_columns", {"select": "*", "day_id": _in_filter(day_ids), "order": "order.asc"})


def fetch_rows(day_ids: list[str]) -> list[dict]:
    if not day_ids:
        return []
    return _get("day_rows", {"select": "*", "day_id": _in_filter(day_ids), "order": "order.asc"})


def fetch_competitions() -> list[dict]:
    return _get("competitions", {"select": "*", "order": "meet_date.asc"})


# ── Hierarchy ────────────────────────────────────────────────────────

def load_hierarchy(program_id: str) -> dict:
    """
    Assemble the full Block → Week → Day tree for a program.

    One request per block for weeks, one per week for days, and one each for
    the columns and rows of all days in a week.
    """
    blocks = []
    for block in fetch_blocks(program_id):
        weeks = []
        for week in fetch_weeks(block["id"]):
            days = fetch_days(week["id"])
            day_ids = [d["id"] for d in days]
            columns = fetch_columns(day_ids)
            rows = fetch_rows(day_ids)

            day_entries = []
            for day in days:
                day_entries.append({
                    "day": day,
                    "columns": [c for c in columns if c["day_id"] == day["id"]],
                    "rows": [r for r in rows if r["day_id"] == day["id"]],
                })
            weeks.append({"week": week, "days": day_entries})
        blocks.append({"block": block, "weeks": weeks})
    return {"blocks": blocks}
