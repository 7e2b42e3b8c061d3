"""
Lift Log Analytics — Program report
Run manually or from cron: python -m liftlog.report <program_id> [--sleep] [--csv]
"""
import os
import sys
from datetime import datetime

from liftlog.config import DEFAULT_PROGRAM_ID, LIFT_CATEGORIES, lift_label
from liftlog.engine import run, volume_frame, fatigue_frame, weekly_fatigue
from liftlog.fatigue import peak_residual
from liftlog.hierarchy import missing_roles, has_rpe, column_labels
from liftlog.supabase_client import fetch_stats_settings, load_hierarchy
from liftlog.volume import exercise_totals


def export_csv(program_id: str, result: dict, out_dir: str = "backup") -> list[str]:
    """Write volume and fatigue frames as CSV. Returns the written paths."""
    os.makedirs(out_dir, exist_ok=True)
    today = datetime.now().strftime("%Y-%m-%d")
    written = []

    vol = volume_frame(result["volume"])
    if not vol.empty:
        path = os.path.join(out_dir, f"volume_{program_id}_{today}.csv")
        vol.to_csv(path)
        written.append(path)

    fat = fatigue_frame(result["fatigue"])
    if not fat.empty:
        path = os.path.join(out_dir, f"fatigue_{program_id}_{today}.csv")
        fat.to_csv(path)
        written.append(path)

    return written


def run_report(program_id: str, sleep_adjustment: bool = False, csv: bool = False) -> dict:
    """
    Report pipeline:
    1. Fetch settings + hierarchy from Supabase
    2. Run the engine
    3. Print volume and fatigue summaries
    4. Optionally export CSV
    """
    print(f"📊 Lift Log Report — program {program_id}")
    print(f"   {datetime.now().isoformat()}")

    # 1. Fetch
    print("\n📥 Fetching program from Supabase...")
    settings = fetch_stats_settings(program_id)
    hierarchy = load_hierarchy(program_id)
    n_days = sum(len(w["days"]) for b in hierarchy["blocks"] for w in b["weeks"])
    print(f"   {len(hierarchy['blocks'])} blocks, {n_days} days")

    missing = missing_roles(settings)
    if missing:
        print(f"\n⚠️  Column mapping incomplete: {', '.join(missing)}")
        labels = column_labels(hierarchy)
        if labels:
            print(f"   Available columns: {', '.join(labels)}")
        return {"weeks": 0, "days": 0, "exercises": 0}

    # 2. Run
    result = run(hierarchy, settings, {"sleep_adjustment": sleep_adjustment})
    volume, fatigue = result["volume"], result["fatigue"]

    # 3. Volume
    print(f"\n🏋️ Volume ({len(volume['points'])} weeks, {len(volume['exercises'])} exercises):")
    totals = exercise_totals(volume)
    for _, row in totals.head(10).iterrows():
        print(f"   {row['exercise']}: {row['total_volume']:,.0f} kg over {row['weeks']} weeks")
    vol = volume_frame(volume)
    if not vol.empty:
        weekly = vol.sum(axis=1)
        for label, total in weekly.tail(4).items():
            print(f"   📅 {label}: {total:,.0f} kg")

    # 4. Fatigue
    if not has_rpe(settings):
        print("\n💤 No RPE column mapped — fatigue skipped")
    else:
        mode = "sleep-adjusted" if sleep_adjustment else "unadjusted"
        print(f"\n🔥 Fatigue ({mode}, lifts: {', '.join(lift_label(c) for c in fatigue['active_lift_types']) or '—'}):")
        wk = weekly_fatigue(fatigue)
        for label, row in wk.tail(4).iterrows():
            parts = " / ".join(f"{lift_label(c)} {row[c]:.0f}" for c in LIFT_CATEGORIES if row[c] > 0)
            print(f"   📅 {label}: {row['total']:.0f} ({parts or 'no scored sets'}) → residual {row['end_residual']:.1f}")
        peak = peak_residual(fatigue)
        if peak and peak["residual"] > 0:
            print(f"   ⛰️  Peak residual: {peak['residual']:.1f} on {peak['label']}")

    # 5. Export
    if csv:
        for path in export_csv(program_id, result):
            print(f"💾 {path}")

    return {
        "weeks": len(volume["points"]),
        "days": len(fatigue["points"]),
        "exercises": len(volume["exercises"]),
    }


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    program = args[0] if args else DEFAULT_PROGRAM_ID
    if not program:
        print("Usage: python -m liftlog.report <program_id> [--sleep] [--csv]")
        sys.exit(2)

    try:
        summary = run_report(program, sleep_adjustment="--sleep" in sys.argv, csv="--csv" in sys.argv)
    except Exception as e:
        print(f"\n❌ Report FAILED: {e}")
        sys.exit(1)

    print(f"\nDone. {summary['weeks']} weeks, {summary['days']} days, {summary['exercises']} exercises.")
