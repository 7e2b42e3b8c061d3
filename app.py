"""
🏋️ Lift Log Analytics — Streamlit Dashboard
Run: streamlit run app.py
"""
import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from liftlog.config import (
    DEFAULT_PROGRAM_ID, REQUIRED_ROLES, OPTIONAL_ROLES, LIFT_COLORS, RESIDUAL_COLOR,
    CHART_COLORS, DEFAULT_SELECTED_EXERCISES, SUPABASE_URL, lift_label,
)
from liftlog.competition import competition_frame
from liftlog.engine import run, volume_frame, fatigue_frame, weekly_fatigue
from liftlog.fatigue import peak_residual
from liftlog.hierarchy import column_labels, missing_roles, has_rpe
from liftlog.rpe_chart import (
    REP_VALUES, RPE_VALUES, rpe_percentage, target_weight, nearby_entries, estimate_e1rm, kg_to_lb, lb_to_kg,
)
from liftlog.supabase_client import (
    fetch_programs, fetch_stats_settings, load_hierarchy, fetch_competitions,
)
from liftlog.volume import exercise_totals

# ── Page Config ──────────────────────────────────────────────────────
st.set_page_config(page_title="Lift Log Analytics", page_icon="🏋️", layout="wide", initial_sidebar_state="expanded")

PL = dict(
    template="plotly_dark", paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
    font=dict(color="#e2e8f0"), margin=dict(l=40, r=20, t=40, b=40),
)

ROLE_NAMES = {
    "exercise_label": "Exercise column",
    "sets_label": "Sets column",
    "reps_label": "Reps column",
    "weight_label": "Weight column",
    "rpe_label": "RPE column (optional)",
}


# ── Data Loading ─────────────────────────────────────────────────────
@st.cache_data(ttl=300)
def load_programs() -> list[dict]:
    return fetch_programs()


@st.cache_data(ttl=300)
def load_program(program_id: str) -> dict:
    return {
        "settings": fetch_stats_settings(program_id),
        "hierarchy": load_hierarchy(program_id),
        "ts": pd.Timestamp.now(),
    }


@st.cache_data(ttl=300)
def load_competitions() -> list[dict]:
    return fetch_competitions()


if not SUPABASE_URL:
    st.error("SUPABASE_URL is not set.")
    st.stop()

try:
    programs = load_programs()
except Exception as e:
    st.error(f"Error loading programs: {e}")
    st.stop()

# ── Sidebar ──────────────────────────────────────────────────────────
with st.sidebar:
    st.markdown("# 🏋️ Lift Log")
    program_ids = [p["id"] for p in programs]
    names = {p["id"]: p.get("name", p["id"]) for p in programs}
    default_idx = program_ids.index(DEFAULT_PROGRAM_ID) if DEFAULT_PROGRAM_ID in program_ids else 0
    program_id = st.selectbox(
        "Program", program_ids, index=default_idx,
        format_func=lambda pid: names.get(pid, pid),
    ) if program_ids else None

    if st.button("🔄 Refresh data", use_container_width=True):
        st.cache_data.clear()
        st.rerun()

    st.divider()
    page = st.radio("Section", [
        "📈 Volume",
        "🔥 Fatigue",
        "🧮 RPE Calculator",
        "🏆 Competitions",
    ], label_visibility="collapsed")

data = None
if program_id:
    try:
        data = load_program(program_id)
    except Exception as e:
        st.error(f"Error loading program: {e}")
        st.stop()
    mins_ago = int((pd.Timestamp.now() - data["ts"]).total_seconds() // 60)
    st.sidebar.caption("📡 Data loaded just now" if mins_ago < 1 else f"📡 Last load: {mins_ago} min ago")


def column_mapping(hierarchy: dict, saved: dict | None) -> dict:
    """Mapping picker; starts from the saved settings, edits live in the session only."""
    labels = column_labels(hierarchy)
    saved = saved or {}
    open_by_default = bool(missing_roles(saved))
    with st.expander("⚙️ Column Mapping", expanded=open_by_default):
        if not labels:
            st.info("No columns found in this program. Add some training data first.")
            return saved
        mapping = {}
        cols = st.columns(len(REQUIRED_ROLES) + len(OPTIONAL_ROLES))
        for col, role in zip(cols, [*REQUIRED_ROLES, *OPTIONAL_ROLES]):
            options = [""] + labels
            current = saved.get(role) or ""
            mapping[role] = col.selectbox(
                ROLE_NAMES[role], options,
                index=options.index(current) if current in options else 0,
                key=f"map_{role}",
            ) or None
    return mapping


# ══════════════════════════════════════════════════════════════════════
# 📈 VOLUME
# ══════════════════════════════════════════════════════════════════════
if page == "📈 Volume":
    st.markdown("## 📈 Weekly Volume")
    if data is None:
        st.warning("No programs found.")
        st.stop()

    settings = column_mapping(data["hierarchy"], data["settings"])
    missing = missing_roles(settings)
    if missing:
        st.warning(f"Map your columns to calculate volume: {', '.join(ROLE_NAMES[r] for r in missing)}")
        st.stop()

    volume = run(data["hierarchy"], settings)["volume"]
    if not volume["exercises"]:
        st.info("No volume data found. Check that your column mapping matches the labels used in your program.")
        st.stop()

    selected = st.multiselect(
        "Exercises", volume["exercises"],
        default=volume["exercises"][:DEFAULT_SELECTED_EXERCISES],
    )
    vf = volume_frame(volume)

    fig = go.Figure()
    for i, ex in enumerate(selected):
        # NaN weeks stay as gaps
        fig.add_trace(go.Scatter(
            x=vf.index, y=vf[ex], mode="lines+markers", name=ex,
            line=dict(color=CHART_COLORS[i % len(CHART_COLORS)], width=3),
            connectgaps=False,
        ))
    fig.update_layout(**PL, yaxis_title="Volume (kg)", height=420)
    st.plotly_chart(fig, use_container_width=True, key="chart_volume")

    totals = exercise_totals(volume)
    c1, c2, c3 = st.columns(3)
    c1.metric("Weeks", len(volume["points"]))
    c2.metric("Exercises", len(volume["exercises"]))
    c3.metric("Total volume", f"{totals['total_volume'].sum():,.0f} kg")
    st.dataframe(totals, use_container_width=True, hide_index=True)


# ══════════════════════════════════════════════════════════════════════
# 🔥 FATIGUE
# ══════════════════════════════════════════════════════════════════════
elif page == "🔥 Fatigue":
    st.markdown("## 🔥 Fatigue & Residual Load")
    if data is None:
        st.warning("No programs found.")
        st.stop()

    settings = column_mapping(data["hierarchy"], data["settings"])
    if not has_rpe(settings):
        st.info("Map an RPE column to enable fatigue tracking.")
        st.stop()

    sleep_adj = st.toggle("😴 Adjust for sleep quality", value=False)
    fatigue = run(data["hierarchy"], settings, {"sleep_adjustment": sleep_adj})["fatigue"]
    ff = fatigue_frame(fatigue)
    if ff.empty or not fatigue["active_lift_types"]:
        st.info("No fatigue data to display. Ensure your RPE column is mapped and contains values.")
        st.stop()

    fig = go.Figure()
    for lift in fatigue["active_lift_types"]:
        fig.add_trace(go.Bar(
            x=ff.index, y=ff[lift], name=lift_label(lift),
            marker_color=LIFT_COLORS.get(lift, "#a3a3a3"),
        ))
    fig.add_trace(go.Scatter(
        x=ff.index, y=ff["residual"], name="Residual", mode="lines+markers",
        line=dict(color=RESIDUAL_COLOR, width=3, dash="dot"),
    ))
    fig.update_layout(**PL, barmode="stack", yaxis_title="Fatigue", height=420, xaxis_tickangle=-45)
    st.plotly_chart(fig, use_container_width=True, key="chart_fatigue")

    peak = peak_residual(fatigue)
    last = fatigue["points"][-1]
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Current residual", f"{last['residual']:.0f}")
    c2.metric("Peak residual", f"{peak['residual']:.0f}", help=f"Reached on {peak['label']}")
    c3.metric("Last day", f"{last['total']:.0f}", help="Sleep-adjusted" if last["sleep_adjusted"] else None)
    c4.metric("Days logged", len(fatigue["points"]))

    st.markdown("### Weekly summary")
    st.dataframe(weekly_fatigue(fatigue), use_container_width=True)
    with st.expander("Daily detail"):
        st.dataframe(ff.round(1), use_container_width=True)


# ══════════════════════════════════════════════════════════════════════
# 🧮 RPE CALCULATOR
# ══════════════════════════════════════════════════════════════════════
elif page == "🧮 RPE Calculator":
    st.markdown("## 🧮 RPE Calculator")
    c1, c2, c3, c4, c5 = st.columns(5)
    unit = c1.radio("Unit", ["kg", "lb"], horizontal=True)
    one_rm = c2.number_input(f"1RM ({unit})", min_value=0.0, value=100.0 if unit == "kg" else 225.0, step=2.5)
    reps = c3.selectbox("Reps", REP_VALUES, index=4)
    rpe = c4.selectbox("RPE", RPE_VALUES, index=RPE_VALUES.index(8.0))
    increment = c5.number_input(f"Increment ({unit})", min_value=0.5, value=2.5 if unit == "kg" else 5.0, step=0.5)
    if one_rm:
        other = f"{lb_to_kg(one_rm):.1f} kg" if unit == "lb" else f"{kg_to_lb(one_rm):.1f} lb"
        st.caption(f"1RM ≈ {other}")

    weight = target_weight(one_rm, reps, rpe, increment)
    if weight is None:
        st.info("Enter a 1RM to calculate.")
    else:
        st.metric(f"{reps} @ RPE {rpe:g}", f"{weight:g} {unit}", help=f"{rpe_percentage(reps, rpe) * 100:.1f}% of 1RM")
        nearby = pd.DataFrame(nearby_entries(reps, rpe, one_rm, increment))
        st.dataframe(nearby.rename(columns={"weight": f"weight ({unit})", "percentage": "% 1RM"}),
                     use_container_width=True, hide_index=True)

    with st.expander("📐 Estimate 1RM from a set"):
        e1, e2, e3 = st.columns(3)
        set_weight = e1.number_input(f"Weight ({unit})", min_value=0.0, value=0.0, step=2.5)
        set_reps = e2.number_input("Reps done", min_value=0, max_value=30, value=5, step=1)
        set_rpe = e3.selectbox("RPE (optional)", [None, *RPE_VALUES], format_func=lambda r: "—" if r is None else f"{r:g}")
        e1rm = estimate_e1rm(set_weight, int(set_reps), set_rpe)
        if e1rm:
            st.metric("Estimated 1RM", f"{e1rm:g} {unit}", help="RPE chart when on-chart, Epley otherwise")


# ══════════════════════════════════════════════════════════════════════
# 🏆 COMPETITIONS
# ══════════════════════════════════════════════════════════════════════
elif page == "🏆 Competitions":
    st.markdown("## 🏆 Competitions")
    try:
        comps = competition_frame(load_competitions())
    except Exception as e:
        st.error(f"Error loading competitions: {e}")
        st.stop()
    if comps.empty:
        st.info("No competitions recorded.")
        st.stop()

    metrics = ["total", "squat_best", "bench_best", "deadlift_best", "bodyweight_kg", "dots"]
    chosen = st.multiselect("Metrics", metrics, default=metrics[:4])
    fig = go.Figure()
    for i, m in enumerate(chosen):
        fig.add_trace(go.Scatter(
            x=comps["meet_date"], y=comps[m], mode="lines+markers", name=m,
            line=dict(color=CHART_COLORS[i % len(CHART_COLORS)], width=3), connectgaps=False,
        ))
    fig.update_layout(**PL, yaxis_title="kg", height=380)
    st.plotly_chart(fig, use_container_width=True, key="chart_comps")

    best = comps.loc[comps["total"].idxmax()] if comps["total"].notna().any() else None
    if best is not None:
        c1, c2, c3 = st.columns(3)
        c1.metric("Best total", f"{best['total']:g} kg", help=best["meet_name"])
        c2.metric("Best DOTS", f"{comps['dots'].max():.1f}" if comps["dots"].notna().any() else "—")
        c3.metric("Meets", len(comps))
    st.dataframe(comps, use_container_width=True, hide_index=True)
