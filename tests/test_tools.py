"""
Tests for the tooling around the engine — RPE chart, competitions,
Supabase loader and the CLI report.
Run: pytest tests/ -v
"""
import pytest
import requests


# ═══════════════════════════════════════════════════════════════════════
# RPE CHART
# ═══════════════════════════════════════════════════════════════════════

class TestRpePercentage:

    def test_top_of_chart(self):
        from liftlog.rpe_chart import rpe_percentage
        assert rpe_percentage(1, 10) == 1.0

    def test_lookup(self):
        from liftlog.rpe_chart import rpe_percentage
        assert rpe_percentage(5, 8) == pytest.approx(0.811)
        assert rpe_percentage(1, 9.5) == pytest.approx(0.978)
        assert rpe_percentage(12, 6) == pytest.approx(0.574)

    def test_half_rpe_equals_half_rep(self):
        from liftlog.rpe_chart import rpe_percentage
        # one rep more == one RPE point less
        assert rpe_percentage(4, 8) == rpe_percentage(3, 7)

    def test_off_chart(self):
        from liftlog.rpe_chart import rpe_percentage
        assert rpe_percentage(13, 8) is None
        assert rpe_percentage(0, 8) is None
        assert rpe_percentage(5, 5.5) is None
        assert rpe_percentage(5, 8.25) is None


class TestRpeCalculator:

    def test_round_to_increment(self):
        from liftlog.rpe_chart import round_to_increment
        assert round_to_increment(101.2) == 100.0
        assert round_to_increment(101.3) == 102.5
        assert round_to_increment(101.3, 5) == 100.0
        assert round_to_increment(101.3, 0) == 101.3

    def test_target_weight(self):
        from liftlog.rpe_chart import target_weight
        assert target_weight(200, 5, 8) == 162.5
        assert target_weight(0, 5, 8) is None
        assert target_weight(200, 20, 8) is None

    def test_nearby_entries(self):
        from liftlog.rpe_chart import nearby_entries
        entries = nearby_entries(5, 8, 200)
        assert [e["rpe"] for e in entries] == [9.0, 8.5, 8.0, 7.5, 7.0]
        assert entries[0]["percentage"] == 83.7
        assert entries[2]["weight"] == 162.5
        assert nearby_entries(20, 8, 200) == []

    def test_nearby_clipped_at_chart_edge(self):
        from liftlog.rpe_chart import nearby_entries
        assert [e["rpe"] for e in nearby_entries(3, 10, 200)] == [10.0, 9.5, 9.0]

    def test_estimate_e1rm(self):
        from liftlog.rpe_chart import estimate_e1rm
        assert estimate_e1rm(100, 1) == 100
        assert estimate_e1rm(100, 5) == pytest.approx(116.7)
        assert estimate_e1rm(100, 5, 8) == pytest.approx(123.3)
        # off-chart RPE falls back to Epley
        assert estimate_e1rm(100, 5, 4) == pytest.approx(116.7)
        assert estimate_e1rm(0, 5) == 0
        assert estimate_e1rm(100, 0) == 0

    def test_unit_conversion(self):
        from liftlog.rpe_chart import kg_to_lb, lb_to_kg
        assert kg_to_lb(100) == pytest.approx(220.462)
        assert lb_to_kg(kg_to_lb(82.5)) == pytest.approx(82.5)


# ═══════════════════════════════════════════════════════════════════════
# COMPETITIONS
# ═══════════════════════════════════════════════════════════════════════

def _make_comp(name, date, bw, attempts: dict) -> dict:
    """Helper: attempts = {"squat": [(kg, good), ...], ...}"""
    comp = {"meet_name": name, "meet_date": date, "bodyweight_kg": bw}
    for lift, tries in attempts.items():
        for i, (kg, good) in enumerate(tries, 1):
            comp[f"{lift}_{i}_kg"] = kg
            comp[f"{lift}_{i}_good"] = good
    return comp


class TestCompetition:

    def test_best_ignores_missed_attempts(self):
        from liftlog.competition import best_attempt
        comp = _make_comp("A", "2026-03-01", 83, {"squat": [(200, True), (210, True), (215, False)]})
        assert best_attempt(comp, "squat") == 210
        assert best_attempt(comp, "bench") is None

    def test_unjudged_attempt_not_counted(self):
        from liftlog.competition import best_attempt
        comp = _make_comp("A", "2026-03-01", 83, {"bench": [(140, True), (145, None)]})
        assert best_attempt(comp, "bench") == 140

    def test_compute_total(self):
        from liftlog.competition import compute_total
        comp = _make_comp("A", "2026-03-01", 83, {
            "squat": [(200, True), (210, True), (215, False)],
            "bench": [(140, True), (145, False), (145, True)],
            "deadlift": [(240, True), (250, False), (250, False)],
        })
        assert compute_total(comp) == 210 + 145 + 240

    def test_no_good_attempt_no_total(self):
        from liftlog.competition import compute_total, dots_score
        comp = _make_comp("A", "2026-03-01", 83, {"squat": [(200, False)]})
        assert compute_total(comp) is None
        assert dots_score(comp) is None

    def test_dots(self):
        from liftlog.competition import dots_coefficient, dots_score
        assert dots_coefficient(83) > dots_coefficient(120)
        assert dots_coefficient(60, "female") > dots_coefficient(60, "male")
        comp = _make_comp("A", "2026-03-01", 83, {"squat": [(200, True)]})
        assert dots_score(comp) == pytest.approx(round(200 * dots_coefficient(83), 1))
        comp["bodyweight_kg"] = None
        assert dots_score(comp) is None

    def test_competition_frame(self):
        from liftlog.competition import competition_frame
        comps = [
            _make_comp("Nationals", "2026-06-01", 83, {
                "squat": [(215, True)], "bench": [(150, True)], "deadlift": [(260, True)],
            }),
            _make_comp("Regionals", "2026-02-01", 82, {
                "squat": [(200, True), (210, False)], "bench": [(140, True)], "deadlift": [(250, True)],
            }),
        ]
        df = competition_frame(comps)
        assert list(df["meet_name"]) == ["Regionals", "Nationals"]
        assert df.iloc[0]["total"] == 590
        assert df.iloc[1]["total_delta"] == 35
        assert df.iloc[0]["squat_1"] == 200
        assert pd_isna(df.iloc[0]["squat_2"])
        assert df.iloc[0]["squat_best"] == 200

    def test_empty_frame(self):
        from liftlog.competition import competition_frame
        assert competition_frame([]).empty


def pd_isna(value) -> bool:
    import pandas as pd
    return bool(pd.isna(value))


# ═══════════════════════════════════════════════════════════════════════
# SUPABASE CLIENT
# ═══════════════════════════════════════════════════════════════════════

class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload if payload is not None else []
        self.status_code = status_code

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


TABLES = {
    "blocks": [
        {"id": "b2", "program_id": "p1", "order": 1},
        {"id": "b1", "program_id": "p1", "order": 0},
    ],
    "weeks": [
        {"id": "w1", "block_id": "b1", "week_number": 1},
        {"id": "w2", "block_id": "b2", "week_number": 1},
    ],
    "days": [
        {"id": "d1", "week_id": "w1", "day_number": 1, "week_day_index": 0},
        {"id": "d2", "week_id": "w1", "day_number": 2, "week_day_index": 2},
        {"id": "d3", "week_id": "w2", "day_number": 1, "week_day_index": 0},
    ],
    "day_columns": [
        {"id": f"{d}-{label}", "day_id": d, "label": label, "order": i}
        for d in ("d1", "d2", "d3")
        for i, label in enumerate(["Exercise", "Sets", "Reps", "Weight", "RPE"])
    ],
    "day_rows": [
        {"id": "r1", "day_id": "d1", "order": 0,
         "cells": {"d1-Exercise": "Squat", "d1-Sets": "3", "d1-Reps": "5", "d1-Weight": "100", "d1-RPE": "8"}},
        {"id": "r2", "day_id": "d2", "order": 0,
         "cells": {"d2-Exercise": "Bench", "d2-Sets": "3", "d2-Reps": "5", "d2-Weight": "80", "d2-RPE": "7"}},
        {"id": "r3", "day_id": "d3", "order": 0,
         "cells": {"d3-Exercise": "Deadlift", "d3-Sets": "1", "d3-Reps": "3", "d3-Weight": "200", "d3-RPE": "6-7"}},
    ],
    "stats_settings": [{
        "program_id": "p1", "exercise_label": "Exercise", "sets_label": "Sets",
        "reps_label": "Reps", "weight_label": "Weight", "rpe_label": "RPE",
    }],
}


def _fake_get(calls: list):
    """requests.get stand-in that applies PostgREST eq./in. filters to TABLES."""
    def get(url, headers=None, params=None, timeout=None):
        table = url.rsplit("/", 1)[-1]
        calls.append((table, dict(params or {})))
        rows = list(TABLES.get(table, []))
        for key, value in (params or {}).items():
            if key in ("select", "order", "limit"):
                continue
            if value.startswith("eq."):
                rows = [r for r in rows if str(r.get(key)) == value[3:]]
            elif value.startswith("in.("):
                wanted = value[4:-1].split(",")
                rows = [r for r in rows if r.get(key) in wanted]
        return FakeResponse(rows)
    return get


class TestSupabaseClient:

    def test_in_filter(self):
        from liftlog.supabase_client import _in_filter
        assert _in_filter(["a", "b"]) == "in.(a,b)"

    def test_stats_settings(self, monkeypatch):
        from liftlog import supabase_client
        calls = []
        monkeypatch.setattr(supabase_client.requests, "get", _fake_get(calls))
        assert supabase_client.fetch_stats_settings("p1")["rpe_label"] == "RPE"
        assert supabase_client.fetch_stats_settings("nope") is None
        assert calls[0] == ("stats_settings", {"select": "*", "program_id": "eq.p1", "limit": 1})

    def test_empty_day_ids_skip_request(self, monkeypatch):
        from liftlog import supabase_client
        calls = []
        monkeypatch.setattr(supabase_client.requests, "get", _fake_get(calls))
        assert supabase_client.fetch_columns([]) == []
        assert supabase_client.fetch_rows([]) == []
        assert calls == []

    def test_load_hierarchy(self, monkeypatch):
        from liftlog import supabase_client
        monkeypatch.setattr(supabase_client.requests, "get", _fake_get([]))
        h = supabase_client.load_hierarchy("p1")
        assert len(h["blocks"]) == 2
        first_week = next(b for b in h["blocks"] if b["block"]["id"] == "b1")["weeks"][0]
        assert [d["day"]["id"] for d in first_week["days"]] == ["d1", "d2"]
        d1 = first_week["days"][0]
        assert len(d1["columns"]) == 5
        assert all(c["day_id"] == "d1" for c in d1["columns"])
        assert [r["id"] for r in d1["rows"]] == ["r1"]

    def test_loaded_hierarchy_runs_through_engine(self, monkeypatch):
        from liftlog import supabase_client
        from liftlog.engine import run
        monkeypatch.setattr(supabase_client.requests, "get", _fake_get([]))
        result = run(supabase_client.load_hierarchy("p1"), supabase_client.fetch_stats_settings("p1"))
        assert result["volume"]["points"] == [
            {"label": "B1W1", "Squat": 1500, "Bench": 1200},
            {"label": "B2W1", "Deadlift": 600},
        ]
        assert [p["label"] for p in result["fatigue"]["points"]] == ["B1W1D1", "B1W1D2", "B2W1D1"]
        assert result["fatigue"]["active_lift_types"] == ["squat", "bench", "deadlift"]

    def test_retries_server_errors(self, monkeypatch):
        from liftlog import supabase_client
        responses = [FakeResponse(status_code=503), FakeResponse([{"id": "p1"}])]
        sleeps = []
        monkeypatch.setattr(supabase_client.requests, "get", lambda *a, **k: responses.pop(0))
        monkeypatch.setattr(supabase_client.time, "sleep", sleeps.append)
        assert supabase_client.fetch_programs() == [{"id": "p1"}]
        assert sleeps == [2]

    def test_rate_limit_then_give_up(self, monkeypatch):
        from liftlog import supabase_client
        sleeps = []
        monkeypatch.setattr(supabase_client.requests, "get", lambda *a, **k: FakeResponse(status_code=429))
        monkeypatch.setattr(supabase_client.time, "sleep", sleeps.append)
        with pytest.raises(requests.exceptions.RetryError):
            supabase_client.fetch_programs()
        assert sleeps == [2, 4, 8]

    def test_client_error_not_retried(self, monkeypatch):
        from liftlog import supabase_client
        calls = []

        def get(*a, **k):
            calls.append(1)
            return FakeResponse(status_code=401)

        monkeypatch.setattr(supabase_client.requests, "get", get)
        with pytest.raises(requests.exceptions.HTTPError):
            supabase_client.fetch_programs()
        assert len(calls) == 1

    def test_timeout_reraised_after_last_attempt(self, monkeypatch):
        from liftlog import supabase_client

        def get(*a, **k):
            raise requests.exceptions.Timeout("slow")

        monkeypatch.setattr(supabase_client.requests, "get", get)
        monkeypatch.setattr(supabase_client.time, "sleep", lambda s: None)
        with pytest.raises(requests.exceptions.Timeout):
            supabase_client.fetch_programs()


# ═══════════════════════════════════════════════════════════════════════
# REPORT
# ═══════════════════════════════════════════════════════════════════════

class TestReport:

    def _patch(self, monkeypatch, settings):
        from liftlog import report, supabase_client
        monkeypatch.setattr(supabase_client.requests, "get", _fake_get([]))
        monkeypatch.setattr(report, "fetch_stats_settings", lambda pid: settings)

    def test_full_report(self, monkeypatch, capsys):
        from liftlog.report import run_report
        self._patch(monkeypatch, TABLES["stats_settings"][0])
        summary = run_report("p1")
        assert summary == {"weeks": 2, "days": 3, "exercises": 3}
        out = capsys.readouterr().out
        assert "Squat: 1,500 kg over 1 weeks" in out
        assert "Peak residual" in out

    def test_incomplete_mapping(self, monkeypatch, capsys):
        from liftlog.report import run_report
        self._patch(monkeypatch, {"exercise_label": "Exercise"})
        assert run_report("p1") == {"weeks": 0, "days": 0, "exercises": 0}
        out = capsys.readouterr().out
        assert "sets_label" in out
        assert "Available columns: Exercise, RPE, Reps, Sets, Weight" in out

    def test_without_rpe(self, monkeypatch, capsys):
        from liftlog.report import run_report
        settings = {k: v for k, v in TABLES["stats_settings"][0].items() if k != "rpe_label"}
        self._patch(monkeypatch, settings)
        summary = run_report("p1")
        assert summary["days"] == 0
        assert "fatigue skipped" in capsys.readouterr().out

    def test_csv_export(self, monkeypatch, tmp_path):
        from liftlog import supabase_client
        from liftlog.engine import run
        from liftlog.report import export_csv
        monkeypatch.setattr(supabase_client.requests, "get", _fake_get([]))
        result = run(supabase_client.load_hierarchy("p1"), TABLES["stats_settings"][0])
        paths = export_csv("p1", result, out_dir=str(tmp_path / "backup"))
        assert len(paths) == 2
        assert all((tmp_path / "backup").joinpath(p.rsplit("/", 1)[-1]).exists() for p in paths)
        assert "volume_p1_" in paths[0]

    def test_csv_export_nothing_to_write(self, tmp_path):
        from liftlog.engine import empty_result
        from liftlog.report import export_csv
        assert export_csv("p1", empty_result(), out_dir=str(tmp_path)) == []
