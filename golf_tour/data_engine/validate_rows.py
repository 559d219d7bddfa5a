"""
DATA ENGINE - Validate Rows
============================
Quality checks on normalized tour rows BEFORE building contexts.

Nothing here blocks scoring: the context builder degrades bad data to 0 points.
The report tells an admin WHY a leaderboard looks wrong.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from config import HOLES_PER_ROUND, TEES
from golf_tour.data_engine.records import TourRows
from golf_tour.utils.helpers import safe_numeric

logger = logging.getLogger(__name__)


class RowValidator:
    """Validates tour rows for referential and scoring consistency."""

    def __init__(self):
        self.par_range = (3, 5)
        self.stroke_index_range = (1, HOLES_PER_ROUND)
        self.handicap_range = (0, 54)
        self.max_reasonable_strokes = 15

    def check_par_tables(self, rows: TourRows) -> Dict:
        """Every course used by a round needs a full 1..18 table on at least one tee."""
        pars = rows.frame("pars")
        used_courses = sorted({r.course_id for r in rows.rounds if r.course_id})

        issues = {}
        for course_id in used_courses:
            sub = pars[pars["course_id"] == course_id]
            full_tees = [
                tee for tee in TEES
                if sub[sub["tee"] == tee]["hole_number"].nunique() == HOLES_PER_ROUND
            ]
            if not full_tees:
                issues[course_id] = {
                    "tees_present": sorted(sub["tee"].unique().tolist()),
                    "holes_present": int(sub["hole_number"].nunique()),
                }

        rounds_without_course = [r.id for r in rows.rounds if not r.course_id]
        if rounds_without_course:
            issues["rounds_without_course"] = rounds_without_course
        return issues

    def check_par_values(self, rows: TourRows) -> Dict:
        pars = rows.frame("pars")
        issues = {}

        lo, hi = self.par_range
        odd_par = pars[(pars["par"] < lo) | (pars["par"] > hi)]
        if len(odd_par) > 0:
            issues["par_out_of_range"] = {
                "n_rows": int(len(odd_par)),
                "expected_range": self.par_range,
                "example_values": odd_par["par"].head(8).tolist(),
            }

        lo, hi = self.stroke_index_range
        odd_si = pars[(pars["stroke_index"] < lo) | (pars["stroke_index"] > hi)]
        if len(odd_si) > 0:
            issues["stroke_index_out_of_range"] = {
                "n_rows": int(len(odd_si)),
                "expected_range": self.stroke_index_range,
            }

        dup_si = pars.groupby(["course_id", "tee"])["stroke_index"].agg(lambda s: s.duplicated().any())
        dup_si = dup_si[dup_si.astype(bool)]
        if len(dup_si) > 0:
            issues["duplicate_stroke_index"] = [f"{c}/{t}" for c, t in dup_si.index]
        return issues

    def check_references(self, rows: TourRows) -> Dict:
        round_ids = {r.id for r in rows.rounds}
        player_ids = {p.id for p in rows.players}

        orphan_scores = [
            s for s in rows.scores
            if s.round_id not in round_ids or s.player_id not in player_ids
        ]
        orphan_assignments = [
            rp for rp in rows.round_players
            if rp.round_id not in round_ids or rp.player_id not in player_ids
        ]
        out = {}
        if orphan_scores:
            out["orphan_scores"] = len(orphan_scores)
        if orphan_assignments:
            out["orphan_assignments"] = len(orphan_assignments)
        return out

    def check_duplicate_scores(self, rows: TourRows) -> Dict:
        scores = rows.frame("scores")
        dupes = scores[scores.duplicated(subset=["round_id", "player_id", "hole_number"], keep=False)]
        return {
            "has_duplicates": len(dupes) > 0,
            "n_duplicates": int(len(dupes)),
            "examples": dupes[["round_id", "player_id", "hole_number"]].head(10).to_dict(orient="records"),
        }

    def check_stroke_values(self, rows: TourRows) -> Dict:
        scores = safe_numeric(rows.frame("scores"), ["strokes"])
        strokes = scores["strokes"]
        big = scores[strokes > self.max_reasonable_strokes]
        both = scores[scores["pickup"].astype(bool) & strokes.notna()]
        out = {}
        if len(big) > 0:
            out["suspicious_strokes"] = {
                "n_rows": int(len(big)),
                "threshold": self.max_reasonable_strokes,
            }
        if len(both) > 0:
            out["pickup_with_strokes"] = int(len(both))
        return out

    def check_handicaps(self, rows: TourRows) -> Dict:
        rp = safe_numeric(rows.frame("round_players"), ["playing_handicap"])
        playing = rp[rp["playing"].astype(bool)]
        hcp = playing["playing_handicap"]
        lo, hi = self.handicap_range
        out = {}
        missing = int(hcp.isna().sum())
        if missing:
            out["missing_handicap"] = missing
        outliers = playing[(hcp < lo) | (hcp > hi)]
        if len(outliers) > 0:
            out["handicap_out_of_range"] = {
                "n_rows": int(len(outliers)),
                "expected_range": self.handicap_range,
            }
        return out

    def validate_all(self, rows: TourRows) -> Dict:
        logger.info("Running tour row validation...")

        report = {"passed": True, "errors": [], "warnings": [], "checks": {}}

        par_tables = self.check_par_tables(rows)
        report["checks"]["par_tables"] = par_tables
        if par_tables:
            report["errors"].append(f"Incomplete par tables for {len(par_tables)} course(s)")

        par_values = self.check_par_values(rows)
        report["checks"]["par_values"] = par_values
        if par_values:
            report["warnings"].append(f"Par table anomalies: {sorted(par_values)}")

        refs = self.check_references(rows)
        report["checks"]["references"] = refs
        if refs:
            report["warnings"].append(f"Unmatched rows will be ignored: {refs}")

        dupes = self.check_duplicate_scores(rows)
        report["checks"]["duplicate_scores"] = dupes
        if dupes["has_duplicates"]:
            report["warnings"].append(f"Duplicate score rows: {dupes['n_duplicates']}")

        strokes = self.check_stroke_values(rows)
        report["checks"]["stroke_values"] = strokes
        if strokes:
            report["warnings"].append(f"Stroke anomalies: {sorted(strokes)}")

        hcps = self.check_handicaps(rows)
        report["checks"]["handicaps"] = hcps
        if hcps:
            report["warnings"].append(f"Handicap anomalies: {sorted(hcps)}")

        if report["errors"]:
            logger.error("✗ Validation FAILED: %s errors", len(report["errors"]))
            report["passed"] = False
        elif report["warnings"]:
            logger.warning("⚠ Validation passed with %s warnings", len(report["warnings"]))
        else:
            logger.info("✓ Validation PASSED")

        return report


def validate_tour_rows(rows: TourRows) -> Dict:
    validator = RowValidator()
    return validator.validate_all(rows)


def _range(bounds) -> str:
    return f"{bounds[0]}..{bounds[1]}"


def report_lines(report: Dict) -> List[str]:
    """
    Plain-text summary of a validation report, one finding per line.
    Par-table gaps come first since they zero whole rounds.
    """
    n_err, n_warn = len(report["errors"]), len(report["warnings"])
    lines = ["PASSED" if report["passed"] else "FAILED", f"{n_err} error(s), {n_warn} warning(s)"]
    checks = report["checks"]

    par_tables = dict(checks.get("par_tables", {}))
    no_course = par_tables.pop("rounds_without_course", [])
    for course_id, gap in par_tables.items():
        tees = ", ".join(gap["tees_present"]) or "none"
        lines.append(
            f"Course {course_id}: no full par table "
            f"({gap['holes_present']}/{HOLES_PER_ROUND} holes, tees {tees})"
        )
    if no_course:
        lines.append(f"Rounds without a course: {', '.join(no_course)}")

    par_values = checks.get("par_values", {})
    if "par_out_of_range" in par_values:
        odd = par_values["par_out_of_range"]
        lines.append(
            f"Par outside {_range(odd['expected_range'])} on {odd['n_rows']} row(s): {odd['example_values']}"
        )
    if "stroke_index_out_of_range" in par_values:
        odd = par_values["stroke_index_out_of_range"]
        lines.append(f"Stroke index outside {_range(odd['expected_range'])} on {odd['n_rows']} row(s)")
    for course_tee in par_values.get("duplicate_stroke_index", []):
        lines.append(f"Duplicate stroke index on {course_tee}")

    refs = checks.get("references", {})
    if refs.get("orphan_scores"):
        lines.append(f"{refs['orphan_scores']} score row(s) for an unknown round or player")
    if refs.get("orphan_assignments"):
        lines.append(f"{refs['orphan_assignments']} assignment row(s) for an unknown round or player")

    dupes = checks.get("duplicate_scores", {})
    if dupes.get("has_duplicates"):
        examples = ", ".join(
            f"{d['round_id']}/{d['player_id']}/H{d['hole_number']}" for d in dupes["examples"][:3]
        )
        lines.append(f"{dupes['n_duplicates']} duplicate score row(s), e.g. {examples}")

    strokes = checks.get("stroke_values", {})
    if "suspicious_strokes" in strokes:
        big = strokes["suspicious_strokes"]
        lines.append(f"{big['n_rows']} stroke value(s) above {big['threshold']}")
    if strokes.get("pickup_with_strokes"):
        lines.append(f"{strokes['pickup_with_strokes']} pickup row(s) that also carry strokes")

    hcps = checks.get("handicaps", {})
    if hcps.get("missing_handicap"):
        lines.append(f"{hcps['missing_handicap']} playing assignment(s) without a handicap")
    if "handicap_out_of_range" in hcps:
        odd = hcps["handicap_out_of_range"]
        lines.append(f"{odd['n_rows']} playing handicap(s) outside {_range(odd['expected_range'])}")

    return lines


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    from golf_tour.data_engine.load_tour_rows import load_tour_rows

    for line in report_lines(validate_tour_rows(load_tour_rows())):
        print(line)
