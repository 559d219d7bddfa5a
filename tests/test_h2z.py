import pandas as pd

from golf_tour.competition_engine.h2z import (
    H2ZLeg,
    build_h2z_diagnostic,
    compute_h2z_for_player,
    compute_h2z_leg,
    compute_h2z_table,
    diagnostic_lines,
    h2z_frame,
    legs_from_frame,
)
from golf_tour.context_engine.build_context import build_tour_context

from conftest import PARS, make_rows, par_rows, score_rows, strokes_for_points

# Holes 1-6 are par 3, the rest par 4
SHORT_PARS = [3] * 6 + [4] * 12


def _one_round_ctx(strokes):
    rows = make_rows(
        rounds=[{"id": "r1", "course_id": "c1", "round_no": 1}],
        players=[{"id": "p1", "name": "P1"}],
        round_players=[{"round_id": "r1", "player_id": "p1", "playing": True, "playing_handicap": 0}],
        scores=score_rows("r1", "p1", strokes),
        pars=par_rows(pars=SHORT_PARS),
    )
    return build_tour_context(rows)


def _three_round_ctx():
    rounds = [{"id": f"r{n}", "course_id": "c1", "round_no": n} for n in (1, 2, 3)]
    round_players = [
        {"round_id": "r1", "player_id": "p1", "playing": True},
        {"round_id": "r2", "player_id": "p1", "playing": False},
        {"round_id": "r3", "player_id": "p1", "playing": True},
    ]
    scores = (
        score_rows("r1", "p1", strokes_for_points([2] * 18))
        + score_rows("r2", "p1", ["P"] * 18)
        + score_rows("r3", "p1", strokes_for_points([2] * 18))
    )
    rows = make_rows(rounds, [{"id": "p1", "name": "P1"}], round_players, scores)
    return build_tour_context(rows)


def test_reset_on_zero_keeps_best_run():
    # par 3s score 2, 3, 0, 4, 4, 4
    ctx = _one_round_ctx([3, 2, 5, 1, 1, 1] + [4] * 12)
    res = compute_h2z_leg(ctx, "p1", H2ZLeg(1, 1, 1))

    assert res.final_score == 12
    assert res.best_score == 12
    assert res.best_len == 3
    assert (res.best_start_round_no, res.best_start_hole_no) == (1, 4)
    assert (res.best_end_round_no, res.best_end_hole_no) == (1, 6)


def test_final_score_differs_from_best():
    # 2, 2, 2 then a blob: the leg ends on zero
    ctx = _one_round_ctx([3, 3, 3, 5, 3, 6] + [4] * 12)
    res = compute_h2z_leg(ctx, "p1", H2ZLeg(1, 1, 1))

    assert res.final_score == 0
    assert res.best_score == 6
    assert res.best_len == 3
    assert res.best_end_hole_no == 3


def test_blank_par3_in_played_round_resets():
    ctx = _one_round_ctx([3, 3, None, 3] + [None] * 14)
    res = compute_h2z_leg(ctx, "p1", H2ZLeg(1, 1, 1))

    assert res.best_score == 4
    assert res.final_score == 0


def test_round_not_played_does_not_reset():
    ctx = _three_round_ctx()
    res = compute_h2z_leg(ctx, "p1", H2ZLeg(1, 1, 3))

    # four par 3s per round, two points each, rounds 1 and 3
    assert res.final_score == 16
    assert res.best_score == 16
    assert res.best_len == 8
    assert (res.best_start_round_no, res.best_start_hole_no) == (1, PARS.index(3) + 1)
    assert (res.best_end_round_no, res.best_end_hole_no) == (3, 16)


def test_reversed_bounds_are_normalized():
    ctx = _three_round_ctx()
    assert compute_h2z_leg(ctx, "p1", H2ZLeg(1, 3, 1)) == compute_h2z_leg(ctx, "p1", H2ZLeg(1, 1, 3))


def test_legs_are_independent():
    ctx = _three_round_ctx()
    by_leg = compute_h2z_for_player(ctx, "p1", [H2ZLeg(1, 1, 1), H2ZLeg(2, 2, 3)])

    assert by_leg[1].final_score == 8
    assert by_leg[2].final_score == 8
    assert by_leg[2].best_start_round_no == 3


def test_empty_leg_scores_zero_with_issue():
    ctx = _three_round_ctx()
    leg = H2ZLeg(9, 7, 8)
    assert compute_h2z_leg(ctx, "p1", leg).final_score == 0

    diag = build_h2z_diagnostic(ctx, "p1", leg)
    assert diag.events == ()
    assert any("No rounds included" in issue for issue in diag.issues)


def test_diagnostic_trace():
    ctx = _one_round_ctx([3, 2, 5, 1, 1, 1] + [4] * 12)
    diag = build_h2z_diagnostic(ctx, "p1", H2ZLeg(1, 1, 1))

    assert len(diag.events) == 6
    assert [e.points for e in diag.events] == [2, 3, 0, 4, 4, 4]
    assert [e.reset for e in diag.events] == [False, False, True, False, False, False]
    assert diag.result == compute_h2z_leg(ctx, "p1", H2ZLeg(1, 1, 1))

    lines = diagnostic_lines(diag)
    assert any("RESET" in line for line in lines)
    assert lines[-1] == "final=12 best=12 best_len=3"


def test_diagnostic_reports_player_not_playing():
    ctx = _three_round_ctx()
    diag = build_h2z_diagnostic(ctx, "p1", H2ZLeg(1, 2, 2))
    assert any("not playing" in issue for issue in diag.issues)
    assert diag.result.final_score == 0


def test_h2z_table_and_frame(tour_rows):
    ctx = build_tour_context(tour_rows)
    legs = legs_from_frame(pd.DataFrame({"leg_no": [1], "start_round_no": [1], "end_round_no": [2]}))
    table = compute_h2z_table(ctx, legs)

    assert table["alice"][1].final_score == 20
    assert table["bob"][1].final_score == 12
    assert table["cara"][1].final_score == 8
    # dan's blank back-nine par 3s reset him
    assert table["dan"][1].final_score == 0
    assert table["dan"][1].best_score == 4

    df = h2z_frame(ctx, table)
    assert list(df["player_id"]) == ["alice", "bob", "cara", "dan"]
    assert df.loc[0, "best_start"] == "R1 H3"
    assert df.loc[0, "best_end"] == "R2 H16"


def test_no_legs(tour_rows):
    ctx = build_tour_context(tour_rows)
    table = compute_h2z_table(ctx, [])
    assert h2z_frame(ctx, table).empty
