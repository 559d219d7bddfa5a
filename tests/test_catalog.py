import dataclasses

import pytest

from golf_tour.competition_engine.catalog import (
    build_default_registry,
    group_stableford,
    individual_stableford,
    longest_streak,
)
from golf_tour.competition_engine.engine import run_competition
from golf_tour.context_engine.build_context import build_round_context, build_tour_context
from golf_tour.context_engine.entities import Entity

from conftest import make_rows, score_rows, strokes_for_points


def _totals(result):
    return {row.entry_id: row.total for row in result.rows}


def _order(result):
    return [row.entry_id for row in result.rows]


@pytest.fixture
def registry():
    return build_default_registry(botb_round_nos=[1])


@pytest.fixture
def ctx(tour_rows):
    entities = [
        Entity("pair:ab", "Alice & Bob", ("alice", "bob"), "pair"),
        Entity("pair:cd", "Cara & Dan", ("cara", "dan"), "pair"),
        Entity("team:1", "Team One", ("alice", "bob", "cara"), "team"),
    ]
    return build_tour_context(tour_rows, entities=entities)


def test_registry_contents(registry):
    ids = registry.ids()
    for cid in (
        "tour_stableford",
        "tour_napoleon_par3_avg",
        "tour_big_george_par4_avg",
        "tour_grand_canyon_par5_avg",
        "tour_bagel_man_zero_pct",
        "tour_wizard_four_plus_pct",
        "tour_eclectic",
        "tour_schumacher_holes_1_3_avg",
        "tour_closer_holes_16_18_avg",
        "tour_hot_streak",
        "tour_cold_streak",
        "tour_botb_stableford",
        "tour_pair_best_ball_stableford",
        "tour_pair_aggregate_stableford",
        "tour_team_best_m_minus_zeros",
        "round_stableford",
    ):
        assert cid in ids
    assert registry.get("tour_bagel_man_zero_pct").lower_is_better
    assert "tour_botb_stableford" not in build_default_registry().ids()


def test_napoleon_counts_only_complete_rounds(registry, ctx):
    res = run_competition(registry.get("tour_napoleon_par3_avg"), ctx)
    totals = _totals(res)
    assert totals["alice"] == pytest.approx(2.5)
    assert totals["bob"] == pytest.approx(1.5)
    assert totals["cara"] == pytest.approx(1.5)
    # dan: r1 incomplete, r2 not playing
    assert totals["dan"] == 0
    assert _order(res) == ["alice", "bob", "cara", "dan"]
    assert res.rows[0].stats["holes_played"] == 8


def test_bagel_man_lower_is_better(registry, ctx):
    res = run_competition(registry.get("tour_bagel_man_zero_pct"), ctx)
    totals = _totals(res)
    assert totals["cara"] == 25.0
    assert totals["dan"] == 0.0
    assert _order(res)[-1] == "cara"
    cara = next(r for r in res.rows if r.entry_id == "cara")
    assert cara.stats["zero_count"] == 9
    assert cara.stats["holes_played"] == 36


def test_eclectic_takes_best_per_hole(registry, ctx):
    res = run_competition(registry.get("tour_eclectic"), ctx)
    totals = _totals(res)
    assert totals == {"alice": 54, "bob": 36, "cara": 36, "dan": 0}

    alice = res.rows[0]
    assert alice.stats["best_by_hole"] == [3] * 18
    assert alice.stats["rounds_counted"] == 2


def test_eclectic_at_least_any_complete_round(registry, ctx):
    res = run_competition(registry.get("tour_eclectic"), ctx)
    totals = _totals(res)
    for p in ctx.players:
        for r in ctx.rounds:
            if r.is_playing(p.id) and r.is_complete(p.id):
                assert totals[p.id] >= r.round_points(p.id)


def test_hole_range_averages(registry, ctx):
    schumacher = _totals(run_competition(registry.get("tour_schumacher_holes_1_3_avg"), ctx))
    closer = _totals(run_competition(registry.get("tour_closer_holes_16_18_avg"), ctx))
    assert schumacher["alice"] == pytest.approx(7.5)
    assert closer["cara"] == pytest.approx(3.0)
    assert closer["dan"] == 0


def test_hot_streak_tie_prefers_earlier_round(registry, ctx):
    res = run_competition(registry.get("tour_hot_streak"), ctx)
    rows = {r.entry_id: r for r in res.rows}

    assert rows["alice"].total == 18
    assert rows["alice"].stats["round_no"] == 1
    assert rows["bob"].stats["round_no"] == 2
    assert rows["dan"].total == 9
    assert (rows["dan"].stats["start_hole"], rows["dan"].stats["end_hole"]) == (1, 9)


def test_cold_streak(registry, ctx):
    rows = {r.entry_id: r for r in run_competition(registry.get("tour_cold_streak"), ctx).rows}
    assert rows["bob"].total == 18
    assert rows["cara"].total == 9
    assert (rows["cara"].stats["start_hole"], rows["cara"].stats["end_hole"]) == (10, 18)
    assert rows["alice"].total == 0
    assert rows["alice"].stats["round_no"] is None


def test_streak_earlier_start_hole_wins_within_round():
    # par, bogey, par, par, bogey, par, par, bogey ... : two runs of 2, first at hole 3
    points = [2, 1, 2, 2, 1, 2, 2] + [1] * 11
    rows = make_rows(
        rounds=[{"id": "r1", "course_id": "c1", "round_no": 1}],
        players=[{"id": "p1", "name": "P1"}],
        round_players=[{"round_id": "r1", "player_id": "p1", "playing": True}],
        scores=score_rows("r1", "p1", strokes_for_points(points)),
    )
    res = run_competition(longest_streak("hot", "Hot", "hot"), build_tour_context(rows))
    assert res.rows[0].total == 2
    assert res.rows[0].stats["start_hole"] == 3


def test_tour_stableford_tie_breaks_on_back_nine(registry, ctx):
    res = run_competition(registry.get("tour_stableford"), ctx)
    assert _totals(res) == {"alice": 90, "bob": 54, "cara": 54, "dan": 18}
    # bob and cara tie on 54: bob's back nine is stronger
    assert _order(res) == ["alice", "bob", "cara", "dan"]


def test_best_n_and_final_required(ctx):
    best1 = run_competition(individual_stableford("best1", "Best 1", best_n=1), ctx)
    assert _totals(best1) == {"alice": 54, "bob": 36, "cara": 36, "dan": 18}

    final = run_competition(individual_stableford("final", "Final", best_n=1, final_required=True), ctx)
    assert _totals(final) == {"alice": 54, "bob": 36, "cara": 36, "dan": 0}

    with pytest.raises(ValueError):
        individual_stableford("bad", "Bad", best_n=0)


def test_botb_uses_selected_round_numbers(registry, ctx):
    res = run_competition(registry.get("tour_botb_stableford"), ctx)
    assert _totals(res) == {"alice": 36, "bob": 18, "cara": 18, "dan": 18}
    assert _order(res) == ["alice", "bob", "cara", "dan"]


def test_pair_best_ball_and_aggregate(registry, ctx):
    best_ball = run_competition(registry.get("tour_pair_best_ball_stableford"), ctx)
    # cara & dan drop out: dan is incomplete in r1
    assert _totals(best_ball) == {"pair:ab": 90}
    assert best_ball.rows[0].stats["members"] == "Alice / Bob"

    aggregate = run_competition(registry.get("tour_pair_aggregate_stableford"), ctx)
    assert _totals(aggregate) == {"pair:ab": 144}


def test_team_best_m_minus_zeros(registry, ctx):
    res = run_competition(registry.get("tour_team_best_m_minus_zeros"), ctx)
    row = res.rows[0]
    assert row.entry_id == "team:1"
    assert row.total == 144
    assert row.stats["zero_penalty_total"] == 9
    assert row.stats["team_best_m"] == 2

    solo_best = dataclasses.replace(ctx, team_best_m=1)
    assert _totals(run_competition(registry.get("tour_team_best_m_minus_zeros"), solo_best)) == {"team:1": 81}


def test_pair_definition_ignores_teams(ctx):
    res = run_competition(group_stableford("p", "P", kind="pair", method="best_ball"), ctx)
    assert "team:1" not in _totals(res)
    with pytest.raises(ValueError):
        group_stableford("x", "X", method="worst_ball")


def test_round_scope_competitions(registry, tour_rows):
    rctx = build_round_context(tour_rows, "r1")
    res = run_competition(registry.get("round_stableford"), rctx)
    assert _totals(res) == {"alice": 36, "bob": 18, "cara": 18, "dan": 18}

    # tour definitions on a round context return nothing
    assert run_competition(registry.get("tour_eclectic"), rctx).rows == ()
    assert registry.get("tour_eclectic").compute(rctx) == []


def test_round_scope_pairs_and_teams(registry, tour_rows):
    entities = [
        Entity("pair:ab", "Alice & Bob", ("alice", "bob"), "pair"),
        Entity("pair:cd", "Cara & Dan", ("cara", "dan"), "pair"),
        Entity("team:1", "Team One", ("alice", "bob", "cara"), "team"),
        Entity("team:2", "Team Two", ("bob", "cara", "dan"), "team"),
    ]
    pairs = registry.get("round_pair_best_ball_stableford")
    teams = registry.get("round_team_best_m_minus_zeros")

    r1 = build_round_context(tour_rows, "r1", entities=entities)
    # dan stopped after nine holes, so every group with him drops out
    assert _totals(run_competition(pairs, r1)) == {"pair:ab": 36}
    team_res = run_competition(teams, r1)
    # front: 2 + 2 a hole, back: 2 + 1 minus cara's zero
    assert _totals(team_res) == {"team:1": 54}
    assert (team_res.rows[0].front9, team_res.rows[0].back9) == (36, 18)

    r2 = build_round_context(tour_rows, "r2", entities=entities)
    # dan is not playing r2
    assert _totals(run_competition(pairs, r2)) == {"pair:ab": 54}
    assert _totals(run_competition(teams, r2)) == {"team:1": 90}
