from __future__ import annotations

import pytest

from golf_tour.data_engine.records import TourRows

# Course c1, men's tee. Par 3s on holes 3, 7, 11, 16. Stroke index = hole number.
PARS = [4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 3, 4, 5, 4, 4, 3, 4, 5]
PAR3_HOLES = [3, 7, 11, 16]


def par_rows(course_id="c1", tee="M", pars=PARS):
    return [
        {"course_id": course_id, "hole_number": i + 1, "tee": tee, "par": p, "stroke_index": i + 1}
        for i, p in enumerate(pars)
    ]


def strokes_for_points(points, pars=PARS):
    """Gross strokes (handicap 0) that score the given Stableford points per hole."""
    return [par + 2 - pts for par, pts in zip(pars, points)]


def score_rows(round_id, player_id, strokes):
    """One score row per hole; None skips the hole, "P" is a pickup."""
    rows = []
    for i, s in enumerate(strokes):
        if s is None:
            continue
        rows.append(
            {
                "round_id": round_id,
                "player_id": player_id,
                "hole_number": i + 1,
                "strokes": None if s == "P" else s,
                "pickup": s == "P",
            }
        )
    return rows


def make_rows(rounds, players, round_players, scores, pars=None):
    return TourRows.from_rows(
        rounds=rounds,
        players=players,
        round_players=round_players,
        scores=scores,
        pars=par_rows() if pars is None else pars,
    )


@pytest.fixture
def tour_rows():
    """
    Two rounds on c1, all handicaps 0.

    R1: alice par everywhere (36), bob bogey everywhere (18),
        cara par front / double back (18), dan front nine only (incomplete)
    R2: alice birdie everywhere (54), bob par everywhere (36),
        cara par everywhere (36), dan not playing (scores entered anyway)
    """
    rounds = [
        {"id": "r2", "course_id": "c1", "name": "Day Two", "round_no": 2},
        {"id": "r1", "course_id": "c1", "name": "Day One", "round_no": 1},
    ]
    players = [
        {"id": "alice", "name": "Alice", "gender": "M"},
        {"id": "bob", "name": "Bob", "gender": "M"},
        {"id": "cara", "name": "Cara", "gender": "M"},
        {"id": "dan", "name": "Dan", "gender": "M"},
    ]
    round_players = [
        {"round_id": rid, "player_id": pid, "playing": True, "playing_handicap": 0}
        for rid in ("r1", "r2")
        for pid in ("alice", "bob", "cara", "dan")
    ]
    round_players[-1] = {"round_id": "r2", "player_id": "dan", "playing": False, "playing_handicap": 0}

    scores = []
    scores += score_rows("r1", "alice", strokes_for_points([2] * 18))
    scores += score_rows("r1", "bob", strokes_for_points([1] * 18))
    scores += score_rows("r1", "cara", strokes_for_points([2] * 9 + [0] * 9))
    scores += score_rows("r1", "dan", strokes_for_points([2] * 9) + [None] * 9)
    scores += score_rows("r2", "alice", strokes_for_points([3] * 18))
    scores += score_rows("r2", "bob", strokes_for_points([2] * 18))
    scores += score_rows("r2", "cara", strokes_for_points([2] * 18))
    scores += score_rows("r2", "dan", strokes_for_points([4] * 18))

    return make_rows(rounds, players, round_players, scores)


def write_tour_csvs(data_dir, pars=PARS, groups=True, legs=True):
    """
    One-round CSV export using the alias column names admin exports use.

    p1: handicap 0, par on every hole (36)
    p2: handicap 18, bogey everywhere with a pickup on hole 1 (34)
    """
    data_dir.mkdir(parents=True, exist_ok=True)

    (data_dir / "rounds.csv").write_text("round_id,course,round_name,round_number\nr1,c1,Opening Day,1\n")
    (data_dir / "players.csv").write_text("player_id,player,sex\np1,Pat,M\np2,Sam,Female\n")
    (data_dir / "round_players.csv").write_text("Round,Player,is_playing,HCP\nr1,p1,yes,0\nr1,p2,yes,18.0\n")

    lines = ["course,hole,tee,par,SI"]
    for tee in ("M", "F"):
        lines += [f"c1,{i + 1},{tee},{p},{i + 1}" for i, p in enumerate(pars)]
    (data_dir / "pars.csv").write_text("\n".join(lines) + "\n")

    lines = ["Round,Player,Hole,Gross"]
    lines += [f"r1,p1,{i + 1},{p}" for i, p in enumerate(PARS)]
    lines += [f"r1,p2,{i + 1},{'P' if i == 0 else p + 1}" for i, p in enumerate(PARS)]
    (data_dir / "scores.csv").write_text("\n".join(lines) + "\n")

    if groups:
        (data_dir / "groups.csv").write_text(
            "group_id,name,player_id,type\n"
            "g1,The Duo,p1,pair\n"
            "g1,The Duo,p2,pair\n"
            "t1,Team A,p1,team\n"
            "t1,Team A,p2,team\n"
        )
    if legs:
        (data_dir / "h2z_legs.csv").write_text("leg,start_round,end_round\n1,1,1\n2,,1\n")
    return data_dir
