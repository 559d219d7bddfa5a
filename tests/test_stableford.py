import pytest

from golf_tour.scoring_engine.stableford import (
    clamp_handicap,
    net_stableford_points,
    normalize_raw_score,
    outcome_bucket,
    parse_strokes,
    shots_received,
    stableford_points,
)


def test_points_standard_scale():
    assert net_stableford_points("4", par=4, stroke_index=10, playing_handicap=0) == 2
    assert net_stableford_points("5", par=4, stroke_index=10, playing_handicap=0) == 1
    assert net_stableford_points("3", par=4, stroke_index=10, playing_handicap=0) == 3
    assert net_stableford_points("6", par=4, stroke_index=10, playing_handicap=0) == 0
    assert net_stableford_points("9", par=4, stroke_index=10, playing_handicap=0) == 0


def test_points_clamped_to_ten():
    # 5 shots received: net -4 on a par 5 would be 11 points
    assert net_stableford_points("1", par=5, stroke_index=1, playing_handicap=90) == 10


@pytest.mark.parametrize("raw", ["", "P", "p", " ", "abc", "0", "-2", None])
def test_unscored_holes_give_zero(raw):
    assert net_stableford_points(raw, par=4, stroke_index=1, playing_handicap=36) == 0


def test_pickup_zero_regardless_of_handicap():
    for hcp in (0, 18, 36, 54):
        for par in (3, 4, 5):
            assert net_stableford_points("P", par, 1, hcp) == 0


def test_invalid_par_gives_zero():
    assert net_stableford_points("4", par=None, stroke_index=1, playing_handicap=0) == 0
    assert net_stableford_points("4", par=0, stroke_index=1, playing_handicap=0) == 0
    assert net_stableford_points("4", par=float("nan"), stroke_index=1, playing_handicap=0) == 0


def test_handicap_20_allocation():
    for si in range(1, 19):
        expected = 2 if si <= 2 else 1
        assert shots_received(20, si) == expected


def test_handicap_zero_gets_no_shots():
    assert all(shots_received(0, si) == 0 for si in range(1, 19))


def test_bad_handicap_clamped():
    assert clamp_handicap(-3) == 0
    assert clamp_handicap(float("inf")) == 0
    assert clamp_handicap("12.7") == 12
    assert shots_received(float("nan"), 1) == 0


def test_points_in_range_and_monotone_in_net():
    for par in (3, 4, 5):
        previous = None
        for net in range(-6, 15):
            pts = stableford_points(net, par)
            assert 0 <= pts <= 10
            if previous is not None:
                assert pts <= previous
            previous = pts


def test_points_accept_loose_values():
    assert stableford_points(4, "4") == 2
    assert stableford_points("5", 4) == 1
    assert stableford_points(" 3 ", "5.0") == 4
    assert stableford_points(4, "x") == 0
    assert stableford_points("", 4) == 0
    assert stableford_points(4, "0") == 0


def test_net_score_uses_shots():
    # 5 on a par 4 with one shot received is a net par
    assert net_stableford_points("5", par=4, stroke_index=3, playing_handicap=10) == 2
    # same hole, SI above the handicap remainder: no shot
    assert net_stableford_points("5", par=4, stroke_index=12, playing_handicap=10) == 1


def test_raw_score_normalization():
    assert normalize_raw_score(5, False) == "5"
    assert normalize_raw_score(None, True) == "P"
    assert normalize_raw_score("P") == "P"
    assert normalize_raw_score(None) == ""
    assert normalize_raw_score(0) == ""
    assert parse_strokes("7") == 7
    assert parse_strokes("P") is None


def test_outcome_buckets():
    assert outcome_bucket(-3) == "eagle_or_better"
    assert outcome_bucket(-1) == "birdie"
    assert outcome_bucket(0) == "par"
    assert outcome_bucket(1) == "bogey"
    assert outcome_bucket(4) == "double_or_worse"
