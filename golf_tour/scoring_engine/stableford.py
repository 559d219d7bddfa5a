"""
SCORING ENGINE - Stableford
============================
Net Stableford points for a single hole.

Points = 2 + (par - net strokes), clamped to [0, MAX_STABLEFORD_POINTS]:
    net double bogey or worse -> 0
    net bogey                 -> 1
    net par                   -> 2
    net birdie                -> 3 ...

Every function here is total: bad input scores 0, nothing raises.

USAGE:
    from golf_tour.scoring_engine.stableford import net_stableford_points

    pts = net_stableford_points("5", par=4, stroke_index=7, playing_handicap=12)
"""

from __future__ import annotations

import math
from typing import Any, Optional

from config import MAX_STABLEFORD_POINTS, PICKUP
from golf_tour.utils.helpers import to_bool, to_float

OUTCOME_BUCKETS = ("eagle_or_better", "birdie", "par", "bogey", "double_or_worse")


def normalize_raw_score(strokes: Any, pickup: Any = False) -> str:
    """
    Canonical raw score string from a stored (strokes, pickup) pair:
    "P" for a pickup, "" when nothing usable was entered, else the stroke count.
    """
    if to_bool(pickup):
        return PICKUP
    if isinstance(strokes, str) and strokes.strip().upper() == PICKUP:
        return PICKUP
    f = to_float(strokes)
    if f is None or f <= 0:
        return ""
    return str(int(math.floor(f)))


def parse_strokes(raw_score: Any) -> Optional[int]:
    """Gross strokes from a raw score, None for blank / pickup / junk."""
    raw = str(raw_score if raw_score is not None else "").strip().upper()
    if not raw or raw == PICKUP:
        return None
    f = to_float(raw)
    if f is None or f <= 0:
        return None
    return int(math.floor(f))


def clamp_handicap(playing_handicap: Any) -> int:
    f = to_float(playing_handicap)
    if f is None or f < 0:
        return 0
    return int(math.floor(f))


def shots_received(playing_handicap: Any, stroke_index: Any) -> int:
    """
    Standard allocation: floor(hcp / 18) on every hole, plus one more on the
    (hcp % 18) lowest stroke-index holes.
    """
    hcp = clamp_handicap(playing_handicap)
    base, rem = divmod(hcp, 18)

    si = to_float(stroke_index)
    extra = 1 if si is not None and 0 < si <= rem else 0
    return base + extra


def stableford_points(net_strokes: float, par: float) -> int:
    n = to_float(net_strokes)
    p = to_float(par)
    if n is None or p is None or p <= 0:
        return 0
    pts = math.floor(2 + (p - n))
    return int(max(0, min(MAX_STABLEFORD_POINTS, pts)))


def net_stableford_points(
    raw_score: Any,
    par: Any,
    stroke_index: Any,
    playing_handicap: Any,
) -> int:
    par_f = to_float(par)
    if par_f is None or par_f <= 0:
        return 0

    strokes = parse_strokes(raw_score)
    if strokes is None:
        return 0

    net = strokes - shots_received(playing_handicap, stroke_index)
    return stableford_points(net, par_f)


def outcome_bucket(strokes_minus_par: int) -> str:
    if strokes_minus_par <= -2:
        return "eagle_or_better"
    if strokes_minus_par == -1:
        return "birdie"
    if strokes_minus_par == 0:
        return "par"
    if strokes_minus_par == 1:
        return "bogey"
    return "double_or_worse"
