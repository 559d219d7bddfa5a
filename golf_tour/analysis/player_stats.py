"""
ANALYSIS ENGINE - Player Tour Stats
====================================
Per-player summary across the tour:

    Rounds: Stableford total per playing round, and over COMPLETED rounds the
            best / worst / mean / sample standard deviation
    Holes:  gross and net outcome counts (eagle or better ... double or worse).
            Pickups count as double or worse.

USAGE:
    from golf_tour.analysis.player_stats import compute_player_tour_stats

    stats = compute_player_tour_stats(ctx, "p1")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from config import HOLES_PER_ROUND, PICKUP
from golf_tour.context_engine.build_context import TourCompetitionContext
from golf_tour.scoring_engine.stableford import OUTCOME_BUCKETS, outcome_bucket, shots_received
from golf_tour.utils.helpers import round2

logger = logging.getLogger(__name__)


def _empty_outcomes() -> Dict[str, int]:
    return {b: 0 for b in OUTCOME_BUCKETS}


@dataclass(frozen=True)
class RoundSummary:
    round_id: str
    round_no: int
    round_name: str
    stableford_total: int
    holes_scored: int
    is_complete: bool


@dataclass
class PlayerTourStats:
    player_id: str
    name: str
    round_summaries: List[RoundSummary] = field(default_factory=list)
    rounds_completed: int = 0
    best_stableford: Optional[int] = None
    worst_stableford: Optional[int] = None
    avg_stableford: Optional[float] = None
    std_dev_stableford: Optional[float] = None
    holes_played: int = 0
    pickups: int = 0
    pars_missing: int = 0
    gross_outcomes: Dict[str, int] = field(default_factory=_empty_outcomes)
    net_outcomes: Dict[str, int] = field(default_factory=_empty_outcomes)


def compute_player_tour_stats(ctx: TourCompetitionContext, player_id: str) -> PlayerTourStats:
    name = next((p.name for p in ctx.players if p.id == player_id), player_id)
    stats = PlayerTourStats(player_id=player_id, name=name)

    for r in ctx.rounds:
        if not r.is_playing(player_id):
            continue

        stats.round_summaries.append(
            RoundSummary(
                round_id=r.round_id,
                round_no=r.round_no,
                round_name=r.round_name,
                stableford_total=r.round_points(player_id),
                holes_scored=r.holes_entered(player_id),
                is_complete=r.is_complete(player_id),
            )
        )

        hcp = r.handicaps.get(player_id, 0)
        for i in range(HOLES_PER_ROUND):
            raw = r.raw_score(player_id, i)
            if not raw:
                continue
            stats.holes_played += 1

            if raw == PICKUP:
                stats.pickups += 1
                stats.gross_outcomes["double_or_worse"] += 1
                stats.net_outcomes["double_or_worse"] += 1
                continue

            info = r.hole_info(player_id, i)
            gross = r.gross_strokes(player_id, i)
            if info is None or gross is None:
                stats.pars_missing += 1
                continue

            stats.gross_outcomes[outcome_bucket(gross - info.par)] += 1
            net = gross - shots_received(hcp, info.stroke_index)
            stats.net_outcomes[outcome_bucket(net - info.par)] += 1

    completed = np.array([s.stableford_total for s in stats.round_summaries if s.is_complete], dtype=float)
    stats.rounds_completed = int(completed.size)
    if completed.size:
        stats.best_stableford = int(completed.max())
        stats.worst_stableford = int(completed.min())
        stats.avg_stableford = float(completed.mean())
    if completed.size >= 2:
        stats.std_dev_stableford = float(completed.std(ddof=1))

    return stats


def player_stats_frame(ctx: TourCompetitionContext) -> pd.DataFrame:
    """One row per playing player."""
    records = []
    for p in ctx.players:
        if not p.playing:
            continue
        s = compute_player_tour_stats(ctx, p.id)
        rec = {
            "player_id": s.player_id,
            "player": s.name,
            "rounds_completed": s.rounds_completed,
            "best_stableford": s.best_stableford,
            "worst_stableford": s.worst_stableford,
            "avg_stableford": round2(s.avg_stableford) if s.avg_stableford is not None else None,
            "std_dev_stableford": round2(s.std_dev_stableford) if s.std_dev_stableford is not None else None,
            "holes_played": s.holes_played,
            "pickups": s.pickups,
        }
        for bucket in OUTCOME_BUCKETS:
            rec[f"gross_{bucket}"] = s.gross_outcomes[bucket]
            rec[f"net_{bucket}"] = s.net_outcomes[bucket]
        records.append(rec)

    logger.info("✓ Player stats computed for %s players", len(records))
    return pd.DataFrame(records)


def round_totals_frame(ctx: TourCompetitionContext) -> pd.DataFrame:
    """
    Players x rounds grid of Stableford totals (NaN where not playing),
    plus a tour total. Sorted by total descending, then name.
    """
    cols = [f"R{r.round_no}" for r in ctx.rounds]
    records = []
    for p in ctx.players:
        rec = {"player_id": p.id, "player": p.name}
        for col, r in zip(cols, ctx.rounds):
            rec[col] = r.round_points(p.id) if r.is_playing(p.id) else np.nan
        records.append(rec)

    df = pd.DataFrame(records, columns=["player_id", "player"] + cols)
    df["total"] = df[cols].sum(axis=1, min_count=0) if cols else 0
    return df.sort_values(["total", "player"], ascending=[False, True]).reset_index(drop=True)
