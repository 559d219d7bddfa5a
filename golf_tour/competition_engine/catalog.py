"""
COMPETITION ENGINE - Catalog
=============================
Declarative competition definitions. Each factory returns a
CompetitionDefinition whose compute(ctx) walks the context and returns one
LeaderboardRow per player (individual) or per entity (pair / team).

Families:
    Average by par       Napoleon (3), Big George (4), Grand Canyon (5)
    % of played holes    Bagel Man (0 pts, lower is better), Wizard (4+ pts)
    Eclectic             best net points per hole across complete rounds
    Hole-range average   Schumacher (1-3), Closer (16-18)
    Streaks              hot (gross <= par), cold (gross >= par + 1)
    Pair / team          best ball, aggregate, top M minus zeros
    Stableford           tour (all or best N), Best of the Best, round

Names, pars, hole ranges and thresholds come from config.py.
Every compute returns [] for a context of the other scope.

USAGE:
    from golf_tour.competition_engine.catalog import build_default_registry

    registry = build_default_registry(botb_round_nos=[3, 4], best_n=3)
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from config import (
    BACK_NINE,
    BOTB_COMPETITION,
    ECLECTIC_COMPETITION,
    GROUP_COMPETITIONS,
    HOLE_RANGE_COMPETITIONS,
    HOLES_PER_ROUND,
    PAR_AVERAGE_COMPETITIONS,
    PERCENTAGE_COMPETITIONS,
    STABLEFORD_COMPETITIONS,
    STREAK_COMPETITIONS,
)
from golf_tour.competition_engine.definitions import (
    CompetitionDefinition,
    CompetitionRegistry,
    Eligibility,
    LeaderboardRow,
)
from golf_tour.context_engine.build_context import CompetitionContext, RoundContext, rounds_in_scope
from golf_tour.context_engine.entities import members_label
from golf_tour.utils.helpers import pct2, round2

logger = logging.getLogger(__name__)

GROUP_METHODS = ("best_ball", "aggregate", "top_m_minus_zeros")
STREAK_MODES = ("hot", "cold")


def _playing_rounds(ctx: CompetitionContext, player_id: str, complete_only: bool = False) -> List[RoundContext]:
    return [
        r for r in rounds_in_scope(ctx)
        if r.is_playing(player_id) and (not complete_only or r.is_complete(player_id))
    ]


# -----------------------------
# Individual families
# -----------------------------
def avg_stableford_by_par(competition_id: str, name: str, par: int, scope: str = "tour") -> CompetitionDefinition:
    """
    Average net points on holes whose tee-specific par is `par`.
    Only complete rounds contribute.
    """

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != scope:
            return []

        rows = []
        for p in ctx.players:
            holes_played = 0
            points = 0
            for r in _playing_rounds(ctx, p.id, complete_only=True):
                for i in range(HOLES_PER_ROUND):
                    if r.par_for_player_hole(p.id, i) != par:
                        continue
                    holes_played += 1
                    points += r.net_points_for_hole(p.id, i)

            avg = points / holes_played if holes_played > 0 else 0.0
            rows.append(
                LeaderboardRow(
                    entry_id=p.id,
                    label=p.name,
                    total=avg,
                    stats={
                        "holes_played": holes_played,
                        "points_total": points,
                        "avg_points": round2(avg),
                        "par": par,
                    },
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope=scope,
        kind="individual",
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=False),
    )


def pct_of_played_holes(
    competition_id: str,
    name: str,
    min_points: int,
    max_points: Optional[int],
    stat_prefix: str,
    lower_is_better: bool = False,
    scope: str = "tour",
) -> CompetitionDefinition:
    """
    Share of entered holes (pickups included) scoring within [min_points, max_points].
    """

    def matches(pts: int) -> bool:
        return pts >= min_points and (max_points is None or pts <= max_points)

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != scope:
            return []

        rows = []
        for p in ctx.players:
            holes_played = 0
            match_count = 0
            for r in _playing_rounds(ctx, p.id):
                for i in range(HOLES_PER_ROUND):
                    if not r.is_entered(p.id, i):
                        continue
                    holes_played += 1
                    if matches(r.net_points_for_hole(p.id, i)):
                        match_count += 1

            percent = pct2(match_count, holes_played)
            rows.append(
                LeaderboardRow(
                    entry_id=p.id,
                    label=p.name,
                    total=percent,
                    stats={
                        "holes_played": holes_played,
                        f"{stat_prefix}_count": match_count,
                        f"{stat_prefix}_pct": percent,
                    },
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope=scope,
        kind="individual",
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=False),
        lower_is_better=lower_is_better,
    )


def tour_eclectic(competition_id: str, name: str) -> CompetitionDefinition:
    """
    For each hole the best net points over the player's complete rounds,
    summed over 18 holes. A hole never scored contributes 0.
    """

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != "tour":
            return []

        rows = []
        for p in ctx.players:
            counted = _playing_rounds(ctx, p.id, complete_only=True)

            # rounds x holes
            points = np.array([r.points_by_hole(p.id) for r in counted], dtype=int).reshape(-1, HOLES_PER_ROUND)
            entered = np.array(
                [[r.is_entered(p.id, i) for i in range(HOLES_PER_ROUND)] for r in counted], dtype=bool
            ).reshape(-1, HOLES_PER_ROUND)

            best = points.max(axis=0) if len(counted) else np.zeros(HOLES_PER_ROUND, dtype=int)
            total = int(best.sum())

            rows.append(
                LeaderboardRow(
                    entry_id=p.id,
                    label=p.name,
                    total=total,
                    stats={
                        "holes_played": int(entered.any(axis=0).sum()),
                        "holes_contributed": int((best > 0).sum()),
                        "rounds_counted": len(counted),
                        "eclectic_total": total,
                        "best_by_hole": [int(v) for v in best],
                    },
                    front9=int(best[:9].sum()),
                    back9=int(best[9:].sum()),
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope="tour",
        kind="individual",
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=False),
    )


def avg_stableford_hole_range(
    competition_id: str,
    name: str,
    first_hole: int,
    last_hole: int,
    scope: str = "tour",
) -> CompetitionDefinition:
    """Per complete round, points over holes first..last; averaged across rounds."""
    hole_indexes = range(first_hole - 1, last_hole)

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != scope:
            return []

        rows = []
        for p in ctx.players:
            round_sums = [r.round_points(p.id, hole_indexes) for r in _playing_rounds(ctx, p.id, complete_only=True)]
            points = sum(round_sums)
            avg = points / len(round_sums) if round_sums else 0.0
            rows.append(
                LeaderboardRow(
                    entry_id=p.id,
                    label=p.name,
                    total=avg,
                    stats={
                        "rounds_counted": len(round_sums),
                        "points_total": points,
                        "avg_points": round2(avg),
                        "holes": f"{first_hole}-{last_hole}",
                    },
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope=scope,
        kind="individual",
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=False),
    )


def _streak_hole(mode: str, gross: Optional[int], par: int) -> bool:
    if gross is None or par <= 0:
        return False
    if mode == "hot":
        return gross <= par
    return gross >= par + 1


def longest_streak(competition_id: str, name: str, mode: str, scope: str = "tour") -> CompetitionDefinition:
    """
    Longest run of consecutive qualifying holes within one round, on gross
    strokes against tee-specific par. Pickups and blanks end a run.
    Equal runs: the earlier round wins, then the earlier start hole.
    """
    if mode not in STREAK_MODES:
        raise ValueError(f"Unknown streak mode '{mode}'. Available: {list(STREAK_MODES)}")

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != scope:
            return []

        rows = []
        for p in ctx.players:
            best_len = 0
            best_round: Optional[RoundContext] = None
            best_start = best_end = None

            for r in _playing_rounds(ctx, p.id):
                run = 0
                start = 0
                for i in range(HOLES_PER_ROUND):
                    if not _streak_hole(mode, r.gross_strokes(p.id, i), r.par_for_player_hole(p.id, i)):
                        run = 0
                        continue
                    if run == 0:
                        start = i
                    run += 1
                    if run > best_len:
                        best_len, best_round = run, r
                        best_start, best_end = start + 1, i + 1

            rows.append(
                LeaderboardRow(
                    entry_id=p.id,
                    label=p.name,
                    total=best_len,
                    stats={
                        "streak_len": best_len,
                        "round_no": best_round.round_no if best_round else None,
                        "round_name": best_round.round_name if best_round else None,
                        "start_hole": best_start,
                        "end_hole": best_end,
                    },
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope=scope,
        kind="individual",
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=False),
    )


def _best_rounds(
    played: Sequence[RoundContext],
    points: Dict[str, int],
    best_n: Optional[int],
    final: Optional[RoundContext],
) -> List[RoundContext]:
    if best_n is None:
        return list(played)

    slots = best_n
    chosen = set()
    if final is not None:
        slots -= 1
        chosen.add(final.round_id)

    order = {r.round_id: pos for pos, r in enumerate(played)}
    others = sorted(
        (r for r in played if r.round_id not in chosen),
        key=lambda r: (-points[r.round_id], order[r.round_id]),
    )
    chosen.update(r.round_id for r in others[:max(0, slots)])
    return [r for r in played if r.round_id in chosen]


def individual_stableford(
    competition_id: str,
    name: str,
    scope: str = "tour",
    best_n: Optional[int] = None,
    final_required: bool = False,
    round_nos: Optional[Iterable[int]] = None,
) -> CompetitionDefinition:
    """
    Sum of round Stableford totals.

    best_n:          count only the player's best N rounds
    final_required:  the last round always takes one of the N slots
    round_nos:       restrict to these round numbers (Best of the Best)
    """
    if best_n is not None and (isinstance(best_n, bool) or not isinstance(best_n, int) or best_n < 1):
        raise ValueError(f"best_n must be a positive integer, got {best_n!r}")
    wanted = None if round_nos is None else {int(n) for n in round_nos}

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != scope:
            return []

        rounds = [r for r in rounds_in_scope(ctx) if wanted is None or r.round_no in wanted]
        final = rounds[-1] if (final_required and rounds) else None

        rows = []
        for p in ctx.players:
            played = [r for r in rounds if r.is_playing(p.id)]
            points = {r.round_id: r.round_points(p.id) for r in played}
            counted = _best_rounds(played, points, best_n, final)

            stats = {
                "rounds_played": len(played),
                "rounds_counted": len(counted),
                "counted_rounds": ",".join(f"R{r.round_no}" for r in counted),
                "holes_played": sum(r.holes_entered(p.id) for r in played),
            }
            for r in played:
                stats[f"R{r.round_no}"] = points[r.round_id]

            rows.append(
                LeaderboardRow(
                    entry_id=p.id,
                    label=p.name,
                    total=sum(points[r.round_id] for r in counted),
                    stats=stats,
                    front9=sum(r.front9_points(p.id) for r in counted),
                    back9=sum(r.back9_points(p.id) for r in counted),
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope=scope,
        kind="individual",
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=False),
    )


# -----------------------------
# Pair / team family
# -----------------------------
def _group_hole_points(method: str, pts: List[int], team_best_m: int):
    """(points, zero penalty) for one hole from the entered members' points."""
    if method == "best_ball":
        return max(pts), 0
    if method == "aggregate":
        return sum(pts), 0
    zeros = pts.count(0)
    top = sorted(pts, reverse=True)[:team_best_m]
    return sum(top) - zeros, zeros


def group_stableford(
    competition_id: str,
    name: str,
    scope: str = "tour",
    kind: str = "pair",
    method: str = "best_ball",
) -> CompetitionDefinition:
    """
    Pairs need exactly 2 members, teams 2 or more.
    A round counts only when every member is complete in it.
    """
    if method not in GROUP_METHODS:
        raise ValueError(f"Unknown group method '{method}'. Available: {list(GROUP_METHODS)}")

    def size_ok(n: int) -> bool:
        return n == 2 if kind == "pair" else n >= 2

    def compute(ctx: CompetitionContext) -> List[LeaderboardRow]:
        if ctx.scope != scope:
            return []

        m = ctx.team_best_m
        rows = []
        for e in ctx.entities:
            if e.kind != kind or not size_ok(len(e.member_ids)):
                continue

            holes_played = 0
            points = 0
            zero_penalty = 0
            front9 = back9 = 0
            rounds_counted = 0

            for r in rounds_in_scope(ctx):
                if not any(r.is_playing(pid) for pid in e.member_ids):
                    continue
                if not all(r.is_complete(pid) for pid in e.member_ids):
                    continue
                rounds_counted += 1

                for i in range(HOLES_PER_ROUND):
                    pts = [
                        r.net_points_for_hole(pid, i)
                        for pid in e.member_ids
                        if r.is_playing(pid) and r.is_entered(pid, i)
                    ]
                    if not pts:
                        continue

                    holes_played += 1
                    value, zeros = _group_hole_points(method, pts, m)
                    points += value
                    zero_penalty += zeros
                    if i in BACK_NINE:
                        back9 += value
                    else:
                        front9 += value

            avg = points / holes_played if holes_played > 0 else 0.0
            stats = {
                "members": members_label(e.member_ids, ctx.players),
                "rounds_counted": rounds_counted,
                "holes_played": holes_played,
                "points_total": points,
                "avg_points": round2(avg),
                "method": method,
            }
            if method == "top_m_minus_zeros":
                stats["team_best_m"] = m
                stats["zero_penalty_total"] = zero_penalty

            rows.append(
                LeaderboardRow(
                    entry_id=e.entity_id,
                    label=e.label,
                    total=points,
                    stats=stats,
                    front9=front9,
                    back9=back9,
                )
            )
        return rows

    return CompetitionDefinition(
        id=competition_id,
        name=name,
        scope=scope,
        kind=kind,
        compute=compute,
        eligibility=Eligibility(only_playing=True, require_complete=True),
    )


# -----------------------------
# Registry
# -----------------------------
def build_default_registry(
    botb_round_nos: Iterable[int] = (),
    best_n: Optional[int] = None,
    final_required: bool = False,
) -> CompetitionRegistry:
    """
    MAIN FUNCTION: every competition the tour runs, in display order.
    Best of the Best is registered only when round numbers are configured.
    """
    registry = CompetitionRegistry()

    for cid, spec in STABLEFORD_COMPETITIONS.items():
        if spec["scope"] == "tour":
            name = spec["name"] if best_n is None else f"{spec['name']} (Best {best_n})"
            registry.register(
                individual_stableford(cid, name, scope="tour", best_n=best_n, final_required=final_required)
            )

    for cid, spec in PAR_AVERAGE_COMPETITIONS.items():
        registry.register(avg_stableford_by_par(cid, spec["name"], spec["par"]))

    for cid, spec in PERCENTAGE_COMPETITIONS.items():
        registry.register(
            pct_of_played_holes(
                cid,
                spec["name"],
                spec["min_points"],
                spec["max_points"],
                spec["stat_prefix"],
                lower_is_better=spec["lower_is_better"],
            )
        )

    registry.register(tour_eclectic(ECLECTIC_COMPETITION["id"], ECLECTIC_COMPETITION["name"]))

    for cid, spec in HOLE_RANGE_COMPETITIONS.items():
        registry.register(avg_stableford_hole_range(cid, spec["name"], spec["first_hole"], spec["last_hole"]))

    for cid, spec in STREAK_COMPETITIONS.items():
        registry.register(longest_streak(cid, spec["name"], spec["mode"]))

    botb = sorted({int(n) for n in botb_round_nos})
    if botb:
        registry.register(
            individual_stableford(
                BOTB_COMPETITION["id"],
                f"{BOTB_COMPETITION['name']} (R{', R'.join(str(n) for n in botb)})",
                round_nos=botb,
            )
        )

    for cid, spec in STABLEFORD_COMPETITIONS.items():
        if spec["scope"] == "round":
            registry.register(individual_stableford(cid, spec["name"], scope="round"))

    for cid, spec in GROUP_COMPETITIONS.items():
        registry.register(
            group_stableford(cid, spec["name"], scope=spec["scope"], kind=spec["kind"], method=spec["method"])
        )

    logger.info("✓ Competition registry built: %s definitions", len(registry))
    return registry
