"""
COMPETITION ENGINE - H2Z (Hero to Zero)
========================================
Reset-on-zero running score on par-3 holes across a leg of rounds.

Per (player, leg), scanning the leg's rounds in context order and holes 1..18:
    - round not played by the player: skipped, state untouched
    - hole par (player's tee) != 3:    skipped
    - 0 points (or non-finite):        running total and run length reset to 0
    - otherwise:                       add points; a new high records the peak
                                       with its start / end (round, hole)

final_score is where the running total ends the leg. best_score is the
highest it ever reached. They are different numbers.

USAGE:
    from golf_tour.competition_engine.h2z import H2ZLeg, compute_h2z_for_player

    legs = [H2ZLeg(leg_no=1, start_round_no=1, end_round_no=3)]
    by_leg = compute_h2z_for_player(ctx, "p1", legs)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from config import H2Z_PAR, HOLES_PER_ROUND
from golf_tour.context_engine.build_context import CompetitionContext, rounds_in_scope
from golf_tour.utils.helpers import to_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class H2ZLeg:
    leg_no: int
    start_round_no: int
    end_round_no: int

    @property
    def bounds(self) -> Tuple[int, int]:
        return min(self.start_round_no, self.end_round_no), max(self.start_round_no, self.end_round_no)


@dataclass(frozen=True)
class H2ZLegResult:
    final_score: int = 0
    best_score: int = 0
    best_len: int = 0
    best_start_round_no: Optional[int] = None
    best_end_round_no: Optional[int] = None
    best_start_hole_no: Optional[int] = None
    best_end_hole_no: Optional[int] = None


@dataclass(frozen=True)
class H2ZEvent:
    round_id: str
    round_no: int
    hole_number: int
    par: int
    raw_score: str
    points: int
    running_before: int
    running_after: int
    reset: bool
    run_len_after: int
    best_score_after: int
    best_len_after: int


@dataclass(frozen=True)
class H2ZDiagnostic:
    player_id: str
    leg: H2ZLeg
    result: H2ZLegResult
    rounds_included: Tuple[Tuple[str, int], ...]
    events: Tuple[H2ZEvent, ...]
    issues: Tuple[str, ...]


def legs_from_frame(df: pd.DataFrame) -> Tuple[H2ZLeg, ...]:
    """Legs from the h2z_legs.csv frame (leg_no, start_round_no, end_round_no)."""
    return tuple(
        H2ZLeg(int(row.leg_no), int(row.start_round_no), int(row.end_round_no))
        for row in df.itertuples(index=False)
    )


def _scan_leg(ctx: CompetitionContext, player_id: str, leg: H2ZLeg, trace: bool) -> H2ZDiagnostic:
    lo, hi = leg.bounds
    rounds = [r for r in rounds_in_scope(ctx) if lo <= r.round_no <= hi]

    issues: List[str] = []
    if not rounds:
        issues.append(f"No rounds included for leg {leg.leg_no} with bounds [{lo}..{hi}]")

    running = 0
    run_len = 0
    run_start: Optional[Tuple[int, int]] = None

    best = H2ZLegResult()
    events: List[H2ZEvent] = []
    rounds_played = 0

    for r in rounds:
        if not r.is_playing(player_id):
            continue
        rounds_played += 1

        for i in range(HOLES_PER_ROUND):
            par = r.par_for_player_hole(player_id, i)
            if par != H2Z_PAR:
                continue

            pts = to_float(r.net_points_for_hole(player_id, i))
            before = running
            reset = pts is None or pts == 0
            if reset:
                running, run_len, run_start = 0, 0, None
            else:
                if run_len == 0:
                    run_start = (r.round_no, i + 1)
                running += int(pts)
                run_len += 1
                if running > best.best_score:
                    best = H2ZLegResult(
                        best_score=running,
                        best_len=run_len,
                        best_start_round_no=run_start[0],
                        best_start_hole_no=run_start[1],
                        best_end_round_no=r.round_no,
                        best_end_hole_no=i + 1,
                    )

            if trace:
                events.append(
                    H2ZEvent(
                        round_id=r.round_id,
                        round_no=r.round_no,
                        hole_number=i + 1,
                        par=par,
                        raw_score=r.raw_score(player_id, i),
                        points=0 if pts is None else int(pts),
                        running_before=before,
                        running_after=running,
                        reset=reset,
                        run_len_after=run_len,
                        best_score_after=best.best_score,
                        best_len_after=best.best_len,
                    )
                )

    if rounds and not rounds_played:
        issues.append(f"Player {player_id} is not playing in any round of leg {leg.leg_no}")

    result = H2ZLegResult(
        final_score=running,
        best_score=best.best_score,
        best_len=best.best_len,
        best_start_round_no=best.best_start_round_no,
        best_end_round_no=best.best_end_round_no,
        best_start_hole_no=best.best_start_hole_no,
        best_end_hole_no=best.best_end_hole_no,
    )
    return H2ZDiagnostic(
        player_id=player_id,
        leg=leg,
        result=result,
        rounds_included=tuple((r.round_id, r.round_no) for r in rounds),
        events=tuple(events),
        issues=tuple(issues),
    )


def compute_h2z_leg(ctx: CompetitionContext, player_id: str, leg: H2ZLeg) -> H2ZLegResult:
    return _scan_leg(ctx, player_id, leg, trace=False).result


def compute_h2z_for_player(
    ctx: CompetitionContext,
    player_id: str,
    legs: Iterable[H2ZLeg],
) -> Dict[int, H2ZLegResult]:
    return {leg.leg_no: compute_h2z_leg(ctx, player_id, leg) for leg in legs}


def compute_h2z_table(ctx: CompetitionContext, legs: Sequence[H2ZLeg]) -> Dict[str, Dict[int, H2ZLegResult]]:
    """
    MAIN FUNCTION: {player_id: {leg_no: result}} for every playing player.
    """
    table = {
        p.id: compute_h2z_for_player(ctx, p.id, legs)
        for p in ctx.players
        if p.playing
    }
    logger.info("✓ H2Z computed for %s players over %s legs", len(table), len(legs))
    return table


def h2z_frame(ctx: CompetitionContext, table: Dict[str, Dict[int, H2ZLegResult]]) -> pd.DataFrame:
    names = {p.id: p.name for p in ctx.players}
    records = []
    for player_id, by_leg in table.items():
        for leg_no, res in by_leg.items():
            records.append(
                {
                    "player_id": player_id,
                    "player": names.get(player_id, player_id),
                    "leg_no": leg_no,
                    "final_score": res.final_score,
                    "best_score": res.best_score,
                    "best_len": res.best_len,
                    "best_start": _where(res.best_start_round_no, res.best_start_hole_no),
                    "best_end": _where(res.best_end_round_no, res.best_end_hole_no),
                }
            )

    cols = ["player_id", "player", "leg_no", "final_score", "best_score", "best_len", "best_start", "best_end"]
    df = pd.DataFrame(records, columns=cols)
    if df.empty:
        return df
    return df.sort_values(
        ["leg_no", "final_score", "best_score", "player"],
        ascending=[True, False, False, True],
    ).reset_index(drop=True)


def _where(round_no: Optional[int], hole_no: Optional[int]) -> str:
    if round_no is None or hole_no is None:
        return ""
    return f"R{round_no} H{hole_no}"


def build_h2z_diagnostic(ctx: CompetitionContext, player_id: str, leg: H2ZLeg) -> H2ZDiagnostic:
    """Same scan as compute_h2z_leg, keeping every par-3 event."""
    return _scan_leg(ctx, player_id, leg, trace=True)


def diagnostic_lines(diag: H2ZDiagnostic) -> List[str]:
    leg = diag.leg
    lines = [
        f"player={diag.player_id}",
        f"leg={leg.leg_no} rounds {leg.start_round_no}..{leg.end_round_no}",
    ]

    if diag.issues:
        lines.append("issues:")
        lines.extend(f"- {issue}" for issue in diag.issues)

    lines.append(f"included_rounds={len(diag.rounds_included)}")
    for round_id, round_no in diag.rounds_included:
        lines.append(f"- R{round_no} round_id={round_id}")

    lines.append(f"par3_events={len(diag.events)}")
    for e in diag.events:
        lines.append(
            f"R{e.round_no} h{e.hole_number} par={e.par} strokes={e.raw_score or '-'} pts={e.points} "
            f"run {e.running_before}->{e.running_after}{' RESET' if e.reset else ''}"
        )

    res = diag.result
    lines.append(f"final={res.final_score} best={res.best_score} best_len={res.best_len}")
    return lines
