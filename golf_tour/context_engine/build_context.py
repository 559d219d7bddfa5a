"""
CONTEXT ENGINE - Build Competition Context
===========================================
Turns normalized tour rows into an immutable, round-indexed model:

    TourCompetitionContext
        players   -> ContextPlayer(id, name, tee, playing-in-any-round)
        rounds    -> RoundContext per round, in round-number order
        entities  -> pairs / teams for group competitions
        team_best_m

    RoundCompetitionContext
        the same, for a single round

A RoundContext holds plain data (18-slot raw scores per player, per-tee hole
tables, handicaps, resolved tees) and answers every per-hole question through
methods. Nothing here raises for bad data: a non-playing player or a missing
par simply scores 0.

USAGE:
    from golf_tour.context_engine.build_context import build_tour_context

    ctx = build_tour_context(rows, entities=pairs, team_best_m=2)
    ctx.rounds[0].net_points_for_hole("p1", 0)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from config import BACK_NINE, DEFAULT_TEAM_BEST_M, DEFAULT_TEE, FRONT_NINE, HOLES_PER_ROUND, TEES
from golf_tour.context_engine.entities import Entity
from golf_tour.data_engine.records import RoundRecord, TourRows, normalize_tee
from golf_tour.scoring_engine.stableford import net_stableford_points, normalize_raw_score, parse_strokes

logger = logging.getLogger(__name__)

EMPTY_CARD: Tuple[str, ...] = ("",) * HOLES_PER_ROUND


@dataclass(frozen=True)
class HoleInfo:
    par: int
    stroke_index: int


@dataclass(frozen=True)
class ContextPlayer:
    id: str
    name: str
    tee: str = DEFAULT_TEE
    playing: bool = False


@dataclass(frozen=True)
class RoundContext:
    round_id: str
    round_name: str
    round_no: int
    course_id: Optional[str]
    holes_by_tee: Mapping[str, Tuple[Optional[HoleInfo], ...]]
    scores: Mapping[str, Tuple[str, ...]]
    playing_ids: FrozenSet[str]
    handicaps: Mapping[str, int]
    tees: Mapping[str, str]

    def is_playing(self, player_id: str) -> bool:
        return player_id in self.playing_ids

    def raw_score(self, player_id: str, hole_index: int) -> str:
        if not 0 <= hole_index < HOLES_PER_ROUND:
            return ""
        return self.scores.get(player_id, EMPTY_CARD)[hole_index]

    def is_entered(self, player_id: str, hole_index: int) -> bool:
        """Anything on the card, pickups included."""
        return self.raw_score(player_id, hole_index) != ""

    def is_complete(self, player_id: str) -> bool:
        """Vacuously True for players not in this round."""
        if not self.is_playing(player_id):
            return True
        return all(self.scores.get(player_id, EMPTY_CARD))

    def holes_entered(self, player_id: str) -> int:
        return sum(1 for raw in self.scores.get(player_id, EMPTY_CARD) if raw)

    def gross_strokes(self, player_id: str, hole_index: int) -> Optional[int]:
        return parse_strokes(self.raw_score(player_id, hole_index))

    def hole_info(self, player_id: str, hole_index: int) -> Optional[HoleInfo]:
        if not 0 <= hole_index < HOLES_PER_ROUND:
            return None
        tee = self.tees.get(player_id, DEFAULT_TEE)
        for t in (tee,) + tuple(x for x in TEES if x != tee):
            table = self.holes_by_tee.get(t)
            if table and table[hole_index] is not None:
                return table[hole_index]
        return None

    def par_for_player_hole(self, player_id: str, hole_index: int) -> int:
        if not self.is_playing(player_id):
            return 0
        info = self.hole_info(player_id, hole_index)
        return info.par if info else 0

    def net_points_for_hole(self, player_id: str, hole_index: int) -> int:
        if not self.is_playing(player_id):
            return 0
        info = self.hole_info(player_id, hole_index)
        if info is None:
            return 0
        return net_stableford_points(
            self.raw_score(player_id, hole_index),
            info.par,
            info.stroke_index,
            self.handicaps.get(player_id, 0),
        )

    def points_by_hole(self, player_id: str) -> Tuple[int, ...]:
        return tuple(self.net_points_for_hole(player_id, i) for i in range(HOLES_PER_ROUND))

    def round_points(self, player_id: str, holes: Iterable[int] = range(HOLES_PER_ROUND)) -> int:
        return sum(self.net_points_for_hole(player_id, i) for i in holes)

    def front9_points(self, player_id: str) -> int:
        return self.round_points(player_id, FRONT_NINE)

    def back9_points(self, player_id: str) -> int:
        return self.round_points(player_id, BACK_NINE)


@dataclass(frozen=True)
class TourCompetitionContext:
    players: Tuple[ContextPlayer, ...]
    rounds: Tuple[RoundContext, ...]
    entities: Tuple[Entity, ...] = ()
    team_best_m: int = DEFAULT_TEAM_BEST_M

    scope: ClassVar[str] = "tour"


@dataclass(frozen=True)
class RoundCompetitionContext:
    players: Tuple[ContextPlayer, ...]
    round: RoundContext
    entities: Tuple[Entity, ...] = ()
    team_best_m: int = DEFAULT_TEAM_BEST_M

    scope: ClassVar[str] = "round"


CompetitionContext = Union[TourCompetitionContext, RoundCompetitionContext]


def rounds_in_scope(ctx: CompetitionContext) -> Tuple[RoundContext, ...]:
    if isinstance(ctx, TourCompetitionContext):
        return ctx.rounds
    if isinstance(ctx, RoundCompetitionContext):
        return (ctx.round,)
    raise TypeError(f"Not a competition context: {type(ctx).__name__}")


def validate_team_best_m(team_best_m: Any) -> int:
    if isinstance(team_best_m, bool) or not isinstance(team_best_m, (int, float)):
        raise ValueError(f"team_best_m must be a number >= 1, got {team_best_m!r}")
    if not math.isfinite(team_best_m) or team_best_m < 1:
        raise ValueError(f"team_best_m must be a number >= 1, got {team_best_m!r}")
    return int(math.floor(team_best_m))


# -----------------------------
# Builders
# -----------------------------
def order_rounds(rounds: Sequence[RoundRecord]) -> List[Tuple[int, RoundRecord]]:
    """
    Rounds sorted by round number (unnumbered last, input order breaks ties),
    paired with their effective number: round_no, else 1-based position.
    """
    indexed = sorted(
        enumerate(rounds),
        key=lambda t: (t[1].round_no is None, t[1].round_no or 0, t[0]),
    )
    return [
        (r.round_no if r.round_no is not None else pos + 1, r)
        for pos, (_, r) in enumerate(indexed)
    ]


def _hole_tables(rows: TourRows) -> Dict[str, Dict[str, List[Optional[HoleInfo]]]]:
    # course -> tee -> 18 slots
    tables: Dict[str, Dict[str, List[Optional[HoleInfo]]]] = {}
    for p in rows.pars:
        by_tee = tables.setdefault(p.course_id, {})
        slots = by_tee.setdefault(p.tee, [None] * HOLES_PER_ROUND)
        slots[p.hole_number - 1] = HoleInfo(par=p.par, stroke_index=p.stroke_index)
    return tables


def _score_cards(rows: TourRows) -> Dict[str, Dict[str, List[str]]]:
    player_ids = [p.id for p in rows.players]
    cards = {r.id: {pid: [""] * HOLES_PER_ROUND for pid in player_ids} for r in rows.rounds}

    skipped = {"no_round": 0, "no_player": 0, "blank_over_entered": 0}
    written = 0
    for s in rows.scores:
        by_player = cards.get(s.round_id)
        if by_player is None:
            skipped["no_round"] += 1
            continue
        card = by_player.get(s.player_id)
        if card is None:
            skipped["no_player"] += 1
            continue

        raw = normalize_raw_score(s.strokes, s.pickup)
        idx = s.hole_number - 1
        if raw == "" and card[idx] != "":
            skipped["blank_over_entered"] += 1
            continue
        card[idx] = raw
        written += 1

    logger.debug("Score cards filled: written=%s skipped=%s", written, skipped)
    if skipped["no_round"] or skipped["no_player"]:
        logger.warning(
            "Ignored %s score rows for unknown rounds and %s for unknown players",
            skipped["no_round"],
            skipped["no_player"],
        )
    return cards


def _round_context(
    rows: TourRows,
    round_no: int,
    rnd: RoundRecord,
    tables: Dict[str, Dict[str, List[Optional[HoleInfo]]]],
    cards: Dict[str, Dict[str, List[str]]],
) -> RoundContext:
    assignments = [rp for rp in rows.round_players if rp.round_id == rnd.id]

    playing = frozenset(rp.player_id for rp in assignments if rp.playing)
    handicaps = {rp.player_id: max(0, rp.playing_handicap or 0) for rp in assignments}

    tees = {}
    for p in rows.players:
        tees[p.id] = normalize_tee(p.gender)
    for rp in assignments:
        if rp.tee:
            tees[rp.player_id] = rp.tee

    by_tee = tables.get(rnd.course_id or "", {})
    if not by_tee:
        logger.warning("Round %s has no par table (course=%s); all holes score 0", rnd.id, rnd.course_id)

    return RoundContext(
        round_id=rnd.id,
        round_name=rnd.name or rnd.id,
        round_no=round_no,
        course_id=rnd.course_id,
        holes_by_tee=MappingProxyType({t: tuple(slots) for t, slots in by_tee.items()}),
        scores=MappingProxyType({pid: tuple(card) for pid, card in cards.get(rnd.id, {}).items()}),
        playing_ids=playing,
        handicaps=MappingProxyType(handicaps),
        tees=MappingProxyType(tees),
    )


def build_round_contexts(rows: TourRows, round_ids: Optional[Iterable[str]] = None) -> Tuple[RoundContext, ...]:
    tables = _hole_tables(rows)
    cards = _score_cards(rows)

    wanted = None if round_ids is None else {str(r) for r in round_ids}
    return tuple(
        _round_context(rows, round_no, rnd, tables, cards)
        for round_no, rnd in order_rounds(rows.rounds)
        if wanted is None or rnd.id in wanted
    )


def _context_players(rows: TourRows, rounds: Sequence[RoundContext]) -> Tuple[ContextPlayer, ...]:
    """
    One ContextPlayer per roster player. The tee is the one resolved for the
    player's first round played in scope, else the gender tee.
    """
    players = []
    for p in rows.players:
        played = [r for r in rounds if r.is_playing(p.id)]
        tee = played[0].tees.get(p.id, DEFAULT_TEE) if played else normalize_tee(p.gender)
        players.append(ContextPlayer(id=p.id, name=p.name, tee=tee, playing=bool(played)))
    return tuple(players)


def build_tour_context(
    rows: TourRows,
    entities: Optional[Sequence[Entity]] = None,
    team_best_m: int = DEFAULT_TEAM_BEST_M,
    round_ids: Optional[Iterable[str]] = None,
) -> TourCompetitionContext:
    """
    MAIN FUNCTION: tour-scope context over all (or the selected) rounds.
    """
    m = validate_team_best_m(team_best_m)
    rounds = build_round_contexts(rows, round_ids)

    players = _context_players(rows, rounds)

    logger.info("✓ Tour context built: %s rounds, %s players", len(rounds), len(players))
    return TourCompetitionContext(
        players=players,
        rounds=rounds,
        entities=tuple(entities or ()),
        team_best_m=m,
    )


def build_round_context(
    rows: TourRows,
    round_id: str,
    entities: Optional[Sequence[Entity]] = None,
    team_best_m: int = DEFAULT_TEAM_BEST_M,
) -> RoundCompetitionContext:
    m = validate_team_best_m(team_best_m)
    rounds = build_round_contexts(rows, [round_id])
    if not rounds:
        raise ValueError(f"Unknown round '{round_id}'. Available: {[r.id for r in rows.rounds]}")
    rnd = rounds[0]

    players = _context_players(rows, rounds)
    return RoundCompetitionContext(
        players=players,
        round=rnd,
        entities=tuple(entities or ()),
        team_best_m=m,
    )
