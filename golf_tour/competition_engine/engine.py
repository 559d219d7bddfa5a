"""
COMPETITION ENGINE - Run Competitions
======================================
Runs a CompetitionDefinition against a context:

    1) entities: one per player (individual) or the ctx.entities of that kind
    2) eligibility: only_playing / require_complete on every member
    3) compute on a context narrowed to the eligible players or entities
    4) sort: total, then back 9, then front 9 (all descending unless
       lower_is_better), then label ascending

A definition of the other scope yields an empty result, never an error.

USAGE:
    from golf_tour.competition_engine.engine import run_all

    results = run_all(registry, ctx)
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from golf_tour.competition_engine.definitions import (
    CompetitionDefinition,
    CompetitionRegistry,
    CompetitionResult,
    LeaderboardRow,
)
from golf_tour.context_engine.build_context import CompetitionContext, rounds_in_scope
from golf_tour.context_engine.entities import Entity, individual_entities
from golf_tour.utils.helpers import to_float

logger = logging.getLogger(__name__)


def resolve_entities(definition: CompetitionDefinition, ctx: CompetitionContext) -> Tuple[Entity, ...]:
    if definition.kind == "individual":
        return individual_entities(ctx.players)
    return tuple(e for e in ctx.entities if e.kind == definition.kind)


def is_entity_eligible(
    definition: CompetitionDefinition,
    ctx: CompetitionContext,
    entity: Entity,
    playing: Optional[Dict[str, bool]] = None,
) -> bool:
    if playing is None:
        playing = {p.id: p.playing for p in ctx.players}

    rules = definition.eligibility
    if rules.only_playing and not all(playing.get(pid, False) for pid in entity.member_ids):
        return False

    if rules.require_complete:
        for r in rounds_in_scope(ctx):
            if not all(r.is_complete(pid) for pid in entity.member_ids):
                return False

    return True


def sort_rows(rows: Iterable[LeaderboardRow], lower_is_better: bool = False) -> List[LeaderboardRow]:
    sign = 1 if lower_is_better else -1
    return sorted(
        rows,
        key=lambda row: (
            sign * row.total,
            sign * row.back9,
            sign * row.front9,
            row.label,
            row.entry_id,
        ),
    )


def _finite_totals(row: LeaderboardRow) -> LeaderboardRow:
    return dataclasses.replace(
        row,
        total=to_float(row.total) or 0.0,
        front9=to_float(row.front9) or 0.0,
        back9=to_float(row.back9) or 0.0,
    )


def run_competition(definition: CompetitionDefinition, ctx: CompetitionContext) -> CompetitionResult:
    result = CompetitionResult(
        competition_id=definition.id,
        competition_name=definition.name,
        kind=definition.kind,
        scope=definition.scope,
        lower_is_better=definition.lower_is_better,
    )
    if ctx.scope != definition.scope:
        logger.debug("Skipping %s: %s competition on a %s context", definition.id, definition.scope, ctx.scope)
        return result

    playing = {p.id: p.playing for p in ctx.players}
    entities = resolve_entities(definition, ctx)
    eligible = [e for e in entities if is_entity_eligible(definition, ctx, e, playing)]

    if definition.kind == "individual":
        eligible_ids = {e.entity_id for e in eligible}
        narrowed = dataclasses.replace(ctx, players=tuple(p for p in ctx.players if p.id in eligible_ids))
    else:
        narrowed = dataclasses.replace(ctx, entities=tuple(eligible))

    rows = [_finite_totals(row) for row in definition.compute(narrowed)]
    logger.debug("%s: %s of %s entities eligible, %s rows", definition.id, len(eligible), len(entities), len(rows))

    return dataclasses.replace(result, rows=tuple(sort_rows(rows, definition.lower_is_better)))


def run_all(registry: CompetitionRegistry, ctx: CompetitionContext) -> List[CompetitionResult]:
    """
    MAIN FUNCTION: every registered competition of the context's scope.
    """
    results = [run_competition(d, ctx) for d in registry.by_scope(ctx.scope)]
    logger.info("✓ Ran %s %s-scope competitions", len(results), ctx.scope)
    return results
