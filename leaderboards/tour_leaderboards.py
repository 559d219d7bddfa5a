from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from config import (
    DATA_RAW,
    DEFAULT_PAIRING_MODE,
    DEFAULT_TEAM_BEST_M,
    DEFAULT_TEAM_COUNT,
    DEFAULT_TEAM_MODE,
    OUTPUT_LEADERBOARDS,
    OUTPUT_REPORTS,
    ensure_dirs,
)
from golf_tour.utils.helpers import ensure_dir, stamp

from golf_tour.data_engine.load_tour_rows import TourDataLoader
from golf_tour.data_engine.records import TourRows
from golf_tour.data_engine.validate_rows import validate_tour_rows

from golf_tour.context_engine.build_context import ContextPlayer, build_tour_context
from golf_tour.context_engine.entities import (
    Entity,
    entities_from_members,
    make_implicit_pairs,
    make_implicit_teams,
)

from golf_tour.competition_engine.catalog import build_default_registry
from golf_tour.competition_engine.engine import run_all
from golf_tour.competition_engine.h2z import compute_h2z_table, h2z_frame, legs_from_frame

from golf_tour.analysis.player_stats import player_stats_frame, round_totals_frame
from golf_tour.analysis.ranking import leaderboard_frame

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardConfig:
    data_path: Path = DATA_RAW
    output_dir: Path = OUTPUT_LEADERBOARDS
    reports_dir: Path = OUTPUT_REPORTS

    # Team aggregation width (top M member scores per hole)
    team_best_m: int = DEFAULT_TEAM_BEST_M

    # Best of the Best round numbers, e.g. (3, 4). Empty disables it.
    botb_round_nos: Tuple[int, ...] = ()

    # Tour Stableford: count best N rounds (None = all), final round always counts
    best_n_rounds: Optional[int] = None
    final_required: bool = False

    # Implicit grouping when groups.csv has no pairs / teams
    pairing_mode: str = DEFAULT_PAIRING_MODE
    team_count: int = DEFAULT_TEAM_COUNT
    team_mode: str = DEFAULT_TEAM_MODE

    strict_validation: bool = False
    save_outputs: bool = True
    round_ids: Optional[List[str]] = field(default=None)


def _playing_roster(rows: TourRows) -> List[ContextPlayer]:
    """Players assigned to play at least once, in roster order."""
    playing = {rp.player_id for rp in rows.round_players if rp.playing}
    return [ContextPlayer(id=p.id, name=p.name) for p in rows.players if p.id in playing]


def resolve_group_entities(
    loader: TourDataLoader,
    rows: TourRows,
    cfg: LeaderboardConfig,
) -> Tuple[Entity, ...]:
    """
    Pairs and teams from groups.csv; implicit grouping for any type not listed there.
    """
    roster = _playing_roster(rows)
    entities: List[Entity] = []

    pair_members, pair_labels = loader.load_groups("pair")
    if pair_members:
        entities.extend(entities_from_members(pair_members, pair_labels, rows.players, "pair"))
    else:
        entities.extend(make_implicit_pairs(roster, cfg.pairing_mode))
        logger.info("No explicit pairs, using implicit %s pairing", cfg.pairing_mode)

    team_members, team_labels = loader.load_groups("team")
    if team_members:
        entities.extend(entities_from_members(team_members, team_labels, rows.players, "team"))
    else:
        entities.extend(make_implicit_teams(roster, cfg.team_count, cfg.team_mode))
        logger.info("No explicit teams, using %s implicit %s teams", cfg.team_count, cfg.team_mode)

    return tuple(entities)


def run_leaderboards(cfg: LeaderboardConfig = LeaderboardConfig()) -> Dict[str, Any]:
    # 1) Load + validate
    loader = TourDataLoader(cfg.data_path)
    rows = loader.load_rows()
    report = validate_tour_rows(rows)
    if not report["passed"]:
        if cfg.strict_validation:
            raise RuntimeError(f"Validation failed: {report['errors']}")
        logger.warning("Validation failed, scoring anyway: %s", report["errors"])

    # 2) Entities + context
    entities = resolve_group_entities(loader, rows, cfg)
    ctx = build_tour_context(rows, entities=entities, team_best_m=cfg.team_best_m, round_ids=cfg.round_ids)

    # 3) Competitions
    registry = build_default_registry(
        botb_round_nos=cfg.botb_round_nos,
        best_n=cfg.best_n_rounds,
        final_required=cfg.final_required,
    )
    results = run_all(registry, ctx)
    frames = {res.competition_id: leaderboard_frame(res) for res in results}

    # 4) H2Z
    legs = legs_from_frame(loader.load_h2z_legs())
    h2z = h2z_frame(ctx, compute_h2z_table(ctx, legs)) if legs else pd.DataFrame()
    if not legs:
        logger.info("No H2Z legs configured, skipping H2Z")

    # 5) Player stats
    round_totals = round_totals_frame(ctx)
    player_stats = player_stats_frame(ctx)

    # 6) Save outputs
    paths: Dict[str, Any] = {"competitions": {}}
    if cfg.save_outputs:
        ensure_dir(Path(cfg.output_dir))
        ensure_dir(Path(cfg.reports_dir))
        run_id = stamp("tour")

        for competition_id, df in frames.items():
            path = Path(cfg.output_dir) / f"{run_id}_{competition_id}.csv"
            df.to_csv(path, index=False)
            paths["competitions"][competition_id] = path
        logger.info("✓ Saved %s competition leaderboards to %s", len(frames), cfg.output_dir)

        paths["round_totals"] = Path(cfg.reports_dir) / f"{run_id}_round_totals.csv"
        paths["player_stats"] = Path(cfg.reports_dir) / f"{run_id}_player_stats.csv"
        round_totals.to_csv(paths["round_totals"], index=False)
        player_stats.to_csv(paths["player_stats"], index=False)
        logger.info("✓ Saved round totals to %s", paths["round_totals"])
        logger.info("✓ Saved player stats to %s", paths["player_stats"])

        if len(h2z) > 0:
            paths["h2z"] = Path(cfg.output_dir) / f"{run_id}_h2z.csv"
            h2z.to_csv(paths["h2z"], index=False)
            logger.info("✓ Saved H2Z to %s", paths["h2z"])

    return {
        "context": ctx,
        "registry": registry,
        "results": results,
        "leaderboards": frames,
        "h2z": h2z,
        "round_totals": round_totals,
        "player_stats": player_stats,
        "validation_report": report,
        "paths": paths,
    }


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    ensure_dirs()
    run_leaderboards()
