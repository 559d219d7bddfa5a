"""
ANALYSIS ENGINE - Ranking
==========================
Competition ranking ("1, 1, 3"): equal values share a rank, the next value
takes its 1-based position. Equal values are listed by id.

USAGE:
    from golf_tour.analysis.ranking import rank_with_ties, leaderboard_frame

    rank_with_ties({"A": 10, "B": 10, "C": 7})   # {"A": 1, "B": 1, "C": 3}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Tuple, Union

import numpy as np
import pandas as pd

from golf_tour.competition_engine.definitions import CompetitionResult

logger = logging.getLogger(__name__)

Entries = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def rank_with_ties(entries: Entries, lower_is_better: bool = False) -> Dict[str, int]:
    pairs = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
    if not pairs:
        return {}

    df = pd.DataFrame(pairs, columns=["id", "value"])
    df["id"] = df["id"].astype(str)
    df["value"] = pd.to_numeric(df["value"], errors="coerce").astype(float)
    df.loc[~np.isfinite(df["value"]), "value"] = 0.0

    df = df.sort_values(["value", "id"], ascending=[lower_is_better, True])
    df["rank"] = df["value"].rank(method="min", ascending=lower_is_better).astype(int)
    return dict(zip(df["id"], df["rank"]))


def _stat_value(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return " ".join(str(x) for x in v)
    return v


def leaderboard_frame(result: CompetitionResult) -> pd.DataFrame:
    """
    One row per leaderboard entry with its rank, in leaderboard order.
    Stats become extra columns.
    """
    base_cols = ["rank", "entry_id", "label", "total", "front9", "back9"]
    if not result.rows:
        return pd.DataFrame(columns=["competition_id"] + base_cols)

    ranks = rank_with_ties(((row.entry_id, row.total) for row in result.rows), result.lower_is_better)

    records = []
    for row in result.rows:
        rec = {
            "rank": ranks[row.entry_id],
            "entry_id": row.entry_id,
            "label": row.label,
            "total": row.total,
            "front9": row.front9,
            "back9": row.back9,
        }
        for k, v in row.stats.items():
            rec.setdefault(k, _stat_value(v))
        records.append(rec)

    df = pd.DataFrame(records)
    df.insert(0, "competition_id", result.competition_id)
    return df
