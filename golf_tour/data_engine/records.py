"""
DATA ENGINE - Records
======================
Explicit record types for the five relational inputs, and the normalization
that turns loose rows (dicts from an API, CSV frames) into them.

All coercion happens here, once. Downstream code never sees a string
hole number, a NaN handicap or an unknown tee.

Hole numbers may arrive 0-based (0..17) from legacy exports. A group of rows
(scores for one round, pars for one course+tee) whose smallest hole is 0 and
largest is <= 17 is shifted by +1, so a partial card that has not reached
hole 0 yet moves with the rest of its round. Anything still outside 1..18 is
dropped.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from config import DEFAULT_TEE, HOLES_PER_ROUND, PICKUP, TEES
from golf_tour.utils.helpers import safe_int, to_bool, to_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundRecord:
    id: str
    course_id: Optional[str]
    name: str = ""
    round_no: Optional[int] = None


@dataclass(frozen=True)
class PlayerRecord:
    id: str
    name: str
    gender: Optional[str] = None


@dataclass(frozen=True)
class RoundPlayerRecord:
    round_id: str
    player_id: str
    playing: bool
    playing_handicap: Optional[int] = None
    tee: Optional[str] = None


@dataclass(frozen=True)
class ScoreRecord:
    round_id: str
    player_id: str
    hole_number: int
    strokes: Optional[int] = None
    pickup: bool = False


@dataclass(frozen=True)
class ParRecord:
    course_id: str
    hole_number: int
    tee: str
    par: int
    stroke_index: int


RECORD_TYPES = {
    "rounds": RoundRecord,
    "players": PlayerRecord,
    "round_players": RoundPlayerRecord,
    "scores": ScoreRecord,
    "pars": ParRecord,
}

Rows = Union[pd.DataFrame, Iterable[Any], None]


def normalize_tee(v: Any, default: Optional[str] = DEFAULT_TEE) -> Optional[str]:
    s = str(v if v is not None else "").strip().upper()
    if s in TEES:
        return s
    # gender columns sometimes carry words rather than tee codes
    if s in ("FEMALE", "W", "WOMEN", "LADIES", "L"):
        return "F"
    if s in ("MALE", "MEN"):
        return "M"
    return default


def _id(v: Any) -> str:
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return ""
    # CSV readers turn integer ids into floats
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v).strip()


def _frame(rows: Rows, cls: type) -> pd.DataFrame:
    cols = [f.name for f in fields(cls)]
    if rows is None:
        return pd.DataFrame(columns=cols)
    if isinstance(rows, pd.DataFrame):
        df = rows.copy()
    else:
        df = pd.DataFrame([asdict(r) if isinstance(r, cls) else dict(r) for r in rows])
    for c in cols:
        if c not in df.columns:
            df[c] = None
    return df[cols].copy()


def _iter_rows(df: pd.DataFrame) -> Iterator[Dict[str, Any]]:
    clean = df.astype(object).where(pd.notna(df), None)
    yield from clean.to_dict(orient="records")


def _with_ids(df: pd.DataFrame, id_cols: Sequence[str]) -> pd.DataFrame:
    out = df.copy()
    keep = pd.Series(True, index=out.index)
    for c in id_cols:
        out[c] = out[c].map(_id)
        keep &= out[c] != ""
    return out[keep].copy()


def normalize_hole_numbers(df: pd.DataFrame, group_cols: Sequence[str]) -> pd.DataFrame:
    """
    Coerce hole_number to int 1..18, shifting 0-based groups by +1.
    Rows without a usable hole number are dropped.
    """
    out = df.copy()
    out["hole_number"] = pd.to_numeric(out["hole_number"], errors="coerce")
    out = out[out["hole_number"].notna()].copy()
    if out.empty:
        return out

    grouped = out.groupby(list(group_cols), dropna=False)["hole_number"]
    zero_based = (grouped.transform("min") == 0) & (grouped.transform("max") <= HOLES_PER_ROUND - 1)
    n_shifted = int(zero_based.sum())
    if n_shifted:
        logger.warning("Shifting %s 0-based hole numbers to 1..%s", n_shifted, HOLES_PER_ROUND)
    out.loc[zero_based, "hole_number"] = out.loc[zero_based, "hole_number"] + 1

    valid = out["hole_number"].between(1, HOLES_PER_ROUND) & (out["hole_number"] % 1 == 0)
    n_bad = int((~valid).sum())
    if n_bad:
        logger.warning("Dropping %s rows with hole numbers outside 1..%s", n_bad, HOLES_PER_ROUND)
    return out[valid].copy()


def normalize_rounds(rows: Rows) -> Tuple[RoundRecord, ...]:
    df = _with_ids(_frame(rows, RoundRecord), ["id"])
    out: Dict[str, RoundRecord] = {}
    for row in _iter_rows(df):
        if row["id"] in out:
            continue
        out[row["id"]] = RoundRecord(
            id=row["id"],
            course_id=_id(row["course_id"]) or None,
            name=_id(row["name"]) or row["id"],
            round_no=safe_int(row["round_no"]),
        )
    return tuple(out.values())


def normalize_players(rows: Rows) -> Tuple[PlayerRecord, ...]:
    df = _with_ids(_frame(rows, PlayerRecord), ["id"])
    out: Dict[str, PlayerRecord] = {}
    for row in _iter_rows(df):
        if row["id"] in out:
            continue
        out[row["id"]] = PlayerRecord(
            id=row["id"],
            name=_id(row["name"]) or row["id"],
            gender=normalize_tee(row["gender"], default=None),
        )
    return tuple(out.values())


def normalize_round_players(rows: Rows) -> Tuple[RoundPlayerRecord, ...]:
    df = _with_ids(_frame(rows, RoundPlayerRecord), ["round_id", "player_id"])
    # later assignment rows win
    df = df.drop_duplicates(subset=["round_id", "player_id"], keep="last")
    return tuple(
        RoundPlayerRecord(
            round_id=row["round_id"],
            player_id=row["player_id"],
            playing=to_bool(row["playing"]),
            playing_handicap=safe_int(row["playing_handicap"]),
            tee=normalize_tee(row["tee"], default=None),
        )
        for row in _iter_rows(df)
    )


def _score_strokes(v: Any) -> Optional[int]:
    f = to_float(v)
    return int(f) if f is not None and f > 0 else None


def _is_pickup_marker(v: Any) -> bool:
    return isinstance(v, str) and v.strip().upper() == PICKUP


def normalize_scores(rows: Rows) -> Tuple[ScoreRecord, ...]:
    df = _with_ids(_frame(rows, ScoreRecord), ["round_id", "player_id"])
    df = normalize_hole_numbers(df, ["round_id"])
    return tuple(
        ScoreRecord(
            round_id=row["round_id"],
            player_id=row["player_id"],
            hole_number=int(row["hole_number"]),
            strokes=_score_strokes(row["strokes"]),
            pickup=to_bool(row["pickup"]) or _is_pickup_marker(row["strokes"]),
        )
        for row in _iter_rows(df)
    )


def normalize_pars(rows: Rows) -> Tuple[ParRecord, ...]:
    df = _with_ids(_frame(rows, ParRecord), ["course_id"])
    df["tee"] = df["tee"].map(normalize_tee)
    df["par"] = pd.to_numeric(df["par"], errors="coerce")
    df["stroke_index"] = pd.to_numeric(df["stroke_index"], errors="coerce")

    missing = df["par"].isna() | df["stroke_index"].isna()
    if missing.any():
        logger.warning("Dropping %s par rows without par/stroke index", int(missing.sum()))
    df = normalize_hole_numbers(df[~missing], ["course_id", "tee"])
    df = df.drop_duplicates(subset=["course_id", "tee", "hole_number"], keep="last")
    return tuple(
        ParRecord(
            course_id=row["course_id"],
            hole_number=int(row["hole_number"]),
            tee=row["tee"],
            par=int(row["par"]),
            stroke_index=int(row["stroke_index"]),
        )
        for row in _iter_rows(df)
    )


@dataclass(frozen=True)
class TourRows:
    """Everything the context builder needs, already normalized."""

    rounds: Tuple[RoundRecord, ...] = ()
    players: Tuple[PlayerRecord, ...] = ()
    round_players: Tuple[RoundPlayerRecord, ...] = ()
    scores: Tuple[ScoreRecord, ...] = ()
    pars: Tuple[ParRecord, ...] = ()

    @classmethod
    def from_rows(
        cls,
        rounds: Rows = None,
        players: Rows = None,
        round_players: Rows = None,
        scores: Rows = None,
        pars: Rows = None,
    ) -> "TourRows":
        return cls(
            rounds=normalize_rounds(rounds),
            players=normalize_players(players),
            round_players=normalize_round_players(round_players),
            scores=normalize_scores(scores),
            pars=normalize_pars(pars),
        )

    def frame(self, table: str) -> pd.DataFrame:
        """Records of one table as a DataFrame (for reports and validation)."""
        cls = RECORD_TYPES[table]
        return pd.DataFrame(
            [asdict(r) for r in getattr(self, table)],
            columns=[f.name for f in fields(cls)],
        )


def rows_summary(rows: TourRows) -> Mapping[str, int]:
    return {table: len(getattr(rows, table)) for table in RECORD_TYPES}
