"""
DATA ENGINE - Load Tour Rows
=============================
Loads the relational tour export (one CSV per table, or an .xlsx workbook
with the same name) into normalized records.

Expected files in the data directory:
    rounds.csv, players.csv, round_players.csv, scores.csv, pars.csv
Optional:
    h2z_legs.csv  (leg_no, start_round_no, end_round_no)
    groups.csv    (group_id, name, player_id, type)  one row per member

Column names are matched case-insensitively against a few known aliases
(exports from different admin screens do not agree on "hole" vs "hole_number").

USAGE:
    from golf_tour.data_engine.load_tour_rows import load_tour_rows
    rows = load_tour_rows(Path("data/raw"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from golf_tour.data_engine.records import TourRows, rows_summary
from golf_tour.utils.helpers import pick_first_present

logger = logging.getLogger(__name__)


class TourDataLoader:
    """Loads tour tables from CSV exports."""

    def __init__(self, data_path: Path):
        self.data_path = Path(data_path)

        self.file_names: Dict[str, str] = {
            "rounds": "rounds.csv",
            "players": "players.csv",
            "round_players": "round_players.csv",
            "scores": "scores.csv",
            "pars": "pars.csv",
            "h2z_legs": "h2z_legs.csv",
            "groups": "groups.csv",
        }

        # canonical column -> aliases, first match wins
        self.column_aliases: Dict[str, Dict[str, List[str]]] = {
            "rounds": {
                "id": ["id", "round_id"],
                "course_id": ["course_id", "course"],
                "name": ["name", "round_name"],
                "round_no": ["round_no", "round_number", "round"],
            },
            "players": {
                "id": ["id", "player_id"],
                "name": ["name", "player", "player_name"],
                "gender": ["gender", "sex", "tee"],
            },
            "round_players": {
                "round_id": ["round_id", "round"],
                "player_id": ["player_id", "player"],
                "playing": ["playing", "is_playing"],
                "playing_handicap": ["playing_handicap", "handicap", "hcp"],
                "tee": ["tee"],
            },
            "scores": {
                "round_id": ["round_id", "round"],
                "player_id": ["player_id", "player"],
                "hole_number": ["hole_number", "hole", "hole_no"],
                "strokes": ["strokes", "gross", "score"],
                "pickup": ["pickup", "is_pickup"],
            },
            "pars": {
                "course_id": ["course_id", "course"],
                "hole_number": ["hole_number", "hole", "hole_no"],
                "tee": ["tee"],
                "par": ["par"],
                "stroke_index": ["stroke_index", "si", "index"],
            },
            "h2z_legs": {
                "leg_no": ["leg_no", "leg"],
                "start_round_no": ["start_round_no", "start_round"],
                "end_round_no": ["end_round_no", "end_round"],
            },
            "groups": {
                "group_id": ["group_id", "id"],
                "name": ["name", "group_name"],
                "player_id": ["player_id", "player"],
                "type": ["type", "group_type"],
            },
        }

        self.required_columns: Dict[str, List[str]] = {
            "rounds": ["id"],
            "players": ["id"],
            "round_players": ["round_id", "player_id"],
            "scores": ["round_id", "player_id", "hole_number"],
            "pars": ["course_id", "hole_number", "par", "stroke_index"],
            "h2z_legs": ["leg_no", "start_round_no", "end_round_no"],
            "groups": ["group_id", "player_id"],
        }

    def path_for(self, table: str) -> Path:
        """CSV export, or the .xlsx workbook of the same name when only that exists."""
        csv_path = self.data_path / self.file_names[table]
        xlsx_path = csv_path.with_suffix(".xlsx")
        if not csv_path.exists() and xlsx_path.exists():
            return xlsx_path
        return csv_path

    def _read(self, path: Path) -> pd.DataFrame:
        if path.suffix == ".xlsx":
            return pd.read_excel(path, dtype=str)
        return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])

    def _canonical_columns(self, table: str, df: pd.DataFrame) -> pd.DataFrame:
        out = pd.DataFrame(index=df.index)
        for canonical, aliases in self.column_aliases[table].items():
            col = pick_first_present(df, aliases)
            if col is not None:
                out[canonical] = df[col]

        missing = [c for c in self.required_columns[table] if c not in out.columns]
        if missing:
            raise ValueError(f"{self.file_names[table]} missing columns: {missing}")
        return out

    def load_table(self, table: str, required: bool = True) -> Optional[pd.DataFrame]:
        path = self.path_for(table)
        if not path.exists():
            if required:
                raise FileNotFoundError(f"Missing tour export {path}")
            logger.info("No %s found in %s", path.name, self.data_path)
            return None

        df = self._read(path)
        out = self._canonical_columns(table, df)
        logger.info("Loaded %s rows from %s", len(out), path.name)
        return out

    def load_rows(self) -> TourRows:
        frames = {t: self.load_table(t) for t in ("rounds", "players", "round_players", "scores", "pars")}
        rows = TourRows.from_rows(**frames)
        logger.info("✓ Tour rows normalized: %s", dict(rows_summary(rows)))
        return rows

    def load_h2z_legs(self) -> pd.DataFrame:
        df = self.load_table("h2z_legs", required=False)
        if df is None:
            return pd.DataFrame(columns=["leg_no", "start_round_no", "end_round_no"])
        for c in ("leg_no", "start_round_no", "end_round_no"):
            df[c] = pd.to_numeric(df[c], errors="coerce")
        bad = df[["leg_no", "start_round_no", "end_round_no"]].isna().any(axis=1)
        if bad.any():
            logger.warning("Dropping %s H2Z legs with missing numbers", int(bad.sum()))
        return df[~bad].astype(int).sort_values("leg_no").reset_index(drop=True)

    def load_groups(self, group_type: str) -> Tuple[Dict[str, List[str]], Dict[str, str]]:
        """
        Member lists and labels for explicit pairs or teams.
        Returns ({group_id: [player_id, ...]}, {group_id: label}).
        """
        df = self.load_table("groups", required=False)
        if df is None:
            return {}, {}
        if "type" in df.columns:
            df = df[df["type"].fillna("").str.strip().str.lower() == group_type]

        members: Dict[str, List[str]] = {}
        labels: Dict[str, str] = {}
        for row in df.itertuples(index=False):
            gid = str(row.group_id).strip()
            pid = str(row.player_id).strip()
            if not gid or not pid or gid == "nan" or pid == "nan":
                continue
            members.setdefault(gid, [])
            if pid not in members[gid]:
                members[gid].append(pid)
            name = getattr(row, "name", None)
            if isinstance(name, str) and name.strip():
                labels.setdefault(gid, name.strip())
        return members, labels


def load_tour_rows(data_path: Optional[Path] = None) -> TourRows:
    """
    MAIN FUNCTION: load and normalize the five tour tables.
    """
    if data_path is None:
        from config import DATA_RAW
        data_path = DATA_RAW

    return TourDataLoader(data_path).load_rows()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    rows = load_tour_rows(Path("data/raw"))
    print(rows.frame("scores").head())
