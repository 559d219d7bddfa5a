from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def safe_numeric(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    out = df.copy()
    for c in cols:
        if c in out.columns:
            out[c] = pd.to_numeric(out[c], errors="coerce")
    return out


def pick_first_present(df: pd.DataFrame, candidates: list[str]) -> Optional[str]:
    cols = {str(c).strip().lower(): c for c in df.columns}
    for c in candidates:
        hit = cols.get(c.strip().lower())
        if hit is not None:
            return hit
    return None


def to_float(v: Any) -> Optional[float]:
    """Finite float or None (bools, blanks, NaN and inf are all None)."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def safe_int(v: Any) -> Optional[int]:
    f = to_float(v)
    return int(f) if f is not None else None


def to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return math.isfinite(v) and v != 0
    return str(v).strip().lower() in ("true", "t", "yes", "y", "1")


def round2(n: float) -> float:
    return round(float(n), 2) if to_float(n) is not None else 0.0


def pct2(num: float, den: float) -> float:
    if to_float(num) is None or to_float(den) is None or den <= 0:
        return 0.0
    return round2(num / den * 100.0)


def stamp(prefix: str) -> str:
    import datetime as _dt
    return f"{prefix}_{_dt.datetime.now().strftime('%Y%m%d_%H%M%S')}"
