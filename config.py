"""
Configuration - All Settings in ONE Place
"""

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent

# Data paths (CSV exports from the tour database)
DATA_RAW = ROOT_DIR / "data" / "raw"

# Output paths
OUTPUT_LEADERBOARDS = ROOT_DIR / "outputs" / "leaderboards"
OUTPUT_REPORTS = ROOT_DIR / "outputs" / "reports"

# Scoring settings
HOLES_PER_ROUND = 18
FRONT_NINE = range(0, 9)
BACK_NINE = range(9, 18)
MAX_STABLEFORD_POINTS = 10
PICKUP = "P"

TEES = ("M", "F")
DEFAULT_TEE = "M"

DEFAULT_TEAM_BEST_M = 2
H2Z_PAR = 3

# Competition catalog parameters (ids are stable, names are display labels)
PAR_AVERAGE_COMPETITIONS = {
    "tour_napoleon_par3_avg": {
        "name": "Napoleon (Tour) – Avg Stableford on Par 3s",
        "par": 3,
    },
    "tour_big_george_par4_avg": {
        "name": "The Big George (Tour) – Avg Stableford on Par 4s",
        "par": 4,
    },
    "tour_grand_canyon_par5_avg": {
        "name": "The Grand Canyon (Tour) – Avg Stableford on Par 5s",
        "par": 5,
    },
}

PERCENTAGE_COMPETITIONS = {
    "tour_bagel_man_zero_pct": {
        "name": "The Bagel Man (Tour) – % Holes with 0 Points",
        "min_points": 0,
        "max_points": 0,
        "stat_prefix": "zero",
        "lower_is_better": True,
    },
    "tour_wizard_four_plus_pct": {
        "name": "The Wizard (Tour) – % Holes with 4+ Points",
        "min_points": 4,
        "max_points": None,
        "stat_prefix": "four_plus",
        "lower_is_better": False,
    },
}

HOLE_RANGE_COMPETITIONS = {
    "tour_schumacher_holes_1_3_avg": {
        "name": "Schumacher (Tour) – Avg Stableford on Holes 1-3",
        "first_hole": 1,
        "last_hole": 3,
    },
    "tour_closer_holes_16_18_avg": {
        "name": "The Closer (Tour) – Avg Stableford on Holes 16-18",
        "first_hole": 16,
        "last_hole": 18,
    },
}

STREAK_COMPETITIONS = {
    "tour_hot_streak": {
        "name": "Hot Streak (Tour) – Most Consecutive Holes at Par or Better",
        "mode": "hot",
    },
    "tour_cold_streak": {
        "name": "Cold Streak (Tour) – Most Consecutive Holes Over Par",
        "mode": "cold",
    },
}

ECLECTIC_COMPETITION = {
    "id": "tour_eclectic",
    "name": "The Eclectic (Tour) – Best Stableford per Hole",
}

# Pair / team aggregations: method is best_ball | aggregate | top_m_minus_zeros
GROUP_COMPETITIONS = {
    "tour_pair_best_ball_stableford": {
        "name": "Pairs (Tour) – Best Ball Stableford",
        "scope": "tour",
        "kind": "pair",
        "method": "best_ball",
    },
    "tour_pair_aggregate_stableford": {
        "name": "Pairs (Tour) – Aggregate Stableford",
        "scope": "tour",
        "kind": "pair",
        "method": "aggregate",
    },
    "tour_team_best_m_minus_zeros": {
        "name": "Teams (Tour) – Top M Stableford minus zeros",
        "scope": "tour",
        "kind": "team",
        "method": "top_m_minus_zeros",
    },
    "round_pair_best_ball_stableford": {
        "name": "Pairs (Round) – Best Ball Stableford",
        "scope": "round",
        "kind": "pair",
        "method": "best_ball",
    },
    "round_team_best_m_minus_zeros": {
        "name": "Teams (Round) – Top M Stableford minus zeros",
        "scope": "round",
        "kind": "team",
        "method": "top_m_minus_zeros",
    },
}

STABLEFORD_COMPETITIONS = {
    "tour_stableford": {"name": "Tour Leaderboard – Stableford", "scope": "tour"},
    "round_stableford": {"name": "Round Leaderboard – Stableford", "scope": "round"},
}

BOTB_COMPETITION = {
    "id": "tour_botb_stableford",
    "name": "Best of the Best – Stableford",
}

# Implicit grouping when no explicit pairs / teams are configured
DEFAULT_PAIRING_MODE = "SEQUENTIAL"
DEFAULT_TEAM_MODE = "ROUND_ROBIN"
DEFAULT_TEAM_COUNT = 2


def ensure_dirs() -> None:
    for p in (
        DATA_RAW,
        OUTPUT_LEADERBOARDS,
        OUTPUT_REPORTS,
    ):
        p.mkdir(parents=True, exist_ok=True)
