"""Scoring constants - single source of truth for shared business values.

Per-module curve breakpoints live next to each project-type scorer; the
values here are shared between several engines.
"""

from typing import TypedDict


class ThresholdConfig(TypedDict):
    """Type definition for the verdict ladder."""
    go: float
    go_with_reserves: float
    deepen: float


# SmartScore verdict ladder (score >= threshold)
DEFAULT_VERDICT_THRESHOLDS: ThresholdConfig = {
    "go": 75.0,
    "go_with_reserves": 60.0,
    "deepen": 45.0,
}

# Value used when an expected optional input block is absent
NEUTRAL_SCORE = 50.0

# Zone inference from INSEE density (hab./km²)
ZONE_DENSITY_URBAN = 3000.0   # >= urbain
ZONE_DENSITY_RURAL = 300.0    # <= rural

# Credit
DEFAULT_RATE_PCT = 3.5

# Committee blend (renormalized over available parts)
COMMITTEE_WEIGHTS = {
    "market": 0.6,
    "risk": 0.4,
}

# Géorisques penalties
GEO_CLEAN_SCORE = 90
GEO_BASE_SCORE = 85
GEO_FLOOD_PENALTY = 35
GEO_SEISMIC_PENALTY = 10
GEO_PER_RISK_PENALTY = 5
GEO_RISK_PENALTY_CAP = 30

# Upstream "neutral fallback" risk score
RISK_SCORE_FALLBACK_SENTINEL = 50

# Confidence = data reliability, base 100
CONFIDENCE_BASE = 100
CONFIDENCE_PENALTIES = {
    "geo": -10,
    "dvf": -10,
    "insee": -10,
    "bpe": -10,
    "transport": -10,
    "blocker": -10,
    "warn": -5,
}

# Risk level bands on a 0-100 risk score (higher = safer)
RISK_LEVEL_BANDS = {
    "faible": 70,
    "modere": 40,
}

# Credit ratio bands used by the committee: (good, watch, higher_is_better)
RATIO_BANDS = {
    "ltv": (0.70, 0.85, False),
    "ltc": (0.70, 0.85, False),
    "dsti": (0.30, 0.35, False),   # HCSF recommends 35% max
    "dscr": (1.2, 1.0, True),
}

# Aliases under which producers store the market study on an operation
MARKET_RECORD_PATHS = (
    "market",
    "marketContext",
    "market_context",
    "marketStudy",
    "market_study",
)

# Committee acceptance probability, baseline 50.
# (bound, impact, qualifier): first row whose bound the value reaches wins;
# DSCR, SmartScore and market read "value >= bound", LTV reads "value <= bound".
ACCEPTANCE_BASE = 50
ACCEPTANCE_DSCR_LADDER = (
    (1.5, 18, "couverture tres confortable"),
    (1.3, 14, "couverture solide"),
    (1.2, 10, "acceptable"),
    (1.0, 2, "juste suffisant"),
    (0.9, -12, "deficit de couverture"),
    (float("-inf"), -25, "deficit de couverture"),
)
ACCEPTANCE_LTV_LADDER = (
    (40, 15, "structure tres prudente"),
    (50, 10, "levier contenu"),
    (60, 5, "standard"),
    (70, -2, "fourchette haute"),
    (80, -8, "eleve"),
    (float("inf"), -18, "tres eleve"),
)
ACCEPTANCE_SMARTSCORE_LADDER = (
    (75, 12, "excellent"),
    (60, 7, "bon"),
    (45, 0, "moyen"),
    (30, -6, "faible"),
    (float("-inf"), -14, "faible"),
)
ACCEPTANCE_MARKET_LADDER = (
    (70, 8, "porteur"),
    (50, 3, "neutre"),
    (30, -3, "tendu"),
    (float("-inf"), -10, "defavorable"),
)
ACCEPTANCE_MISSING_PENALTY = 3      # per missing item
ACCEPTANCE_MISSING_PENALTY_CAP = 20

# Committee stress scenarios
STRESS_RENT_FACTORS = {
    "rent_-10": 0.9,
    "rent_-20": 0.8,
}
STRESS_VALUE_FACTOR = 0.9   # asset value -10%
STRESS_RATE_DSCR_FACTOR = 0.9   # rate +1% approximated as DSCR -10%

# Bank SmartScore block weights (renormalized over scored blocks)
BANK_BLOCK_WEIGHTS = {
    "financier": 0.45,
    "risques": 0.25,
    "marche": 0.20,
    "sponsor": 0.10,
}
BANK_FALLBACK_STUDY_SCORE = 55.0   # study present but no score found
BANK_BLOCKING_FLAGS = ("LTC_TOO_HIGH", "MARGIN_TOO_LOW", "DURATION_TOO_LONG")
