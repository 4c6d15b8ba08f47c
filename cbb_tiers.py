"""
CBB v2.2 Model — Tier Classifiers and Lookup Matrices
cbb_tiers.py

Maps raw season statistics onto discrete tiers and holds the constant tables
the engine looks those tiers up in. No pipeline state lives here, so every
table can be checked on its own.

TWO DEFENSIVE TIER SETS
─────────────────────────────────────────────────────────────────────────────
The pace stage judges defense on a coarse three-level scale (Elite ≤30,
Good ≤110, Average/Poor beyond) while the defense matrix stage uses seven
fine tiers by rank. Both sets are kept exactly as the v2.2 sheet defines
them; collapsing them into one would move predictions.

MATRIX VALUES
─────────────────────────────────────────────────────────────────────────────
Each cell is the midpoint of the documented range (shown in the trailing
comment). Do not replace the defense matrix with a formula: the cells are
not linear in either axis.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from cbb_config import DEFAULT_FG_PCT, DEFAULT_OFFENSE_RANK


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class PaceCategory(str, Enum):
    VERY_FAST = "Very Fast"
    FAST      = "Fast"
    MODERATE  = "Moderate"
    SLOW      = "Slow"
    VERY_SLOW = "Very Slow"


class PaceDifferential(str, Enum):
    NEUTRAL  = "Neutral"
    MODERATE = "Moderate"
    MAJOR    = "Major"
    EXTREME  = "Extreme"


class PaceDefenseTier(str, Enum):
    """Coarse defensive tier used only by the pace stage."""
    ELITE        = "Elite"
    GOOD         = "Good"
    AVERAGE_POOR = "Average/Poor"


class PaceDefenseMatchup(str, Enum):
    BOTH_GOOD         = "Both Elite/Good"
    ONE_GOOD          = "One Good"
    BOTH_AVERAGE_POOR = "Both Average/Poor"


class OffenseTier(str, Enum):
    ELITE   = "Elite"
    GOOD    = "Good"
    AVERAGE = "Average"
    POOR    = "Poor"


class DefenseTier(str, Enum):
    """Fine defensive tier used by the defense quality matrix."""
    ELITE      = "Elite"
    VERY_GOOD  = "VeryGood"
    GOOD       = "Good"
    AVERAGE    = "Average"
    BELOW_AVG  = "BelowAvg"
    POOR       = "Poor"
    TERRIBLE   = "Terrible"


# ═══════════════════════════════════════════════════════════════════════════════
# PACE
# ═══════════════════════════════════════════════════════════════════════════════

# (min PPG, category, possessions midpoint), checked top-down
PACE_BUCKETS: Tuple[Tuple[float, PaceCategory, float], ...] = (
    (85.0, PaceCategory.VERY_FAST, 78.0),
    (78.0, PaceCategory.FAST,      73.5),
    (70.0, PaceCategory.MODERATE,  69.5),
    (65.0, PaceCategory.SLOW,      66.0),
)
VERY_SLOW_POSSESSIONS = 63.0

# (min possession gap, differential), checked top-down
PACE_DIFFERENTIAL_BUCKETS: Tuple[Tuple[float, PaceDifferential], ...] = (
    (16.0, PaceDifferential.EXTREME),
    (11.0, PaceDifferential.MAJOR),
    (6.0,  PaceDifferential.MODERATE),
)

PACE_ELITE_DEF_RANK = 30
PACE_GOOD_DEF_RANK  = 110

# [differential][defense matchup] → (min, max) points before scaling
PACE_MATRIX: Dict[PaceDifferential, Dict[PaceDefenseMatchup, Tuple[float, float]]] = {
    PaceDifferential.EXTREME: {
        PaceDefenseMatchup.BOTH_GOOD:         (2.0, 4.0),
        PaceDefenseMatchup.ONE_GOOD:          (6.0, 8.0),
        PaceDefenseMatchup.BOTH_AVERAGE_POOR: (10.0, 12.0),
    },
    PaceDifferential.MAJOR: {
        PaceDefenseMatchup.BOTH_GOOD:         (2.0, 4.0),
        PaceDefenseMatchup.ONE_GOOD:          (5.0, 7.0),
        PaceDefenseMatchup.BOTH_AVERAGE_POOR: (8.0, 10.0),
    },
    PaceDifferential.MODERATE: {
        PaceDefenseMatchup.BOTH_GOOD:         (1.0, 3.0),
        PaceDefenseMatchup.ONE_GOOD:          (4.0, 6.0),
        PaceDefenseMatchup.BOTH_AVERAGE_POOR: (6.0, 8.0),
    },
    PaceDifferential.NEUTRAL: {
        PaceDefenseMatchup.BOTH_GOOD:         (1.0, 1.0),
        PaceDefenseMatchup.ONE_GOOD:          (2.0, 3.0),
        PaceDefenseMatchup.BOTH_AVERAGE_POOR: (3.0, 5.0),
    },
}


def classify_pace(ppg: float) -> Tuple[PaceCategory, float]:
    """Return (pace category, possessions midpoint) for a season PPG."""
    for min_ppg, category, possessions in PACE_BUCKETS:
        if ppg >= min_ppg:
            return category, possessions
    return PaceCategory.VERY_SLOW, VERY_SLOW_POSSESSIONS


def classify_pace_differential(possession_gap: float) -> PaceDifferential:
    gap = abs(possession_gap)
    for min_gap, differential in PACE_DIFFERENTIAL_BUCKETS:
        if gap >= min_gap:
            return differential
    return PaceDifferential.NEUTRAL


def classify_pace_defense(defense_rank: int) -> PaceDefenseTier:
    if defense_rank <= PACE_ELITE_DEF_RANK:
        return PaceDefenseTier.ELITE
    if defense_rank <= PACE_GOOD_DEF_RANK:
        return PaceDefenseTier.GOOD
    return PaceDefenseTier.AVERAGE_POOR


def classify_pace_defense_matchup(
    tier1: PaceDefenseTier,
    tier2: PaceDefenseTier,
) -> PaceDefenseMatchup:
    good1 = tier1 is not PaceDefenseTier.AVERAGE_POOR
    good2 = tier2 is not PaceDefenseTier.AVERAGE_POOR
    if good1 and good2:
        return PaceDefenseMatchup.BOTH_GOOD
    if good1 or good2:
        return PaceDefenseMatchup.ONE_GOOD
    return PaceDefenseMatchup.BOTH_AVERAGE_POOR


def pace_matrix_midpoint(
    differential: PaceDifferential,
    matchup: PaceDefenseMatchup,
) -> float:
    """Unscaled pace adjustment: midpoint of the matrix range."""
    lo, hi = PACE_MATRIX[differential][matchup]
    return (lo + hi) / 2


# ═══════════════════════════════════════════════════════════════════════════════
# OFFENSE / DEFENSE QUALITY
# ═══════════════════════════════════════════════════════════════════════════════

# (max offense rank, min FG%, tier); a None FG% means rank alone decides
OFFENSE_TIER_RULES: Tuple[Tuple[int, Optional[float], OffenseTier], ...] = (
    (100, 0.48, OffenseTier.ELITE),
    (200, 0.45, OffenseTier.GOOD),
    (300, None, OffenseTier.AVERAGE),
)

# (max defense rank, tier), checked top-down
DEFENSE_TIER_BOUNDS: Tuple[Tuple[int, DefenseTier], ...] = (
    (30,  DefenseTier.ELITE),
    (70,  DefenseTier.VERY_GOOD),
    (110, DefenseTier.GOOD),
    (180, DefenseTier.AVERAGE),
    (250, DefenseTier.BELOW_AVG),
    (320, DefenseTier.POOR),
)

# [own offense tier][opponent defense tier] → points
DEFENSE_IMPACT_MATRIX: Dict[OffenseTier, Dict[DefenseTier, float]] = {
    OffenseTier.ELITE: {
        DefenseTier.ELITE:     -13.5,   # -12 to -15
        DefenseTier.VERY_GOOD: -9.0,    # -8 to -10
        DefenseTier.GOOD:      -5.0,    # -4 to -6
        DefenseTier.AVERAGE:    1.0,    # 0 to +2
        DefenseTier.BELOW_AVG:  4.0,    # +4 to +6
        DefenseTier.POOR:       5.0,    # +4 to +6
        DefenseTier.TERRIBLE:   5.0,    # +4 to +6
    },
    OffenseTier.GOOD: {
        DefenseTier.ELITE:     -16.5,   # -15 to -18
        DefenseTier.VERY_GOOD: -11.0,   # -10 to -12
        DefenseTier.GOOD:      -7.0,    # -6 to -8
        DefenseTier.AVERAGE:   -1.0,    # -2 to 0
        DefenseTier.BELOW_AVG:  3.0,    # +2 to +4
        DefenseTier.POOR:       3.0,
        DefenseTier.TERRIBLE:   3.0,
    },
    OffenseTier.AVERAGE: {
        DefenseTier.ELITE:     -19.0,   # -18 to -20
        DefenseTier.VERY_GOOD: -13.5,   # -12 to -15
        DefenseTier.GOOD:      -9.0,    # -8 to -10
        DefenseTier.AVERAGE:   -1.5,    # -3 to -1
        DefenseTier.BELOW_AVG:  1.0,    # 0 to +2
        DefenseTier.POOR:       1.0,
        DefenseTier.TERRIBLE:   1.0,
    },
    OffenseTier.POOR: {
        DefenseTier.ELITE:     -22.5,   # -20 to -25
        DefenseTier.VERY_GOOD: -16.5,   # -15 to -18
        DefenseTier.GOOD:      -11.0,   # -10 to -12
        DefenseTier.AVERAGE:   -7.0,    # -6 to -8
        DefenseTier.BELOW_AVG: -1.0,    # -2 to 0
        DefenseTier.POOR:      -1.0,
        DefenseTier.TERRIBLE:  -1.0,
    },
}


def classify_offense(
    offense_rank: Optional[int],
    field_goal_pct: Optional[float],
) -> OffenseTier:
    """Offense tier from PPG rank and FG% jointly."""
    rank = offense_rank or DEFAULT_OFFENSE_RANK
    fg_pct = field_goal_pct or DEFAULT_FG_PCT
    for max_rank, min_fg, tier in OFFENSE_TIER_RULES:
        if rank <= max_rank and (min_fg is None or fg_pct >= min_fg):
            return tier
    return OffenseTier.POOR


def classify_defense(defense_rank: int) -> DefenseTier:
    for max_rank, tier in DEFENSE_TIER_BOUNDS:
        if defense_rank <= max_rank:
            return tier
    return DefenseTier.TERRIBLE


def defense_impact(offense: OffenseTier, opponent_defense: DefenseTier) -> float:
    return DEFENSE_IMPACT_MATRIX[offense][opponent_defense]


# ═══════════════════════════════════════════════════════════════════════════════
# MUTUAL STRONG DEFENSE ("two good defenses" rule)
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MutualDefenseRule:
    """
    One row of the mutual-defense table.

    Matches when one raw defense rank falls in band_a and the other in band_b,
    in either order. The penalty is a combined total, split evenly later.
    """
    name:    str
    band_a:  Tuple[int, int]
    band_b:  Tuple[int, int]
    penalty: float

    def matches(self, rank1: int, rank2: int) -> bool:
        def _in(rank: int, band: Tuple[int, int]) -> bool:
            return band[0] <= rank <= band[1]
        return (
            (_in(rank1, self.band_a) and _in(rank2, self.band_b))
            or (_in(rank2, self.band_a) and _in(rank1, self.band_b))
        )


# Priority order; the bands make the rows mutually exclusive.
MUTUAL_DEFENSE_RULES: Tuple[MutualDefenseRule, ...] = (
    MutualDefenseRule("both_top_70",   (1, 70),    (1, 70),    -11.0),  # -10 to -12
    MutualDefenseRule("both_71_110",   (71, 110),  (71, 110),  -6.0),   # -5 to -7
    MutualDefenseRule("both_111_180",  (111, 180), (111, 180),  0.0),   # average defenses: no penalty
    MutualDefenseRule("top_70_vs_150", (1, 70),    (71, 150),  -4.0),   # -3 to -5
)


def match_mutual_defense_rule(rank1: int, rank2: int) -> Optional[MutualDefenseRule]:
    """First rule matching both raw defense ranks, or None."""
    for rule in MUTUAL_DEFENSE_RULES:
        if rule.matches(rank1, rank2):
            return rule
    return None
