"""
CBB v2.2 Model — Score Lean Indicator
cbb_score_lean.py

A small per-team read on whether a team might finish above or below its
projected score. Purely advisory: it reads the inputs and a finished
PredictionResult and never feeds back into the model.

Each matching heuristic adds a signed weight and a short reason; the sum
maps to "Likely Higher" (>= 0.9), "Likely Lower" (<= -0.9) or "Neutral".
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from cbb_tiers import PaceCategory, classify_pace
from cbb_v22_model import GameContext, Location, PredictionResult, TeamStats

LEAN_HIGHER_THRESHOLD = 0.9
LEAN_LOWER_THRESHOLD = -0.9

PACE_LEAN = {
    PaceCategory.VERY_FAST: (0.75, "Very fast pace"),
    PaceCategory.FAST:      (0.40, "Fast pace"),
    PaceCategory.VERY_SLOW: (-0.40, "Very slow pace"),
}

# (test, weight, reason), first match per group wins
PPG_LEAN = (
    (lambda v: v >= 85, 0.75, "High-scoring offense"),
    (lambda v: v >= 78, 0.40, "Above-average offense"),
    (lambda v: v <= 62, -0.40, "Low-scoring offense"),
)
OPP_DEFENSE_LEAN = (
    (lambda r: r >= 321, 0.75, "Opponent terrible defense"),
    (lambda r: r >= 251, 0.50, "Opponent poor defense"),
    (lambda r: r <= 30, -0.75, "Opponent elite defense"),
    (lambda r: r <= 70, -0.50, "Opponent very good defense"),
)
THREE_PCT_LEAN = (
    (lambda p: p >= 0.38, 0.25, "Strong 3PT%"),
    (lambda p: p <= 0.30, -0.25, "Weak 3PT%"),
)
FT_PCT_LEAN = (
    (lambda p: p >= 0.76, 0.20, "Strong FT%"),
    (lambda p: p <= 0.67, -0.20, "Weak FT%"),
)
HOME_RECORD_LEAN = (
    (lambda p: p >= 0.75, 0.25, "Strong home record"),
    (lambda p: p <= 0.35, -0.20, "Weak home record"),
)
AWAY_RECORD_LEAN = (
    (lambda p: p <= 0.35, -0.35, "Weak away record"),
    (lambda p: p >= 0.65, 0.15, "Strong away record"),
)

CONFERENCE_LEAN = -0.25
BOTH_STRONG_DEFENSE_RANK = 70
BOTH_STRONG_DEFENSE_LEAN = -0.50
BOTH_GOOD_DEFENSE_RANK = 110
BOTH_GOOD_DEFENSE_LEAN = -0.25
MISMATCH_LEAN_DELTA = 8.0
MISMATCH_LEAN = 0.35
CRUISE_WINNER_LEAN = 0.20


@dataclass
class ScoreLean:
    team:      str
    score:     float = 0.0
    reasons:   List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        if self.score >= LEAN_HIGHER_THRESHOLD:
            return "Likely Higher"
        if self.score <= LEAN_LOWER_THRESHOLD:
            return "Likely Lower"
        return "Neutral"

    @property
    def direction(self) -> str:
        return {"Likely Higher": "up", "Likely Lower": "down"}.get(self.label, "neutral")

    def add(self, weight: float, reason: str) -> None:
        self.score += weight
        self.reasons.append(reason)

    def apply_first(self, value: Optional[float], rules: Tuple) -> None:
        if value is None:
            return
        for test, weight, reason in rules:
            if test(value):
                self.add(weight, reason)
                return


def score_lean(
    result: PredictionResult,
    team1: TeamStats,
    team2: TeamStats,
    context: Optional[GameContext] = None,
    *,
    for_team1: bool = True,
) -> ScoreLean:
    """Lean for team 1 (default) or team 2 of an already-predicted matchup."""
    context = context or GameContext()
    team, opponent = (team1, team2) if for_team1 else (team2, team1)
    home_side = Location.HOME if for_team1 else Location.AWAY
    away_side = Location.AWAY if for_team1 else Location.HOME

    lean = ScoreLean(team=team.team)

    category, _ = classify_pace(team.ppg)
    if category in PACE_LEAN:
        lean.add(*PACE_LEAN[category])

    lean.apply_first(team.ppg, PPG_LEAN)
    lean.apply_first(opponent.defense_rank, OPP_DEFENSE_LEAN)
    lean.apply_first(team.three_point_pct, THREE_PCT_LEAN)
    lean.apply_first(team.free_throw_pct, FT_PCT_LEAN)

    if context.team1_location is home_side and team.home_record is not None:
        lean.apply_first(team.home_record.win_rate, HOME_RECORD_LEAN)
    if context.team1_location is away_side and team.away_record is not None:
        lean.apply_first(team.away_record.win_rate, AWAY_RECORD_LEAN)

    if context.is_conference_game:
        lean.add(CONFERENCE_LEAN, "Conference game (tighter)")

    d1, d2 = team1.defense_rank, team2.defense_rank
    if d1 <= BOTH_STRONG_DEFENSE_RANK and d2 <= BOTH_STRONG_DEFENSE_RANK:
        lean.add(BOTH_STRONG_DEFENSE_LEAN, "Both teams strong defenses")
    elif d1 <= BOTH_GOOD_DEFENSE_RANK and d2 <= BOTH_GOOD_DEFENSE_RANK:
        lean.add(BOTH_GOOD_DEFENSE_LEAN, "Both teams good defenses")

    mismatch = result.breakdown.extreme_mismatch
    delta = mismatch.team1 if for_team1 else mismatch.team2
    if delta >= MISMATCH_LEAN_DELTA:
        lean.add(MISMATCH_LEAN, "Extreme mismatch advantage")
    elif delta <= -MISMATCH_LEAN_DELTA:
        lean.add(-MISMATCH_LEAN, "Extreme mismatch disadvantage")

    is_winner = result.team1.is_winner if for_team1 else result.team2.is_winner
    if result.breakdown.cruise_control != 0 and is_winner:
        lean.add(CRUISE_WINNER_LEAN, "Blowout risk (pace/bench variance)")

    return lean
