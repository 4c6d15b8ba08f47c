#!/usr/bin/env python3
"""
NCAA Basketball Matchup Model v2.2
cbb_v22_model.py

Deterministic rule-based score prediction for a two-team matchup: full-game
score, first-half score, margin and winner, from per-team season statistics
and a game context.

PIPELINE
─────────────────────────────────────────────────────────────────────────────
Thirteen stages run in a fixed order over a running ScorePair. Each stage
reads the running totals and returns a delta that is added in place; scores
are rounded only once, at the very end.

   1  Base expected points     (ppg + opponent points allowed) / 2
   2  Pace                     possession-gap × defense matrix, scaled 0.65
   3  Recent form              streaks + L5 scoring trend
   4  Defense quality          offense tier × opponent defense tier matrix,
                               plus the mutual strong-defense correction
   5  Location                 home / away / neutral split records
   6  Conference               flat combined penalty
  11  Extreme mismatch         evaluated here; sets override flags
   7  Cruise control           blowout dampener (skippable)
   8  Elite caps               offense caps / poor-offense floors (skippable)
   9  Contextual               rest, travel, injuries
  11  Mismatch post-adjust     deltas, bottom-10 floor, 110 max cap
  13  Close game bonus         +7 total when margin < 5
  10  First half               per-team share of the rounded full game

Stage numbers follow the v2.2 sheet, which is why 11 appears twice: the
mismatch conditions are judged on the preliminary score but their deltas
land after cruise control and caps.

Only the extreme mismatch stage changes the *behaviour* of later stages.
Its MismatchFlags travel explicitly alongside the score pair; nothing is
shared between calls, so predict() is safe to call concurrently.

Usage:
    from cbb_v22_model import predict, TeamStats, GameContext, Location

    result = predict(team1, team2, GameContext(team1_location=Location.HOME))
    result.team1.full_game, result.margin, result.breakdown.defense
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from cbb_config import (
    AWAY_OPP_MID_BAND,
    AWAY_OPP_TOP_BAND,
    AWAY_PENALTY,
    AWAY_STRONG_RATE,
    AWAY_WEAK_RATE,
    AWAY_WINLESS_MIN_LOSSES,
    BOTTOM_FIFTY_NET_RANK,
    BOTTOM_TEN_FLOOR,
    BOTTOM_TEN_NET_RANK,
    BOTTOM_TEN_SWING,
    CLOSE_GAME_AWAY_SHARE,
    CLOSE_GAME_BONUS,
    CLOSE_GAME_HOME_SHARE,
    CLOSE_GAME_MARGIN,
    CONFERENCE_GAME_PENALTY,
    CRUISE_CONTROL,
    DEFAULT_DAYS_REST,
    DEFAULT_FG_PCT,
    DEFAULT_FIRST_HALF_SHARE,
    DEFAULT_WIN_RATE,
    ELITE_CAP_DEFAULT,
    ELITE_CAP_ELITE_DEF_RANK,
    ELITE_CAP_VS_ELITE_DEF,
    ELITE_CAP_VS_WEAK_DEF,
    ELITE_CAP_WEAK_DEF_RANK,
    ELITE_OFFENSE_PPG,
    FAST_STARTER_RATIO,
    FAST_STARTER_SHARE,
    HOME_BONUS,
    INJURY_POINT_GUARD,
    INJURY_ROLE_PLAYER,
    INJURY_TOP_SCORER,
    LOCATION_DEFAULT_NET_RANK,
    LOSS_STREAK_PENALTY,
    MISMATCH_DEFAULT_NET_RANK,
    MISMATCH_MAX_SCORE,
    MODEL_VERSION,
    NET_GAP_MARGIN_SHIFT,
    NET_GAP_THRESHOLD,
    NEUTRAL_DOMINANT_BONUS,
    NEUTRAL_DOMINANT_RATE,
    NEUTRAL_LOSING_PENALTY,
    NEUTRAL_LOSING_RATE,
    NEUTRAL_WINLESS_PENALTY,
    NEUTRAL_WINNING_BONUS,
    NEUTRAL_WINNING_RATE,
    PACE_FAST_SHARE,
    PACE_SCALING_FACTOR,
    PACE_SLOW_SHARE,
    POOR_FLOOR_DEFAULT,
    POOR_FLOOR_ELITE_DEF_RANK,
    POOR_FLOOR_VS_ELITE_DEF,
    POOR_OFFENSE_FG_PCT,
    POOR_OFFENSE_PPG,
    REST_BACK_TO_BACK,
    REST_LONG_LAYOFF,
    REST_ONE_DAY,
    REST_WELL_RESTED,
    SLOW_STARTER_RATIO,
    SLOW_STARTER_SHARE,
    STATEMENT_GAME_BONUS,
    STATEMENT_GAME_STREAK,
    TRAVEL_DISTANCE_THRESHOLD,
    TRAVEL_PENALTY,
    TREND_ADJUSTMENT,
    TREND_THRESHOLD,
    WIN_STREAK_BONUS,
)
from cbb_input_schemas import validate_matchup
from cbb_tiers import (
    classify_defense,
    classify_offense,
    classify_pace,
    classify_pace_defense,
    classify_pace_defense_matchup,
    classify_pace_differential,
    defense_impact,
    match_mutual_defense_rule,
    pace_matrix_midpoint,
)

log = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# INPUT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WinLossRecord:
    """A split record such as home 12-3."""
    wins:   int = 0
    losses: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> Optional[float]:
        """None when no games have been played."""
        if self.games <= 0:
            return None
        return self.wins / self.games

    @classmethod
    def parse(cls, text: str) -> Optional["WinLossRecord"]:
        """Parse "12-3" (also "12–3" or "12 - 3"). Returns None if unparseable."""
        if not text:
            return None
        parts = str(text).replace("–", "-").split("-")
        if len(parts) != 2:
            return None
        try:
            return cls(int(parts[0].strip()), int(parts[1].strip()))
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.wins}-{self.losses}"


@dataclass(frozen=True)
class TeamStats:
    """
    One team's season statistical profile.

    team, ppg, points_allowed and defense_rank are required and checked by
    validate_matchup() before anything runs. Every other field is optional;
    the stage that reads it substitutes a documented neutral default:

      field_goal_pct   0.45         offense_rank     200
      net_rank         100 (location stage) / 150 (mismatch stage)
      *_record         win rate 0.5 win_streak/loss_streak  0
      last5_ppg        no trend     first_half_ppg   48% share

    Percentages are decimals (0.45, not 45). Ranks run 1..363, lower = better.
    win_streak and loss_streak are mutually exclusive; at most one is nonzero.
    """
    team:           Optional[str]   = None
    ppg:            Optional[float] = None
    points_allowed: Optional[float] = None
    defense_rank:   Optional[int]   = None

    field_goal_pct:  Optional[float] = None
    three_point_pct: Optional[float] = None
    free_throw_pct:  Optional[float] = None
    offense_rank:    Optional[int]   = None   # rank by PPG
    net_rank:        Optional[int]   = None   # overall strength (NET-style)

    home_record:    Optional[WinLossRecord] = None
    away_record:    Optional[WinLossRecord] = None
    neutral_record: Optional[WinLossRecord] = None

    win_streak:     int = 0
    loss_streak:    int = 0
    last5_ppg:      Optional[float] = None
    first_half_ppg: Optional[float] = None

    conference:     str = ""


class Location(str, Enum):
    """Game site, always from team 1's point of view."""
    HOME    = "home"
    AWAY    = "away"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, value) -> "Location":
        if isinstance(value, Location):
            return value
        text = str(value or "").strip().lower()
        for loc in cls:
            if loc.value == text:
                return loc
        return cls.NEUTRAL


@dataclass(frozen=True)
class GameContext:
    """
    Game-level situation. Rest, travel and injury flags describe the game as a
    whole and are applied to each team identically.
    """
    is_conference_game:  bool = False
    team1_location:      Location = Location.NEUTRAL
    days_rest:           Optional[int] = None      # None → 2 (no effect)
    travel_distance:     Optional[float] = None    # miles
    missing_top_scorer:  bool = False
    missing_point_guard: bool = False
    missing_role_player: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# ACCUMULATOR / FLAGS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ScorePair:
    """Per-team values: the running score and every per-team stage delta."""
    team1: float = 0.0
    team2: float = 0.0

    def __add__(self, other: "ScorePair") -> "ScorePair":
        return ScorePair(self.team1 + other.team1, self.team2 + other.team2)

    @classmethod
    def split(cls, combined: float) -> "ScorePair":
        """Split a combined-total delta evenly between both teams."""
        return cls(combined / 2, combined / 2)

    @property
    def margin(self) -> float:
        return abs(self.team1 - self.team2)

    @property
    def total(self) -> float:
        return self.team1 + self.team2

    @property
    def team1_leads(self) -> bool:
        return self.team1 > self.team2


@dataclass(frozen=True)
class MismatchFlags:
    skip_cruise_control: bool = False
    skip_elite_caps:     bool = False
    apply_floor:         bool = False
    apply_max_cap:       bool = False

    @property
    def any_override(self) -> bool:
        return (self.skip_cruise_control or self.skip_elite_caps
                or self.apply_floor or self.apply_max_cap)


@dataclass(frozen=True)
class MismatchOutcome:
    """Deltas and overrides decided by the extreme mismatch stage."""
    adjustments: ScorePair = field(default_factory=ScorePair)
    flags:       MismatchFlags = field(default_factory=MismatchFlags)
    floor_value: float = BOTTOM_TEN_FLOOR
    floor_team1: bool = False
    floor_team2: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# OUTPUT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AdjustmentBreakdown:
    """Every stage's contribution, kept for audit and tests."""
    base:            ScorePair
    pace:            ScorePair
    form:            ScorePair
    defense:         ScorePair
    location:        ScorePair
    conference:      float        # combined total, split evenly
    cruise_control:  float        # applied to the preliminary leader only
    elite_caps:      ScorePair    # net movement from caps / floors
    contextual:      ScorePair
    extreme_mismatch: ScorePair
    close_game:      ScorePair
    mismatch_flags:  MismatchFlags


@dataclass(frozen=True)
class TeamPrediction:
    name:       str
    full_game:  int
    first_half: int
    is_winner:  bool


@dataclass(frozen=True)
class PredictionResult:
    team1:            TeamPrediction
    team2:            TeamPrediction
    total:            int
    first_half_total: int
    margin:           int
    winner:           str
    breakdown:        AdjustmentBreakdown
    model_version:    str = MODEL_VERSION

    def to_flat_dict(self) -> Dict:
        """Flatten to one CSV row."""
        b = self.breakdown
        row = {
            "model_version":    self.model_version,
            "team1":            self.team1.name,
            "team2":            self.team2.name,
            "team1_score":      self.team1.full_game,
            "team2_score":      self.team2.full_game,
            "team1_first_half": self.team1.first_half,
            "team2_first_half": self.team2.first_half,
            "total":            self.total,
            "first_half_total": self.first_half_total,
            "margin":           self.margin,
            "winner":           self.winner,
            "conference_adj":   round(b.conference, 2),
            "cruise_control":   round(b.cruise_control, 2),
        }
        for name in ("base", "pace", "form", "defense", "location",
                     "elite_caps", "contextual", "extreme_mismatch", "close_game"):
            pair = getattr(b, name)
            row[f"{name}_team1"] = round(pair.team1, 2)
            row[f"{name}_team2"] = round(pair.team2, 2)
        row["skip_cruise_control"] = int(b.mismatch_flags.skip_cruise_control)
        row["skip_elite_caps"]     = int(b.mismatch_flags.skip_elite_caps)
        return row


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _ladder(value: float, rungs: Sequence[Tuple[float, float]], default: float = 0.0) -> float:
    """Points for the first rung whose threshold value meets (>=)."""
    for threshold, points in rungs:
        if value >= threshold:
            return points
    return default


def _win_rate(record: Optional[WinLossRecord]) -> float:
    if record is None or record.win_rate is None:
        return DEFAULT_WIN_RATE
    return record.win_rate


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (not banker's rounding)."""
    return int(math.floor(value + 0.5))


# ═══════════════════════════════════════════════════════════════════════════════
# STAGES
# ═══════════════════════════════════════════════════════════════════════════════

def base_expected_points(team1: TeamStats, team2: TeamStats) -> ScorePair:
    """Step 1: average of own offense and the opponent's points allowed."""
    return ScorePair(
        (team1.ppg + team2.points_allowed) / 2,
        (team2.ppg + team1.points_allowed) / 2,
    )


def pace_adjustment(team1: TeamStats, team2: TeamStats) -> ScorePair:
    """
    Step 2: tempo mismatch.

    Possession midpoints from PPG → gap bucket; coarse defensive tiers of both
    sides → matchup column. Matrix midpoint × PACE_SCALING_FACTOR is split
    60/40 toward the faster team (team 2 on equal midpoints).
    """
    _, poss1 = classify_pace(team1.ppg)
    _, poss2 = classify_pace(team2.ppg)
    differential = classify_pace_differential(poss1 - poss2)
    matchup = classify_pace_defense_matchup(
        classify_pace_defense(team1.defense_rank),
        classify_pace_defense(team2.defense_rank),
    )
    scaled = pace_matrix_midpoint(differential, matchup) * PACE_SCALING_FACTOR

    if poss1 > poss2:
        return ScorePair(scaled * PACE_FAST_SHARE, scaled * PACE_SLOW_SHARE)
    return ScorePair(scaled * PACE_SLOW_SHARE, scaled * PACE_FAST_SHARE)


def form_adjustment(team: TeamStats) -> float:
    """Step 3: streak effect plus L5 scoring trend."""
    adjustment = 0.0

    win_streak = team.win_streak or 0
    loss_streak = team.loss_streak or 0
    if win_streak >= 1:
        adjustment += _ladder(win_streak, WIN_STREAK_BONUS)
    elif loss_streak >= 1:
        adjustment += _ladder(loss_streak, LOSS_STREAK_PENALTY)

    if team.last5_ppg and team.ppg:
        trend = team.last5_ppg - team.ppg
        if trend >= TREND_THRESHOLD:
            adjustment += TREND_ADJUSTMENT
        elif trend <= -TREND_THRESHOLD:
            adjustment -= TREND_ADJUSTMENT

    return adjustment


def mutual_defense_correction(defense_rank1: int, defense_rank2: int) -> float:
    """Combined-total penalty when both raw defense ranks are strong."""
    rule = match_mutual_defense_rule(defense_rank1, defense_rank2)
    return rule.penalty if rule is not None else 0.0


def defense_quality_adjustment(team1: TeamStats, team2: TeamStats) -> ScorePair:
    """
    Step 4: the dominant stage.

    Each side's offense tier is crossed with the opponent's fine defense tier
    in DEFENSE_IMPACT_MATRIX, then the mutual-defense correction (chosen from
    the raw ranks, not the tiers) is split evenly.
    """
    off1 = classify_offense(team1.offense_rank, team1.field_goal_pct)
    off2 = classify_offense(team2.offense_rank, team2.field_goal_pct)
    def1 = classify_defense(team1.defense_rank)
    def2 = classify_defense(team2.defense_rank)

    matrix = ScorePair(defense_impact(off1, def2), defense_impact(off2, def1))
    mutual = mutual_defense_correction(team1.defense_rank, team2.defense_rank)
    return matrix + ScorePair.split(mutual)


def home_bonus(team: TeamStats) -> float:
    return _ladder(_win_rate(team.home_record), HOME_BONUS)


def away_penalty(team: TeamStats, opponent: TeamStats) -> float:
    """Road penalty from the visitor's away record and the host's strength."""
    record = team.away_record
    rate = _win_rate(record)
    winless = (
        record is not None
        and record.wins == 0
        and record.losses >= AWAY_WINLESS_MIN_LOSSES
    )
    if rate < AWAY_WEAK_RATE or winless:
        tier = "weak"
    elif rate < AWAY_STRONG_RATE:
        tier = "average"
    else:
        tier = "strong"

    opponent_net = opponent.net_rank or LOCATION_DEFAULT_NET_RANK
    if opponent_net <= AWAY_OPP_TOP_BAND:
        column = 0
    elif opponent_net <= AWAY_OPP_MID_BAND:
        column = 1
    else:
        column = 2
    return AWAY_PENALTY[tier][column]


def neutral_site_adjustment(team: TeamStats) -> float:
    rate = _win_rate(team.neutral_record)
    if rate >= NEUTRAL_DOMINANT_RATE:
        return NEUTRAL_DOMINANT_BONUS
    if rate >= NEUTRAL_WINNING_RATE:
        return NEUTRAL_WINNING_BONUS
    # winless must be checked before the general losing-record case
    if rate == 0:
        return NEUTRAL_WINLESS_PENALTY
    if rate < NEUTRAL_LOSING_RATE:
        return NEUTRAL_LOSING_PENALTY
    return 0.0


def location_adjustment(team1: TeamStats, team2: TeamStats, context: GameContext) -> ScorePair:
    """Step 5: exactly one of home / away / neutral fires."""
    if context.team1_location is Location.HOME:
        return ScorePair(home_bonus(team1), away_penalty(team2, team1))
    if context.team1_location is Location.AWAY:
        return ScorePair(away_penalty(team1, team2), home_bonus(team2))
    return ScorePair(neutral_site_adjustment(team1), neutral_site_adjustment(team2))


def conference_adjustment(context: GameContext) -> float:
    """Step 6: combined-total penalty for conference games."""
    return CONFERENCE_GAME_PENALTY if context.is_conference_game else 0.0


def extreme_mismatch(team1: TeamStats, team2: TeamStats) -> MismatchOutcome:
    """
    Step 11: bottom-10 opponents, extreme NET gaps, statement games.

    (a) Either NET >= 356: skip cruise control and caps, floor each bottom-10
        side at 48 and cap the leader at 110; if exactly one side is bottom-10
        the other gains 12.5 and it loses 12.5.
    (b) Otherwise a NET gap >= 200 skips cruise control and shifts the margin
        17.5 toward the better-ranked side.
    (c) Independently, a 3+ game loss streak against a bottom-50 opponent the
        team still out-ranks adds 10.
    """
    net1 = team1.net_rank or MISMATCH_DEFAULT_NET_RANK
    net2 = team2.net_rank or MISMATCH_DEFAULT_NET_RANK
    bottom1 = net1 >= BOTTOM_TEN_NET_RANK
    bottom2 = net2 >= BOTTOM_TEN_NET_RANK

    adjustments = ScorePair()
    flags = MismatchFlags()

    if bottom1 or bottom2:
        flags = MismatchFlags(
            skip_cruise_control=True,
            skip_elite_caps=True,
            apply_floor=True,
            apply_max_cap=True,
        )
        if bottom1 and not bottom2:
            adjustments += ScorePair(-BOTTOM_TEN_SWING, BOTTOM_TEN_SWING)
        elif bottom2 and not bottom1:
            adjustments += ScorePair(BOTTOM_TEN_SWING, -BOTTOM_TEN_SWING)
    elif abs(net1 - net2) >= NET_GAP_THRESHOLD:
        flags = MismatchFlags(skip_cruise_control=True)
        half = NET_GAP_MARGIN_SHIFT / 2
        if net1 < net2:
            adjustments += ScorePair(half, -half)
        else:
            adjustments += ScorePair(-half, half)

    if (team1.loss_streak or 0) >= STATEMENT_GAME_STREAK and net2 >= BOTTOM_FIFTY_NET_RANK and net1 < net2:
        adjustments += ScorePair(STATEMENT_GAME_BONUS, 0.0)
    if (team2.loss_streak or 0) >= STATEMENT_GAME_STREAK and net1 >= BOTTOM_FIFTY_NET_RANK and net2 < net1:
        adjustments += ScorePair(0.0, STATEMENT_GAME_BONUS)

    return MismatchOutcome(
        adjustments=adjustments,
        flags=flags,
        floor_value=BOTTOM_TEN_FLOOR,
        floor_team1=flags.apply_floor and bottom1,
        floor_team2=flags.apply_floor and bottom2,
    )


def cruise_control(margin: float) -> float:
    """Step 7: penalty for the leader of a projected blowout (<= 0)."""
    return _ladder(margin, CRUISE_CONTROL)


def apply_elite_caps(score: float, team: TeamStats, opponent: TeamStats) -> float:
    """Step 8: cap elite offenses, floor poor ones."""
    opp_def = opponent.defense_rank

    if team.ppg >= ELITE_OFFENSE_PPG:
        if opp_def >= ELITE_CAP_WEAK_DEF_RANK:
            cap = ELITE_CAP_VS_WEAK_DEF
        elif opp_def <= ELITE_CAP_ELITE_DEF_RANK:
            cap = ELITE_CAP_VS_ELITE_DEF
        else:
            cap = ELITE_CAP_DEFAULT
        return min(score, cap)

    fg_pct = team.field_goal_pct or DEFAULT_FG_PCT
    if team.ppg <= POOR_OFFENSE_PPG and fg_pct < POOR_OFFENSE_FG_PCT:
        floor = POOR_FLOOR_VS_ELITE_DEF if opp_def <= POOR_FLOOR_ELITE_DEF_RANK else POOR_FLOOR_DEFAULT
        return max(score, floor)

    return score


def contextual_adjustment(context: GameContext) -> float:
    """Step 9: rest, travel and injury deltas."""
    adjustment = 0.0

    days_rest = DEFAULT_DAYS_REST if context.days_rest is None else context.days_rest
    if days_rest == 0:
        adjustment += REST_BACK_TO_BACK
    elif days_rest == 1:
        adjustment += REST_ONE_DAY
    elif 4 <= days_rest <= 7:
        adjustment += REST_WELL_RESTED
    elif days_rest >= 8:
        adjustment += REST_LONG_LAYOFF

    if context.travel_distance and context.travel_distance >= TRAVEL_DISTANCE_THRESHOLD:
        adjustment += TRAVEL_PENALTY

    if context.missing_top_scorer:
        adjustment += INJURY_TOP_SCORER
    if context.missing_point_guard:
        adjustment += INJURY_POINT_GUARD
    if context.missing_role_player:
        adjustment += INJURY_ROLE_PLAYER

    return adjustment


def apply_mismatch_outcome(scores: ScorePair, outcome: MismatchOutcome) -> ScorePair:
    """Step 11 (post): stored deltas, then the floor, then the leader's cap."""
    scores = scores + outcome.adjustments
    team1, team2 = scores.team1, scores.team2

    if outcome.flags.apply_floor:
        if outcome.floor_team1:
            team1 = max(team1, outcome.floor_value)
        if outcome.floor_team2:
            team2 = max(team2, outcome.floor_value)

    if outcome.flags.apply_max_cap:
        if team1 > team2:
            team1 = min(team1, MISMATCH_MAX_SCORE)
        else:
            team2 = min(team2, MISMATCH_MAX_SCORE)

    return ScorePair(team1, team2)


def close_game_bonus(scores: ScorePair, context: GameContext) -> ScorePair:
    """Step 13: late-game fouling bonus when the margin is under 5."""
    if scores.margin >= CLOSE_GAME_MARGIN:
        return ScorePair()
    if context.team1_location is Location.HOME:
        return ScorePair(CLOSE_GAME_BONUS * CLOSE_GAME_HOME_SHARE,
                         CLOSE_GAME_BONUS * CLOSE_GAME_AWAY_SHARE)
    if context.team1_location is Location.AWAY:
        return ScorePair(CLOSE_GAME_BONUS * CLOSE_GAME_AWAY_SHARE,
                         CLOSE_GAME_BONUS * CLOSE_GAME_HOME_SHARE)
    return ScorePair.split(CLOSE_GAME_BONUS)


def first_half_share(team: TeamStats) -> float:
    """Step 10: fast starters 50%, slow starters 46%, everyone else 48%."""
    if team.first_half_ppg and team.ppg:
        ratio = team.first_half_ppg / team.ppg
        if ratio >= FAST_STARTER_RATIO:
            return FAST_STARTER_SHARE
        if ratio < SLOW_STARTER_RATIO:
            return SLOW_STARTER_SHARE
    return DEFAULT_FIRST_HALF_SHARE


def _team1_wins(rounded: Tuple[int, int], final: ScorePair, team1: TeamStats, team2: TeamStats) -> bool:
    """Exactly one winner: rounded score, then unrounded, then NET rank, then team 1."""
    if rounded[0] != rounded[1]:
        return rounded[0] > rounded[1]
    if final.team1 != final.team2:
        return final.team1 > final.team2
    net1 = team1.net_rank or MISMATCH_DEFAULT_NET_RANK
    net2 = team2.net_rank or MISMATCH_DEFAULT_NET_RANK
    return net1 <= net2


# ═══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════════

def predict(
    team1: TeamStats,
    team2: TeamStats,
    context: Optional[GameContext] = None,
) -> PredictionResult:
    """
    Run the full v2.2 pipeline for one matchup.

    Raises PredictionInputError (from cbb_input_schemas) before any stage runs
    if a required field is missing or out of range. Pure and deterministic:
    identical inputs always give an identical result.
    """
    validate_matchup(team1, team2)
    context = context or GameContext()

    # ── Steps 1–6: preliminary score ─────────────────────────────────────────
    base = base_expected_points(team1, team2)
    pace = pace_adjustment(team1, team2)
    form = ScorePair(form_adjustment(team1), form_adjustment(team2))
    defense = defense_quality_adjustment(team1, team2)
    location = location_adjustment(team1, team2, context)
    conference = conference_adjustment(context)

    scores = base + pace + form + defense + location + ScorePair.split(conference)
    log.debug(
        f"{team1.team} vs {team2.team} preliminary {scores.team1:.2f}-{scores.team2:.2f} "
        f"(base {base.team1:.2f}/{base.team2:.2f} pace {pace.team1:+.2f}/{pace.team2:+.2f} "
        f"form {form.team1:+.1f}/{form.team2:+.1f} def {defense.team1:+.1f}/{defense.team2:+.1f} "
        f"loc {location.team1:+.1f}/{location.team2:+.1f} conf {conference:+.1f})"
    )

    # ── Step 11: decide overrides on the preliminary score ────────────────────
    mismatch = extreme_mismatch(team1, team2)
    if mismatch.flags.any_override or mismatch.adjustments != ScorePair():
        log.info(
            f"Extreme mismatch {team1.team} vs {team2.team}: "
            f"adj {mismatch.adjustments.team1:+.2f}/{mismatch.adjustments.team2:+.2f} "
            f"skip_cruise={mismatch.flags.skip_cruise_control} "
            f"skip_caps={mismatch.flags.skip_elite_caps} floor={mismatch.flags.apply_floor}"
        )

    # ── Step 7: cruise control ────────────────────────────────────────────────
    cruise = 0.0
    if not mismatch.flags.skip_cruise_control:
        cruise = cruise_control(scores.margin)
        if scores.team1_leads:
            scores = scores + ScorePair(cruise, 0.0)
        else:
            scores = scores + ScorePair(0.0, cruise)

    # ── Step 8: elite caps ────────────────────────────────────────────────────
    caps = ScorePair()
    if not mismatch.flags.skip_elite_caps:
        capped = ScorePair(
            apply_elite_caps(scores.team1, team1, team2),
            apply_elite_caps(scores.team2, team2, team1),
        )
        caps = ScorePair(capped.team1 - scores.team1, capped.team2 - scores.team2)
        scores = capped

    # ── Step 9: contextual ────────────────────────────────────────────────────
    context_delta = contextual_adjustment(context)
    contextual = ScorePair(context_delta, context_delta)
    scores = scores + contextual

    # ── Step 11 (post): mismatch deltas, floor, max cap ───────────────────────
    scores = apply_mismatch_outcome(scores, mismatch)

    # ── Step 13: close game bonus ─────────────────────────────────────────────
    close = close_game_bonus(scores, context)
    scores = scores + close

    # ── Step 10: rounding and first half ──────────────────────────────────────
    full1 = round_half_up(scores.team1)
    full2 = round_half_up(scores.team2)
    half1 = round_half_up(full1 * first_half_share(team1))
    half2 = round_half_up(full2 * first_half_share(team2))

    team1_wins = _team1_wins((full1, full2), scores, team1, team2)
    log.debug(f"{team1.team} {full1} - {team2.team} {full2} (1H {half1}-{half2})")

    return PredictionResult(
        team1=TeamPrediction(team1.team, full1, half1, team1_wins),
        team2=TeamPrediction(team2.team, full2, half2, not team1_wins),
        total=full1 + full2,
        first_half_total=half1 + half2,
        margin=abs(full1 - full2),
        winner=team1.team if team1_wins else team2.team,
        breakdown=AdjustmentBreakdown(
            base=base,
            pace=pace,
            form=form,
            defense=defense,
            location=location,
            conference=conference,
            cruise_control=cruise,
            elite_caps=caps,
            contextual=contextual,
            extreme_mismatch=mismatch.adjustments,
            close_game=close,
            mismatch_flags=mismatch.flags,
        ),
    )
