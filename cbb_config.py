"""
CBB v2.2 matchup model configuration shared across cbb_* modules.

Every coefficient below is fixed. The model is a deterministic formula, not a
fitted one: the documented ranges are collapsed to their midpoints and must
not be tuned at runtime. The only intentional version-to-version knob is
PACE_SCALING_FACTOR.
"""

import os
from pathlib import Path
from zoneinfo import ZoneInfo

MODEL_VERSION = "v2.2"

# ── League ────────────────────────────────────────────────────────────────────
LEAGUE_SIZE          = 363      # Ranked D1 teams (defense / offense / NET ranks)
PPG_MIN              = 0.0
PPG_MAX              = 150.0
BOTTOM_TEN_NET_RANK  = 356      # NET >= 356 → bottom 10 of 363
BOTTOM_FIFTY_NET_RANK = 314     # NET >= 314 → bottom 50 of 363

# ── Neutral defaults for missing optional fields ──────────────────────────────
DEFAULT_FG_PCT              = 0.45
DEFAULT_OFFENSE_RANK        = 200
DEFAULT_WIN_RATE            = 0.50   # empty or missing split record
LOCATION_DEFAULT_NET_RANK   = 100    # opponent strength when judging road penalty
MISMATCH_DEFAULT_NET_RANK   = 150    # either side when judging extreme mismatch
DEFAULT_DAYS_REST           = 2
DEFAULT_FIRST_HALF_SHARE    = 0.48

# ── Step 2: pace ──────────────────────────────────────────────────────────────
# v2.2 scaled every pace adjustment down ~35% from v2.0. This is the single
# documented tuning knob between versions.
PACE_SCALING_FACTOR  = 0.65
PACE_FAST_SHARE      = 0.60
PACE_SLOW_SHARE      = 0.40

# ── Step 3: recent form ───────────────────────────────────────────────────────
WIN_STREAK_BONUS = (        # (min streak, points), checked in order
    (5, 3.5),
    (3, 2.5),
    (1, 1.0),
)
LOSS_STREAK_PENALTY = (
    (5, -9.0),
    (3, -6.0),
    (1, -1.5),
)
TREND_THRESHOLD      = 5.0   # L5 PPG minus season PPG
TREND_ADJUSTMENT     = 2.5

# ── Step 5: location ──────────────────────────────────────────────────────────
HOME_BONUS = (              # (min home win rate, points)
    (0.75, 3.5),            # +3 to +4
    (0.50, 2.5),            # +2 to +3
    (0.00, 1.5),            # +1 to +2
)
AWAY_WEAK_RATE          = 0.25
AWAY_WINLESS_MIN_LOSSES = 3
AWAY_STRONG_RATE        = 0.60
AWAY_OPP_TOP_BAND       = 50
AWAY_OPP_MID_BAND       = 150
AWAY_PENALTY = {            # road record tier → (opp ≤50, opp ≤150, else)
    "weak":    (-6.0, -5.0, -4.0),
    "average": (-4.0, -3.0, -2.5),
    "strong":  (-2.0, -1.5, -1.0),
}
NEUTRAL_DOMINANT_RATE   = 0.95
NEUTRAL_WINNING_RATE    = 0.60
NEUTRAL_LOSING_RATE     = 0.50
NEUTRAL_DOMINANT_BONUS  = 1.5
NEUTRAL_WINNING_BONUS   = 0.5
NEUTRAL_WINLESS_PENALTY = -2.5
NEUTRAL_LOSING_PENALTY  = -1.5

# ── Step 6: conference ────────────────────────────────────────────────────────
CONFERENCE_GAME_PENALTY = -11.0   # -10 to -12, combined total

# ── Step 7: cruise control ────────────────────────────────────────────────────
CRUISE_CONTROL = (          # (min preliminary margin, penalty to the leader)
    (30, -13.5),            # -12 to -15
    (25, -11.0),            # -10 to -12
    (20, -8.5),             # -7 to -10
    (15, -5.5),             # -4 to -7
)

# ── Step 8: elite caps ────────────────────────────────────────────────────────
ELITE_OFFENSE_PPG        = 85.0
ELITE_CAP_WEAK_DEF_RANK  = 300
ELITE_CAP_ELITE_DEF_RANK = 50
ELITE_CAP_VS_WEAK_DEF    = 90.0
ELITE_CAP_VS_ELITE_DEF   = 74.0    # 70 to 78
ELITE_CAP_DEFAULT        = 82.5    # 80 to 85
POOR_OFFENSE_PPG         = 65.0
POOR_OFFENSE_FG_PCT      = 0.40
POOR_FLOOR_ELITE_DEF_RANK = 30
POOR_FLOOR_VS_ELITE_DEF  = 47.5    # 45 to 50
POOR_FLOOR_DEFAULT       = 52.5    # 50 to 55

# ── Step 9: contextual ────────────────────────────────────────────────────────
REST_BACK_TO_BACK        = -4.0
REST_ONE_DAY             = -1.5
REST_WELL_RESTED         = 1.5     # 4-7 days
REST_LONG_LAYOFF         = 2.5     # 8+ days
TRAVEL_DISTANCE_THRESHOLD = 1000
TRAVEL_PENALTY           = -1.5
INJURY_TOP_SCORER        = -6.5
INJURY_POINT_GUARD       = -4.0
INJURY_ROLE_PLAYER       = -2.5

# ── Step 11: extreme mismatch ─────────────────────────────────────────────────
BOTTOM_TEN_SWING         = 12.5    # +/-10 to +/-15
BOTTOM_TEN_FLOOR         = 48.0    # 45 to 55
MISMATCH_MAX_SCORE       = 110.0
NET_GAP_THRESHOLD        = 200
NET_GAP_MARGIN_SHIFT     = 17.5    # +15 to +20, split evenly
STATEMENT_GAME_STREAK    = 3
STATEMENT_GAME_BONUS     = 10.0    # +8 to +12

# ── Step 13: close game bonus ─────────────────────────────────────────────────
CLOSE_GAME_MARGIN        = 5.0
CLOSE_GAME_BONUS         = 7.0     # +6 to +8, combined total
CLOSE_GAME_HOME_SHARE    = 0.55
CLOSE_GAME_AWAY_SHARE    = 0.45

# ── Step 10: first half ───────────────────────────────────────────────────────
FAST_STARTER_RATIO       = 0.52
SLOW_STARTER_RATIO       = 0.46
FAST_STARTER_SHARE       = 0.50
SLOW_STARTER_SHARE       = 0.46

# ── Runtime ───────────────────────────────────────────────────────────────────
DATA_DIR     = Path(os.getenv("CBB_DATA_DIR", "data"))
PROFILES_CSV = DATA_DIR / "team_profiles.csv"
LOG_LEVEL    = os.getenv("CBB_LOG_LEVEL", "INFO").strip().upper()

# Timezone used for run timestamps and dated output files
TZ = ZoneInfo("America/Los_Angeles")
