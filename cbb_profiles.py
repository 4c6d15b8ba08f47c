"""
CBB v2.2 Model — Team Profile Loading
cbb_profiles.py

Builds TeamStats / GameContext from the two sources a prediction can start
from:

  1. A canonical-column profile table (CSV or DataFrame), one row per team.
  2. An extraction payload: the camelCase JSON the stat-screenshot extraction
     step returns, shaped {"team1": {...}, "team2": {...}, "gameContext": {...}}.

Neither source is trusted more than manual entry. Required fields are passed
through as-is (None when absent) and are checked by predict(); unparseable
optional cells fall back to None so the consuming stage applies its neutral
default.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
import pandas as pd

from cbb_config import DEFAULT_DAYS_REST, PROFILES_CSV
from cbb_input_schemas import completeness_report, validate_input
from cbb_v22_model import GameContext, Location, TeamStats, WinLossRecord

log = logging.getLogger(__name__)

# Percentages above this are treated as whole numbers (45.2 → 0.452)
PERCENT_SCALE_THRESHOLD = 1.5

_TEXT_COLUMNS = ("team", "conference", "home_record", "away_record", "neutral_record")


# ═══════════════════════════════════════════════════════════════════════════════
# CELL COERCION
# ═══════════════════════════════════════════════════════════════════════════════

def _safe(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Float or *default* for None / NaN / blank / unparseable."""
    if value is None:
        return default
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    return v if np.isfinite(v) else default


def _safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    v = _safe(value)
    return int(v) if v is not None else default


def _required(value: Any) -> Any:
    """Numeric when parseable; otherwise the raw value so validation can name it."""
    v = _safe(value)
    if v is not None:
        return v
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    return value


def _required_rank(value: Any) -> Any:
    # Fractional ranks pass through unchanged and fail validation.
    v = _required(value)
    return int(v) if isinstance(v, float) and v.is_integer() else v


def normalize_pct(value: Any) -> Optional[float]:
    """45.2 → 0.452; 0.452 stays; missing → None."""
    v = _safe(value)
    if v is None:
        return None
    return v / 100.0 if v > PERCENT_SCALE_THRESHOLD else v


def parse_record(value: Any) -> Optional[WinLossRecord]:
    """Accept "W-L" strings, {"wins", "losses"} dicts or existing records."""
    if value is None:
        return None
    if isinstance(value, WinLossRecord):
        return value
    if isinstance(value, dict):
        wins = _safe_int(value.get("wins"), 0)
        losses = _safe_int(value.get("losses"), 0)
        return WinLossRecord(wins, losses)
    if isinstance(value, float) and np.isnan(value):
        return None
    return WinLossRecord.parse(str(value))


# ═══════════════════════════════════════════════════════════════════════════════
# TABULAR PROFILES
# ═══════════════════════════════════════════════════════════════════════════════

def _row_record(row: pd.Series, prefix: str) -> Optional[WinLossRecord]:
    """"home_record" string, else home_wins / home_losses columns."""
    record = parse_record(row.get(f"{prefix}_record"))
    if record is not None:
        return record
    wins = _safe_int(row.get(f"{prefix}_wins"))
    losses = _safe_int(row.get(f"{prefix}_losses"))
    if wins is None and losses is None:
        return None
    return WinLossRecord(wins or 0, losses or 0)


def team_stats_from_row(row: pd.Series) -> TeamStats:
    """One canonical-column profile row → TeamStats."""
    conference = row.get("conference")
    return TeamStats(
        team           = str(row.get("team", "")).strip() or None,
        ppg            = _required(row.get("ppg")),
        points_allowed = _required(row.get("points_allowed")),
        defense_rank   = _required_rank(row.get("defense_rank")),

        field_goal_pct  = normalize_pct(row.get("fg_pct")),
        three_point_pct = normalize_pct(row.get("three_pct")),
        free_throw_pct  = normalize_pct(row.get("ft_pct")),
        offense_rank    = _safe_int(row.get("offense_rank")),
        net_rank        = _safe_int(row.get("net_rank")),

        home_record    = _row_record(row, "home"),
        away_record    = _row_record(row, "away"),
        neutral_record = _row_record(row, "neutral"),

        win_streak     = _safe_int(row.get("win_streak"), 0),
        loss_streak    = _safe_int(row.get("loss_streak"), 0),
        last5_ppg      = _safe(row.get("last5_ppg")),
        first_half_ppg = _safe(row.get("first_half_ppg")),

        conference     = str(conference) if pd.notna(conference) else "",
    )


def team_stats_from_frame(df: pd.DataFrame) -> Dict[str, TeamStats]:
    """All rows with a team label, keyed by team name. Later duplicates win."""
    validate_input(df, "team_profiles")
    profiles: Dict[str, TeamStats] = {}
    skipped = 0
    for _, row in df.iterrows():
        name = row.get("team")
        if name is None or pd.isna(name) or not str(name).strip():
            skipped += 1
            continue
        stats = team_stats_from_row(row)
        profiles[stats.team] = stats
    if skipped:
        log.warning(f"Skipped {skipped} profile rows with no team label")
    return profiles


def load_team_stats(csv_path: Union[str, Path] = PROFILES_CSV) -> Dict[str, TeamStats]:
    """Read a team profile CSV into TeamStats keyed by team name."""
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Team profile CSV not found: {path}")

    df = pd.read_csv(path, dtype=str, low_memory=False)
    for col in df.columns:
        if col not in _TEXT_COLUMNS:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    profiles = team_stats_from_frame(df)
    log.info(f"Loaded {len(profiles)} team profiles from {path}")
    for _, row in completeness_report({"team_profiles_full": df}).iterrows():
        log.info(
            f"Profile completeness: {row['present_cols']}/{row['required_cols']} columns"
            f" ({row['missing_list'] or 'none'} missing), {row['null_pct']}% null"
        )
    return profiles


def find_team(profiles: Dict[str, TeamStats], name: str) -> Optional[TeamStats]:
    """Case-insensitive exact match, then the first substring match."""
    needle = (name or "").strip().lower()
    if not needle:
        return None
    for team, stats in profiles.items():
        if team.lower() == needle:
            return stats
    for team, stats in profiles.items():
        if needle in team.lower():
            return stats
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# EXTRACTION PAYLOAD
# ═══════════════════════════════════════════════════════════════════════════════

def team_stats_from_payload(payload: Dict[str, Any]) -> TeamStats:
    """One camelCase team object from the extraction step → TeamStats."""
    payload = payload or {}
    name = payload.get("team")
    return TeamStats(
        team           = name.strip() if isinstance(name, str) and name.strip() else None,
        ppg            = _required(payload.get("ppg")),
        points_allowed = _required(payload.get("pointsAllowed")),
        defense_rank   = _required_rank(payload.get("defenseRank")),

        field_goal_pct  = normalize_pct(payload.get("fieldGoalPct")),
        three_point_pct = normalize_pct(payload.get("threePointPct")),
        free_throw_pct  = normalize_pct(payload.get("freeThrowPct")),
        offense_rank    = _safe_int(payload.get("ppgRank")),
        net_rank        = _safe_int(payload.get("netRank")),

        home_record    = parse_record(payload.get("homeRecord")),
        away_record    = parse_record(payload.get("awayRecord")),
        neutral_record = parse_record(payload.get("neutralRecord")),

        win_streak     = _safe_int(payload.get("winStreak"), 0),
        loss_streak    = _safe_int(payload.get("lossStreak"), 0),
        last5_ppg      = _safe(payload.get("last5PPG")),
        first_half_ppg = _safe(payload.get("firstHalfPPG")),

        conference     = str(payload.get("conference") or ""),
    )


def game_context_from_payload(payload: Optional[Dict[str, Any]]) -> GameContext:
    """An absent gameContext block means a home game on normal rest."""
    if payload is None:
        return GameContext(team1_location=Location.HOME, days_rest=DEFAULT_DAYS_REST)
    return GameContext(
        is_conference_game  = bool(payload.get("isConferenceGame", False)),
        team1_location      = Location.parse(payload.get("team1Location")),
        days_rest           = _safe_int(payload.get("daysRest")),
        travel_distance     = _safe(payload.get("travelDistance")),
        missing_top_scorer  = bool(payload.get("missingTopScorer", False)),
        missing_point_guard = bool(payload.get("missingPointGuard", False)),
        missing_role_player = bool(payload.get("missingRolePlayer", False)),
    )


def matchup_from_extraction(
    extraction: Union[Dict[str, Any], str, Path],
) -> Tuple[TeamStats, TeamStats, GameContext]:
    """Full extraction payload (dict or JSON file path) → predict() arguments."""
    if not isinstance(extraction, dict):
        path = Path(extraction)
        if not path.exists():
            raise FileNotFoundError(f"Extraction payload not found: {path}")
        with open(path) as f:
            extraction = json.load(f)

    return (
        team_stats_from_payload(extraction.get("team1")),
        team_stats_from_payload(extraction.get("team2")),
        game_context_from_payload(extraction.get("gameContext")),
    )
