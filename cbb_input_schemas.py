"""
CBB v2.2 Model — Input Schemas and Validation.

Single source of truth for what the engine requires from a team profile and
for the column contract of tabular profile files.

Two failure kinds exist. A missing or out-of-range *required* field is fatal
and raises PredictionInputError before any model stage runs. A missing
*optional* field is not an error; the consuming stage substitutes its
documented neutral default.

Usage:
    from cbb_input_schemas import validate_matchup, PredictionInputError

    validate_matchup(team1, team2)   # raises PredictionInputError
"""

import logging
import math
import numbers
from typing import Any, Dict, List, Optional

import pandas as pd

from cbb_config import LEAGUE_SIZE, PPG_MAX, PPG_MIN

log = logging.getLogger(__name__)


class PredictionInputError(ValueError):
    """A required profile field is missing, non-numeric or out of range."""

    def __init__(self, message: str, field: Optional[str] = None, team: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.team = team


# Required numeric fields on a profile and their inclusive ranges.
REQUIRED_NUMERIC_FIELDS = {
    "ppg":            (PPG_MIN, PPG_MAX),
    "points_allowed": (PPG_MIN, PPG_MAX),
    "defense_rank":   (1, LEAGUE_SIZE),
}

# Ranks are ordinal; 30.9 is not a rank.
INTEGER_FIELDS = ("defense_rank",)

# ── Required column sets per tabular input ────────────────────────────────────
INPUT_FILE_SCHEMAS: Dict[str, List[str]] = {
    "team_profiles": [
        "team", "ppg", "points_allowed", "defense_rank",
    ],
    "team_profiles_full": [
        "team", "conference", "ppg", "points_allowed", "defense_rank",
        "fg_pct", "three_pct", "ft_pct",
        "offense_rank", "net_rank",
        "home_record", "away_record", "neutral_record",
        "win_streak", "loss_streak", "last5_ppg", "first_half_ppg",
    ],
    "matchups": [
        "team1", "team2", "location",
    ],
}


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def validate_team_stats(team: Any, slot: str = "team") -> None:
    """Validate the required subset of one profile.

    Parameters
    ----------
    team : TeamStats
        Profile to check (any object exposing the profile attributes).
    slot : str
        Label used in messages when the profile has no name ("team1", ...).

    Raises
    ------
    PredictionInputError
        On the first missing, non-numeric, non-finite, out-of-range or
        fractional-rank required field.
    """
    if team is None:
        raise PredictionInputError(f"{slot} profile is required", field=None, team=slot)

    name = getattr(team, "team", None)
    if not isinstance(name, str) or not name.strip():
        raise PredictionInputError(f"{slot} must have a team name", field="team", team=slot)

    for field, (lo, hi) in REQUIRED_NUMERIC_FIELDS.items():
        value = getattr(team, field, None)
        if not _is_number(value):
            raise PredictionInputError(
                f"{name}: {field} must be a number (got {value!r})",
                field=field, team=name,
            )
        if (lo is not None and value < lo) or (hi is not None and value > hi):
            raise PredictionInputError(
                f"{name}: {field}={value} outside [{lo}, {hi}]",
                field=field, team=name,
            )
        if field in INTEGER_FIELDS and value != int(value):
            raise PredictionInputError(
                f"{name}: {field}={value} must be a whole number",
                field=field, team=name,
            )


def validate_matchup(team1: Any, team2: Any) -> None:
    """Validate both profiles; nothing is computed if either fails."""
    validate_team_stats(team1, "team1")
    validate_team_stats(team2, "team2")


def validate_input(
    df: pd.DataFrame,
    schema_name: str,
    *,
    strict: bool = False,
) -> List[str]:
    """Validate a DataFrame against a named input schema.

    Parameters
    ----------
    df : pd.DataFrame
        The DataFrame to validate.
    schema_name : str
        Key into ``INPUT_FILE_SCHEMAS``.
    strict : bool
        If *True*, raise ``ValueError`` on any missing columns.
        If *False* (default), log a warning and return the missing columns.

    Returns
    -------
    list[str]
        Sorted list of missing required columns (empty if all present).

    Raises
    ------
    KeyError
        If *schema_name* is not defined in ``INPUT_FILE_SCHEMAS``.
    ValueError
        If *strict* is True and required columns are missing.
    """
    required = INPUT_FILE_SCHEMAS.get(schema_name)
    if required is None:
        raise KeyError(f"Unknown input schema: {schema_name!r}")

    missing = sorted(set(required) - set(df.columns))

    if missing:
        msg = f"Input '{schema_name}' missing required columns: {missing}"
        if strict:
            raise ValueError(msg)
        log.warning(msg)

    return missing


def completeness_report(
    dataframes: Dict[str, pd.DataFrame],
) -> pd.DataFrame:
    """Data-quality completeness report for several tabular inputs.

    One row per known schema with columns
    ``input, rows, required_cols, present_cols, missing_cols, missing_list,
    null_pct`` (average null percentage across present required columns,
    None for an empty frame).
    """
    rows = []
    for name, df in dataframes.items():
        schema = INPUT_FILE_SCHEMAS.get(name)
        if schema is None:
            continue

        required_set = set(schema)
        present = sorted(required_set & set(df.columns))
        missing = sorted(required_set - set(df.columns))

        if len(df) == 0:
            null_pct = None
        elif present:
            null_pct = round(float(df[present].isnull().mean().mean()) * 100, 2)
        else:
            null_pct = 100.0

        rows.append({
            "input": name,
            "rows": len(df),
            "required_cols": len(schema),
            "present_cols": len(present),
            "missing_cols": len(missing),
            "missing_list": ", ".join(missing) if missing else "",
            "null_pct": null_pct,
        })

    return pd.DataFrame(rows)
