#!/usr/bin/env python3
"""
CBB v2.2 Model — Prediction Runner
Bridges team_profiles.csv / extraction payloads → predict() → v22_predictions_YYYYMMDD.csv

Usage:
    python cbb_prediction_runner.py --team1 Duke --team2 "North Carolina" --location home
        - Single matchup from data/team_profiles.csv (team 1's point of view).
    python cbb_prediction_runner.py --team1 Duke --team2 UNC --conference --days-rest 1 --travel 1200
        - Game context flags (rest, travel, injuries) apply to both teams.
    python cbb_prediction_runner.py --extraction-json payload.json
        - Predict straight from an extraction payload, no profile table needed.
    python cbb_prediction_runner.py --matchups-csv slate.csv
        - Batch: columns team1, team2, location[, conference, days_rest, travel_distance].

Outputs written to data/ unless --output is given:
    v22_predictions_<YYYYMMDD>.csv   - one flat row per prediction + predicted_at

Exit status 2 when a single prediction is rejected by input validation.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from cbb_config import DATA_DIR, LOG_LEVEL, PROFILES_CSV, TZ
from cbb_input_schemas import PredictionInputError, validate_input
from cbb_profiles import find_team, load_team_stats, matchup_from_extraction
from cbb_score_lean import score_lean
from cbb_v22_model import GameContext, Location, PredictionResult, TeamStats, predict

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)

Matchup = Tuple[TeamStats, TeamStats, GameContext]


# ═══════════════════════════════════════════════════════════════════════════════
# BATCH
# ═══════════════════════════════════════════════════════════════════════════════

def _flag(value) -> bool:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "t")
    return bool(value)


def _optional_number(value, cast=float):
    if value is None or pd.isna(value) or str(value).strip() == "":
        return None
    try:
        return cast(float(value))
    except (TypeError, ValueError):
        return None


def load_matchups(csv_path: Path, profiles: dict) -> List[Matchup]:
    """Read a slate CSV and resolve both team names against *profiles*."""
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Matchups CSV not found: {path}")

    df = pd.read_csv(path, dtype=str, low_memory=False)
    validate_input(df, "matchups", strict=True)

    matchups: List[Matchup] = []
    for idx, row in df.iterrows():
        team1 = find_team(profiles, row.get("team1"))
        team2 = find_team(profiles, row.get("team2"))
        if team1 is None or team2 is None:
            log.warning(f"Row {idx}: no profile for {row.get('team1')!r} / {row.get('team2')!r}, skipping")
            continue
        context = GameContext(
            is_conference_game=_flag(row.get("conference")),
            team1_location=Location.parse(row.get("location")),
            days_rest=_optional_number(row.get("days_rest"), int),
            travel_distance=_optional_number(row.get("travel_distance")),
        )
        matchups.append((team1, team2, context))

    log.info(f"Loaded {len(matchups)} matchups from {path}")
    return matchups


def predict_batch(matchups: Sequence[Matchup]) -> List[PredictionResult]:
    """Predict every matchup; a rejected matchup is logged and skipped."""
    results = []
    for team1, team2, context in matchups:
        try:
            results.append(predict(team1, team2, context))
        except PredictionInputError as exc:
            log.error(f"Skipping {team1.team} vs {team2.team}: {exc}")
    log.info(f"Predicted {len(results)}/{len(matchups)} matchups")
    return results


# ═══════════════════════════════════════════════════════════════════════════════
# OUTPUT
# ═══════════════════════════════════════════════════════════════════════════════

def print_prediction(
    result: PredictionResult,
    team1: TeamStats,
    team2: TeamStats,
    context: GameContext,
) -> None:
    """Pretty-print a single prediction with its stage breakdown."""
    b = result.breakdown
    t1, t2 = result.team1, result.team2

    print()
    print("=" * 72)
    print(f"  {t1.name}  vs  {t2.name}   [{result.model_version}]")
    site = {
        Location.HOME:    f"HOME: {t1.name}",
        Location.AWAY:    f"HOME: {t2.name}",
        Location.NEUTRAL: "NEUTRAL SITE",
    }[context.team1_location]
    print(f"  {site}{'  |  CONFERENCE GAME' if context.is_conference_game else ''}")
    print("=" * 72)
    print(f"  FINAL:       {t1.name} {t1.full_game}  —  {t2.name} {t2.full_game}")
    print(f"  FIRST HALF:  {t1.name} {t1.first_half}  —  {t2.name} {t2.first_half}")
    print(f"  TOTAL: {result.total}  |  1H TOTAL: {result.first_half_total}  |  "
          f"WINNER: {result.winner} by {result.margin}")
    print()
    print(f"  {'STAGE':<18} {t1.name[:12]:>12} {t2.name[:12]:>12}")
    print(f"  {'-'*44}")
    for label, pair in (
        ("Base",             b.base),
        ("Pace",             b.pace),
        ("Form",             b.form),
        ("Defense",          b.defense),
        ("Location",         b.location),
        ("Elite caps",       b.elite_caps),
        ("Contextual",       b.contextual),
        ("Extreme mismatch", b.extreme_mismatch),
        ("Close game",       b.close_game),
    ):
        print(f"  {label:<18} {pair.team1:>+12.2f} {pair.team2:>+12.2f}")
    print(f"  {'Conference':<18} {b.conference:>+12.2f}  (combined)")
    print(f"  {'Cruise control':<18} {b.cruise_control:>+12.2f}  (leader)")
    if b.mismatch_flags.any_override:
        print(f"  Overrides: skip_cruise={b.mismatch_flags.skip_cruise_control} "
              f"skip_caps={b.mismatch_flags.skip_elite_caps} "
              f"floor={b.mismatch_flags.apply_floor} max_cap={b.mismatch_flags.apply_max_cap}")
    print()
    for for_team1 in (True, False):
        lean = score_lean(result, team1, team2, context, for_team1=for_team1)
        reasons = f"  ({', '.join(lean.reasons[:3])})" if lean.reasons else ""
        print(f"  LEAN {lean.team}: {lean.label} [{lean.score:+.2f}]{reasons}")
    print("=" * 72)
    print()


def results_to_csv(results: List[PredictionResult], path: Path) -> None:
    """Write prediction results to CSV, stamped with the run time."""
    if not results:
        return
    predicted_at = datetime.now(TZ).isoformat(timespec="seconds")
    rows = [{**r.to_flat_dict(), "predicted_at": predicted_at} for r in results]
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(path, index=False)
    log.info(f"Wrote {len(rows)} v2.2 predictions → {path}")


def _default_output() -> Path:
    return DATA_DIR / f"v22_predictions_{datetime.now(TZ).strftime('%Y%m%d')}.csv"


# ═══════════════════════════════════════════════════════════════════════════════
# CLI ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CBB v2.2 matchup score prediction")
    parser.add_argument("--profiles-csv", type=Path, default=PROFILES_CSV)
    parser.add_argument("--team1", type=str, help="Team 1 name (exact, then substring match)")
    parser.add_argument("--team2", type=str, help="Team 2 name")
    parser.add_argument("--location", type=str, default="neutral",
                        choices=[loc.value for loc in Location],
                        help="Site from team 1's point of view")
    parser.add_argument("--conference", action="store_true", help="Conference game")
    parser.add_argument("--days-rest", type=int, default=None)
    parser.add_argument("--travel", type=float, default=None, help="Travel distance in miles")
    parser.add_argument("--missing-top-scorer", action="store_true")
    parser.add_argument("--missing-point-guard", action="store_true")
    parser.add_argument("--missing-role-player", action="store_true")
    parser.add_argument("--extraction-json", type=Path, default=None,
                        help="Extraction payload with team1 / team2 / gameContext")
    parser.add_argument("--matchups-csv", type=Path, default=None,
                        help="Batch slate: team1, team2, location, conference, days_rest, travel_distance")
    parser.add_argument("--output", type=Path, default=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    output = args.output or _default_output()

    if args.extraction_json:
        team1, team2, context = matchup_from_extraction(args.extraction_json)
        _run_single(team1, team2, context, output)
        return

    profiles = load_team_stats(args.profiles_csv)
    if not profiles:
        log.error(f"No team profiles loaded from {args.profiles_csv}")
        sys.exit(1)

    if args.matchups_csv:
        matchups = load_matchups(args.matchups_csv, profiles)
        results = predict_batch(matchups)
        results_to_csv(results, output)
        return

    if not args.team1 or not args.team2:
        parser.error("--team1 and --team2 are required without --matchups-csv or --extraction-json")

    team1 = find_team(profiles, args.team1)
    team2 = find_team(profiles, args.team2)
    for wanted, found in ((args.team1, team1), (args.team2, team2)):
        if found is None:
            log.error(f"Team not found in {args.profiles_csv}: {wanted!r}")
            sys.exit(1)

    context = GameContext(
        is_conference_game=args.conference,
        team1_location=Location.parse(args.location),
        days_rest=args.days_rest,
        travel_distance=args.travel,
        missing_top_scorer=args.missing_top_scorer,
        missing_point_guard=args.missing_point_guard,
        missing_role_player=args.missing_role_player,
    )
    _run_single(team1, team2, context, output)


def _run_single(team1: TeamStats, team2: TeamStats, context: GameContext, output: Path) -> None:
    try:
        result = predict(team1, team2, context)
    except PredictionInputError as exc:
        log.error(f"Invalid input ({exc.team}, {exc.field}): {exc}")
        sys.exit(2)

    print_prediction(result, team1, team2, context)
    results_to_csv([result], output)


if __name__ == "__main__":
    main()
