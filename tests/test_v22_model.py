"""
tests/test_v22_model.py — Tests for cbb_v22_model.py

Validates:
  - Input validation runs before any stage
  - Each stage function in isolation (base, pace, form, defense, location,
    conference, extreme mismatch, cruise control, caps, contextual,
    close game, first half, rounding)
  - Full-pipeline results for hand-computed matchups
  - Result invariants: total / margin arithmetic, exactly one winner
  - Mismatch overrides bypass cruise control and caps, floor and cap scores
  - Idempotence and flat serialisation
"""

import dataclasses

import pytest

from cbb_input_schemas import PredictionInputError
from cbb_v22_model import (
    GameContext,
    Location,
    PredictionResult,
    ScorePair,
    TeamStats,
    WinLossRecord,
    _team1_wins,
    apply_elite_caps,
    away_penalty,
    base_expected_points,
    close_game_bonus,
    conference_adjustment,
    contextual_adjustment,
    cruise_control,
    defense_quality_adjustment,
    extreme_mismatch,
    first_half_share,
    form_adjustment,
    home_bonus,
    location_adjustment,
    mutual_defense_correction,
    neutral_site_adjustment,
    pace_adjustment,
    predict,
    round_half_up,
)


def _team(**overrides) -> TeamStats:
    fields = dict(team="Alpha", ppg=72.0, points_allowed=70.0, defense_rank=150)
    fields.update(overrides)
    return TeamStats(**fields)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def favorite():
    """High-efficiency home side, mid-pack overall rank."""
    return TeamStats(
        team="Favorite", ppg=84.3, points_allowed=80.3, defense_rank=316,
        field_goal_pct=0.48, offense_rank=78, net_rank=150,
    )


@pytest.fixture
def underdog():
    """Poor offense, near-bottom defense and overall rank."""
    return TeamStats(
        team="Underdog", ppg=69.1, points_allowed=88.4, defense_rank=355,
        field_goal_pct=0.413, offense_rank=322, net_rank=350,
    )


@pytest.fixture
def contender():
    return TeamStats(
        team="Contender", ppg=80.0, points_allowed=62.0, defense_rank=40,
        field_goal_pct=0.49, offense_rank=30, net_rank=50,
    )


@pytest.fixture
def mid_major():
    return TeamStats(
        team="Mid Major", ppg=66.0, points_allowed=74.0, defense_rank=200,
        field_goal_pct=0.43, offense_rank=250, net_rank=200,
    )


HOME = GameContext(team1_location=Location.HOME)
AWAY = GameContext(team1_location=Location.AWAY)
NEUTRAL = GameContext()


# ── Validation ────────────────────────────────────────────────────────────────

class TestValidation:

    @pytest.mark.parametrize("overrides, field", [
        ({"ppg": None},              "ppg"),
        ({"ppg": 151.0},             "ppg"),
        ({"ppg": -1.0},              "ppg"),
        ({"ppg": float("nan")},      "ppg"),
        ({"ppg": True},              "ppg"),
        ({"ppg": "72"},              "ppg"),
        ({"points_allowed": None},   "points_allowed"),
        ({"points_allowed": float("inf")}, "points_allowed"),
        ({"points_allowed": -500.0}, "points_allowed"),
        ({"points_allowed": 150.5},  "points_allowed"),
        ({"defense_rank": 0},        "defense_rank"),
        ({"defense_rank": 364},      "defense_rank"),
        ({"defense_rank": 30.9},     "defense_rank"),
        ({"defense_rank": float("inf")}, "defense_rank"),
        ({"team": ""},               "team"),
        ({"team": None},             "team"),
    ])
    def test_invalid_required_field_raises(self, overrides, field):
        with pytest.raises(PredictionInputError) as exc_info:
            predict(_team(**overrides), _team(team="Beta"))
        assert exc_info.value.field == field

    def test_error_names_the_offending_team(self):
        with pytest.raises(PredictionInputError) as exc_info:
            predict(_team(), _team(team="Beta", defense_rank=400))
        assert exc_info.value.team == "Beta"
        assert "defense_rank" in str(exc_info.value)

    def test_missing_profile_raises(self):
        with pytest.raises(PredictionInputError):
            predict(_team(), None)

    def test_boundary_values_are_accepted(self):
        result = predict(_team(ppg=0.0, defense_rank=1), _team(team="Beta", ppg=150.0, defense_rank=363))
        assert isinstance(result, PredictionResult)

    def test_optional_fields_may_be_missing(self):
        result = predict(_team(), _team(team="Beta"))
        assert result.team1.full_game > 0
        assert result.team2.full_game > 0


# ── Stage functions ───────────────────────────────────────────────────────────

class TestBaseAndPace:

    def test_base_expected_points(self, favorite, underdog):
        base = base_expected_points(favorite, underdog)
        assert base.team1 == pytest.approx(86.35)
        assert base.team2 == pytest.approx(74.7)

    def test_faster_team_gets_sixty_percent(self, favorite, underdog):
        pace = pace_adjustment(favorite, underdog)
        # Moderate gap, both Average/Poor defenses: 7 × 0.65 = 4.55
        assert pace.team1 == pytest.approx(2.73)
        assert pace.team2 == pytest.approx(1.82)
        assert pace_adjustment(underdog, favorite).team2 == pytest.approx(2.73)

    def test_equal_pace_gives_team2_the_larger_share(self):
        pace = pace_adjustment(_team(), _team(team="Beta", ppg=71.0))
        assert pace.team1 == pytest.approx(1.04)
        assert pace.team2 == pytest.approx(1.56)


class TestForm:

    @pytest.mark.parametrize("win, loss, expected", [
        (5, 0, 3.5),
        (3, 0, 2.5),
        (2, 0, 1.0),
        (0, 6, -9.0),
        (0, 4, -6.0),
        (0, 1, -1.5),
        (0, 0, 0.0),
    ])
    def test_streaks(self, win, loss, expected):
        assert form_adjustment(_team(win_streak=win, loss_streak=loss)) == expected

    def test_hot_trend(self):
        assert form_adjustment(_team(last5_ppg=80.0)) == 2.5

    def test_cold_trend(self):
        assert form_adjustment(_team(last5_ppg=66.0)) == -2.5

    def test_trend_threshold_is_inclusive(self):
        assert form_adjustment(_team(win_streak=2, last5_ppg=77.0)) == 3.5

    def test_small_trend_ignored(self):
        assert form_adjustment(_team(last5_ppg=75.0)) == 0.0

    def test_missing_fields_default_to_zero(self):
        assert form_adjustment(_team(win_streak=None, loss_streak=None)) == 0.0


class TestDefenseQuality:

    def test_scenario_cells(self, favorite, underdog):
        defense = defense_quality_adjustment(favorite, underdog)
        # Elite offense vs Terrible defense; Poor offense vs Poor defense
        assert defense.team1 == 5.0
        assert defense.team2 == -1.0

    def test_average_defenses_have_no_mutual_correction(self):
        assert mutual_defense_correction(150, 150) == 0.0

    def test_mutual_correction_is_split_evenly(self):
        defense = defense_quality_adjustment(
            _team(defense_rank=50), _team(team="Beta", defense_rank=60),
        )
        # default offense (Good) vs VeryGood = -11, plus -11 / 2
        assert defense.team1 == -16.5
        assert defense.team2 == -16.5

    def test_unmatched_ranks_have_no_correction(self):
        assert mutual_defense_correction(20, 250) == 0.0


class TestLocation:

    @pytest.mark.parametrize("record, expected", [
        (WinLossRecord(12, 2), 3.5),
        (WinLossRecord(6, 6),  2.5),
        (WinLossRecord(2, 8),  1.5),
        (None,                 2.5),   # 0.5 default
        (WinLossRecord(0, 0),  2.5),
    ])
    def test_home_bonus(self, record, expected):
        assert home_bonus(_team(home_record=record)) == expected

    @pytest.mark.parametrize("record, opp_net, expected", [
        (WinLossRecord(2, 8), 40,   -6.0),
        (WinLossRecord(2, 8), 120,  -5.0),
        (WinLossRecord(2, 8), 250,  -4.0),
        (WinLossRecord(0, 3), 250,  -4.0),
        (WinLossRecord(5, 5), 50,   -4.0),
        (WinLossRecord(5, 5), 150,  -3.0),
        (WinLossRecord(5, 5), 151,  -2.5),
        (WinLossRecord(7, 3), 10,   -2.0),
        (WinLossRecord(7, 3), 100,  -1.5),
        (WinLossRecord(7, 3), 200,  -1.0),
        (None,                None, -3.0),   # 0.5 rate, opponent NET 100
    ])
    def test_away_penalty(self, record, opp_net, expected):
        team = _team(away_record=record)
        opponent = _team(team="Host", net_rank=opp_net)
        assert away_penalty(team, opponent) == expected

    @pytest.mark.parametrize("record, expected", [
        (WinLossRecord(10, 0), 1.5),
        (WinLossRecord(3, 2),  0.5),
        (WinLossRecord(0, 2), -2.5),
        (WinLossRecord(1, 3), -1.5),
        (WinLossRecord(1, 1),  0.0),
        (None,                 0.0),
    ])
    def test_neutral_site(self, record, expected):
        assert neutral_site_adjustment(_team(neutral_record=record)) == expected

    def test_home_context(self):
        t1 = _team(home_record=WinLossRecord(12, 2), net_rank=40)
        t2 = _team(team="Beta", away_record=WinLossRecord(2, 8))
        assert location_adjustment(t1, t2, HOME) == ScorePair(3.5, -6.0)

    def test_away_context(self):
        t1 = _team(away_record=WinLossRecord(7, 3))
        t2 = _team(team="Beta", net_rank=200)
        assert location_adjustment(t1, t2, AWAY) == ScorePair(-1.0, 2.5)

    def test_neutral_context(self):
        t1 = _team(neutral_record=WinLossRecord(10, 0))
        t2 = _team(team="Beta", neutral_record=WinLossRecord(0, 2))
        assert location_adjustment(t1, t2, NEUTRAL) == ScorePair(1.5, -2.5)


class TestExtremeMismatch:

    def test_both_bottom_ten_sets_every_flag_without_shift(self):
        outcome = extreme_mismatch(_team(net_rank=360), _team(team="Beta", net_rank=358))
        assert outcome.flags.skip_cruise_control
        assert outcome.flags.skip_elite_caps
        assert outcome.flags.apply_floor
        assert outcome.flags.apply_max_cap
        assert outcome.adjustments == ScorePair(0.0, 0.0)
        assert outcome.floor_team1 and outcome.floor_team2
        assert outcome.floor_value == 48.0

    def test_one_bottom_ten_team_swings_twelve_and_a_half(self):
        outcome = extreme_mismatch(_team(net_rank=20), _team(team="Beta", net_rank=360))
        assert outcome.adjustments == ScorePair(12.5, -12.5)
        assert not outcome.floor_team1
        assert outcome.floor_team2

    def test_large_gap_skips_cruise_control_only(self):
        outcome = extreme_mismatch(_team(net_rank=20), _team(team="Beta", net_rank=250))
        assert outcome.flags.skip_cruise_control
        assert not outcome.flags.skip_elite_caps
        assert not outcome.flags.apply_floor
        assert outcome.adjustments == ScorePair(8.75, -8.75)

    def test_large_gap_favors_better_rank(self):
        outcome = extreme_mismatch(_team(net_rank=250), _team(team="Beta", net_rank=20))
        assert outcome.adjustments == ScorePair(-8.75, 8.75)

    def test_statement_game_stacks_with_gap_shift(self):
        outcome = extreme_mismatch(
            _team(net_rank=100, loss_streak=4), _team(team="Beta", net_rank=320),
        )
        assert outcome.adjustments.team1 == pytest.approx(18.75)
        assert outcome.adjustments.team2 == pytest.approx(-8.75)

    def test_statement_game_alone(self):
        outcome = extreme_mismatch(
            _team(net_rank=200, loss_streak=3), _team(team="Beta", net_rank=330),
        )
        assert outcome.adjustments == ScorePair(10.0, 0.0)
        assert not outcome.flags.any_override

    def test_no_statement_game_against_better_ranked_opponent(self):
        outcome = extreme_mismatch(
            _team(net_rank=340, loss_streak=5), _team(team="Beta", net_rank=320),
        )
        assert outcome.adjustments == ScorePair(0.0, 0.0)

    def test_missing_ranks_default_to_mid_table(self):
        outcome = extreme_mismatch(_team(), _team(team="Beta"))
        assert outcome.adjustments == ScorePair(0.0, 0.0)
        assert not outcome.flags.any_override


class TestCruiseControlAndCaps:

    @pytest.mark.parametrize("margin, expected", [
        (35.0, -13.5),
        (30.0, -13.5),
        (29.9, -11.0),
        (25.0, -11.0),
        (20.0, -8.5),
        (15.0, -5.5),
        (14.99, 0.0),
        (0.0, 0.0),
    ])
    def test_cruise_control_ladder(self, margin, expected):
        assert cruise_control(margin) == expected

    @pytest.mark.parametrize("opp_def, expected", [
        (310, 90.0),
        (300, 90.0),
        (40,  74.0),
        (50,  74.0),
        (100, 82.5),
    ])
    def test_elite_offense_cap(self, opp_def, expected):
        team = _team(ppg=88.0)
        opponent = _team(team="Beta", defense_rank=opp_def)
        assert apply_elite_caps(95.0, team, opponent) == expected

    def test_cap_never_raises_a_score(self):
        assert apply_elite_caps(70.0, _team(ppg=88.0), _team(team="Beta")) == 70.0

    @pytest.mark.parametrize("opp_def, expected", [(20, 47.5), (30, 47.5), (100, 52.5)])
    def test_poor_offense_floor(self, opp_def, expected):
        team = _team(ppg=60.0, field_goal_pct=0.38)
        opponent = _team(team="Beta", defense_rank=opp_def)
        assert apply_elite_caps(45.0, team, opponent) == expected

    def test_floor_never_lowers_a_score(self):
        team = _team(ppg=60.0, field_goal_pct=0.38)
        assert apply_elite_caps(60.0, team, _team(team="Beta")) == 60.0

    def test_floor_uses_default_fg_pct(self):
        assert apply_elite_caps(45.0, _team(ppg=60.0), _team(team="Beta")) == 45.0


class TestContextual:

    @pytest.mark.parametrize("days, expected", [
        (None, 0.0), (0, -4.0), (1, -1.5), (2, 0.0), (3, 0.0),
        (4, 1.5), (7, 1.5), (8, 2.5), (14, 2.5),
    ])
    def test_rest(self, days, expected):
        assert contextual_adjustment(GameContext(days_rest=days)) == expected

    def test_travel(self):
        assert contextual_adjustment(GameContext(travel_distance=1000)) == -1.5
        assert contextual_adjustment(GameContext(travel_distance=999)) == 0.0

    def test_injuries_are_additive(self):
        ctx = GameContext(missing_top_scorer=True, missing_point_guard=True, missing_role_player=True)
        assert contextual_adjustment(ctx) == -13.0

    def test_combined(self):
        ctx = GameContext(days_rest=1, travel_distance=1500, missing_point_guard=True)
        assert contextual_adjustment(ctx) == -7.0

    def test_conference(self):
        assert conference_adjustment(GameContext(is_conference_game=True)) == -11.0
        assert conference_adjustment(NEUTRAL) == 0.0


class TestCloseGameAndFirstHalf:

    def test_home_split(self):
        bonus = close_game_bonus(ScorePair(70.0, 67.0), HOME)
        assert bonus.team1 == pytest.approx(3.85)
        assert bonus.team2 == pytest.approx(3.15)
        assert bonus.total == pytest.approx(7.0)

    def test_away_split(self):
        bonus = close_game_bonus(ScorePair(70.0, 67.0), AWAY)
        assert bonus.team1 == pytest.approx(3.15)
        assert bonus.team2 == pytest.approx(3.85)

    def test_neutral_split(self):
        assert close_game_bonus(ScorePair(70.0, 67.0), NEUTRAL) == ScorePair(3.5, 3.5)

    def test_no_bonus_at_five(self):
        assert close_game_bonus(ScorePair(72.0, 67.0), HOME) == ScorePair(0.0, 0.0)

    @pytest.mark.parametrize("first_half, expected", [
        (40.0, 0.50),
        (39.0, 0.50),    # 0.52 exactly
        (33.0, 0.46),
        (36.0, 0.48),
        (None, 0.48),
    ])
    def test_first_half_share(self, first_half, expected):
        assert first_half_share(_team(ppg=75.0, first_half_ppg=first_half)) == expected

    @pytest.mark.parametrize("value, expected", [
        (72.5, 73), (73.5, 74), (72.49, 72), (82.5, 83), (0.0, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestWinnerResolution:

    def test_higher_rounded_score_wins(self):
        assert _team1_wins((75, 74), ScorePair(74.6, 74.4), _team(), _team(team="Beta"))

    def test_unrounded_breaks_rounded_tie(self):
        assert not _team1_wins((75, 75), ScorePair(74.6, 74.9), _team(), _team(team="Beta"))

    def test_better_net_rank_breaks_exact_tie(self):
        t1, t2 = _team(net_rank=40), _team(team="Beta", net_rank=20)
        assert not _team1_wins((75, 75), ScorePair(75.0, 75.0), t1, t2)

    def test_missing_net_ranks_fall_back_to_team1(self):
        assert _team1_wins((75, 75), ScorePair(75.0, 75.0), _team(), _team(team="Beta"))


# ── Full pipeline ─────────────────────────────────────────────────────────────

class TestPredict:

    def test_favorite_vs_underdog(self, favorite, underdog):
        result = predict(favorite, underdog, GameContext(team1_location=Location.HOME))
        # 86.35 + 2.73 + 5 + 2.5 + 8.75 = 105.33 ; 74.7 + 1.82 - 1 - 3 - 8.75 = 63.77
        assert result.team1.full_game == 105
        assert result.team2.full_game == 64
        assert result.team1.first_half == 50
        assert result.team2.first_half == 31
        assert result.winner == "Favorite"
        assert result.margin == 41
        assert 40 <= result.team2.full_game <= result.team1.full_game <= 120
        assert result.breakdown.cruise_control == 0.0
        assert result.breakdown.mismatch_flags.skip_cruise_control
        assert result.breakdown.extreme_mismatch == ScorePair(8.75, -8.75)

    def test_weaker_opponent_defense_never_lowers_favorite(self, favorite, underdog):
        ctx = GameContext(team1_location=Location.HOME)
        scores = [
            predict(favorite, dataclasses.replace(underdog, defense_rank=rank), ctx).team1.full_game
            for rank in (100, 250, 280, 316, 340, 355, 363)
        ]
        assert scores == sorted(scores)
        assert scores[0] < scores[-1]

    def test_cruise_control_hits_the_leader(self, contender, mid_major):
        result = predict(contender, mid_major)
        # preliminary 82.95 - 51.80, margin 31.15
        assert result.breakdown.cruise_control == -13.5
        assert result.team1.full_game == 69
        assert result.team2.full_game == 52

    def test_conference_penalty_is_split(self, contender, mid_major):
        result = predict(contender, mid_major, GameContext(is_conference_game=True))
        assert result.breakdown.conference == -11.0
        assert result.team1.full_game == 64
        assert result.team2.full_game == 46

    def test_contextual_applies_to_both_teams(self, contender, mid_major):
        result = predict(contender, mid_major, GameContext(days_rest=0))
        assert result.breakdown.contextual == ScorePair(-4.0, -4.0)
        assert result.team1.full_game == 65
        assert result.team2.full_game == 48

    def test_elite_cap_and_half_up_rounding(self):
        scorer = TeamStats(team="Scorer", ppg=88.0, points_allowed=70.0, defense_rank=150,
                           field_goal_pct=0.50, offense_rank=20, net_rank=60)
        opponent = TeamStats(team="Opponent", ppg=70.0, points_allowed=85.0, defense_rank=200,
                             field_goal_pct=0.45, offense_rank=150, net_rank=200)
        result = predict(scorer, opponent)
        # 93.23 - 8.5 cruise = 84.73, capped at 82.5 → 83
        assert result.breakdown.cruise_control == -8.5
        assert result.breakdown.elite_caps.team1 == pytest.approx(-2.23)
        assert result.breakdown.elite_caps.team2 == 0.0
        assert result.team1.full_game == 83
        assert result.team2.full_game == 71

    def test_bottom_ten_floor_and_max_cap(self):
        cellar = TeamStats(team="Cellar", ppg=50.0, points_allowed=90.0, defense_rank=340,
                           field_goal_pct=0.38, offense_rank=350, net_rank=360, loss_streak=6)
        power = TeamStats(team="Power", ppg=90.0, points_allowed=60.0, defense_rank=10,
                          field_goal_pct=0.50, offense_rank=5, net_rank=20)
        result = predict(cellar, power, AWAY)
        # 21.06 - 12.5 → floor 48 ; 99.84 + 12.5 → cap 110
        assert result.team1.full_game == 48
        assert result.team2.full_game == 110
        assert result.team1.first_half == 23
        assert result.team2.first_half == 53
        assert result.winner == "Power"
        assert result.breakdown.cruise_control == 0.0
        assert result.breakdown.elite_caps == ScorePair(0.0, 0.0)
        assert result.breakdown.extreme_mismatch == ScorePair(-12.5, 12.5)

    def test_both_bottom_ten_bypass_cruise_and_caps(self):
        t1 = TeamStats(team="Bottom A", ppg=95.0, points_allowed=60.0, defense_rank=150,
                       field_goal_pct=0.50, offense_rank=10, net_rank=356)
        t2 = TeamStats(team="Bottom B", ppg=55.0, points_allowed=95.0, defense_rank=363,
                       field_goal_pct=0.38, offense_rank=350, net_rank=363)
        result = predict(t1, t2)
        # margin ~50 would trigger -13.5 and the 90 cap, both bypassed
        flags = result.breakdown.mismatch_flags
        assert flags.skip_cruise_control and flags.skip_elite_caps
        assert result.breakdown.cruise_control == 0.0
        assert result.breakdown.elite_caps == ScorePair(0.0, 0.0)
        assert result.team1.full_game == 104
        assert result.team2.full_game == 53
        assert min(result.team1.full_game, result.team2.full_game) >= 48

    def test_both_bottom_ten_close_game(self):
        t1 = TeamStats(team="Bottom A", ppg=55.0, points_allowed=80.0, defense_rank=350,
                       field_goal_pct=0.39, offense_rank=340, net_rank=360)
        t2 = TeamStats(team="Bottom B", ppg=58.0, points_allowed=78.0, defense_rank=345,
                       field_goal_pct=0.41, offense_rank=330, net_rank=357)
        result = predict(t1, t2)
        assert result.breakdown.close_game == ScorePair(3.5, 3.5)
        assert result.team1.full_game == 70
        assert result.team2.full_game == 73
        assert min(result.team1.full_game, result.team2.full_game) >= 48

    def test_rounded_tie_still_has_one_winner(self):
        result = predict(_team(), _team(team="Beta"))
        # 74.54 vs 75.06 both round to 75
        assert result.team1.full_game == result.team2.full_game == 75
        assert result.margin == 0
        assert result.team2.is_winner
        assert not result.team1.is_winner
        assert result.winner == "Beta"

    def test_default_context_is_neutral(self, contender, mid_major):
        assert predict(contender, mid_major) == predict(contender, mid_major, NEUTRAL)


class TestResultInvariants:

    MATCHUPS = [
        (dict(ppg=84.3, points_allowed=80.3, defense_rank=316), dict(ppg=69.1, points_allowed=88.4, defense_rank=355)),
        (dict(ppg=72.0, points_allowed=70.0, defense_rank=150), dict(ppg=72.0, points_allowed=70.0, defense_rank=150)),
        (dict(ppg=90.0, points_allowed=60.0, defense_rank=5, net_rank=1),
         dict(ppg=58.0, points_allowed=80.0, defense_rank=300, net_rank=362)),
        (dict(ppg=65.0, points_allowed=62.0, defense_rank=20, win_streak=6),
         dict(ppg=64.0, points_allowed=61.0, defense_rank=25, loss_streak=4)),
    ]

    @pytest.mark.parametrize("t1_fields, t2_fields", MATCHUPS)
    @pytest.mark.parametrize("location", list(Location))
    def test_total_margin_and_single_winner(self, t1_fields, t2_fields, location):
        result = predict(
            _team(**t1_fields), _team(team="Beta", **t2_fields),
            GameContext(team1_location=location),
        )
        assert result.team1.full_game + result.team2.full_game == result.total
        assert abs(result.team1.full_game - result.team2.full_game) == result.margin
        assert result.team1.first_half + result.team2.first_half == result.first_half_total
        assert result.team1.is_winner != result.team2.is_winner
        winner = result.team1 if result.team1.is_winner else result.team2
        assert result.winner == winner.name

    def test_idempotent(self, favorite, underdog):
        ctx = GameContext(team1_location=Location.HOME, days_rest=5, missing_role_player=True)
        first = predict(favorite, underdog, ctx)
        second = predict(favorite, underdog, ctx)
        assert first == second
        assert repr(first) == repr(second)
        assert first.to_flat_dict() == second.to_flat_dict()

    def test_result_is_immutable(self, favorite, underdog):
        result = predict(favorite, underdog)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.total = 0

    def test_flat_dict(self, favorite, underdog):
        row = predict(favorite, underdog, HOME).to_flat_dict()
        assert row["model_version"] == "v2.2"
        assert row["team1"] == "Favorite"
        assert row["team1_score"] == 105
        assert row["base_team1"] == 86.35
        assert row["extreme_mismatch_team2"] == -8.75
        assert row["skip_cruise_control"] == 1
        assert row["skip_elite_caps"] == 0
        assert "predicted_at" not in row
