"""
Unit tests for the feature engineering module.
"""
import numpy as np
import pandas as pd
import pytest

from conftest import play
from nfl_kicker_fgoe.data.feature_engineering import (
    PRECIP_RULES,
    FeatureEngineer,
    ImputationContext,
    classify_precipitation,
    clock_to_seconds,
    parse_reading,
)
from nfl_kicker_fgoe.errors import DataPreconditionError, ImputationError


def engineer(rows):
    return FeatureEngineer().create_all_features(pd.DataFrame(rows))


class TestPrecipitationRules:
    """The ordered weather-text rules."""

    def test_rules_are_an_ordered_list(self):
        assert isinstance(PRECIP_RULES, list)
        assert all(len(rule) == 2 for rule in PRECIP_RULES)

    def test_light_rain_expected_is_precipitation(self):
        assert classify_precipitation("light rain expected", "outdoors") == "Yes"

    @pytest.mark.parametrize("weather", ["Heavy rain", "Snow", "light rain expected", None])
    def test_dome_is_never_precipitation(self, weather):
        assert classify_precipitation(weather, "dome") == "No"
        assert classify_precipitation(weather, "closed") == "No"

    def test_rain_chance_beats_generic_rain(self):
        # "rain" alone would match the generic rule further down the list
        assert classify_precipitation("Cloudy, Rain Chance 40%", "outdoors") == "No"
        assert classify_precipitation("Partly cloudy, chance of rain 20%", "open") == "No"

    def test_negated_phrases(self):
        assert classify_precipitation("Clear, no rain", "outdoors") == "No"
        assert classify_precipitation("Cold, 0% chance of snow", "outdoors") == "No"
        assert classify_precipitation("Overcast, 0 % chance of precipitation", "open") == "No"

    @pytest.mark.parametrize("weather", [
        "Rain, 100% chance of rain",
        "Heavy Snow, 90% chance",
        "Light rain, 40% chance of precipitation",
        "Showers, 10% chance of showers",
    ])
    def test_nonzero_chance_does_not_hide_reported_precipitation(self, weather):
        assert classify_precipitation(weather, "outdoors") == "Yes"

    @pytest.mark.parametrize("weather", ["Snow flurries", "Sleet", "Scattered Showers", "Drizzle",
                                         "Thunderstorms", "RAIN"])
    def test_precipitation_phrases(self, weather):
        assert classify_precipitation(weather, "outdoors") == "Yes"

    @pytest.mark.parametrize("weather", ["Sunny", "", None, np.nan, "Temp: 72° F, Wind: 5 mph"])
    def test_unmatched_text_defaults_to_no(self, weather):
        assert classify_precipitation(weather, "outdoors") == "No"

    def test_missing_roof_uses_text(self):
        assert classify_precipitation("Rain", None) == "Yes"


class TestParsing:

    def test_parse_reading_treats_blank_and_junk_as_missing(self):
        parsed = parse_reading(pd.Series(["45", " 12 ", "", "N/A", None, 7.5]))
        assert parsed.tolist()[:2] == [45.0, 12.0]
        assert parsed.iloc[2:5].isna().all()
        assert parsed.iloc[5] == 7.5

    def test_clock_to_seconds(self):
        secs = clock_to_seconds(pd.Series(["01:10", "15:00", "00:05", None]))
        assert secs.tolist()[:3] == [70.0, 900.0, 5.0]
        assert np.isnan(secs.iloc[3])


class TestImputation:
    """Two-phase temp/wind imputation."""

    def test_indoor_missing_gets_fixed_defaults(self):
        df = engineer([
            play(roof="dome", temp=np.nan, wind=np.nan),
            play(roof="closed", temp="", wind=" "),
            play(roof="outdoors", temp=40.0, wind=10.0),
        ])
        assert df.loc[0, "temp"] == 70 and df.loc[0, "wind"] == 0
        assert df.loc[1, "temp"] == 70 and df.loc[1, "wind"] == 0

    def test_indoor_reading_present_is_kept(self):
        df = engineer([play(roof="dome", temp=68.0, wind=1.0), play()])
        assert df.loc[0, "temp"] == 68.0
        assert df.loc[0, "wind"] == 1.0

    def test_open_air_missing_gets_open_air_mean(self):
        df = engineer([
            play(roof="outdoors", temp=40.0, wind=10.0),
            play(roof="open", temp=60.0, wind=20.0),
            play(roof="outdoors", temp="", wind="calm?"),
            # indoor readings never feed the open-air mean
            play(roof="dome", temp=90.0, wind=0.0),
        ])
        assert df.loc[2, "temp"] == pytest.approx(50.0)
        assert df.loc[2, "wind"] == pytest.approx(15.0)

    def test_context_means(self):
        ctx = ImputationContext.from_frame(pd.DataFrame([
            play(temp=30.0, wind=4.0), play(temp=50.0, wind=np.nan), play(roof="dome", temp=99.0),
        ]))
        assert ctx.temp_mean == pytest.approx(40.0)
        assert ctx.wind_mean == pytest.approx(4.0)
        assert (ctx.temp_count, ctx.wind_count) == (2, 1)

    def test_explicit_context_is_used(self):
        ctx = ImputationContext(temp_mean=33.0, wind_mean=3.0)
        df = FeatureEngineer().create_all_features(
            pd.DataFrame([play(temp=np.nan, wind=np.nan)]), ctx)
        assert df.loc[0, "temp"] == 33.0
        assert df.loc[0, "wind"] == 3.0

    def test_no_open_air_readings_to_average(self):
        with pytest.raises(ImputationError, match="temp"):
            engineer([play(temp=np.nan, wind=5.0), play(roof="dome", temp=np.nan)])

    def test_all_indoor_missing_needs_no_mean(self):
        df = engineer([play(roof="dome", temp=np.nan, wind=np.nan)] * 3)
        assert (df["temp"] == 70).all() and (df["wind"] == 0).all()

    def test_missing_reading_columns_are_not_an_error(self):
        row = play(roof="dome")
        del row["temp"], row["wind"], row["weather"], row["surface"]
        df = engineer([row])
        assert df.loc[0, "temp"] == 70 and df.loc[0, "wind"] == 0
        assert df.loc[0, "precip"] == "No"


class TestSituationalFlags:

    def test_division_game(self):
        df = engineer([
            play(posteam="BAL", defteam="PIT"),
            play(posteam="BAL", defteam="KC"),
            play(posteam="LV", defteam="KC"),
            play(posteam="OAK", defteam="DEN"),
        ])
        assert df["div_game"].tolist() == ["Yes", "No", "Yes", "Yes"]

    def test_tie_or_lead(self):
        df = engineer([play(score_differential=d) for d in (-4, -3, -1, 0, 1)])
        assert df["tie_or_lead"].tolist() == ["No", "Yes", "Yes", "Yes", "No"]

    def test_game_winner(self):
        df = engineer([
            play(qtr=4, time="01:10", score_differential=-2),
            play(qtr=5, time="00:30", score_differential=0),
            play(qtr=4, time="01:10", score_differential=-3),   # only ties
            play(qtr=4, time="05:00", score_differential=-1),   # too early
            play(qtr=3, time="00:10", score_differential=0),
        ])
        assert df["game_winner"].tolist() == ["Yes", "Yes", "No", "No", "No"]

    def test_road_altitude_grass_indoor(self):
        df = engineer([
            play(posteam="KC", defteam="DEN", home_team="DEN", surface="grass"),
            play(posteam="SF", defteam="ARI", home_team="ARI", stadium="Estadio Azteca",
                 surface="fieldturf", roof="dome"),
            play(surface="dessograss"),
        ])
        assert df["road"].tolist() == ["Yes", "Yes", "No"]
        assert df["altitude"].tolist() == ["Yes", "Yes", "No"]
        assert df["grass"].tolist() == ["Yes", "No", "Yes"]
        assert df["indoor"].tolist() == ["No", "Yes", "No"]

    def test_flags_are_yes_no_categoricals(self, engineered):
        for flag in ["div_game", "tie_or_lead", "game_winner", "road",
                     "indoor", "altitude", "grass", "precip"]:
            assert list(engineered[flag].cat.categories) == ["No", "Yes"]


class TestFeatureEngineer:
    """Whole-frame behaviour of create_all_features."""

    def test_equal_length_and_order(self, attempts, engineered):
        assert len(engineered) == len(attempts)
        assert engineered.index.equals(attempts.index)
        assert engineered["kick_distance"].tolist() == attempts["kick_distance"].tolist()

    def test_readings_never_missing(self, engineered):
        assert not engineered["temp"].isna().any()
        assert not engineered["wind"].isna().any()

    def test_indoor_attempts_are_dry_with_defaults(self, attempts, engineered):
        indoor = engineered["indoor"] == "Yes"
        assert indoor.any()
        assert (engineered.loc[indoor, "precip"] == "No").all()
        raw_missing = indoor & attempts["temp"].isna()
        assert (engineered.loc[raw_missing, "temp"] == 70).all()
        assert (engineered.loc[indoor & attempts["wind"].isna(), "wind"] == 0).all()

    def test_target_season_distance(self, engineered):
        assert set(engineered["made"].unique()) == {0, 1}
        assert (engineered["made"] == (engineered["field_goal_result"] == "made")).all()
        assert (engineered["season"] == 2023).all()
        assert (engineered["distance"] == engineered["kick_distance"]).all()

    def test_precipitation_rows(self, engineered):
        assert (engineered.loc[1::4, "precip"] == "Yes").all()

    def test_missing_result_is_rejected(self):
        with pytest.raises(DataPreconditionError, match="field_goal_result"):
            engineer([play(), play(field_goal_result=None)])

    def test_blocked_attempt_is_rejected(self):
        with pytest.raises(DataPreconditionError, match="blocked"):
            engineer([play(), play(field_goal_result="blocked")])

    def test_non_field_goal_is_rejected(self):
        with pytest.raises(DataPreconditionError, match="not field goal"):
            engineer([play(), play(play_type="extra_point")])

    def test_missing_required_column(self):
        row = play()
        del row["posteam"]
        with pytest.raises(DataPreconditionError, match="posteam"):
            engineer([row])
