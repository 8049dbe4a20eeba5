import unittest

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from stadium.params import (
    ConfigurationError,
    CoverageMode,
    RoofMode,
    StadiumParams,
    StadiumType,
    StandOverride,
    StandSpec,
)


class TestFromFlat(unittest.TestCase):

    def test_defaults_are_valid(self):
        params = StadiumParams()
        self.assertEqual(params.collect_issues(), [])
        self.assertIs(params.validate(), params)

    def test_sections_are_updated(self):
        params = StadiumParams.from_flat({
            "pitchLength": "105", "standNumRows": 30.0, "roofType": "Overall",
            "individualRoofCoverageMode": "fixed", "stadiumType": "CRICKET", "showFloodlights": "false",
        })
        self.assertAlmostEqual(params.pitch.length, 105.0)
        self.assertEqual(params.stand_defaults.num_rows, 30)
        self.assertIs(params.roof_type, RoofMode.OVERALL)
        self.assertIs(params.individual_roof.coverage_mode, CoverageMode.FIXED)
        self.assertIs(params.pitch.stadium_type, StadiumType.CRICKET)
        self.assertFalse(params.floodlights.show)

    def test_base_values_are_kept(self):
        base = StadiumParams.from_flat({"pitchWidth": 70})
        updated = base.with_updates(pitchLength=110)
        self.assertAlmostEqual(updated.pitch.width, 70.0)
        self.assertAlmostEqual(updated.pitch.length, 110.0)
        self.assertAlmostEqual(base.pitch.length, 100.6)

    def test_unknown_key(self):
        with self.assertRaises(ConfigurationError) as ctx:
            StadiumParams.from_flat({"pitchLenght": 100})
        self.assertIn("pitchLenght", str(ctx.exception))

    def test_non_integer_rows(self):
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"standNumRows": 2.5})
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"numLightsPerTower": True})

    def test_unparseable_number(self):
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"pitchLength": "long"})

    def test_bad_enum(self):
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"roofType": "dome"})
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"stadiumType": "baseball"})

    def test_ribbon_stand_names(self):
        params = StadiumParams.from_flat({"ribbonDisplayStands": "North Stand, South Stand"})
        self.assertEqual(params.ribbon_displays.stand_names, ("North Stand", "South Stand"))

    def test_display_keys_are_sanitized(self):
        params = StadiumParams.from_flat({"scoreboardTeamA": "Reds", "scoreboardScoreB": "7"})
        content = params.scoreboard.content
        self.assertEqual(content.team_a, "Reds")
        self.assertEqual(content.team_b, "AWAY")
        self.assertEqual(content.score_b, 7)


class TestStandOverrides(unittest.TestCase):

    def test_default_names(self):
        names = [override.name for override in StadiumParams().stand_overrides]
        self.assertEqual(names, ["East Stand", "West Stand", "North Stand", "South Stand"])

    def test_apply_to_keeps_unset_values(self):
        spec = StandOverride(name="East Stand", num_rows=5, color="#ff0000").apply_to(StandSpec())
        self.assertEqual(spec.num_rows, 5)
        self.assertEqual(spec.color, "#ff0000")
        self.assertAlmostEqual(spec.row_step_depth, StandSpec().row_step_depth)

    def test_effective_spec_respects_toggle(self):
        flat = {"stands": [{"numRows": 5}, {}, {}, {}]}
        self.assertEqual(StadiumParams.from_flat(flat).effective_stand_spec(0).num_rows, 20)
        flat["useIndividualStandSettings"] = True
        self.assertEqual(StadiumParams.from_flat(flat).effective_stand_spec(0).num_rows, 5)

    def test_unknown_stand_key(self):
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"stands": [{"rows": 5}]})

    def test_stands_must_be_a_list(self):
        with self.assertRaises(ConfigurationError):
            StadiumParams.from_flat({"stands": {"numRows": 5}})

    def test_override_out_of_range(self):
        params = StadiumParams.from_flat({"stands": [{"numRows": 80}]})
        issues = params.collect_issues()
        self.assertEqual(len(issues), 1)
        self.assertIn("stands[0].numRows", issues[0])

    def test_override_bad_colour(self):
        params = StadiumParams.from_flat({"stands": [{}, {"color": "teal"}]})
        self.assertIn("stands[1].color", params.collect_issues()[0])

    def test_extra_stand_entry_is_reported(self):
        params = StadiumParams.from_flat({"stands": [{}, {}, {}, {}, {"name": "Upper Tier"}]})
        self.assertTrue(any(issue.startswith("stands:") for issue in params.collect_issues()))


class TestValidation(unittest.TestCase):

    def test_out_of_range(self):
        params = StadiumParams.from_flat({"standNumRows": 61, "pitchLength": 5})
        issues = params.collect_issues()
        self.assertEqual(len(issues), 2)
        with self.assertRaises(ConfigurationError):
            params.validate()

    def test_range_bounds_are_inclusive(self):
        params = StadiumParams.from_flat({"standNumRows": 0, "individualRoofTilt": 0.0})
        self.assertEqual(params.collect_issues(), [])

    def test_non_finite_value(self):
        params = StadiumParams.from_flat({"pitchWidth": float("nan")})
        self.assertEqual(len(params.collect_issues()), 1)

    def test_bad_colour(self):
        params = StadiumParams.from_flat({"standColor": "grey"})
        self.assertIn("standColor", params.collect_issues()[0])

    def test_min_coverage_above_max(self):
        params = StadiumParams.from_flat({"individualRoofMinCoverage": 30, "individualRoofMaxCoverage": 10})
        issues = params.collect_issues()
        self.assertEqual(len(issues), 1)
        self.assertIn("individualRoofMinCoverage", issues[0])

    def test_unknown_light_preset_is_not_an_error(self):
        params = StadiumParams.from_flat({"spotlightColorPreset": "Ultraviolet"})
        self.assertEqual(params.collect_issues(), [])


class TestFlatRoundTrip(unittest.TestCase):

    def test_to_flat_round_trip(self):
        params = StadiumParams.from_flat({
            "pitchLength": 90, "roofType": "none", "individualRoofCoverageMode": "auto",
            "ribbonDisplayStands": ["North Stand"], "scoreboardTeamA": "Reds",
            "useIndividualStandSettings": True, "stands": [{"numRows": 12}, {}, {"show": False}, {}],
        })
        flat = params.to_flat()
        self.assertEqual(flat["roofType"], "none")
        self.assertEqual(flat["ribbonDisplayStands"], ["North Stand"])
        self.assertEqual(flat["stands"][0], {"name": "East Stand", "numRows": 12})
        self.assertEqual(StadiumParams.from_flat(flat), params)


if __name__ == '__main__':
    unittest.main()
