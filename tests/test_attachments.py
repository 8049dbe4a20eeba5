import math
import random
import unittest
import numpy as np

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from stadium.attachments import (
    build_attachments,
    place_ad_hoardings,
    place_ribbon_displays,
    place_scoreboard,
)
from stadium.materials import hoarding_texture_repeat, solid, with_texture_repeat
from stadium.params import (
    AdHoardingParams,
    DisplayContent,
    RibbonDisplayParams,
    ScoreboardParams,
    StadiumParams,
)
from stadium.roofs import build_roofs, plan_roofs
from stadium.scene import StadiumScene
from stadium.stands import add_stands_to_scene, generate_all_stands


def _stands(roofed=True, **flat):
    flat.setdefault("pitchLength", 100)
    flat.setdefault("pitchWidth", 64)
    if not roofed:
        flat["roofType"] = "none"
    params = StadiumParams.from_flat(flat)
    stands = generate_all_stands(params)
    plan_roofs(params, stands)
    return params, stands


class TestScoreboardPlacement(unittest.TestCase):

    def test_rests_on_roof(self):
        params, stands = _stands()
        north = stands[2]
        placement = place_scoreboard(stands, ScoreboardParams(stand_name="North"))
        self.assertIs(placement.stand, north)
        self.assertAlmostEqual(placement.base_height, north.roof.top_surface_height + 0.5)
        expected_y = placement.base_height + 2.0 + (6.0 + 0.4) / 2.0
        self.assertAlmostEqual(placement.local_position[1], expected_y)
        self.assertAlmostEqual(placement.local_position[0], 18.0 * 0.7)
        self.assertAlmostEqual(placement.local_position[2], 32.0)

    def test_rests_on_stand_without_roof(self):
        params, stands = _stands(roofed=False)
        placement = place_scoreboard(stands, ScoreboardParams(stand_name="North"))
        self.assertAlmostEqual(placement.base_height, 12.5)
        self.assertAlmostEqual(placement.world_position[1], 12.5 + 2.0 + 3.2)

    def test_rests_on_overall_roof(self):
        params, stands = _stands(roofType="overall")
        north = stands[2]
        self.assertIsNone(north.roof)
        placement = place_scoreboard(stands, ScoreboardParams(stand_name="North"), overall_roof_top=12.5)
        self.assertAlmostEqual(placement.base_height, 13.0)

    def test_offsets_move_board_in_stand_frame(self):
        params, stands = _stands()
        board = ScoreboardParams(stand_name="East", offset_depth=-3.0, offset_length=10.0)
        placement = place_scoreboard(stands, board)
        self.assertAlmostEqual(placement.local_position[0], 18.0 * 0.7 - 3.0)
        self.assertAlmostEqual(placement.local_position[2], 60.0)

    def test_faces_field_centre_and_stays_upright(self):
        rng = random.Random(5)
        for _ in range(30):
            tilt = rng.uniform(0.0, math.pi / 4)
            name = rng.choice(["East", "West", "North", "South"])
            params, stands = _stands(individualRoofTilt=tilt)
            placement = place_scoreboard(stands, ScoreboardParams(stand_name=name,
                                                                  offset_length=rng.uniform(-20.0, 20.0)))
            self.assertEqual(placement.pitch, 0.0)
            self.assertEqual(placement.roll, 0.0)

            forward = placement.forward
            self.assertAlmostEqual(forward[1], 0.0)
            to_centre = -placement.world_position
            to_centre[1] = 0.0
            to_centre /= np.linalg.norm(to_centre)
            self.assertAlmostEqual(float(np.dot(forward, to_centre)), 1.0, places=6)

            up = placement.world_transform[:3, :3] @ np.array([0.0, 1.0, 0.0])
            np.testing.assert_allclose(up, [0.0, 1.0, 0.0], atol=1e-9)

    def test_supports_hang_below_board(self):
        params, stands = _stands()
        placement = place_scoreboard(stands, ScoreboardParams())
        self.assertEqual(len(placement.support_centers), 2)
        xs = sorted(float(c[0]) for c in placement.support_centers)
        self.assertAlmostEqual(xs[0], -12.0 * 0.35)
        self.assertAlmostEqual(xs[1], 12.0 * 0.35)
        for center in placement.support_centers:
            self.assertAlmostEqual(center[1], -3.2 - 1.0)

    def test_no_supports_when_height_is_zero(self):
        params, stands = _stands()
        placement = place_scoreboard(stands, ScoreboardParams(support_height=0.0))
        self.assertEqual(placement.support_centers, [])

    def test_missing_stand_skips_scoreboard(self):
        params, stands = _stands()
        with self.assertLogs('stadium.attachments', level='WARNING'):
            self.assertIsNone(place_scoreboard(stands, ScoreboardParams(stand_name="Upper Tier")))

    def test_hidden_stand_skips_scoreboard(self):
        params, stands = _stands(useIndividualStandSettings=True, stands=[{}, {}, {"show": False}, {}])
        with self.assertLogs('stadium.attachments', level='WARNING'):
            self.assertIsNone(place_scoreboard(stands, ScoreboardParams(stand_name="North")))


class TestAdHoardings(unittest.TestCase):

    def setUp(self):
        self.pitch = StadiumParams.from_flat({"pitchLength": 100, "pitchWidth": 64}).pitch
        self.placements = {p.name: p for p in place_ad_hoardings(self.pitch, AdHoardingParams())}

    def test_four_hoardings(self):
        self.assertEqual(len(self.placements), 4)

    def test_positions_and_widths(self):
        east = self.placements["EastAdHoarding"]
        np.testing.assert_allclose(east.position, [0.0, 0.51, 34.0])
        self.assertAlmostEqual(east.width, 100.0)
        north = self.placements["NorthAdHoarding"]
        np.testing.assert_allclose(north.position, [52.0, 0.51, 0.0])
        self.assertAlmostEqual(north.width, 64.0)

    def test_normals_point_at_field(self):
        for placement in self.placements.values():
            with self.subTest(name=placement.name):
                position = np.array(placement.position)
                inward = -position
                inward[1] = 0.0
                inward /= np.linalg.norm(inward)
                np.testing.assert_allclose(placement.normal, inward, atol=1e-9)

    def test_texture_repeat_keeps_image_proportions(self):
        self.assertAlmostEqual(self.placements["EastAdHoarding"].texture_repeat[0], 25.0)
        self.assertAlmostEqual(self.placements["NorthAdHoarding"].texture_repeat[0], 16.0)
        self.assertEqual(self.placements["EastAdHoarding"].texture_repeat[1], 1.0)

        wide = {p.name: p for p in place_ad_hoardings(self.pitch, AdHoardingParams(image_aspect_ratio=8.0))}
        self.assertAlmostEqual(wide["EastAdHoarding"].texture_repeat[0], 12.5)

    def test_texture_repeat_rejects_bad_sizes(self):
        with self.assertRaises(ValueError):
            hoarding_texture_repeat(10.0, 0.0, 4.0)

    def test_with_texture_repeat_is_pure(self):
        base = solid("#1a3c8c", texture="ad-banner")
        derived = with_texture_repeat(base, (25.0, 1.0))
        self.assertEqual(base.texture_repeat, (1.0, 1.0))
        self.assertEqual(derived.texture_repeat, (25.0, 1.0))
        self.assertEqual(derived.texture, base.texture)
        self.assertEqual(derived.color, base.color)


class TestRibbonDisplays(unittest.TestCase):

    def test_position_along_stand_front(self):
        params, stands = _stands()
        ribbons = RibbonDisplayParams(show=True, stand_names=("East Stand",))
        placements = place_ribbon_displays(stands, ribbons, DisplayContent())
        self.assertEqual(len(placements), 1)
        placement = placements[0]
        self.assertEqual(placement.stand.name, "EastStandGroup")
        np.testing.assert_allclose(placement.local_position, [17.64, 13.0, 50.0])
        np.testing.assert_allclose(placement.dimensions, [0.15, 1.0, 100.0])

    def test_display_name_resolves_west_group(self):
        params, stands = _stands()
        placements = place_ribbon_displays(stands, RibbonDisplayParams(stand_names=("West Stand",)),
                                           DisplayContent())
        self.assertEqual(placements[0].stand.name, "WestStandGroup")

    def test_missing_stand_is_skipped(self):
        params, stands = _stands()
        ribbons = RibbonDisplayParams(stand_names=("East Stand", "Upper Tier"))
        with self.assertLogs('stadium.attachments', level='WARNING') as logs:
            placements = place_ribbon_displays(stands, ribbons, DisplayContent())
        self.assertEqual(len(placements), 1)
        self.assertTrue(any("Upper Tier" in line for line in logs.output))

    def test_text_shows_score_line(self):
        params, stands = _stands()
        content = DisplayContent(team_a="Reds", team_b="Blues", score_a=2, score_b=1)
        placements = place_ribbon_displays(stands, RibbonDisplayParams(stand_names=("North",)), content)
        self.assertEqual(placements[0].text, "Reds 2 - 1 Blues")


class TestDisplayContent(unittest.TestCase):

    def test_sanitized_clamps_scores(self):
        content = DisplayContent.sanitized("Home", "Away", "-3", 5000, "45:00")
        self.assertEqual(content.score_a, 0)
        self.assertEqual(content.score_b, 999)
        self.assertEqual(content.game_time, "45:00")

    def test_sanitized_strips_control_characters(self):
        content = DisplayContent.sanitized("  Ho\x00me\n", None, "x", 2.0, "90:00+3'")
        self.assertEqual(content.team_a, "Home")
        self.assertEqual(content.team_b, "")
        self.assertEqual(content.score_a, 0)
        self.assertEqual(content.score_b, 2)

    def test_sanitized_truncates(self):
        content = DisplayContent.sanitized("A" * 100, "B", 0, 0, "1" * 40)
        self.assertEqual(len(content.team_a), 24)
        self.assertEqual(len(content.game_time), 12)


class TestBuildAttachments(unittest.TestCase):

    def test_nodes_added_to_scene(self):
        params, stands = _stands(showRibbonDisplays=True)
        scene = StadiumScene()
        add_stands_to_scene(scene, stands)
        build_roofs(scene, params, stands)
        build_attachments(scene, params, stands)

        self.assertIsNotNone(scene.find("AdHoardings"))
        board = scene.find("MainScoreboardOnNorthStandGroup")
        self.assertIsNotNone(board)
        self.assertIsNotNone(board.find("ScoreboardScreen"))
        self.assertIsNotNone(board.find("ScoreboardFrame"))
        self.assertIsNotNone(scene.find("RibbonDisplayOnEastStandGroup"))
        self.assertIsNotNone(scene.find("RibbonDisplayOnWestStandGroup"))

        hoardings = scene.find("AdHoardings")
        repeats = {child.appearance.texture_repeat for child in hoardings.children}
        self.assertEqual(len(repeats), 2)

    def test_scoreboard_clears_overall_roof_slab(self):
        params, stands = _stands(roofType="overall")
        scene = StadiumScene()
        add_stands_to_scene(scene, stands)
        build_roofs(scene, params, stands)
        build_attachments(scene, params, stands)
        # Ring slab spans 12.0 to 12.5 above the tallest stand
        board = scene.find("MainScoreboardOnNorthStandGroup")
        self.assertAlmostEqual(board.transform[1, 3], 12.5 + 0.5 + 2.0 + 3.2)

    def test_hidden_attachments(self):
        params, stands = _stands(showAdHoardings=False, showScoreboard=False)
        scene = StadiumScene()
        add_stands_to_scene(scene, stands)
        build_attachments(scene, params, stands)
        self.assertIsNone(scene.find("AdHoardings"))
        self.assertIsNone(scene.find("MainScoreboardOnNorthStandGroup"))


if __name__ == '__main__':
    unittest.main()
