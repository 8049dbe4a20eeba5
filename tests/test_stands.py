import unittest
import numpy as np

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from stadium.params import StadiumParams
from stadium.profile import ProfileError
from stadium.scene import StadiumScene
from stadium.stands import (
    CARDINAL_DEFINITIONS,
    CardinalSide,
    add_stands_to_scene,
    find_stand,
    generate_all_stands,
)


def _params(**flat):
    return StadiumParams.from_flat(flat)


class TestGenerateAllStands(unittest.TestCase):

    def setUp(self):
        self.params = _params(pitchLength=100, pitchWidth=64)
        self.stands = generate_all_stands(self.params)
        self.by_side = {stand.side: stand for stand in self.stands}

    def test_four_stands_with_default_metrics(self):
        self.assertEqual(len(self.stands), 4)
        for stand in self.stands:
            self.assertAlmostEqual(stand.total_profile_depth, 18.0)
            self.assertAlmostEqual(stand.total_profile_height_at_back, 12.0)

    def test_names_follow_cardinal_sides(self):
        names = [stand.name for stand in self.stands]
        self.assertEqual(names, ["EastStandGroup", "WestStandGroup", "NorthStandGroup", "SouthStandGroup"])

    def test_stand_lengths(self):
        self.assertAlmostEqual(self.by_side[CardinalSide.EAST].stand_length, 100.0)
        self.assertAlmostEqual(self.by_side[CardinalSide.WEST].stand_length, 100.0)
        self.assertAlmostEqual(self.by_side[CardinalSide.NORTH].stand_length, 64.0)
        self.assertAlmostEqual(self.by_side[CardinalSide.SOUTH].stand_length, 64.0)

    def test_anchor_positions(self):
        expected = {
            CardinalSide.EAST: [50.0, 0.0, 37.0],
            CardinalSide.WEST: [-50.0, 0.0, -37.0],
            CardinalSide.NORTH: [55.0, 0.0, -32.0],
            CardinalSide.SOUTH: [-55.0, 0.0, 32.0],
        }
        for side, position in expected.items():
            with self.subTest(side=side):
                np.testing.assert_allclose(self.by_side[side].position, position, atol=1e-9)

    def test_front_faces_field_and_back_is_further_out(self):
        """Local x=0 sits offset metres from the field edge; the back sits depth further out."""
        half = {CardinalSide.EAST: 32.0, CardinalSide.WEST: 32.0,
                CardinalSide.NORTH: 50.0, CardinalSide.SOUTH: 50.0}
        for stand in self.stands:
            with self.subTest(stand=stand.name):
                mid = stand.stand_length / 2.0
                front = stand.local_to_world([0.0, 0.0, mid])
                back = stand.local_to_world([stand.total_profile_depth, 0.0, mid])
                axis = 2 if stand.side in (CardinalSide.EAST, CardinalSide.WEST) else 0
                self.assertAlmostEqual(abs(front[axis]), half[stand.side] + 5.0)
                self.assertAlmostEqual(abs(back[axis]), half[stand.side] + 5.0 + 18.0)
                # Mid-length of each stand lines up with the field centre line
                self.assertAlmostEqual(front[2 - axis], 0.0)

    def test_extrusion_spans_field_edge(self):
        east = self.by_side[CardinalSide.EAST]
        start = east.local_to_world([0.0, 0.0, 0.0])
        end = east.local_to_world([0.0, 0.0, east.stand_length])
        self.assertAlmostEqual(start[0], 50.0)
        self.assertAlmostEqual(end[0], -50.0)

    def test_world_local_round_trip(self):
        north = self.by_side[CardinalSide.NORTH]
        point = np.array([3.0, 4.0, 5.0])
        np.testing.assert_allclose(north.world_to_local(north.local_to_world(point)), point, atol=1e-9)

    def test_hidden_stands_are_skipped(self):
        self.assertEqual(generate_all_stands(_params(showStands=False)), [])

    def test_individual_settings_override_one_stand(self):
        params = _params(
            useIndividualStandSettings=True,
            stands=[{}, {"numRows": 10}, {"show": False}, {"offsetFromPitch": 12}],
        )
        stands = {stand.side: stand for stand in generate_all_stands(params)}
        self.assertNotIn(CardinalSide.NORTH, stands)
        self.assertAlmostEqual(stands[CardinalSide.EAST].total_profile_depth, 18.0)
        self.assertAlmostEqual(stands[CardinalSide.WEST].total_profile_depth, 10.0)
        self.assertAlmostEqual(stands[CardinalSide.SOUTH].position[0], -(100.6 / 2.0 + 12.0))

    def test_overrides_ignored_unless_enabled(self):
        params = _params(stands=[{}, {"numRows": 10}, {}, {}])
        west = generate_all_stands(params)[1]
        self.assertAlmostEqual(west.total_profile_depth, 18.0)

    def test_invalid_profile_raises(self):
        params = StadiumParams.from_flat({"standNumRows": 0, "standWalkwayAtTopDepth": 0.0})
        with self.assertRaises(ProfileError):
            generate_all_stands(params)

    def test_cardinal_yaws(self):
        yaws = {definition.side: definition.yaw for definition in CARDINAL_DEFINITIONS}
        self.assertAlmostEqual(yaws[CardinalSide.EAST], -np.pi / 2)
        self.assertAlmostEqual(yaws[CardinalSide.WEST], np.pi / 2)
        self.assertAlmostEqual(yaws[CardinalSide.NORTH], 0.0)
        self.assertAlmostEqual(yaws[CardinalSide.SOUTH], np.pi)


class TestFindStand(unittest.TestCase):

    def setUp(self):
        self.stands = generate_all_stands(StadiumParams())

    def test_display_name_resolves_group(self):
        stand = find_stand(self.stands, "West Stand")
        self.assertIsNotNone(stand)
        self.assertEqual(stand.name, "WestStandGroup")

    def test_tolerant_forms(self):
        for name in ("north", "NorthStandGroup", "North Stand", " NORTH "):
            with self.subTest(name=name):
                self.assertEqual(find_stand(self.stands, name).side, CardinalSide.NORTH)

    def test_missing_stand_warns(self):
        with self.assertLogs('stadium.stands', level='WARNING') as logs:
            self.assertIsNone(find_stand(self.stands, "Upper Tier"))
        self.assertIn("Upper Tier", logs.output[0])

    def test_empty_name_warns(self):
        with self.assertLogs('stadium.stands', level='WARNING'):
            self.assertIsNone(find_stand(self.stands, ""))


class TestAddStandsToScene(unittest.TestCase):

    def test_groups_and_meshes(self):
        scene = StadiumScene()
        stands = generate_all_stands(StadiumParams())
        add_stands_to_scene(scene, stands)
        self.assertEqual(len(scene.stands), 4)
        for stand in stands:
            group = scene.find(stand.name)
            self.assertIs(group, stand.node)
            self.assertIsNotNone(group.find(f"{stand.side.value}StandMesh"))
        self.assertEqual(len(list(scene.iter_mesh_nodes())), 4)

    def test_stand_solids_reach_reported_height(self):
        """Roofs and attachments rest on the reported back height, so the solid must reach it."""
        for stand in generate_all_stands(StadiumParams()):
            with self.subTest(stand=stand.name):
                self.assertAlmostEqual(stand.mesh.bounds[1][1], stand.total_profile_height_at_back)
                self.assertAlmostEqual(stand.mesh.bounds[1][0], stand.total_profile_depth)


if __name__ == '__main__':
    unittest.main()
