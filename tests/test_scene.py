import unittest
import numpy as np

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from stadium.generator import generate_stadium, regenerate
from stadium.geometry import create_box_mesh
from stadium.materials import solid
from stadium.params import ConfigurationError, StadiumParams
from stadium.scene import EMITTER, GEOMETRY, ResourceRegistry, StadiumScene

RED = "#ff0000"
GREEN = "#00ff00"


class TestResourceRegistry(unittest.TestCase):

    def test_acquire_and_release(self):
        registry = ResourceRegistry()
        first = registry.acquire(GEOMETRY)
        second = registry.acquire(EMITTER)
        self.assertNotEqual(first, second)
        self.assertEqual(registry.count(), 2)
        self.assertEqual(registry.count(GEOMETRY), 1)
        self.assertTrue(registry.release(first))
        self.assertFalse(registry.release(first), "Releasing twice should be a no-op")
        self.assertFalse(registry.release(None))
        self.assertEqual(registry.count(), 1)

    def test_live_count_includes_materials_and_textures(self):
        registry = ResourceRegistry()
        registry.acquire(GEOMETRY)
        registry.materials.get(solid(RED))
        registry.materials.get(solid(GREEN, texture="ad-banner"))
        self.assertEqual(registry.live_count(), 1 + 2 + 1)
        self.assertEqual(registry.summary()["texture"], 1)


class TestStadiumScene(unittest.TestCase):
    """Tests for the scene tree and its resource bookkeeping."""

    def setUp(self):
        self.scene = StadiumScene()

    def test_add_mesh_acquires_handles(self):
        group = self.scene.add_group("Group")
        node = self.scene.add_mesh("Box", create_box_mesh(), solid(RED), parent=group)
        self.assertIsNotNone(node.geometry_handle)
        self.assertEqual(self.scene.resources.count(GEOMETRY), 1)
        self.assertIs(self.scene.find("Box"), node)

    def test_shared_appearance_shares_material(self):
        first = self.scene.add_mesh("A", create_box_mesh(), solid(RED))
        second = self.scene.add_mesh("B", create_box_mesh(), solid(RED))
        self.assertEqual(first.material_id, second.material_id)
        self.assertEqual(len(self.scene.materials), 1)

    def test_world_meshes_apply_parent_transforms(self):
        transform = np.eye(4)
        transform[:3, 3] = [10.0, 0.0, 0.0]
        group = self.scene.add_group("Moved", transform)
        self.scene.add_mesh("Box", create_box_mesh(), solid(RED), parent=group)
        (_, mesh, _), = self.scene.get_world_meshes()
        np.testing.assert_allclose(mesh.bounds, [[9.5, -0.5, -0.5], [10.5, 0.5, 0.5]])
        # Local mesh stays untouched
        np.testing.assert_allclose(self.scene.find("Box").mesh.bounds[0], [-0.5, -0.5, -0.5])

    def test_teardown_releases_geometry(self):
        self.scene.add_mesh("A", create_box_mesh(), solid(RED))
        self.scene.add_mesh("B", create_box_mesh(), solid(GREEN))
        self.assertEqual(self.scene.teardown(), 2)
        self.assertEqual(self.scene.resources.count(), 0)
        self.assertEqual(self.scene.root.children, [])

    def test_sweep_drops_unused_materials(self):
        self.scene.begin_pass()
        self.scene.add_mesh("A", create_box_mesh(), solid(RED))
        self.scene.end_pass()
        self.scene.teardown()
        self.scene.begin_pass()
        self.scene.add_mesh("B", create_box_mesh(), solid(GREEN))
        self.scene.end_pass()
        self.assertEqual(len(self.scene.materials), 1)
        self.assertIn(solid(GREEN), self.scene.materials)

    def test_bounds_of_empty_scene(self):
        low, high = self.scene.bounds()
        np.testing.assert_allclose(low, np.zeros(3))
        np.testing.assert_allclose(high, np.zeros(3))


class TestGenerateStadium(unittest.TestCase):

    def test_every_mesh_node_holds_a_live_handle(self):
        scene = generate_stadium(StadiumScene())
        mesh_nodes = list(scene.iter_mesh_nodes())
        self.assertGreater(len(mesh_nodes), 0)
        self.assertEqual(scene.resources.count(GEOMETRY), len(mesh_nodes))
        self.assertEqual(len(scene.stands), 4)
        self.assertIsNotNone(scene.find("FootballPitch"))
        self.assertIsNotNone(scene.find("Floodlights"))
        self.assertEqual(len(scene.emitters), 16)

    def test_cricket_ground(self):
        scene = generate_stadium(StadiumScene(), StadiumParams.from_flat({"stadiumType": "cricket"}))
        self.assertIsNotNone(scene.find("CricketGround"))
        self.assertIsNone(scene.find("FootballPitch"))

    def test_repeated_rebuilds_do_not_leak(self):
        """Fifty alternating rebuilds leave exactly what a single rebuild leaves."""
        variants = [
            StadiumParams.from_flat({"standColor": "#888888", "numLightsPerTower": 4,
                                     "roofType": "individual", "showRibbonDisplays": True}),
            StadiumParams.from_flat({"standColor": "#aa3300", "numLightsPerTower": 6,
                                     "roofType": "overall", "showSpotlightHelpers": True,
                                     "adHoardingImageAspectRatio": 8.0, "stadiumType": "cricket"}),
        ]
        scene = StadiumScene()
        for index in range(50):
            regenerate(scene, variants[index % 2])
        final = variants[49 % 2]

        fresh = regenerate(StadiumScene(), final)
        self.assertEqual(scene.live_count(), fresh.live_count())
        self.assertEqual(scene.resources.summary(), fresh.resources.summary())
        self.assertEqual(scene.passes, 50)

    def test_rebuild_with_same_params_is_stable(self):
        scene = StadiumScene()
        generate_stadium(scene)
        first = scene.live_count()
        generate_stadium(scene)
        self.assertEqual(scene.live_count(), first)

    def test_invalid_params_keep_previous_build(self):
        scene = generate_stadium(StadiumScene())
        before = scene.live_count()
        previous = scene.params
        with self.assertRaises(ConfigurationError):
            regenerate(scene, StadiumParams.from_flat({"standNumRows": 100}))
        with self.assertRaises(ConfigurationError):
            # Valid range, but deeper than the 18 m stands
            regenerate(scene, StadiumParams.from_flat({"individualRoofCoverageMode": "fixed",
                                                      "individualRoofDepth": 30}))
        self.assertEqual(scene.live_count(), before)
        self.assertIs(scene.params, previous)
        self.assertEqual(len(scene.stands), 4)

    def test_clear_releases_everything(self):
        scene = generate_stadium(StadiumScene())
        scene.clear()
        self.assertEqual(scene.live_count(), 0)
        self.assertEqual(len(scene.emitters), 0)

    def test_hidden_everything_leaves_empty_scene(self):
        params = StadiumParams.from_flat({
            "showPitch": False, "showStands": False, "roofType": "none",
            "showAdHoardings": False, "showScoreboard": False, "showFloodlights": False,
        })
        scene = generate_stadium(StadiumScene(), params)
        self.assertEqual(scene.live_count(), 0)


if __name__ == '__main__':
    unittest.main()
