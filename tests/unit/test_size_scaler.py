import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tokenmold.domain.models.token import SceneGrid
from tokenmold.domain.services.size_scaler import Footprint, compute_footprint, grid_uses_feet, size_multiplier


class SizeScalerTests(unittest.TestCase):
    def test_large_creature_on_five_foot_grid(self) -> None:
        self.assertEqual(Footprint(width=2, height=2, scale=1.0), compute_footprint("lg", SceneGrid(units="ft", distance=5)))

    def test_large_creature_on_ten_foot_grid_takes_one_square(self) -> None:
        self.assertEqual(Footprint(width=1, height=1, scale=1.0), compute_footprint("lg", SceneGrid(units="ft", distance=10)))

    def test_tiny_creature_shrinks_visually(self) -> None:
        self.assertEqual(Footprint(width=1, height=1, scale=0.5), compute_footprint("tiny", SceneGrid()))

    def test_visual_scale_has_a_floor(self) -> None:
        footprint = compute_footprint("tiny", SceneGrid(units="feet", distance=30))
        self.assertEqual(0.2, footprint.scale)

    def test_huge_creature_on_ten_foot_grid_scales_the_remainder(self) -> None:
        footprint = compute_footprint("huge", SceneGrid(units="ft.", distance=10))
        self.assertEqual((1, 1), (footprint.width, footprint.height))
        self.assertAlmostEqual(1.5, footprint.scale)

    def test_non_feet_units_are_not_normalized(self) -> None:
        self.assertEqual(2.0, size_multiplier("lg", SceneGrid(units="m", distance=1.5)))

    def test_gridless_scene_is_not_normalized(self) -> None:
        gridless = SceneGrid(type=0, units="ft", distance=10)
        self.assertFalse(grid_uses_feet(gridless))
        self.assertEqual(Footprint(width=2, height=2, scale=1.0), compute_footprint("lg", gridless))

    def test_unknown_size_leaves_token_alone(self) -> None:
        self.assertIsNone(compute_footprint("colossal", SceneGrid()))
        self.assertIsNone(compute_footprint(None, SceneGrid()))

    def test_changes_use_texture_scale_keys(self) -> None:
        changes = Footprint(width=3, height=3, scale=1.0).as_changes()
        self.assertEqual({"width": 3, "height": 3, "texture.scaleX": 1.0, "texture.scaleY": 1.0}, changes)


if __name__ == "__main__":
    unittest.main()
