import unittest

import numpy as np

from components.watermark_processing.compositor import Compositor
from utils.data_structures import RotatedStamp, TilePoint

WHITE = (255, 255, 255, 255)


def white_canvas(height, width):
    return np.full((height, width, 4), 255, dtype=np.uint8)


class TestCompositor(unittest.TestCase):
    def test_zero_coverage_is_noop(self):
        rng = np.random.default_rng(3)
        canvas = rng.integers(0, 256, size=(12, 12, 4), dtype=np.uint8)
        before = canvas.copy()
        stamp = RotatedStamp(np.zeros((6, 8), dtype=np.uint8))

        self.assertTrue(Compositor.blend(canvas, stamp, TilePoint(3, 2), (0, 0, 0, 255)))
        np.testing.assert_array_equal(canvas, before)

    def test_blend_formula(self):
        canvas = white_canvas(4, 4)
        stamp = RotatedStamp(np.full((2, 2), 255, dtype=np.uint8))

        Compositor.blend(canvas, stamp, TilePoint(1, 1), (0, 0, 0, 100))

        # a = 100 / 255: 255 * (1 - a) = 155, opaque background stays opaque
        np.testing.assert_array_equal(canvas[1, 1], [155, 155, 155, 255])
        np.testing.assert_array_equal(canvas[0, 0], WHITE)
        np.testing.assert_array_equal(canvas[3, 3], WHITE)
        self.assertTrue((canvas[..., 3] == 255).all())

    def test_alpha_is_raised_over_transparent_background(self):
        canvas = np.zeros((1, 2, 4), dtype=np.uint8)
        canvas[0, 1, 3] = 100
        stamp = RotatedStamp(np.full((1, 2), 255, dtype=np.uint8))

        Compositor.blend(canvas, stamp, TilePoint(0, 0), (50, 100, 150, 102))

        # a = 0.4: rgb = tint * a, alpha = dst_a + a * (255 - dst_a)
        np.testing.assert_array_equal(canvas[0, 0], [20, 40, 60, 102])
        np.testing.assert_array_equal(canvas[0, 1], [20, 40, 60, 162])

    def test_coverage_scales_opacity(self):
        canvas = white_canvas(1, 2)
        stamp = RotatedStamp(np.array([[255, 51]], dtype=np.uint8))

        Compositor.blend(canvas, stamp, TilePoint(0, 0), (0, 0, 0, 255))

        np.testing.assert_array_equal(canvas[0, 0], [0, 0, 0, 255])
        np.testing.assert_array_equal(canvas[0, 1], [204, 204, 204, 255])

    def test_strength_scales_opacity(self):
        full = white_canvas(1, 1)
        half = white_canvas(1, 1)
        stamp = RotatedStamp(np.full((1, 1), 255, dtype=np.uint8))

        Compositor.blend(full, stamp, TilePoint(0, 0), (0, 0, 0, 255))
        Compositor.blend(half, stamp, TilePoint(0, 0), (0, 0, 0, 255), strength=0.5)

        self.assertEqual(full[0, 0, 0], 0)
        self.assertEqual(half[0, 0, 0], 128)

    def test_stamp_is_clipped_at_edges(self):
        canvas = white_canvas(4, 4)
        stamp = RotatedStamp(np.full((5, 5), 255, dtype=np.uint8))

        self.assertTrue(Compositor.blend(canvas, stamp, TilePoint(-2, -2), (0, 0, 0, 255)))

        self.assertTrue((canvas[:3, :3, :3] == 0).all())
        np.testing.assert_array_equal(canvas[3, 3], WHITE)
        np.testing.assert_array_equal(canvas[0, 3], WHITE)

    def test_stamp_outside_canvas(self):
        canvas = white_canvas(4, 4)
        stamp = RotatedStamp(np.full((3, 3), 255, dtype=np.uint8))

        for origin in [TilePoint(4, 0), TilePoint(0, 4), TilePoint(-3, 0), TilePoint(-5, -5)]:
            self.assertFalse(Compositor.blend(canvas, stamp, origin, (0, 0, 0, 255)))
        np.testing.assert_array_equal(canvas, white_canvas(4, 4))
