import unittest
from unittest.mock import patch

import numpy as np

from components.watermark_processing.transparency_gate import TransparencyGate, region_mean_alpha
from utils.data_structures import GateDecision, TilePoint


def canvas_with_alpha(alpha, size=(20, 20)):
    canvas = np.full((*size, 4), 200, dtype=np.uint8)
    canvas[..., 3] = alpha
    return canvas


class TestTransparencyGate(unittest.TestCase):
    def test_transparent_region_is_skipped(self):
        canvas = canvas_with_alpha(0)
        for threshold in [0, 1, 128, 255]:
            with self.subTest(threshold=threshold):
                gate = TransparencyGate(threshold)
                self.assertEqual(gate.classify(canvas, TilePoint(2, 2), 10, 10), GateDecision.SKIP)

    def test_opaque_region_is_rendered(self):
        canvas = canvas_with_alpha(255)
        for threshold in [0, 100, 254]:
            with self.subTest(threshold=threshold):
                gate = TransparencyGate(threshold)
                self.assertEqual(gate.evaluate(canvas, TilePoint(2, 2), 10, 10), (GateDecision.RENDER, 1.0))

    def test_threshold_is_inclusive(self):
        canvas = canvas_with_alpha(100)
        self.assertEqual(TransparencyGate(100).classify(canvas, TilePoint(0, 0), 5, 5), GateDecision.SKIP)
        self.assertEqual(TransparencyGate(99).classify(canvas, TilePoint(0, 0), 5, 5), GateDecision.RENDER)

    def test_region_is_clipped_to_canvas(self):
        canvas = canvas_with_alpha(0, size=(10, 10))
        canvas[:, 5:, 3] = 255

        self.assertEqual(region_mean_alpha(canvas, TilePoint(5, -3), 10, 10), 255.0)
        self.assertEqual(region_mean_alpha(canvas, TilePoint(0, 0), 10, 10), 127.5)

    @patch('components.watermark_processing.transparency_gate.np.mean')
    def test_region_outside_canvas_is_skipped_without_reading(self, mock_mean):
        canvas = canvas_with_alpha(255)
        gate = TransparencyGate(0)

        for point in [TilePoint(-10, 0), TilePoint(0, -10), TilePoint(20, 0), TilePoint(5, 25)]:
            self.assertEqual(gate.classify(canvas, point, 10, 10), GateDecision.SKIP)
        mock_mean.assert_not_called()

    def test_attenuate_partially_transparent_region(self):
        canvas = canvas_with_alpha(102)

        decision, strength = TransparencyGate(0, attenuate=True).evaluate(canvas, TilePoint(0, 0), 10, 10)
        self.assertEqual(decision, GateDecision.ATTENUATE)
        self.assertAlmostEqual(strength, 0.4)

        self.assertEqual(TransparencyGate(0).classify(canvas, TilePoint(0, 0), 10, 10), GateDecision.RENDER)

    def test_attenuate_keeps_opaque_region_at_full_strength(self):
        gate = TransparencyGate(0, attenuate=True)
        self.assertEqual(gate.evaluate(canvas_with_alpha(255), TilePoint(0, 0), 10, 10), (GateDecision.RENDER, 1.0))

    def test_invalid_threshold(self):
        with self.assertRaises(ValueError):
            TransparencyGate(256)
