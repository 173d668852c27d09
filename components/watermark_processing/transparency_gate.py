import numpy as np

from utils.data_structures import GateDecision, TilePoint


def region_mean_alpha(canvas, point: TilePoint, width, height):
    """Mean alpha of the canvas under a ``width`` x ``height`` box, or None when the box misses the canvas."""
    canvas_h, canvas_w = canvas.shape[:2]
    x0, y0 = max(point.x, 0), max(point.y, 0)
    x1, y1 = min(point.x + width, canvas_w), min(point.y + height, canvas_h)
    if x0 >= x1 or y0 >= y1:
        return None
    return float(np.mean(canvas[y0:y1, x0:x1, 3], dtype=np.float64))


class TransparencyGate:
    """Decides per tile whether the background is opaque enough to carry a stamp."""

    def __init__(self, threshold=0, attenuate=False):
        if not 0 <= threshold <= 255:
            raise ValueError(f"Threshold must be between 0 and 255, got {threshold}")
        self.threshold = threshold
        self.attenuate = attenuate

    def evaluate(self, canvas, point: TilePoint, width, height):
        """
        Returns a ``(decision, strength)`` pair.

        Strength is the factor the compositor applies to the tint opacity:
        1.0 for render, mean alpha / 255 for attenuate, 0.0 for skip.
        """
        mean_alpha = region_mean_alpha(canvas, point, width, height)
        if mean_alpha is None or mean_alpha <= self.threshold:
            return GateDecision.SKIP, 0.0
        if self.attenuate and mean_alpha < 255:
            return GateDecision.ATTENUATE, mean_alpha / 255.0
        return GateDecision.RENDER, 1.0

    def classify(self, canvas, point: TilePoint, width, height) -> GateDecision:
        return self.evaluate(canvas, point, width, height)[0]
