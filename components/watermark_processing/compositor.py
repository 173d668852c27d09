import numpy as np

from utils.data_structures import RotatedStamp, TilePoint


class Compositor:
    @staticmethod
    def blend(canvas, stamp: RotatedStamp, origin: TilePoint, tint, strength=1.0):
        """
        Alpha-blend ``stamp`` tinted with ``tint`` (R,G,B,A) onto ``canvas`` in place.

        Standard "over": each covered pixel gets ``dst * (1 - a) + tint * a``
        on R, G and B, and its alpha becomes ``dst_a + a * (255 - dst_a)``,
        where ``a = coverage / 255 * tint_alpha / 255 * strength``. Opaque
        pixels stay opaque. Parts of the stamp outside the canvas are clipped.
        Returns False when nothing overlaps.
        """
        canvas_h, canvas_w = canvas.shape[:2]
        x0, y0 = max(origin.x, 0), max(origin.y, 0)
        x1 = min(origin.x + stamp.width, canvas_w)
        y1 = min(origin.y + stamp.height, canvas_h)
        if x0 >= x1 or y0 >= y1:
            return False

        coverage = stamp.coverage[y0 - origin.y : y1 - origin.y, x0 - origin.x : x1 - origin.x]
        alpha = coverage.astype(np.float32) * (tint[3] / 255.0 * strength / 255.0)
        alpha = alpha[..., None]

        region = canvas[y0:y1, x0:x1].astype(np.float32)
        color = np.asarray(tint[:3], dtype=np.float32)
        blended = np.empty_like(region)
        blended[..., :3] = region[..., :3] * (1.0 - alpha) + color * alpha
        blended[..., 3] = region[..., 3] + alpha[..., 0] * (255.0 - region[..., 3])
        canvas[y0:y1, x0:x1] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
        return True
