import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from components.image_processing.text_rasterizer import rasterize
from components.watermark_processing.compositor import Compositor
from components.watermark_processing.rotated_stamp import rotate_mask
from components.watermark_processing.tile_planner import TilePlanner
from components.watermark_processing.transparency_gate import TransparencyGate
from utils.data_structures import GateDecision, GlyphMask, RotatedStamp, TileGrid, WatermarkConfig


class WatermarkEngine:
    """
    Stamps a rotated watermark across whole canvases.

    The stamp is built once from the config (or handed in) and is shared
    read-only, so one engine can serve any number of images concurrently.
    Tile grids are cached per canvas size.
    """

    def __init__(self, config: WatermarkConfig, stamp: RotatedStamp = None, tile_workers=1, rasterizer=rasterize):
        self.logger = logging.getLogger(__name__)
        self.config = config
        if stamp is None:
            mask = rasterizer(config.text, config.font_path, config.font_size)
            stamp = rotate_mask(mask, config.rotation)
        self.stamp = stamp
        self.tile_workers = max(1, int(tile_workers))
        self.planner = TilePlanner()
        self.gate = TransparencyGate(config.alpha, attenuate=config.attenuate)
        self.compositor = Compositor()
        self.grid_cache = {}  # {(width, height): TileGrid}

    def grid_for(self, width, height) -> TileGrid:
        key = (width, height)
        grid = self.grid_cache.get(key)
        if grid is None:
            grid = self.planner.plan(width, height, self.stamp.width, self.stamp.height, self.config.margin)
            grid = self.grid_cache.setdefault(key, grid)
        return grid

    def _apply_tile(self, canvas, point):
        decision, strength = self.gate.evaluate(canvas, point, self.stamp.width, self.stamp.height)
        if decision == GateDecision.SKIP:
            return decision
        self.compositor.blend(canvas, self.stamp, point, self.config.color, strength)
        return decision

    def apply(self, canvas):
        """Watermark ``canvas`` (H x W x 4 uint8 RGBA) in place and return it."""
        if canvas.ndim != 3 or canvas.shape[2] != 4 or canvas.dtype != np.uint8:
            raise ValueError(f"Canvas must be an HxWx4 uint8 array, got {canvas.shape} {canvas.dtype}")

        height, width = canvas.shape[:2]
        grid = self.grid_for(width, height)

        # Planned stamp boxes are disjoint (margin >= 0), so tiles never write the same pixel
        if self.tile_workers > 1:
            with ThreadPoolExecutor(max_workers=self.tile_workers) as executor:
                decisions = list(executor.map(lambda p: self._apply_tile(canvas, p), grid))
        else:
            decisions = [self._apply_tile(canvas, point) for point in grid]

        self.logger.debug(
            f"{width}x{height}: {len(grid)} tiles, "
            f"{decisions.count(GateDecision.RENDER)} rendered, "
            f"{decisions.count(GateDecision.ATTENUATE)} attenuated, "
            f"{decisions.count(GateDecision.SKIP)} skipped"
        )
        return canvas


def apply_watermark(canvas, stamp, config: WatermarkConfig, tile_workers=1):
    """
    Watermark one canvas.

    ``stamp`` is either a prebuilt RotatedStamp or a GlyphMask, which is then
    rotated by the config's effective angle.
    """
    if isinstance(stamp, GlyphMask):
        stamp = rotate_mask(stamp, config.rotation)
    elif not isinstance(stamp, RotatedStamp):
        raise TypeError(f"Expected RotatedStamp or GlyphMask, got {type(stamp).__name__}")
    return WatermarkEngine(config, stamp=stamp, tile_workers=tile_workers).apply(canvas)
