import logging

from utils.data_structures import TileGrid, TilePoint


class TilePlanner:
    """
    Lays out stamp origins on a regular grid centered on the canvas.

    One tile sits in the middle of the canvas at ``((W - w) // 2, (H - h) // 2)``;
    the rest follow every ``w + margin`` / ``h + margin`` pixels and run one
    full cell past each canvas edge so that border-straddling stamps are
    still planned. An axis whose canvas extent is not larger than the margin
    collapses to the centered position only.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def axis_positions(extent, stamp, margin):
        center = (extent - stamp) // 2
        if margin >= extent:
            return [center]

        step = stamp + margin
        # first cell ends at or before 0, last cell starts at or after extent
        first = (-stamp - center) // step
        last = -((center - extent) // step)
        return [center + k * step for k in range(first, last + 1)]

    def plan(self, canvas_width, canvas_height, stamp_width, stamp_height, margin) -> TileGrid:
        if stamp_width < 1 or stamp_height < 1:
            raise ValueError(f"Stamp must be at least 1x1, got {stamp_width}x{stamp_height}")
        if margin < 0:
            raise ValueError(f"Margin must be non-negative, got {margin}")

        xs = self.axis_positions(canvas_width, stamp_width, margin)
        ys = self.axis_positions(canvas_height, stamp_height, margin)
        points = tuple(TilePoint(x, y) for y in ys for x in xs)

        self.logger.debug(
            f"Planned {len(xs)}x{len(ys)} tiles for {canvas_width}x{canvas_height} canvas "
            f"(stamp {stamp_width}x{stamp_height}, margin {margin})"
        )
        return TileGrid(
            points=points,
            stamp_width=stamp_width,
            stamp_height=stamp_height,
            cell_width=stamp_width + margin,
            cell_height=stamp_height + margin,
        )
