import math

import cv2
import numpy as np

from utils.data_structures import GlyphMask, RotatedStamp

# cos(pi / 2) is not exactly 0; keep float noise from adding a pixel row
_EXTENT_EPS = 1e-6


def rotated_bounding_box(width, height, angle):
    """Size of a ``width`` x ``height`` rectangle after rotating it by ``angle`` radians."""
    cos_a = abs(math.cos(angle))
    sin_a = abs(math.sin(angle))
    new_width = math.ceil(width * cos_a + height * sin_a - _EXTENT_EPS)
    new_height = math.ceil(width * sin_a + height * cos_a - _EXTENT_EPS)
    return max(1, new_width), max(1, new_height)


def rotate_mask(mask: GlyphMask, angle: float) -> RotatedStamp:
    """
    Rotate the coverage buffer of ``mask`` about its center.

    The output is sized to the rotated bounding box; samples that fall outside
    the source get zero coverage. Positive angles rotate counter-clockwise on
    screen.
    """
    if angle == 0:
        return RotatedStamp(mask.coverage, 0.0)

    h, w = mask.coverage.shape
    new_w, new_h = rotated_bounding_box(w, h, angle)
    center = ((w - 1) / 2.0, (h - 1) / 2.0)

    M = cv2.getRotationMatrix2D(center, math.degrees(angle), 1.0)
    # Move the source center onto the center of the enlarged output
    M[0, 2] += (new_w - 1) / 2.0 - center[0]
    M[1, 2] += (new_h - 1) / 2.0 - center[1]

    rotated = cv2.warpAffine(
        np.ascontiguousarray(mask.coverage).copy(),
        M,
        (new_w, new_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )
    return RotatedStamp(rotated, angle)
