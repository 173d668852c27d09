import logging
import math

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from utils.data_structures import LINE_SPACING, GlyphMask
from utils.errors import FontLoadError, GlyphRenderError

logger = logging.getLogger(__name__)


def load_font(font_path, size):
    """Open a TrueType/OpenType font; ``None`` picks Pillow's bundled default font."""
    if font_path is None:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(font_path), size)
    except OSError as e:
        raise FontLoadError(f"Unable to load font {font_path}: {e}") from e


def rasterize(text, font_path, size, spacing=LINE_SPACING) -> GlyphMask:
    """
    Render ``text`` into a coverage mask cropped to its ink bounding box.

    Lines separated by ``\\n`` are stacked and centered, ``spacing`` pixels apart.

    Raises:
        FontLoadError: the font file is missing or unreadable.
        GlyphRenderError: the text cannot be laid out or renders no ink.
    """
    font = load_font(font_path, size)
    probe = ImageDraw.Draw(Image.new('L', (1, 1)))
    try:
        left, top, right, bottom = probe.multiline_textbbox(
            (0, 0), text, font=font, spacing=spacing, align='center'
        )
    except (ValueError, UnicodeError, OSError) as e:
        raise GlyphRenderError(f"Unable to lay out text {text!r}: {e}") from e

    width = math.ceil(right - left)
    height = math.ceil(bottom - top)
    if width <= 0 or height <= 0:
        raise GlyphRenderError(f"Text {text!r} has an empty bounding box")

    canvas = Image.new('L', (width, height), 0)
    draw = ImageDraw.Draw(canvas)
    try:
        draw.multiline_text((-left, -top), text, fill=255, font=font, spacing=spacing, align='center')
    except (ValueError, UnicodeError, OSError) as e:
        raise GlyphRenderError(f"Unable to render text {text!r}: {e}") from e

    coverage = np.array(canvas)
    if not coverage.any():
        raise GlyphRenderError(f"Text {text!r} rendered no visible glyphs")

    logger.debug(f"Rasterized {text!r} at size {size} into {width}x{height} mask")
    return GlyphMask(coverage)
