from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from enum import StrEnum
from numbers import Integral, Real
from pathlib import Path

import numpy as np

from utils.errors import ValidationError


class GateDecision(StrEnum):
    RENDER = 'render'
    SKIP = 'skip'
    ATTENUATE = 'attenuate'


DEFAULT_FONT_PATH = Path('./msyh.ttc')
DEFAULT_IMAGE_PATH = Path('./tests.png')
DEFAULT_OUTPUT_DIR = Path('./output')
DEFAULT_OUTPUT_SUFFIX = '_watermark'
DEFAULT_ANGLE = -6.0
DEFAULT_COLOR = (0, 0, 0, 100)
DEFAULT_MARGIN = 10
DEFAULT_ALPHA = 0
DEFAULT_FONT_SIZE = 24.4
LINE_SPACING = 10
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tif', '.tiff', '.webp'}


def _default_workers() -> int:
    return os.cpu_count() or 1


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class WatermarkConfig:
    """Validated, immutable settings for one watermarking run.

    ``angle`` is a divisor of pi: the stamp is rotated by ``pi / angle`` radians,
    so the default of -6.0 tilts it by -30 degrees. ``alpha`` is the
    transparency threshold used to skip tiles over see-through background.
    """

    text: str
    font_path: Path | None = DEFAULT_FONT_PATH
    image_path: Path = DEFAULT_IMAGE_PATH
    output_dir: Path = DEFAULT_OUTPUT_DIR
    angle: float = DEFAULT_ANGLE
    color: tuple[int, int, int, int] = DEFAULT_COLOR
    margin: int = DEFAULT_MARGIN
    alpha: int = DEFAULT_ALPHA
    font_size: float = DEFAULT_FONT_SIZE
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    workers: int = field(default_factory=_default_workers)
    attenuate: bool = False
    debug_dir: Path | None = None

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValidationError('Watermark text must not be empty')

        if not isinstance(self.angle, Real) or isinstance(self.angle, bool) or not math.isfinite(self.angle):
            raise ValidationError(f"Angle must be a finite number, got {self.angle!r}")
        if self.angle == 0:
            raise ValidationError('Angle must not be 0 (rotation is pi / angle)')

        color = tuple(self.color) if isinstance(self.color, (list, tuple)) else None
        if color is None or len(color) != 4:
            raise ValidationError(f"Color must have 4 channels (R,G,B,A), got {self.color!r}")
        for channel in color:
            if not _is_int(channel) or not 0 <= channel <= 255:
                raise ValidationError(f"Color channel {channel!r} is not an integer between 0 and 255")

        if not _is_int(self.margin) or self.margin < 0:
            raise ValidationError(f"Margin must be a non-negative integer, got {self.margin!r}")
        if not _is_int(self.alpha) or not 0 <= self.alpha <= 255:
            raise ValidationError(f"Alpha threshold must be an integer between 0 and 255, got {self.alpha!r}")
        if (
            not isinstance(self.font_size, Real)
            or isinstance(self.font_size, bool)
            or not math.isfinite(self.font_size)
            or self.font_size <= 0
        ):
            raise ValidationError(f"Font size must be positive, got {self.font_size!r}")
        if not _is_int(self.workers) or self.workers < 1:
            raise ValidationError(f"Workers must be at least 1, got {self.workers!r}")

        for name in ('image_path', 'output_dir', 'font_path', 'debug_dir'):
            value = getattr(self, name)
            if value is None and name in ('font_path', 'debug_dir'):
                continue
            if not isinstance(value, (str, os.PathLike)):
                raise ValidationError(f"{name} must be a path, got {value!r}")
        if not isinstance(self.output_suffix, str):
            raise ValidationError(f"Output suffix must be a string, got {self.output_suffix!r}")

        object.__setattr__(self, 'color', tuple(int(c) for c in color))
        object.__setattr__(self, 'angle', float(self.angle))
        object.__setattr__(self, 'font_size', float(self.font_size))
        object.__setattr__(self, 'image_path', Path(self.image_path))
        object.__setattr__(self, 'output_dir', Path(self.output_dir))
        if self.font_path is not None:
            object.__setattr__(self, 'font_path', Path(self.font_path))
        if self.debug_dir is not None:
            object.__setattr__(self, 'debug_dir', Path(self.debug_dir))

    @property
    def rotation(self) -> float:
        """Effective rotation in radians."""
        return math.pi / self.angle


def _read_only(values, ndim: int, name: str) -> np.ndarray:
    array = np.array(values, dtype=np.uint8, copy=True)
    if array.ndim != ndim:
        raise ValueError(f"{name} must be a {ndim}-D array, got shape {array.shape}")
    if array.size == 0:
        raise ValueError(f"{name} must not be empty")
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class GlyphMask:
    """Rasterized ink coverage (0-255) of the watermark text, rows by columns."""

    coverage: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'coverage', _read_only(self.coverage, 2, 'GlyphMask'))

    @property
    def width(self) -> int:
        return self.coverage.shape[1]

    @property
    def height(self) -> int:
        return self.coverage.shape[0]


@dataclass(frozen=True, eq=False)
class RotatedStamp:
    """A glyph mask rotated by ``angle`` radians, sized to its rotated bounding box."""

    coverage: np.ndarray
    angle: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'coverage', _read_only(self.coverage, 2, 'RotatedStamp'))

    @property
    def width(self) -> int:
        return self.coverage.shape[1]

    @property
    def height(self) -> int:
        return self.coverage.shape[0]

    @property
    def ink(self) -> int:
        return int(self.coverage.sum(dtype=np.int64))


@dataclass(frozen=True)
class TilePoint:
    x: int
    y: int


@dataclass(frozen=True)
class TileGrid:
    points: tuple[TilePoint, ...]
    stamp_width: int
    stamp_height: int
    cell_width: int
    cell_height: int

    def __iter__(self):
        return iter(self.points)

    def __len__(self):
        return len(self.points)

    def footprint(self, point: TilePoint) -> tuple[int, int, int, int]:
        """Cell owned by ``point`` as (left, top, right, bottom), right/bottom exclusive."""
        return point.x, point.y, point.x + self.cell_width, point.y + self.cell_height


@dataclass
class BatchResult:
    written: list[Path] = field(default_factory=list)
    failed: dict[Path, str] = field(default_factory=dict)
    skipped: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
