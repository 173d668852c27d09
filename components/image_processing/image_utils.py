import logging
import os
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps

from utils.data_structures import IMAGE_EXTENSIONS
from utils.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

JPEG_EXTENSIONS = {'.jpg', '.jpeg'}


def is_supported(path):
    return os.path.splitext(str(path))[1].lower() in IMAGE_EXTENSIONS


def collect_images(folder):
    """Supported image files directly inside ``folder``, sorted by name."""
    images = []
    for name in sorted(os.listdir(folder)):
        full_path = Path(folder) / name
        if not full_path.is_file():
            continue
        if is_supported(name):
            images.append(full_path)
        else:
            logger.warning(f"Skipped unsupported file type: {name}")
    return images


def output_path_for(src, output_dir, suffix):
    src = Path(src)
    return Path(output_dir) / f"{src.stem}{suffix}{src.suffix}"


def decode_image(image_path):
    """Load an image as an H x W x 4 uint8 RGBA array, honoring EXIF orientation."""
    try:
        with Image.open(image_path) as base:
            base = ImageOps.exif_transpose(base).convert('RGBA')
            return np.array(base)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Unable to load image {image_path}: {e}") from e


def encode_image(canvas, output_path):
    """Save an RGBA canvas; JPEG targets are flattened to RGB."""
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image = Image.fromarray(np.ascontiguousarray(canvas))
        if output_path.suffix.lower() in JPEG_EXTENSIONS:
            image = image.convert('RGB')
        image.save(output_path)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Unable to save image {output_path}: {e}") from e


def save_coverage(coverage, output_path):
    """Dump a 2-D coverage buffer as a grayscale PNG for inspection."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(coverage)).save(output_path)
