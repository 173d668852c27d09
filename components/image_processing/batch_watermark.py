import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from tqdm import tqdm

from components.image_processing.image_utils import (
    collect_images,
    decode_image,
    encode_image,
    is_supported,
    output_path_for,
    save_coverage,
)
from components.image_processing.text_rasterizer import rasterize
from components.watermark_processing.rotated_stamp import rotate_mask
from components.watermark_processing.watermark_engine import WatermarkEngine
from utils.data_structures import BatchResult, WatermarkConfig
from utils.errors import CollaboratorError

logging.basicConfig(level=logging.INFO, format='%(levelname)s:%(message)s')


class BatchWatermarker:
    RAW_MASK_NAME = 'watermark_raw.png'
    ROTATED_MASK_NAME = 'watermark_rotated.png'

    def __init__(self, config: WatermarkConfig, engine: WatermarkEngine = None, stop_event=None):
        self.logger = logging.getLogger(__name__)
        self.config = config
        self.stop_event = stop_event or threading.Event()
        if engine is None:
            # Font errors surface here, before any image is opened
            mask = rasterize(config.text, config.font_path, config.font_size)
            stamp = rotate_mask(mask, config.rotation)
            if config.debug_dir is not None:
                self.dump_debug_images(mask, stamp)
            engine = WatermarkEngine(config, stamp=stamp)
        self.engine = engine

    def dump_debug_images(self, mask, stamp):
        save_coverage(mask.coverage, self.config.debug_dir / self.RAW_MASK_NAME)
        save_coverage(stamp.coverage, self.config.debug_dir / self.ROTATED_MASK_NAME)
        self.logger.info(f"Saved glyph mask and rotated stamp to {self.config.debug_dir}")

    def image_paths(self):
        source = self.config.image_path
        if source.is_dir():
            self.logger.info(f"Scanning folder: {source}")
            return collect_images(source)
        if is_supported(source):
            return [source]
        self.logger.warning(f"Skipped unsupported file type: {source}")
        return []

    def stop(self):
        """Images that have not started yet are skipped; running ones finish."""
        self.stop_event.set()

    def process_image(self, image_path):
        canvas = decode_image(image_path)
        self.engine.apply(canvas)
        output_path = output_path_for(image_path, self.config.output_dir, self.config.output_suffix)
        encode_image(canvas, output_path)
        self.logger.info(f"Watermarked image saved to {output_path}")
        return output_path

    def _process_entry(self, image_path):
        if self.stop_event.is_set():
            return image_path, None, None
        try:
            return image_path, self.process_image(image_path), None
        except CollaboratorError as e:
            return image_path, None, e

    def run(self, image_paths=None) -> BatchResult:
        paths = list(image_paths) if image_paths is not None else self.image_paths()
        result = BatchResult()
        if not paths:
            self.logger.info('No images to process.')
            return result

        workers = min(self.config.workers, len(paths))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._process_entry, path) for path in paths]
            for future in tqdm(as_completed(futures), total=len(futures), desc='Watermarking images'):
                image_path, output_path, error = future.result()
                if error is not None:
                    self.logger.error(f"Error processing {image_path}: {error}")
                    result.failed[image_path] = str(error)
                elif output_path is None:
                    result.skipped.append(image_path)
                else:
                    result.written.append(output_path)

        result.written.sort()
        result.skipped.sort()
        self.logger.info(
            f"Done: {len(result.written)} written, {len(result.failed)} failed, {len(result.skipped)} skipped"
        )
        return result
