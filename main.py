from __future__ import annotations

import argparse
import json
import logging
import sys

from components.image_processing.batch_watermark import BatchWatermarker
from utils.errors import CollaboratorError, ValidationError
from utils.json_handler import config_from_dict, json_template_generator, pars_config
from utils.utils import parse_color

logging.basicConfig(level=logging.INFO, format='%(levelname)s:%(message)s')
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IMAGE_FAILED = 1
EXIT_INVALID_CONFIG = 2
EXIT_FONT_FAILED = 3
TEMPLATE_COMMAND = 'template'


def watermark_images(config):
    try:
        watermarker = BatchWatermarker(config)
    except CollaboratorError as e:
        logger.error(f"Cannot render watermark text: {e}")
        return EXIT_FONT_FAILED

    result = watermarker.run()
    if not result.written and not result.failed:
        logger.info('No valid images to process.')
    return EXIT_OK if result.ok else EXIT_IMAGE_FAILED


def arg_paser(argv=None):
    parser = argparse.ArgumentParser(
        description='Cover images with a repeating, rotated text watermark.',
        epilog=f"Run '%(prog)s {TEMPLATE_COMMAND} --output config.json' to write a config template.",
    )
    parser.add_argument('-t', '--text', action='append', help='Watermark text; repeat to stack several lines')
    parser.add_argument('-f', '--font', dest='font_path', help='Path to a TrueType/OpenType font')
    parser.add_argument('-s', '--font-size', type=float, help='Font size in pixels')
    parser.add_argument('-i', '--input', dest='image_path', help='Image file or folder with images')
    parser.add_argument('-o', '--output', dest='output_dir', help='Output folder path')
    parser.add_argument('--suffix', dest='output_suffix', help='Appended to output file names')
    parser.add_argument('-r', '--rotate', dest='angle', type=float, help='Rotation as a divisor of pi (-6 is -30 degrees)')
    parser.add_argument('-c', '--color', type=parse_color, help="Watermark color as 'R,G,B,A'")
    parser.add_argument('-m', '--margin', type=int, help='Gap between stamps in pixels')
    parser.add_argument('-a', '--alpha', type=int, help='Skip tiles whose mean background alpha is at or below this')
    parser.add_argument('--attenuate', action='store_true', default=None, help='Fade stamps over partly transparent background')
    parser.add_argument('-w', '--workers', type=int, help='Number of images processed in parallel')
    parser.add_argument('--debug-dir', help='Save the raw and rotated watermark masks here')
    parser.add_argument('--config', dest='config_path', help='JSON config file; command line flags override it')
    return parser.parse_args(argv)


def build_config(args):
    overrides = {
        key: value
        for key, value in vars(args).items()
        if key != 'config_path' and value is not None
    }
    if 'text' in overrides:
        overrides['text'] = '\n'.join(overrides['text'])

    if args.config_path:
        return pars_config(args.config_path, **overrides)
    return config_from_dict({}, **overrides)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    if argv and argv[0] == TEMPLATE_COMMAND:
        json_template_generator(argv[1:])
        return EXIT_OK

    args = arg_paser(argv)
    try:
        config = build_config(args)
    except (ValidationError, FileNotFoundError, json.JSONDecodeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_INVALID_CONFIG

    return watermark_images(config)


if __name__ == '__main__':
    sys.exit(main())
