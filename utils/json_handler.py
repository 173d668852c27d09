from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, fields
from pathlib import Path

from utils.data_structures import WatermarkConfig
from utils.errors import ValidationError

# Configure logger
logging.basicConfig(level=logging.INFO, format='%(levelname)s:%(message)s')
logger = logging.getLogger(__name__)

TEMPLATE_TEXT = 'WATERMARK'


def pars_config(file_path, **overrides):
    # Load JSON and validate structure
    try:
        config = config_from_json(file_path, **overrides)
        logger.info(f"Loaded JSON file: {file_path}")
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding JSON: {e}")
        raise
    except ValidationError as e:
        logger.error(f"Invalid config {file_path}: {e}")
        raise

    logger.info('JSON structure is valid.')
    return config


def load_json(filepath):
    with open(filepath, encoding='utf-8') as f:
        raw_data = json.load(f)
    return raw_data


def config_from_dict(data: dict, **overrides) -> WatermarkConfig:
    if not isinstance(data, dict):
        raise ValidationError(f"Config must be a JSON object, got {type(data).__name__}")

    known = {f.name for f in fields(WatermarkConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(f"Unsupported config keys: {', '.join(unknown)}")

    values = {**data, **overrides}
    if 'text' not in values:
        raise ValidationError('No watermark text given, use --text or the "text" config key')
    return WatermarkConfig(**values)


def config_from_json(filepath, **overrides) -> WatermarkConfig:
    return config_from_dict(load_json(filepath), **overrides)


def config_to_json(config: WatermarkConfig, filepath: str | Path = ''):
    json_file = {
        **asdict(config),
        'color': list(config.color),
    }
    for key, value in json_file.items():
        if isinstance(value, Path):
            json_file[key] = str(value)

    if filepath != '':
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(json_file, f, indent=4, ensure_ascii=False)
    else:
        return json_file


def json_template_generator(argv=None):
    parser = argparse.ArgumentParser(
        description='Generate a watermark JSON config filled with default values.',
    )
    parser.add_argument(
        '--output',
        required=True,
        type=str,
        help='Path to save the generated JSON config file',
    )
    parser.add_argument(
        '--text',
        default=TEMPLATE_TEXT,
        type=str,
        help='Watermark text to put in the template',
    )
    args = parser.parse_args(argv)

    config = WatermarkConfig(text=args.text)
    config_to_json(config, args.output)
    logger.info(f"Config template saved to {args.output}")
    return config
