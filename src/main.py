"""
Command-line entry point for face landmark extraction.

Runs the landmark detector over a video file, an image directory or a
live capture device and writes the per-frame results (1-based pixel
coordinates) to JSON or YAML.

Usage:
    python src/main.py MODEL SOURCE [--scale 0.5] [--no-preview] [--output results.json]
    python src/main.py MODEL 0 --width 1280 --height 720

Arguments:
    MODEL: Path to the landmarks model file
    SOURCE: Video file, image directory, image pattern, or a device index
    --config: Path to configuration file
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import yaml

from binding.host import parse_arguments, run_extraction
from export.writer import build_document, write_results
from models.config import Config
from ops.errors import LandmarkError, UsageError
from ops.logging import setup_logging

EXIT_USAGE = 2
EXIT_FAILURE = 1

# Exit code per LandmarkError.category
EXIT_CODES = {
    "usage": EXIT_USAGE,
    "resource": EXIT_FAILURE,
    "runtime": EXIT_FAILURE,
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except (OSError, yaml.YAMLError) as e:
        raise UsageError(f"Failed to load configuration: {e}") from e


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Every section is optional; present values must be well-formed.

    Returns:
        Tuple of (is_valid, error_message)
    """
    detector = config.get('detector', {}) or {}
    backend = detector.get('backend', 'yunet')
    if backend not in ('yunet',):
        return False, "detector.backend must be one of: yunet"
    for key in ('score_threshold', 'nms_threshold'):
        if key in detector:
            value = detector[key]
            if not isinstance(value, (int, float)) or not (0 <= value <= 1):
                return False, f"detector.{key} must be between 0 and 1"
    if 'top_k' in detector:
        if not isinstance(detector['top_k'], int) or detector['top_k'] <= 0:
            return False, "detector.top_k must be a positive integer"

    source = config.get('source', {}) or {}
    if 'max_retries' in source:
        if not isinstance(source['max_retries'], int) or source['max_retries'] <= 0:
            return False, "source.max_retries must be a positive integer"
    if 'buffer_size' in source:
        if not isinstance(source['buffer_size'], int) or source['buffer_size'] <= 0:
            return False, "source.buffer_size must be a positive integer"

    preview = config.get('preview', {}) or {}
    if 'window_name' in preview and not isinstance(preview['window_name'], str):
        return False, "preview.window_name must be a string"
    if 'wait_ms' in preview:
        if not isinstance(preview['wait_ms'], int) or preview['wait_ms'] <= 0:
            return False, "preview.wait_ms must be a positive integer"

    if 'log_interval' in config:
        if not isinstance(config['log_interval'], int) or config['log_interval'] < 0:
            return False, "log_interval must be a non-negative integer"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config.get('log_level', 'INFO') not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def build_positional_args(args: argparse.Namespace) -> List[Any]:
    """Map CLI arguments onto the (model, source, ...) positional shapes."""
    if args.source.isdigit():
        positional: List[Any] = [args.model, int(args.source), args.width, args.height]
        if args.scale is not None:
            positional.append(args.scale)
        return positional

    positional = [args.model, args.source, 1.0 if args.scale is None else args.scale]
    positional.append(not args.no_preview)
    return positional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Face landmark extraction over video sequences')
    parser.add_argument('model', type=str,
                        help='Path to the landmarks model file')
    parser.add_argument('source', type=str,
                        help='Video file, image directory, image pattern, or device index')
    parser.add_argument('--scale', type=float, default=None,
                        help='Frame scale applied before detection')
    parser.add_argument('--width', type=int, default=0,
                        help='Requested capture width (live devices only)')
    parser.add_argument('--height', type=int, default=0,
                        help='Requested capture height (live devices only)')
    parser.add_argument('--no-preview', action='store_true',
                        help='Disable the preview window (datasets only)')
    parser.add_argument('--output', type=str, default=None,
                        help='Output file (.json, .yaml or .yml)')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function."""
    args = build_parser().parse_args(argv)

    try:
        raw_config = load_config(args.config)
        is_valid, error_msg = validate_config(raw_config)
        if not is_valid:
            raise UsageError(f"Configuration validation failed: {error_msg}")
        config = Config.from_dict(raw_config)

        setup_logging(config.log_path, config.log_level)
        logging.info("Starting face landmark extraction")

        model_path, spec = parse_arguments(*build_positional_args(args))
        result = run_extraction(model_path, spec, config=config)

        output_path = args.output or config.output.path
        document = build_document(
            result.frames,
            source=args.source,
            model=model_path,
            cancelled=result.stats.cancelled,
        )
        if output_path:
            write_results(output_path, document, indent=config.output.indent)
        else:
            logging.info(f"Processed {document.frame_count} frames (no output path configured)")
    except LandmarkError as e:
        logging.error(f"Error ({e.category}): {e}")
        return EXIT_CODES.get(e.category, EXIT_FAILURE)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return EXIT_FAILURE

    logging.info("Face landmark extraction finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
