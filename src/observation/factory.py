"""
Build an observation source from a resolved SourceSpec.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from models.source_spec import DatasetSpec, LiveDeviceSpec, SourceSpec
from ops.errors import ResourceOpenError
from .base import ObservationSource
from .image_sequence import ImageSequenceConfig, ImageSequenceSource
from .opencv_source import OpenCVSource, OpenCVSourceConfig


def _is_image_pattern(path: str) -> bool:
    return "%" in os.path.basename(path)


def create_source(spec: Optional[SourceSpec], source_cfg: Optional[Dict[str, Any]] = None) -> ObservationSource:
    """
    Create the observation source for a run.

    Args:
        spec: Resolved source selection.
        source_cfg: Optional `source` config section.

    Raises:
        ResourceOpenError: If no usable source matches the source spec.
    """
    source_cfg = source_cfg or {}

    if isinstance(spec, LiveDeviceSpec):
        resolution = (spec.width, spec.height) if (spec.width or spec.height) else None
        config = OpenCVSourceConfig.from_source_config(
            source_cfg, device_id=spec.device_id, resolution=resolution, source_id=f"device-{spec.device_id}"
        )
        logging.info(f"Using live device {spec.device_id} (requested resolution={resolution})")
        return OpenCVSource(config)

    if isinstance(spec, DatasetSpec):
        path = os.fspath(spec.path)
        if os.path.isdir(path):
            logging.info(f"Using image sequence: {path}")
            return ImageSequenceSource(ImageSequenceConfig(source_id="dataset", directory=path))
        if os.path.isfile(path) or _is_image_pattern(path):
            logging.info(f"Using video: {path}")
            config = OpenCVSourceConfig.from_source_config(source_cfg, device_id=path, source_id="dataset")
            return OpenCVSource(config)
        raise ResourceOpenError(f"No video source specified! (path not found: {path})")

    raise ResourceOpenError("No video source specified!")
