"""
Build a landmark detector from the model path and the `detector` config section.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from ops.errors import ResourceOpenError, UsageError
from .base import LandmarkDetector
from .yunet_detector import YuNetConfig, YuNetLandmarkDetector


def create_detector(
    model_path: str,
    frame_scale: float = 1.0,
    detector_cfg: Optional[Dict[str, Any]] = None,
) -> LandmarkDetector:
    """
    Args:
        model_path: Path to the landmarks model file.
        frame_scale: Resize factor applied to frames before detection.
        detector_cfg: Optional `detector` config section.

    Raises:
        UsageError: Unknown backend.
        ResourceOpenError: The model cannot be loaded.
    """
    detector_cfg = detector_cfg or {}
    backend = detector_cfg.get("backend", "yunet")

    if backend != "yunet":
        raise UsageError(f"Unknown detector backend: {backend}")
    if not model_path:
        raise ResourceOpenError("No landmarks model specified!")

    return YuNetLandmarkDetector(
        YuNetConfig(
            model=os.fspath(model_path),
            score_threshold=float(detector_cfg.get("score_threshold", 0.6)),
            nms_threshold=float(detector_cfg.get("nms_threshold", 0.3)),
            top_k=int(detector_cfg.get("top_k", 5000)),
        ),
        frame_scale=frame_scale,
    )
