"""
Host binding for face landmark extraction.

Callers pass positional arguments in one of two shapes:

    find_face_landmarks(model, path[, scale][, preview])                  # dataset
    find_face_landmarks(model, device_id[, width][, height][, scale])     # live device

The shape of the second argument picks the source kind once, here; the
rest of the system only sees the resolved SourceSpec.

Error policy: a run that fails with RuntimeProcessingError returns no
results. Frames accepted before the failure remain available from the
detector when the caller drives run_extraction() with its own detector.
"""

from __future__ import annotations

import logging
import math
import numbers
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from detection.base import LandmarkDetector
from detection.factory import create_detector
from export.exporter import ExportedFrame, export_sequence
from models.config import Config
from models.source_spec import DatasetSpec, LiveDeviceSpec, SourceSpec
from observation.base import ObservationSource
from observation.factory import create_source
from ops.errors import UsageError
from pipeline.engine import PipelineConfig, PipelineEngine, PipelineStats
from rendering.renderer import OpenCVRenderer, Renderer

MAX_DATASET_ARGS = 4
MAX_LIVE_ARGS = 5


def _is_path_like(value: Any) -> bool:
    return isinstance(value, (str, os.PathLike))


def _is_numeric(value: Any) -> bool:
    # bool is an int subclass but never a device id
    if not isinstance(value, numbers.Real) or isinstance(value, (bool, np.bool_)):
        return False
    return math.isfinite(value)


def _as_float(value: Any, name: str) -> float:
    if not _is_numeric(value):
        raise UsageError(f"{name} must be a number!")
    return float(value)


def _as_int(value: Any, name: str) -> int:
    if not _is_numeric(value):
        raise UsageError(f"{name} must be an integer!")
    return int(value)


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if _is_numeric(value):
        return value != 0
    raise UsageError(f"{name} must be a boolean!")


def parse_arguments(*args: Any) -> Tuple[str, SourceSpec]:
    """
    Resolve positional arguments into (model_path, SourceSpec).

    Raises:
        UsageError: Missing/extra arguments or an unrecognized second argument.
    """
    if len(args) == 0:
        raise UsageError("No parameters specified!")
    if len(args) < 2:
        raise UsageError("Invalid number of parameters!")

    if not _is_path_like(args[0]):
        raise UsageError("modelFile must be a string containing the path to the model file!")
    model_path = os.fspath(args[0])

    source = args[1]
    if _is_path_like(source):
        if len(args) > MAX_DATASET_ARGS:
            raise UsageError("Invalid number of parameters!")
        spec: SourceSpec = DatasetSpec(
            path=os.fspath(source),
            scale=_as_float(args[2], "scale") if len(args) > 2 else 1.0,
            preview=_as_bool(args[3], "preview") if len(args) > 3 else True,
        )
    elif _is_numeric(source):
        if len(args) > MAX_LIVE_ARGS:
            raise UsageError("Invalid number of parameters!")
        spec = LiveDeviceSpec(
            device_id=int(source),
            width=_as_int(args[2], "width") if len(args) > 2 else 0,
            height=_as_int(args[3], "height") if len(args) > 3 else 0,
            scale=_as_float(args[4], "scale") if len(args) > 4 else 1.0,
        )
    else:
        raise UsageError("Second parameter must be either a sequence path or a device id!")

    return model_path, spec


@dataclass
class RunResult:
    """Outcome of one successful run."""
    frames: List[ExportedFrame]
    stats: PipelineStats
    spec: SourceSpec


def run_extraction(
    model_path: str,
    spec: SourceSpec,
    config: Optional[Config] = None,
    detector: Optional[LandmarkDetector] = None,
    source: Optional[ObservationSource] = None,
    renderer_factory: Optional[Callable[[], Renderer]] = None,
) -> RunResult:
    """
    Build the collaborators for `spec`, run the frame loop once and export.

    `detector`, `source` and `renderer_factory` override the defaults built
    from `config`.
    """
    config = config or Config()

    if detector is None:
        detector = create_detector(model_path, frame_scale=spec.scale, detector_cfg=config.detector.to_dict())
    if source is None:
        source = create_source(spec, config.source.to_dict())

    renderer: Optional[Renderer] = None
    if spec.preview:
        if renderer_factory is not None:
            renderer = renderer_factory()
        else:
            renderer = OpenCVRenderer(
                window_name=config.preview.window_name,
                wait_ms=config.preview.wait_ms,
            )

    engine = PipelineEngine(
        source,
        detector,
        renderer,
        PipelineConfig(preview=spec.preview, log_interval=config.log_interval),
    )
    stats = engine.run()

    frames = export_sequence(detector.get_sequence())
    logging.info(f"Exported {len(frames)} frames ({spec.kind})")
    return RunResult(frames=frames, stats=stats, spec=spec)


def to_native(frames: List[ExportedFrame]) -> List[Dict[str, Any]]:
    """
    Convert exported frames to plain records.

    Each record has `width` and `height`; `faces` is present only when the
    frame has detections, as a list of {"landmarks": int32 N x 2 array,
    "bbox": int32 array of 4}.
    """
    records: List[Dict[str, Any]] = []
    for frame in frames:
        record: Dict[str, Any] = {"width": int(frame.width), "height": int(frame.height)}
        if frame.faces:
            record["faces"] = [
                {
                    "landmarks": np.array(face.landmarks, dtype=np.int32).reshape(-1, 2),
                    "bbox": np.array(face.bbox, dtype=np.int32),
                }
                for face in frame.faces
            ]
        records.append(record)
    return records


def find_face_landmarks(*args: Any, config: Optional[Config] = None) -> List[Dict[str, Any]]:
    """
    Extract face landmarks from a video file, image sequence or capture device.

    See the module docstring for the accepted argument shapes. Returns one
    record per processed frame, in capture order, with 1-based coordinates.
    """
    model_path, spec = parse_arguments(*args)
    result = run_extraction(model_path, spec, config=config)
    return to_native(result.frames)
