"""
Typed models for the face landmark extractor.
"""

from .frame import FrameData
from .landmarks import FaceResult, FrameResult, total_faces
from .source_spec import DatasetSpec, LiveDeviceSpec, SourceSpec
from .config import (
    Config,
    DetectorConfig,
    SourceConfig,
    PreviewConfig,
    OutputConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection results
    "FaceResult",
    "FrameResult",
    "total_faces",
    # Sources
    "DatasetSpec",
    "LiveDeviceSpec",
    "SourceSpec",
    # Config
    "Config",
    "DetectorConfig",
    "SourceConfig",
    "PreviewConfig",
    "OutputConfig",
]
