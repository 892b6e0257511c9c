"""
Observation layer for pluggable video/image sources.

This layer abstracts the source of frames (camera, video file, image
directory) from the frame loop. Each source implements the
ObservationSource interface and exposes frames as FrameData objects.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig
from .image_sequence import ImageSequenceSource, ImageSequenceConfig
from .factory import create_source

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "ImageSequenceSource",
    "ImageSequenceConfig",
    "create_source",
]
