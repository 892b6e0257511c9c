"""
Face landmark detection module.

This module turns video frames into per-frame face/landmark results and
keeps the ordered sequence of results for one run.
"""

from .base import LandmarkDetector, rescale_face
from .yunet_detector import YuNetConfig, YuNetLandmarkDetector
from .factory import create_detector

__all__ = [
    'LandmarkDetector',
    'rescale_face',
    'YuNetConfig',
    'YuNetLandmarkDetector',
    'create_detector',
]
