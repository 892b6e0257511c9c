"""
Error categories surfaced to callers.

Every failure of a run is reported as exactly one of these:
- UsageError: bad arguments, detected before any resource is opened
- ResourceOpenError: the model or the video source could not be loaded/opened
- RuntimeProcessingError: the detector or renderer failed during the loop
"""

from __future__ import annotations

from typing import Optional


class LandmarkError(Exception):
    """Base class for all categorized failures."""

    category = "error"


class UsageError(LandmarkError):
    category = "usage"


class ResourceOpenError(LandmarkError):
    category = "resource"


class RuntimeProcessingError(LandmarkError):
    """
    Raised when the detector or renderer fails inside the frame loop.

    Attributes:
        frames_accepted: Number of frames appended to the sequence before the failure.
        frame_index: Source frame index being processed when the failure happened.
    """

    category = "runtime"

    def __init__(self, message: str, frames_accepted: int = 0, frame_index: Optional[int] = None):
        super().__init__(message)
        self.frames_accepted = frames_accepted
        self.frame_index = frame_index
