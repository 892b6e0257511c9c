"""
Landmark detector interface.

A detector is stateful: every add_frame() call appends one FrameResult to
the detector's own sequence and returns it. The sequence is read back once
with get_sequence() after the frame loop ends.

Backends only implement detect_faces() on a (possibly rescaled) image;
mapping coordinates back to the original frame is handled here.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import cv2
import numpy as np

from models.landmarks import FaceResult, FrameResult


class LandmarkDetector:
    """
    Detector interface returning landmarks and boxes in pixel-space.

    Args:
        frame_scale: Frames are resized by this factor before detection.
            0 and 1 both mean "detect on the original frame".
    """

    def __init__(self, frame_scale: float = 1.0):
        if frame_scale < 0:
            raise ValueError(f"frame_scale must be non-negative, got {frame_scale}")
        self.frame_scale = float(frame_scale)
        self._sequence: List[FrameResult] = []

    def detect_faces(self, image: np.ndarray) -> List[FaceResult]:
        """Detect faces on `image`; coordinates local to `image`."""
        raise NotImplementedError

    def add_frame(self, frame: np.ndarray) -> FrameResult:
        """Detect faces on a frame, append the result to the sequence and return it."""
        height, width = frame.shape[:2]
        scale = self.frame_scale

        if scale in (0.0, 1.0):
            faces = self.detect_faces(frame)
        else:
            scaled = cv2.resize(frame, None, fx=scale, fy=scale, interpolation=cv2.INTER_LINEAR)
            faces = [
                rescale_face(face, 1.0 / scale)
                for face in self.detect_faces(scaled)
            ]

        result = FrameResult(width=width, height=height, faces=tuple(faces))
        self._sequence.append(result)
        return result

    def get_sequence(self) -> Sequence[FrameResult]:
        """Return the accumulated sequence (read-only view)."""
        return tuple(self._sequence)

    def clear(self) -> None:
        """Drop the accumulated sequence."""
        self._sequence = []

    def __len__(self) -> int:
        return len(self._sequence)


def _scaled(v: float, factor: float) -> int:
    return int(round(v * factor))


def rescale_face(face: FaceResult, factor: float) -> FaceResult:
    """
    Map a face detected on a resized image back to the original frame.

    Positions and sizes are scaled and rounded. Nothing is clipped to the
    frame, matching what an unscaled detection reports near the edge.
    """
    landmarks: Tuple[Tuple[int, int], ...] = tuple(
        (_scaled(x, factor), _scaled(y, factor)) for x, y in face.landmarks
    )
    x, y, w, h = face.bbox
    bbox = (
        _scaled(x, factor),
        _scaled(y, factor),
        _scaled(w, factor),
        _scaled(h, factor),
    )
    return FaceResult(landmarks=landmarks, bbox=bbox)
