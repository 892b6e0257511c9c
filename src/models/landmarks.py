"""
Per-frame detection results produced by a landmark detector.

All coordinates are 0-based pixel positions local to the frame the
result was computed on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence, Tuple

import numpy as np

Point = Tuple[int, int]
BBox = Tuple[int, int, int, int]


@dataclass(frozen=True)
class FaceResult:
    """
    One detected face.

    Attributes:
        landmarks: Ordered (x, y) keypoints. Count is fixed per model.
        bbox: (x, y, width, height) of the face rectangle.
    """
    landmarks: Tuple[Point, ...]
    bbox: BBox

    @classmethod
    def from_arrays(cls, landmarks: np.ndarray, bbox: Sequence[float]) -> "FaceResult":
        """Build from an N x 2 landmark array and an (x, y, w, h) sequence."""
        pts = np.asarray(landmarks).reshape(-1, 2)
        return cls(
            landmarks=tuple((int(x), int(y)) for x, y in pts),
            bbox=tuple(int(v) for v in bbox[:4]),
        )

    def landmarks_array(self) -> np.ndarray:
        """Return landmarks as an int32 N x 2 array."""
        return np.array(self.landmarks, dtype=np.int32).reshape(-1, 2)


@dataclass(frozen=True)
class FrameResult:
    """
    Detection result for one accepted frame.

    Attributes:
        width: Width of the source frame in pixels.
        height: Height of the source frame in pixels.
        faces: Faces in detector emission order (may be empty).
    """
    width: int
    height: int
    faces: Tuple[FaceResult, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Frame size must be positive, got {self.width}x{self.height}")
        if not isinstance(self.faces, tuple):
            object.__setattr__(self, "faces", tuple(self.faces))

    @property
    def face_count(self) -> int:
        return len(self.faces)


def total_faces(sequence: Iterable[FrameResult]) -> int:
    """Sum of faces over a sequence of frame results."""
    return sum(len(f.faces) for f in sequence)
