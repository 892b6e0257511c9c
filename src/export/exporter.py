"""
Result exporter.

Turns the detector's sequence into caller-facing records. Exported
coordinates are 1-based: every landmark and the box origin are shifted by
+1; box width and height are unchanged. The shift is applied here and
nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from models.landmarks import BBox, FaceResult, FrameResult, Point

COORDINATE_OFFSET = 1


@dataclass(frozen=True)
class ExportedFace:
    """A face in 1-based pixel coordinates."""
    landmarks: Tuple[Point, ...]
    bbox: BBox


@dataclass(frozen=True)
class ExportedFrame:
    """
    One exported record per accepted frame.

    `faces` is empty for frames without detections; to_dict() omits it.
    """
    width: int
    height: int
    faces: Tuple[ExportedFace, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, object]:
        d: Dict[str, object] = {"width": self.width, "height": self.height}
        if self.faces:
            d["faces"] = [
                {
                    "landmarks": [list(p) for p in face.landmarks],
                    "bbox": list(face.bbox),
                }
                for face in self.faces
            ]
        return d


def export_face(face: FaceResult) -> ExportedFace:
    x, y, w, h = face.bbox
    return ExportedFace(
        landmarks=tuple((px + COORDINATE_OFFSET, py + COORDINATE_OFFSET) for px, py in face.landmarks),
        bbox=(x + COORDINATE_OFFSET, y + COORDINATE_OFFSET, w, h),
    )


def export_frame(frame: FrameResult) -> ExportedFrame:
    return ExportedFrame(
        width=frame.width,
        height=frame.height,
        faces=tuple(export_face(face) for face in frame.faces),
    )


def export_sequence(sequence: Iterable[FrameResult]) -> List[ExportedFrame]:
    """Export a sequence in order, one record per frame result."""
    return [export_frame(frame) for frame in sequence]
