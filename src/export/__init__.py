"""
Export of accumulated detection results in 1-based coordinates.
"""

from .exporter import (
    COORDINATE_OFFSET,
    ExportedFace,
    ExportedFrame,
    export_face,
    export_frame,
    export_sequence,
)
from .schema import FaceRecord, FrameRecord, ResultsDocument
from .writer import build_document, write_results

__all__ = [
    "COORDINATE_OFFSET",
    "ExportedFace",
    "ExportedFrame",
    "export_face",
    "export_frame",
    "export_sequence",
    "FaceRecord",
    "FrameRecord",
    "ResultsDocument",
    "build_document",
    "write_results",
]
