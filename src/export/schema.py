"""
Serialized output schema for exported results.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .exporter import ExportedFrame


class FaceRecord(BaseModel):
    landmarks: List[List[int]] = Field(..., description="N x 2 landmark matrix, 1-based (x, y)")
    bbox: List[int] = Field(..., min_length=4, max_length=4, description="1-based (x, y, width, height)")


class FrameRecord(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    faces: Optional[List[FaceRecord]] = Field(None, description="Omitted when no faces were found")

    @classmethod
    def from_exported(cls, frame: ExportedFrame) -> "FrameRecord":
        return cls.model_validate(frame.to_dict())


class ResultsDocument(BaseModel):
    """Top-level document written by the CLI."""
    source: str
    model: str
    frame_count: int
    cancelled: bool = False
    frames: List[FrameRecord]

    def dump(self) -> dict:
        return self.model_dump(exclude_none=True)
