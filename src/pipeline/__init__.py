"""
Pipeline module for face landmark extraction.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources
- Landmark detection (results accumulate in the detector)
- Optional annotated preview with cancel-on-keypress
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats, EngineState, CANCEL_HINT
from .counter import PreviewCounter

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
    "EngineState",
    "CANCEL_HINT",
    "PreviewCounter",
]
