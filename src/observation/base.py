"""
ObservationSource interface for pluggable video/image sources.

This defines the contract that all observation sources must implement,
enabling the frame loop to work with any video source:
- USB cameras
- Video files
- Image sequences
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Base configuration for observation sources.

    Attributes:
        source_id: Unique identifier for this source (e.g., "cam-01", "dataset").
        resolution: Requested resolution as (width, height). None = use source default.
        fps: Target frames per second. None = use source default.
        metadata: Additional source-specific configuration.
    """
    source_id: str = "default"
    resolution: Optional[tuple[int, int]] = None
    fps: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class ObservationSource(ABC):
    """
    Abstract base class for observation sources.

    Lifecycle:
        1. Create instance with config
        2. Call open() to initialize the source
        3. Call read() repeatedly; it returns False once no further frame can be produced
        4. After a successful read(), is_updated() tells whether the frame is new
           and get_frame() returns it
        5. Call close() to release resources

    Can also be used as a context manager:
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0
        self._current: Optional[FrameData] = None
        self._updated = False

    @property
    def source_id(self) -> str:
        """Unique identifier for this source."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the source is currently open and ready to read."""
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Index of the newest frame delivered since open (0 before the first one)."""
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Open/initialize the observation source.

        Must be called before read().

        Raises:
            ResourceOpenError: If the source cannot be opened.
        """
        pass

    @abstractmethod
    def read(self) -> bool:
        """
        Advance the source.

        Returns:
            True if a frame is available through get_frame(), False when the
            source is exhausted or failed for good.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close/release the observation source.

        Safe to call multiple times.
        """
        pass

    def is_updated(self) -> bool:
        """True iff the last read() produced a frame not seen before."""
        return self._updated

    def get_frame(self) -> FrameData:
        """Return the current frame."""
        if self._current is None:
            raise RuntimeError("No frame available; call read() first")
        return self._current

    def _deliver(self, frame_data: FrameData, updated: bool = True) -> bool:
        self._current = frame_data
        self._updated = updated
        return True

    def __enter__(self) -> "ObservationSource":
        """Context manager entry - opens the source."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the source."""
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        """
        Iterate over updated frames from the source.

        Stale re-deliveries are skipped. The source must be open before iterating.
        """
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while self.read():
            if self.is_updated():
                yield self.get_frame()
