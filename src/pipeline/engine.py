"""
Pipeline engine for face landmark extraction.

This module owns the main processing loop: pull frames from an
observation source, skip stale re-deliveries, run the landmark detector on
every new frame and, when previewing, draw the result and poll the window
for a cancel key. Results are never kept here; they accumulate inside the
detector and are read back after the loop.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from detection.base import LandmarkDetector
from models.frame import FrameData
from models.landmarks import FrameResult
from observation.base import ObservationSource
from ops.errors import LandmarkError, ResourceOpenError, RuntimeProcessingError
from rendering.renderer import FONT_COMPLEX, FONT_SIMPLEX, Renderer
from .counter import PreviewCounter

CANCEL_HINT = "press any key to stop"


class EngineState(enum.Enum):
    INIT = "init"
    RUNNING = "running"
    STOP = "stop"


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        preview: Annotate and show every accepted frame; any key stops the run.
        log_interval: Accepted frames between progress log messages (0 disables).
    """
    preview: bool = True
    log_interval: int = 100


@dataclass
class PipelineStats:
    """Runtime statistics for one run."""
    frames_read: int = 0
    frames_accepted: int = 0
    frames_skipped: int = 0
    cancelled: bool = False
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time


class PipelineEngine:
    """
    Single-pass frame loop over one source and one detector.

    States: INIT -> RUNNING -> STOP. An engine runs exactly once; build a
    new one (with a fresh detector) for another source.

    Example:
        source = create_source(DatasetSpec("clip.mp4"))
        detector = create_detector("face_detection_yunet.onnx")
        engine = PipelineEngine(source, detector, OpenCVRenderer(), PipelineConfig(preview=True))
        engine.run()
        frames = export_sequence(detector.get_sequence())
    """

    def __init__(
        self,
        source: ObservationSource,
        detector: LandmarkDetector,
        renderer: Optional[Renderer] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.source = source
        self.detector = detector
        self.renderer = renderer
        self.config = config or PipelineConfig()
        if self.config.preview and self.renderer is None:
            raise ValueError("A renderer is required when preview is enabled")

        self.counter = PreviewCounter()
        self.stats = PipelineStats()
        self._state = EngineState.INIT

    @property
    def state(self) -> EngineState:
        return self._state

    def run(self) -> PipelineStats:
        """
        Run the main processing loop until the source is exhausted or the
        user cancels from the preview window.

        Raises:
            ResourceOpenError: The source could not be opened.
            RuntimeProcessingError: The detector or renderer failed. Frames
                accepted before the failure stay in the detector.
        """
        if self._state is not EngineState.INIT:
            raise RuntimeError("PipelineEngine can only run once")

        self._state = EngineState.RUNNING
        self.stats = PipelineStats()

        try:
            self._open_source()
            logging.info(
                f"Pipeline started: source={self.source.source_id}, preview={self.config.preview}"
            )

            while self._state is EngineState.RUNNING:
                if not self.source.read():
                    break
                self.stats.frames_read += 1

                if not self.source.is_updated():
                    self.stats.frames_skipped += 1
                    continue

                if self._process_frame(self.source.get_frame()):
                    self.stats.cancelled = True
                    logging.info(
                        f"Pipeline cancelled by user after {self.stats.frames_accepted} frames"
                    )
                    break
        finally:
            self._state = EngineState.STOP
            self._cleanup()

        return self.stats

    def _open_source(self) -> None:
        if self.source.is_open:
            return
        try:
            self.source.open()
        except LandmarkError:
            raise
        except Exception as e:
            raise ResourceOpenError(f"Failed to open video source! ({e})") from e

    def _process_frame(self, frame_data: FrameData) -> bool:
        """
        Accept one frame: detect, then preview if enabled.

        Returns True if the user asked to stop.
        """
        try:
            result = self.detector.add_frame(frame_data.frame)
        except Exception as e:
            raise RuntimeProcessingError(
                f"Detection failed on frame {frame_data.frame_index}: {e}",
                frames_accepted=self.stats.frames_accepted,
                frame_index=frame_data.frame_index,
            ) from e

        self.stats.frames_accepted += 1
        self._log_progress(result)

        if not self.config.preview:
            return False

        try:
            return self._handle_preview(frame_data, result)
        except Exception as e:
            raise RuntimeProcessingError(
                f"Preview failed on frame {frame_data.frame_index}: {e}",
                frames_accepted=self.stats.frames_accepted,
                frame_index=frame_data.frame_index,
            ) from e

    def _handle_preview(self, frame_data: FrameData, result: FrameResult) -> bool:
        """Draw the result and overlays, show the frame and poll for a cancel key."""
        self.counter.increment(len(result.faces))

        frame = frame_data.frame.copy()
        self.renderer.annotate(frame, result)
        self.renderer.overlay_text(frame, self.counter.label(), (15, 15), FONT_SIMPLEX)
        self.renderer.overlay_text(frame, CANCEL_HINT, (10, frame.shape[0] - 20), FONT_COMPLEX)

        return self.renderer.show(frame)

    def _log_progress(self, result: FrameResult) -> None:
        interval = self.config.log_interval
        if interval and self.stats.frames_accepted % interval == 0:
            logging.info(
                f"Pipeline progress: accepted={self.stats.frames_accepted}, "
                f"skipped={self.stats.frames_skipped}, last_faces={len(result.faces)}"
            )
        logging.debug(f"[FRAME] accepted={self.stats.frames_accepted} faces={len(result.faces)}")

    def _cleanup(self) -> None:
        """Release the preview window and the source."""
        self.stats.end_time = time.time()

        if self.config.preview:
            try:
                self.renderer.release_display()
            except Exception as e:
                logging.warning(f"Error closing preview window: {e}")

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        logging.info(
            f"Pipeline stopped: accepted={self.stats.frames_accepted}, "
            f"skipped={self.stats.frames_skipped}, cancelled={self.stats.cancelled}, "
            f"elapsed={self.stats.elapsed:.1f}s"
        )
