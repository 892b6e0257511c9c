"""
OpenCV-based observation source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- Video files and printf-style image patterns (device_id as str, e.g., "clip.mp4", "img_%04d.png")

Live devices are read on a background capture thread so that the frame loop
always sees the newest frame. When the loop is faster than the camera,
read() re-delivers the previous frame and is_updated() reports False.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from models.frame import FrameData
from ops.errors import ResourceOpenError
from .base import ObservationSource, ObservationConfig


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based observation sources.

    Attributes:
        device_id: Camera index (int) or file path / image pattern (str).
        buffer_size: OpenCV capture buffer size (reduces latency for live feeds).
        max_retries: Maximum attempts to open a live device.
        warmup_s: Seconds to wait after opening a live device.
        poll_timeout_s: Longest read() waits for a new live frame before re-delivering the last one.
        max_read_failures: Consecutive failed grabs before a live device is considered lost.
        join_timeout_s: How long close() waits for the capture thread to stop.
    """
    device_id: Union[int, str] = 0
    buffer_size: int = 1
    max_retries: int = 3
    warmup_s: float = 0.5
    poll_timeout_s: float = 0.05
    max_read_failures: int = 10
    join_timeout_s: float = 2.0

    @classmethod
    def from_source_config(
        cls,
        source_cfg: Dict[str, Any],
        device_id: Union[int, str],
        resolution: Optional[tuple[int, int]] = None,
        source_id: str = "video",
    ) -> "OpenCVSourceConfig":
        """
        Adapter: Create OpenCVSourceConfig from the `source` config section.

        Args:
            source_cfg: Source configuration dict (from config.yaml).
            device_id: Device index or path.
            resolution: Requested (width, height); None keeps the device default.
            source_id: Identifier for this source.
        """
        return cls(
            source_id=source_id,
            resolution=resolution,
            device_id=device_id,
            buffer_size=source_cfg.get("buffer_size", 1),
            max_retries=source_cfg.get("max_retries", 3),
            warmup_s=source_cfg.get("warmup_s", 0.5),
        )


class OpenCVSource(ObservationSource):
    """
    OpenCV-based observation source for cameras and video files.

    Example:
        config = OpenCVSourceConfig(device_id=0, resolution=(1280, 720))
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

        # Live capture state, guarded by _cond
        self._cond = threading.Condition()
        self._grab_thread: Optional[threading.Thread] = None
        self._stop_grab = False
        self._latest: Optional[np.ndarray] = None
        self._latest_seq = 0
        self._delivered_seq = 0
        self._grab_failed = False
        self._grab_running = False
        self._release_on_exit: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_live(self) -> bool:
        """Check if this is a capture device."""
        return isinstance(self.device_id, int)

    @property
    def is_file(self) -> bool:
        """Check if this is an existing video file."""
        return isinstance(self.device_id, str) and os.path.isfile(self.device_id)

    def open(self) -> None:
        """Open the video source."""
        if self._is_open:
            return

        self._initialize(retry_count=0)
        self._is_open = True
        self._frame_index = 0
        self._current = None
        self._updated = False

        if self.is_live:
            self._start_grab_thread()

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, "
            f"device={self.device_id}, resolution={self._opencv_config.resolution}"
        )
        if self.is_file:
            info = self.get_video_info()
            logging.info(
                f"Video file: {info['width']}x{info['height']} @ {info['fps']} fps, "
                f"{info['frame_count']} frames"
            )

    def _initialize(self, retry_count: int = 0) -> None:
        """Initialize the capture device."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None

        if retry_count > 0:
            wait_time = min(2 ** retry_count, 10)
            logging.info(
                f"Retrying initialization (attempt {retry_count + 1}/"
                f"{self._opencv_config.max_retries}) after {wait_time}s"
            )
            time.sleep(wait_time)

        self._cap = cv2.VideoCapture(self.device_id)

        if not self._cap.isOpened():
            if self.is_live and retry_count < self._opencv_config.max_retries - 1:
                logging.warning(f"Failed to open device {self.device_id}, retrying...")
                return self._initialize(retry_count + 1)
            self._cap.release()
            self._cap = None
            raise ResourceOpenError("Failed to open video source!")

        # Requested resolution applies to capture devices only (0 = keep default)
        if self.is_live:
            if self._opencv_config.resolution:
                w, h = self._opencv_config.resolution
                if w > 0:
                    self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
                if h > 0:
                    self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._opencv_config.fps:
                self._cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._opencv_config.buffer_size)

            actual_w = self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)
            actual_h = self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
            actual_fps = self._cap.get(cv2.CAP_PROP_FPS)
            logging.info(
                f"Camera actual settings - Resolution: ({actual_w}x{actual_h}), FPS: {actual_fps}"
            )

            # Brief warmup for cameras
            if self._opencv_config.warmup_s > 0:
                time.sleep(self._opencv_config.warmup_s)

    def _start_grab_thread(self) -> None:
        self._stop_grab = False
        self._grab_failed = False
        self._latest = None
        self._latest_seq = 0
        self._delivered_seq = 0
        self._grab_running = True
        self._release_on_exit = None
        self._grab_thread = threading.Thread(target=self._grab_worker, name=f"grab-{self.source_id}")
        self._grab_thread.daemon = True
        self._grab_thread.start()

    def _grab_worker(self) -> None:
        """Continuously pull frames from the device, keeping only the newest."""
        failures = 0
        while not self._stop_grab:
            cap = self._cap
            if cap is None:
                break
            ret, frame = cap.read()
            if not ret or frame is None:
                failures += 1
                if failures >= self._opencv_config.max_read_failures:
                    logging.error("Too many consecutive read failures, device lost")
                    break
                time.sleep(0.01)
                continue
            failures = 0
            with self._cond:
                self._latest = frame
                self._latest_seq += 1
                self._cond.notify_all()

        with self._cond:
            self._grab_failed = not self._stop_grab
            self._grab_running = False
            if self._release_on_exit is not None:
                # close() gave up waiting; the capture is ours to release
                self._release_on_exit.release()
                self._release_on_exit = None
            self._cond.notify_all()

    def read(self) -> bool:
        """Advance to the next frame; see ObservationSource.read()."""
        if not self._is_open or self._cap is None:
            return False

        if self.is_live:
            return self._read_live()

        ret, frame = self._cap.read()
        if not ret or frame is None:
            logging.info("End of video reached")
            return False

        self._frame_index += 1
        return self._deliver(self._make_frame_data(frame), updated=True)

    def _read_live(self) -> bool:
        with self._cond:
            if self._latest_seq == self._delivered_seq and not self._grab_failed:
                self._cond.wait(timeout=self._opencv_config.poll_timeout_s)

            if self._latest_seq == self._delivered_seq:
                if self._grab_failed:
                    return False
                # Nothing new yet: re-deliver whatever we showed last
                self._updated = False
                return True

            frame = self._latest
            self._delivered_seq = self._latest_seq

        self._frame_index += 1
        return self._deliver(self._make_frame_data(frame), updated=True)

    def _make_frame_data(self, frame: np.ndarray) -> FrameData:
        return FrameData(
            frame=frame,
            width=frame.shape[1],
            height=frame.shape[0],
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        """Close the video source and release resources."""
        self._stop_grab = True
        if self._grab_thread is not None and self._grab_thread.is_alive():
            self._grab_thread.join(timeout=self._opencv_config.join_timeout_s)
        self._grab_thread = None

        if self._cap is not None:
            with self._cond:
                if self._grab_running:
                    logging.warning("Capture thread still running; deferring release to it")
                    self._release_on_exit = self._cap
                else:
                    self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False

    def get_video_info(self) -> Dict[str, Any]:
        """Get information about the video source."""
        if self._cap is None or not self._cap.isOpened():
            return {}

        return {
            "width": int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            "height": int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            "fps": self._cap.get(cv2.CAP_PROP_FPS),
            "frame_count": int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT)) if self.is_file else None,
        }
