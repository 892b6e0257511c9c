"""
Renderer interface and OpenCV implementation.

The renderer owns the preview window. show() is the single point per frame
where the loop yields to the UI: it waits up to `wait_ms` for a key press
and reports whether one arrived.
"""

from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np

from models.landmarks import FrameResult

FONT_SIMPLEX = cv2.FONT_HERSHEY_SIMPLEX
FONT_COMPLEX = cv2.FONT_HERSHEY_COMPLEX

# Colors (BGR)
COLOR_BBOX = (0, 255, 0)
COLOR_LANDMARK = (0, 0, 255)
COLOR_TEXT = (255, 255, 255)


class Renderer:
    """Preview surface used by the frame loop."""

    def annotate(self, frame: np.ndarray, result: FrameResult) -> None:
        raise NotImplementedError

    def overlay_text(
        self,
        frame: np.ndarray,
        text: str,
        position: Tuple[int, int],
        font: int = FONT_SIMPLEX,
    ) -> None:
        raise NotImplementedError

    def show(self, frame: np.ndarray) -> bool:
        """Display the frame; return True if the user asked to stop."""
        raise NotImplementedError

    def release_display(self) -> None:
        raise NotImplementedError


class OpenCVRenderer(Renderer):
    """
    Draws boxes and landmarks with cv2 and shows frames in a named highgui window.

    Args:
        window_name: Title of the preview window.
        wait_ms: cv2.waitKey delay in milliseconds.
        font_scale: Scale of overlay text.
    """

    def __init__(self, window_name: str = "find_face_landmarks", wait_ms: int = 1, font_scale: float = 0.5):
        self.window_name = window_name
        self.wait_ms = max(1, int(wait_ms))
        self.font_scale = font_scale
        self._window_open = False

    @property
    def window_open(self) -> bool:
        return self._window_open

    def annotate(self, frame: np.ndarray, result: FrameResult) -> None:
        """Draw every face's box and landmarks onto the frame in place."""
        radius = max(1, int(round(min(frame.shape[:2]) / 300)))
        for face in result.faces:
            x, y, w, h = face.bbox
            cv2.rectangle(frame, (x, y), (x + w, y + h), COLOR_BBOX, 1)
            for px, py in face.landmarks:
                cv2.circle(frame, (px, py), radius, COLOR_LANDMARK, -1, cv2.LINE_AA)

    def overlay_text(
        self,
        frame: np.ndarray,
        text: str,
        position: Tuple[int, int],
        font: int = FONT_SIMPLEX,
    ) -> None:
        cv2.putText(frame, text, position, font, self.font_scale, COLOR_TEXT, 1, cv2.LINE_AA)

    def show(self, frame: np.ndarray) -> bool:
        cv2.imshow(self.window_name, frame)
        self._window_open = True
        key = cv2.waitKey(self.wait_ms)
        return key >= 0

    def release_display(self) -> None:
        """Close the preview window if it was ever shown. Safe to call multiple times."""
        if not self._window_open:
            return
        self._window_open = False
        try:
            cv2.destroyWindow(self.window_name)
            cv2.waitKey(1)
        except cv2.error as e:
            logging.warning(f"Error closing preview window: {e}")
