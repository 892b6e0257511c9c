"""
Scripted collaborators shared by the test modules.
"""

import time
from typing import List, Optional, Sequence

import numpy as np

from detection.base import LandmarkDetector
from models.frame import FrameData
from models.landmarks import FaceResult
from observation.base import ObservationConfig, ObservationSource
from rendering.renderer import Renderer


def make_face(x: int, y: int, w: int = 10, h: int = 20, n_landmarks: int = 5) -> FaceResult:
    landmarks = tuple((x + i, y + i) for i in range(n_landmarks))
    return FaceResult(landmarks=landmarks, bbox=(x, y, w, h))


class ScriptedSource(ObservationSource):
    """
    Source that replays a list of frames.

    `updated` marks which deliveries are new (True) or stale re-deliveries
    (False). Defaults to all new.
    """

    def __init__(
        self,
        frames: Sequence[np.ndarray],
        updated: Optional[Sequence[bool]] = None,
        config: Optional[ObservationConfig] = None,
        fail_open: bool = False,
    ):
        super().__init__(config or ObservationConfig(source_id="scripted"))
        self._frames = list(frames)
        self._flags = list(updated) if updated is not None else [True] * len(self._frames)
        self._pos = 0
        self._fail_open = fail_open
        self.open_calls = 0
        self.close_calls = 0
        self.read_calls = 0

    def open(self) -> None:
        self.open_calls += 1
        if self._fail_open:
            raise OSError("device busy")
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self) -> bool:
        self.read_calls += 1
        if not self._is_open or self._pos >= len(self._frames):
            return False

        frame = self._frames[self._pos]
        updated = self._flags[self._pos]
        self._pos += 1
        if not updated and self._current is not None:
            self._updated = False
            return True

        self._frame_index += 1
        return self._deliver(
            FrameData(
                frame=frame,
                width=frame.shape[1],
                height=frame.shape[0],
                timestamp=time.time(),
                frame_index=self._frame_index,
                source=self.source_id,
            )
        )

    def close(self) -> None:
        self.close_calls += 1
        self._is_open = False


class ScriptedDetector(LandmarkDetector):
    """Detector returning a fixed list of faces per call, in order."""

    def __init__(self, faces_per_frame: Sequence[Sequence[FaceResult]], frame_scale: float = 1.0,
                 fail_on_call: Optional[int] = None):
        super().__init__(frame_scale=frame_scale)
        self._script = [list(f) for f in faces_per_frame]
        self._calls = 0
        self._fail_on_call = fail_on_call
        self.seen_shapes: List[tuple] = []

    def detect_faces(self, image):
        self.seen_shapes.append(image.shape)
        call = self._calls
        self._calls += 1
        if self._fail_on_call is not None and call == self._fail_on_call:
            raise RuntimeError("inference exploded")
        if call < len(self._script):
            return self._script[call]
        return []


class RecordingRenderer(Renderer):
    """Renderer that records every call and cancels on a chosen show() call."""

    def __init__(self, cancel_on_show: Optional[int] = None, fail_on_show: bool = False):
        self.calls: List[tuple] = []
        self.texts: List[str] = []
        self.show_count = 0
        self.released = 0
        self._cancel_on_show = cancel_on_show
        self._fail_on_show = fail_on_show

    def annotate(self, frame, result):
        self.calls.append(("annotate", len(result.faces)))

    def overlay_text(self, frame, text, position, font=0):
        self.calls.append(("overlay_text", text, position))
        self.texts.append(text)

    def show(self, frame):
        self.calls.append(("show",))
        self.show_count += 1
        if self._fail_on_show:
            raise RuntimeError("display lost")
        return self._cancel_on_show is not None and self.show_count >= self._cancel_on_show

    def release_display(self):
        self.calls.append(("release_display",))
        self.released += 1


def blank_frames(count: int, width: int = 64, height: int = 48) -> List[np.ndarray]:
    return [np.zeros((height, width, 3), dtype=np.uint8) for _ in range(count)]
