"""
OpenCV YuNet face detector backend (cv2.FaceDetectorYN, OpenCV 4.5.4+).

Each face yields a box and five landmarks: right eye, left eye, nose tip,
right mouth corner, left mouth corner.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

import cv2
import numpy as np

from models.landmarks import FaceResult
from ops.errors import ResourceOpenError
from .base import LandmarkDetector

NUM_LANDMARKS = 5


@dataclass(frozen=True)
class YuNetConfig:
    model: str
    score_threshold: float = 0.6
    nms_threshold: float = 0.3
    top_k: int = 5000


class YuNetLandmarkDetector(LandmarkDetector):
    def __init__(self, cfg: YuNetConfig, frame_scale: float = 1.0):
        super().__init__(frame_scale=frame_scale)
        self.cfg = cfg

        if not hasattr(cv2, "FaceDetectorYN"):
            raise ResourceOpenError("cv2.FaceDetectorYN is not available; OpenCV 4.5.4+ is required")
        if not os.path.isfile(cfg.model):
            raise ResourceOpenError(f"Failed to load landmarks model: {cfg.model}")

        try:
            self._net = cv2.FaceDetectorYN.create(
                cfg.model,
                "",
                (320, 320),
                cfg.score_threshold,
                cfg.nms_threshold,
                cfg.top_k,
            )
        except cv2.error as e:
            raise ResourceOpenError(f"Failed to load landmarks model: {cfg.model}") from e

        self._input_size = (320, 320)
        logging.info(f"YuNet detector loaded: model={cfg.model}, frame_scale={frame_scale}")

    def detect_faces(self, image: np.ndarray) -> List[FaceResult]:
        h, w = image.shape[:2]
        if (w, h) != self._input_size:
            self._net.setInputSize((w, h))
            self._input_size = (w, h)

        _, detections = self._net.detect(image)
        if detections is None:
            return []

        faces: List[FaceResult] = []
        for det in detections:
            bbox = det[0:4]
            landmarks = det[4:4 + 2 * NUM_LANDMARKS].reshape(NUM_LANDMARKS, 2)
            faces.append(FaceResult.from_arrays(np.rint(landmarks), np.rint(bbox)))
        return faces
