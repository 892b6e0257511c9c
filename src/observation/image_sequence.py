"""
Image-sequence observation source.

Reads every image in a directory in filename order. Every successfully
decoded image is a new frame; unreadable files are skipped with a warning.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import List, Tuple

import cv2

from models.frame import FrameData
from ops.errors import ResourceOpenError
from .base import ObservationSource, ObservationConfig

IMAGE_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff")


@dataclass
class ImageSequenceConfig(ObservationConfig):
    """
    Attributes:
        directory: Directory holding the images.
        extensions: Lower-case file extensions to include.
    """
    directory: str = "."
    extensions: Tuple[str, ...] = IMAGE_EXTENSIONS


def list_images(directory: str, extensions: Tuple[str, ...] = IMAGE_EXTENSIONS) -> List[str]:
    """Return image paths in the directory sorted by filename."""
    names = sorted(
        name for name in os.listdir(directory)
        if os.path.splitext(name)[1].lower() in extensions
    )
    return [os.path.join(directory, name) for name in names]


class ImageSequenceSource(ObservationSource):
    """Observation source over a directory of still images."""

    def __init__(self, config: ImageSequenceConfig):
        super().__init__(config)
        self._seq_config = config
        self._paths: List[str] = []
        self._pos = 0

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def open(self) -> None:
        if self._is_open:
            return

        directory = self._seq_config.directory
        if not os.path.isdir(directory):
            raise ResourceOpenError(f"Image directory not found: {directory}")

        self._paths = list_images(directory, self._seq_config.extensions)
        if not self._paths:
            raise ResourceOpenError(f"No images found in {directory}")

        self._pos = 0
        self._frame_index = 0
        self._current = None
        self._updated = False
        self._is_open = True
        logging.info(f"ImageSequenceSource opened: {directory} ({len(self._paths)} images)")

    def read(self) -> bool:
        if not self._is_open:
            return False

        while self._pos < len(self._paths):
            path = self._paths[self._pos]
            self._pos += 1
            frame = cv2.imread(path, cv2.IMREAD_COLOR)
            if frame is None:
                logging.warning(f"Skipping unreadable image: {path}")
                continue

            self._frame_index += 1
            return self._deliver(
                FrameData.from_numpy(
                    frame,
                    timestamp=time.time(),
                    frame_index=self._frame_index,
                    source=self.source_id,
                )
            )

        return False

    def close(self) -> None:
        self._is_open = False
