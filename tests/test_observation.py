"""
Tests for observation layer.
"""

import threading
import time

import cv2
import numpy as np
import pytest

from models.source_spec import DatasetSpec, LiveDeviceSpec
from observation.base import ObservationConfig
from observation.factory import create_source
from observation.image_sequence import ImageSequenceConfig, ImageSequenceSource, list_images
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig
from ops.errors import ResourceOpenError

from fakes import ScriptedSource, blank_frames


class TestObservationConfig:
    def test_default_config(self):
        config = ObservationConfig()
        assert config.source_id == "default"
        assert config.resolution is None
        assert config.fps is None


class TestSourceContract:
    def test_lifecycle(self):
        source = ScriptedSource(blank_frames(2))

        assert not source.is_open
        source.open()
        assert source.is_open
        assert source.frame_index == 0

        assert source.read() is True
        assert source.is_updated() is True
        assert source.get_frame().frame_index == 1

        source.close()
        assert not source.is_open
        assert source.read() is False

    def test_stale_redelivery(self):
        source = ScriptedSource(blank_frames(2), [True, False])
        source.open()

        source.read()
        first = source.get_frame()
        assert source.read() is True
        assert source.is_updated() is False
        assert source.get_frame() is first
        assert source.read() is False

    def test_get_frame_before_read(self):
        source = ScriptedSource(blank_frames(1))
        source.open()
        with pytest.raises(RuntimeError, match="read"):
            source.get_frame()

    def test_iteration_skips_stale(self):
        with ScriptedSource(blank_frames(4), [True, False, True, False]) as source:
            collected = list(source)

        assert [fd.frame_index for fd in collected] == [1, 2]
        assert not source.is_open

    def test_iteration_requires_open(self):
        source = ScriptedSource([])
        with pytest.raises(RuntimeError, match="must be open"):
            list(source)


class TestImageSequenceSource:
    def _write_images(self, directory, count):
        for i in range(count):
            img = np.full((12, 16, 3), i * 10, dtype=np.uint8)
            cv2.imwrite(str(directory / f"frame_{i:03d}.png"), img)

    def test_reads_in_filename_order(self, tmp_path):
        self._write_images(tmp_path, 3)
        (tmp_path / "notes.txt").write_text("not an image")

        source = ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path)))
        with source:
            frames = list(source)

        assert len(frames) == 3
        assert [int(fd.frame[0, 0, 0]) for fd in frames] == [0, 10, 20]
        assert all(fd.size == (16, 12) for fd in frames)

    def test_unreadable_image_skipped(self, tmp_path):
        self._write_images(tmp_path, 2)
        (tmp_path / "frame_001b.png").write_bytes(b"garbage")

        with ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path))) as source:
            frames = list(source)

        assert len(frames) == 2

    def test_empty_directory(self, tmp_path):
        source = ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path)))
        with pytest.raises(ResourceOpenError, match="No images"):
            source.open()

    def test_missing_directory(self, tmp_path):
        source = ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path / "missing")))
        with pytest.raises(ResourceOpenError):
            source.open()

    def test_list_images_sorted(self, tmp_path):
        for name in ["b.jpg", "a.PNG", "c.txt"]:
            (tmp_path / name).write_bytes(b"")
        names = [p.rsplit("/", 1)[-1] for p in list_images(str(tmp_path))]
        assert names == ["a.PNG", "b.jpg"]


class TestOpenCVSource:
    def test_live_detection(self):
        assert OpenCVSource(OpenCVSourceConfig(device_id=0)).is_live is True
        assert OpenCVSource(OpenCVSourceConfig(device_id="clip.mp4")).is_live is False

    def test_source_id_property(self):
        source = OpenCVSource(OpenCVSourceConfig(source_id="my-camera", device_id=0))
        assert source.source_id == "my-camera"

    def test_missing_file_fails_to_open(self, tmp_path):
        source = OpenCVSource(OpenCVSourceConfig(device_id=str(tmp_path / "missing.mp4")))
        with pytest.raises(ResourceOpenError, match="Failed to open video source"):
            source.open()
        assert not source.is_open

    def test_read_before_open(self):
        source = OpenCVSource(OpenCVSourceConfig(device_id="clip.mp4"))
        assert source.read() is False

    def test_from_source_config(self):
        config = OpenCVSourceConfig.from_source_config(
            {"buffer_size": 2, "max_retries": 5}, device_id=1, resolution=(1280, 720), source_id="cam"
        )
        assert config.device_id == 1
        assert config.resolution == (1280, 720)
        assert config.buffer_size == 2
        assert config.max_retries == 5


class FakeCapture:
    """Stand-in for cv2.VideoCapture yielding `count` frames whose pixels hold their index."""

    def __init__(self, count, interval_s=0.0, width=16, height=12, fps=25.0):
        self.count = count
        self.interval_s = interval_s
        self.props = {
            cv2.CAP_PROP_FRAME_WIDTH: width,
            cv2.CAP_PROP_FRAME_HEIGHT: height,
            cv2.CAP_PROP_FPS: fps,
            cv2.CAP_PROP_FRAME_COUNT: count,
        }
        self.pos = 0
        self.released = 0

    def isOpened(self):
        return True

    def set(self, prop, value):
        return True

    def get(self, prop):
        return self.props.get(prop, 0.0)

    def read(self):
        if self.interval_s:
            time.sleep(self.interval_s)
        if self.pos >= self.count:
            return False, None
        frame = np.full((self.props[cv2.CAP_PROP_FRAME_HEIGHT], self.props[cv2.CAP_PROP_FRAME_WIDTH], 3),
                        self.pos, dtype=np.uint8)
        self.pos += 1
        return True, frame

    def release(self):
        self.released += 1


class BlockingCapture(FakeCapture):
    """Capture whose first read() blocks until `unblock` is set."""

    def __init__(self):
        super().__init__(count=0)
        self.unblock = threading.Event()

    def read(self):
        self.unblock.wait(timeout=5)
        return False, None


def _live_config(**overrides):
    values = dict(device_id=0, warmup_s=0, max_retries=1, poll_timeout_s=0.005, max_read_failures=3)
    values.update(overrides)
    return OpenCVSourceConfig(**values)


class TestOpenCVSourceLive:
    def test_updated_frames_in_order_with_stale_redelivery(self, monkeypatch):
        capture = FakeCapture(5, interval_s=0.03)
        monkeypatch.setattr(cv2, "VideoCapture", lambda device: capture)

        source = OpenCVSource(_live_config())
        source.open()
        values, indices, stale = [], [], 0
        for _ in range(2000):
            if not source.read():
                break
            if source.is_updated():
                frame_data = source.get_frame()
                values.append(int(frame_data.frame[0, 0, 0]))
                indices.append(frame_data.frame_index)
            else:
                stale += 1
        else:
            pytest.fail("read() never reported the device as lost")
        source.close()

        assert values == [0, 1, 2, 3, 4]
        assert indices == [1, 2, 3, 4, 5]
        assert stale > 0
        assert source.read() is False
        assert capture.released == 1

    def test_read_fails_after_consecutive_grab_failures(self, monkeypatch):
        capture = FakeCapture(0, interval_s=0.001)
        monkeypatch.setattr(cv2, "VideoCapture", lambda device: capture)

        source = OpenCVSource(_live_config(max_read_failures=2))
        source.open()
        results = [source.read() for _ in range(200)]
        source.close()

        assert results[-1] is False
        assert source.is_updated() is False

    def test_close_defers_release_to_busy_capture_thread(self, monkeypatch):
        capture = BlockingCapture()
        monkeypatch.setattr(cv2, "VideoCapture", lambda device: capture)

        source = OpenCVSource(_live_config(join_timeout_s=0.05))
        source.open()
        source.close()

        assert capture.released == 0
        capture.unblock.set()
        deadline = time.time() + 5
        while capture.released == 0 and time.time() < deadline:
            time.sleep(0.01)
        assert capture.released == 1


class TestOpenCVSourceFile:
    def test_reads_file_and_reports_info(self, monkeypatch, tmp_path):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"")
        capture = FakeCapture(3)
        monkeypatch.setattr(cv2, "VideoCapture", lambda device: capture)

        source = OpenCVSource(OpenCVSourceConfig(device_id=str(video)))
        with source:
            assert source.is_file is True
            assert source.get_video_info() == {"width": 16, "height": 12, "fps": 25.0, "frame_count": 3}
            frames = list(source)

        assert [int(fd.frame[0, 0, 0]) for fd in frames] == [0, 1, 2]
        assert source.get_video_info() == {}


class TestCreateSource:
    def test_directory_gives_image_sequence(self, tmp_path):
        source = create_source(DatasetSpec(path=str(tmp_path)))
        assert isinstance(source, ImageSequenceSource)

    def test_file_gives_opencv_source(self, tmp_path):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"")
        source = create_source(DatasetSpec(path=str(video)))
        assert isinstance(source, OpenCVSource)
        assert source.device_id == str(video)

    def test_pattern_gives_opencv_source(self, tmp_path):
        source = create_source(DatasetSpec(path=str(tmp_path / "img_%04d.png")))
        assert isinstance(source, OpenCVSource)

    def test_live_device(self):
        source = create_source(LiveDeviceSpec(device_id=2, width=640, height=480), {"max_retries": 1})
        assert isinstance(source, OpenCVSource)
        assert source.device_id == 2
        assert source._opencv_config.resolution == (640, 480)

    def test_live_device_default_resolution(self):
        source = create_source(LiveDeviceSpec(device_id=0))
        assert source._opencv_config.resolution is None

    def test_missing_path(self, tmp_path):
        with pytest.raises(ResourceOpenError, match="No video source specified"):
            create_source(DatasetSpec(path=str(tmp_path / "nope.mp4")))

    def test_no_spec(self):
        with pytest.raises(ResourceOpenError, match="No video source specified"):
            create_source(None)
