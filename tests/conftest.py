"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
detector:
  backend: "yunet"
  score_threshold: 0.6
  nms_threshold: 0.3
  top_k: 5000

preview:
  window_name: "find_face_landmarks"
  wait_ms: 1

log_interval: 100
log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "detector": {
            "backend": "yunet",
            "score_threshold": 0.6,
            "nms_threshold": 0.3,
            "top_k": 5000,
        },
        "source": {
            "buffer_size": 1,
            "max_retries": 3,
        },
        "preview": {
            "window_name": "find_face_landmarks",
            "wait_ms": 1,
        },
        "log_interval": 100,
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def blank_frame():
    return np.zeros((480, 640, 3), dtype=np.uint8)
