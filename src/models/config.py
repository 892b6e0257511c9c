"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class DetectorConfig:
    """Landmark detector configuration."""
    backend: str = "yunet"
    score_threshold: float = 0.6
    nms_threshold: float = 0.3
    top_k: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectorConfig":
        return cls(
            backend=d.get("backend", "yunet"),
            score_threshold=d.get("score_threshold", 0.6),
            nms_threshold=d.get("nms_threshold", 0.3),
            top_k=d.get("top_k", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "score_threshold": self.score_threshold,
            "nms_threshold": self.nms_threshold,
            "top_k": self.top_k,
        }


@dataclass
class SourceConfig:
    """Video source configuration."""
    buffer_size: int = 1
    max_retries: int = 3
    warmup_s: float = 0.5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        return cls(
            buffer_size=d.get("buffer_size", 1),
            max_retries=d.get("max_retries", 3),
            warmup_s=d.get("warmup_s", 0.5),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buffer_size": self.buffer_size,
            "max_retries": self.max_retries,
            "warmup_s": self.warmup_s,
        }


@dataclass
class PreviewConfig:
    """Preview window configuration."""
    window_name: str = "find_face_landmarks"
    wait_ms: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PreviewConfig":
        return cls(
            window_name=d.get("window_name", "find_face_landmarks"),
            wait_ms=d.get("wait_ms", 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "window_name": self.window_name,
            "wait_ms": self.wait_ms,
        }


@dataclass
class OutputConfig:
    """Result output configuration."""
    path: Optional[str] = None
    indent: int = 2

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OutputConfig":
        return cls(
            path=d.get("path"),
            indent=d.get("indent", 2),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "indent": self.indent,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_interval: int = 100
    log_path: Optional[str] = "logs/find_face_landmarks.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            detector=DetectorConfig.from_dict(d.get("detector", {}) or {}),
            source=SourceConfig.from_dict(d.get("source", {}) or {}),
            preview=PreviewConfig.from_dict(d.get("preview", {}) or {}),
            output=OutputConfig.from_dict(d.get("output", {}) or {}),
            log_interval=d.get("log_interval", 100),
            log_path=d.get("log_path", "logs/find_face_landmarks.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "detector": self.detector.to_dict(),
            "source": self.source.to_dict(),
            "preview": self.preview.to_dict(),
            "output": self.output.to_dict(),
            "log_interval": self.log_interval,
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
