"""
Write exported results to disk as JSON or YAML (chosen by file extension).
"""

from __future__ import annotations

import json
import logging
import os
from typing import List

import yaml

from .exporter import ExportedFrame
from .schema import FrameRecord, ResultsDocument

YAML_EXTENSIONS = (".yaml", ".yml")


def build_document(
    frames: List[ExportedFrame],
    source: str,
    model: str,
    cancelled: bool = False,
) -> ResultsDocument:
    return ResultsDocument(
        source=source,
        model=model,
        frame_count=len(frames),
        cancelled=cancelled,
        frames=[FrameRecord.from_exported(f) for f in frames],
    )


def write_results(path: str, document: ResultsDocument, indent: int = 2) -> str:
    """Write the document and return the path written."""
    out_dir = os.path.dirname(path)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir)

    data = document.dump()
    with open(path, "w") as f:
        if os.path.splitext(path)[1].lower() in YAML_EXTENSIONS:
            yaml.safe_dump(data, f, sort_keys=False, default_flow_style=None)
        else:
            json.dump(data, f, indent=indent)

    logging.info(f"Results written: {path} ({document.frame_count} frames)")
    return path
