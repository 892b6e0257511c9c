"""
Python host binding: argument-shape resolution, run orchestration and
conversion of exported results to native Python/numpy values.
"""

from .host import (
    RunResult,
    find_face_landmarks,
    parse_arguments,
    run_extraction,
    to_native,
)

__all__ = [
    "RunResult",
    "find_face_landmarks",
    "parse_arguments",
    "run_extraction",
    "to_native",
]
