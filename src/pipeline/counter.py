"""
Running face tally shown in the preview window.

This is a UI-only side channel: exported results never read it.
"""

from __future__ import annotations


class PreviewCounter:
    """Monotonically non-decreasing count of faces seen so far."""

    def __init__(self) -> None:
        self._total = 0

    def increment(self, by: int) -> int:
        if by < 0:
            raise ValueError(f"Counter increment must be non-negative, got {by}")
        self._total += by
        return self._total

    @property
    def current_total(self) -> int:
        return self._total

    def label(self) -> str:
        return f"Faces found so far: {self._total}"
