"""
Preview rendering: frame annotation, text overlays and the display window.
"""

from .renderer import Renderer, OpenCVRenderer, FONT_SIMPLEX, FONT_COMPLEX

__all__ = [
    "Renderer",
    "OpenCVRenderer",
    "FONT_SIMPLEX",
    "FONT_COMPLEX",
]
