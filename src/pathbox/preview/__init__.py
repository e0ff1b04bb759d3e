"""Presentation of accumulated frames.

Components:
    display: Packed frame conversions and a Matplotlib static preview
    interactive: Taichi GGUI window driving a ProgressiveRenderer

Example:
    >>> from pathbox.preview import InteractivePreview
    >>> InteractivePreview(renderer).run()
"""

from pathbox.preview.display import apply_gamma, frame_to_canvas, frame_to_image, show_preview
from pathbox.preview.interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "apply_gamma",
    "frame_to_canvas",
    "frame_to_image",
    "show_preview",
]
