"""Conversions from packed frames to displayable images, and a Matplotlib view.

Packed frames are (height, width) uint32 arrays with row 0 at the bottom of
the image. Taichi's GGUI canvas wants (width, height, 3) with the origin at
the bottom-left, so frame_to_canvas() only needs a transpose.
frame_to_image() produces the conventional top-down (height, width, 3)
layout used by Matplotlib.

Example:
    >>> from pathbox.preview.display import show_preview
    >>> renderer.render(10)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from pathbox.core.accumulator import decode_buffer

if TYPE_CHECKING:
    from pathbox.core.progressive import ProgressiveRenderer


def frame_to_canvas(frame: npt.NDArray[np.uint32]) -> npt.NDArray[np.float32]:
    """Packed frame -> contiguous (width, height, 3) float32 canvas image."""
    return np.ascontiguousarray(np.transpose(decode_buffer(frame), (1, 0, 2)))


def frame_to_image(frame: npt.NDArray[np.uint32]) -> npt.NDArray[np.float32]:
    """Packed frame -> top-down (height, width, 3) float32 image."""
    return np.ascontiguousarray(np.flipud(decode_buffer(frame)))


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding out = in^(1/gamma) to an image in [0, 1].

    Args:
        image: Linear image array in [0, 1].
        gamma: Gamma value; 1.0 returns the image unchanged.

    Returns:
        Gamma encoded image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image

    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 5),
    block: bool = True,
) -> None:
    """Display the renderer's current frame as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer to display.
        gamma: Gamma applied for display; 1.0 shows the stored values.
        title: Custom title (default shows the number of passes).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = apply_gamma(frame_to_image(renderer.frame), gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {renderer.frames_accumulated} passes"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
