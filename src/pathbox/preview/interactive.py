"""Interactive preview window using Taichi GGUI.

The window is the pixel sink and control source of a ProgressiveRenderer:

    r (held)       render one pass per window frame and show the result
    q / Escape     quit
    closing        quit

A pass runs to completion inside the window loop, so key presses are only
seen between passes. Each pass logs its duration through the renderer.

Example:
    >>> from pathbox.core.progressive import ProgressiveRenderer
    >>> from pathbox.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> preview = InteractivePreview(ProgressiveRenderer(camera, scene))
    >>> preview.run()
"""

from __future__ import annotations

import logging
import os
import platform
from typing import TYPE_CHECKING

import taichi as ti

from pathbox.preview.display import frame_to_canvas

if TYPE_CHECKING:
    from pathbox.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)

RENDER_KEY = "r"
QUIT_KEYS = ("q", ti.ui.ESCAPE)


class InteractivePreview:
    """GGUI window showing a renderer's accumulated frame.

    Attributes:
        width: Window width in pixels (the renderer's image width).
        height: Window height in pixels.
        display_image: Taichi field of shape (width, height) shown on the canvas.
    """

    def __init__(
        self,
        renderer: ProgressiveRenderer,
        *,
        title: str = "pathbox - Cornell Box",
    ) -> None:
        """Prepare the preview; the window itself is created on first use.

        Args:
            renderer: The renderer driven and displayed by the window.
            title: Window title.
        """
        self.renderer = renderer
        self.width = renderer.width
        self.height = renderer.height
        self._title = title
        self._is_initialized = False

        # Defer window creation to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_display(self) -> None:
        """Copy the renderer's current frame into the display field."""
        self.display_image.from_numpy(frame_to_canvas(self.renderer.frame))

    def quit_requested(self) -> bool:
        """Drain pending key presses; True if a quit key was among them."""
        requested = False
        while self.window.get_event(ti.ui.PRESS):
            if self.window.event.key in QUIT_KEYS:
                requested = True
        return requested

    def render_requested(self) -> bool:
        return self.window.is_pressed(RENDER_KEY)

    def show_frame(self) -> None:
        """Present the display field in the window."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Run the window loop until the window is closed or quit is pressed."""
        self._initialize_window()
        self.update_display()

        while self.window.running:
            if self.quit_requested():
                break
            if self.render_requested():
                self.renderer.render_frame()
                self.update_display()
            self.show_frame()

        logger.info("Preview closed after %d passes", self.renderer.frames_accumulated)

    def close(self) -> None:
        """Stop the window loop."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        if platform.system() == "Darwin":
            # SSH session without X forwarding
            if os.environ.get("SSH_CONNECTION") and not display:
                return False
            return True

        return bool(display or wayland)
