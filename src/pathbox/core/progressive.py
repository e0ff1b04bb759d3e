"""Progressive renderer: repeated render passes averaged into one frame.

The ProgressiveRenderer owns the packed FrameState of a camera/scene pair.
Every call to render_frame() runs one full render pass and blends it into the
frame with accumulate(), so the displayed image converges as passes pile up.
A pass always runs to completion; stop requests are honoured between passes.

The accumulation is never invalidated automatically. Call reset() after
changing anything that affects the image.

Example:
    >>> from pathbox.scene.cornell_box import create_cornell_box_scene
    >>> scene, camera = create_cornell_box_scene()
    >>> renderer = ProgressiveRenderer(camera, scene)
    >>> renderer.render(4)
    4
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from pathbox.core.accumulator import FrameState, decode_buffer
from pathbox.core.integrator import MAX_RAY_BOUNCE_COUNT, RAYS_PER_PIXEL, render_pass

logger = logging.getLogger(__name__)

# Callback receives (frames_accumulated, target_frames)
ProgressCallback = Callable[[int, int], None]

# Polled before each pass; returning True stops the render
StopPredicate = Callable[[], bool]


@dataclass(frozen=True)
class RenderSettings:
    """Per-pass render parameters.

    Attributes:
        samples_per_pixel: Paths traced per pixel in every pass.
        bounce_limit: Maximum surface interactions per path.
        seed: Base seed; pass i uses the random stream (seed, i).
    """

    samples_per_pixel: int = RAYS_PER_PIXEL
    bounce_limit: int = MAX_RAY_BOUNCE_COUNT
    seed: int = 0

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.bounce_limit < 0:
            raise ValueError(f"bounce_limit must be non-negative, got {self.bounce_limit}")


class ProgressiveRenderer:
    """Accumulates render passes of one camera and scene.

    Attributes:
        camera: The camera rendered from.
        scene: The scene rendered.
        settings: The per-pass RenderSettings.
    """

    def __init__(self, camera, scene, settings: RenderSettings | None = None) -> None:
        self.camera = camera
        self.scene = scene
        self.settings = settings if settings is not None else RenderSettings()
        self._state = FrameState.create(camera.width, camera.height)

    @property
    def width(self) -> int:
        return self._state.width

    @property
    def height(self) -> int:
        return self._state.height

    @property
    def frames_accumulated(self) -> int:
        """Number of passes averaged into the current frame."""
        return self._state.frames_accumulated

    @property
    def frame(self) -> npt.NDArray[np.uint32]:
        """The current packed frame, shape (height, width), y = 0 at the bottom."""
        return self._state.current

    @property
    def previous_frame(self) -> npt.NDArray[np.uint32]:
        """The frame before the last completed pass."""
        return self._state.previous

    def reset(self) -> None:
        """Discard all accumulated passes."""
        self._state.reset()
        logger.debug("Accumulation reset")

    def render_frame(self) -> float:
        """Render one pass and blend it into the frame.

        Returns:
            Wall-clock duration of the pass in seconds.
        """
        start = time.perf_counter()
        pass_image = render_pass(
            self.camera,
            self.scene,
            self.settings.samples_per_pixel,
            self.settings.bounce_limit,
            seed=self.settings.seed,
            pass_index=self.frames_accumulated,
        )
        self._state.commit(pass_image)
        elapsed = time.perf_counter() - start

        logger.info("Pass %d rendered in %.1f ms", self.frames_accumulated, elapsed * 1000.0)
        return elapsed

    def render(
        self,
        num_frames: int = 1,
        callback: ProgressCallback | None = None,
        should_stop: StopPredicate | None = None,
    ) -> int:
        """Render several passes in sequence.

        Args:
            num_frames: Number of passes to add.
            callback: Called after each pass with
                (frames_accumulated, target_frames).
            should_stop: Polled before each pass; rendering stops as soon as
                it returns True.

        Returns:
            The number of passes actually rendered.

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} passes")
            >>> renderer.render(10, callback=progress)
        """
        if num_frames <= 0:
            return 0

        target = self.frames_accumulated + num_frames
        rendered = 0
        while rendered < num_frames:
            if should_stop is not None and should_stop():
                logger.debug("Stop requested after %d of %d passes", rendered, num_frames)
                break
            self.render_frame()
            rendered += 1
            if callback is not None:
                callback(self.frames_accumulated, target)
        return rendered

    def render_progressive(self, num_frames: int = 1) -> Generator[tuple[int, int], None, None]:
        """Render passes one at a time, yielding progress after each.

        Args:
            num_frames: Number of passes to add.

        Yields:
            Tuple of (frames_accumulated, target_frames).
        """
        if num_frames <= 0:
            return

        target = self.frames_accumulated + num_frames
        for _ in range(num_frames):
            self.render_frame()
            yield (self.frames_accumulated, target)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Decoded current frame, shape (height, width, 3), values in [0, 1]."""
        return decode_buffer(self.frame)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frames_accumulated})"
        )
