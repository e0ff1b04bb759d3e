"""Pinhole camera mapping pixel coordinates to primary ray directions.

The camera is defined by a position, a forward direction, an image size, a
horizontal-agnostic field of view and a near clip distance. It derives a
right/up basis from the forward direction and the world up axis (+z):

    right = normalize(cross(world_up, forward))
    up    = cross(forward, right)

so that for the default forward (1, 0, 0) the basis is right = (0, 1, 0),
up = (0, 0, 1).

The projection plane sits at the near clip distance. Its height is
near * tan(fov / 2) * 2 and its width follows the image aspect ratio. Pixel
(x, y) maps to the plane point

    bottom_left + (0, width * x / (w - 1), height * y / (h - 1))

in camera-local (forward, right, up) coordinates, so pixel (0, 0) is the
bottom-left plane corner and (w - 1, h - 1) the top-right one. There is no
sub-pixel jitter. The world-space direction is

    normalize(position + right * p.y + up * p.z + forward * p.x)

which includes the camera position term; for a camera at the origin this is
the usual pinhole direction.

Example:
    >>> camera = build_camera((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 700, 400)
    >>> camera.direction(350, 200)
    (0.99..., 0.00..., 0.00...)
"""

import logging
import math
from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from pathbox.core.ray import Ray, make_ray

logger = logging.getLogger(__name__)

vec3 = tm.vec3

WORLD_UP = (0.0, 0.0, 1.0)
DEFAULT_FOV = 90.0
DEFAULT_NEAR_CLIP = 0.1


class CameraConfigError(ValueError):
    """Raised when a camera is constructed from invalid parameters."""


@ti.data_oriented
class Camera:
    """Pinhole camera with a fixed basis and projection plane.

    Attributes:
        position: Camera position in world space.
        forward: Unit view direction.
        right: Unit right direction.
        up: Unit up direction.
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Field of view in degrees.
        near_clip: Distance of the projection plane.
        plane_width: Width of the projection plane.
        plane_height: Height of the projection plane.
        bottom_left: Bottom-left plane corner in (forward, right, up) coordinates.
    """

    def __init__(
        self,
        position: Sequence[float],
        forward: Sequence[float],
        width: int,
        height: int,
        fov: float = DEFAULT_FOV,
        near_clip: float = DEFAULT_NEAR_CLIP,
    ) -> None:
        if width <= 0 or height <= 0:
            raise CameraConfigError(f"Image size must be positive, got {width}x{height}")
        if not near_clip > 0.0:
            raise CameraConfigError(f"near_clip must be positive, got {near_clip}")
        if not 0.0 < fov < 180.0:
            raise CameraConfigError(f"fov must be in (0, 180) degrees, got {fov}")

        position_np = np.asarray(position, dtype=np.float64)
        forward_np = np.asarray(forward, dtype=np.float64)
        if position_np.shape != (3,) or forward_np.shape != (3,):
            raise CameraConfigError("position and forward must be 3-vectors")

        forward_length = np.linalg.norm(forward_np)
        if not forward_length > 0.0:
            raise CameraConfigError("forward must be a non-zero vector")
        forward_np = forward_np / forward_length

        right_np = np.cross(np.asarray(WORLD_UP), forward_np)
        right_length = np.linalg.norm(right_np)
        if right_length < 1e-6:
            raise CameraConfigError("forward must not be parallel to the world up axis")
        right_np = right_np / right_length
        up_np = np.cross(forward_np, right_np)

        self.position = tuple(float(v) for v in position_np)
        self.forward = tuple(float(v) for v in forward_np)
        self.right = tuple(float(v) for v in right_np)
        self.up = tuple(float(v) for v in up_np)
        self.width = int(width)
        self.height = int(height)
        self.fov = float(fov)
        self.near_clip = float(near_clip)

        self.plane_height = self.near_clip * math.tan(math.radians(self.fov) / 2.0) * 2.0
        self.plane_width = self.plane_height * (self.width / self.height)
        self.bottom_left = (self.near_clip, -self.plane_width / 2.0, -self.plane_height / 2.0)

        # Pixel index -> [0, 1] plane coordinate; a single pixel maps to 0
        x_step = 1.0 / (self.width - 1) if self.width > 1 else 0.0
        y_step = 1.0 / (self.height - 1) if self.height > 1 else 0.0

        self._position = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._forward = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._right = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._up = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._bottom_left = ti.Vector.field(3, dtype=ti.f32, shape=())
        # (plane_width, plane_height, x_step, y_step)
        self._plane = ti.Vector.field(4, dtype=ti.f32, shape=())

        self._position[None] = self.position
        self._forward[None] = self.forward
        self._right[None] = self.right
        self._up[None] = self.up
        self._bottom_left[None] = self.bottom_left
        self._plane[None] = (self.plane_width, self.plane_height, x_step, y_step)

    # =========================================================================
    # Ray Generation (Taichi-compatible)
    # =========================================================================

    @ti.func
    def origin(self) -> vec3:
        """Camera position, the origin of every primary ray."""
        return self._position[None]

    @ti.func
    def ray_direction(self, x, y) -> vec3:
        """Normalized primary ray direction through pixel (x, y).

        Args:
            x: Pixel column, 0 = left.
            y: Pixel row, 0 = bottom.

        Returns:
            The unit direction.
        """
        plane = self._plane[None]
        tx = ti.cast(x, ti.f32) * plane[2]
        ty = ti.cast(y, ti.f32) * plane[3]
        local = self._bottom_left[None] + vec3(0.0, plane[0] * tx, plane[1] * ty)
        direction = (
            self._position[None]
            + self._right[None] * local.y
            + self._up[None] * local.z
            + self._forward[None] * local.x
        )
        return tm.normalize(direction)

    @ti.func
    def get_ray(self, x, y) -> Ray:
        """Primary ray through pixel (x, y)."""
        return make_ray(self.origin(), self.ray_direction(x, y))

    # =========================================================================
    # Python-scope helpers
    # =========================================================================

    @ti.kernel
    def _direction_kernel(self, x: ti.i32, y: ti.i32) -> vec3:
        return self.ray_direction(x, y)

    def direction(self, x: int, y: int) -> tuple[float, float, float]:
        """Primary ray direction through pixel (x, y), evaluated from Python."""
        d = self._direction_kernel(x, y)
        return (float(d[0]), float(d[1]), float(d[2]))

    def __repr__(self) -> str:
        return (
            f"Camera(position={self.position}, forward={self.forward}, "
            f"size={self.width}x{self.height}, fov={self.fov})"
        )


def build_camera(
    position: Sequence[float],
    forward: Sequence[float],
    width: int,
    height: int,
    fov: float = DEFAULT_FOV,
    near_clip: float = DEFAULT_NEAR_CLIP,
) -> Camera:
    """Create a camera, validating its configuration.

    Args:
        position: Camera position.
        forward: View direction (normalized here).
        width: Image width in pixels (> 0).
        height: Image height in pixels (> 0).
        fov: Field of view in degrees, in (0, 180).
        near_clip: Projection plane distance (> 0).

    Returns:
        The camera.

    Raises:
        CameraConfigError: If any parameter is invalid, forward is zero or
            forward is parallel to the world up axis.
    """
    camera = Camera(position, forward, width, height, fov=fov, near_clip=near_clip)
    logger.debug("Built %r", camera)
    return camera
