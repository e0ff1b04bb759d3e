"""Path tracing integrator and the per-pass render kernel.

trace_ray() follows one stochastic light path through the scene. At every
surface interaction it adds the surface's emission weighted by the current
throughput, multiplies the throughput by the surface's base color and
continues in the direction chosen by scatter_direction(). The path ends when
it escapes the scene or after bounce_limit interactions. There is no
background light, no Russian roulette and no importance weighting.

render_pass() launches one kernel over all pixels. Each pixel is an
independent task with its own generator state, seeded from
(seed, pass_index, pixel_index); it traces samples_per_pixel paths through
the same primary direction and writes their mean into its own slot of the
output buffer, so no two tasks ever write the same memory.

Example:
    >>> from pathbox.scene.cornell_box import create_cornell_box_scene
    >>> scene, camera = create_cornell_box_scene()
    >>> image = render_pass(camera, scene, samples_per_pixel=20, bounce_limit=10)
    >>> image.shape
    (400, 700, 3)
"""

import itertools
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathbox.core.ray import is_finite, offset_ray_origin
from pathbox.core.sampler import seed_rng
from pathbox.materials.surface import emitted, scatter_direction

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum surface interactions per path
MAX_RAY_BOUNCE_COUNT = 10

# Paths traced per pixel in one render pass
RAYS_PER_PIXEL = 20

# Streams handed to render_pass() calls that omit pass_index
_auto_pass_index = itertools.count()


@dataclass(frozen=True)
class PathSample:
    """Result of tracing a single path from Python.

    Attributes:
        radiance: The radiance carried back along the path.
        bounces: Number of surface interactions before the path ended.
    """

    radiance: tuple[float, float, float]
    bounces: int


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    bounce_limit: ti.i32,
    rng: ti.u32,
):
    """Trace one light path and return the radiance it carries.

    Args:
        scene: The Scene to trace against.
        ray_origin: Start of the path.
        ray_direction: Normalized initial direction.
        bounce_limit: Maximum number of surface interactions.
        rng: The generator state of the calling task.

    Returns:
        A tuple (radiance, new_rng, bounces).
    """
    incoming_light = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray_origin
    direction = ray_direction
    state = rng
    bounces = 0

    # Taichi funcs cannot break out of loops
    active = 1

    for _bounce in range(bounce_limit):
        if active == 1:
            record = scene.closest_hit(origin, direction)

            if record.hit == 0:
                active = 0
            else:
                bounces += 1
                material = scene.material(record.geometry_index)

                # Shade on the side the ray arrived from
                normal = record.normal
                if record.front_face == 0:
                    normal = -normal

                new_direction, _diffuse, _specular, state = scatter_direction(
                    material, direction, normal, state
                )

                incoming_light += emitted(material) * throughput
                throughput *= material.base_color

                origin = offset_ray_origin(record.point, normal, new_direction)
                direction = new_direction

    return incoming_light, state, bounces


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass_kernel(
    camera: ti.template(),
    scene: ti.template(),
    samples_per_pixel: ti.i32,
    bounce_limit: ti.i32,
    seed: ti.u32,
    pass_index: ti.u32,
    out: ti.types.ndarray(),
):
    """Render one pass into out[y, x, channel]."""
    for y, x in ti.ndrange(out.shape[0], out.shape[1]):
        pixel_index = ti.cast(y * out.shape[1] + x, ti.u32)
        state = seed_rng(seed, pass_index, pixel_index)

        origin = camera.origin()
        direction = camera.ray_direction(x, y)
        weight = 1.0 / ti.cast(samples_per_pixel, ti.f32)

        color = vec3(0.0, 0.0, 0.0)
        for _sample in range(samples_per_pixel):
            radiance, state, _bounces = trace_ray(scene, origin, direction, bounce_limit, state)
            if is_finite(radiance) == 0:
                radiance = vec3(0.0, 0.0, 0.0)
            color += radiance * weight

        for c in ti.static(range(3)):
            out[y, x, c] = color[c]


@ti.kernel
def _trace_path_kernel(
    scene: ti.template(),
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    bounce_limit: ti.i32,
    seed: ti.u32,
    out: ti.types.ndarray(),
):
    """Trace a single path, writing (r, g, b, bounces) into out."""
    # Single task; keeps the bounce loop serial
    for _task in range(1):
        state = seed_rng(seed, ti.cast(0, ti.u32), ti.cast(0, ti.u32))
        radiance, _state, bounces = trace_ray(
            scene, vec3(ox, oy, oz), tm.normalize(vec3(dx, dy, dz)), bounce_limit, state
        )
        for c in ti.static(range(3)):
            out[c] = radiance[c]
        out[3] = ti.cast(bounces, ti.f32)


# =============================================================================
# Public Rendering API
# =============================================================================


def _validate_settings(samples_per_pixel: int, bounce_limit: int) -> None:
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be at least 1, got {samples_per_pixel}")
    if bounce_limit < 0:
        raise ValueError(f"bounce_limit must be non-negative, got {bounce_limit}")


def render_pass(
    camera,
    scene,
    samples_per_pixel: int = RAYS_PER_PIXEL,
    bounce_limit: int = MAX_RAY_BOUNCE_COUNT,
    *,
    seed: int = 0,
    pass_index: int | None = None,
) -> npt.NDArray[np.float32]:
    """Render one pass: the per-pixel mean of samples_per_pixel paths.

    Passes are only reproducible when pass_index is given. Callers that
    average passes themselves must advance it (or leave it out) so that
    each pass draws a new random stream; averaging the same stream never
    reduces noise.

    Args:
        camera: The Camera generating primary rays.
        scene: The Scene to render.
        samples_per_pixel: Paths per pixel (>= 1).
        bounce_limit: Maximum surface interactions per path (>= 0).
        seed: Base seed of the render.
        pass_index: Index of this pass, selects an independent random stream.
            When None, the next unused index of this process is taken.

    Returns:
        Linear radiance of shape (camera.height, camera.width, 3), indexed
        [y, x] with y = 0 the bottom row. Values are not clamped.

    Raises:
        ValueError: If samples_per_pixel or bounce_limit is out of range.
    """
    _validate_settings(samples_per_pixel, bounce_limit)
    if pass_index is None:
        pass_index = next(_auto_pass_index)

    image = np.zeros((camera.height, camera.width, 3), dtype=np.float32)
    _render_pass_kernel(
        camera,
        scene,
        samples_per_pixel,
        bounce_limit,
        seed & 0xFFFFFFFF,
        pass_index & 0xFFFFFFFF,
        image,
    )
    return image


def trace_path(
    scene,
    origin: Sequence[float],
    direction: Sequence[float],
    bounce_limit: int = MAX_RAY_BOUNCE_COUNT,
    seed: int = 0,
) -> PathSample:
    """Trace a single path from Python.

    Intended for testing and debugging; use render_pass() for images.

    Args:
        scene: The Scene to trace against.
        origin: Ray origin.
        direction: Ray direction (normalized here).
        bounce_limit: Maximum surface interactions (>= 0).
        seed: Seed of the path's generator state.

    Returns:
        The path's radiance and bounce count.
    """
    _validate_settings(1, bounce_limit)

    out = np.zeros(4, dtype=np.float32)
    _trace_path_kernel(
        scene,
        *(float(v) for v in origin),
        *(float(v) for v in direction),
        bounce_limit,
        seed & 0xFFFFFFFF,
        out,
    )
    return PathSample(
        radiance=(float(out[0]), float(out[1]), float(out[2])),
        bounces=int(out[3]),
    )
