"""Ray data structure, vector helpers and direction sampling.

All functions here are Taichi functions usable inside kernels. Random
direction sampling takes the caller's generator state explicitly and returns
the advanced state next to the sample (see pathbox.core.sampler).

Example:
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> ray = Ray(origin=origin, direction=vec3(1.0, 0.0, 0.0))
    >>> point = ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

from pathbox.core.sampler import next_uniform

vec3 = tm.vec3

# Offset applied to a bounce origin so a ray does not re-hit the surface it left
RAY_EPSILON = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin point and a direction.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of travel. Normalized by every constructor
            in this package, but not required by the intersection routines.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray with a normalized direction."""
    return Ray(origin=origin, direction=tm.normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linear interpolation a + (b - a) * t. t is not clamped."""
    return a + (b - a) * t


@ti.func
def is_finite(v: vec3) -> ti.i32:
    """1 if no component of v is NaN or infinite, else 0."""
    finite = 1
    for i in ti.static(range(3)):
        if tm.isnan(v[i]) or tm.isinf(v[i]):
            finite = 0
    return finite


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Push a surface point off the surface toward the side a ray leaves on.

    Args:
        point: The surface point.
        normal: The unit surface normal (either orientation).
        direction: The direction of the departing ray.

    Returns:
        The point moved by RAY_EPSILON along +/- normal.
    """
    offset = normal * RAY_EPSILON
    result = point + offset
    if tm.dot(direction, normal) < 0.0:
        result = point - offset
    return result


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_unit_vector(state: ti.u32):
    """Uniformly distributed direction on the unit sphere.

    Samples z uniformly in [-1, 1] and the azimuth uniformly in [0, 2*pi),
    which is area-uniform on the sphere (Archimedes).

    Args:
        state: The generator state.

    Returns:
        A tuple (new_state, direction).
    """
    s1, u1 = next_uniform(state)
    s2, u2 = next_uniform(s1)
    z = 1.0 - 2.0 * u1
    r = ti.sqrt(ti.max(0.0, 1.0 - z * z))
    phi = 2.0 * tm.pi * u2
    return s2, vec3(r * ti.cos(phi), r * ti.sin(phi), z)


@ti.func
def random_on_hemisphere(normal: vec3, state: ti.u32):
    """Uniformly distributed direction in the hemisphere around a normal.

    A uniform sphere sample is flipped when it points below the surface.

    Args:
        normal: The normal defining the hemisphere.
        state: The generator state.

    Returns:
        A tuple (new_state, direction) with dot(direction, normal) >= 0.
    """
    new_state, on_sphere = random_unit_vector(state)
    result = on_sphere
    if tm.dot(on_sphere, normal) < 0.0:
        result = -on_sphere
    return new_state, result
