"""Triangle primitive with Möller–Trumbore intersection.

A triangle is stored as an anchor point plus three vertex offsets relative to
it, so a group of triangles (the walls of a box) can be placed by moving a
single anchor. The world-space vertices are anchor + a, anchor + b and
anchor + c.

Unlike spheres, the intersection runs on the unnormalized direction; the
reported distance is length(direction * t), which equals t for unit
directions. The normal is the geometric face normal
normalize(cross(b - a, c - a)) and therefore depends on the winding order.

Example:
    >>> tri = Triangle(
    ...     anchor=vec3(1.0, 0.0, 0.0),
    ...     a=vec3(0.0, -1.0, -1.0),
    ...     b=vec3(0.0, 1.0, -1.0),
    ...     c=vec3(0.0, 0.0, 1.0),
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import NO_HIT_DISTANCE, HitRecord

vec3 = tm.vec3

# Determinant and distance tolerance of the intersection test
TRIANGLE_EPSILON = 1e-7


@ti.dataclass
class Triangle:
    """A triangle given by an anchor and three vertex offsets.

    Attributes:
        anchor: Reference point the vertex offsets are relative to.
        a: First vertex offset.
        b: Second vertex offset.
        c: Third vertex offset.
    """

    anchor: vec3
    a: vec3
    b: vec3
    c: vec3


@ti.func
def hit_triangle(ray_origin: vec3, ray_direction: vec3, triangle: Triangle) -> HitRecord:
    """Intersect a ray with a triangle (Möller–Trumbore).

    A ray parallel to the triangle plane (|det| < eps) misses, so do
    degenerate triangles. Hits at t <= eps are rejected.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (not normalized here).
        triangle: The triangle to test.

    Returns:
        A HitRecord with geometry_index left at -1.
    """
    v0 = triangle.anchor + triangle.a
    v1 = triangle.anchor + triangle.b
    v2 = triangle.anchor + triangle.c
    edge1 = v1 - v0
    edge2 = v2 - v0

    did_hit = 0
    hit_distance = NO_HIT_DISTANCE
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    h = tm.cross(ray_direction, edge2)
    det = tm.dot(edge1, h)

    if det < -TRIANGLE_EPSILON or det > TRIANGLE_EPSILON:
        inv_det = 1.0 / det
        s = ray_origin - v0
        u = inv_det * tm.dot(s, h)
        if u >= 0.0 and u <= 1.0:
            q = tm.cross(s, edge1)
            v = inv_det * tm.dot(ray_direction, q)
            if v >= 0.0 and u + v <= 1.0:
                t = inv_det * tm.dot(edge2, q)
                if t > TRIANGLE_EPSILON:
                    did_hit = 1
                    hit_distance = tm.length(ray_direction * t)
                    hit_point = ray_origin + ray_direction * t
                    hit_normal = tm.normalize(tm.cross(edge1, edge2))
                    if tm.dot(ray_direction, hit_normal) < 0.0:
                        is_front_face = 1

    return HitRecord(
        hit=did_hit,
        distance=hit_distance,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        geometry_index=-1,
    )
