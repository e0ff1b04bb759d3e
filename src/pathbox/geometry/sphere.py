"""Sphere primitive and the hit record shared by all primitives.

The intersection works on the normalized ray direction, so the returned
distance is a true Euclidean distance along the ray. The nearest
non-negative root is reported, which means a ray starting inside the sphere
hits its far side.

The quadratic is solved with the robust formulation from Ray Tracing Gems
(chapter 7) to avoid cancellation when b^2 is close to 4ac.

Example:
    >>> sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
    >>> # inside a kernel:
    >>> rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Distance reported by a record that did not hit anything
NO_HIT_DISTANCE = 1.0e10


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of intersecting a ray with one primitive or a whole scene.

    Attributes:
        hit: 1 if the ray hit something, 0 otherwise.
        distance: Euclidean distance from the ray origin to the hit point,
            NO_HIT_DISTANCE when hit == 0.
        point: The hit point. Only valid if hit == 1.
        normal: The geometric unit normal. Outward for spheres, the
            winding-dependent face normal for triangles. Only valid if hit == 1.
        front_face: 1 if the ray arrived against the normal, 0 if it
            travels along it (e.g. leaving a sphere from inside).
        geometry_index: Index of the primitive in its scene, -1 if unknown.
    """

    hit: ti.i32
    distance: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    geometry_index: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Record representing "no hit" at the sentinel distance."""
    return HitRecord(
        hit=0,
        distance=NO_HIT_DISTANCE,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        geometry_index=-1,
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the reduced discriminant h^2 - a*c.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the origin: fall back to the textbook formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Intersect a ray with a sphere.

    With oc = origin - center and d the normalized direction, solves
    |oc + t*d|^2 = r^2 and keeps the smallest root t >= 0.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction, normalized here.
        sphere: The sphere to test.

    Returns:
        A HitRecord; distance = t, normal = normalize(point - center).
        geometry_index is left at -1 for the caller to fill in.
    """
    unit_direction = tm.normalize(ray_direction)
    oc = ray_origin - sphere.center

    a = tm.dot(unit_direction, unit_direction)
    h = tm.dot(unit_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    did_hit = 0
    hit_distance = NO_HIT_DISTANCE
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        if t < 0.0:
            t = t1

        if t >= 0.0:
            did_hit = 1
            hit_distance = t
            hit_point = ray_origin + t * unit_direction
            hit_normal = tm.normalize(hit_point - sphere.center)
            if tm.dot(unit_direction, hit_normal) < 0.0:
                is_front_face = 1

    return HitRecord(
        hit=did_hit,
        distance=hit_distance,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        geometry_index=-1,
    )
