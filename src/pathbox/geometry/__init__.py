"""Geometry primitives and their ray intersection routines.

Components:
    sphere: Sphere primitive and the HitRecord shared by all primitives
    triangle: Anchored triangle primitive (Möller–Trumbore)

Both intersection routines are Taichi functions with the signature
    hit_shape(ray_origin, ray_direction, shape) -> HitRecord
and report a miss as hit == 0 with distance NO_HIT_DISTANCE.
"""

from .sphere import NO_HIT_DISTANCE, HitRecord, Sphere, hit_sphere, make_miss_record
from .triangle import TRIANGLE_EPSILON, Triangle, hit_triangle

__all__ = [
    "NO_HIT_DISTANCE",
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "make_miss_record",
    "TRIANGLE_EPSILON",
    "Triangle",
    "hit_triangle",
]
