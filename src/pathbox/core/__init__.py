"""Core rendering module.

Components:
    sampler: Explicit per-task random number generation
    ray: Ray data structure, vector helpers and direction sampling
    integrator: Path tracer and the per-pass render kernel
    accumulator: Packed-color frames and cross-pass averaging
    progressive: ProgressiveRenderer driving passes into a frame

All compute-intensive operations run in Taichi kernels; accumulation and
packing run in numpy on the host.
"""

from .accumulator import (
    FrameState,
    accumulate,
    decode_buffer,
    decode_color,
    encode_buffer,
    encode_color,
)
from .ray import (
    RAY_EPSILON,
    Ray,
    lerp,
    make_ray,
    random_on_hemisphere,
    random_unit_vector,
    ray_at,
    reflect,
    vec3,
)
from .sampler import hash_u32, next_uniform, seed_rng

# integrator and progressive are not imported here: integrator imports
# materials.surface, which imports core.ray and so runs this file first.
# Importing them here would fail whenever pathbox.materials is imported
# before pathbox.core. Import them directly:
#   from pathbox.core.integrator import render_pass
#   from pathbox.core.progressive import ProgressiveRenderer

__all__ = [
    "FrameState",
    "accumulate",
    "decode_buffer",
    "decode_color",
    "encode_buffer",
    "encode_color",
    "RAY_EPSILON",
    "Ray",
    "lerp",
    "make_ray",
    "random_on_hemisphere",
    "random_unit_vector",
    "ray_at",
    "reflect",
    "vec3",
    "hash_u32",
    "next_uniform",
    "seed_rng",
]
