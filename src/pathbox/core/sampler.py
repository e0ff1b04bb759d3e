"""Explicit per-task random number generation for Taichi kernels.

Every unit of parallel work (one pixel of one render pass) owns its own
32-bit generator state. The state is created with seed_rng() from a base
seed, a stream id (the render pass index) and the task index, and is then
threaded through the tracer by value: every draw returns the advanced state
together with the sample.

The generator is a 32-bit linear congruential step whose output goes through
the PCG "RXS M XS" permutation. It is cheap, has no shared mutable state and
makes renders reproducible for a fixed seed.

Example:
    >>> @ti.kernel
    ... def draw(seed: ti.u32) -> ti.f32:
    ...     state = seed_rng(seed, ti.cast(0, ti.u32), ti.cast(0, ti.u32))
    ...     state, u = next_uniform(state)
    ...     return u
"""

import taichi as ti

# Numerical Recipes LCG constants (modulus 2^32 via u32 wrap-around)
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223

# Multipliers of the PCG hash / output permutation
HASH_MULTIPLIER = 747796405
PERMUTE_MULTIPLIER = 277803737

# Scale mapping a 24-bit integer into [0, 1)
INV_2_POW_24 = 1.0 / 16777216.0


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    """PCG RXS-M-XS output permutation of a 32-bit state."""
    shift = (state >> ti.cast(28, ti.u32)) + ti.cast(4, ti.u32)
    word = ((state >> shift) ^ state) * ti.cast(PERMUTE_MULTIPLIER, ti.u32)
    return (word >> ti.cast(22, ti.u32)) ^ word


@ti.func
def hash_u32(value: ti.u32) -> ti.u32:
    """Hash a 32-bit integer into a well-mixed 32-bit integer.

    Args:
        value: Any 32-bit value (seed, index, counter).

    Returns:
        The hashed value.
    """
    state = value * ti.cast(HASH_MULTIPLIER, ti.u32) + ti.cast(LCG_INCREMENT, ti.u32)
    return _permute(state)


@ti.func
def seed_rng(seed: ti.u32, stream: ti.u32, index: ti.u32) -> ti.u32:
    """Create an independent generator state for one unit of work.

    Args:
        seed: The base seed of the render.
        stream: A stream id, e.g. the render pass index.
        index: The task index, e.g. the flattened pixel index.

    Returns:
        The initial generator state.
    """
    return hash_u32(seed ^ hash_u32(stream ^ hash_u32(index)))


@ti.func
def next_uniform(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple (new_state, value) where value is in [0, 1).
    """
    new_state = state * ti.cast(LCG_MULTIPLIER, ti.u32) + ti.cast(LCG_INCREMENT, ti.u32)
    bits = _permute(new_state) >> ti.cast(8, ti.u32)
    return new_state, ti.cast(bits, ti.f32) * INV_2_POW_24
