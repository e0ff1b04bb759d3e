"""Tests for the per-task random number generator.

Tests cover:
- Uniform draws stay in [0, 1)
- Reproducibility for a fixed seed
- Independence of streams and task indices
- Rough uniformity of the distribution
"""

import numpy as np
import taichi as ti

NUM_DRAWS = 4096


def _draw_uniforms(seed: int, stream: int, index: int, count: int = NUM_DRAWS) -> np.ndarray:
    from pathbox.core.sampler import next_uniform, seed_rng

    values = ti.field(dtype=ti.f32, shape=count)

    @ti.kernel
    def draw_kernel(seed: ti.u32, stream: ti.u32, index: ti.u32):
        # One task; the inner loop is serial and threads the state through
        for _task in range(1):
            state = seed_rng(seed, stream, index)
            for i in range(count):
                state, u = next_uniform(state)
                values[i] = u

    draw_kernel(seed, stream, index)
    return values.to_numpy()


class TestNextUniform:
    """Tests for next_uniform()."""

    def test_values_in_unit_interval(self):
        """Every draw lies in [0, 1)."""
        values = _draw_uniforms(seed=1, stream=0, index=0)
        assert values.min() >= 0.0
        assert values.max() < 1.0

    def test_distribution_is_roughly_uniform(self):
        """Mean ~0.5 and every tenth of the interval is populated."""
        values = _draw_uniforms(seed=7, stream=3, index=11)
        assert abs(values.mean() - 0.5) < 0.03
        counts, _ = np.histogram(values, bins=10, range=(0.0, 1.0))
        expected = NUM_DRAWS / 10
        assert np.all(counts > 0.7 * expected)
        assert np.all(counts < 1.3 * expected)

    def test_values_are_not_constant(self):
        values = _draw_uniforms(seed=0, stream=0, index=0, count=64)
        assert len(np.unique(values)) > 60


class TestSeeding:
    """Tests for seed_rng()."""

    def test_same_seed_reproduces_sequence(self):
        a = _draw_uniforms(seed=42, stream=5, index=9, count=128)
        b = _draw_uniforms(seed=42, stream=5, index=9, count=128)
        np.testing.assert_array_equal(a, b)

    def test_different_seeds_differ(self):
        a = _draw_uniforms(seed=1, stream=0, index=0, count=128)
        b = _draw_uniforms(seed=2, stream=0, index=0, count=128)
        assert not np.array_equal(a, b)

    def test_different_streams_differ(self):
        a = _draw_uniforms(seed=1, stream=0, index=0, count=128)
        b = _draw_uniforms(seed=1, stream=1, index=0, count=128)
        assert not np.array_equal(a, b)

    def test_neighbouring_indices_are_decorrelated(self):
        """First draws of adjacent task indices should not be ordered."""
        from pathbox.core.sampler import next_uniform, seed_rng

        count = 1024
        firsts = ti.field(dtype=ti.f32, shape=count)

        @ti.kernel
        def first_draw_kernel():
            for i in range(count):
                state = seed_rng(ti.cast(3, ti.u32), ti.cast(0, ti.u32), ti.cast(i, ti.u32))
                state, u = next_uniform(state)
                firsts[i] = u

        first_draw_kernel()
        values = firsts.to_numpy()
        assert abs(values.mean() - 0.5) < 0.05
        assert abs(np.corrcoef(values[:-1], values[1:])[0, 1]) < 0.1
