"""Tests for materials and bounce direction sampling.

Tests cover:
- Material validation and derived properties
- scatter_direction() for diffuse, mirror and extrapolated blends
- emitted()
"""

import numpy as np
import pytest
import taichi as ti

NUM_SAMPLES = 512


def _scatter(smoothness, glossiness, incident=(1.0, 0.0, -1.0), normal=(0.0, 0.0, 1.0)):
    """Run scatter_direction NUM_SAMPLES times and return numpy arrays."""
    from pathbox.core.sampler import seed_rng
    from pathbox.materials.surface import SurfaceMaterial, scatter_direction

    directions = ti.Vector.field(3, dtype=ti.f32, shape=NUM_SAMPLES)
    diffuse = ti.Vector.field(3, dtype=ti.f32, shape=NUM_SAMPLES)
    specular = ti.Vector.field(3, dtype=ti.f32, shape=NUM_SAMPLES)

    inc = np.asarray(incident, dtype=np.float64)
    inc = inc / np.linalg.norm(inc)

    @ti.kernel
    def scatter_kernel(
        smooth: ti.f32, gloss: ti.f32, i: ti.math.vec3, n: ti.math.vec3
    ):
        for k in directions:
            material = SurfaceMaterial(
                base_color=ti.math.vec3(1.0, 1.0, 1.0),
                emission_color=ti.math.vec3(0.0, 0.0, 0.0),
                emission_strength=0.0,
                smoothness=smooth,
                glossiness=gloss,
            )
            state = seed_rng(ti.cast(17, ti.u32), ti.cast(0, ti.u32), ti.cast(k, ti.u32))
            d, dif, mirror, state = scatter_direction(material, i, n, state)
            directions[k] = d
            diffuse[k] = dif
            specular[k] = mirror

    scatter_kernel(
        smoothness, glossiness, ti.math.vec3(*inc), ti.math.vec3(*normal)
    )
    return directions.to_numpy(), diffuse.to_numpy(), specular.to_numpy()


class TestMaterial:
    """Tests for the Python-side Material record."""

    def test_defaults_are_white_and_dark(self):
        from pathbox.materials.surface import Material

        m = Material()
        assert m.base_color == (1.0, 1.0, 1.0)
        assert m.emission == (0.0, 0.0, 0.0)
        assert not m.is_emissive

    def test_emission_is_color_times_strength(self):
        from pathbox.materials.surface import Material

        m = Material(emission_color=(1.0, 0.5, 0.25), emission_strength=3.0)
        assert m.emission == pytest.approx((3.0, 1.5, 0.75))
        assert m.is_emissive

    def test_zero_strength_is_not_emissive(self):
        from pathbox.materials.surface import Material

        assert not Material(emission_color=(1.0, 1.0, 1.0), emission_strength=0.0).is_emissive

    @pytest.mark.parametrize("strength", [-1.0, float("nan")])
    def test_invalid_emission_strength_rejected(self, strength):
        from pathbox.materials.surface import Material

        with pytest.raises(ValueError):
            Material(emission_strength=strength)

    def test_wrong_channel_count_rejected(self):
        from pathbox.materials.surface import Material

        with pytest.raises(ValueError):
            Material(base_color=(1.0, 1.0))

    def test_smoothness_and_glossiness_are_not_clamped(self):
        from pathbox.materials.surface import Material

        m = Material(smoothness=2.0, glossiness=8.0)
        assert m.smoothness == 2.0
        assert m.glossiness == 8.0


class TestScatterDirection:
    """Tests for scatter_direction()."""

    def test_candidates_are_hemisphere_and_mirror(self):
        directions, diffuse, specular = _scatter(smoothness=0.5, glossiness=0.5)
        assert np.all(diffuse[:, 2] >= -1e-6)
        np.testing.assert_allclose(np.linalg.norm(diffuse, axis=1), 1.0, atol=1e-5)
        expected = np.array([1.0, 0.0, 1.0]) / np.sqrt(2.0)
        np.testing.assert_allclose(specular, np.tile(expected, (NUM_SAMPLES, 1)), atol=1e-5)
        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)

    def test_negative_glossiness_is_always_diffuse(self):
        directions, diffuse, _ = _scatter(smoothness=1.0, glossiness=-1.0)
        np.testing.assert_allclose(directions, diffuse, atol=1e-5)

    def test_zero_smoothness_is_always_diffuse(self):
        directions, diffuse, _ = _scatter(smoothness=0.0, glossiness=2.0)
        np.testing.assert_allclose(directions, diffuse, atol=1e-5)

    def test_full_smoothness_and_glossiness_is_mirror(self):
        directions, _, specular = _scatter(smoothness=1.0, glossiness=2.0)
        np.testing.assert_allclose(directions, specular, atol=1e-5)

    def test_partial_glossiness_mixes_branches(self):
        """With glossiness 0.5 roughly half the bounces are mirrored."""
        directions, _, specular = _scatter(smoothness=1.0, glossiness=0.5)
        mirrored = np.all(np.abs(directions - specular) < 1e-5, axis=1)
        assert 0.35 < mirrored.mean() < 0.65

    def test_smoothness_above_one_extrapolates(self):
        directions, diffuse, specular = _scatter(smoothness=2.0, glossiness=2.0)
        blended = diffuse + (specular - diffuse) * 2.0
        lengths = np.linalg.norm(blended, axis=1)
        usable = lengths > 0.05
        expected = blended[usable] / lengths[usable, None]
        np.testing.assert_allclose(directions[usable], expected, atol=1e-4)


class TestEmitted:
    """Tests for emitted()."""

    def test_emitted_scales_color(self):
        from pathbox.materials.surface import SurfaceMaterial, emitted

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def emit_kernel():
            material = SurfaceMaterial(
                base_color=ti.math.vec3(1.0, 1.0, 1.0),
                emission_color=ti.math.vec3(1.0, 0.5, 0.0),
                emission_strength=3.0,
                smoothness=0.0,
                glossiness=0.0,
            )
            result[None] = emitted(material)

        emit_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [3.0, 1.5, 0.0], atol=1e-6)
