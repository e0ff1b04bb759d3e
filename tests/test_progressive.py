"""Tests for the progressive renderer.

This module tests the ProgressiveRenderer class including:
- Initialization and settings validation
- Pass accumulation and the running mean
- Progress callbacks, stop requests and generators
- Reset functionality
- Logging of pass timings

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import logging

import numpy as np
import pytest


def _shell_renderer(width=6, height=4, settings=None):
    """Renderer whose every pixel sees an emissive black shell (value 1.0)."""
    from pathbox.camera.pinhole import build_camera
    from pathbox.core.progressive import ProgressiveRenderer, RenderSettings
    from pathbox.materials.surface import Material
    from pathbox.scene.intersection import build_scene
    from pathbox.scene.manager import SphereInfo

    shell = Material(base_color=(0.0, 0.0, 0.0), emission_color=(0.5, 0.25, 1.0), emission_strength=1.0)
    scene = build_scene([SphereInfo(center=(0.0, 0.0, 0.0), radius=5.0, material=shell)])
    camera = build_camera((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), width, height)
    if settings is None:
        settings = RenderSettings(samples_per_pixel=2, bounce_limit=2)
    return ProgressiveRenderer(camera, scene, settings)


def _cornell_renderer(width=12, height=8):
    from pathbox.core.progressive import ProgressiveRenderer, RenderSettings
    from pathbox.scene.cornell_box import CornellBoxParams, create_cornell_box_scene

    scene, camera = create_cornell_box_scene(CornellBoxParams(image_width=width, image_height=height))
    return ProgressiveRenderer(camera, scene, RenderSettings(samples_per_pixel=4))


class TestRenderSettings:
    """Test RenderSettings validation."""

    def test_defaults(self):
        from pathbox.core.progressive import RenderSettings

        settings = RenderSettings()
        assert settings.samples_per_pixel == 20
        assert settings.bounce_limit == 10
        assert settings.seed == 0

    @pytest.mark.parametrize(
        "kwargs", [{"samples_per_pixel": 0}, {"bounce_limit": -1}]
    )
    def test_invalid_settings_raise(self, kwargs):
        from pathbox.core.progressive import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_matches_camera_size(self):
        """The frame buffers take the camera's image size."""
        renderer = _shell_renderer(width=10, height=7)

        assert renderer.width == 10
        assert renderer.height == 7
        assert renderer.frame.shape == (7, 10)
        assert renderer.frame.dtype == np.uint32
        assert renderer.frames_accumulated == 0

    def test_initial_image_is_black(self):
        renderer = _shell_renderer()
        assert np.all(renderer.get_image_numpy() == 0.0)


class TestProgressiveRendering:
    """Test pass accumulation."""

    def test_render_frame_accumulates_one_pass(self):
        renderer = _shell_renderer()
        elapsed = renderer.render_frame()

        assert elapsed >= 0.0
        assert renderer.frames_accumulated == 1
        image = renderer.get_image_numpy()
        assert image.shape == (4, 6, 3)
        np.testing.assert_allclose(image[..., 0], 0.5, atol=1.0 / 255)
        np.testing.assert_allclose(image[..., 1], 0.25, atol=1.0 / 255)
        np.testing.assert_allclose(image[..., 2], 1.0, atol=1e-6)

    def test_render_returns_number_of_passes(self):
        renderer = _shell_renderer()
        assert renderer.render(3) == 3
        assert renderer.frames_accumulated == 3

    @pytest.mark.parametrize("num_frames", [0, -2])
    def test_render_with_non_positive_count_does_nothing(self, num_frames):
        renderer = _shell_renderer()
        assert renderer.render(num_frames) == 0
        assert renderer.frames_accumulated == 0

    def test_constant_passes_keep_frame_constant(self):
        renderer = _shell_renderer()
        renderer.render_frame()
        first = renderer.frame.copy()
        renderer.render(4)
        np.testing.assert_array_equal(renderer.frame, first)
        np.testing.assert_array_equal(renderer.previous_frame, first)

    def test_multiple_render_calls_accumulate(self):
        renderer = _cornell_renderer()
        renderer.render(2)
        renderer.render(3)
        assert renderer.frames_accumulated == 5

    def test_passes_use_independent_random_streams(self):
        """Consecutive passes of the Cornell box are not identical."""
        renderer = _cornell_renderer()
        renderer.render_frame()
        first = renderer.frame.copy()
        renderer.render_frame()
        assert not np.array_equal(renderer.frame, first)

    def test_same_seed_gives_same_frames(self):
        a = _cornell_renderer()
        b = _cornell_renderer()
        a.render(2)
        b.render(2)
        np.testing.assert_array_equal(a.frame, b.frame)

    def test_values_in_expected_range(self):
        renderer = _cornell_renderer()
        renderer.render(3)
        image = renderer.get_image_numpy()
        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0
        assert image.max() <= 1.0


class TestProgressiveCallbacks:
    """Test callbacks, stop requests and the generator interface."""

    def test_callback_receives_progress(self):
        renderer = _shell_renderer()
        renderer.render_frame()

        calls = []
        renderer.render(3, callback=lambda current, target: calls.append((current, target)))
        assert calls == [(2, 4), (3, 4), (4, 4)]

    def test_should_stop_is_polled_before_each_pass(self):
        renderer = _shell_renderer()
        polls = []

        def should_stop():
            polls.append(renderer.frames_accumulated)
            return renderer.frames_accumulated >= 2

        assert renderer.render(10, should_stop=should_stop) == 2
        assert renderer.frames_accumulated == 2
        assert polls == [0, 1, 2]

    def test_immediate_stop_renders_nothing(self):
        renderer = _shell_renderer()
        assert renderer.render(5, should_stop=lambda: True) == 0
        assert renderer.frames_accumulated == 0

    def test_render_progressive_yields_progress(self):
        renderer = _shell_renderer()
        progress = list(renderer.render_progressive(3))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_render_progressive_with_zero_frames(self):
        renderer = _shell_renderer()
        assert list(renderer.render_progressive(0)) == []

    def test_render_progressive_interruptible(self):
        renderer = _shell_renderer()
        for current, _target in renderer.render_progressive(10):
            if current == 4:
                break
        assert renderer.frames_accumulated == 4


class TestProgressiveReset:
    """Test reset functionality."""

    def test_reset_clears_frames(self):
        renderer = _shell_renderer()
        renderer.render(2)
        renderer.reset()

        assert renderer.frames_accumulated == 0
        assert np.all(renderer.get_image_numpy() == 0.0)
        assert not renderer.previous_frame.any()

    def test_render_after_reset_restarts_average(self):
        renderer = _shell_renderer()
        renderer.render(2)
        renderer.reset()
        renderer.render_frame()
        assert renderer.frames_accumulated == 1
        np.testing.assert_allclose(renderer.get_image_numpy()[..., 2], 1.0, atol=1e-6)


class TestProgressiveMisc:
    """Logging and repr."""

    def test_pass_duration_is_logged(self, caplog):
        renderer = _shell_renderer()
        with caplog.at_level(logging.INFO, logger="pathbox.core.progressive"):
            renderer.render_frame()
        assert any("Pass 1 rendered in" in message for message in caplog.messages)

    def test_repr_shows_state(self):
        renderer = _shell_renderer(width=6, height=4)
        renderer.render_frame()
        assert repr(renderer) == "ProgressiveRenderer(width=6, height=4, frames=1)"
