"""End-to-end tests: Cornell box scene through the progressive renderer.

These tests run the full pipeline (scene build, camera, render passes,
packed accumulation, display conversion) on small images to keep them fast.
"""

import numpy as np

WIDTH = 16
HEIGHT = 9


def _build(samples_per_pixel=8, seed=0):
    from pathbox.core.progressive import ProgressiveRenderer, RenderSettings
    from pathbox.scene.cornell_box import CornellBoxParams, create_cornell_box_scene

    scene, camera = create_cornell_box_scene(CornellBoxParams(image_width=WIDTH, image_height=HEIGHT))
    settings = RenderSettings(samples_per_pixel=samples_per_pixel, seed=seed)
    return ProgressiveRenderer(camera, scene, settings)


class TestCornellBoxIntegration:
    """Full render of the Cornell box."""

    def test_cornell_box_end_to_end_renders_successfully(self) -> None:
        renderer = _build()
        assert renderer.render(3) == 3

        image = renderer.get_image_numpy()
        assert image.shape == (HEIGHT, WIDTH, 3)
        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0
        assert image.max() <= 1.0

    def test_cornell_box_has_nonzero_illumination(self) -> None:
        renderer = _build()
        renderer.render(2)
        image = renderer.get_image_numpy()
        assert image.mean() > 0.01
        # The ceiling light (strength 3) saturates pixels just below the top row
        assert image[-2].max() > 0.99

    def test_accumulated_frame_is_mean_of_clamped_passes(self) -> None:
        from pathbox.core.integrator import render_pass

        renderer = _build(samples_per_pixel=4, seed=11)
        renderer.render(4)

        passes = [
            np.clip(
                render_pass(renderer.camera, renderer.scene, 4, 10, seed=11, pass_index=i),
                0.0,
                1.0,
            )
            for i in range(4)
        ]
        expected = np.mean(passes, axis=0)
        np.testing.assert_allclose(renderer.get_image_numpy(), expected, atol=2.5 / 255)

    def test_more_passes_reduce_noise(self) -> None:
        """Frames from two seeds agree better after more passes."""
        a = _build(samples_per_pixel=2, seed=1)
        b = _build(samples_per_pixel=2, seed=2)

        a.render(1)
        b.render(1)
        early = np.abs(a.get_image_numpy() - b.get_image_numpy()).mean()

        a.render(15)
        b.render(15)
        late = np.abs(a.get_image_numpy() - b.get_image_numpy()).mean()

        assert late < early


class TestDisplayPipeline:
    """Rendered frames flow into the display conversions."""

    def test_frame_to_image_orientation_matches_frame(self) -> None:
        from pathbox.preview.display import frame_to_canvas, frame_to_image

        renderer = _build()
        renderer.render(1)
        decoded = renderer.get_image_numpy()

        image = frame_to_image(renderer.frame)
        canvas = frame_to_canvas(renderer.frame)
        np.testing.assert_array_equal(image[0], decoded[-1])
        np.testing.assert_array_equal(canvas[:, 0], decoded[0])
