#!/usr/bin/env python3
"""Render a few passes of the Cornell box and show them with Matplotlib.

Useful where no GGUI window can be opened. Renders a fixed number of passes,
printing progress after each, then displays the gamma-corrected frame.

Usage:
    python examples/preview_cornell_box.py
"""

from __future__ import annotations

import logging
import sys

import taichi as ti

NUM_PASSES = 8


def main() -> int:
    """Render and display the Cornell box.

    Returns:
        Exit code (0 for success).
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s: %(message)s")
    ti.init(arch=ti.gpu)

    from pathbox.core.progressive import ProgressiveRenderer
    from pathbox.preview.display import show_preview
    from pathbox.scene.cornell_box import create_cornell_box_scene

    scene, camera = create_cornell_box_scene()
    renderer = ProgressiveRenderer(camera, scene)

    print(f"Rendering {NUM_PASSES} passes at {camera.width}x{camera.height}...")
    for current, target in renderer.render_progressive(NUM_PASSES):
        print(f"  Pass {current}/{target}")

    show_preview(renderer, gamma=2.2)
    return 0


if __name__ == "__main__":
    sys.exit(main())
