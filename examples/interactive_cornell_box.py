#!/usr/bin/env python3
"""Interactive Cornell box renderer.

Opens a window showing the Cornell box and accumulates render passes while
the R key is held. Each pass traces 20 paths per pixel with up to 10
bounces and is averaged into the displayed image; the time each pass took is
logged.

Usage:
    python examples/interactive_cornell_box.py

Controls:
    - Hold R: render passes
    - Q / Escape or close the window: quit
"""

from __future__ import annotations

import logging
import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    system = platform.system()

    if system == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # CUDA on Linux/Windows, Vulkan as fallback
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive Cornell box renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s: %(message)s")

    # Initialize Taichi before building any scene fields
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from pathbox.core.progressive import ProgressiveRenderer
    from pathbox.preview.interactive import InteractivePreview
    from pathbox.scene.cornell_box import create_cornell_box_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    scene, camera = create_cornell_box_scene()
    renderer = ProgressiveRenderer(camera, scene)

    print(f"Creating interactive preview window ({camera.width}x{camera.height})...")
    preview = InteractivePreview(renderer)

    print("  - Hold R to render")
    print("  - Press Q or Escape to quit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print(f"Preview window closed after {renderer.frames_accumulated} passes.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
