"""Progressive Monte Carlo path tracer for a small Cornell box scene.

This package renders a static scene of spheres and triangles with a simple
stochastic light-transport simulation and averages successive passes into a
progressively less noisy image. Compute-heavy work runs in Taichi kernels.

Subpackages:
    core: Ray utilities, random sampling, path tracing, accumulation and the
        progressive render loop
    geometry: Sphere and triangle primitives with their intersection routines
    materials: Surface material description and bounce direction sampling
    scene: Scene container, closest-hit query and the hardcoded Cornell box
    camera: Pinhole camera mapping pixels to ray directions
    preview: Presentation helpers (GGUI window, matplotlib view)
"""

__version__ = "0.1.0"
