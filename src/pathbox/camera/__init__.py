"""Camera models for primary ray generation.

Components:
    pinhole: Pinhole camera mapping pixel (x, y) to a ray direction

Pixel coordinates run left to right (x) and bottom to top (y).
"""

from .pinhole import DEFAULT_FOV, DEFAULT_NEAR_CLIP, WORLD_UP, Camera, CameraConfigError, build_camera

__all__ = [
    "Camera",
    "CameraConfigError",
    "build_camera",
    "DEFAULT_FOV",
    "DEFAULT_NEAR_CLIP",
    "WORLD_UP",
]
