"""Scene description, storage and queries.

Components:
    manager: Python-side geometry records and their flat array packing
    intersection: Taichi-backed Scene with closest-hit queries
    cornell_box: The hardcoded Cornell box scene and its camera

Scene data is stored Structure-of-Arrays in Taichi fields, one row per
primitive, tagged with its GeometryKind.
"""

from .cornell_box import (
    BOX_CENTER,
    BOX_SIZE,
    CornellBoxParams,
    cornell_box_geometry,
    create_cornell_box_scene,
    get_cornell_box_bounds,
)
from .intersection import HitInfo, Scene, build_scene
from .manager import Geometry, GeometryKind, SphereInfo, TriangleInfo, pack_geometry

__all__ = [
    # Manager module
    "Geometry",
    "GeometryKind",
    "SphereInfo",
    "TriangleInfo",
    "pack_geometry",
    # Intersection module
    "HitInfo",
    "Scene",
    "build_scene",
    # Cornell box module
    "BOX_CENTER",
    "BOX_SIZE",
    "CornellBoxParams",
    "cornell_box_geometry",
    "create_cornell_box_scene",
    "get_cornell_box_bounds",
]
