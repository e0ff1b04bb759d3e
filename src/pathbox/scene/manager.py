"""Scene descriptions and their packing into flat arrays.

A scene is described on the Python side as an ordered list of SphereInfo and
TriangleInfo records, each carrying its own Material. pack_geometry() turns
that list into the Structure-of-Arrays numpy layout the Taichi scene fields
are filled from: one row per primitive, tagged with its GeometryKind. Fields
that do not apply to a primitive kind are zero.

Example:
    >>> white = Material(base_color=(1.0, 1.0, 1.0))
    >>> geometry = [
    ...     SphereInfo(center=(1.0, 0.0, 0.0), radius=0.3, material=white),
    ...     TriangleInfo(
    ...         anchor=(1.0, 0.0, 0.0),
    ...         a=(0.5, -0.5, -0.5), b=(0.5, 0.5, -0.5), c=(0.5, -0.5, 0.5),
    ...         material=white,
    ...     ),
    ... ]
    >>> arrays = pack_geometry(geometry)
    >>> arrays["kinds"].tolist()
    [0, 1]
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

import numpy as np

from pathbox.materials.surface import Material

Vec3 = tuple[float, float, float]


class GeometryKind(IntEnum):
    """Tag of the closed set of primitive kinds.

    Used for dispatch in the closest-hit scan.
    """

    SPHERE = 0
    TRIANGLE = 1


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (> 0).
        material: The surface material.
    """

    center: Vec3
    radius: float
    material: Material = field(default_factory=Material)

    kind = GeometryKind.SPHERE

    def __post_init__(self) -> None:
        if math.isnan(self.radius) or self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")


@dataclass(frozen=True)
class TriangleInfo:
    """A triangle in the scene, given as an anchor and three vertex offsets.

    Attributes:
        anchor: Reference point of the triangle.
        a: First vertex, relative to anchor.
        b: Second vertex, relative to anchor.
        c: Third vertex, relative to anchor.
        material: The surface material.
    """

    anchor: Vec3
    a: Vec3
    b: Vec3
    c: Vec3
    material: Material = field(default_factory=Material)

    kind = GeometryKind.TRIANGLE

    @property
    def vertices(self) -> tuple[Vec3, Vec3, Vec3]:
        """World-space vertices anchor + a, anchor + b, anchor + c."""
        return tuple(
            tuple(o + p for o, p in zip(self.anchor, offset))
            for offset in (self.a, self.b, self.c)
        )


Geometry = Union[SphereInfo, TriangleInfo]


def pack_geometry(geometry: Sequence[Geometry]) -> dict[str, np.ndarray]:
    """Pack a geometry list into per-field numpy arrays.

    Every array has max(len(geometry), 1) rows so that an empty scene still
    has valid (unused) storage.

    Args:
        geometry: The ordered primitives of the scene.

    Returns:
        Mapping from field name to array: "kinds" (int32), "origins" (sphere
        center or triangle anchor), "radii", "vertex_a", "vertex_b",
        "vertex_c", "base_colors", "emission_colors", "emission_strengths",
        "smoothness", "glossiness" (all float32).

    Raises:
        TypeError: If an element is not a SphereInfo or TriangleInfo.
    """
    rows = max(len(geometry), 1)
    arrays = {
        "kinds": np.zeros(rows, dtype=np.int32),
        "origins": np.zeros((rows, 3), dtype=np.float32),
        "radii": np.zeros(rows, dtype=np.float32),
        "vertex_a": np.zeros((rows, 3), dtype=np.float32),
        "vertex_b": np.zeros((rows, 3), dtype=np.float32),
        "vertex_c": np.zeros((rows, 3), dtype=np.float32),
        "base_colors": np.zeros((rows, 3), dtype=np.float32),
        "emission_colors": np.zeros((rows, 3), dtype=np.float32),
        "emission_strengths": np.zeros(rows, dtype=np.float32),
        "smoothness": np.zeros(rows, dtype=np.float32),
        "glossiness": np.zeros(rows, dtype=np.float32),
    }

    for i, item in enumerate(geometry):
        if isinstance(item, SphereInfo):
            arrays["origins"][i] = item.center
            arrays["radii"][i] = item.radius
        elif isinstance(item, TriangleInfo):
            arrays["origins"][i] = item.anchor
            arrays["vertex_a"][i] = item.a
            arrays["vertex_b"][i] = item.b
            arrays["vertex_c"][i] = item.c
        else:
            raise TypeError(f"Unsupported geometry type: {type(item).__name__}")

        arrays["kinds"][i] = int(item.kind)
        material = item.material
        arrays["base_colors"][i] = material.base_color
        arrays["emission_colors"][i] = material.emission_color
        arrays["emission_strengths"][i] = material.emission_strength
        arrays["smoothness"][i] = material.smoothness
        arrays["glossiness"][i] = material.glossiness

    return arrays
