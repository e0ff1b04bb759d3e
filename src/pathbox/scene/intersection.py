"""Scene container and closest-hit queries.

The Scene owns Structure-of-Arrays Taichi fields holding every primitive of
one geometry list together with its material. It is uploaded once at
construction and is read-only afterwards, so any number of kernel threads
may query it concurrently.

closest_hit() scans all primitives linearly and keeps the nearest hit,
starting from a miss record at NO_HIT_DISTANCE. Ties keep the primitive that
comes first in the list.

Example:
    >>> scene = build_scene([SphereInfo(center=(0.0, 0.0, -5.0), radius=1.0)])
    >>> info = scene.query(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0))
    >>> round(info.distance, 3)
    4.0
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathbox.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from pathbox.geometry.triangle import Triangle, hit_triangle
from pathbox.materials.surface import Material, SurfaceMaterial
from pathbox.scene.manager import Geometry, GeometryKind, SphereInfo, TriangleInfo, pack_geometry

logger = logging.getLogger(__name__)

vec3 = tm.vec3


@dataclass(frozen=True)
class HitInfo:
    """Python-side result of Scene.query().

    Attributes:
        hit: Whether the ray hit anything.
        distance: Distance to the hit, NO_HIT_DISTANCE on a miss.
        point: The hit point.
        normal: The geometric unit normal at the hit.
        front_face: Whether the ray arrived against the normal.
        geometry_index: Index of the hit primitive, -1 on a miss.
        material: Material of the hit primitive, None on a miss.
    """

    hit: bool
    distance: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    geometry_index: int
    material: Material | None


@ti.data_oriented
class Scene:
    """Read-only collection of spheres and triangles with their materials.

    Attributes:
        geometry: The Python descriptions the scene was built from.
        count: Number of primitives.
    """

    def __init__(self, geometry: Sequence[Geometry]) -> None:
        self.geometry = tuple(geometry)
        self.count = len(self.geometry)

        arrays = pack_geometry(self.geometry)
        rows = arrays["kinds"].shape[0]

        self.kinds = ti.field(dtype=ti.i32, shape=rows)
        self.origins = ti.Vector.field(3, dtype=ti.f32, shape=rows)
        self.radii = ti.field(dtype=ti.f32, shape=rows)
        self.vertex_a = ti.Vector.field(3, dtype=ti.f32, shape=rows)
        self.vertex_b = ti.Vector.field(3, dtype=ti.f32, shape=rows)
        self.vertex_c = ti.Vector.field(3, dtype=ti.f32, shape=rows)
        self.base_colors = ti.Vector.field(3, dtype=ti.f32, shape=rows)
        self.emission_colors = ti.Vector.field(3, dtype=ti.f32, shape=rows)
        self.emission_strengths = ti.field(dtype=ti.f32, shape=rows)
        self.smoothness = ti.field(dtype=ti.f32, shape=rows)
        self.glossiness = ti.field(dtype=ti.f32, shape=rows)

        # Single-slot outputs of query()
        self._query_hit = ti.field(dtype=ti.i32, shape=())
        self._query_distance = ti.field(dtype=ti.f32, shape=())
        self._query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_front_face = ti.field(dtype=ti.i32, shape=())
        self._query_index = ti.field(dtype=ti.i32, shape=())

        for name, array in arrays.items():
            getattr(self, name).from_numpy(array)

    @property
    def num_spheres(self) -> int:
        return sum(1 for g in self.geometry if isinstance(g, SphereInfo))

    @property
    def num_triangles(self) -> int:
        return sum(1 for g in self.geometry if isinstance(g, TriangleInfo))

    # =========================================================================
    # Taichi-scope queries
    # =========================================================================

    @ti.func
    def intersect(self, index, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
        """Intersect a ray with the primitive at index."""
        rec = make_miss_record()
        if self.kinds[index] == int(GeometryKind.SPHERE):
            sphere = Sphere(center=self.origins[index], radius=self.radii[index])
            rec = hit_sphere(ray_origin, ray_direction, sphere)
        else:
            triangle = Triangle(
                anchor=self.origins[index],
                a=self.vertex_a[index],
                b=self.vertex_b[index],
                c=self.vertex_c[index],
            )
            rec = hit_triangle(ray_origin, ray_direction, triangle)
        return HitRecord(
            hit=rec.hit,
            distance=rec.distance,
            point=rec.point,
            normal=rec.normal,
            front_face=rec.front_face,
            geometry_index=index,
        )

    @ti.func
    def closest_hit(self, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
        """Nearest hit over all primitives, or a miss record.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The ray direction.

        Returns:
            The HitRecord with the smallest distance; on a miss hit == 0,
            distance == NO_HIT_DISTANCE and geometry_index == -1.
        """
        closest = make_miss_record()
        for i in range(self.count):
            rec = self.intersect(i, ray_origin, ray_direction)
            if rec.hit == 1 and rec.distance < closest.distance:
                closest = rec
        return closest

    @ti.func
    def material(self, index) -> SurfaceMaterial:
        """Material of the primitive at index."""
        return SurfaceMaterial(
            base_color=self.base_colors[index],
            emission_color=self.emission_colors[index],
            emission_strength=self.emission_strengths[index],
            smoothness=self.smoothness[index],
            glossiness=self.glossiness[index],
        )

    # =========================================================================
    # Python-scope queries
    # =========================================================================

    @ti.kernel
    def _query_kernel(
        self, ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32
    ):
        # Single task; the scan over primitives stays serial
        for _task in range(1):
            rec = self.closest_hit(vec3(ox, oy, oz), vec3(dx, dy, dz))
            self._query_hit[None] = rec.hit
            self._query_distance[None] = rec.distance
            self._query_point[None] = rec.point
            self._query_normal[None] = rec.normal
            self._query_front_face[None] = rec.front_face
            self._query_index[None] = rec.geometry_index

    def query(self, origin: Sequence[float], direction: Sequence[float]) -> HitInfo:
        """Run a single closest-hit query from Python.

        Args:
            origin: Ray origin.
            direction: Ray direction (not normalized here).

        Returns:
            The closest hit as a HitInfo.
        """
        self._query_kernel(*(float(v) for v in origin), *(float(v) for v in direction))

        index = int(self._query_index[None])
        point = self._query_point[None]
        normal = self._query_normal[None]
        hit = bool(self._query_hit[None])
        return HitInfo(
            hit=hit,
            distance=float(self._query_distance[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            front_face=bool(self._query_front_face[None]),
            geometry_index=index,
            material=self.geometry[index].material if hit else None,
        )

    def __repr__(self) -> str:
        return f"Scene(spheres={self.num_spheres}, triangles={self.num_triangles})"


def build_scene(geometry: Sequence[Geometry]) -> Scene:
    """Build an immutable scene from an ordered geometry list.

    Args:
        geometry: SphereInfo and TriangleInfo records; order is preserved.

    Returns:
        The uploaded Scene.
    """
    scene = Scene(geometry)
    logger.debug(
        "Built scene with %d spheres and %d triangles", scene.num_spheres, scene.num_triangles
    )
    return scene
