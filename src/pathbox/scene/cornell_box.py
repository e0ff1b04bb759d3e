"""Hardcoded Cornell box scene.

A unit box centred at BOX_CENTER, viewed from a camera at the origin looking
down +x through the open front face:

- Left wall (-y): green
- Right wall (+y): red
- Back wall (+x) and floor (-z): white
- Ceiling (+z): white and emissive (strength 3)
- A glossy white sphere of radius 0.3 in the middle of the box

Each wall is two triangles anchored at the box centre, with vertices given as
offsets of +/- half the box size. Setting closed_front adds a white front
wall, which turns the box into a closed room (the camera then has to be
placed inside it to see anything but that wall).

Example:
    >>> scene, camera = create_cornell_box_scene()
    >>> scene.num_triangles, scene.num_spheres
    (10, 1)
"""

import logging
from dataclasses import dataclass

from pathbox.camera.pinhole import Camera, build_camera
from pathbox.materials.surface import Material
from pathbox.scene.intersection import Scene, build_scene
from pathbox.scene.manager import Geometry, SphereInfo, TriangleInfo

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]

# =============================================================================
# Cornell Box Constants
# =============================================================================

BOX_SIZE = 1.0
BOX_CENTER = (1.0, 0.0, 0.0)

GREEN_WALL_COLOR = (0.0, 1.0, 0.0)
RED_WALL_COLOR = (1.0, 0.0, 0.0)
WHITE_WALL_COLOR = (1.0, 1.0, 1.0)
LIGHT_COLOR = (1.0, 1.0, 1.0)
LIGHT_STRENGTH = 3.0

SPHERE_RADIUS = 0.3
SPHERE_SMOOTHNESS = 0.4
SPHERE_GLOSSINESS = 8.0

IMAGE_WIDTH = 700
IMAGE_HEIGHT = 400


@dataclass
class CornellBoxParams:
    """Parameters of the Cornell box scene and its camera.

    Attributes:
        box_size: Edge length of the box.
        box_center: Centre of the box (anchor of every wall triangle).
        left_wall_color: Base color of the -y wall.
        right_wall_color: Base color of the +y wall.
        wall_color: Base color of the back wall, floor and optional front wall.
        light_color: Emission color of the ceiling.
        light_strength: Emission strength of the ceiling.
        sphere_radius: Radius of the centre sphere.
        sphere_smoothness: Smoothness of the centre sphere.
        sphere_glossiness: Glossiness of the centre sphere.
        closed_front: Add a white wall across the open front.
        camera_position: Camera position.
        camera_forward: Camera view direction.
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        fov: Camera field of view in degrees.

    Example:
        >>> params = CornellBoxParams(light_strength=5.0, closed_front=True)
    """

    box_size: float = BOX_SIZE
    box_center: Vec3 = BOX_CENTER
    left_wall_color: Vec3 = GREEN_WALL_COLOR
    right_wall_color: Vec3 = RED_WALL_COLOR
    wall_color: Vec3 = WHITE_WALL_COLOR
    light_color: Vec3 = LIGHT_COLOR
    light_strength: float = LIGHT_STRENGTH
    sphere_radius: float = SPHERE_RADIUS
    sphere_smoothness: float = SPHERE_SMOOTHNESS
    sphere_glossiness: float = SPHERE_GLOSSINESS
    closed_front: bool = False
    camera_position: Vec3 = (0.0, 0.0, 0.0)
    camera_forward: Vec3 = (1.0, 0.0, 0.0)
    image_width: int = IMAGE_WIDTH
    image_height: int = IMAGE_HEIGHT
    fov: float = 90.0


def _wall(anchor: Vec3, corners: tuple[Vec3, Vec3, Vec3, Vec3], material: Material) -> list[TriangleInfo]:
    """Two triangles covering the quad p0-p1-p2-p3 (corners in loop order)."""
    p0, p1, p2, p3 = corners
    return [
        TriangleInfo(anchor=anchor, a=p0, b=p1, c=p2, material=material),
        TriangleInfo(anchor=anchor, a=p0, b=p2, c=p3, material=material),
    ]


def cornell_box_geometry(params: CornellBoxParams | None = None) -> list[Geometry]:
    """Describe the Cornell box as an ordered geometry list.

    Args:
        params: Scene parameters; defaults to CornellBoxParams().

    Returns:
        Wall triangles (left, right, back, floor, ceiling, optional front)
        followed by the sphere.
    """
    if params is None:
        params = CornellBoxParams()

    h = params.box_size / 2.0
    anchor = params.box_center

    left = Material(base_color=params.left_wall_color, emission_color=(1.0, 1.0, 1.0))
    right = Material(base_color=params.right_wall_color, emission_color=(1.0, 1.0, 1.0))
    white = Material(base_color=params.wall_color)
    light = Material(
        base_color=params.wall_color,
        emission_color=params.light_color,
        emission_strength=params.light_strength,
    )
    glossy = Material(
        base_color=(1.0, 1.0, 1.0),
        emission_color=(1.0, 1.0, 1.0),
        smoothness=params.sphere_smoothness,
        glossiness=params.sphere_glossiness,
    )

    # Corner offsets: front/back along x, left/right along y, bottom/top along z
    fbl = (-h, -h, -h)
    fbr = (-h, h, -h)
    ftl = (-h, -h, h)
    ftr = (-h, h, h)
    bbl = (h, -h, -h)
    bbr = (h, h, -h)
    btl = (h, -h, h)
    btr = (h, h, h)

    geometry: list[Geometry] = []
    geometry += _wall(anchor, (fbl, bbl, btl, ftl), left)
    geometry += _wall(anchor, (fbr, ftr, btr, bbr), right)
    geometry += _wall(anchor, (bbl, bbr, btr, btl), white)
    geometry += _wall(anchor, (fbl, fbr, bbr, bbl), white)
    geometry += _wall(anchor, (ftl, btl, btr, ftr), light)
    if params.closed_front:
        geometry += _wall(anchor, (fbl, ftl, ftr, fbr), white)

    geometry.append(SphereInfo(center=anchor, radius=params.sphere_radius, material=glossy))
    return geometry


def create_cornell_box_scene(params: CornellBoxParams | None = None) -> tuple[Scene, Camera]:
    """Build the Cornell box scene and its camera.

    Args:
        params: Scene parameters; defaults to CornellBoxParams().

    Returns:
        A tuple of (scene, camera).

    Raises:
        CameraConfigError: If the camera parameters are invalid.
    """
    if params is None:
        params = CornellBoxParams()

    scene = build_scene(cornell_box_geometry(params))
    camera = build_camera(
        params.camera_position,
        params.camera_forward,
        params.image_width,
        params.image_height,
        fov=params.fov,
    )
    logger.info(
        "Created Cornell box: %d triangles, %d spheres, %dx%d image",
        scene.num_triangles,
        scene.num_spheres,
        camera.width,
        camera.height,
    )
    return scene, camera


def get_cornell_box_bounds(params: CornellBoxParams | None = None) -> dict[str, Vec3]:
    """Axis-aligned bounds of the box.

    Returns:
        A dictionary with keys 'min', 'max', 'center' and 'size'.
    """
    if params is None:
        params = CornellBoxParams()
    h = params.box_size / 2.0
    cx, cy, cz = params.box_center
    return {
        "min": (cx - h, cy - h, cz - h),
        "max": (cx + h, cy + h, cz + h),
        "center": (cx, cy, cz),
        "size": (params.box_size, params.box_size, params.box_size),
    }
