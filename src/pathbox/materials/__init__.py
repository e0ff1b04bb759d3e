"""Surface materials.

Components:
    surface: The five-parameter material (base color, emission, smoothness,
        glossiness) and the bounce direction sampler built on it
"""

from .surface import Material, SurfaceMaterial, emitted, scatter_direction

__all__ = [
    "Material",
    "SurfaceMaterial",
    "emitted",
    "scatter_direction",
]
