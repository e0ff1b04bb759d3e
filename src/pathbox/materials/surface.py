"""Surface material and bounce direction sampling.

Every primitive carries one material made of five parameters:

    base_color: Multiplicative tint applied to the path throughput per bounce
    emission_color, emission_strength: Light emitted by the surface
    smoothness: Blend weight from a diffuse toward the mirror direction
    glossiness: Probability that a bounce is specular at all

A bounce draws a uniform direction on the hemisphere around the normal
(diffuse) and mirrors the incoming direction (specular). With probability
glossiness the outgoing direction is lerp(diffuse, specular, smoothness),
otherwise it is the diffuse direction. Neither parameter is clamped: a
negative glossiness never selects the specular branch, a glossiness >= 1
always does, and a smoothness above 1 extrapolates past the mirror direction.

No importance weights are applied; the path tracer simply multiplies the
throughput by base_color.

Example:
    >>> material = Material(base_color=(1.0, 1.0, 1.0), smoothness=0.4, glossiness=8.0)
    >>> # inside a kernel:
    >>> direction, diffuse, specular, state = scatter_direction(
    ...     surface, incident, normal, state
    ... )
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathbox.core.ray import lerp, random_on_hemisphere, reflect
from pathbox.core.sampler import next_uniform

vec3 = tm.vec3

Color = tuple[float, float, float]


@dataclass(frozen=True)
class Material:
    """Python-side material description.

    Attributes:
        base_color: Linear RGB tint, typically in [0, 1] per channel.
        emission_color: Linear RGB color of emitted light.
        emission_strength: Scalar multiplier of emission_color (>= 0).
        smoothness: Diffuse-to-mirror blend weight, nominally in [0, 1].
        glossiness: Probability of a specular bounce, nominally in [0, 1].
    """

    base_color: Color = (1.0, 1.0, 1.0)
    emission_color: Color = (0.0, 0.0, 0.0)
    emission_strength: float = 0.0
    smoothness: float = 0.0
    glossiness: float = 0.0

    def __post_init__(self) -> None:
        if len(self.base_color) != 3 or len(self.emission_color) != 3:
            raise ValueError("Colors must have exactly three channels")
        if math.isnan(self.emission_strength) or self.emission_strength < 0.0:
            raise ValueError(
                f"emission_strength must be non-negative, got {self.emission_strength}"
            )

    @property
    def emission(self) -> Color:
        """Emitted radiance: emission_color * emission_strength."""
        return tuple(c * self.emission_strength for c in self.emission_color)

    @property
    def is_emissive(self) -> bool:
        return self.emission_strength > 0.0 and any(c > 0.0 for c in self.emission_color)


@ti.dataclass
class SurfaceMaterial:
    """Kernel-side material record, assembled from scene fields.

    Attributes mirror Material.
    """

    base_color: vec3
    emission_color: vec3
    emission_strength: ti.f32
    smoothness: ti.f32
    glossiness: ti.f32


@ti.func
def emitted(material: SurfaceMaterial) -> vec3:
    """Radiance emitted by a surface."""
    return material.emission_color * material.emission_strength


@ti.func
def scatter_direction(material: SurfaceMaterial, incident: vec3, normal: vec3, state: ti.u32):
    """Choose the outgoing direction of one bounce.

    Draws, in this order, one hemisphere direction (two uniforms) and one
    uniform for the specular decision.

    Args:
        material: The surface material.
        incident: The normalized incoming ray direction.
        normal: The unit shading normal, facing the incoming ray.
        state: The generator state.

    Returns:
        A tuple (direction, diffuse, specular, new_state) where direction is
        the normalized outgoing direction (the normal when the blend
        degenerates to a zero vector), and diffuse/specular are the two
        candidate directions it was blended from.
    """
    s1, diffuse = random_on_hemisphere(normal, state)
    specular = reflect(incident, normal)
    s2, u = next_uniform(s1)

    specular_flag = 0.0
    if u <= material.glossiness:
        specular_flag = 1.0

    blended = lerp(diffuse, specular, material.smoothness * specular_flag)
    direction = normal
    if tm.length(blended) > 1e-8:
        direction = tm.normalize(blended)

    return direction, diffuse, specular, s2
