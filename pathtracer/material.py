"""Surface materials and Phong shading."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np

from .geometry import Hit, Ray, normalized


class MaterialType(enum.Enum):
    """How light scatters off a surface."""

    DIFF = "DIFF"
    SPEC = "SPEC"
    REFR = "REFR"
    METAL = "METAL"


def _ambient_default() -> np.ndarray:
    return np.array([0.4, 0.4, 0.4])


@dataclass(eq=False)
class Material:
    """Colours and optical properties of a surface."""

    diffuse_color: np.ndarray
    emission_color: np.ndarray
    specular_color: np.ndarray = field(default_factory=lambda: np.zeros(3))
    shininess: float = 0.0
    reflectivity: float = 0.0
    refractivity: float = 0.0
    refractive_index: float = 1.0
    kind: MaterialType = MaterialType.DIFF
    ambient_color: np.ndarray = field(default_factory=_ambient_default)

    def __post_init__(self) -> None:
        self.diffuse_color = np.array(self.diffuse_color, dtype=float)
        self.emission_color = np.array(self.emission_color, dtype=float)
        self.specular_color = np.array(self.specular_color, dtype=float)
        self.ambient_color = np.array(self.ambient_color, dtype=float)

    def is_reflective(self) -> bool:
        return self.reflectivity > 0

    def is_refractive(self) -> bool:
        return self.refractivity > 0

    def shade(
        self,
        ray: Ray,
        hit: Hit,
        dir_to_light,
        light_color,
        shadow_intensity: float = 1.0,
    ) -> np.ndarray:
        """Return the Phong diffuse plus specular contribution of one light."""
        n = hit.normal
        view = -normalized(ray.direction)
        to_light = normalized(dir_to_light)
        mirrored = normalized(2 * np.dot(to_light, n) * n - to_light)

        diffuse = max(0.0, float(np.dot(to_light, n))) * shadow_intensity
        specular = max(0.0, float(np.dot(view, mirrored))) ** self.shininess
        specular *= shadow_intensity

        return np.asarray(light_color, dtype=float) * (
            self.diffuse_color * diffuse + self.specular_color * specular
        )