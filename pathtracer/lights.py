"""Light sources."""

from __future__ import annotations

import abc
from typing import NamedTuple

import numpy as np

from .geometry import normalized, randf, vec3


class LightSample(NamedTuple):
    """A point sampled on a light, with its radiance and density."""

    radiance: np.ndarray
    position: np.ndarray
    normal: np.ndarray
    pdf: float


class Light(abc.ABC):
    """Base class of all lights."""

    @abc.abstractmethod
    def position(self) -> np.ndarray:
        """Return a representative position of the light."""

    @abc.abstractmethod
    def illumination(self, point) -> tuple[np.ndarray, np.ndarray]:
        """Return the unit direction from ``point`` to the light and its colour."""

    def is_area_light(self) -> bool:
        return False

    def sample(self) -> LightSample:
        """Sample a point on the light; lights without area return no radiance."""
        return LightSample(np.zeros(3), self.position(), vec3(0, 1, 0), 1.0)

    def color(self) -> np.ndarray:
        return np.zeros(3)


class DirectionalLight(Light):
    """Light arriving from one direction, infinitely far away."""

    def __init__(self, direction, color) -> None:
        self.direction = normalized(direction)
        self._color = np.array(color, dtype=float)

    def position(self) -> np.ndarray:
        return 1e10 * self.direction

    def illumination(self, point) -> tuple[np.ndarray, np.ndarray]:
        return -self.direction, self._color.copy()


class PointLight(Light):
    """Light emitted from a single point."""

    def __init__(self, position, color) -> None:
        self._position = np.array(position, dtype=float)
        self._color = np.array(color, dtype=float)

    def position(self) -> np.ndarray:
        return self._position.copy()

    def illumination(self, point) -> tuple[np.ndarray, np.ndarray]:
        offset = self._position - np.asarray(point, dtype=float)
        return offset / np.linalg.norm(offset), self._color.copy()


class AreaLight(Light):
    """A parallelogram light spanned by ``u`` and ``v`` from ``corner``."""

    def __init__(self, corner, u, v, color) -> None:
        self.corner = np.array(corner, dtype=float)
        self.u = np.array(u, dtype=float)
        self.v = np.array(v, dtype=float)
        self._color = np.array(color, dtype=float)
        span = np.cross(self.u, self.v)
        self.normal = normalized(span)
        self.area = float(np.linalg.norm(span))

    def position(self) -> np.ndarray:
        return self.corner + 0.5 * self.u + 0.5 * self.v

    def illumination(self, point) -> tuple[np.ndarray, np.ndarray]:
        return normalized(self.position() - np.asarray(point, dtype=float)), self._color.copy()

    def is_area_light(self) -> bool:
        return True

    def sample(self) -> LightSample:
        a, b = randf(), randf()
        point = self.corner + a * self.u + b * self.v
        return LightSample(self._color.copy(), point, self.normal.copy(), 1.0 / self.area)

    def color(self) -> np.ndarray:
        return self._color.copy()