"""Vectors, rays and ray hits."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

import numpy as np

NO_HIT = 1e38


def vec3(x: float, y: float, z: float) -> np.ndarray:
    """Return a 3-component float vector."""
    return np.array([x, y, z], dtype=float)


def normalized(v) -> np.ndarray:
    """Return ``v`` scaled to unit length."""
    arr = np.asarray(v, dtype=float)
    return arr / np.linalg.norm(arr)


def randf() -> float:
    """Return a uniformly distributed float in [0, 1)."""
    return random.random()


@dataclass(eq=False)
class Ray:
    """A half-line with an origin and a (not necessarily unit) direction."""

    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        self.origin = np.array(self.origin, dtype=float)
        self.direction = np.array(self.direction, dtype=float)

    def point_at(self, t: float) -> np.ndarray:
        """Return the point at parameter ``t`` along the ray."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray <{self.origin.tolist()}, {self.direction.tolist()}>"


@dataclass(eq=False)
class Hit:
    """The closest intersection found so far along a ray."""

    t: float = NO_HIT
    material: Any = None
    normal: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.normal = np.array(self.normal, dtype=float)

    def set(self, t: float, material: Any, normal) -> None:
        """Record a new intersection."""
        self.t = t
        self.material = material
        self.normal = np.array(normal, dtype=float)

    def __repr__(self) -> str:
        return f"Hit <{self.t}, {self.normal.tolist()}>"