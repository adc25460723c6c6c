"""Cameras that turn screen positions into primary rays."""

from __future__ import annotations

import abc
import math

import numpy as np

from .geometry import Ray, normalized


class Camera(abc.ABC):
    """A camera with an orthonormal frame and an image size in pixels."""

    def __init__(self, center, direction, up, width: int, height: int) -> None:
        self.center = np.array(center, dtype=float)
        self.direction = normalized(direction)
        self.horizontal = normalized(np.cross(self.direction, np.asarray(up, dtype=float)))
        self.up = np.cross(self.horizontal, self.direction)
        self.width = width
        self.height = height

    @abc.abstractmethod
    def generate_ray(self, point) -> Ray:
        """Return the ray through the screen-space position ``point``."""


class PerspectiveCamera(Camera):
    """A pinhole camera; ``angle`` is the field of view in radians."""

    def __init__(self, center, direction, up, width: int, height: int, angle: float) -> None:
        super().__init__(center, direction, up, width, height)
        self.cx = float(width // 2)
        self.cy = float(height // 2)
        self.fx = self.cx / math.tan(angle / 2)
        self.fy = self.cy / math.tan(angle / 2)

    def generate_ray(self, point) -> Ray:
        px, py = point
        local = normalized([(px - self.cx) / self.fx, (py - self.cy) / self.fy, 1.0])
        rotation = np.column_stack((self.horizontal, self.up, self.direction))
        return Ray(self.center, rotation @ local)