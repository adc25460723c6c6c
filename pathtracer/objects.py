"""Scene geometry: groups, planes, spheres, triangles, transforms and meshes."""

from __future__ import annotations

import abc
import math
import os
from typing import Any, Iterable, Sequence

import numpy as np

from .geometry import Hit, Ray, normalized, vec3

_PARALLEL_EPS = 1e-6


def scaling(sx: float, sy: float, sz: float) -> np.ndarray:
    """Return a 4x4 matrix scaling each axis separately."""
    return np.diag([sx, sy, sz, 1.0]).astype(float)


def uniform_scaling(s: float) -> np.ndarray:
    """Return a 4x4 matrix scaling all axes by ``s``."""
    return scaling(s, s, s)


def translation(offset) -> np.ndarray:
    """Return a 4x4 matrix translating by ``offset``."""
    m = np.eye(4)
    m[:3, 3] = np.asarray(offset, dtype=float)
    return m


def rotate_x(radians: float) -> np.ndarray:
    """Return a 4x4 rotation about the x axis."""
    c, s = math.cos(radians), math.sin(radians)
    return np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, c, -s, 0.0],
        [0.0, s, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotate_y(radians: float) -> np.ndarray:
    """Return a 4x4 rotation about the y axis."""
    c, s = math.cos(radians), math.sin(radians)
    return np.array([
        [c, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotate_z(radians: float) -> np.ndarray:
    """Return a 4x4 rotation about the z axis."""
    c, s = math.cos(radians), math.sin(radians)
    return np.array([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotation(axis, radians: float) -> np.ndarray:
    """Return a 4x4 rotation by ``radians`` about an arbitrary ``axis``."""
    x, y, z = normalized(axis)
    c, s = math.cos(radians), math.sin(radians)
    k = 1.0 - c
    return np.array([
        [x * x * k + c, y * x * k - z * s, z * x * k + y * s, 0.0],
        [x * y * k + z * s, y * y * k + c, z * y * k - x * s, 0.0],
        [x * z * k - y * s, y * z * k + x * s, z * z * k + c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def transform_point(matrix, point) -> np.ndarray:
    """Apply a 4x4 matrix to a point (w = 1)."""
    return (np.asarray(matrix, dtype=float) @ np.append(np.asarray(point, dtype=float), 1.0))[:3]


def transform_direction(matrix, direction) -> np.ndarray:
    """Apply a 4x4 matrix to a direction (w = 0)."""
    return (np.asarray(matrix, dtype=float) @ np.append(np.asarray(direction, dtype=float), 0.0))[:3]


class Object3D(abc.ABC):
    """Something a ray can hit."""

    def __init__(self, material: Any = None) -> None:
        self.material = material

    @abc.abstractmethod
    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        """Update ``hit`` if this object is hit closer than recorded; report whether it was."""


class Group(Object3D):
    """An ordered collection of objects."""

    def __init__(self, objects: Iterable[Object3D] | None = None) -> None:
        super().__init__()
        self._objects: list[Object3D] = list(objects or [])

    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        hit_anything = False
        for obj in self._objects:
            hit_anything |= obj.intersect(ray, hit, tmin)
        return hit_anything

    def add(self, index: int, obj: Object3D) -> None:
        """Insert ``obj`` before position ``index``."""
        if not 0 <= index <= len(self._objects):
            raise IndexError(f"invalid index {index} for a group of {len(self._objects)}")
        self._objects.insert(index, obj)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self):
        return iter(self._objects)


class Plane(Object3D):
    """The infinite plane ``dot(normal, p) == d``."""

    def __init__(self, normal=(0.0, 1.0, 0.0), d: float = 0.0, material: Any = None) -> None:
        super().__init__(material)
        self.normal = normalized(normal)
        self.d = float(d)

    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        denom = float(np.dot(self.normal, ray.direction))
        if abs(denom) < _PARALLEL_EPS:
            return False
        t = (self.d - float(np.dot(self.normal, ray.origin))) / denom
        if tmin <= t <= hit.t:
            hit.set(t, self.material, self.normal)
            return True
        return False


class Sphere(Object3D):
    """A sphere given by centre and radius."""

    def __init__(self, center=(0.0, 0.0, 0.0), radius: float = 1.0, material: Any = None) -> None:
        super().__init__(material)
        self.center = np.array(center, dtype=float)
        self.radius = float(radius)

    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        oc = ray.origin - self.center
        a = float(np.dot(ray.direction, ray.direction))
        b = 2.0 * float(np.dot(oc, ray.direction))
        c = float(np.dot(oc, oc)) - self.radius * self.radius
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return False
        root = math.sqrt(discriminant)
        t = (-b - root) / (2.0 * a)
        if t < tmin:
            t = (-b + root) / (2.0 * a)
            if t < tmin:
                return False
        if t < hit.t:
            hit.set(t, self.material, normalized(ray.point_at(t) - self.center))
            return True
        return False


class Triangle(Object3D):
    """A triangle with a flat normal, counter-clockwise winding as front."""

    def __init__(self, a, b, c, material: Any = None, normal=None) -> None:
        super().__init__(material)
        self.vertices = tuple(np.array(p, dtype=float) for p in (a, b, c))
        v0, v1, v2 = self.vertices
        self.normal = normalized(np.cross(v1 - v0, v2 - v0)) if normal is None else np.array(normal, dtype=float)

    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        v0, v1, v2 = self.vertices
        e1 = v1 - v0
        e2 = v2 - v0
        p = np.cross(ray.direction, e2)
        det = float(np.dot(e1, p))
        if abs(det) < _PARALLEL_EPS:
            return False
        inv_det = 1.0 / det
        offset = ray.origin - v0
        u = float(np.dot(offset, p)) * inv_det
        if u < 0 or u > 1:
            return False
        q = np.cross(offset, e1)
        v = float(np.dot(ray.direction, q)) * inv_det
        if v < 0 or u + v > 1:
            return False
        t = float(np.dot(e2, q)) * inv_det
        if tmin <= t < hit.t:
            hit.set(t, self.material, self.normal)
            return True
        return False


class Transform(Object3D):
    """An object placed in the scene by a 4x4 object-to-world matrix."""

    def __init__(self, matrix, obj: Object3D) -> None:
        super().__init__()
        self.object = obj
        self.inverse = np.linalg.inv(np.asarray(matrix, dtype=float))

    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        local = Ray(
            transform_point(self.inverse, ray.origin),
            transform_direction(self.inverse, ray.direction),
        )
        if not self.object.intersect(local, hit, tmin):
            return False
        world_normal = normalized(transform_direction(self.inverse.T, hit.normal))
        hit.set(hit.t, hit.material, world_normal)
        return True


class Mesh(Object3D):
    """A triangle mesh with one flat normal per face."""

    def __init__(
        self,
        vertices: Sequence,
        faces: Sequence[Sequence[int]],
        material: Any = None,
    ) -> None:
        super().__init__(material)
        self.vertices = [np.array(v, dtype=float) for v in vertices]
        self.faces = [tuple(int(i) for i in face) for face in faces]
        self.normals = [self._face_normal(face) for face in self.faces]
        self._triangles = [
            Triangle(*(self.vertices[i] for i in face), material, normal=n)
            for face, n in zip(self.faces, self.normals)
        ]

    def _face_normal(self, face: tuple[int, ...]) -> np.ndarray:
        v0, v1, v2 = (self.vertices[i] for i in face)
        cross = np.cross(v1 - v0, v2 - v0)
        return cross / np.linalg.norm(cross)

    @classmethod
    def from_obj(cls, path, material: Any = None) -> Mesh:
        """Load vertices and triangular faces from a Wavefront OBJ file."""
        vertices = []
        faces = []
        with open(os.fspath(path), encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if len(line) < 3 or line.startswith("#"):
                    continue
                tokens = line.split()
                if not tokens:
                    continue
                keyword = tokens[0]
                if keyword == "v":
                    vertices.append(vec3(*(float(x) for x in tokens[1:4])))
                elif keyword == "f":
                    if "/" in line:
                        fields = line.replace("/", " ").split()[1:]
                        indices = fields[0:6:2]
                    else:
                        indices = tokens[1:4]
                    if len(indices) < 3:
                        raise ValueError(f"face needs three vertices: {line!r}")
                    faces.append(tuple(int(i) - 1 for i in indices))
        return cls(vertices, faces, material)

    def intersect(self, ray: Ray, hit: Hit, tmin: float) -> bool:
        result = False
        for triangle in self._triangles:
            result |= triangle.intersect(ray, hit, tmin)
        return result