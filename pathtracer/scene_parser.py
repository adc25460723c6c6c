"""Reading scene description files into cameras, lights, materials and objects."""

from __future__ import annotations

import math
import os
import warnings
from dataclasses import dataclass, field
from typing import Callable, Iterator

import numpy as np

from .camera import Camera, PerspectiveCamera
from .geometry import vec3
from .lights import AreaLight, DirectionalLight, Light, PointLight
from .material import Material, MaterialType
from .objects import (
    Group,
    Mesh,
    Object3D,
    Plane,
    Sphere,
    Transform,
    Triangle,
    rotate_x,
    rotate_y,
    rotate_z,
    rotation,
    scaling,
    translation,
    uniform_scaling,
)


class SceneError(ValueError):
    """Raised when a scene description cannot be read."""


@dataclass(eq=False)
class Scene:
    """Everything a scene file describes."""

    camera: Camera | None = None
    background_color: np.ndarray = field(default_factory=lambda: vec3(0.5, 0.5, 0.5))
    lights: list[Light] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)
    group: Group | None = None


class _Tokens:
    """Whitespace-separated words of a scene description."""

    def __init__(self, text: str) -> None:
        self._iter: Iterator[str] = iter(text.split())

    def next(self) -> str | None:
        return next(self._iter, None)

    def take(self, what: str) -> str:
        word = self.next()
        if word is None:
            raise SceneError(f"unexpected end of scene while reading {what}")
        return word

    def expect(self, expected: str) -> None:
        word = self.take(repr(expected))
        if word != expected:
            raise SceneError(f"expected {expected!r}, got {word!r}")

    def read_float(self) -> float:
        word = self.take("a float")
        try:
            return float(word)
        except ValueError:
            raise SceneError(f"error trying to read 1 float, got {word!r}") from None

    def read_int(self) -> int:
        word = self.take("an int")
        try:
            return int(word)
        except ValueError:
            raise SceneError(f"error trying to read 1 int, got {word!r}") from None

    def read_vector(self) -> np.ndarray:
        try:
            return vec3(self.read_float(), self.read_float(), self.read_float())
        except SceneError as exc:
            raise SceneError(f"error trying to read 3 floats to make a vector: {exc}") from None


def _degrees_to_radians(degrees: float) -> float:
    return math.pi * degrees / 180.0


class _Parser:
    def __init__(self, text: str) -> None:
        self.tokens = _Tokens(text)
        self.scene = Scene()
        self.current_material: Material | None = None

    def parse(self) -> Scene:
        top_level: dict[str, Callable[[], None]] = {
            "PerspectiveCamera": self._camera,
            "Background": self._background,
            "Lights": self._lights,
            "Materials": self._materials,
            "Group": self._top_group,
        }
        while (word := self.tokens.next()) is not None:
            handler = top_level.get(word)
            if handler is None:
                raise SceneError(f"unknown token in scene: {word!r}")
            handler()
        if not self.scene.lights:
            warnings.warn("no lights specified", UserWarning, stacklevel=3)
        return self.scene

    def _camera(self) -> None:
        t = self.tokens
        t.expect("{")
        t.expect("center")
        center = t.read_vector()
        t.expect("direction")
        direction = t.read_vector()
        t.expect("up")
        up = t.read_vector()
        t.expect("angle")
        angle = _degrees_to_radians(t.read_float())
        t.expect("width")
        width = t.read_int()
        t.expect("height")
        height = t.read_int()
        t.expect("}")
        self.scene.camera = PerspectiveCamera(center, direction, up, width, height, angle)

    def _background(self) -> None:
        t = self.tokens
        t.expect("{")
        while (word := t.take("background")) != "}":
            if word != "color":
                raise SceneError(f"unknown token in background: {word!r}")
            self.scene.background_color = t.read_vector()

    def _lights(self) -> None:
        t = self.tokens
        t.expect("{")
        t.expect("numLights")
        count = t.read_int()
        kinds: dict[str, Callable[[], Light]] = {
            "DirectionalLight": self._directional_light,
            "PointLight": self._point_light,
            "AreaLight": self._area_light,
        }
        lights = []
        for _ in range(count):
            word = t.take("a light")
            parse = kinds.get(word)
            if parse is None:
                raise SceneError(f"unknown token in lights: {word!r}")
            lights.append(parse())
        t.expect("}")
        self.scene.lights = lights

    def _directional_light(self) -> Light:
        t = self.tokens
        t.expect("{")
        t.expect("direction")
        direction = t.read_vector()
        t.expect("color")
        color = t.read_vector()
        t.expect("}")
        return DirectionalLight(direction, color)

    def _point_light(self) -> Light:
        t = self.tokens
        t.expect("{")
        t.expect("position")
        position = t.read_vector()
        t.expect("color")
        color = t.read_vector()
        t.expect("}")
        return PointLight(position, color)

    def _area_light(self) -> Light:
        t = self.tokens
        t.expect("{")
        values = {key: np.zeros(3) for key in ("position", "uvec", "vvec", "color")}
        while (word := t.take("area light")) != "}":
            if word not in values:
                raise SceneError(f"unknown token in area light: {word!r}")
            values[word] = t.read_vector()
        with np.errstate(invalid="ignore", divide="ignore"):
            return AreaLight(values["position"], values["uvec"], values["vvec"], values["color"])

    def _materials(self) -> None:
        t = self.tokens
        t.expect("{")
        t.expect("numMaterials")
        count = t.read_int()
        materials = []
        for _ in range(count):
            word = t.take("a material")
            if word not in ("Material", "PhongMaterial"):
                raise SceneError(f"unknown token in materials: {word!r}")
            materials.append(self._material())
        t.expect("}")
        self.scene.materials = materials

    def _material(self) -> Material:
        t = self.tokens
        vectors = {
            "diffuseColor": vec3(1, 1, 1),
            "specularColor": vec3(0, 0, 0),
            "emissionColor": vec3(0, 0, 0),
        }
        scalars = {
            "shininess": 0.0,
            "reflectivity": 0.0,
            "refractivity": 0.0,
            "refractiveIndex": 1.0,
        }
        kind = MaterialType.DIFF
        t.expect("{")
        while True:
            word = t.take("material")
            if word in vectors:
                vectors[word] = t.read_vector()
            elif word in scalars:
                scalars[word] = t.read_float()
            elif word == "type":
                name = t.take("material type")
                if name in MaterialType.__members__:
                    kind = MaterialType[name]
            elif word == "texture":
                t.take("texture file name")
            elif word == "}":
                break
            else:
                raise SceneError(f"unknown token in material: {word!r}")
        return Material(
            vectors["diffuseColor"],
            vectors["emissionColor"],
            vectors["specularColor"],
            scalars["shininess"],
            scalars["reflectivity"],
            scalars["refractivity"],
            scalars["refractiveIndex"],
            kind,
        )

    def _top_group(self) -> None:
        self.scene.group = self._group()

    def _object(self, word: str) -> Object3D:
        kinds: dict[str, Callable[[], Object3D]] = {
            "Group": self._group,
            "Sphere": self._sphere,
            "Plane": self._plane,
            "Triangle": self._triangle,
            "TriangleMesh": self._mesh,
            "Transform": self._transform,
        }
        parse = kinds.get(word)
        if parse is None:
            raise SceneError(f"unknown token in object: {word!r}")
        return parse()

    def _group(self) -> Group:
        t = self.tokens
        t.expect("{")
        t.expect("numObjects")
        count = t.read_int()
        group = Group()
        while len(group) < count:
            word = t.take("an object")
            if word == "MaterialIndex":
                index = t.read_int()
                if not 0 <= index < len(self.scene.materials):
                    raise SceneError(f"material index {index} out of range")
                self.current_material = self.scene.materials[index]
            else:
                group.add(len(group), self._object(word))
        t.expect("}")
        return group

    def _require_material(self, what: str) -> Material:
        if self.current_material is None:
            raise SceneError(f"{what} given before any MaterialIndex")
        return self.current_material

    def _sphere(self) -> Sphere:
        t = self.tokens
        t.expect("{")
        t.expect("center")
        center = t.read_vector()
        t.expect("radius")
        radius = t.read_float()
        t.expect("}")
        return Sphere(center, radius, self._require_material("sphere"))

    def _plane(self) -> Plane:
        t = self.tokens
        t.expect("{")
        t.expect("normal")
        normal = t.read_vector()
        t.expect("offset")
        offset = t.read_float()
        t.expect("}")
        return Plane(normal, offset, self._require_material("plane"))

    def _triangle(self) -> Triangle:
        t = self.tokens
        t.expect("{")
        t.expect("vertex0")
        v0 = t.read_vector()
        t.expect("vertex1")
        v1 = t.read_vector()
        t.expect("vertex2")
        v2 = t.read_vector()
        t.expect("}")
        return Triangle(v0, v1, v2, self._require_material("triangle"))

    def _mesh(self) -> Mesh:
        t = self.tokens
        t.expect("{")
        t.expect("obj_file")
        filename = t.take("mesh file name")
        t.expect("}")
        if not filename.endswith(".obj"):
            raise SceneError(f"mesh file {filename!r} must end in .obj")
        try:
            return Mesh.from_obj(filename, self.current_material)
        except OSError as exc:
            raise SceneError(f"cannot open {filename}: {exc}") from exc
        except (ValueError, IndexError) as exc:
            raise SceneError(f"bad mesh file {filename}: {exc}") from exc

    def _transform(self) -> Transform:
        t = self.tokens
        t.expect("{")
        matrix = np.eye(4)
        word = t.take("a transformation")
        while True:
            if word == "Scale":
                s = t.read_vector()
                matrix = matrix @ scaling(s[0], s[1], s[2])
            elif word == "UniformScale":
                matrix = matrix @ uniform_scaling(t.read_float())
            elif word == "Translate":
                matrix = matrix @ translation(t.read_vector())
            elif word == "XRotate":
                matrix = matrix @ rotate_x(_degrees_to_radians(t.read_float()))
            elif word == "YRotate":
                matrix = matrix @ rotate_y(_degrees_to_radians(t.read_float()))
            elif word == "ZRotate":
                matrix = matrix @ rotate_z(_degrees_to_radians(t.read_float()))
            elif word == "Rotate":
                t.expect("{")
                axis = t.read_vector()
                radians = _degrees_to_radians(t.read_float())
                t.expect("}")
                matrix = matrix @ rotation(axis, radians)
            elif word == "Matrix4f":
                t.expect("{")
                values = [t.read_float() for _ in range(16)]
                t.expect("}")
                # values are given column by column
                explicit = np.array(values, dtype=float).reshape(4, 4).T
                matrix = explicit @ matrix
            else:
                obj = self._object(word)
                break
            word = t.take("a transformation")
        t.expect("}")
        try:
            return Transform(matrix, obj)
        except np.linalg.LinAlgError as exc:
            raise SceneError(f"transformation matrix is not invertible: {exc}") from exc


def parse_scene(text: str) -> Scene:
    """Parse the text of a scene description."""
    return _Parser(text).parse()


def load_scene(path) -> Scene:
    """Read and parse a scene description file; its name must end in .txt."""
    name = os.fspath(path)
    if not name.endswith(".txt"):
        raise SceneError(f"wrong file name extension: {name!r}")
    try:
        with open(name, encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise SceneError(f"cannot open scene file {name!r}: {exc}") from exc
    return parse_scene(text)