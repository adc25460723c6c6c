"""Monte Carlo path tracing of parsed scenes and the command-line entry point."""

from __future__ import annotations

import itertools
import math
import sys

import numpy as np

from .geometry import Hit, Ray, normalized, randf, vec3
from .image import Image
from .lights import Light
from .material import MaterialType
from .scene_parser import Scene, SceneError, load_scene

MAX_DEPTH = 20
ROULETTE_DEPTH = 5
SPLIT_DEPTH = 2
EPSILON = 1e-4
SHADOW_SLACK = 1e-3
FAR_AWAY = 1e30
DEFAULT_SPP = 32
METAL_FUZZ = 0.8
GAMMA = 2.2


def reflect(incident, normal) -> np.ndarray:
    """Mirror ``incident`` about the plane with unit ``normal``."""
    incident = np.asarray(incident, dtype=float)
    normal = np.asarray(normal, dtype=float)
    return incident - 2 * float(np.dot(incident, normal)) * normal


def refract(incident, normal, ni_over_nt: float) -> np.ndarray | None:
    """Return the refracted direction, or None on total internal reflection."""
    unit = normalized(incident)
    normal = np.asarray(normal, dtype=float)
    dt = float(np.dot(unit, normal))
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1 - dt * dt)
    if discriminant <= 0:
        return None
    return ni_over_nt * (unit - normal * dt) - normal * math.sqrt(discriminant)


def cosine_sample_hemisphere(normal) -> np.ndarray:
    """Return a random unit direction around ``normal`` with cosine-weighted density."""
    normal = np.asarray(normal, dtype=float)
    r1 = 2 * math.pi * randf()
    r2 = randf()
    r2s = math.sqrt(r2)
    helper = vec3(0, 1, 0) if abs(normal[0]) > 0.1 else vec3(1, 0, 0)
    u = normalized(np.cross(helper, normal))
    v = np.cross(normal, u)
    return normalized(
        u * math.cos(r1) * r2s + v * math.sin(r1) * r2s + normal * math.sqrt(1 - r2)
    )


def _offset_ray(point: np.ndarray, direction: np.ndarray) -> Ray:
    return Ray(point + direction * EPSILON, direction)


def _light_contribution(
    light: Light, scene: Scene, hit_point: np.ndarray, normal: np.ndarray, color: np.ndarray
) -> np.ndarray:
    area = light.is_area_light()
    if area:
        sample = light.sample()
        radiance, pdf, light_normal = sample.radiance, sample.pdf, sample.normal
        to_light = sample.position - hit_point
        distance = float(np.linalg.norm(to_light))
        light_dir = normalized(to_light)
    else:
        light_dir, radiance = light.illumination(hit_point)
        light_dir = normalized(light_dir)
        distance, pdf, light_normal = FAR_AWAY, 1.0, None

    shadow_hit = Hit()
    if scene.group.intersect(_offset_ray(hit_point, light_dir), shadow_hit, EPSILON) and (
        shadow_hit.t <= distance - SHADOW_SLACK
    ):
        return np.zeros(3)

    cos_theta = max(0.0, float(np.dot(normal, light_dir)))
    if area:
        cos_light = max(0.0, float(np.dot(-light_dir, light_normal)))
        geometry = cos_theta * cos_light / (distance * distance)
    else:
        geometry = cos_theta
    brdf = color / math.pi
    return radiance * brdf * geometry / pdf


def trace_ray(ray: Ray, scene: Scene, depth: int = 0) -> np.ndarray:
    """Estimate the radiance arriving along ``ray``."""
    if depth > MAX_DEPTH:
        return np.zeros(3)

    hit = Hit()
    if scene.group is None or not scene.group.intersect(ray, hit, EPSILON):
        return np.array(scene.background_color, dtype=float)

    hit_point = ray.point_at(hit.t)
    normal = normalized(hit.normal)
    material = hit.material
    emission = np.array(material.emission_color, dtype=float)
    color = np.array(material.diffuse_color, dtype=float)

    survival = float(color.max())
    if depth > ROULETTE_DEPTH:
        if randf() > survival:
            return emission
        color = color / survival

    kind = material.kind
    if kind is MaterialType.DIFF:
        direct = np.zeros(3)
        for light in scene.lights:
            direct += _light_contribution(light, scene, hit_point, normal, color)
        bounce = cosine_sample_hemisphere(normal)
        indirect = color * trace_ray(_offset_ray(hit_point, bounce), scene, depth + 1)
        return emission + direct + indirect

    if kind is MaterialType.SPEC:
        mirrored = normalized(reflect(ray.direction, normal))
        return emission + color * trace_ray(_offset_ray(hit_point, mirrored), scene, depth + 1)

    if kind is MaterialType.REFR:
        into = float(np.dot(normal, ray.direction)) < 0
        facing = normal if into else -normal
        eta = 1.0 / material.refractive_index if into else material.refractive_index

        refl_ray = _offset_ray(hit_point, normalized(reflect(ray.direction, normal)))
        refracted = refract(ray.direction, facing, eta)
        if refracted is None:
            return emission + color * trace_ray(refl_ray, scene, depth + 1)

        refr_dir = normalized(refracted)
        refr_ray = _offset_ray(hit_point, refr_dir)

        r0 = ((1 - eta) / (1 + eta)) ** 2
        cosine = -float(np.dot(ray.direction, normal)) if into else float(np.dot(refr_dir, normal))
        c = 1 - cosine
        reflectance = r0 + (1 - r0) * c**5
        transmittance = 1 - reflectance

        if depth > SPLIT_DEPTH:
            prob = 0.25 + 0.5 * reflectance
            if randf() < prob:
                return emission + color * trace_ray(refl_ray, scene, depth + 1) * reflectance / prob
            return emission + color * trace_ray(refr_ray, scene, depth + 1) * transmittance / (1 - prob)
        return emission + color * (
            trace_ray(refl_ray, scene, depth + 1) * reflectance
            + trace_ray(refr_ray, scene, depth + 1) * transmittance
        )

    if kind is MaterialType.METAL:
        perfect = normalized(reflect(ray.direction, normal))
        perturbed = normalized(perfect + METAL_FUZZ * cosine_sample_hemisphere(normal))
        return emission + color * trace_ray(_offset_ray(hit_point, perturbed), scene, depth + 1)

    return np.zeros(3)


def clamp(x: float) -> float:
    """Clamp ``x`` to [0, 1]."""
    return 0.0 if x < 0 else (1.0 if x > 1 else x)


def render(scene: Scene, spp: int = DEFAULT_SPP) -> Image:
    """Render ``scene`` with ``spp`` jittered samples per pixel, gamma corrected."""
    camera = scene.camera
    if camera is None:
        raise ValueError("scene has no camera")
    if spp < 1:
        raise ValueError("samples per pixel must be at least 1")
    image = Image(camera.width, camera.height)
    for x, y in itertools.product(range(camera.width), range(camera.height)):
        total = np.zeros(3)
        for _ in range(spp):
            dx, dy = randf(), randf()
            total += trace_ray(camera.generate_ray((x + dx, y + dy)), scene, 0)
        mean = total / spp
        image.set_pixel(x, y, [clamp(float(c)) ** (1.0 / GAMMA) for c in mean])
    return image


def main(argv=None) -> int:
    """Render a scene file to a BMP image: ``<input scene file> <output bmp file>``."""
    args = list(sys.argv[1:] if argv is None else argv)
    for number, arg in enumerate(args, start=1):
        print(f"Argument {number} is: {arg}")

    if len(args) != 2:
        print("Usage: pathtracer <input scene file> <output bmp file>")
        return 1
    input_file, output_file = args

    try:
        scene = load_scene(input_file)
        image = render(scene)
    except (SceneError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    image.save_bmp(output_file)
    print("Hello! Computer Graphics!")
    return 0


if __name__ == "__main__":
    sys.exit(main())