import math

import numpy as np
import pytest

from pathtracer.geometry import NO_HIT, Hit, Ray, vec3
from pathtracer.material import Material
from pathtracer.objects import (
    Group,
    Mesh,
    Plane,
    Sphere,
    Transform,
    Triangle,
    rotate_x,
    rotate_y,
    rotate_z,
    rotation,
    scaling,
    transform_direction,
    transform_point,
    translation,
    uniform_scaling,
)


@pytest.fixture
def material():
    return Material(vec3(0.5, 0.5, 0.5), vec3(0, 0, 0))


def test_sphere_hit_lies_on_surface(material):
    sphere = Sphere(vec3(1, 2, 3), 1.5, material)
    ray = Ray(vec3(1, 2, -10), vec3(0.1, 0.05, 1))
    hit = Hit()
    assert sphere.intersect(ray, hit, 1e-4)
    point = ray.point_at(hit.t)
    assert np.isclose(np.linalg.norm(point - sphere.center), 1.5)
    assert np.isclose(np.linalg.norm(hit.normal), 1.0)
    assert hit.material is material


def test_sphere_from_inside_uses_far_root(material):
    sphere = Sphere(vec3(0, 0, 0), 2.0, material)
    hit = Hit()
    assert sphere.intersect(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), hit, 1e-4)
    assert np.isclose(hit.t, 2.0)


def test_sphere_miss_leaves_hit_untouched(material):
    sphere = Sphere(vec3(0, 0, 0), 1.0, material)
    hit = Hit()
    assert not sphere.intersect(Ray(vec3(0, 5, -5), vec3(0, 0, 1)), hit, 1e-4)
    assert hit.t == NO_HIT
    assert hit.material is None


def test_sphere_behind_ray_is_missed(material):
    sphere = Sphere(vec3(0, 0, -10), 1.0, material)
    hit = Hit()
    assert not sphere.intersect(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), hit, 1e-4)


def test_plane_hit_satisfies_equation(material):
    plane = Plane(vec3(0, 1, 0), -2.0, material)
    ray = Ray(vec3(0.3, 5, 0.7), vec3(0.2, -1, 0.1))
    hit = Hit()
    assert plane.intersect(ray, hit, 1e-4)
    assert np.isclose(np.dot(plane.normal, ray.point_at(hit.t)), -2.0)
    assert np.allclose(hit.normal, plane.normal)


def test_plane_parallel_ray_misses(material):
    plane = Plane(vec3(0, 1, 0), 0.0, material)
    assert not plane.intersect(Ray(vec3(0, 1, 0), vec3(1, 0, 0)), Hit(), 1e-4)


def test_plane_farther_than_recorded_hit_is_ignored(material):
    plane = Plane(vec3(0, 0, 1), 10.0, material)
    hit = Hit(t=3.0)
    assert not plane.intersect(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), hit, 1e-4)
    assert hit.t == 3.0


def test_plane_normal_is_normalized(material):
    plane = Plane(vec3(0, 3, 4), 1.0, material)
    assert np.isclose(np.linalg.norm(plane.normal), 1.0)


def test_triangle_hit_and_barycentric_bounds(material):
    tri = Triangle(vec3(0, 0, 0), vec3(1, 0, 0), vec3(0, 1, 0), material)
    ray = Ray(vec3(0.2, 0.2, 5), vec3(0, 0, -1))
    hit = Hit()
    assert tri.intersect(ray, hit, 1e-4)
    assert np.isclose(hit.t, 5.0)
    assert np.allclose(np.abs(hit.normal), vec3(0, 0, 1))


def test_triangle_miss_outside(material):
    tri = Triangle(vec3(0, 0, 0), vec3(1, 0, 0), vec3(0, 1, 0), material)
    assert not tri.intersect(Ray(vec3(0.8, 0.8, 5), vec3(0, 0, -1)), Hit(), 1e-4)


def test_triangle_keeps_given_normal(material):
    tri = Triangle(vec3(0, 0, 0), vec3(1, 0, 0), vec3(0, 1, 0), material, normal=vec3(1, 0, 0))
    hit = Hit()
    assert tri.intersect(Ray(vec3(0.1, 0.1, 1), vec3(0, 0, -1)), hit, 1e-4)
    assert np.allclose(hit.normal, vec3(1, 0, 0))


def test_group_records_closest_hit(material):
    near = Sphere(vec3(0, 0, 5), 1.0, material)
    far = Sphere(vec3(0, 0, 20), 1.0, material)
    group = Group([far, near])
    ray = Ray(vec3(0, 0, 0), vec3(0, 0, 1))
    hit_group = Hit()
    hit_near = Hit()
    assert group.intersect(ray, hit_group, 1e-4)
    near.intersect(ray, hit_near, 1e-4)
    assert np.isclose(hit_group.t, hit_near.t)


def test_group_add_and_len(material):
    group = Group()
    group.add(0, Sphere(material=material))
    group.add(1, Plane(material=material))
    group.add(0, Sphere(vec3(0, 0, 3), 1.0, material))
    assert len(group) == 3
    assert isinstance(list(group)[0], Sphere)
    assert isinstance(list(group)[2], Plane)


@pytest.mark.parametrize("index", [-1, 2])
def test_group_add_invalid_index(material, index):
    group = Group([Sphere(material=material)])
    with pytest.raises(IndexError):
        group.add(index, Sphere(material=material))
    assert len(group) == 1


def test_empty_group_misses():
    hit = Hit()
    assert not Group().intersect(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), hit, 1e-4)
    assert hit.t == NO_HIT


def test_scaling_and_translation_points():
    assert np.allclose(transform_point(scaling(2, 3, 4), vec3(1, 1, 1)), vec3(2, 3, 4))
    assert np.allclose(transform_point(uniform_scaling(5), vec3(1, 2, 3)), vec3(5, 10, 15))
    offset = vec3(1, -2, 3)
    assert np.allclose(transform_point(translation(offset), vec3(0, 0, 0)), offset)
    assert np.allclose(transform_direction(translation(offset), vec3(0, 0, 1)), vec3(0, 0, 1))


@pytest.mark.parametrize(
    "axis,axis_matrix",
    [(vec3(1, 0, 0), rotate_x), (vec3(0, 1, 0), rotate_y), (vec3(0, 0, 1), rotate_z)],
)
def test_rotation_about_axis_matches_named_rotation(axis, axis_matrix):
    angle = 0.7
    assert np.allclose(rotation(axis * 3, angle), axis_matrix(angle))
    m = axis_matrix(angle)
    assert np.allclose(m[:3, :3] @ m[:3, :3].T, np.eye(3))
    assert np.allclose(transform_direction(m, axis), axis)


def test_rotate_z_quarter_turn():
    assert np.allclose(transform_direction(rotate_z(math.pi / 2), vec3(1, 0, 0)), vec3(0, 1, 0))


def test_transform_translation_matches_moved_sphere(material):
    offset = vec3(2, 1, 0)
    moved = Transform(translation(offset), Sphere(vec3(0, 0, 0), 1.0, material))
    direct = Sphere(offset, 1.0, material)
    ray = Ray(vec3(2.3, 1.2, -8), vec3(0, 0, 1))
    hit_moved, hit_direct = Hit(), Hit()
    assert moved.intersect(ray, hit_moved, 1e-4)
    assert direct.intersect(ray, hit_direct, 1e-4)
    assert np.isclose(hit_moved.t, hit_direct.t)
    assert np.allclose(hit_moved.normal, hit_direct.normal)


def test_transform_scaling_matches_bigger_sphere(material):
    scaled = Transform(uniform_scaling(2.0), Sphere(vec3(0, 0, 0), 1.0, material))
    direct = Sphere(vec3(0, 0, 0), 2.0, material)
    ray = Ray(vec3(0.5, -0.4, -9), vec3(0.02, 0.01, 1))
    hit_scaled, hit_direct = Hit(), Hit()
    assert scaled.intersect(ray, hit_scaled, 1e-4)
    assert direct.intersect(ray, hit_direct, 1e-4)
    assert np.isclose(hit_scaled.t, hit_direct.t)
    assert np.allclose(hit_scaled.normal, hit_direct.normal)
    assert np.isclose(np.linalg.norm(hit_scaled.normal), 1.0)


def test_transform_miss(material):
    moved = Transform(translation(vec3(10, 0, 0)), Sphere(vec3(0, 0, 0), 1.0, material))
    hit = Hit()
    assert not moved.intersect(Ray(vec3(0, 0, -5), vec3(0, 0, 1)), hit, 1e-4)
    assert hit.t == NO_HIT


def _write_obj(tmp_path, text):
    path = tmp_path / "model.obj"
    path.write_text(text)
    return path


def test_mesh_from_obj_reads_vertices_and_faces(tmp_path, material):
    path = _write_obj(
        tmp_path,
        "# a square\n"
        "v 0 0 0\n"
        "v 1 0 0\n"
        "v 1 1 0\n"
        "v 0 1 0\n"
        "vt 0 0\n"
        "f 1 2 3\n"
        "f 1 3 4\n",
    )
    mesh = Mesh.from_obj(path, material)
    assert len(mesh.vertices) == 4
    assert mesh.faces == [(0, 1, 2), (0, 2, 3)]
    for normal in mesh.normals:
        assert np.allclose(normal, vec3(0, 0, 1))


def test_mesh_faces_with_slashes(tmp_path, material):
    path = _write_obj(
        tmp_path,
        "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1/1 2/2 3/3\n",
    )
    mesh = Mesh.from_obj(path, material)
    assert mesh.faces == [(0, 1, 2)]


def test_mesh_intersect_matches_triangle(tmp_path, material):
    path = _write_obj(tmp_path, "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
    mesh = Mesh.from_obj(path, material)
    tri = Triangle(vec3(0, 0, 0), vec3(1, 0, 0), vec3(0, 1, 0), material)
    ray = Ray(vec3(0.25, 0.25, 3), vec3(0.01, 0, -1))
    hit_mesh, hit_tri = Hit(), Hit()
    assert mesh.intersect(ray, hit_mesh, 1e-4)
    assert tri.intersect(ray, hit_tri, 1e-4)
    assert np.isclose(hit_mesh.t, hit_tri.t)
    assert np.allclose(hit_mesh.normal, hit_tri.normal)
    assert hit_mesh.material is material


def test_mesh_miss(tmp_path, material):
    path = _write_obj(tmp_path, "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
    mesh = Mesh.from_obj(path, material)
    hit = Hit()
    assert not mesh.intersect(Ray(vec3(5, 5, 3), vec3(0, 0, -1)), hit, 1e-4)
    assert hit.t == NO_HIT


def test_mesh_missing_file(tmp_path, material):
    with pytest.raises(FileNotFoundError):
        Mesh.from_obj(tmp_path / "absent.obj", material)


def test_mesh_short_face_rejected(tmp_path, material):
    path = _write_obj(tmp_path, "v 0 0 0\nv 1 0 0\nf 1 2\n")
    with pytest.raises(ValueError):
        Mesh.from_obj(path, material)