import numpy as np

from camera import CoordinateSpace
from material import Material
from ray_tracer import Ray, find_nearest_intersection
from scene import Scene
from surfaces.infinite_plane import InfinitePlane
from surfaces.sphere import Sphere
from vectors import vec3

RED = Material((255, 0, 0), 1.0, 0.0, 1, 0.0)
GREEN = Material((0, 255, 0), 1.0, 0.0, 1, 0.0)
BLUE = Material((0, 0, 255), 1.0, 0.0, 1, 0.0)


def make_scene():
    return Scene(camera=CoordinateSpace.look_at((0, 0, -10), (0, 0, 0)))


def test_empty_scene_has_no_hit():
    assert find_nearest_intersection(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), make_scene()) is None


def test_nearest_sphere_wins_regardless_of_order():
    scene = make_scene()
    scene.push_sphere(Sphere((0, 0, 10), 1, RED))
    scene.push_sphere(Sphere((0, 0, 5), 1, GREEN))
    hit = find_nearest_intersection(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), scene)
    assert hit.material is GREEN
    assert hit.distance == 4.0
    np.testing.assert_allclose(hit.point, [0, 0, 4])
    np.testing.assert_allclose(hit.normal, [0, 0, -1])


def test_plane_behind_ray_is_ignored():
    scene = make_scene()
    scene.push_plane(InfinitePlane((0, 0, 1), -5, RED))
    scene.push_sphere(Sphere((0, 0, 5), 1, GREEN))
    hit = find_nearest_intersection(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), scene)
    assert hit.material is GREEN


def test_plane_normal_is_the_stored_normal():
    scene = make_scene()
    scene.push_plane(InfinitePlane((0, 1, 0), -1, BLUE))
    hit = find_nearest_intersection(Ray(vec3(0, 5, 0), vec3(0, -1, 0)), scene)
    assert hit.distance == 6.0
    np.testing.assert_array_equal(hit.normal, [0, 1, 0])


def test_ties_go_to_planes_before_spheres():
    # The plane z = 0 and the sphere touching it at the origin are both hit at t = 5
    scene = make_scene()
    scene.push_sphere(Sphere((0, 0, 3), 3, GREEN))
    scene.push_plane(InfinitePlane((0, 0, 1), 0, RED))
    hit = find_nearest_intersection(Ray(vec3(0, 0, -5), vec3(0, 0, 1)), scene)
    assert hit.distance == 5.0
    assert hit.material is RED


def test_ties_between_spheres_go_to_the_first_pushed():
    scene = make_scene()
    scene.push_sphere(Sphere((0, 0, 5), 1, GREEN))
    scene.push_sphere(Sphere((0, 0, 5), 1, BLUE))
    hit = find_nearest_intersection(Ray(vec3(0, 0, 0), vec3(0, 0, 1)), scene)
    assert hit.material is GREEN
