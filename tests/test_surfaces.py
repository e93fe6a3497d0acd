import numpy as np
import pytest

from material import Material
from surfaces.infinite_plane import InfinitePlane
from surfaces.sphere import Sphere
from vectors import length, normalize, vec3

MATTE = Material((128, 128, 128), 1.0, 0.0, 1, 0.0)


class TestInfinitePlane:
    def test_normal_is_normalized_on_construction(self):
        plane = InfinitePlane((0, 5, 0), 2, MATTE)
        np.testing.assert_array_equal(plane.normal, [0, 1, 0])

    def test_hit_distance(self):
        floor = InfinitePlane((0, 1, 0), -2, MATTE)
        t = floor.intersect(vec3(0, 3, 0), vec3(0, -1, 0))
        assert t == pytest.approx(5.0)

    def test_parallel_ray_reports_no_intersection(self):
        floor = InfinitePlane((0, 1, 0), -2, MATTE)
        assert floor.intersect(vec3(0, 3, 0), vec3(1, 0, 0)) is None
        assert floor.intersect(vec3(0, 3, 0), normalize(vec3(1, 1e-5, 0))) is None

    def test_plane_behind_origin_gives_negative_distance(self):
        floor = InfinitePlane((0, 1, 0), -2, MATTE)
        assert floor.intersect(vec3(0, 3, 0), vec3(0, 1, 0)) == pytest.approx(-5.0)


class TestSphere:
    def test_ray_through_center_returns_nearer_root(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        assert sphere.intersect(vec3(0, 0, -10), vec3(0, 0, 1)) == pytest.approx(7.0)

    def test_closest_approach_beyond_radius_misses(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        assert sphere.intersect(vec3(0, 3.5, -10), vec3(0, 0, 1)) is None
        assert sphere.intersect(vec3(-10, 0, -10), normalize(vec3(1, 1, 0))) is None

    def test_origin_inside_sphere_uses_positive_root(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        assert sphere.intersect(vec3(0, 0, 0), vec3(1, 0, 0)) == pytest.approx(3.0)

    def test_sphere_behind_ray_is_not_hit(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        assert sphere.intersect(vec3(0, 0, 10), vec3(0, 0, 1)) is None

    def test_tangent_ray_is_a_miss(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        assert sphere.intersect(vec3(0, 3, -10), vec3(0, 0, 1)) is None

    def test_zero_direction_is_a_miss(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        assert sphere.intersect(vec3(0, 0, -10), vec3(0, 0, 0)) is None

    def test_radius_is_a_true_radius(self):
        sphere = Sphere((1, 2, 3), 2, MATTE)
        t = sphere.intersect(vec3(1, 2, -10), vec3(0, 0, 1))
        point = vec3(1, 2, -10) + t * vec3(0, 0, 1)
        assert length(point - sphere.center) == pytest.approx(2.0)

    def test_normal_points_outward(self):
        sphere = Sphere((0, 0, 0), 3, MATTE)
        np.testing.assert_allclose(sphere.normal_at(vec3(0, 0, -3)), [0, 0, -1])
