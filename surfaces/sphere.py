import math

from vectors import FLOAT_TOLERANCE, as_vec3, dot, normalize


class Sphere:
    def __init__(self, center, radius, material):
        self.center = as_vec3(center)
        self.radius = float(radius)
        self.material = material

    def intersect(self, ray_origin, ray_direction):
        """
        Compute ray-sphere intersection using the quadratic formula.

        Returns the smallest positive root, or None when the ray misses, only
        grazes the surface, or has the sphere entirely behind it.
        """
        oc = ray_origin - self.center

        a = dot(ray_direction, ray_direction)
        if a < FLOAT_TOLERANCE:
            return None
        b = 2.0 * dot(oc, ray_direction)
        c = dot(oc, oc) - self.radius * self.radius

        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return None

        sqrt_disc = math.sqrt(discriminant)
        if sqrt_disc < FLOAT_TOLERANCE:
            return None

        t1 = (-b - sqrt_disc) / (2 * a)
        t2 = (-b + sqrt_disc) / (2 * a)

        if t1 > 0:
            return t1
        if t2 > 0:
            return t2
        return None

    def normal_at(self, point):
        return normalize(point - self.center)
