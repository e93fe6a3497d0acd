from vectors import FLOAT_TOLERANCE, as_vec3, dot, normalize


class InfinitePlane:
    def __init__(self, normal, distance, material):
        self.normal = normalize(as_vec3(normal))
        self.distance = float(distance)
        self.material = material

    def intersect(self, ray_origin, ray_direction):
        """
        Compute ray-plane intersection. Plane equation: P . N = distance

        Returns the signed hit distance, which is negative when the plane lies
        behind the ray origin, or None when the ray runs parallel to the plane.
        """
        denom = dot(self.normal, ray_direction)

        if abs(denom) < FLOAT_TOLERANCE:
            return None

        return (self.distance - dot(self.normal, ray_origin)) / denom

    def normal_at(self, point):
        return self.normal
