import numpy as np

from vectors import as_vec3, cross, normalize


# Distance from the camera origin to the film plane
FOV = 1.0


def film_extents(image_width, image_height):
    """Half film width/height; the longer image side spans the full [-1, 1]."""
    half_film_width = 1.0
    half_film_height = 1.0
    if image_width > image_height:
        half_film_height = image_height / image_width
    elif image_height > image_width:
        half_film_width = image_width / image_height
    return half_film_width, half_film_height


class CoordinateSpace:
    """An origin plus three axes. The axes are assumed orthonormal."""

    def __init__(self, origin, x_axis, y_axis, z_axis):
        self.origin = as_vec3(origin)
        self.x_axis = as_vec3(x_axis)
        self.y_axis = as_vec3(y_axis)
        self.z_axis = as_vec3(z_axis)

    @classmethod
    def look_at(cls, position, target, up=(0.0, 1.0, 0.0)):
        """Compute the orthonormal camera basis looking from position to target."""
        position = as_vec3(position)
        z_axis = normalize(as_vec3(target) - position)
        x_axis = normalize(cross(as_vec3(up), z_axis))
        y_axis = normalize(cross(z_axis, x_axis))
        return cls(position, x_axis, y_axis, z_axis)

    def vector(self, x, y, z):
        """World-space point for coordinates expressed in this space."""
        return self.origin + x * self.x_axis + y * self.y_axis + z * self.z_axis

    def film(self, distance=FOV):
        """The film plane's space: pushed forward along z, same axes."""
        return CoordinateSpace(self.origin + distance * self.z_axis,
                               self.x_axis, self.y_axis, self.z_axis)

    def generate_ray(self, x, y, image_width, image_height):
        """Generate a ray through pixel (x, y)."""
        half_film_width, half_film_height = film_extents(image_width, image_height)
        film_x = -1.0 + x * (2.0 / image_width)
        film_y = 1.0 - y * (2.0 / image_height)

        film_point = self.film().vector(half_film_width * film_x,
                                        half_film_height * film_y, 0.0)

        direction = film_point - self.origin
        direction = direction / np.linalg.norm(direction)

        return self.origin, direction

    def generate_rays_for_rows(self, image_width, image_height, y_start, y_end):
        """Generate rays for a range of rows (for parallel rendering)."""
        num_rows = y_end - y_start
        half_film_width, half_film_height = film_extents(image_width, image_height)

        x = np.arange(image_width, dtype=np.float64)
        y = np.arange(y_start, y_end, dtype=np.float64)

        xx, yy = np.meshgrid(x, y)
        xx = xx.ravel()
        yy = yy.ravel()

        px = (-1.0 + xx * (2.0 / image_width)) * half_film_width
        py = (1.0 - yy * (2.0 / image_height)) * half_film_height

        film_center = self.origin + FOV * self.z_axis
        film_points = (film_center[np.newaxis, :] +
                       np.outer(px, self.x_axis) +
                       np.outer(py, self.y_axis))

        directions = film_points - self.origin
        norms = np.linalg.norm(directions, axis=1, keepdims=True)
        directions = directions / norms

        num_rays = num_rows * image_width
        origins = np.tile(self.origin, (num_rays, 1))

        return origins, directions

    def __repr__(self):
        return "CoordinateSpace(origin={}, x_axis={}, y_axis={}, z_axis={})".format(
            self.origin.tolist(), self.x_axis.tolist(), self.y_axis.tolist(), self.z_axis.tolist())
