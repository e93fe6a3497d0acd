import numpy as np


# Below this length a vector is treated as zero
EPSILON = 1e-6

# Tolerance for "is this float zero" checks in intersection and shading
FLOAT_TOLERANCE = 1e-4


def vec3(x, y, z):
    """Create a read-only 3D vector."""
    v = np.array((x, y, z), dtype=np.float64)
    v.flags.writeable = False
    return v


def as_vec3(values):
    """Convert any 3-sequence into a read-only vector."""
    return vec3(*values)


def dot(a, b):
    return float(a[0] * b[0] + a[1] * b[1] + a[2] * b[2])


def cross(a, b):
    """Right-handed cross product."""
    return vec3(a[1] * b[2] - a[2] * b[1],
                a[2] * b[0] - a[0] * b[2],
                a[0] * b[1] - a[1] * b[0])


def length_sq(v):
    return dot(v, v)


def length(v):
    return float(np.sqrt(length_sq(v)))


def normalize(v):
    """Normalize a vector. Vectors shorter than EPSILON come back unchanged."""
    norm = length(v)
    if norm < EPSILON:
        return v
    return v / norm


def reflect(v, n):
    """Reflect direction v around normal n."""
    return v - 2.0 * dot(v, n) * n
