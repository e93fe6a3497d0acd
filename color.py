"""8-bit RGB colors with saturating arithmetic.

Colors are read-only uint8 numpy arrays of shape (3,). Scaling and addition
clamp every channel to [0, 255] and floor fractional results, so overflow
never wraps around and negative factors bottom out at zero.
"""

import numpy as np


def make_color(r, g, b):
    """Create a read-only color, clamping each channel to [0, 255]."""
    channels = np.nan_to_num(np.array((r, g, b), dtype=np.float64), nan=0.0)
    c = np.floor(np.clip(channels, 0, 255)).astype(np.uint8)
    c.flags.writeable = False
    return c


def scale_color(c, s):
    """Multiply every channel by s and saturate."""
    return make_color(*(c.astype(np.float64) * s))


def add_colors(a, b):
    """Channel-wise saturating sum."""
    total = np.minimum(a.astype(np.int32) + b.astype(np.int32), 255).astype(np.uint8)
    total.flags.writeable = False
    return total


WHITE = make_color(255, 255, 255)
BLACK = make_color(0, 0, 0)
