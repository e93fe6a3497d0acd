"""Pixel buffer and image sinks."""

import numpy as np
from PIL import Image as PILImage


class Image:
    """Row-major RGB buffer, one uint8 triple per pixel."""

    def __init__(self, width, height):
        if width <= 0 or height <= 0:
            raise ValueError("image dimensions must be positive, got {}x{}".format(width, height))
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 3), dtype=np.uint8)


def image_to_pil(image):
    return PILImage.fromarray(image.pixels)


def save_image(image, output_path):
    """
    Save the rendered image to a file.

    The format follows the extension. A '.ppm' path gives binary PPM: a
    'P6\\n<width> <height>\\n255\\n' header followed by the raw RGB rows.
    """
    image_to_pil(image).save(output_path)
    print(f"Image saved to {output_path}")
