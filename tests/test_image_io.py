import numpy as np
import pytest
from PIL import Image as PILImage

from image_io import Image, image_to_pil, save_image
from scoped_timer import scoped_timer


def gradient_image(width=4, height=3):
    image = Image(width, height)
    for y in range(height):
        for x in range(width):
            image.pixels[y, x] = (x * 60, y * 100, 7)
    return image


def test_image_buffer_layout():
    image = Image(5, 2)
    assert image.pixels.shape == (2, 5, 3)
    assert image.pixels.dtype == np.uint8
    assert image.pixels.flags['C_CONTIGUOUS']


@pytest.mark.parametrize("width, height", [(0, 4), (4, 0), (-1, 3)])
def test_image_rejects_empty_dimensions(width, height):
    with pytest.raises(ValueError):
        Image(width, height)


def test_ppm_layout(tmp_path):
    image = gradient_image()
    path = tmp_path / "out.ppm"
    save_image(image, str(path))

    data = path.read_bytes()
    header = b"P6\n4 3\n255\n"
    assert data.startswith(header)
    assert data[len(header):] == image.pixels.tobytes()


def test_png_round_trip(tmp_path):
    image = gradient_image()
    path = tmp_path / "out.png"
    save_image(image, str(path))
    with PILImage.open(path) as loaded:
        np.testing.assert_array_equal(np.asarray(loaded.convert("RGB")), image.pixels)


def test_image_to_pil():
    pil_image = image_to_pil(gradient_image())
    assert pil_image.mode == "RGB"
    assert pil_image.size == (4, 3)


def test_scoped_timer_reports_label(capsys):
    with scoped_timer("render world"):
        pass
    out = capsys.readouterr().out.strip()
    assert out.endswith(" ms render world")
    assert int(out.split()[0]) >= 0


def test_scoped_timer_reports_even_on_error(capsys):
    with pytest.raises(RuntimeError):
        with scoped_timer("broken"):
            raise RuntimeError("boom")
    assert "ms broken" in capsys.readouterr().out
