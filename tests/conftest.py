"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from camera import CoordinateSpace  # noqa: E402
from light import Light  # noqa: E402
from material import Material  # noqa: E402
from scene import Scene, build_reference_scene  # noqa: E402
from surfaces.sphere import Sphere  # noqa: E402


ALICE_BLUE = (240, 248, 255)


@pytest.fixture
def disk_scene():
    """A radius-3 matte sphere at the origin seen from -z, lit from above."""
    scene = Scene(ALICE_BLUE, CoordinateSpace.look_at((0, 0, -10), (0, 0, 0)))
    scene.push_sphere(Sphere((0, 0, 0), 3, Material((203, 65, 84), 0.9, 0.0, 10, 0.0)))
    scene.push_light(Light((0, 20, -10), 1.5))
    return scene


@pytest.fixture
def reference_scene():
    return build_reference_scene()


@pytest.fixture(scope="session")
def project_root_path():
    """Provide the project root path."""
    return project_root
