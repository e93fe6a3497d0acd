from camera import CoordinateSpace
from color import make_color
from light import Light
from material import Material
from surfaces.infinite_plane import InfinitePlane
from surfaces.sphere import Sphere


# Capacities of the reference configuration
MAX_PLANES = 3
MAX_SPHERES = 5
MAX_LIGHTS = 3


class SceneError(ValueError):
    pass


class SceneCapacityError(SceneError):
    pass


class SceneFileError(SceneError):
    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = "line {}: {}".format(line_number, message)
        super().__init__(message)
        self.line_number = line_number


class Scene:
    """
    Planes, spheres and lights plus the camera and background color.

    Objects are kept in insertion order, which decides ties during
    intersection. A capacity of None means the list is unbounded. The scene
    must not be modified once a render has started.
    """

    def __init__(self, background_color=(0, 0, 0), camera=None,
                 max_planes=MAX_PLANES, max_spheres=MAX_SPHERES, max_lights=MAX_LIGHTS):
        self.background_color = make_color(*background_color)
        self.camera = camera
        self.max_planes = max_planes
        self.max_spheres = max_spheres
        self.max_lights = max_lights
        self.planes = []
        self.spheres = []
        self.lights = []

    @staticmethod
    def _push(items, item, capacity, kind):
        if capacity is not None and len(items) >= capacity:
            raise SceneCapacityError(
                "cannot add {}: scene already holds the maximum of {}".format(kind, capacity))
        items.append(item)

    def push_plane(self, plane):
        self._push(self.planes, plane, self.max_planes, "plane")

    def push_sphere(self, sphere):
        self._push(self.spheres, sphere, self.max_spheres, "sphere")

    def push_light(self, light):
        self._push(self.lights, light, self.max_lights, "light")

    def set_camera(self, camera):
        if self.camera is not None:
            raise SceneError("camera is already set")
        self.camera = camera

    def __repr__(self):
        return "Scene({} planes, {} spheres, {} lights)".format(
            len(self.planes), len(self.spheres), len(self.lights))


def _parse_floats(parts, count, line_number, obj_type):
    if len(parts) < count:
        raise SceneFileError("'{}' needs {} values, got {}".format(obj_type, count, len(parts)),
                             line_number)
    try:
        return [float(p) for p in parts]
    except ValueError as e:
        raise SceneFileError("bad number in '{}': {}".format(obj_type, e), line_number) from e


def _parse_int(value, what, line_number):
    try:
        as_int = int(value)
    except (ValueError, OverflowError) as e:
        raise SceneFileError("bad {}: {}".format(what, e), line_number) from e
    if as_int != value:
        raise SceneFileError("{} must be a whole number, got {}".format(what, value), line_number)
    return as_int


def _material_at(materials, index, line_number):
    index = _parse_int(index, "material index", line_number)
    if not 1 <= index <= len(materials):
        raise SceneFileError("material index {} out of range (have {})".format(
            index, len(materials)), line_number)
    return materials[index - 1]  # 1-indexed


def parse_scene_file(file_path):
    """
    Parse a scene file into a Scene.

    Records are applied after the whole file is read, so the 'set' line that
    carries the capacities may appear anywhere.
    """
    camera = None
    background_color = (0, 0, 0)
    capacities = (MAX_PLANES, MAX_SPHERES, MAX_LIGHTS)
    materials = []
    planes = []
    spheres = []
    lights = []

    with open(file_path, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            obj_type = parts[0]
            values = parts[1:]

            if obj_type == "cam":
                params = _parse_floats(values, 9, line_number, obj_type)
                camera = CoordinateSpace.look_at(params[:3], params[3:6], params[6:9])
            elif obj_type == "set":
                params = _parse_floats(values, 3, line_number, obj_type)
                if len(params) not in (3, 6):
                    raise SceneFileError("'set' takes 3 values or 6 with capacities, got {}".format(
                        len(params)), line_number)
                background_color = params[:3]
                if len(params) == 6:
                    capacities = tuple(_parse_int(p, "capacity", line_number) for p in params[3:])
            elif obj_type == "mtl":
                params = _parse_floats(values, 7, line_number, obj_type)
                materials.append(Material(params[:3], params[3], params[4], params[5], params[6]))
            elif obj_type == "pln":
                params = _parse_floats(values, 5, line_number, obj_type)
                material = _material_at(materials, params[4], line_number)
                planes.append(InfinitePlane(params[:3], params[3], material))
            elif obj_type == "sph":
                params = _parse_floats(values, 5, line_number, obj_type)
                material = _material_at(materials, params[4], line_number)
                spheres.append(Sphere(params[:3], params[3], material))
            elif obj_type == "lgt":
                params = _parse_floats(values, 4, line_number, obj_type)
                lights.append(Light(params[:3], params[3]))
            else:
                raise SceneFileError("unknown object type: {}".format(obj_type), line_number)

    if camera is None:
        raise SceneFileError("scene file has no 'cam' line")

    scene = Scene(background_color, camera, *capacities)
    for plane in planes:
        scene.push_plane(plane)
    for sphere in spheres:
        scene.push_sphere(sphere)
    for light in lights:
        scene.push_light(light)
    return scene


def build_reference_scene():
    """Five spheres over a floor plane, lit by three lights."""
    alice_blue = (240, 248, 255)
    redish = (203, 65, 84)
    aero_blue = (124, 185, 232)
    light_purple = (124, 105, 232)
    white = (255, 255, 255)
    black = (0, 0, 0)

    camera = CoordinateSpace.look_at((0, 6, -8), (0, 0, 0))
    scene = Scene(alice_blue, camera)

    scene.push_sphere(Sphere((0, 0, 0), 3, Material(redish, 0.9, 0.1, 10, 0.0)))
    scene.push_sphere(Sphere((-3, 0, 4), 3, Material(aero_blue, 0.7, 0.4, 50, 0.0)))
    scene.push_sphere(Sphere((-4, 2, 0), 3, Material(light_purple, 0.8, 0.2, 70, 0.0)))
    scene.push_sphere(Sphere((4, 2, 0), 3, Material(white, 0.0, 0.0, 100, 0.8)))
    scene.push_sphere(Sphere((2, 0, 5), 3, Material(black, 0.0, 0.0, 100, 0.8)))

    scene.push_plane(InfinitePlane((0, 1, 0), -7, Material(alice_blue, 0.7, 0.3, 20, 0.1)))

    scene.push_light(Light((-7, 15, -7), 1.5))
    scene.push_light(Light((27, 15, 10), 1.5))
    scene.push_light(Light((0, -15, 0), 1.5))

    return scene
