import argparse
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor
from itertools import chain
from typing import NamedTuple

import numpy as np
from numba import njit

from color import WHITE, add_colors, scale_color
from image_io import Image, save_image
from material import Material
from scene import build_reference_scene, parse_scene_file
from scoped_timer import scoped_timer
from vectors import EPSILON, FLOAT_TOLERANCE, dot, normalize, reflect


# Deepest reflection level that is still shaded (primary rays are level 0)
MAX_REFLECTION_DEPTH = 3

# Offset applied to secondary ray origins to avoid self-intersection
SURFACE_OFFSET = 1e-3


class Ray(NamedTuple):
    origin: np.ndarray
    direction: np.ndarray


class Hit(NamedTuple):
    distance: float
    point: np.ndarray
    normal: np.ndarray
    material: Material


def is_zero(value):
    return -FLOAT_TOLERANCE < value < FLOAT_TOLERANCE


def specular_power(base, exponent):
    """
    base ** exponent with IEEE results, as the JIT kernel computes it.

    Zero to a negative power gives inf and overflow gives inf, both of which
    saturate later, instead of raising.
    """
    with np.errstate(divide='ignore', over='ignore', invalid='ignore'):
        return float(np.power(np.float64(base), exponent))


# =============================================================================
# Numba JIT-compiled helper functions for hot paths
# =============================================================================

@njit(cache=True)
def _plane_distance_jit(ox, oy, oz, dx, dy, dz, normal, distance):
    """Signed ray-plane distance, np.inf when the ray is parallel."""
    denom = normal[0] * dx + normal[1] * dy + normal[2] * dz
    if abs(denom) < FLOAT_TOLERANCE:
        return np.inf
    origin_dot_normal = normal[0] * ox + normal[1] * oy + normal[2] * oz
    return (distance - origin_dot_normal) / denom


@njit(cache=True)
def _sphere_distance_jit(ox, oy, oz, dx, dy, dz, center, radius):
    """Smallest positive ray-sphere root, np.inf on a miss."""
    oc_x = ox - center[0]
    oc_y = oy - center[1]
    oc_z = oz - center[2]

    a = dx * dx + dy * dy + dz * dz
    if a < FLOAT_TOLERANCE:
        return np.inf
    b = 2.0 * (oc_x * dx + oc_y * dy + oc_z * dz)
    c = oc_x * oc_x + oc_y * oc_y + oc_z * oc_z - radius * radius

    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return np.inf
    sqrt_disc = math.sqrt(discriminant)
    if sqrt_disc < FLOAT_TOLERANCE:
        return np.inf

    t1 = (-b - sqrt_disc) / (2 * a)
    t2 = (-b + sqrt_disc) / (2 * a)
    if t1 > 0:
        return t1
    if t2 > 0:
        return t2
    return np.inf


@njit(cache=True)
def _nearest_hit_jit(ox, oy, oz, dx, dy, dz,
                     plane_normals, plane_distances, num_planes,
                     sphere_centers, sphere_radii, num_spheres):
    """
    Find the nearest non-negative hit, planes first.

    Returns (kind, index, t) where kind is 0 for a plane, 1 for a sphere and
    -1 when nothing was hit.
    """
    best_t = np.inf
    best_kind = -1
    best_index = -1

    for i in range(num_planes):
        t = _plane_distance_jit(ox, oy, oz, dx, dy, dz, plane_normals[i], plane_distances[i])
        if t >= 0.0 and t < best_t:
            best_t = t
            best_kind = 0
            best_index = i

    for i in range(num_spheres):
        t = _sphere_distance_jit(ox, oy, oz, dx, dy, dz, sphere_centers[i], sphere_radii[i])
        if t >= 0.0 and t < best_t:
            best_t = t
            best_kind = 1
            best_index = i

    return best_kind, best_index, best_t


@njit(cache=True)
def _saturate_jit(value):
    if not value > 0.0:
        return 0.0
    if value > 255.0:
        return 255.0
    return np.floor(value)


@njit(cache=True)
def _cast_ray_jit(ox, oy, oz, dx, dy, dz, background,
                  plane_normals, plane_distances, plane_colors, plane_params, num_planes,
                  sphere_centers, sphere_radii, sphere_colors, sphere_params, num_spheres,
                  light_positions, light_intensities, num_lights):
    """
    Iterative form of cast_ray.

    Each reflection level stores its locally lit color and reflectance; the
    levels are then folded back from the deepest one, which gives the same
    saturating sums as the recursive version.
    """
    local_colors = np.zeros((MAX_REFLECTION_DEPTH + 1, 3))
    reflectances = np.zeros(MAX_REFLECTION_DEPTH + 1)
    levels = 0
    depth = 0

    while True:
        kind, index, t = _nearest_hit_jit(ox, oy, oz, dx, dy, dz,
                                          plane_normals, plane_distances, num_planes,
                                          sphere_centers, sphere_radii, num_spheres)
        if kind < 0:
            break

        px = ox + t * dx
        py = oy + t * dy
        pz = oz + t * dz

        if kind == 0:
            nx = plane_normals[index, 0]
            ny = plane_normals[index, 1]
            nz = plane_normals[index, 2]
            color = plane_colors[index]
            params = plane_params[index]
        else:
            nx = px - sphere_centers[index, 0]
            ny = py - sphere_centers[index, 1]
            nz = pz - sphere_centers[index, 2]
            norm = math.sqrt(nx * nx + ny * ny + nz * nz)
            if norm >= EPSILON:
                nx /= norm
                ny /= norm
                nz /= norm
            color = sphere_colors[index]
            params = sphere_params[index]

        diffuse_intensity = 0.0
        specular_intensity = 0.0
        for li in range(num_lights):
            lx = light_positions[li, 0] - px
            ly = light_positions[li, 1] - py
            lz = light_positions[li, 2] - pz
            light_dist = math.sqrt(lx * lx + ly * ly + lz * lz)
            if light_dist >= EPSILON:
                lx /= light_dist
                ly /= light_dist
                lz /= light_dist

            blocker, _index, _t = _nearest_hit_jit(px + lx * SURFACE_OFFSET,
                                                   py + ly * SURFACE_OFFSET,
                                                   pz + lz * SURFACE_OFFSET,
                                                   lx, ly, lz,
                                                   plane_normals, plane_distances, num_planes,
                                                   sphere_centers, sphere_radii, num_spheres)
            if blocker >= 0:
                continue

            n_dot_l = lx * nx + ly * ny + lz * nz
            diffuse_intensity += light_intensities[li] * max(0.0, n_dot_l)

            # reflect(light_dir, normal) . ray_direction
            rx = lx - 2.0 * n_dot_l * nx
            ry = ly - 2.0 * n_dot_l * ny
            rz = lz - 2.0 * n_dot_l * nz
            r_dot_v = max(0.0, rx * dx + ry * dy + rz * dz)
            specular_intensity += light_intensities[li] * r_dot_v ** params[2]

        diffuse_component = diffuse_intensity * params[0]
        specular_component = specular_intensity * params[1]
        highlight = _saturate_jit(255.0 * specular_component)
        for ch in range(3):
            lit = _saturate_jit(color[ch] * diffuse_component)
            local_colors[levels, ch] = min(255.0, lit + highlight)
        reflectances[levels] = params[3]
        levels += 1

        if abs(params[3]) < FLOAT_TOLERANCE or depth >= MAX_REFLECTION_DEPTH:
            break

        d_dot_n = dx * nx + dy * ny + dz * nz
        dx = dx - 2.0 * d_dot_n * nx
        dy = dy - 2.0 * d_dot_n * ny
        dz = dz - 2.0 * d_dot_n * nz
        ox = px + dx * SURFACE_OFFSET
        oy = py + dy * SURFACE_OFFSET
        oz = pz + dz * SURFACE_OFFSET
        depth += 1

    r = background[0]
    g = background[1]
    b = background[2]
    for level in range(levels - 1, -1, -1):
        reflectance = reflectances[level]
        r = min(255.0, local_colors[level, 0] + _saturate_jit(r * reflectance))
        g = min(255.0, local_colors[level, 1] + _saturate_jit(g * reflectance))
        b = min(255.0, local_colors[level, 2] + _saturate_jit(b * reflectance))
    return r, g, b


@njit(cache=True, nogil=True)
def _render_rays_jit(ray_origins, ray_directions, colors, background,
                     plane_normals, plane_distances, plane_colors, plane_params, num_planes,
                     sphere_centers, sphere_radii, sphere_colors, sphere_params, num_spheres,
                     light_positions, light_intensities, num_lights):
    """Shade N rays into colors (N, 3). Runs without the GIL."""
    for i in range(ray_origins.shape[0]):
        r, g, b = _cast_ray_jit(ray_origins[i, 0], ray_origins[i, 1], ray_origins[i, 2],
                                ray_directions[i, 0], ray_directions[i, 1], ray_directions[i, 2],
                                background,
                                plane_normals, plane_distances, plane_colors, plane_params,
                                num_planes,
                                sphere_centers, sphere_radii, sphere_colors, sphere_params,
                                num_spheres,
                                light_positions, light_intensities, num_lights)
        colors[i, 0] = r
        colors[i, 1] = g
        colors[i, 2] = b


def _material_rows(materials):
    colors = np.zeros((max(1, len(materials)), 3))
    params = np.zeros((max(1, len(materials)), 4))
    for idx, m in enumerate(materials):
        colors[idx] = m.color
        params[idx] = (m.diffuse, m.specular, m.specular_exponent, m.reflectance)
    return colors, params


def prepare_scene_data(scene):
    """
    Flatten the scene into numpy arrays for the JIT kernels.

    Arrays are padded to at least one row so empty object lists still have a
    concrete shape; the counts say how many rows are real.
    """
    num_planes = len(scene.planes)
    num_spheres = len(scene.spheres)
    num_lights = len(scene.lights)

    plane_normals = np.zeros((max(1, num_planes), 3))
    plane_distances = np.zeros(max(1, num_planes))
    for idx, p in enumerate(scene.planes):
        plane_normals[idx] = p.normal
        plane_distances[idx] = p.distance
    plane_colors, plane_params = _material_rows([p.material for p in scene.planes])

    sphere_centers = np.zeros((max(1, num_spheres), 3))
    sphere_radii = np.zeros(max(1, num_spheres))
    for idx, s in enumerate(scene.spheres):
        sphere_centers[idx] = s.center
        sphere_radii[idx] = s.radius
    sphere_colors, sphere_params = _material_rows([s.material for s in scene.spheres])

    light_positions = np.zeros((max(1, num_lights), 3))
    light_intensities = np.zeros(max(1, num_lights))
    for idx, light in enumerate(scene.lights):
        light_positions[idx] = light.position
        light_intensities[idx] = light.intensity

    return {
        'background': np.array(scene.background_color, dtype=np.float64),
        'plane_normals': plane_normals,
        'plane_distances': plane_distances,
        'plane_colors': plane_colors,
        'plane_params': plane_params,
        'num_planes': num_planes,
        'sphere_centers': sphere_centers,
        'sphere_radii': sphere_radii,
        'sphere_colors': sphere_colors,
        'sphere_params': sphere_params,
        'num_spheres': num_spheres,
        'light_positions': light_positions,
        'light_intensities': light_intensities,
        'num_lights': num_lights,
    }


def cast_rays_jit(ray_origins, ray_directions, scene_data):
    """Shade a batch of rays with the JIT kernel. Returns (N, 3) uint8 colors."""
    colors = np.zeros((ray_origins.shape[0], 3))
    _render_rays_jit(
        ray_origins, ray_directions, colors, scene_data['background'],
        scene_data['plane_normals'], scene_data['plane_distances'],
        scene_data['plane_colors'], scene_data['plane_params'], scene_data['num_planes'],
        scene_data['sphere_centers'], scene_data['sphere_radii'],
        scene_data['sphere_colors'], scene_data['sphere_params'], scene_data['num_spheres'],
        scene_data['light_positions'], scene_data['light_intensities'], scene_data['num_lights']
    )
    return colors.astype(np.uint8)


# =============================================================================
# Intersection and shading
# =============================================================================

def find_nearest_intersection(ray, scene):
    """
    Find the nearest surface intersection along the ray.

    Planes are scanned before spheres and only a strictly closer hit replaces
    the current one, so ties go to whichever object came first.

    Returns:
        Hit if something was struck, None otherwise
    """
    nearest_t = np.inf
    nearest_surface = None

    for surface in chain(scene.planes, scene.spheres):
        t = surface.intersect(ray.origin, ray.direction)
        if t is not None and t >= 0.0 and t < nearest_t:
            nearest_t = t
            nearest_surface = surface

    if nearest_surface is None:
        return None

    point = ray.origin + nearest_t * ray.direction
    return Hit(nearest_t, point, nearest_surface.normal_at(point), nearest_surface.material)


def is_occluded(point, light_dir, scene):
    """
    Check whether anything lies along light_dir from point.

    There is no distance check against the light, so an object behind the
    light still casts a shadow.
    """
    shadow_ray = Ray(point + light_dir * SURFACE_OFFSET, light_dir)
    return find_nearest_intersection(shadow_ray, scene) is not None


def cast_ray(ray, scene, depth=0):
    """
    Trace a ray through the scene and return its color.

    Phong diffuse and specular terms per unshadowed light, plus a mirror
    reflection traced recursively while depth < MAX_REFLECTION_DEPTH.
    """
    if depth > MAX_REFLECTION_DEPTH:
        return scene.background_color

    hit = find_nearest_intersection(ray, scene)
    if hit is None:
        return scene.background_color

    material = hit.material
    diffuse_intensity = 0.0
    specular_intensity = 0.0

    for light in scene.lights:
        light_dir = normalize(light.position - hit.point)
        if is_occluded(hit.point, light_dir, scene):
            continue

        diffuse_intensity += light.intensity * max(0.0, dot(light_dir, hit.normal))
        r_dot_v = max(0.0, dot(reflect(light_dir, hit.normal), ray.direction))
        specular_intensity += light.intensity * specular_power(r_dot_v, material.specular_exponent)

    reflect_color = scene.background_color
    if not is_zero(material.reflectance) and depth < MAX_REFLECTION_DEPTH:
        reflect_dir = reflect(ray.direction, hit.normal)
        reflect_ray = Ray(hit.point + reflect_dir * SURFACE_OFFSET, reflect_dir)
        reflect_color = cast_ray(reflect_ray, scene, depth + 1)

    lit = add_colors(scale_color(material.color, diffuse_intensity * material.diffuse),
                     scale_color(WHITE, specular_intensity * material.specular))
    return add_colors(lit, scale_color(reflect_color, material.reflectance))


# =============================================================================
# Tile scheduling
# =============================================================================

def split_rows(height, num_bands):
    """
    Split rows [0, height) into contiguous (y_start, y_end) bands.

    The first height % num_bands bands get one extra row. Bands that would be
    empty are dropped.
    """
    base, extra = divmod(height, num_bands)
    bands = []
    y_start = 0
    for band in range(num_bands):
        rows = base + (1 if band < extra else 0)
        if rows == 0:
            break
        bands.append((y_start, y_start + rows))
        y_start += rows
    return bands


def render_tile(scene, image, y_start, y_end):
    """Render rows [y_start, y_end) one pixel at a time with cast_ray."""
    camera = scene.camera
    for y in range(y_start, y_end):
        for x in range(image.width):
            ray_origin, ray_direction = camera.generate_ray(x, y, image.width, image.height)
            image.pixels[y, x] = cast_ray(Ray(ray_origin, ray_direction), scene)


def render_tile_jit(scene_data, camera, image, y_start, y_end):
    """Render rows [y_start, y_end) with the JIT kernel."""
    ray_origins, ray_directions = camera.generate_rays_for_rows(
        image.width, image.height, y_start, y_end)
    colors = cast_rays_jit(ray_origins, ray_directions, scene_data)
    image.pixels[y_start:y_end] = colors.reshape((y_end - y_start, image.width, 3))


def render_world(scene, image, num_workers=None, use_jit=False, verbose=False):
    """
    Render the scene into image using one worker thread per row band.

    Args:
        num_workers: number of bands/threads (default: CPU count)
        use_jit: shade with the numba kernel instead of cast_ray
        verbose: print progress information

    Every band writes only its own rows, and all workers are joined before
    this returns. An exception raised by any worker is re-raised here.
    """
    if scene.camera is None:
        raise ValueError("scene has no camera")
    if num_workers is None:
        num_workers = os.cpu_count() or 1
    if num_workers < 1:
        raise ValueError("num_workers must be at least 1, got {}".format(num_workers))

    start_time = time.time()
    camera = scene.camera
    bands = split_rows(image.height, num_workers)

    if verbose:
        print(f"Camera setup complete. Forward: {camera.z_axis}, Right: {camera.x_axis}, "
              f"Up: {camera.y_axis}")
        band_sizes = [y_end - y_start for y_start, y_end in bands]
        print(f"Rendering {image.width}x{image.height} in {len(bands)} bands "
              f"of {min(band_sizes)}-{max(band_sizes)} rows ({'jit' if use_jit else 'python'})...")

    if use_jit:
        scene_data = prepare_scene_data(scene)
        tasks = [(render_tile_jit, scene_data, camera, image, y_start, y_end)
                 for y_start, y_end in bands]
    else:
        tasks = [(render_tile, scene, image, y_start, y_end) for y_start, y_end in bands]

    with ThreadPoolExecutor(max_workers=len(bands)) as pool:
        futures = [pool.submit(*task) for task in tasks]
        for future in futures:
            future.result()

    if verbose:
        print(f"Rendering complete in {time.time() - start_time:.1f}s")

    return image


def main(argv=None):
    parser = argparse.ArgumentParser(description='Python Ray Tracer')
    parser.add_argument('scene_file', type=str, nargs='?', default=None,
                        help='Path to the scene file (default: built-in reference scene)')
    parser.add_argument('output_image', type=str, nargs='?', default='out.ppm',
                        help='Name of the output image file')
    parser.add_argument('--width', type=int, default=500, help='Image width')
    parser.add_argument('--height', type=int, default=500, help='Image height')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of worker threads (default: CPU count)')
    parser.add_argument('--sequential', action='store_true',
                        help='Render on a single worker')
    parser.add_argument('--jit', action='store_true',
                        help='Shade with the numba-compiled kernel')
    args = parser.parse_args(argv)

    if args.scene_file:
        scene = parse_scene_file(args.scene_file)
    else:
        scene = build_reference_scene()

    print(f"Scene loaded: {len(scene.planes)} planes, {len(scene.spheres)} spheres, "
          f"{len(scene.lights)} lights")

    image = Image(args.width, args.height)
    num_workers = 1 if args.sequential else args.workers

    with scoped_timer("render world"):
        render_world(scene, image, num_workers=num_workers, use_jit=args.jit, verbose=True)

    save_image(image, args.output_image)


if __name__ == '__main__':
    main()
