import json
import logging
import os

import trimesh

from .constants import FILE_EXT_GLB, FILE_EXT_JSON, STADIUMGEN_VERSION
from .geometry import apply_color, optimize_meshes
from .params import ConfigurationError, StadiumParams
from .scene import StadiumScene

logger = logging.getLogger(__name__)


def _ensure_parent(file_path: str):
    export_dir = os.path.dirname(file_path)
    if export_dir:
        os.makedirs(export_dir, exist_ok=True)


def build_export_scene(scene: StadiumScene, optimize: bool = False) -> trimesh.Scene:
    """
    Converts the stadium scene into a trimesh.Scene with face colours taken
    from each node's appearance.

    Args:
        scene: The generated StadiumScene.
        optimize: Merge meshes sharing a colour into one geometry per colour.

    Raises:
        ValueError: If the scene has no meshes.
    """
    colored = [(mesh, appearance.rgba()) for _, mesh, appearance in scene.get_world_meshes()]
    if not colored:
        raise ValueError("Cannot export a stadium scene without meshes.")

    export = trimesh.Scene()
    if optimize:
        for index, mesh in enumerate(optimize_meshes(colored)):
            export.add_geometry(mesh, node_name=f"merged_{index}", geom_name=f"merged_{index}")
        return export

    for node, world in scene.iter_mesh_nodes():
        mesh = apply_color(node.mesh, node.appearance.rgba())
        export.add_geometry(mesh, node_name=f"{node.name}_{node.geometry_handle}",
                            geom_name=f"{node.name}_{node.geometry_handle}", transform=world)
    return export


def export_scene_to_glb(scene: StadiumScene, file_path: str, optimize: bool = False) -> str:
    """
    Exports the stadium scene to a single GLB file (binary glTF).

    Returns:
        The path written (with the .glb extension added if missing).

    Raises:
        ValueError: If the scene is empty.
        Exception: Propagates exceptions from trimesh export.
    """
    if not file_path.lower().endswith(FILE_EXT_GLB):
        file_path += FILE_EXT_GLB
    _ensure_parent(file_path)

    export = build_export_scene(scene, optimize=optimize)
    logger.info("Exporting %d geometries to: %s", len(export.geometry), file_path)
    try:
        export.export(file_obj=file_path, file_type="glb")
    except Exception as e:
        logger.error("Error during GLB export: %s", e)
        raise
    return file_path


def save_params_to_json(params: StadiumParams, file_path: str) -> str:
    """
    Saves a parameter set as flat keys to a JSON file.

    Raises:
        Exception: Propagates exceptions from file I/O or JSON serialization.
    """
    if not file_path.lower().endswith(FILE_EXT_JSON):
        file_path += FILE_EXT_JSON
    _ensure_parent(file_path)

    logger.info("Saving parameters to: %s", file_path)
    data = {"version": STADIUMGEN_VERSION, "params": params.to_flat()}
    try:
        with open(file_path, "w") as f:
            json.dump(data, f, indent=4)
    except Exception as e:
        logger.error("Error during JSON parameter save: %s", e)
        raise
    return file_path


def load_params_from_json(file_path: str) -> StadiumParams:
    """
    Loads a parameter set from JSON. Accepts either the saved envelope
    ({"version": ..., "params": {...}}) or a bare flat mapping.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the contents are not a valid parameter set.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Parameter file not found: {file_path}")

    logger.info("Loading parameters from: %s", file_path)
    with open(file_path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{file_path} is not valid JSON: {e}") from e

    flat = data.get("params", data) if isinstance(data, dict) else None
    if not isinstance(flat, dict):
        raise ConfigurationError(f"{file_path} does not contain a parameter mapping")
    if flat is data:
        flat = {key: value for key, value in data.items() if key != "version"}
    return StadiumParams.from_flat(flat).validate()
