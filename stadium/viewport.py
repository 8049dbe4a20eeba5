"""
Off-screen PyVista rendering of a generated stadium.

Mirrors the look of the interactive viewport (document theme, face-normal
shading, per-node colours) without any GUI toolkit.
"""
from __future__ import annotations

import logging
import os
from typing import Dict, Optional, Tuple

import numpy as np
import pyvista as pv

from .materials import Appearance
from .scene import StadiumScene

logger = logging.getLogger(__name__)

VIEWPORT_BASE = "#18233a"
VIEWPORT_SKY = "#f5a35f"
VIEWPORT_EDGE = "#2b1b16"
VIEWPORT_LIGHT = "#fff6e0"
VIEWPORT_AMBIENT = 0.34
VIEWPORT_DIFFUSE = 0.62
VIEWPORT_SPECULAR = 0.08
VIEWPORT_SPECULAR_POWER = 14.0

pv.set_plot_theme("document")
pv.global_theme.background = VIEWPORT_BASE
pv.global_theme.anti_aliasing = "fxaa"


def _mesh_render_kwargs(appearance: Appearance) -> Dict[str, float | bool]:
    """Flat-shaded lighting terms; metal reads shinier and emissive surfaces glow."""
    return {
        "smooth_shading": False,
        "ambient": min(1.0, VIEWPORT_AMBIENT + 0.5 * appearance.emissive_intensity),
        "diffuse": VIEWPORT_DIFFUSE,
        "specular": VIEWPORT_SPECULAR + 0.4 * appearance.metalness,
        "specular_power": VIEWPORT_SPECULAR_POWER * (1.5 - appearance.roughness),
    }


def _prepare_render_mesh(pv_mesh: pv.DataSet) -> pv.DataSet:
    prepared = pv_mesh.copy(deep=True)
    if not isinstance(prepared, pv.PolyData):
        prepared = prepared.extract_surface()
    # Stands, roofs and boxes are faceted, so shade per face
    return prepared.compute_normals(
        cell_normals=True,
        point_normals=False,
        split_vertices=True,
        consistent_normals=True,
        auto_orient_normals=False,
        non_manifold_traversal=True,
    )


def build_plotter(scene: StadiumScene, window_size: Tuple[int, int] = (1600, 1000),
                  show_edges: bool = False, plotter: Optional[pv.Plotter] = None) -> pv.Plotter:
    """Adds every mesh node of `scene` to an off-screen plotter."""
    plotter = plotter or pv.Plotter(off_screen=True, window_size=list(window_size))
    plotter.set_background(VIEWPORT_BASE, top=VIEWPORT_SKY)

    added = 0
    for name, mesh, appearance in scene.get_world_meshes():
        pv_mesh = _prepare_render_mesh(pv.wrap(mesh))
        plotter.add_mesh(
            pv_mesh,
            color=[channel / 255.0 for channel in appearance.color[:3]],
            opacity=appearance.opacity,
            show_edges=show_edges,
            edge_color=VIEWPORT_EDGE,
            line_width=1,
            name=f"{name}_{added}",
            **_mesh_render_kwargs(appearance),
        )
        added += 1

    # Emitters are drawn as small markers so their aim can be checked by eye
    if scene.emitters.emitters:
        positions = np.array([emitter.position for emitter in scene.emitters.emitters])
        plotter.add_points(positions, color=VIEWPORT_LIGHT, point_size=8, render_points_as_spheres=True)

    plotter.camera_position = "iso"
    plotter.reset_camera()
    logger.debug("Plotter prepared with %d meshes", added)
    return plotter


def save_snapshot(scene: StadiumScene, path: str, window_size: Tuple[int, int] = (1600, 1000)) -> str:
    """
    Renders the scene off-screen to an image file.

    Raises:
        ValueError: If the scene has no meshes.
    """
    if not any(True for _ in scene.iter_mesh_nodes()):
        raise ValueError("Cannot snapshot an empty stadium scene.")

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    plotter = build_plotter(scene, window_size=window_size)
    try:
        plotter.show(screenshot=path, auto_close=False)
        logger.info("Snapshot saved to: %s", path)
    finally:
        plotter.close()
    return path
