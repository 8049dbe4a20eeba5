import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np
import trimesh

from .materials import Appearance, MaterialCache

logger = logging.getLogger(__name__)

# Resource kinds tracked by the registry
GEOMETRY = "geometry"
EMITTER = "emitter"
EMITTER_TARGET = "emitter_target"
EMITTER_HELPER = "emitter_helper"


class ResourceRegistry:
    """
    Hands out integer handles for renderer-side resources and tracks which
    ones are still alive. Materials and textures live in the owned
    MaterialCache.
    """

    def __init__(self):
        self.materials = MaterialCache()
        self._live: Dict[int, str] = {}
        self._next_handle = 0

    def acquire(self, kind: str) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._live[handle] = kind
        return handle

    def release(self, handle: Optional[int]) -> bool:
        if handle is None:
            return False
        return self._live.pop(handle, None) is not None

    def count(self, kind: Optional[str] = None) -> int:
        if kind is None:
            return len(self._live)
        return sum(1 for live_kind in self._live.values() if live_kind == kind)

    def live_count(self) -> int:
        """Geometries + materials + textures + emitters + emitter targets (+ helpers)."""
        return len(self._live) + len(self.materials) + self.materials.texture_count

    def summary(self) -> Dict[str, int]:
        return {
            GEOMETRY: self.count(GEOMETRY),
            "material": len(self.materials),
            "texture": self.materials.texture_count,
            EMITTER: self.count(EMITTER),
            EMITTER_TARGET: self.count(EMITTER_TARGET),
            EMITTER_HELPER: self.count(EMITTER_HELPER),
        }


@dataclass
class SceneNode:
    """A group or mesh node in the stadium scene tree."""
    name: str
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    mesh: Optional[trimesh.Trimesh] = field(default=None, repr=False)
    appearance: Optional[Appearance] = None
    material_id: Optional[int] = None
    geometry_handle: Optional[int] = None
    children: List["SceneNode"] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add(self, child: "SceneNode") -> "SceneNode":
        self.children.append(child)
        return child

    def find(self, name: str) -> Optional["SceneNode"]:
        for node, _ in self.walk():
            if node.name == name:
                return node
        return None

    def walk(self, parent_matrix: Optional[np.ndarray] = None) -> Iterator[Tuple["SceneNode", np.ndarray]]:
        """Depth-first iteration yielding (node, world transform)."""
        world = self.transform if parent_matrix is None else parent_matrix @ self.transform
        yield self, world
        for child in self.children:
            yield from child.walk(world)


@dataclass
class SpotEmitter:
    """Renderer-independent spot light aimed at a target point."""
    name: str
    position: np.ndarray
    target: np.ndarray
    color: str
    intensity: float
    distance: float
    angle: float
    penumbra: float
    decay: float
    handle: Optional[int] = None
    target_handle: Optional[int] = None
    helper_handle: Optional[int] = None

    @property
    def direction(self) -> np.ndarray:
        offset = np.asarray(self.target, dtype=float) - np.asarray(self.position, dtype=float)
        return offset / np.linalg.norm(offset)


class EmitterRegistry:
    """
    Light emitters and their target handles, kept apart from the mesh tree.
    `clear()` releases every handle before the next build adds new ones.
    """

    def __init__(self, resources: ResourceRegistry):
        self._resources = resources
        self.emitters: List[SpotEmitter] = []

    def __len__(self) -> int:
        return len(self.emitters)

    def add_spot(self, emitter: SpotEmitter, with_helper: bool = False) -> SpotEmitter:
        emitter.handle = self._resources.acquire(EMITTER)
        emitter.target_handle = self._resources.acquire(EMITTER_TARGET)
        if with_helper:
            emitter.helper_handle = self._resources.acquire(EMITTER_HELPER)
        self.emitters.append(emitter)
        return emitter

    def clear(self) -> int:
        released = len(self.emitters)
        for emitter in self.emitters:
            self._resources.release(emitter.handle)
            self._resources.release(emitter.target_handle)
            self._resources.release(emitter.helper_handle)
            emitter.handle = emitter.target_handle = emitter.helper_handle = None
        self.emitters = []
        return released


class StadiumScene:
    """
    Scene sink for generated stadium geometry.

    Every node carrying a mesh holds a geometry handle and a material id from
    the resource registry. `teardown()` releases everything the previous
    build created; material entries are swept at the end of each pass.
    """

    def __init__(self):
        self.root = SceneNode("StadiumRoot")
        self.resources = ResourceRegistry()
        self.emitters = EmitterRegistry(self.resources)
        self.stands: List[Any] = []
        self.params = None
        self.passes = 0

    @property
    def materials(self) -> MaterialCache:
        return self.resources.materials

    # --- Building ---

    def add_group(self, name: str, transform: Optional[np.ndarray] = None,
                  parent: Optional[SceneNode] = None, **metadata) -> SceneNode:
        node = SceneNode(name=name, transform=np.eye(4) if transform is None else np.asarray(transform, dtype=float),
                         metadata=dict(metadata))
        return (parent or self.root).add(node)

    def add_mesh(self, name: str, mesh: trimesh.Trimesh, appearance: Appearance,
                 transform: Optional[np.ndarray] = None, parent: Optional[SceneNode] = None,
                 **metadata) -> SceneNode:
        """
        Adds a mesh node. The mesh stays in its local frame; `transform`
        places it relative to `parent`.
        """
        node = SceneNode(
            name=name,
            transform=np.eye(4) if transform is None else np.asarray(transform, dtype=float),
            mesh=mesh,
            appearance=appearance,
            material_id=self.resources.materials.get(appearance),
            geometry_handle=self.resources.acquire(GEOMETRY),
            metadata=dict(metadata),
        )
        return (parent or self.root).add(node)

    def begin_pass(self):
        self.resources.materials.begin_pass()

    def end_pass(self):
        released = self.resources.materials.sweep()
        self.passes += 1
        if released:
            logger.debug("Released %d stale materials", released)

    # --- Teardown ---

    def teardown(self) -> int:
        """
        Releases every geometry handle in the node tree and every emitter.

        Returns:
            Number of geometry nodes and emitters released.
        """
        released = 0
        for node, _ in self.root.walk():
            if self.resources.release(node.geometry_handle):
                released += 1
            node.geometry_handle = None
        self.root.children = []
        released += self.emitters.clear()
        self.stands = []
        return released

    def clear(self):
        """Full reset: teardown plus dropping every cached material."""
        self.teardown()
        self.resources.materials.clear()

    # --- Queries ---

    def live_count(self) -> int:
        return self.resources.live_count()

    def iter_mesh_nodes(self) -> Iterator[Tuple[SceneNode, np.ndarray]]:
        for node, world in self.root.walk():
            if node.mesh is not None:
                yield node, world

    def get_world_meshes(self) -> List[Tuple[str, trimesh.Trimesh, Appearance]]:
        """(name, world-space mesh copy, appearance) for every mesh node."""
        meshes = []
        for node, world in self.iter_mesh_nodes():
            mesh = node.mesh.copy()
            mesh.apply_transform(world)
            meshes.append((node.name, mesh, node.appearance))
        return meshes

    def get_all_meshes(self) -> List[trimesh.Trimesh]:
        return [mesh for _, mesh, _ in self.get_world_meshes()]

    def find(self, name: str) -> Optional[SceneNode]:
        return self.root.find(name)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        vertices = [mesh.vertices for mesh in self.get_all_meshes() if mesh.vertices.size]
        if not vertices:
            return np.zeros(3), np.zeros(3)
        stacked = np.vstack(vertices)
        return stacked.min(axis=0), stacked.max(axis=0)
