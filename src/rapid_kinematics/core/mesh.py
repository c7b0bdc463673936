"""Triangle mesh value type posed by forward kinematics."""

from typing import Sequence

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import se3

Array = jax.Array


@struct.dataclass
class Mesh:
    """Immutable triangle mesh.

    Attributes:
        vertices: Array of shape (num_vertices, 3).
        faces: Integer array of shape (num_faces, 3) indexing into ``vertices``.
    """
    vertices: Array
    faces: Array

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(vertices=jnp.zeros((0, 3)), faces=jnp.zeros((0, 3), dtype=jnp.int32))

    @classmethod
    def from_lists(cls, vertices, faces=()) -> "Mesh":
        vertices = jnp.asarray(vertices, dtype=jnp.float64).reshape(-1, 3)
        faces = jnp.asarray(faces, dtype=jnp.int32).reshape(-1, 3)
        return cls(vertices=vertices, faces=faces)

    @property
    def is_empty(self) -> bool:
        return self.vertices.shape[0] == 0

    def transform(self, T: Array) -> "Mesh":
        """Return a copy of the mesh posed by the rigid transform ``T``."""
        if self.is_empty:
            return self
        return self.replace(vertices=se3.apply(T, self.vertices))

    def duplicate(self) -> "Mesh":
        return self.replace(vertices=jnp.array(self.vertices), faces=jnp.array(self.faces))

    def equals(self, other: "Mesh") -> bool:
        return (self.vertices.shape == other.vertices.shape
                and self.faces.shape == other.faces.shape
                and bool(jnp.all(self.vertices == other.vertices))
                and bool(jnp.all(self.faces == other.faces)))

    def __eq__(self, other):
        if not isinstance(other, Mesh):
            return NotImplemented
        return self.equals(other)


def join(meshes: Sequence[Mesh]) -> Mesh:
    """Append meshes into one, re-indexing faces."""
    vertices, faces, offset = [], [], 0
    for mesh in meshes:
        vertices.append(mesh.vertices)
        faces.append(mesh.faces + offset)
        offset += mesh.vertices.shape[0]
    if not vertices:
        return Mesh.empty()
    return Mesh(vertices=jnp.concatenate(vertices, axis=0), faces=jnp.concatenate(faces, axis=0))
