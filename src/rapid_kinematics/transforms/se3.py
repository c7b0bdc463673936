"""SE(3) rigid body transforms in JAX.

Transforms and frames share one representation: a (..., 4, 4) homogeneous
matrix. For a frame, the columns hold the x-axis, y-axis, z-axis and origin,
so posing a frame with a transform is a plain matrix product ``T @ F``.
All functions are pure and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Homogeneous matrix with rotation ``R`` and translation ``p``.

    Args:
        p: (..., 3) translation
        R: (..., 3, 3) rotation; batch dimensions broadcast against ``p``

    Returns:
        (..., 4, 4) transform
    """
    p = jnp.asarray(p)
    R = jnp.asarray(R)
    batch = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    dtype = jnp.result_type(p, R)

    top = jnp.concatenate([jnp.broadcast_to(R, batch + (3, 3)),
                           jnp.broadcast_to(p, batch + (3,))[..., None]], axis=-1)
    bottom = jnp.broadcast_to(jnp.array([0.0, 0.0, 0.0, 1.0], dtype=dtype), batch + (1, 4))
    return jnp.concatenate([top.astype(dtype), bottom], axis=-2)


def identity() -> Array:
    """The (4, 4) identity transform."""
    return jnp.eye(4)


def translation(vector: Array) -> Array:
    """
    Pure translation along a vector.

    Args:
        vector: (..., 3) translation

    Returns:
        (..., 4, 4) transformation matrix
    """
    vector = jnp.asarray(vector, dtype=jnp.float64)
    R = jnp.broadcast_to(jnp.eye(3), vector.shape[:-1] + (3, 3))
    return from_position_and_rotation(vector, R)


def rotation_about_axis(angle: Array, axis: Array, point: Array) -> Array:
    """
    Rotation by an angle about an axis passing through a point.

    The rotation part follows Rodrigues' formula on the normalized axis; the
    translation part keeps ``point`` fixed: ``t = p - R @ p``.

    Args:
        angle: (...,) rotation angle in radians
        axis: (..., 3) rotation axis direction (need not be unit length)
        point: (..., 3) a point on the rotation axis

    Returns:
        (..., 4, 4) transformation matrix
    """
    angle = jnp.asarray(angle, dtype=jnp.float64)
    axis = jnp.asarray(axis, dtype=jnp.float64)
    point = jnp.asarray(point, dtype=jnp.float64)

    unit = axis / jnp.linalg.norm(axis, axis=-1, keepdims=True)
    R = so3.exp(unit * angle[..., None])
    t = point - so3.apply(R, point)

    return from_position_and_rotation(t, R)


def change_basis(source: Array, target: Array) -> Array:
    """
    Transform that maps a frame onto another frame.

    The returned ``T`` satisfies ``T @ source == target``.

    Args:
        source: (..., 4, 4) frame to move from
        target: (..., 4, 4) frame to move to

    Returns:
        (..., 4, 4) transformation matrix
    """
    return multiply(target, inverse(source))


def multiply(T1: Array, T2: Array) -> Array:
    """``T1 @ T2``: apply ``T2`` first, then ``T1``. Batch dimensions broadcast."""
    return T1 @ T2


def inverse(T: Array) -> Array:
    """
    Inverse of a rigid transform.

    Uses the transposed rotation instead of a general matrix inverse:
    ``inverse([R | t]) = [R^T | -R^T t]``.
    """
    R_t = so3.inverse(T[..., :3, :3])
    return from_position_and_rotation(-so3.apply(R_t, T[..., :3, 3]), R_t)


def apply(T: Array, points: Array) -> Array:
    """Map a (3,) point or (N, 3) points through a single (4, 4) transform."""
    return jnp.einsum("ij,...j->...i", T[:3, :3], points) + T[:3, 3]


def get_position(T: Array) -> Array:
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    return T[..., :3, :3]
