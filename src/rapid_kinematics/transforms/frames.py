"""Frame (plane) construction helpers.

A frame is a (4, 4) homogeneous matrix whose first three columns are the unit
x, y and z axes and whose last column is the origin. This mirrors the
"Plane" of CAD hosts: a frame is simply the transform that maps the world XY
plane onto it.
"""

import jax
import jax.numpy as jnp

from . import se3

Array = jax.Array


def world_xy() -> Array:
    """The world XY frame (identity)."""
    return se3.identity()


def from_origin_and_axes(origin, xaxis, yaxis) -> Array:
    """Build a frame from an origin and two in-plane directions.

    The x-axis is normalized, the y-axis is orthogonalized against it and the
    z-axis is their cross product.

    Args:
        origin: (3,) frame origin
        xaxis: (3,) x direction
        yaxis: (3,) approximate y direction

    Returns:
        (4, 4) frame
    """
    origin = jnp.asarray(origin, dtype=jnp.float64)
    x = jnp.asarray(xaxis, dtype=jnp.float64)
    y = jnp.asarray(yaxis, dtype=jnp.float64)

    x = x / jnp.linalg.norm(x)
    y = y - jnp.dot(y, x) * x
    y = y / jnp.linalg.norm(y)
    z = jnp.cross(x, y)

    return se3.from_position_and_rotation(origin, jnp.stack([x, y, z], axis=-1))


def from_origin_and_normal(origin, normal) -> Array:
    """Build a frame from an origin and its z-axis.

    The x-axis is chosen deterministically perpendicular to the normal: the
    world axis least aligned with the normal is projected onto the plane.

    Args:
        origin: (3,) frame origin
        normal: (3,) z direction

    Returns:
        (4, 4) frame
    """
    z = jnp.asarray(normal, dtype=jnp.float64)
    z = z / jnp.linalg.norm(z)

    helper = jnp.eye(3)[jnp.argmin(jnp.abs(z))]
    x = helper - jnp.dot(helper, z) * z

    return from_origin_and_axes(origin, x, jnp.cross(z, x))


def origin(frame: Array) -> Array:
    return frame[..., :3, 3]


def x_axis(frame: Array) -> Array:
    return frame[..., :3, 0]


def y_axis(frame: Array) -> Array:
    return frame[..., :3, 1]


def z_axis(frame: Array) -> Array:
    return frame[..., :3, 2]


def is_valid(frame) -> bool:
    """True if ``frame`` is a finite, orthonormal, right-handed (4, 4) frame."""
    if frame is None:
        return False
    frame = jnp.asarray(frame)
    if frame.shape != (4, 4):
        return False
    if not bool(jnp.all(jnp.isfinite(frame))):
        return False
    R = frame[:3, :3]
    orthonormal = jnp.allclose(R @ R.T, jnp.eye(3), atol=1e-6)
    right_handed = jnp.linalg.det(R) > 0.0
    return bool(orthonormal and right_handed)
