"""SO(3) rotations in JAX.

Rotation matrices, axis-angle vectors and quaternions. Quaternions use the
(w, x, y, z) order, which is also the [q1, q2, q3, q4] order of RAPID
orientation data.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def exp(axis_angle: Array) -> Array:
    """
    Rotation matrix of an axis-angle vector (Rodrigues' formula).

    The direction of ``axis_angle`` is the rotation axis and its norm is the
    angle in radians. Near-zero vectors use the series expansion so the
    result stays differentiable at the identity.

    Args:
        axis_angle: (..., 3) axis-angle vectors

    Returns:
        (..., 3, 3) rotation matrices
    """
    theta = jnp.linalg.norm(axis_angle, axis=-1, keepdims=True)
    near_zero = theta < 1e-8
    safe_theta = jnp.where(near_zero, 1.0, theta)

    sin_term = jnp.where(near_zero, 1.0 - theta**2 / 6.0, jnp.sin(safe_theta) / safe_theta)
    cos_term = jnp.where(near_zero, 0.5 - theta**2 / 24.0, (1.0 - jnp.cos(safe_theta)) / safe_theta**2)

    K = skew_symmetric(axis_angle)
    eye = jnp.broadcast_to(jnp.eye(3, dtype=axis_angle.dtype), K.shape)
    return eye + sin_term[..., None] * K + cos_term[..., None] * (K @ K)


def multiply(R1: Array, R2: Array) -> Array:
    return R1 @ R2


def inverse(R: Array) -> Array:
    """Transpose of a (..., 3, 3) rotation."""
    return jnp.swapaxes(R, -1, -2)


def apply(R: Array, v: Array) -> Array:
    """
    Rotate one vector per rotation, or a set of vectors by each rotation.

    Args:
        R: (..., 3, 3) rotations
        v: (..., 3) or (..., N, 3) vectors

    Returns:
        Rotated vectors with the shape of ``v``
    """
    if v.ndim == R.ndim - 1:
        return jnp.einsum("...ij,...j->...i", R, v)
    return jnp.einsum("...ij,...nj->...ni", R, v)


def skew_symmetric(v: Array) -> Array:
    """(..., 3, 3) cross-product matrices: ``skew_symmetric(v) @ w == cross(v, w)``."""
    x, y, z = v[..., 0], v[..., 1], v[..., 2]
    o = jnp.zeros_like(x)
    rows = [
        jnp.stack([o, -z, y], axis=-1),
        jnp.stack([z, o, -x], axis=-1),
        jnp.stack([-y, x, o], axis=-1),
    ]
    return jnp.stack(rows, axis=-2)


def from_quaternion(quaternion: Array) -> Array:
    """
    Rotation matrices of (w, x, y, z) quaternions.

    The quaternions are normalized first, so any non-zero scaling works.

    Args:
        quaternion: (..., 4) quaternions

    Returns:
        (..., 3, 3) rotation matrices
    """
    q = quaternion / jnp.linalg.norm(quaternion, axis=-1, keepdims=True)
    w, x, y, z = q[..., 0], q[..., 1], q[..., 2], q[..., 3]

    rows = [
        jnp.stack([w*w + x*x - y*y - z*z, 2*(x*y - w*z), 2*(x*z + w*y)], axis=-1),
        jnp.stack([2*(x*y + w*z), w*w - x*x + y*y - z*z, 2*(y*z - w*x)], axis=-1),
        jnp.stack([2*(x*z - w*y), 2*(y*z + w*x), w*w - x*x - y*y + z*z], axis=-1),
    ]
    return jnp.stack(rows, axis=-2)


def to_quaternion(matrix: Array) -> Array:
    """
    Convert rotation matrices to quaternions (w, x, y, z).

    The scalar part is kept non-negative, so identical rotations always give
    identical RAPID orientation data.

    Args:
        matrix: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 4) array of quaternions in (w, x, y, z) format
    """
    m00 = matrix[..., 0, 0]
    m01 = matrix[..., 0, 1]
    m02 = matrix[..., 0, 2]
    m10 = matrix[..., 1, 0]
    m11 = matrix[..., 1, 1]
    m12 = matrix[..., 1, 2]
    m20 = matrix[..., 2, 0]
    m21 = matrix[..., 2, 1]
    m22 = matrix[..., 2, 2]

    trace = m00 + m11 + m22
    eps = jnp.finfo(matrix.dtype).eps

    # Four candidates, one per dominant component (Shepperd's method)
    q0 = jnp.stack([trace + 1.0, m21 - m12, m02 - m20, m10 - m01], axis=-1)
    q1 = jnp.stack([m21 - m12, m00 - m11 - m22 + 1.0, m01 + m10, m02 + m20], axis=-1)
    q2 = jnp.stack([m02 - m20, m01 + m10, m11 - m00 - m22 + 1.0, m12 + m21], axis=-1)
    q3 = jnp.stack([m10 - m01, m02 + m20, m12 + m21, m22 - m00 - m11 + 1.0], axis=-1)

    mask0 = trace > 0
    mask1 = (~mask0) & (m00 > m11) & (m00 > m22)
    mask2 = (~mask0) & (~mask1) & (m11 > m22)
    mask3 = (~mask0) & (~mask1) & (~mask2)

    quaternion = (
        jnp.where(mask0[..., None], q0, 0) +
        jnp.where(mask1[..., None], q1, 0) +
        jnp.where(mask2[..., None], q2, 0) +
        jnp.where(mask3[..., None], q3, 0)
    )

    quaternion = jnp.where(quaternion[..., 0:1] < 0, -quaternion, quaternion)
    norm = jnp.maximum(jnp.linalg.norm(quaternion, axis=-1, keepdims=True), eps)

    return quaternion / norm
