"""SO(3) rotations and unit quaternions in JAX.

Rotation matrices are (..., 3, 3) arrays, rotation vectors (axis * angle) are
(..., 3) arrays and quaternions are (..., 4) arrays in scalar-first
(w, x, y, z) order. All functions are pure and JIT-able.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def skew_symmetric(v: Array) -> Array:
    """
    Convert 3D vector to skew-symmetric (cross-product) matrix.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) matrix K such that K @ u == cross(v, u)
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)

    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1)
    ], axis=-2)


def exp(rotvec: Array) -> Array:
    """
    SO(3) exponential map (Rodrigues' formula).

    Args:
        rotvec: (..., 3) rotation vector, axis scaled by angle

    Returns:
        (..., 3, 3) rotation matrix
    """
    angle = jnp.linalg.norm(rotvec, axis=-1, keepdims=True)
    small_angle = angle < 1e-8

    # Taylor expansion near zero keeps the division finite
    safe_angle = jnp.where(small_angle, 1.0, angle)
    sin_coef = jnp.where(small_angle, 1.0 - angle**2 / 6.0, jnp.sin(angle) / safe_angle)
    cos_coef = jnp.where(small_angle, 0.5 - angle**2 / 24.0, (1.0 - jnp.cos(angle)) / safe_angle**2)

    K = skew_symmetric(rotvec)
    I = jnp.broadcast_to(jnp.eye(3, dtype=rotvec.dtype), K.shape)

    return I + sin_coef[..., None] * K + cos_coef[..., None] * jnp.matmul(K, K)


def from_rpy(rpy: Array) -> Array:
    """Rotation matrix from fixed-axis roll, pitch, yaw angles: R = Rz @ Ry @ Rx."""
    rpy = jnp.asarray(rpy, dtype=jnp.float64)
    R_x = exp(jnp.array([1.0, 0.0, 0.0]) * rpy[0])
    R_y = exp(jnp.array([0.0, 1.0, 0.0]) * rpy[1])
    R_z = exp(jnp.array([0.0, 0.0, 1.0]) * rpy[2])
    return R_z @ R_y @ R_x


def inverse(R: Array) -> Array:
    """Inverse of a rotation matrix, i.e. its transpose."""
    return jnp.swapaxes(R, -1, -2)


def apply(R: Array, v: Array) -> Array:
    """Rotate (..., 3) vector(s) by R."""
    return jnp.einsum('...ij,...j->...i', R, v)


def normalize_quaternion(quat: Array) -> Array:
    """Normalize quaternions to unit length."""
    return quat / jnp.linalg.norm(quat, axis=-1, keepdims=True)


def from_quaternion(quat: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quat: (..., 4) array of quaternions in (w, x, y, z) format

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    w, x, y, z = jnp.moveaxis(normalize_quaternion(quat), -1, 0)

    xx, yy, zz = x*x, y*y, z*z
    wx, wy, wz = w*x, w*y, w*z
    xy, xz, yz = x*y, x*z, y*z

    return jnp.stack([
        jnp.stack([1 - 2*(yy + zz), 2*(xy - wz), 2*(xz + wy)], axis=-1),
        jnp.stack([2*(xy + wz), 1 - 2*(xx + zz), 2*(yz - wx)], axis=-1),
        jnp.stack([2*(xz - wy), 2*(yz + wx), 1 - 2*(xx + yy)], axis=-1)
    ], axis=-2)


def quaternion_multiply(q1: Array, q2: Array) -> Array:
    """Hamilton product q1 ⊗ q2 of (w, x, y, z) quaternions."""
    w1, x1, y1, z1 = jnp.moveaxis(q1, -1, 0)
    w2, x2, y2, z2 = jnp.moveaxis(q2, -1, 0)

    return jnp.stack([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ], axis=-1)


def quaternion_exp(rotvec: Array) -> Array:
    """
    Unit quaternion of the rotation vector `rotvec`.

    Args:
        rotvec: (..., 3) rotation vector, axis scaled by angle

    Returns:
        (..., 4) unit quaternion in (w, x, y, z) format
    """
    angle = jnp.linalg.norm(rotvec, axis=-1, keepdims=True)
    half = 0.5 * angle
    small_angle = angle < 1e-8

    # sin(theta/2)/theta -> 1/2 - theta^2/48
    safe_angle = jnp.where(small_angle, 1.0, angle)
    coef = jnp.where(small_angle, 0.5 - angle**2 / 48.0, jnp.sin(half) / safe_angle)

    return jnp.concatenate([jnp.cos(half), coef * rotvec], axis=-1)
