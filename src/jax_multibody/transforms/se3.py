"""SE(3) rigid-body transforms and spatial motion vectors in JAX.

Transforms are (..., 4, 4) homogeneous matrices; `T_a_b` denotes the pose of
frame b expressed in frame a. Spatial motion vectors (twists) are 6-vectors
ordered angular first: [wx, wy, wz, vx, vy, vz].
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    p = jnp.asarray(p)
    R = jnp.asarray(R)
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=jnp.result_type(p, R))
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def identity() -> Array:
    return jnp.eye(4, dtype=jnp.float64)


def from_position(p: Array) -> Array:
    """Pure translation."""
    return from_position_and_rotation(jnp.asarray(p, dtype=jnp.float64), jnp.eye(3, dtype=jnp.float64))


def from_rotation(R: Array) -> Array:
    """Pure rotation."""
    return from_position_and_rotation(jnp.zeros(3, dtype=jnp.float64), jnp.asarray(R, dtype=jnp.float64))


def multiply(T1: Array, T2: Array) -> Array:
    """Compose two transforms: T_a_c = multiply(T_a_b, T_b_c)."""
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(3) transformation matrix.

    Uses the block structure: T^-1 = [[R^T, -R^T @ t], [0, 1]]
    """
    R_inv = so3.inverse(T[..., :3, :3])
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, T[..., :3, 3])

    return from_position_and_rotation(t_inv, R_inv)


def apply(T: Array, points: Array) -> Array:
    """
    Apply SE(3) transformation to points.

    Args:
        T: (..., 4, 4) transformation matrix
        points: (..., 3) points to transform

    Returns:
        (..., 3) transformed points
    """
    return jnp.einsum("...ij,...j->...i", T[..., :3, :3], points) + T[..., :3, 3]


def get_position(T: Array) -> Array:
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    return T[..., :3, :3]


def adjoint(T: Array) -> Array:
    """
    Adjoint matrix of an SE(3) transform for angular-first twists.

    If `T = T_a_b`, then `adjoint(T) @ V_b` is the twist `V_b` expressed in
    frame a:

        Ad(T) = [[R,       0],
                 [[t]_x R, R]]

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 6, 6) adjoint matrix
    """
    R = T[..., :3, :3]
    t_skew = so3.skew_symmetric(T[..., :3, 3])

    top = jnp.concatenate([R, jnp.zeros_like(R)], axis=-1)
    bottom = jnp.concatenate([jnp.matmul(t_skew, R), R], axis=-1)

    return jnp.concatenate([top, bottom], axis=-2)


def is_rigid(T, atol: float = 1e-6) -> bool:
    """Structural check: 4x4, bottom row [0, 0, 0, 1], orthonormal rotation."""
    T = jnp.asarray(T)
    if T.shape != (4, 4):
        return False
    R = T[:3, :3]
    return bool(
        jnp.allclose(T[3], jnp.array([0.0, 0.0, 0.0, 1.0]), atol=atol)
        and jnp.allclose(R @ R.T, jnp.eye(3), atol=atol)
        and jnp.isfinite(T).all()
    )
