"""Tests for the transforms module."""

import jax
import jax.numpy as jnp
import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_multibody.transforms import se3, so3


# Basic tests
def test_quaternion_to_matrix_identity():
    """Test from_quaternion with identity quaternion."""
    identity_quat = jnp.array([1.0, 0.0, 0.0, 0.0])
    matrix = so3.from_quaternion(identity_quat)
    np.testing.assert_allclose(matrix, jnp.eye(3), rtol=1e-12, atol=1e-12)


def test_quaternion_to_matrix_jit():
    """Test from_quaternion under JIT."""
    jitted_func = jax.jit(so3.from_quaternion)
    quat = jnp.array([np.sqrt(0.5), 0.0, np.sqrt(0.5), 0.0])  # 90° around Y
    matrix = jitted_func(quat)
    expected = jnp.array([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]])
    np.testing.assert_allclose(matrix, expected, rtol=1e-12, atol=1e-12)


def test_transform_compose():
    """Test composition of transforms."""
    # Translation by [1, 0, 0]
    t1 = se3.from_position([1.0, 0.0, 0.0])

    # Translation by [0, 1, 0] + 90° rotation around Z
    R_z90 = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    t2 = se3.from_position_and_rotation(jnp.array([0.0, 1.0, 0.0]), R_z90)

    result = se3.multiply(t1, t2)

    point = jnp.array([1.0, 0.0, 0.0])
    transformed = se3.apply(result, point)

    expected = jnp.array([1.0, 2.0, 0.0])
    np.testing.assert_allclose(transformed, expected, rtol=1e-12, atol=1e-12)


# SO(3) tests
def test_so3_exp_identity():
    """Test SO(3) exp with zero vector gives identity."""
    R = so3.exp(jnp.zeros(3))
    np.testing.assert_allclose(R, jnp.eye(3), rtol=1e-12, atol=1e-12)


def test_so3_exp_small_angle():
    """Small rotation vectors go through the Taylor branch and stay orthonormal."""
    R = so3.exp(jnp.array([1e-10, -2e-10, 0.0]))
    np.testing.assert_allclose(R @ R.T, jnp.eye(3), atol=1e-12)
    assert jnp.isfinite(R).all()


def test_so3_apply():
    """Test SO(3) apply function."""
    R = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    v_rotated = so3.apply(R, jnp.array([1.0, 0.0, 0.0]))
    np.testing.assert_allclose(v_rotated, [0.0, 1.0, 0.0], rtol=1e-12, atol=1e-12)


def test_so3_inverse():
    """Test SO(3) inverse."""
    R = so3.exp(jnp.array([0.1, 0.2, 0.3]))
    np.testing.assert_allclose(R @ so3.inverse(R), jnp.eye(3), rtol=1e-12, atol=1e-12)


def test_so3_skew_symmetric():
    """Test skew-symmetric matrix function."""
    v = jnp.array([1.0, 2.0, 3.0])
    K = so3.skew_symmetric(v)

    expected = jnp.array([[0.0, -3.0, 2.0], [3.0, 0.0, -1.0], [-2.0, 1.0, 0.0]])
    np.testing.assert_allclose(K, expected)
    np.testing.assert_allclose(K @ jnp.array([0.5, -1.0, 2.0]), jnp.cross(v, jnp.array([0.5, -1.0, 2.0])))


def test_so3_from_rpy():
    """Roll about x, then pitch about y, then yaw about z, all fixed axes."""
    rpy = jnp.array([0.1, -0.4, 0.7])
    R = so3.from_rpy(rpy)
    expected = (so3.exp(jnp.array([0.0, 0.0, 0.7]))
                @ so3.exp(jnp.array([0.0, -0.4, 0.0]))
                @ so3.exp(jnp.array([0.1, 0.0, 0.0])))
    np.testing.assert_allclose(R, expected, atol=1e-12)


def test_so3_batch_operations():
    """Test SO(3) operations work with batched inputs."""
    batch_size = 5
    rotvecs = jax.random.uniform(jax.random.PRNGKey(42), (batch_size, 3), minval=-1.0, maxval=1.0)

    R_batch = so3.exp(rotvecs)
    quat_batch = so3.quaternion_exp(rotvecs)

    assert R_batch.shape == (batch_size, 3, 3)
    assert quat_batch.shape == (batch_size, 4)
    np.testing.assert_allclose(so3.from_quaternion(quat_batch), R_batch, atol=1e-12)


# Quaternion tests
def test_quaternion_exp_matches_exp():
    """quaternion_exp and exp describe the same rotation."""
    rotvec = jnp.array([0.3, -0.7, 1.1])
    quat = so3.quaternion_exp(rotvec)
    np.testing.assert_allclose(jnp.linalg.norm(quat), 1.0, atol=1e-12)
    np.testing.assert_allclose(so3.from_quaternion(quat), so3.exp(rotvec), atol=1e-12)


def test_quaternion_exp_zero():
    quat = so3.quaternion_exp(jnp.zeros(3))
    np.testing.assert_allclose(quat, [1.0, 0.0, 0.0, 0.0])


def test_quaternion_multiply_composes_rotations():
    """The Hamilton product matches the product of rotation matrices."""
    q1 = so3.quaternion_exp(jnp.array([0.2, 0.5, -0.1]))
    q2 = so3.quaternion_exp(jnp.array([-0.6, 0.1, 0.4]))

    R = so3.from_quaternion(so3.quaternion_multiply(q1, q2))
    np.testing.assert_allclose(R, so3.from_quaternion(q1) @ so3.from_quaternion(q2), atol=1e-12)


def test_from_quaternion_normalizes():
    """A scaled quaternion gives the same rotation."""
    quat = so3.quaternion_exp(jnp.array([0.4, 0.0, -0.2]))
    np.testing.assert_allclose(so3.from_quaternion(3.0 * quat), so3.from_quaternion(quat), atol=1e-12)
    np.testing.assert_allclose(jnp.linalg.norm(so3.normalize_quaternion(3.0 * quat)), 1.0)


# SE(3) tests
def test_se3_from_position_and_rotation():
    """Test SE(3) construction from position and rotation."""
    T = se3.from_position_and_rotation(jnp.array([1.0, 2.0, 3.0]), jnp.eye(3))

    expected = jnp.array([[1.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 2.0], [0.0, 0.0, 1.0, 3.0], [0.0, 0.0, 0.0, 1.0]])
    np.testing.assert_allclose(T, expected)


def test_se3_get_position_rotation():
    """Test SE(3) position and rotation extraction."""
    p = jnp.array([1.0, 2.0, 3.0])
    R = so3.exp(jnp.array([0.1, 0.2, 0.3]))
    T = se3.from_position_and_rotation(p, R)

    np.testing.assert_allclose(se3.get_position(T), p)
    np.testing.assert_allclose(se3.get_rotation(T), R)


def test_se3_apply_multiple_points():
    """Test SE(3) apply function with multiple points."""
    T = se3.from_position([1.0, 2.0, 3.0])
    points = jnp.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    transformed = se3.apply(T, points)
    np.testing.assert_allclose(transformed, points + jnp.array([1.0, 2.0, 3.0]))


def test_transform_points_batched():
    """Test apply with batched transforms under vmap."""
    batch_size = 10
    positions = jnp.tile(jnp.array([1.0, 2.0, 3.0]), (batch_size, 1))
    rotations = jnp.tile(jnp.eye(3), (batch_size, 1, 1))

    transforms = se3.from_position_and_rotation(positions, rotations)
    points = jnp.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    transformed = jax.vmap(lambda T: se3.apply(T, points))(transforms)

    assert transformed.shape == (batch_size, 2, 3)
    for i in range(batch_size):
        np.testing.assert_allclose(transformed[i], points + positions[i])


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None, max_examples=20)
def test_transform_inverse_property(seed):
    """T * T^-1 = Identity, and the inverse undoes apply."""
    key1, key2, key3 = jax.random.split(jax.random.PRNGKey(seed), 3)

    position = jax.random.uniform(key1, (3,), minval=-5.0, maxval=5.0)
    rotvec = jax.random.uniform(key2, (3,), minval=-3.0, maxval=3.0)
    T = se3.from_position_and_rotation(position, so3.exp(rotvec))
    T_inv = se3.inverse(T)

    np.testing.assert_allclose(se3.multiply(T, T_inv), jnp.eye(4), atol=1e-12)

    points = jax.random.uniform(key3, (10, 3), minval=-10.0, maxval=10.0)
    np.testing.assert_allclose(se3.apply(T_inv, se3.apply(T, points)), points, atol=1e-10)


def test_se3_adjoint_structure():
    """Angular-first adjoint block structure."""
    p = jnp.array([0.3, -1.0, 2.0])
    R = so3.exp(jnp.array([0.1, 0.2, 0.3]))
    Ad_T = se3.adjoint(se3.from_position_and_rotation(p, R))

    assert Ad_T.shape == (6, 6)
    np.testing.assert_allclose(Ad_T[:3, :3], R)
    np.testing.assert_allclose(Ad_T[:3, 3:], jnp.zeros((3, 3)))
    np.testing.assert_allclose(Ad_T[3:, :3], so3.skew_symmetric(p) @ R, atol=1e-12)
    np.testing.assert_allclose(Ad_T[3:, 3:], R)


def test_se3_adjoint_moves_point_velocity():
    """A pure rotation about the origin seen from a frame offset along x."""
    T = se3.from_position([1.0, 0.0, 0.0])
    twist_b = jnp.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0])

    twist_a = se3.adjoint(T) @ twist_b

    # the point at a's origin sits at -1 along x from the rotation axis
    np.testing.assert_allclose(twist_a, [0.0, 0.0, 1.0, 0.0, -1.0, 0.0], atol=1e-12)


def test_se3_adjoint_of_product():
    """Ad(T1 T2) = Ad(T1) Ad(T2) and Ad(T^-1) = Ad(T)^-1."""
    T1 = se3.from_position_and_rotation(jnp.array([0.5, 0.2, -0.1]), so3.exp(jnp.array([0.3, 0.0, 0.2])))
    T2 = se3.from_position_and_rotation(jnp.array([-1.0, 0.4, 0.7]), so3.exp(jnp.array([0.0, -0.5, 0.1])))

    np.testing.assert_allclose(se3.adjoint(T1 @ T2), se3.adjoint(T1) @ se3.adjoint(T2), atol=1e-12)
    np.testing.assert_allclose(se3.adjoint(se3.inverse(T1)) @ se3.adjoint(T1), jnp.eye(6), atol=1e-12)


def test_se3_is_rigid():
    T = se3.from_position_and_rotation(jnp.array([1.0, 2.0, 3.0]), so3.exp(jnp.array([0.4, 0.1, 0.0])))
    assert se3.is_rigid(T)
    assert se3.is_rigid(np.eye(4))
    assert not se3.is_rigid(np.zeros((4, 4)))
    assert not se3.is_rigid(np.eye(3))
    assert not se3.is_rigid(2.0 * np.eye(4))


def test_se3_jit_compatibility():
    """Test SE(3) functions are JIT compatible."""

    @jax.jit
    def compose_inverse(T):
        return se3.multiply(T, se3.inverse(T))

    T = se3.from_position_and_rotation(jnp.array([0.1, 0.2, 0.3]), so3.exp(jnp.array([0.3, 0.2, 0.1])))
    np.testing.assert_allclose(compose_inverse(T), jnp.eye(4), atol=1e-12)
