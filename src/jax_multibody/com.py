"""Center of mass of a multibody and its velocity Jacobian.

On a fixed-base multibody the root body is welded to the world: it never
moves and is left out of the center of mass. On a floating base every body
takes part.
"""

from typing import Tuple

import jax
import jax.numpy as jnp
import numpy as np

from .core.config import MultiBodyConfig, check_match_body_pos, check_match_q
from .core.joint import Joint
from .core.multibody import MultiBody
from .errors import ConstructionError, PreconditionViolation
from .transforms import se3

Array = jax.Array


def com_bodies(mb: MultiBody) -> range:
    """Indices of the bodies that take part in the center of mass."""
    return range(1 if mb.is_fixed_base else 0, mb.nr_bodies)


def total_mass(mb: MultiBody) -> float:
    return float(sum(mb.bodies[i].mass for i in com_bodies(mb)))


def _mass_weighted_position(mb: MultiBody, mbc: MultiBodyConfig, i: int) -> np.ndarray:
    """mass_i * world position of body i's center of mass."""
    inertia = mb.bodies[i].inertia
    T = np.asarray(mbc.body_pos_w[i])
    return inertia.mass * T[:3, 3] + T[:3, :3] @ np.asarray(inertia.momentum)


def _check_mass(mb: MultiBody) -> None:
    if not total_mass(mb) > 0.0:
        raise PreconditionViolation("The multibody has no mass, its center of mass is undefined")


def compute_com(mb: MultiBody, mbc: MultiBodyConfig) -> Array:
    """Center of mass in the world frame, from `mbc.body_pos_w`.

    Returns:
        (3,) center of mass position.
    """
    com = np.zeros(3)
    for i in com_bodies(mb):
        com += _mass_weighted_position(mb, mbc, i)
    return jnp.asarray(com / total_mass(mb))


def compute_com_velocity(mb: MultiBody, mbc: MultiBodyConfig) -> Array:
    """Linear velocity of the center of mass, from `mbc.body_pos_w` and `mbc.body_vel_w`.

    Returns:
        (3,) center of mass velocity in the world frame.
    """
    com_dot = np.zeros(3)
    for i in com_bodies(mb):
        v = np.asarray(mbc.body_vel_w[i])
        # world twist [w, v0]: velocity of a point p is v0 + w x p
        com_dot += mb.bodies[i].mass * v[3:] + np.cross(v[:3], _mass_weighted_position(mb, mbc, i))
    return jnp.asarray(com_dot / total_mass(mb))


def s_compute_com(mb: MultiBody, mbc: MultiBodyConfig) -> Array:
    """compute_com after checking that `mbc.body_pos_w` matches `mb`."""
    check_match_body_pos(mb, mbc)
    _check_mass(mb)
    return compute_com(mb, mbc)


def s_compute_com_velocity(mb: MultiBody, mbc: MultiBodyConfig) -> Array:
    """compute_com_velocity after checking the body pose and velocity caches."""
    check_match_body_pos(mb, mbc)
    if len(mbc.body_vel_w) != mb.nr_bodies:
        raise PreconditionViolation(
            f"body_vel_w has {len(mbc.body_vel_w)} entries, the multibody has {mb.nr_bodies} bodies")
    _check_mass(mb)
    return compute_com_velocity(mb, mbc)


@jax.jit
def _jacobian_block(joint: Joint, q: Array, T_world_body: Array, T_succ: Array,
                    fraction: float, com: Array) -> Array:
    """CoM velocity columns of joint's DoF, given its subtree's mass fraction
    and mass-weighted center of mass."""
    _, S = joint.transform_and_motion_subspace(q)
    xi = se3.adjoint(T_world_body @ T_succ) @ S
    return xi[3:] * fraction + jnp.cross(xi[:3].T, com).T


class CoMJacobianDummy:
    """Reference Jacobian of the center of mass with respect to joint velocities.

    Only depends on the structure of the MultiBody it is built for: the mass
    fraction of every body and the subtree moved by every joint.

    Column k of the Jacobian is the center of mass velocity induced by a unit
    velocity on DoF k with every other DoF at rest. A unit velocity on joint j
    moves its whole subtree rigidly with the world twist

        xi = Ad(T_w_j) @ Psi_j[:, k]

    so the induced velocity is sum over the subtree of
    (m_i / M) * (v0 + w x p_i), with xi = [w, v0] and p_i the world center of
    mass of body i.
    """

    def __init__(self, mb: MultiBody):
        mass = total_mass(mb)
        if not mass > 0.0:
            raise ConstructionError("The multibody has no mass, its center of mass is undefined")

        fractions = [0.0] * mb.nr_bodies
        for i in com_bodies(mb):
            fractions[i] = mb.bodies[i].mass / mass

        self._total_mass = mass
        self._mass_fractions: Tuple[float, ...] = tuple(fractions)
        self._subtrees = tuple(mb.subtree(i) for i in range(mb.nr_bodies))
        self._nr_bodies = mb.nr_bodies
        self._nr_dof = mb.nr_dof

    @property
    def total_mass(self) -> float:
        return self._total_mass

    @property
    def mass_fractions(self) -> Tuple[float, ...]:
        return self._mass_fractions

    def jacobian(self, mb: MultiBody, mbc: MultiBodyConfig) -> np.ndarray:
        """CoM Jacobian at the configuration of `mbc`.

        Returns:
            (6, nr_dof) matrix. Rows 0-2 are zero, rows 3-5 map the flat DoF
            velocity vector to the center of mass linear velocity.
        """
        jac = np.zeros((6, mb.nr_dof))
        weighted = [_mass_weighted_position(mb, mbc, i) / self._total_mass if self._mass_fractions[i] else None
                    for i in range(mb.nr_bodies)]

        for j, joint in enumerate(mb.joints):
            if joint.dof == 0:
                continue
            subtree = [i for i in self._subtrees[j] if weighted[i] is not None]
            if not subtree:
                continue

            fraction = sum(self._mass_fractions[i] for i in subtree)
            com = sum(weighted[i] for i in subtree)
            linear = _jacobian_block(joint, jnp.asarray(mbc.q[j], dtype=jnp.float64), mbc.body_pos_w[j],
                                     mb.successor_transforms[j], fraction, com)

            pos = mb.dof_positions[j]
            jac[3:, pos:pos + joint.dof] = np.asarray(linear)
        return jac

    def s_jacobian(self, mb: MultiBody, mbc: MultiBodyConfig) -> np.ndarray:
        """jacobian after checking `mb` against this object and `mbc` against `mb`."""
        if mb.nr_bodies != self._nr_bodies or mb.nr_dof != self._nr_dof:
            raise PreconditionViolation(
                f"CoMJacobianDummy was built for {self._nr_bodies} bodies and {self._nr_dof} dof, "
                f"got {mb.nr_bodies} bodies and {mb.nr_dof} dof")
        check_match_q(mb, mbc)
        check_match_body_pos(mb, mbc)
        return self.jacobian(mb, mbc)
