"""Forward kinematics and forward velocity over a compiled MultiBody.

Both algorithms walk the bodies in topological order and overwrite the
per-body caches of a MultiBodyConfig in place. Forward velocity reads the
poses written by forward kinematics, so callers run forward kinematics first.
"""

from typing import Tuple

import jax
import jax.numpy as jnp
import numpy as np

from .core.config import (
    MultiBodyConfig,
    check_match_alpha,
    check_match_body_pos,
    check_match_q,
    write_into,
)
from .core.joint import Joint
from .core.multibody import MultiBody
from .transforms import se3

Array = jax.Array

_WORLD_POSE = np.eye(4)
_WORLD_TWIST = np.zeros(6)


@jax.jit
def _body_pose(joint: Joint, q: Array, T_pred: Array, T_succ: Array,
               T_world_parent: Array) -> Tuple[Array, Array, Array]:
    T_joint, _ = joint.transform_and_motion_subspace(q)
    T_parent_son = T_pred @ T_joint @ se3.inverse(T_succ)
    return T_joint, T_parent_son, T_world_parent @ T_parent_son


@jax.jit
def _body_velocity(joint: Joint, q: Array, alpha: Array, T_succ: Array, T_parent_son: Array,
                   T_world: Array, v_parent: Array) -> Tuple[Array, Array, Array, Array]:
    _, S = joint.transform_and_motion_subspace(q)
    v_joint = S @ alpha
    v_body = se3.adjoint(T_succ) @ v_joint + se3.adjoint(se3.inverse(T_parent_son)) @ v_parent
    return S, v_joint, v_body, se3.adjoint(T_world) @ v_body


def forward_kinematics(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    """Compute the world pose of every body from `mbc.q`.

    For body i with parent p:

        T_p_i = P_i @ J_i(q_i) @ S_i^-1
        T_w_i = T_w_p @ T_p_i

    where P_i and S_i are the predecessor and successor placements of joint i.
    The root's parent is the world frame.

    Writes `mbc.joint_config`, `mbc.parent_to_son` and `mbc.body_pos_w`.
    """
    for i, joint in enumerate(mb.joints):
        parent = mb.parents[i]
        T_world_parent = _WORLD_POSE if parent < 0 else mbc.body_pos_w[parent]
        T_joint, T_parent_son, T_world = _body_pose(
            joint, jnp.asarray(mbc.q[i], dtype=jnp.float64), mb.predecessor_transforms[i],
            mb.successor_transforms[i], T_world_parent)

        write_into(mbc.joint_config, i, T_joint)
        write_into(mbc.parent_to_son, i, T_parent_son)
        write_into(mbc.body_pos_w, i, T_world)


def forward_velocity(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    """Compute the twist of every body from `mbc.q` and `mbc.alpha`.

    The body twist of body i, in its own frame, is the parent's twist carried
    across the joint plus the joint's contribution:

        V_i = Ad(T_p_i^-1) @ V_p + Ad(S_i) @ Psi_i @ alpha_i

    Requires `mbc.parent_to_son` and `mbc.body_pos_w` from forward_kinematics.
    Writes `mbc.motion_subspace`, `mbc.joint_velocity`, `mbc.body_vel_b` and
    `mbc.body_vel_w` (the same twists expressed in the world frame).
    """
    for i, joint in enumerate(mb.joints):
        parent = mb.parents[i]
        v_parent = _WORLD_TWIST if parent < 0 else mbc.body_vel_b[parent]
        S, v_joint, v_body, v_world = _body_velocity(
            joint, jnp.asarray(mbc.q[i], dtype=jnp.float64), jnp.asarray(mbc.alpha[i], dtype=jnp.float64),
            mb.successor_transforms[i], mbc.parent_to_son[i], mbc.body_pos_w[i], v_parent)

        write_into(mbc.motion_subspace, i, S)
        write_into(mbc.joint_velocity, i, v_joint)
        write_into(mbc.body_vel_b, i, v_body)
        write_into(mbc.body_vel_w, i, v_world)


def s_forward_kinematics(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    """forward_kinematics after checking that `mbc.q` matches `mb`."""
    check_match_q(mb, mbc)
    forward_kinematics(mb, mbc)


def s_forward_velocity(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    """forward_velocity after checking `mbc.q`, `mbc.alpha` and `mbc.body_pos_w`."""
    check_match_q(mb, mbc)
    check_match_alpha(mb, mbc)
    check_match_body_pos(mb, mbc)
    forward_velocity(mb, mbc)
