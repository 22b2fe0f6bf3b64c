"""MultiBodyConfig: mutable per-instance state of a MultiBody.

State is ragged: `q[i]`, `alpha[i]` and `alpha_d[i]` are independent numpy
buffers sized by joint i. Every slot owns its buffer, assignments are copied,
and the kinematics algorithms write per-body caches in place.
"""

import copy
from typing import List

import numpy as np

from ..errors import PreconditionViolation
from ..transforms import se3
from .multibody import MultiBody


class _StateList(list):
    """List of per-slot float64 buffers.

    Every entry is copied on assignment, so no two slots share storage and
    the algorithms can write into them in place.
    """

    __slots__ = ()

    def __init__(self, values=()):
        super().__init__(np.array(v, dtype=np.float64) for v in values)

    def __setitem__(self, index, value):
        if isinstance(index, slice):
            value = [np.array(v, dtype=np.float64) for v in value]
        else:
            value = np.array(value, dtype=np.float64)
        super().__setitem__(index, value)


def _state_property(name: str, doc: str) -> property:
    attr = "_" + name

    def fget(self) -> List[np.ndarray]:
        return getattr(self, attr)

    def fset(self, values) -> None:
        setattr(self, attr, _StateList(values))

    return property(fget, fset, doc=doc)


class MultiBodyConfig:
    """State buffers sized to match one MultiBody.

    Assigning a list to any of the state attributes below copies each entry
    into a fresh array, as does assigning a single slot.
    """

    q = _state_property("q", "Per-joint configuration, q[i] has joint(i).config_size entries.")
    alpha = _state_property("alpha", "Per-joint velocity, alpha[i] has joint(i).dof entries.")
    alpha_d = _state_property("alpha_d", "Per-joint acceleration, same sizes as alpha.")
    joint_config = _state_property("joint_config", "Per-joint transform of the moving frame in the fixed frame.")
    parent_to_son = _state_property("parent_to_son", "Pose of each body in its parent body frame.")
    body_pos_w = _state_property("body_pos_w", "World pose of each body.")
    joint_velocity = _state_property("joint_velocity", "Twist of each joint's moving frame, in that frame.")
    motion_subspace = _state_property("motion_subspace", "6 x dof motion subspace of each joint.")
    body_vel_b = _state_property("body_vel_b", "Twist of each body expressed in the body frame.")
    body_vel_w = _state_property("body_vel_w", "Twist of each body expressed in the world frame.")

    def __init__(self, mb: MultiBody):
        joints = mb.joints
        n = mb.nr_bodies

        self.q = [joint.zero_param() for joint in joints]
        self.alpha = [joint.zero_dof() for joint in joints]
        self.alpha_d = [joint.zero_dof() for joint in joints]

        self.joint_config = [np.eye(4) for _ in range(n)]
        self.parent_to_son = [np.eye(4) for _ in range(n)]
        self.body_pos_w = [np.eye(4) for _ in range(n)]

        self.joint_velocity = [np.zeros(6) for _ in range(n)]
        self.motion_subspace = [np.zeros((6, joint.dof)) for joint in joints]
        self.body_vel_b = [np.zeros(6) for _ in range(n)]
        self.body_vel_w = [np.zeros(6) for _ in range(n)]

    def copy(self) -> "MultiBodyConfig":
        """Independent deep copy of every buffer."""
        return copy.deepcopy(self)

    def zero(self, mb: MultiBody) -> None:
        """Reset q to the neutral configuration and velocities to zero."""
        for i, joint in enumerate(mb.joints):
            self.q[i] = joint.zero_param()
            self.alpha[i] = joint.zero_dof()
            self.alpha_d[i] = joint.zero_dof()


def write_into(buffers: list, index: int, value) -> None:
    """Overwrite buffers[index] in place, or replace it when its shape differs."""
    target = buffers[index]
    if isinstance(target, np.ndarray) and target.shape == np.shape(value) and target.flags.writeable:
        target[...] = value
    else:
        buffers[index] = np.array(value, dtype=np.float64)


def _check_ragged(name: str, values, mb: MultiBody, size_of) -> None:
    if len(values) != mb.nr_joints:
        raise PreconditionViolation(
            f"{name} has {len(values)} entries, the multibody has {mb.nr_joints} joints")
    for i, (value, joint) in enumerate(zip(values, mb.joints)):
        expected = size_of(joint)
        actual = np.size(value)
        if actual != expected:
            raise PreconditionViolation(
                f"{name}[{i}] ('{joint.name}') has size {actual}, expected {expected}")


def check_match_q(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    _check_ragged("q", mbc.q, mb, lambda joint: joint.config_size)


def check_match_alpha(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    _check_ragged("alpha", mbc.alpha, mb, lambda joint: joint.dof)


def check_match_alpha_d(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    _check_ragged("alpha_d", mbc.alpha_d, mb, lambda joint: joint.dof)


def check_match_body_pos(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    """Check that body_pos_w has one rigid 4x4 pose per body."""
    if len(mbc.body_pos_w) != mb.nr_bodies:
        raise PreconditionViolation(
            f"body_pos_w has {len(mbc.body_pos_w)} entries, the multibody has {mb.nr_bodies} bodies")
    for i, T in enumerate(mbc.body_pos_w):
        if not se3.is_rigid(T):
            raise PreconditionViolation(
                f"body_pos_w[{i}] ('{mb.body(i).name}') is not a rigid 4x4 transform")


def check_match_body_vel(mb: MultiBody, mbc: MultiBodyConfig) -> None:
    for name in ("body_vel_b", "body_vel_w"):
        values = getattr(mbc, name)
        if len(values) != mb.nr_bodies:
            raise PreconditionViolation(
                f"{name} has {len(values)} entries, the multibody has {mb.nr_bodies} bodies")
        for i, v in enumerate(values):
            if np.shape(v) != (6,):
                raise PreconditionViolation(f"{name}[{i}] has shape {np.shape(v)}, expected (6,)")
