"""Joint kinds and their per-kind kinematic rules.

The set of joint kinds is closed. Each kind is paired with pure functions in
a dispatch table: configuration/velocity sizes, neutral configuration, the
joint transform with its motion subspace, and the integration rule.

The transform of a joint is the pose of its moving (successor-side) frame in
its fixed (predecessor-side) frame. Motion subspace columns are angular-first
twists expressed in the moving frame.
"""

import enum
from typing import Callable, NamedTuple, Optional, Tuple

import jax
import jax.numpy as jnp
import numpy as np
from flax import struct

from ..errors import ConstructionError
from ..transforms import se3, so3

Array = jax.Array


class JointType(enum.Enum):
    FIXED = "fixed"
    REV_X = "rev_x"
    REV_Y = "rev_y"
    REV_Z = "rev_z"
    REV = "rev"
    PRISM = "prism"
    SPHERICAL = "spherical"
    FREE = "free"


class _JointModel(NamedTuple):
    config_size: int
    dof: int
    zero_param: Tuple[float, ...]
    transform: Callable[[Array, Array], Tuple[Array, Array]]
    integrate: Callable[[Array, Array, Array, float], Array]


def _fixed_transform(axis, q):
    return se3.identity(), jnp.zeros((6, 0))


def _fixed_integrate(axis, q, alpha, dt):
    return q


def _revolute_transform(axis, q):
    T = se3.from_rotation(so3.exp(axis * q[0]))
    S = jnp.concatenate([axis, jnp.zeros(3)])[:, None]
    return T, S


def _prismatic_transform(axis, q):
    T = se3.from_position(axis * q[0])
    S = jnp.concatenate([jnp.zeros(3), axis])[:, None]
    return T, S


def _scalar_integrate(axis, q, alpha, dt):
    return q + alpha * dt


def _spherical_transform(axis, q):
    T = se3.from_rotation(so3.from_quaternion(q))
    S = jnp.concatenate([jnp.eye(3), jnp.zeros((3, 3))], axis=0)
    return T, S


def _quaternion_step(quat, w, dt):
    # w is expressed in the moving frame, so the increment multiplies on the right
    return so3.normalize_quaternion(so3.quaternion_multiply(quat, so3.quaternion_exp(w * dt)))


def _spherical_integrate(axis, q, alpha, dt):
    return _quaternion_step(q, alpha, dt)


def _free_transform(axis, q):
    T = se3.from_position_and_rotation(q[4:], so3.from_quaternion(q[:4]))
    return T, jnp.eye(6)


def _free_integrate(axis, q, alpha, dt):
    R = so3.from_quaternion(q[:4])
    t = q[4:] + so3.apply(R, alpha[3:]) * dt
    return jnp.concatenate([_quaternion_step(q[:4], alpha[:3], dt), t])


_REVOLUTE = _JointModel(1, 1, (0.0,), _revolute_transform, _scalar_integrate)

_JOINT_MODELS = {
    JointType.FIXED: _JointModel(0, 0, (), _fixed_transform, _fixed_integrate),
    JointType.REV_X: _REVOLUTE,
    JointType.REV_Y: _REVOLUTE,
    JointType.REV_Z: _REVOLUTE,
    JointType.REV: _REVOLUTE,
    JointType.PRISM: _JointModel(1, 1, (0.0,), _prismatic_transform, _scalar_integrate),
    JointType.SPHERICAL: _JointModel(4, 3, (1.0, 0.0, 0.0, 0.0), _spherical_transform, _spherical_integrate),
    JointType.FREE: _JointModel(
        7, 6, (1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0), _free_transform, _free_integrate
    ),
}

_FIXED_AXES = {
    JointType.REV_X: (1.0, 0.0, 0.0),
    JointType.REV_Y: (0.0, 1.0, 0.0),
    JointType.REV_Z: (0.0, 0.0, 1.0),
}


@struct.dataclass
class Joint:
    """Immutable joint description.

    Attributes:
        kind: JointType of the joint.
        forward: Direction flag. A reversed joint moves its predecessor with
                 respect to its successor, i.e. it applies the inverse transform.
        id: Unique integer id inside a MultiBodyGraph.
        name: Unique name inside a MultiBodyGraph.
        axis: Motion axis, required for REV and PRISM joints and ignored otherwise.
    """
    kind: JointType = struct.field(pytree_node=False)
    forward: bool = struct.field(pytree_node=False)
    id: int = struct.field(pytree_node=False)
    name: str = struct.field(pytree_node=False)
    axis: Optional[Tuple[float, float, float]] = struct.field(pytree_node=False, default=None)

    @property
    def _model(self) -> _JointModel:
        return _JOINT_MODELS[self.kind]

    @property
    def config_size(self) -> int:
        """Size of the configuration vector q."""
        return self._model.config_size

    @property
    def dof(self) -> int:
        """Size of the velocity vector alpha."""
        return self._model.dof

    @property
    def motion_axis(self) -> Array:
        """Unit motion axis, a zero vector for kinds without one."""
        if self.kind in _FIXED_AXES:
            return jnp.array(_FIXED_AXES[self.kind], dtype=jnp.float64)
        if self.kind in (JointType.REV, JointType.PRISM):
            if self.axis is None:
                raise ConstructionError(f"Joint '{self.name}' of kind {self.kind.name} needs an axis")
            axis = np.asarray(self.axis, dtype=np.float64)
            norm = np.linalg.norm(axis)
            if axis.shape != (3,) or not norm > 0.0:
                raise ConstructionError(f"Joint '{self.name}' has an invalid axis {self.axis}")
            return jnp.asarray(axis / norm)
        return jnp.zeros(3, dtype=jnp.float64)

    def zero_param(self) -> np.ndarray:
        """Neutral configuration: zero angle/offset, identity orientation."""
        return np.array(self._model.zero_param, dtype=np.float64)

    def zero_dof(self) -> np.ndarray:
        return np.zeros(self.dof, dtype=np.float64)

    def transform_and_motion_subspace(self, q) -> Tuple[Array, Array]:
        """Joint transform and its 6 x dof motion subspace for configuration q."""
        return _transform_and_motion_subspace(self, jnp.asarray(q, dtype=jnp.float64))

    def integrate(self, q, alpha, dt: float) -> Array:
        """Configuration reached from q after moving at velocity alpha for dt."""
        return _integrate(self, jnp.asarray(q, dtype=jnp.float64), jnp.asarray(alpha, dtype=jnp.float64), dt)

    def reversed(self) -> "Joint":
        """Same joint with the opposite direction flag."""
        return self.replace(forward=not self.forward)


# A Joint has only static fields: each distinct joint compiles once and
# later calls reuse the cached kernel.
@jax.jit
def _transform_and_motion_subspace(joint: Joint, q: Array) -> Tuple[Array, Array]:
    T, S = joint._model.transform(joint.motion_axis, q)
    if not joint.forward:
        # Body twist of T^-1 is -Ad(T) times the body twist of T
        S = -se3.adjoint(T) @ S
        T = se3.inverse(T)
    return T, S


@jax.jit
def _integrate(joint: Joint, q: Array, alpha: Array, dt: float) -> Array:
    return joint._model.integrate(joint.motion_axis, q, alpha, dt)
