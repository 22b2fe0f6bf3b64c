"""Rigid bodies and their spatial inertia."""

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import se3, so3

Array = jax.Array


@struct.dataclass
class SpatialInertia:
    """Mass distribution of a rigid body expressed in the body frame.

    Attributes:
        mass: Total mass.
        momentum: (3,) first moment of mass about the frame origin, mass * com.
        inertia: (3, 3) rotational inertia about the frame origin.
    """
    mass: float
    momentum: Array
    inertia: Array

    @classmethod
    def create(cls, mass, momentum=None, inertia=None) -> "SpatialInertia":
        momentum = jnp.zeros(3) if momentum is None else momentum
        inertia = jnp.zeros((3, 3)) if inertia is None else inertia
        return cls(
            mass=float(mass),
            momentum=jnp.asarray(momentum, dtype=jnp.float64),
            inertia=jnp.asarray(inertia, dtype=jnp.float64),
        )

    @classmethod
    def from_com(cls, mass, com, inertia_at_com) -> "SpatialInertia":
        """Build from the center of mass and the rotational inertia about it."""
        com = jnp.asarray(com, dtype=jnp.float64)
        C = so3.skew_symmetric(com)
        # parallel axis theorem
        inertia = jnp.asarray(inertia_at_com, dtype=jnp.float64) - mass * C @ C
        return cls.create(mass, mass * com, inertia)

    def com(self) -> Array:
        """Center of mass in the body frame. Undefined for a massless body."""
        return self.momentum / self.mass

    def transformed(self, T_a_b: Array) -> "SpatialInertia":
        """Express this inertia, given in frame b, in frame a."""
        R = se3.get_rotation(T_a_b)
        p = se3.get_position(T_a_b)
        h = R @ self.momentum
        P = so3.skew_symmetric(p)
        H = so3.skew_symmetric(h)
        inertia = R @ self.inertia @ R.T - H @ P - P @ H - self.mass * P @ P
        return SpatialInertia(
            mass=self.mass,
            momentum=h + self.mass * p,
            inertia=inertia,
        )

    def __add__(self, other: "SpatialInertia") -> "SpatialInertia":
        return SpatialInertia(
            mass=self.mass + other.mass,
            momentum=self.momentum + other.momentum,
            inertia=self.inertia + other.inertia,
        )


@struct.dataclass
class Body:
    """Named rigid body node of a multibody graph.

    Attributes:
        inertia: SpatialInertia in the body frame.
        id: Unique integer id inside a MultiBodyGraph.
        name: Unique name inside a MultiBodyGraph.
    """
    inertia: SpatialInertia
    id: int = struct.field(pytree_node=False)
    name: str = struct.field(pytree_node=False)

    @property
    def mass(self) -> float:
        return self.inertia.mass
