"""MultiBody: immutable compiled kinematic tree.

A MultiBody is produced by `MultiBodyGraph.make_multibody` and never changes
afterwards. Bodies and joints share indices: joint i connects body i to its
parent body `parents[i]`. Index 0 is the root body and its root joint
(Fixed for a fixed base, Free for a floating base); parents always precede
their children.
"""

from typing import Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from .body import Body
from .joint import Joint

Array = jax.Array


@struct.dataclass
class MultiBody:
    """Immutable PyTree representation of a compiled kinematic tree.

    Attributes:
        bodies: Bodies in topological order. Inertias of bodies merged through
                fixed joints are already folded into their host.
        joints: joints[i] connects body i to its parent.
        parents: parents[i] is the parent body index of body i, -1 for the root.
        predecessor_transforms: (nr_bodies, 4, 4) pose of joint i's fixed frame
                                in the parent body frame.
        successor_transforms: (nr_bodies, 4, 4) pose of joint i's moving frame
                              in body i's frame.
        dof_positions: Offset of each joint's velocity in a flat DoF vector.
        param_positions: Offset of each joint's configuration in a flat
                         parameter vector.
        nr_dof: Total number of velocity components.
        nr_params: Total number of configuration components.
        is_fixed_base: True when the root is welded to the world.
        merged_names: Names of graph bodies merged into a host body.
        merged_hosts: Host body index of each merged body.
        merged_transforms: (nr_merged, 4, 4) pose of each merged body in its host.
    """
    bodies: Tuple[Body, ...]
    joints: Tuple[Joint, ...] = struct.field(pytree_node=False)
    parents: Tuple[int, ...] = struct.field(pytree_node=False)
    predecessor_transforms: Array
    successor_transforms: Array
    dof_positions: Tuple[int, ...] = struct.field(pytree_node=False)
    param_positions: Tuple[int, ...] = struct.field(pytree_node=False)
    nr_dof: int = struct.field(pytree_node=False)
    nr_params: int = struct.field(pytree_node=False)
    is_fixed_base: bool = struct.field(pytree_node=False)
    merged_names: Tuple[str, ...] = struct.field(pytree_node=False)
    merged_hosts: Tuple[int, ...] = struct.field(pytree_node=False)
    merged_transforms: Array

    @classmethod
    def create(
        cls,
        bodies: Sequence[Body],
        joints: Sequence[Joint],
        parents: Sequence[int],
        predecessor_transforms: Sequence[Array],
        successor_transforms: Sequence[Array],
        is_fixed_base: bool,
        merged: Sequence[Tuple[str, int, Array]] = (),
    ) -> "MultiBody":
        dof_positions, param_positions = [], []
        nr_dof = nr_params = 0
        for joint in joints:
            dof_positions.append(nr_dof)
            param_positions.append(nr_params)
            nr_dof += joint.dof
            nr_params += joint.config_size

        if merged:
            merged_transforms = jnp.stack([T for _, _, T in merged])
        else:
            merged_transforms = jnp.zeros((0, 4, 4))

        return cls(
            bodies=tuple(bodies),
            joints=tuple(joints),
            parents=tuple(int(p) for p in parents),
            predecessor_transforms=jnp.stack(list(predecessor_transforms)),
            successor_transforms=jnp.stack(list(successor_transforms)),
            dof_positions=tuple(dof_positions),
            param_positions=tuple(param_positions),
            nr_dof=nr_dof,
            nr_params=nr_params,
            is_fixed_base=bool(is_fixed_base),
            merged_names=tuple(name for name, _, _ in merged),
            merged_hosts=tuple(host for _, host, _ in merged),
            merged_transforms=merged_transforms,
        )

    @property
    def nr_bodies(self) -> int:
        return len(self.bodies)

    @property
    def nr_joints(self) -> int:
        return len(self.joints)

    def body(self, index: int) -> Body:
        return self.bodies[index]

    def joint(self, index: int) -> Joint:
        return self.joints[index]

    def parent(self, index: int) -> int:
        return self.parents[index]

    def body_index(self, name: str) -> int:
        for i, body in enumerate(self.bodies):
            if body.name == name:
                return i
        raise ValueError(f"Body '{name}' not found in multibody")

    def joint_index(self, name: str) -> int:
        for i, joint in enumerate(self.joints):
            if joint.name == name:
                return i
        raise ValueError(f"Joint '{name}' not found in multibody")

    def dof_position(self, index: int) -> int:
        return self.dof_positions[index]

    def param_position(self, index: int) -> int:
        return self.param_positions[index]

    def predecessor_transform(self, index: int) -> Array:
        return self.predecessor_transforms[index]

    def successor_transform(self, index: int) -> Array:
        return self.successor_transforms[index]

    def merged_body(self, name: str) -> Tuple[int, Array]:
        """Host body index and pose in the host frame of a merged body."""
        try:
            k = self.merged_names.index(name)
        except ValueError:
            raise ValueError(f"Body '{name}' was not merged into another body")
        return self.merged_hosts[k], self.merged_transforms[k]

    def subtree(self, index: int) -> Tuple[int, ...]:
        """Indices of body `index` and all of its descendants, ascending."""
        members = {index}
        for i in range(index + 1, self.nr_bodies):
            if self.parents[i] in members:
                members.add(i)
        return tuple(sorted(members))
