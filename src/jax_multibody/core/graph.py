"""MultiBodyGraph: mutable builder compiled into an immutable MultiBody.

Bodies and joints are added first, then connected with links. A link only
records connectivity; the parent/child direction of each joint is decided
when the graph is compiled from a chosen root body.
"""

from logging import getLogger
from typing import Dict, List, NamedTuple

import jax
import jax.numpy as jnp

from ..errors import ConstructionError
from ..transforms import se3
from .body import Body
from .joint import Joint, JointType
from .multibody import MultiBody

Array = jax.Array

logger = getLogger(__name__)

ROOT_JOINT_ID = -1
ROOT_JOINT_NAME = "Root"


class Link(NamedTuple):
    """Graph edge between two bodies.

    Attributes:
        body1_id: Id of the first body.
        T_body1_joint: Pose of the joint frame in the first body frame.
        body2_id: Id of the second body.
        T_body2_joint: Pose of the joint frame in the second body frame.
        joint_id: Id of the joint. It is forward when traversed from body1 to body2.
    """
    body1_id: int
    T_body1_joint: Array
    body2_id: int
    T_body2_joint: Array
    joint_id: int


def _as_transform(T, what: str) -> Array:
    T = jnp.asarray(T, dtype=jnp.float64)
    if T.shape != (4, 4):
        raise ConstructionError(f"{what} must have shape (4, 4), got {T.shape}")
    return T


class MultiBodyGraph:
    """Append-only collection of bodies, joints and links."""

    def __init__(self):
        self._bodies: Dict[int, Body] = {}
        self._body_ids: Dict[str, int] = {}
        self._joints: Dict[int, Joint] = {}
        self._joint_ids: Dict[str, int] = {}
        self._links: List[Link] = []

    @property
    def nr_bodies(self) -> int:
        return len(self._bodies)

    @property
    def nr_joints(self) -> int:
        return len(self._joints)

    @property
    def links(self) -> List[Link]:
        return list(self._links)

    def body(self, body_id: int) -> Body:
        try:
            return self._bodies[body_id]
        except KeyError:
            raise ConstructionError(f"Unknown body id {body_id}")

    def joint(self, joint_id: int) -> Joint:
        try:
            return self._joints[joint_id]
        except KeyError:
            raise ConstructionError(f"Unknown joint id {joint_id}")

    def body_id(self, name: str) -> int:
        try:
            return self._body_ids[name]
        except KeyError:
            raise ConstructionError(f"Unknown body name '{name}'")

    def joint_id(self, name: str) -> int:
        try:
            return self._joint_ids[name]
        except KeyError:
            raise ConstructionError(f"Unknown joint name '{name}'")

    def add_body(self, body: Body) -> None:
        if body.id in self._bodies:
            raise ConstructionError(f"Body id {body.id} is already used")
        if body.name in self._body_ids:
            raise ConstructionError(f"Body name '{body.name}' is already used")
        self._bodies[body.id] = body
        self._body_ids[body.name] = body.id

    def add_joint(self, joint: Joint) -> None:
        if joint.id in self._joints:
            raise ConstructionError(f"Joint id {joint.id} is already used")
        if joint.name in self._joint_ids:
            raise ConstructionError(f"Joint name '{joint.name}' is already used")
        # raises on a missing or degenerate axis
        joint.motion_axis
        self._joints[joint.id] = joint
        self._joint_ids[joint.name] = joint.id

    def link_bodies(self, body1_id: int, T_body1_joint, body2_id: int, T_body2_joint, joint_id: int) -> None:
        """Connect two bodies through a joint.

        Args:
            body1_id: Id of the body on the predecessor side of a forward joint.
            T_body1_joint: Pose of the joint frame in body1's frame.
            body2_id: Id of the body on the successor side of a forward joint.
            T_body2_joint: Pose of the joint frame in body2's frame.
            joint_id: Id of the connecting joint.
        """
        for body_id in (body1_id, body2_id):
            if body_id not in self._bodies:
                raise ConstructionError(f"Unknown body id {body_id}")
        if joint_id not in self._joints:
            raise ConstructionError(f"Unknown joint id {joint_id}")
        if body1_id == body2_id:
            raise ConstructionError(f"Joint id {joint_id} links body id {body1_id} to itself")
        self._links.append(Link(
            body1_id,
            _as_transform(T_body1_joint, "T_body1_joint"),
            body2_id,
            _as_transform(T_body2_joint, "T_body2_joint"),
            joint_id,
        ))

    def make_multibody(self, root_id: int, is_fixed_base: bool = True) -> MultiBody:
        """Compile the graph into a MultiBody rooted at `root_id`.

        Bodies are numbered depth first, following links in declaration order.
        A body attached to its parent through a Fixed joint is merged into the
        parent instead of becoming a tree node.

        Args:
            root_id: Id of the root body.
            is_fixed_base: Weld the root to the world when True, otherwise
                           connect it through a Free root joint.

        Returns:
            The compiled MultiBody.
        """
        if root_id not in self._bodies:
            raise ConstructionError(f"Unknown root body id {root_id}")

        adjacency: Dict[int, list] = {body_id: [] for body_id in self._bodies}
        for link_index, link in enumerate(self._links):
            joint = self._joints[link.joint_id]
            adjacency[link.body1_id].append(
                (link_index, link.body2_id, link.T_body1_joint, link.T_body2_joint, joint))
            adjacency[link.body2_id].append(
                (link_index, link.body1_id, link.T_body2_joint, link.T_body1_joint, joint.reversed()))

        root_kind = JointType.FIXED if is_fixed_base else JointType.FREE
        root_joint = Joint(root_kind, True, ROOT_JOINT_ID, ROOT_JOINT_NAME)

        bodies = [self._bodies[root_id]]
        inertias = [self._bodies[root_id].inertia]
        joints = [root_joint]
        parents = [-1]
        predecessors = [se3.identity()]
        successors = [se3.identity()]
        merged = []

        # graph body id -> (compiled host index, pose of the body in the host frame)
        placement = {root_id: (0, se3.identity())}
        used_links = set()

        def push_children(body_id, stack):
            host, T_host_body = placement[body_id]
            children = []
            for link_index, child_id, T_body_joint, T_child_joint, joint in adjacency[body_id]:
                if link_index in used_links:
                    continue
                used_links.add(link_index)
                if child_id in placement:
                    raise ConstructionError(
                        f"Joint '{joint.name}' closes a kinematic loop at body "
                        f"'{self._bodies[child_id].name}'")
                children.append((child_id, host, se3.multiply(T_host_body, T_body_joint), T_child_joint, joint))
            stack.extend(reversed(children))

        stack = []
        push_children(root_id, stack)
        while stack:
            child_id, host, T_host_joint, T_child_joint, joint = stack.pop()
            child = self._bodies[child_id]
            if child_id in placement:
                raise ConstructionError(
                    f"Joint '{joint.name}' closes a kinematic loop at body '{child.name}'")

            if joint.kind is JointType.FIXED:
                T_host_child = se3.multiply(T_host_joint, se3.inverse(T_child_joint))
                inertias[host] = inertias[host] + child.inertia.transformed(T_host_child)
                placement[child_id] = (host, T_host_child)
                merged.append((child.name, host, T_host_child))
                logger.debug("Merged body '%s' into '%s' through fixed joint '%s'",
                             child.name, bodies[host].name, joint.name)
            else:
                placement[child_id] = (len(bodies), se3.identity())
                bodies.append(child)
                inertias.append(child.inertia)
                joints.append(joint)
                parents.append(host)
                predecessors.append(T_host_joint)
                successors.append(T_child_joint)

            push_children(child_id, stack)

        unreachable = [body.name for body_id, body in self._bodies.items() if body_id not in placement]
        if unreachable:
            raise ConstructionError(
                f"Bodies {unreachable} are not reachable from root body "
                f"'{self._bodies[root_id].name}'")

        linked = {link.joint_id for link in self._links}
        for joint_id, joint in self._joints.items():
            if joint_id not in linked:
                logger.debug("Joint '%s' is not linked and is ignored", joint.name)

        bodies = [Body(inertia, body.id, body.name) for body, inertia in zip(bodies, inertias)]
        mb = MultiBody.create(bodies, joints, parents, predecessors, successors, is_fixed_base, merged)
        logger.debug("Compiled multibody rooted at '%s': %d bodies, %d dof, %d params",
                     bodies[0].name, mb.nr_bodies, mb.nr_dof, mb.nr_params)
        return mb
