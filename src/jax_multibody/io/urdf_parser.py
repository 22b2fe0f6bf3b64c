"""URDF parser building a MultiBodyGraph.

Links become bodies, joints become joints, and each joint becomes a link
whose predecessor placement is the URDF joint origin. A URDF child link frame
coincides with its joint frame, so every successor placement is the identity.
"""

from logging import getLogger
from typing import Dict, Tuple

import jax.numpy as jnp
import numpy as np
from lxml import etree

from ..core.body import Body, SpatialInertia
from ..core.graph import MultiBodyGraph
from ..core.joint import Joint, JointType
from ..core.multibody import MultiBody
from ..errors import ConstructionError
from ..transforms import se3, so3

logger = getLogger(__name__)

_JOINT_TYPES = {
    'revolute': JointType.REV,
    'continuous': JointType.REV,
    'prismatic': JointType.PRISM,
    'fixed': JointType.FIXED,
    'floating': JointType.FREE,
}


def _parse_vector(text: str, default: str) -> np.ndarray:
    return np.array([float(x) for x in (text or default).split()])


def _parse_origin(elem) -> jnp.ndarray:
    """Transform described by an optional <origin xyz rpy> child of elem."""
    origin_elem = elem.find('origin')
    if origin_elem is None:
        return se3.identity()
    xyz = _parse_vector(origin_elem.get('xyz'), '0 0 0')
    rpy = _parse_vector(origin_elem.get('rpy'), '0 0 0')
    return se3.from_position_and_rotation(jnp.asarray(xyz), so3.from_rpy(rpy))


def _parse_inertia(link_elem) -> SpatialInertia:
    """Spatial inertia of a <link> about the link frame origin."""
    inertial_elem = link_elem.find('inertial')
    if inertial_elem is None:
        return SpatialInertia.create(0.0)

    mass_elem = inertial_elem.find('mass')
    mass = float(mass_elem.get('value', '0')) if mass_elem is not None else 0.0

    I = np.zeros((3, 3))
    inertia_elem = inertial_elem.find('inertia')
    if inertia_elem is not None:
        values = {key: float(inertia_elem.get(key, '0'))
                  for key in ('ixx', 'ixy', 'ixz', 'iyy', 'iyz', 'izz')}
        I = np.array([
            [values['ixx'], values['ixy'], values['ixz']],
            [values['ixy'], values['iyy'], values['iyz']],
            [values['ixz'], values['iyz'], values['izz']],
        ])

    # URDF gives the inertia about the center of mass in the inertial frame
    T_link_inertial = _parse_origin(inertial_elem)
    at_com = SpatialInertia.from_com(mass, jnp.zeros(3), I)
    return at_com.transformed(T_link_inertial)


def load_urdf(urdf_path: str) -> Tuple[MultiBodyGraph, int]:
    """Load a URDF file into a MultiBodyGraph.

    Args:
        urdf_path: Path to the URDF file to load.

    Returns:
        The graph and the id of the root body (the only link that is not the
        child of a joint).
    """
    tree = etree.parse(urdf_path)
    root = tree.getroot()

    graph = MultiBodyGraph()
    body_ids: Dict[str, int] = {}

    for body_id, link in enumerate(root.findall('link')):
        name = link.get('name')
        graph.add_body(Body(_parse_inertia(link), body_id, name))
        body_ids[name] = body_id

    child_links = set()
    for joint_id, joint_elem in enumerate(root.findall('joint')):
        name = joint_elem.get('name')
        joint_type = joint_elem.get('type')
        if joint_type not in _JOINT_TYPES:
            raise ConstructionError(f"Joint '{name}' has unsupported type '{joint_type}'")

        parent_elem = joint_elem.find('parent')
        child_elem = joint_elem.find('child')
        if parent_elem is None or child_elem is None:
            raise ConstructionError(f"Joint '{name}' needs a parent and a child link")
        parent_name = parent_elem.get('link')
        child_name = child_elem.get('link')
        for link_name in (parent_name, child_name):
            if link_name not in body_ids:
                raise ConstructionError(f"Joint '{name}' references unknown link '{link_name}'")

        kind = _JOINT_TYPES[joint_type]
        axis = None
        if kind in (JointType.REV, JointType.PRISM):
            axis_elem = joint_elem.find('axis')
            axis_xyz = _parse_vector(axis_elem.get('xyz') if axis_elem is not None else None, '1 0 0')
            axis = tuple(float(x) for x in axis_xyz)

        graph.add_joint(Joint(kind, True, joint_id, name, axis))
        graph.link_bodies(body_ids[parent_name], _parse_origin(joint_elem),
                          body_ids[child_name], se3.identity(), joint_id)
        child_links.add(child_name)

    root_links = [name for name in body_ids if name not in child_links]
    if len(root_links) != 1:
        raise ConstructionError(f"Expected exactly one root link, found: {root_links}")

    logger.debug("Loaded '%s': %d links, %d joints, root '%s'",
                 urdf_path, graph.nr_bodies, graph.nr_joints, root_links[0])
    return graph, body_ids[root_links[0]]


def load_multibody(urdf_path: str, is_fixed_base: bool = True) -> MultiBody:
    """Load a URDF file and compile it from its root link."""
    graph, root_id = load_urdf(urdf_path)
    return graph.make_multibody(root_id, is_fixed_base)
