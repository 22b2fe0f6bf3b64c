"""Shared multibody fixtures."""

import numpy as np
import pytest

from jax_multibody import Body, Joint, JointType, MultiBodyGraph, SpatialInertia
from jax_multibody.transforms import se3


def _inertia(mass):
    return SpatialInertia.create(mass, np.zeros(3), np.eye(3))


@pytest.fixture
def chain_graph():
    """Four bodies in a chain along y.

    Root     j0      j1     j2
    ---- b0 ---- b1 ---- b2 ---- b3
    Fixed    RevX   RevY    RevZ
    """
    graph = MultiBodyGraph()
    for body_id, mass in enumerate([1.0, 1.0, 2.0, 1.0]):
        graph.add_body(Body(_inertia(mass), body_id, f"b{body_id}"))

    graph.add_joint(Joint(JointType.REV_X, True, 0, "j0"))
    graph.add_joint(Joint(JointType.REV_Y, True, 1, "j1"))
    graph.add_joint(Joint(JointType.REV_Z, True, 2, "j2"))

    to = se3.from_position([0.0, 0.5, 0.0])
    from_ = se3.from_position([0.0, 0.0, 0.0])
    graph.link_bodies(0, to, 1, from_, 0)
    graph.link_bodies(1, to, 2, from_, 1)
    graph.link_bodies(2, to, 3, from_, 2)
    return graph


@pytest.fixture
def tree_masses():
    rng = np.random.default_rng(7)
    return rng.uniform(0.5, 10.0, size=5)


@pytest.fixture
def tree_graph(tree_masses):
    """Five bodies with a spherical branch.

                   b4
                j3 | Spherical
    Root     j0    |   j1     j2
    ---- b0 ---- b1 ---- b2 ---- b3
    Fixed    RevX     RevY    RevZ
    """
    graph = MultiBodyGraph()
    for body_id, mass in enumerate(tree_masses):
        graph.add_body(Body(_inertia(mass), body_id, f"b{body_id}"))

    graph.add_joint(Joint(JointType.REV_X, True, 0, "j0"))
    graph.add_joint(Joint(JointType.REV_Y, True, 1, "j1"))
    graph.add_joint(Joint(JointType.REV_Z, True, 2, "j2"))
    graph.add_joint(Joint(JointType.SPHERICAL, True, 3, "j3"))

    to = se3.from_position([0.0, 0.5, 0.0])
    from_ = se3.from_position([0.0, -0.5, 0.0])
    graph.link_bodies(0, to, 1, from_, 0)
    graph.link_bodies(1, to, 2, from_, 1)
    graph.link_bodies(2, to, 3, from_, 2)
    graph.link_bodies(1, se3.from_position([0.5, 0.0, 0.0]),
                      4, se3.from_position([-0.5, 0.0, 0.0]), 3)
    return graph
