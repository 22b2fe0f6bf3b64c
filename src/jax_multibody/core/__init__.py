"""Core multibody data structures.

Bodies, joints and the graph builder, the immutable compiled MultiBody and
the mutable MultiBodyConfig state container.
"""

from .body import Body, SpatialInertia
from .config import MultiBodyConfig
from .dof import (
    dof_to_vector,
    param_to_vector,
    s_dof_to_vector,
    s_param_to_vector,
    s_vector_to_dof,
    s_vector_to_param,
    vector_to_dof,
    vector_to_param,
)
from .graph import Link, MultiBodyGraph
from .joint import Joint, JointType
from .multibody import MultiBody

__all__ = [
    "Body",
    "SpatialInertia",
    "Joint",
    "JointType",
    "Link",
    "MultiBodyGraph",
    "MultiBody",
    "MultiBodyConfig",
    "dof_to_vector",
    "vector_to_dof",
    "param_to_vector",
    "vector_to_param",
    "s_dof_to_vector",
    "s_vector_to_dof",
    "s_param_to_vector",
    "s_vector_to_param",
]
