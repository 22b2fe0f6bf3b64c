"""
JAX Multibody: kinematic trees, forward kinematics and center of mass.

A MultiBodyGraph is compiled once into an immutable MultiBody; the mutable
state lives in a MultiBodyConfig which the algorithms update in place.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from . import io
from .com import (
    CoMJacobianDummy,
    compute_com,
    compute_com_velocity,
    s_compute_com,
    s_compute_com_velocity,
)
from .core import (
    Body,
    Joint,
    JointType,
    MultiBody,
    MultiBodyConfig,
    MultiBodyGraph,
    SpatialInertia,
    dof_to_vector,
    param_to_vector,
    s_dof_to_vector,
    s_param_to_vector,
    s_vector_to_dof,
    s_vector_to_param,
    vector_to_dof,
    vector_to_param,
)
from .errors import ConstructionError, MultiBodyError, PreconditionViolation
from .integration import (
    euler_integration,
    euler_velocity_integration,
    s_euler_integration,
    s_euler_velocity_integration,
)
from .kinematics import (
    forward_kinematics,
    forward_velocity,
    s_forward_kinematics,
    s_forward_velocity,
)

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "io",
    "Body",
    "SpatialInertia",
    "Joint",
    "JointType",
    "MultiBodyGraph",
    "MultiBody",
    "MultiBodyConfig",
    "MultiBodyError",
    "ConstructionError",
    "PreconditionViolation",
    "forward_kinematics",
    "s_forward_kinematics",
    "forward_velocity",
    "s_forward_velocity",
    "compute_com",
    "s_compute_com",
    "compute_com_velocity",
    "s_compute_com_velocity",
    "CoMJacobianDummy",
    "euler_integration",
    "s_euler_integration",
    "euler_velocity_integration",
    "s_euler_velocity_integration",
    "dof_to_vector",
    "vector_to_dof",
    "param_to_vector",
    "vector_to_param",
    "s_dof_to_vector",
    "s_vector_to_dof",
    "s_param_to_vector",
    "s_vector_to_param",
]
